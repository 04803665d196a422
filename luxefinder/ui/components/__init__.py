"""UI components for the LuxeFinder Streamlit app."""

from .item_card import format_price, render_item_card
from .pagination import render_pagination, render_result_controls
from .search_form import render_search_form

__all__ = [
    "format_price",
    "render_item_card",
    "render_pagination",
    "render_result_controls",
    "render_search_form",
]
