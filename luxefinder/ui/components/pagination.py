"""Pagination and result-ordering controls."""

from typing import Optional

import streamlit as st

from luxefinder.domain.entities.search import SortKey

SORT_LABELS = {
    SortKey.PRICE_ASC.value: "Price (Low to High)",
    SortKey.PRICE_DESC.value: "Price (High to Low)",
    SortKey.TITLE.value: "Title (A-Z)",
}


def render_result_controls(
    sort_by: str, items_per_page: int, page_size_options: list[int]
) -> tuple[str, int]:
    """Sort and page-size selectors.

    Returns:
        Tuple of (sort key value, page size)
    """
    col_sort, col_size = st.columns(2)
    sort_options = list(SORT_LABELS)
    size_options = sorted(set(page_size_options) | {items_per_page})

    with col_sort:
        selected_sort = st.selectbox(
            "Sort by",
            options=sort_options,
            index=sort_options.index(sort_by) if sort_by in sort_options else 0,
            format_func=lambda x: SORT_LABELS[x],
            key="sort_select",
        )
    with col_size:
        selected_size = st.selectbox(
            "Items per page",
            options=size_options,
            index=size_options.index(items_per_page),
            key="page_size_select",
        )
    return selected_sort, selected_size


def render_pagination(current_page: int, total_pages: int) -> Optional[int]:
    """Previous/next buttons around a page indicator.

    Returns:
        The requested page, or None if no button was pressed
    """
    if total_pages <= 1:
        return None

    col_prev, col_info, col_next = st.columns([1, 2, 1])
    with col_prev:
        if st.button("← Previous", disabled=current_page <= 1, use_container_width=True, key="page_prev"):
            return current_page - 1
    with col_info:
        st.markdown(
            f'<div style="text-align: center; padding-top: 0.5rem;">Page {current_page} of {total_pages}</div>',
            unsafe_allow_html=True
        )
    with col_next:
        if st.button("Next →", disabled=current_page >= total_pages, use_container_width=True, key="page_next"):
            return current_page + 1
    return None
