"""Session state management for the LuxeFinder Streamlit UI.

This module keeps the search form and the last fetched page across Streamlit
reruns. Form transitions are plain functions over ``SearchFormState`` so the
fetch triggers can be reasoned about without a running app.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

import streamlit as st

from luxefinder.domain.entities.listing import ListingItem
from luxefinder.domain.entities.search import SortKey

# Source name -> back end path
SOURCES = {
    "luxury-bags": "/api/luxury-bags",
    "vinted": "/vinted",
    "ebay": "/ebay",
    "vinted-live": "/api/vinted",
}

SOURCE_LABELS = {
    "luxury-bags": "eBay (all brands, multi-marketplace)",
    "vinted": "Vinted",
    "ebay": "eBay (hosted API)",
    "vinted-live": "Vinted (live scrape)",
}


@dataclass
class SearchFormState:
    """Everything that determines which page of results is shown."""

    query: str = ""
    brands: list[str] = field(default_factory=list)
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    country: str = "EBAY_AU"
    vinted_country: str = "pl"
    sort_by: str = SortKey.PRICE_ASC.value
    items_per_page: int = 24
    page: int = 1
    source: str = "luxury-bags"

    @property
    def path(self) -> str:
        return SOURCES[self.source]

    def to_params(self) -> dict[str, Any]:
        """Query parameters for the back end; empty values are left out."""
        params: dict[str, Any] = {
            "page": self.page,
            "items_per_page": self.items_per_page,
            "sortBy": self.sort_by,
        }
        query = self.query.strip()
        if query:
            params["search_term" if self.source == "vinted-live" else "search"] = query
        elif self.brands:
            params["brands"] = ",".join(self.brands)
        if self.min_price is not None:
            params["min_price"] = self.min_price
        if self.max_price is not None:
            params["max_price"] = self.max_price
        if self.source == "luxury-bags" and self.country:
            params["country"] = self.country
        elif self.source == "vinted" and self.vinted_country:
            params["country"] = self.vinted_country
        return params


@dataclass
class ResultState:
    """Last fetched page."""

    items: list[ListingItem] = field(default_factory=list)
    total_results: int = 0
    total_pages: int = 0
    current_page: int = 1
    error: Optional[str] = None
    degraded: bool = False
    degraded_reason: Optional[str] = None
    demo: bool = False


def submit_search(state: SearchFormState, **changes: Any) -> SearchFormState:
    """New search from the form; always starts at page 1."""
    return replace(state, **changes, page=1)


def change_page(state: SearchFormState, page: int) -> SearchFormState:
    return replace(state, page=max(1, page))


def change_sort(state: SearchFormState, sort_by: str) -> SearchFormState:
    """Changing the order resets to page 1."""
    return replace(state, sort_by=SortKey.parse(sort_by).value, page=1)


def change_page_size(state: SearchFormState, items_per_page: int) -> SearchFormState:
    """Changing the page size resets to page 1."""
    return replace(state, items_per_page=items_per_page, page=1)


def initialize_session_state(default_country: str = "EBAY_AU", items_per_page: int = 24) -> None:
    """Initialize all session state variables with defaults."""

    if "form" not in st.session_state:
        st.session_state.form = SearchFormState(country=default_country, items_per_page=items_per_page)

    if "results" not in st.session_state:
        st.session_state.results = ResultState()

    if "search_performed" not in st.session_state:
        st.session_state.search_performed = False

    if "needs_fetch" not in st.session_state:
        st.session_state.needs_fetch = False


def update_form(new_state: SearchFormState, force: bool = False) -> bool:
    """Store a new form state; schedules a fetch when it changed or ``force`` is set.

    Returns:
        True if a fetch was scheduled
    """
    if not force and new_state == st.session_state.form and st.session_state.search_performed:
        return False
    st.session_state.form = new_state
    st.session_state.needs_fetch = True
    return True


def store_results(results: ResultState) -> None:
    """Cache the fetched page and clear the pending-fetch flag."""
    st.session_state.results = results
    st.session_state.search_performed = True
    st.session_state.needs_fetch = False


def consume_fetch_request() -> bool:
    """True once per scheduled fetch."""
    if st.session_state.needs_fetch:
        st.session_state.needs_fetch = False
        return True
    return False
