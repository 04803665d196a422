"""Search form sidebar component."""

from typing import Optional

import streamlit as st

from luxefinder.domain.entities.marketplace import (
    DEFAULT_BRANDS,
    EBAY_MARKETPLACES,
    GLOBAL_MARKETPLACE,
    VINTED_COUNTRIES,
)
from luxefinder.ui.state_manager import SOURCE_LABELS, SearchFormState, submit_search


def _marketplace_label(code: str) -> str:
    if code == GLOBAL_MARKETPLACE:
        return "All marketplaces"
    for marketplace in EBAY_MARKETPLACES:
        if marketplace.id == code:
            return f"{marketplace.name} ({marketplace.currency})"
    return code


def render_search_form(state: SearchFormState) -> Optional[SearchFormState]:
    """Render the search form in the sidebar.

    Args:
        state: Current form state, used for the initial widget values

    Returns:
        New form state (page reset to 1) when the form was submitted, else None
    """
    st.sidebar.markdown("### 🔍 Search")

    sources = list(SOURCE_LABELS)
    source = st.sidebar.selectbox(
        "Source",
        options=sources,
        index=sources.index(state.source),
        format_func=lambda x: SOURCE_LABELS[x],
        help="Where to search",
    )

    with st.sidebar.form("search_form"):
        query = st.text_input(
            "Search",
            value=state.query,
            placeholder="e.g. dior saddle bag",
            help="A search term replaces the brand selection",
        )

        brands = st.multiselect(
            "Brands",
            options=list(DEFAULT_BRANDS),
            default=[b for b in state.brands if b in DEFAULT_BRANDS],
            help="Leave empty to search every brand",
        )

        st.markdown("#### Price Range")
        col_min, col_max = st.columns(2)
        with col_min:
            min_price = st.number_input("Min", min_value=0.0, value=state.min_price, step=10.0)
        with col_max:
            max_price = st.number_input("Max", min_value=0.0, value=state.max_price, step=10.0)

        country = state.country
        vinted_country = state.vinted_country
        if source == "luxury-bags":
            codes = [GLOBAL_MARKETPLACE] + [m.id for m in EBAY_MARKETPLACES]
            country = st.selectbox(
                "Marketplace",
                options=codes,
                index=codes.index(state.country) if state.country in codes else 0,
                format_func=_marketplace_label,
            )
        elif source == "vinted":
            countries = list(VINTED_COUNTRIES)
            vinted_country = st.selectbox(
                "Country",
                options=countries,
                index=countries.index(state.vinted_country) if state.vinted_country in countries else 0,
                format_func=str.upper,
            )

        submitted = st.form_submit_button("Search", use_container_width=True, type="primary")

    if not submitted:
        return None

    if min_price is not None and max_price is not None and min_price > max_price:
        st.sidebar.error("Min price must not exceed max price")
        return None
    if source == "vinted-live" and not query.strip():
        st.sidebar.error("Enter a search term for the live Vinted search")
        return None

    return submit_search(
        state,
        query=query,
        brands=brands,
        min_price=min_price,
        max_price=max_price,
        country=country,
        vinted_country=vinted_country,
        source=source,
    )
