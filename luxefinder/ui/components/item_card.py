"""Item card component for displaying listings."""

import streamlit as st

from luxefinder.domain.entities.listing import ListingItem, ListingSource

SOURCE_BADGES = {
    ListingSource.EBAY: ("eBay", "#0064D2"),
    ListingSource.VINTED: ("Vinted", "#09B1BA"),
}


def format_price(item: ListingItem) -> str:
    """Price for display; placeholders keep their text (e.g. "N/A")."""
    value = item.price_value
    if value is None:
        return item.price.display or "N/A"
    return f"{value:,.2f} {item.price.currency}"


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3].rstrip() + "..."


def render_item_card(item: ListingItem) -> None:
    """Render one listing with image, price, condition, seller and link.

    Args:
        item: Listing to show
    """
    label, color = SOURCE_BADGES.get(item.source, (item.source.value, "#666"))

    with st.container():
        if item.image_url:
            st.image(item.image_url, use_container_width=True)
        else:
            st.markdown(
                '<div class="no-image">'
                '<div style="font-size: 3rem; margin-bottom: 0.5rem;">👜</div>'
                '<div>No Image Available</div></div>',
                unsafe_allow_html=True
            )

        st.markdown(
            f'<span class="source-badge" style="background-color: {color};">{label}</span>',
            unsafe_allow_html=True
        )
        st.markdown(f"**{truncate_text(item.title, 70)}**")
        st.markdown(f'<div class="item-price">{format_price(item)}</div>', unsafe_allow_html=True)

        details = [f"Condition: {item.condition}"]
        if item.seller:
            details.append(f"Seller: {item.seller}")
        if item.marketplace_id:
            details.append(item.marketplace_id)
        st.caption(" | ".join(details))

        if item.item_web_url:
            link_label = "Open catalogue search" if item.is_placeholder else f"View on {label}"
            st.link_button(link_label, item.item_web_url, use_container_width=True)
