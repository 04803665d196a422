"""LuxeFinder Streamlit UI - Main Application.

Unified search over eBay and Vinted listings with pagination and Excel
export of the page currently shown.
"""

import streamlit as st

from luxefinder.ui.api_client import BackendClient, load_results, load_vinted_page
from luxefinder.ui.components import (
    render_item_card,
    render_pagination,
    render_result_controls,
    render_search_form,
)
from luxefinder.ui.export import export_filename, workbook_bytes
from luxefinder.ui.state_manager import (
    change_page,
    change_page_size,
    change_sort,
    consume_fetch_request,
    initialize_session_state,
    store_results,
    update_form,
)
from luxefinder.ui.styles import get_custom_css
from luxefinder.utils import get_config, get_logger, log_exception
from luxefinder.utils.exceptions import ExportError

logger = get_logger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
GRID_COLUMNS = 4


@st.cache_resource
def initialize_client():
    """Load config and create the back end client once per server process.

    Returns:
        Tuple of (config, client)
    """
    try:
        config = get_config()
        client = BackendClient(config.ui.api_base_url, timeout=config.ui.request_timeout)
        return config, client
    except Exception as e:
        log_exception(logger, "initialize UI", e)
        st.error(f"Failed to load configuration: {e}")
        st.stop()


def render_export(client: BackendClient) -> None:
    """Download buttons for the displayed page, alone or with Vinted items."""
    results = st.session_state.results
    form = st.session_state.form
    items = [item for item in results.items if not item.is_placeholder]
    if not items:
        return

    col_page, col_merged = st.columns(2)
    with col_page:
        try:
            st.download_button(
                "📥 Export to Excel",
                data=workbook_bytes(items),
                file_name=export_filename(),
                mime=XLSX_MIME,
                use_container_width=True,
            )
        except ExportError as e:
            st.error(e.message)

    if form.source == "luxury-bags":
        with col_merged:
            if st.button("Include Vinted items", use_container_width=True):
                with st.spinner("Fetching Vinted items..."):
                    vinted = load_vinted_page(client, form)
                try:
                    st.session_state.merged_export = workbook_bytes(items, extra=vinted)
                except ExportError as e:
                    st.error(e.message)
            if st.session_state.get("merged_export"):
                st.download_button(
                    "📥 Export eBay + Vinted",
                    data=st.session_state.merged_export,
                    file_name=export_filename(prefix="luxury-bags-export"),
                    mime=XLSX_MIME,
                    use_container_width=True,
                )


def render_results() -> None:
    results = st.session_state.results

    if results.error:
        st.error(f"⚠️ {results.error}")
        return

    if results.demo:
        st.info("The search service did not answer in time; showing demonstration data.")
    if results.degraded:
        reason = f" ({results.degraded_reason})" if results.degraded_reason else ""
        st.warning(f"Live results are unavailable right now{reason}. Use the link below to search directly.")

    if not results.items:
        st.markdown(
            """
            <div class="empty-state">
                <div class="empty-state-icon">👜</div>
                <h3>No listings found</h3>
                <p>Try other brands, a wider price range or another marketplace.</p>
            </div>
            """,
            unsafe_allow_html=True
        )
        return

    st.markdown(f"### {results.total_results:,} listings")

    for i in range(0, len(results.items), GRID_COLUMNS):
        cols = st.columns(GRID_COLUMNS)
        for j, col in enumerate(cols):
            if i + j < len(results.items):
                with col:
                    render_item_card(results.items[i + j])


def main():
    """Main application entry point."""

    st.set_page_config(
        page_title="LuxeFinder - Luxury Bag Search",
        page_icon="👜",
        layout="wide",
        initial_sidebar_state="expanded"
    )

    st.markdown(get_custom_css(), unsafe_allow_html=True)

    config, client = initialize_client()
    initialize_session_state(config.ebay.default_country, config.ui.items_per_page)

    # ==================== HEADER ====================
    st.title("👜 LuxeFinder")
    st.markdown("**Secondhand luxury bags** from eBay and Vinted in one place")

    # ==================== SIDEBAR ====================
    submitted = render_search_form(st.session_state.form)
    if submitted is not None:
        update_form(submitted, force=True)
        st.session_state.merged_export = None

    # ==================== MAIN PANEL ====================
    if st.session_state.search_performed or st.session_state.needs_fetch:
        form = st.session_state.form
        sort_by, page_size = render_result_controls(
            form.sort_by, form.items_per_page, config.ui.page_size_options
        )
        if sort_by != form.sort_by:
            update_form(change_sort(form, sort_by))
        elif page_size != form.items_per_page:
            update_form(change_page_size(form, page_size))

    if consume_fetch_request():
        form = st.session_state.form
        with st.spinner("Searching listings..."):
            results = load_results(client, form, demo_fallback=config.ui.demo_fallback)
        store_results(results)
        st.session_state.merged_export = None
        logger.info(f"Loaded page {form.page} from {form.source}: {len(results.items)} items")

    if not st.session_state.search_performed:
        st.markdown(
            """
            <div class="empty-state">
                <div class="empty-state-icon">🔍</div>
                <h2>No Search Yet</h2>
                <p>Pick brands or enter a search term in the sidebar, then press "Search".</p>
            </div>
            """,
            unsafe_allow_html=True
        )
        return

    render_export(client)
    render_results()

    results = st.session_state.results
    if not results.error:
        requested = render_pagination(st.session_state.form.page, results.total_pages)
        if requested is not None:
            update_form(change_page(st.session_state.form, requested))
            st.rerun()

    # ==================== FOOTER ====================
    st.markdown("---")
    st.markdown(
        """
        <div style="text-align: center; color: #666; padding: 1rem;">
            <small>LuxeFinder | eBay Browse API + Vinted | Built with Streamlit</small>
        </div>
        """,
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
