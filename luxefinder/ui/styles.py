"""Custom CSS styling for the LuxeFinder UI."""


def get_custom_css() -> str:
    """Generate custom CSS for the LuxeFinder UI.

    Returns:
        CSS string to inject via st.markdown
    """
    return """
    <style>
    /* Main app styling */
    .main {
        padding: 1rem;
    }

    /* Price line on item cards */
    .item-price {
        font-size: 1.25rem;
        font-weight: 700;
        color: #1B1B1B;
        margin: 0.25rem 0;
    }

    /* Marketplace badge */
    .source-badge {
        display: inline-block;
        padding: 0.15rem 0.6rem;
        border-radius: 12px;
        color: white;
        font-size: 0.75rem;
        font-weight: 600;
        margin-bottom: 0.25rem;
    }

    /* Missing image box */
    .no-image {
        background-color: #F0F0F0;
        padding: 4rem 2rem;
        text-align: center;
        border-radius: 8px;
        color: #999;
    }

    /* Empty state */
    .empty-state {
        text-align: center;
        padding: 3rem;
        color: #666;
    }

    .empty-state-icon {
        font-size: 4rem;
        margin-bottom: 1rem;
    }

    /* Link styling */
    a {
        color: #8D6E63;
        text-decoration: none;
        font-weight: 500;
    }

    a:hover {
        text-decoration: underline;
    }

    /* Loading spinner custom color */
    .stSpinner > div {
        border-top-color: #8D6E63 !important;
    }
    </style>
    """
