"""Helper utilities for scraping operations."""

from typing import Optional
from urllib.parse import quote, urlparse


def _format_bound(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def build_catalog_url(
    base_url: str,
    search_term: str,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
) -> str:
    """Build the public catalogue search URL.

    Args:
        base_url: Catalogue host, e.g. https://www.vinted.com
        search_term: Free-text query
        min_price: Optional lower bound (``price_from``)
        max_price: Optional upper bound (``price_to``)

    Returns:
        Absolute catalogue URL
    """
    url = f"{base_url.rstrip('/')}/catalog?search_text={quote(search_term, safe='')}"
    if min_price is not None:
        url += f"&price_from={_format_bound(min_price)}"
    if max_price is not None:
        url += f"&price_to={_format_bound(max_price)}"
    return url


def extract_item_id_from_url(url: str) -> str:
    """Extract Vinted item ID from URL.

    Handles various URL formats:
    - https://www.vinted.com/items/1234567890
    - https://www.vinted.com/items/1234567890-product-title

    Args:
        url: Vinted product URL

    Returns:
        Item ID as string

    Raises:
        ValueError: If item ID cannot be extracted
    """
    path_parts = urlparse(url).path.strip('/').split('/')

    if 'items' in path_parts:
        items_index = path_parts.index('items')
        if items_index + 1 < len(path_parts):
            # ID-title segment
            item_id = path_parts[items_index + 1].split('-')[0]
            if item_id.isdigit():
                return item_id

    raise ValueError(f"Could not extract item ID from URL: {url}")
