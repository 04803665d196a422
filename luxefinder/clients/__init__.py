"""Marketplace clients for the eBay Browse API and the hosted Vinted API.

Usage:
    from luxefinder.clients import VintedApiClient

    client = VintedApiClient(config.vinted_api)
    response = await client.search(SearchRequest(query="dior bag"))
"""

from .ebay_client import EbayClient, parse_item_summary
from .vinted_api_client import VintedApiClient, VintedEbayMirrorClient, normalize_item

__all__ = [
    "EbayClient",
    "parse_item_summary",
    "VintedApiClient",
    "VintedEbayMirrorClient",
    "normalize_item",
]
