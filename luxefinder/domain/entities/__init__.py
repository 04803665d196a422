# Domain Entities Package
"""
Core search entities: listings, requests, responses and marketplaces.
"""

from .listing import ListingItem, ListingSource, Price
from .marketplace import (
    DEFAULT_BRANDS,
    EBAY_MARKETPLACES,
    GLOBAL_MARKETPLACE,
    Marketplace,
    resolve_marketplaces,
)
from .search import SearchRequest, SearchResponse, SortKey

__all__ = [
    "ListingItem",
    "ListingSource",
    "Price",
    "Marketplace",
    "EBAY_MARKETPLACES",
    "DEFAULT_BRANDS",
    "GLOBAL_MARKETPLACE",
    "resolve_marketplaces",
    "SearchRequest",
    "SearchResponse",
    "SortKey",
]
