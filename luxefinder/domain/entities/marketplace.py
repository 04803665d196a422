"""
Supported eBay regional marketplaces and the default luxury brand list.
"""

from dataclasses import dataclass
from typing import Optional


GLOBAL_MARKETPLACE = "ALL"


@dataclass(frozen=True)
class Marketplace:
    """An eBay regional site."""

    id: str
    name: str
    currency: str


EBAY_MARKETPLACES: tuple[Marketplace, ...] = (
    Marketplace("EBAY_US", "United States", "USD"),
    Marketplace("EBAY_GB", "United Kingdom", "GBP"),
    Marketplace("EBAY_DE", "Germany", "EUR"),
    Marketplace("EBAY_AU", "Australia", "AUD"),
    Marketplace("EBAY_CA", "Canada", "CAD"),
    Marketplace("EBAY_FR", "France", "EUR"),
    Marketplace("EBAY_IT", "Italy", "EUR"),
    Marketplace("EBAY_ES", "Spain", "EUR"),
    Marketplace("EBAY_NL", "Netherlands", "EUR"),
    Marketplace("EBAY_BE", "Belgium", "EUR"),
    Marketplace("EBAY_AT", "Austria", "EUR"),
    Marketplace("EBAY_CH", "Switzerland", "CHF"),
    Marketplace("EBAY_IE", "Ireland", "EUR"),
)

DEFAULT_BRANDS: tuple[str, ...] = (
    "Dior bag",
    "Louis Vuitton bag",
    "Prada bag",
    "Gucci bag",
    "Christian Dior bag",
    "Michael Kors bag",
    "Coach bag",
)

# Vinted country codes offered by the UI
VINTED_COUNTRIES: tuple[str, ...] = ("pl", "fr", "de", "it", "es", "nl", "be", "at", "uk", "cz", "lt")


def get_marketplace(marketplace_id: str) -> Optional[Marketplace]:
    """Look up a marketplace by id (case-insensitive)."""
    wanted = marketplace_id.upper()
    for marketplace in EBAY_MARKETPLACES:
        if marketplace.id == wanted:
            return marketplace
    return None


def resolve_marketplaces(country: str) -> list[Marketplace]:
    """Expand a country code into the marketplaces to query.

    ``ALL`` yields every supported marketplace; an unknown id yields an
    empty list.
    """
    if country.upper() == GLOBAL_MARKETPLACE:
        return list(EBAY_MARKETPLACES)
    marketplace = get_marketplace(country)
    return [marketplace] if marketplace else []
