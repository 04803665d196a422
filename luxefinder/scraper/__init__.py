"""Fallback scraping of the public Vinted catalogue.

- VintedFallbackScraper: Playwright scraper with retry budget and placeholder degradation
- VintedCatalogParser: Selector-based and structured-data card extraction
- ScrapedCard: One catalogue card as read from the page

Usage:
    from luxefinder.scraper import VintedFallbackScraper

    scraper = VintedFallbackScraper(get_config().scraper)
    outcome = await scraper.scrape("dior bag", max_price=500)
"""

from .models import ScrapedCard
from .parsers import VintedCatalogParser
from .vinted_scraper import (
    FALLBACK_REASON,
    ScrapeOutcome,
    ScrapeState,
    VintedFallbackScraper,
    classify_playwright_error,
    placeholder_item,
)

__all__ = [
    "FALLBACK_REASON",
    "ScrapedCard",
    "ScrapeOutcome",
    "ScrapeState",
    "VintedCatalogParser",
    "VintedFallbackScraper",
    "classify_playwright_error",
    "placeholder_item",
]
