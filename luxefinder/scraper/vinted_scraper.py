"""Playwright-based fallback scraper for the public Vinted catalogue.

Each request runs a small state machine:

    LAUNCH -> NAVIGATE -> EXTRACT_PRIMARY -> (EXTRACT_ALTERNATE) -> SUCCESS
                                  |
                                  +-> RETRY (transient) -> LAUNCH ...
                                  +-> FALLBACK_PLACEHOLDER (budget exhausted)

A fresh browser is launched for every attempt and always closed again.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from pydantic import ValidationError

from luxefinder.domain.entities.listing import ListingItem, ListingSource, Price
from luxefinder.domain.entities.search import price_within
from luxefinder.utils import get_logger, log_exception, log_execution_time
from luxefinder.utils.config import ScraperConfig
from luxefinder.utils.exceptions import (
    BrowserUnavailableError,
    NavigationError,
    ScraperError,
    ScraperTransientError,
)

from .parsers import VintedCatalogParser
from .utils import build_catalog_url

logger = get_logger(__name__)

PLACEHOLDER_TITLE = "Vinted Search Unavailable"
FALLBACK_REASON = "Browser session issues"


class ScrapeState(str, Enum):
    """Steps of a scrape; ``ScrapeOutcome.trail`` lists the ones visited."""

    LAUNCH = "launch"
    NAVIGATE = "navigate"
    EXTRACT_PRIMARY = "extract_primary"
    EXTRACT_ALTERNATE = "extract_alternate"
    RETRY = "retry"
    SUCCESS = "success"
    FALLBACK_PLACEHOLDER = "fallback_placeholder"


@dataclass
class ScrapeOutcome:
    """Result of one scrape request.

    ``degraded`` is set when ``items`` holds the placeholder instead of real
    listings; ``reason`` then explains why. ``trail`` records every step in
    order, and ``state`` is the last of them.
    """

    items: list[ListingItem] = field(default_factory=list)
    degraded: bool = False
    reason: Optional[str] = None
    attempts: int = 0
    trail: list[ScrapeState] = field(default_factory=list)

    @property
    def state(self) -> ScrapeState:
        return self.trail[-1] if self.trail else ScrapeState.LAUNCH


def placeholder_item(catalog_url: str, image_url: str) -> ListingItem:
    """Single stand-in item pointing the user at the public catalogue."""
    return ListingItem(
        item_id="vinted_placeholder_0",
        title=PLACEHOLDER_TITLE,
        price=Price(value=None, currency="EUR", display="N/A"),
        condition="Unknown",
        seller="Vinted",
        image_url=image_url,
        item_web_url=catalog_url,
        source=ListingSource.VINTED,
        marketplace_id="VINTED",
        is_placeholder=True,
    )


def classify_playwright_error(error: PlaywrightError, url: str) -> ScraperError:
    """Map a Playwright error onto the scraper error taxonomy."""
    message = str(error)
    lowered = message.lower()

    if isinstance(error, PlaywrightTimeoutError) or "timeout" in lowered or "closed" in lowered:
        return ScraperTransientError(message, url=url)
    if "executable doesn't exist" in lowered:
        return BrowserUnavailableError(message)
    if "net::err_name_not_resolved" in lowered:
        return NavigationError(message, url=url, context={"unreachable_host": True})
    return ScraperError(message, code="SCRAPER_ERROR", context={"url": url})


class VintedFallbackScraper:
    """Best-effort catalogue scraper with a bounded retry budget."""

    def __init__(
        self,
        config: ScraperConfig,
        playwright_factory: Callable = async_playwright,
        parser: Optional[VintedCatalogParser] = None,
    ):
        """Initialize scraper.

        Args:
            config: Scraper section of the application config
            playwright_factory: Returns an async context manager yielding a
                Playwright instance
            parser: Catalogue parser (a default one is created when omitted)
        """
        self.config = config
        self._playwright_factory = playwright_factory
        self.parser = parser or VintedCatalogParser()

    def build_search_url(
        self,
        search_term: str,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> str:
        return build_catalog_url(self.config.base_url, search_term, min_price, max_price)

    async def scrape(
        self,
        search_term: str,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> ScrapeOutcome:
        """Scrape one catalogue page.

        Transient failures are retried up to ``max_retries`` times with a
        fixed backoff; when the budget runs out, or no browser is available,
        a placeholder outcome is returned. Scraped items outside the
        inclusive price bounds are dropped, since the catalogue does not
        always honour the bounds in the URL.

        Raises:
            NavigationError: The host could not be resolved
            ScraperError: Any other non-transient failure
        """
        url = self.build_search_url(search_term, min_price, max_price)
        max_attempts = self.config.max_retries + 1
        attempt = 0
        trail: list[ScrapeState] = []

        while True:
            attempt += 1
            try:
                with log_execution_time(logger, f"Vinted scrape attempt {attempt}"):
                    scraped = await self._scrape_once(url, trail)
                items = [item for item in scraped if price_within(item.price_value, min_price, max_price)]
                logger.info(
                    f"Scraped {len(scraped)} items from {url} (attempt {attempt}/{max_attempts}), "
                    f"{len(items)} within price bounds"
                )
                trail.append(ScrapeState.SUCCESS)
                return ScrapeOutcome(items=items, attempts=attempt, trail=trail)

            except ScraperTransientError as e:
                if attempt >= max_attempts:
                    log_exception(logger, f"scrape {url}", e)
                    return self._degraded(url, attempt, trail)
                trail.append(ScrapeState.RETRY)
                logger.warning(
                    f"Transient scraper failure (attempt {attempt}/{max_attempts}): {e.message}; "
                    f"retrying in {self.config.retry_backoff}s"
                )
                await asyncio.sleep(self.config.retry_backoff)

            except BrowserUnavailableError as e:
                log_exception(logger, f"launch browser for {url}", e)
                return self._degraded(url, attempt, trail)

    def _degraded(self, url: str, attempts: int, trail: list[ScrapeState]) -> ScrapeOutcome:
        logger.warning(f"Returning placeholder for {url} after {attempts} attempt(s)")
        trail.append(ScrapeState.FALLBACK_PLACEHOLDER)
        return ScrapeOutcome(
            items=[placeholder_item(url, self.config.placeholder_image)],
            degraded=True,
            reason=FALLBACK_REASON,
            attempts=attempts,
            trail=trail,
        )

    async def _scrape_once(self, url: str, trail: list[ScrapeState]) -> list[ListingItem]:
        """Run LAUNCH -> NAVIGATE -> EXTRACT once, closing everything afterwards.

        Each step is appended to ``trail`` as it starts.
        """
        browser = context = page = None
        try:
            async with self._playwright_factory() as playwright:
                try:
                    trail.append(ScrapeState.LAUNCH)
                    browser = await playwright.chromium.launch(
                        headless=self.config.headless,
                        args=self.config.launch_args,
                    )
                    width, height = self.config.viewport
                    context = await browser.new_context(
                        viewport={'width': width, 'height': height},
                        user_agent=self.config.user_agent,
                    )
                    page = await context.new_page()
                    page.set_default_timeout(self.config.default_timeout * 1000)

                    trail.append(ScrapeState.NAVIGATE)
                    logger.debug(f"Navigating to {url}")
                    await page.goto(
                        url,
                        wait_until='domcontentloaded',
                        timeout=self.config.navigation_timeout * 1000,
                    )
                    await page.wait_for_timeout(self.config.settle_delay * 1000)

                    if page.is_closed():
                        raise ScraperTransientError("Page closed during navigation", url=url)

                    html = await page.content()
                finally:
                    await self._close_all(page, context, browser)

        except PlaywrightError as e:
            raise classify_playwright_error(e, url) from e

        trail.append(ScrapeState.EXTRACT_PRIMARY)
        cards, used_alternate = self.parser.parse_with_stage(html, self.config.base_url)
        if used_alternate:
            trail.append(ScrapeState.EXTRACT_ALTERNATE)
        items = []
        for index, card in enumerate(cards):
            try:
                items.append(card.to_listing(index))
            except ValidationError as e:
                logger.debug(f"Skipping card {index} that does not make a listing: {e}")
        return items

    async def _close_all(self, page, context, browser) -> None:
        for name, resource in (("page", page), ("context", context), ("browser", browser)):
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.warning(f"Failed to close {name}: {e}")
