"""Multi-marketplace eBay aggregation.

Fans one search out over every (term, marketplace) pair, keeps whatever
succeeded, then dedupes, sorts and paginates the union:

    terms    = [query] or brands
    pairs    = marketplaces x terms          (marketplace-major order)
    results  = gather(pairs, settle all)     failures dropped, logged
    items    = dedupe(first occurrence) -> stable sort -> page slice
"""

import asyncio
import math
from typing import Optional

import aiohttp

from luxefinder.clients.ebay_client import EbayClient
from luxefinder.clients.http import session_scope
from luxefinder.domain.entities.listing import ListingItem
from luxefinder.domain.entities.marketplace import Marketplace, resolve_marketplaces
from luxefinder.domain.entities.search import SearchRequest, SearchResponse, SortKey
from luxefinder.domain.interfaces.search_backend import SearchBackend
from luxefinder.utils import get_logger, log_execution_time
from luxefinder.utils.config import EbayConfig
from luxefinder.utils.exceptions import InvalidRequestError

logger = get_logger(__name__)


def dedupe_items(items: list[ListingItem]) -> list[ListingItem]:
    """Drop repeated identifiers, keeping the first occurrence in order."""
    seen: set[str] = set()
    unique = []
    for item in items:
        if item.item_id in seen:
            continue
        seen.add(item.item_id)
        unique.append(item)
    return unique


def sort_items(items: list[ListingItem], sort_by: SortKey) -> list[ListingItem]:
    """Stable sort by price or case-insensitive title.

    Items without a numeric price go last for both price orders.
    """
    if sort_by is SortKey.TITLE:
        return sorted(items, key=lambda item: item.title.casefold())
    if sort_by is SortKey.PRICE_DESC:
        return sorted(
            items,
            key=lambda item: (item.price_value is None, -(item.price_value or 0.0)),
        )
    return sorted(
        items,
        key=lambda item: (item.price_value is None, item.price_value or 0.0),
    )


def count_pages(total: int, page_size: int) -> int:
    """Ceiling division; zero items means zero pages."""
    return math.ceil(total / page_size) if total else 0


def paginate(items: list[ListingItem], page: int, page_size: int) -> list[ListingItem]:
    """Return the slice ``[(page-1)*n, (page-1)*n + n)``; empty when out of range."""
    start = (page - 1) * page_size
    return items[start:start + page_size]


class LuxuryBagsAggregator(SearchBackend):
    """eBay search across brands and regional marketplaces."""

    name = "luxury-bags"

    def __init__(self, config: EbayConfig, session: Optional[aiohttp.ClientSession] = None):
        """Initialize aggregator.

        Args:
            config: eBay section of the application config
            session: Optional shared session (not closed by the aggregator)
        """
        self.config = config
        self._session = session

    def resolve_targets(self, request: SearchRequest) -> list[Marketplace]:
        """Marketplaces for the request; ``ALL`` means every supported one.

        Raises:
            InvalidRequestError: If the country code is not supported
        """
        country = request.country or self.config.default_country
        marketplaces = resolve_marketplaces(country)
        if not marketplaces:
            raise InvalidRequestError(f"Unsupported marketplace: {country}", field="country", value=country)
        return marketplaces

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Run the fan-out and return the requested page.

        Raises:
            ConfigurationMissingError: eBay credentials are not configured
            InvalidRequestError: Unsupported marketplace
            UpstreamUnavailableError: The token exchange failed
        """
        ordered = await self.collect(request)
        total = len(ordered)

        return SearchResponse(
            success=True,
            items=paginate(ordered, request.page, request.items_per_page),
            total_results=total,
            total_pages=count_pages(total, request.items_per_page),
            current_page=request.page,
            message="Search completed.",
        )

    async def collect(self, request: SearchRequest) -> list[ListingItem]:
        """Run the fan-out once and return every result, deduped and sorted.

        ``request.page`` and ``request.items_per_page`` are ignored.
        """
        client_id, client_secret = self.config.resolve_credentials()
        marketplaces = self.resolve_targets(request)
        terms = request.search_terms
        client = EbayClient(self.config, client_id, client_secret)

        logger.info(
            f"Searching {len(terms)} term(s) on {len(marketplaces)} marketplace(s), "
            f"sort {request.sort_by.value}"
        )

        with log_execution_time(logger, "eBay fan-out"):
            async with session_scope(self._session) as session:
                token = await client.get_app_token(session)
                items = await self.fan_out(client, session, token, terms, marketplaces, request)

        if request.min_price is not None or request.max_price is not None:
            items = [item for item in items if request.price_in_range(item.price_value)]

        return sort_items(dedupe_items(items), request.sort_by)

    async def fan_out(
        self,
        client: EbayClient,
        session: aiohttp.ClientSession,
        token: str,
        terms: list[str],
        marketplaces: list[Marketplace],
        request: SearchRequest,
    ) -> list[ListingItem]:
        """Query every (marketplace, term) pair concurrently.

        Individual failures are logged and dropped; results are concatenated
        in request order regardless of completion order.
        """
        pairs = [(marketplace, term) for marketplace in marketplaces for term in terms]
        results = await asyncio.gather(
            *(
                client.search(session, token, term, marketplace, request.min_price, request.max_price)
                for marketplace, term in pairs
            ),
            return_exceptions=True,
        )

        items: list[ListingItem] = []
        failures = 0
        for (marketplace, term), result in zip(pairs, results):
            if isinstance(result, Exception):
                failures += 1
                logger.warning(f"Dropped '{term}' on {marketplace.id}: {result}")
                continue
            if isinstance(result, BaseException):
                raise result
            items.extend(result)

        logger.info(f"Fan-out finished: {len(pairs) - failures}/{len(pairs)} requests succeeded, {len(items)} items")
        return items
