"""Client for the hosted Vinted scraping API.

The service exposes a catalogue endpoint (Vinted listings) and an ``/ebay``
mirror endpoint. Both return ``{success, data, count, pagination, error}``
with capitalised item keys (``Title``, ``Price``, ``Image``, ``Link``...).
"""

from typing import Any, Optional

import aiohttp

from luxefinder.domain.entities.listing import ListingItem, ListingSource, Price
from luxefinder.domain.entities.search import SearchRequest, SearchResponse
from luxefinder.domain.interfaces.search_backend import SearchBackend
from luxefinder.utils import get_logger, log_execution_time, parse_price
from luxefinder.utils.config import VintedApiConfig
from luxefinder.utils.exceptions import UpstreamUnavailableError
from luxefinder.utils.validators import detect_currency

from .http import build_url, request_json, session_scope

logger = get_logger(__name__)


def _link_suffix(link: Any) -> str:
    if not link:
        return ""
    return str(link).rstrip("/").split("/")[-1]


def _count(mapping: dict, key: str, default: int) -> int:
    """Integer field of an upstream body; missing, null or garbled values give ``default``."""
    value = mapping.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def normalize_item(
    raw: dict[str, Any],
    index: int,
    source: ListingSource,
    marketplace_id: str,
    placeholder_image: str,
    default_currency: str = "EUR",
) -> Optional[ListingItem]:
    """Convert one hosted-API item into a ListingItem.

    Args:
        raw: Item with ``Title``/``Price``/``Image``/``Link`` keys
        index: Position in the upstream page, part of the identifier
        source: Marketplace tag
        marketplace_id: e.g. VINTED_PL
        placeholder_image: Image used when the item has none
        default_currency: Currency when the price text has no marker

    Returns:
        ListingItem, or None when the item has no title
    """
    title = str(raw.get("Title") or "").strip()
    if not title:
        return None

    price = raw.get("Price")
    price_text = str(price) if price is not None else None
    link = raw.get("Link")
    prefix = source.value

    return ListingItem(
        item_id=f"{prefix}_{index}_{_link_suffix(link)}",
        title=title,
        price=Price(
            value=parse_price(price),
            currency=detect_currency(price_text, default_currency),
            display=price_text,
        ),
        condition=raw.get("Condition"),
        seller=raw.get("Seller") or ("Vinted Seller" if source is ListingSource.VINTED else None),
        image_url=raw.get("Image") or f"{placeholder_image}&sig={index}",
        item_web_url=str(link) if link else None,
        source=source,
        marketplace_id=marketplace_id,
    )


def _unwrap(body: Any, service: str, url: str) -> tuple[list, dict]:
    """Return (data, pagination) or raise on an explicit failure body."""
    if not isinstance(body, dict):
        raise UpstreamUnavailableError(f"{service} returned an unexpected body", url=url)
    if not body.get("success"):
        raise UpstreamUnavailableError(body.get("error") or f"{service} returned error", url=url)

    data = body.get("data") or []
    pagination = body.get("pagination") or {}
    if not isinstance(data, list) or not isinstance(pagination, dict):
        raise UpstreamUnavailableError(f"{service} returned malformed data", url=url)
    return data, pagination


class VintedApiClient(SearchBackend):
    """Vinted catalogue search through the hosted scraping API."""

    name = "vinted"
    service = "Vinted API"
    source = ListingSource.VINTED
    default_currency = "EUR"
    completed_message = "Vinted search completed successfully."

    def __init__(self, config: VintedApiConfig, session: Optional[aiohttp.ClientSession] = None):
        """Initialize client.

        Args:
            config: Hosted API section of the application config
            session: Optional shared session (not closed by the client)
        """
        self.config = config
        self._session = session

    @property
    def headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json", "User-Agent": self.config.user_agent}

    def build_url(self, request: SearchRequest) -> str:
        """Build the catalogue URL; a free-text query suppresses the brand filter."""
        country = request.country or self.config.default_country
        return build_url(
            self.config.base_url,
            {
                "search": request.query.strip() if request.has_query else None,
                "brand": None if request.has_query else ",".join(request.brands),
                "category": request.category,
                "min_price": request.min_price,
                "max_price": request.max_price,
                "country": country,
                "page": request.page,
                "items_per_page": request.items_per_page,
            },
        )

    def marketplace_id(self, request: SearchRequest) -> str:
        return f"VINTED_{(request.country or self.config.default_country).upper()}"

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Fetch one page and normalise it.

        The catalogue endpoint ignores price bounds, so they are applied
        here; totals are reported as the upstream counted them.

        Raises:
            UpstreamUnavailableError: Failed request, failure body, or data
                that cannot be normalised
            NetworkTimeoutError: The request timed out
        """
        url = self.build_url(request)
        logger.info(f"Fetching {self.service} data from: {url}")

        with log_execution_time(logger, f"{self.service} search"):
            async with session_scope(self._session, self.headers) as session:
                body = await request_json(
                    session, "GET", url,
                    service=self.service,
                    timeout=self.config.timeout,
                    headers=self.headers,
                )

        data, pagination = _unwrap(body, self.service, url)
        try:
            return self.build_response(request, body, data, pagination)
        except (TypeError, ValueError, AttributeError) as e:
            raise UpstreamUnavailableError(
                f"{self.service} returned malformed data: {e}", url=url
            ) from e

    def build_response(
        self, request: SearchRequest, body: dict, data: list, pagination: dict
    ) -> SearchResponse:
        marketplace_id = self.marketplace_id(request)
        items = []
        for index, raw in enumerate(data):
            if not isinstance(raw, dict):
                logger.debug(f"Skipping non-object entry {index} from {self.service}")
                continue
            item = normalize_item(
                raw, index, self.source, marketplace_id,
                self.config.placeholder_image, default_currency=self.default_currency,
            )
            if item is not None:
                items.append(item)

        filtered = [item for item in items if request.price_in_range(item.price_value)]
        if len(filtered) != len(items):
            logger.debug(f"Price bounds removed {len(items) - len(filtered)} items")

        return SearchResponse(
            success=True,
            items=filtered,
            total_results=_count(pagination, "total_items", _count(body, "count", len(filtered))),
            total_pages=_count(pagination, "total_pages", 1 if filtered else 0),
            current_page=max(1, _count(pagination, "current_page", request.page)),
            message=self.completed_message,
        )


class VintedEbayMirrorClient(VintedApiClient):
    """eBay listings served by the hosted API's ``/ebay`` mirror endpoint."""

    name = "ebay"
    service = "Vinted eBay API"
    source = ListingSource.EBAY
    default_currency = "USD"
    completed_message = "eBay search completed successfully."

    def build_url(self, request: SearchRequest) -> str:
        """Build the mirror URL; without a query the configured default term is searched."""
        search = request.query.strip() if request.has_query else self.config.mirror_default_search
        return build_url(
            self.config.base_url + self.config.ebay_path,
            {
                "search": search,
                "page": request.page,
                "items_per_page": request.items_per_page,
                "min_price": request.min_price,
                "max_price": request.max_price,
            },
        )

    def marketplace_id(self, request: SearchRequest) -> str:
        return "EBAY"
