"""eBay Browse API client.

Exchanges the application credentials for an app token (client-credentials
flow) and runs item summary searches against one regional marketplace.
"""

import base64
from typing import Any, Optional

import aiohttp

from luxefinder.domain.entities.listing import ListingItem, ListingSource, Price
from luxefinder.domain.entities.marketplace import Marketplace
from luxefinder.utils import get_logger, parse_price
from luxefinder.utils.config import EbayConfig
from luxefinder.utils.exceptions import UpstreamUnavailableError

from .http import _format_param, build_url, request_json

logger = get_logger(__name__)


class EbayClient:
    """Thin request builder for the eBay OAuth and Browse endpoints."""

    def __init__(self, config: EbayConfig, client_id: str, client_secret: str):
        """Initialize eBay client.

        Args:
            config: eBay section of the application config
            client_id: eBay application id
            client_secret: eBay certificate id
        """
        self.config = config
        self._basic_auth = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()

    async def get_app_token(self, session: aiohttp.ClientSession) -> str:
        """Obtain an application access token.

        Args:
            session: aiohttp session

        Returns:
            Bearer token string

        Raises:
            UpstreamUnavailableError: If eBay refuses or returns no token
        """
        body = await request_json(
            session,
            "POST",
            self.config.auth_url,
            service="eBay OAuth",
            timeout=self.config.timeout,
            headers={
                "Authorization": f"Basic {self._basic_auth}",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data={"grant_type": "client_credentials", "scope": self.config.scope},
        )

        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise UpstreamUnavailableError("eBay OAuth returned no access token", url=self.config.auth_url)
        return token

    def build_search_url(
        self,
        query: str,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> str:
        """Build the item summary search URL.

        The price filter is always sent; its upper bound is left open when
        ``max_price`` is not given.
        """
        low = _format_param(min_price if min_price is not None else 0.0)
        high = _format_param(max_price) if max_price is not None else ""
        return build_url(
            self.config.browse_url,
            {
                "q": query,
                "limit": self.config.result_limit,
                "filter": f"price:[{low}..{high}]",
            },
        )

    async def search(
        self,
        session: aiohttp.ClientSession,
        token: str,
        query: str,
        marketplace: Marketplace,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> list[ListingItem]:
        """Search one marketplace for one term.

        Args:
            session: aiohttp session
            token: App token from get_app_token
            query: Search term
            marketplace: Regional marketplace to query
            min_price: Inclusive lower bound
            max_price: Inclusive upper bound

        Returns:
            Normalised listings (possibly empty)
        """
        url = self.build_search_url(query, min_price, max_price)
        body = await request_json(
            session,
            "GET",
            url,
            service=f"eBay Browse ({marketplace.id})",
            timeout=self.config.timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
                "X-EBAY-C-MARKETPLACE-ID": marketplace.id,
            },
        )

        summaries = body.get("itemSummaries") if isinstance(body, dict) else None
        if not summaries:
            logger.debug(f"No results for '{query}' on {marketplace.id}")
            return []

        items = []
        for summary in summaries:
            try:
                item = parse_item_summary(summary, marketplace)
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning(f"Skipping malformed item summary on {marketplace.id}: {e}")
                continue
            if item is not None:
                items.append(item)

        logger.debug(f"'{query}' on {marketplace.id}: {len(items)} items")
        return items


def parse_item_summary(summary: dict[str, Any], marketplace: Marketplace) -> Optional[ListingItem]:
    """Convert one Browse API ``itemSummary`` into a ListingItem.

    Returns None for summaries without an id or a non-blank title.
    """
    item_id = summary.get("itemId")
    title = str(summary.get("title") or "").strip()
    if not item_id or not title:
        return None

    price_data = summary.get("price") or {}
    image_url = (summary.get("image") or {}).get("imageUrl")
    if not image_url:
        thumbnails = summary.get("thumbnailImages") or []
        if thumbnails:
            image_url = thumbnails[0].get("imageUrl")

    return ListingItem(
        item_id=str(item_id),
        title=title,
        price=Price(
            value=parse_price(price_data.get("value")),
            currency=price_data.get("currency") or marketplace.currency,
            display=price_data.get("value"),
        ),
        condition=summary.get("condition"),
        seller=(summary.get("seller") or {}).get("username"),
        image_url=image_url,
        item_web_url=summary.get("itemWebUrl"),
        source=ListingSource.EBAY,
        marketplace_id=summary.get("listingMarketplaceId") or marketplace.id,
    )
