"""Back end calls made by the Streamlit UI."""

import asyncio
from typing import Any, Mapping

import aiohttp
from pydantic import ValidationError as PydanticValidationError

from luxefinder.domain.entities.listing import ListingItem, ListingSource, Price
from luxefinder.domain.entities.search import SearchResponse
from luxefinder.utils import get_logger
from luxefinder.utils.exceptions import NetworkTimeoutError, UpstreamUnavailableError

from .state_manager import ResultState, SearchFormState

logger = get_logger(__name__)

DEMO_ITEMS = [
    ("Louis Vuitton Speedy 30 Monogram", 640.0, "Used"),
    ("Chanel Classic Flap Medium Caviar", 5200.0, "Very good"),
    ("Hermès Evelyne PM Etoupe", 1850.0, "Good"),
    ("Gucci Marmont Small Shoulder Bag", 890.0, "Excellent"),
    ("Prada Re-Edition 2005 Nylon", 720.0, "New with tags"),
    ("Dior Saddle Bag Oblique", 1990.0, "Used"),
    ("Saint Laurent Loulou Small", 1150.0, "Very good"),
    ("Bottega Veneta Jodie Mini", 1350.0, "Good"),
]


def demo_items() -> list[ListingItem]:
    """Local demonstration data shown when the back end times out."""
    return [
        ListingItem(
            item_id=f"demo_{index}",
            title=title,
            price=Price(value=value, currency="EUR"),
            condition=condition,
            seller="Demo Seller",
            image_url=f"https://images.unsplash.com/photo-1584917865442-de89df76afd3?w=400&sig={index}",
            item_web_url=None,
            source=ListingSource.EBAY,
            marketplace_id="DEMO",
        )
        for index, (title, value, condition) in enumerate(DEMO_ITEMS)
    ]


class BackendClient:
    """Thin aiohttp client for the LuxeFinder HTTP API."""

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def fetch(self, path: str, params: Mapping[str, Any]) -> ResultState:
        """GET one page from the back end.

        Error envelopes are returned as a ``ResultState`` with ``error`` set.

        Raises:
            NetworkTimeoutError: The back end did not answer in time
            UpstreamUnavailableError: The back end could not be reached
        """
        url = f"{self.base_url}{path}"
        query = {key: str(value) for key, value in params.items()}
        logger.debug(f"GET {url} {query}")

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url, params=query, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    body = await response.json(content_type=None)
                    fallback = response.headers.get("X-Fallback-Data") == "true"
                    reason = response.headers.get("X-Fallback-Reason")
        except asyncio.TimeoutError as e:
            raise NetworkTimeoutError("Back end request timed out", url=url, timeout=self.timeout) from e
        except (aiohttp.ClientError, ValueError) as e:
            raise UpstreamUnavailableError(f"Back end request failed: {e}", url=url) from e

        if not isinstance(body, dict):
            raise UpstreamUnavailableError("Back end returned an unexpected body", url=url)

        try:
            envelope = SearchResponse.model_validate(body)
        except PydanticValidationError as e:
            raise UpstreamUnavailableError("Back end returned a malformed envelope", url=url) from e
        if not envelope.success:
            return ResultState(error=envelope.error or envelope.message or "Search failed")

        return ResultState(
            items=envelope.items,
            total_results=envelope.total_results,
            total_pages=envelope.total_pages,
            current_page=envelope.current_page,
            degraded=fallback or any(item.is_placeholder for item in envelope.items),
            degraded_reason=reason,
        )

    def fetch_sync(self, path: str, params: Mapping[str, Any]) -> ResultState:
        return asyncio.run(self.fetch(path, params))


def load_results(client: BackendClient, form: SearchFormState, demo_fallback: bool = False) -> ResultState:
    """Fetch the page described by ``form``; never raises.

    On a timeout the demo data is shown when ``demo_fallback`` is enabled.
    """
    try:
        return client.fetch_sync(form.path, form.to_params())
    except NetworkTimeoutError as e:
        logger.warning(f"Back end timed out: {e}")
        if demo_fallback:
            items = demo_items()
            return ResultState(
                items=items,
                total_results=len(items),
                total_pages=1,
                current_page=1,
                demo=True,
            )
        return ResultState(error="The search timed out. Please try again.")
    except UpstreamUnavailableError as e:
        logger.error(f"Back end unavailable: {e}")
        return ResultState(error="The search service is unavailable. Please try again later.")


def load_vinted_page(client: BackendClient, form: SearchFormState) -> list[ListingItem]:
    """Vinted items matching ``form``, for the combined export; empty on failure."""
    vinted_form = SearchFormState(
        query=form.query,
        brands=form.brands,
        min_price=form.min_price,
        max_price=form.max_price,
        vinted_country=form.vinted_country,
        items_per_page=form.items_per_page,
        page=form.page,
        sort_by=form.sort_by,
        source="vinted",
    )
    try:
        result = client.fetch_sync(vinted_form.path, vinted_form.to_params())
    except (NetworkTimeoutError, UpstreamUnavailableError) as e:
        logger.warning(f"Skipping Vinted items in export: {e}")
        return []
    if result.error:
        logger.warning(f"Skipping Vinted items in export: {result.error}")
        return []
    return result.items
