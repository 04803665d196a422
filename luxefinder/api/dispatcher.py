"""Path-based routing of search requests to a backend."""

from collections.abc import Mapping
from typing import Any

from luxefinder.domain.entities.search import SearchRequest, SearchResponse
from luxefinder.domain.interfaces.search_backend import SearchBackend
from luxefinder.utils import get_logger

logger = get_logger(__name__)

LUXURY_BAGS = "luxury-bags"
EBAY = "ebay"
VINTED = "vinted"

# Checked in this order; the first substring found in the path wins.
ROUTE_ORDER = (LUXURY_BAGS, EBAY, VINTED)


def choose_backend(path: str) -> str:
    """Pick a backend name by substring match, defaulting to Vinted."""
    lowered = path.lower()
    for name in ROUTE_ORDER:
        if name in lowered:
            return name
    return VINTED


class RouteDispatcher:
    """Forward a request's parameters, unchanged, to the backend its path names."""

    def __init__(self, backends: Mapping[str, SearchBackend], page_sizes: Mapping[str, int]):
        """Initialize dispatcher.

        Args:
            backends: Backend per route name (``luxury-bags``, ``ebay``, ``vinted``)
            page_sizes: Default page size per route name
        """
        missing = [name for name in ROUTE_ORDER if name not in backends]
        if missing:
            raise ValueError(f"No backend registered for: {', '.join(missing)}")
        self.backends = dict(backends)
        self.page_sizes = dict(page_sizes)

    def resolve(self, path: str) -> SearchBackend:
        return self.backends[choose_backend(path)]

    def build_request(self, name: str, params: Mapping[str, Any]) -> SearchRequest:
        return SearchRequest.from_params(params, default_items_per_page=self.page_sizes.get(name, 24))

    async def dispatch(self, path: str, params: Mapping[str, Any]) -> SearchResponse:
        """Route ``path`` and run the search.

        Raises:
            InvalidRequestError: Malformed parameters
            AppException: Whatever the chosen backend raises
        """
        name = choose_backend(path)
        logger.info(f"Dispatching '{path}' to {name}")
        request = self.build_request(name, params)
        return await self.backends[name].search(request)
