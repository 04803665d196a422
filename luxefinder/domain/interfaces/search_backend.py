"""
Abstract interface for search back ends.
"""

from abc import ABC, abstractmethod

from luxefinder.domain.entities.search import SearchRequest, SearchResponse


class SearchBackend(ABC):
    """
    Abstract base class for anything that answers a SearchRequest.

    Implemented by the eBay aggregator and the hosted Vinted API clients;
    the route dispatcher selects one of them per request.
    """

    name: str = "backend"

    @abstractmethod
    async def search(self, request: SearchRequest) -> SearchResponse:
        """
        Run a search and return one page of results.

        Args:
            request: Parsed search parameters.

        Returns:
            SearchResponse envelope for the requested page.

        Raises:
            ConfigurationMissingError: Credentials are not configured.
            UpstreamUnavailableError: The remote API failed.
            NetworkTimeoutError: The remote API did not answer in time.
        """
        pass
