"""Unit tests for path-based backend routing."""

import pytest
from conftest import FakeBackend

from luxefinder.api.dispatcher import RouteDispatcher, choose_backend
from luxefinder.utils.exceptions import InvalidRequestError


@pytest.mark.parametrize("path,expected", [
    ("/api/luxury-bags", "luxury-bags"),
    ("/API/Luxury-Bags/extra", "luxury-bags"),
    ("/ebay", "ebay"),
    ("/api/ebay-vinted", "ebay"),
    ("/vinted", "vinted"),
    ("/api/anything", "vinted"),
    ("/", "vinted"),
])
def test_choose_backend(path, expected):
    assert choose_backend(path) == expected


class TestRouteDispatcher:
    """Test request forwarding."""

    @pytest.fixture
    def dispatcher(self, fake_backends):
        return RouteDispatcher(fake_backends, {"luxury-bags": 24, "ebay": 50, "vinted": 24})

    def test_missing_backend(self):
        with pytest.raises(ValueError, match="ebay"):
            RouteDispatcher({"luxury-bags": FakeBackend("luxury-bags"), "vinted": FakeBackend("vinted")}, {})

    def test_resolve(self, dispatcher, fake_backends):
        assert dispatcher.resolve("/ebay") is fake_backends["ebay"]

    @pytest.mark.asyncio
    async def test_dispatch_forwards_parameters(self, dispatcher, fake_backends):
        response = await dispatcher.dispatch("/ebay", {"search": "laptop", "page": "2", "maxPrice": "300"})

        assert response is fake_backends["ebay"].response
        request = fake_backends["ebay"].requests[0]
        assert request.query == "laptop"
        assert request.page == 2
        assert request.max_price == 300.0
        assert request.items_per_page == 50
        assert fake_backends["vinted"].requests == []

    @pytest.mark.asyncio
    async def test_dispatch_default_route(self, dispatcher, fake_backends):
        await dispatcher.dispatch("/api/unknown", {"brand": "Prada"})
        assert fake_backends["vinted"].requests[0].brands == ["Prada"]

    @pytest.mark.asyncio
    async def test_dispatch_invalid_parameters(self, dispatcher, fake_backends):
        with pytest.raises(InvalidRequestError):
            await dispatcher.dispatch("/vinted", {"page": "zero"})
        assert fake_backends["vinted"].requests == []
