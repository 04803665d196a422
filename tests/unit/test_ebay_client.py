"""Unit tests for the eBay client and shared HTTP helpers."""

import asyncio
import base64
from urllib.parse import parse_qs, urlparse

import aiohttp
import pytest
from conftest import FakeResponse, FakeSession, ebay_summary

from luxefinder.clients.ebay_client import EbayClient, parse_item_summary
from luxefinder.clients.http import build_url, request_json
from luxefinder.domain.entities.listing import ListingSource
from luxefinder.domain.entities.marketplace import get_marketplace
from luxefinder.utils.exceptions import NetworkTimeoutError, UpstreamUnavailableError

US = get_marketplace("EBAY_US")


class TestBuildUrl:
    def test_omits_missing_values(self):
        url = build_url("https://api.example.com/search", {"q": "bag", "brand": None, "category": "", "page": 1})
        assert url == "https://api.example.com/search?q=bag&page=1"

    def test_integral_floats(self):
        assert build_url("https://x/", {"min_price": 100.0, "max_price": 99.5}) == "https://x/?min_price=100&max_price=99.5"

    def test_no_params(self):
        assert build_url("https://x/", {"a": None}) == "https://x/"


class TestRequestJson:
    """Test transport error translation."""

    @pytest.mark.asyncio
    async def test_success(self):
        session = FakeSession(lambda m, u, k: FakeResponse(body={"ok": True}))
        body = await request_json(session, "GET", "https://x/", service="Test", timeout=5)
        assert body == {"ok": True}
        assert isinstance(session.calls[0][2]["timeout"], aiohttp.ClientTimeout)

    @pytest.mark.asyncio
    async def test_non_2xx(self):
        session = FakeSession(lambda m, u, k: FakeResponse(status=502, reason="Bad Gateway", body={}))
        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await request_json(session, "GET", "https://x/", service="Test", timeout=5)
        assert exc_info.value.status_code == 502
        assert exc_info.value.context["url"] == "https://x/"

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        session = FakeSession(lambda m, u, k: FakeResponse(body=ValueError("not json")))
        with pytest.raises(UpstreamUnavailableError, match="invalid JSON"):
            await request_json(session, "GET", "https://x/", service="Test", timeout=5)

    @pytest.mark.asyncio
    async def test_timeout(self):
        session = FakeSession(lambda m, u, k: asyncio.TimeoutError())
        with pytest.raises(NetworkTimeoutError) as exc_info:
            await request_json(session, "GET", "https://x/", service="Test", timeout=3)
        assert exc_info.value.context["timeout_seconds"] == 3

    @pytest.mark.asyncio
    async def test_connection_error(self):
        session = FakeSession(lambda m, u, k: aiohttp.ClientConnectionError("refused"))
        with pytest.raises(UpstreamUnavailableError, match="request failed"):
            await request_json(session, "GET", "https://x/", service="Test", timeout=3)


class TestEbayClient:
    """Test the OAuth exchange and Browse search."""

    @pytest.fixture
    def client(self, test_config):
        return EbayClient(test_config.ebay, "my-id", "my-secret")

    def test_search_url_open_upper_bound(self, client):
        query = parse_qs(urlparse(client.build_search_url("dior bag")).query)
        assert query["q"] == ["dior bag"]
        assert query["limit"] == ["200"]
        assert query["filter"] == ["price:[0..]"]

    def test_search_url_with_bounds(self, client):
        query = parse_qs(urlparse(client.build_search_url("dior", 50, 250.5)).query)
        assert query["filter"] == ["price:[50..250.5]"]

    @pytest.mark.asyncio
    async def test_get_app_token(self, client):
        session = FakeSession(lambda m, u, k: FakeResponse(body={"access_token": "tok"}))

        token = await client.get_app_token(session)

        method, url, kwargs = session.calls[0]
        assert token == "tok"
        assert method == "POST"
        assert url == "https://api.ebay.com/identity/v1/oauth2/token"
        expected = base64.b64encode(b"my-id:my-secret").decode()
        assert kwargs["headers"]["Authorization"] == f"Basic {expected}"
        assert kwargs["data"] == {
            "grant_type": "client_credentials",
            "scope": "https://api.ebay.com/oauth/api_scope",
        }

    @pytest.mark.asyncio
    async def test_get_app_token_without_token(self, client):
        session = FakeSession(lambda m, u, k: FakeResponse(body={"error": "invalid_client"}))
        with pytest.raises(UpstreamUnavailableError, match="no access token"):
            await client.get_app_token(session)

    @pytest.mark.asyncio
    async def test_search(self, client):
        session = FakeSession(lambda m, u, k: FakeResponse(body={"itemSummaries": [ebay_summary("1"), {"itemId": "2"}]}))

        items = await client.search(session, "tok", "dior bag", US)

        assert [i.item_id for i in items] == ["1"]
        headers = session.calls[0][2]["headers"]
        assert headers["X-EBAY-C-MARKETPLACE-ID"] == "EBAY_US"
        assert headers["Authorization"] == "Bearer tok"

    @pytest.mark.asyncio
    async def test_malformed_summary_skipped_alone(self, client):
        summaries = [
            ebay_summary("1"),
            ebay_summary("2", seller="not-a-dict"),
            ebay_summary("3", image="not-a-dict"),
            "not-a-summary",
            ebay_summary("4"),
        ]
        session = FakeSession(lambda m, u, k: FakeResponse(body={"itemSummaries": summaries}))

        items = await client.search(session, "tok", "dior bag", US)

        assert [i.item_id for i in items] == ["1", "4"]

    @pytest.mark.asyncio
    async def test_search_without_results(self, client):
        session = FakeSession(lambda m, u, k: FakeResponse(body={"total": 0}))
        assert await client.search(session, "tok", "nothing", US) == []


class TestParseItemSummary:
    def test_full_summary(self):
        item = parse_item_summary(ebay_summary("42", "199.99", listingMarketplaceId="EBAY_GB"), US)
        assert item.item_id == "42"
        assert item.price.value == 199.99
        assert item.price.currency == "USD"
        assert item.condition == "Pre-owned"
        assert item.seller == "seller_42"
        assert item.source is ListingSource.EBAY
        assert item.marketplace_id == "EBAY_GB"

    def test_thumbnail_fallback_and_defaults(self):
        summary = ebay_summary("7", thumbnailImages=[{"imageUrl": "https://thumb/7.jpg"}])
        del summary["image"]
        del summary["condition"]
        del summary["seller"]

        item = parse_item_summary(summary, US)

        assert item.image_url == "https://thumb/7.jpg"
        assert item.condition == "Unknown"
        assert item.seller is None
        assert item.marketplace_id == "EBAY_US"

    def test_missing_title(self):
        assert parse_item_summary({"itemId": "1"}, US) is None

    def test_blank_title(self):
        assert parse_item_summary(ebay_summary("1", title="   "), US) is None

    def test_title_is_stripped(self):
        assert parse_item_summary(ebay_summary("1", title="  Dior Saddle "), US).title == "Dior Saddle"
