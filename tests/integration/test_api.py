"""Integration tests for the HTTP API.

The eBay aggregator runs for real against a fake aiohttp session; the other
backends and the browser are replaced by fakes.
"""

import json
from urllib.parse import parse_qs, urlparse

import pytest
from conftest import (
    FakeBackend,
    FakePlaywrightFactory,
    FakeResponse,
    FakeSession,
    ebay_summary,
)
from fastapi.testclient import TestClient
from playwright.async_api import Error as PlaywrightError

from luxefinder.api import create_app
from luxefinder.api.app import MISSING_CREDENTIALS_MESSAGE
from luxefinder.clients import VintedApiClient, VintedEbayMirrorClient
from luxefinder.core import LuxuryBagsAggregator
from luxefinder.scraper import VintedFallbackScraper
from luxefinder.utils.exceptions import NetworkTimeoutError, UpstreamUnavailableError

CLOSED = PlaywrightError("Target page, context or browser has been closed")


def ebay_session(summaries_by_market: dict, token_status: int = 200) -> FakeSession:
    def handler(method, url, kwargs):
        if method == "POST":
            if token_status != 200:
                return FakeResponse(status=token_status, reason="Unauthorized", body={})
            return FakeResponse(body={"access_token": "app-token"})
        marketplace = kwargs["headers"]["X-EBAY-C-MARKETPLACE-ID"]
        return FakeResponse(body={"itemSummaries": summaries_by_market.get(marketplace, [])})
    return FakeSession(handler)


def build_client(test_config, session=None, backends=None, attempts=None, ebay_config=None) -> TestClient:
    backends = dict(backends or {})
    if "luxury-bags" not in backends:
        backends["luxury-bags"] = LuxuryBagsAggregator(ebay_config or test_config.ebay, session=session)
    backends.setdefault("ebay", FakeBackend("ebay"))
    backends.setdefault("vinted", FakeBackend("vinted"))
    scraper = VintedFallbackScraper(test_config.scraper, playwright_factory=FakePlaywrightFactory(attempts or []))
    return TestClient(create_app(test_config, backends=backends, scraper=scraper))


def test_health(test_config):
    response = build_client(test_config).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestLuxuryBags:
    """Test the eBay fan-out endpoint."""

    def test_single_marketplace_search(self, test_config):
        session = ebay_session({"EBAY_US": [
            ebay_summary("1", "300.00"),
            ebay_summary("2", "120.00"),
            ebay_summary("1", "300.00"),
        ]})
        client = build_client(test_config, session=session)

        response = client.get("/api/luxury-bags", params={"search": "dior bag", "country": "EBAY_US"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [item["itemId"] for item in body["items"]] == ["2", "1"]
        assert body["totalResults"] == 2
        assert body["totalPages"] == 1
        assert body["currentPage"] == 1

        searches = [call for call in session.calls if call[0] == "GET"]
        assert len(searches) == 1
        query = parse_qs(urlparse(searches[0][1]).query)
        assert query["q"] == ["dior bag"]
        assert query["filter"] == ["price:[0..]"]

    def test_pagination_and_sort(self, test_config):
        summaries = [ebay_summary(str(i), f"{100 + i}.00") for i in range(5)]
        client = build_client(test_config, session=ebay_session({"EBAY_US": summaries}))

        response = client.get("/api/luxury-bags", params={
            "search": "dior", "country": "EBAY_US", "items_per_page": "2", "page": "3", "sortBy": "price-desc",
        })

        body = response.json()
        assert [item["itemId"] for item in body["items"]] == ["0"]
        assert body["totalPages"] == 3
        assert body["currentPage"] == 3

    def test_page_past_end(self, test_config):
        client = build_client(test_config, session=ebay_session({"EBAY_US": [ebay_summary("1")]}))
        body = client.get("/api/luxury-bags", params={"search": "dior", "country": "EBAY_US", "page": "9"}).json()
        assert body["items"] == []
        assert body["totalResults"] == 1

    def test_missing_credentials(self, test_config):
        ebay_config = test_config.ebay.model_copy(update={"client_id": None, "client_secret": None})
        client = build_client(test_config, session=ebay_session({}), ebay_config=ebay_config)

        response = client.get("/api/luxury-bags", params={"search": "dior"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": MISSING_CREDENTIALS_MESSAGE}

    def test_token_failure(self, test_config):
        client = build_client(test_config, session=ebay_session({}, token_status=401))

        response = client.get("/api/luxury-bags", params={"search": "dior", "country": "EBAY_US"})

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "Failed to search luxury bags"
        assert body["items"] == []

    def test_unknown_marketplace(self, test_config):
        client = build_client(test_config, session=ebay_session({}))
        response = client.get("/api/luxury-bags", params={"search": "dior", "country": "EBAY_XX"})
        assert response.status_code == 400
        assert "EBAY_XX" in response.json()["error"]

    def test_invalid_price(self, test_config):
        client = build_client(test_config, session=ebay_session({}))
        response = client.get("/api/luxury-bags", params={"min_price": "cheap"})
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestHostedRoutes:
    """Test the hosted-API routes and the path dispatcher."""

    def test_vinted_route(self, test_config):
        vinted = FakeBackend("vinted")
        client = build_client(test_config, session=ebay_session({}), backends={"vinted": vinted})

        response = client.get("/vinted", params={"brand": "Prada", "country": "fr"})

        assert response.status_code == 200
        assert response.json()["items"][0]["itemId"] == "vinted-1"
        assert vinted.requests[0].country == "fr"
        assert vinted.requests[0].items_per_page == test_config.vinted_api.items_per_page

    def test_vinted_upstream_failure(self, test_config):
        vinted = FakeBackend("vinted", error=UpstreamUnavailableError("Vinted API error: 500", status_code=500))
        client = build_client(test_config, session=ebay_session({}), backends={"vinted": vinted})

        response = client.get("/vinted", params={"search": "dior"})

        assert response.status_code == 503
        assert response.json() == {
            "success": False,
            "items": [],
            "totalResults": 0,
            "totalPages": 0,
            "currentPage": 1,
            "error": "Vinted API is currently unavailable. Please try again later.",
        }

    def test_ebay_mirror_timeout(self, test_config):
        ebay = FakeBackend("ebay", error=NetworkTimeoutError())
        client = build_client(test_config, session=ebay_session({}), backends={"ebay": ebay})

        response = client.get("/ebay", params={"search": "laptop"})

        assert response.status_code == 503
        assert "timed out" in response.json()["error"]

    @pytest.mark.parametrize("path,backend", [
        ("/api/ebay-search", "ebay"),
        ("/api/vinted-catalogue", "vinted"),
        ("/api/whatever", "vinted"),
    ])
    def test_dispatch_by_path(self, test_config, path, backend):
        backends = {name: FakeBackend(name) for name in ("luxury-bags", "ebay", "vinted")}
        client = build_client(test_config, backends=backends)

        response = client.get(path, params={"search": "dior"})

        assert response.status_code == 200
        assert len(backends[backend].requests) == 1
        assert sum(len(b.requests) for b in backends.values()) == 1


class TestVintedFallback:
    """Test the live-scrape route."""

    def test_requires_search_term(self, test_config):
        response = build_client(test_config).get("/api/vinted")
        assert response.status_code == 400
        assert response.json()["error"] == "search_term parameter is required"

    def test_success(self, test_config, catalog_html):
        client = build_client(test_config, attempts=[catalog_html])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 200
        assert "X-Fallback-Data" not in response.headers
        body = response.json()
        assert body["totalResults"] == 2
        assert body["totalPages"] == 1
        assert [item["itemId"] for item in body["items"]] == ["vinted_1234567", "vinted_7654321"]

    def test_exhausted_retries_return_placeholder(self, test_config):
        client = build_client(test_config, attempts=[CLOSED, CLOSED, CLOSED])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 200
        assert response.headers["X-Fallback-Data"] == "true"
        assert response.headers["X-Fallback-Reason"] == "Browser session issues"
        body = response.json()
        assert body["success"] is True
        assert len(body["items"]) == 1
        assert body["items"][0]["isPlaceholder"] is True
        assert body["items"][0]["itemWebUrl"] == "https://www.vinted.com/catalog?search_text=dior"

    def test_unreachable_host(self, test_config):
        client = build_client(test_config, attempts=[PlaywrightError("net::ERR_NAME_NOT_RESOLVED")])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 503
        assert response.json()["error"] == "Unable to reach Vinted. Please try again later."

    def test_other_scraper_failure(self, test_config):
        client = build_client(test_config, attempts=[PlaywrightError("net::ERR_CERT_INVALID")])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to scrape Vinted data"

    def test_blank_page(self, test_config):
        client = build_client(test_config, attempts=[""])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to scrape Vinted data"

    def test_structured_data_with_image_object(self, test_config):
        product = {
            "@type": "Product",
            "name": "Dior Book Tote",
            "url": "/items/888-dior-book-tote",
            "image": {"@type": "ImageObject", "contentUrl": "https://images.vinted.net/888.jpg"},
            "offers": {"price": 1450, "priceCurrency": "EUR"},
        }
        page = f'<html><script type="application/ld+json">{json.dumps(product)}</script></html>'
        client = build_client(test_config, attempts=[page])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 200
        item = response.json()["items"][0]
        assert item["itemId"] == "vinted_888"
        assert item["imageUrl"] == "https://images.vinted.net/888.jpg"
        assert item["price"]["value"] == 1450.0

    def test_price_bounds_applied_to_scraped_items(self, test_config, catalog_html):
        client = build_client(test_config, attempts=[catalog_html])

        response = client.get("/api/vinted", params={"search_term": "dior", "min_price": "100", "max_price": "500"})

        body = response.json()
        assert [item["itemId"] for item in body["items"]] == ["vinted_1234567"]
        assert body["totalResults"] == 1

    def test_unexpected_failure_is_an_envelope(self, test_config):
        client = build_client(test_config, attempts=[RuntimeError("renderer crashed")])

        response = client.get("/api/vinted", params={"search_term": "dior"})

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["error"] == "Failed to scrape Vinted data"


class TestHostedClientsOverHttp:
    """The real hosted-API clients behind the routes, with a fake session."""

    def build(self, test_config, body):
        session = FakeSession(lambda m, u, k: FakeResponse(body=body))
        backends = {
            "vinted": VintedApiClient(test_config.vinted_api, session=session),
            "ebay": VintedEbayMirrorClient(test_config.vinted_api, session=session),
        }
        return build_client(test_config, backends=backends), session

    def test_null_pagination_and_numeric_price(self, test_config):
        body = {
            "success": True,
            "data": [{"Title": "Torebka Dior", "Price": 45.0, "Link": "https://www.vinted.pl/items/1-dior"}],
            "pagination": {"total_items": None, "total_pages": None, "current_page": None},
        }
        client, _ = self.build(test_config, body)

        response = client.get("/vinted", params={"search": "dior"})

        assert response.status_code == 200
        body = response.json()
        assert body["totalResults"] == 1
        assert body["items"][0]["price"]["value"] == 45.0

    def test_malformed_body_is_unavailable(self, test_config):
        client, _ = self.build(test_config, {"success": True, "data": {"Title": "not a list"}})

        response = client.get("/vinted", params={"search": "dior"})

        assert response.status_code == 503
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {
            "success": False,
            "items": [],
            "totalResults": 0,
            "totalPages": 0,
            "currentPage": 1,
            "error": "Vinted API is currently unavailable. Please try again later.",
        }

    def test_unexpected_backend_error_is_an_envelope(self, test_config):
        vinted = FakeBackend("vinted", error=RuntimeError("boom"))
        client = build_client(test_config, backends={"vinted": vinted})

        response = client.get("/vinted", params={"search": "dior"})

        assert response.status_code == 503
        assert response.json()["success"] is False

    def test_mirror_default_search(self, test_config):
        client, session = self.build(test_config, {"success": True, "data": [], "count": 0})

        response = client.get("/ebay")

        assert response.status_code == 200
        assert parse_qs(urlparse(session.calls[0][1]).query)["search"] == ["laptop"]
