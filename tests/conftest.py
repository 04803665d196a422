"""Pytest fixtures and configuration for LuxeFinder tests."""

import os
import tempfile
from typing import Any, Callable, Optional, Union

import pytest

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("LUXEFINDER_LOG_DIR", tempfile.mkdtemp(prefix="luxefinder-logs-"))

from luxefinder.domain.entities.listing import ListingItem, ListingSource, Price  # noqa: E402
from luxefinder.domain.entities.search import SearchRequest, SearchResponse  # noqa: E402
from luxefinder.domain.interfaces import SearchBackend  # noqa: E402
from luxefinder.utils.config import (  # noqa: E402
    AppConfig,
    EbayConfig,
    ScraperConfig,
    UIConfig,
    VintedApiConfig,
    reset_config,
)


# ==================== CONFIG ====================


@pytest.fixture
def test_config() -> AppConfig:
    """Configuration with credentials set and no real waiting."""
    return AppConfig(
        ebay=EbayConfig(client_id="test-id", client_secret="test-secret", default_country="EBAY_US"),
        vinted_api=VintedApiConfig(),
        scraper=ScraperConfig(retry_backoff=0.0, settle_delay=0.0),
        ui=UIConfig(items_per_page=24),
        log_level="DEBUG",
    )


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from real credentials and cached config."""
    monkeypatch.delenv("EBAY_CLIENT_ID", raising=False)
    monkeypatch.delenv("EBAY_CLIENT_SECRET", raising=False)
    reset_config()
    yield
    reset_config()


# ==================== LISTINGS ====================


def make_item(
    item_id: str,
    price: Optional[float] = 100.0,
    title: Optional[str] = None,
    source: ListingSource = ListingSource.EBAY,
    currency: str = "USD",
) -> ListingItem:
    """Build a listing with sensible defaults."""
    return ListingItem(
        item_id=item_id,
        title=title or f"Bag {item_id}",
        price=Price(value=price, currency=currency),
        seller="seller",
        image_url=f"https://img.example.com/{item_id}.jpg",
        item_web_url=f"https://www.example.com/itm/{item_id}",
        source=source,
        marketplace_id="EBAY_US" if source is ListingSource.EBAY else "VINTED_PL",
    )


@pytest.fixture
def sample_items() -> list[ListingItem]:
    return [
        make_item("a", 300.0, "Prada Galleria"),
        make_item("b", 120.0, "coach Tabby"),
        make_item("c", None, "Dior Saddle"),
        make_item("d", 120.0, "Gucci Jackie"),
        make_item("e", 950.0, "Louis Vuitton Speedy"),
    ]


def ebay_summary(item_id: str, price: str = "150.00", currency: str = "USD", **extra: Any) -> dict:
    """A Browse API itemSummary."""
    summary = {
        "itemId": item_id,
        "title": f"Designer bag {item_id}",
        "price": {"value": price, "currency": currency},
        "condition": "Pre-owned",
        "seller": {"username": f"seller_{item_id}"},
        "image": {"imageUrl": f"https://i.ebayimg.com/{item_id}.jpg"},
        "itemWebUrl": f"https://www.ebay.com/itm/{item_id}",
    }
    summary.update(extra)
    return summary


# ==================== FAKE AIOHTTP ====================


class FakeResponse:
    """Stands in for aiohttp.ClientResponse."""

    def __init__(self, status: int = 200, body: Any = None, reason: str = "OK", headers: Optional[dict] = None):
        self.status = status
        self.reason = reason
        self.headers = headers or {}
        self._body = body

    async def json(self, content_type: Optional[str] = None) -> Any:
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class _RequestContext:
    def __init__(self, outcome: Union[FakeResponse, BaseException]):
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, *exc) -> bool:
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.

    ``handler(method, url, kwargs)`` returns a FakeResponse or an exception
    instance to raise when the request is entered.
    """

    def __init__(self, handler: Callable[[str, str, dict], Union[FakeResponse, BaseException]]):
        self.handler = handler
        self.calls: list[tuple[str, str, dict]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs) -> _RequestContext:
        self.calls.append((method, url, kwargs))
        return _RequestContext(self.handler(method, url, kwargs))

    def get(self, url: str, **kwargs) -> _RequestContext:
        return self.request("GET", url, **kwargs)

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc) -> bool:
        await self.close()
        return False

    async def close(self) -> None:
        self.closed = True


# ==================== FAKE PLAYWRIGHT ====================


class FakePage:
    def __init__(self, outcome: Union[str, BaseException], closed: bool = False):
        self._outcome = outcome
        self._closed = closed
        self.default_timeout: Optional[float] = None
        self.goto_calls: list[tuple[str, dict]] = []
        self.close_calls = 0

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def goto(self, url: str, **kwargs) -> None:
        self.goto_calls.append((url, kwargs))
        if isinstance(self._outcome, BaseException):
            raise self._outcome

    async def wait_for_timeout(self, timeout: float) -> None:
        return None

    def is_closed(self) -> bool:
        return self._closed

    async def content(self) -> str:
        return self._outcome

    async def close(self) -> None:
        self.close_calls += 1


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.options: dict = {}
        self.close_calls = 0

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self) -> None:
        self.close_calls += 1


class FakeBrowser:
    def __init__(self, page: FakePage, close_error: Optional[Exception] = None):
        self.context = FakeContext(page)
        self.close_calls = 0
        self._close_error = close_error

    async def new_context(self, **kwargs) -> FakeContext:
        self.context.options = kwargs
        return self.context

    async def close(self) -> None:
        self.close_calls += 1
        if self._close_error:
            raise self._close_error


class FakeChromium:
    def __init__(self, factory: "FakePlaywrightFactory"):
        self._factory = factory

    async def launch(self, **kwargs) -> FakeBrowser:
        return self._factory.next_browser(kwargs)


class FakePlaywright:
    def __init__(self, factory: "FakePlaywrightFactory"):
        self.chromium = FakeChromium(factory)

    async def __aenter__(self) -> "FakePlaywright":
        return self

    async def __aexit__(self, *exc) -> bool:
        return False


class FakePlaywrightFactory:
    """Callable replacement for ``async_playwright``.

    Each attempt consumes one entry of ``attempts``: page HTML, an exception
    raised by ``goto``, ``("launch", exc)`` to fail the launch itself, or
    ``("closed", html)`` for a page that reports itself closed.
    """

    def __init__(self, attempts: list, close_error: Optional[Exception] = None):
        self.attempts = list(attempts)
        self.close_error = close_error
        self.browsers: list[FakeBrowser] = []
        self.launch_options: list[dict] = []

    def __call__(self) -> FakePlaywright:
        return FakePlaywright(self)

    def next_browser(self, options: dict) -> FakeBrowser:
        self.launch_options.append(options)
        outcome = self.attempts.pop(0)
        if isinstance(outcome, tuple) and outcome[0] == "launch":
            raise outcome[1]
        if isinstance(outcome, tuple) and outcome[0] == "closed":
            page = FakePage(outcome[1], closed=True)
        else:
            page = FakePage(outcome)
        browser = FakeBrowser(page, close_error=self.close_error)
        self.browsers.append(browser)
        return browser


@pytest.fixture
def catalog_html() -> str:
    """Catalogue page with two cards and one empty container."""
    return """
    <html><body>
      <div class="feed-grid">
        <div class="feed-grid__item">
          <a class="new-item-box__overlay" href="/items/1234567-dior-saddle"></a>
          <div class="new-item-box__image"><img src="https://images.vinted.net/1.jpg"/></div>
          <h3>Dior Saddle Bag</h3>
          <span class="price">450,00 €</span>
        </div>
        <div class="feed-grid__item">
          <a href="https://www.vinted.com/items/7654321-prada"></a>
          <img data-src="https://images.vinted.net/2.jpg"/>
          <div class="item-title">Prada Re-Edition</div>
          <div class="item-price">1.200,00 zł</div>
        </div>
        <div class="feed-grid__item"></div>
      </div>
    </body></html>
    """


# ==================== FAKE BACKENDS ====================


class FakeBackend(SearchBackend):
    """Records requests and answers with a fixed response or error."""

    def __init__(self, name: str, response: Optional[SearchResponse] = None, error: Optional[Exception] = None):
        self.name = name
        self.response = response or SearchResponse(items=[make_item(f"{name}-1")], total_results=1, total_pages=1)
        self.error = error
        self.requests: list[SearchRequest] = []

    async def search(self, request: SearchRequest) -> SearchResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_backends() -> dict[str, FakeBackend]:
    return {name: FakeBackend(name) for name in ("luxury-bags", "ebay", "vinted")}
