"""FastAPI entry point for LuxeFinder.

Routes:
    GET /api/luxury-bags  eBay fan-out aggregator
    GET /api/vinted       Playwright fallback scraper
    GET /vinted           Hosted Vinted API catalogue
    GET /ebay             Hosted Vinted API eBay mirror
    GET /api/{path}       Dispatch by path substring
    GET /health           Liveness

Every error is logged with its context and answered with a short, generic
sentence in the standard envelope.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from luxefinder.clients import VintedApiClient, VintedEbayMirrorClient
from luxefinder.core import LuxuryBagsAggregator
from luxefinder.domain.entities.search import SearchRequest, SearchResponse
from luxefinder.domain.interfaces.search_backend import SearchBackend
from luxefinder.scraper import VintedFallbackScraper
from luxefinder.utils import get_config, get_logger, log_exception, set_log_level
from luxefinder.utils.config import AppConfig
from luxefinder.utils.exceptions import (
    AppException,
    ConfigurationMissingError,
    InvalidRequestError,
    NavigationError,
    NetworkTimeoutError,
    ScraperError,
)

from .dispatcher import EBAY, LUXURY_BAGS, VINTED, RouteDispatcher, choose_backend

logger = get_logger(__name__)

MISSING_CREDENTIALS_MESSAGE = (
    "Missing eBay credentials. Please set EBAY_CLIENT_ID and EBAY_CLIENT_SECRET in .env file"
)

# (status, message) per backend when the upstream is unavailable
UNAVAILABLE = {
    VINTED: (503, "Vinted API is currently unavailable. Please try again later."),
    EBAY: (503, "eBay API is currently unavailable. Please try again later."),
    LUXURY_BAGS: (500, "Failed to search luxury bags"),
}

TIMEOUT_MESSAGES = {
    VINTED: "Vinted API request timed out. Please try again later.",
    EBAY: "eBay API request timed out. Please try again later.",
    LUXURY_BAGS: "eBay search timed out. Please try again later.",
}


def build_backends(config: AppConfig) -> dict[str, SearchBackend]:
    """One backend per route name."""
    return {
        LUXURY_BAGS: LuxuryBagsAggregator(config.ebay),
        EBAY: VintedEbayMirrorClient(config.vinted_api),
        VINTED: VintedApiClient(config.vinted_api),
    }


def failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=SearchResponse.failure(error).to_payload())


def error_response(name: str, error: AppException) -> JSONResponse:
    """Translate an application error raised by backend ``name`` into a response."""
    if isinstance(error, ConfigurationMissingError):
        return JSONResponse(status_code=400, content={"success": False, "error": MISSING_CREDENTIALS_MESSAGE})
    if isinstance(error, InvalidRequestError):
        return failure(400, error.message)

    status_code, message = UNAVAILABLE.get(name, UNAVAILABLE[VINTED])
    if isinstance(error, NetworkTimeoutError):
        return failure(status_code, TIMEOUT_MESSAGES.get(name, message))
    return failure(status_code, message)


async def run_search(dispatcher: RouteDispatcher, path: str, request: Request) -> JSONResponse:
    """Dispatch ``path`` and render the envelope, mapping errors to status codes."""
    name = choose_backend(path)
    try:
        response = await dispatcher.dispatch(path, request.query_params)
    except (ConfigurationMissingError, InvalidRequestError) as e:
        logger.warning(f"Rejected {name} request: {e}")
        return error_response(name, e)
    except AppException as e:
        log_exception(logger, f"{name} search", e)
        return error_response(name, e)
    except Exception as e:
        log_exception(logger, f"{name} search (unexpected)", e)
        status_code, message = UNAVAILABLE.get(name, UNAVAILABLE[VINTED])
        return failure(status_code, message)
    return JSONResponse(content=response.to_payload())


def create_app(
    config: Optional[AppConfig] = None,
    backends: Optional[dict[str, SearchBackend]] = None,
    scraper: Optional[VintedFallbackScraper] = None,
) -> FastAPI:
    """Build the application.

    Args:
        config: Application config (``get_config()`` when omitted)
        backends: Backend per route name (built from ``config`` when omitted)
        scraper: Fallback scraper (built from ``config`` when omitted)
    """
    config = config or get_config()
    backends = backends or build_backends(config)
    scraper = scraper or VintedFallbackScraper(config.scraper)
    page_sizes = {
        LUXURY_BAGS: config.ui.items_per_page,
        EBAY: config.vinted_api.mirror_items_per_page,
        VINTED: config.vinted_api.items_per_page,
    }
    dispatcher = RouteDispatcher(backends, page_sizes)

    app = FastAPI(title="LuxeFinder API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.get("/api/luxury-bags")
    async def luxury_bags(request: Request) -> JSONResponse:
        return await run_search(dispatcher, LUXURY_BAGS, request)

    @app.get("/api/vinted")
    async def vinted_fallback(request: Request) -> JSONResponse:
        try:
            search_request = SearchRequest.from_params(request.query_params)
        except InvalidRequestError as e:
            return error_response(VINTED, e)
        if not search_request.has_query:
            return failure(400, "search_term parameter is required")

        try:
            outcome = await scraper.scrape(
                search_request.query.strip(), search_request.min_price, search_request.max_price
            )
        except NavigationError as e:
            log_exception(logger, "Vinted scrape", e)
            if e.context.get("unreachable_host"):
                return failure(503, "Unable to reach Vinted. Please try again later.")
            return failure(500, "Failed to scrape Vinted data")
        except ScraperError as e:
            log_exception(logger, "Vinted scrape", e)
            return failure(500, "Failed to scrape Vinted data")
        except Exception as e:
            log_exception(logger, "Vinted scrape (unexpected)", e)
            return failure(500, "Failed to scrape Vinted data")

        count = len(outcome.items)
        payload = SearchResponse(
            success=True,
            items=outcome.items,
            total_results=count,
            total_pages=1 if count else 0,
            current_page=1,
            message=(
                "Vinted is temporarily unavailable; showing a link to the catalogue instead."
                if outcome.degraded
                else f"Found {count} items on Vinted."
            ),
        ).to_payload()

        headers = None
        if outcome.degraded:
            headers = {"X-Fallback-Data": "true", "X-Fallback-Reason": outcome.reason or ""}
        return JSONResponse(content=payload, headers=headers)

    @app.get("/vinted")
    async def vinted_catalogue(request: Request) -> JSONResponse:
        return await run_search(dispatcher, VINTED, request)

    @app.get("/ebay")
    async def ebay_mirror(request: Request) -> JSONResponse:
        return await run_search(dispatcher, EBAY, request)

    @app.get("/api/{path:path}")
    async def dispatch(path: str, request: Request) -> JSONResponse:
        return await run_search(dispatcher, path, request)

    logger.info(f"LuxeFinder API created (CORS origins: {config.server.cors_origins})")
    return app


def main() -> None:
    import uvicorn

    config = get_config()
    set_log_level(logger, config.log_level)
    uvicorn.run(create_app(config), host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
