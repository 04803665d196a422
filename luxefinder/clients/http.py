"""Shared aiohttp plumbing for the marketplace clients.

Translates transport failures into the application error taxonomy so
callers only ever see UpstreamUnavailableError or NetworkTimeoutError.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional
from urllib.parse import urlencode

import aiohttp

from luxefinder.utils import get_logger
from luxefinder.utils.exceptions import NetworkTimeoutError, UpstreamUnavailableError

logger = get_logger(__name__)


def build_url(base_url: str, params: Mapping[str, Any]) -> str:
    """Append query parameters, omitting ones that are None or empty.

    Args:
        base_url: Endpoint URL without a query string
        params: Candidate parameters in the order they should appear

    Returns:
        Full URL
    """
    query = {
        key: _format_param(value)
        for key, value in params.items()
        if value is not None and str(value) != ""
    }
    if not query:
        return base_url
    return f"{base_url}?{urlencode(query)}"


def _format_param(value: Any) -> str:
    """Render floats without a trailing .0 (e.g. 100.0 -> "100")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@asynccontextmanager
async def session_scope(
    session: Optional[aiohttp.ClientSession] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Yield the injected session, or a fresh one closed on exit."""
    if session is not None:
        yield session
        return

    async with aiohttp.ClientSession(headers=dict(headers or {})) as owned:
        yield owned


async def request_json(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    *,
    service: str,
    timeout: float,
    headers: Optional[Mapping[str, str]] = None,
    data: Optional[Mapping[str, str]] = None,
) -> Any:
    """Perform one request and decode the JSON body.

    Args:
        session: aiohttp session
        method: HTTP method
        url: Full URL including query string
        service: Human-readable upstream name used in error messages
        timeout: Total timeout in seconds
        headers: Extra request headers
        data: Form body (for the OAuth token exchange)

    Returns:
        Decoded JSON body

    Raises:
        UpstreamUnavailableError: Non-2xx status, transport error or undecodable body
        NetworkTimeoutError: The request exceeded ``timeout``
    """
    logger.debug(f"{method} {url}")

    try:
        async with session.request(
            method,
            url,
            headers=dict(headers or {}),
            data=data,
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as response:
            if response.status < 200 or response.status >= 300:
                logger.warning(f"{service} responded {response.status} {response.reason}")
                raise UpstreamUnavailableError(
                    f"{service} error: {response.status} {response.reason}",
                    status_code=response.status,
                    url=url,
                )
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise UpstreamUnavailableError(
                    f"{service} returned an invalid JSON body",
                    status_code=response.status,
                    url=url,
                ) from e

    except asyncio.TimeoutError as e:
        raise NetworkTimeoutError(f"{service} request timed out", url=url, timeout=timeout) from e
    except aiohttp.ClientError as e:
        raise UpstreamUnavailableError(f"{service} request failed: {e}", url=url) from e
