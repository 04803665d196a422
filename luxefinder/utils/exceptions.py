"""
Error taxonomy for LuxeFinder.

Families, each rooted at AppException:
- ConfigError: configuration file or credentials problems
- MarketplaceError: eBay / hosted Vinted API failures
- ScraperError: headless browser failures
- ValidationError: bad inbound parameters
- UIError: failures inside the Streamlit front end

Every error carries a short ``message``, a machine-readable ``code`` and a
``context`` dict. The HTTP layer turns the family into a status code and a
generic sentence; ``context`` only ever reaches the logs.

Example:
    >>> from luxefinder.utils.exceptions import UpstreamUnavailableError
    >>> raise UpstreamUnavailableError("eBay Browse error: 502 Bad Gateway", status_code=502, url=url)
"""

from __future__ import annotations

import re
from typing import Any, Optional


def _context(base: Optional[dict[str, Any]] = None, **values: Any) -> dict[str, Any]:
    """Merge ``values`` into ``base``, skipping the ones that are None."""
    context = dict(base or {})
    context.update({key: value for key, value in values.items() if value is not None})
    return context


class AppException(Exception):
    """
    Root of all LuxeFinder errors.

    Attributes:
        message: Short description, safe to show to a user.
        code: Stable identifier such as ``UPSTREAM_UNAVAILABLE``.
        context: Diagnostic details (URLs, status codes, field names).

    Example:
        >>> try:
        ...     raise AppException("Search failed", code="SEARCH_FAILED")
        ... except AppException as e:
        ...     log_exception(logger, "search", e)
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self._default_code()
        self.context = context or {}
        super().__init__(message)

    def _default_code(self) -> str:
        """``UpstreamUnavailableError`` -> ``UPSTREAM_UNAVAILABLE_ERROR``."""
        return re.sub(r"(?<!^)(?=[A-Z])", "_", type(self).__name__).upper()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Structured form for log records."""
        return {
            "error_type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# ==================== CONFIGURATION ====================


class ConfigError(AppException):
    """The configuration file or the environment is unusable."""


class ConfigFileNotFoundError(ConfigError):
    """No configuration file at the resolved path."""

    def __init__(self, message: str = "Configuration file not found", path: Optional[str] = None, **kwargs) -> None:
        context = _context(kwargs.pop("context", None), path=path)
        super().__init__(message, code="CONFIG_FILE_NOT_FOUND", context=context, **kwargs)


class ConfigurationMissingError(ConfigError):
    """
    Required settings (typically the eBay credentials) are absent.

    Answered with 400 and never retried.

    Example:
        >>> raise ConfigurationMissingError("Missing eBay credentials", missing=["EBAY_CLIENT_ID"])
    """

    def __init__(
        self,
        message: str = "Required configuration is missing",
        missing: Optional[list[str]] = None,
        **kwargs,
    ) -> None:
        context = _context(kwargs.pop("context", None), missing=list(missing) if missing else None)
        super().__init__(message, code="CONFIG_MISSING", context=context, **kwargs)


# ==================== MARKETPLACES ====================


class MarketplaceError(AppException):
    """A remote marketplace API (eBay OAuth/Browse, hosted Vinted API) failed."""


class UpstreamUnavailableError(MarketplaceError):
    """
    Non-2xx status, undecodable body, transport failure or an explicit
    ``success: false`` from the upstream.
    """

    def __init__(
        self,
        message: str = "Upstream service unavailable",
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        **kwargs,
    ) -> None:
        self.status_code = status_code
        context = _context(kwargs.pop("context", None), status_code=status_code, url=url)
        super().__init__(message, code="UPSTREAM_UNAVAILABLE", context=context, **kwargs)


class NetworkTimeoutError(MarketplaceError):
    """The client-side timeout aborted an outbound request."""

    def __init__(
        self,
        message: str = "Request timed out",
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> None:
        context = _context(kwargs.pop("context", None), url=url, timeout_seconds=timeout)
        super().__init__(message, code="NETWORK_TIMEOUT", context=context, **kwargs)


# ==================== SCRAPER ====================


class ScraperError(AppException):
    """The headless browser could not produce a catalogue page."""


class ScraperTransientError(ScraperError):
    """Worth another attempt: page, context or browser closed, or navigation timed out."""

    def __init__(self, message: str = "Transient scraper failure", url: Optional[str] = None, **kwargs) -> None:
        context = _context(kwargs.pop("context", None), url=url)
        super().__init__(message, code="SCRAPER_TRANSIENT", context=context, **kwargs)


class BrowserUnavailableError(ScraperError):
    """No usable browser, e.g. the Chromium executable is not installed."""

    def __init__(self, message: str = "Browser session unavailable", **kwargs) -> None:
        super().__init__(message, code="BROWSER_UNAVAILABLE", **kwargs)


class NavigationError(ScraperError):
    """Navigation failed for a reason retrying will not fix (e.g. DNS)."""

    def __init__(self, message: str = "Failed to navigate", url: Optional[str] = None, **kwargs) -> None:
        context = _context(kwargs.pop("context", None), url=url)
        super().__init__(message, code="NAVIGATION_ERROR", context=context, **kwargs)


class PageParsingError(ScraperError):
    """
    The page came back but holds nothing parseable.

    Example:
        >>> raise PageParsingError("Empty page content", url="https://www.vinted.com/catalog?search_text=dior")
    """

    def __init__(
        self,
        message: str = "Failed to parse page content",
        url: Optional[str] = None,
        selector: Optional[str] = None,
        **kwargs,
    ) -> None:
        context = _context(kwargs.pop("context", None), url=url, selector=selector)
        super().__init__(message, code="PAGE_PARSE", context=context, **kwargs)


# ==================== VALIDATION ====================


class ValidationError(AppException):
    """Inbound parameters were rejected."""


class InvalidRequestError(ValidationError):
    """
    A search request is malformed: bad number, unknown marketplace,
    inconsistent price bounds or a missing required term.

    Example:
        >>> raise InvalidRequestError("page must be a positive integer", field="page", value="0")
    """

    def __init__(
        self,
        message: str = "Invalid request",
        field: Optional[str] = None,
        value: Any = None,
        **kwargs,
    ) -> None:
        context = _context(kwargs.pop("context", None), field=field, value=value)
        super().__init__(message, code="INVALID_REQUEST", context=context, **kwargs)


# ==================== UI ====================


class UIError(AppException):
    """Raised inside the Streamlit front end."""


class ExportError(UIError):
    """The spreadsheet export could not be produced."""

    def __init__(self, message: str = "Failed to export data", **kwargs) -> None:
        super().__init__(message, code="EXPORT_ERROR", **kwargs)
