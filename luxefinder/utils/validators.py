"""
Input validation and parsing utilities.
"""

import math
import re
from typing import Any, Optional
from urllib.parse import urlparse


def validate_url(url: str) -> bool:
    """
    Validate that a string is a valid http(s) URL.

    Args:
        url: URL string to validate.

    Returns:
        True if valid URL, False otherwise.
    """
    if not isinstance(url, str):
        return False
    result = urlparse(url)
    return result.scheme in ("http", "https") and bool(result.netloc)


def parse_price(value: Any) -> Optional[float]:
    """
    Parse a price from a number or a display string.

    Handles "45,00 zł", "€1.234,50", "$1,234.50", "45.00" and plain numbers.
    A single separator followed by exactly three digits is read as a
    thousands separator.

    Args:
        value: Price as number or text.

    Returns:
        Price as float, or None if no numeric value is present.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else float(value)

    cleaned = re.sub(r"[^\d.,]", "", str(value))
    if not re.search(r"\d", cleaned):
        return None

    if "," in cleaned and "." in cleaned:
        # The right-most separator is the decimal point
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned or "." in cleaned:
        sep = "," if "," in cleaned else "."
        parts = cleaned.split(sep)
        if len(parts) > 2 or len(parts[-1]) == 3:
            cleaned = "".join(parts)
        else:
            cleaned = ".".join(parts)

    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_optional_float(value: Any, field: str) -> Optional[float]:
    """
    Parse an optional numeric query parameter.

    Args:
        value: Raw value (None or empty string means "not supplied").
        field: Parameter name used in the error message.

    Returns:
        Float value or None.

    Raises:
        ValueError: If the value is present but not a non-negative number.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"{field} must be a number") from e
    if math.isnan(number) or number < 0:
        raise ValueError(f"{field} must be a non-negative number")
    return number


def parse_positive_int(value: Any, field: str, default: int) -> int:
    """
    Parse a positive integer query parameter.

    Args:
        value: Raw value; None or empty string yields the default.
        field: Parameter name used in the error message.
        default: Value used when nothing is supplied.

    Returns:
        Parsed integer (>= 1).

    Raises:
        ValueError: If the value is not a positive integer.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = int(str(value).strip())
    except ValueError as e:
        raise ValueError(f"{field} must be a positive integer") from e
    if number < 1:
        raise ValueError(f"{field} must be a positive integer")
    return number


def split_csv(value: Optional[str]) -> list[str]:
    """Split a comma-separated parameter, dropping blanks."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


CURRENCY_MARKERS = (
    ("zł", "PLN"),
    ("£", "GBP"),
    ("€", "EUR"),
    ("$", "USD"),
    ("Kč", "CZK"),
)


def detect_currency(price_text: Any, default: str = "EUR") -> str:
    """Guess the currency code from a display price; bare numbers get ``default``."""
    if price_text is None or isinstance(price_text, (int, float)):
        return default
    text = str(price_text)
    for marker, code in CURRENCY_MARKERS:
        if marker in text:
            return code
    return default
