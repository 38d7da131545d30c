"""Small scoring helpers shared by the analyzers."""

import math
import re
from urllib.parse import urlparse, urlunparse
from typing import Any, Callable, Iterable, List, Optional, TypeVar, Union

T = TypeVar("T")


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Args:
        value: Number to round

    Returns:
        Rounded integer
    """
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: int = 0, high: int = 100) -> int:
    """Round a raw score and clamp it into [low, high].

    Args:
        value: Raw score
        low: Lower bound (default: 0)
        high: Upper bound (default: 100)

    Returns:
        Integer score within bounds
    """
    return max(low, min(high, round_half_up(value)))


def with_default(value: Optional[T], default: Union[T, Callable[[], T]]) -> T:
    """Return value unless it is missing, otherwise the default.

    The default may be a zero-argument callable, evaluated only when needed.

    Args:
        value: Possibly missing value
        default: Fallback value or factory

    Returns:
        value or the fallback
    """
    if value is not None:
        return value
    if callable(default):
        return default()
    return default


def to_number(value: Any) -> Optional[float]:
    """Coerce an untyped value into a finite float.

    Accepts ints, floats and numeric strings. Booleans and anything
    non-finite are treated as missing.

    Args:
        value: Untyped value

    Returns:
        Float value, or None when the value is not numeric
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def to_text(value: Any, default: str = "") -> str:
    """Coerce an untyped value into stripped text with a default."""
    if value is None or value is False:
        return default
    text = str(value).strip()
    return text or default


def unique(items: Iterable[str]) -> List[str]:
    """Trim, drop empties and de-duplicate while keeping order."""
    seen = set()
    result = []
    for item in items:
        cleaned = (item or "").strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def normalize_url(value: str) -> str:
    """Validate a user-supplied URL, adding https:// when no scheme is given.

    Raises:
        ValueError: Empty input, unparseable URL or a non-HTTP(S) scheme
    """
    value = (value or "").strip()
    if not value:
        raise ValueError("URL is required.")

    if not re.match(r"^[a-z][a-z0-9+.-]*://", value, re.IGNORECASE):
        value = f"https://{value}"

    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https"):
        raise ValueError("Only HTTP and HTTPS URLs are supported.")
    if not parsed.netloc or " " in parsed.netloc:
        raise ValueError("Invalid URL format.")

    path = parsed.path or "/"
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path,
                       parsed.params, parsed.query, parsed.fragment))
