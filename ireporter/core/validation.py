"""Input validation for ireporter.

Each validator returns the normalized value or raises a ValidationError or
ConfigurationError subclass from ireporter.core.exceptions.
"""

from __future__ import annotations

from typing import Any, Optional, Union
from urllib.parse import urlparse

from .exceptions import (
    InvalidConfigurationError,
    InvalidURLError,
    ValidationError,
)

# =============================================================================
# Constants
# =============================================================================

ALLOWED_URL_SCHEMES = {"http", "https"}

# Payload discriminators accepted by UpdateReport and AutoGenerate
PAYLOAD_TYPES = ("xml", "xmlZip")


# =============================================================================
# URL Validation
# =============================================================================


def validate_domain(url: str) -> str:
    """Validate the iReporter server base URL.

    Args:
        url: Server URL such as ``https://ireporter.example.com/``.

    Returns:
        The URL with surrounding whitespace and trailing slashes removed.

    Raises:
        InvalidURLError: If the URL is empty, has no host, or is not http(s).
    """
    if not url or not isinstance(url, str) or not url.strip():
        raise InvalidURLError(str(url), "URL cannot be empty")

    url = url.strip()
    parsed = urlparse(url)

    if not parsed.scheme:
        raise InvalidURLError(url, "URL must include scheme (http:// or https://)")

    if parsed.scheme.lower() not in ALLOWED_URL_SCHEMES:
        raise InvalidURLError(
            url,
            f"Unsupported scheme '{parsed.scheme}'. Use http or https.",
        )

    if not parsed.netloc:
        raise InvalidURLError(url, "URL must include hostname")

    return url.rstrip("/")


# =============================================================================
# Identifier Validation
# =============================================================================


def validate_identifier(value: Any, field_name: str) -> str:
    """Validate a server identifier (topId, defTopId, masterId, ...).

    Integers are accepted and converted, since the server treats ids as text.

    Raises:
        ValidationError: If the value is missing or blank.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required", operation="validation")
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{field_name} cannot be empty", operation="validation")
    return text


def validate_payload_type(payload_type: str) -> str:
    """Validate an UpdateReport/AutoGenerate ``type`` value."""
    if payload_type not in PAYLOAD_TYPES:
        raise ValidationError(
            f"Unsupported payload type '{payload_type}'. Use one of: {', '.join(PAYLOAD_TYPES)}",
            details={"type": payload_type},
            operation="validation",
        )
    return payload_type


# =============================================================================
# Timeout Validation
# =============================================================================


def validate_timeout(
    timeout: Union[int, float, str, None],
    field_name: str = "timeout",
) -> Optional[float]:
    """Validate an HTTP timeout in seconds.

    ``None`` means the transport default (no timeout) and is returned as is.

    Raises:
        InvalidConfigurationError: If the value is not a positive number.
    """
    if timeout is None:
        return None

    try:
        value = float(timeout)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(field_name, timeout, "must be a number") from e

    if value <= 0:
        raise InvalidConfigurationError(field_name, timeout, "must be positive")

    return value
