"""Exception hierarchy for ireporter.

Every error raised by the library derives from IReporterError, so callers can
catch all of them with one except clause. Each error records the operation
(usually the wire command) that was running and a small details mapping.
"""

from __future__ import annotations

from typing import Any, Optional


class IReporterError(Exception):
    """Base exception for all ireporter errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context, rendered as key=value pairs.
        operation: Command or operation running when the error occurred.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        operation: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.operation = operation
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.operation:
            parts.insert(0, f"[{self.operation}]")
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            parts.append(f"({detail_str})")
        return " ".join(parts)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(IReporterError):
    """Configuration or credentials are missing or unusable."""

    pass


class MissingCredentialsError(ConfigurationError):
    """Neither a session nor login credentials are available."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Missing required credentials: {', '.join(missing)}",
            details={"missing": missing},
            operation="configuration",
        )


class InvalidConfigurationError(ConfigurationError):
    """A configuration value cannot be used."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid configuration for '{field}': {reason}",
            details={"field": field, "value": str(value)[:100]},
            operation="configuration",
        )


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(IReporterError):
    """Error establishing the server session."""

    pass


class AuthenticationError(SessionError):
    """Login was rejected or returned no session cookie."""

    def __init__(self, domain: str, reason: str = "Invalid credentials") -> None:
        self.domain = domain
        self.reason = reason
        super().__init__(
            f"Authentication failed: {reason}",
            details={"domain": domain},
            operation="Login",
        )


# =============================================================================
# Network Errors
# =============================================================================


class NetworkError(IReporterError):
    """Network-level failure talking to the server."""

    pass


class TransportError(NetworkError):
    """HTTP request for a command failed."""

    def __init__(self, command: str, cause: Optional[BaseException] = None) -> None:
        self.command = command
        self.cause = cause
        msg = "HTTP request failed"
        if cause:
            msg += f": {cause}"
        super().__init__(msg, operation=command)


# =============================================================================
# Response Errors
# =============================================================================


class ResponseError(IReporterError):
    """Server response could not be used."""

    pass


class ParseError(ResponseError):
    """Response body is not well-formed XML."""

    def __init__(self, command: str, reason: str) -> None:
        self.command = command
        self.reason = reason
        super().__init__(f"Failed to parse XML response: {reason}", operation=command)


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(IReporterError):
    """Input validation failed."""

    pass


class InvalidURLError(ValidationError):
    """Server domain is not a usable URL."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(
            f"Invalid URL '{url}': {reason}",
            details={"url": url[:200]},
            operation="validation",
        )


class InvalidPayloadError(ValidationError):
    """Update or create payload content does not match its declared type."""

    def __init__(self, payload_type: str, reason: str) -> None:
        self.payload_type = payload_type
        super().__init__(
            f"Invalid {payload_type} payload: {reason}",
            details={"type": payload_type},
            operation="validation",
        )
