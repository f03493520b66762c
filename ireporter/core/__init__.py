"""Foundation modules: exceptions, logging and validation."""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    InvalidConfigurationError,
    InvalidPayloadError,
    InvalidURLError,
    IReporterError,
    MissingCredentialsError,
    NetworkError,
    ParseError,
    ResponseError,
    SessionError,
    TransportError,
    ValidationError,
)
from .logging import (
    AuditLogger,
    ContextFilter,
    JSONFormatter,
    LogContext,
    StandardFormatter,
    clear_correlation_id,
    generate_correlation_id,
    get_audit_logger,
    get_correlation_id,
    get_logger,
    log_operation,
    mask_sensitive,
    sanitize_for_log,
    set_correlation_id,
    setup_logging,
)
from .validation import (
    PAYLOAD_TYPES,
    validate_domain,
    validate_identifier,
    validate_payload_type,
    validate_timeout,
)

__all__ = [
    # Exceptions
    "IReporterError",
    "ConfigurationError",
    "MissingCredentialsError",
    "InvalidConfigurationError",
    "SessionError",
    "AuthenticationError",
    "NetworkError",
    "TransportError",
    "ResponseError",
    "ParseError",
    "ValidationError",
    "InvalidURLError",
    "InvalidPayloadError",
    # Logging
    "AuditLogger",
    "ContextFilter",
    "JSONFormatter",
    "LogContext",
    "StandardFormatter",
    "clear_correlation_id",
    "generate_correlation_id",
    "get_audit_logger",
    "get_correlation_id",
    "get_logger",
    "log_operation",
    "mask_sensitive",
    "sanitize_for_log",
    "set_correlation_id",
    "setup_logging",
    # Validation
    "PAYLOAD_TYPES",
    "validate_domain",
    "validate_identifier",
    "validate_payload_type",
    "validate_timeout",
]
