"""ireporter - Python client for the iReporter (ConMas) document management API.

The package covers the ConMas XML API: session handling, report listing and
details, master data, form definitions, and creating or updating documents
(including seal images bundled into zip uploads).

Architecture:
    ireporter/
    ├── core/           # Foundation modules (exceptions, logging, validation)
    ├── payloads/       # XML encoder and UpdateReport payload assembler
    ├── services/       # IReporterConnection and per-command-group services
    ├── commands/       # CLI command parsers and handlers
    ├── responses.py    # Parsed response types
    ├── client.py       # Facade over all services (IReporterClient)
    └── config.py       # Configuration loading
"""

__version__ = "0.1.0"
__description__ = "Client library and CLI for the iReporter ConMas API"

from .client import IReporterClient
from .config import IReporterConfig, load_config
from .core import (
    AuthenticationError,
    ConfigurationError,
    InvalidPayloadError,
    IReporterError,
    LogContext,
    MissingCredentialsError,
    NetworkError,
    ParseError,
    ResponseError,
    SessionError,
    TransportError,
    ValidationError,
    get_audit_logger,
    get_logger,
    setup_logging,
)
from .payloads import (
    ClusterData,
    NewDocument,
    SheetData,
    SimpleClusterUpdate,
    UpdatePayload,
    UpdatePayloadAssembler,
    build_create_document_xml,
    convert_document_to_xml,
    generate_partial_update_xml,
)
from .responses import (
    CommandResponse,
    DefinitionListResponse,
    DocumentDetailResponse,
    LoginResponse,
    parse_response,
)
from .services import (
    DefinitionService,
    DocumentService,
    IReporterConnection,
    MasterService,
    ReportService,
)

__all__ = [
    "__version__",
    # Configuration
    "IReporterConfig",
    "load_config",
    # Client
    "IReporterClient",
    # Services
    "IReporterConnection",
    "ReportService",
    "DocumentService",
    "MasterService",
    "DefinitionService",
    # Payloads
    "ClusterData",
    "NewDocument",
    "SheetData",
    "SimpleClusterUpdate",
    "UpdatePayload",
    "UpdatePayloadAssembler",
    "build_create_document_xml",
    "convert_document_to_xml",
    "generate_partial_update_xml",
    # Responses
    "CommandResponse",
    "DefinitionListResponse",
    "DocumentDetailResponse",
    "LoginResponse",
    "parse_response",
    # Exceptions
    "IReporterError",
    "ConfigurationError",
    "MissingCredentialsError",
    "SessionError",
    "AuthenticationError",
    "NetworkError",
    "TransportError",
    "ResponseError",
    "ParseError",
    "ValidationError",
    "InvalidPayloadError",
    # Logging
    "setup_logging",
    "get_logger",
    "LogContext",
    "get_audit_logger",
]
