"""IReporterClient - one object for every ConMas API command.

The client wires an IReporterConnection to the four services and exposes
their methods under the names applications use. Code that only needs one
command group can use the services directly.

Usage:
    from ireporter import IReporterClient, load_config

    client = IReporterClient.from_config(load_config())
    detail = client.get_document_detail("369")

    # Modular style
    from ireporter.services import IReporterConnection, ReportService

    conn = IReporterConnection.from_config(cfg)
    ReportService(conn).get_report_list()
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .config import IReporterConfig
from .core import get_logger
from .payloads import NewDocument, UpdatePayloadAssembler
from .payloads.assembler import UpdateInput
from .responses import CommandResponse, DefinitionListResponse, DocumentDetailResponse
from .services import (
    DefinitionService,
    DocumentService,
    IReporterConnection,
    MasterService,
    ReportService,
)


class IReporterClient:
    """Client for the iReporter (ConMas) document management API.

    Every call opens its own session: login, the command, then logout.
    """

    def __init__(
        self,
        domain: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        *,
        session_id: Optional[str] = None,
        verify_tls: bool = True,
        http_timeouts: tuple[Optional[float], Optional[float]] = (None, None),
        assembler: Optional[UpdatePayloadAssembler] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """Create a new client.

        Args:
            domain: Server base URL.
            username: API login user.
            password: API login password.
            session_id: Existing ``ASP.NET_SessionId=...`` cookie.
            verify_tls: Whether to verify TLS certificates.
            http_timeouts: (connect_timeout, read_timeout) in seconds; None
                leaves the transport default.
            assembler: Optional UpdateReport payload assembler.
            logger: Optional logger instance.
        """
        self.log = logger or get_logger(__name__)

        self._conn = IReporterConnection(
            domain,
            username,
            password,
            session_id=session_id,
            verify_tls=verify_tls,
            connect_timeout=http_timeouts[0],
            read_timeout=http_timeouts[1],
            logger=self.log,
        )

        self._reports = ReportService(self._conn)
        self._documents = DocumentService(self._conn, assembler=assembler)
        self._masters = MasterService(self._conn)
        self._definitions = DefinitionService(self._conn)

    @classmethod
    def from_config(cls, cfg: IReporterConfig) -> "IReporterClient":
        """Create a client from load_config() output."""
        return cls(
            domain=cfg["domain"],
            username=cfg.get("username") or None,
            password=cfg.get("password") or None,
            verify_tls=cfg.get("verify_tls", True),
            http_timeouts=(
                cfg.get("http_connect_timeout"),
                cfg.get("http_read_timeout"),
            ),
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def connection(self) -> IReporterConnection:
        return self._conn

    @property
    def domain(self) -> str:
        return self._conn.domain

    @property
    def session_id(self) -> Optional[str]:
        """Session cookie currently held, if any."""
        return self._conn.session_id

    # =========================================================================
    # Session
    # =========================================================================

    def login(self) -> None:
        self._conn.login()

    def logout(self) -> None:
        self._conn.logout()

    def __enter__(self) -> "IReporterClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self._conn.close()

    # =========================================================================
    # Commands
    # =========================================================================

    def get_report_list(self) -> CommandResponse:
        return self._reports.get_report_list()

    def get_document_detail(self, top_id: Union[str, int]) -> DocumentDetailResponse:
        return self._reports.get_document_detail(top_id)

    def get_master_record_list(self, master_id: Union[str, int], **filters: Any) -> CommandResponse:
        """See MasterService.get_master_record_list for the filters."""
        return self._masters.get_master_record_list(master_id, **filters)

    def get_form_list(self, **filters: Any) -> DefinitionListResponse:
        """See DefinitionService.get_form_list for the filters."""
        return self._definitions.get_form_list(**filters)

    def create_document(
        self, document: Optional[NewDocument] = None, **options: Any
    ) -> CommandResponse:
        """See DocumentService.create_document for the options."""
        return self._documents.create_document(document, **options)

    def update_report(
        self, document: Optional[UpdateInput] = None, **options: Any
    ) -> CommandResponse:
        """See DocumentService.update_report for the options."""
        return self._documents.update_report(document, **options)
