"""Document-changing commands: AutoGenerate (create) and UpdateReport.

Both commands upload a ``dataFile`` as multipart/form-data. The file is either
caller-supplied content or built here from Python values (see
ireporter.payloads).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from ..core import (
    IReporterError,
    ValidationError,
    get_audit_logger,
    get_logger,
    validate_payload_type,
)
from ..payloads import (
    NewDocument,
    UpdatePayload,
    UpdatePayloadAssembler,
    build_create_document_xml,
    build_import_archive,
)
from ..payloads.assembler import UpdateInput, is_document_detail
from ..responses import CommandResponse, DocumentDetailResponse
from .base import IReporterConnection, add_param

DEFAULT_ENCODING = "UTF-8"


def _files(payload: UpdatePayload) -> dict[str, Any]:
    return {"dataFile": (payload.filename, payload.content, payload.content_type)}


class DocumentService:
    """Service for creating and updating report documents.

    Args:
        connection: iReporter connection instance.
        assembler: Optional payload assembler (e.g., with a fixed clock).
    """

    def __init__(
        self,
        connection: IReporterConnection,
        *,
        assembler: Optional[UpdatePayloadAssembler] = None,
    ) -> None:
        self.conn = connection
        self.log = get_logger(__name__)
        self._audit = get_audit_logger()
        self.assembler = assembler or UpdatePayloadAssembler()

    def _run(
        self,
        command: str,
        params: Mapping[str, str],
        payload: UpdatePayload,
        *,
        audit: dict[str, Any],
    ) -> CommandResponse:
        self.log.info(
            "Uploading %s (%s, %d bytes)", command, payload.type, len(payload.content)
        )
        try:
            response = self.conn.execute(command, params, files=_files(payload))
        except IReporterError as e:
            self._audit.log_operation(
                command,
                user=self.conn.username,
                details={"type": payload.type},
                success=False,
                error=str(e),
                **audit,
            )
            raise

        self._audit.log_operation(
            command,
            user=self.conn.username,
            details={"type": payload.type, "bytes": len(payload.content)},
            success=True,
            **audit,
        )
        return response

    # =========================================================================
    # AutoGenerate
    # =========================================================================

    def create_document(
        self,
        document: Optional[NewDocument] = None,
        *,
        payload_type: str = "xml",
        data_file: Optional[Union[str, bytes]] = None,
        encoding: str = DEFAULT_ENCODING,
        user_mode: Optional[int] = None,
    ) -> CommandResponse:
        """Create a report from a form definition.

        Args:
            document: Definition id, header fields and initial cluster values.
            payload_type: ``xml`` or ``xmlZip``. With ``xmlZip`` and no
                ``data_file`` the generated XML is zipped as ``import.xml``.
            data_file: Ready-made XML or zip content; sent unchanged.
            encoding: Character encoding of the data file.
            user_mode: 0 to create as the API user, 1 as ``create_user_id``.

        Raises:
            ValidationError: If neither ``document`` nor ``data_file`` is given.
        """
        payload_type = validate_payload_type(payload_type)
        self.conn.require_credentials()

        if data_file is not None:
            payload = self.assembler.from_data_file(data_file, payload_type)
        elif document is not None:
            xml = build_create_document_xml(document)
            if payload_type == "xmlZip":
                payload = UpdatePayload.xml_zip(build_import_archive(xml, []))
            else:
                payload = UpdatePayload.xml(xml)
        else:
            raise ValidationError(
                "Data file content is required (either data_file or document)",
                operation="AutoGenerate",
            )

        params: dict[str, str] = {"type": payload.type, "encoding": encoding}
        add_param(params, "userMode", user_mode)

        def_top_id = None if document is None else str(document.def_top_id)
        return self._run("AutoGenerate", params, payload, audit={"def_top_id": def_top_id})

    # =========================================================================
    # UpdateReport
    # =========================================================================

    def build_update_payload(
        self,
        document: Optional[UpdateInput] = None,
        *,
        data_file: Optional[Union[str, bytes]] = None,
        payload_type: Optional[str] = None,
        top_id: Optional[str] = None,
        top_name: Optional[str] = None,
        update_user: Optional[str] = None,
    ) -> UpdatePayload:
        """Resolve the ``dataFile`` for UpdateReport without sending it.

        Raises:
            ValidationError: If there is nothing to send, if cluster updates
                lack ``top_id``, or if a derived update asks for a type other
                than ``xml``.
        """
        if data_file is not None:
            return self.assembler.from_data_file(data_file, payload_type or "xml")

        if document is None:
            raise ValidationError(
                "Data file content is required (either data_file or document)",
                operation="UpdateReport",
            )

        if payload_type not in (None, "xml"):
            raise ValidationError(
                f"Unsupported update type: {payload_type}. Only 'xml' can be derived "
                "from a document; the zip form is chosen automatically.",
                operation="UpdateReport",
            )

        return self.assembler.assemble(
            document, top_id=top_id, top_name=top_name, update_user=update_user
        )

    def update_report(
        self,
        document: Optional[UpdateInput] = None,
        *,
        data_file: Optional[Union[str, bytes]] = None,
        payload_type: Optional[str] = None,
        top_id: Optional[str] = None,
        top_name: Optional[str] = None,
        update_user: Optional[str] = None,
        encoding: str = DEFAULT_ENCODING,
        mode: int = 0,
        is_cabon_copy: Optional[int] = None,
        is_compulsive: Optional[int] = None,
        thumbnail_update: Optional[int] = None,
        user_mode: Optional[int] = None,
        label_mode: Optional[int] = None,
    ) -> CommandResponse:
        """Update an existing report.

        ``document`` is either a fetched GetReportDetail document (full
        update) or a list of SimpleClusterUpdate (partial update, needs
        ``top_id``). Approved clusters without a seal image get a generated
        QR seal and the upload switches to a zip.

        Args:
            document: Full document or cluster updates.
            data_file: Ready-made XML or zip content; sent unchanged.
            payload_type: Type of ``data_file`` (``xml`` or ``xmlZip``).
            top_id: Report id, required for cluster updates.
            top_name: Report name; sets systemKey5 to ``{top_id}_{top_name}``.
            update_user: User recorded as the updater.
            encoding: Character encoding of the data file.
            mode: 0 for a normal update, 1 to force it.
            is_cabon_copy: Server ``isCabonCopy`` flag.
            is_compulsive: Server ``isCompulsive`` flag.
            thumbnail_update: Server ``thumbnailUpdate`` flag.
            user_mode: Server ``userMode`` flag.
            label_mode: 1 removes all labels.
        """
        self.conn.require_credentials()

        payload = self.build_update_payload(
            document,
            data_file=data_file,
            payload_type=payload_type,
            top_id=top_id,
            top_name=top_name,
            update_user=update_user,
        )

        params: dict[str, str] = {
            "type": payload.type,
            "encoding": encoding,
            "mode": str(mode),
        }
        add_param(params, "updateUser", update_user, skip_empty=True)
        add_param(params, "isCabonCopy", is_cabon_copy)
        add_param(params, "isCompulsive", is_compulsive)
        add_param(params, "thumbnailUpdate", thumbnail_update)
        add_param(params, "userMode", user_mode)
        add_param(params, "labelMode", label_mode)

        report_id = top_id
        if report_id is None and document is not None and is_document_detail(document):
            report_id = _document_top_id(document)

        return self._run("UpdateReport", params, payload, audit={"top_id": report_id})


def _document_top_id(document: Any) -> Optional[str]:
    if not isinstance(document, DocumentDetailResponse):
        document = DocumentDetailResponse(command="GetReportDetail", data=dict(document))
    top_id = document.top_id
    return None if top_id is None else str(top_id)
