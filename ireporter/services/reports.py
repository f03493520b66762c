"""Read-only report commands: GetReportList and GetReportDetail."""

from __future__ import annotations

from typing import Union, cast

from ..core import get_logger, validate_identifier
from ..responses import CommandResponse, DocumentDetailResponse
from .base import IReporterConnection


class ReportService:
    """Service for listing reports and fetching report details."""

    def __init__(self, connection: IReporterConnection) -> None:
        self.conn = connection
        self.log = get_logger(__name__)

    def get_report_list(self) -> CommandResponse:
        """List the reports visible to the API user."""
        return self.conn.execute("GetReportList", {})

    def get_document_detail(self, top_id: Union[str, int]) -> DocumentDetailResponse:
        """Fetch one report with all of its clusters.

        The result can be edited and passed back to
        DocumentService.update_report for a full update.
        """
        top_id = validate_identifier(top_id, "top_id")
        response = self.conn.execute("GetReportDetail", {"topId": top_id})
        return cast(DocumentDetailResponse, response)
