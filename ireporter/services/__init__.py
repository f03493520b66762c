"""iReporter services module.

Each service wraps one group of ConMas API commands and shares a single
IReporterConnection, which owns the session and the HTTP transport.

Services:
    IReporterConnection: Endpoint, login/logout and command execution
    ReportService: GetReportList, GetReportDetail
    DocumentService: AutoGenerate, UpdateReport
    MasterService: GetMasterRecordList
    DefinitionService: GetDefinitionList

Usage:
    from ireporter.services import IReporterConnection, ReportService

    conn = IReporterConnection.from_config(cfg)
    reports = ReportService(conn)
    detail = reports.get_document_detail("369")
"""

from .base import IReporterConnection
from .definitions import DefinitionService
from .documents import DocumentService
from .masters import MasterService
from .reports import ReportService

__all__ = [
    "IReporterConnection",
    "ReportService",
    "DocumentService",
    "MasterService",
    "DefinitionService",
]
