"""Master data lookups (GetMasterRecordList)."""

from __future__ import annotations

from typing import Optional, Union

from ..core import get_logger, validate_identifier
from ..responses import CommandResponse
from .base import IReporterConnection, add_param


class MasterService:
    """Service for reading master tables."""

    def __init__(self, connection: IReporterConnection) -> None:
        self.conn = connection
        self.log = get_logger(__name__)

    def get_master_record_list(
        self,
        master_id: Union[str, int],
        *,
        master_key: Optional[str] = None,
        record_id: Optional[str] = None,
        record_key: Optional[str] = None,
        field_search: Optional[str] = None,
    ) -> CommandResponse:
        """List records of a master table.

        Args:
            master_id: Master table id.
            master_key: Select the master by its key instead of the id.
            record_id: Return only this record.
            record_key: Return only the record with this key.
            field_search: Server-side field filter expression.
        """
        params = {"masterId": validate_identifier(master_id, "master_id")}
        add_param(params, "masterKey", master_key, skip_empty=True)
        add_param(params, "recordId", record_id, skip_empty=True)
        add_param(params, "recordKey", record_key, skip_empty=True)
        add_param(params, "fieldSearch", field_search, skip_empty=True)
        return self.conn.execute("GetMasterRecordList", params)
