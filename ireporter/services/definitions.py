"""Form definition listing (GetDefinitionList)."""

from __future__ import annotations

from typing import Optional, Union, cast

from ..core import get_logger
from ..responses import DefinitionListResponse
from .base import IReporterConnection, add_param


class DefinitionService:
    """Service for browsing form definitions (labels, sheets, sets, books)."""

    def __init__(self, connection: IReporterConnection) -> None:
        self.conn = connection
        self.log = get_logger(__name__)

    def get_form_list(
        self,
        *,
        label_id: Optional[Union[str, int]] = None,
        item_target_label: Optional[bool] = None,
        item_target_sheet: Optional[bool] = None,
        item_target_set: Optional[bool] = None,
        item_target_book: Optional[bool] = None,
        public_status: Optional[int] = None,
        word: Optional[str] = None,
        word_target_name: Optional[bool] = None,
        word_target_remarks: Optional[bool] = None,
        history: Optional[bool] = None,
        system_key1: Optional[str] = None,
        system_key2: Optional[str] = None,
        system_key3: Optional[str] = None,
        system_key4: Optional[str] = None,
        system_key5: Optional[str] = None,
        uri_scheme_mode: Optional[int] = None,
    ) -> DefinitionListResponse:
        """List form definitions.

        Only the filters that are given are sent; the server applies its own
        defaults for the rest (all labels, all item kinds, all publish states).

        Args:
            label_id: Label to list (-9 for all).
            item_target_label: Include labels.
            item_target_sheet: Include sheet definitions.
            item_target_set: Include set definitions.
            item_target_book: Include book definitions.
            public_status: 1 for test, 2 for published.
            word: Search word.
            word_target_name: Match ``word`` against names.
            word_target_remarks: Match ``word`` against remarks.
            history: Include past revisions.
            system_key1..system_key5: Filter by system keys.
            uri_scheme_mode: -1 for no auth in URL schemes, 2 to include login auth.
        """
        params: dict[str, str] = {}
        add_param(params, "labelId", label_id)
        add_param(params, "itemTargetLabel", item_target_label)
        add_param(params, "itemTargetSheet", item_target_sheet)
        add_param(params, "itemTargetSet", item_target_set)
        add_param(params, "itemTargetBook", item_target_book)
        add_param(params, "publicStatus", public_status)
        add_param(params, "word", word, skip_empty=True)
        add_param(params, "wordTargetName", word_target_name)
        add_param(params, "wordTargetRemarks", word_target_remarks)
        add_param(params, "History", history)
        add_param(params, "systemKey1", system_key1, skip_empty=True)
        add_param(params, "systemKey2", system_key2, skip_empty=True)
        add_param(params, "systemKey3", system_key3, skip_empty=True)
        add_param(params, "systemKey4", system_key4, skip_empty=True)
        add_param(params, "systemKey5", system_key5, skip_empty=True)
        add_param(params, "uriSchemeMode", uri_scheme_mode)

        self.log.debug("GetDefinitionList filters: %s", sorted(params))
        return cast(DefinitionListResponse, self.conn.execute("GetDefinitionList", params))
