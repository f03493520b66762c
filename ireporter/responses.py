"""Parsed ConMas API responses.

Every command answers with an XML document rooted at ``<conmas>``. The body is
converted to nested dicts with xmltodict and wrapped in a CommandResponse
subclass chosen by command. Commands without a dedicated class get the plain
CommandResponse (``kind == "opaque"``), so new server commands still parse.

Nodes that may repeat (clusters, items, ...) come back as a single dict when
there is exactly one of them; use ``as_list`` before iterating.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Type
from xml.parsers.expat import ExpatError

import xmltodict

from .core import ParseError


def as_list(value: Any) -> List[Any]:
    """Normalize an xmltodict node that may be absent, single or repeated."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


@dataclass(frozen=True)
class CommandResponse:
    """Response of any command, kept as an opaque mapping."""

    command: str
    data: Dict[str, Any]

    kind: ClassVar[str] = "opaque"

    @property
    def conmas(self) -> Dict[str, Any]:
        return self.data.get("conmas") or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a direct child of ``<conmas>``."""
        value = self.conmas.get(key)
        return default if value is None else value


@dataclass(frozen=True)
class LoginResponse(CommandResponse):
    kind: ClassVar[str] = "login"

    @property
    def result(self) -> Dict[str, Any]:
        return self.get("loginResult", {})

    @property
    def code(self) -> Optional[str]:
        code = self.result.get("code")
        return None if code is None else str(code)

    @property
    def remark(self) -> Optional[str]:
        return self.result.get("remark")

    @property
    def succeeded(self) -> bool:
        return self.code == "0"


@dataclass(frozen=True)
class DocumentDetailResponse(CommandResponse):
    """GetReportDetail response; ``data`` is the DocumentDetail mapping."""

    kind: ClassVar[str] = "document_detail"

    @property
    def detail_info(self) -> Dict[str, Any]:
        return self.get("detailInfo", {})

    @property
    def top_id(self) -> Optional[str]:
        return self.detail_info.get("topId")

    @property
    def top_name(self) -> Optional[str]:
        return self.detail_info.get("topName")

    @property
    def sheet_count(self) -> int:
        return int(self.detail_info.get("sheetCount") or 1)

    @property
    def clusters(self) -> List[Dict[str, Any]]:
        """Input clusters followed by approval clusters."""
        info = self.detail_info
        found: List[Dict[str, Any]] = []
        for group in ("clusters", "approval"):
            node = info.get(group) or {}
            found.extend(as_list(node.get("cluster")))
        return found


@dataclass(frozen=True)
class DefinitionListResponse(CommandResponse):
    kind: ClassVar[str] = "definition_list"

    @property
    def items(self) -> List[Dict[str, Any]]:
        node = self.get("items", {})
        return as_list(node.get("item"))


RESPONSE_TYPES: Dict[str, Type[CommandResponse]] = {
    "Login": LoginResponse,
    "GetReportDetail": DocumentDetailResponse,
    "GetDefinitionList": DefinitionListResponse,
}


def parse_response(command: str, text: str) -> CommandResponse:
    """Parse a response body for ``command``.

    Raises:
        ParseError: If the body is empty or not well-formed XML.
    """
    if not text or not text.strip():
        raise ParseError(command, "empty response body")
    try:
        parsed = xmltodict.parse(text)
    except ExpatError as e:
        raise ParseError(command, str(e)) from e

    response_cls = RESPONSE_TYPES.get(command, CommandResponse)
    return response_cls(command=command, data=dict(parsed))
