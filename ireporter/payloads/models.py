"""Input and output types for the document encoder and payload assembler."""

from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass, field
from typing import Any, List, Literal, Mapping, Optional, Union

from ..core import InvalidPayloadError, validate_payload_type

PayloadType = Literal["xml", "xmlZip"]

Scalar = Union[str, int, float]


@dataclass
class SimpleClusterUpdate:
    """One cluster change in a partial update.

    ``approval_sign_image`` is a local path to a seal image. Only its basename
    is written to the XML; the file itself goes into the upload archive.
    """

    cluster_id: str
    value: str
    sheet_no: Optional[str] = None
    approver: Optional[str] = None
    approval_date: Optional[str] = None
    approver_comment: Optional[str] = None
    approval_sign_image: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SimpleClusterUpdate":
        """Build from a mapping using the server's camelCase field names."""

        def _opt(key: str) -> Optional[str]:
            value = data.get(key)
            return None if value is None else str(value)

        return cls(
            cluster_id=str(data["clusterId"]),
            value=str(data["value"]),
            sheet_no=_opt("sheetNo"),
            approver=_opt("approver"),
            approval_date=_opt("approvalDate"),
            approver_comment=_opt("approverComment"),
            approval_sign_image=_opt("approvalSignImage"),
        )


@dataclass
class ClusterData:
    cluster_id: Scalar
    value: Scalar
    sheet_no: Optional[Scalar] = None


@dataclass
class SheetData:
    sheet_no: Scalar
    clusters: List[ClusterData] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SheetData":
        return cls(
            sheet_no=data["sheetNo"],
            clusters=[
                ClusterData(
                    cluster_id=c["clusterId"],
                    value=c["value"],
                    sheet_no=c.get("sheetNo"),
                )
                for c in data.get("clusters", [])
            ],
        )


@dataclass
class NewDocument:
    """Contents of an AutoGenerate (document creation) request."""

    def_top_id: Scalar
    rep_top_name: Optional[str] = None
    create_user_id: Optional[str] = None
    create_role_mode: Optional[Scalar] = None
    system_key1: Optional[str] = None
    system_key2: Optional[str] = None
    system_key3: Optional[str] = None
    system_key4: Optional[str] = None
    system_key5: Optional[str] = None
    sheets: List[SheetData] = field(default_factory=list)


def _is_zip(content: bytes) -> bool:
    return zipfile.is_zipfile(io.BytesIO(content))


@dataclass(frozen=True)
class UpdatePayload:
    """The ``dataFile`` part of an UpdateReport or AutoGenerate request.

    ``type`` is the discriminator sent in the form. Construction fails when the
    content shape disagrees with it: ``xmlZip`` must be a zip archive and
    ``xml`` must not be one.
    """

    type: PayloadType
    content: bytes

    def __post_init__(self) -> None:
        validate_payload_type(self.type)
        if not self.content:
            raise InvalidPayloadError(self.type, "content is empty")
        is_zip = _is_zip(self.content)
        if self.type == "xmlZip" and not is_zip:
            raise InvalidPayloadError(self.type, "content is not a zip archive")
        if self.type == "xml" and is_zip:
            raise InvalidPayloadError(self.type, "content is a zip archive; use type 'xmlZip'")

    @classmethod
    def xml(cls, document: Union[str, bytes]) -> "UpdatePayload":
        if isinstance(document, str):
            document = document.encode("utf-8")
        return cls(type="xml", content=document)

    @classmethod
    def xml_zip(cls, archive: bytes) -> "UpdatePayload":
        return cls(type="xmlZip", content=archive)

    @property
    def is_archive(self) -> bool:
        return self.type == "xmlZip"

    @property
    def filename(self) -> str:
        return "upload.zip" if self.is_archive else "upload.xml"

    @property
    def content_type(self) -> str:
        return "application/zip" if self.is_archive else "text/xml"
