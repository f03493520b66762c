"""XML documents for the AutoGenerate and UpdateReport commands.

All functions are pure: they take Python values and return the XML text the
server imports. The shape is always::

    <conmas>
      <top>
        ...top-level fields...
        <sheets>
          <sheet>
            <sheetNo>1</sheetNo>
            <clusters>
              <cluster>...</cluster>
            </clusters>
          </sheet>
        </sheets>
      </top>
    </conmas>

In update requests a top-level value of ``(ignore)`` tells the server to keep
the stored value.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import xmltodict

from ..core import ValidationError
from ..responses import DocumentDetailResponse, as_list
from .models import NewDocument, SimpleClusterUpdate

IGNORE = "(ignore)"

# Cluster value meaning "approved"; such clusters need a seal image
APPROVED_VALUE = "4"

REMARKS_COUNT = 10

_PATH_SEPARATORS = re.compile(r"[\\/]")

DocumentDetail = Union[Mapping[str, Any], DocumentDetailResponse]


def image_basename(path: str) -> str:
    """Return the last segment of a local path, splitting on ``/`` and ``\\``."""
    return _PATH_SEPARATORS.split(path)[-1]


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _or_ignore(value: Any) -> str:
    return IGNORE if value is None else _text(value)


def _system_key5(top_id: str, top_name: Optional[Any]) -> str:
    return IGNORE if top_name is None else f"{top_id}_{top_name}"


def _render(top: Dict[str, Any]) -> str:
    return xmltodict.unparse(
        {"conmas": {"top": top}},
        encoding="utf-8",
        pretty=True,
        indent="  ",
        newl="\n",
    )


def _sheet_node(sheet_no: str, clusters: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"sheetNo": sheet_no, "clusters": {"cluster": clusters}}


# =============================================================================
# AutoGenerate
# =============================================================================


def build_create_document_xml(document: NewDocument) -> str:
    """Build the import XML for creating a document from a definition.

    Optional header fields are left out when unset. A cluster without its own
    sheet number takes the number of the sheet it is listed under.
    """
    top: Dict[str, Any] = {"defTopId": _text(document.def_top_id)}
    optional = (
        ("repTopName", document.rep_top_name),
        ("createUserId", document.create_user_id),
        ("createRoleMode", document.create_role_mode),
        ("systemKey1", document.system_key1),
        ("systemKey2", document.system_key2),
        ("systemKey3", document.system_key3),
        ("systemKey4", document.system_key4),
        ("systemKey5", document.system_key5),
    )
    for tag, value in optional:
        if value is not None:
            top[tag] = _text(value)

    sheets = []
    for sheet in document.sheets:
        clusters = [
            {
                "sheetNo": _text(
                    sheet.sheet_no if cluster.sheet_no in (None, "") else cluster.sheet_no
                ),
                "clusterId": _text(cluster.cluster_id),
                "value": _text(cluster.value),
            }
            for cluster in sheet.clusters
        ]
        sheets.append(_sheet_node(_text(sheet.sheet_no), clusters))
    if sheets:
        top["sheets"] = {"sheet": sheets}

    return _render(top)


# =============================================================================
# UpdateReport: full document
# =============================================================================


def _detail_info(document: DocumentDetail) -> Mapping[str, Any]:
    data = document.data if isinstance(document, DocumentDetailResponse) else document
    info = (data.get("conmas") or {}).get("detailInfo")
    if not info:
        raise ValidationError(
            "Document detail has no conmas.detailInfo node", operation="UpdateReport"
        )
    return info


def _collect_clusters(info: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    clusters: List[Mapping[str, Any]] = []
    for group in ("clusters", "approval"):
        node = info.get(group) or {}
        clusters.extend(as_list(node.get("cluster")))
    return clusters


def convert_document_to_xml(document: DocumentDetail) -> str:
    """Build a full-update XML from a fetched GetReportDetail document.

    Top-level fields missing from the source become ``(ignore)``, except
    ``repTopId`` (the source topId), ``editStatus`` (defaults to ``1``) and
    ``systemKey5`` (recomputed as ``{topId}_{topName}``). Clusters and
    approval clusters are regrouped into sheets ``1..sheetCount``.

    Raises:
        ValidationError: If the document has no detailInfo or topId.
    """
    info = _detail_info(document)
    top_id = info.get("topId")
    if top_id is None or not str(top_id).strip():
        raise ValidationError("Document detail has no topId", operation="UpdateReport")
    top_id = _text(top_id)

    top: Dict[str, Any] = {
        "repTopId": top_id,
        "editStatus": _text(info.get("editStatus") or "1"),
        "repTopName": _or_ignore(info.get("topName")),
        # UpdateReport reads the updating user from createUserId
        "createUserId": _or_ignore(info.get("updateUser")),
    }
    for n in range(1, 5):
        top[f"systemKey{n}"] = _or_ignore(info.get(f"systemKey{n}"))
    top["systemKey5"] = _system_key5(top_id, info.get("topName"))
    for n in range(1, REMARKS_COUNT + 1):
        top[f"remarksValue{n}"] = _or_ignore(info.get(f"remarksValue{n}"))

    all_clusters = _collect_clusters(info)
    sheet_count = int(info.get("sheetCount") or 1)

    sheets = []
    for number in range(1, sheet_count + 1):
        sheet_no = str(number)
        clusters = [
            {
                "sheetNo": sheet_no,
                "clusterId": _text(c.get("clusterId")),
                "value": "" if c.get("value") is None else _text(c.get("value")),
            }
            for c in all_clusters
            if c.get("sheetNo") is not None and _text(c.get("sheetNo")) == sheet_no
        ]
        sheets.append(_sheet_node(sheet_no, clusters))
    top["sheets"] = {"sheet": sheets}

    return _render(top)


# =============================================================================
# UpdateReport: partial update
# =============================================================================


def _group_by_sheet(
    updates: Iterable[SimpleClusterUpdate],
) -> Dict[str, List[SimpleClusterUpdate]]:
    groups: Dict[str, List[SimpleClusterUpdate]] = {}
    for update in updates:
        groups.setdefault(update.sheet_no or "1", []).append(update)
    return groups


def _cluster_node(sheet_no: str, update: SimpleClusterUpdate) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "sheetNo": sheet_no,
        "clusterId": _text(update.cluster_id),
        "value": _text(update.value),
    }
    approval = (
        ("approver", update.approver),
        ("approvalDate", update.approval_date),
        ("approverComment", update.approver_comment),
    )
    for tag, value in approval:
        if value is not None:
            node[tag] = value
    if update.approval_sign_image:
        node["approvalSignImage"] = image_basename(update.approval_sign_image)
    return node


def generate_partial_update_xml(
    top_id: str,
    updates: Sequence[SimpleClusterUpdate],
    update_user: Optional[str] = None,
    top_name: Optional[str] = None,
) -> str:
    """Build an update XML that changes only the given clusters.

    Every top-level field is ``(ignore)`` except ``repTopId``, ``editStatus``
    (``1``), ``createUserId`` (``update_user`` when given) and ``systemKey5``
    (``{top_id}_{top_name}`` when ``top_name`` is given). Updates are grouped
    by sheet (default ``1``) keeping their order.
    """
    top_id = _text(top_id)
    top: Dict[str, Any] = {
        "repTopId": top_id,
        "editStatus": "1",
        "repTopName": IGNORE,
        "createUserId": update_user or IGNORE,
    }
    for n in range(1, 5):
        top[f"systemKey{n}"] = IGNORE
    top["systemKey5"] = _system_key5(top_id, top_name or None)
    for n in range(1, REMARKS_COUNT + 1):
        top[f"remarksValue{n}"] = IGNORE

    sheets = [
        _sheet_node(sheet_no, [_cluster_node(sheet_no, u) for u in group])
        for sheet_no, group in _group_by_sheet(updates).items()
    ]
    top["sheets"] = {"sheet": sheets}

    return _render(top)
