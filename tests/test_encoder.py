"""Tests for ireporter.payloads.encoder module."""

from __future__ import annotations

from typing import Any

import pytest
import xmltodict

from ireporter.core import ValidationError
from ireporter.payloads import (
    IGNORE,
    ClusterData,
    NewDocument,
    SheetData,
    SimpleClusterUpdate,
    build_create_document_xml,
    convert_document_to_xml,
    generate_partial_update_xml,
    image_basename,
)
from ireporter.responses import DocumentDetailResponse, as_list


def _top(xml: str) -> dict[str, Any]:
    return xmltodict.parse(xml)["conmas"]["top"]


def _sheets(top: dict[str, Any]) -> list[dict[str, Any]]:
    return as_list(top["sheets"]["sheet"])


def _clusters(sheet: dict[str, Any]) -> list[dict[str, Any]]:
    node = sheet.get("clusters") or {}
    return as_list(node.get("cluster"))


def _detail(**info: Any) -> dict[str, Any]:
    return {"conmas": {"detailInfo": info}}


class TestImageBasename:
    """Tests for image_basename."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("seal.png", "seal.png"),
            ("/tmp/seals/seal.png", "seal.png"),
            ("C:\\seals\\user01.png", "user01.png"),
            ("mixed/dir\\seal.png", "seal.png"),
        ],
    )
    def test_last_segment(self, path: str, expected: str):
        assert image_basename(path) == expected


class TestBuildCreateDocumentXml:
    """Tests for build_create_document_xml."""

    def test_header_fields(self):
        doc = NewDocument(
            def_top_id=12,
            rep_top_name="Daily check",
            create_user_id="user01",
            create_role_mode=1,
            system_key1="line-A",
            system_key5="k5",
        )
        top = _top(build_create_document_xml(doc))

        assert top["defTopId"] == "12"
        assert top["repTopName"] == "Daily check"
        assert top["createUserId"] == "user01"
        assert top["createRoleMode"] == "1"
        assert top["systemKey1"] == "line-A"
        assert top["systemKey5"] == "k5"

    def test_unset_fields_omitted(self):
        top = _top(build_create_document_xml(NewDocument(def_top_id="12")))
        assert list(top) == ["defTopId"]

    def test_cluster_sheet_number_inherited(self):
        doc = NewDocument(
            def_top_id="12",
            sheets=[
                SheetData(
                    sheet_no=1,
                    clusters=[
                        ClusterData(cluster_id=0, value="abc"),
                        ClusterData(cluster_id=1, value=42, sheet_no=2),
                    ],
                )
            ],
        )
        sheets = _sheets(_top(build_create_document_xml(doc)))

        assert len(sheets) == 1
        assert sheets[0]["sheetNo"] == "1"
        clusters = _clusters(sheets[0])
        assert clusters[0] == {"sheetNo": "1", "clusterId": "0", "value": "abc"}
        assert clusters[1] == {"sheetNo": "2", "clusterId": "1", "value": "42"}

    def test_sheets_from_mapping(self):
        sheet = SheetData.from_mapping(
            {"sheetNo": 3, "clusters": [{"clusterId": 5, "value": "x"}]}
        )
        doc = NewDocument(def_top_id="12", sheets=[sheet])
        clusters = _clusters(_sheets(_top(build_create_document_xml(doc)))[0])
        assert clusters == [{"sheetNo": "3", "clusterId": "5", "value": "x"}]


class TestConvertDocumentToXml:
    """Tests for convert_document_to_xml (full update)."""

    @pytest.fixture
    def detail(self) -> dict[str, Any]:
        return _detail(
            topId="53",
            topName="Report A",
            updateUser="user02",
            systemKey1="sk1",
            remarksValue3="note",
            sheetCount="2",
            clusters={
                "cluster": [
                    {"sheetNo": "1", "clusterId": "0", "value": "a"},
                    {"sheetNo": "2", "clusterId": "1", "value": None},
                    {"sheetNo": "1", "clusterId": "2", "value": "c"},
                ]
            },
            approval={"cluster": {"sheetNo": "2", "clusterId": "9", "value": "4"}},
        )

    def test_top_fields(self, detail: dict[str, Any]):
        top = _top(convert_document_to_xml(detail))

        assert top["repTopId"] == "53"
        assert top["editStatus"] == "1"
        assert top["repTopName"] == "Report A"
        assert top["createUserId"] == "user02"
        assert top["systemKey1"] == "sk1"
        assert top["systemKey2"] == IGNORE
        assert top["systemKey5"] == "53_Report A"
        assert top["remarksValue3"] == "note"
        assert top["remarksValue1"] == IGNORE
        assert top["remarksValue10"] == IGNORE

    def test_field_order(self, detail: dict[str, Any]):
        keys = list(_top(convert_document_to_xml(detail)))
        assert keys[:4] == ["repTopId", "editStatus", "repTopName", "createUserId"]
        assert keys[4:9] == [f"systemKey{n}" for n in range(1, 6)]
        assert keys[9:19] == [f"remarksValue{n}" for n in range(1, 11)]
        assert keys[-1] == "sheets"

    def test_sheets_regrouped(self, detail: dict[str, Any]):
        sheets = _sheets(_top(convert_document_to_xml(detail)))

        assert [s["sheetNo"] for s in sheets] == ["1", "2"]
        assert [c["clusterId"] for c in _clusters(sheets[0])] == ["0", "2"]
        assert [c["clusterId"] for c in _clusters(sheets[1])] == ["1", "9"]
        for sheet in sheets:
            assert all(c["sheetNo"] == sheet["sheetNo"] for c in _clusters(sheet))

    def test_missing_value_is_empty(self, detail: dict[str, Any]):
        xml = convert_document_to_xml(detail)
        sheet2 = _sheets(_top(xml))[1]
        assert _clusters(sheet2)[0]["value"] is None
        assert "None" not in xml

    def test_empty_sheets_still_emitted(self):
        detail = _detail(topId="7", topName="T", sheetCount="3")
        sheets = _sheets(_top(convert_document_to_xml(detail)))
        assert [s["sheetNo"] for s in sheets] == ["1", "2", "3"]
        assert all(_clusters(s) == [] for s in sheets)

    def test_defaults(self):
        top = _top(convert_document_to_xml(_detail(topId="7")))
        assert top["editStatus"] == "1"
        assert top["repTopName"] == IGNORE
        assert top["createUserId"] == IGNORE
        assert top["systemKey5"] == IGNORE
        assert len(_sheets(top)) == 1

    def test_explicit_edit_status(self):
        top = _top(convert_document_to_xml(_detail(topId="7", editStatus="2")))
        assert top["editStatus"] == "2"

    def test_accepts_response_object(self, detail: dict[str, Any]):
        response = DocumentDetailResponse(command="GetReportDetail", data=detail)
        assert convert_document_to_xml(response) == convert_document_to_xml(detail)

    def test_missing_detail_info(self):
        with pytest.raises(ValidationError):
            convert_document_to_xml({"conmas": {}})

    def test_missing_top_id(self):
        with pytest.raises(ValidationError):
            convert_document_to_xml(_detail(topName="no id"))

    def test_deterministic(self, detail: dict[str, Any]):
        assert convert_document_to_xml(detail) == convert_document_to_xml(detail)


class TestGeneratePartialUpdateXml:
    """Tests for generate_partial_update_xml."""

    def test_everything_ignored_except_identity(self):
        top = _top(generate_partial_update_xml("53", [SimpleClusterUpdate("360", "hello")]))

        assert top["repTopId"] == "53"
        assert top["editStatus"] == "1"
        assert top["repTopName"] == IGNORE
        assert top["createUserId"] == IGNORE
        for n in range(1, 6):
            assert top[f"systemKey{n}"] == IGNORE
        for n in range(1, 11):
            assert top[f"remarksValue{n}"] == IGNORE

    def test_update_user_and_top_name(self):
        top = _top(
            generate_partial_update_xml(
                "53", [SimpleClusterUpdate("360", "x")], update_user="user01", top_name="Report A"
            )
        )
        assert top["createUserId"] == "user01"
        assert top["systemKey5"] == "53_Report A"

    def test_grouped_by_sheet_in_order(self):
        updates = [
            SimpleClusterUpdate("10", "a", sheet_no="2"),
            SimpleClusterUpdate("11", "b"),
            SimpleClusterUpdate("12", "c", sheet_no="2"),
            SimpleClusterUpdate("13", "d", sheet_no="1"),
        ]
        sheets = _sheets(_top(generate_partial_update_xml("53", updates)))

        assert [s["sheetNo"] for s in sheets] == ["2", "1"]
        assert [c["clusterId"] for c in _clusters(sheets[0])] == ["10", "12"]
        assert [c["clusterId"] for c in _clusters(sheets[1])] == ["11", "13"]
        assert all(c["sheetNo"] == "1" for c in _clusters(sheets[1]))

    def test_approval_fields(self):
        update = SimpleClusterUpdate(
            "369",
            "4",
            approver="user01",
            approval_date="2024/01/31 10:00:00",
            approver_comment="ok",
            approval_sign_image="C:\\seals\\user01.png",
        )
        cluster = _clusters(_sheets(_top(generate_partial_update_xml("53", [update])))[0])[0]

        assert cluster == {
            "sheetNo": "1",
            "clusterId": "369",
            "value": "4",
            "approver": "user01",
            "approvalDate": "2024/01/31 10:00:00",
            "approverComment": "ok",
            "approvalSignImage": "user01.png",
        }

    def test_unset_approval_fields_omitted(self):
        cluster = _clusters(
            _sheets(_top(generate_partial_update_xml("53", [SimpleClusterUpdate("360", "v")])))[0]
        )[0]
        assert set(cluster) == {"sheetNo", "clusterId", "value"}

    def test_from_mapping(self):
        update = SimpleClusterUpdate.from_mapping(
            {"clusterId": 369, "value": 4, "sheetNo": 2, "approver": "user01"}
        )
        assert update == SimpleClusterUpdate("369", "4", sheet_no="2", approver="user01")

    def test_deterministic(self):
        updates = [SimpleClusterUpdate("1", "a"), SimpleClusterUpdate("2", "b", sheet_no="3")]
        assert generate_partial_update_xml("53", updates) == generate_partial_update_xml(
            "53", updates
        )
