"""Tests for ireporter.payloads.assembler module."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path
from typing import Any
from unittest import mock

import pytest
import xmltodict

from ireporter.core import InvalidPayloadError, ValidationError
from ireporter.payloads import (
    IMPORT_XML_NAME,
    SimpleClusterUpdate,
    UpdatePayload,
    UpdatePayloadAssembler,
    build_import_archive,
    generate_partial_update_xml,
    generate_qr_png,
    needs_image,
)
from ireporter.responses import as_list

NOW = 1700000000000


def _archive(payload: UpdatePayload) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(payload.content)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


def _import_clusters(files: dict[str, bytes]) -> list[dict[str, Any]]:
    top = xmltodict.parse(files[IMPORT_XML_NAME])["conmas"]["top"]
    clusters: list[dict[str, Any]] = []
    for sheet in as_list(top["sheets"]["sheet"]):
        clusters.extend(as_list(sheet["clusters"]["cluster"]))
    return clusters


@pytest.fixture
def log() -> mock.Mock:
    return mock.Mock()


@pytest.fixture
def assembler(log: mock.Mock) -> UpdatePayloadAssembler:
    return UpdatePayloadAssembler(clock=lambda: NOW, logger=log)


class TestNeedsImage:
    """Tests for needs_image."""

    def test_approved_value(self):
        assert needs_image(SimpleClusterUpdate("1", "4")) is True

    def test_explicit_image(self):
        assert needs_image(SimpleClusterUpdate("1", "x", approval_sign_image="a.png")) is True

    def test_plain_value(self):
        assert needs_image(SimpleClusterUpdate("1", "3")) is False


class TestGenerateQrPng:
    """Tests for generate_qr_png."""

    def test_png_bytes(self):
        data = generate_qr_png("user01_53_1700000000000")
        assert data.startswith(b"\x89PNG\r\n\x1a\n")


class TestBuildImportArchive:
    """Tests for build_import_archive."""

    def test_images_then_import_xml(self):
        content = build_import_archive("<conmas/>", [("a.png", b"A"), ("b.png", b"B")])
        with zipfile.ZipFile(io.BytesIO(content)) as zf:
            assert zf.namelist() == ["a.png", "b.png", IMPORT_XML_NAME]
            assert zf.read(IMPORT_XML_NAME) == b"<conmas/>"

    def test_same_input_same_bytes(self):
        images = [("a.png", b"A")]
        assert build_import_archive("<x/>", images) == build_import_archive("<x/>", images)


class TestFromDataFile:
    """Tests for UpdatePayloadAssembler.from_data_file."""

    def test_xml_string(self, assembler: UpdatePayloadAssembler):
        payload = assembler.from_data_file("<conmas/>")
        assert payload.type == "xml"
        assert payload.content == b"<conmas/>"
        assert payload.filename == "upload.xml"
        assert payload.content_type == "text/xml"

    def test_zip_bytes(self, assembler: UpdatePayloadAssembler):
        archive = build_import_archive("<conmas/>", [])
        payload = assembler.from_data_file(archive, "xmlZip")
        assert payload.is_archive
        assert payload.content == archive
        assert payload.filename == "upload.zip"
        assert payload.content_type == "application/zip"

    def test_type_mismatch(self, assembler: UpdatePayloadAssembler):
        with pytest.raises(InvalidPayloadError):
            assembler.from_data_file("<conmas/>", "xmlZip")
        with pytest.raises(InvalidPayloadError):
            assembler.from_data_file(build_import_archive("<conmas/>", []), "xml")

    def test_empty_content(self, assembler: UpdatePayloadAssembler):
        with pytest.raises(InvalidPayloadError):
            assembler.from_data_file(b"")

    def test_unknown_type(self, assembler: UpdatePayloadAssembler):
        with pytest.raises(ValidationError):
            assembler.from_data_file("<conmas/>", "zip")


class TestAssembleXml:
    """Assemblies that stay plain XML."""

    def test_full_document(self, assembler: UpdatePayloadAssembler):
        detail = {"conmas": {"detailInfo": {"topId": "53", "topName": "A", "sheetCount": "1"}}}
        payload = assembler.assemble(detail)
        assert payload.type == "xml"
        assert b"<repTopId>53</repTopId>" in payload.content

    def test_full_document_ignores_approved_values(self, assembler: UpdatePayloadAssembler):
        detail = {
            "conmas": {
                "detailInfo": {
                    "topId": "53",
                    "clusters": {"cluster": {"sheetNo": "1", "clusterId": "369", "value": "4"}},
                }
            }
        }
        assert assembler.assemble(detail).type == "xml"

    def test_partial_without_images(self, assembler: UpdatePayloadAssembler):
        updates = [SimpleClusterUpdate("360", "hello"), SimpleClusterUpdate("361", "3")]
        payload = assembler.assemble(updates, top_id="53", update_user="user01")

        assert payload.type == "xml"
        assert payload.content == generate_partial_update_xml("53", updates, "user01").encode(
            "utf-8"
        )

    def test_partial_requires_top_id(self, assembler: UpdatePayloadAssembler):
        with pytest.raises(ValidationError):
            assembler.assemble([SimpleClusterUpdate("360", "x")])


class TestAssembleZip:
    """Assemblies that bundle seal images."""

    def test_approved_cluster_gets_qr_seal(self, assembler: UpdatePayloadAssembler):
        updates = [
            SimpleClusterUpdate("369", "4", approver="user01"),
            SimpleClusterUpdate("360", "hello"),
        ]
        payload = assembler.assemble(updates, top_id="53")

        assert payload.type == "xmlZip"
        files = _archive(payload)
        qr_name = f"qr_369_{NOW}.png"
        assert set(files) == {qr_name, IMPORT_XML_NAME}
        assert files[qr_name].startswith(b"\x89PNG")

        top = xmltodict.parse(files[IMPORT_XML_NAME])["conmas"]["top"]
        sheets = as_list(top["sheets"]["sheet"])
        assert len(sheets) == 1
        assert sheets[0]["sheetNo"] == "1"
        clusters = _import_clusters(files)
        assert [c["clusterId"] for c in clusters] == ["369", "360"]
        assert clusters[0]["approvalSignImage"] == qr_name
        assert "approvalSignImage" not in clusters[1]

    def test_caller_list_not_mutated(self, assembler: UpdatePayloadAssembler):
        updates = [SimpleClusterUpdate("369", "4", approver="user01")]
        assembler.assemble(updates, top_id="53")
        assert updates[0].approval_sign_image is None

    def test_qr_content(self, assembler: UpdatePayloadAssembler):
        with mock.patch(
            "ireporter.payloads.assembler.generate_qr_png", return_value=b"png"
        ) as qr:
            assembler.assemble(
                [
                    SimpleClusterUpdate("369", "4", approver="user01"),
                    SimpleClusterUpdate("370", "4"),
                ],
                top_id="53",
                update_user="admin",
            )

        contents = sorted(call.args[0] for call in qr.call_args_list)
        assert contents == [f"admin_53_{NOW}", f"user01_53_{NOW}"]

    def test_explicit_image_shipped(self, assembler: UpdatePayloadAssembler, tmp_path: Path):
        seal = tmp_path / "seals" / "user01.png"
        seal.parent.mkdir()
        seal.write_bytes(b"seal-bytes")

        with mock.patch("ireporter.payloads.assembler.generate_qr_png") as qr:
            payload = assembler.assemble(
                [SimpleClusterUpdate("369", "4", approval_sign_image=str(seal))],
                top_id="53",
            )
        qr.assert_not_called()

        files = _archive(payload)
        assert files["user01.png"] == b"seal-bytes"
        assert _import_clusters(files)[0]["approvalSignImage"] == "user01.png"

    def test_missing_image_warns(
        self, assembler: UpdatePayloadAssembler, log: mock.Mock, tmp_path: Path
    ):
        missing = tmp_path / "nope.png"
        payload = assembler.assemble(
            [SimpleClusterUpdate("360", "ok", approval_sign_image=str(missing))],
            top_id="53",
        )

        assert payload.type == "xmlZip"
        files = _archive(payload)
        assert set(files) == {IMPORT_XML_NAME}
        assert _import_clusters(files)[0]["approvalSignImage"] == "nope.png"
        log.warning.assert_called()
        assert str(missing) in log.warning.call_args[0]

    def test_duplicate_image_names_kept_once(
        self, assembler: UpdatePayloadAssembler, log: mock.Mock, tmp_path: Path
    ):
        seal = tmp_path / "seal.png"
        seal.write_bytes(b"S")
        payload = assembler.assemble(
            [
                SimpleClusterUpdate("1", "4", approval_sign_image=str(seal)),
                SimpleClusterUpdate("2", "4", approval_sign_image=str(seal)),
            ],
            top_id="53",
        )

        with zipfile.ZipFile(io.BytesIO(payload.content)) as zf:
            assert zf.namelist() == ["seal.png", IMPORT_XML_NAME]
        log.warning.assert_called_once()

    def test_qr_failure_skips_entry(self, assembler: UpdatePayloadAssembler, log: mock.Mock):
        with mock.patch(
            "ireporter.payloads.assembler.generate_qr_png", side_effect=RuntimeError("boom")
        ):
            payload = assembler.assemble([SimpleClusterUpdate("369", "4")], top_id="53")

        files = _archive(payload)
        assert set(files) == {IMPORT_XML_NAME}
        assert "approvalSignImage" not in _import_clusters(files)[0]
        log.error.assert_called_once()

    def test_deterministic_for_fixed_clock(self, assembler: UpdatePayloadAssembler):
        updates = [SimpleClusterUpdate("369", "4", approver="user01")]
        first = assembler.assemble(updates, top_id="53", top_name="A")
        second = assembler.assemble(updates, top_id="53", top_name="A")
        assert first == second
