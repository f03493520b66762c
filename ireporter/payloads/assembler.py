"""Turn update input into the ``dataFile`` sent with UpdateReport.

A full DocumentDetail always becomes plain XML. A list of SimpleClusterUpdate
becomes plain XML unless some entry needs an image:

- an entry with ``approval_sign_image`` set ships that local file, or
- an approved entry (value ``4``) without an image gets a generated QR seal.

In that case images and the regenerated XML (``import.xml``) are packed into a
zip and the payload type becomes ``xmlZip``.
"""

from __future__ import annotations

import dataclasses
import io
import logging
import time
import zipfile
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple, Union

import qrcode

from ..core import ValidationError, get_logger, validate_identifier, validate_payload_type
from ..responses import DocumentDetailResponse
from .encoder import (
    APPROVED_VALUE,
    convert_document_to_xml,
    generate_partial_update_xml,
    image_basename,
)
from .models import SimpleClusterUpdate, UpdatePayload

IMPORT_XML_NAME = "import.xml"

DEFAULT_IMAGE_WORKERS = 4

ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)

UpdateInput = Union[Mapping[str, Any], DocumentDetailResponse, Sequence[SimpleClusterUpdate]]

# (archive name, file bytes)
ArchiveEntry = Tuple[str, bytes]


def current_millis() -> int:
    return time.time_ns() // 1_000_000


def needs_image(update: SimpleClusterUpdate) -> bool:
    """True when the entry brings a seal image or needs a generated QR seal."""
    return bool(update.approval_sign_image) or update.value == APPROVED_VALUE


def generate_qr_png(content: str) -> bytes:
    """Render ``content`` as a QR code PNG."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(content)
    qr.make(fit=True)

    buffer = io.BytesIO()
    qr.make_image(fill_color="black", back_color="white").save(buffer)
    return buffer.getvalue()


def _entry_info(name: str) -> zipfile.ZipInfo:
    # Fixed timestamp so the same input always yields the same archive bytes
    info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
    info.compress_type = zipfile.ZIP_DEFLATED
    return info


def build_import_archive(xml: str, images: Sequence[ArchiveEntry]) -> bytes:
    """Zip the images and ``import.xml`` in memory."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in images:
            zf.writestr(_entry_info(name), data)
        zf.writestr(_entry_info(IMPORT_XML_NAME), xml.encode("utf-8"))
    return buffer.getvalue()


def is_document_detail(document: Any) -> bool:
    return isinstance(document, (Mapping, DocumentDetailResponse))


class UpdatePayloadAssembler:
    """Builds UpdatePayload objects for UpdateReport.

    Args:
        clock: Returns the current time in epoch milliseconds. Used for QR
            content and file names; pass a fixed clock for repeatable output.
        max_workers: Threads used to read images and render QR codes.
        logger: Optional logger instance.
    """

    def __init__(
        self,
        *,
        clock: Optional[Callable[[], int]] = None,
        max_workers: int = DEFAULT_IMAGE_WORKERS,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.clock = clock or current_millis
        self.max_workers = max(1, max_workers)
        self.log = logger or get_logger(__name__)

    def from_data_file(
        self, data_file: Union[str, bytes], payload_type: str = "xml"
    ) -> UpdatePayload:
        """Wrap caller-supplied content without touching it."""
        payload_type = validate_payload_type(payload_type)
        content = data_file.encode("utf-8") if isinstance(data_file, str) else data_file
        return UpdatePayload(type=payload_type, content=content)  # type: ignore[arg-type]

    def assemble(
        self,
        document: UpdateInput,
        *,
        top_id: Optional[str] = None,
        top_name: Optional[str] = None,
        update_user: Optional[str] = None,
    ) -> UpdatePayload:
        """Build the payload for a full document or a list of cluster updates.

        Raises:
            ValidationError: If cluster updates are given without ``top_id``.
        """
        if is_document_detail(document):
            return UpdatePayload.xml(convert_document_to_xml(document))  # type: ignore[arg-type]

        if not top_id:
            raise ValidationError(
                "top_id is required when updating with cluster updates",
                operation="UpdateReport",
            )
        top_id = validate_identifier(top_id, "top_id")

        # Work on copies; QR file names are assigned to these, not the caller's objects
        updates = [dataclasses.replace(u) for u in document]  # type: ignore[union-attr]
        xml = generate_partial_update_xml(top_id, updates, update_user, top_name)

        pending = [u for u in updates if needs_image(u)]
        if not pending:
            return UpdatePayload.xml(xml)

        self.log.info("Bundling %d seal image(s) for report %s", len(pending), top_id)

        def _prepare(update: SimpleClusterUpdate) -> Optional[ArchiveEntry]:
            if update.approval_sign_image:
                return self._read_image(update.approval_sign_image)
            return self._make_qr(update, top_id=top_id, update_user=update_user)

        worker_count = min(self.max_workers, len(pending))
        with ThreadPoolExecutor(max_workers=worker_count) as ex:
            results = list(ex.map(_prepare, pending))

        images: List[ArchiveEntry] = []
        seen: set[str] = set()
        for entry in results:
            if entry is None:
                continue
            if entry[0] in seen:
                self.log.warning("Duplicate image name %s; keeping the first", entry[0])
                continue
            seen.add(entry[0])
            images.append(entry)

        # Second pass: generated QR names only exist now
        xml = generate_partial_update_xml(top_id, updates, update_user, top_name)
        return UpdatePayload.xml_zip(build_import_archive(xml, images))

    # =========================================================================
    # Per-entry image work
    # =========================================================================

    def _read_image(self, path_str: str) -> Optional[ArchiveEntry]:
        name = image_basename(path_str)
        path = Path(path_str)
        if not path.is_file():
            self.log.warning("Image file not found: %s", path_str)
            return None
        try:
            data = path.read_bytes()
        except OSError as e:
            self.log.error("Failed to read image file %s: %s", path_str, e)
            return None
        self.log.debug("Read image %s (%d bytes)", name, len(data))
        return (name, data)

    def _make_qr(
        self,
        update: SimpleClusterUpdate,
        *,
        top_id: str,
        update_user: Optional[str],
    ) -> Optional[ArchiveEntry]:
        ts = self.clock()
        user = update.approver or update_user or "unknown"
        content = f"{user}_{top_id or 'unknown'}_{ts}"
        file_name = f"qr_{update.cluster_id}_{ts}.png"
        try:
            data = generate_qr_png(content)
        except Exception as e:
            self.log.error("Failed to generate QR code for cluster %s: %s", update.cluster_id, e)
            return None
        update.approval_sign_image = file_name
        self.log.debug("Generated QR seal %s", file_name)
        return (file_name, data)
