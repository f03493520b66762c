"""Request payloads for the document-changing commands.

    encoder:   pure XML builders (create, full update, partial update)
    assembler: chooses plain XML or a zip with seal images for UpdateReport
    models:    input dataclasses and the UpdatePayload wire artifact
"""

from .assembler import (
    IMPORT_XML_NAME,
    UpdatePayloadAssembler,
    build_import_archive,
    generate_qr_png,
    needs_image,
)
from .encoder import (
    APPROVED_VALUE,
    IGNORE,
    build_create_document_xml,
    convert_document_to_xml,
    generate_partial_update_xml,
    image_basename,
)
from .models import (
    ClusterData,
    NewDocument,
    PayloadType,
    SheetData,
    SimpleClusterUpdate,
    UpdatePayload,
)

__all__ = [
    "APPROVED_VALUE",
    "IGNORE",
    "IMPORT_XML_NAME",
    "ClusterData",
    "NewDocument",
    "PayloadType",
    "SheetData",
    "SimpleClusterUpdate",
    "UpdatePayload",
    "UpdatePayloadAssembler",
    "build_create_document_xml",
    "build_import_archive",
    "convert_document_to_xml",
    "generate_partial_update_xml",
    "generate_qr_png",
    "image_basename",
    "needs_image",
]
