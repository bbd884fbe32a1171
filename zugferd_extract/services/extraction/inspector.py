import logging
from typing import List

from ...core.errors import ExtractionError
from ...schemas.attachment import FileDescriptor, NameField
from ...schemas.report import AttachmentEntry, DocumentReport, RegistryReport
from .embedded_files import iter_descriptors
from .metadata_util import extract_name_from_metadata
from .pdf_util import PypdfDocument

logger = logging.getLogger(__name__)


def _entry(descriptor: FileDescriptor) -> AttachmentEntry:
    return AttachmentEntry(
        key=descriptor.key,
        plain_name=descriptor.name(NameField.PLAIN),
        unicode_name=descriptor.name(NameField.UNICODE),
        has_embedded_files=descriptor.has_embedded_files,
        reference_fields=[field.value for field in descriptor.references],
    )


def _entries(descriptors) -> List[AttachmentEntry]:
    return [_entry(descriptor) for descriptor in descriptors]


def inspect_document(document: PypdfDocument) -> DocumentReport:
    """
    Sammelt /Metadata, /AF und /EmbeddedFiles in einem Bericht.
    Fehler einzelner Quellen werden im Bericht vermerkt statt ausgelöst.
    """
    # /Root muss lesbar sein, sonst ist der Bericht wertlos
    document.get_root_catalog()

    report = DocumentReport(
        source=document.source,
        pdf_header=document.reader.pdf_header,
        encrypted=document.reader.is_encrypted,
        associated_files=RegistryReport(present=False),
        embedded_files=RegistryReport(present=False),
    )

    try:
        report.metadata_name = extract_name_from_metadata(document.get_metadata_stream_text())
    except ExtractionError as e:
        report.metadata_error = f"{e.kind.value}: {e.message}"

    try:
        descriptors = document.get_associated_files_list()
        if descriptors is not None:
            report.associated_files = RegistryReport(present=True, entries=_entries(descriptors))
    except ExtractionError as e:
        report.associated_files = RegistryReport(present=True, error=f"{e.kind.value}: {e.message}")

    try:
        tree = document.get_embedded_files_name_tree()
        if tree is not None:
            report.embedded_files = RegistryReport(present=True, entries=_entries(iter_descriptors(document, tree)))
    except ExtractionError as e:
        report.embedded_files = RegistryReport(present=True, error=f"{e.kind.value}: {e.message}")

    logger.debug(f"Strukturbericht für {document.source} erstellt")
    return report
