import logging

from ...core.errors import ErrorKind, ExtractionError
from ...schemas.attachment import MatchResult, NameField
from .interface import IPdfDocument

logger = logging.getLogger(__name__)


def select_reference(match: MatchResult):
    """Wählt die /EF Referenz der Filespec: /F bevorzugt, /UF nur als Ersatz."""
    descriptor = match.descriptor
    if not descriptor.has_embedded_files:
        raise ExtractionError(
            ErrorKind.DESCRIPTOR_INCOMPLETE,
            f"Missing /EF in filespec of {match.display_name}",
        )
    for field in (NameField.PLAIN, NameField.UNICODE):
        reference = descriptor.references.get(field)
        if reference is not None:
            return reference
    raise ExtractionError(
        ErrorKind.DESCRIPTOR_INCOMPLETE,
        f"Missing /F or /UF reference in /EF entry of {match.display_name}",
    )


def extract_stream_bytes(document: IPdfDocument, match: MatchResult) -> bytes:
    """Liest die Rohbytes des eingebetteten Anhangs, ohne sie zu interpretieren."""
    reference = select_reference(match)
    stream = document.resolve_reference(reference)
    data = document.read_stream_bytes(stream)
    logger.info(f"{len(data)} Bytes aus '{match.display_name}' gelesen")
    return data
