"""
Fehler-Taxonomie für die Anhangsextraktion
Jede Fehlerart hat einen stabilen Exit-Code, damit aufrufende Skripte nach Ursache verzweigen können.
"""

import enum
from typing import Optional


class ErrorKind(str, enum.Enum):
    """Klassifizierte Fehlerarten, gruppiert nach Pipeline-Phase"""
    # I/O
    INPUT_UNREADABLE = "INPUT_UNREADABLE"
    OUTPUT_UNWRITABLE = "OUTPUT_UNWRITABLE"
    # /Metadata
    METADATA_MISSING = "METADATA_MISSING"
    METADATA_UNREADABLE = "METADATA_UNREADABLE"
    METADATA_UNDECODABLE = "METADATA_UNDECODABLE"
    METADATA_DESCRIPTION_MISSING = "METADATA_DESCRIPTION_MISSING"
    METADATA_FILENAME_MISSING = "METADATA_FILENAME_MISSING"
    # /AF und /EmbeddedFiles
    REGISTRY_MISSING = "REGISTRY_MISSING"
    NO_MATCH = "NO_MATCH"
    REGISTRY_MALFORMED = "REGISTRY_MALFORMED"
    # Extraktion des Dateiinhalts
    DESCRIPTOR_INCOMPLETE = "DESCRIPTOR_INCOMPLETE"
    STREAM_RESOLUTION_FAILED = "STREAM_RESOLUTION_FAILED"
    STREAM_DECODE_FAILED = "STREAM_DECODE_FAILED"


# Exit-Codes:
#  1-9 : Datei-I/O (2 ist für argparse Usage-Fehler reserviert)
# 10-19: /Metadata
# 20-29: /AF Array und /EmbeddedFiles Name Tree
# 30-39: Auslesen des Dateiinhalts
EXIT_CODES = {
    ErrorKind.INPUT_UNREADABLE: 1,
    ErrorKind.OUTPUT_UNWRITABLE: 3,
    ErrorKind.METADATA_MISSING: 10,
    ErrorKind.METADATA_UNREADABLE: 11,
    ErrorKind.METADATA_UNDECODABLE: 12,
    ErrorKind.METADATA_DESCRIPTION_MISSING: 13,
    ErrorKind.METADATA_FILENAME_MISSING: 14,
    ErrorKind.REGISTRY_MISSING: 20,
    ErrorKind.NO_MATCH: 21,
    ErrorKind.REGISTRY_MALFORMED: 22,
    ErrorKind.DESCRIPTOR_INCOMPLETE: 30,
    ErrorKind.STREAM_RESOLUTION_FAILED: 31,
    ErrorKind.STREAM_DECODE_FAILED: 32,
}

METADATA_KINDS = frozenset({
    ErrorKind.METADATA_MISSING,
    ErrorKind.METADATA_UNREADABLE,
    ErrorKind.METADATA_UNDECODABLE,
    ErrorKind.METADATA_DESCRIPTION_MISSING,
    ErrorKind.METADATA_FILENAME_MISSING,
})

# Im Lenient-Modus werden nur diese Fehler in einen Fallback umgewandelt
REGISTRY_FALLBACK_KINDS = frozenset({
    ErrorKind.REGISTRY_MISSING,
    ErrorKind.NO_MATCH,
})


def is_recoverable(kind: ErrorKind) -> bool:
    """Prüft, ob der Lenient-Modus diesen Fehler durch einen Fallback ersetzen darf."""
    return kind in METADATA_KINDS or kind in REGISTRY_FALLBACK_KINDS


class ExtractionError(Exception):
    """Klassifizierter Fehler der Extraktions-Pipeline (Art + lesbare Meldung)."""

    def __init__(self, kind: ErrorKind, message: str, registry: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        # Betroffene Registry (z.B. "/AF" oder "/EmbeddedFiles"), falls zutreffend
        self.registry = registry

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.kind]

    @property
    def recoverable(self) -> bool:
        return is_recoverable(self.kind)

    def __repr__(self) -> str:
        return f"ExtractionError({self.kind.value}, {self.message!r})"
