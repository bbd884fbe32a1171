"""
Pydantic Modelle für die Anhangsauflösung
Dateibeschreibungen (Filespecs), Name-Tree-Knoten und Auflösungsergebnisse
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Tuple, Union
from enum import Enum


class ResolutionPolicy(str, Enum):
    """Auflösungsmodus: STRICT erlaubt keine Fallbacks"""
    STRICT = "STRICT"
    LENIENT = "LENIENT"


class NameField(str, Enum):
    """Feld einer Filespec, aus dem Name oder Referenz stammt"""
    PLAIN = "/F"
    UNICODE = "/UF"


class Registry(str, Enum):
    """Verzeichnis, in dem ein Anhang gefunden wurde"""
    ASSOCIATED_FILES = "/AF"
    EMBEDDED_FILES = "/EmbeddedFiles"


class MatchPass(str, Enum):
    """Suchdurchlauf: exakter Name oder Dateiendung"""
    EXACT = "EXACT"
    SUFFIX = "SUFFIX"


def decode_pdf_string(value: Any) -> Optional[str]:
    """
    Dekodiert einen PDF-String als Text. pypdf liefert bereits dekodierbare Strings als str
    (TextStringObject); reine Byte-Strings werden als UTF-8 versucht, ansonsten None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return str(value)
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    return None


class DescriptorName(BaseModel):
    """Ein Anzeigename aus /F oder /UF einer Filespec"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    field: NameField
    raw: Any

    @property
    def text(self) -> Optional[str]:
        return decode_pdf_string(self.raw)


class FileDescriptor(BaseModel):
    """
    Filespec eines eingebetteten Anhangs.
    names ist in der Reihenfolge /F, /UF sortiert; references enthält die Einträge
    des /EF Dictionaries (noch nicht aufgelöst).
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    key: Optional[str] = None          # Schlüssel im Name Tree (nur /EmbeddedFiles)
    names: List[DescriptorName] = Field(default_factory=list)
    has_embedded_files: bool = False   # /EF vorhanden
    references: Dict[NameField, Any] = Field(default_factory=dict)

    def name(self, field: NameField) -> Optional[str]:
        for entry in self.names:
            if entry.field == field:
                return entry.text
        return None


class NameTreeLeaf(BaseModel):
    """Blattknoten: /Names [schlüssel1 filespec1 schlüssel2 filespec2 ...]"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    node_id: Optional[Tuple[int, int]] = None
    pairs: List[Tuple[Optional[str], Any]] = Field(default_factory=list)


class NameTreeInterior(BaseModel):
    """Innerer Knoten: /Kids [...] mit Verweisen auf weitere Teilbäume"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    node_id: Optional[Tuple[int, int]] = None
    kids: List[Any] = Field(default_factory=list)


NameTreeNode = Union[NameTreeLeaf, NameTreeInterior]


class MatchResult(BaseModel):
    """Gefundener Anhang (Anzeigename + Filespec) eines Suchdurchlaufs"""
    display_name: str
    descriptor: FileDescriptor
    registry: Registry
    pass_kind: MatchPass


class ResolvedPayload(BaseModel):
    """Ergebnis der Pipeline: Rohbytes des Anhangs"""
    data: bytes
    match: MatchResult
    candidate_names: List[str]

    @property
    def size(self) -> int:
        return len(self.data)
