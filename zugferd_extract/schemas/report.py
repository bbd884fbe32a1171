"""
Pydantic Modelle für den Strukturbericht (--inspect)
Zeigt, welche der drei Quellen ein PDF anbietet und was sie enthalten
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class AttachmentEntry(BaseModel):
    """Eine Filespec aus /AF oder /EmbeddedFiles"""
    key: Optional[str] = None            # Schlüssel im Name Tree
    plain_name: Optional[str] = None     # /F
    unicode_name: Optional[str] = None   # /UF
    has_embedded_files: bool = False     # /EF vorhanden
    reference_fields: List[str] = Field(default_factory=list)  # z.B. ["/F", "/UF"]


class RegistryReport(BaseModel):
    """Inhalt einer Registry oder der Grund, warum sie nicht lesbar ist"""
    present: bool
    entries: List[AttachmentEntry] = Field(default_factory=list)
    error: Optional[str] = None


class DocumentReport(BaseModel):
    """Strukturbericht für ein PDF"""
    source: str
    pdf_header: Optional[str] = None
    encrypted: bool = False
    metadata_name: Optional[str] = None
    metadata_error: Optional[str] = None
    associated_files: RegistryReport
    embedded_files: RegistryReport
