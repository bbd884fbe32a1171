import logging
from typing import Any, Iterable, List, Optional

from ...core.config import settings
from ...schemas.attachment import FileDescriptor, decode_pdf_string

logger = logging.getLogger(__name__)


class NameMatcher:
    """
    Menge der akzeptierten Anhangsnamen (nie leer).
    Vergleicht exakt und case-sensitive mit den Namen einer Filespec (/F vor /UF).
    """

    def __init__(self, names: Iterable[str]):
        names = [name for name in names if name]
        if not names:
            raise ValueError("NameMatcher benötigt mindestens einen Anhangsnamen")
        self.names: List[str] = names

    @classmethod
    def from_name(cls, name: str) -> "NameMatcher":
        """Einzelner Name, explizit angegeben oder aus /Metadata abgeleitet."""
        return cls([name])

    @classmethod
    def from_default(cls) -> "NameMatcher":
        """Standardnamen (factur-x.xml, xrechnung.xml)."""
        return cls(settings.default_attachment_names)

    def matches(self, candidate: Any) -> bool:
        # Nicht dekodierbare Namen gelten als kein Treffer
        decoded = decode_pdf_string(candidate)
        if decoded is None:
            return False
        return any(decoded == name for name in self.names)

    def matching_name(self, descriptor: FileDescriptor) -> Optional[str]:
        """Liefert den ersten passenden Anzeigenamen der Filespec, /F bevorzugt."""
        for entry in descriptor.names:
            if self.matches(entry.raw):
                return entry.text
        return None

    @staticmethod
    def matching_suffix(descriptor: FileDescriptor, suffix: str) -> Optional[str]:
        """Liefert den ersten Anzeigenamen der Filespec mit der gegebenen Endung."""
        for entry in descriptor.names:
            text = entry.text
            if text is not None and text.endswith(suffix):
                return text
        return None

    def __str__(self) -> str:
        return " or ".join(f"'{name}'" for name in self.names)

    def __repr__(self) -> str:
        return f"NameMatcher({self.names!r})"
