from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ...schemas.attachment import FileDescriptor, NameTreeNode


class IPdfDocument(ABC):
    """
    Interface Definition für den Zugriff auf den aufgelösten PDF-Objektgraphen.
    Die Implementierung übernimmt Parsing, xref-Auflösung, Caching und Stream-Filter;
    die Extraktions-Pipeline liest ausschließlich über dieses Interface.
    """

    @abstractmethod
    def get_root_catalog(self) -> Any:
        """Liefert das /Root Katalog-Dictionary."""
        pass

    @abstractmethod
    def get_metadata_stream_text(self) -> str:
        """Liefert den Inhalt des /Metadata Streams (XMP) als Text."""
        pass

    @abstractmethod
    def get_associated_files_list(self) -> Optional[List[FileDescriptor]]:
        """Liefert die Filespecs des /AF Arrays oder None, falls es fehlt."""
        pass

    @abstractmethod
    def get_embedded_files_name_tree(self) -> Optional[NameTreeNode]:
        """Liefert den Wurzelknoten des /EmbeddedFiles Name Trees oder None."""
        pass

    @abstractmethod
    def read_name_tree_node(self, reference: Any) -> NameTreeNode:
        """Löst einen Kindknoten (/Kids Eintrag) des Name Trees auf."""
        pass

    @abstractmethod
    def read_file_descriptor(self, value: Any, key: Optional[str] = None) -> FileDescriptor:
        """Wandelt einen Filespec-Wert aus einem Name Tree Blatt in einen FileDescriptor."""
        pass

    @abstractmethod
    def resolve_reference(self, reference: Any) -> Any:
        """Löst eine /EF Referenz in ein Stream-Objekt auf."""
        pass

    @abstractmethod
    def read_stream_bytes(self, stream: Any) -> bytes:
        """Liest den vollständig dekodierten Inhalt eines Streams."""
        pass
