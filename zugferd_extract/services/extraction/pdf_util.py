import io
import logging
import zlib
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from pypdf import PasswordType, PdfReader
from pypdf.errors import DependencyError, PyPdfError
from pypdf.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NullObject,
    StreamObject,
)

from ...core.config import settings
from ...core.errors import ErrorKind, ExtractionError
from ...schemas.attachment import (
    DescriptorName,
    FileDescriptor,
    NameField,
    NameTreeInterior,
    NameTreeLeaf,
    NameTreeNode,
    Registry,
    decode_pdf_string,
)
from .interface import IPdfDocument

logger = logging.getLogger(__name__)


def _node_id(value: Any) -> Optional[Tuple[int, int]]:
    ref = value if isinstance(value, IndirectObject) else getattr(value, "indirect_reference", None)
    if isinstance(ref, IndirectObject):
        return ref.idnum, ref.generation
    return None


def _resolve(value: Any) -> Any:
    """Löst indirekte Objekte auf; fehlende Objekte werden zu None."""
    if isinstance(value, IndirectObject):
        value = value.get_object()
    if value is None or isinstance(value, NullObject):
        return None
    return value


def _present(value: Any) -> bool:
    # Ein direktes null ist gleichbedeutend mit einem fehlenden Eintrag
    return value is not None and not isinstance(value, NullObject)


class PypdfDocument(IPdfDocument):
    """
    Adapter für pypdf. Kapselt einen PdfReader für genau eine Extraktion.
    """

    def __init__(self, reader: PdfReader, source: str = "<bytes>"):
        self.reader = reader
        self.source = source

    @classmethod
    def open(cls, path: Union[str, Path]) -> "PypdfDocument":
        """Öffnet eine PDF-Datei vom Dateisystem."""
        try:
            with open(path, "rb") as f:
                pdf_bytes = f.read()
        except OSError as e:
            raise ExtractionError(ErrorKind.INPUT_UNREADABLE, f"Failed to open {path}: {e}")
        return cls.from_bytes(pdf_bytes, source=str(path))

    @classmethod
    def from_bytes(cls, pdf_bytes: bytes, source: str = "<bytes>") -> "PypdfDocument":
        # Schneller Check auf PDF-Header
        if not pdf_bytes.lstrip().startswith(b"%PDF-"):
            raise ExtractionError(ErrorKind.INPUT_UNREADABLE, f"Failed to open {source}: not a PDF file")

        try:
            reader = PdfReader(io.BytesIO(pdf_bytes), strict=settings.strict_pdf_parsing)
            # Verschlüsselte Dateien werden nur mit leerem Passwort unterstützt
            if reader.is_encrypted and reader.decrypt("") == PasswordType.NOT_DECRYPTED:
                raise ExtractionError(
                    ErrorKind.INPUT_UNREADABLE,
                    f"Failed to open {source}: document is encrypted with a non-empty password",
                )
        except (PyPdfError, ValueError) as e:
            # Fängt beschädigte oder ungültige PDFs ab
            raise ExtractionError(ErrorKind.INPUT_UNREADABLE, f"Failed to open {source}: {e}")

        logger.debug(f"{source} geöffnet (PDF {reader.pdf_header}, verschlüsselt: {reader.is_encrypted})")
        return cls(reader, source=source)

    def get_root_catalog(self) -> DictionaryObject:
        try:
            root = self.reader.root_object
        except (PyPdfError, ValueError) as e:
            raise ExtractionError(ErrorKind.INPUT_UNREADABLE, f"Failed to read /Root of {self.source}: {e}")
        if not isinstance(root, DictionaryObject) or len(root) == 0:
            raise ExtractionError(ErrorKind.INPUT_UNREADABLE, f"No usable /Root catalog in {self.source}")
        return root

    def get_metadata_stream_text(self) -> str:
        root = self.get_root_catalog()
        metadata_ref = root.get("/Metadata")
        if metadata_ref is None:
            raise ExtractionError(ErrorKind.METADATA_MISSING, "No /Metadata found!")

        try:
            metadata_stream = _resolve(metadata_ref)
        except (PyPdfError, ValueError) as e:
            raise ExtractionError(ErrorKind.METADATA_UNREADABLE, f"Failed to resolve /Metadata stream ref with: {e}")
        if not isinstance(metadata_stream, StreamObject):
            raise ExtractionError(ErrorKind.METADATA_UNREADABLE, "Failed to resolve /Metadata stream ref: not a stream")

        try:
            metadata_bytes = metadata_stream.get_data()
        except (PyPdfError, DependencyError, ValueError, NotImplementedError, zlib.error) as e:
            raise ExtractionError(ErrorKind.METADATA_UNREADABLE, f"Failed to get /Metadata stream data: {e}")

        try:
            return metadata_bytes.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ExtractionError(
                ErrorKind.METADATA_UNDECODABLE,
                f"Failed to decode /Metadata stream as a valid utf8 string: {e}",
            )

    def _resolve_in_registry(self, value: Any, registry: Registry) -> Any:
        """Löst ein Objekt innerhalb von /AF oder /EmbeddedFiles auf; Lesefehler gelten als defekte Registry."""
        try:
            return _resolve(value)
        except (PyPdfError, ValueError) as e:
            raise ExtractionError(
                ErrorKind.REGISTRY_MALFORMED,
                f"Failed to resolve {registry.value} entry {value!r} with: {e}",
                registry=registry.value,
            )

    def get_associated_files_list(self) -> Optional[List[FileDescriptor]]:
        root = self.get_root_catalog()
        if "/AF" not in root:
            return None

        af_array = self._resolve_in_registry(root.get("/AF"), Registry.ASSOCIATED_FILES)
        if not isinstance(af_array, ArrayObject):
            # Unbrauchbares /AF wird wie ein fehlendes behandelt, damit der Fallback greifen kann
            logger.warning(f"/AF in {self.source} ist kein Array ({type(af_array).__name__}), wird ignoriert.")
            return None

        descriptors = []
        for entry in af_array:
            file_spec = self._resolve_in_registry(entry, Registry.ASSOCIATED_FILES)
            if not isinstance(file_spec, DictionaryObject):
                logger.warning(f"Eintrag im /AF Array ist keine Filespec: {entry!r}. Überspringe.")
                continue
            descriptors.append(self._build_descriptor(file_spec))
        return descriptors

    def get_embedded_files_name_tree(self) -> Optional[NameTreeNode]:
        root = self.get_root_catalog()
        names = self._resolve_in_registry(root.get("/Names"), Registry.EMBEDDED_FILES)
        if not isinstance(names, DictionaryObject):
            return None
        if names.get("/EmbeddedFiles") is None:
            return None
        return self.read_name_tree_node(names.get("/EmbeddedFiles"))

    def read_name_tree_node(self, reference: Any) -> NameTreeNode:
        try:
            node = _resolve(reference)
        except (PyPdfError, ValueError) as e:
            raise ExtractionError(
                ErrorKind.REGISTRY_MALFORMED,
                f"Iteration over /EmbeddedFiles failed with: {e}",
                registry="/EmbeddedFiles",
            )
        if not isinstance(node, DictionaryObject):
            raise ExtractionError(
                ErrorKind.REGISTRY_MALFORMED,
                f"Iteration over /EmbeddedFiles failed: node {reference!r} is not a dictionary",
                registry="/EmbeddedFiles",
            )

        node_id = _node_id(reference)
        if "/Names" in node:
            names = _resolve(node.get("/Names"))
            if not isinstance(names, ArrayObject) or len(names) % 2 != 0:
                raise ExtractionError(
                    ErrorKind.REGISTRY_MALFORMED,
                    "Iteration over /EmbeddedFiles failed: /Names must be an array of key/value pairs",
                    registry="/EmbeddedFiles",
                )
            pairs = [
                (decode_pdf_string(_resolve(names[i])), names[i + 1])
                for i in range(0, len(names), 2)
            ]
            return NameTreeLeaf(node_id=node_id, pairs=pairs)

        if "/Kids" in node:
            kids = _resolve(node.get("/Kids"))
            if not isinstance(kids, ArrayObject):
                raise ExtractionError(
                    ErrorKind.REGISTRY_MALFORMED,
                    "Iteration over /EmbeddedFiles failed: /Kids must be an array",
                    registry="/EmbeddedFiles",
                )
            return NameTreeInterior(node_id=node_id, kids=list(kids))

        raise ExtractionError(
            ErrorKind.REGISTRY_MALFORMED,
            "Iteration over /EmbeddedFiles failed: node has neither /Names nor /Kids",
            registry="/EmbeddedFiles",
        )

    def read_file_descriptor(self, value: Any, key: Optional[str] = None) -> FileDescriptor:
        try:
            file_spec = _resolve(value)
        except (PyPdfError, ValueError) as e:
            raise ExtractionError(
                ErrorKind.REGISTRY_MALFORMED,
                f"Failed to resolve filespec {key!r} in /EmbeddedFiles: {e}",
                registry="/EmbeddedFiles",
            )
        if isinstance(file_spec, str):
            # Veraltete Form: der Wert ist nur ein Dateiname ohne /EF
            return FileDescriptor(key=key, names=[DescriptorName(field=NameField.PLAIN, raw=file_spec)])
        if not isinstance(file_spec, DictionaryObject):
            raise ExtractionError(
                ErrorKind.REGISTRY_MALFORMED,
                f"Value for {key!r} in /EmbeddedFiles is not a filespec",
                registry="/EmbeddedFiles",
            )
        return self._build_descriptor(file_spec, key=key)

    def _build_descriptor(self, file_spec: DictionaryObject, key: Optional[str] = None) -> FileDescriptor:
        names = [
            DescriptorName(field=field, raw=_resolve(file_spec.get(field.value)))
            for field in (NameField.PLAIN, NameField.UNICODE)
            if _present(file_spec.get(field.value))
        ]

        references = {}
        ef_entry = _resolve(file_spec.get("/EF"))
        has_ef = isinstance(ef_entry, DictionaryObject)
        if has_ef:
            for field in (NameField.PLAIN, NameField.UNICODE):
                if _present(ef_entry.get(field.value)):
                    references[field] = ef_entry.get(field.value)

        return FileDescriptor(key=key, names=names, has_embedded_files=has_ef, references=references)

    def resolve_reference(self, reference: Any) -> StreamObject:
        try:
            stream = _resolve(reference)
        except (PyPdfError, ValueError, IndexError) as e:
            raise ExtractionError(ErrorKind.STREAM_RESOLUTION_FAILED, f"Failed to resolve file ref with: {e}")
        if stream is None:
            raise ExtractionError(ErrorKind.STREAM_RESOLUTION_FAILED, f"Failed to resolve file ref {reference!r}: dangling reference")
        if not isinstance(stream, StreamObject):
            raise ExtractionError(
                ErrorKind.STREAM_RESOLUTION_FAILED,
                f"Failed to resolve file ref {reference!r}: {type(stream).__name__} is not a stream",
            )
        return stream

    def read_stream_bytes(self, stream: StreamObject) -> bytes:
        try:
            return stream.get_data()
        except (PyPdfError, DependencyError, ValueError, NotImplementedError, zlib.error) as e:
            raise ExtractionError(ErrorKind.STREAM_DECODE_FAILED, f"Failed to get stream data: {e}")
