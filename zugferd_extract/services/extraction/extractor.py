import logging
from pathlib import Path
from typing import Callable, Optional, Union

from ...core.config import settings
from ...core.errors import METADATA_KINDS, ErrorKind, ExtractionError
from ...schemas.attachment import MatchResult, ResolutionPolicy, ResolvedPayload
from . import associated_files, embedded_files
from .interface import IPdfDocument
from .metadata_util import extract_name_from_metadata
from .name_matcher import NameMatcher
from .pdf_util import PypdfDocument
from .stream_util import extract_stream_bytes

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


def _silent(message: str) -> None:
    pass


def _fallback(error: ExtractionError, report: Reporter, next_step: str) -> None:
    """Meldet einen abgefangenen Fehler als Warnung, bevor der Fallback greift."""
    logger.warning(f"{error.message} ({error.kind.value}). {next_step}")
    report(error.message)
    report(next_step)


def derive_matcher(
    document: IPdfDocument,
    name: Optional[str] = None,
    policy: ResolutionPolicy = ResolutionPolicy.LENIENT,
    report: Reporter = _silent,
) -> NameMatcher:
    """
    Liefert den NameMatcher: expliziter Name, sonst fx:DocumentFileName aus /Metadata.
    Im Lenient-Modus wird bei Metadaten-Fehlern auf die Standardnamen zurückgefallen.
    """
    if name is not None:
        return NameMatcher.from_name(name)

    try:
        metadata = document.get_metadata_stream_text()
        derived_name = extract_name_from_metadata(metadata)
    except ExtractionError as e:
        if policy == ResolutionPolicy.STRICT or e.kind not in METADATA_KINDS:
            raise
        matcher = NameMatcher.from_default()
        _fallback(e, report, f"Searching for default XML files instead ({matcher})")
        return matcher

    report(f"/Metadata contains following XML file name to look for: '{derived_name}'")
    return NameMatcher.from_name(derived_name)


def search_associated_files(
    document: IPdfDocument,
    matcher: NameMatcher,
    policy: ResolutionPolicy = ResolutionPolicy.LENIENT,
    report: Reporter = _silent,
) -> MatchResult:
    """Sucht im /AF Array: exakter Name, im Lenient-Modus danach beliebige .xml Datei."""
    descriptors = document.get_associated_files_list()
    try:
        return associated_files.find_exact(descriptors, matcher)
    except ExtractionError as e:
        # Keine zweite Chance im Strict-Modus: /AF muss existieren und der Name muss passen
        if policy == ResolutionPolicy.STRICT or e.kind != ErrorKind.NO_MATCH:
            raise
        _fallback(e, report, f"Trying to extract any {settings.fallback_suffix} file from /AF array")

    return associated_files.find_by_suffix(descriptors, settings.fallback_suffix)


def search_embedded_tree(
    document: IPdfDocument,
    matcher: NameMatcher,
    report: Reporter = _silent,
) -> MatchResult:
    """Fallback-Suche im /EmbeddedFiles Name Tree (nur Lenient)."""
    tree = document.get_embedded_files_name_tree()
    try:
        return embedded_files.find_exact(document, tree, matcher)
    except ExtractionError as e:
        if e.kind != ErrorKind.NO_MATCH:
            raise
        _fallback(e, report, f"Trying to extract any {settings.fallback_suffix} file from /EmbeddedFiles structure")

    return embedded_files.find_by_suffix(document, tree, settings.fallback_suffix)


def resolve_attachment(
    document: IPdfDocument,
    name: Optional[str] = None,
    policy: ResolutionPolicy = ResolutionPolicy.LENIENT,
    report: Reporter = _silent,
) -> ResolvedPayload:
    """
    Führt die Auflösung durch: Name ableiten -> /AF -> /EmbeddedFiles -> Stream lesen.
    Jeder Fehler wird als ExtractionError mit klassifizierter Art ausgelöst.
    """
    matcher = derive_matcher(document, name, policy, report)

    try:
        match = search_associated_files(document, matcher, policy, report)
    except ExtractionError as e:
        if policy == ResolutionPolicy.STRICT or not e.recoverable:
            raise
        _fallback(e, report, "Retrying in /EmbeddedFiles")
        match = search_embedded_tree(document, matcher, report)

    report(f"Found '{match.display_name}' in {match.registry.value} ({match.pass_kind.value.lower()} match)")

    # Ein gefundener Anhang ohne lesbaren Inhalt ist immer endgültig
    data = extract_stream_bytes(document, match)
    return ResolvedPayload(data=data, match=match, candidate_names=list(matcher.names))


def default_output_path(pdf_input: Union[str, Path]) -> Path:
    """Eingabepfad mit ersetzter Endung (rechnung.pdf -> rechnung.pdf.xml)."""
    return Path(pdf_input).with_suffix(settings.output_suffix)


def write_payload(payload: ResolvedPayload, output_path: Union[str, Path]) -> None:
    """Schreibt den Anhang (bestehende Dateien werden überschrieben)."""
    try:
        with open(output_path, "wb") as f:
            f.write(payload.data)
    except OSError as e:
        raise ExtractionError(ErrorKind.OUTPUT_UNWRITABLE, f"Failed to write {output_path}: {e}")


def extract_attachment(
    pdf_input: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    name: Optional[str] = None,
    policy: ResolutionPolicy = ResolutionPolicy.LENIENT,
    report: Reporter = _silent,
) -> ResolvedPayload:
    """
    Öffnet das PDF, löst den E-Rechnungs-Anhang auf und schreibt ihn nach output_path.
    """
    pdf_input = Path(pdf_input).resolve()
    output_path = Path(output_path).resolve() if output_path is not None else default_output_path(pdf_input)

    report(f"Reading: {pdf_input}")
    document = PypdfDocument.open(pdf_input)
    payload = resolve_attachment(document, name=name, policy=policy, report=report)

    report(f"Writing: {output_path}")
    write_payload(payload, output_path)
    logger.info(f"{payload.match.display_name} ({payload.size} Bytes) nach {output_path} extrahiert")
    return payload
