import logging
from typing import Callable, List, Optional

from ...core.errors import ErrorKind, ExtractionError
from ...schemas.attachment import FileDescriptor, MatchPass, MatchResult, Registry
from .name_matcher import NameMatcher

logger = logging.getLogger(__name__)


def _require_registry(descriptors: Optional[List[FileDescriptor]]) -> List[FileDescriptor]:
    if descriptors is None:
        raise ExtractionError(ErrorKind.REGISTRY_MISSING, "No /AF Array found!", registry=Registry.ASSOCIATED_FILES.value)
    return descriptors


def _first_match(
    descriptors: List[FileDescriptor],
    select: Callable[[FileDescriptor], Optional[str]],
    pass_kind: MatchPass,
) -> Optional[MatchResult]:
    # Erster Treffer in Array-Reihenfolge gewinnt
    for descriptor in descriptors:
        display_name = select(descriptor)
        if display_name is not None:
            return MatchResult(
                display_name=display_name,
                descriptor=descriptor,
                registry=Registry.ASSOCIATED_FILES,
                pass_kind=pass_kind,
            )
    return None


def find_exact(descriptors: Optional[List[FileDescriptor]], matcher: NameMatcher) -> MatchResult:
    """Sucht im /AF Array die erste Filespec mit einem der Namen des Matchers."""
    descriptors = _require_registry(descriptors)
    result = _first_match(descriptors, matcher.matching_name, MatchPass.EXACT)
    if result is None:
        raise ExtractionError(
            ErrorKind.NO_MATCH,
            f"No embedded file matching {matcher} found in /AF array",
            registry=Registry.ASSOCIATED_FILES.value,
        )
    logger.info(f"'{result.display_name}' im /AF Array gefunden")
    return result


def find_by_suffix(descriptors: Optional[List[FileDescriptor]], suffix: str) -> MatchResult:
    """Fallback: erste Filespec im /AF Array, deren Name auf suffix endet."""
    descriptors = _require_registry(descriptors)
    result = _first_match(
        descriptors,
        lambda descriptor: NameMatcher.matching_suffix(descriptor, suffix),
        MatchPass.SUFFIX,
    )
    if result is None:
        raise ExtractionError(
            ErrorKind.NO_MATCH,
            f"No embedded {suffix} file found in /AF array",
            registry=Registry.ASSOCIATED_FILES.value,
        )
    logger.info(f"'{result.display_name}' per Endung {suffix} im /AF Array gefunden")
    return result
