import logging
from typing import Callable, FrozenSet, Iterator, Optional, Tuple

from ...core.errors import ErrorKind, ExtractionError
from ...schemas.attachment import (
    FileDescriptor,
    MatchPass,
    MatchResult,
    NameTreeInterior,
    NameTreeLeaf,
    NameTreeNode,
    Registry,
)
from .interface import IPdfDocument
from .name_matcher import NameMatcher

logger = logging.getLogger(__name__)

Selector = Callable[[FileDescriptor], Optional[str]]


def _enter(node: NameTreeNode, path: FrozenSet[Tuple[int, int]]) -> FrozenSet[Tuple[int, int]]:
    """Merkt sich den Knoten auf dem aktuellen Pfad; ein erneuter Besuch ist ein Zyklus."""
    if node.node_id is None:
        return path
    if node.node_id in path:
        raise ExtractionError(
            ErrorKind.REGISTRY_MALFORMED,
            f"Iteration over /EmbeddedFiles failed: cycle at object {node.node_id[0]} {node.node_id[1]} R",
            registry=Registry.EMBEDDED_FILES.value,
        )
    return path | {node.node_id}


def _walk(
    document: IPdfDocument,
    node: NameTreeNode,
    select: Selector,
    pass_kind: MatchPass,
    path: FrozenSet[Tuple[int, int]],
) -> Optional[MatchResult]:
    """
    Tiefensuche über den Name Tree. Jede Ebene gibt ihr Ergebnis zurück,
    der erste Treffer beendet die Suche auf allen Ebenen.
    """
    path = _enter(node, path)

    if isinstance(node, NameTreeLeaf):
        for key, value in node.pairs:
            descriptor = document.read_file_descriptor(value, key=key)
            display_name = select(descriptor)
            if display_name is not None:
                return MatchResult(
                    display_name=display_name,
                    descriptor=descriptor,
                    registry=Registry.EMBEDDED_FILES,
                    pass_kind=pass_kind,
                )
        return None

    if isinstance(node, NameTreeInterior):
        for kid in node.kids:
            result = _walk(document, document.read_name_tree_node(kid), select, pass_kind, path)
            if result is not None:
                return result
        return None

    raise TypeError(f"Unbekannter Name Tree Knoten: {type(node).__name__}")


def _require_tree(tree: Optional[NameTreeNode]) -> NameTreeNode:
    if tree is None:
        raise ExtractionError(
            ErrorKind.REGISTRY_MISSING,
            "No /EmbeddedFiles found",
            registry=Registry.EMBEDDED_FILES.value,
        )
    return tree


def find_exact(document: IPdfDocument, tree: Optional[NameTreeNode], matcher: NameMatcher) -> MatchResult:
    """Sucht im /EmbeddedFiles Name Tree die erste Filespec mit einem der Namen des Matchers."""
    tree = _require_tree(tree)
    result = _walk(document, tree, matcher.matching_name, MatchPass.EXACT, frozenset())
    if result is None:
        raise ExtractionError(
            ErrorKind.NO_MATCH,
            f"No embedded file matching {matcher} found in /EmbeddedFiles structure",
            registry=Registry.EMBEDDED_FILES.value,
        )
    logger.info(f"'{result.display_name}' in /EmbeddedFiles gefunden")
    return result


def find_by_suffix(document: IPdfDocument, tree: Optional[NameTreeNode], suffix: str) -> MatchResult:
    """Fallback: erste Filespec im Name Tree, deren Name auf suffix endet."""
    tree = _require_tree(tree)
    result = _walk(
        document,
        tree,
        lambda descriptor: NameMatcher.matching_suffix(descriptor, suffix),
        MatchPass.SUFFIX,
        frozenset(),
    )
    if result is None:
        raise ExtractionError(
            ErrorKind.NO_MATCH,
            f"No embedded {suffix} files found in /EmbeddedFiles structure",
            registry=Registry.EMBEDDED_FILES.value,
        )
    logger.info(f"'{result.display_name}' per Endung {suffix} in /EmbeddedFiles gefunden")
    return result


def iter_descriptors(
    document: IPdfDocument,
    tree: NameTreeNode,
    path: FrozenSet[Tuple[int, int]] = frozenset(),
) -> Iterator[FileDescriptor]:
    """Liefert alle Filespecs des Name Trees in Baumreihenfolge."""
    path = _enter(tree, path)
    if isinstance(tree, NameTreeLeaf):
        for key, value in tree.pairs:
            yield document.read_file_descriptor(value, key=key)
    elif isinstance(tree, NameTreeInterior):
        for kid in tree.kids:
            yield from iter_descriptors(document, document.read_name_tree_node(kid), path)
