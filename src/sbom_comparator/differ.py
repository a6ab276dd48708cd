"""
Diff engine for comparing the component lists of two inventory documents.

Components are matched by identity (name and group). Each component ends up
in one of three collections:
1. added: present in the new document only
2. removed: present in the original document only
3. modified: present in both, with a different (trimmed) version

Matching is a plain linear scan. When an identity occurs more than once in
the original document the first occurrence is the one every lookup finds.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sbom_comparator.component import Bom, Component, identity, same_identity, same_version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModifiedComponent:
    """The same logical component seen in both documents at different versions."""

    previous: Component
    current: Component


@dataclass(frozen=True)
class ClassificationResult:
    """
    Outcome of a comparison.

    Attributes:
        added: Components only found in the new document, in its order
        removed: Components only found in the original document, in its order
        modified: (previous, current) pairs, in the new document's order
    """

    added: Tuple[Component, ...] = ()
    removed: Tuple[Component, ...] = ()
    modified: Tuple[ModifiedComponent, ...] = ()

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)

    def counts(self) -> Dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
        }

    def describe(self, tabs: str = "") -> str:
        """Plain text listing of the result, one block per component."""
        lines = [f"{tabs}Components Added:"]
        for comp in self.added:
            lines.extend(_describe_component(comp, tabs + "\t"))
        lines.append("")
        lines.append(f"{tabs}Components Removed:")
        for comp in self.removed:
            lines.extend(_describe_component(comp, tabs + "\t"))
        lines.append("")
        lines.append(f"{tabs}Components Modified:")
        for pair in self.modified:
            lines.append(f"{tabs}\tOriginal Component:")
            lines.extend(_describe_component(pair.previous, tabs + "\t\t"))
            lines.append(f"{tabs}\tNew Component:")
            lines.extend(_describe_component(pair.current, tabs + "\t\t"))
        return "\n".join(lines)


def _describe_component(comp: Component, tabs: str) -> List[str]:
    return [
        f"{tabs}Publisher: {comp.publisher}",
        f"{tabs}Name: {comp.name}",
        f"{tabs}Group: {comp.group}",
        f"{tabs}Version: {comp.version}",
    ]


def find_component(wanted: Component, components: Optional[Iterable[Component]]) -> Optional[Component]:
    """Return the first component sharing ``wanted``'s identity, or None."""
    for component in components or ():
        if same_identity(component, wanted):
            return component
    return None


def component_in_list(wanted: Component, components: Optional[Iterable[Component]]) -> bool:
    return find_component(wanted, components) is not None


def components_not_in(list1: Optional[Sequence[Component]],
                      list2: Optional[Sequence[Component]]) -> List[Component]:
    """Components of ``list1`` whose identity has no match in ``list2``."""
    return [c for c in (list1 or ()) if not component_in_list(c, list2)]


def components_modified(updated: Optional[Sequence[Component]],
                        original: Optional[Sequence[Component]]) -> List[ModifiedComponent]:
    """
    Pair every updated component with its first original match when the
    versions differ.

    An identity is reported at most once; later duplicates in ``updated`` are
    skipped once their identity has produced a pair.
    """
    modified: List[ModifiedComponent] = []
    reported: Set[Tuple[str, Optional[str]]] = set()
    for current in updated or ():
        key = identity(current)
        if key in reported:
            continue
        previous = find_component(current, original)
        if previous is not None and not same_version(previous, current):
            modified.append(ModifiedComponent(previous=previous, current=current))
            reported.add(key)
    return modified


def classify(original: Optional[Sequence[Component]],
             updated: Optional[Sequence[Component]]) -> ClassificationResult:
    """
    Classify the components of two lists into added, removed and modified.

    Args:
        original: Components of the original document (None means empty)
        updated: Components of the new document (None means empty)

    Returns:
        ClassificationResult whose three collections are disjoint by identity
    """
    original = list(original or ())
    updated = list(updated or ())
    logger.debug("Classifying %d original against %d updated components",
                 len(original), len(updated))

    result = ClassificationResult(
        added=tuple(components_not_in(updated, original)),
        removed=tuple(components_not_in(original, updated)),
        modified=tuple(components_modified(updated, original)),
    )
    logger.debug("Classification counts: %s", result.counts())
    return result


def classify_boms(original: Bom, updated: Bom) -> ClassificationResult:
    return classify(original.components, updated.components)
