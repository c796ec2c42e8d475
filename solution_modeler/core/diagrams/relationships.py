"""Relationship resolution between diagram-worthy types.

All detectors take a TypeIndex and return RelationshipEdge records between
diagram-worthy types. References that do not resolve to a diagram-worthy
type are dropped: a partial diagram is still useful.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from ..constants import UNIVERSAL_BASE_TYPE
from ..symbols.models import Accessibility, TypeReference, TypeSymbol
from .partition import NamespaceGroup

logger = logging.getLogger(__name__)


class EdgeKind(Enum):
    INHERITS = "inherits"
    REALIZES = "realizes"
    ASSOCIATES = "associates"


@dataclass(frozen=True)
class RelationshipEdge:
    """A directed relationship from source type to target type."""

    source: str  # display name
    target: str  # display name
    kind: EdgeKind

    def render(self) -> str:
        if self.kind is EdgeKind.INHERITS:
            return f"{self.target} <|-- {self.source}"
        if self.kind is EdgeKind.REALIZES:
            return f"{self.target} <|.. {self.source}"
        return f"{self.source} --> {self.target}"


class TypeIndex:
    """Lookup structures built once per run, passed to every detector.

    Attributes:
        types_by_name: Every candidate type keyed by qualified name.
        diagram_names: Qualified names of the diagram-worthy types.
    """

    __slots__ = ("types_by_name", "diagram_names")

    def __init__(self, candidates: Iterable[TypeSymbol], diagram_types: Iterable[TypeSymbol]):
        self.types_by_name: Dict[str, TypeSymbol] = {}
        self.diagram_names: Set[str] = set()
        for symbol in candidates:
            self.types_by_name.setdefault(symbol.qualified_name, symbol)
        for symbol in diagram_types:
            self.types_by_name.setdefault(symbol.qualified_name, symbol)
            self.diagram_names.add(symbol.qualified_name)

    def resolve(self, ref: Optional[TypeReference]) -> Optional[TypeSymbol]:
        """The named type a reference points at, if it was collected."""
        if ref is None or not ref.is_named or ref.qualified_name is None:
            return None
        return self.types_by_name.get(ref.qualified_name)

    def resolve_diagram_type(self, ref: Optional[TypeReference]) -> Optional[TypeSymbol]:
        """Like resolve(), restricted to diagram-worthy types.

        A constructed generic (Repository<string>) is not its declaration and
        never resolves here, though resolve() still follows it to walk bases.
        """
        if ref is None or ref.is_constructed:
            return None
        symbol = self.resolve(ref)
        if symbol is not None and symbol.qualified_name in self.diagram_names:
            return symbol
        return None


# ── Inherits ─────────────────────────────────────────────────────────


def detect_inherits(symbol: TypeSymbol, index: TypeIndex) -> List[RelationshipEdge]:
    """Base type edge, unless the base is System.Object or not drawn."""
    base = symbol.base_type
    if base is None or base.qualified_name == UNIVERSAL_BASE_TYPE:
        return []
    target = index.resolve_diagram_type(base)
    if target is None or target.qualified_name == UNIVERSAL_BASE_TYPE:
        return []
    return [RelationshipEdge(symbol.display_name, target.display_name, EdgeKind.INHERITS)]


# ── Realizes ─────────────────────────────────────────────────────────


def all_interfaces(symbol: TypeSymbol, index: TypeIndex) -> List[TypeReference]:
    """Transitive interface set: declared, inherited from base types, and
    the base interfaces of each. Cycles in malformed code are tolerated.
    """
    found: List[TypeReference] = []
    seen: Set[str] = set()

    def visit(refs: Iterable[TypeReference]) -> None:
        for ref in refs:
            if ref.identity in seen:
                continue
            seen.add(ref.identity)
            found.append(ref)
            declared = index.resolve(ref)
            if declared is not None:
                visit(declared.interfaces)

    visited_types: Set[str] = set()
    current: Optional[TypeSymbol] = symbol
    while current is not None and current.qualified_name not in visited_types:
        visited_types.add(current.qualified_name)
        visit(current.interfaces)
        current = index.resolve(current.base_type)
    return found


def detect_realizes(symbol: TypeSymbol, index: TypeIndex) -> List[RelationshipEdge]:
    edges = []
    for ref in all_interfaces(symbol, index):
        target = index.resolve_diagram_type(ref)
        if target is not None and target != symbol:
            edges.append(RelationshipEdge(symbol.display_name, target.display_name, EdgeKind.REALIZES))
    return edges


# ── Associates ───────────────────────────────────────────────────────


def detect_associates(symbol: TypeSymbol, index: TypeIndex) -> List[RelationshipEdge]:
    """Public properties whose (unwrapped) type is another drawn type."""
    edges = []
    for prop in symbol.properties:
        if prop.accessibility is not Accessibility.PUBLIC:
            continue
        target = index.resolve_diagram_type(prop.type.unwrap())
        if target is not None and target != symbol:
            edges.append(RelationshipEdge(symbol.display_name, target.display_name, EdgeKind.ASSOCIATES))
    return edges


# ── Per-group resolution ─────────────────────────────────────────────


def resolve_relationships(group: NamespaceGroup, index: TypeIndex) -> List[RelationshipEdge]:
    """All edges of one namespace group, deduplicated and sorted.

    Edges are keyed by their rendered text, so two properties of the same
    associated type collapse into one line. Output order is the ascending
    order of that text, independent of discovery order.
    """
    edges: Dict[str, RelationshipEdge] = {}
    for symbol in group.types:
        for edge in (
            detect_inherits(symbol, index)
            + detect_realizes(symbol, index)
            + detect_associates(symbol, index)
        ):
            edges.setdefault(edge.render(), edge)

    logger.debug(f"Namespace {group.name or '<global>'}: {len(edges)} relationship(s)")
    # Ordinal (code point) order: "Zeta" sorts before "alpha"
    return [edges[text] for text in sorted(edges)]
