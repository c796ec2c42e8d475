"""Public surface filter: which types are worth drawing.

Keeps public, source-declared types of a diagrammable kind. Internal and
private implementation types and compiler-generated types never reach a
diagram.
"""

from typing import Iterable, List

from ..symbols.models import Accessibility, TypeKind, TypeSymbol

DIAGRAM_KINDS = frozenset({
    TypeKind.CLASS,
    TypeKind.INTERFACE,
    TypeKind.STRUCT,
    TypeKind.ENUM,
    TypeKind.DELEGATE,
})


def is_diagram_worthy(symbol: TypeSymbol) -> bool:
    return (
        symbol.accessibility is Accessibility.PUBLIC
        and not symbol.is_synthesized
        and symbol.kind in DIAGRAM_KINDS
    )


def filter_public_surface(types: Iterable[TypeSymbol]) -> List[TypeSymbol]:
    """Order-preserving filter down to diagram-worthy types."""
    return [t for t in types if is_diagram_worthy(t)]
