"""Namespace partitioning: one diagram per containing namespace."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from ..constants import NAMESPACE_SEPARATOR_SUBSTITUTE
from ..symbols.models import TypeSymbol


@dataclass(frozen=True)
class NamespaceGroup:
    """The diagram-worthy types sharing one namespace ("" for global)."""

    name: str
    types: Tuple[TypeSymbol, ...]

    @property
    def file_suffix(self) -> str:
        """Filesystem-safe form of the namespace: Shapes.Round -> Shapes-Round."""
        return self.name.replace(".", NAMESPACE_SEPARATOR_SUBSTITUTE)


def partition_by_namespace(types: Iterable[TypeSymbol]) -> List[NamespaceGroup]:
    """Group types by namespace.

    Groups come out in ascending namespace order and members in ascending
    display-name order (qualified name breaks ties), so the result does not
    depend on the order the symbol model was traversed in.
    """
    grouped: Dict[str, List[TypeSymbol]] = {}
    for symbol in types:
        grouped.setdefault(symbol.namespace, []).append(symbol)

    # Ordinal (code point) order of namespace names
    return [
        NamespaceGroup(
            name=name,
            types=tuple(sorted(members, key=lambda t: (t.display_name, t.qualified_name))),
        )
        for name, members in sorted(grouped.items())
    ]
