"""Type collection: flattens the namespace forest into candidate types."""

from typing import Iterable, List

from ..symbols.models import ModuleSymbol, NamespaceSymbol, TypeSymbol


def collect_types(namespace: NamespaceSymbol) -> List[TypeSymbol]:
    """Collect every type below a namespace, depth-first.

    Members are visited in declaration order: a child namespace is walked
    fully before its next sibling, and nested types follow their enclosing
    type immediately. No deduplication is performed.
    """
    collector: List[TypeSymbol] = []
    _collect_namespace(namespace, collector)
    return collector


def collect_module_types(modules: Iterable[ModuleSymbol]) -> List[TypeSymbol]:
    """Collect the candidate types of several modules, in module order."""
    collector: List[TypeSymbol] = []
    for module in modules:
        _collect_namespace(module.global_namespace, collector)
    return collector


def _collect_namespace(namespace: NamespaceSymbol, collector: List[TypeSymbol]) -> None:
    for member in namespace.members:
        if isinstance(member, NamespaceSymbol):
            _collect_namespace(member, collector)
        else:
            _collect_nested(member, collector)


def _collect_nested(symbol: TypeSymbol, collector: List[TypeSymbol]) -> None:
    collector.append(symbol)
    for nested in symbol.nested_types:
        _collect_nested(nested, collector)
