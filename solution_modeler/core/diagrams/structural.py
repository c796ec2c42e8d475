"""Deterministic PlantUML generator for namespace class diagrams.

Takes one NamespaceGroup and its resolved edges and produces PlantUML text.
Purely data-driven; nothing is written here.
"""

from typing import Iterable, List

from ..symbols.models import Accessibility, MethodMember, PropertyMember, TypeSymbol
from .partition import NamespaceGroup
from .relationships import RelationshipEdge


def generate_class_diagram(group: NamespaceGroup, edges: Iterable[RelationshipEdge]) -> str:
    """Render a namespace group as a PlantUML class diagram.

    Types appear in group order; members keep declaration order. Edge
    lines are emitted in the order given, which the resolver already
    sorts. The same input always produces byte-identical text.
    """
    lines = ["@startuml", "set namespaceSeparator none", f'package "{group.name}" {{']

    for symbol in group.types:
        lines.extend(_render_class(symbol))

    lines.append("}")
    lines.extend(edge.render() for edge in edges)
    lines.append("@enduml")
    return "\n".join(lines) + "\n"


def _render_class(symbol: TypeSymbol) -> List[str]:
    lines = [f"  class {symbol.display_name} {{"]
    for prop in symbol.properties:
        if prop.accessibility is Accessibility.PUBLIC:
            lines.append(f"    + {_property_line(prop)}")
    for method in symbol.methods:
        if method.accessibility is Accessibility.PUBLIC and method.is_plain:
            lines.append(f"    + {_method_signature(method)}")
    lines.append("  }")
    return lines


def _property_line(prop: PropertyMember) -> str:
    return f"{prop.name} : {prop.type.display_name}"


def _method_signature(method: MethodMember) -> str:
    """Name(Type name, ...) : ReturnType"""
    params = ", ".join(f"{p.type.display_name} {p.name}" for p in method.parameters)
    return f"{method.name}({params}) : {method.return_type.display_name}"
