"""Class diagram pipeline over the symbol model.

Public API:
    DiagramService(writer).run(modules) → written file paths
    DiagramService().generate(modules) → List[RenderedDiagram]
"""

from .collector import collect_module_types, collect_types
from .partition import NamespaceGroup, partition_by_namespace
from .relationships import EdgeKind, RelationshipEdge, TypeIndex, resolve_relationships
from .service import DiagramService, RenderedDiagram
from .structural import generate_class_diagram
from .surface import filter_public_surface, is_diagram_worthy
from .writer import OutputTarget, OutputWriter

__all__ = [
    "collect_module_types",
    "collect_types",
    "filter_public_surface",
    "generate_class_diagram",
    "is_diagram_worthy",
    "partition_by_namespace",
    "resolve_relationships",
    "DiagramService",
    "EdgeKind",
    "NamespaceGroup",
    "OutputTarget",
    "OutputWriter",
    "RelationshipEdge",
    "RenderedDiagram",
    "TypeIndex",
]
