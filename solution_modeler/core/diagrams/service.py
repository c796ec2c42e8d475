"""DiagramService: orchestrates one diagram generation run.

Collects candidate types from the compiled modules, filters them down to the
public surface, partitions them by namespace and, per group, resolves
relationships and renders PlantUML. Groups are processed and written one at
a time.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple

from ..symbols.models import ModuleSymbol
from .collector import collect_module_types
from .partition import NamespaceGroup, partition_by_namespace
from .relationships import RelationshipEdge, TypeIndex, resolve_relationships
from .structural import generate_class_diagram
from .surface import filter_public_surface
from .writer import OutputWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderedDiagram:
    group: NamespaceGroup
    content: str
    edges: Tuple[RelationshipEdge, ...]

    @property
    def namespace(self) -> str:
        return self.group.name


class DiagramService:
    """Generates one class diagram per namespace of a solution's public types."""

    def __init__(self, writer: Optional[OutputWriter] = None):
        """Initialize DiagramService.

        Args:
            writer: Destination for run(); generate() works without one
        """
        self._writer = writer

    def generate(self, modules: Sequence[ModuleSymbol]) -> List[RenderedDiagram]:
        """Render every namespace group without touching the filesystem."""
        return list(self._iter_diagrams(modules))

    def run(self, modules: Sequence[ModuleSymbol]) -> List[str]:
        """Render and write every namespace group.

        Returns:
            Paths of the written files, in namespace order
        """
        if self._writer is None:
            raise ValueError("DiagramService.run() requires an OutputWriter")

        written = []
        for diagram in self._iter_diagrams(modules):
            written.append(self._writer.write(diagram.group, diagram.content))
        return written

    def _iter_diagrams(self, modules: Sequence[ModuleSymbol]) -> Iterator[RenderedDiagram]:
        candidates = collect_module_types(modules)
        public_types = filter_public_surface(candidates)
        logger.info(f"Public types found: {len(public_types)}")

        index = TypeIndex(candidates, public_types)
        for group in partition_by_namespace(public_types):
            edges = resolve_relationships(group, index)
            yield RenderedDiagram(
                group=group,
                content=generate_class_diagram(group, edges),
                edges=tuple(edges),
            )
