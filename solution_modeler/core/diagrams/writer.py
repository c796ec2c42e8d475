"""Output writer: persists rendered diagrams next to a base output path.

A base path of ``out/model.puml`` yields ``out/model-Shapes.puml`` for the
``Shapes`` namespace and ``out/model.puml`` for the global namespace.
"""

import logging
import os
from dataclasses import dataclass

from ..constants import DEFAULT_OUTPUT_EXTENSION
from .partition import NamespaceGroup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputTarget:
    """Directory, file stem and extension shared by every emitted file."""

    directory: str
    stem: str
    extension: str

    @classmethod
    def from_path(cls, output_path: str, default_extension: str = DEFAULT_OUTPUT_EXTENSION) -> "OutputTarget":
        output_path = os.path.abspath(output_path)
        stem, extension = os.path.splitext(os.path.basename(output_path))
        if not extension:
            extension = default_extension
        if extension and not extension.startswith("."):
            extension = f".{extension}"
        return cls(directory=os.path.dirname(output_path), stem=stem, extension=extension)

    def file_name_for(self, group: NamespaceGroup) -> str:
        suffix = group.file_suffix
        if suffix:
            return f"{self.stem}-{suffix}{self.extension}"
        return f"{self.stem}{self.extension}"

    def path_for(self, group: NamespaceGroup) -> str:
        return os.path.join(self.directory, self.file_name_for(group))


class OutputWriter:
    """Writes one file per namespace group, creating the directory on demand."""

    def __init__(self, target: OutputTarget):
        self.target = target

    def write(self, group: NamespaceGroup, content: str) -> str:
        """Write content for a group and return the file path.

        Raises:
            OSError: If the directory cannot be created or the file written
        """
        path = self.target.path_for(group)
        os.makedirs(self.target.directory, exist_ok=True)
        # newline="" keeps "\n" line endings on every platform
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        logger.info(f"PlantUML diagram written to: {os.path.basename(path)}")
        return path
