"""Workspace: loads a solution and compiles its projects into ModuleSymbols.

Reads Visual Studio solutions (.sln), XML solutions (.slnx) or a single
project file (.csproj), resolves each project's compile items the way the
.NET SDK does, parses them with tree-sitter and binds the result.

Projects are processed one at a time. A project that cannot be loaded is
logged and skipped; the rest of the solution is still modelled.
"""

import glob
import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..constants import DEFAULT_EXCLUDE_MARKERS, IMPLICIT_USINGS, SOLUTION_FOLDER_TYPE_GUID
from .binder import Binder
from .models import ModuleSymbol
from .utils import detect_language, find_source_files, get_parser

logger = logging.getLogger(__name__)

_SLN_PROJECT_RE = re.compile(
    r'^Project\("\{(?P<type>[0-9A-Fa-f-]+)\}"\)\s*=\s*"(?P<name>[^"]*)"\s*,\s*'
    r'"(?P<path>[^"]*)"\s*,\s*"\{(?P<guid>[^}]*)\}"',
    re.MULTILINE,
)

_PROJECT_EXTENSIONS = (".csproj",)


class SolutionLoadError(Exception):
    """The solution file cannot be read or is of an unsupported kind."""


class ProjectLoadError(Exception):
    """A project file is missing or malformed."""


@dataclass
class ProjectInfo:
    name: str
    path: str  # absolute path of the project file


@dataclass
class ProjectSources:
    files: List[str] = field(default_factory=list)
    implicit_usings: List[str] = field(default_factory=list)


# =============================================================================
# XML helpers
# =============================================================================


def _strip_namespace(tag: str) -> str:
    """Remove the MSBuild XML namespace from a tag."""
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _local_findall_recursive(element: ET.Element, local_name: str) -> List[ET.Element]:
    """Find all descendant elements by local name, ignoring namespaces."""
    return [
        node for node in element.iter()
        if _strip_namespace(node.tag) == local_name
    ]


def _property_value(root: ET.Element, name: str) -> str:
    """Last value assigned to an MSBuild property, or empty string."""
    value = ""
    for node in _local_findall_recursive(root, name):
        if node.text:
            value = node.text.strip()
    return value


def _native_path(path: str) -> str:
    return path.replace("\\", os.sep).replace("/", os.sep)


# =============================================================================
# Solution / project readers
# =============================================================================


def read_solution(solution_path: str) -> List[ProjectInfo]:
    """List the C# projects of a .sln, .slnx or .csproj file.

    Solution folders and projects in other languages are skipped.

    Raises:
        SolutionLoadError: If the file cannot be read or is not a solution
    """
    solution_path = os.path.abspath(solution_path)
    base_dir = os.path.dirname(solution_path)
    ext = os.path.splitext(solution_path)[1].lower()

    if ext in _PROJECT_EXTENSIONS:
        name = os.path.splitext(os.path.basename(solution_path))[0]
        return [ProjectInfo(name=name, path=solution_path)]

    try:
        with open(solution_path, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except OSError as e:
        raise SolutionLoadError(f"Cannot read solution {solution_path}: {e}") from e

    entries = []
    if ext == ".sln":
        for match in _SLN_PROJECT_RE.finditer(text):
            if match.group("type").upper() == SOLUTION_FOLDER_TYPE_GUID:
                continue
            entries.append((match.group("name"), match.group("path")))
    elif ext == ".slnx":
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise SolutionLoadError(f"Malformed solution {solution_path}: {e}") from e
        for node in _local_findall_recursive(root, "Project"):
            path = node.get("Path", "")
            if path:
                entries.append((os.path.splitext(os.path.basename(_native_path(path)))[0], path))
    else:
        raise SolutionLoadError(f"Unsupported solution file: {solution_path}")

    projects = []
    for name, rel_path in entries:
        if not rel_path.lower().endswith(_PROJECT_EXTENSIONS):
            logger.info(f"Skipping non-C# project: {name}")
            continue
        projects.append(ProjectInfo(
            name=name,
            path=os.path.normpath(os.path.join(base_dir, _native_path(rel_path))),
        ))
    return projects


def read_project(project: ProjectInfo) -> ProjectSources:
    """Resolve the compile items and implicit usings of a project.

    SDK-style projects compile every .cs file below the project directory
    unless EnableDefaultCompileItems is false; Compile Include/Remove items
    are applied on top.

    Raises:
        ProjectLoadError: If the project file is missing or malformed
    """
    if not os.path.isfile(project.path):
        raise ProjectLoadError(f"Project file not found: {project.path}")
    try:
        root = ET.parse(project.path).getroot()
    except ET.ParseError as e:
        raise ProjectLoadError(f"Malformed project file {project.path}: {e}") from e

    project_dir = os.path.dirname(project.path)
    is_sdk = bool(root.get("Sdk")) or bool(_local_findall_recursive(root, "Sdk")) or any(
        node.get("Sdk") for node in _local_findall_recursive(root, "Import")
    )
    default_items = is_sdk and _property_value(root, "EnableDefaultCompileItems").lower() != "false"

    files = set(find_source_files(project_dir)) if default_items else set()
    for node in _local_findall_recursive(root, "Compile"):
        for pattern in filter(None, (node.get("Include") or "").split(";")):
            files.update(_expand(project_dir, pattern))
        for pattern in filter(None, (node.get("Remove") or "").split(";")):
            files.difference_update(_expand(project_dir, pattern))

    implicit_usings: List[str] = []
    if _property_value(root, "ImplicitUsings").lower() in ("enable", "true"):
        implicit_usings.extend(IMPLICIT_USINGS)
    for node in _local_findall_recursive(root, "Using"):
        include = node.get("Include")
        if include and not node.get("Alias") and include not in implicit_usings:
            implicit_usings.append(include)

    return ProjectSources(files=sorted(files), implicit_usings=implicit_usings)


def _expand(project_dir: str, pattern: str) -> List[str]:
    """Expand an MSBuild item pattern relative to the project directory."""
    full = os.path.join(project_dir, _native_path(pattern.strip()))
    return [
        os.path.normpath(path)
        for path in glob.glob(full, recursive=True)
        if os.path.isfile(path) and detect_language(path)
    ]


# =============================================================================
# Workspace
# =============================================================================


class Workspace:
    """Loads solutions and produces one ModuleSymbol per compiled project."""

    def __init__(self, exclude_markers: Sequence[str] = DEFAULT_EXCLUDE_MARKERS):
        self._exclude_markers = [m.lower() for m in exclude_markers if m]

    def is_excluded(self, project_name: str) -> bool:
        """Test, example and sample projects are not part of the model."""
        lowered = project_name.lower()
        return any(marker in lowered for marker in self._exclude_markers)

    def open_solution(self, solution_path: str) -> List[ModuleSymbol]:
        """Load, parse and bind every included project of a solution.

        Raises:
            SolutionLoadError: If the solution itself cannot be read
        """
        logger.info(f"Loading solution: {solution_path}")
        binder = Binder()

        for project in read_solution(solution_path):
            if self.is_excluded(project.name):
                logger.info(f"Skipping project: {project.name}")
                continue
            logger.info(f"Processing project: {project.name}")
            sources = self._load_project(project)
            if sources is None:
                continue
            parser = get_parser("csharp")
            results = [parser.parse_file(path) for path in sources.files]
            for result in results:
                for error in result.errors:
                    log = logger.error if error.severity == "error" else logger.warning
                    log(f"{error.file_path}: {error.message}")
            binder.add_project(project.name, results, sources.implicit_usings)

        return binder.bind_all()

    @staticmethod
    def _load_project(project: ProjectInfo) -> Optional[ProjectSources]:
        try:
            return read_project(project)
        except ProjectLoadError as e:
            logger.error(f"Project {project.name} failed to load: {e}")
            return None
