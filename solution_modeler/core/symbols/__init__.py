"""Symbol model: tree-sitter based C# solution loading and binding.

Public API:
    Workspace(exclude_markers).open_solution(path) → List[ModuleSymbol]
    parse_source(source, file_path) → ParseResult
    compile_sources({path: source}, project_name) → ModuleSymbol
"""

from typing import Dict, Sequence

from .binder import Binder
from .models import (
    Accessibility,
    MethodKind,
    MethodMember,
    ModuleSymbol,
    NamespaceSymbol,
    Parameter,
    PropertyMember,
    TypeKind,
    TypeReference,
    TypeSymbol,
)
from .syntax import ParseError, ParseResult
from .utils import get_parser
from .workspace import ProjectLoadError, SolutionLoadError, Workspace

__all__ = [
    "parse_source",
    "compile_sources",
    "Accessibility",
    "Binder",
    "MethodKind",
    "MethodMember",
    "ModuleSymbol",
    "NamespaceSymbol",
    "Parameter",
    "ParseError",
    "ParseResult",
    "ProjectLoadError",
    "PropertyMember",
    "SolutionLoadError",
    "TypeKind",
    "TypeReference",
    "TypeSymbol",
    "Workspace",
]


def parse_source(source_text: str, file_path: str, language: str = "csharp") -> ParseResult:
    """Parse source code string into declarations.

    Args:
        source_text: Source code as string
        file_path: File path (for metadata)
        language: Language identifier

    Returns:
        ParseResult containing extracted type declarations
    """
    return get_parser(language).parse_source(source_text, file_path)


def compile_sources(
    sources: Dict[str, str],
    project_name: str = "Project",
    implicit_usings: Sequence[str] = (),
) -> ModuleSymbol:
    """Parse and bind in-memory sources as a single project.

    Args:
        sources: Mapping of file path → source text, bound in path order
        project_name: Name given to the resulting module
        implicit_usings: Global usings in effect for every file

    Returns:
        The bound ModuleSymbol
    """
    binder = Binder()
    results = [parse_source(sources[path], path) for path in sorted(sources)]
    binder.add_project(project_name, results, implicit_usings)
    return binder.bind_project(project_name)
