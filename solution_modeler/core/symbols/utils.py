"""Symbol model utilities.

Source file discovery, parser registry, and helper functions.
"""

import os
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseLanguageParser

# Extension → language mapping
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".cs": "csharp",
}

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    ".git",
    ".vs",
    ".idea",
    "node_modules",
    "packages",
    "bin",
    "obj",
    "TestResults",
})

# Parser registry, lazy-loaded to avoid grammar loading at import time
_parser_registry: Dict[str, "BaseLanguageParser"] = {}


def detect_language(file_path: str) -> Optional[str]:
    """Detect programming language from file extension.

    Args:
        file_path: Path to the source file

    Returns:
        Language identifier string or None if unsupported
    """
    _, ext = os.path.splitext(file_path)
    return SUPPORTED_EXTENSIONS.get(ext.lower())


def get_parser(language: str) -> "BaseLanguageParser":
    """Get a parser instance for the given language.

    Raises:
        ValueError: If language is not supported
    """
    if language not in _parser_registry:
        if language == "csharp":
            from .csharp_parser import CSharpParser
            _parser_registry["csharp"] = CSharpParser()
        else:
            raise ValueError(
                f"Unsupported language: {language}. "
                f"Supported: {list(SUPPORTED_EXTENSIONS.values())}"
            )

    return _parser_registry[language]


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking."""
    return dir_name in SKIP_DIRECTORIES or dir_name.startswith(".")


def find_source_files(root: str) -> List[str]:
    """Return supported source files under root, sorted, skipping build output.

    Args:
        root: Directory to walk

    Returns:
        Absolute, normalized file paths in ascending order
    """
    found = []
    for dir_path, dir_names, file_names in os.walk(root):
        dir_names[:] = [d for d in dir_names if not should_skip_directory(d)]
        for file_name in file_names:
            if detect_language(file_name):
                found.append(os.path.normpath(os.path.join(dir_path, file_name)))
    return sorted(found)
