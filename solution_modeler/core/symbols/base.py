"""Base interface for language-specific declaration parsers.

Defines the Strategy pattern base class that language parsers implement.
Shared file handling lives here; declaration extraction is delegated.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Tuple

import tree_sitter

from .syntax import ParseError, ParseResult, TypeDeclaration, UsingDirective

logger = logging.getLogger(__name__)


class BaseLanguageParser(ABC):
    """Abstract base for tree-sitter declaration parsers.

    Subclasses implement:
    - get_language(): returns language name string
    - get_tree_sitter_language(): returns tree-sitter Language object
    - extract_declarations(): walks the AST and extracts type declarations
    """

    @abstractmethod
    def get_language(self) -> str:
        """Return the language identifier (e.g., 'csharp')."""
        ...

    @abstractmethod
    def get_tree_sitter_language(self) -> tree_sitter.Language:
        """Return the tree-sitter Language object for this language."""
        ...

    @abstractmethod
    def extract_declarations(
        self, tree: tree_sitter.Tree, source: bytes, file_path: str
    ) -> Tuple[List[TypeDeclaration], List[UsingDirective], bool]:
        """Extract declarations from a parsed tree-sitter AST.

        Args:
            tree: Parsed tree-sitter tree
            source: Raw source bytes
            file_path: Path of the file, used for diagnostics

        Returns:
            (top-level type declarations, compilation-unit usings,
             whether the file contains top-level statements)
        """
        ...

    def parse_file(self, file_path: str) -> ParseResult:
        """Parse a source file into a ParseResult.

        Unreadable files produce an empty result carrying an error instead
        of raising, so one bad file never aborts a project.
        """
        try:
            with open(file_path, "r", encoding="utf-8-sig", errors="replace") as f:
                source_text = f.read()
        except OSError as e:
            return ParseResult(
                file_path=file_path,
                language=self.get_language(),
                types=[],
                usings=[],
                errors=[ParseError(file_path=file_path, line=0, message=str(e), severity="error")],
            )

        return self.parse_source(source_text, file_path)

    def parse_source(self, source_text: str, file_path: str) -> ParseResult:
        """Parse source code string into a ParseResult.

        Args:
            source_text: Source code as string
            file_path: File path (for metadata)

        Returns:
            ParseResult with extracted declarations
        """
        errors: List[ParseError] = []
        source_bytes = source_text.encode("utf-8")
        line_count = source_text.count("\n") + (1 if source_text and not source_text.endswith("\n") else 0)

        parser = tree_sitter.Parser(self.get_tree_sitter_language())
        tree = parser.parse(source_bytes)

        if tree.root_node.has_error:
            errors.append(
                ParseError(
                    file_path=file_path,
                    line=0,
                    message="Tree-sitter reported parse errors in file",
                    severity="warning",
                )
            )

        try:
            types, usings, has_statements = self.extract_declarations(tree, source_bytes, file_path)
        except Exception as e:
            logger.error(f"Failed to extract declarations from {file_path}: {e}")
            types, usings, has_statements = [], [], False
            errors.append(ParseError(file_path=file_path, line=0, message=f"Declaration extraction failed: {e}", severity="error"))

        return ParseResult(
            file_path=file_path,
            language=self.get_language(),
            types=types,
            usings=usings,
            has_top_level_statements=has_statements,
            line_count=line_count,
            errors=errors,
        )
