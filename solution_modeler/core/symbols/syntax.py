"""Parsed declaration data models.

Syntax-level view of a source file as produced by the language parser,
before names are bound. These are pure data containers; no parsing logic.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class ParseError:
    """An error encountered during parsing."""

    file_path: str
    line: int
    message: str
    severity: str = "warning"  # "warning" | "error"


@dataclass
class UsingDirective:
    """`using X;`, `using static X;`, `using A = X;`, `global using X;`."""

    target: str  # "System.Collections.Generic"
    alias: Optional[str] = None
    is_static: bool = False
    is_global: bool = False


@dataclass
class ParameterDeclaration:
    name: str
    type_text: str


@dataclass
class MemberDeclaration:
    """A property, indexer, method or other function member."""

    member_type: str  # "property" | "indexer" | "method" | "constructor" | "destructor" | "operator" | "conversion"
    name: str
    type_text: str  # property type or method return type; "" for constructors
    start_line: int
    parameters: List[ParameterDeclaration] = field(default_factory=list)
    type_parameters: List[str] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    is_explicit_interface: bool = False


@dataclass
class TypeDeclaration:
    """A single (possibly partial) type declaration.

    Nested declarations hang off their enclosing type; partial parts of one
    type stay separate here and are merged by the binder.
    """

    kind: str  # "class" | "interface" | "struct" | "enum" | "delegate" | "record" | "record struct"
    name: str
    namespace: str  # "" for the global namespace
    file_path: str
    start_line: int
    end_line: int
    containing_types: List[str] = field(default_factory=list)  # arity-qualified names, outermost first
    type_parameters: List[str] = field(default_factory=list)
    modifiers: List[str] = field(default_factory=list)
    base_types: List[str] = field(default_factory=list)  # raw base-list entries
    members: List[MemberDeclaration] = field(default_factory=list)
    nested_types: List["TypeDeclaration"] = field(default_factory=list)
    usings: List[UsingDirective] = field(default_factory=list)  # directives in scope
    record_parameters: List[ParameterDeclaration] = field(default_factory=list)
    delegate_return_type: Optional[str] = None
    delegate_parameters: List[ParameterDeclaration] = field(default_factory=list)

    @property
    def arity_name(self) -> str:
        """Name with generic arity suffix: Repository`1."""
        if self.type_parameters:
            return f"{self.name}`{len(self.type_parameters)}"
        return self.name


@dataclass
class ParseResult:
    """Complete parse output for a single file."""

    file_path: str
    language: str
    types: List[TypeDeclaration]
    usings: List[UsingDirective]  # compilation-unit level directives
    has_top_level_statements: bool = False
    line_count: int = 0
    errors: List[ParseError] = field(default_factory=list)

    @property
    def global_usings(self) -> List[UsingDirective]:
        return [u for u in self.usings if u.is_global]
