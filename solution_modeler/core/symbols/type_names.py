"""C# type-name parsing and display.

Turns the text of a type as written in source ("Dictionary<string, List<Item>>",
"global::Shapes.Circle?", "int[,]") into a small syntax tree the binder can
resolve, and renders minimally qualified display names from it.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..constants import PREDEFINED_TYPES, SPECIAL_TYPE_KEYWORDS

_TOKEN_RE = re.compile(r"\s*(::|@?[^\W\d]\w*|[<>,.?\[\]()*])")

# Leading modifiers that can precede a type in member signatures
_TYPE_PREFIXES = ("ref readonly ", "ref ", "scoped ", "readonly ")


class TypeSyntaxError(ValueError):
    """Raised when type text cannot be parsed."""


@dataclass
class NamePart:
    name: str
    type_arguments: List["TypeSyntax"] = field(default_factory=list)

    @property
    def arity_name(self) -> str:
        if self.type_arguments:
            return f"{self.name}`{len(self.type_arguments)}"
        return self.name


@dataclass
class TypeSyntax:
    """Parsed type.

    form is one of: "named", "predefined", "nullable", "array", "pointer",
    "tuple".
    """

    form: str
    parts: List[NamePart] = field(default_factory=list)  # named
    alias: Optional[str] = None  # named: "global" for global::X
    keyword: Optional[str] = None  # predefined
    element: Optional["TypeSyntax"] = None  # nullable / array / pointer
    rank: int = 1  # array
    elements: List[Tuple["TypeSyntax", Optional[str]]] = field(default_factory=list)  # tuple

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.parts]


class _TypeParser:
    """Recursive-descent parser over the token stream of one type."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.pos = 0

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        tokens = []
        pos = 0
        stripped = text.rstrip()
        while pos < len(stripped):
            match = _TOKEN_RE.match(stripped, pos)
            if not match:
                raise TypeSyntaxError(f"Unexpected character in type {text!r} at {pos}")
            tokens.append(match.group(1))
            pos = match.end()
        return tokens

    def peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self, expected: Optional[str] = None) -> str:
        token = self.peek()
        if token is None or (expected is not None and token != expected):
            raise TypeSyntaxError(f"Expected {expected or 'token'} in type {self.text!r}")
        self.pos += 1
        return token

    def parse(self) -> TypeSyntax:
        result = self.parse_type()
        if self.peek() is not None:
            raise TypeSyntaxError(f"Trailing tokens in type {self.text!r}")
        return result

    def parse_type(self) -> TypeSyntax:
        result = self.parse_non_array()
        while True:
            token = self.peek()
            if token == "?":
                self.take()
                result = TypeSyntax(form="nullable", element=result)
            elif token == "*":
                self.take()
                result = TypeSyntax(form="pointer", element=result)
            elif token == "[":
                self.take()
                rank = 1
                while self.peek() == ",":
                    self.take()
                    rank += 1
                self.take("]")
                result = TypeSyntax(form="array", element=result, rank=rank)
            else:
                return result

    def parse_non_array(self) -> TypeSyntax:
        if self.peek() == "(":
            return self.parse_tuple()

        name = self._identifier()
        alias = None
        if self.peek() == "::":
            self.take()
            alias = name
            name = self._identifier()

        if alias is None and (name in PREDEFINED_TYPES or name == "dynamic"):
            if self.peek() != ".":
                return TypeSyntax(form="predefined", keyword=name)

        parts = [NamePart(name, self._type_arguments())]
        while self.peek() == ".":
            self.take()
            parts.append(NamePart(self._identifier(), self._type_arguments()))
        return TypeSyntax(form="named", parts=parts, alias=alias)

    def parse_tuple(self) -> TypeSyntax:
        self.take("(")
        elements = []
        while True:
            element_type = self.parse_type()
            element_name = None
            if self.peek() not in (",", ")"):
                element_name = self._identifier()
            elements.append((element_type, element_name))
            if self.peek() == ",":
                self.take()
                continue
            self.take(")")
            return TypeSyntax(form="tuple", elements=elements)

    def _identifier(self) -> str:
        token = self.take()
        if not (token[0] == "@" or token[0].isalpha() or token[0] == "_"):
            raise TypeSyntaxError(f"Expected identifier in type {self.text!r}, got {token!r}")
        return token.lstrip("@")

    def _type_arguments(self) -> List[TypeSyntax]:
        if self.peek() != "<":
            return []
        self.take("<")
        arguments = []
        # Unbound generic (typeof(List<>)) has no arguments to resolve
        if self.peek() in (">", ","):
            while self.peek() == ",":
                self.take()
            self.take(">")
            return arguments
        while True:
            arguments.append(self.parse_type())
            if self.peek() == ",":
                self.take()
                continue
            self.take(">")
            return arguments


def parse_type_name(text: str) -> TypeSyntax:
    """Parse C# type text into a TypeSyntax.

    Raises:
        TypeSyntaxError: If the text is not a type this parser understands
            (function pointers, for instance).
    """
    cleaned = " ".join(text.split())
    for prefix in _TYPE_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
    if not cleaned:
        raise TypeSyntaxError("Empty type text")
    return _TypeParser(cleaned).parse()


def display_name(syntax: TypeSyntax) -> str:
    """Minimally qualified display name for unbound type syntax.

    Namespace qualifiers are dropped, System special types use keywords:
      "System.Collections.Generic.List<System.Int32>" -> "List<int>"
    """
    if syntax.form == "predefined":
        return syntax.keyword
    if syntax.form == "nullable":
        return f"{display_name(syntax.element)}?"
    if syntax.form == "pointer":
        return f"{display_name(syntax.element)}*"
    if syntax.form == "array":
        return f"{display_name(syntax.element)}[{',' * (syntax.rank - 1)}]"
    if syntax.form == "tuple":
        rendered = []
        for element_type, element_name in syntax.elements:
            text = display_name(element_type)
            rendered.append(f"{text} {element_name}" if element_name else text)
        return f"({', '.join(rendered)})"
    if syntax.names[:-1] == ["System"] and syntax.names[-1] in SPECIAL_TYPE_KEYWORDS:
        return SPECIAL_TYPE_KEYWORDS[syntax.names[-1]]
    return format_name_parts(syntax.parts[-1:])


def format_name_parts(parts: List[NamePart]) -> str:
    """Join name parts with their generic arguments."""
    rendered = []
    for part in parts:
        if part.type_arguments:
            args = [display_name(a) for a in part.type_arguments]
            rendered.append(f"{part.name}<{', '.join(args)}>")
        else:
            rendered.append(part.name)
    return ".".join(rendered)


def split_type_parameters(text: str) -> List[str]:
    """Extract type parameter names from "<in TKey, [Attr] out TValue>"."""
    inner = text.strip()
    if inner.startswith("<") and inner.endswith(">"):
        inner = inner[1:-1]
    names = []
    for piece in inner.split(","):
        match = re.search(r"(@?\w+)\s*$", piece.strip())
        if match:
            names.append(match.group(1).lstrip("@"))
    return names
