"""C# declaration parser using tree-sitter.

Walks the tree-sitter AST to extract namespaces, using directives, type
declarations (classes, interfaces, structs, enums, records, delegates), their
nested types and their function members (methods, constructors, destructors,
operators, properties, indexers).
"""

import logging
import re
from typing import List, Optional, Tuple

import tree_sitter
import tree_sitter_c_sharp

from .base import BaseLanguageParser
from .syntax import MemberDeclaration, ParameterDeclaration, TypeDeclaration, UsingDirective
from .type_names import split_type_parameters

logger = logging.getLogger(__name__)

_CSHARP_LANGUAGE = tree_sitter.Language(tree_sitter_c_sharp.language())

_TYPE_NODES = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "struct_declaration": "struct",
    "enum_declaration": "enum",
    "record_declaration": "record",
    "record_struct_declaration": "record struct",
    "delegate_declaration": "delegate",
}

_MEMBER_NODES = {
    "method_declaration": "method",
    "constructor_declaration": "constructor",
    "destructor_declaration": "destructor",
    "operator_declaration": "operator",
    "conversion_operator_declaration": "conversion",
    "property_declaration": "property",
    "indexer_declaration": "indexer",
}

_USING_RE = re.compile(
    r"^(?P<global>global\s+)?using\s+(?P<static>static\s+)?(?:unsafe\s+)?"
    r"(?:(?P<alias>@?\w+)\s*=\s*)?(?P<target>[^;]+?)\s*;$",
    re.DOTALL,
)

_IGNORED_BASE_NODES = frozenset({":", ",", "argument_list", "comment"})


class CSharpParser(BaseLanguageParser):
    """tree-sitter based C# declaration parser.

    Extracts:
    - Class / interface / struct / enum / record / delegate declarations
    - Nested types, recursively
    - Methods, constructors, destructors, operators, properties, indexers
    - Block and file-scoped namespaces, using directives, top-level statements
    """

    def get_language(self) -> str:
        return "csharp"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _CSHARP_LANGUAGE

    def extract_declarations(
        self, tree: tree_sitter.Tree, source: bytes, file_path: str
    ) -> Tuple[List[TypeDeclaration], List[UsingDirective], bool]:
        root = tree.root_node
        types: List[TypeDeclaration] = []
        file_usings = [
            u for u in (self._parse_using(c, source) for c in root.children if c.type == "using_directive") if u
        ]
        has_statements = any(c.type == "global_statement" for c in root.children)
        self._walk_members(root, source, file_path, namespace="", usings=[], types=types)
        return types, file_usings, has_statements

    # =========================================================================
    # Recursive namespace walker
    # =========================================================================

    def _walk_members(
        self,
        node: tree_sitter.Node,
        source: bytes,
        file_path: str,
        namespace: str,
        usings: List[UsingDirective],
        types: List[TypeDeclaration],
    ) -> None:
        """Walk namespace-level nodes, tracking the namespace and usings in scope."""
        scoped_usings = list(usings)
        for child in node.children:
            if child.type == "using_directive":
                directive = self._parse_using(child, source)
                if directive:
                    scoped_usings.append(directive)

            elif child.type == "namespace_declaration":
                full_ns = self._join(namespace, self._extract_namespace_name(child, source))
                self._walk_members(child, source, file_path, full_ns, scoped_usings, types)

            elif child.type == "file_scoped_namespace_declaration":
                full_ns = self._join(namespace, self._extract_namespace_name(child, source))
                self._walk_members(child, source, file_path, full_ns, scoped_usings, types)
                # Older grammars leave the namespace members as siblings
                namespace = full_ns

            elif child.type == "declaration_list":
                self._walk_members(child, source, file_path, namespace, scoped_usings, types)

            elif child.type in _TYPE_NODES:
                decl = self._extract_type(child, source, file_path, namespace, [], scoped_usings)
                if decl:
                    types.append(decl)

    # =========================================================================
    # Type-level extractor
    # =========================================================================

    def _extract_type(
        self,
        node: tree_sitter.Node,
        source: bytes,
        file_path: str,
        namespace: str,
        containing_types: List[str],
        usings: List[UsingDirective],
    ) -> Optional[TypeDeclaration]:
        """Extract a type declaration, its members and nested types."""
        name = self._get_child_text(node, "name", source)
        if not name:
            return None

        kind = _TYPE_NODES[node.type]
        if kind == "record" and any(c.type == "struct" for c in node.children):
            kind = "record struct"

        decl = TypeDeclaration(
            kind=kind,
            name=name.lstrip("@"),
            namespace=namespace,
            file_path=file_path,
            start_line=node.start_point.row + 1,
            end_line=node.end_point.row + 1,
            containing_types=list(containing_types),
            type_parameters=self._extract_type_parameters(node, source),
            modifiers=self._extract_modifiers(node, source),
            usings=list(usings),
        )

        if kind == "delegate":
            decl.delegate_return_type = self._text(self._return_type_node(node), source)
            decl.delegate_parameters = self._extract_parameters(
                self._get_child_by_type(node, "parameter_list"), source
            )
            return decl

        if kind != "enum":
            decl.base_types = self._extract_base_types(node, source)
        if kind.startswith("record"):
            decl.record_parameters = self._extract_parameters(
                self._get_child_by_type(node, "parameter_list"), source
            )

        body = self._get_child_by_type(node, "declaration_list")
        if body:
            nested_scope = containing_types + [decl.arity_name]
            for child in body.children:
                if child.type in _MEMBER_NODES:
                    member = self._extract_member(child, source)
                    if member:
                        decl.members.append(member)
                elif child.type in _TYPE_NODES:
                    nested = self._extract_type(child, source, file_path, namespace, nested_scope, usings)
                    if nested:
                        decl.nested_types.append(nested)

        return decl

    # =========================================================================
    # Member extractor
    # =========================================================================

    def _extract_member(self, node: tree_sitter.Node, source: bytes) -> Optional[MemberDeclaration]:
        """Extract a function member or property."""
        member_type = _MEMBER_NODES[node.type]

        if member_type == "indexer":
            name = "this[]"
        elif member_type in ("operator", "conversion"):
            name = "operator"
        else:
            name = self._get_child_text(node, "name", source)
        if not name:
            return None

        if member_type in ("property", "indexer"):
            type_text = self._get_child_text(node, "type", source) or ""
        elif member_type in ("constructor", "destructor"):
            type_text = ""
        else:
            type_text = self._text(self._return_type_node(node), source)

        if member_type == "indexer":
            params_node = self._get_child_by_type(node, "bracketed_parameter_list")
        else:
            params_node = self._get_child_by_type(node, "parameter_list")

        return MemberDeclaration(
            member_type=member_type,
            name=name.lstrip("@"),
            type_text=type_text,
            start_line=node.start_point.row + 1,
            parameters=self._extract_parameters(params_node, source),
            type_parameters=self._extract_type_parameters(node, source),
            modifiers=self._extract_modifiers(node, source),
            is_explicit_interface=self._get_child_by_type(node, "explicit_interface_specifier") is not None,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _text(node: Optional[tree_sitter.Node], source: bytes) -> str:
        if node is None:
            return ""
        return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    @staticmethod
    def _get_child_text(node: tree_sitter.Node, field_name: str, source: bytes) -> Optional[str]:
        child = node.child_by_field_name(field_name)
        if child:
            return source[child.start_byte:child.end_byte].decode("utf-8", errors="replace")
        return None

    @staticmethod
    def _get_child_by_type(node: tree_sitter.Node, type_name: str) -> Optional[tree_sitter.Node]:
        for child in node.children:
            if child.type == type_name:
                return child
        return None

    @staticmethod
    def _join(namespace: str, name: str) -> str:
        if namespace and name:
            return f"{namespace}.{name}"
        return namespace or name

    @staticmethod
    def _extract_namespace_name(node: tree_sitter.Node, source: bytes) -> str:
        """Extract namespace name from a namespace declaration."""
        name_node = node.child_by_field_name("name")
        if name_node:
            text = source[name_node.start_byte:name_node.end_byte].decode("utf-8", errors="replace")
            return "".join(text.split())
        return ""

    @staticmethod
    def _parse_using(node: tree_sitter.Node, source: bytes) -> Optional[UsingDirective]:
        """Parse a using directive from its text; grammar versions disagree on fields."""
        text = " ".join(source[node.start_byte:node.end_byte].decode("utf-8", errors="replace").split())
        match = _USING_RE.match(text)
        if not match:
            logger.debug(f"Unrecognized using directive: {text}")
            return None
        target = match.group("target").replace(" ", "")
        if target.startswith("global::"):
            target = target[len("global::"):]
        alias = match.group("alias")
        return UsingDirective(
            target=target,
            alias=alias.lstrip("@") if alias else None,
            is_static=bool(match.group("static")),
            is_global=bool(match.group("global")),
        )

    @staticmethod
    def _return_type_node(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
        """Return-type node of a method, operator or delegate.

        Newer grammars name the field 'returns', older ones 'type'.
        """
        for field_name in ("returns", "type"):
            child = node.child_by_field_name(field_name)
            if child is not None:
                return child
        for child in node.named_children:
            if child.type not in ("attribute_list", "modifier"):
                return child
        return None

    @staticmethod
    def _extract_modifiers(node: tree_sitter.Node, source: bytes) -> List[str]:
        """Extract modifier keywords (public, static, override, partial, etc.)."""
        modifiers = []
        for child in node.children:
            if child.type == "modifier":
                text = source[child.start_byte:child.end_byte].decode("utf-8", errors="replace").strip()
                modifiers.append(text)
        return modifiers

    @staticmethod
    def _extract_type_parameters(node: tree_sitter.Node, source: bytes) -> List[str]:
        """Extract generic type parameter names from a type_parameter_list."""
        for child in node.children:
            if child.type == "type_parameter_list":
                text = source[child.start_byte:child.end_byte].decode("utf-8", errors="replace")
                return split_type_parameters(text)
        return []

    @staticmethod
    def _extract_base_types(node: tree_sitter.Node, source: bytes) -> List[str]:
        """Extract the raw entries of a base list: class Foo : Bar, IDisposable."""
        base_list = None
        for child in node.children:
            if child.type == "base_list":
                base_list = child
                break
        if not base_list:
            return []

        bases = []
        for child in base_list.children:
            if not child.is_named or child.type in _IGNORED_BASE_NODES:
                continue
            # record Derived(int X) : Base(X)
            if child.type == "primary_constructor_base_type":
                child = child.named_children[0] if child.named_children else child
            text = source[child.start_byte:child.end_byte].decode("utf-8", errors="replace").strip()
            if text:
                bases.append(text)
        return bases

    def _extract_parameters(
        self, params_node: Optional[tree_sitter.Node], source: bytes
    ) -> List[ParameterDeclaration]:
        """Extract (type, name) pairs from a parameter list."""
        if params_node is None:
            return []

        children = params_node.children
        params = []
        index = 0
        while index < len(children):
            child = children[index]
            index += 1
            if child.type == "parameter":
                name = self._get_child_text(child, "name", source) or ""
                type_text = self._get_child_text(child, "type", source) or ""
            elif child.type == "parameter_array":
                # Older grammars: params T[] values
                parts = [c for c in child.named_children if c.type != "attribute_list"]
                if not parts:
                    continue
                type_text = self._text(parts[0], source)
                name = self._text(parts[-1], source) if len(parts) > 1 else ""
            elif child.type == "params":
                # Newer grammars: params, its type and its name are siblings in the list
                following = [
                    i for i in range(index, len(children))
                    if children[i].is_named and children[i].type != "comment"
                ]
                if len(following) < 2:
                    continue
                type_text = self._text(children[following[0]], source)
                name = self._text(children[following[1]], source)
                index = following[1] + 1
            else:
                continue
            params.append(ParameterDeclaration(name=name.lstrip("@"), type_text=type_text))
        return params
