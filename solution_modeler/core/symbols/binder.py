"""Binder: turns parsed declarations into the read-only symbol model.

Declarations of every project in a solution are registered first, building
one declaration index (qualified key → partial declarations). Binding then
resolves every written type name against that index and produces one
ModuleSymbol per project. There is no global state: the index lives on the
Binder instance built for a single run.

Qualified keys are dotted namespace + containing types + name, with a
backtick arity suffix for generic types: ``Shapes.Repository`1``.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..constants import (
    IMPLICIT_BASE_TYPES,
    NULLABLE_TYPE,
    PREDEFINED_TYPES,
    SPECIAL_TYPE_KEYWORDS,
    VALUE_KEYWORDS,
)
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
from .syntax import (
    MemberDeclaration,
    ParameterDeclaration,
    ParseResult,
    TypeDeclaration,
    UsingDirective,
)
from .type_names import TypeSyntax, TypeSyntaxError, parse_type_name

logger = logging.getLogger(__name__)

_KIND_MAP = {
    "class": TypeKind.CLASS,
    "record": TypeKind.CLASS,
    "interface": TypeKind.INTERFACE,
    "struct": TypeKind.STRUCT,
    "record struct": TypeKind.STRUCT,
    "enum": TypeKind.ENUM,
    "delegate": TypeKind.DELEGATE,
}

_METHOD_KINDS = {
    "method": MethodKind.ORDINARY,
    "constructor": MethodKind.CONSTRUCTOR,
    "destructor": MethodKind.DESTRUCTOR,
    "operator": MethodKind.OPERATOR,
    "conversion": MethodKind.CONVERSION,
}

_VALUE_SYSTEM_TYPES = frozenset(f"System.{PREDEFINED_TYPES[k]}" for k in VALUE_KEYWORDS)

_SYNTHESIZED_PROGRAM = "Program"


@dataclass
class _Scope:
    """Names visible at a point in source."""

    namespace: str
    type_keys: List[str]  # enclosing type keys, outermost first
    type_parameters: Set[str] = field(default_factory=set)
    usings: List[UsingDirective] = field(default_factory=list)


def accessibility_from_modifiers(modifiers: Iterable[str], default: Accessibility) -> Accessibility:
    """Map C# access modifiers to an Accessibility, falling back to default."""
    mods = set(modifiers)
    if "public" in mods:
        return Accessibility.PUBLIC
    if "protected" in mods and "internal" in mods:
        return Accessibility.PROTECTED_OR_INTERNAL
    if "private" in mods and "protected" in mods:
        return Accessibility.PROTECTED_AND_INTERNAL
    if "protected" in mods:
        return Accessibility.PROTECTED
    if "internal" in mods or "file" in mods:
        return Accessibility.INTERNAL
    if "private" in mods:
        return Accessibility.PRIVATE
    return default


def _join(*parts: str) -> str:
    return ".".join(p for p in parts if p)


def _looks_like_interface(text: str) -> bool:
    """Naming convention fallback: IDisposable, IRepository<T>."""
    bare_name = text.split("<")[0].split(".")[-1].split("::")[-1].strip()
    return len(bare_name) >= 2 and bare_name[0] == "I" and bare_name[1].isupper()


class Binder:
    """Builds ModuleSymbols from the parse results of a solution's projects.

    Usage:
        binder = Binder()
        binder.add_project("Shapes", parse_results)
        modules = binder.bind_all()
    """

    def __init__(self):
        self._parts: Dict[str, List[TypeDeclaration]] = {}
        self._kinds: Dict[str, str] = {}
        self._parent: Dict[str, Optional[str]] = {}
        self._children: Dict[str, List[str]] = {}
        self._synthesized: Set[str] = set()
        self._projects: List[str] = []
        self._project_roots: Dict[str, List[str]] = {}
        self._project_usings: Dict[str, List[UsingDirective]] = {}
        self._project_diagnostics: Dict[str, List[str]] = {}
        self._owner: Dict[str, str] = {}
        self._bound: Dict[str, TypeSymbol] = {}

    # =========================================================================
    # Declaration
    # =========================================================================

    def add_project(
        self,
        name: str,
        results: Sequence[ParseResult],
        implicit_usings: Sequence[str] = (),
    ) -> None:
        """Register the declarations of one project in the declaration index."""
        self._projects.append(name)
        self._project_roots[name] = []
        usings = [UsingDirective(target=u, is_global=True) for u in implicit_usings]
        diagnostics = []
        statement_file = None

        for result in results:
            usings.extend(result.global_usings)
            for error in result.errors:
                diagnostics.append(f"{error.file_path}:{error.line}: {error.severity}: {error.message}")
            for decl in result.types:
                self._declare(name, decl, parent_key=None)
            if result.has_top_level_statements and statement_file is None:
                statement_file = result.file_path

        if statement_file is not None and _SYNTHESIZED_PROGRAM not in self._parts:
            program = TypeDeclaration(
                kind="class",
                name=_SYNTHESIZED_PROGRAM,
                namespace="",
                file_path=statement_file,
                start_line=1,
                end_line=1,
            )
            self._declare(name, program, parent_key=None)
            self._synthesized.add(_SYNTHESIZED_PROGRAM)

        self._project_usings[name] = usings
        self._project_diagnostics[name] = diagnostics

    def _declare(self, project: str, decl: TypeDeclaration, parent_key: Optional[str]) -> None:
        key = _join(decl.namespace, *decl.containing_types, decl.arity_name)
        owner = self._owner.get(key)
        if owner is not None and owner != project:
            logger.warning(f"Type {key} is declared in both {owner} and {project}; keeping {owner}")
            return

        if key not in self._parts:
            self._parts[key] = []
            self._owner[key] = project
            self._kinds[key] = decl.kind
            self._parent[key] = parent_key
            if parent_key is None:
                self._project_roots[project].append(key)
            else:
                self._children.setdefault(parent_key, []).append(key)
        self._parts[key].append(decl)

        for nested in decl.nested_types:
            self._declare(project, nested, key)

    # =========================================================================
    # Binding
    # =========================================================================

    def bind_all(self) -> List[ModuleSymbol]:
        """Bind every registered project, in registration order."""
        return [self.bind_project(name) for name in self._projects]

    def bind_project(self, name: str) -> ModuleSymbol:
        """Bind one project into a ModuleSymbol with its namespace tree."""
        members: Dict[str, List[Tuple[str, object]]] = {"": []}

        def ensure(namespace: str) -> None:
            if namespace in members:
                return
            parent = namespace.rpartition(".")[0]
            ensure(parent)
            members[namespace] = []
            members[parent].append(("namespace", namespace))

        for key in self._project_roots[name]:
            symbol = self._bind_type(key)
            ensure(symbol.namespace)
            members[symbol.namespace].append(("type", symbol))

        def build(namespace: str) -> NamespaceSymbol:
            return NamespaceSymbol(
                name=namespace,
                members=tuple(
                    build(value) if kind == "namespace" else value
                    for kind, value in members[namespace]
                ),
            )

        return ModuleSymbol(
            name=name,
            global_namespace=build(""),
            diagnostics=tuple(self._project_diagnostics.get(name, [])),
        )

    def _bind_type(self, key: str) -> TypeSymbol:
        if key in self._bound:
            return self._bound[key]

        parts = self._parts[key]
        first = parts[0]
        kind_text = self._kinds[key]
        modifiers = [m for part in parts for m in part.modifiers]

        display = first.name
        if first.type_parameters:
            display = f"{first.name}<{', '.join(first.type_parameters)}>"

        base_type, interfaces = self._bind_bases(key, kind_text, parts)

        if kind_text == "delegate":
            properties: List[PropertyMember] = []
            methods = [self._delegate_invoke(first, self._scope_for(first, key))]
        else:
            properties, methods = self._bind_members(key, kind_text, parts)

        symbol = TypeSymbol(
            qualified_name=key,
            display_name=display,
            namespace=first.namespace,
            accessibility=accessibility_from_modifiers(modifiers, self._default_type_accessibility(key)),
            kind=_KIND_MAP[kind_text],
            base_type=base_type,
            interfaces=tuple(interfaces),
            properties=tuple(properties),
            methods=tuple(methods),
            nested_types=tuple(self._bind_type(child) for child in self._children.get(key, [])),
            is_synthesized=key in self._synthesized,
        )
        self._bound[key] = symbol
        return symbol

    def _bind_bases(
        self, key: str, kind_text: str, parts: List[TypeDeclaration]
    ) -> Tuple[Optional[TypeReference], List[TypeReference]]:
        """Split base-list entries into the base class and interfaces."""
        base_type: Optional[TypeReference] = None
        interfaces: List[TypeReference] = []
        seen: Set[str] = set()
        can_derive = kind_text in ("class", "record")

        for part in parts:
            scope = self._scope_for(part, key)
            for index, text in enumerate(part.base_types):
                ref = self.resolve_type_text(text, scope)
                if can_derive and index == 0 and base_type is None and not self._is_interface(ref, text):
                    base_type = ref
                    continue
                if ref.identity not in seen:
                    seen.add(ref.identity)
                    interfaces.append(ref)

        implicit_kind = _KIND_MAP[kind_text].value
        if base_type is None and implicit_kind in IMPLICIT_BASE_TYPES:
            display, qualified = IMPLICIT_BASE_TYPES[implicit_kind]
            base_type = TypeReference(display_name=display, qualified_name=qualified)
        return base_type, interfaces

    def _bind_members(
        self, key: str, kind_text: str, parts: List[TypeDeclaration]
    ) -> Tuple[List[PropertyMember], List[MethodMember]]:
        in_interface = kind_text == "interface"
        properties: List[PropertyMember] = []
        methods: List[MethodMember] = []

        declared_properties = {
            m.name for part in parts for m in part.members if m.member_type == "property"
        }
        record_parameters: List[ParameterDeclaration] = []
        record_scope = None
        for part in parts:
            if part.record_parameters:
                record_parameters = part.record_parameters
                record_scope = self._scope_for(part, key)
                break

        # Positional record parameters become public properties
        for param in record_parameters:
            if param.name not in declared_properties:
                properties.append(PropertyMember(
                    name=param.name,
                    type=self.resolve_type_text(param.type_text, record_scope),
                    accessibility=Accessibility.PUBLIC,
                ))

        for part in parts:
            scope = self._scope_for(part, key)
            for member in part.members:
                if member.member_type in ("property", "indexer"):
                    properties.append(PropertyMember(
                        name=member.name,
                        type=self.resolve_type_text(member.type_text, scope),
                        accessibility=self._member_accessibility(member, in_interface),
                    ))
                else:
                    methods.append(self._bind_method(member, scope, in_interface))

        if kind_text.startswith("record"):
            methods.extend(self._record_members(key, kind_text, record_parameters, record_scope))
        if key in self._synthesized:
            methods.append(MethodMember(
                name="<Main>$",
                parameters=(Parameter("args", TypeReference("string[]", is_named=False)),),
                return_type=TypeReference("void", "System.Void"),
                accessibility=Accessibility.PRIVATE,
                is_synthesized=True,
            ))
        return properties, methods

    def _bind_method(self, member: MemberDeclaration, scope: _Scope, in_interface: bool) -> MethodMember:
        method_scope = replace(scope, type_parameters=scope.type_parameters | set(member.type_parameters))
        kind = _METHOD_KINDS[member.member_type]
        if member.is_explicit_interface:
            kind = MethodKind.EXPLICIT_INTERFACE_IMPLEMENTATION

        if member.type_text:
            return_type = self.resolve_type_text(member.type_text, method_scope)
        else:
            return_type = TypeReference("void", "System.Void")

        return MethodMember(
            name=member.name,
            parameters=self._bind_parameters(member.parameters, method_scope),
            return_type=return_type,
            accessibility=self._member_accessibility(member, in_interface),
            kind=kind,
            is_override="override" in member.modifiers,
        )

    def _bind_parameters(self, params: List[ParameterDeclaration], scope: _Scope) -> Tuple[Parameter, ...]:
        return tuple(Parameter(p.name, self.resolve_type_text(p.type_text, scope)) for p in params)

    def _delegate_invoke(self, decl: TypeDeclaration, scope: _Scope) -> MethodMember:
        return MethodMember(
            name="Invoke",
            parameters=self._bind_parameters(decl.delegate_parameters, scope),
            return_type=self.resolve_type_text(decl.delegate_return_type or "void", scope),
            accessibility=Accessibility.PUBLIC,
            kind=MethodKind.DELEGATE_INVOKE,
        )

    def _record_members(
        self,
        key: str,
        kind_text: str,
        record_parameters: List[ParameterDeclaration],
        scope: Optional[_Scope],
    ) -> List[MethodMember]:
        """Members the compiler generates for a record, marked synthesized."""
        own = self._bind_type_reference_to(key)
        other_type = own if kind_text == "record struct" else replace(own, display_name=f"{own.display_name}?")
        members = [MethodMember(
            name="Equals",
            parameters=(Parameter("other", other_type),),
            return_type=TypeReference("bool", "System.Boolean"),
            accessibility=Accessibility.PUBLIC,
            is_synthesized=True,
        )]
        if record_parameters:
            members.append(MethodMember(
                name="Deconstruct",
                parameters=self._bind_parameters(record_parameters, scope),
                return_type=TypeReference("void", "System.Void"),
                accessibility=Accessibility.PUBLIC,
                is_synthesized=True,
            ))
        return members

    def _bind_type_reference_to(self, key: str) -> TypeReference:
        first = self._parts[key][0]
        display = first.name
        if first.type_parameters:
            display = f"{first.name}<{', '.join(first.type_parameters)}>"
        return TypeReference(display_name=display, qualified_name=key)

    # =========================================================================
    # Accessibility
    # =========================================================================

    def _default_type_accessibility(self, key: str) -> Accessibility:
        parent = self._parent.get(key)
        if parent is None:
            return Accessibility.INTERNAL
        if self._kinds[parent] == "interface":
            return Accessibility.PUBLIC
        return Accessibility.PRIVATE

    @staticmethod
    def _member_accessibility(member: MemberDeclaration, in_interface: bool) -> Accessibility:
        if member.is_explicit_interface:
            return Accessibility.PRIVATE
        default = Accessibility.PUBLIC if in_interface else Accessibility.PRIVATE
        return accessibility_from_modifiers(member.modifiers, default)

    # =========================================================================
    # Name resolution
    # =========================================================================

    def _type_chain(self, key: str) -> List[str]:
        """The key and the keys of its containing types, outermost first."""
        chain = []
        current: Optional[str] = key
        while current is not None:
            chain.insert(0, current)
            current = self._parent.get(current)
        return chain

    def _scope_for(self, decl: TypeDeclaration, key: str) -> _Scope:
        chain = self._type_chain(key)
        type_parameters: Set[str] = set()
        for type_key in chain:
            type_parameters.update(self._parts[type_key][0].type_parameters)

        project = self._owner[key]
        return _Scope(
            namespace=decl.namespace,
            type_keys=chain,
            type_parameters=type_parameters,
            usings=list(decl.usings) + self._project_usings.get(project, []),
        )

    def resolve_type_text(self, text: str, scope: Optional[_Scope]) -> TypeReference:
        """Resolve type text written in source to a TypeReference.

        Text this parser cannot read (function pointers, malformed code) gives
        an unnamed reference that simply never resolves.
        """
        if scope is None:
            scope = _Scope(namespace="", type_keys=[])
        try:
            syntax = parse_type_name(text)
        except TypeSyntaxError as e:
            logger.debug(f"Unparsed type {text!r}: {e}")
            return TypeReference(display_name=" ".join(text.split()), is_named=False)
        return self._bind_syntax(syntax, scope)

    def _bind_syntax(self, syntax: TypeSyntax, scope: _Scope) -> TypeReference:
        if syntax.form == "predefined":
            if syntax.keyword == "dynamic":
                return TypeReference(display_name="dynamic", is_named=False)
            return TypeReference(syntax.keyword, f"System.{PREDEFINED_TYPES[syntax.keyword]}")

        if syntax.form == "nullable":
            element = self._bind_syntax(syntax.element, scope)
            if self._is_value_type(element):
                return TypeReference(f"{element.display_name}?", NULLABLE_TYPE, (element,))
            return replace(element, display_name=f"{element.display_name}?")

        if syntax.form in ("array", "pointer"):
            element = self._bind_syntax(syntax.element, scope)
            suffix = "*" if syntax.form == "pointer" else f"[{',' * (syntax.rank - 1)}]"
            return TypeReference(display_name=f"{element.display_name}{suffix}", is_named=False)

        if syntax.form == "tuple":
            elements = []
            rendered = []
            for element_syntax, element_name in syntax.elements:
                element = self._bind_syntax(element_syntax, scope)
                elements.append(element)
                rendered.append(f"{element.display_name} {element_name}" if element_name else element.display_name)
            return TypeReference(
                display_name=f"({', '.join(rendered)})",
                qualified_name=f"System.ValueTuple`{len(elements)}",
                type_arguments=tuple(elements),
            )

        return self._bind_named(syntax, scope)

    def _bind_named(self, syntax: TypeSyntax, scope: _Scope) -> TypeReference:
        parts = syntax.parts
        if (
            syntax.alias is None
            and len(parts) == 1
            and not parts[0].type_arguments
            and parts[0].name in scope.type_parameters
        ):
            return TypeReference(display_name=parts[0].name, is_named=False)

        bound_args = [[self._bind_syntax(a, scope) for a in part.type_arguments] for part in parts]
        last_args = tuple(bound_args[-1])
        rendered = [
            f"{part.name}<{', '.join(a.display_name for a in args)}>" if args else part.name
            for part, args in zip(parts, bound_args)
        ]

        key = self._lookup(syntax, scope)
        if key is not None:
            return TypeReference(
                self._qualified_display(key, rendered),
                key,
                last_args,
                is_constructed=not self._is_own_definition(key, bound_args, scope),
            )

        qualifier = syntax.names[:-1]
        last = parts[-1]
        imports_system = any(
            u.target == "System" and u.alias is None and not u.is_static for u in scope.usings
        )
        system_scoped = qualifier == ["System"] or (not qualifier and imports_system)

        if last.name == "Nullable" and len(last_args) == 1 and system_scoped:
            return TypeReference(f"{last_args[0].display_name}?", NULLABLE_TYPE, last_args)
        if not last_args and last.name in SPECIAL_TYPE_KEYWORDS and system_scoped:
            return TypeReference(SPECIAL_TYPE_KEYWORDS[last.name], f"System.{last.name}")
        return TypeReference(rendered[-1], None, last_args)

    def _lookup(self, syntax: TypeSyntax, scope: _Scope) -> Optional[str]:
        """Find the declaration key a written name refers to, or None."""
        names = [p.arity_name for p in syntax.parts]
        first, rest = names[0], names[1:]

        if syntax.alias == "global":
            return self._existing(".".join(names))
        if syntax.alias is not None:
            return self._lookup_alias(syntax.alias, names, scope)

        for type_key in reversed(scope.type_keys):
            found = self._existing(_join(type_key, first, *rest))
            if found:
                return found

        for namespace in self._namespace_chain(scope.namespace):
            found = self._existing(_join(namespace, first, *rest))
            if found:
                return found

        if not syntax.parts[0].type_arguments:
            found = self._lookup_alias(syntax.parts[0].name, [first] + rest, scope)
            if found:
                return found

        for using in scope.usings:
            if using.alias is None and not using.is_static:
                found = self._existing(_join(using.target, first, *rest))
                if found:
                    return found

        for using in scope.usings:
            if using.is_static and using.alias is None:
                target = self._alias_key(using.target)
                if target:
                    found = self._existing(_join(target, first, *rest))
                    if found:
                        return found
        return None

    def _lookup_alias(self, alias: str, names: List[str], scope: _Scope) -> Optional[str]:
        for using in scope.usings:
            if using.alias == alias:
                target = self._alias_key(using.target)
                if target:
                    return self._existing(_join(target, *names[1:]))
        return None

    @staticmethod
    def _alias_key(target: str) -> Optional[str]:
        try:
            syntax = parse_type_name(target)
        except TypeSyntaxError:
            return None
        if syntax.form != "named":
            return None
        return ".".join(p.arity_name for p in syntax.parts)

    def _existing(self, candidate: str) -> Optional[str]:
        return candidate if candidate in self._parts else None

    @staticmethod
    def _namespace_chain(namespace: str) -> List[str]:
        """Enclosing namespaces, innermost first: A.B.C, A.B, A, then global."""
        chain = []
        current = namespace
        while current:
            chain.append(current)
            current = current.rpartition(".")[0]
        chain.append("")
        return chain

    def _qualified_display(self, key: str, rendered: List[str]) -> str:
        """Written name prefixed by every containing type: Canvas.Layer."""
        chain = self._type_chain(key)
        if len(rendered) >= len(chain):
            return ".".join(rendered[-len(chain):])
        implicit = chain[:len(chain) - len(rendered)]
        return ".".join([self._bind_type_reference_to(k).display_name for k in implicit] + rendered)

    def _is_own_definition(self, key: str, bound_args: List[List[TypeReference]], scope: _Scope) -> bool:
        """Whether a written generic name denotes its declaration itself.

        Only the declaration's own type parameters, used inside it, do:
        Node<T> within Node<T>. Node<int> or Node<T> written in another
        generic type are constructed types.
        """
        for type_key, args in zip(reversed(self._type_chain(key)), reversed(bound_args)):
            if not args:
                continue
            if type_key not in scope.type_keys:
                return False
            own = self._parts[type_key][0].type_parameters
            if any(a.is_named for a in args) or [a.display_name for a in args] != list(own):
                return False
        return True

    def _is_interface(self, ref: TypeReference, text: str) -> bool:
        if ref.qualified_name in self._kinds:
            return self._kinds[ref.qualified_name] == "interface"
        return _looks_like_interface(text)

    def _is_value_type(self, ref: TypeReference) -> bool:
        name = ref.qualified_name
        if name is None:
            return False
        if name in self._kinds:
            return self._kinds[name] in ("struct", "record struct", "enum")
        return name in _VALUE_SYSTEM_TYPES or name == NULLABLE_TYPE or name.startswith("System.ValueTuple`")
