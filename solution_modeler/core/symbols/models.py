"""Read-only symbol model consumed by the diagram pipeline.

Produced by the Binder from parsed declarations. Every entity is a frozen
dataclass; nothing downstream mutates the model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


class Accessibility(Enum):
    """Declared accessibility of a type or member."""
    NOT_APPLICABLE = "not_applicable"
    PRIVATE = "private"
    PROTECTED_AND_INTERNAL = "private protected"
    PROTECTED = "protected"
    INTERNAL = "internal"
    PROTECTED_OR_INTERNAL = "protected internal"
    PUBLIC = "public"


class TypeKind(Enum):
    """Kind of a named type. Records map to CLASS or STRUCT."""
    CLASS = "class"
    INTERFACE = "interface"
    STRUCT = "struct"
    ENUM = "enum"
    DELEGATE = "delegate"


class MethodKind(Enum):
    ORDINARY = "ordinary"
    CONSTRUCTOR = "constructor"
    DESTRUCTOR = "destructor"
    OPERATOR = "operator"
    CONVERSION = "conversion"
    EXPLICIT_INTERFACE_IMPLEMENTATION = "explicit_interface_implementation"
    DELEGATE_INVOKE = "delegate_invoke"


@dataclass(frozen=True)
class TypeReference:
    """A use of a type: property type, parameter type, base type, ...

    qualified_name is the identity key of the referenced declaration when the
    binder could resolve it (or a well-known System name), otherwise None.
    is_constructed marks a generic declaration closed over other type
    arguments (Repository<string>); it shares the declaration's key but is
    a different type.
    """
    display_name: str
    qualified_name: Optional[str] = None
    type_arguments: Tuple["TypeReference", ...] = ()
    is_named: bool = True  # False for arrays, pointers, type parameters, dynamic
    is_constructed: bool = False

    @property
    def identity(self) -> str:
        if self.qualified_name is None or self.is_constructed:
            return self.display_name
        return self.qualified_name

    def unwrap(self) -> "TypeReference":
        """Strip one level of single-argument generic wrapping.

        Optional<Item> -> Item, List<Item> -> Item, int? -> int.
        Anything with zero or several type arguments is returned unchanged.
        """
        if len(self.type_arguments) == 1:
            return self.type_arguments[0]
        return self


@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeReference


@dataclass(frozen=True)
class PropertyMember:
    name: str
    type: TypeReference
    accessibility: Accessibility


@dataclass(frozen=True)
class MethodMember:
    name: str
    parameters: Tuple[Parameter, ...]
    return_type: TypeReference
    accessibility: Accessibility
    kind: MethodKind = MethodKind.ORDINARY
    is_override: bool = False
    is_synthesized: bool = False

    @property
    def is_plain(self) -> bool:
        """Ordinary instance/static method written in source, not an override."""
        return (
            self.kind is MethodKind.ORDINARY
            and not self.is_override
            and not self.is_synthesized
        )


@dataclass(frozen=True, eq=False)
class TypeSymbol:
    """One named type. Identity is the qualified name alone."""
    qualified_name: str
    display_name: str
    namespace: str
    accessibility: Accessibility
    kind: TypeKind
    base_type: Optional[TypeReference] = None
    interfaces: Tuple[TypeReference, ...] = ()
    properties: Tuple[PropertyMember, ...] = ()
    methods: Tuple[MethodMember, ...] = ()
    nested_types: Tuple["TypeSymbol", ...] = ()
    is_synthesized: bool = False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeSymbol):
            return NotImplemented
        return self.qualified_name == other.qualified_name

    def __hash__(self) -> int:
        return hash(self.qualified_name)

    def __repr__(self) -> str:
        return f"TypeSymbol({self.qualified_name!r}, kind={self.kind.value})"


@dataclass(frozen=True)
class NamespaceSymbol:
    """A namespace and its members in first-declaration order."""
    name: str  # "" for the global namespace
    members: Tuple[Union["NamespaceSymbol", TypeSymbol], ...] = ()

    @property
    def is_global(self) -> bool:
        return self.name == ""

    @property
    def namespaces(self) -> List["NamespaceSymbol"]:
        return [m for m in self.members if isinstance(m, NamespaceSymbol)]

    @property
    def types(self) -> List[TypeSymbol]:
        return [m for m in self.members if isinstance(m, TypeSymbol)]


@dataclass(frozen=True)
class ModuleSymbol:
    """The compiled form of one project."""
    name: str
    global_namespace: NamespaceSymbol
    diagnostics: Tuple[str, ...] = field(default_factory=tuple)
