"""Shared constants for the symbol model and diagram generation.

Kept in one module so the parser, binder and diagram stages agree on
special type names without importing each other.
"""

# =============================================================================
# Special types
# =============================================================================

# Root of every class hierarchy; never drawn as an inheritance target
UNIVERSAL_BASE_TYPE = "System.Object"

# Implicit base types per declaration kind
IMPLICIT_BASE_TYPES = {
    "class": ("object", "System.Object"),
    "struct": ("ValueType", "System.ValueType"),
    "enum": ("Enum", "System.Enum"),
    "delegate": ("MulticastDelegate", "System.MulticastDelegate"),
}

NULLABLE_TYPE = "System.Nullable`1"

# C# keyword -> System type name
PREDEFINED_TYPES = {
    "bool": "Boolean",
    "byte": "Byte",
    "sbyte": "SByte",
    "char": "Char",
    "decimal": "Decimal",
    "double": "Double",
    "float": "Single",
    "int": "Int32",
    "uint": "UInt32",
    "nint": "IntPtr",
    "nuint": "UIntPtr",
    "long": "Int64",
    "ulong": "UInt64",
    "short": "Int16",
    "ushort": "UInt16",
    "object": "Object",
    "string": "String",
    "void": "Void",
}

# System type name -> C# keyword (display uses the keyword)
SPECIAL_TYPE_KEYWORDS = {name: keyword for keyword, name in PREDEFINED_TYPES.items()}

REFERENCE_KEYWORDS = frozenset({"object", "string", "void"})
VALUE_KEYWORDS = frozenset(PREDEFINED_TYPES) - REFERENCE_KEYWORDS

# =============================================================================
# Solution loading
# =============================================================================

# Projects whose name contains one of these (case-insensitive) are skipped
DEFAULT_EXCLUDE_MARKERS = ("Test", "Example", "Sample")

# Visual Studio "solution folder" project type
SOLUTION_FOLDER_TYPE_GUID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"

# Global usings added by <ImplicitUsings>enable</ImplicitUsings>
IMPLICIT_USINGS = (
    "System",
    "System.Collections.Generic",
    "System.IO",
    "System.Linq",
    "System.Net.Http",
    "System.Threading",
    "System.Threading.Tasks",
)

# =============================================================================
# Output
# =============================================================================

DEFAULT_OUTPUT_EXTENSION = ".puml"
NAMESPACE_SEPARATOR_SUBSTITUTE = "-"
