"""abikit - C header generation for the exported ABI of a library."""

from abikit.config import DEFAULT_LIB_NAME, resolve_lib_name
from abikit.ctype import (
    Constness,
    CType,
    FunctionPointer,
    Mapping,
    NamedCType,
    Native,
    Pointer,
    Void,
)
from abikit.emitter import DeclarationEmitter
from abikit.errors import (
    AbikitError,
    BindgenError,
    DependencyCycle,
    DivergingAcrossBoundary,
    GenericNotRepresentable,
    InternalError,
    NonUnitVariant,
    UnnamedFunctionPointer,
    UnrepresentableAggregate,
    UnsupportedModulePath,
    UnsupportedType,
)
from abikit.headers import header_of, sanitize_id
from abikit.ir import (
    ArrayType,
    # Attributes
    Attribute,
    # Declarations
    Declaration,
    Enum,
    Field,
    FnPointerType,
    Function,
    NeverType,
    Param,
    # Type expressions
    PathType,
    PointerType,
    ReferenceType,
    SliceType,
    SourceLocation,
    Struct,
    TraitObjectType,
    TupleType,
    TypeAlias,
    TypeExpr,
    Variant,
)
from abikit.loader import load_declarations, load_declarations_file
from abikit.session import BindgenSession, Outputs, TypeRegistry, generate
from abikit.typemap import anon_type, map_type

__all__ = [
    # Source types
    "PathType",
    "TupleType",
    "PointerType",
    "ReferenceType",
    "SliceType",
    "ArrayType",
    "Param",
    "FnPointerType",
    "NeverType",
    "TraitObjectType",
    "TypeExpr",
    # Declarations
    "Attribute",
    "Variant",
    "Field",
    "TypeAlias",
    "Enum",
    "Struct",
    "Function",
    "Declaration",
    "SourceLocation",
    # C types
    "CType",
    "Void",
    "Native",
    "Mapping",
    "Pointer",
    "FunctionPointer",
    "NamedCType",
    "Constness",
    # Translation
    "map_type",
    "anon_type",
    "header_of",
    "sanitize_id",
    "DeclarationEmitter",
    # Session
    "BindgenSession",
    "Outputs",
    "TypeRegistry",
    "generate",
    # Input
    "load_declarations",
    "load_declarations_file",
    # Configuration
    "DEFAULT_LIB_NAME",
    "resolve_lib_name",
    # Errors
    "AbikitError",
    "InternalError",
    "BindgenError",
    "GenericNotRepresentable",
    "NonUnitVariant",
    "UnrepresentableAggregate",
    "DivergingAcrossBoundary",
    "UnsupportedType",
    "UnsupportedModulePath",
    "UnnamedFunctionPointer",
    "DependencyCycle",
]
