"""Translate source type descriptors into C type descriptions.

The two entry points are :func:`map_type`, which translates a type that
declares something (a field, a parameter, an alias or a whole function
declaration) and :func:`anon_type`, which translates a type in a position
that has no name of its own (a pointee, an array element, the return type
of a function pointer).

The distinction matters for function pointers: C spells them around the
declared name (``double (*callback)(int hi)``), so a function pointer in an
anonymous position cannot be written at all.

Primitive names are looked up first; unknown unqualified names are trusted
to be defined elsewhere and pass through unchanged. Qualified names are only
accepted from ``libc`` and ``std::os::raw``.
"""

from __future__ import annotations

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
from abikit.errors import (
    DivergingAcrossBoundary,
    InternalError,
    UnnamedFunctionPointer,
    UnsupportedModulePath,
    UnsupportedType,
)
from abikit.ir import (
    ArrayType,
    FnPointerType,
    NeverType,
    PathType,
    PointerType,
    TupleType,
    TypeExpr,
)

# Maps primitive type names to their C equivalents.
PRIMITIVE_TYPE_MAP: dict[str, CType] = {
    "f32": Native("float"),
    "f64": Native("double"),
    "i8": Native("int8_t"),
    "i16": Native("int16_t"),
    "i32": Native("int32_t"),
    "i64": Native("int64_t"),
    "isize": Native("intptr_t"),
    "u8": Native("uint8_t"),
    "u16": Native("uint16_t"),
    "u32": Native("uint32_t"),
    "u64": Native("uint64_t"),
    "usize": Native("uintptr_t"),
    "bool": Native("bool"),
}

# Maps the C aliases of ``libc`` to C keyword types.
LIBC_TYPE_MAP: dict[str, CType] = {
    "c_void": Void(),
    "c_float": Native("float"),
    "c_double": Native("double"),
    "c_char": Native("char"),
    "c_schar": Native("signed char"),
    "c_uchar": Native("unsigned char"),
    "c_short": Native("short"),
    "c_ushort": Native("unsigned short"),
    "c_int": Native("int"),
    "c_uint": Native("unsigned int"),
    "c_long": Native("long"),
    "c_ulong": Native("unsigned long"),
    "c_longlong": Native("long long"),
    "c_ulonglong": Native("unsigned long long"),
}

# ``std::os::raw`` mirrors libc for every alias it defines.
OSRAW_TYPE_MAP: dict[str, CType] = dict(LIBC_TYPE_MAP)

# The only modules whose types are translated when named with a path.
FOREIGN_MODULES: dict[str, dict[str, CType]] = {
    "libc": LIBC_TYPE_MAP,
    "std::os::raw": OSRAW_TYPE_MAP,
}


def map_type(ty: TypeExpr, name: str) -> NamedCType:
    """Translate ``ty`` as the type of the declaration called ``name``.

    For function pointers ``name`` becomes the inner declarator; it may be
    a plain identifier or a whole ``func(params)`` declaration.

    :param ty: Source type descriptor.
    :param name: Associated name, possibly empty.
    :returns: The named C type.
    :raises BindgenError: If the type cannot be represented in C.
    """
    if isinstance(ty, FnPointerType):
        if not name:
            raise UnnamedFunctionPointer()
        return NamedCType("", _fn_pointer_to_c(ty, name))
    return NamedCType(name, anon_type(ty))


def anon_type(ty: TypeExpr) -> CType:
    """Translate ``ty`` in a position that carries no name."""
    if isinstance(ty, FnPointerType):
        raise UnnamedFunctionPointer()
    if isinstance(ty, ArrayType):
        # Lengths are dropped: arrays cross the boundary as const pointers.
        return Pointer(anon_type(ty.element), Constness.CONST)
    if isinstance(ty, PointerType):
        constness = Constness.MUTABLE if ty.mutable else Constness.CONST
        return Pointer(anon_type(ty.pointee), constness)
    if isinstance(ty, PathType):
        return path_to_c(ty)
    if isinstance(ty, TupleType) and ty.is_unit:
        return Void()
    raise UnsupportedType(str(ty))


def path_to_c(path: PathType) -> CType:
    """Translate a possibly module-qualified named type.

    Types hidden behind modules are almost certainly custom types that C
    cannot see, except the aliases of the two foreign primitive modules.
    """
    if not path.segments:
        raise InternalError("type path has no segments")
    if path.generic_args:
        raise UnsupportedType(str(path))

    if len(path.segments) > 1:
        module = "::".join(path.module)
        table = FOREIGN_MODULES.get(module)
        if table is None:
            raise UnsupportedModulePath(module)
        return table.get(path.name, Mapping(path.name))

    name = path.name
    if name in PRIMITIVE_TYPE_MAP:
        return PRIMITIVE_TYPE_MAP[name]
    return LIBC_TYPE_MAP.get(name, Mapping(name))


def _fn_pointer_to_c(ty: FnPointerType, inner: str) -> FunctionPointer:
    """Translate a function pointer around the declarator ``inner``."""
    if ty.lifetimes:
        raise UnsupportedType(str(ty))

    params = tuple(map_type(p.type, p.name or "") for p in ty.params)
    return FunctionPointer(inner, params, return_type(ty.return_type))


def return_type(ty: TypeExpr | None) -> CType:
    """Translate the return type of a function pointer.

    A missing return type is the implicit unit. Diverging is refused since
    a C caller has no way to observe it.
    """
    if ty is None:
        return Void()
    if isinstance(ty, NeverType):
        raise DivergingAcrossBoundary("panics across a C boundary are naughty!")
    return anon_type(ty)
