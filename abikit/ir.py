"""Intermediate Representation for the ABI surface of a source library.

This module defines the structured form a front end delivers for every
item of the source library: type descriptors (paths, pointers, arrays,
function pointers...) and the declarations that carry them (type aliases,
enums, structs and functions), together with their attributes and
source locations.

The IR is deliberately close to the source language: nothing here knows
about C. Translation to C happens in :mod:`abikit.typemap` and
:mod:`abikit.emitter`.

Example
-------
::

    from abikit.ir import Attribute, Field, PathType, Struct

    point = Struct(
        "Point",
        fields=[Field("x", PathType(["i32"])), Field("y", PathType(["f64"]))],
        module=["ffi", "geometry"],
        attrs=[Attribute("repr", ["C"])],
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

# =============================================================================
# Source locations and attributes
# =============================================================================


@dataclass
class SourceLocation:
    """Position of an item in the source library.

    :param file: Source file path as reported by the front end.
    :param line: 1-based line number.
    :param column: 1-based column number, if known.
    """

    file: str
    line: int
    column: int | None = None

    def __str__(self) -> str:
        if self.column is None:
            return f"{self.file}:{self.line}"
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class Attribute:
    """An attribute attached to an item.

    ``#[repr(C)]`` is ``Attribute("repr", ["C"])``, ``#[no_mangle]`` is
    ``Attribute("no_mangle")`` and a documentation line is
    ``Attribute("doc", value=" Some text.")``.

    :param name: Attribute name.
    :param args: Arguments of a list-style attribute.
    :param value: Value of a name-value attribute.
    """

    name: str
    args: list[str] = field(default_factory=list)
    value: str | None = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"#[{self.name} = {self.value!r}]"
        if self.args:
            return f"#[{self.name}({', '.join(self.args)})]"
        return f"#[{self.name}]"


# =============================================================================
# Type descriptors
# =============================================================================


@dataclass
class PathType:
    """A named type, optionally qualified by a module path.

    :param segments: Path segments, root to leaf (``["libc", "c_int"]``).
    :param generic_args: Generic arguments of the last segment, if any.
    """

    segments: list[str]
    generic_args: list[TypeExpr] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.segments[-1]

    @property
    def module(self) -> list[str]:
        return self.segments[:-1]

    def __str__(self) -> str:
        base = "::".join(self.segments)
        if self.generic_args:
            return f"{base}<{', '.join(str(a) for a in self.generic_args)}>"
        return base


@dataclass
class TupleType:
    """A tuple type. The empty tuple is the unit type ``()``."""

    elements: list[TypeExpr] = field(default_factory=list)

    @property
    def is_unit(self) -> bool:
        return not self.elements

    def __str__(self) -> str:
        if len(self.elements) == 1:
            return f"({self.elements[0]},)"
        return f"({', '.join(str(e) for e in self.elements)})"


@dataclass
class PointerType:
    """A raw pointer: ``*const T`` or ``*mut T``."""

    pointee: TypeExpr
    mutable: bool = False

    def __str__(self) -> str:
        return f"*{'mut' if self.mutable else 'const'} {self.pointee}"


@dataclass
class ReferenceType:
    """A borrowed reference: ``&T`` or ``&'a mut T``."""

    referent: TypeExpr
    mutable: bool = False
    lifetime: str | None = None

    def __str__(self) -> str:
        parts = ["&"]
        if self.lifetime:
            parts.append(f"'{self.lifetime} ")
        if self.mutable:
            parts.append("mut ")
        parts.append(str(self.referent))
        return "".join(parts)


@dataclass
class SliceType:
    """A dynamically sized slice: ``[T]``."""

    element: TypeExpr

    def __str__(self) -> str:
        return f"[{self.element}]"


@dataclass
class ArrayType:
    """A fixed-size array: ``[T; N]``.

    :param length: Length expression as written in the source.
    """

    element: TypeExpr
    length: int | str

    def __str__(self) -> str:
        return f"[{self.element}; {self.length}]"


@dataclass
class Param:
    """A named (or unnamed) parameter of a function or function pointer."""

    name: str | None
    type: TypeExpr

    def __str__(self) -> str:
        if self.name:
            return f"{self.name}: {self.type}"
        return str(self.type)


@dataclass
class FnPointerType:
    """A bare function pointer type.

    :param params: Parameters in declaration order.
    :param return_type: Declared return type, or None for the implicit unit.
    :param abi: Explicit ABI string (``extern "C" fn``), None if not extern.
    :param lifetimes: Higher-ranked lifetimes (``for<'a> fn(&'a u8)``).
    """

    params: list[Param] = field(default_factory=list)
    return_type: TypeExpr | None = None
    abi: str | None = None
    lifetimes: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        parts = []
        if self.lifetimes:
            lifetimes = ", ".join("'" + lt for lt in self.lifetimes)
            parts.append(f"for<{lifetimes}> ")
        if self.abi is not None:
            parts.append(f'extern "{self.abi}" ')
        parts.append(f"fn({', '.join(str(p) for p in self.params)})")
        if self.return_type is not None:
            parts.append(f" -> {self.return_type}")
        return "".join(parts)


@dataclass
class NeverType:
    """The diverging type ``!``."""

    def __str__(self) -> str:
        return "!"


@dataclass
class TraitObjectType:
    """A trait object: ``dyn Trait + Send``."""

    bounds: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"dyn {' + '.join(self.bounds)}"


TypeExpr = Union[
    PathType,
    TupleType,
    PointerType,
    ReferenceType,
    SliceType,
    ArrayType,
    FnPointerType,
    NeverType,
    TraitObjectType,
]


# =============================================================================
# Declarations
# =============================================================================


@dataclass
class Variant:
    """An enum variant.

    :param kind: ``"unit"``, ``"tuple"`` or ``"struct"``.
    """

    name: str
    kind: str = "unit"
    attrs: list[Attribute] = field(default_factory=list)
    location: SourceLocation | None = None

    @property
    def is_unit(self) -> bool:
        return self.kind == "unit"

    def __str__(self) -> str:
        return self.name


@dataclass
class Field:
    """A struct field. Positional fields have no name."""

    name: str | None
    type: TypeExpr
    attrs: list[Attribute] = field(default_factory=list)

    def __str__(self) -> str:
        if self.name is None:
            return str(self.type)
        return f"{self.name}: {self.type}"


@dataclass
class TypeAlias:
    """``type Name = Target;``"""

    name: str
    target: TypeExpr
    module: list[str] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)
    location: SourceLocation | None = None

    def __str__(self) -> str:
        return f"type {self.name} = {self.target}"


@dataclass
class Enum:
    """An enum declaration."""

    name: str
    variants: list[Variant] = field(default_factory=list)
    module: list[str] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)
    location: SourceLocation | None = None

    def __str__(self) -> str:
        return f"enum {self.name}"


@dataclass
class Struct:
    """A struct declaration.

    :param kind: ``"named"`` for a field aggregate, ``"tuple"`` for a
        positional aggregate, ``"unit"`` for a field-less struct.
    """

    name: str
    fields: list[Field] = field(default_factory=list)
    kind: str = "named"
    module: list[str] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)
    location: SourceLocation | None = None

    def __str__(self) -> str:
        return f"struct {self.name}"


@dataclass
class Function:
    """A free function declaration.

    :param return_type: Declared return type, or None for the implicit unit.
    :param abi: ABI of an ``extern`` function, None for the native ABI.
    """

    name: str
    params: list[Param] = field(default_factory=list)
    return_type: TypeExpr | None = None
    abi: str | None = None
    module: list[str] = field(default_factory=list)
    generics: list[str] = field(default_factory=list)
    attrs: list[Attribute] = field(default_factory=list)
    location: SourceLocation | None = None

    def __str__(self) -> str:
        ret = f" -> {self.return_type}" if self.return_type is not None else ""
        return f"fn {self.name}({', '.join(str(p) for p in self.params)}){ret}"


Declaration = Union[TypeAlias, Enum, Struct, Function]
