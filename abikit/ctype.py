"""C type descriptions produced by the type mapper.

Every value renders itself with ``str()`` exactly as it appears in a
generated header. Pointer levels render inner to outer, so
``Pointer(Pointer(Native("double"), CONST), CONST)`` is
``double const* const*``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Union


class Constness(enum.Enum):
    """Qualifier of one pointer level."""

    CONST = "const"
    MUTABLE = "mut"

    def __str__(self) -> str:
        return " const" if self is Constness.CONST else ""


@dataclass(frozen=True)
class Void:
    """The C ``void`` type."""

    def __str__(self) -> str:
        return "void"


@dataclass(frozen=True)
class Native:
    """A C keyword type such as ``int32_t`` or ``unsigned long``."""

    keyword: str

    def __str__(self) -> str:
        return self.keyword


@dataclass(frozen=True)
class Mapping:
    """A reference to a type defined elsewhere, passed through by name."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Pointer:
    """One pointer level over ``inner``."""

    inner: CType
    constness: Constness = Constness.MUTABLE

    def __str__(self) -> str:
        return f"{self.inner}{self.constness}*"


@dataclass(frozen=True)
class FunctionPointer:
    """A function pointer declarator wrapped around ``inner``.

    ``inner`` is either a plain name (``callback``) or the rest of a
    function declaration (``make_adder(void)``), which is how a function
    returning a function pointer is spelled in C.
    """

    inner: str
    params: tuple[NamedCType, ...] = field(default_factory=tuple)
    return_type: CType = field(default_factory=Void)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params) if self.params else "void"
        return f"{self.return_type} (*{self.inner})({params})"


CType = Union[Void, Native, Mapping, Pointer, FunctionPointer]


@dataclass(frozen=True)
class NamedCType:
    """A C type together with the name it declares (possibly empty)."""

    name: str
    ctype: CType

    def __str__(self) -> str:
        # The declarator of a function pointer already holds the name.
        if isinstance(self.ctype, FunctionPointer) or not self.name:
            return str(self.ctype)
        return f"{self.ctype} {self.name}"


def dependencies(ctype: CType) -> list[str]:
    """Names of every :class:`Mapping` reachable from ``ctype``, in render order."""
    if isinstance(ctype, Mapping):
        return [ctype.name]
    if isinstance(ctype, Pointer):
        return dependencies(ctype.inner)
    if isinstance(ctype, FunctionPointer):
        names = dependencies(ctype.return_type)
        for param in ctype.params:
            names.extend(dependencies(param.ctype))
        return names
    return []
