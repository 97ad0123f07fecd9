"""Predicates over item attributes.

Exposure of a declaration is decided here and nowhere else, so the
emitter only ever asks yes/no questions about an attribute list.
"""

from __future__ import annotations

from collections.abc import Iterable

from abikit.ir import Attribute

# Calling conventions a C caller can use.
C_ABIS: frozenset[str] = frozenset({"C", "cdecl", "stdcall", "fastcall", "system"})


def is_repr_c(attrs: Iterable[Attribute]) -> bool:
    """True if the item has a fixed C-compatible representation (``repr(C)``)."""
    return any(a.name == "repr" and "C" in a.args for a in attrs)


def is_no_mangle(attrs: Iterable[Attribute]) -> bool:
    """True if the item keeps its symbol name (``no_mangle``)."""
    return any(a.name == "no_mangle" for a in attrs)


def is_c_abi(abi: str | None) -> bool:
    """True if ``abi`` is one of the allowed C calling conventions."""
    return abi in C_ABIS


def doc_values(attrs: Iterable[Attribute]) -> list[str]:
    """Values of the ``doc`` attributes, in order."""
    return [a.value for a in attrs if a.name == "doc" and a.value is not None]
