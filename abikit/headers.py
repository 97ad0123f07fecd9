"""Header naming and the boilerplate wrapped around every header."""

from __future__ import annotations

import functools
import os
import string

from abikit.errors import InternalError

# Module whose declarations belong to the library itself.
BOUNDARY_MODULE = "ffi"

HEADER_SUFFIX = ".h"

GUARD_PREFIX = "bindgen_"

PRIMITIVE_INCLUDES = "#include <stdint.h>\n#include <stdbool.h>\n"

_ID_CHARS = frozenset(string.ascii_letters + string.digits + "_")


@functools.lru_cache(maxsize=None)
def _header_of(module: tuple[str, ...], lib_name: str) -> str:
    if not module:
        raise InternalError("declaration has an empty module path")
    segments = list(module)
    if segments[0] == BOUNDARY_MODULE:
        segments[0] = lib_name
        # Top-level module of the library, e.g. mathlib/mathlib.h
        if len(segments) == 1:
            segments.append(lib_name)
    return os.sep.join(segments) + HEADER_SUFFIX


def header_of(module: list[str] | tuple[str, ...], lib_name: str) -> str:
    """Return the header a declaration of ``module`` is emitted into.

    ``["ffi", "geometry"]`` with library ``shapes`` is ``shapes/geometry.h``;
    ``["ffi"]`` is ``shapes/shapes.h`` so it does not clash with the
    umbrella header ``shapes.h``.

    :param module: Module path, root to leaf.
    :param lib_name: Configured library short name.
    :raises InternalError: If ``module`` is empty.
    """
    return _header_of(tuple(module), lib_name)


def umbrella_name(lib_name: str) -> str:
    """Name of the header that includes every generated header."""
    return lib_name + HEADER_SUFFIX


def sanitize_id(text: str) -> str:
    """Drop every character that may not appear in a C identifier.

    The result is appended to :data:`GUARD_PREFIX`, so it may start with a
    digit.
    """
    return "".join(ch for ch in text if ch in _ID_CHARS)


def wrap_extern(code: str) -> str:
    """Wrap ``code`` in an ``extern "C"`` block for C++ compilers."""
    return f'#ifdef __cplusplus\nextern "C" {{\n#endif\n\n{code}\n\n#ifdef __cplusplus\n}}\n#endif\n'


def wrap_guard(code: str, header: str) -> str:
    """Wrap ``code`` in an include guard keyed on ``header``."""
    guard = GUARD_PREFIX + sanitize_id(header)
    return f"#ifndef {guard}\n#define {guard}\n{code}\n#endif\n"


def wrap_header(declarations: str, header: str) -> str:
    """Produce the final text of ``header`` from its declarations."""
    body = PRIMITIVE_INCLUDES + "\n" + wrap_extern(declarations.rstrip("\n"))
    return wrap_guard(body, header)
