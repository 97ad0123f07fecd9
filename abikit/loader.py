"""Load a declaration stream from JSON.

A front end that understands the source language describes every item it
found as JSON; this module turns that description back into
:mod:`abikit.ir` objects. The document is either a list of declarations or
an object with a ``"declarations"`` list.

Declaration kinds: ``type_alias``, ``enum``, ``struct``, ``function``.
Type kinds: ``path``, ``tuple``, ``pointer``, ``reference``, ``slice``,
``array``, ``fn_pointer``, ``never``, ``trait_object``.

Example
-------
::

    {"declarations": [
      {"kind": "function", "name": "add", "module": ["ffi"], "abi": "C",
       "attrs": [{"name": "no_mangle"}],
       "params": [{"name": "a", "type": {"kind": "path", "segments": ["i32"]}},
                  {"name": "b", "type": {"kind": "path", "segments": ["i32"]}}],
       "return_type": {"kind": "path", "segments": ["i32"]}}
    ]}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from abikit.ir import (
    ArrayType,
    Attribute,
    Declaration,
    Enum,
    Field,
    FnPointerType,
    Function,
    NeverType,
    Param,
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


def _require(d: dict[str, Any], key: str, what: str) -> Any:
    """Fetch a mandatory key, with a readable error."""
    if not isinstance(d, dict):
        raise ValueError(f"{what} must be a JSON object, got {type(d).__name__}")
    if key not in d:
        raise ValueError(f"{what} is missing required key {key!r}")
    return d[key]


def _type_from_dict(d: dict[str, Any]) -> TypeExpr:
    """Convert a JSON type dict to a TypeExpr."""
    kind = _require(d, "kind", "type")
    if kind == "path":
        return PathType(
            list(_require(d, "segments", "path type")),
            [_type_from_dict(a) for a in d.get("generic_args", [])],
        )
    elif kind == "tuple":
        return TupleType([_type_from_dict(e) for e in d.get("elements", [])])
    elif kind == "pointer":
        return PointerType(_type_from_dict(_require(d, "pointee", "pointer type")), bool(d.get("mutable", False)))
    elif kind == "reference":
        return ReferenceType(
            _type_from_dict(_require(d, "referent", "reference type")),
            bool(d.get("mutable", False)),
            d.get("lifetime"),
        )
    elif kind == "slice":
        return SliceType(_type_from_dict(_require(d, "element", "slice type")))
    elif kind == "array":
        return ArrayType(_type_from_dict(_require(d, "element", "array type")), d.get("length", "_"))
    elif kind == "fn_pointer":
        ret = d.get("return_type")
        return FnPointerType(
            [_param_from_dict(p) for p in d.get("params", [])],
            _type_from_dict(ret) if ret is not None else None,
            d.get("abi"),
            list(d.get("lifetimes", [])),
        )
    elif kind == "never":
        return NeverType()
    elif kind == "trait_object":
        return TraitObjectType(list(d.get("bounds", [])))
    else:
        raise ValueError(f"Unknown type kind: {kind!r}")


def _param_from_dict(d: dict[str, Any]) -> Param:
    ty = _type_from_dict(_require(d, "type", "parameter"))
    return Param(d.get("name"), ty)


def _attrs_from_list(items: list[dict[str, Any]]) -> list[Attribute]:
    return [Attribute(_require(a, "name", "attribute"), list(a.get("args", [])), a.get("value")) for a in items]


def _location_from_dict(d: dict[str, Any] | None) -> SourceLocation | None:
    if d is None:
        return None
    return SourceLocation(_require(d, "file", "location"), int(_require(d, "line", "location")), d.get("column"))


def _variant_from_dict(d: dict[str, Any]) -> Variant:
    return Variant(
        _require(d, "name", "variant"),
        d.get("kind", "unit"),
        _attrs_from_list(d.get("attrs", [])),
        _location_from_dict(d.get("location")),
    )


def _field_from_dict(d: dict[str, Any]) -> Field:
    ty = _type_from_dict(_require(d, "type", "field"))
    return Field(d.get("name"), ty, _attrs_from_list(d.get("attrs", [])))


def _decl_from_dict(d: dict[str, Any]) -> Declaration:
    """Convert a JSON declaration dict to a Declaration."""
    kind = _require(d, "kind", "declaration")
    name = _require(d, "name", f"{kind} declaration")
    common: dict[str, Any] = {
        "module": list(d.get("module", [])),
        "generics": list(d.get("generics", [])),
        "attrs": _attrs_from_list(d.get("attrs", [])),
        "location": _location_from_dict(d.get("location")),
    }
    if kind == "type_alias":
        return TypeAlias(name, _type_from_dict(_require(d, "target", "type alias")), **common)
    elif kind == "enum":
        return Enum(name, [_variant_from_dict(v) for v in d.get("variants", [])], **common)
    elif kind == "struct":
        return Struct(
            name,
            [_field_from_dict(f) for f in d.get("fields", [])],
            d.get("struct_kind", "named"),
            **common,
        )
    elif kind == "function":
        ret = d.get("return_type")
        return Function(
            name,
            [_param_from_dict(p) for p in d.get("params", [])],
            _type_from_dict(ret) if ret is not None else None,
            d.get("abi"),
            **common,
        )
    else:
        raise ValueError(f"Unknown declaration kind: {kind!r}")


def declarations_from_json_dict(data: dict[str, Any] | list[Any]) -> list[Declaration]:
    """Convert an already-decoded JSON document to declarations."""
    items = data.get("declarations", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("'declarations' must be a list")
    return [_decl_from_dict(item) for item in items]


def load_declarations(text: str) -> list[Declaration]:
    """Parse a JSON declaration stream.

    :raises ValueError: On malformed JSON or an unknown kind.
    """
    return declarations_from_json_dict(json.loads(text))


def load_declarations_file(path: str | Path) -> list[Declaration]:
    """Read and parse a JSON declaration stream from ``path``."""
    return load_declarations(Path(path).read_text(encoding="utf-8"))
