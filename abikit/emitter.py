"""Render exported declarations into C header text.

One :class:`DeclarationEmitter` belongs to one :class:`~abikit.session.BindgenSession`.
Each ``emit_*`` method handles a single declaration:

1. the exposure gate decides whether the declaration is meant for C at
   all; if not it is skipped without error;
2. every constituent type goes through :mod:`abikit.typemap`;
3. the rendered text, the exported name and the names it references are
   committed to the session in one step, so a rejected declaration leaves
   no trace.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from abikit.attrs import is_c_abi, is_no_mangle, is_repr_c
from abikit.ctype import NamedCType, Void, dependencies
from abikit.docs import render_docs
from abikit.errors import (
    BindgenError,
    DivergingAcrossBoundary,
    GenericNotRepresentable,
    InternalError,
    NonUnitVariant,
    UnrepresentableAggregate,
)
from abikit.headers import header_of
from abikit.ir import Declaration, Enum, Function, NeverType, Struct, TypeAlias
from abikit.typemap import map_type

if TYPE_CHECKING:
    from abikit.session import BindgenSession

logger = logging.getLogger(__name__)


class DeclarationEmitter:
    """Turn IR declarations into C declarations inside a session."""

    def __init__(self, session: BindgenSession) -> None:
        self._session = session

    def emit(self, decl: Declaration) -> bool:
        """Emit ``decl`` into its header.

        :returns: True if the declaration was emitted, False if it is not
            marked for export.
        :raises BindgenError: If it is marked for export but not representable.
        :raises InternalError: If ``decl`` is not a declaration.
        """
        try:
            if isinstance(decl, TypeAlias):
                return self.emit_type_alias(decl)
            elif isinstance(decl, Enum):
                return self.emit_enum(decl)
            elif isinstance(decl, Struct):
                return self.emit_struct(decl)
            elif isinstance(decl, Function):
                return self.emit_function(decl)
        except BindgenError as e:
            e.with_location(decl.location)
            raise
        raise InternalError(f"cannot emit {type(decl).__name__!r} objects")

    # -------------------------------------------------------------------------
    # Visitors
    # -------------------------------------------------------------------------

    def emit_type_alias(self, decl: TypeAlias) -> bool:
        """Convert ``type A = B;`` into ``typedef B A;``.

        Generic aliases are skipped: there is nothing to instantiate them with.
        """
        _expect(decl, TypeAlias)
        if decl.generics:
            logger.debug("Skipping generic type alias %s", decl.name)
            return False

        new_type = map_type(decl.target, decl.name)
        text = render_docs(decl.attrs) + f"typedef {new_type};\n\n"
        self._commit(decl.module, text, dependencies(new_type.ctype), exported=decl.name)
        return True

    def emit_enum(self, decl: Enum) -> bool:
        """Convert a ``repr(C)`` enum of unit variants into a C enum.

        Enumerators are prefixed with the enum name since C enumerators share
        one namespace.
        """
        _expect(decl, Enum)
        if not is_repr_c(decl.attrs):
            logger.debug("Skipping enum %s: not repr(C)", decl.name)
            return False
        if decl.generics:
            raise GenericNotRepresentable("bindgen can not handle parameterized `#[repr(C)]` enums")

        parts = [render_docs(decl.attrs), f"typedef enum {decl.name} {{\n"]
        for variant in decl.variants:
            if not variant.is_unit:
                raise NonUnitVariant(
                    "bindgen can not handle `#[repr(C)]` enums with non-unit variants",
                    variant.location,
                )
            parts.append(render_docs(variant.attrs, "\t"))
            parts.append(f"\t{decl.name}_{variant.name},\n")
        parts.append(f"}} {decl.name};\n\n")

        self._commit(decl.module, "".join(parts), [])
        return True

    def emit_struct(self, decl: Struct) -> bool:
        """Convert a ``repr(C)`` struct into a C struct.

        A tuple struct with exactly one field becomes an opaque handle:
        ``typedef struct Foo Foo;``.
        """
        _expect(decl, Struct)
        if not is_repr_c(decl.attrs):
            logger.debug("Skipping struct %s: not repr(C)", decl.name)
            return False
        if decl.generics:
            raise GenericNotRepresentable("bindgen can not handle parameterized `#[repr(C)]` structs")

        parts = [render_docs(decl.attrs), f"typedef struct {decl.name}"]
        deps: list[str] = []
        if decl.kind == "named":
            parts.append(" {\n")
            for f in decl.fields:
                if f.name is None:
                    raise InternalError(f"positional field in named struct {decl.name}")
                field_type = map_type(f.type, f.name)
                deps.extend(dependencies(field_type.ctype))
                parts.append(render_docs(f.attrs, "\t"))
                parts.append(f"\t{field_type};\n")
            parts.append("}")
        elif decl.kind == "tuple" and len(decl.fields) == 1:
            # Opaque: the wrapped field stays hidden from C.
            pass
        else:
            raise UnrepresentableAggregate(
                "bindgen can not handle unit or tuple `#[repr(C)]` structs with >1 members"
            )
        parts.append(f" {decl.name};\n\n")

        self._commit(decl.module, "".join(parts), deps, exported=decl.name)
        return True

    def emit_function(self, decl: Function) -> bool:
        """Convert a ``no_mangle`` function with a C ABI into a prototype.

        The parameter list is rendered first and the return type is mapped
        with ``name(params)`` as its associated name: a function returning a
        function pointer has to be written inside the pointer's declarator.
        """
        _expect(decl, Function)
        if not is_no_mangle(decl.attrs):
            logger.debug("Skipping function %s: not no_mangle", decl.name)
            return False
        if not is_c_abi(decl.abi):
            logger.debug("Skipping function %s: ABI %r is not a C ABI", decl.name, decl.abi)
            return False
        if decl.generics:
            raise GenericNotRepresentable("bindgen can not handle parameterized extern functions")

        deps: list[str] = []
        args: list[NamedCType] = []
        for p in decl.params:
            arg = map_type(p.type, p.name or "")
            deps.extend(dependencies(arg.ctype))
            args.append(arg)
        params = ", ".join(str(a) for a in args) if args else "void"
        buf = f"{decl.name}({params})"

        if decl.return_type is None:
            full_declaration = str(NamedCType(buf, Void()))
        elif isinstance(decl.return_type, NeverType):
            raise DivergingAcrossBoundary("panics across a C boundary are naughty!")
        else:
            ret = map_type(decl.return_type, buf)
            deps.extend(dependencies(ret.ctype))
            full_declaration = str(ret)

        text = render_docs(decl.attrs) + full_declaration + ";\n\n"
        self._commit(decl.module, text, deps)
        return True

    # -------------------------------------------------------------------------
    # Session bookkeeping
    # -------------------------------------------------------------------------

    def _commit(self, module: list[str], text: str, deps: list[str], exported: str | None = None) -> None:
        """Record a fully rendered declaration in the session."""
        session = self._session
        header = header_of(module, session.lib_name)
        session.outputs.append(header, text)
        if exported is not None:
            session.types.register(exported, header)
        if deps:
            session.add_dependencies(header, deps)


def _expect(decl: object, kind: type) -> None:
    if not isinstance(decl, kind):
        raise InternalError(f"{kind.__name__} visitor called on {type(decl).__name__}")
