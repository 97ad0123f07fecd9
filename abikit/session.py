"""One header generation run.

A :class:`BindgenSession` owns everything that outlives a single
declaration: the header buffers (:class:`Outputs`), the exported type
registry (:class:`TypeRegistry`) and the dependency facts waiting to be
resolved at link time. Nothing is shared between sessions.

Example
-------
::

    from abikit.session import BindgenSession

    session = BindgenSession(lib_name="shapes")
    for decl in declarations:
        session.emit(decl)
    headers = session.finalize()   # header id -> text, umbrella last
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from collections.abc import Mapping as MappingABC

from abikit.config import DEFAULT_LIB_NAME
from abikit.emitter import DeclarationEmitter
from abikit.errors import BindgenError
from abikit.ir import Declaration
from abikit.linker import link

logger = logging.getLogger(__name__)


class Outputs(MappingABC[str, str]):
    """Append-only text buffers keyed by header id."""

    def __init__(self) -> None:
        self._buffers: dict[str, list[str]] = {}

    def append(self, header: str, text: str) -> None:
        """Append ``text`` to the buffer of ``header``, creating it if needed."""
        self._buffers.setdefault(header, []).append(text)

    def __getitem__(self, header: str) -> str:
        return "".join(self._buffers[header])

    def __iter__(self) -> Iterator[str]:
        return iter(self._buffers)

    def __len__(self) -> int:
        return len(self._buffers)

    def __repr__(self) -> str:
        return f"Outputs({sorted(self._buffers)})"


class TypeRegistry:
    """Maps each exported type name to the header that defines it.

    The first registration of a name wins; later ones are ignored.
    """

    def __init__(self) -> None:
        self._headers: dict[str, str] = {}

    def register(self, name: str, header: str) -> bool:
        """Record that ``name`` is defined in ``header``.

        :returns: True if recorded, False if ``name`` was already known.
        """
        if name in self._headers:
            logger.debug(
                "Type %s already registered in %s, ignoring %s", name, self._headers[name], header
            )
            return False
        self._headers[name] = header
        return True

    def lookup(self, name: str) -> str | None:
        """Header defining ``name``, or None for types defined outside the library."""
        return self._headers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def __len__(self) -> int:
        return len(self._headers)


class BindgenSession:
    """State of one generation run over a declaration stream.

    :param lib_name: Library short name used for header paths and the
        umbrella header.
    """

    def __init__(self, lib_name: str = DEFAULT_LIB_NAME) -> None:
        self.lib_name = lib_name
        self.outputs = Outputs()
        self.types = TypeRegistry()
        # consumer header -> referenced names, in first-seen order
        self.dependencies: dict[str, list[str]] = {}
        self._emitter = DeclarationEmitter(self)

    def add_dependencies(self, header: str, names: Iterable[str]) -> None:
        """Record that declarations in ``header`` reference ``names``."""
        pending = self.dependencies.setdefault(header, [])
        for name in names:
            if name not in pending:
                pending.append(name)

    def emit(self, decl: Declaration) -> bool:
        """Emit one declaration. See :meth:`DeclarationEmitter.emit`."""
        return self._emitter.emit(decl)

    def emit_all(self, decls: Iterable[Declaration]) -> list[BindgenError]:
        """Emit every declaration, continuing past rejected ones.

        :returns: The rejections, in stream order. Empty on full success.
        """
        errors: list[BindgenError] = []
        for decl in decls:
            try:
                self.emit(decl)
            except BindgenError as e:
                logger.error("%s", e)
                errors.append(e)
        return errors

    def finalize(self) -> dict[str, str]:
        """Link the session into final header texts.

        :returns: Header id -> wrapped text, with the umbrella header last.
        :raises DependencyCycle: If headers depend on each other.
        """
        return link(self.outputs, self.types, self.dependencies, self.lib_name)


def generate(decls: Iterable[Declaration], lib_name: str = DEFAULT_LIB_NAME) -> dict[str, str]:
    """Generate every header for ``decls`` in one fresh session.

    Stops at the first rejected declaration.

    :raises BindgenError: On the first declaration that cannot be exported,
        or on a dependency cycle.
    """
    session = BindgenSession(lib_name)
    for decl in decls:
        session.emit(decl)
    return session.finalize()
