"""Exceptions raised while generating C headers.

There are two tiers:

``InternalError``
    An invariant of abikit itself was violated (a declaration routed to the
    wrong visitor, an empty module path). This points at a defect in the
    front end or in abikit and is never expected on well-formed input.

``BindgenError`` and its subclasses
    A declaration was marked for export but cannot cross the C boundary.
    These are user-facing and carry the source location when one is known.

Declarations that are simply not marked for export are skipped and never
raise.
"""

from __future__ import annotations

from typing import TypeVar

from abikit.ir import SourceLocation

_E = TypeVar("_E", bound="BindgenError")


class AbikitError(Exception):
    """Base class for every error raised by abikit."""


class InternalError(AbikitError):
    """An internal invariant was violated."""


class BindgenError(AbikitError):
    """A declaration intended for export cannot be represented in C.

    :param message: Human-readable reason.
    :param location: Where the offending item lives, if known.
    """

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.location = location

    def with_location(self: _E, location: SourceLocation | None) -> _E:
        """Attach ``location`` unless a more precise one is already set."""
        if self.location is None:
            self.location = location
        return self

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.location}: {self.message}"


class GenericNotRepresentable(BindgenError):
    """A parameterized enum, struct or function was marked for export."""


class NonUnitVariant(BindgenError):
    """An exported enum has a variant carrying data."""


class UnrepresentableAggregate(BindgenError):
    """An exported struct is a unit struct or a tuple struct with != 1 field."""


class DivergingAcrossBoundary(BindgenError):
    """A function or function pointer returns the never type."""


class UnsupportedType(BindgenError):
    """A type has no C equivalent.

    :param rendered: Source form of the type, e.g. ``&'a str``.
    """

    def __init__(self, rendered: str, location: SourceLocation | None = None) -> None:
        super().__init__(f"bindgen can not handle the type `{rendered}`", location)
        self.rendered = rendered


class UnsupportedModulePath(BindgenError):
    """A type is qualified by a module other than ``libc`` or ``std::os::raw``."""

    def __init__(self, module: str, location: SourceLocation | None = None) -> None:
        super().__init__(
            f"bindgen can not handle types in module `{module}` (only `libc` and `std::os::raw`)",
            location,
        )
        self.module = module


class UnnamedFunctionPointer(BindgenError):
    """A function pointer appears where no name can be wrapped into its declarator."""

    def __init__(self, location: SourceLocation | None = None) -> None:
        super().__init__(
            "C function pointers must have a name or function declaration associated with them",
            location,
        )


class DependencyCycle(BindgenError):
    """Two or more headers include each other.

    :param cycle: Edges ``(producer, consumer)`` forming the cycle.
    """

    def __init__(self, cycle: list[tuple[str, str]]) -> None:
        path = " -> ".join([edge[0] for edge in cycle] + [cycle[0][0]]) if cycle else "?"
        super().__init__(f"headers depend on each other: {path}")
        self.cycle = cycle
