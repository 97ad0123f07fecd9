"""Tests for the declaration emitter."""

from __future__ import annotations

import os

import pytest

from abikit.errors import (
    DivergingAcrossBoundary,
    GenericNotRepresentable,
    InternalError,
    NonUnitVariant,
    UnrepresentableAggregate,
    UnsupportedType,
)
from abikit.ir import (
    Attribute,
    Enum,
    Field,
    FnPointerType,
    Function,
    NeverType,
    Param,
    PathType,
    PointerType,
    ReferenceType,
    SourceLocation,
    Struct,
    TupleType,
    TypeAlias,
    Variant,
)
from abikit.session import BindgenSession

REPR_C = Attribute("repr", ["C"])
NO_MANGLE = Attribute("no_mangle")


def doc(text: str) -> Attribute:
    return Attribute("doc", value=text)


def path(*segments: str) -> PathType:
    return PathType(list(segments))


@pytest.fixture()
def session() -> BindgenSession:
    return BindgenSession("shapes")


def header(*parts: str) -> str:
    return os.path.join(*parts)


class TestTypeAlias:
    def test_primitive_alias(self, session):
        assert session.emit(TypeAlias("Score", path("i32"), module=["ffi"]))
        assert session.outputs[header("shapes", "shapes.h")] == "typedef int32_t Score;\n\n"

    def test_function_pointer_alias(self, session):
        fp = FnPointerType([Param("x", path("i32"))])
        session.emit(TypeAlias("Callback", fp, module=["ffi"]))
        assert session.outputs[header("shapes", "shapes.h")] == "typedef void (*Callback)(int32_t x);\n\n"

    def test_docs_precede_typedef(self, session):
        session.emit(TypeAlias("Score", path("i32"), module=["ffi"], attrs=[doc(" Points scored.")]))
        assert session.outputs[header("shapes", "shapes.h")] == "/// Points scored.\ntypedef int32_t Score;\n\n"

    def test_generic_alias_skipped(self, session):
        assert not session.emit(TypeAlias("List", path("T"), module=["ffi"], generics=["T"]))
        assert len(session.outputs) == 0
        assert "List" not in session.types

    def test_alias_registered(self, session):
        session.emit(TypeAlias("Score", path("i32"), module=["ffi", "game"]))
        assert session.types.lookup("Score") == header("shapes", "game.h")

    def test_alias_records_dependencies(self, session):
        session.emit(TypeAlias("PointRef", PointerType(path("Point")), module=["ffi", "refs"]))
        assert session.dependencies[header("shapes", "refs.h")] == ["Point"]


class TestEnum:
    def test_scenario_colors(self):
        session = BindgenSession("paint")
        color = Enum(
            "Color",
            [Variant("Red"), Variant("Green"), Variant("Blue")],
            module=["ffi", "colors"],
            attrs=[REPR_C],
        )
        assert session.emit(color)
        assert session.outputs[header("paint", "colors.h")] == (
            "typedef enum Color {\n\tColor_Red,\n\tColor_Green,\n\tColor_Blue,\n} Color;\n\n"
        )

    def test_variant_docs_indented(self, session):
        e = Enum(
            "Mode",
            [Variant("Fast", attrs=[doc(" Go fast.")]), Variant("Slow")],
            module=["ffi"],
            attrs=[doc(" Run mode."), REPR_C],
        )
        session.emit(e)
        assert session.outputs[header("shapes", "shapes.h")] == (
            "/// Run mode.\ntypedef enum Mode {\n\t/// Go fast.\n\tMode_Fast,\n\tMode_Slow,\n} Mode;\n\n"
        )

    def test_not_repr_c_skipped(self, session):
        assert not session.emit(Enum("Color", [Variant("Red")], module=["ffi"]))
        assert len(session.outputs) == 0

    def test_generic_rejected(self, session):
        e = Enum("Maybe", [Variant("Nothing")], module=["ffi"], generics=["T"], attrs=[REPR_C])
        with pytest.raises(GenericNotRepresentable):
            session.emit(e)

    def test_non_unit_variant_rejected(self, session):
        loc = SourceLocation("src/lib.rs", 7, 5)
        e = Enum(
            "Shape",
            [Variant("Empty"), Variant("Circle", kind="tuple", location=loc)],
            module=["ffi"],
            attrs=[REPR_C],
        )
        with pytest.raises(NonUnitVariant) as exc_info:
            session.emit(e)
        assert exc_info.value.location == loc
        assert len(session.outputs) == 0

    def test_enum_not_registered(self, session):
        session.emit(Enum("Color", [Variant("Red")], module=["ffi"], attrs=[REPR_C]))
        assert "Color" not in session.types


class TestStruct:
    def test_scenario_point(self, session):
        point = Struct(
            "Point",
            [Field("x", path("i32")), Field("y", path("f64"))],
            module=["ffi", "geometry"],
            attrs=[REPR_C],
        )
        assert session.emit(point)
        assert session.outputs[header("shapes", "geometry.h")] == (
            "typedef struct Point {\n\tint32_t x;\n\tdouble y;\n} Point;\n\n"
        )
        assert session.types.lookup("Point") == header("shapes", "geometry.h")

    def test_field_docs(self, session):
        s = Struct(
            "Size",
            [Field("w", path("u32"), attrs=[doc(" Width.")])],
            module=["ffi"],
            attrs=[REPR_C],
        )
        session.emit(s)
        assert session.outputs[header("shapes", "shapes.h")] == (
            "typedef struct Size {\n\t/// Width.\n\tuint32_t w;\n} Size;\n\n"
        )

    def test_function_pointer_field(self, session):
        s = Struct(
            "Vtable",
            [Field("drop", FnPointerType([Param("this", PointerType(TupleType(), mutable=True))]))],
            module=["ffi"],
            attrs=[REPR_C],
        )
        session.emit(s)
        assert "\tvoid (*drop)(void* this);\n" in session.outputs[header("shapes", "shapes.h")]

    def test_single_field_tuple_is_opaque(self, session):
        s = Struct("Handle", [Field(None, path("Inner"))], kind="tuple", module=["ffi"], attrs=[REPR_C])
        session.emit(s)
        assert session.outputs[header("shapes", "shapes.h")] == "typedef struct Handle Handle;\n\n"
        assert session.dependencies == {}
        assert session.types.lookup("Handle") == header("shapes", "shapes.h")

    def test_two_field_tuple_rejected(self, session):
        s = Struct(
            "Pair",
            [Field(None, path("i32")), Field(None, path("i32"))],
            kind="tuple",
            module=["ffi"],
            attrs=[REPR_C],
        )
        with pytest.raises(UnrepresentableAggregate):
            session.emit(s)

    def test_unit_struct_rejected(self, session):
        with pytest.raises(UnrepresentableAggregate):
            session.emit(Struct("Marker", [], kind="unit", module=["ffi"], attrs=[REPR_C]))

    def test_generic_rejected(self, session):
        s = Struct("Wrapper", [Field("x", path("T"))], module=["ffi"], generics=["T"], attrs=[REPR_C])
        with pytest.raises(GenericNotRepresentable):
            session.emit(s)

    def test_not_repr_c_skipped(self, session):
        assert not session.emit(Struct("Point", [Field("x", path("i32"))], module=["ffi"]))
        assert len(session.outputs) == 0
        assert "Point" not in session.types

    def test_rejected_field_leaves_no_trace(self, session):
        loc = SourceLocation("src/geometry.rs", 3, 1)
        s = Struct(
            "Line",
            [Field("start", path("Point")), Field("label", ReferenceType(path("str")))],
            module=["ffi"],
            attrs=[REPR_C],
            location=loc,
        )
        with pytest.raises(UnsupportedType) as exc_info:
            session.emit(s)
        assert exc_info.value.location == loc
        assert str(exc_info.value).startswith("src/geometry.rs:3:1: ")
        assert len(session.outputs) == 0
        assert len(session.types) == 0
        assert session.dependencies == {}

    def test_first_registration_wins(self, session):
        first = Struct("Point", [Field("x", path("i32"))], module=["ffi", "a"], attrs=[REPR_C])
        second = Struct("Point", [Field("x", path("i64"))], module=["ffi", "b"], attrs=[REPR_C])
        session.emit(first)
        session.emit(second)
        assert session.types.lookup("Point") == header("shapes", "a.h")


class TestFunction:
    def test_scenario_add(self):
        session = BindgenSession("mathlib")
        add = Function(
            "add",
            [Param("a", path("i32")), Param("b", path("i32"))],
            path("i32"),
            abi="C",
            module=["ffi"],
            attrs=[NO_MANGLE],
        )
        assert session.emit(add)
        assert session.outputs[header("mathlib", "mathlib.h")] == "int32_t add(int32_t a, int32_t b);\n\n"

    def test_scenario_make_adder(self, session):
        adder = FnPointerType([Param(None, path("i32")), Param(None, path("i32"))], path("i32"), abi="C")
        f = Function("make_adder", [], adder, abi="C", module=["ffi"], attrs=[NO_MANGLE])
        session.emit(f)
        assert session.outputs[header("shapes", "shapes.h")] == (
            "int32_t (*make_adder(void))(int32_t, int32_t);\n\n"
        )

    def test_no_params_no_return(self, session):
        session.emit(Function("reset", abi="C", module=["ffi"], attrs=[NO_MANGLE]))
        assert session.outputs[header("shapes", "shapes.h")] == "void reset(void);\n\n"

    def test_explicit_unit_return(self, session):
        session.emit(Function("reset", return_type=TupleType(), abi="C", module=["ffi"], attrs=[NO_MANGLE]))
        assert session.outputs[header("shapes", "shapes.h")] == "void reset(void);\n\n"

    def test_docs(self, session):
        f = Function("reset", abi="C", module=["ffi"], attrs=[doc(" Start over."), NO_MANGLE])
        session.emit(f)
        assert session.outputs[header("shapes", "shapes.h")] == "/// Start over.\nvoid reset(void);\n\n"

    def test_pointer_params(self, session):
        f = Function(
            "point_len",
            [Param("p", PointerType(path("Point")))],
            path("f64"),
            abi="C",
            module=["ffi", "geometry"],
            attrs=[NO_MANGLE],
        )
        session.emit(f)
        assert session.outputs[header("shapes", "geometry.h")] == "double point_len(Point const* p);\n\n"
        assert session.dependencies[header("shapes", "geometry.h")] == ["Point"]

    def test_callback_param(self, session):
        cb = FnPointerType([Param("status", path("i32"))])
        f = Function("run", [Param("done", cb)], abi="C", module=["ffi"], attrs=[NO_MANGLE])
        session.emit(f)
        assert session.outputs[header("shapes", "shapes.h")] == "void run(void (*done)(int32_t status));\n\n"

    @pytest.mark.parametrize("abi", ["C", "cdecl", "stdcall", "fastcall", "system"])
    def test_c_abis_accepted(self, session, abi):
        assert session.emit(Function("f", abi=abi, module=["ffi"], attrs=[NO_MANGLE]))

    @pytest.mark.parametrize("abi", [None, "Rust", "rust-call", "vectorcall"])
    def test_other_abis_skipped(self, session, abi):
        assert not session.emit(Function("f", abi=abi, module=["ffi"], attrs=[NO_MANGLE]))
        assert len(session.outputs) == 0

    def test_not_no_mangle_skipped(self, session):
        assert not session.emit(Function("f", abi="C", module=["ffi"]))
        assert len(session.outputs) == 0

    def test_generic_rejected(self, session):
        f = Function("f", abi="C", module=["ffi"], generics=["T"], attrs=[NO_MANGLE])
        with pytest.raises(GenericNotRepresentable):
            session.emit(f)

    def test_diverging_rejected(self, session):
        f = Function("die", [Param("code", path("i32"))], NeverType(), abi="C", module=["ffi"], attrs=[NO_MANGLE])
        with pytest.raises(DivergingAcrossBoundary):
            session.emit(f)
        assert len(session.outputs) == 0

    def test_diverging_function_pointer_return_rejected(self, session):
        fp = FnPointerType([], NeverType())
        f = Function("get_abort", [], fp, abi="C", module=["ffi"], attrs=[NO_MANGLE])
        with pytest.raises(DivergingAcrossBoundary):
            session.emit(f)

    def test_function_not_registered(self, session):
        session.emit(Function("f", abi="C", module=["ffi"], attrs=[NO_MANGLE]))
        assert len(session.types) == 0


class TestInternalErrors:
    def test_wrong_visitor(self, session):
        emitter = session._emitter
        with pytest.raises(InternalError):
            emitter.emit_enum(Struct("Point", module=["ffi"], attrs=[REPR_C]))

    def test_unknown_declaration(self, session):
        with pytest.raises(InternalError):
            session.emit(object())

    def test_empty_module_path(self, session):
        with pytest.raises(InternalError):
            session.emit(TypeAlias("Score", path("i32"), module=[]))
