"""Tests for the command-line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from abikit.cli import main, write_outputs

I32 = {"kind": "path", "segments": ["i32"]}
NO_MANGLE = [{"name": "no_mangle"}]
REPR_C = [{"name": "repr", "args": ["C"]}]


def write_stream(tmp_path: Path, decls: list[dict]) -> Path:
    source = tmp_path / "decls.json"
    source.write_text(json.dumps({"declarations": decls}), encoding="utf-8")
    return source


@pytest.fixture(autouse=True)
def _no_env_lib_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ABIKIT_LIB_NAME", raising=False)


class TestMain:
    def test_writes_headers(self, tmp_path):
        source = write_stream(
            tmp_path,
            [
                {
                    "kind": "function",
                    "name": "add",
                    "module": ["ffi"],
                    "abi": "C",
                    "attrs": NO_MANGLE,
                    "params": [{"name": "a", "type": I32}, {"name": "b", "type": I32}],
                    "return_type": I32,
                }
            ],
        )
        out = tmp_path / "include"
        assert main([str(source), "-o", str(out), "-l", "mathlib"]) == 0

        header = out / "mathlib" / "mathlib.h"
        assert "int32_t add(int32_t a, int32_t b);" in header.read_text(encoding="utf-8")
        umbrella = (out / "mathlib.h").read_text(encoding="utf-8")
        assert umbrella.startswith('#include "mathlib')

    def test_default_lib_name(self, tmp_path):
        source = write_stream(tmp_path, [{"kind": "function", "name": "f", "module": ["ffi"], "abi": "C", "attrs": NO_MANGLE}])
        out = tmp_path / "out"
        assert main([str(source), "-o", str(out)]) == 0
        assert (out / "backend.h").exists()
        assert (out / "backend" / "backend.h").exists()

    def test_lib_name_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ABIKIT_LIB_NAME", "envlib")
        source = write_stream(tmp_path, [])
        out = tmp_path / "out"
        assert main([str(source), "-o", str(out)]) == 0
        assert (out / "envlib.h").read_text(encoding="utf-8") == ""

    def test_rejected_declaration_writes_nothing(self, tmp_path):
        source = write_stream(
            tmp_path,
            [
                {"kind": "struct", "name": "Ok", "module": ["ffi"], "attrs": REPR_C, "fields": [{"name": "x", "type": I32}]},
                {"kind": "enum", "name": "Bad", "module": ["ffi"], "attrs": REPR_C, "variants": [{"name": "V", "kind": "struct"}]},
            ],
        )
        out = tmp_path / "out"
        assert main([str(source), "-o", str(out), "-q"]) == 1
        assert not out.exists()

    def test_cycle_writes_nothing(self, tmp_path):
        def opaque(name: str, module: str) -> dict:
            return {
                "kind": "struct",
                "name": name,
                "module": ["ffi", module],
                "attrs": REPR_C,
                "struct_kind": "tuple",
                "fields": [{"type": I32}],
            }

        def user(name: str, uses: str, module: str) -> dict:
            return {
                "kind": "function",
                "name": name,
                "module": ["ffi", module],
                "abi": "C",
                "attrs": NO_MANGLE,
                "params": [{"name": "h", "type": {"kind": "pointer", "pointee": {"kind": "path", "segments": [uses]}}}],
            }

        source = write_stream(
            tmp_path,
            [opaque("A", "a"), opaque("B", "b"), user("use_b", "B", "a"), user("use_a", "A", "b")],
        )
        out = tmp_path / "out"
        assert main([str(source), "-o", str(out)]) == 1
        assert not out.exists()

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "nope.json")]) == 1

    def test_invalid_lib_name(self, tmp_path):
        source = write_stream(tmp_path, [])
        assert main([str(source), "-l", "a/b"]) == 1

    def test_module_path_outside_output_dir(self, tmp_path):
        source = write_stream(
            tmp_path,
            [
                {
                    "kind": "struct",
                    "name": "Escaped",
                    "module": ["..", "escaped"],
                    "attrs": REPR_C,
                    "fields": [{"name": "x", "type": I32}],
                }
            ],
        )
        out = tmp_path / "out"
        assert main([str(source), "-o", str(out)]) == 1
        assert not (tmp_path / "escaped.h").exists()
        assert not out.exists()

    def test_malformed_declaration(self, tmp_path):
        source = write_stream(tmp_path, [{"kind": "type_alias", "name": "T", "target": 5}])
        assert main([str(source), "-o", str(tmp_path / "out")]) == 1


def test_write_outputs_creates_directories(tmp_path):
    written = write_outputs({"lib/sub/x.h": "x\n", "lib.h": '#include "lib/sub/x.h"\n'}, tmp_path)
    assert (tmp_path / "lib" / "sub" / "x.h").read_text(encoding="utf-8") == "x\n"
    assert len(written) == 2


def test_write_outputs_rejects_escaping_paths(tmp_path):
    out = tmp_path / "out"
    with pytest.raises(ValueError, match="outside"):
        write_outputs({"lib.h": "", "../escaped.h": "x\n"}, out)
    assert not (tmp_path / "escaped.h").exists()
    assert not (out / "lib.h").exists()
