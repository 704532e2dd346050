"""Tests for writing generated modules."""

from __future__ import annotations

import asyncio
from pathlib import Path

from idlwrap.generation import Emitter
from idlwrap.generation.emitter import UTILS_SOURCE
from idlwrap.idl import parse_idl
from idlwrap.model import ModelBuilder, ParsedDocument, TypeRegistry
from tests._fixtures.idl_tree import build_registry


def _registry() -> TypeRegistry:
    return ModelBuilder().resolve(
        [
            ParsedDocument(
                definitions=parse_idl("interface Foo { attribute long x; }; dictionary Options { };"),
                impl_dir="../impl",
            ),
            ParsedDocument(definitions=parse_idl("interface Base { };"), gen_path="othermod/gen"),
        ]
    )


def test_emit_writes_utils_and_owned_entries(tmp_path: Path) -> None:
    output = tmp_path / "out"

    written = asyncio.run(Emitter(output).emit(_registry()))

    assert sorted(path.name for path in written) == ["Foo.py", "Options.py"]
    assert not (output / "Base.py").exists()
    assert (output / "utils.py").read_text(encoding="utf-8") == UTILS_SOURCE.read_text(encoding="utf-8")

    foo = (output / "Foo.py").read_text(encoding="utf-8")
    assert "from idlwrap.runtime import conversions\nfrom . import utils\nfrom ..impl import Foo_impl as Impl\n" in foo
    options = (output / "Options.py").read_text(encoding="utf-8")
    assert "from . import utils\n" in options
    assert "Impl" not in options


def test_preamble_honours_util_path_and_impl_suffix(tmp_path: Path) -> None:
    output = tmp_path / "out"
    emitter = Emitter(output, util_path=tmp_path / "shared" / "helpers.py", impl_suffix="Impl")
    registry = build_registry("interface Foo { };")

    preamble = emitter.preamble(registry.interfaces["Foo"])

    assert preamble[2:] == [
        "from idlwrap.runtime import conversions",
        "from ..shared import helpers as utils",
        "from . import FooImpl as Impl",
    ]


def test_module_for_formats_with_configured_width(tmp_path: Path) -> None:
    registry = build_registry("interface Foo { void run(long first, long second, long third); };")
    emitter = Emitter(tmp_path, line_width=60)

    path, text = emitter.module_for(registry.interfaces["Foo"], registry)

    assert path == tmp_path / "Foo.py"
    assert all(len(line) <= 60 or '"' in line for line in text.splitlines())
    compile(text, str(path), "exec")


def test_emit_with_only_imported_entries_writes_only_utils(tmp_path: Path) -> None:
    registry = build_registry("interface Base { };", gen_path="othermod/gen")

    written = asyncio.run(Emitter(tmp_path / "out").emit(registry))

    assert written == []
    assert [p.name for p in (tmp_path / "out").iterdir()] == ["utils.py"]
