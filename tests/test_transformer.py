"""Tests for the Transformer facade."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from idlwrap import Transformer
from idlwrap.config import IdlWrapConfig, ModuleConfig, SourceConfig
from idlwrap.errors import IdlSyntaxError, MissingDefinitionError
from idlwrap.model import TypeKind
from tests._fixtures.idl_tree import IdlTreeBuilder


def test_add_source_rejects_non_path_values() -> None:
    transformer = Transformer()

    with pytest.raises(TypeError):
        transformer.add_source(42)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        transformer.add_source("idl", impl=["impl"])  # type: ignore[arg-type]
    assert transformer.sources == []


def test_add_module_rejects_non_string_name() -> None:
    with pytest.raises(TypeError):
        Transformer().add_module(Path("othermod"))  # type: ignore[arg-type]


def test_add_source_and_module_are_chainable(idl_tree: IdlTreeBuilder) -> None:
    transformer = Transformer()

    result = transformer.add_source("idl", Path("impl")).add_module("othermod", idl_tree.path("pyproject.toml"))

    assert result is transformer
    assert transformer.sources[0].idl_path == Path("idl")
    assert transformer.sources[0].impl_dir == "impl"
    assert transformer.modules[0].descriptor_path == idl_tree.path("pyproject.toml")


def test_add_module_locates_descriptor(idl_tree: IdlTreeBuilder, monkeypatch: pytest.MonkeyPatch) -> None:
    idl_tree.write({"site/idlwrap_located_pkg/__init__.py": "", "site/pyproject.toml": ""})
    monkeypatch.syspath_prepend(str(idl_tree.path("site")))
    monkeypatch.delitem(sys.modules, "idlwrap_located_pkg", raising=False)

    transformer = Transformer().add_module("idlwrap_located_pkg")

    assert transformer.modules[0].descriptor_path == idl_tree.path("site/pyproject.toml")


def test_build_registry_merges_sources_and_modules(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write(
        {
            "idl/A.idl": "interface Foo { long x; };",
            "idl/B.idl": "partial interface Foo { long y; }; interface Bar { }; Bar implements Foo;",
            "othermod/pyproject.toml": '[tool.idlwrap]\ninterface = "gen"\nidl = ["Base.idl"]\n',
            "othermod/Base.idl": "interface Base { };",
        }
    )
    transformer = Transformer().add_source(idl_tree.path("idl"), "../impl")
    transformer.add_module("othermod", idl_tree.path("othermod/pyproject.toml"))

    registry = asyncio.run(transformer.build_registry())

    assert [m.name for m in registry.interfaces["Foo"].definition.members] == ["x", "y"]
    assert registry.interfaces["Bar"].mixins == ("Foo",)
    assert registry.interfaces["Foo"].impl_dir == "../impl"
    assert registry.interfaces["Base"].gen_path == "othermod/gen"
    assert dict(registry.custom_types) == {
        "Foo": TypeKind.INTERFACE,
        "Bar": TypeKind.INTERFACE,
        "Base": TypeKind.INTERFACE,
    }


def test_generate_writes_modules(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write({"Foo.idl": "interface Foo { attribute long x; }; dictionary Opts { long a; };"})
    output = idl_tree.path("out")

    written = Transformer(util_path=idl_tree.path("shared/utils.py")).add_source(idl_tree.path("Foo.idl")).generate(output)

    assert sorted(path.name for path in written) == ["Foo.py", "Opts.py"]
    assert idl_tree.path("shared/utils.py").is_file()
    assert "from ..shared import utils" in (output / "Foo.py").read_text(encoding="utf-8")


def test_generate_strict_and_relaxed(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write({"Foo.idl": "interface Foo { }; partial interface Ghost { };"})

    with pytest.raises(MissingDefinitionError):
        Transformer().add_source(idl_tree.path("Foo.idl")).generate(idl_tree.path("strict"))

    written = Transformer(suppress_errors=True).add_source(idl_tree.path("Foo.idl")).generate(idl_tree.path("relaxed"))
    assert [path.name for path in written] == ["Foo.py"]


def test_generate_propagates_parse_and_io_errors(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write({"bad.idl": "interface {"})

    with pytest.raises(IdlSyntaxError):
        Transformer().add_source(idl_tree.path("bad.idl")).generate(idl_tree.path("out"))
    with pytest.raises(FileNotFoundError):
        Transformer().add_source(idl_tree.path("missing.idl")).generate(idl_tree.path("out"))


def test_from_config_copies_options(idl_tree: IdlTreeBuilder) -> None:
    config = IdlWrapConfig(
        root=idl_tree.path(),
        util_path=idl_tree.path("u.py"),
        impl_suffix="Impl",
        suppress_errors=True,
        line_width=88,
        sources=[SourceConfig(idl=idl_tree.path("idl"), impl="impl")],
        modules=[ModuleConfig(name="othermod", descriptor=idl_tree.path("pyproject.toml"))],
    )

    transformer = Transformer.from_config(config)

    assert transformer.impl_suffix == "Impl"
    assert transformer.suppress_errors is True
    assert transformer.line_width == 88
    assert transformer.util_path == idl_tree.path("u.py")
    assert transformer.sources[0].impl_dir == "impl"
    assert transformer.modules[0].module_name == "othermod"
