"""Tests for source collection."""

from __future__ import annotations

import asyncio

import pytest

from idlwrap.models import ModuleContribution, ResolvedFile, SourceDeclaration
from idlwrap.sources import SourceCollector
from tests._fixtures.idl_tree import IdlTreeBuilder


def _collect(sources, modules=()):
    return asyncio.run(SourceCollector().collect(sources, modules))


def test_directory_yields_only_idl_files_sorted(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write(
        {
            "idl/b.idl": "interface B { };",
            "idl/a.idl": "interface A { };",
            "idl/notes.txt": "not idl",
            "idl/nested/c.idl": "interface C { };",
        }
    )
    (idl_tree.path("idl") / "folder.idl").mkdir()

    files = _collect([SourceDeclaration(idl_path=idl_tree.path("idl"), impl_dir="../impl")])

    assert files == [
        ResolvedFile(idl_path=idl_tree.path("idl/a.idl"), impl_dir="../impl"),
        ResolvedFile(idl_path=idl_tree.path("idl/b.idl"), impl_dir="../impl"),
    ]


def test_single_file_is_taken_without_extension_check(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write({"defs.webidl": "interface A { };"})

    files = _collect([SourceDeclaration(idl_path=idl_tree.path("defs.webidl"))])

    assert files == [ResolvedFile(idl_path=idl_tree.path("defs.webidl"))]


def test_module_contribution_resolves_against_descriptor(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write(
        {
            "othermod/pyproject.toml": """
            [tool.idlwrap]
            interface = "generated"
            idl = ["idl/Base.idl", "idl/Mixin.idl"]
            """,
            "othermod/idl/Base.idl": "interface Base { };",
            "othermod/idl/Mixin.idl": "interface Mixin { };",
        }
    )
    descriptor = idl_tree.path("othermod/pyproject.toml")

    files = _collect([], [ModuleContribution(module_name="othermod", descriptor_path=descriptor)])

    base_dir = idl_tree.path("othermod").resolve()
    assert files == [
        ResolvedFile(idl_path=base_dir / "idl" / "Base.idl", gen_path="othermod/generated"),
        ResolvedFile(idl_path=base_dir / "idl" / "Mixin.idl", gen_path="othermod/generated"),
    ]


def test_module_without_section_contributes_nothing(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write({"plain/pyproject.toml": '[project]\nname = "plain"\n'})

    files = _collect(
        [],
        [ModuleContribution(module_name="plain", descriptor_path=idl_tree.path("plain/pyproject.toml"))],
    )

    assert files == []


def test_sources_come_before_modules_in_declaration_order(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write(
        {
            "first.idl": "interface First { };",
            "second/x.idl": "interface X { };",
            "mod/pyproject.toml": '[tool.idlwrap]\ninterface = "gen"\nidl = ["m.idl"]\n',
            "mod/m.idl": "interface M { };",
        }
    )

    files = _collect(
        [
            SourceDeclaration(idl_path=idl_tree.path("first.idl")),
            SourceDeclaration(idl_path=idl_tree.path("second")),
        ],
        [ModuleContribution(module_name="mod", descriptor_path=idl_tree.path("mod/pyproject.toml"))],
    )

    assert [f.idl_path.name for f in files] == ["first.idl", "x.idl", "m.idl"]


def test_missing_source_aborts_collection(idl_tree: IdlTreeBuilder) -> None:
    idl_tree.write({"present.idl": "interface A { };"})

    with pytest.raises(FileNotFoundError):
        _collect(
            [
                SourceDeclaration(idl_path=idl_tree.path("present.idl")),
                SourceDeclaration(idl_path=idl_tree.path("missing.idl")),
            ]
        )


def test_custom_descriptor_reader_is_used(idl_tree: IdlTreeBuilder) -> None:
    calls = []

    def reader(path):
        calls.append(path)
        return None

    collector = SourceCollector(descriptor_reader=reader)
    descriptor = idl_tree.path("virtual/pyproject.toml")

    files = asyncio.run(collector.collect([], [ModuleContribution("virtual", descriptor)]))

    assert files == []
    assert calls == [descriptor]
