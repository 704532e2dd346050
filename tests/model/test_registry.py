"""Tests for the registry builder state machine."""

from __future__ import annotations

import pytest

from idlwrap.errors import DuplicateDefinitionError, RegistryStateError
from idlwrap.idl import Attribute, DictionaryDef, IdlType, InterfaceDef, TypedefDef
from idlwrap.model import RegistryBuilder, RegistryState, TypeKind


def _interface(name: str, *members: str, partial: bool = False) -> InterfaceDef:
    attrs = tuple(Attribute(name=member, idl_type=IdlType("long")) for member in members)
    return InterfaceDef(name=name, members=attrs, partial=partial)


def test_state_transitions() -> None:
    builder = RegistryBuilder()
    assert builder.state is RegistryState.EMPTY

    builder.register_interface(_interface("Foo", "a"), impl_dir=None, gen_path=None)
    builder.finish_registration()
    assert builder.state is RegistryState.POPULATED

    builder.merge_partial_interface(_interface("Foo", "b", partial=True))
    builder.finish_merging()
    assert builder.state is RegistryState.RESOLVED
    registry = builder.freeze()

    assert builder.state is RegistryState.FROZEN
    assert [m.name for m in registry.interfaces["Foo"].definition.members] == ["a", "b"]


def test_mutation_after_freeze_is_rejected() -> None:
    builder = RegistryBuilder()
    builder.finish_registration()
    builder.finish_merging()
    builder.freeze()

    with pytest.raises(RegistryStateError):
        builder.register_interface(_interface("Foo"), impl_dir=None, gen_path=None)
    with pytest.raises(RegistryStateError):
        builder.add_mixin("Foo", "Bar")


def test_merging_before_registration_finishes_is_rejected() -> None:
    builder = RegistryBuilder()
    builder.register_interface(_interface("Foo"), impl_dir=None, gen_path=None)

    with pytest.raises(RegistryStateError):
        builder.merge_partial_interface(_interface("Foo", "b", partial=True))


def test_interface_and_dictionary_share_one_namespace() -> None:
    builder = RegistryBuilder()
    builder.register_dictionary(DictionaryDef(name="Foo"), gen_path=None)

    with pytest.raises(DuplicateDefinitionError):
        builder.register_interface(_interface("Foo"), impl_dir=None, gen_path=None)


def test_frozen_registry_is_read_only() -> None:
    builder = RegistryBuilder()
    builder.register_interface(_interface("Foo"), impl_dir="impl", gen_path=None)
    builder.register_typedef(TypedefDef(name="Size", idl_type=IdlType("long")))
    builder.finish_registration()
    builder.finish_merging()
    registry = builder.freeze()

    with pytest.raises(TypeError):
        registry.interfaces["Bar"] = registry.interfaces["Foo"]  # type: ignore[index]
    entry = registry.lookup("Foo")
    assert entry.kind is TypeKind.INTERFACE
    assert entry.impl_dir == "impl"
    assert registry.lookup("Size").kind is TypeKind.TYPEDEF
    assert registry.lookup("Missing") is None
    assert isinstance(entry.definition.members, tuple)


def test_freeze_requires_merging_to_finish() -> None:
    builder = RegistryBuilder()
    builder.register_interface(_interface("Foo", "a"), impl_dir=None, gen_path=None)

    with pytest.raises(RegistryStateError, match="while it is empty"):
        builder.freeze()
    builder.finish_registration()
    with pytest.raises(RegistryStateError, match="pass-1-populated"):
        builder.freeze()

    builder.finish_merging()
    with pytest.raises(RegistryStateError):
        builder.merge_partial_interface(_interface("Foo", "b", partial=True))
    builder.freeze()
    with pytest.raises(RegistryStateError):
        builder.freeze()
