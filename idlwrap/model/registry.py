"""Type registry: resolved interfaces, dictionaries and typedefs of one build."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..errors import DuplicateDefinitionError, RegistryStateError
from ..idl.ast import DictionaryDef, ExtAttr, InterfaceDef, TypedefDef


class TypeKind(str, Enum):
    INTERFACE = "interface"
    DICTIONARY = "dictionary"
    TYPEDEF = "typedef"


EntryDefinition = Union[InterfaceDef, DictionaryDef, TypedefDef]


@dataclass(frozen=True)
class TypeEntry:
    """A resolved declaration tagged with its kind.

    ``definition`` carries the merged parse record.  ``impl_dir`` is the raw
    implementation directory of the declaring source (interfaces only) and
    ``gen_path`` the output subpath of the contributing module, if any.
    """

    kind: TypeKind
    name: str
    definition: EntryDefinition
    impl_dir: Optional[str] = None
    gen_path: Optional[str] = None
    mixins: Tuple[str, ...] = ()

    @property
    def imported(self) -> bool:
        """True when another build owns the generated module for this type."""
        return self.gen_path is not None


@dataclass(frozen=True)
class TypeRegistry:
    """Read-only view over a fully resolved build."""

    interfaces: Mapping[str, TypeEntry]
    dictionaries: Mapping[str, TypeEntry]
    typedefs: Mapping[str, TypeEntry]
    custom_types: Mapping[str, TypeKind]

    def lookup(self, name: str) -> Optional[TypeEntry]:
        """Return the interface, dictionary or typedef named ``name``."""
        kind = self.custom_types.get(name)
        if kind is TypeKind.INTERFACE:
            return self.interfaces[name]
        if kind is TypeKind.DICTIONARY:
            return self.dictionaries[name]
        return self.typedefs.get(name)

    def kind_of(self, name: str) -> Optional[TypeKind]:
        if name in self.custom_types:
            return self.custom_types[name]
        if name in self.typedefs:
            return TypeKind.TYPEDEF
        return None

    def emittable(self) -> Iterator[TypeEntry]:
        """Yield interfaces then dictionaries owned by this build."""
        for entry in self.interfaces.values():
            if not entry.imported:
                yield entry
        for entry in self.dictionaries.values():
            if not entry.imported:
                yield entry

    def __contains__(self, name: object) -> bool:
        return name in self.custom_types or name in self.typedefs


class RegistryState(str, Enum):
    EMPTY = "empty"
    POPULATED = "pass-1-populated"
    RESOLVED = "fully-resolved"
    FROZEN = "read-only"


@dataclass
class _PendingEntry:
    kind: TypeKind
    definition: EntryDefinition
    impl_dir: Optional[str] = None
    gen_path: Optional[str] = None
    members: List[object] = field(default_factory=list)
    ext_attrs: List[ExtAttr] = field(default_factory=list)
    mixins: List[str] = field(default_factory=list)

    def freeze(self) -> TypeEntry:
        definition = self.definition
        if not isinstance(definition, TypedefDef):
            definition = dataclasses.replace(
                definition,
                members=tuple(self.members),
                ext_attrs=tuple(self.ext_attrs),
            )
        return TypeEntry(
            kind=self.kind,
            name=definition.name,
            definition=definition,
            impl_dir=self.impl_dir,
            gen_path=self.gen_path,
            mixins=tuple(self.mixins),
        )


class RegistryBuilder:
    """Mutable two-phase registry owned by the model builder.

    Full definitions are registered first; partial members and mixins are merged
    only after :meth:`finish_registration`.  Once :meth:`finish_merging` marks
    the registry resolved, :meth:`freeze` hands out the immutable
    :class:`TypeRegistry` and locks the builder.
    """

    def __init__(self) -> None:
        self._interfaces: Dict[str, _PendingEntry] = {}
        self._dictionaries: Dict[str, _PendingEntry] = {}
        self._typedefs: Dict[str, _PendingEntry] = {}
        self._custom_types: Dict[str, TypeKind] = {}
        self.state = RegistryState.EMPTY

    # pass 1

    def register_interface(
        self, definition: InterfaceDef, *, impl_dir: Optional[str], gen_path: Optional[str]
    ) -> None:
        self._require_registration()
        self._claim_custom_name(definition.name, TypeKind.INTERFACE)
        self._interfaces[definition.name] = _PendingEntry(
            kind=TypeKind.INTERFACE,
            definition=definition,
            impl_dir=impl_dir,
            gen_path=gen_path,
            members=list(definition.members),
            ext_attrs=list(definition.ext_attrs),
        )

    def register_dictionary(self, definition: DictionaryDef, *, gen_path: Optional[str]) -> None:
        self._require_registration()
        self._claim_custom_name(definition.name, TypeKind.DICTIONARY)
        self._dictionaries[definition.name] = _PendingEntry(
            kind=TypeKind.DICTIONARY,
            definition=definition,
            gen_path=gen_path,
            members=list(definition.members),
            ext_attrs=list(definition.ext_attrs),
        )

    def register_typedef(self, definition: TypedefDef) -> None:
        self._require_registration()
        if definition.name in self._typedefs:
            raise DuplicateDefinitionError(f"typedef '{definition.name}' is declared more than once")
        self._typedefs[definition.name] = _PendingEntry(kind=TypeKind.TYPEDEF, definition=definition)

    def finish_registration(self) -> None:
        self._require_registration()
        self.state = RegistryState.POPULATED

    # pass 2

    def has_interface(self, name: str) -> bool:
        return name in self._interfaces

    def has_dictionary(self, name: str) -> bool:
        return name in self._dictionaries

    def merge_partial_interface(self, partial: InterfaceDef) -> None:
        self._require_merging()
        entry = self._interfaces[partial.name]
        entry.members.extend(partial.members)
        entry.ext_attrs.extend(partial.ext_attrs)

    def merge_partial_dictionary(self, partial: DictionaryDef) -> None:
        self._require_merging()
        entry = self._dictionaries[partial.name]
        entry.members.extend(partial.members)
        entry.ext_attrs.extend(partial.ext_attrs)

    def add_mixin(self, target: str, source: str) -> None:
        self._require_merging()
        self._interfaces[target].mixins.append(source)

    def finish_merging(self) -> None:
        self._require_merging()
        self.state = RegistryState.RESOLVED

    def freeze(self) -> TypeRegistry:
        if self.state is not RegistryState.RESOLVED:
            raise RegistryStateError(f"cannot freeze the registry while it is {self.state.value}")
        registry = TypeRegistry(
            interfaces=MappingProxyType({name: e.freeze() for name, e in self._interfaces.items()}),
            dictionaries=MappingProxyType({name: e.freeze() for name, e in self._dictionaries.items()}),
            typedefs=MappingProxyType({name: e.freeze() for name, e in self._typedefs.items()}),
            custom_types=MappingProxyType(dict(self._custom_types)),
        )
        self.state = RegistryState.FROZEN
        return registry

    def _claim_custom_name(self, name: str, kind: TypeKind) -> None:
        existing = self._custom_types.get(name)
        if existing is not None:
            raise DuplicateDefinitionError(
                f"{kind.value} '{name}' conflicts with an earlier {existing.value} of the same name"
            )
        self._custom_types[name] = kind

    def _require_registration(self) -> None:
        if self.state is not RegistryState.EMPTY:
            raise RegistryStateError(f"cannot register definitions once the registry is {self.state.value}")

    def _require_merging(self) -> None:
        if self.state is not RegistryState.POPULATED:
            raise RegistryStateError(f"cannot merge definitions while the registry is {self.state.value}")
