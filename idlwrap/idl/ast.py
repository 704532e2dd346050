"""Definition records produced by the IDL parser.

Every top-level record exposes a ``type`` discriminator mirroring the keyword it
was declared with (``interface``, ``dictionary``, ``typedef``, ``implements``
...).  Records are frozen; the model builder copies member lists before merging
partial definitions so parse results are never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union


@dataclass(frozen=True)
class IdlType:
    """A (possibly nested) IDL type reference."""

    base: str
    nullable: bool = False
    subtypes: Tuple["IdlType", ...] = ()

    @property
    def is_union(self) -> bool:
        return self.base == "union"

    def __str__(self) -> str:
        if self.is_union:
            text = "(" + " or ".join(str(item) for item in self.subtypes) + ")"
        elif self.subtypes:
            text = f"{self.base}<{', '.join(str(item) for item in self.subtypes)}>"
        else:
            text = self.base
        return text + "?" if self.nullable else text


@dataclass(frozen=True)
class Literal:
    """A constant or default value.

    ``kind`` is one of ``boolean``, ``null``, ``integer``, ``float``,
    ``string``, ``infinity``, ``-infinity``, ``nan``, ``sequence`` or
    ``dictionary``; the latter two are always empty.
    """

    kind: str
    value: Union[bool, int, float, str, None] = None


@dataclass(frozen=True)
class Argument:
    name: str
    idl_type: IdlType
    optional: bool = False
    variadic: bool = False
    default: Optional[Literal] = None
    ext_attrs: Tuple["ExtAttr", ...] = ()


@dataclass(frozen=True)
class ExtAttr:
    """An extended attribute such as ``[Exposed=Window]`` or ``[Constructor(long x)]``.

    ``rhs`` holds the identifier (or tuple of identifiers, or string) after
    ``=``; ``arguments`` is ``None`` when no argument list was written.
    """

    name: str
    rhs: Union[str, Tuple[str, ...], None] = None
    arguments: Optional[Tuple[Argument, ...]] = None


@dataclass(frozen=True)
class Attribute:
    type: ClassVar[str] = "attribute"

    name: str
    idl_type: IdlType
    readonly: bool = False
    static: bool = False
    inherit: bool = False
    stringifier: bool = False
    ext_attrs: Tuple[ExtAttr, ...] = ()


@dataclass(frozen=True)
class Operation:
    type: ClassVar[str] = "operation"

    name: Optional[str]
    return_type: Optional[IdlType]
    arguments: Tuple[Argument, ...] = ()
    static: bool = False
    special: Optional[str] = None
    ext_attrs: Tuple[ExtAttr, ...] = ()


@dataclass(frozen=True)
class Constant:
    type: ClassVar[str] = "const"

    name: str
    idl_type: IdlType
    value: Literal
    ext_attrs: Tuple[ExtAttr, ...] = ()


@dataclass(frozen=True)
class Stringifier:
    """A bare ``stringifier;`` declaration."""

    type: ClassVar[str] = "stringifier"

    ext_attrs: Tuple[ExtAttr, ...] = ()


@dataclass(frozen=True)
class Iterable:
    type: ClassVar[str] = "iterable"

    value_type: IdlType
    key_type: Optional[IdlType] = None
    ext_attrs: Tuple[ExtAttr, ...] = ()


@dataclass(frozen=True)
class DictionaryMember:
    type: ClassVar[str] = "field"

    name: str
    idl_type: IdlType
    required: bool = False
    default: Optional[Literal] = None
    ext_attrs: Tuple[ExtAttr, ...] = ()


InterfaceMember = Union[Attribute, Operation, Constant, Stringifier, Iterable]


@dataclass(frozen=True)
class InterfaceDef:
    type: ClassVar[str] = "interface"

    name: str
    members: Tuple[InterfaceMember, ...] = ()
    ext_attrs: Tuple[ExtAttr, ...] = ()
    inheritance: Optional[str] = None
    partial: bool = False
    line: int = 0


@dataclass(frozen=True)
class DictionaryDef:
    type: ClassVar[str] = "dictionary"

    name: str
    members: Tuple[DictionaryMember, ...] = ()
    ext_attrs: Tuple[ExtAttr, ...] = ()
    inheritance: Optional[str] = None
    partial: bool = False
    line: int = 0


@dataclass(frozen=True)
class TypedefDef:
    type: ClassVar[str] = "typedef"

    name: str
    idl_type: IdlType
    ext_attrs: Tuple[ExtAttr, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class ImplementsDef:
    """``target implements implements;``"""

    type: ClassVar[str] = "implements"

    target: str
    implements: str
    ext_attrs: Tuple[ExtAttr, ...] = ()
    line: int = 0

    @property
    def name(self) -> str:
        return self.target


@dataclass(frozen=True)
class IncludesDef:
    type: ClassVar[str] = "includes"

    target: str
    includes: str
    ext_attrs: Tuple[ExtAttr, ...] = ()
    line: int = 0

    @property
    def name(self) -> str:
        return self.target


@dataclass(frozen=True)
class EnumDef:
    type: ClassVar[str] = "enum"

    name: str
    values: Tuple[str, ...] = ()
    ext_attrs: Tuple[ExtAttr, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class CallbackDef:
    type: ClassVar[str] = "callback"

    name: str
    return_type: Optional[IdlType]
    arguments: Tuple[Argument, ...] = ()
    ext_attrs: Tuple[ExtAttr, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class CallbackInterfaceDef:
    type: ClassVar[str] = "callback interface"

    name: str
    members: Tuple[InterfaceMember, ...] = ()
    ext_attrs: Tuple[ExtAttr, ...] = ()
    inheritance: Optional[str] = None
    line: int = 0


@dataclass(frozen=True)
class NamespaceDef:
    type: ClassVar[str] = "namespace"

    name: str
    members: Tuple[InterfaceMember, ...] = ()
    ext_attrs: Tuple[ExtAttr, ...] = ()
    line: int = 0


Definition = Union[
    InterfaceDef,
    DictionaryDef,
    TypedefDef,
    ImplementsDef,
    IncludesDef,
    EnumDef,
    CallbackDef,
    CallbackInterfaceDef,
    NamespaceDef,
]


def find_ext_attr(ext_attrs: Tuple[ExtAttr, ...], name: str) -> Optional[ExtAttr]:
    """Return the first extended attribute called ``name``."""
    for attr in ext_attrs:
        if attr.name == name:
            return attr
    return None


def has_ext_attr(ext_attrs: Tuple[ExtAttr, ...], name: str) -> bool:
    return find_ext_attr(ext_attrs, name) is not None
