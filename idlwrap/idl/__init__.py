"""IDL parsing: grammar, definition records and the text-to-records entry point."""

from .ast import (
    Argument,
    Attribute,
    CallbackDef,
    CallbackInterfaceDef,
    Constant,
    Definition,
    DictionaryDef,
    DictionaryMember,
    EnumDef,
    ExtAttr,
    IdlType,
    ImplementsDef,
    IncludesDef,
    InterfaceDef,
    Iterable,
    Literal,
    NamespaceDef,
    Operation,
    Stringifier,
    TypedefDef,
    find_ext_attr,
    has_ext_attr,
)
from .parser import parse_idl

__all__ = [
    "Argument",
    "Attribute",
    "CallbackDef",
    "CallbackInterfaceDef",
    "Constant",
    "Definition",
    "DictionaryDef",
    "DictionaryMember",
    "EnumDef",
    "ExtAttr",
    "IdlType",
    "ImplementsDef",
    "IncludesDef",
    "InterfaceDef",
    "Iterable",
    "Literal",
    "NamespaceDef",
    "Operation",
    "Stringifier",
    "TypedefDef",
    "find_ext_attr",
    "has_ext_attr",
    "parse_idl",
]
