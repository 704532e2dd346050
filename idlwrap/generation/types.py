"""Map IDL types onto conversion expressions used by generated modules."""

from __future__ import annotations

from typing import Dict, Optional, Sequence, Set, Tuple

from ..errors import GenerationError
from ..idl.ast import ExtAttr, IdlType, Literal, find_ext_attr
from ..model.registry import TypeKind, TypeRegistry
from ..paths import gen_module_path, import_statement, module_name_for_hint


class TypeConverter:
    """Builds Python expressions converting a value to a given IDL type.

    Interface and dictionary references are bound to module aliases
    (``_Name``); the import statements they need are collected in
    :attr:`imports` so the caller can emit them once per module.
    """

    CONVERSIONS = {
        "any": "any_",
        "boolean": "boolean",
        "byte": "byte",
        "octet": "octet",
        "short": "short",
        "unsigned short": "unsigned_short",
        "long": "long",
        "unsigned long": "unsigned_long",
        "long long": "long_long",
        "unsigned long long": "unsigned_long_long",
        "float": "float_",
        "unrestricted float": "unrestricted_float",
        "double": "double",
        "unrestricted double": "unrestricted_double",
        "DOMString": "DOMString",
        "ByteString": "ByteString",
        "USVString": "USVString",
        "object": "object_",
    }

    INTEGER_TYPES = {
        "byte",
        "octet",
        "short",
        "unsigned short",
        "long",
        "unsigned long",
        "long long",
        "unsigned long long",
    }

    SEQUENCE_TYPES = {"sequence", "FrozenArray"}

    def __init__(self, registry: TypeRegistry, owner: str) -> None:
        self.registry = registry
        self.owner = owner
        self.imports: Dict[str, str] = {}

    def resolve(self, idl_type: IdlType, ext_attrs: Sequence[ExtAttr] = ()) -> Tuple[IdlType, Tuple[ExtAttr, ...]]:
        """Follow typedefs until ``idl_type`` names a non-alias type."""
        attrs = tuple(ext_attrs)
        seen: Set[str] = set()
        while not idl_type.subtypes and idl_type.base in self.registry.typedefs:
            if idl_type.base in seen:
                raise GenerationError(f"typedef '{idl_type.base}' refers to itself")
            seen.add(idl_type.base)
            typedef = self.registry.typedefs[idl_type.base].definition
            target = typedef.idl_type
            idl_type = IdlType(target.base, target.nullable or idl_type.nullable, target.subtypes)
            attrs = attrs + tuple(typedef.ext_attrs)
        return idl_type, attrs

    def kind_of(self, idl_type: IdlType) -> Optional[TypeKind]:
        resolved, _ = self.resolve(idl_type)
        if resolved.subtypes:
            return None
        return self.registry.custom_types.get(resolved.base)

    def expression(
        self,
        idl_type: IdlType,
        value: str,
        context: str,
        ext_attrs: Sequence[ExtAttr] = (),
    ) -> str:
        """Return an expression converting ``value``; ``context`` is Python source."""
        idl_type, attrs = self.resolve(idl_type, ext_attrs)
        converted = self._convert(idl_type, value, context, attrs)
        if idl_type.nullable and converted != value:
            return f"None if {value} is None else {converted}"
        return converted

    def _convert(self, idl_type: IdlType, value: str, context: str, attrs: Tuple[ExtAttr, ...]) -> str:
        if idl_type.is_union:
            return value
        if idl_type.base in self.SEQUENCE_TYPES and idl_type.subtypes:
            item = self.expression(idl_type.subtypes[0], "item", context)
            if item == "item":
                return f"conversions.sequence({value}, conversions.any_, context={context})"
            return f"conversions.sequence({value}, lambda item: {item}, context={context})"
        if idl_type.subtypes:
            # record<> and Promise<> values pass through untouched.
            return value
        name = self.CONVERSIONS.get(idl_type.base)
        if name is not None:
            if name == "any_":
                return value
            options = self._options(idl_type.base, attrs)
            return f"conversions.{name}({value}, context={context}{options})"
        if idl_type.base == self.owner:
            return f"convert({value}, context={context})"
        kind = self.registry.custom_types.get(idl_type.base)
        if kind is None:
            # Enumerations, callbacks and foreign types are not converted.
            return value
        return f"{self.reference(idl_type.base)}.convert({value}, context={context})"

    def _options(self, base: str, attrs: Tuple[ExtAttr, ...]) -> str:
        options = ""
        if base in self.INTEGER_TYPES:
            if find_ext_attr(attrs, "EnforceRange") is not None:
                options += ", enforce_range=True"
            if find_ext_attr(attrs, "Clamp") is not None:
                options += ", clamp=True"
        if base == "DOMString":
            treat_null = find_ext_attr(attrs, "TreatNullAs")
            if treat_null is not None and treat_null.rhs == "EmptyString":
                options += ", treat_null_as_empty_string=True"
        return options

    def reference(self, name: str) -> str:
        """Return the module alias generated code uses for type ``name``."""
        alias = f"_{name}"
        if alias not in self.imports:
            entry = self.registry.lookup(name)
            if entry is None:
                raise GenerationError(f"'{self.owner}' refers to unknown type '{name}'")
            if entry.gen_path is not None:
                spec = module_name_for_hint(gen_module_path(entry.gen_path, name))
            else:
                spec = f".{name}"
            self.imports[alias] = import_statement(spec, alias)
        return alias

    def returns_wrapper(self, idl_type: Optional[IdlType]) -> bool:
        """True when values of ``idl_type`` are implementation objects needing a wrapper."""
        if idl_type is None:
            return False
        resolved, _ = self.resolve(idl_type)
        if resolved.is_union or resolved.base in {"any", "object"}:
            return True
        return self.kind_of(resolved) is TypeKind.INTERFACE


def literal(value: Optional[Literal]) -> str:
    """Render a constant or default value as Python source."""
    if value is None or value.kind == "null":
        return "None"
    if value.kind == "infinity":
        return 'float("inf")'
    if value.kind == "-infinity":
        return 'float("-inf")'
    if value.kind == "nan":
        return 'float("nan")'
    if value.kind == "sequence":
        return "[]"
    if value.kind == "dictionary":
        return "{}"
    return repr(value.value)


__all__ = ["TypeConverter", "literal"]
