"""Render registry entries into Python wrapper module bodies.

The renderer turns one :class:`~idlwrap.model.TypeEntry` into the body of a
generated module.  Conversion expressions and argument handling are computed
here; the Jinja2 templates under ``templates/`` only lay the code out.  The
emitter prepends the import preamble and formats the result.
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader

from ..errors import GenerationError
from ..idl.ast import (
    Argument,
    Attribute,
    Constant,
    DictionaryDef,
    InterfaceDef,
    InterfaceMember,
    Iterable,
    Operation,
    Stringifier,
    find_ext_attr,
    has_ext_attr,
)
from ..logging import get_logger
from ..model.registry import TypeEntry, TypeKind, TypeRegistry
from ..paths import gen_module_path, import_statement, module_name_for_hint
from .types import TypeConverter, literal

TEMPLATES_DIR = Path(__file__).with_name("templates")

_SPECIAL_METHODS = {"getter": "__getitem__", "setter": "__setitem__", "deleter": "__delitem__"}

logger = get_logger("generation")


@dataclass(frozen=True)
class RenderOptions:
    """Knobs affecting rendered module bodies."""

    default_exposure: Tuple[str, ...] = ("Window",)


@dataclass
class MethodView:
    name: str
    static: bool
    minimum: int
    arity_message: str
    body: List[str]
    returns_wrapper: bool


@dataclass
class AttributeView:
    name: str
    returns_wrapper: bool
    setter: Optional[str]


@dataclass
class SpecialView:
    method: str
    access: str
    returns_wrapper: bool = False


@dataclass
class InterfaceView:
    name: str
    base: str
    base_import: Optional[str]
    constants: List[Tuple[str, str]] = field(default_factory=list)
    constructor: Optional[MethodView] = None
    attributes: List[AttributeView] = field(default_factory=list)
    methods: List[MethodView] = field(default_factory=list)
    specials: List[SpecialView] = field(default_factory=list)
    stringifier: Optional[str] = None
    iterable: Optional[str] = None
    expose: Dict[str, str] = field(default_factory=dict)
    imports: List[str] = field(default_factory=list)


@dataclass
class DictionaryMemberView:
    key: str
    conversion: str
    required_message: Optional[str]
    default: Optional[str]


@dataclass
class DictionaryView:
    name: str
    parent: Optional[str]
    members: List[DictionaryMemberView]
    imports: List[str]


def python_name(name: str) -> str:
    """Return ``name`` escaped when it collides with a Python keyword."""
    return f"{name}_" if keyword.iskeyword(name) else name


def _create_env() -> Environment:
    loader = FileSystemLoader(str(TEMPLATES_DIR))
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return _create_env()


class InterfaceRenderer:
    """Collects the members of one interface into an :class:`InterfaceView`."""

    def __init__(self, entry: TypeEntry, registry: TypeRegistry, options: RenderOptions) -> None:
        self.entry = entry
        self.registry = registry
        self.options = options
        self.definition: InterfaceDef = entry.definition  # type: ignore[assignment]
        self.converter = TypeConverter(registry, entry.name)

    def view(self) -> InterfaceView:
        base, base_import = self._base()
        view = InterfaceView(name=self.entry.name, base=base, base_import=base_import)
        view.constructor = self._constructor()
        seen_operations: Dict[str, Operation] = {}
        for member in self._members():
            if isinstance(member, Constant):
                view.constants.append((python_name(member.name), literal(member.value)))
            elif isinstance(member, Attribute):
                view.attributes.append(self._attribute(member))
                if member.stringifier:
                    self._set_stringifier(view, f"utils.impl_for_wrapper(self).{python_name(member.name)}")
            elif isinstance(member, Operation):
                self._operation(view, member, seen_operations)
            elif isinstance(member, Stringifier):
                self._set_stringifier(view, "str(utils.impl_for_wrapper(self))")
            elif isinstance(member, Iterable):
                if view.iterable is not None:
                    raise GenerationError(f"interface '{self.entry.name}' declares more than one iterable")
                view.iterable = "pair" if member.key_type is not None else "value"
        view.expose = self._expose()
        imports = dict(self.converter.imports)
        if base_import is not None:
            imports.pop(base.split(".")[0], None)
        view.imports = sorted(imports.values())
        return view

    def _members(self) -> List[InterfaceMember]:
        members = list(self.definition.members)
        pending = list(self.entry.mixins)
        visited = {self.entry.name}
        while pending:
            mixin = pending.pop(0)
            if mixin in visited:
                continue
            visited.add(mixin)
            source = self.registry.interfaces.get(mixin)
            if source is None:
                raise GenerationError(f"'{self.entry.name}' implements unknown interface '{mixin}'")
            members.extend(source.definition.members)
            pending.extend(source.mixins)
        return members

    def _base(self) -> Tuple[str, Optional[str]]:
        parent = self.definition.inheritance
        if parent is None:
            return "object", None
        entry = self.registry.interfaces.get(parent)
        if entry is None:
            raise GenerationError(f"interface '{self.entry.name}' inherits from unknown interface '{parent}'")
        alias = f"_{parent}"
        if entry.gen_path is not None:
            spec = module_name_for_hint(gen_module_path(entry.gen_path, parent))
        else:
            spec = f".{parent}"
        return f"{alias}.{parent}", import_statement(spec, alias)

    def _constructor(self) -> Optional[MethodView]:
        constructors = [attr for attr in self.definition.ext_attrs if attr.name == "Constructor"]
        if not constructors:
            return None
        if len(constructors) > 1:
            raise GenerationError(f"interface '{self.entry.name}' has overloaded constructors")
        arguments = constructors[0].arguments or ()
        return self._method_view(
            name="__init__",
            arguments=arguments,
            action=f"construct '{self.entry.name}'",
            static=False,
            returns_wrapper=False,
        )

    def _attribute(self, attribute: Attribute) -> AttributeView:
        if attribute.static:
            raise GenerationError(
                f"static attribute '{attribute.name}' on '{self.entry.name}' is not supported"
            )
        setter = None
        if not attribute.readonly:
            context = repr(f"Failed to set the '{attribute.name}' property on '{self.entry.name}': The provided value")
            setter = self.converter.expression(attribute.idl_type, "value", context, attribute.ext_attrs)
        return AttributeView(
            name=python_name(attribute.name),
            returns_wrapper=self.converter.returns_wrapper(attribute.idl_type),
            setter=setter,
        )

    def _operation(self, view: InterfaceView, operation: Operation, seen: Dict[str, Operation]) -> None:
        if operation.name is None:
            self._unnamed_operation(view, operation)
            return
        if operation.name in seen:
            raise GenerationError(
                f"operation '{operation.name}' on '{self.entry.name}' is overloaded"
            )
        seen[operation.name] = operation
        action = f"execute '{operation.name}' on '{self.entry.name}'"
        view.methods.append(
            self._method_view(
                name=python_name(operation.name),
                arguments=operation.arguments,
                action=action,
                static=operation.static,
                returns_wrapper=self.converter.returns_wrapper(operation.return_type),
            )
        )
        if operation.special in _SPECIAL_METHODS:
            self._special_view(view, operation)
        if operation.special == "stringifier":
            self._set_stringifier(view, f"utils.impl_for_wrapper(self).{python_name(operation.name)}()")

    def _unnamed_operation(self, view: InterfaceView, operation: Operation) -> None:
        if operation.special == "stringifier":
            self._set_stringifier(view, "str(utils.impl_for_wrapper(self))")
            return
        if operation.special not in _SPECIAL_METHODS:
            raise GenerationError(f"unnamed operation on '{self.entry.name}' is not supported")
        self._special_view(view, operation)

    def _special_view(self, view: InterfaceView, operation: Operation) -> None:
        method = _SPECIAL_METHODS[operation.special]
        if any(special.method == method for special in view.specials):
            raise GenerationError(f"interface '{self.entry.name}' declares more than one {operation.special}")
        expected = 2 if operation.special == "setter" else 1
        if len(operation.arguments) != expected:
            raise GenerationError(
                f"{operation.special} on '{self.entry.name}' takes {expected} argument(s)"
            )
        key_arg = operation.arguments[0]
        key = self.converter.expression(
            key_arg.idl_type, "key", repr("The provided key"), key_arg.ext_attrs
        )
        value = None
        if operation.special == "setter":
            value_arg = operation.arguments[1]
            value = self.converter.expression(
                value_arg.idl_type, "value", repr("The provided value"), value_arg.ext_attrs
            )
        impl = "utils.impl_for_wrapper(self)"
        if operation.name is not None:
            call_args = key if value is None else f"{key}, {value}"
            access = f"{impl}.{python_name(operation.name)}({call_args})"
        elif operation.special == "setter":
            access = f"{impl}[{key}] = {value}"
        elif operation.special == "deleter":
            access = f"del {impl}[{key}]"
        else:
            access = f"{impl}[{key}]"
        view.specials.append(
            SpecialView(
                method=method,
                access=access,
                returns_wrapper=self.converter.returns_wrapper(operation.return_type),
            )
        )

    def _set_stringifier(self, view: InterfaceView, expression: str) -> None:
        if view.stringifier is not None:
            raise GenerationError(f"interface '{self.entry.name}' declares more than one stringifier")
        view.stringifier = expression

    def _method_view(
        self,
        *,
        name: str,
        arguments: Sequence[Argument],
        action: str,
        static: bool,
        returns_wrapper: bool,
    ) -> MethodView:
        minimum = 0
        for argument in arguments:
            if argument.optional or argument.variadic:
                break
            minimum += 1
        noun = "argument" if minimum == 1 else "arguments"
        message = f"Failed to {action}: {minimum} {noun} required, but only {{}} present."
        return MethodView(
            name=name,
            static=static,
            minimum=minimum,
            arity_message=repr(message),
            body=self._argument_lines(arguments, action),
            returns_wrapper=returns_wrapper,
        )

    def _argument_lines(self, arguments: Sequence[Argument], action: str) -> List[str]:
        lines: List[str] = []
        for index, argument in enumerate(arguments):
            context = repr(f"Failed to {action}: parameter {index + 1}")
            if argument.variadic:
                expression = self.converter.expression(argument.idl_type, "value", context, argument.ext_attrs)
                lines.append(f"call_args.extend({expression} for value in args[{index}:])")
                break
            expression = self.converter.expression(
                argument.idl_type, f"args[{index}]", context, argument.ext_attrs
            )
            if argument.optional:
                lines.append(f"if len(args) > {index}:")
                lines.append(f"    call_args.append({expression})")
                lines.append("else:")
                lines.append(f"    call_args.append({literal(argument.default)})")
            else:
                lines.append(f"call_args.append({expression})")
        return lines

    def _expose(self) -> Dict[str, str]:
        if has_ext_attr(self.definition.ext_attrs, "NoInterfaceObject"):
            return {}
        exposed = find_ext_attr(self.definition.ext_attrs, "Exposed")
        if exposed is None or exposed.rhs is None:
            globals_: Tuple[str, ...] = self.options.default_exposure
        elif isinstance(exposed.rhs, tuple):
            globals_ = exposed.rhs
        else:
            globals_ = (exposed.rhs,)
        return {name: self.entry.name for name in globals_}


class DictionaryRenderer:
    def __init__(self, entry: TypeEntry, registry: TypeRegistry) -> None:
        self.entry = entry
        self.registry = registry
        self.definition: DictionaryDef = entry.definition  # type: ignore[assignment]
        self.converter = TypeConverter(registry, entry.name)

    def view(self) -> DictionaryView:
        parent = None
        if self.definition.inheritance is not None:
            if self.registry.kind_of(self.definition.inheritance) is not TypeKind.DICTIONARY:
                raise GenerationError(
                    f"dictionary '{self.entry.name}' inherits from unknown dictionary "
                    f"'{self.definition.inheritance}'"
                )
            parent = self.converter.reference(self.definition.inheritance)
        members = []
        # Dictionary members are processed in lexicographic order.
        for member in sorted(self.definition.members, key=lambda item: item.name):
            context = "context + " + repr(f" has member '{member.name}' that")
            members.append(
                DictionaryMemberView(
                    key=repr(member.name),
                    conversion=self.converter.expression(member.idl_type, "value", context, member.ext_attrs),
                    required_message=(
                        repr(f" is missing required member '{member.name}'.") if member.required else None
                    ),
                    default=literal(member.default) if member.default is not None else None,
                )
            )
        return DictionaryView(
            name=self.entry.name,
            parent=parent,
            members=members,
            imports=sorted(self.converter.imports.values()),
        )


def render(entry: TypeEntry, registry: TypeRegistry, options: Optional[RenderOptions] = None) -> str:
    """Render the module body of ``entry``; typedefs have no module."""
    options = options or RenderOptions()
    env = _environment()
    if entry.kind is TypeKind.INTERFACE:
        view = InterfaceRenderer(entry, registry, options).view()
        text = env.get_template("interface.py.j2").render(view=view)
    elif entry.kind is TypeKind.DICTIONARY:
        view = DictionaryRenderer(entry, registry).view()
        text = env.get_template("dictionary.py.j2").render(view=view)
    else:
        raise GenerationError(f"{entry.kind.value} '{entry.name}' is not emitted")
    logger.debug("Rendered %s '%s'", entry.kind.value, entry.name)
    return text


__all__ = ["RenderOptions", "TEMPLATES_DIR", "python_name", "render"]
