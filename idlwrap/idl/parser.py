"""Parse IDL text into definition records."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from ..errors import IdlSyntaxError
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
    InterfaceMember,
    Iterable,
    Literal,
    NamespaceDef,
    Operation,
    Stringifier,
    TypedefDef,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    start="start",
    propagate_positions=True,
    maybe_placeholders=False,
)

_RETURN_KEYWORDS = {"VOID", "UNDEFINED"}


def parse_idl(text: str, path: Path | None = None) -> List[Definition]:
    """Parse ``text`` and return its top-level definitions in source order."""
    try:
        tree = _PARSER.parse(text)
    except UnexpectedInput as exc:
        line = getattr(exc, "line", None)
        column = getattr(exc, "column", None)
        line = line if isinstance(line, int) and line > 0 else None
        column = column if isinstance(column, int) and column > 0 else None
        raise IdlSyntaxError(_describe(exc), path=path, line=line, column=column) from exc
    return [_build_definition(child) for child in tree.children if isinstance(child, Tree)]


def _describe(exc: UnexpectedInput) -> str:
    if isinstance(exc, UnexpectedEOF):
        return "Unexpected end of input"
    if isinstance(exc, UnexpectedToken):
        expected = ", ".join(sorted(exc.expected)) if exc.expected else "nothing"
        return f"Unexpected token {exc.token.value!r} (expected one of: {expected})"
    if isinstance(exc, UnexpectedCharacters):
        return f"Unexpected character {exc.char!r}"
    return str(exc).splitlines()[0]


def _name(tree: Tree) -> str:
    return str(tree.data)


def _line(tree: Tree) -> int:
    return 0 if tree.meta.empty else tree.meta.line


def _tokens(tree: Tree, kind: str) -> List[Token]:
    return [child for child in tree.children if isinstance(child, Token) and child.type == kind]


def _has_token(tree: Tree, kind: str) -> bool:
    return any(isinstance(child, Token) and child.type == kind for child in tree.children)


def _subtrees(tree: Tree, name: str) -> List[Tree]:
    return [child for child in tree.children if isinstance(child, Tree) and _name(child) == name]


def _subtree(tree: Tree, name: str) -> Optional[Tree]:
    found = _subtrees(tree, name)
    return found[0] if found else None


def _required_subtree(tree: Tree, name: str) -> Tree:
    found = _subtree(tree, name)
    if found is None:
        raise ValueError(f"{_name(tree)!r} node has no {name!r} child")
    return found


def _identifier(token: Token) -> str:
    # A leading underscore escapes identifiers that collide with keywords.
    value = str(token.value)
    return value[1:] if value.startswith("_") else value


def _names(tree: Tree) -> List[str]:
    return [_identifier(token) for token in _tokens(tree, "NAME")]


def _build_definition(tree: Tree) -> Definition:
    ext_attrs = _build_ext_attrs(tree.children[0])
    body = tree.children[1]
    builder = _DEFINITION_BUILDERS[_name(body)]
    return builder(body, ext_attrs, _line(tree))


def _inheritance(tree: Tree) -> Optional[str]:
    node = _subtree(tree, "inheritance")
    return _names(node)[0] if node is not None else None


def _interface_members(tree: Tree) -> Tuple[InterfaceMember, ...]:
    return tuple(_build_interface_member(member) for member in _subtrees(tree, "interface_member"))


def _build_interface(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> InterfaceDef:
    return InterfaceDef(
        name=_names(tree)[0],
        members=_interface_members(tree),
        ext_attrs=ext_attrs,
        inheritance=_inheritance(tree),
        line=line,
    )


def _build_partial_interface(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> InterfaceDef:
    return InterfaceDef(
        name=_names(tree)[0],
        members=_interface_members(tree),
        ext_attrs=ext_attrs,
        partial=True,
        line=line,
    )


def _build_callback_interface(
    tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int
) -> CallbackInterfaceDef:
    return CallbackInterfaceDef(
        name=_names(tree)[0],
        members=_interface_members(tree),
        ext_attrs=ext_attrs,
        inheritance=_inheritance(tree),
        line=line,
    )


def _build_namespace(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> NamespaceDef:
    return NamespaceDef(
        name=_names(tree)[0],
        members=_interface_members(tree),
        ext_attrs=ext_attrs,
        line=line,
    )


def _build_dictionary(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> DictionaryDef:
    return DictionaryDef(
        name=_names(tree)[0],
        members=tuple(_build_dictionary_member(m) for m in _subtrees(tree, "dictionary_member")),
        ext_attrs=ext_attrs,
        inheritance=_inheritance(tree),
        line=line,
    )


def _build_partial_dictionary(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> DictionaryDef:
    return DictionaryDef(
        name=_names(tree)[0],
        members=tuple(_build_dictionary_member(m) for m in _subtrees(tree, "dictionary_member")),
        ext_attrs=ext_attrs,
        partial=True,
        line=line,
    )


def _build_typedef(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> TypedefDef:
    inner_attrs = _build_ext_attrs(_subtree(tree, "ext_attrs"))
    type_node = _required_subtree(tree, "type")
    return TypedefDef(
        name=_names(tree)[0],
        idl_type=_build_type(type_node),
        ext_attrs=ext_attrs + inner_attrs,
        line=line,
    )


def _build_implements(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> ImplementsDef:
    target, source = _names(tree)
    return ImplementsDef(target=target, implements=source, ext_attrs=ext_attrs, line=line)


def _build_includes(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> IncludesDef:
    target, source = _names(tree)
    return IncludesDef(target=target, includes=source, ext_attrs=ext_attrs, line=line)


def _build_enum(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> EnumDef:
    values = tuple(_unquote(token) for token in _tokens(tree, "STRING"))
    return EnumDef(name=_names(tree)[0], values=values, ext_attrs=ext_attrs, line=line)


def _build_callback(tree: Tree, ext_attrs: Tuple[ExtAttr, ...], line: int) -> CallbackDef:
    arg_list = _subtree(tree, "arg_list")
    return CallbackDef(
        name=_names(tree)[0],
        return_type=_return_type(tree),
        arguments=_build_arguments(arg_list),
        ext_attrs=ext_attrs,
        line=line,
    )


_DEFINITION_BUILDERS: Dict[str, Callable[[Tree, Tuple[ExtAttr, ...], int], Definition]] = {
    "interface": _build_interface,
    "partial_interface": _build_partial_interface,
    "callback_interface": _build_callback_interface,
    "namespace": _build_namespace,
    "dictionary": _build_dictionary,
    "partial_dictionary": _build_partial_dictionary,
    "typedef": _build_typedef,
    "implements": _build_implements,
    "includes": _build_includes,
    "enum": _build_enum,
    "callback": _build_callback,
}


def _build_interface_member(tree: Tree) -> InterfaceMember:
    ext_attrs = _build_ext_attrs(tree.children[0])
    body = tree.children[1]
    kind = _name(body)
    if kind == "const":
        return _build_constant(body, ext_attrs)
    if kind == "attribute":
        return _build_attribute(body, ext_attrs)
    if kind == "operation":
        return _build_operation(body, ext_attrs)
    if kind == "field":
        type_node = _required_subtree(body, "type")
        return Attribute(name=_names(body)[0], idl_type=_build_type(type_node), ext_attrs=ext_attrs)
    if kind == "iterable":
        types = [_build_type(node) for node in _subtrees(body, "type")]
        if len(types) == 2:
            return Iterable(value_type=types[1], key_type=types[0], ext_attrs=ext_attrs)
        return Iterable(value_type=types[0], ext_attrs=ext_attrs)
    if kind == "stringifier":
        attribute = _subtree(body, "attribute")
        if attribute is not None:
            return _build_attribute(attribute, ext_attrs, stringifier=True)
        operation = _subtree(body, "operation")
        if operation is not None:
            return _build_operation(operation, ext_attrs, special="stringifier")
        return Stringifier(ext_attrs=ext_attrs)
    raise ValueError(f"unexpected interface member {kind!r}")


def _build_constant(tree: Tree, ext_attrs: Tuple[ExtAttr, ...]) -> Constant:
    type_node = _required_subtree(tree, "type")
    value_node = _required_subtree(tree, "const_value")
    return Constant(
        name=_names(tree)[0],
        idl_type=_build_type(type_node),
        value=_build_const_value(value_node),
        ext_attrs=ext_attrs,
    )


def _build_attribute(
    tree: Tree, ext_attrs: Tuple[ExtAttr, ...], *, stringifier: bool = False
) -> Attribute:
    type_node = _required_subtree(tree, "type")
    return Attribute(
        name=_names(tree)[0],
        idl_type=_build_type(type_node),
        readonly=_has_token(tree, "READONLY"),
        static=_has_token(tree, "STATIC"),
        inherit=_has_token(tree, "INHERIT"),
        stringifier=stringifier,
        ext_attrs=ext_attrs,
    )


def _build_operation(
    tree: Tree, ext_attrs: Tuple[ExtAttr, ...], *, special: Optional[str] = None
) -> Operation:
    special_node = _subtree(tree, "special")
    if special_node is not None:
        special = str(special_node.children[0].value)
    names = _names(tree)
    return Operation(
        name=names[0] if names else None,
        return_type=_return_type(tree),
        arguments=_build_arguments(_subtree(tree, "arg_list")),
        static=_has_token(tree, "STATIC"),
        special=special,
        ext_attrs=ext_attrs,
    )


def _return_type(tree: Tree) -> Optional[IdlType]:
    type_node = _subtree(tree, "type")
    if type_node is not None:
        return _build_type(type_node)
    return None


def _build_dictionary_member(tree: Tree) -> DictionaryMember:
    type_node = _required_subtree(tree, "type")
    return DictionaryMember(
        name=_names(tree)[0],
        idl_type=_build_type(type_node),
        required=_has_token(tree, "REQUIRED"),
        default=_build_default(tree),
        ext_attrs=_build_ext_attrs(tree.children[0]),
    )


def _build_arguments(tree: Optional[Tree]) -> Tuple[Argument, ...]:
    if tree is None:
        return ()
    return tuple(_build_argument(node) for node in _subtrees(tree, "argument"))


def _build_argument(tree: Tree) -> Argument:
    type_node = _required_subtree(tree, "type")
    return Argument(
        name=_names(tree)[0],
        idl_type=_build_type(type_node),
        optional=_has_token(tree, "OPTIONAL"),
        variadic=_has_token(tree, "ELLIPSIS"),
        default=_build_default(tree),
        ext_attrs=_build_ext_attrs(tree.children[0]),
    )


def _build_default(tree: Tree) -> Optional[Literal]:
    for child in tree.children:
        if not isinstance(child, Tree):
            continue
        kind = _name(child)
        if kind == "default":
            return _build_const_value(child.children[0])
        if kind == "default_empty_sequence":
            return Literal("sequence")
        if kind == "default_empty_dictionary":
            return Literal("dictionary")
    return None


def _build_const_value(tree: Tree) -> Literal:
    token = tree.children[0]
    if not isinstance(token, Token):
        raise ValueError(f"unexpected constant value node {_name(token)!r}")
    kind = token.type
    value = str(token.value)
    if kind == "TRUE":
        return Literal("boolean", True)
    if kind == "FALSE":
        return Literal("boolean", False)
    if kind == "NULL":
        return Literal("null")
    if kind == "STRING":
        return Literal("string", _unquote(token))
    if kind == "FLOAT_LIT":
        return Literal("float", float(value))
    if kind == "INTEGER_LIT":
        return Literal("integer", _parse_integer(value))
    if kind == "INFINITY":
        return Literal("infinity", float("inf"))
    if kind == "NEG_INFINITY":
        return Literal("-infinity", float("-inf"))
    if kind == "NAN":
        return Literal("nan", float("nan"))
    raise ValueError(f"unexpected constant token {kind!r}")


def _parse_integer(value: str) -> int:
    sign = -1 if value.startswith("-") else 1
    digits = value.lstrip("-")
    if digits[:2] in {"0x", "0X"}:
        return sign * int(digits[2:], 16)
    if len(digits) > 1 and digits.startswith("0"):
        return sign * int(digits[1:], 8)
    return sign * int(digits)


def _unquote(token: Token) -> str:
    return str(token.value)[1:-1]


def _build_type(tree: Tree) -> IdlType:
    nullable = _has_token(tree, "QMARK")
    head = tree.children[0]
    if isinstance(head, Token):
        return IdlType(str(head.value), nullable)
    kind = _name(head)
    if kind == "union_type":
        members = tuple(_build_type(node) for node in _subtrees(head, "type"))
        return IdlType("union", nullable, members)
    if kind == "generic_type":
        base = str(head.children[0].value)
        subtypes: List[IdlType] = []
        for child in head.children[1:]:
            if isinstance(child, Tree):
                subtypes.append(_build_type(child))
            elif child.type in _RETURN_KEYWORDS:
                subtypes.append(IdlType(str(child.value)))
        return IdlType(base, nullable, tuple(subtypes))
    return IdlType(" ".join(_simple_type_words(head)), nullable)


def _simple_type_words(tree: Tree) -> List[str]:
    words: List[str] = []
    for child in tree.children:
        if isinstance(child, Tree):
            words.extend(_simple_type_words(child))
        elif child.type == "NAME":
            words.append(_identifier(child))
        else:
            words.append(str(child.value))
    return words


def _build_ext_attrs(tree: Optional[Tree]) -> Tuple[ExtAttr, ...]:
    if tree is None:
        return ()
    return tuple(_build_ext_attr(child) for child in tree.children if isinstance(child, Tree))


def _build_ext_attr(tree: Tree) -> ExtAttr:
    kind = _name(tree)
    names = _names(tree)
    arg_list = _subtree(tree, "arg_list")
    arguments = _build_arguments(arg_list) if arg_list is not None else None
    if kind == "ext_attr_plain":
        return ExtAttr(name=names[0], arguments=arguments)
    if kind == "ext_attr_ident":
        return ExtAttr(name=names[0], rhs=names[1], arguments=arguments)
    if kind == "ext_attr_ident_list":
        return ExtAttr(name=names[0], rhs=tuple(names[1:]))
    if kind == "ext_attr_string":
        return ExtAttr(name=names[0], rhs=_unquote(_tokens(tree, "STRING")[0]))
    raise ValueError(f"unexpected extended attribute {kind!r}")
