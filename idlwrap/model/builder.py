"""Two-pass resolution of parsed IDL documents into a type registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from ..errors import MissingDefinitionError, UnknownDefinitionError
from ..idl import parse_idl
from ..idl.ast import Definition, DictionaryDef, ImplementsDef, InterfaceDef, TypedefDef
from ..logging import get_logger
from ..models import LoadedDocument
from .registry import RegistryBuilder, TypeRegistry

Parser = Callable[..., List[Definition]]


@dataclass(frozen=True)
class ParsedDocument:
    """Definitions of one document with the binding metadata of its source."""

    definitions: Sequence[Definition]
    impl_dir: Optional[str] = None
    gen_path: Optional[str] = None


class ModelBuilder:
    """Builds a :class:`TypeRegistry` from loaded IDL documents.

    Pass one registers every full interface, dictionary and typedef.  Pass two
    merges partial definitions and records ``implements`` mixins, so partials
    may precede their full definition in processing order.  With
    ``suppress_errors`` the unknown-kind, missing-partial-target and
    missing-mixin-target failures are skipped instead of raised.
    """

    def __init__(self, *, suppress_errors: bool = False, parser: Parser = parse_idl) -> None:
        self.suppress_errors = suppress_errors
        self._parser = parser
        self.logger = get_logger("model")

    def build(self, documents: Iterable[LoadedDocument]) -> TypeRegistry:
        """Parse ``documents`` and resolve them into a frozen registry."""
        parsed = self.parse(documents)
        return self.resolve(parsed)

    def parse(self, documents: Iterable[LoadedDocument]) -> List[ParsedDocument]:
        parsed: List[ParsedDocument] = []
        for document in documents:
            definitions = self._parser(document.text, document.idl_path)
            self.logger.debug("Parsed %d definitions from %s", len(definitions), document.idl_path)
            parsed.append(
                ParsedDocument(
                    definitions=definitions,
                    impl_dir=document.impl_dir,
                    gen_path=document.gen_path,
                )
            )
        return parsed

    def resolve(self, documents: Sequence[ParsedDocument]) -> TypeRegistry:
        builder = RegistryBuilder()
        self._register_full_definitions(builder, documents)
        builder.finish_registration()
        self._merge_partials_and_mixins(builder, documents)
        builder.finish_merging()
        registry = builder.freeze()
        self.logger.info(
            "Resolved %d interfaces, %d dictionaries and %d typedefs",
            len(registry.interfaces),
            len(registry.dictionaries),
            len(registry.typedefs),
        )
        return registry

    def _register_full_definitions(
        self, builder: RegistryBuilder, documents: Sequence[ParsedDocument]
    ) -> None:
        for document in documents:
            for definition in document.definitions:
                if isinstance(definition, InterfaceDef):
                    if definition.partial:
                        continue
                    builder.register_interface(
                        definition, impl_dir=document.impl_dir, gen_path=document.gen_path
                    )
                elif isinstance(definition, DictionaryDef):
                    if definition.partial:
                        continue
                    builder.register_dictionary(definition, gen_path=document.gen_path)
                elif isinstance(definition, TypedefDef):
                    builder.register_typedef(definition)
                elif isinstance(definition, ImplementsDef):
                    continue
                else:
                    self._fail(
                        UnknownDefinitionError(
                            f"Can't convert type '{definition.type}' ({definition.name})"
                        )
                    )

    def _merge_partials_and_mixins(
        self, builder: RegistryBuilder, documents: Sequence[ParsedDocument]
    ) -> None:
        for document in documents:
            for definition in document.definitions:
                if isinstance(definition, InterfaceDef) and definition.partial:
                    if not builder.has_interface(definition.name):
                        self._fail(
                            MissingDefinitionError(
                                f"partial interface '{definition.name}' has no full definition"
                            )
                        )
                        continue
                    builder.merge_partial_interface(definition)
                elif isinstance(definition, DictionaryDef) and definition.partial:
                    if not builder.has_dictionary(definition.name):
                        self._fail(
                            MissingDefinitionError(
                                f"partial dictionary '{definition.name}' has no full definition"
                            )
                        )
                        continue
                    builder.merge_partial_dictionary(definition)
                elif isinstance(definition, ImplementsDef):
                    if not builder.has_interface(definition.target):
                        self._fail(
                            MissingDefinitionError(
                                f"'{definition.target} implements {definition.implements}' "
                                f"targets an unknown interface"
                            )
                        )
                        continue
                    builder.add_mixin(definition.target, definition.implements)

    def _fail(self, error: Exception) -> None:
        if not self.suppress_errors:
            raise error
        self.logger.debug("Skipping definition: %s", error)
