"""Public entry point: collect IDL sources, resolve them and emit wrapper modules."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import List, Optional, Union

from .config import DEFAULT_IMPL_SUFFIX, DEFAULT_LINE_WIDTH, IdlWrapConfig
from .generation import Emitter
from .logging import get_logger
from .model import ModelBuilder, TypeRegistry
from .models import ModuleContribution, SourceDeclaration
from .sources import DocumentLoader, SourceCollector, locate_descriptor

PathLike = Union[str, "os.PathLike[str]"]


class Transformer:
    """Collects declared sources and modules and turns them into Python wrappers.

    Sources are files or directories of ``.idl`` files, each optionally bound to
    the directory holding the hand-written implementation modules (relative to
    the output directory).  Modules are importable packages whose descriptor
    lists IDL files generated by another build; their types can be referenced
    but are not emitted again.
    """

    def __init__(
        self,
        *,
        impl_suffix: str = DEFAULT_IMPL_SUFFIX,
        suppress_errors: bool = False,
        util_path: Optional[PathLike] = None,
        line_width: int = DEFAULT_LINE_WIDTH,
        collector: Optional[SourceCollector] = None,
        loader: Optional[DocumentLoader] = None,
    ) -> None:
        self.impl_suffix = impl_suffix
        self.suppress_errors = suppress_errors
        self.util_path = Path(util_path) if util_path is not None else None
        self.line_width = line_width
        self.sources: List[SourceDeclaration] = []
        self.modules: List[ModuleContribution] = []
        self._collector = collector or SourceCollector()
        self._loader = loader or DocumentLoader()
        self.logger = get_logger("transformer")

    @classmethod
    def from_config(cls, config: IdlWrapConfig) -> "Transformer":
        transformer = cls(
            impl_suffix=config.impl_suffix,
            suppress_errors=config.suppress_errors,
            util_path=config.util_path,
            line_width=config.line_width,
        )
        for source in config.sources:
            transformer.add_source(source.idl, source.impl)
        for module in config.modules:
            transformer.add_module(module.name, module.descriptor)
        return transformer

    def add_source(self, idl: PathLike, impl: Optional[PathLike] = None) -> "Transformer":
        """Register an IDL file or directory, optionally with its implementation directory."""
        if not isinstance(idl, (str, os.PathLike)):
            raise TypeError("idl path has to be a string or a path")
        if impl is not None and not isinstance(impl, (str, os.PathLike)):
            raise TypeError("impl path has to be a string or a path")
        impl_dir = os.fspath(impl) if impl is not None else None
        self.sources.append(SourceDeclaration(idl_path=Path(idl), impl_dir=impl_dir))
        return self

    def add_module(self, name: str, descriptor: Optional[PathLike] = None) -> "Transformer":
        """Register an external module whose descriptor lists the IDL files it ships."""
        if not isinstance(name, str):
            raise TypeError("module name has to be a string")
        if descriptor is not None and not isinstance(descriptor, (str, os.PathLike)):
            raise TypeError("descriptor path has to be a string or a path")
        descriptor_path = Path(descriptor) if descriptor is not None else locate_descriptor(name)
        self.modules.append(ModuleContribution(module_name=name, descriptor_path=descriptor_path))
        return self

    async def build_registry(self) -> TypeRegistry:
        """Collect, load and resolve every registered source into a registry."""
        files = await self._collector.collect(self.sources, self.modules)
        documents = await self._loader.load(files)
        builder = ModelBuilder(suppress_errors=self.suppress_errors)
        return builder.build(documents)

    async def generate_async(self, output_dir: PathLike) -> List[Path]:
        """Build the registry and write the wrapper modules into ``output_dir``."""
        output_path = Path(output_dir)
        registry = await self.build_registry()
        emitter = Emitter(
            output_path,
            util_path=self.util_path,
            impl_suffix=self.impl_suffix,
            line_width=self.line_width,
        )
        written = await emitter.emit(registry)
        self.logger.info("Generated %d wrapper modules", len(written))
        return written

    def generate(self, output_dir: PathLike) -> List[Path]:
        """Synchronous form of :meth:`generate_async`."""
        return asyncio.run(self.generate_async(output_dir))


__all__ = ["Transformer"]
