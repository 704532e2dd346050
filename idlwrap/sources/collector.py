"""Resolve declared IDL sources and module contributions into individual files."""

from __future__ import annotations

import asyncio
import os
import posixpath
import stat
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from ..logging import get_logger
from ..models import ModuleContribution, ResolvedFile, SourceDeclaration
from .descriptor import ModuleDescriptor, read_descriptor

IDL_SUFFIX = ".idl"

DescriptorReader = Callable[[Path], Optional[ModuleDescriptor]]


def _list_idl_files(directory: Path) -> List[Path]:
    with os.scandir(directory) as entries:
        names = [entry.name for entry in entries if entry.name.endswith(IDL_SUFFIX) and entry.is_file()]
    return [directory / name for name in sorted(names)]


class SourceCollector:
    """Expands sources and modules into a flat list of :class:`ResolvedFile`.

    Every declaration is resolved concurrently; the first failure aborts the
    whole collection.  Results keep declaration order: sources first, then
    modules.
    """

    def __init__(self, descriptor_reader: DescriptorReader = read_descriptor) -> None:
        self._read_descriptor = descriptor_reader
        self.logger = get_logger("sources")

    async def collect(
        self,
        sources: Sequence[SourceDeclaration],
        modules: Sequence[ModuleContribution] = (),
    ) -> List[ResolvedFile]:
        tasks = [self._expand_source(source) for source in sources]
        tasks.extend(self._expand_module(module) for module in modules)
        groups = await asyncio.gather(*tasks)
        files = [resolved for group in groups for resolved in group]
        self.logger.info(
            "Collected %d IDL files from %d sources and %d modules",
            len(files),
            len(sources),
            len(modules),
        )
        return files

    async def _expand_source(self, source: SourceDeclaration) -> List[ResolvedFile]:
        stat_result = await asyncio.to_thread(source.idl_path.stat)
        if not stat.S_ISDIR(stat_result.st_mode):
            return [ResolvedFile(idl_path=source.idl_path, impl_dir=source.impl_dir)]
        paths = await asyncio.to_thread(_list_idl_files, source.idl_path)
        self.logger.debug("Found %d IDL files in %s", len(paths), source.idl_path)
        return [ResolvedFile(idl_path=path, impl_dir=source.impl_dir) for path in paths]

    async def _expand_module(self, module: ModuleContribution) -> List[ResolvedFile]:
        descriptor = await asyncio.to_thread(self._read_descriptor, module.descriptor_path)
        if descriptor is None:
            self.logger.debug(
                "Module %s declares no IDL files in %s", module.module_name, module.descriptor_path
            )
            return []
        base = module.descriptor_path.parent
        gen_path = posixpath.join(module.module_name, descriptor.interface)
        return [
            ResolvedFile(idl_path=(base / relative).resolve(), gen_path=gen_path)
            for relative in descriptor.idl
        ]
