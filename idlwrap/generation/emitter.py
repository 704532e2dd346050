"""Write generated wrapper modules for every entry of a resolved registry."""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path
from typing import List, Optional, Tuple

from ..errors import GenerationError
from ..logging import get_logger
from ..model.registry import TypeEntry, TypeKind, TypeRegistry
from ..paths import PY_SUFFIX, import_spec, import_statement, relative_posix
from .formatter import DEFAULT_LINE_WIDTH, format_source
from .render import RenderOptions, render

UTILS_SOURCE = Path(__file__).resolve().parent.parent / "runtime" / "utils.py"
CONVERSIONS_IMPORT = "from idlwrap.runtime import conversions"
DEFAULT_UTIL_NAME = "utils.py"


class Emitter:
    """Renders, formats and writes one module per emittable registry entry.

    The shared utility module is copied to ``util_path`` (by default
    ``<output_dir>/utils.py``) before any entry is written.  Imported entries
    belong to another build and are skipped.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        util_path: Optional[Path] = None,
        impl_suffix: str = "_impl",
        line_width: int = DEFAULT_LINE_WIDTH,
        options: Optional[RenderOptions] = None,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.util_path = Path(util_path) if util_path is not None else self.output_dir / DEFAULT_UTIL_NAME
        self.impl_suffix = impl_suffix
        self.line_width = line_width
        self.options = options or RenderOptions()
        self.logger = get_logger("emit")

    async def emit(self, registry: TypeRegistry) -> List[Path]:
        """Write every emittable entry and return the written module paths."""
        await asyncio.to_thread(self._copy_utils)
        modules = [self.module_for(entry, registry) for entry in registry.emittable()]
        await asyncio.gather(*(asyncio.to_thread(self._write, path, text) for path, text in modules))
        self.logger.info("Wrote %d modules to %s", len(modules), self.output_dir)
        return [path for path, _ in modules]

    def module_for(self, entry: TypeEntry, registry: TypeRegistry) -> Tuple[Path, str]:
        """Return the output path and formatted source of ``entry``."""
        body = render(entry, registry, self.options)
        source = "\n".join(self.preamble(entry)) + "\n" + body
        text = format_source(source, line_width=self.line_width, name=entry.name)
        return self.output_dir / f"{entry.name}{PY_SUFFIX}", text

    def preamble(self, entry: TypeEntry) -> List[str]:
        lines = [
            f'"""Wrapper module for the {entry.name} {entry.kind.value}, generated by idlwrap."""',
            "",
            CONVERSIONS_IMPORT,
            self._relative_import(self.util_path, "utils"),
        ]
        if entry.kind is TypeKind.INTERFACE:
            lines.append(self._relative_import(self.impl_path(entry), "Impl"))
        return lines

    def impl_path(self, entry: TypeEntry) -> Path:
        """Return the implementation module path of interface ``entry``, without suffix."""
        impl_dir = self.output_dir / entry.impl_dir if entry.impl_dir else self.output_dir
        return impl_dir / f"{entry.name}{self.impl_suffix}"

    def _relative_import(self, target: Path, alias: str) -> str:
        relative = relative_posix(self.output_dir, target)
        try:
            return import_statement(import_spec(relative), alias)
        except ValueError as exc:
            raise GenerationError(f"Cannot import {target} from {self.output_dir}: {exc}") from exc

    def _copy_utils(self) -> None:
        self.util_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(UTILS_SOURCE, self.util_path)
        self.logger.debug("Copied utility module to %s", self.util_path)

    def _write(self, path: Path, text: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        self.logger.debug("Wrote %s", path)


__all__ = ["CONVERSIONS_IMPORT", "Emitter", "UTILS_SOURCE"]
