"""Read resolved IDL files into memory."""

from __future__ import annotations

import asyncio
from typing import List, Sequence

from ..logging import get_logger
from ..models import LoadedDocument, ResolvedFile


class DocumentLoader:
    """Reads every file concurrently and pairs its text with the file's metadata."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding
        self.logger = get_logger("sources")

    async def load(self, files: Sequence[ResolvedFile]) -> List[LoadedDocument]:
        texts = await asyncio.gather(
            *(asyncio.to_thread(f.idl_path.read_text, encoding=self.encoding) for f in files)
        )
        self.logger.debug("Loaded %d IDL documents", len(texts))
        return [
            LoadedDocument(
                text=text,
                idl_path=resolved.idl_path,
                impl_dir=resolved.impl_dir,
                gen_path=resolved.gen_path,
            )
            for resolved, text in zip(files, texts, strict=True)
        ]
