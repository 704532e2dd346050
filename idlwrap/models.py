"""Core data models shared across idlwrap build phases."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class SourceDeclaration:
    """An IDL file or directory registered directly by the caller."""

    idl_path: Path
    impl_dir: Optional[str] = None


@dataclass(frozen=True)
class ModuleContribution:
    """An external module whose descriptor lists the IDL files it ships."""

    module_name: str
    descriptor_path: Path


@dataclass(frozen=True)
class ResolvedFile:
    """A single IDL file together with its binding metadata."""

    idl_path: Path
    impl_dir: Optional[str] = None
    gen_path: Optional[str] = None


@dataclass(frozen=True)
class LoadedDocument:
    """IDL text paired with the provenance of the file it was read from."""

    text: str
    idl_path: Path
    impl_dir: Optional[str] = None
    gen_path: Optional[str] = None
