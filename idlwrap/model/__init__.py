"""Registry model and the two-pass builder that populates it."""

from .builder import ModelBuilder, ParsedDocument
from .registry import RegistryBuilder, RegistryState, TypeEntry, TypeKind, TypeRegistry

__all__ = [
    "ModelBuilder",
    "ParsedDocument",
    "RegistryBuilder",
    "RegistryState",
    "TypeEntry",
    "TypeKind",
    "TypeRegistry",
]
