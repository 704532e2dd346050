"""Source discovery and document loading."""

from .collector import IDL_SUFFIX, SourceCollector
from .descriptor import ModuleDescriptor, locate_descriptor, read_descriptor
from .loader import DocumentLoader

__all__ = [
    "DocumentLoader",
    "IDL_SUFFIX",
    "ModuleDescriptor",
    "SourceCollector",
    "locate_descriptor",
    "read_descriptor",
]
