"""Generate Python wrapper modules from WebIDL definitions."""

from .errors import IdlWrapError
from .transformer import Transformer

__all__ = ["IdlWrapError", "Transformer"]
