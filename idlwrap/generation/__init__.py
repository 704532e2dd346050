"""Binding back end: render, format and write Python wrapper modules."""

from .emitter import Emitter
from .formatter import format_source
from .render import RenderOptions, render
from .types import TypeConverter

__all__ = ["Emitter", "RenderOptions", "TypeConverter", "format_source", "render"]
