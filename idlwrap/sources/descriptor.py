"""Module descriptors: the ``[tool.idlwrap]`` table of a contributing module."""

from __future__ import annotations

import importlib.util
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from ..errors import DescriptorError

DESCRIPTOR_FILENAME = "pyproject.toml"
DESCRIPTOR_TOOL = "idlwrap"


@dataclass(frozen=True)
class ModuleDescriptor:
    """Output subpath and IDL files declared by a contributing module."""

    interface: str
    idl: Tuple[str, ...]


def read_descriptor(path: Path) -> Optional[ModuleDescriptor]:
    """Read ``path`` and return its idlwrap section, or ``None`` when it has none."""
    text = path.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise DescriptorError(f"Failed to parse module descriptor {path}: {exc}") from exc

    tool = data.get("tool")
    section = tool.get(DESCRIPTOR_TOOL) if isinstance(tool, dict) else None
    if not isinstance(section, dict):
        return None

    interface = section.get("interface")
    if not isinstance(interface, str):
        raise DescriptorError(f"{path}: [tool.{DESCRIPTOR_TOOL}] needs an 'interface' string")
    idl = section.get("idl")
    if not isinstance(idl, list) or not all(isinstance(item, str) for item in idl):
        raise DescriptorError(f"{path}: [tool.{DESCRIPTOR_TOOL}] needs an 'idl' list of paths")
    return ModuleDescriptor(interface=interface, idl=tuple(idl))


def locate_descriptor(module_name: str) -> Path:
    """Return the descriptor path of an importable module.

    The package directory is searched first, then its parent (a source
    checkout); the package directory candidate is returned when neither exists.
    """
    spec = importlib.util.find_spec(module_name)
    if spec is None:
        raise ModuleNotFoundError(f"No module named {module_name!r}", name=module_name)
    if spec.submodule_search_locations:
        package_dir = Path(list(spec.submodule_search_locations)[0])
    elif spec.origin:
        package_dir = Path(spec.origin).parent
    else:
        raise ModuleNotFoundError(f"Module {module_name!r} has no location on disk", name=module_name)

    candidates = [package_dir / DESCRIPTOR_FILENAME, package_dir.parent / DESCRIPTOR_FILENAME]
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return candidates[0]


__all__ = ["DESCRIPTOR_FILENAME", "ModuleDescriptor", "locate_descriptor", "read_descriptor"]
