"""Configuration loading for idlwrap (.idlwrap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import IdlWrapError

CONFIG_FILENAME = ".idlwrap.yml"
DEFAULT_IMPL_SUFFIX = "_impl"
DEFAULT_LINE_WIDTH = 120


class ConfigError(IdlWrapError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class SourceConfig:
    """One ``sources`` entry: an IDL file or directory and its impl directory."""

    idl: Path
    impl: Optional[str] = None


@dataclass
class ModuleConfig:
    """One ``modules`` entry: an external module contributing IDL files."""

    name: str
    descriptor: Optional[Path] = None


@dataclass
class IdlWrapConfig:
    """Represents the settings defined in .idlwrap.yml."""

    root: Path
    output_dir: Optional[Path] = None
    util_path: Optional[Path] = None
    impl_suffix: str = DEFAULT_IMPL_SUFFIX
    suppress_errors: bool = False
    line_width: int = DEFAULT_LINE_WIDTH
    sources: List[SourceConfig] = field(default_factory=list)
    modules: List[ModuleConfig] = field(default_factory=list)


def load_config(config_path: Path) -> IdlWrapConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return IdlWrapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    output_dir_str = _as_str(data.get("output_dir"))
    util_path_str = _as_str(data.get("util_path"))

    sources: List[SourceConfig] = []
    for index, item in enumerate(_as_list(data.get("sources"))):
        if isinstance(item, str):
            item = {"idl": item}
        entry = _as_dict(item)
        idl = _as_str(entry.get("idl"))
        if not idl:
            raise ConfigError(f"sources[{index}] is missing the 'idl' path")
        sources.append(SourceConfig(idl=root / idl, impl=_as_str(entry.get("impl"))))

    modules: List[ModuleConfig] = []
    for index, item in enumerate(_as_list(data.get("modules"))):
        if isinstance(item, str):
            item = {"name": item}
        entry = _as_dict(item)
        name = _as_str(entry.get("name"))
        if not name:
            raise ConfigError(f"modules[{index}] is missing the module 'name'")
        descriptor = _as_str(entry.get("descriptor"))
        modules.append(
            ModuleConfig(name=name, descriptor=root / descriptor if descriptor else None)
        )

    line_width = _as_int(data.get("line_width"))
    if line_width is not None and line_width <= 0:
        raise ConfigError("line_width must be a positive integer")

    return IdlWrapConfig(
        root=root,
        output_dir=root / output_dir_str if output_dir_str else None,
        util_path=root / util_path_str if util_path_str else None,
        impl_suffix=_as_str(data.get("impl_suffix")) or DEFAULT_IMPL_SUFFIX,
        suppress_errors=_as_bool(data.get("suppress_errors")) or False,
        line_width=line_width or DEFAULT_LINE_WIDTH,
        sources=sources,
        modules=modules,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    if isinstance(value, Sequence):
        return list(value)
    return []


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None
