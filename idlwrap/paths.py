"""Path normalisation helpers used when emitting generated modules.

Generated modules refer to each other and to hand-written implementation
modules through Python relative imports.  Everything here works on posix
style strings so the emitted text does not depend on the host platform.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path

PY_SUFFIX = ".py"


def relative_posix(from_dir: Path, target: Path) -> str:
    """Return ``target`` relative to ``from_dir`` as a ``./``-prefixed posix path."""
    relative = os.path.relpath(Path(target), Path(from_dir)).replace("\\", "/")
    if not relative.startswith("."):
        relative = "./" + relative
    return relative


def import_spec(relative: str) -> str:
    """Convert a relative posix path into a dotted relative module name.

    ``./impl/Foo_impl`` becomes ``.impl.Foo_impl`` and ``../utils.py`` becomes
    ``..utils``.
    """
    if relative.endswith(PY_SUFFIX):
        relative = relative[: -len(PY_SUFFIX)]
    parts = [part for part in relative.split("/") if part]
    level = 1
    names: list[str] = []
    for part in parts:
        if part == ".":
            continue
        if part == "..":
            if names:
                raise ValueError(f"Cannot express {relative!r} as a relative import")
            level += 1
            continue
        names.append(part)
    if not names:
        raise ValueError(f"Relative path {relative!r} does not name a module")
    return "." * level + ".".join(names)


def import_statement(spec: str, alias: str) -> str:
    """Render an import binding the module named by ``spec`` to ``alias``.

    ``spec`` may be relative (``..impl.Foo_impl``) or absolute (``pkg.gen.Foo``).
    """
    stripped = spec.lstrip(".")
    dots = spec[: len(spec) - len(stripped)]
    package, _, module = stripped.rpartition(".")
    source = dots + package
    if not source:
        if module == alias:
            return f"import {module}"
        return f"import {module} as {alias}"
    if module == alias:
        return f"from {source} import {module}"
    return f"from {source} import {module} as {alias}"


def gen_module_path(gen_path: str, name: str) -> str:
    """Return the posix path hint of a type emitted under ``gen_path``."""
    return posixpath.join(gen_path, f"{name}{PY_SUFFIX}")


def module_name_for_hint(hint: str) -> str:
    """Turn an output path hint such as ``pkg/gen/Foo.py`` into ``pkg.gen.Foo``."""
    normalised = posixpath.normpath(hint.replace("\\", "/"))
    if normalised.endswith(PY_SUFFIX):
        normalised = normalised[: -len(PY_SUFFIX)]
    return ".".join(part for part in normalised.split("/") if part and part != ".")


__all__ = [
    "PY_SUFFIX",
    "gen_module_path",
    "import_spec",
    "import_statement",
    "module_name_for_hint",
    "relative_posix",
]
