"""Exception types raised by idlwrap builds."""

from __future__ import annotations

from pathlib import Path


class IdlWrapError(RuntimeError):
    """Base class for every build failure raised by idlwrap."""


class IdlSyntaxError(IdlWrapError):
    """Raised when an IDL document cannot be parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.path = path
        self.line = line
        self.column = column
        location = str(path) if path is not None else "<string>"
        if line is not None:
            location += f":{line}"
            if column is not None:
                location += f":{column}"
        super().__init__(f"{location}: {message}")


class ModelError(IdlWrapError):
    """Raised when parsed definitions cannot be resolved into a registry."""


class UnknownDefinitionError(ModelError):
    """A definition kind the binding back end cannot convert."""


class MissingDefinitionError(ModelError):
    """A partial definition or mixin refers to a type that was never declared."""


class DuplicateDefinitionError(ModelError):
    """Two full definitions share one name."""


class DescriptorError(IdlWrapError):
    """A module descriptor exists but its idlwrap section is malformed."""


class RegistryStateError(IdlWrapError):
    """The registry was used outside the state that permits the operation."""


class GenerationError(IdlWrapError):
    """Rendering or formatting a registry entry failed."""


__all__ = [
    "DescriptorError",
    "DuplicateDefinitionError",
    "GenerationError",
    "IdlSyntaxError",
    "IdlWrapError",
    "MissingDefinitionError",
    "ModelError",
    "RegistryStateError",
    "UnknownDefinitionError",
]
