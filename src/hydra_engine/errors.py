"""Exception taxonomy for hydra construction and runtime misuse."""

from __future__ import annotations


class HydraError(Exception):
    """Base class for every error raised by hydra_engine."""


class ValidationError(HydraError, ValueError):
    """Raised when construction input is malformed."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AccessorMisuse(HydraError, RuntimeError):
    """Raised when a callback mutates host options through a forbidden accessor."""


class MissingCollaborator(HydraError):
    """Raised when an optional host collaborator is required but absent."""

    def __init__(self, collaborator: str, message: str) -> None:
        super().__init__(message)
        self.collaborator = collaborator


class ConfigConflict(UserWarning):
    """Warns that explicit ``color`` overrode contradictory raw flags."""


__all__ = [
    "HydraError",
    "ValidationError",
    "AccessorMisuse",
    "MissingCollaborator",
    "ConfigConflict",
]
