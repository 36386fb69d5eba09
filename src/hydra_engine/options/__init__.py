"""Option snapshots and callback accessors."""

from .session import SCOPES, OptionSession, ReadOnlyOptions, ScopedOptions

__all__ = ["OptionSession", "ReadOnlyOptions", "ScopedOptions", "SCOPES"]
