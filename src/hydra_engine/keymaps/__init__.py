"""Key sequence handling, binding plans and the reference binding store."""

from .models import (
    Binding,
    BindingKind,
    BindingOptions,
    KeySequence,
    binding_id,
    plug_keys,
    split_keys,
)
from .plan import KeymapPlan, PlanHandlers
from .registry import KeymapConflictError, KeymapRegistry, RegistryStats
from .resolver import KeymapResolver, ResolutionResult

__all__ = [
    "Binding",
    "BindingKind",
    "BindingOptions",
    "KeySequence",
    "binding_id",
    "plug_keys",
    "split_keys",
    "KeymapPlan",
    "PlanHandlers",
    "KeymapRegistry",
    "KeymapConflictError",
    "RegistryStats",
    "KeymapResolver",
    "ResolutionResult",
]
