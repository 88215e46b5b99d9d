"""Default-argument expansion and template substitution."""

from declfeat.expand.defaults import (
    DefaultArgExpander,
    assign_overload_indices,
    expand_defaults,
)
from declfeat.expand.substitution import (
    PLACEHOLDERS,
    FactSheet,
    default_action,
    placeholders_in,
    substitute,
    wrapper_name,
)

__all__ = [
    "PLACEHOLDERS",
    "DefaultArgExpander",
    "FactSheet",
    "assign_overload_indices",
    "default_action",
    "expand_defaults",
    "placeholders_in",
    "substitute",
    "wrapper_name",
]
