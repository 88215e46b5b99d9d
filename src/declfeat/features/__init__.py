"""Feature directives, matching and the feature table."""

from declfeat.features.aliases import ALIASES, Alias, expand_alias
from declfeat.features.entries import (
    Cleared,
    Disabled,
    Enabled,
    FeatureEntry,
    FeatureValue,
    classify_value,
)
from declfeat.features.matcher import Match
from declfeat.features.table import FeatureTable, FeatureTableBuilder

__all__ = [
    "ALIASES",
    "Alias",
    "Cleared",
    "Disabled",
    "Enabled",
    "FeatureEntry",
    "FeatureTable",
    "FeatureTableBuilder",
    "FeatureValue",
    "Match",
    "classify_value",
    "expand_alias",
]
