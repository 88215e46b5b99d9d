"""Declaration and pattern model exports."""

from declfeat.model.declarations import (
    GLOBAL_SCOPE,
    Declaration,
    DeclKind,
    Param,
    Scope,
    normalize_type,
)
from declfeat.model.patterns import (
    FeaturePattern,
    PatternRank,
    ScopeQualifier,
    parse_param,
    parse_pattern,
    parse_signature,
)

__all__ = [
    "GLOBAL_SCOPE",
    "Declaration",
    "DeclKind",
    "FeaturePattern",
    "Param",
    "PatternRank",
    "Scope",
    "ScopeQualifier",
    "normalize_type",
    "parse_param",
    "parse_pattern",
    "parse_signature",
]
