"""declfeat - declaration feature attachment and resolution for binding generators."""

from declfeat.config import DeclFeatConfig, load_config
from declfeat.core import DeclFeatError, Diagnostic
from declfeat.features import FeatureEntry, FeatureTable, FeatureTableBuilder
from declfeat.model import Declaration, DeclKind, FeaturePattern, Param, Scope, parse_pattern
from declfeat.resolve import ResolvedFeature, Resolver
from declfeat.session import Directive, Interface, InterfaceBuilder

__version__ = "0.1.0"

__all__ = [
    "DeclFeatConfig",
    "DeclFeatError",
    "Declaration",
    "DeclKind",
    "Diagnostic",
    "Directive",
    "FeatureEntry",
    "FeaturePattern",
    "FeatureTable",
    "FeatureTableBuilder",
    "Interface",
    "InterfaceBuilder",
    "Param",
    "ResolvedFeature",
    "Resolver",
    "Scope",
    "load_config",
    "parse_pattern",
]
