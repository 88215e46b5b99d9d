"""Core module exports."""

from declfeat.core.diagnostics import Diagnostic, Severity
from declfeat.core.errors import (
    ConfigError,
    DeclarationError,
    DeclFeatError,
    ErrorCode,
    FeatureEntryError,
    InterfaceFileError,
    InternalError,
    PatternError,
    TableStateError,
)
from declfeat.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "DeclarationError",
    "DeclFeatError",
    "ErrorCode",
    "FeatureEntryError",
    "InterfaceFileError",
    "InternalError",
    "PatternError",
    "TableStateError",
    # Diagnostics
    "Diagnostic",
    "Severity",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
]
