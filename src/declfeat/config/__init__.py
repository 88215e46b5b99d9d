"""Config module exports."""

from declfeat.config.loader import CONFIG_FILENAME, load_config
from declfeat.config.models import (
    DeclFeatConfig,
    ExpansionConfig,
    LoggingConfig,
    LogOutputConfig,
    ResolutionConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "load_config",
    "DeclFeatConfig",
    "ExpansionConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ResolutionConfig",
]
