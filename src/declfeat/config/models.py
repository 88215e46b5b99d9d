"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (DECLFEAT__SECTION__KEY)
3. Project YAML (.declfeat.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    DECLFEAT__<SECTION>__<KEY>=<VALUE>

Examples:
    DECLFEAT__LOGGING__LEVEL=DEBUG
    DECLFEAT__EXPANSION__COMPACT_DEFAULT_ARGS=true
    DECLFEAT__RESOLUTION__INHERIT_FEATURES=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        DECLFEAT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every directive and expansion.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ExpansionConfig(BaseModel):
    """Default-argument expansion and wrapper naming.

    Env vars:
        DECLFEAT__EXPANSION__COMPACT_DEFAULT_ARGS: Emit one declaration per defaulted signature
        DECLFEAT__EXPANSION__OVERLOAD_SUFFIX_TEMPLATE: Suffix for members of an overload set
        DECLFEAT__EXPANSION__WRAPPER_PREFIX: Prefix of generated wrapper names
    """

    compact_default_args: bool = Field(
        default=False,
        description="Emit only the full signature for declarations with default "
        "arguments instead of one variant per arity.",
    )
    overload_suffix_template: str = Field(
        default="__{index}",
        description="Format string for the overload suffix; receives 'index'.",
    )
    wrapper_prefix: str = Field(
        default="_wrap_",
        description="Prefix used when building wrapper names.",
    )

    @field_validator("overload_suffix_template")
    @classmethod
    def validate_suffix_template(cls, v: str) -> str:
        if "{index}" not in v:
            raise ValueError(f"Overload suffix template must contain '{{index}}': {v}")
        return v


class ResolutionConfig(BaseModel):
    """Feature resolution behavior.

    Env vars:
        DECLFEAT__RESOLUTION__INHERIT_FEATURES: Let base-scope features reach inherited members
    """

    inherit_features: bool = Field(
        default=True,
        description="Scoped features attached to a base scope also apply to members "
        "a derived scope inherits without redeclaring.",
    )


class DeclFeatConfig(BaseModel):
    """Root configuration for declfeat.

    All settings can be configured via:
    1. Environment variables: DECLFEAT__SECTION__KEY
    2. The project YAML file (.declfeat.yaml)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    expansion: ExpansionConfig = Field(default_factory=ExpansionConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)
