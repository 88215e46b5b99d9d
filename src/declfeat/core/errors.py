"""declfeat error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Pattern / declaration model
- 4xxx: Feature table lifecycle
- 5xxx: Interface file loading
- 9xxx: Internal

Only structural precondition violations are raised. A clear directive that
matches nothing is reported as a Diagnostic (see core.diagnostics), and a
declaration with no matching feature is the normal case, not an error.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Pattern / declaration (3xxx)
    MALFORMED_SIGNATURE = 3001
    MALFORMED_PATTERN = 3002
    NON_TRAILING_DEFAULT = 3003
    DEFAULT_OUT_OF_RANGE = 3004
    EMPTY_FEATURE_NAME = 3005
    INVALID_FEATURE_VALUE = 3006

    # Table lifecycle (4xxx)
    TABLE_FROZEN = 4001
    TABLE_NOT_FROZEN = 4002

    # Interface file (5xxx)
    INTERFACE_PARSE_ERROR = 5001
    INTERFACE_INVALID_ENTRY = 5002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class DeclFeatError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MALFORMED_SIGNATURE')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(DeclFeatError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class PatternError(DeclFeatError):
    """A feature pattern that violates its structural preconditions.

    Signatures are validated upstream by the header parser, so reaching one
    of these means invalid data was handed to the engine.
    """

    @classmethod
    def malformed_signature(cls, signature: str, reason: str) -> "PatternError":
        return cls(
            code=ErrorCode.MALFORMED_SIGNATURE,
            message=f"Malformed signature '{signature}': {reason}",
            details={"signature": signature, "reason": reason},
        )

    @classmethod
    def malformed_pattern(cls, pattern: str, reason: str) -> "PatternError":
        return cls(
            code=ErrorCode.MALFORMED_PATTERN,
            message=f"Malformed pattern '{pattern}': {reason}",
            details={"pattern": pattern, "reason": reason},
        )


class DeclarationError(DeclFeatError):
    """A declaration that violates its structural preconditions."""

    @classmethod
    def non_trailing_default(cls, name: str, position: int) -> "DeclarationError":
        return cls(
            code=ErrorCode.NON_TRAILING_DEFAULT,
            message=f"Default value at position {position} of '{name}' is not trailing",
            details={"name": name, "position": position},
        )

    @classmethod
    def default_out_of_range(cls, name: str, position: int, arity: int) -> "DeclarationError":
        return cls(
            code=ErrorCode.DEFAULT_OUT_OF_RANGE,
            message=f"Default value position {position} of '{name}' outside arity {arity}",
            details={"name": name, "position": position, "arity": arity},
        )


class FeatureEntryError(DeclFeatError):
    """A feature directive that violates its structural preconditions."""

    @classmethod
    def empty_feature_name(cls) -> "FeatureEntryError":
        return cls(
            code=ErrorCode.EMPTY_FEATURE_NAME,
            message="Feature name must be non-empty",
        )

    @classmethod
    def invalid_value(cls, token: str) -> "FeatureEntryError":
        return cls(
            code=ErrorCode.INVALID_FEATURE_VALUE,
            message=f"Enabled token must be non-empty and not '0', got {token!r}",
            details={"token": token},
        )


class TableStateError(DeclFeatError):
    """Feature table used outside its accumulation/query phase."""

    @classmethod
    def frozen(cls) -> "TableStateError":
        return cls(
            code=ErrorCode.TABLE_FROZEN,
            message="Feature table is frozen; no further directives may be defined",
        )

    @classmethod
    def not_frozen(cls) -> "TableStateError":
        return cls(
            code=ErrorCode.TABLE_NOT_FROZEN,
            message="Feature table must be finalized before it is queried",
        )


class InterfaceFileError(DeclFeatError):
    """Errors loading an interface description file."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "InterfaceFileError":
        return cls(
            code=ErrorCode.INTERFACE_PARSE_ERROR,
            message=f"Failed to parse interface file {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_entry(cls, index: int, reason: str) -> "InterfaceFileError":
        return cls(
            code=ErrorCode.INTERFACE_INVALID_ENTRY,
            message=f"Invalid interface entry #{index}: {reason}",
            details={"index": index, "reason": reason},
        )


class InternalError(DeclFeatError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
