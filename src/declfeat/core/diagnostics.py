"""Non-fatal diagnostics reported while accumulating directives."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """Diagnostic severity level."""

    WARNING = "warning"
    INFO = "info"


AMBIGUOUS_CLEAR_TARGET = "ambiguous-clear-target"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single report about a directive that was accepted but had no effect."""

    code: str
    message: str
    feature_name: str
    pattern: str
    sequence_index: int
    severity: Severity = Severity.WARNING
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "severity": self.severity.value,
            "message": self.message,
            "feature": self.feature_name,
            "pattern": self.pattern,
            "sequence_index": self.sequence_index,
            "details": self.details,
        }

    @classmethod
    def ambiguous_clear(cls, feature_name: str, pattern: str, sequence_index: int) -> Diagnostic:
        return cls(
            code=AMBIGUOUS_CLEAR_TARGET,
            message=(
                f"Clearing feature '{feature_name}' on '{pattern}' has no effect: "
                "no live entry with exactly this pattern"
            ),
            feature_name=feature_name,
            pattern=pattern,
            sequence_index=sequence_index,
        )
