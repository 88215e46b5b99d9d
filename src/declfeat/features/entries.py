"""Feature entries: one directive occurrence attached to a pattern."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Union

from declfeat.core.errors import FeatureEntryError
from declfeat.model.patterns import FeaturePattern

DEFAULT_FLAG_VALUE = "1"


@dataclass(frozen=True, slots=True)
class Enabled:
    """Truthy value: any non-empty token other than "0"."""

    token: str = DEFAULT_FLAG_VALUE

    def __post_init__(self) -> None:
        if self.token in ("", "0"):
            raise FeatureEntryError.invalid_value(self.token)

    @property
    def is_active(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Disabled:
    """Explicit inactive rule (value "0"); still competes for precedence."""

    @property
    def token(self) -> str:
        return "0"

    @property
    def is_active(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class Cleared:
    """Empty value: removes an exactly matching earlier rule."""

    @property
    def token(self) -> str:
        return ""

    @property
    def is_active(self) -> bool:
        return False


FeatureValue = Union[Enabled, Disabled, Cleared]


def classify_value(raw: str | None) -> FeatureValue:
    """Map a directive's raw value to Enabled / Disabled / Cleared.

    A directive without any value is a flag and defaults to "1".
    """
    if raw is None:
        return Enabled()
    if raw == "":
        return Cleared()
    if raw == "0":
        return Disabled()
    return Enabled(raw)


@dataclass(frozen=True, slots=True)
class FeatureEntry:
    """A feature directive: name, target pattern, value, optional body and attributes.

    ``sequence_index`` is assigned by the table when the entry is defined;
    entries built by hand keep -1 until then.
    """

    feature_name: str
    pattern: FeaturePattern
    value: FeatureValue = field(default_factory=Enabled)
    body: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)
    sequence_index: int = -1

    def __post_init__(self) -> None:
        if not self.feature_name:
            raise FeatureEntryError.empty_feature_name()
        object.__setattr__(self, "attributes", dict(self.attributes))

    @classmethod
    def from_raw(
        cls,
        feature_name: str,
        pattern: FeaturePattern,
        value: str | None = None,
        body: str | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> FeatureEntry:
        return cls(
            feature_name=feature_name,
            pattern=pattern,
            value=classify_value(value),
            body=body,
            attributes=attributes or {},
        )

    @property
    def key(self) -> tuple[str, FeaturePattern]:
        return (self.feature_name, self.pattern)

    @property
    def is_clear(self) -> bool:
        return isinstance(self.value, Cleared)

    @property
    def is_active(self) -> bool:
        return self.value.is_active

    def describe(self) -> str:
        return f"{self.feature_name}={self.value.token!r} on {self.pattern}"
