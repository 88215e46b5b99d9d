"""Resolution facade: what backends call per declaration variant.

The resolver only reads a frozen FeatureTable, so one instance can serve many
backend workers at once.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from declfeat.config.models import DeclFeatConfig
from declfeat.core.errors import TableStateError
from declfeat.expand.substitution import FactSheet, substitute
from declfeat.features.entries import Enabled
from declfeat.features.table import FeatureTable, FeatureTableBuilder
from declfeat.model.declarations import Declaration


@dataclass(frozen=True, slots=True)
class ResolvedFeature:
    """Outcome of one (variant, feature name) query."""

    active: bool
    body: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": self.active,
            "value": self.value,
            "body": self.body,
            "attributes": dict(self.attributes),
        }


class Resolver:
    """Resolves features for declaration variants against a frozen table."""

    def __init__(self, table: FeatureTable, config: DeclFeatConfig | None = None) -> None:
        if isinstance(table, FeatureTableBuilder):
            # Querying during accumulation would observe a half-built table.
            raise TableStateError.not_frozen()
        self._table = table
        self._config = config or DeclFeatConfig()

    @property
    def table(self) -> FeatureTable:
        return self._table

    @property
    def _inherit(self) -> bool:
        return self._config.resolution.inherit_features

    def resolve(
        self, variant: Declaration, feature_name: str, *, action: str | None = None
    ) -> ResolvedFeature:
        """Resolve one feature for one variant.

        Disabled entries are reported inactive but keep their raw body and
        attributes for introspection; only enabled bodies are expanded.
        """
        entry = self._table.best_match(feature_name, variant, inherit=self._inherit)
        if entry is None:
            return ResolvedFeature(active=False)

        attributes = dict(entry.attributes)
        if not isinstance(entry.value, Enabled):
            return ResolvedFeature(
                active=False, body=entry.body, attributes=attributes, value=entry.value.token
            )

        body = entry.body
        if body is not None:
            facts = FactSheet.for_variant(variant, action=action, config=self._config.expansion)
            body = substitute(body, facts)
        return ResolvedFeature(
            active=True, body=body, attributes=attributes, value=entry.value.token
        )

    def resolve_all(
        self, variant: Declaration, *, action: str | None = None
    ) -> dict[str, ResolvedFeature]:
        """Every feature with a matching entry, active or not."""
        resolved = {}
        for feature_name in self._table.feature_names():
            result = self.resolve(variant, feature_name, action=action)
            if result.active or result.value is not None:
                resolved[feature_name] = result
        return resolved

    def is_active(self, variant: Declaration, feature_name: str) -> bool:
        entry = self._table.best_match(feature_name, variant, inherit=self._inherit)
        return entry is not None and entry.is_active

    def active_features(self, variant: Declaration) -> frozenset[str]:
        """Names of all features active on ``variant``."""
        return frozenset(
            name for name in self._table.feature_names() if self.is_active(variant, name)
        )

    def scan(self, variants: Iterable[Declaration], feature_name: str) -> list[Declaration]:
        """Variants on which ``feature_name`` is active, in input order."""
        return [v for v in variants if self.is_active(v, feature_name)]
