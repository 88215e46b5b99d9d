"""Accumulation-phase builder for one interface.

The header parser hands over declarations and feature directives interleaved
in source order. ``InterfaceBuilder`` keeps that order, applies the alias
table to directive names, and on ``finalize`` freezes the feature table,
expands default arguments and returns an immutable ``Interface`` ready for
concurrent queries.

Usage::

    builder = InterfaceBuilder()
    builder.directive("exception", "Object::allocate", body="try { $action } ...")
    builder.declare(Declaration("allocate", DeclKind.METHOD, scope=obj))
    interface = builder.finalize()
    interface.resolve(interface.variants[0], "except")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Union

from declfeat.config.models import DeclFeatConfig
from declfeat.core.diagnostics import Diagnostic
from declfeat.core.errors import TableStateError
from declfeat.core.logging import get_logger
from declfeat.expand.defaults import DefaultArgExpander
from declfeat.features.aliases import expand_alias
from declfeat.features.entries import FeatureEntry
from declfeat.features.table import FeatureTable, FeatureTableBuilder
from declfeat.model.declarations import Declaration
from declfeat.model.patterns import FeaturePattern, parse_pattern
from declfeat.resolve import ResolvedFeature, Resolver

log = get_logger("session")


@dataclass(frozen=True, slots=True)
class Directive:
    """A feature directive as written, before alias expansion."""

    name: str
    pattern: FeaturePattern | str | None = None
    value: str | None = None
    body: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)

    def to_entry(self) -> FeatureEntry:
        feature_name, value = expand_alias(self.name, self.value)
        pattern = self.pattern
        if not isinstance(pattern, FeaturePattern):
            pattern = parse_pattern(pattern)
        return FeatureEntry.from_raw(
            feature_name, pattern, value=value, body=self.body, attributes=self.attributes
        )


StreamItem = Union[Declaration, Directive, FeatureEntry]


class InterfaceBuilder:
    """Holds the in-progress feature table and declaration list."""

    def __init__(self, config: DeclFeatConfig | None = None) -> None:
        self._config = config or DeclFeatConfig()
        self._table = FeatureTableBuilder()
        self._declarations: list[Declaration] = []
        self._interface: Interface | None = None

    @property
    def config(self) -> DeclFeatConfig:
        return self._config

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self._table.diagnostics

    def _check_open(self) -> None:
        if self._interface is not None:
            raise TableStateError.frozen()

    def declare(self, decl: Declaration) -> Declaration:
        """Register a declaration at the current point of the directive stream."""
        self._check_open()
        registered = replace(decl, position=self._table.next_sequence_index)
        self._declarations.append(registered)
        return registered

    def define(self, entry: FeatureEntry) -> Diagnostic | None:
        self._check_open()
        return self._table.define(entry)

    def directive(
        self,
        name: str,
        pattern: FeaturePattern | str | None = None,
        value: str | None = None,
        body: str | None = None,
        attributes: Mapping[str, str] | None = None,
    ) -> Diagnostic | None:
        """Record a directive by name; shorthand names go through the alias table."""
        return self.add(Directive(name, pattern, value, body, attributes or {}))

    def add(self, item: StreamItem) -> Diagnostic | None:
        if isinstance(item, Declaration):
            self.declare(item)
            return None
        if isinstance(item, Directive):
            return self.define(item.to_entry())
        return self.define(item)

    def consume(self, stream: Iterable[StreamItem]) -> list[Diagnostic]:
        """Feed an interleaved stream in order; returns the diagnostics it produced."""
        diagnostics = []
        for item in stream:
            if (diagnostic := self.add(item)) is not None:
                diagnostics.append(diagnostic)
        return diagnostics

    def finalize(self) -> Interface:
        """Freeze the table and materialize variants. Idempotent."""
        if self._interface is None:
            table = self._table.finalize()
            expander = DefaultArgExpander(self._config.expansion)
            variants = expander.expand_all(self._declarations)
            self._interface = Interface(
                declarations=tuple(self._declarations),
                variants=tuple(variants),
                table=table,
                config=self._config,
            )
            log.info(
                "interface_finalized",
                declarations=len(self._declarations),
                variants=len(variants),
                entries=len(table),
            )
        return self._interface


class Interface:
    """Frozen result of an accumulation phase."""

    def __init__(
        self,
        *,
        declarations: tuple[Declaration, ...],
        variants: tuple[Declaration, ...],
        table: FeatureTable,
        config: DeclFeatConfig,
    ) -> None:
        self.declarations = declarations
        self.variants = variants
        self.table = table
        self.config = config
        self.resolver = Resolver(table, config)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self.table.diagnostics

    def resolve(
        self, variant: Declaration, feature_name: str, *, action: str | None = None
    ) -> ResolvedFeature:
        return self.resolver.resolve(variant, feature_name, action=action)

    def active_features(self, variant: Declaration) -> frozenset[str]:
        return self.resolver.active_features(variant)

    def variants_of(self, decl: Declaration) -> tuple[Declaration, ...]:
        """Emitted variants derived from ``decl`` (itself, when not expanded)."""
        return tuple(v for v in self.variants if v.origin == decl.origin)

    def find(self, qualified_name: str) -> tuple[Declaration, ...]:
        """Variants whose qualified name equals ``qualified_name``."""
        return tuple(v for v in self.variants if v.qualified_name == qualified_name)
