"""Feature table: ordered directive log with best-match lookup.

Two phases, never interleaved:

- accumulation: ``FeatureTableBuilder.define`` is called once per directive
  in source order. Order decides precedence ties and what a clear removes.
- query: ``FeatureTableBuilder.finalize`` returns an immutable
  ``FeatureTable`` that may be shared across threads.

Usage::

    builder = FeatureTableBuilder()
    builder.define(FeatureEntry.from_raw("except", parse_pattern("Object::foo"), body="..."))
    table = builder.finalize()
    entry = table.best_match("except", variant)
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import replace
from types import MappingProxyType

from declfeat.core.diagnostics import Diagnostic
from declfeat.core.errors import TableStateError
from declfeat.core.logging import get_logger
from declfeat.features import matcher
from declfeat.features.entries import FeatureEntry
from declfeat.model.declarations import Declaration
from declfeat.model.patterns import FeaturePattern

log = get_logger("features.table")

_GLOBAL = None


class FeatureTableBuilder:
    """Mutable table used during the accumulation phase."""

    def __init__(self) -> None:
        self._live: dict[tuple[str, FeaturePattern], FeatureEntry] = {}
        # Replaced global entries still reach the declarations registered before
        # their replacement.
        self._superseded: dict[tuple[str, FeaturePattern], list[FeatureEntry]] = {}
        self._next_index = 0
        self._diagnostics: list[Diagnostic] = []
        self._table: FeatureTable | None = None

    @property
    def is_frozen(self) -> bool:
        return self._table is not None

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return tuple(self._diagnostics)

    @property
    def next_sequence_index(self) -> int:
        """Index the next defined directive will receive."""
        return self._next_index

    def __len__(self) -> int:
        return len(self._live)

    def define(self, entry: FeatureEntry) -> Diagnostic | None:
        """Record one directive.

        A Cleared value removes the live entry with exactly the same feature
        name and pattern. When there is none the clear is a no-op and a
        Diagnostic is returned (and kept on the builder).
        """
        if self._table is not None:
            raise TableStateError.frozen()

        entry = replace(entry, sequence_index=self._next_index)
        self._next_index += 1
        key = entry.key

        if entry.is_clear:
            removed = self._live.pop(key, None)
            self._superseded.pop(key, None)
            if removed is None:
                diagnostic = Diagnostic.ambiguous_clear(
                    entry.feature_name, entry.pattern.render(), entry.sequence_index
                )
                self._diagnostics.append(diagnostic)
                log.warning(
                    "feature_clear_no_match",
                    feature=entry.feature_name,
                    pattern=entry.pattern.render(),
                    sequence_index=entry.sequence_index,
                )
                return diagnostic
            log.debug(
                "feature_cleared",
                feature=entry.feature_name,
                pattern=entry.pattern.render(),
                removed_index=removed.sequence_index,
            )
            return None

        previous = self._live.pop(key, None)
        # Re-insert so iteration order follows definition order.
        self._live[key] = entry
        if previous is not None:
            if entry.pattern.is_global:
                self._superseded.setdefault(key, []).append(previous)
            log.debug(
                "feature_replaced",
                feature=entry.feature_name,
                pattern=entry.pattern.render(),
                replaced_index=previous.sequence_index,
                sequence_index=entry.sequence_index,
            )
        else:
            log.debug(
                "feature_defined",
                feature=entry.feature_name,
                pattern=entry.pattern.render(),
                value=entry.value.token,
                sequence_index=entry.sequence_index,
            )
        return None

    def define_all(self, entries: Iterable[FeatureEntry]) -> list[Diagnostic]:
        diagnostics = []
        for entry in entries:
            if (diagnostic := self.define(entry)) is not None:
                diagnostics.append(diagnostic)
        return diagnostics

    def finalize(self) -> FeatureTable:
        """Freeze the table. Idempotent; further ``define`` calls raise."""
        if self._table is None:
            superseded = [e for es in self._superseded.values() for e in es]
            self._table = FeatureTable(self._live.values(), self._diagnostics, superseded)
            log.info(
                "feature_table_frozen",
                entries=len(self._table),
                features=len(self._table.feature_names()),
                diagnostics=len(self._diagnostics),
            )
        return self._table

    @property
    def table(self) -> FeatureTable:
        """The frozen table; only available after ``finalize``."""
        if self._table is None:
            raise TableStateError.not_frozen()
        return self._table


class FeatureTable:
    """Immutable, thread-safe view of the live entries."""

    def __init__(
        self,
        entries: Iterable[FeatureEntry],
        diagnostics: Iterable[Diagnostic] = (),
        superseded: Iterable[FeatureEntry] = (),
    ) -> None:
        ordered = sorted(entries, key=lambda e: e.sequence_index)
        # feature name -> leaf name (None for global patterns) -> entries
        index: dict[str, dict[str | None, list[FeatureEntry]]] = {}
        for entry in ordered:
            by_name = index.setdefault(entry.feature_name, {})
            by_name.setdefault(entry.pattern.name, []).append(entry)
        self._entries: tuple[FeatureEntry, ...] = tuple(ordered)
        self._index = MappingProxyType(
            {
                feature: MappingProxyType({name: tuple(es) for name, es in by_name.items()})
                for feature, by_name in index.items()
            }
        )
        self._diagnostics = tuple(diagnostics)
        history: dict[str, list[FeatureEntry]] = {}
        for entry in sorted(superseded, key=lambda e: e.sequence_index):
            history.setdefault(entry.feature_name, []).append(entry)
        self._superseded = MappingProxyType({f: tuple(es) for f, es in history.items()})

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FeatureEntry]:
        return iter(self._entries)

    @property
    def diagnostics(self) -> tuple[Diagnostic, ...]:
        return self._diagnostics

    def feature_names(self) -> tuple[str, ...]:
        """Feature names with at least one live entry, in first-definition order."""
        return tuple(self._index)

    def entries(self, feature_name: str | None = None) -> tuple[FeatureEntry, ...]:
        if feature_name is None:
            return self._entries
        by_name = self._index.get(feature_name)
        if by_name is None:
            return ()
        found = [e for es in by_name.values() for e in es]
        return tuple(sorted(found, key=lambda e: e.sequence_index))

    def _candidates(self, feature_name: str, variant: Declaration) -> Iterator[FeatureEntry]:
        by_name = self._index.get(feature_name)
        if by_name is None:
            return
        yield from by_name.get(variant.name, ())
        yield from by_name.get(_GLOBAL, ())
        yield from self._superseded.get(feature_name, ())

    def best_match(
        self, feature_name: str, variant: Declaration, *, inherit: bool = True
    ) -> FeatureEntry | None:
        """Highest-precedence entry for ``feature_name`` in force for ``variant``."""
        found = matcher.best(self._candidates(feature_name, variant), variant, inherit=inherit)
        return found.entry if found is not None else None

    def matches(
        self, feature_name: str, variant: Declaration, *, inherit: bool = True
    ) -> list[matcher.Match]:
        """Every matching entry, best first; for diagnostics and tooling."""
        return matcher.rank_matches(
            self._candidates(feature_name, variant), variant, inherit=inherit
        )
