"""Tests for the feature table lifecycle, clearing and lookup."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

from declfeat.core.diagnostics import AMBIGUOUS_CLEAR_TARGET
from declfeat.core.errors import ErrorCode, TableStateError
from declfeat.features.entries import Disabled, FeatureEntry
from declfeat.features.table import FeatureTable, FeatureTableBuilder
from declfeat.model.declarations import Declaration, DeclKind, Param, Scope
from declfeat.model.patterns import parse_pattern


def _entry(
    pattern: str, value: str | None = None, body: str | None = None, name: str = "except"
) -> FeatureEntry:
    return FeatureEntry.from_raw(name, parse_pattern(pattern), value=value, body=body)


@pytest.fixture
def builder() -> FeatureTableBuilder:
    return FeatureTableBuilder()


class TestAccumulation:
    def test_sequence_indices_assigned_in_order(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("a"))
        builder.define(_entry("b"))

        table = builder.finalize()

        assert [e.sequence_index for e in table] == [0, 1]
        assert builder.next_sequence_index == 2

    def test_redefinition_replaces_entry(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("f", body="old"))
        builder.define(_entry("g"))
        builder.define(_entry("f", body="new"))

        table = builder.finalize()

        assert len(table) == 2
        entries = table.entries("except")
        assert [e.pattern.name for e in entries] == ["g", "f"]
        assert entries[-1].body == "new"
        assert entries[-1].sequence_index == 2

    def test_clear_removes_exact_pattern(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("Foo::bar", body="x"))

        diagnostic = builder.define(_entry("Foo::bar", value=""))

        assert diagnostic is None
        assert len(builder) == 0

    def test_clear_does_not_touch_other_features(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("f", name="new"))
        builder.define(_entry("f", name="except"))

        builder.define(_entry("f", value="", name="except"))

        table = builder.finalize()
        assert table.feature_names() == ("new",)

    def test_clear_without_exact_match_is_noop_with_diagnostic(
        self, builder: FeatureTableBuilder
    ) -> None:
        builder.define(_entry("", body="global"))
        builder.define(_entry("Foo::bar"))

        diagnostic = builder.define(_entry("bar", value=""))

        assert diagnostic is not None
        assert diagnostic.code == AMBIGUOUS_CLEAR_TARGET
        assert diagnostic.pattern == "bar"
        assert diagnostic.sequence_index == 2
        assert len(builder) == 2
        assert builder.diagnostics == (diagnostic,)

    def test_clear_never_falls_back_to_global(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("", body="global"))
        builder.define(_entry("foo", value=""))

        table = builder.finalize()

        assert table.best_match("except", Declaration("foo")) is not None
        assert len(table.diagnostics) == 1

    def test_cleared_then_redefined(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("f", body="one"))
        builder.define(_entry("f", value=""))
        builder.define(_entry("f", body="two"))

        found = builder.finalize().best_match("except", Declaration("f"))

        assert found is not None
        assert found.body == "two"

    def test_replaced_global_entry_kept_for_earlier_declarations(
        self, builder: FeatureTableBuilder
    ) -> None:
        builder.define(_entry("", body="first"))
        builder.define(_entry("", body="second"))

        table = builder.finalize()
        between = replace(Declaration("f"), position=1)
        after = replace(Declaration("g"), position=2)

        assert len(table) == 1
        assert table.entries("except")[0].body == "second"
        bodies = [table.best_match("except", d) for d in (between, after, Declaration("h"))]
        assert [e.body for e in bodies if e is not None] == ["first", "second", "second"]

    def test_clear_drops_replaced_global_entries(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("", body="first"))
        builder.define(_entry("", body="second"))
        builder.define(_entry("", value=""))

        table = builder.finalize()

        assert table.best_match("except", replace(Declaration("f"), position=1)) is None
        assert table.matches("except", Declaration("f")) == []

    def test_define_all_collects_diagnostics(self, builder: FeatureTableBuilder) -> None:
        diagnostics = builder.define_all(
            [_entry("a"), _entry("b", value=""), _entry("c", value="")]
        )
        assert [d.pattern for d in diagnostics] == ["b", "c"]


class TestLifecycle:
    def test_define_after_finalize_raises(self, builder: FeatureTableBuilder) -> None:
        builder.finalize()
        with pytest.raises(TableStateError) as exc_info:
            builder.define(_entry("f"))
        assert exc_info.value.code == ErrorCode.TABLE_FROZEN

    def test_table_before_finalize_raises(self, builder: FeatureTableBuilder) -> None:
        with pytest.raises(TableStateError) as exc_info:
            _ = builder.table
        assert exc_info.value.code == ErrorCode.TABLE_NOT_FROZEN

    def test_finalize_is_idempotent(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("f"))
        first = builder.finalize()
        assert builder.finalize() is first
        assert builder.table is first
        assert builder.is_frozen


class TestQuery:
    def test_best_match_per_feature(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("f", body="except body"))
        builder.define(_entry("f", name="new"))
        table = builder.finalize()

        found = table.best_match("new", Declaration("f"))

        assert found is not None
        assert found.feature_name == "new"
        assert table.best_match("del", Declaration("f")) is None

    def test_disabled_rule_wins_over_less_specific(self, builder: FeatureTableBuilder) -> None:
        obj = Scope("Object")
        builder.define(_entry("", body="global"))
        builder.define(_entry("Object::allocate", value="0"))
        table = builder.finalize()
        decl = Declaration("allocate", DeclKind.METHOD, scope=obj, position=5)

        found = table.best_match("except", decl)

        assert found is not None
        assert found.value == Disabled()

    def test_matches_lists_all_candidates_best_first(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry(""))
        builder.define(_entry("f(int)"))
        builder.define(_entry("f"))
        table = builder.finalize()
        decl = Declaration("f", params=(Param("int"),), position=10)

        found = table.matches("except", decl)

        assert [m.entry.pattern.render() for m in found] == ["f(int)", "f", "<global>"]

    def test_entries_filter(self, builder: FeatureTableBuilder) -> None:
        builder.define(_entry("a", name="new"))
        builder.define(_entry("b"))
        table = builder.finalize()

        assert [e.feature_name for e in table.entries()] == ["new", "except"]
        assert table.entries("missing") == ()

    def test_empty_table(self) -> None:
        table = FeatureTable([])
        assert len(table) == 0
        assert table.best_match("except", Declaration("f")) is None

    def test_concurrent_queries(self, builder: FeatureTableBuilder) -> None:
        """A frozen table answers many threads with the same result."""
        scope = Scope("Object")
        builder.define(_entry(""))
        builder.define(_entry("Object::allocate", value="0"))
        table = builder.finalize()
        decls = [
            Declaration(name, DeclKind.METHOD, scope=scope, position=10)
            for name in ("allocate", "release", "size") * 50
        ]

        def active(decl: Declaration) -> bool:
            entry = table.best_match("except", decl)
            return entry is not None and entry.is_active

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(active, decls))

        assert results == [decl.name != "allocate" for decl in decls]
