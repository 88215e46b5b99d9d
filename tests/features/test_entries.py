"""Tests for feature entries and value classification."""

import pytest

from declfeat.core.errors import ErrorCode, FeatureEntryError
from declfeat.features.entries import (
    Cleared,
    Disabled,
    Enabled,
    FeatureEntry,
    classify_value,
)
from declfeat.model.patterns import parse_pattern


class TestClassifyValue:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (None, Enabled("1")),
            ("1", Enabled("1")),
            ("yes", Enabled("yes")),
            ("0", Disabled()),
            ("", Cleared()),
        ],
    )
    def test_classify(self, raw: str | None, expected: object) -> None:
        assert classify_value(raw) == expected

    def test_tokens(self) -> None:
        assert Enabled().token == "1"
        assert Disabled().token == "0"
        assert Cleared().token == ""

    def test_only_enabled_is_active(self) -> None:
        assert Enabled().is_active
        assert not Disabled().is_active
        assert not Cleared().is_active

    @pytest.mark.parametrize("token", ["", "0"])
    def test_enabled_rejects_inactive_tokens(self, token: str) -> None:
        with pytest.raises(FeatureEntryError) as exc_info:
            Enabled(token)
        assert exc_info.value.code == ErrorCode.INVALID_FEATURE_VALUE
        assert exc_info.value.details == {"token": token}


class TestFeatureEntry:
    def test_from_raw_defaults_to_flag(self) -> None:
        entry = FeatureEntry.from_raw("new", parse_pattern("create"))

        assert entry.value == Enabled("1")
        assert entry.is_active
        assert not entry.is_clear
        assert entry.sequence_index == -1
        assert entry.attributes == {}

    def test_key_is_name_and_pattern(self) -> None:
        a = FeatureEntry.from_raw("except", parse_pattern("A::f"), body="x")
        b = FeatureEntry.from_raw("except", parse_pattern("A::f"), value="0")
        assert a.key == b.key

    def test_attributes_copied(self) -> None:
        attrs = {"throws": "std::bad_alloc"}
        entry = FeatureEntry.from_raw("except", parse_pattern(""), attributes=attrs)
        attrs["throws"] = "changed"
        assert entry.attributes == {"throws": "std::bad_alloc"}

    def test_clear_entry(self) -> None:
        entry = FeatureEntry.from_raw("except", parse_pattern("f"), value="")
        assert entry.is_clear
        assert not entry.is_active

    def test_empty_feature_name_rejected(self) -> None:
        with pytest.raises(FeatureEntryError) as exc_info:
            FeatureEntry.from_raw("", parse_pattern("f"))
        assert exc_info.value.code == ErrorCode.EMPTY_FEATURE_NAME

    def test_describe(self) -> None:
        entry = FeatureEntry.from_raw("except", parse_pattern("A::f(int)"), value="0")
        assert entry.describe() == "except='0' on A::f(int)"
