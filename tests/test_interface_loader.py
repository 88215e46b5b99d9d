"""Tests for interface description files."""

from __future__ import annotations

from pathlib import Path

import pytest

from declfeat.core.errors import ErrorCode, InterfaceFileError
from declfeat.loader import build_interface, load_interface, parse_interface
from declfeat.model.declarations import Declaration, DeclKind
from declfeat.session import Directive

INTERFACE_YAML = """\
scopes:
  - name: Base
  - name: Derived
    bases: [Base]
    symbol: PyDerived
items:
  - feature: except
    pattern: "Base::m"
    body: "try { $action } catch (...) { }"
  - declare: "Base::m"
    kind: method
    returns: void
  - declare: "Derived::m"
    kind: method
    inherited: true
  - directive: newobject
    pattern: create
  - declare: create
    returns: "Object *"
    params: ["int size=0"]
  - feature: except
    pattern: "Derived::m"
    value: 0
"""


class TestParseInterface:
    def test_stream_order_preserved(self) -> None:
        stream = parse_interface({"items": [{"declare": "f"}, {"directive": "newobject"}]})
        assert isinstance(stream[0], Declaration)
        assert isinstance(stream[1], Directive)

    def test_scopes_and_members(self) -> None:
        stream = parse_interface(
            {
                "scopes": [{"name": "Base"}, {"name": "Derived", "bases": ["Base"]}],
                "items": [
                    {"declare": "Base::m", "kind": "method"},
                    {"declare": "Derived::m", "kind": "method", "inherited": True},
                ],
            }
        )
        base_m, derived_m = stream

        assert isinstance(derived_m, Declaration)
        assert derived_m.scope.bases[0].path == ("Base",)
        assert derived_m.scope.inheritance_distance(("Base",), "m") == 1
        assert isinstance(base_m, Declaration)
        assert base_m.scope.declares("m")

    def test_nested_scopes_created_implicitly(self) -> None:
        (decl,) = parse_interface({"items": [{"declare": "ns::Object::size", "kind": "method"}]})
        assert isinstance(decl, Declaration)
        assert decl.qualified_name == "ns::Object::size"

    def test_numeric_value_read_as_text(self) -> None:
        (directive,) = parse_interface({"items": [{"feature": "except", "value": 0}]})
        assert isinstance(directive, Directive)
        assert directive.value == "0"

    def test_params_parsed(self) -> None:
        (decl,) = parse_interface(
            {"items": [{"declare": "f", "params": ["char const*s", "int n=3"]}]}
        )
        assert isinstance(decl, Declaration)
        assert decl.parameter_types == ("char const *", "int")
        assert decl.default_values == {1: "3"}

    def test_empty_document(self) -> None:
        assert parse_interface(None) == []

    def test_item_with_two_roles(self) -> None:
        with pytest.raises(InterfaceFileError) as exc_info:
            parse_interface({"items": [{"declare": "f"}, {"declare": "g", "feature": "x"}]})
        assert exc_info.value.code == ErrorCode.INTERFACE_INVALID_ENTRY
        assert exc_info.value.details["index"] == 1

    def test_unknown_kind(self) -> None:
        with pytest.raises(InterfaceFileError) as exc_info:
            parse_interface({"items": [{"declare": "f", "kind": "macro"}]})
        assert exc_info.value.code == ErrorCode.INTERFACE_INVALID_ENTRY

    def test_non_trailing_default(self) -> None:
        with pytest.raises(InterfaceFileError) as exc_info:
            parse_interface({"items": [{"declare": "f", "params": ["int a=0", "int b"]}]})
        assert exc_info.value.details["index"] == 0

    def test_inheritance_cycle(self) -> None:
        with pytest.raises(InterfaceFileError) as exc_info:
            parse_interface(
                {
                    "scopes": [{"name": "A", "bases": ["B"]}, {"name": "B", "bases": ["A"]}],
                    "items": [{"declare": "A::m", "kind": "method"}],
                }
            )
        assert exc_info.value.code == ErrorCode.INTERFACE_PARSE_ERROR
        assert "cycle" in exc_info.value.message

    def test_wrong_top_level_shape(self) -> None:
        with pytest.raises(InterfaceFileError) as exc_info:
            parse_interface({"items": "not a list"})
        assert exc_info.value.code == ErrorCode.INTERFACE_PARSE_ERROR


class TestLoadInterface:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InterfaceFileError) as exc_info:
            load_interface(tmp_path / "missing.yaml")
        assert exc_info.value.code == ErrorCode.INTERFACE_PARSE_ERROR

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("items: [unclosed\n")
        with pytest.raises(InterfaceFileError):
            load_interface(path)


class TestBuildInterface:
    @pytest.fixture
    def interface_file(self, tmp_path: Path) -> Path:
        path = tmp_path / "example.yaml"
        path.write_text(INTERFACE_YAML)
        return path

    def test_end_to_end(self, interface_file: Path) -> None:
        interface = build_interface(interface_file)

        base_m, derived_m, create_full, create_short = interface.variants

        assert interface.resolve(base_m, "except").body == "try { arg1->m(); } catch (...) { }"
        assert derived_m.kind is DeclKind.METHOD
        assert derived_m.scope.target_name == "PyDerived"
        assert not interface.resolve(derived_m, "except").active
        assert interface.resolve(derived_m, "except").value == "0"
        assert create_full.arity == 1
        assert create_short.arity == 0
        assert interface.active_features(create_short) == frozenset({"new"})
