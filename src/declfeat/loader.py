"""Interface description files.

A YAML document standing in for the header parser's output: scope
definitions followed by an ordered list of items, each either a declaration
or a feature directive. Item order is the source order.

Example::

    scopes:
      - name: Base
      - name: Derived
        bases: [Base]
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

Scope ``members`` are derived from the declarations: every declaration not
marked ``inherited`` counts as declared in its scope.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from declfeat.config.models import DeclFeatConfig
from declfeat.core.errors import DeclFeatError, InterfaceFileError
from declfeat.model.declarations import GLOBAL_SCOPE, Declaration, DeclKind, Scope
from declfeat.model.patterns import parse_param, split_qualified
from declfeat.session import Directive, Interface, InterfaceBuilder, StreamItem


class ScopeDef(BaseModel):
    name: str
    bases: list[str] = Field(default_factory=list)
    symbol: str | None = None


class ItemDef(BaseModel):
    """One entry of ``items``: exactly one of declare / feature / directive."""

    declare: str | None = None
    feature: str | None = None
    directive: str | None = None

    # directive fields
    pattern: str | None = None
    value: str | None = None
    body: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)

    # declaration fields
    kind: DeclKind = DeclKind.FUNCTION
    params: list[str] = Field(default_factory=list)
    returns: str | None = None
    qualifiers: list[str] = Field(default_factory=list)
    symbol: str | None = None
    inherited: bool = False

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, v: Any) -> Any:
        # YAML reads `value: 0` as an int; directive values are always text.
        if isinstance(v, bool):
            return "1" if v else "0"
        if isinstance(v, int | float):
            return str(v)
        return v

    @model_validator(mode="after")
    def _one_role(self) -> ItemDef:
        roles = [r for r in (self.declare, self.feature, self.directive) if r is not None]
        if len(roles) != 1:
            raise ValueError("item needs exactly one of 'declare', 'feature' or 'directive'")
        return self


class InterfaceDoc(BaseModel):
    scopes: list[ScopeDef] = Field(default_factory=list)
    items: list[ItemDef] = Field(default_factory=list)


def _scope_key(qualified: str) -> tuple[str, ...]:
    return tuple(p for p in split_qualified(qualified) if p)


class _ScopeGraph:
    """Builds immutable Scope objects once every scope's members are known."""

    def __init__(self, defs: list[ScopeDef], members: dict[tuple[str, ...], set[str]]) -> None:
        self._defs = {_scope_key(s.name): s for s in defs}
        self._members = members
        self._built: dict[tuple[str, ...], Scope] = {(): GLOBAL_SCOPE}
        self._building: set[tuple[str, ...]] = set()

    def get(self, path: tuple[str, ...]) -> Scope:
        if path in self._built:
            return self._built[path]
        if path in self._building:
            raise InterfaceFileError.parse_error(
                "<scopes>", f"inheritance cycle through '{'::'.join(path)}'"
            )
        self._building.add(path)
        scope_def = self._defs.get(path)
        parent = self.get(path[:-1])
        bases = tuple(self.get(_scope_key(b)) for b in scope_def.bases) if scope_def else ()
        scope = Scope(
            path[-1],
            parent=parent if not parent.is_global else None,
            bases=bases,
            members=frozenset(self._members.get(path, ())),
            symbol_name=scope_def.symbol if scope_def else None,
        )
        self._building.discard(path)
        self._built[path] = scope
        return scope


def parse_interface(data: Any, source: str = "<memory>") -> list[StreamItem]:
    """Turn a loaded YAML document into the ordered declaration/directive stream."""
    try:
        doc = InterfaceDoc.model_validate(data or {})
    except ValidationError as e:
        err = e.errors()[0]
        loc = err["loc"]
        if len(loc) >= 2 and loc[0] == "items" and isinstance(loc[1], int):
            raise InterfaceFileError.invalid_entry(loc[1], err["msg"]) from e
        raise InterfaceFileError.parse_error(source, err["msg"]) from e

    members: dict[tuple[str, ...], set[str]] = {}
    for item in doc.items:
        if item.declare is not None and not item.inherited:
            parts = _scope_key(item.declare)
            if not parts:
                continue
            members.setdefault(parts[:-1], set()).add(parts[-1])
    graph = _ScopeGraph(doc.scopes, members)

    stream: list[StreamItem] = []
    for index, item in enumerate(doc.items):
        try:
            stream.append(_to_stream_item(index, item, graph))
        except InterfaceFileError:
            raise
        except DeclFeatError as e:
            raise InterfaceFileError.invalid_entry(index, e.message) from e
    return stream


def _to_stream_item(index: int, item: ItemDef, graph: _ScopeGraph) -> StreamItem:
    if item.declare is None:
        name = item.feature if item.feature is not None else item.directive
        assert name is not None
        return Directive(
            name=name,
            pattern=item.pattern,
            value=item.value,
            body=item.body,
            attributes=item.attributes,
        )

    parts = _scope_key(item.declare)
    if not parts:
        raise InterfaceFileError.invalid_entry(index, "empty declaration name")
    return Declaration(
        parts[-1],
        kind=item.kind,
        scope=graph.get(parts[:-1]),
        params=tuple(parse_param(p) for p in item.params),
        return_type=item.returns,
        qualifiers=tuple(item.qualifiers),
        symbol_name=item.symbol,
    )


def load_interface(path: Path) -> list[StreamItem]:
    """Read an interface description file into an ordered stream."""
    if not path.exists():
        raise InterfaceFileError.parse_error(str(path), "file not found")
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InterfaceFileError.parse_error(str(path), str(e)) from e
    return parse_interface(data, str(path))


def build_interface(path: Path, config: DeclFeatConfig | None = None) -> Interface:
    """Load, accumulate and finalize an interface description file."""
    builder = InterfaceBuilder(config)
    builder.consume(load_interface(path))
    return builder.finalize()
