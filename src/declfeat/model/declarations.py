"""Declaration model: scopes, parameters and the emittable units features attach to.

Declarations and scopes are immutable. Default-argument variants are new
Declaration instances that point back at the declaration they were derived
from (see expand.defaults); nothing here is ever mutated after construction.

The scope graph has two kinds of links:
- ``parent``: lexical nesting (``ns`` encloses ``ns::Object``)
- ``bases``: inheritance (``Derived`` derives from ``Base``)

Inherited feature lookup walks ``bases`` upward, stopping at any scope that
redeclares the member.
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum

from declfeat.core.errors import DeclarationError

_SPACES = re.compile(r"\s+")
_SPACE_BEFORE_PTR = re.compile(r"\s*([*&]+)")
_SPACE_IN_PTR_RUN = re.compile(r"([*&])\s+(?=[*&])")
_PTR_BEFORE_WORD = re.compile(r"([*&])(?=[\w])")
_AFTER_LT = re.compile(r"<\s+")
_BEFORE_GT = re.compile(r"\s+>")
_COMMA = re.compile(r"\s*,\s*")


def normalize_type(text: str) -> str:
    """Canonical spelling of a C/C++ type descriptor.

    Whitespace is collapsed and pointer/reference declarators are separated
    from the base type, so ``char const*`` and ``char  const *`` compare equal.
    No semantic coercion happens: ``const char *`` stays distinct from
    ``char const *``.
    """
    t = _SPACES.sub(" ", text).strip()
    t = _SPACE_BEFORE_PTR.sub(r" \1", t)
    t = _SPACE_IN_PTR_RUN.sub(r"\1", t)
    t = _PTR_BEFORE_WORD.sub(r"\1 ", t)
    t = _AFTER_LT.sub("<", t)
    t = _BEFORE_GT.sub(">", t)
    t = _COMMA.sub(", ", t)
    return t.strip()


class DeclKind(Enum):
    """Kind of emittable declaration."""

    FUNCTION = "function"
    METHOD = "method"
    STATIC_METHOD = "static_method"
    VARIABLE = "variable"
    MEMBER_VARIABLE = "member_variable"

    @property
    def is_callable(self) -> bool:
        return self in (DeclKind.FUNCTION, DeclKind.METHOD, DeclKind.STATIC_METHOD)

    @property
    def is_member(self) -> bool:
        return self in (DeclKind.METHOD, DeclKind.STATIC_METHOD, DeclKind.MEMBER_VARIABLE)


@dataclass(frozen=True, slots=True)
class Param:
    """One parameter of a signature; ``name`` and ``default`` are optional."""

    type: str
    name: str | None = None
    default: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", normalize_type(self.type))

    def render(self, *, with_default: bool = False) -> str:
        text = self.type
        if self.name:
            text = f"{text} {self.name}" if not text.endswith(("*", "&")) else f"{text}{self.name}"
        if with_default and self.default is not None:
            text = f"{text}={self.default}"
        return text


@dataclass(frozen=True, slots=True)
class Scope:
    """A named scope (namespace or class) in the scope graph.

    Scopes compare by path only; ``members`` lists the names declared
    directly in the scope and is what separates an inherited member from a
    redeclared one.
    """

    name: str = field(compare=False)
    parent: Scope | None = field(default=None, compare=False, repr=False)
    bases: tuple[Scope, ...] = field(default=(), compare=False, repr=False)
    members: frozenset[str] = field(default=frozenset(), compare=False, repr=False)
    symbol_name: str | None = field(default=None, compare=False)
    path: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        prefix = self.parent.path if self.parent is not None else ()
        object.__setattr__(self, "path", prefix + ((self.name,) if self.name else ()))
        object.__setattr__(self, "bases", tuple(self.bases))
        object.__setattr__(self, "members", frozenset(self.members))

    @classmethod
    def from_qualified(
        cls,
        qualified: str,
        *,
        bases: tuple[Scope, ...] = (),
        members: frozenset[str] | set[str] = frozenset(),
        symbol_name: str | None = None,
    ) -> Scope:
        """Build ``a::b::C`` with plain namespace parents for ``a`` and ``a::b``."""
        parts = [p for p in qualified.split("::") if p]
        if not parts:
            return GLOBAL_SCOPE
        parent: Scope | None = None
        for part in parts[:-1]:
            parent = cls(part, parent=parent)
        return cls(
            parts[-1],
            parent=parent,
            bases=bases,
            members=frozenset(members),
            symbol_name=symbol_name,
        )

    @property
    def is_global(self) -> bool:
        return not self.path

    @property
    def qualified_name(self) -> str:
        return "::".join(self.path)

    @property
    def target_name(self) -> str:
        return self.symbol_name or self.name

    def declares(self, member: str) -> bool:
        return member in self.members

    def ancestors(self) -> Iterator[Scope]:
        """Enclosing scopes, innermost first, excluding self and the global scope."""
        scope = self.parent
        while scope is not None and not scope.is_global:
            yield scope
            scope = scope.parent

    def inheritance_distance(self, target: tuple[str, ...], member: str) -> int | None:
        """How many base links separate this scope from ``target`` for ``member``.

        Returns 0 when this scope is ``target`` itself, the number of base
        hops when ``member`` is inherited from ``target`` without being
        redeclared on the way, and None otherwise. Walks breadth-first so the
        nearest base wins in diamond hierarchies.
        """
        if self.path == target:
            return 0
        if self.declares(member):
            return None
        queue: deque[tuple[Scope, int]] = deque((base, 1) for base in self.bases)
        seen: set[tuple[str, ...]] = set()
        while queue:
            scope, distance = queue.popleft()
            if scope.path in seen:
                continue
            seen.add(scope.path)
            if scope.path == target:
                return distance
            if scope.declares(member):
                # Member originates here; scopes further up are shadowed.
                continue
            queue.extend((base, distance + 1) for base in scope.bases)
        return None


GLOBAL_SCOPE = Scope("")


@dataclass(frozen=True, slots=True)
class Declaration:
    """One symbol the generator may emit code for."""

    name: str
    kind: DeclKind = DeclKind.FUNCTION
    scope: Scope = GLOBAL_SCOPE
    params: tuple[Param, ...] = ()
    return_type: str | None = None
    qualifiers: tuple[str, ...] = ()
    # Renumbered after expansion, so not part of identity.
    overload_index: int | None = field(default=None, compare=False)
    symbol_name: str | None = None
    default_arg_base: Declaration | None = field(default=None, repr=False)
    # Index in the interleaved directive stream; None when built outside a session.
    position: int | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "params", tuple(self.params))
        object.__setattr__(self, "qualifiers", tuple(self.qualifiers))
        if self.return_type is not None:
            object.__setattr__(self, "return_type", normalize_type(self.return_type))
        seen_default = False
        for position, param in enumerate(self.params):
            if param.default is not None:
                seen_default = True
            elif seen_default:
                raise DeclarationError.non_trailing_default(self.qualified_name, position)

    @classmethod
    def with_defaults(
        cls,
        name: str,
        parameter_types: list[str] | tuple[str, ...],
        default_values: Mapping[int, str],
        **kwargs: object,
    ) -> Declaration:
        """Build from a type list plus a position -> default expression mapping."""
        for position in default_values:
            if not 0 <= position < len(parameter_types):
                raise DeclarationError.default_out_of_range(name, position, len(parameter_types))
        params = tuple(
            Param(type_, default=default_values.get(i)) for i, type_ in enumerate(parameter_types)
        )
        return cls(name, params=params, **kwargs)  # type: ignore[arg-type]

    # -- names -----------------------------------------------------------

    @property
    def qualified_parts(self) -> tuple[str, ...]:
        return (*self.scope.path, self.name)

    @property
    def qualified_name(self) -> str:
        return "::".join(self.qualified_parts)

    @property
    def target_name(self) -> str:
        return self.symbol_name or self.name

    @property
    def enclosing_scopes(self) -> tuple[Scope, ...]:
        """Ancestor scopes, innermost first."""
        if self.scope.is_global:
            return ()
        return (self.scope, *self.scope.ancestors())

    def scope_chain(self) -> tuple[str, ...]:
        return self.scope.path

    # -- signature -------------------------------------------------------

    @property
    def parameter_types(self) -> tuple[str, ...]:
        return tuple(p.type for p in self.params)

    @property
    def default_values(self) -> dict[int, str]:
        return {i: p.default for i, p in enumerate(self.params) if p.default is not None}

    @property
    def arity(self) -> int:
        return len(self.params)

    @property
    def min_arity(self) -> int:
        return self.arity - len(self.default_values)

    @property
    def has_defaults(self) -> bool:
        return any(p.default is not None for p in self.params)

    def signature(self) -> tuple[str, ...]:
        return self.parameter_types

    def is_default_arg_variant_of(self, base: Declaration) -> bool:
        return self.default_arg_base is not None and self.default_arg_base == base

    @property
    def origin(self) -> Declaration:
        """The declaration as written in the header, before default-argument expansion."""
        return self.default_arg_base if self.default_arg_base is not None else self

    def with_arity(self, arity: int) -> Declaration:
        """A variant keeping the first ``arity`` parameters.

        Only the full-arity variant keeps its default expressions; reduced
        variants are plain signatures.
        """
        if not self.min_arity <= arity <= self.arity:
            raise DeclarationError.default_out_of_range(self.qualified_name, arity, self.arity)
        if arity == self.arity:
            params = self.params
        else:
            params = tuple(Param(p.type, p.name) for p in self.params[:arity])
        return replace(self, params=params, default_arg_base=self.origin)

    # -- rendering -------------------------------------------------------

    def decl_text(self) -> str:
        """``Scope::name(type, type) const`` without return type or defaults."""
        if not self.kind.is_callable:
            return self.qualified_name
        text = f"{self.qualified_name}({', '.join(self.parameter_types)})"
        if self.qualifiers:
            text = f"{text} {' '.join(self.qualifiers)}"
        return text

    def full_decl_text(self) -> str:
        """Declaration text including storage class and return/variable type."""
        text = self.decl_text()
        if self.return_type:
            text = f"{self.return_type} {text}"
        if self.kind is DeclKind.STATIC_METHOD:
            text = f"static {text}"
        return text

    def __str__(self) -> str:
        return self.decl_text()
