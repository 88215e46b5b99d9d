"""Feature patterns: which declarations a directive targets.

A pattern is a scope qualifier, an optional leaf name and an optional
explicit signature. The textual forms accepted by ``parse_pattern``::

    ""                               global: every declaration
    "clone"                          unqualified name, any scope
    "clone()"                        unqualified name + empty signature
    "*::clone()"                     wildcard scope (global scope included)
    "::foo"                          exact global scope
    "Object::allocate(int) const"    exact scope + signature + qualifiers
    "hello(int i=0, double d=0.0)"   signature carrying defaults
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum

from declfeat.core.errors import PatternError
from declfeat.model.declarations import Param

_CV = frozenset({"const", "volatile"})
_ELABORATORS = frozenset({"struct", "class", "enum", "union", "typename"})
_BUILTIN_TYPE_WORDS = frozenset(
    {
        "void",
        "bool",
        "char",
        "wchar_t",
        "char16_t",
        "char32_t",
        "short",
        "int",
        "long",
        "float",
        "double",
        "signed",
        "unsigned",
    }
)
_METHOD_QUALIFIERS = frozenset({"const", "volatile", "&", "&&"})
_OPEN = {"<": ">", "(": ")", "[": "]"}
_OPERATOR = re.compile(r"(?<![\w])operator(?![\w])")


class ScopeQualifier(Enum):
    """How a pattern constrains the enclosing scope."""

    UNQUALIFIED = "unqualified"
    EXACT = "exact"
    WILDCARD = "wildcard"


class PatternRank(IntEnum):
    """Specificity of a pattern; higher wins."""

    GLOBAL = 1
    NAME = 2
    NAME_SIGNATURE = 3
    SCOPED_NAME = 4
    SCOPED_NAME_SIGNATURE = 5


@dataclass(frozen=True, slots=True)
class FeaturePattern:
    """Scope + name + signature specifier.

    ``scope_path`` is only meaningful for EXACT patterns; the empty path
    there means the global scope (``::foo``). ``signature`` None means "any
    signature", while an empty tuple means "takes no parameters".
    """

    qualifier: ScopeQualifier = ScopeQualifier.UNQUALIFIED
    scope_path: tuple[str, ...] = ()
    name: str | None = None
    signature: tuple[Param, ...] | None = None
    qualifiers: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "scope_path", tuple(self.scope_path))
        object.__setattr__(self, "qualifiers", tuple(self.qualifiers))
        if self.signature is not None:
            object.__setattr__(self, "signature", tuple(self.signature))
        self._validate()

    def _validate(self) -> None:
        if self.name is None:
            if self.qualifier is not ScopeQualifier.UNQUALIFIED or self.signature is not None:
                raise PatternError.malformed_pattern(
                    self.render(), "a global pattern takes no scope or signature"
                )
            return
        if not self.name.strip():
            raise PatternError.malformed_pattern(self.render(), "empty name")
        if self.qualifier is not ScopeQualifier.EXACT and self.scope_path:
            raise PatternError.malformed_pattern(
                self.render(), "only exact-scope patterns carry a scope path"
            )
        if any(not part for part in self.scope_path):
            raise PatternError.malformed_pattern(self.render(), "empty scope segment")
        if self.qualifiers and self.signature is None:
            raise PatternError.malformed_pattern(
                self.render(), "qualifiers require an explicit signature"
            )
        if self.signature is not None:
            _check_signature(self.signature, self.render())

    # -- constructors ----------------------------------------------------

    @classmethod
    def global_(cls) -> FeaturePattern:
        return cls()

    @classmethod
    def unqualified(
        cls,
        name: str,
        signature: Sequence[Param | str] | None = None,
        qualifiers: Iterable[str] = (),
    ) -> FeaturePattern:
        return cls(
            ScopeQualifier.UNQUALIFIED,
            name=name,
            signature=_params(signature),
            qualifiers=tuple(qualifiers),
        )

    @classmethod
    def wildcard(
        cls,
        name: str,
        signature: Sequence[Param | str] | None = None,
        qualifiers: Iterable[str] = (),
    ) -> FeaturePattern:
        return cls(
            ScopeQualifier.WILDCARD,
            name=name,
            signature=_params(signature),
            qualifiers=tuple(qualifiers),
        )

    @classmethod
    def exact(
        cls,
        scope: str | Sequence[str],
        name: str,
        signature: Sequence[Param | str] | None = None,
        qualifiers: Iterable[str] = (),
    ) -> FeaturePattern:
        if isinstance(scope, str):
            path = tuple(p for p in split_qualified(scope) if p)
        else:
            path = tuple(scope)
        return cls(
            ScopeQualifier.EXACT,
            scope_path=path,
            name=name,
            signature=_params(signature),
            qualifiers=tuple(qualifiers),
        )

    # -- properties ------------------------------------------------------

    @property
    def is_global(self) -> bool:
        return self.name is None

    @property
    def signature_types(self) -> tuple[str, ...] | None:
        if self.signature is None:
            return None
        return tuple(p.type for p in self.signature)

    @property
    def defaulted_positions(self) -> frozenset[int]:
        if self.signature is None:
            return frozenset()
        return frozenset(i for i, p in enumerate(self.signature) if p.default is not None)

    @property
    def has_defaults(self) -> bool:
        return bool(self.defaulted_positions)

    @property
    def rank(self) -> PatternRank:
        if self.name is None:
            return PatternRank.GLOBAL
        scoped = self.qualifier is ScopeQualifier.EXACT
        if self.signature is not None:
            return PatternRank.SCOPED_NAME_SIGNATURE if scoped else PatternRank.NAME_SIGNATURE
        return PatternRank.SCOPED_NAME if scoped else PatternRank.NAME

    def render(self) -> str:
        if self.name is None:
            return "<global>"
        if self.qualifier is ScopeQualifier.WILDCARD:
            text = f"*::{self.name}"
        elif self.qualifier is ScopeQualifier.EXACT:
            text = "::".join((*self.scope_path, self.name))
            if not self.scope_path:
                text = f"::{text}"
        else:
            text = self.name
        if self.signature is not None:
            params = ", ".join(p.render(with_default=True) for p in self.signature)
            text = f"{text}({params})"
        if self.qualifiers:
            text = f"{text} {' '.join(self.qualifiers)}"
        return text

    def __str__(self) -> str:
        return self.render()


def _params(signature: Sequence[Param | str] | None) -> tuple[Param, ...] | None:
    if signature is None:
        return None
    return tuple(p if isinstance(p, Param) else parse_param(p) for p in signature)


def _check_signature(signature: tuple[Param, ...], text: str) -> None:
    seen_default = False
    for position, param in enumerate(signature):
        if not param.type:
            raise PatternError.malformed_signature(text, f"empty type at position {position}")
        if param.type == "..." and position != len(signature) - 1:
            raise PatternError.malformed_signature(text, "'...' must be the last parameter")
        if param.default is not None:
            seen_default = True
        elif seen_default:
            raise PatternError.malformed_signature(
                text, f"default value at position {position - 1} is not trailing"
            )


# =============================================================================
# Text parsing
# =============================================================================


def _split_top_level(text: str, sep: str) -> list[str]:
    """Split on ``sep`` outside of <>, () and [] nesting."""
    parts: list[str] = []
    stack: list[str] = []
    start = 0
    for i, ch in enumerate(text):
        if ch in _OPEN:
            stack.append(_OPEN[ch])
        elif stack and ch == stack[-1]:
            stack.pop()
        elif ch == sep and not stack:
            parts.append(text[start:i])
            start = i + 1
    if stack:
        raise PatternError.malformed_signature(text, "unbalanced brackets")
    parts.append(text[start:])
    return parts


def split_qualified(text: str) -> list[str]:
    """Split ``a::B<std::string>::c`` on '::' outside template arguments."""
    parts: list[str] = []
    depth = 0
    start = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif depth == 0 and text.startswith("::", i):
            parts.append(text[start:i])
            i += 2
            start = i
            continue
        i += 1
    parts.append(text[start:])
    return parts


def _find_signature_open(text: str) -> int:
    """Index of the '(' opening the parameter list, or -1."""
    start = 0
    op = _OPERATOR.search(text)
    if op is not None:
        # operator() keeps its own parentheses in the name
        rest = text[op.end() :].lstrip()
        start = len(text) - len(rest)
        if rest.startswith("()"):
            start += 2
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        elif ch == "(" and depth == 0:
            return i
    return -1


def _split_type_and_name(decl: str) -> tuple[str, str | None]:
    words = decl.replace("*", " * ").replace("&", " & ").split()
    if not words:
        return "", None
    core = [w for w in words if w not in _CV and w not in _ELABORATORS and w not in ("*", "&")]
    last = words[-1]
    if (
        len(core) <= 1
        or last in _CV
        or last in ("*", "&")
        or last in _BUILTIN_TYPE_WORDS
        or last.endswith(">")
        or "::" in last
        or not last.isidentifier()
    ):
        return decl, None
    return decl[: decl.rstrip().rfind(last)], last


def parse_param(text: str) -> Param:
    """Parse one parameter, e.g. ``double d=0.0`` or ``char const *``."""
    pieces = _split_top_level(text, "=")
    decl = pieces[0].strip()
    default = "=".join(pieces[1:]).strip() if len(pieces) > 1 else None
    if default == "":
        raise PatternError.malformed_signature(text, "empty default value")
    type_, name = _split_type_and_name(decl)
    return Param(type_, name=name, default=default)


def parse_signature(text: str) -> tuple[Param, ...]:
    """Parse the inside of a parameter list. ``""`` and ``"void"`` are empty."""
    inner = text.strip()
    if not inner or inner == "void":
        return ()
    params = []
    for position, piece in enumerate(_split_top_level(inner, ",")):
        if not piece.strip():
            raise PatternError.malformed_signature(text, f"empty parameter at position {position}")
        params.append(parse_param(piece))
    return tuple(params)


def parse_pattern(text: str | None) -> FeaturePattern:
    """Parse the textual form of a pattern (see module docstring)."""
    if text is None or not text.strip():
        return FeaturePattern.global_()
    source = text.strip()

    signature: tuple[Param, ...] | None = None
    qualifiers: tuple[str, ...] = ()
    head = source
    open_at = _find_signature_open(source)
    if open_at != -1:
        close_at = source.rfind(")")
        if close_at < open_at:
            raise PatternError.malformed_signature(source, "unterminated parameter list")
        head = source[:open_at].strip()
        signature = parse_signature(source[open_at + 1 : close_at])
        tail = source[close_at + 1 :].replace("&&", " && ").split()
        for word in tail:
            if word not in _METHOD_QUALIFIERS:
                raise PatternError.malformed_pattern(source, f"unexpected qualifier '{word}'")
        qualifiers = tuple(tail)
    elif source.count("(") != source.count(")"):
        raise PatternError.malformed_signature(source, "unbalanced parentheses")

    if not head:
        raise PatternError.malformed_pattern(source, "missing name")

    if head.startswith("*::"):
        name = head[3:]
        if len(split_qualified(name)) > 1:
            raise PatternError.malformed_pattern(source, "wildcard scope takes a bare name")
        return FeaturePattern.wildcard(name, signature, qualifiers)

    parts = split_qualified(head)
    if len(parts) > 1:
        if parts[0] == "":
            parts = parts[1:]
            if not parts:
                raise PatternError.malformed_pattern(source, "missing name")
        return FeaturePattern.exact(tuple(parts[:-1]), parts[-1], signature, qualifiers)

    return FeaturePattern.unqualified(head, signature, qualifiers)
