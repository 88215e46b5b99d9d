"""Pattern matching and precedence ranking.

A pattern matches a declaration variant when all three tests pass:

1. Name: equal leaf names, or a global pattern. Global patterns only reach
   declarations registered after them in the directive stream.
2. Scope: EXACT patterns require the variant's immediate scope, or a base
   scope the member is inherited from without redeclaration. WILDCARD and
   UNQUALIFIED patterns accept any scope, global included.
3. Signature: absent matches every arity. A signature carrying defaults
   matches every default-argument variant of the declaration it spells out.
   A plain signature must equal the variant's own parameter types.

Scoped patterns beat unscoped ones. Among scoped matches the nearest scope
(inheritance distance) wins before PatternRank, so a derived class's own
entry shadows any entry reached through a base. Remaining ties go to the
most recently defined entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from declfeat.features.entries import FeatureEntry
from declfeat.model.declarations import Declaration
from declfeat.model.patterns import FeaturePattern, PatternRank, ScopeQualifier


@dataclass(frozen=True, slots=True)
class Match:
    """A matching entry plus the facts used to rank it."""

    entry: FeatureEntry
    rank: PatternRank
    distance: int = 0

    @property
    def sort_key(self) -> tuple[bool, int, int, int]:
        scoped = self.rank >= PatternRank.SCOPED_NAME
        return (scoped, -self.distance, int(self.rank), self.entry.sequence_index)


def scope_distance(
    pattern: FeaturePattern, variant: Declaration, *, inherit: bool = True
) -> int | None:
    """0 for a direct match, >0 for a match through base scopes, None for no match."""
    if pattern.qualifier is not ScopeQualifier.EXACT:
        return 0
    if not inherit:
        return 0 if variant.scope.path == pattern.scope_path else None
    return variant.scope.inheritance_distance(pattern.scope_path, variant.name)


def signature_matches(pattern: FeaturePattern, variant: Declaration) -> bool:
    if pattern.signature is None:
        return True
    if not variant.kind.is_callable:
        return False
    if pattern.qualifiers != variant.qualifiers:
        return False
    if pattern.has_defaults:
        # Full declared signature: applies to every arity expanded from it.
        origin = variant.origin
        return (
            origin.parameter_types == pattern.signature_types
            and frozenset(origin.default_values) == pattern.defaulted_positions
        )
    return variant.parameter_types == pattern.signature_types


def match(
    entry: FeatureEntry, variant: Declaration, *, inherit: bool = True
) -> Match | None:
    """Test one entry against one variant."""
    pattern = entry.pattern
    if pattern.name is not None and pattern.name != variant.name:
        return None
    if pattern.is_global and variant.position is not None:
        # A bare global directive only reaches declarations that follow it.
        if entry.sequence_index >= variant.position:
            return None
    distance = scope_distance(pattern, variant, inherit=inherit)
    if distance is None:
        return None
    if not signature_matches(pattern, variant):
        return None
    return Match(entry=entry, rank=pattern.rank, distance=distance)


def rank_matches(
    entries: Iterable[FeatureEntry], variant: Declaration, *, inherit: bool = True
) -> list[Match]:
    """All matching entries, best first."""
    found = [m for e in entries if (m := match(e, variant, inherit=inherit)) is not None]
    found.sort(key=lambda m: m.sort_key, reverse=True)
    return found


def best(
    entries: Iterable[FeatureEntry], variant: Declaration, *, inherit: bool = True
) -> Match | None:
    winner: Match | None = None
    for entry in entries:
        candidate = match(entry, variant, inherit=inherit)
        if candidate is not None and (winner is None or candidate.sort_key > winner.sort_key):
            winner = candidate
    return winner
