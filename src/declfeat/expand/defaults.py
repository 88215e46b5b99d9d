"""Default-argument expansion.

``void hello(int i=0, double d=0.0)`` is emitted as three variants:
``hello(int, double)``, ``hello(int)`` and ``hello()``, longest first. In
compact mode only the full signature is emitted.

After expansion, every name that ends up with more than one callable variant
in the same scope forms an overload set; members get consecutive
``overload_index`` values in emission order.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from declfeat.config.models import ExpansionConfig
from declfeat.core.logging import get_logger
from declfeat.model.declarations import Declaration

log = get_logger("expand.defaults")


def expand_defaults(decl: Declaration, *, compact: bool = False) -> tuple[Declaration, ...]:
    """Variants of one declaration, from the full signature down to the shortest."""
    if not decl.has_defaults or compact:
        return (decl,)
    variants = tuple(decl.with_arity(n) for n in range(decl.arity, decl.min_arity - 1, -1))
    log.debug(
        "declaration_expanded",
        declaration=decl.decl_text(),
        variants=len(variants),
    )
    return variants


def assign_overload_indices(variants: Iterable[Declaration]) -> list[Declaration]:
    """Number the members of each overload set; singletons get None."""
    ordered = list(variants)
    groups: dict[tuple[tuple[str, ...], str], list[int]] = {}
    for i, variant in enumerate(ordered):
        if variant.kind.is_callable:
            groups.setdefault((variant.scope.path, variant.name), []).append(i)

    for positions in groups.values():
        overloaded = len(positions) > 1
        for overload_index, i in enumerate(positions):
            wanted = overload_index if overloaded else None
            if ordered[i].overload_index != wanted:
                ordered[i] = replace(ordered[i], overload_index=wanted)
    return ordered


class DefaultArgExpander:
    """Materializes every emittable variant of a declaration stream."""

    def __init__(self, config: ExpansionConfig | None = None) -> None:
        self._config = config or ExpansionConfig()

    @property
    def compact(self) -> bool:
        return self._config.compact_default_args

    def expand(self, decl: Declaration) -> tuple[Declaration, ...]:
        return expand_defaults(decl, compact=self.compact)

    def expand_all(self, decls: Iterable[Declaration]) -> list[Declaration]:
        variants: list[Declaration] = []
        for decl in decls:
            variants.extend(self.expand(decl))
        return assign_overload_indices(variants)
