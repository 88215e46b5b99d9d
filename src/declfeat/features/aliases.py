"""Shorthand directive names and the generic features they stand for.

Applied by the builder before entries reach the feature table, so the table
and matcher never need to know what any particular feature means.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class Alias:
    """``value`` None means the directive keeps its own value (flag "1" if absent)."""

    feature_name: str
    value: str | None = None


ALIASES: MappingProxyType[str, Alias] = MappingProxyType(
    {
        "exception": Alias("except"),
        "noexception": Alias("except", "0"),
        "clearexception": Alias("except", ""),
        "newobject": Alias("new", "1"),
        "nonewobject": Alias("new", "0"),
        "clearnewobject": Alias("new", ""),
        "delobject": Alias("del", "1"),
        "immutable": Alias("immutable", "1"),
        "mutable": Alias("immutable", ""),
    }
)


def expand_alias(directive: str, value: str | None = None) -> tuple[str, str | None]:
    """Return the (feature_name, raw_value) a directive name denotes.

    Names without an alias are generic features and pass through unchanged.
    """
    alias = ALIASES.get(directive)
    if alias is None:
        return directive, value
    return alias.feature_name, alias.value if alias.value is not None else value
