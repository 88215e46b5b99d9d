"""Placeholder substitution in feature bodies.

Recognized placeholders and the fact each one expands to:

    $action              invocation expression for this variant
    $name                qualified C/C++ name
    $symname             target-language name
    $overname            overload suffix ("" outside an overload set)
    $wrapname            generated wrapper name
    $decl                declaration without return type
    $fulldecl            declaration with return type
    $parentclassname     enclosing class (members only)
    $parentclasssymname  target-language name of the enclosing class

Substitution is a single left-to-right pass: expanded text is never scanned
again, and unknown ``$tokens`` are copied through untouched.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from declfeat.config.models import ExpansionConfig
from declfeat.model.declarations import Declaration, DeclKind

PLACEHOLDERS: dict[str, str] = {
    "action": "action_text",
    "name": "name",
    "symname": "symbol_name",
    "overname": "overload_suffix",
    "wrapname": "wrapper_name",
    "decl": "decl_text",
    "fulldecl": "full_decl_text",
    "parentclassname": "parent_class_name",
    "parentclasssymname": "parent_class_target_name",
}

# Longest first so $fulldecl is never read as $f + ulldecl; the lookahead
# keeps $names and friends out.
_PLACEHOLDER_RE = re.compile(
    r"\$(" + "|".join(sorted(PLACEHOLDERS, key=len, reverse=True)) + r")(?!\w)"
)


@dataclass(frozen=True, slots=True)
class FactSheet:
    """Per-variant facts a feature body may refer to."""

    action_text: str
    name: str
    symbol_name: str
    overload_suffix: str
    wrapper_name: str
    decl_text: str
    full_decl_text: str
    parent_class_name: str = ""
    parent_class_target_name: str = ""

    @classmethod
    def for_variant(
        cls,
        variant: Declaration,
        *,
        action: str | None = None,
        config: ExpansionConfig | None = None,
    ) -> FactSheet:
        config = config or ExpansionConfig()
        overload_suffix = (
            config.overload_suffix_template.format(index=variant.overload_index)
            if variant.overload_index is not None
            else ""
        )
        member = variant.kind.is_member and not variant.scope.is_global
        return cls(
            action_text=action if action is not None else default_action(variant),
            name=variant.qualified_name,
            symbol_name=variant.target_name,
            overload_suffix=overload_suffix,
            wrapper_name=wrapper_name(variant, config.wrapper_prefix, overload_suffix),
            decl_text=variant.decl_text(),
            full_decl_text=variant.full_decl_text(),
            parent_class_name=variant.scope.qualified_name if member else "",
            parent_class_target_name=variant.scope.target_name if member else "",
        )

    def lookup(self, placeholder: str) -> str:
        return str(getattr(self, PLACEHOLDERS[placeholder]))


def wrapper_name(variant: Declaration, prefix: str, overload_suffix: str = "") -> str:
    """``_wrap_Scope_name__0`` style name built from target-language names."""
    scopes = [s.target_name for s in reversed(variant.enclosing_scopes)]
    return prefix + "_".join((*scopes, variant.target_name)) + overload_suffix


def default_action(variant: Declaration) -> str:
    """Invocation expression used when the backend supplies none.

    Arguments are named ``arg1``, ``arg2``...; for instance methods ``arg1``
    is the object pointer.
    """
    if variant.kind is DeclKind.VARIABLE:
        return variant.qualified_name
    if variant.kind is DeclKind.MEMBER_VARIABLE:
        return f"arg1->{variant.name}"

    if variant.kind is DeclKind.METHOD:
        args = [f"arg{i + 2}" for i in range(variant.arity)]
        call = f"arg1->{variant.name}({', '.join(args)})"
    else:
        args = [f"arg{i + 1}" for i in range(variant.arity)]
        call = f"{variant.qualified_name}({', '.join(args)})"

    if variant.return_type and variant.return_type != "void":
        return f"result = {call};"
    return f"{call};"


def substitute(body: str, facts: FactSheet) -> str:
    """Replace every recognized placeholder in ``body`` with its fact."""
    return _PLACEHOLDER_RE.sub(lambda m: facts.lookup(m.group(1)), body)


def placeholders_in(body: str) -> list[str]:
    """Recognized placeholders in ``body``, in order of first appearance."""
    seen: dict[str, None] = {}
    for m in _PLACEHOLDER_RE.finditer(body):
        seen.setdefault(m.group(1), None)
    return list(seen)
