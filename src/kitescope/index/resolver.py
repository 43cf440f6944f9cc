"""Scope and shadowing resolution over a ``DocumentIndex``."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from kitescope.index.models import (
    Declaration,
    DeclarationKind,
    DocumentIndex,
    Reference,
)


@dataclass(frozen=True, slots=True)
class ShadowPair:
    """``declaration`` hides ``shadowed`` within its scope."""

    declaration: Declaration
    shadowed: Declaration


def resolve(index: DocumentIndex, offset: int, name: str) -> Declaration | None:
    """Declaration bound to ``name`` at ``offset``, innermost scope first.

    Returns None when no enclosing scope binds the name; callers may then try
    cross-file resolution.
    """
    return index.scope_at(offset).lookup(name)


def find_shadowed(index: DocumentIndex) -> list[ShadowPair]:
    """Pairs of declarations hiding a same-named binding of an enclosing scope.

    Evaluated once per declaration by looking the name up from the parent of
    the declaring scope. Schema properties are members and never shadow.
    """
    pairs: list[ShadowPair] = []
    for decl in index.declarations:
        if decl.kind is DeclarationKind.PROPERTY:
            continue
        parent = decl.scope.parent
        if parent is None:
            continue
        outer = parent.lookup(decl.name)
        if outer is not None and outer is not decl and outer.kind is not DeclarationKind.PROPERTY:
            pairs.append(ShadowPair(decl, outer))
    return pairs


def references(index: DocumentIndex, name: str | None = None) -> Iterator[Reference]:
    """Every name token that is not its own binding site, with its resolution."""
    binding_starts = {d.start for d in index.declarations}
    for token in index.name_tokens(name):
        if token.start in binding_starts:
            continue
        yield Reference(token.name, token.start, token.end, resolve(index, token.start, token.name))


def is_referenced(index: DocumentIndex, declaration: Declaration) -> bool:
    return any(ref.declaration is declaration for ref in references(index, declaration.name))
