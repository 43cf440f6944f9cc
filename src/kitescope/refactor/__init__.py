"""Scope-aware rename and linked editing."""

from kitescope.refactor.ops import RefactorOps, validate_new_name

__all__ = ["RefactorOps", "validate_new_name"]
