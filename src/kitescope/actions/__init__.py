"""Code actions: quick fixes and import rewrites."""

from kitescope.actions.ops import CodeActionOps

__all__ = ["CodeActionOps"]
