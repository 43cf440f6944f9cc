"""Built-in lint rules; importing this package registers them."""

from kitescope.lint.checks import imports, scoping, strings, type_checks, unused

__all__ = ["imports", "scoping", "strings", "type_checks", "unused"]
