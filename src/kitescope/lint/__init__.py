"""Static diagnostics for Kite documents."""

from kitescope.lint.models import LintContext, LintResult, LintRule
from kitescope.lint.ops import LintOps
from kitescope.lint.registry import RuleRegistry, registry

__all__ = ["LintContext", "LintOps", "LintResult", "LintRule", "RuleRegistry", "registry"]
