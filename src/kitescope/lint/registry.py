"""Lint rule registry."""

from __future__ import annotations

from collections.abc import Callable

from kitescope.lint.models import LintContext, LintRule
from kitescope.protocol import Diagnostic

CheckFn = Callable[[LintContext], list[Diagnostic]]


class RuleRegistry:
    """Rules in registration order."""

    def __init__(self) -> None:
        self._rules: dict[str, LintRule] = {}

    def register(self, rule_id: str, description: str) -> Callable[[CheckFn], CheckFn]:
        def decorator(fn: CheckFn) -> CheckFn:
            if rule_id in self._rules:
                raise ValueError(f"Duplicate lint rule: {rule_id}")
            self._rules[rule_id] = LintRule(rule_id, description, fn)
            return fn

        return decorator

    def get(self, rule_id: str) -> LintRule | None:
        return self._rules.get(rule_id)

    def all(self) -> list[LintRule]:
        return list(self._rules.values())


registry = RuleRegistry()
rule = registry.register
