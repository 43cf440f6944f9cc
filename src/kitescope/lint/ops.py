"""Lint operations - run diagnostic rules over open documents."""

from __future__ import annotations

from kitescope.config.models import DiagnosticsConfig
from kitescope.core.logging import get_logger
from kitescope.index.session import DocumentSession
from kitescope.index.workspace import WorkspaceHost, WorkspaceView
from kitescope.lint import checks  # noqa: F401  (registers rules)
from kitescope.lint.models import LintContext, LintResult
from kitescope.lint.registry import RuleRegistry, registry

log = get_logger(__name__)


class LintOps:
    """Diagnostics for open documents.

    Each rule runs in isolation: a rule that raises is logged and skipped,
    and the remaining rules still report.
    """

    def __init__(
        self,
        session: DocumentSession,
        host: WorkspaceHost | None = None,
        config: DiagnosticsConfig | None = None,
        extension: str = ".kite",
        rules: RuleRegistry | None = None,
    ) -> None:
        self._session = session
        self._host = host
        self._config = config or DiagnosticsConfig()
        self._extension = extension
        self._rules = rules or registry

    def check(self, uri: str) -> LintResult:
        state = self._session.require(uri)
        result = LintResult(uri=uri)
        if not self._config.enabled:
            return result
        view = WorkspaceView(self._host, self._extension) if self._host is not None else None
        ctx = LintContext(state.document, state.index, view, self._config)
        for lint_rule in self._rules.all():
            if not self._config.is_enabled(lint_rule.rule_id):
                continue
            try:
                result.diagnostics.extend(lint_rule.check(ctx))
            except Exception:
                log.warning("lint.rule_failed", rule=lint_rule.rule_id, uri=uri, exc_info=True)
                result.failed_rules.append(lint_rule.rule_id)
        result.diagnostics.sort(key=lambda d: (d.range.start, d.range.end))
        log.debug("lint.checked", uri=uri, diagnostics=len(result.diagnostics))
        return result
