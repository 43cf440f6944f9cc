"""Tests for LintOps rule execution and the rule registry."""

from __future__ import annotations

from pathlib import Path

import pytest

from kitescope.config.models import DiagnosticsConfig
from kitescope.core.errors import DocumentError
from kitescope.document import path_to_uri
from kitescope.index.session import DocumentSession
from kitescope.lint import LintContext, LintOps, RuleRegistry, registry
from kitescope.protocol import Diagnostic, DiagnosticSeverity

TEXT = "var a = 1\nvar a = 2\nfun f() number {\n}\n"


@pytest.fixture
def session() -> DocumentSession:
    return DocumentSession()


def _open(session: DocumentSession, tmp_path: Path, text: str = TEXT) -> str:
    uri = path_to_uri(tmp_path / "main.kite")
    session.on_open(uri, text)
    return uri


class TestRegistry:
    """Rule registration."""

    def test_builtin_rules_registered(self) -> None:
        ids = {r.rule_id for r in registry.all()}
        assert {"unused-variable", "undefined-symbol", "unclosed-string", "type-mismatch"} <= ids

    def test_duplicate_rule_id_rejected(self) -> None:
        rules = RuleRegistry()
        rules.register("x", "first")(lambda ctx: [])
        with pytest.raises(ValueError, match="Duplicate lint rule: x"):
            rules.register("x", "second")(lambda ctx: [])

    def test_registration_order_kept(self) -> None:
        rules = RuleRegistry()
        for rule_id in ("b", "a", "c"):
            rules.register(rule_id, rule_id)(lambda ctx: [])
        assert [r.rule_id for r in rules.all()] == ["b", "a", "c"]


class TestLintOps:
    """Running rules over an open document."""

    def test_diagnostics_sorted_by_position(self, session: DocumentSession, tmp_path: Path) -> None:
        uri = _open(session, tmp_path)
        result = LintOps(session).check(uri)
        starts = [d.range.start for d in result.diagnostics]
        assert starts == sorted(starts)
        assert result.has_errors

    def test_disabled_rule_skipped(self, session: DocumentSession, tmp_path: Path) -> None:
        uri = _open(session, tmp_path)
        config = DiagnosticsConfig(disabled_rules=["duplicate-declaration", "missing-return"])
        codes = {d.code for d in LintOps(session, config=config).check(uri).diagnostics}
        assert "duplicate-declaration" not in codes
        assert "missing-return" not in codes

    def test_master_switch(self, session: DocumentSession, tmp_path: Path) -> None:
        uri = _open(session, tmp_path)
        result = LintOps(session, config=DiagnosticsConfig(enabled=False)).check(uri)
        assert result.diagnostics == []

    def test_without_host_cross_file_rules_abstain(self, session: DocumentSession, tmp_path: Path) -> None:
        uri = _open(session, tmp_path, "var a = missing\n")
        codes = {d.code for d in LintOps(session).check(uri).diagnostics}
        assert "undefined-symbol" not in codes

    def test_failing_rule_is_isolated(self, session: DocumentSession, tmp_path: Path) -> None:
        # Given
        uri = _open(session, tmp_path)
        rules = RuleRegistry()

        @rules.register("unused-variable", "raises")
        def _boom(ctx: LintContext) -> list[Diagnostic]:
            raise RuntimeError("boom")

        @rules.register("unclosed-string", "reports")
        def _ok(ctx: LintContext) -> list[Diagnostic]:
            return [ctx.diagnostic(0, 3, "ok", DiagnosticSeverity.INFORMATION, "unclosed-string")]

        # When
        result = LintOps(session, rules=rules).check(uri)

        # Then
        assert result.failed_rules == ["unused-variable"]
        assert [d.message for d in result.diagnostics] == ["ok"]
        assert not result.has_errors

    def test_document_must_be_open(self, session: DocumentSession) -> None:
        with pytest.raises(DocumentError):
            LintOps(session).check("file:///nowhere/main.kite")
