# tests/auditor/test_engine.py
import logging

import pytest

from auditor.dom.core import (
    AnalysisScope, AnalyzerDefinition, AuditContext, IssueFactory, REASON_DOCUMENT_SCOPE,
    REASON_FILE_ONLY, REASON_FULL, REASON_PARTIAL, audit_spec,
)
from auditor.dom.qngine import QNGINE
from auditor.dom.registry import AnalyzerRegistry
from auditor.model import ConfidenceLevel, Severity


@pytest.fixture
def fresh_registry():
    """Ensures discovery starts from an empty registry and leaves none behind."""
    AnalyzerRegistry.reset()
    yield AnalyzerRegistry
    AnalyzerRegistry.reset()


def _make_issue(context, factory, issue_type="test-issue"):
    return factory.create(
        context, issue_type, Severity.WARNING, "message",
        context.actions.nodes[0].location if len(context.actions) else _location(), ["2.1.1"],
    )


def _location():
    from action_ir.model import SourceLocation
    return SourceLocation(file="x.js", line=1, column=1)


# --- Confidence policy ---

def test_confidence_without_document_is_low(file_ctx):
    confidence = IssueFactory.compute_confidence(file_ctx())
    assert confidence.level == ConfidenceLevel.LOW
    assert confidence.reason == REASON_FILE_ONLY
    assert confidence.tree_completeness == 0.0


def test_confidence_with_element_context_is_high(doc_context, element):
    button = element("button", {"id": "b"})
    context = doc_context(fragments=[button])
    ctx = context.document_model.get_element_context(button)
    confidence = IssueFactory.compute_confidence(context, ctx)
    assert confidence.level == ConfidenceLevel.HIGH
    assert confidence.reason == REASON_FULL
    assert confidence.tree_completeness == pytest.approx(0.7)


def test_confidence_by_scope(doc_context, element):
    document = doc_context(fragments=[element("div")])
    assert IssueFactory.compute_confidence(document).reason == REASON_DOCUMENT_SCOPE
    assert IssueFactory.compute_confidence(document).level == ConfidenceLevel.HIGH

    partial = doc_context(fragments=[element("div")], scope=AnalysisScope.FILE)
    assert IssueFactory.compute_confidence(partial).level == ConfidenceLevel.MEDIUM
    assert IssueFactory.compute_confidence(partial).reason == REASON_PARTIAL


def test_factory_stamps_analyzer_name(file_ctx, node):
    context = file_ctx([node(selector="#a", event="click")])
    issue = _make_issue(context, IssueFactory().bind("demo"))
    assert issue.analyzer == "demo"
    assert issue.to_record()["Analyzer"] == "demo"


def test_invalid_wcag_criterion_is_rejected(file_ctx):
    with pytest.raises(ValueError):
        IssueFactory().create(file_ctx(), "x", Severity.INFO, "m", _location(), ["2.1"])


# --- Definitions and registry ---

def test_definition_collects_codes_from_rules():
    @audit_spec(codes=["b-code", "a-code"])
    def rule(context, factory):
        return []

    definition = AnalyzerDefinition("demo", "Demo analyzer", [rule], possible_codes=["c-code"])
    assert definition.codes == ["a-code", "b-code", "c-code"]


def test_registry_discovers_all_rule_modules(fresh_registry):
    fresh_registry.discover()
    names = [a.name for a in fresh_registry.get_all_analyzers()]
    assert names == [
        "aria-connection", "aria-semantics", "aria-state", "color-contrast", "context-change",
        "event-propagation", "focus-management", "focus-order", "keyboard-navigation", "live-region",
        "modal-dialog", "mouse-only-click", "orphaned-handler", "portal", "timeout", "visibility-focus",
    ]
    codes = fresh_registry.get_all_possible_codes()
    assert "mouse-only-click" in codes
    assert "insufficient-contrast" in codes
    assert codes == sorted(codes)


def test_registry_keeps_first_registration(fresh_registry, caplog):
    first = AnalyzerDefinition("dup", "first")
    second = AnalyzerDefinition("dup", "second")
    fresh_registry.register(first)
    with caplog.at_level(logging.WARNING, logger="auditor.dom.registry"):
        fresh_registry.register(second)
    assert fresh_registry.get("dup") is first
    assert "registered twice" in caplog.text


# --- Engine ---

@pytest.mark.parametrize("parallel", [True, False])
def test_failing_analyzer_is_isolated(parallel, file_ctx, node, caplog):
    """A raising analyzer is logged and contributes nothing; the others still report."""
    def broken(context, factory):
        raise RuntimeError("boom")

    def working(context, factory):
        return [_make_issue(context, factory)]

    engine = QNGINE(
        analyzers=[AnalyzerDefinition("broken", "", [broken]), AnalyzerDefinition("working", "", [working])],
        parallel=parallel,
    )
    with caplog.at_level(logging.ERROR, logger="auditor.dom.qngine"):
        issues = engine.run_audit(file_ctx([node(selector="#a", event="click")]))

    assert [i.analyzer for i in issues] == ["working"]
    assert "Analyzer 'broken' failed: boom" in caplog.text


def test_results_follow_registry_order(file_ctx, node):
    """Output is grouped by analyzer in the order the engine was given them."""
    def make_rule(issue_type):
        def rule(context, factory):
            return [_make_issue(context, factory, issue_type), _make_issue(context, factory, issue_type)]
        return rule

    analyzers = [AnalyzerDefinition(name, "", [make_rule(name)]) for name in ("first", "second", "third")]
    issues = QNGINE(analyzers=analyzers, parallel=True, max_workers=3).run_audit(
        file_ctx([node(selector="#a", event="click")])
    )
    assert [i.type for i in issues] == ["first", "first", "second", "second", "third", "third"]


def test_disabled_analyzers_are_skipped(monkeypatch):
    from actionlens.core.managers import config_manager as cm_module

    def fake_get_nested(path, default=None):
        return ["second"] if path == "analyzers.disabled" else default

    monkeypatch.setattr(cm_module.config_manager, "get_nested", fake_get_nested)
    engine = QNGINE(analyzers=[AnalyzerDefinition("first", ""), AnalyzerDefinition("second", "")])
    assert [a.name for a in engine.analyzers] == ["first"]


def test_full_audit_is_deterministic(doc_context, element, node):
    """Two runs over equivalent input give the same issue sequence."""
    def run():
        fragments = [element("body", children=[
            element("div", {"id": "card", "role": "buton"}, line=2),
            element("input", {"id": "q", "aria-labelledby": "missing"}, line=3),
        ])]
        nodes = [
            node(selector="#card", event="click", line=10),
            node(action_type="attribute-change", selector="#card", attribute="aria-pressed", value="false", line=11),
            node(selector="#sumbit", event="click", line=12),
        ]
        return QNGINE(parallel=True).run_audit(doc_context(nodes, fragments))

    first, second = run(), run()
    assert first
    assert [(i.type, i.location.line, i.message) for i in first] == \
        [(i.type, i.location.line, i.message) for i in second]


def test_empty_context_yields_no_issues():
    assert QNGINE(parallel=False).run_audit(AuditContext()) == []
