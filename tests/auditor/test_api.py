# tests/auditor/test_api.py
from actionlens.api import analyze, analyze_records, audit_batch, build_document
from auditor.dom.core import AnalysisScope
from auditor.model import ConfidenceLevel, Severity

CLICK_ON_CARD = {
    "id": "n1",
    "actionType": "event-handler",
    "element": {"selector": "#card"},
    "location": {"file": "card.js", "line": 7, "column": 3},
    "metadata": {"event": "click"},
}


def test_analyze_records_without_markup_is_file_scoped():
    issues = analyze_records(actions=[CLICK_ON_CARD])
    mouse = [i for i in issues if i.type == "mouse-only-click"]
    assert len(mouse) == 1
    assert mouse[0].severity == Severity.WARNING
    assert mouse[0].confidence.level == ConfidenceLevel.LOW
    assert mouse[0].location.file == "card.js"


def test_analyze_records_with_html_reports_with_high_confidence():
    issues = analyze_records(actions=[CLICK_ON_CARD], html='<div id="card">Open</div>')
    mouse = [i for i in issues if i.type == "mouse-only-click"]
    assert len(mouse) == 1
    assert mouse[0].severity == Severity.ERROR
    assert mouse[0].confidence.level == ConfidenceLevel.HIGH
    assert mouse[0].related_locations[0].line == 7


def test_build_document_then_analyze():
    from auditor.dom.core import AuditContext
    doc = build_document(actions=[CLICK_ON_CARD], html='<button id="card">Open</button>')
    assert doc.orphaned_nodes == []
    issues = analyze(AuditContext(document_model=doc, scope=AnalysisScope.DOCUMENT))
    assert "mouse-only-click" not in [i.type for i in issues]


def test_audit_batch_returns_controller(tmp_path):
    controller = audit_batch(
        [{"name": "card", "actions": [CLICK_ON_CARD], "html": '<div id="card">Open</div>'}],
        project="api-test",
        workers=1,
        cache_dir=tmp_path,
        show_progress=False,
    )
    assert controller.summary["summary"]["documents_analyzed"] == 1
    assert controller.summary["duration"] >= 0
    assert (tmp_path / "api-test").is_dir()
