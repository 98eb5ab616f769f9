# tests/auditor/test_audit_controller.py
import json
from unittest.mock import MagicMock, call

import pandas as pd
import pytest

from auditor.controllers.audit_controller import EXPORT_COLUMNS, AuditController, _worker_audit_document
from auditor.managers.audit_ignore_manager import AuditIgnoreManager


def _click(selector, line=1, file="app.js"):
    return {
        "id": f"{file}-{line}",
        "actionType": "event-handler",
        "element": {"selector": selector},
        "location": {"file": file, "line": line, "column": 1},
        "metadata": {"event": "click"},
    }


@pytest.fixture
def documents():
    """Three payloads: one clean, one with a mouse-only div, one that fails."""
    return [
        {"name": "clean", "actions": [], "html": "<button>Save</button>"},
        {"name": "card", "actions": [_click("#card", file="card.js")], "html": '<div id="card">Open</div>'},
        {"name": "broken", "actions": [], "scope": "galaxy"},
    ]


def test_worker_reports_issues_and_stats():
    payload = {"name": "card", "actions": [_click("#card")], "html": '<div id="card">Open</div>'}
    result = _worker_audit_document(payload, set(), set())

    assert result["name"] == "card"
    types = [i["type"] for i in result["issues"]]
    assert "mouse-only-click" in types
    assert result["stats"][("mouse-only-click", "mouse-only-click")] == 1
    assert all(row["Document"] == "card" for row in result["export_rows"])


def test_worker_returns_error_payload_on_failure():
    result = _worker_audit_document({"name": "x", "scope": "galaxy"}, set(), set())
    assert result["name"] == "x"
    assert "error" in result


def test_worker_applies_ignore_lists():
    payload = {"name": "card", "actions": [_click("#card")], "html": '<div id="card">Open</div>'}
    by_type = _worker_audit_document(payload, {"mouse-only-click"}, set())
    assert "mouse-only-click" not in [i["type"] for i in by_type["issues"]]

    by_file = _worker_audit_document(payload, set(), {"card.html"})
    assert all(i["location"]["file"] != "card.html" for i in by_file["issues"])


def test_run_audit_aggregates_results(documents):
    controller = AuditController("demo")
    progress = MagicMock()
    summary = controller.run_audit(documents, workers=1, progress_callback=progress)

    assert progress.call_args_list == [call(1, 3), call(2, 3), call(3, 3)]
    assert summary["project"] == "demo"
    assert summary["summary"]["documents_analyzed"] == 3
    assert summary["summary"]["documents_failed"] == 1
    assert controller.failed == ["broken"]
    assert summary["summary"]["total_issues"] == len(controller.get_results())
    assert {"analyzer": "mouse-only-click", "type": "mouse-only-click", "count": 1} in summary["breakdown"]


def test_run_audit_accepts_dataframe(documents):
    """DataFrame rows with missing cells (NaN) are treated as empty."""
    frame = pd.DataFrame(documents)
    controller = AuditController("demo")
    summary = controller.run_audit(frame, workers=1)
    assert summary["summary"]["documents_analyzed"] == 3
    assert controller.failed == ["broken"]


def test_export_and_report(documents, tmp_path):
    controller = AuditController("demo")
    controller.run_audit(documents, workers=1)

    frame = controller.to_dataframe()
    assert list(frame.columns) == EXPORT_COLUMNS
    assert "card" in set(frame["Document"])

    csv_path = controller.export_csv(tmp_path / "out" / "issues.csv")
    assert pd.read_csv(csv_path).shape[0] == len(controller.get_results_for_export())

    report_path = controller.save_report(tmp_path / "report.json")
    with open(report_path) as f:
        assert json.load(f)["summary"]["documents_failed"] == 1


def test_controller_uses_ignore_manager(documents, tmp_path):
    manager = AuditIgnoreManager("demo", tmp_path)
    manager.update_ignore_list("type", "mouse-only-click")
    controller = AuditController("demo", manager)
    controller.run_audit(documents, workers=1)
    assert "mouse-only-click" not in [i.type for i in controller.get_results()]
