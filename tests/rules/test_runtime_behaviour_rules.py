# tests/rules/test_runtime_behaviour_rules.py
import pytest

from auditor.dom.core import IssueFactory
from auditor.model import ConfidenceLevel, Severity
from auditor.rules import context_change, event_propagation, focus_management, portal, timeout


def _types(issues):
    return [i.type for i in issues]


def _mutation(node, line, **kwargs):
    return node(action_type="dom-mutation", line=line, **kwargs)


def _timer(node, source, line=1, api="setTimeout", **kwargs):
    return node(action_type="timer", binding="window", line=line, apiCall=api, sourceCode=source, **kwargs)


# --- focus management ---

def test_removal_without_active_element_check(file_ctx, node):
    context = file_ctx([_mutation(node, 10, selector="#toast", operation="remove")])
    issues = focus_management.check_removal_without_focus_check(context, IssueFactory())
    assert _types(issues) == ["removal-without-focus-management"]
    assert issues[0].wcag_criteria == ["2.4.3", "2.4.7"]
    assert "document.querySelector('#toast')" in issues[0].fix.code


def test_active_element_check_nearby_clears_removal(file_ctx, node):
    context = file_ctx([
        node(action_type="attribute-change", binding="current", object="document.activeElement", line=8),
        _mutation(node, 10, selector="#toast", operation="remove"),
    ])
    assert focus_management.check_removal_without_focus_check(context, IssueFactory()) == []


def test_hiding_and_class_changes(file_ctx, node):
    context = file_ctx([
        _mutation(node, 3, selector="#menu", property="display", value="none"),
        _mutation(node, 30, selector="#panel", operation="classList", method="remove"),
        _mutation(node, 60, selector="#loginDialog", operation="hide"),
    ])
    issues = focus_management.check_hiding_without_focus_check(context, IssueFactory())
    assert _types(issues) == ["hiding-without-focus-management", "hiding-class-without-focus-management"]
    assert issues[1].severity == Severity.INFO


def test_dialog_close_needs_focus_restoration(file_ctx, node):
    closing = _mutation(node, 20, selector="#loginDialog", operation="hide")
    issues = focus_management.check_dialog_focus_restoration(file_ctx([closing]), IssueFactory())
    assert _types(issues) == ["focus-restoration-missing"]

    restored = file_ctx([closing, node(action_type="focus-change", binding="previousFocus", method="focus", line=24)])
    assert focus_management.check_dialog_focus_restoration(restored, IssueFactory()) == []


def test_standalone_blur(file_ctx, node):
    lonely = node(action_type="focus-change", binding="search", method="blur", line=5)
    assert _types(focus_management.check_standalone_blur(file_ctx([lonely]), IssueFactory())) == ["standalone-blur"]

    moved = file_ctx([lonely, node(action_type="focus-change", binding="results", method="focus", line=6)])
    assert focus_management.check_standalone_blur(moved, IssueFactory()) == []


def test_focus_on_non_focusable_markup_element(doc_context, element, node):
    panel = element("div", {"id": "panel"}, line=7)
    field = element("input", {"id": "name"})
    context = doc_context(
        nodes=[
            node(action_type="focus-change", selector="#panel", method="focus", line=12),
            node(action_type="focus-change", selector="#name", method="focus", line=13),
        ],
        fragments=[element("main", children=[panel, field])],
    )
    issues = focus_management.check_focus_on_non_focusable(context, IssueFactory())
    assert len(issues) == 1
    assert issues[0].severity == Severity.WARNING
    assert issues[0].confidence.level == ConfidenceLevel.HIGH
    assert issues[0].related_locations[0].line == 7
    assert issues[0].fix.code == "document.querySelector('#panel').setAttribute('tabindex', '0');"


def test_focus_without_markup_is_info_unless_selector_names_focusable_tag(file_ctx, node):
    context = file_ctx([
        node(action_type="focus-change", selector="#panel", method="focus", line=1),
        node(action_type="focus-change", selector="input.search", method="focus", line=2),
        node(action_type="focus-change", selector="#nav a", method="focus", line=3),
    ])
    issues = focus_management.check_focus_on_non_focusable(context, IssueFactory())
    assert [i.location.line for i in issues] == [1, 3]
    assert all(i.severity == Severity.INFO for i in issues)


# --- context change ---

def test_navigation_on_change_and_on_focus(file_ctx, node):
    context = file_ctx([
        node(action_type="navigation-change", binding="countrySelect", method="href", triggerEvent="change", line=4),
        node(action_type="navigation-change", binding="promo", method="assign", triggerEvent="focus", line=9),
        node(action_type="navigation-change", binding="go", method="assign", triggerEvent="click", line=14),
    ])
    issues = context_change.DEFINITION.analyze(context)
    assert _types(issues) == ["unexpected-navigation", "unexpected-navigation"]
    assert issues[0].wcag_criteria == ["3.2.2"]
    assert "Navigation (href assignment) in input/change handler" in issues[0].message
    assert issues[1].wcag_criteria == ["3.2.1"]
    assert "(location.assign()) in focus handler" in issues[1].message


def test_form_submit_on_input(file_ctx, node):
    context = file_ctx([
        node(action_type="navigation-change", binding="filters", method="submit", triggerEvent="input", line=2),
        node(action_type="navigation-change", binding="filters", method="submit", triggerEvent="click", line=6),
    ])
    issues = context_change.DEFINITION.analyze(context)
    assert _types(issues) == ["unexpected-form-submit"]
    assert issues[0].location.line == 2


# --- timeouts ---

def test_redirect_timer(file_ctx, node):
    context = file_ctx([_timer(node, "setTimeout(() => { window.location.href = '/home'; }, 5000)")])
    issues = timeout.check_automatic_redirect(context, IssueFactory())
    assert _types(issues) == ["automatic-redirect-no-control"]
    assert "with 5 seconds delay" in issues[0].message


@pytest.mark.parametrize("source, severity", [
    ("setTimeout(() => logout(), 2 * 60 * 1000)", Severity.ERROR),
    ("setTimeout(expireSession, 30 * 60 * 1000)", Severity.WARNING),
])
def test_session_timeout_severity_depends_on_length(file_ctx, node, source, severity):
    issues = timeout.check_session_timeout(file_ctx([_timer(node, source)]), IssueFactory())
    assert _types(issues) == ["session-timeout-no-warning"]
    assert issues[0].severity == severity


def test_plain_set_timeout_is_not_a_session_timeout(file_ctx, node):
    context = file_ctx([_timer(node, "setTimeout(showTooltip, 300)")])
    assert timeout.DEFINITION.analyze(context) == []


def test_countdown_and_inactivity(file_ctx, node):
    context = file_ctx([
        _timer(node, "setInterval(updateCountdown, 1000)", line=3, api="setInterval", timeoutDuration=1000),
        _timer(node, "setTimeout(onIdle, 12 * 60 * 1000)", line=8),
        node(action_type="timer", binding="window", apiCall="clearInterval", line=20),
    ])
    issues = timeout.check_time_limits(context, IssueFactory())
    assert _types(issues) == ["countdown-timer-no-extension", "inactivity-timeout-too-short"]
    assert "(12 minutes, 0.2 hours)" in issues[1].message
    assert timeout.check_uncleared_intervals(context, IssueFactory()) == []


def test_interval_without_clear(file_ctx, node):
    context = file_ctx([_timer(node, "setInterval(refreshFeed, 10000)", api="setInterval")])
    issues = timeout.check_uncleared_intervals(context, IssueFactory())
    assert _types(issues) == ["uncontrolled-auto-update"]
    assert issues[0].wcag_criteria == ["2.2.2"]


def test_duration_helpers(node):
    assert timeout.duration_ms(_timer(node, "", timeoutDuration="2500")) == 2500
    assert timeout.duration_ms(_timer(node, "setTimeout(fn, 750)")) == 750
    assert timeout.duration_ms(_timer(node, "setTimeout(fn, delay)")) is None
    assert timeout.format_duration(90 * 60 * 1000) == "1.5 hours"


# --- propagation and portals ---

def test_stopped_propagation(file_ctx, node):
    context = file_ctx([
        node(action_type="event-propagation", binding="row", method="stopPropagation", eventParam="e", line=3),
        node(action_type="event-propagation", binding="cell", method="stopImmediatePropagation", line=7),
    ])
    issues = event_propagation.DEFINITION.analyze(context)
    assert _types(issues) == ["stop-propagation", "stop-immediate-propagation"]
    assert [i.severity for i in issues] == [Severity.WARNING, Severity.ERROR]
    assert issues[0].fix.code.startswith("e.preventDefault();")


def test_portal_container_decides_severity(file_ctx, node):
    context = file_ctx([
        node(action_type="portal", binding="Modal", container="document.body", line=2),
        node(action_type="portal", binding="Tooltip", container="tooltipRoot", line=9),
    ])
    issues = portal.DEFINITION.analyze(context)
    assert _types(issues) == ["portal-accessibility", "portal-accessibility"]
    assert [i.severity for i in issues] == [Severity.WARNING, Severity.ERROR]
    assert 'into "tooltipRoot"' in issues[1].message
