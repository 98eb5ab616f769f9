# src/auditor/rules/context_change.py
from typing import List

from action_ir.model import ActionNode, ActionType
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node
from auditor.model import Issue, IssueFix, Severity

INPUT_EVENTS = ("input", "change")
FOCUS_EVENTS = ("focus", "focusin")


def _navigations(context: AuditContext) -> List[ActionNode]:
    return context.actions.find_by_action_type(ActionType.NAVIGATION_CHANGE)


def _trigger(node: ActionNode) -> str:
    """Event of the handler the navigation runs in ('' at top level)."""
    return str(node.metadata.get("triggerEvent") or "")


def _is_form_submit(node: ActionNode) -> bool:
    return node.metadata.get("method") == "submit"


def _navigation_type(node: ActionNode) -> str:
    kind = node.metadata.get("navigationType")
    if kind:
        return str(kind)
    method = node.metadata.get("method")
    if method in ("assign", "replace", "reload"):
        return f"location.{method}()"
    return f"{method or 'location'} assignment"


@audit_spec(codes=["unexpected-form-submit"])
def check_submit_on_input(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in _navigations(context):
        if not _is_form_submit(node) or _trigger(node) not in INPUT_EVENTS:
            continue
        issues.append(factory.create(
            context,
            "unexpected-form-submit",
            Severity.WARNING,
            f"Form submission in {_trigger(node)} handler - unexpected context change that may disorient users. "
            f"Form submission should be triggered by explicit user action (button click).",
            node.location,
            ["3.2.2"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description="Submit from an explicit button instead of on input",
                code='<button type="submit">Submit</button>',
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["unexpected-navigation"])
def check_navigation_on_input_or_focus(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Navigation started by input/change (3.2.2) or by focus (3.2.1) rather
    than by an explicit activation.
    """
    issues = []
    for node in _navigations(context):
        if _is_form_submit(node):
            continue
        trigger = _trigger(node)
        if trigger in INPUT_EVENTS:
            criterion, where = "3.2.2", "input/change handler"
            advice = "Navigation should be triggered by explicit user action (button/link click)"
        elif trigger in FOCUS_EVENTS:
            criterion, where = "3.2.1", "focus handler"
            advice = "Navigation should not occur automatically when an element receives focus"
        else:
            continue
        issues.append(factory.create(
            context,
            "unexpected-navigation",
            Severity.WARNING,
            f"Navigation ({_navigation_type(node)}) in {where} - unexpected context change. {advice}.",
            node.location,
            [criterion],
            element_context=context_for_node(context, node),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="context-change",
    description="Detects navigation and form submission triggered by input or focus",
    audit_rules=[check_submit_on_input, check_navigation_on_input_or_focus],
)
