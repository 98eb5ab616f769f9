# src/auditor/rules/keyboard_navigation.py
from typing import List, Optional

from action_ir.model import ActionNode
from action_ir.tables import ARROW_KEYS, ARROW_NAVIGATION_ROLES, SCREEN_READER_KEYS
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node, nearby
from auditor.model import Issue, IssueFix, Severity

# Proximity windows (source lines) used as a stand-in for "same component".
ESCAPE_WINDOW = 10
ARROW_WINDOW = 20

MODAL_ROLES = ("dialog", "alertdialog")


def _keydown_handlers(context: AuditContext) -> List[ActionNode]:
    return context.actions.find_event_handlers("keydown")


def _has_escape_nearby(context: AuditContext, origin: ActionNode) -> bool:
    return any(n.handles_key("Escape") for n in nearby(_keydown_handlers(context), origin, ESCAPE_WINDOW))


def _node_role(node: ActionNode) -> Optional[str]:
    role = node.metadata.get("role")
    if not role and node.attribute == "role":
        role = node.value
    return role if isinstance(role, str) else None


@audit_spec(codes=["potential-keyboard-trap"])
def check_keyboard_trap(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Tab intercepted with preventDefault and no Escape handler within the window."""
    issues = []
    for node in _keydown_handlers(context):
        if not (node.handles_key("Tab") and node.calls_prevent_default):
            continue
        if _has_escape_nearby(context, node):
            continue
        issues.append(factory.create(
            context,
            "potential-keyboard-trap",
            Severity.WARNING,
            "Potential keyboard trap detected. Tab key is intercepted with preventDefault, but no "
            "Escape key handler found. Users may become trapped and unable to navigate away.",
            node.location,
            ["2.1.2"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description="Add Escape key handler to allow users to exit",
                code=(
                    "element.addEventListener('keydown', (event) => {\n"
                    "  if (event.key === 'Escape') {\n"
                    "    closeComponent();\n"
                    "  }\n"
                    "});"
                ),
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["screen-reader-conflict"])
def check_screen_reader_conflict(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Single character shortcuts without a modifier clash with browse-mode keys."""
    issues = []
    for node in _keydown_handlers(context):
        if node.flag("requiresModifier"):
            continue
        for key in node.keys_handled:
            if len(key) != 1 or key.lower() not in SCREEN_READER_KEYS:
                continue
            issues.append(factory.create(
                context,
                "screen-reader-conflict",
                Severity.WARNING,
                f'Single-character shortcut "{key}" conflicts with screen reader navigation. '
                f"Use a modifier key (Ctrl, Alt) or let users remap the shortcut.",
                node.location,
                ["2.1.4"],
                element_context=context_for_node(context, node),
                fix=IssueFix(
                    description="Require modifier key for shortcut",
                    code=f"if (event.key === '{key}' && (event.ctrlKey || event.altKey)) {{\n  // handle shortcut\n}}",
                    location=node.location,
                ),
            ))
    return issues


@audit_spec(codes=["deprecated-keycode"])
def check_deprecated_keycode(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in context.actions.get_all_event_handlers():
        if not node.is_keyboard_handler:
            continue
        if not (node.flag("usesKeyCode") or node.flag("usesWhich")):
            continue
        prop = "keyCode" if node.flag("usesKeyCode") else "which"
        issues.append(factory.create(
            context,
            "deprecated-keycode",
            Severity.INFO,
            f"Using deprecated event.{prop}. Use event.key instead.",
            node.location,
            ["4.1.2"],
            fix=IssueFix(
                description=f"Replace event.{prop} with event.key",
                code="// 13 -> 'Enter', 27 -> 'Escape', 32 -> ' ', 9 -> 'Tab'\nif (event.key === 'Enter') { ... }",
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["tab-without-shift"])
def check_tab_without_shift(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in _keydown_handlers(context):
        if node.handles_key("Tab") and not node.flag("checksShiftKey"):
            issues.append(factory.create(
                context,
                "tab-without-shift",
                Severity.INFO,
                "Tab key handling doesn't check for Shift modifier. Users expect Shift+Tab to navigate backward.",
                node.location,
                ["2.1.1"],
            ))
    return issues


def _looks_like_modal(node: ActionNode) -> bool:
    selector = (node.element.selector or "").lower()
    binding = (node.element.binding or "").lower()
    return (
        _node_role(node) in MODAL_ROLES
        or "modal" in selector or "dialog" in selector
        or "modal" in binding or "dialog" in binding
    )


@audit_spec(codes=["missing-escape-handler"])
def check_missing_escape_handler(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """One finding per modal-like element key with no Escape keydown handler nearby."""
    issues = []
    seen = set()
    for node in context.actions.nodes:
        if not _looks_like_modal(node) or node.element.key in seen:
            continue
        seen.add(node.element.key)
        if _has_escape_nearby(context, node):
            continue
        issues.append(factory.create(
            context,
            "missing-escape-handler",
            Severity.WARNING,
            "Modal or dialog without Escape key handler. Users expect to be able to press Escape to close modals.",
            node.location,
            ["2.1.1"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description="Add Escape key handler to close modal",
                code="modal.addEventListener('keydown', (event) => {\n  if (event.key === 'Escape') {\n    closeModal();\n  }\n});",
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["missing-arrow-navigation"])
def check_missing_arrow_navigation(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    keydowns = _keydown_handlers(context)
    for node in context.actions.nodes:
        role = _node_role(node)
        if role not in ARROW_NAVIGATION_ROLES:
            continue
        has_arrows = any(
            any(key in ARROW_KEYS for key in n.keys_handled)
            for n in nearby(keydowns, node, ARROW_WINDOW)
        )
        if has_arrows:
            continue
        issues.append(factory.create(
            context,
            "missing-arrow-navigation",
            Severity.INFO,
            f'ARIA widget with role="{role}" is missing arrow key navigation. '
            f"{role} widgets require arrow keys for keyboard interaction.",
            node.location,
            ["2.1.1", "4.1.2"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description=f"Add arrow key navigation for {role}",
                code=(
                    "element.addEventListener('keydown', (event) => {\n"
                    "  switch (event.key) {\n"
                    "    case 'ArrowDown': event.preventDefault(); focusNextItem(); break;\n"
                    "    case 'ArrowUp': event.preventDefault(); focusPreviousItem(); break;\n"
                    "  }\n"
                    "});"
                ),
                location=node.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="keyboard-navigation",
    description="Detects keyboard traps, shortcut conflicts and missing keyboard support in widgets",
    audit_rules=[
        check_keyboard_trap,
        check_screen_reader_conflict,
        check_deprecated_keycode,
        check_tab_without_shift,
        check_missing_escape_handler,
        check_missing_arrow_navigation,
    ],
)
