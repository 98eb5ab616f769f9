# src/auditor/rules/focus_management.py
import re
from typing import List

from action_ir.model import ActionNode
from action_ir.tables import NATURALLY_FOCUSABLE_TAGS
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node, nearby, node_js_reference
from auditor.model import Issue, IssueFix, Severity

# Source-line windows around the mutation or focus call.
FOCUS_CHECK_WINDOW = 5
FOCUS_CALL_WINDOW = 3
RESTORATION_WINDOW = 10

HIDING_PROPERTIES = ("display", "visibility", "hidden")
RESTORATION_MARKERS = ("previousfocus", "previousactive")

_DIALOG_SELECTOR = re.compile(r"#[^#]*dialog", re.IGNORECASE)
_LEADING_TAG = re.compile(r"^[a-zA-Z][a-zA-Z0-9]*")


def _operation(node: ActionNode) -> str:
    return str(node.metadata.get("operation") or "")


def _is_removal(node: ActionNode) -> bool:
    return _operation(node) == "remove"


def _is_hiding(node: ActionNode) -> bool:
    return _operation(node) == "hide" or node.metadata.get("property") in HIDING_PROPERTIES


def _selector_tag(selector: str) -> str:
    match = _LEADING_TAG.match(selector.strip())
    return match.group(0).lower() if match else ""


def _looks_like_dialog(node: ActionNode) -> bool:
    ref = node.element
    return (
        node.metadata.get("role") == "dialog"
        or bool(ref.selector and _DIALOG_SELECTOR.search(ref.selector))
        or "dialog" in (ref.binding or "").lower()
    )


def _reads_active_element(node: ActionNode) -> bool:
    return node.metadata.get("object") == "document.activeElement" or node.metadata.get("property") == "activeElement"


def _has_focus_check_nearby(context: AuditContext, origin: ActionNode) -> bool:
    return any(_reads_active_element(n) for n in nearby(context.actions, origin, FOCUS_CHECK_WINDOW))


def _restores_focus(node: ActionNode) -> bool:
    names = f"{node.element.binding or ''} {node.element.selector or ''}".lower()
    if any(marker in names for marker in RESTORATION_MARKERS):
        return True
    return "previousFocus" in str(node.metadata.get("variable") or "")


def _dom_mutations(context: AuditContext) -> List[ActionNode]:
    return context.actions.get_all_dom_mutations()


def _move_focus_fix(node: ActionNode, action: str, statement: str) -> IssueFix:
    ref = node_js_reference(node)
    return IssueFix(
        description=f"Add focus check before {action} element",
        code=(
            f"const element = {ref};\n"
            f"if (element && element.contains(document.activeElement)) {{\n"
            f"  const nextFocusable = element.previousElementSibling || element.parentElement;\n"
            f"  if (nextFocusable instanceof HTMLElement) {{\n"
            f"    nextFocusable.focus();\n"
            f"  }}\n"
            f"}}\n"
            f"{statement}"
        ),
        location=node.location,
    )


@audit_spec(codes=["removal-without-focus-management"])
def check_removal_without_focus_check(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Elements removed without looking at document.activeElement first."""
    issues = []
    for node in _dom_mutations(context):
        if not _is_removal(node) or _looks_like_dialog(node):
            continue
        if _has_focus_check_nearby(context, node):
            continue
        issues.append(factory.create(
            context,
            "removal-without-focus-management",
            Severity.WARNING,
            "Element removal without focus management. If the removed element (or its children) has focus, "
            "keyboard users will lose their place. Check document.activeElement before removing.",
            node.location,
            ["2.4.3", "2.4.7"],
            element_context=context_for_node(context, node),
            fix=_move_focus_fix(node, "removing", "element.remove();"),
        ))
    return issues


@audit_spec(codes=["hiding-class-without-focus-management", "hiding-without-focus-management"])
def check_hiding_without_focus_check(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in _dom_mutations(context):
        if _is_hiding(node) and not _looks_like_dialog(node):
            if _has_focus_check_nearby(context, node):
                continue
            issues.append(factory.create(
                context,
                "hiding-without-focus-management",
                Severity.WARNING,
                "Element hidden without focus management. If the hidden element (or its children) has focus, "
                "keyboard users will lose their place. Move focus before hiding.",
                node.location,
                ["2.4.3", "2.4.7"],
                element_context=context_for_node(context, node),
                fix=_move_focus_fix(node, "hiding", "element.style.display = 'none';"),
            ))
        elif _operation(node) == "classList" and not _has_focus_check_nearby(context, node):
            issues.append(factory.create(
                context,
                "hiding-class-without-focus-management",
                Severity.INFO,
                "classList operation may hide element without focus management. If removing a class that "
                "makes the element visible, check for focus first.",
                node.location,
                ["2.4.7"],
                element_context=context_for_node(context, node),
            ))
    return issues


@audit_spec(codes=["possibly-non-focusable"])
def check_focus_on_non_focusable(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    .focus() on an element that cannot take focus silently does nothing.

    With markup the resolved element decides; otherwise only selectors that do
    not name a naturally focusable tag are mentioned, as info.
    """
    issues = []
    for node in context.actions.get_all_focus_actions():
        if node.metadata.get("method") == "blur":
            continue
        ctx = context_for_node(context, node)
        if ctx is not None:
            element = ctx.element
            if element.is_focusable:
                continue
            issues.append(factory.create(
                context,
                "possibly-non-focusable",
                Severity.WARNING,
                f"Calling .focus() on non-focusable element <{element.tag}>. This will silently fail. "
                f'Add tabindex="0" to make it focusable, or use a naturally focusable element '
                f"(button, input, a, etc.).",
                node.location,
                ["2.4.3", "4.1.2"],
                element_context=ctx,
                related_locations=[element.location],
                fix=IssueFix(
                    description=f"Make <{element.tag}> focusable by adding tabindex",
                    code=f"{node_js_reference(node)}.setAttribute('tabindex', '0');",
                    location=node.location,
                ),
            ))
            continue

        selector = node.element.selector
        if not selector or _selector_tag(selector) in NATURALLY_FOCUSABLE_TAGS:
            continue
        issues.append(factory.create(
            context,
            "possibly-non-focusable",
            Severity.INFO,
            f'Calling .focus() on element "{selector}". Verify this element is focusable '
            f"(has tabindex or is naturally focusable).",
            node.location,
            ["2.4.3"],
        ))
    return issues


@audit_spec(codes=["standalone-blur"])
def check_standalone_blur(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    focus_actions = context.actions.get_all_focus_actions()
    for node in focus_actions:
        if node.metadata.get("method") != "blur":
            continue
        moves_focus = any(
            n.metadata.get("method") != "blur" for n in nearby(focus_actions, node, FOCUS_CALL_WINDOW)
        )
        if moves_focus:
            continue
        issues.append(factory.create(
            context,
            "standalone-blur",
            Severity.INFO,
            ".blur() called without moving focus to another element. This leaves no focused element, "
            "disorienting keyboard users. Instead of blurring, move focus to a specific element.",
            node.location,
            ["2.4.7"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description="Move focus to specific element instead of blurring",
                code="// Instead of element.blur():\notherElement.focus();",
                location=node.location,
            ),
        ))
    return issues


@audit_spec(codes=["focus-restoration-missing"])
def check_dialog_focus_restoration(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Dialogs closed without returning focus to the element that opened them."""
    issues = []
    for node in _dom_mutations(context):
        if _operation(node) not in ("hide", "remove") or not _looks_like_dialog(node):
            continue
        if any(_restores_focus(n) for n in nearby(context.actions, node, RESTORATION_WINDOW)):
            continue
        issues.append(factory.create(
            context,
            "focus-restoration-missing",
            Severity.WARNING,
            "Modal/dialog closed without focus restoration. Keyboard users will lose their place when the "
            "modal closes. Store document.activeElement before opening and restore it on close.",
            node.location,
            ["2.4.3"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description="Add focus restoration when closing modal",
                code=(
                    "const previousFocus = document.activeElement;\n"
                    "// ... open and later close the dialog ...\n"
                    "if (previousFocus instanceof HTMLElement) {\n"
                    "  previousFocus.focus();\n"
                    "}"
                ),
                location=node.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="focus-management",
    description="Detects focus management issues that can strand keyboard users",
    audit_rules=[
        check_removal_without_focus_check,
        check_hiding_without_focus_check,
        check_focus_on_non_focusable,
        check_standalone_blur,
        check_dialog_focus_restoration,
    ],
)
