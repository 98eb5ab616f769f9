# src/auditor/rules/visibility_focus.py
from typing import List, Optional

from action_ir.markup import MarkupElement
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import element_js_reference
from auditor.model import Issue, IssueFix, Severity

FOCUS_REASONS = {
    "a": "is a link",
    "button": "is a button",
    "input": "is an input",
    "select": "is a select",
    "textarea": "is a textarea",
}


def focus_reason(element: MarkupElement) -> str:
    if "tabindex" in element.attributes:
        return f'has tabindex="{element.attributes["tabindex"]}"'
    return FOCUS_REASONS.get(element.tag, "is focusable")


def _aria_hidden_source(element: MarkupElement) -> Optional[MarkupElement]:
    for node in [element, *element.ancestors()]:
        if node.attributes.get("aria-hidden") == "true":
            return node
    return None


def _remove_from_tab_order(element: MarkupElement) -> IssueFix:
    return IssueFix(
        description="Remove the element from the tab order while it is hidden",
        code=f"{element_js_reference(element)}.setAttribute('tabindex', '-1');",
        location=element.location,
    )


@audit_spec(codes=["aria-hidden-focusable"])
def check_aria_hidden_focusable(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Focusable elements inside an aria-hidden subtree are unreachable for screen readers but not for Tab."""
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for element in doc.markup.get_focusable_elements():
        source = _aria_hidden_source(element)
        if source is None:
            continue
        ctx = doc.get_element_context(element)
        where = "is marked" if source is element else f"is inside {source.describe()} marked"
        issues.append(factory.create(
            context,
            "aria-hidden-focusable",
            Severity.ERROR,
            f'{element.describe()} is focusable ({focus_reason(element)}) but {where} aria-hidden="true". '
            f'Hidden elements should not be focusable. Add tabindex="-1" to remove from tab order, '
            f"or remove aria-hidden if the element should be accessible (WCAG 4.1.2).",
            element.location,
            ["4.1.2"],
            element_context=ctx,
            related_locations=[h.location for h in ctx.js_handlers],
            fix=_remove_from_tab_order(element),
        ))
    return issues


@audit_spec(codes=["hidden-focusable"])
def check_css_hidden_focusable(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Focusable elements that the cascade hides (display:none, visibility:hidden,
    opacity:0 or the hidden attribute) while staying in the tab order.
    Elements already reported for aria-hidden are skipped.
    """
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for element in doc.markup.get_focusable_elements():
        if _aria_hidden_source(element) is not None:
            continue
        if not doc.style.is_element_hidden(element):
            continue
        issues.append(factory.create(
            context,
            "hidden-focusable",
            Severity.WARNING,
            f"{element.describe()} is focusable ({focus_reason(element)}) but hidden by its styles. "
            f"Keyboard users can tab to an element they cannot see (WCAG 2.4.7, 4.1.2).",
            element.location,
            ["2.4.7", "4.1.2"],
            element_context=doc.get_element_context(element),
            fix=_remove_from_tab_order(element),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="visibility-focus",
    description="Detects elements that are hidden but still reachable with the keyboard",
    audit_rules=[check_aria_hidden_focusable, check_css_hidden_focusable],
)
