# src/auditor/rules/mouse_only_click.py
from typing import List

from action_ir.model import ActionNode
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.document import ElementContext
from auditor.dom.queries import element_js_reference, has_keyboard_handler_for
from auditor.model import Issue, IssueFix, Severity

WCAG = ["2.1.1"]


def _document_fix(ctx: ElementContext, click_handler: ActionNode) -> IssueFix:
    element = ctx.element
    ref = element_js_reference(element)
    if element.tag == "button" or element.explicit_role == "button":
        condition = "event.key === 'Enter' || event.key === ' '"
        body = "    event.preventDefault();\n    // call the click handler logic here\n"
    else:
        condition = "event.key === 'Enter'"
        body = "    // call the click handler logic here\n"
    code = f"{ref}.addEventListener('keydown', (event) => {{\n  if ({condition}) {{\n{body}  }}\n}});"
    return IssueFix(
        description=f"Add keyboard event handler for {element.tag}",
        code=code,
        location=click_handler.location,
    )


def _file_scope_fix(click_handler: ActionNode) -> IssueFix:
    target = click_handler.element.selector or click_handler.element.key
    code = (
        f"// Add keyboard handler for {target}\n"
        f"document.querySelector('{target}').addEventListener('keydown', (event) => {{\n"
        f"  if (event.key === 'Enter') {{\n"
        f"    // call the click handler logic here\n"
        f"  }}\n"
        f"}});"
    )
    return IssueFix(description=f"Add keyboard handler for {target}", code=code, location=click_handler.location)


@audit_spec(codes=["mouse-only-click"])
def check_click_without_keyboard(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Click handlers with no keyboard counterpart on the same element.

    With markup every element is inspected through its merged handlers and
    natively interactive or interactive-role elements are exempt. Without
    markup only the file's own handlers can be compared, so the finding is
    downgraded to a warning.
    """
    if context.has_markup:
        return _check_document(context, factory)
    return _check_file_scope(context, factory)


def _check_document(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    doc = context.document_model
    for ctx in doc.get_interactive_elements():
        element = ctx.element
        if not ctx.has_click_handler or ctx.has_keyboard_handler:
            continue
        if element.is_interactive:
            continue

        click_handler = next(h for h in ctx.js_handlers if h.event == "click")
        issues.append(factory.create(
            context,
            "mouse-only-click",
            Severity.ERROR,
            f"{element.describe()} has click handler but no keyboard handler. "
            f"All interactive elements must be keyboard accessible (WCAG 2.1.1).",
            element.location,
            WCAG,
            element_context=ctx,
            related_locations=[click_handler.location],
            fix=_document_fix(ctx, click_handler),
        ))
    return issues


def _check_file_scope(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    actions = context.actions
    for click_handler in actions.find_event_handlers("click"):
        ref = click_handler.element
        if has_keyboard_handler_for(actions, ref):
            continue
        issues.append(factory.create(
            context,
            "mouse-only-click",
            Severity.WARNING,
            f'Element with selector "{ref.selector or ref.key}" has click handler but no keyboard '
            f"handler (file-scope analysis - may be false positive if handler is in another file)",
            click_handler.location,
            WCAG,
            fix=_file_scope_fix(click_handler),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="mouse-only-click",
    description="Detects click handlers without corresponding keyboard handlers",
    audit_rules=[check_click_without_keyboard],
)
