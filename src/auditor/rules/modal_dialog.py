# src/auditor/rules/modal_dialog.py
import re
from typing import List

from action_ir.markup import MarkupElement
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.document import is_global_target
from auditor.dom.queries import element_js_reference
from auditor.model import Issue, IssueFix, Severity

DIALOG_ROLES = ("dialog", "alertdialog")
MODAL_NAME_RE = re.compile(r"modal|dialog|overlay|popup|lightbox", re.IGNORECASE)
CLOSE_RE = re.compile(r"close|dismiss|cancel|×|✕", re.IGNORECASE)
ESCAPE_EVENTS = ("keydown", "keypress")


def find_modals(context: AuditContext) -> List[MarkupElement]:
    """
    Elements with a dialog role, plus elements whose id or class looks like a
    modal and that have script behaviour attached.
    """
    doc = context.document_model
    modals = []
    for element in doc.get_all_elements():
        if element.explicit_role in DIALOG_ROLES:
            modals.append(element)
            continue
        names = f"{element.attributes.get('class', '')} {element.element_id or ''}"
        if MODAL_NAME_RE.search(names) and doc.handlers_for(element):
            modals.append(element)
    return modals


def _has_escape_handler(context: AuditContext, modal: MarkupElement) -> bool:
    """Escape handled on the modal itself or by a document/window level key handler."""
    for handler in context.document_model.handlers_for(modal):
        if handler.event in ESCAPE_EVENTS and handler.handles_key("Escape"):
            return True
    for handler in context.actions.get_all_event_handlers():
        if handler.event in ESCAPE_EVENTS and is_global_target(handler) and handler.handles_key("Escape"):
            return True
    return False


def _has_close_button(modal: MarkupElement) -> bool:
    for el in modal.iter_tree():
        if el is modal:
            continue
        if el.tag != "button" and el.explicit_role != "button":
            continue
        haystack = " ".join((el.attributes.get("class", ""), el.attributes.get("aria-label", ""), el.text()))
        if CLOSE_RE.search(haystack):
            return True
    return False


def _set_attribute_fix(modal: MarkupElement, attribute: str, value: str, description: str) -> IssueFix:
    return IssueFix(
        description=description,
        code=f"{element_js_reference(modal)}.setAttribute('{attribute}', '{value}');",
        location=modal.location,
    )


@audit_spec(codes=["modal-missing-role", "modal-missing-aria-modal", "modal-missing-label"])
def check_modal_semantics(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for modal in find_modals(context):
        ctx = doc.get_element_context(modal)
        if modal.explicit_role not in DIALOG_ROLES:
            issues.append(factory.create(
                context,
                "modal-missing-role",
                Severity.ERROR,
                f'{modal.describe()} appears to be a modal but lacks role="dialog" or role="alertdialog". '
                f"Screen readers need this to announce it properly.",
                modal.location,
                ["4.1.2"],
                element_context=ctx,
                fix=_set_attribute_fix(modal, "role", "dialog", 'Add role="dialog" to modal element'),
            ))
        if modal.attributes.get("aria-modal") != "true":
            issues.append(factory.create(
                context,
                "modal-missing-aria-modal",
                Severity.WARNING,
                'Modal lacks aria-modal="true". This tells screen readers that content behind the modal is inert.',
                modal.location,
                ["4.1.2"],
                element_context=ctx,
                fix=_set_attribute_fix(modal, "aria-modal", "true", 'Add aria-modal="true" to modal'),
            ))
        if not (modal.attributes.get("aria-labelledby") or modal.attributes.get("aria-label")):
            issues.append(factory.create(
                context,
                "modal-missing-label",
                Severity.ERROR,
                "Modal lacks aria-labelledby or aria-label. Screen readers need a descriptive label to "
                "announce the modal's purpose.",
                modal.location,
                ["4.1.2"],
                element_context=ctx,
                fix=_set_attribute_fix(modal, "aria-label", "Dialog", "Add aria-label to modal"),
            ))
    return issues


@audit_spec(codes=["modal-no-escape-handler", "modal-no-close-button"])
def check_modal_dismissal(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Keyboard users must be able to leave a modal."""
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for modal in find_modals(context):
        ctx = doc.get_element_context(modal)
        if not _has_escape_handler(context, modal):
            issues.append(factory.create(
                context,
                "modal-no-escape-handler",
                Severity.ERROR,
                "Modal cannot be closed with Escape key. Users must be able to exit the modal using the "
                "keyboard alone (WCAG 2.1.2).",
                modal.location,
                ["2.1.2"],
                element_context=ctx,
                fix=IssueFix(
                    description="Close the modal on Escape",
                    code=(
                        "document.addEventListener('keydown', (event) => {\n"
                        "  if (event.key === 'Escape') {\n"
                        "    closeModal();\n"
                        "  }\n"
                        "});"
                    ),
                    location=modal.location,
                ),
            ))
        if not _has_close_button(modal):
            issues.append(factory.create(
                context,
                "modal-no-close-button",
                Severity.WARNING,
                "Modal lacks a visible close button. Users need a clear way to dismiss the modal besides "
                "pressing Escape.",
                modal.location,
                ["2.1.2"],
                element_context=ctx,
            ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="modal-dialog",
    description="Detects modal dialogs without the semantics or keyboard exits assistive technology needs",
    audit_rules=[check_modal_semantics, check_modal_dismissal],
)
