# src/auditor/rules/aria_connection.py
from typing import List, Optional

from action_ir.model import SourceLocation
from action_ir.tables import ARIA_REFERENCE_ATTRIBUTES
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node
from auditor.model import Issue, IssueFix, Severity
from auditor.utils.text import closest_matches

WCAG = ["1.3.1", "4.1.2"]


def _message(subject: str, attribute: str, ref_id: str) -> str:
    return (
        f'{subject} has {attribute}="{ref_id}" but element with id="{ref_id}" does not exist. '
        f"ARIA relationships must reference valid elements (WCAG 1.3.1, 4.1.2)."
    )


def _suggestion(ref_id: str, known_ids: List[str], attribute: str, location: SourceLocation) -> Optional[IssueFix]:
    matches = closest_matches(ref_id, known_ids)
    if not matches:
        return None
    best = matches[0][0]
    return IssueFix(
        description=f'Reference the existing element "{best}"',
        code=f'{attribute}="{best}"',
        location=location,
    )


@audit_spec(codes=["missing-aria-connection"])
def check_missing_references(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Id references in ARIA relationship attributes that point at nothing.
    Covers both markup attributes and attributes set at runtime.
    """
    if not context.has_markup:
        return []

    doc = context.document_model
    known_ids = doc.known_ids()
    issues = []

    for element in doc.get_all_elements():
        for attribute in ARIA_REFERENCE_ATTRIBUTES:
            for ref_id in element.attributes.get(attribute, "").split():
                if doc.get_element_by_id(ref_id) is not None:
                    continue
                issues.append(factory.create(
                    context,
                    "missing-aria-connection",
                    Severity.ERROR,
                    _message(element.describe(), attribute, ref_id),
                    element.location,
                    WCAG,
                    element_context=doc.get_element_context(element),
                    fix=_suggestion(ref_id, known_ids, attribute, element.location),
                ))

    for node in context.actions.get_all_attribute_changes():
        if node.attribute not in ARIA_REFERENCE_ATTRIBUTES or not isinstance(node.value, str):
            continue
        for ref_id in node.value.split():
            if doc.get_element_by_id(ref_id) is not None:
                continue
            issues.append(factory.create(
                context,
                "missing-aria-connection",
                Severity.ERROR,
                _message(f"Element {node.element.key}", node.attribute, ref_id),
                node.location,
                WCAG,
                element_context=context_for_node(context, node),
                fix=_suggestion(ref_id, known_ids, node.attribute, node.location),
            ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="aria-connection",
    description="Detects ARIA relationship attributes that reference non-existent elements",
    audit_rules=[check_missing_references],
)
