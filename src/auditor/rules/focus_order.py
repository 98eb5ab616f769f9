# src/auditor/rules/focus_order.py
from collections import defaultdict
from typing import Dict, List

from action_ir.markup import MarkupElement
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node, element_js_reference
from auditor.model import Issue, IssueFix, Severity

WCAG = ["2.4.3"]


def _positive_tabindex_elements(context: AuditContext) -> List[MarkupElement]:
    doc = context.document_model
    return [el for el in doc.markup.get_focusable_elements() if (el.tabindex or 0) > 0]


@audit_spec(codes=["positive-tabindex"])
def check_positive_tabindex(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    if context.has_markup:
        doc = context.document_model
        for element in _positive_tabindex_elements(context):
            issues.append(factory.create(
                context,
                "positive-tabindex",
                Severity.WARNING,
                f'Element <{element.tag}> uses positive tabindex="{element.tabindex}". Positive tabindex values '
                f'create unpredictable focus order and should be avoided. Use tabindex="0" instead (WCAG 2.4.3).',
                element.location,
                WCAG,
                element_context=doc.get_element_context(element),
                fix=IssueFix(
                    description='Use tabindex="0" and order the markup instead',
                    code=f"{element_js_reference(element)}.setAttribute('tabindex', '0');",
                    location=element.location,
                ),
            ))

    # tabindex assigned at runtime
    for node in context.actions.get_all_attribute_changes():
        if node.attribute != "tabindex":
            continue
        try:
            value = int(str(node.value).strip())
        except ValueError:
            continue
        if value <= 0:
            continue
        issues.append(factory.create(
            context,
            "positive-tabindex",
            Severity.WARNING,
            f'Element {node.element.key} is given positive tabindex="{value}" at runtime. Positive tabindex '
            f'values create unpredictable focus order and should be avoided. Use tabindex="0" instead (WCAG 2.4.3).',
            node.location,
            WCAG,
            element_context=context_for_node(context, node),
        ))
    return issues


@audit_spec(codes=["duplicate-tabindex"])
def check_duplicate_tabindex(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Each element sharing a positive tabindex with another one is reported."""
    if not context.has_markup:
        return []

    doc = context.document_model
    groups: Dict[int, List[MarkupElement]] = defaultdict(list)
    for element in _positive_tabindex_elements(context):
        groups[element.tabindex].append(element)

    issues = []
    for tabindex, elements in groups.items():
        if len(elements) < 2:
            continue
        for element in elements:
            others = [e for e in elements if e is not element]
            described = ", ".join(f"<{e.tag}> at {e.location.file}:{e.location.line}" for e in others)
            issues.append(factory.create(
                context,
                "duplicate-tabindex",
                Severity.ERROR,
                f'Element <{element.tag}> has tabindex="{tabindex}" which is also used by: {described}. '
                f"Multiple elements with the same positive tabindex create ambiguous focus order (WCAG 2.4.3).",
                element.location,
                WCAG,
                element_context=doc.get_element_context(element),
                related_locations=[e.location for e in others],
            ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="focus-order",
    description="Detects positive and duplicated tabindex values that scramble focus order",
    audit_rules=[check_positive_tabindex, check_duplicate_tabindex],
)
