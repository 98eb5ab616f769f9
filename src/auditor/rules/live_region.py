# src/auditor/rules/live_region.py
from typing import List

from action_ir.markup import MarkupElement
from action_ir.model import ActionNode
from action_ir.tables import IMPLICIT_LIVE_ROLES, VALID_LIVE_VALUES
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import describe_node_target
from auditor.model import Issue, IssueFix, Severity

WCAG = ["4.1.3"]
TEXT_PROPERTIES = ("textContent", "innerHTML", "innerText")
MAX_ASSERTIVE_REGIONS = 2
LABELLING_ROLES = ("status", "alert", "log")


def live_value(element: MarkupElement) -> str:
    """Explicit aria-live, else the value implied by the role, else "off"."""
    explicit = element.attributes.get("aria-live")
    if explicit:
        return explicit
    return IMPLICIT_LIVE_ROLES.get(element.explicit_role or "", "off")


def is_live_region(element: MarkupElement) -> bool:
    return bool(element.attributes.get("aria-live")) or element.explicit_role in IMPLICIT_LIVE_ROLES


def _live_regions(context: AuditContext) -> List[MarkupElement]:
    return [el for el in context.document_model.get_all_elements() if is_live_region(el)]


def _text_updates(context: AuditContext) -> List[ActionNode]:
    return [
        n for n in context.actions.get_all_dom_mutations()
        if n.metadata.get("property") in TEXT_PROPERTIES
    ]


@audit_spec(codes=["live-region-without-updates"])
def check_live_region_without_updates(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Announcing regions whose content (or a descendant's) is never rewritten."""
    if not context.has_markup:
        return []

    doc = context.document_model
    updated = set()
    for node in _text_updates(context):
        for target in doc.elements_for_node(node):
            updated.add(id(target))
            updated.update(id(a) for a in target.ancestors())

    issues = []
    for element in _live_regions(context):
        value = live_value(element)
        if value == "off" or id(element) in updated:
            continue
        region_id = element.element_id or "status"
        issues.append(factory.create(
            context,
            "live-region-without-updates",
            Severity.WARNING,
            f'Element has aria-live="{value}" but content is never updated dynamically. Live regions should only '
            f"be used when content changes will be announced to screen readers. If this is static content, "
            f"remove aria-live.",
            element.location,
            WCAG,
            element_context=doc.get_element_context(element),
            fix=IssueFix(
                description="Add DOM update logic or remove aria-live",
                code=(
                    f"const statusRegion = document.getElementById('{region_id}');\n"
                    f"function updateStatus(message) {{\n"
                    f"  statusRegion.textContent = message;\n"
                    f"}}"
                ),
                location=element.location,
            ),
        ))
    return issues


@audit_spec(codes=["updates-without-live-region"])
def check_updates_without_live_region(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for node in _text_updates(context):
        targets = doc.elements_for_node(node)
        if not targets:
            continue
        target = targets[0]
        if any(is_live_region(el) for el in [target, *target.ancestors()]):
            continue
        prop = node.metadata.get("property")
        issues.append(factory.create(
            context,
            "updates-without-live-region",
            Severity.ERROR,
            f"Dynamic content update detected ({prop}) on {describe_node_target(node)} but the element is not "
            f"in an ARIA live region. Screen readers won't announce the change. Add aria-live=\"polite\" to this "
            f'element or a parent container for status messages, or aria-live="assertive" for urgent alerts.',
            node.location,
            WCAG,
            element_context=doc.get_element_context(target),
            related_locations=[target.location],
            fix=IssueFix(
                description="Add aria-live to announce updates",
                code=f'<{target.tag} role="status" aria-live="polite" aria-atomic="true">',
                location=target.location,
            ),
        ))
    return issues


@audit_spec(codes=["invalid-live-region-value"])
def check_invalid_live_value(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for element in _live_regions(context):
        value = element.attributes.get("aria-live")
        if not value or value in VALID_LIVE_VALUES:
            continue
        issues.append(factory.create(
            context,
            "invalid-live-region-value",
            Severity.ERROR,
            f'Invalid aria-live value: "{value}". Valid values are: "polite" (announce when user is idle), '
            f'"assertive" (interrupt immediately), or "off" (disable announcements). Invalid values are '
            f"ignored by browsers.",
            element.location,
            WCAG,
            element_context=doc.get_element_context(element),
            fix=IssueFix(description="Use valid aria-live value", code='aria-live="polite"', location=element.location),
        ))
    return issues


@audit_spec(codes=["assertive-overuse"])
def check_assertive_overuse(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """A single finding, anchored at the first assertive region."""
    if not context.has_markup:
        return []

    assertive = [el for el in _live_regions(context) if live_value(el) == "assertive"]
    if len(assertive) <= MAX_ASSERTIVE_REGIONS:
        return []

    first = assertive[0]
    return [factory.create(
        context,
        "assertive-overuse",
        Severity.WARNING,
        f'Multiple aria-live="assertive" regions detected ({len(assertive)} total). Assertive live regions '
        f'interrupt the user immediately and should be rare. Most status messages should use aria-live="polite".',
        first.location,
        WCAG,
        related_locations=[el.location for el in assertive[1:]],
        fix=IssueFix(
            description="Reduce assertive regions, use polite instead",
            code='<div aria-live="polite" role="status"></div>',
            location=first.location,
        ),
    )]


@audit_spec(codes=["live-region-label-missing"])
def check_live_region_label(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    if not context.has_markup:
        return []

    doc = context.document_model
    issues = []
    for element in _live_regions(context):
        value = live_value(element)
        if value == "off":
            continue
        attrs = element.attributes
        if attrs.get("aria-label") or attrs.get("aria-labelledby") or element.explicit_role in LABELLING_ROLES:
            continue
        issues.append(factory.create(
            context,
            "live-region-label-missing",
            Severity.WARNING,
            f'Live region has aria-live="{value}" but no accessible label. Screen readers will announce content '
            f"changes but users won't know what region it is. Add role=\"status\" or role=\"alert\", or use "
            f"aria-label to identify the region.",
            element.location,
            WCAG,
            element_context=doc.get_element_context(element),
            fix=IssueFix(
                description="Add role or aria-label to identify region",
                code=f'<{element.tag} aria-live="{value}" role="status">',
                location=element.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="live-region",
    description="Detects misused, missing or unlabelled ARIA live regions",
    audit_rules=[
        check_invalid_live_value,
        check_live_region_without_updates,
        check_updates_without_live_region,
        check_assertive_overuse,
        check_live_region_label,
    ],
)
