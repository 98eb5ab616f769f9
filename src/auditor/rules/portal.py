# src/auditor/rules/portal.py
from typing import List

from action_ir.model import ActionType
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.model import Issue, IssueFix, Severity

BODY_CONTAINERS = ("document.body", "document.documentElement")

CONCERNS = (
    "Focus management: focus traps may not work correctly",
    "ARIA relationships: aria-labelledby and aria-controls may break",
    "Keyboard navigation: Tab order may not match visual order",
    "Screen readers: content may be announced out of context",
)


def _is_body_container(container: str) -> bool:
    return container in BODY_CONTAINERS or "body" in container


@audit_spec(codes=["portal-accessibility"])
def check_portals(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Content rendered outside its component's place in the tree. Portals into
    the document body are a known pattern and only warned about; any other
    container is an error until it is shown to be set up for accessibility.
    """
    issues = []
    for node in context.actions.find_by_action_type(ActionType.PORTAL):
        container = str(node.metadata.get("container") or "unknown")
        body = _is_body_container(container)
        concerns = "\n".join(f"- {c}" for c in CONCERNS)
        tail = (
            "Recommendation: use a dedicated portal container with proper ARIA attributes."
            if body else
            "Ensure the portal container is properly configured for accessibility."
        )
        issues.append(factory.create(
            context,
            "portal-accessibility",
            Severity.WARNING if body else Severity.ERROR,
            f'Portal renders content into "{container}" outside the parent component hierarchy.\n\n'
            f"{'Potential' if body else 'Critical'} accessibility concerns:\n{concerns}\n\n{tail}",
            node.location,
            ["2.1.1", "2.4.3", "4.1.2"],
            fix=IssueFix(
                description="Render into a dedicated dialog container",
                code=(
                    '<div id="portal-root"></div>\n'
                    '<!-- portal content: <div role="dialog" aria-modal="true" aria-labelledby="..." tabindex="-1"> -->'
                ),
                location=node.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="portal",
    description="Detects content rendered outside its component hierarchy",
    audit_rules=[check_portals],
)
