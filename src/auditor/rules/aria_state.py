# src/auditor/rules/aria_state.py
from typing import Dict, List, Tuple

from action_ir.model import ActionNode
from action_ir.tables import ARIA_STATE_ATTRIBUTES
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node
from auditor.model import Issue, IssueFix, Severity


@audit_spec(codes=["static-aria-state"])
def check_static_aria_state(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    ARIA state attributes set exactly once on an element are never updated.
    Two or more writes are never flagged, whatever the values.
    """
    groups: Dict[Tuple[str, str], List[ActionNode]] = {}
    for node in context.actions.get_all_attribute_changes():
        if node.attribute in ARIA_STATE_ATTRIBUTES:
            groups.setdefault((node.element.key, node.attribute), []).append(node)

    issues = []
    for (key, attribute), nodes in groups.items():
        if len(nodes) != 1:
            continue
        node = nodes[0]
        issues.append(factory.create(
            context,
            "static-aria-state",
            Severity.WARNING,
            f'{attribute} is set to "{node.value}" on {key} but never updated. '
            f"State attributes must change when the widget state changes.",
            node.location,
            ["4.1.2"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description=f"Update {attribute} when the state changes",
                code=(
                    f"element.addEventListener('click', () => {{\n"
                    f"  const current = element.getAttribute('{attribute}') === 'true';\n"
                    f"  element.setAttribute('{attribute}', String(!current));\n"
                    f"}});"
                ),
                location=node.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="aria-state",
    description="Detects ARIA state attributes that are set once and never updated",
    audit_rules=[check_static_aria_state],
)
