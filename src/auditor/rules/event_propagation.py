# src/auditor/rules/event_propagation.py
from typing import List

from action_ir.model import ActionType
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node
from auditor.model import Issue, IssueFix, Severity

IMMEDIATE = "stopImmediatePropagation"


@audit_spec(codes=["stop-immediate-propagation", "stop-propagation"])
def check_stopped_propagation(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    Handlers that stop propagation can starve listeners higher up the tree,
    including assistive technology and global keyboard handlers.
    stopImmediatePropagation also blocks other listeners on the same element,
    so it is reported as an error.
    """
    issues = []
    for node in context.actions.find_by_action_type(ActionType.EVENT_PROPAGATION):
        method = str(node.metadata.get("method") or "stopPropagation")
        event_param = str(node.metadata.get("eventParam") or "event")
        immediate = method == IMMEDIATE

        if immediate:
            message = (
                f"Event handler calls {method}(), which immediately stops all event propagation. "
                f"This can block screen reader event listeners and keyboard navigation completely. "
                f"Use {event_param}.preventDefault() instead if you need to prevent default browser behavior."
            )
        else:
            message = (
                f"Event handler calls {method}(), which prevents parent elements from receiving this event. "
                f"Screen reader listeners and keyboard handlers on parent elements may not fire. "
                f"Prefer {event_param}.preventDefault() and let the event bubble."
            )

        issues.append(factory.create(
            context,
            "stop-immediate-propagation" if immediate else "stop-propagation",
            Severity.ERROR if immediate else Severity.WARNING,
            message,
            node.location,
            ["2.1.1", "4.1.2"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description=f"Replace {method}() with preventDefault()",
                code=f"{event_param}.preventDefault(); // prevents the default action, keeps propagation",
                location=node.location,
            ),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="event-propagation",
    description="Detects handlers that stop event propagation",
    audit_rules=[check_stopped_propagation],
)
