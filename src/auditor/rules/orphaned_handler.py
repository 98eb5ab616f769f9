# src/auditor/rules/orphaned_handler.py
from typing import List

from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.model import Issue, IssueFix, Severity
from auditor.utils.text import closest_matches

MAX_TYPO_DISTANCE = 2


@audit_spec(codes=["orphaned-handler"])
def check_orphaned_id_selectors(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """Handlers targeting an id that does not exist in the merged markup."""
    if not context.has_markup:
        return []

    doc = context.document_model
    known_ids = doc.known_ids()
    issues = []

    for node in doc.orphaned_nodes:
        if not node.element.is_id_selector:
            continue
        missing_id = node.element.selector[1:]
        suggestions = [c for c, _ in closest_matches(missing_id, known_ids, MAX_TYPO_DISTANCE)]

        message = (
            f'{node.event or "event"} handler targets "{node.element.selector}" '
            f"but no element with that id exists in the document."
        )
        fix = None
        if suggestions:
            message += f" Did you mean: {', '.join('#' + s for s in suggestions)}?"
            fix = IssueFix(
                description=f'Change the selector to "#{suggestions[0]}"',
                code=f"document.querySelector('#{suggestions[0]}')",
                location=node.location,
            )

        issues.append(factory.create(
            context,
            "orphaned-handler",
            Severity.WARNING,
            message,
            node.location,
            ["4.1.2"],
            fix=fix,
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="orphaned-handler",
    description="Detects event handlers whose id selector matches no element (likely typos)",
    audit_rules=[check_orphaned_id_selectors],
)
