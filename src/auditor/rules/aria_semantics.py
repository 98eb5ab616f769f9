# src/auditor/rules/aria_semantics.py
from typing import Dict, List, Set

from action_ir.model import ActionNode
from action_ir.tables import (
    ARIA_DEFAULT_VALUES,
    EXPECTED_ROLE_HANDLERS,
    INTERACTIVE_ROLES,
    REQUIRED_ARIA_ATTRIBUTES,
    VALID_ROLES,
    VALID_ROLES_ORDERED,
)
from auditor.dom.core import AnalyzerDefinition, AuditContext, IssueFactory, audit_spec
from auditor.dom.queries import context_for_node, element_js_reference
from auditor.model import Issue, IssueFix, Severity

MAX_ROLE_SUGGESTIONS = 3
DEFAULT_EXPECTED_HANDLERS = ("click", "keydown")


def _role_nodes(context: AuditContext) -> List[ActionNode]:
    return [n for n in context.actions.get_all_attribute_changes() if n.attribute == "role"]


def _similar_roles(value: str) -> List[str]:
    lowered = value.lower()
    similar = [r for r in VALID_ROLES_ORDERED if lowered in r or r in lowered]
    return similar[:MAX_ROLE_SUGGESTIONS]


def _attributes_by_key(context: AuditContext) -> Dict[str, Set[str]]:
    found: Dict[str, Set[str]] = {}
    for node in context.actions.get_all_attribute_changes():
        if node.attribute:
            found.setdefault(node.element.key, set()).add(node.attribute)
    return found


def _required_fix(missing: List[str], target: str, location) -> IssueFix:
    lines = [
        f"{target}.setAttribute('{attr}', '{ARIA_DEFAULT_VALUES.get(attr, 'value')}');"
        for attr in missing
    ]
    return IssueFix(
        description=f"Add required ARIA attributes: {', '.join(missing)}",
        code="\n".join(lines),
        location=location,
    )


@audit_spec(codes=["invalid-role"])
def check_invalid_role(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    issues = []
    for node in _role_nodes(context):
        value = node.value
        if not isinstance(value, str) or value in VALID_ROLES:
            continue
        message = f'Invalid ARIA role "{value}".'
        similar = _similar_roles(value)
        fix = None
        if similar:
            message += f" Did you mean: {', '.join(similar)}?"
            fix = IssueFix(
                description=f'Use the valid role "{similar[0]}"',
                code=f"element.setAttribute('role', '{similar[0]}');",
                location=node.location,
            )
        issues.append(factory.create(
            context,
            "invalid-role",
            Severity.ERROR,
            message,
            node.location,
            ["4.1.2"],
            element_context=context_for_node(context, node),
            fix=fix,
        ))
    return issues


@audit_spec(codes=["interactive-role-static"])
def check_interactive_role_static(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """
    An interactive role promises behaviour. Elements given one at runtime
    without any event handler, and markup elements declaring one without any
    merged handler, are reported.
    """
    issues = []
    actions = context.actions
    handler_keys = {n.element.key for n in actions.get_all_event_handlers()}
    reported: Set[str] = set()

    for node in _role_nodes(context):
        role = node.value
        key = node.element.key
        if role not in INTERACTIVE_ROLES or key in handler_keys or key in reported:
            continue
        reported.add(key)
        expected = EXPECTED_ROLE_HANDLERS.get(role, DEFAULT_EXPECTED_HANDLERS)
        issues.append(factory.create(
            context,
            "interactive-role-static",
            Severity.ERROR,
            f'Element {key} has interactive role "{role}" but no event handlers. '
            f"Expected handlers: {', '.join(expected)}.",
            node.location,
            ["2.1.1", "4.1.2"],
            element_context=context_for_node(context, node),
            fix=IssueFix(
                description=f"Add {' and '.join(expected)} handlers",
                code="\n".join(f"element.addEventListener('{event}', handle{event.capitalize()});" for event in expected),
                location=node.location,
            ),
        ))

    if not context.has_markup:
        return issues

    doc = context.document_model
    for element in doc.get_all_elements():
        role = element.explicit_role
        if role not in INTERACTIVE_ROLES or element.is_natively_interactive:
            continue
        if doc.handlers_for(element):
            continue
        expected = EXPECTED_ROLE_HANDLERS.get(role, DEFAULT_EXPECTED_HANDLERS)
        ref = element_js_reference(element)
        issues.append(factory.create(
            context,
            "interactive-role-static",
            Severity.ERROR,
            f'{element.describe()} has interactive role "{role}" but no event handlers. '
            f"Expected handlers: {', '.join(expected)}.",
            element.location,
            ["2.1.1", "4.1.2"],
            element_context=doc.get_element_context(element),
            fix=IssueFix(
                description=f"Add {' and '.join(expected)} handlers",
                code="\n".join(f"{ref}.addEventListener('{event}', handle{event.capitalize()});" for event in expected),
                location=element.location,
            ),
        ))
    return issues


@audit_spec(codes=["missing-required-aria"])
def check_missing_required_aria(context: AuditContext, factory: IssueFactory) -> List[Issue]:
    """One finding per element listing every missing required attribute of its role."""
    issues = []
    set_attributes = _attributes_by_key(context)
    reported: Set[str] = set()
    covered: Set[int] = set()

    for node in _role_nodes(context):
        role = node.value
        key = node.element.key
        if role not in REQUIRED_ARIA_ATTRIBUTES or key in reported:
            continue
        reported.add(key)
        present = set_attributes.get(key, set())
        if context.document_model is not None:
            covered.update(id(el) for el in context.document_model.elements_for_node(node))
        doc_ctx = context_for_node(context, node)
        if doc_ctx is not None:
            present = present | set(doc_ctx.element.attributes)
        missing = [attr for attr in REQUIRED_ARIA_ATTRIBUTES[role] if attr not in present]
        if not missing:
            continue
        issues.append(factory.create(
            context,
            "missing-required-aria",
            Severity.ERROR,
            f'Element {key} with role="{role}" is missing required ARIA attributes: {", ".join(missing)}',
            node.location,
            ["4.1.2"],
            element_context=doc_ctx,
            fix=_required_fix(missing, "element", node.location),
        ))

    if not context.has_markup:
        return issues

    doc = context.document_model
    runtime_attributes: Dict[int, Set[str]] = {}
    for node in context.actions.get_all_attribute_changes():
        for element in doc.elements_for_node(node):
            runtime_attributes.setdefault(id(element), set()).add(node.attribute)

    for element in doc.get_all_elements():
        role = element.explicit_role
        if role not in REQUIRED_ARIA_ATTRIBUTES or id(element) in covered:
            continue
        present = set(element.attributes) | runtime_attributes.get(id(element), set())
        missing = [attr for attr in REQUIRED_ARIA_ATTRIBUTES[role] if attr not in present]
        if not missing:
            continue
        issues.append(factory.create(
            context,
            "missing-required-aria",
            Severity.ERROR,
            f'{element.describe()} with role="{role}" is missing required ARIA attributes: {", ".join(missing)}',
            element.location,
            ["4.1.2"],
            element_context=doc.get_element_context(element),
            fix=_required_fix(missing, element_js_reference(element), element.location),
        ))
    return issues


DEFINITION = AnalyzerDefinition(
    name="aria-semantics",
    description="Detects invalid roles, missing required ARIA attributes and interactive roles without behaviour",
    audit_rules=[check_invalid_role, check_interactive_role_static, check_missing_required_aria],
)
