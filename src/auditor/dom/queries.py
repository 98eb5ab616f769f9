# src/auditor/dom/queries.py
"""Query helpers shared by the rule modules."""
from typing import Iterable, List

from action_ir.action_model import ActionModel
from action_ir.markup import MarkupElement
from action_ir.model import ActionNode, ElementRef, SourceLocation


def handlers_for_target(actions: ActionModel, ref: ElementRef) -> List[ActionNode]:
    """
    Event handlers attached to the same element as `ref`: the same selector when
    it has one, otherwise the same binding, otherwise the same node id.
    """
    if ref.selector:
        candidates = actions.find_by_selector(ref.selector)
    elif ref.binding:
        candidates = actions.find_by_binding(ref.binding)
    else:
        candidates = [n for n in actions if n.element.node_id == ref.node_id]
    return [n for n in candidates if n.is_event_handler]


def has_keyboard_handler_for(actions: ActionModel, ref: ElementRef) -> bool:
    return any(n.is_keyboard_handler for n in handlers_for_target(actions, ref))


def within_lines(a: SourceLocation, b: SourceLocation, window: int) -> bool:
    """
    Line-proximity heuristic standing in for "same UI component" when no
    structural scope is available. Only line numbers are compared.
    """
    return abs(a.line - b.line) <= window


def nearby(nodes: Iterable[ActionNode], origin: ActionNode, window: int) -> List[ActionNode]:
    return [n for n in nodes if within_lines(n.location, origin.location, window)]


def element_js_reference(element: MarkupElement) -> str:
    """JavaScript expression that looks the element up, for fix snippets."""
    if element.element_id:
        return f"document.getElementById('{element.element_id}')"
    if element.classes:
        return f"document.querySelector('.{element.classes[0]}')"
    return f"document.querySelector('{element.tag}')"


def node_js_reference(node: ActionNode) -> str:
    ref = node.element
    if ref.selector:
        return f"document.querySelector('{ref.selector}')"
    return ref.binding or f"/* node {ref.node_id} */ element"


def describe_node_target(node: ActionNode) -> str:
    ref = node.element
    if ref.selector:
        return f'selector "{ref.selector}"'
    if ref.binding:
        return f'binding "{ref.binding}"'
    return f'node "{ref.node_id}"'


def context_for_node(context, node: ActionNode):
    """ElementContext of the first element the node resolved to, if any."""
    doc = context.document_model
    if doc is None:
        return None
    targets = doc.elements_for_node(node)
    return doc.get_element_context(targets[0]) if targets else None
