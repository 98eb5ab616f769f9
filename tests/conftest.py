# tests/conftest.py
import pytest

from action_ir.action_model import ActionModel
from action_ir.markup import MarkupElement, MarkupModel
from action_ir.model import ActionNode
from action_ir.style import StyleModel, StyleRule
from auditor.dom.core import AnalysisScope, AuditContext
from auditor.dom.document import DocumentModel


def make_node(action_type="event-handler", line=1, file="app.js", node_id=None, **kwargs):
    """
    Builds an ActionNode from keyword arguments.

    Element keys (binding, selector, nodeId) go into the element reference,
    everything else into metadata.
    """
    element = {k: kwargs.pop(k) for k in ("binding", "selector", "nodeId") if k in kwargs}
    return ActionNode.model_validate({
        "id": node_id or f"n-{file}-{line}-{len(kwargs)}",
        "actionType": action_type,
        "element": element,
        "location": {"file": file, "line": line, "column": 1},
        "metadata": kwargs,
    })


def make_element(tag, attributes=None, children=None, text=None, line=1, file="index.html"):
    return MarkupElement(
        tagName=tag,
        attributes=attributes or {},
        children=children or [],
        location={"file": file, "line": line, "column": 1},
        textContent=text,
    )


def document_context(nodes=(), fragments=(), rules=(), scope=AnalysisScope.DOCUMENT):
    doc = DocumentModel(
        action_model=ActionModel(nodes),
        markup=MarkupModel(list(fragments)),
        style=StyleModel([StyleRule.model_validate(r) if isinstance(r, dict) else r for r in rules]),
    )
    return AuditContext(document_model=doc, scope=scope)


def file_context(nodes=()):
    return AuditContext(action_model=ActionModel(nodes), scope=AnalysisScope.FILE)


@pytest.fixture
def node():
    return make_node


@pytest.fixture
def element():
    return make_element


@pytest.fixture
def doc_context():
    return document_context


@pytest.fixture
def file_ctx():
    return file_context
