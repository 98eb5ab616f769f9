# tests/ir/test_ir_model.py
import pytest
from pydantic import ValidationError

from action_ir.action_model import ActionModel
from action_ir.model import ActionType, ElementRef, SourceLocation


def test_element_ref_requires_a_target():
    """An element reference without binding, selector or nodeId is rejected."""
    with pytest.raises(ValidationError):
        ElementRef()


def test_element_ref_key_prefers_binding():
    ref = ElementRef(binding="btn", selector="#save", nodeId="n1")
    assert ref.key == "btn"
    assert ElementRef(selector="#save").key == "#save"
    assert ElementRef(nodeId="n1").key == "n1"
    assert ElementRef(selector="#save").is_id_selector
    assert not ElementRef(selector=".save").is_id_selector


def test_node_accessors(node):
    """Typed accessors read the metadata keys the analyzers rely on."""
    n = node(selector="#menu", event="keydown", keysHandled=["Tab", "Escape"], callsPreventDefault=True)
    assert n.action_type == ActionType.EVENT_HANDLER
    assert n.is_keyboard_handler
    assert n.keys_handled == ("Tab", "Escape")
    assert n.handles_key("Escape")
    assert n.calls_prevent_default
    assert not n.flag("usesKeyCode")


def test_node_is_immutable(node):
    n = node(selector="#menu", event="click")
    with pytest.raises(ValidationError):
        n.id = "other"


def test_unknown_action_type_is_rejected(node):
    with pytest.raises(ValidationError):
        node(action_type="teleport", selector="#x")


def test_source_location_str():
    assert str(SourceLocation(file="a.js", line=3, column=7)) == "a.js:3:7"


def test_action_model_queries_keep_order(node):
    """Query results keep the original node order."""
    click_a = node(selector="#a", event="click", line=1)
    key_a = node(selector="#a", event="keydown", line=2)
    attr_b = node(action_type="attribute-change", binding="b", attribute="aria-expanded", value="true", line=3)
    click_c = node(selector="#c", event="click", line=4)
    model = ActionModel([click_a, key_a, attr_b, click_c])

    assert model.find_event_handlers("click") == [click_a, click_c]
    assert model.find_by_selector("#a") == [click_a, key_a]
    assert model.find_by_binding("b") == [attr_b]
    assert model.get_all_attribute_changes() == [attr_b]
    assert model.get_all_event_handlers() == [click_a, key_a, click_c]
    assert model.find_by_selector("#missing") == []
    assert len(model) == 4


def test_action_model_merge(node):
    first = ActionModel([node(selector="#a", event="click", line=1)])
    second = ActionModel([node(selector="#b", event="click", line=2)])
    merged = ActionModel.merge(first, second)
    assert [n.element.selector for n in merged] == ["#a", "#b"]
    assert len(ActionModel.merge()) == 0


def test_action_model_type_queries(node):
    timer = node(action_type="timer", binding="poll", delay=500, line=1)
    focus = node(action_type="focus-change", selector="#search", line=2)
    model = ActionModel([timer, focus])
    assert model.get_all_timers() == [timer]
    assert model.get_all_focus_actions() == [focus]
    assert model.find_by_action_type(ActionType.PORTAL) == []
