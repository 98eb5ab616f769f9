# tests/rules/test_keyboard_navigation.py
from auditor.dom.core import IssueFactory
from auditor.model import Severity
from auditor.rules import keyboard_navigation as kb


def _run(rule, context):
    return rule(context, IssueFactory("keyboard-navigation"))


def test_tab_trap_without_escape_is_reported(file_ctx, node):
    context = file_ctx([node(selector="#modal", event="keydown", keysHandled=["Tab"], callsPreventDefault=True, line=20)])
    issues = _run(kb.check_keyboard_trap, context)
    assert len(issues) == 1
    assert issues[0].type == "potential-keyboard-trap"
    assert issues[0].wcag_criteria == ["2.1.2"]


def test_escape_within_window_clears_trap(file_ctx, node):
    context = file_ctx([
        node(selector="#modal", event="keydown", keysHandled=["Tab"], callsPreventDefault=True, line=20),
        node(selector="#modal", event="keydown", keysHandled=["Escape"], line=30),
    ])
    assert _run(kb.check_keyboard_trap, context) == []


def test_escape_outside_window_does_not_count(file_ctx, node):
    context = file_ctx([
        node(selector="#modal", event="keydown", keysHandled=["Tab"], callsPreventDefault=True, line=20),
        node(selector="#modal", event="keydown", keysHandled=["Escape"], line=31),
    ])
    assert len(_run(kb.check_keyboard_trap, context)) == 1


def test_tab_without_prevent_default_is_not_a_trap(file_ctx, node):
    context = file_ctx([node(selector="#list", event="keydown", keysHandled=["Tab"])])
    assert _run(kb.check_keyboard_trap, context) == []


def test_single_character_shortcuts_conflict_per_key(file_ctx, node):
    context = file_ctx([node(binding="document", event="keydown", keysHandled=["h", "Enter", "k", "7"])])
    issues = _run(kb.check_screen_reader_conflict, context)
    assert [i.message.split('"')[1] for i in issues] == ["h", "k"]
    assert all(i.wcag_criteria == ["2.1.4"] for i in issues)


def test_modifier_shortcuts_do_not_conflict(file_ctx, node):
    context = file_ctx([node(binding="document", event="keydown", keysHandled=["h"], requiresModifier=True)])
    assert _run(kb.check_screen_reader_conflict, context) == []


def test_deprecated_keycode_property(file_ctx, node):
    context = file_ctx([
        node(selector="#a", event="keyup", usesKeyCode=True, line=1),
        node(selector="#b", event="keydown", usesWhich=True, line=2),
        node(selector="#c", event="click", usesKeyCode=True, line=3),
    ])
    issues = _run(kb.check_deprecated_keycode, context)
    assert [i.message for i in issues] == [
        "Using deprecated event.keyCode. Use event.key instead.",
        "Using deprecated event.which. Use event.key instead.",
    ]
    assert all(i.severity == Severity.INFO for i in issues)


def test_tab_without_shift_check(file_ctx, node):
    context = file_ctx([
        node(selector="#a", event="keydown", keysHandled=["Tab"], line=1),
        node(selector="#b", event="keydown", keysHandled=["Tab"], checksShiftKey=True, line=2),
    ])
    issues = _run(kb.check_tab_without_shift, context)
    assert len(issues) == 1
    assert issues[0].location.line == 1


def test_modal_without_escape_is_reported_once_per_element(file_ctx, node):
    context = file_ctx([
        node(selector="#login-modal", event="click", line=40),
        node(selector="#login-modal", event="focus", line=41),
    ])
    issues = _run(kb.check_missing_escape_handler, context)
    assert len(issues) == 1
    assert issues[0].type == "missing-escape-handler"


def test_modal_with_nearby_escape_is_fine(file_ctx, node):
    context = file_ctx([
        node(binding="dialogEl", event="click", line=40),
        node(binding="dialogEl", event="keydown", keysHandled=["Escape"], line=45),
    ])
    assert _run(kb.check_missing_escape_handler, context) == []


def test_role_dialog_set_at_runtime_counts_as_modal(file_ctx, node):
    context = file_ctx([
        node(action_type="attribute-change", binding="panel", attribute="role", value="dialog", line=3),
    ])
    assert len(_run(kb.check_missing_escape_handler, context)) == 1


def test_composite_widget_without_arrow_keys(file_ctx, node):
    context = file_ctx([
        node(action_type="attribute-change", binding="menuEl", attribute="role", value="menu", line=10),
        node(binding="menuEl", event="keydown", keysHandled=["Enter"], line=12),
    ])
    issues = _run(kb.check_missing_arrow_navigation, context)
    assert len(issues) == 1
    assert 'role="menu"' in issues[0].message
    assert issues[0].wcag_criteria == ["2.1.1", "4.1.2"]


def test_composite_widget_with_arrow_keys_nearby(file_ctx, node):
    context = file_ctx([
        node(action_type="attribute-change", binding="menuEl", attribute="role", value="listbox", line=10),
        node(binding="menuEl", event="keydown", keysHandled=["ArrowDown", "ArrowUp"], line=30),
    ])
    assert _run(kb.check_missing_arrow_navigation, context) == []


def test_definition_runs_rules_in_order(file_ctx, node):
    context = file_ctx([
        node(selector="#modal", event="keydown", keysHandled=["Tab", "s"], callsPreventDefault=True, line=5),
    ])
    types = [i.type for i in kb.DEFINITION.analyze(context)]
    assert types == ["potential-keyboard-trap", "screen-reader-conflict", "tab-without-shift", "missing-escape-handler"]
