# src/action_ir/tables.py
"""
Static lookup tables shared by the models and the analyzers.

All tables are immutable and built once at import time.
"""
from types import MappingProxyType

KEYBOARD_EVENTS = frozenset({"keydown", "keypress", "keyup"})

# Elements that are interactive without any ARIA help.
NATIVE_INTERACTIVE_TAGS = frozenset({"button", "a", "input", "select", "textarea", "summary"})

# Elements that take keyboard focus by default (links only with href).
NATURALLY_FOCUSABLE_TAGS = frozenset({"a", "button", "input", "select", "textarea"})

# Global event targets; handlers on these never resolve to a markup element.
GLOBAL_TARGETS = frozenset({"document", "window", "navigator", "location", "history", "screen"})

# ARIA 1.2 roles, in declaration order (used for ordered suggestions).
VALID_ROLES_ORDERED = (
    # widget
    "alert", "alertdialog", "button", "checkbox", "dialog", "gridcell",
    "link", "log", "marquee", "menuitem", "menuitemcheckbox", "menuitemradio",
    "option", "progressbar", "radio", "scrollbar", "searchbox", "slider",
    "spinbutton", "status", "switch", "tab", "tabpanel", "textbox",
    "timer", "tooltip", "treeitem",
    # composite widget
    "combobox", "grid", "listbox", "menu", "menubar", "radiogroup",
    "tablist", "tree", "treegrid",
    # document structure
    "application", "article", "cell", "columnheader", "definition",
    "directory", "document", "feed", "figure", "group", "heading",
    "img", "list", "listitem", "math", "none", "note", "presentation",
    "row", "rowgroup", "rowheader", "separator", "table", "term",
    "toolbar",
    # landmark
    "banner", "complementary", "contentinfo", "form", "main",
    "navigation", "region", "search",
)
VALID_ROLES = frozenset(VALID_ROLES_ORDERED)

INTERACTIVE_ROLES = frozenset({
    "button", "link", "checkbox", "radio", "switch", "tab",
    "menuitem", "menuitemcheckbox", "menuitemradio", "option",
    "slider", "spinbutton", "textbox", "searchbox", "combobox",
})

_RANGE_ATTRIBUTES = ("aria-valuenow", "aria-valuemin", "aria-valuemax")

REQUIRED_ARIA_ATTRIBUTES = MappingProxyType({
    "checkbox": ("aria-checked",),
    "radio": ("aria-checked",),
    "switch": ("aria-checked",),
    "slider": _RANGE_ATTRIBUTES,
    "spinbutton": _RANGE_ATTRIBUTES,
    "combobox": ("aria-expanded", "aria-controls"),
    "tab": ("aria-selected",),
    "scrollbar": _RANGE_ATTRIBUTES,
    "separator": _RANGE_ATTRIBUTES,
    "progressbar": _RANGE_ATTRIBUTES,
})

# Placeholder values used when suggesting missing attributes.
ARIA_DEFAULT_VALUES = MappingProxyType({
    "aria-checked": "false",
    "aria-selected": "false",
    "aria-expanded": "false",
    "aria-valuenow": "0",
    "aria-valuemin": "0",
    "aria-valuemax": "100",
    "aria-controls": "controlled-element-id",
})

EXPECTED_ROLE_HANDLERS = MappingProxyType({
    "button": ("click", "keydown"),
    "link": ("click", "keydown"),
    "checkbox": ("click", "change", "keydown"),
    "radio": ("click", "change", "keydown"),
    "switch": ("click", "change", "keydown"),
    "tab": ("click", "keydown"),
    "menuitem": ("click", "keydown"),
    "option": ("click", "change"),
    "slider": ("input", "keydown", "mousedown"),
    "spinbutton": ("input", "keydown"),
    "textbox": ("input", "keydown"),
    "searchbox": ("input", "keydown", "submit"),
    "combobox": ("click", "keydown", "input"),
})

ARIA_STATE_ATTRIBUTES = frozenset({
    "aria-expanded", "aria-selected", "aria-checked", "aria-pressed", "aria-current",
})

# Attributes whose value is a whitespace separated list of element ids.
ARIA_REFERENCE_ATTRIBUTES = (
    "aria-labelledby", "aria-describedby", "aria-controls", "aria-owns", "aria-activedescendant",
)

# The subset that counts towards tree completeness.
COMPLETENESS_REFERENCE_ATTRIBUTES = ("aria-labelledby", "aria-controls", "aria-describedby")

IMPLICIT_ROLES = MappingProxyType({
    "button": "button",
    "a": "link",
    "input": "textbox",
    "textarea": "textbox",
    "select": "combobox",
    "img": "img",
    "nav": "navigation",
    "main": "main",
    "header": "banner",
    "footer": "contentinfo",
    "aside": "complementary",
    "section": "region",
    "article": "article",
    "form": "form",
    "table": "table",
    "ul": "list",
    "ol": "list",
    "li": "listitem",
    "h1": "heading",
    "h2": "heading",
    "h3": "heading",
    "h4": "heading",
    "h5": "heading",
    "h6": "heading",
})

# Single-character keys that screen readers use in browse mode.
SCREEN_READER_KEYS = frozenset(
    list("hbktlfgderimnpqsxcvzoau") + ["1", "2", "3", "4", "5", "6"]
)

ARROW_NAVIGATION_ROLES = frozenset({
    "listbox", "menu", "menubar", "radiogroup", "tablist", "tree", "treegrid", "grid",
})

ARROW_KEYS = ("ArrowUp", "ArrowDown", "ArrowLeft", "ArrowRight")

VALID_LIVE_VALUES = frozenset({"polite", "assertive", "off"})

# Roles that imply a live region even without aria-live.
IMPLICIT_LIVE_ROLES = MappingProxyType({
    "alert": "assertive",
    "status": "polite",
    "log": "polite",
    "timer": "off",
})
