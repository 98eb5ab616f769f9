# tests/ir/test_markup_style.py
from action_ir.markup import MarkupModel, matches_selector
from action_ir.style import StyleModel, StyleRule, selector_specificity


def test_parent_links_and_tree_walk(element):
    """Children get a back-reference to their parent; the tree walks in document order."""
    leaf = element("span", text="hi")
    middle = element("div", {"id": "mid"}, [leaf])
    root = element("body", children=[middle])

    assert leaf.parent is middle
    assert middle.parent is root
    assert list(leaf.ancestors()) == [middle, root]
    assert [el.tag for el in root.iter_tree()] == ["body", "div", "span"]


def test_focusability_rules(element):
    assert element("button").is_focusable
    assert not element("button", {"disabled": ""}).is_focusable
    assert element("a", {"href": "/x"}).is_focusable
    assert not element("a").is_focusable
    assert element("div", {"tabindex": "0"}).is_focusable
    assert not element("div", {"tabindex": "-1"}).is_focusable
    assert not element("div").is_focusable


def test_roles_and_interactivity(element):
    assert element("button").role == "button"
    assert element("div", {"role": "tab"}).role == "tab"
    assert element("div", {"role": "tab"}).is_interactive
    assert not element("div", {"role": "region"}).is_interactive
    assert element("div").role is None


def test_selector_matching(element):
    el = element("div", {"id": "menu", "class": "nav open", "role": "menu"})
    assert matches_selector(el, "#menu")
    assert matches_selector(el, ".open")
    assert matches_selector(el, "div")
    assert matches_selector(el, "[role]")
    assert matches_selector(el, '[role="menu"]')
    assert not matches_selector(el, '[role="tab"]')
    assert not matches_selector(el, "#other")


def test_markup_model_lookup_and_labels(element):
    label = element("span", {"id": "lbl"}, text="Close dialog")
    button = element("button", {"aria-labelledby": "lbl"})
    img = element("img", {"alt": "Logo"})
    unnamed = element("div", {"tabindex": "0"})
    model = MarkupModel([element("body", children=[label, button, img, unnamed])])

    assert model.get_element_by_id("lbl") is label
    assert model.known_ids() == ["lbl"]
    assert model.get_label(button) == "Close dialog"
    assert model.get_label(img) == "Logo"
    assert model.get_elements_with_issues() == [unnamed]
    assert model.get_fragment_count() == 1
    assert model.is_fragment_complete(0)


def test_selector_specificity_order():
    assert selector_specificity("#a") > selector_specificity(".a") > selector_specificity("a")
    assert selector_specificity(".a:focus") > selector_specificity(".a")


def test_cascade_precedence_id_beats_class_beats_tag(element):
    """Higher specificity wins regardless of declaration order; inline style wins over all."""
    el = element("p", {"id": "intro", "class": "lead"})
    model = StyleModel([
        StyleRule(selector="#intro", declarations={"color": "red"}),
        StyleRule(selector=".lead", declarations={"color": "green", "font-size": "20px"}),
        StyleRule(selector="p", declarations={"color": "blue", "margin": "0"}),
    ])
    computed = model.computed_declarations(el)
    assert computed["color"] == "red"
    assert computed["font-size"] == "20px"
    assert computed["margin"] == "0"

    inline = element("p", {"id": "intro", "style": "color: black"})
    assert model.computed_declarations(inline)["color"] == "black"


def test_cascade_ignores_pseudo_and_media_rules(element):
    el = element("a", {"class": "link"})
    model = StyleModel([
        StyleRule(selector=".link:focus", declarations={"outline": "2px solid"}),
        StyleRule(selector=".link", declarations={"color": "navy"}, mediaQuery="(max-width: 600px)"),
    ])
    assert model.get_matching_rules(el) == []
    assert model.has_focus_styles(el)


def test_hidden_through_ancestor(element):
    child = element("button", text="Go")
    wrapper = element("div", {"class": "drawer"}, [child])
    element("body", children=[wrapper])
    model = StyleModel([StyleRule(selector=".drawer", declarations={"display": "none"})])
    assert model.is_element_hidden(child)
    assert not StyleModel().is_element_hidden(child)
