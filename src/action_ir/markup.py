# src/action_ir/markup.py
import logging
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .model import SourceLocation
from .tables import (
    IMPLICIT_ROLES,
    INTERACTIVE_ROLES,
    NATIVE_INTERACTIVE_TAGS,
    NATURALLY_FOCUSABLE_TAGS,
)

logger = logging.getLogger(__name__)


class MarkupElement(BaseModel):
    """
    One element of a markup fragment tree.

    The parent link is a non-owning back-reference wired when the parent is
    constructed; it is only used for ancestor walks. Elements compare and hash
    by identity so they can key per-run lookup tables.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tag_name: str = Field(alias="tagName")
    attributes: Dict[str, str] = Field(default_factory=dict)
    children: List["MarkupElement"] = Field(default_factory=list)
    location: SourceLocation
    text_content: Optional[str] = Field(default=None, alias="textContent")
    node_id: Optional[str] = Field(default=None, alias="nodeId")

    _parent: Optional["MarkupElement"] = PrivateAttr(default=None)

    def model_post_init(self, __context) -> None:
        for child in self.children:
            child._parent = self

    def __eq__(self, other) -> bool:
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def __repr__(self) -> str:
        return f"MarkupElement({self.describe()} @ {self.location})"

    # --- Attribute shortcuts ---

    @property
    def tag(self) -> str:
        return self.tag_name.lower()

    @property
    def parent(self) -> Optional["MarkupElement"]:
        return self._parent

    @property
    def element_id(self) -> Optional[str]:
        return self.attributes.get("id")

    @property
    def classes(self) -> List[str]:
        return [c for c in self.attributes.get("class", "").split() if c]

    @property
    def explicit_role(self) -> Optional[str]:
        return self.attributes.get("role") or None

    @property
    def role(self) -> Optional[str]:
        """Explicit role, falling back to the implicit role of the tag."""
        return self.explicit_role or IMPLICIT_ROLES.get(self.tag)

    @property
    def tabindex(self) -> Optional[int]:
        raw = self.attributes.get("tabindex")
        if raw is None:
            return None
        try:
            return int(raw.strip())
        except ValueError:
            return None

    @property
    def is_disabled(self) -> bool:
        return "disabled" in self.attributes and self.attributes["disabled"] != "false"

    @property
    def is_focusable(self) -> bool:
        if "tabindex" in self.attributes:
            tabindex = self.tabindex
            return tabindex is not None and tabindex >= 0
        if self.tag in NATURALLY_FOCUSABLE_TAGS:
            if self.tag == "a":
                return bool(self.attributes.get("href"))
            return not self.is_disabled
        return False

    @property
    def is_natively_interactive(self) -> bool:
        return self.tag in NATIVE_INTERACTIVE_TAGS

    @property
    def has_interactive_role(self) -> bool:
        return self.explicit_role in INTERACTIVE_ROLES

    @property
    def is_interactive(self) -> bool:
        return self.is_natively_interactive or self.has_interactive_role

    def describe(self) -> str:
        """Short human readable form, e.g. '<div> element with id="menu"'."""
        if self.element_id:
            return f'<{self.tag}> element with id="{self.element_id}"'
        return f"<{self.tag}> element"

    # --- Tree helpers ---

    def ancestors(self) -> Iterator["MarkupElement"]:
        node = self._parent
        while node is not None:
            yield node
            node = node._parent

    def iter_tree(self) -> Iterator["MarkupElement"]:
        """Depth-first, document order, starting with self."""
        yield self
        for child in self.children:
            yield from child.iter_tree()

    def text(self) -> str:
        """Own text followed by the text of all descendants."""
        parts = [self.text_content.strip()] if self.text_content and self.text_content.strip() else []
        for child in self.children:
            child_text = child.text()
            if child_text:
                parts.append(child_text)
        return " ".join(parts)

    def selector_set(self) -> List[str]:
        """All simple selectors that identify this element, most specific first."""
        selectors = []
        if self.element_id:
            selectors.append(f"#{self.element_id}")
        selectors.extend(f".{c}" for c in self.classes)
        selectors.append(self.tag)
        if self.explicit_role:
            selectors.append(f'[role="{self.explicit_role}"]')
        selectors.extend(f"[{attr}]" for attr in self.attributes if attr.startswith("aria-"))
        return selectors


MarkupElement.model_rebuild()


def matches_selector(element: MarkupElement, selector: str) -> bool:
    """
    Simple selector matching: #id, .class, [attr], [attr="value"], and bare names
    which match either the tag or a class of the element.
    """
    selector = selector.strip()
    if not selector:
        return False
    if selector.startswith("#"):
        return element.element_id == selector[1:]
    if selector.startswith("."):
        return selector[1:] in element.classes
    if selector.startswith("[") and selector.endswith("]"):
        inner = selector[1:-1]
        if "=" in inner:
            attr, raw_value = inner.split("=", 1)
            return element.attributes.get(attr.strip()) == raw_value.strip().strip("\"'")
        return inner.strip() in element.attributes
    lowered = selector.lower()
    return element.tag == lowered or selector in element.classes


class MarkupModel:
    """
    A set of markup fragment trees.

    A model with several fragments represents components authored separately
    that have not (yet) been composed into one page.
    """

    def __init__(self, fragments: Optional[List[MarkupElement]] = None):
        self.fragments: List[MarkupElement] = list(fragments or [])
        self._all: List[MarkupElement] = [el for root in self.fragments for el in root.iter_tree()]
        self._by_id: Dict[str, MarkupElement] = {}
        for el in self._all:
            if el.element_id and el.element_id not in self._by_id:
                self._by_id[el.element_id] = el

    def get_all_elements(self) -> List[MarkupElement]:
        return list(self._all)

    def get_fragment_count(self) -> int:
        return len(self.fragments)

    def is_fragment_complete(self, index: int) -> bool:
        """A fragment is a complete page when its root is <html> or <body>."""
        return self.fragments[index].tag in ("html", "body")

    def get_interactive_elements(self) -> List[MarkupElement]:
        return [el for el in self._all if el.is_interactive]

    def get_focusable_elements(self) -> List[MarkupElement]:
        return [el for el in self._all if el.is_focusable]

    def get_element_by_id(self, element_id: str) -> Optional[MarkupElement]:
        return self._by_id.get(element_id)

    def known_ids(self) -> List[str]:
        return sorted(self._by_id)

    def query_selector_all(self, selector: str) -> List[MarkupElement]:
        return [el for el in self._all if matches_selector(el, selector)]

    def get_label(self, element: MarkupElement) -> Optional[str]:
        """Accessible name: aria-label, aria-labelledby, text, alt, then value/placeholder."""
        if element.attributes.get("aria-label"):
            return element.attributes["aria-label"]

        labelledby = element.attributes.get("aria-labelledby")
        if labelledby:
            texts = []
            for ref in labelledby.split():
                target = self.get_element_by_id(ref)
                if target is not None and target.text():
                    texts.append(target.text())
            return " ".join(texts) if texts else f"[labelledby: {labelledby}]"

        text = element.text()
        if text:
            return text

        if element.tag == "img":
            return element.attributes.get("alt") or None

        if element.tag in ("input", "button"):
            return element.attributes.get("value") or element.attributes.get("placeholder") or None

        return None

    def get_elements_with_issues(self) -> List[MarkupElement]:
        """Focusable elements without an accessible label."""
        return [el for el in self._all if el.is_focusable and not self.get_label(el)]
