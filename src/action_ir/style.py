# src/action_ir/style.py
import logging
import re
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .markup import MarkupElement, matches_selector
from .model import SourceLocation

logger = logging.getLogger(__name__)

FOCUS_PSEUDO_CLASSES = ("focus", "focus-visible", "focus-within")
_PSEUDO_RE = re.compile(r"::?([a-zA-Z-]+)(\([^)]*\))?")

Specificity = Tuple[int, int, int, int]


def selector_specificity(selector: str) -> Specificity:
    """[inline, id, class/attribute/pseudo-class, element] for a simple selector."""
    base = _PSEUDO_RE.sub("", selector).strip()
    pseudo = len(_PSEUDO_RE.findall(selector))
    if base.startswith("#"):
        return (0, 1, pseudo, 0)
    if base.startswith(".") or base.startswith("["):
        return (0, 0, 1 + pseudo, 0)
    return (0, 0, pseudo, 1 if base else 0)


def parse_inline_style(style: str) -> Dict[str, str]:
    declarations: Dict[str, str] = {}
    for chunk in style.split(";"):
        if ":" not in chunk:
            continue
        prop, value = chunk.split(":", 1)
        if prop.strip():
            declarations[prop.strip().lower()] = value.strip()
    return declarations


class StyleRule(BaseModel):
    """A declared style rule. Declarations keep their source order."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    selector: str
    declarations: Dict[str, str] = Field(default_factory=dict)
    location: Optional[SourceLocation] = None
    media_query: Optional[str] = Field(default=None, alias="mediaQuery")

    @property
    def selectors(self) -> List[str]:
        """Comma separated selector list, split into parts."""
        return [part.strip() for part in self.selector.split(",") if part.strip()]

    @property
    def pseudo_classes(self) -> List[str]:
        return [m.group(1) for m in _PSEUDO_RE.finditer(self.selector)]

    @property
    def has_pseudo_class(self) -> bool:
        return bool(self.pseudo_classes)

    @property
    def affects_focus(self) -> bool:
        return any(p in FOCUS_PSEUDO_CLASSES for p in self.pseudo_classes)

    def match_specificity(self, element: MarkupElement, with_pseudo: bool = False) -> Optional[Specificity]:
        """Highest specificity among the selector parts matching the element, or None."""
        best = None
        for part in self.selectors:
            has_pseudo = bool(_PSEUDO_RE.search(part))
            if has_pseudo != with_pseudo:
                continue
            base = _PSEUDO_RE.sub("", part).strip()
            if base and matches_selector(element, base):
                score = selector_specificity(part)
                if best is None or score > best:
                    best = score
        return best


class StyleModel:
    """Declared style rules with cascade helpers (no layout, no inheritance of computed values)."""

    def __init__(self, rules: Optional[List[StyleRule]] = None):
        self.rules: List[StyleRule] = list(rules or [])

    def __len__(self) -> int:
        return len(self.rules)

    def find_by_selector(self, selector: str) -> List[StyleRule]:
        return [r for r in self.rules if selector in r.selectors]

    def get_matching_rules(self, element: MarkupElement) -> List[StyleRule]:
        """
        Rules matching the element in cascade order: lower precedence first, so a
        later rule overrides an earlier one. Precedence is id > class > tag; ties
        keep declaration order. Pseudo-class and media-query rules are excluded.
        """
        matched = []
        for index, rule in enumerate(self.rules):
            if rule.media_query:
                continue
            score = rule.match_specificity(element)
            if score is not None:
                matched.append((score, index, rule))
        matched.sort(key=lambda item: (item[0], item[1]))
        return [rule for _, _, rule in matched]

    def computed_declarations(self, element: MarkupElement) -> Dict[str, str]:
        """Cascade result for the element; the inline style attribute wins."""
        computed: Dict[str, str] = {}
        for rule in self.get_matching_rules(element):
            computed.update(rule.declarations)
        inline = element.attributes.get("style")
        if inline:
            computed.update(parse_inline_style(inline))
        return computed

    def is_element_hidden(self, element: MarkupElement) -> bool:
        """True when the element or an ancestor is removed from rendering."""
        own = self.computed_declarations(element)
        if own.get("visibility", "").strip() == "hidden":
            return True
        if own.get("opacity", "").strip() in ("0", "0.0"):
            return True
        for node in [element, *element.ancestors()]:
            if "hidden" in node.attributes:
                return True
            styles = own if node is element else self.computed_declarations(node)
            if styles.get("display", "").strip() == "none":
                return True
        return False

    def has_focus_styles(self, element: MarkupElement) -> bool:
        """True when a :focus-style rule targets the element without only removing the outline."""
        for rule in self.rules:
            if not rule.affects_focus or rule.match_specificity(element, with_pseudo=True) is None:
                continue
            removes_only = all(
                prop in ("outline", "outline-width", "outline-style") and value.strip() in ("none", "0", "0px")
                for prop, value in rule.declarations.items()
            )
            if not removes_only:
                return True
        return False
