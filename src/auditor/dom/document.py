# src/auditor/dom/document.py
import logging
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from action_ir.action_model import ActionModel
from action_ir.markup import MarkupElement, MarkupModel
from action_ir.model import ActionNode
from action_ir.style import StyleModel, StyleRule
from action_ir.tables import COMPLETENESS_REFERENCE_ATTRIBUTES, GLOBAL_TARGETS
from auditor.model import ConfidenceLevel

logger = logging.getLogger(__name__)

BASE_SINGLE_FRAGMENT = 0.7
BASE_FLOOR = 0.3
MAX_BOOST = 0.3


class ElementContext(BaseModel):
    """
    Everything known about one markup element after the merge.
    Derived per run, never persisted.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    element: MarkupElement
    js_handlers: List[ActionNode] = Field(default_factory=list)
    css_rules: List[StyleRule] = Field(default_factory=list)
    computed_style: Dict[str, str] = Field(default_factory=dict)
    focusable: bool = False
    interactive: bool = False
    has_click_handler: bool = False
    has_keyboard_handler: bool = False
    role: Optional[str] = None
    label: Optional[str] = None


def is_global_target(node: ActionNode) -> bool:
    ref = node.element
    return (ref.selector in GLOBAL_TARGETS) or (not ref.selector and ref.binding in GLOBAL_TARGETS)


class DocumentModel:
    """
    Merge layer over the action, markup and style models of one document.

    Construction resolves every IR node against the markup, records orphaned
    nodes and computes tree completeness once. Afterwards the instance is
    read-only and may be shared by concurrently running analyzers.
    """

    def __init__(
            self,
            action_model: Optional[ActionModel] = None,
            markup: Optional[MarkupModel] = None,
            style: Optional[StyleModel] = None
    ):
        self.action_model = action_model or ActionModel()
        self.markup = markup or MarkupModel()
        self.style = style or StyleModel()

        # Keyed by element identity; elements themselves are never touched.
        self._handlers: Dict[int, List[ActionNode]] = {}
        self._node_targets: Dict[int, List[MarkupElement]] = {}
        self.orphaned_nodes: List[ActionNode] = []
        self._orphan_ids: Set[int] = set()

        self._merge()
        self._contexts: Dict[int, ElementContext] = {
            id(el): self._build_context(el) for el in self.markup.get_all_elements()
        }
        self.tree_completeness: float = self._compute_completeness()
        self.confidence_level: ConfidenceLevel = ConfidenceLevel.from_completeness(self.tree_completeness)

        logger.debug(
            f"DocumentModel: {self.markup.get_fragment_count()} fragment(s), "
            f"{len(self.action_model)} node(s), {len(self.orphaned_nodes)} orphaned, "
            f"completeness={self.tree_completeness:.2f}"
        )

    # --- Merge ---

    def _resolve_direct(self, node: ActionNode) -> List[MarkupElement]:
        ref = node.element
        if ref.node_id:
            matches = [el for el in self.markup.get_all_elements() if el.node_id == ref.node_id]
            if matches:
                return matches
        if ref.selector and ref.selector not in GLOBAL_TARGETS:
            return self.markup.query_selector_all(ref.selector)
        return []

    def _merge(self) -> None:
        if not self.markup.get_fragment_count():
            return

        # Selector / node-id resolution first, then bindings inherit targets.
        binding_targets: Dict[str, List[MarkupElement]] = {}
        for node in self.action_model:
            targets = self._resolve_direct(node)
            self._node_targets[id(node)] = targets
            if targets and node.element.binding:
                known = binding_targets.setdefault(node.element.binding, [])
                known.extend(el for el in targets if not any(el is k for k in known))

        for node in self.action_model:
            targets = self._node_targets[id(node)]
            if not targets and self._is_resolution_attempt(node):
                # Orphaned on direct failure, even if the binding resolves below.
                self.orphaned_nodes.append(node)
                self._orphan_ids.add(id(node))
            if not targets and node.element.binding in binding_targets:
                targets = list(binding_targets[node.element.binding])
                self._node_targets[id(node)] = targets

            if targets and node.is_event_handler:
                for el in targets:
                    self._handlers.setdefault(id(el), []).append(node)

    @staticmethod
    def _is_resolution_attempt(node: ActionNode) -> bool:
        """Event handlers that point at markup by selector or node id."""
        if not node.is_event_handler or is_global_target(node):
            return False
        return bool(node.element.selector or node.element.node_id)

    # --- Completeness ---

    def _compute_completeness(self) -> float:
        fragments = self.markup.get_fragment_count()
        if fragments == 0:
            return 0.0

        base = BASE_SINGLE_FRAGMENT if fragments == 1 else max(BASE_FLOOR, BASE_SINGLE_FRAGMENT / fragments)

        attempted = 0
        resolved = 0
        for el in self.markup.get_all_elements():
            for attr in COMPLETENESS_REFERENCE_ATTRIBUTES:
                for ref_id in el.attributes.get(attr, "").split():
                    attempted += 1
                    if self.markup.get_element_by_id(ref_id) is not None:
                        resolved += 1

        for node in self.action_model:
            if self._is_resolution_attempt(node):
                attempted += 1
                if id(node) not in self._orphan_ids:
                    resolved += 1

        boost = MAX_BOOST * resolved / attempted if attempted else 0.0
        return min(1.0, base + boost)

    # --- Queries ---

    @property
    def fragment_count(self) -> int:
        return self.markup.get_fragment_count()

    def get_all_elements(self) -> List[MarkupElement]:
        return self.markup.get_all_elements()

    def get_element_by_id(self, element_id: str) -> Optional[MarkupElement]:
        return self.markup.get_element_by_id(element_id)

    def query_selector_all(self, selector: str) -> List[MarkupElement]:
        return self.markup.query_selector_all(selector)

    def known_ids(self) -> List[str]:
        return self.markup.known_ids()

    def handlers_for(self, element: MarkupElement) -> List[ActionNode]:
        return list(self._handlers.get(id(element), ()))

    def elements_for_node(self, node: ActionNode) -> List[MarkupElement]:
        return list(self._node_targets.get(id(node), ()))

    def get_element_context(self, element: MarkupElement) -> ElementContext:
        cached = self._contexts.get(id(element))
        return cached if cached is not None else self._build_context(element)

    def _build_context(self, element: MarkupElement) -> ElementContext:
        handlers = self.handlers_for(element)
        focusable = element.is_focusable
        return ElementContext(
            element=element,
            js_handlers=handlers,
            css_rules=self.style.get_matching_rules(element),
            computed_style=self.style.computed_declarations(element),
            focusable=focusable,
            interactive=bool(handlers) or focusable,
            has_click_handler=any(h.event == "click" for h in handlers),
            has_keyboard_handler=any(h.is_keyboard_handler for h in handlers),
            role=element.role,
            label=self.markup.get_label(element),
        )

    def get_interactive_elements(self) -> List[ElementContext]:
        contexts = (self.get_element_context(el) for el in self.get_all_elements())
        return [ctx for ctx in contexts if ctx.interactive]

    def get_elements_with_issues(self) -> List[ElementContext]:
        found = []
        for el in self.get_all_elements():
            ctx = self.get_element_context(el)
            if ctx.has_click_handler and not ctx.has_keyboard_handler:
                found.append(ctx)
            elif ctx.focusable and not ctx.label and el.tag not in ("div", "span", "p"):
                found.append(ctx)
        return found

