# src/action_ir/action_model.py
import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Sequence

from .model import ActionNode, ActionType

logger = logging.getLogger(__name__)


class ActionModel:
    """
    Ordered, read-only collection of IR nodes with query helpers.

    Queries behave like linear scans over the node sequence (results keep the
    original order); selector and binding lookups are served from indexes
    built once at construction.
    """

    def __init__(self, nodes: Iterable[ActionNode] = ()):
        self._nodes: tuple = tuple(nodes)
        self._by_selector: Dict[str, List[ActionNode]] = defaultdict(list)
        self._by_binding: Dict[str, List[ActionNode]] = defaultdict(list)

        for node in self._nodes:
            if node.element.selector:
                self._by_selector[node.element.selector].append(node)
            if node.element.binding:
                self._by_binding[node.element.binding].append(node)

        logger.debug(f"ActionModel indexed {len(self._nodes)} nodes")

    @property
    def nodes(self) -> Sequence[ActionNode]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ActionNode]:
        return iter(self._nodes)

    # --- Queries ---

    def find_event_handlers(self, event_type: str) -> List[ActionNode]:
        return [n for n in self._nodes if n.is_event_handler and n.event == event_type]

    def find_by_selector(self, selector: str) -> List[ActionNode]:
        return list(self._by_selector.get(selector, ()))

    def find_by_binding(self, binding: str) -> List[ActionNode]:
        return list(self._by_binding.get(binding, ()))

    def find_by_action_type(self, action_type: ActionType) -> List[ActionNode]:
        return [n for n in self._nodes if n.action_type == action_type]

    def get_all_event_handlers(self) -> List[ActionNode]:
        return self.find_by_action_type(ActionType.EVENT_HANDLER)

    def get_all_focus_actions(self) -> List[ActionNode]:
        return self.find_by_action_type(ActionType.FOCUS_CHANGE)

    def get_all_attribute_changes(self) -> List[ActionNode]:
        return self.find_by_action_type(ActionType.ATTRIBUTE_CHANGE)

    def get_all_dom_mutations(self) -> List[ActionNode]:
        return self.find_by_action_type(ActionType.DOM_MUTATION)

    def get_all_timers(self) -> List[ActionNode]:
        return self.find_by_action_type(ActionType.TIMER)

    @classmethod
    def merge(cls, *models: "ActionModel") -> "ActionModel":
        """Concatenates several models (e.g. one per source file), keeping order."""
        return cls(node for model in models for node in model.nodes)
