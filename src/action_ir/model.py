# src/action_ir/model.py
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .tables import KEYBOARD_EVENTS


class SourceLocation(BaseModel):
    """Position of a construct in the originating source file."""
    model_config = ConfigDict(frozen=True)

    file: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class ElementRef(BaseModel):
    """
    Reference to a UI element by binding name, selector or internal node id.
    At least one of the three must be present.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    binding: Optional[str] = None
    selector: Optional[str] = None
    node_id: Optional[str] = Field(default=None, alias="nodeId")

    @model_validator(mode="after")
    def check_has_target(self) -> "ElementRef":
        if not (self.binding or self.selector or self.node_id):
            raise ValueError("ElementRef needs at least one of binding, selector or nodeId")
        return self

    @property
    def key(self) -> str:
        """Stable grouping key: binding, else selector, else node id."""
        return self.binding or self.selector or self.node_id

    @property
    def is_id_selector(self) -> bool:
        return bool(self.selector) and self.selector.startswith("#")


class ActionType(str, Enum):
    EVENT_HANDLER = "event-handler"
    ATTRIBUTE_CHANGE = "attribute-change"
    FOCUS_CHANGE = "focus-change"
    NAVIGATION_CHANGE = "navigation-change"
    TIMER = "timer"
    DOM_MUTATION = "dom-mutation"
    PORTAL = "portal"
    EVENT_PROPAGATION = "event-propagation"


class ActionNode(BaseModel):
    """
    A single normalized UI action found by a front end.

    Action-specific detail lives in `metadata`; the properties below give typed
    access to the keys the analyzers rely on (`event`, `attribute`, `value`,
    `keysHandled`, `callsPreventDefault`).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    action_type: ActionType = Field(alias="actionType")
    element: ElementRef
    location: SourceLocation
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def event(self) -> Optional[str]:
        return self.metadata.get("event")

    @property
    def attribute(self) -> Optional[str]:
        return self.metadata.get("attribute")

    @property
    def value(self) -> Any:
        return self.metadata.get("value")

    @property
    def keys_handled(self) -> Tuple[str, ...]:
        return tuple(self.metadata.get("keysHandled") or ())

    @property
    def calls_prevent_default(self) -> bool:
        return bool(self.metadata.get("callsPreventDefault"))

    @property
    def is_event_handler(self) -> bool:
        return self.action_type == ActionType.EVENT_HANDLER

    @property
    def is_keyboard_handler(self) -> bool:
        return self.is_event_handler and self.event in KEYBOARD_EVENTS

    def handles_key(self, key: str) -> bool:
        return key in self.keys_handled

    def flag(self, name: str) -> bool:
        """Boolean metadata lookup (e.g. 'usesKeyCode', 'checksShiftKey')."""
        return bool(self.metadata.get(name))
