# src/action_ir/loader.py
"""
Structural validation of collaborator supplied models.

Front ends hand over plain records (dicts, camelCase keys). Every record is
validated on its own; a malformed record is rejected and logged while the
remaining records are still loaded.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from .action_model import ActionModel
from .markup import MarkupElement, MarkupModel
from .model import ActionNode
from .style import StyleModel, StyleRule

logger = logging.getLogger(__name__)

REQUIRED_NODE_KEYS = ("actionType", "element", "location")
REQUIRED_ELEMENT_KEYS = ("tagName", "location")


class RejectedRecord(BaseModel):
    index: str
    reason: str
    record: Any = None


class LoadResult(BaseModel):
    model: Any
    rejected: List[RejectedRecord] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.rejected


def _missing_keys(record: Any, required: Iterable[str]) -> List[str]:
    if not isinstance(record, dict):
        return list(required)
    return [key for key in required if record.get(key) is None]


def _reject(rejected: List[RejectedRecord], index: str, reason: str, record: Any) -> None:
    logger.warning(f"Rejected record {index}: {reason}")
    rejected.append(RejectedRecord(index=index, reason=reason, record=record))


def load_action_model(records: Iterable[Dict[str, Any]]) -> LoadResult:
    nodes: List[ActionNode] = []
    rejected: List[RejectedRecord] = []

    for i, record in enumerate(records):
        missing = _missing_keys(record, REQUIRED_NODE_KEYS)
        if missing:
            _reject(rejected, str(i), f"missing {', '.join(missing)}", record)
            continue

        data = dict(record)
        data.setdefault("id", f"node-{i}")
        try:
            nodes.append(ActionNode.model_validate(data))
        except ValidationError as e:
            _reject(rejected, str(i), f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}", record)

    logger.info(f"Loaded {len(nodes)} action nodes ({len(rejected)} rejected)")
    return LoadResult(model=ActionModel(nodes), rejected=rejected)


def _build_element(record: Any, path: str, rejected: List[RejectedRecord]) -> Optional[MarkupElement]:
    missing = _missing_keys(record, REQUIRED_ELEMENT_KEYS)
    if missing:
        _reject(rejected, path, f"missing {', '.join(missing)}", record)
        return None

    children = []
    for j, child in enumerate(record.get("children") or []):
        built = _build_element(child, f"{path}.{j}", rejected)
        if built is not None:
            children.append(built)

    data = {key: value for key, value in record.items() if key != "children"}
    try:
        return MarkupElement.model_validate({**data, "children": children})
    except ValidationError as e:
        _reject(rejected, path, f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}", record)
        return None


def load_markup_model(trees: Iterable[Dict[str, Any]]) -> LoadResult:
    """Loads zero or more fragment trees. A malformed element drops only its own subtree."""
    fragments: List[MarkupElement] = []
    rejected: List[RejectedRecord] = []

    for i, tree in enumerate(trees):
        root = _build_element(tree, str(i), rejected)
        if root is not None:
            fragments.append(root)

    return LoadResult(model=MarkupModel(fragments), rejected=rejected)


def load_style_model(rules: Iterable[Dict[str, Any]]) -> LoadResult:
    loaded: List[StyleRule] = []
    rejected: List[RejectedRecord] = []

    for i, record in enumerate(rules):
        if _missing_keys(record, ("selector",)):
            _reject(rejected, str(i), "missing selector", record)
            continue
        try:
            loaded.append(StyleRule.model_validate(record))
        except ValidationError as e:
            _reject(rejected, str(i), f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}", record)

    return LoadResult(model=StyleModel(loaded), rejected=rejected)
