# src/auditor/dom/builder.py
import logging
from typing import Any, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from action_ir.action_model import ActionModel
from action_ir.loader import RejectedRecord, load_action_model, load_markup_model, load_style_model
from action_ir.markup import MarkupElement, MarkupModel
from action_ir.model import SourceLocation
from action_ir.style import StyleModel, StyleRule
from .core import AnalysisScope, AuditContext
from .document import DocumentModel

logger = logging.getLogger(__name__)

# Content of these tags is never user-visible text.
_RAW_TEXT_TAGS = ("script", "style", "template")


class DocumentBuilder:
    """
    Collects the action, markup and style models that belong to one document.

    Front ends may produce their models independently (and concurrently);
    the builder is the point where they come together. Nothing is merged
    until build() is called, so completeness is always computed over the
    full set of fragments.
    """

    def __init__(self):
        self._action_models: List[ActionModel] = []
        self._fragments: List[MarkupElement] = []
        self._style_rules: List[StyleRule] = []
        self.rejected: List[RejectedRecord] = []

    # --- Actions ---

    def add_action_model(self, model: ActionModel) -> "DocumentBuilder":
        self._action_models.append(model)
        return self

    def add_action_records(self, records: Iterable[Dict[str, Any]]) -> "DocumentBuilder":
        result = load_action_model(records)
        self.rejected.extend(result.rejected)
        return self.add_action_model(result.model)

    # --- Markup ---

    def add_fragment(self, root: MarkupElement) -> "DocumentBuilder":
        self._fragments.append(root)
        return self

    def add_markup_records(self, trees: Iterable[Dict[str, Any]]) -> "DocumentBuilder":
        result = load_markup_model(trees)
        self.rejected.extend(result.rejected)
        for root in result.model.fragments:
            self.add_fragment(root)
        return self

    def add_html_fragment(self, html: str, file: str = "inline.html") -> "DocumentBuilder":
        """
        Parses an HTML snippet into markup fragments, one per top-level element.
        Locations come from the parser's line/column bookkeeping.
        """
        if not html or not html.strip():
            return self

        clean_html = html.replace('\ufeff', '')
        soup = BeautifulSoup(clean_html, 'html.parser')

        added = 0
        for child in soup.contents:
            if isinstance(child, Tag):
                self.add_fragment(self._build_tree(child, file))
                added += 1

        logger.debug(f"Parsed {added} fragment(s) from {file}")
        return self

    def _build_tree(self, tag: Tag, file: str) -> MarkupElement:
        """Recursively converts a BeautifulSoup Tag into a MarkupElement."""
        children = []
        own_text = []
        for child in tag.children:
            if isinstance(child, Tag):
                children.append(self._build_tree(child, file))
            elif isinstance(child, NavigableString) and not isinstance(child, Comment) and tag.name not in _RAW_TEXT_TAGS:
                text = str(child).strip()
                if text:
                    own_text.append(text)

        attributes = {}
        for name, value in tag.attrs.items():
            # bs4 hands multi-valued attributes (class, rel) back as lists
            attributes[name] = " ".join(value) if isinstance(value, list) else str(value)

        location = SourceLocation(
            file=file,
            line=tag.sourceline or 0,
            column=(tag.sourcepos or 0) + 1 if tag.sourceline else 0,
        )
        return MarkupElement(
            tagName=tag.name,
            attributes=attributes,
            children=children,
            location=location,
            textContent=" ".join(own_text) or None,
        )

    # --- Style ---

    def add_style_model(self, model: StyleModel) -> "DocumentBuilder":
        self._style_rules.extend(model.rules)
        return self

    def add_style_records(self, rules: Iterable[Dict[str, Any]]) -> "DocumentBuilder":
        result = load_style_model(rules)
        self.rejected.extend(result.rejected)
        return self.add_style_model(result.model)

    # --- Merge ---

    @property
    def fragment_count(self) -> int:
        return len(self._fragments)

    def build(self) -> DocumentModel:
        """Merges everything collected so far into a read-only DocumentModel."""
        if self.rejected:
            logger.warning(f"Building document with {len(self.rejected)} rejected record(s)")
        return DocumentModel(
            action_model=ActionModel.merge(*self._action_models),
            markup=MarkupModel(self._fragments),
            style=StyleModel(self._style_rules),
        )

    def build_context(self, scope: Optional[AnalysisScope] = None) -> AuditContext:
        """
        AuditContext for the collected models. Without markup the context is
        file scoped and carries only the action model.
        """
        if not self._fragments:
            return AuditContext(action_model=ActionModel.merge(*self._action_models), scope=scope or AnalysisScope.FILE)
        return AuditContext(document_model=self.build(), scope=scope or AnalysisScope.DOCUMENT)
