# src/auditor/dom/core.py
from enum import Enum
from typing import Callable, List, Optional, Set

from pydantic import BaseModel, ConfigDict

from action_ir.action_model import ActionModel
from action_ir.model import SourceLocation
from auditor.dom.document import DocumentModel, ElementContext
from auditor.model import Confidence, ConfidenceLevel, Issue, IssueFix, Severity


def audit_spec(codes: List[str]):
    """
    Decorator to declare which issue codes a specific audit rule function returns.
    Facilitates auto-discovery by the AnalyzerRegistry.
    """
    def decorator(func):
        func.defined_codes = codes
        return func
    return decorator


class AnalysisScope(str, Enum):
    FILE = "file"
    DOCUMENT = "document"
    WORKSPACE = "workspace"


class AuditContext(BaseModel):
    """
    Input bundle for one analysis run: a merged document when available,
    otherwise the action model of a single file.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    document_model: Optional[DocumentModel] = None
    action_model: Optional[ActionModel] = None
    scope: AnalysisScope = AnalysisScope.FILE

    @property
    def actions(self) -> ActionModel:
        """The action model to query; falls back to the one merged into the document."""
        if self.action_model is not None:
            return self.action_model
        if self.document_model is not None:
            return self.document_model.action_model
        return ActionModel()

    @property
    def has_markup(self) -> bool:
        return self.document_model is not None and self.document_model.fragment_count > 0


REASON_FULL = "full document analysis with complete context"
REASON_DOCUMENT_SCOPE = "document-scope analysis with markup, style and action context"
REASON_PARTIAL = "partial document context"
REASON_FILE_ONLY = "file-scope only; handler may exist in another file"


class IssueFactory:
    """
    Shared confidence policy and Issue construction.

    Every analyzer builds its issues through one of these so confidence is
    decided the same way across the whole catalogue.
    """

    def __init__(self, analyzer: str = ""):
        self.analyzer = analyzer

    def bind(self, analyzer: str) -> "IssueFactory":
        return IssueFactory(analyzer=analyzer)

    @staticmethod
    def compute_confidence(context: AuditContext, element_context: Optional[ElementContext] = None) -> Confidence:
        doc = context.document_model
        if doc is None:
            return Confidence(level=ConfidenceLevel.LOW, reason=REASON_FILE_ONLY, tree_completeness=0.0)

        completeness = doc.tree_completeness
        if element_context is not None:
            level, reason = ConfidenceLevel.HIGH, REASON_FULL
        elif context.scope != AnalysisScope.FILE:
            level, reason = ConfidenceLevel.HIGH, REASON_DOCUMENT_SCOPE
        else:
            level, reason = ConfidenceLevel.MEDIUM, REASON_PARTIAL
        return Confidence(level=level, reason=reason, tree_completeness=completeness)

    def create(
            self,
            context: AuditContext,
            issue_type: str,
            severity: Severity,
            message: str,
            location: SourceLocation,
            wcag_criteria: List[str],
            element_context: Optional[ElementContext] = None,
            related_locations: Optional[List[SourceLocation]] = None,
            fix: Optional[IssueFix] = None
    ) -> Issue:
        return Issue(
            type=issue_type,
            severity=severity,
            message=message,
            location=location,
            wcag_criteria=list(wcag_criteria),
            confidence=self.compute_confidence(context, element_context),
            related_locations=list(related_locations or []),
            element_context=element_context,
            fix=fix,
            analyzer=self.analyzer,
        )


# A rule inspects the context and returns its findings.
AuditRule = Callable[[AuditContext, IssueFactory], List[Issue]]


class AnalyzerDefinition:
    """
    Configuration object binding an analyzer name to its audit rules.
    Rule modules expose one of these as DEFINITION.
    """

    def __init__(
            self,
            name: str,
            description: str,
            audit_rules: Optional[List[AuditRule]] = None,
            possible_codes: Optional[List[str]] = None
    ):
        self.name = name
        self.description = description
        self.audit_rules = audit_rules or []

        # --- Auto-Discovery of Issue Codes ---
        final_codes: Set[str] = set(possible_codes or [])

        for rule in self.audit_rules:
            if hasattr(rule, 'defined_codes'):
                final_codes.update(rule.defined_codes)

        self.codes = sorted(list(final_codes))

    def analyze(self, context: AuditContext, factory: Optional[IssueFactory] = None) -> List[Issue]:
        """Runs every rule in order and concatenates their issues."""
        bound = (factory or IssueFactory()).bind(self.name)
        issues: List[Issue] = []
        for rule in self.audit_rules:
            issues.extend(rule(context, bound))
        return issues

    def __repr__(self) -> str:
        return f"AnalyzerDefinition({self.name!r}, codes={self.codes})"
