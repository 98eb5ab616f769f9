# src/auditor/model.py
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from action_ir.model import SourceLocation


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ConfidenceLevel(str, Enum):
    """Ordered LOW < MEDIUM < HIGH; decides whether a finding may be reported as an error."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self.value]

    def __lt__(self, other):
        if isinstance(other, ConfidenceLevel):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, ConfidenceLevel):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, ConfidenceLevel):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, ConfidenceLevel):
            return self.rank >= other.rank
        return NotImplemented

    @classmethod
    def from_completeness(cls, completeness: float) -> "ConfidenceLevel":
        if completeness >= 0.9:
            return cls.HIGH
        if completeness >= 0.5:
            return cls.MEDIUM
        return cls.LOW


_LEVEL_RANK = {"LOW": 0, "MEDIUM": 1, "HIGH": 2}


class Confidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: ConfidenceLevel
    reason: str
    tree_completeness: float = Field(default=0.0, ge=0.0, le=1.0)


class IssueFix(BaseModel):
    """Advisory fix. Never applied by the engine."""
    model_config = ConfigDict(frozen=True)

    description: str
    code: str = ""
    location: Optional[SourceLocation] = None


class Issue(BaseModel):
    """
    A single accessibility finding produced by an analyzer.
    Issues are read-only and carry no identity across runs.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: str
    severity: Severity
    message: str
    location: SourceLocation
    wcag_criteria: List[str] = Field(default_factory=list)
    confidence: Confidence
    related_locations: List[SourceLocation] = Field(default_factory=list)
    element_context: Optional[Any] = Field(default=None, exclude=True, repr=False)
    fix: Optional[IssueFix] = None
    analyzer: str = ""

    @field_validator("wcag_criteria")
    @classmethod
    def check_criteria(cls, v: List[str]) -> List[str]:
        """WCAG criteria are numeric codes such as '2.1.1'."""
        for code in v:
            parts = code.split(".")
            if len(parts) != 3 or not all(p.isdigit() for p in parts):
                raise ValueError(f"Invalid WCAG criterion: {code!r}")
        return v

    def to_record(self) -> Dict[str, Any]:
        """Flat row used for tabular export."""
        return {
            "Type": self.type,
            "Severity": self.severity.value,
            "Confidence": self.confidence.level.value,
            "Completeness": round(self.confidence.tree_completeness, 3),
            "WCAG": ", ".join(self.wcag_criteria),
            "File": self.location.file,
            "Line": self.location.line,
            "Column": self.location.column,
            "Message": self.message,
            "Fix": self.fix.description if self.fix else "",
            "Analyzer": self.analyzer,
        }
