"""
Procedure Analysis Models
=========================
Data classes passed between the analysis stages and returned to callers.

Every stage returns a new frozen object; the analyzer composes them into an
AnalysisResult instead of filling in a shared dictionary.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple


class Priority:
    """Recommendation / checklist priority levels."""
    HIGH = 'HIGH'
    MEDIUM = 'MEDIUM'
    LOW = 'LOW'

    ALL = (HIGH, MEDIUM, LOW)
    RANK = {HIGH: 3, MEDIUM: 2, LOW: 1}


@dataclass(frozen=True)
class CheckDefinition:
    """
    One checklist item.

    Attributes:
        name: Display name, also the key used in found/missing lists
        weight: Points contributed when the rule fires (non-negative)
        detection_rule: Pure function of the document text
        priority: Priority of the recommendation raised when missing
        description: Used to build the "missing section" recommendation
    """
    name: str
    weight: float
    detection_rule: Callable[[str], bool] = field(compare=False, repr=False)
    priority: str = Priority.MEDIUM
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'weight': self.weight,
            'priority': self.priority,
            'description': self.description,
        }


@dataclass(frozen=True)
class ChecklistResult:
    """Outcome of running a checklist against document text."""
    score: int
    found_elements: Tuple[str, ...]
    missing_elements: Tuple[str, ...]
    checklist: Tuple[CheckDefinition, ...]
    has_table_of_contents: bool = False
    has_document_control: bool = False
    has_risk_assessment: bool = False

    @property
    def weights(self) -> Dict[str, float]:
        return {check.name: check.weight for check in self.checklist}

    def get_check(self, name: str) -> Optional[CheckDefinition]:
        for check in self.checklist:
            if check.name == name:
                return check
        return None


@dataclass(frozen=True)
class EntityResult:
    """Validated entities pulled out of the document text.

    Each field has set semantics (no duplicates) but keeps first-seen order
    so results are reproducible.
    """
    owners: Tuple[str, ...] = ()
    sign_off_dates: Tuple[str, ...] = ()
    departments: Tuple[str, ...] = ()
    roles: Tuple[str, ...] = ()


@dataclass(frozen=True)
class RiskAssessment:
    """Keyword-frequency risk rating; both fields None without a risk section."""
    risk_score: Optional[int] = None
    risk_rating: Optional[str] = None


@dataclass(frozen=True)
class DocumentStats:
    """Length and structure signals computed from the raw text."""
    length: int = 0
    sentence_count: int = 0
    paragraph_count: int = 0
    has_numbered_steps: bool = False
    has_bullet_points: bool = False
    tables_found: int = 0
    has_structured_doc_control: bool = False


@dataclass(frozen=True)
class ScoreAdjustment:
    """A penalty or bonus applied directly to the checklist score."""
    kind: str   # 'content_length', 'structure_bonus'
    delta: int

    @property
    def impact(self) -> str:
        return f"{self.delta:+d} points"


@dataclass(frozen=True)
class Recommendation:
    """A priority-tagged suggestion shown to the document author."""
    type: str
    priority: str
    message: str
    impact: str
    category: str

    @property
    def rank(self) -> int:
        return Priority.RANK.get(self.priority, 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.type,
            'priority': self.priority,
            'message': self.message,
            'impact': self.impact,
            'category': self.category,
        }


def quality_level(score: int) -> str:
    """Map a final score to the label shown on dashboards."""
    if score >= 80:
        return 'High'
    if score >= 60:
        return 'Medium'
    return 'Low'


@dataclass(frozen=True)
class AnalysisResult:
    """
    Final output of a document analysis.

    ``to_dict()`` produces the camelCase structure the upload workflow
    stores next to the procedure record. The summary block is derived from
    the other fields every time it is requested.
    """
    score: int
    found_elements: Tuple[str, ...] = ()
    missing_elements: Tuple[str, ...] = ()
    has_table_of_contents: bool = False
    has_document_control: bool = False
    has_risk_assessment: bool = False
    entities: EntityResult = field(default_factory=EntityResult)
    risk: RiskAssessment = field(default_factory=RiskAssessment)
    stats: DocumentStats = field(default_factory=DocumentStats)
    ai_recommendations: Tuple[Recommendation, ...] = ()
    error: Optional[str] = None

    @property
    def owners(self) -> Tuple[str, ...]:
        return self.entities.owners

    @property
    def sign_off_dates(self) -> Tuple[str, ...]:
        return self.entities.sign_off_dates

    @property
    def summary(self) -> Dict[str, Any]:
        return {
            'totalElements': len(self.found_elements) + len(self.missing_elements),
            'foundElements': len(self.found_elements),
            'missingElements': len(self.missing_elements),
            'documentLength': self.stats.length,
            'hasStructure': self.has_table_of_contents,
            'hasGovernance': self.has_document_control,
            'qualityLevel': quality_level(self.score),
            'tablesFound': self.stats.tables_found,
            'hasStructuredDocControl': self.stats.has_structured_doc_control,
            'ownersFound': len(self.entities.owners),
            'datesFound': len(self.entities.sign_off_dates),
            'departmentsFound': len(self.entities.departments),
            'rolesFound': len(self.entities.roles),
            'sentenceCount': self.stats.sentence_count,
            'paragraphCount': self.stats.paragraph_count,
            'hasNumberedSteps': self.stats.has_numbered_steps,
            'hasBulletPoints': self.stats.has_bullet_points,
        }

    def details_dict(self) -> Dict[str, Any]:
        details = {
            'hasTableOfContents': self.has_table_of_contents,
            'hasDocumentControl': self.has_document_control,
            'hasOwners': bool(self.entities.owners),
            'hasSignOffDates': bool(self.entities.sign_off_dates),
            'hasRiskAssessment': self.has_risk_assessment,
            'riskScore': self.risk.risk_score,
            'riskRating': self.risk.risk_rating,
            'owners': list(self.entities.owners),
            'signOffDates': list(self.entities.sign_off_dates),
            'departments': list(self.entities.departments),
            'roles': list(self.entities.roles),
            'missingElements': list(self.missing_elements),
            'foundElements': list(self.found_elements),
            'summary': self.summary,
        }
        if self.error is not None:
            details['error'] = self.error
        return details

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'score': self.score,
            'details': self.details_dict(),
            'aiRecommendations': [r.to_dict() for r in self.ai_recommendations],
        }
