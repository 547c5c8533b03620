"""
Risk Rating Estimator
=====================
Coarse Low/Medium/High rating from how often risk vocabulary appears.

This is a frequency proxy for how thoroughly risks are discussed, not a
semantic risk model. Counts are not normalised by document length, so a
long document with ordinary keyword density can still rate High.
"""

from .config_logging import get_logger
from .models import RiskAssessment

logger = get_logger('risk_rating')

RISK_KEYWORDS = (
    'high risk', 'medium risk', 'low risk',
    'risk score', 'risk level', 'risk rating',
    'critical', 'moderate', 'minimal', 'severe',
    'probability', 'impact', 'likelihood'
)

HIGH_THRESHOLD = 5     # count > 5 -> High
MEDIUM_THRESHOLD = 2   # count > 2 -> Medium


def count_risk_keywords(text: str) -> int:
    """Total non-overlapping, case-insensitive occurrences of every keyword."""
    lower_text = text.lower()
    return sum(lower_text.count(keyword) for keyword in RISK_KEYWORDS)


def rating_for(count: int) -> str:
    if count > HIGH_THRESHOLD:
        return 'High'
    if count > MEDIUM_THRESHOLD:
        return 'Medium'
    return 'Low'


def estimate_risk(text: str, has_risk_section: bool) -> RiskAssessment:
    """
    Rate the document's risk coverage.

    Only meaningful when a risk assessment section was detected; otherwise
    incidental mentions elsewhere would give a false signal, so both fields
    are None.
    """
    if not has_risk_section:
        return RiskAssessment()

    count = count_risk_keywords(text)
    assessment = RiskAssessment(risk_score=count, risk_rating=rating_for(count))
    logger.debug("Risk rating estimated", risk_score=count, risk_rating=assessment.risk_rating)
    return assessment
