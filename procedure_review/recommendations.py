#!/usr/bin/env python3
"""
Recommendation Generator
========================
Turns checklist gaps, extracted entities and document statistics into an
ordered list of improvement suggestions for the document author.

Score adjustments are decided by the analyzer before this runs; the
generator only describes adjustments it is handed and never applies them.
"""

from typing import List, Sequence, Tuple

from .models import (
    ChecklistResult, DocumentStats, EntityResult, Priority, Recommendation, ScoreAdjustment
)

LONG_DOCUMENT_LENGTH = 20000
MIN_SENTENCES = 20

CONTENT_LENGTH = 'content_length'
STRUCTURE_BONUS = 'structure_bonus'


def _format_weight(weight: float) -> str:
    return f"{weight:g}"


def _missing_section_recommendations(checklist_result: ChecklistResult) -> List[Recommendation]:
    recommendations = []
    for name in checklist_result.missing_elements:
        check = checklist_result.get_check(name)
        description = check.description or f"Essential {name.lower()} information"
        recommendations.append(Recommendation(
            type='missing_section',
            priority=check.priority,
            message=f"Add a {name} section: {description}",
            impact=f"+{_format_weight(check.weight)} points",
            category='Structure',
        ))
    return recommendations


def _length_recommendations(stats: DocumentStats,
                            adjustments: Sequence[ScoreAdjustment]) -> List[Recommendation]:
    applied = {adjustment.kind: adjustment for adjustment in adjustments}
    recommendations = []

    if CONTENT_LENGTH in applied:
        recommendations.append(Recommendation(
            type='content_length',
            priority=Priority.HIGH,
            message='Document appears too short for a comprehensive procedure. '
                    'Consider adding more detail and examples.',
            impact=applied[CONTENT_LENGTH].impact,
            category='Content Quality',
        ))
    elif stats.length > LONG_DOCUMENT_LENGTH:
        recommendations.append(Recommendation(
            type='content_optimization',
            priority=Priority.MEDIUM,
            message='Document is very long. Consider breaking into smaller, '
                    'focused procedures for better usability.',
            impact='Usability Impact',
            category='Structure',
        ))

    if STRUCTURE_BONUS in applied:
        recommendations.append(Recommendation(
            type='structure_bonus',
            priority=Priority.LOW,
            message='Excellent document structure with both risk assessment '
                    'and document control sections.',
            impact=applied[STRUCTURE_BONUS].impact,
            category='Quality Bonus',
        ))
    return recommendations


def _content_recommendations(stats: DocumentStats) -> List[Recommendation]:
    if stats.sentence_count >= MIN_SENTENCES:
        return []
    return [Recommendation(
        type='content_depth',
        priority=Priority.MEDIUM,
        message='Document may lack sufficient detail. Consider adding more comprehensive explanations.',
        impact='Content Quality',
        category='Content Quality',
    )]


def _governance_recommendations(entities: EntityResult) -> List[Recommendation]:
    owner_count = len(entities.owners)
    if owner_count == 0:
        recommendation = Recommendation(
            type='governance',
            priority=Priority.HIGH,
            message='No document owners identified. Add clear ownership information '
                    'with names and roles for accountability.',
            impact='Compliance Risk',
            category='Governance',
        )
    elif owner_count == 1:
        recommendation = Recommendation(
            type='governance',
            priority=Priority.MEDIUM,
            message='Consider adding a secondary owner for better governance, '
                    'continuity, and backup coverage.',
            impact='Risk Mitigation',
            category='Governance',
        )
    else:
        recommendation = Recommendation(
            type='governance',
            priority=Priority.LOW,
            message='Good ownership structure with multiple stakeholders identified.',
            impact='Best Practice',
            category='Governance',
        )
    return [recommendation]


def _compliance_recommendations(entities: EntityResult) -> List[Recommendation]:
    if entities.sign_off_dates:
        return []
    return [Recommendation(
        type='compliance',
        priority=Priority.HIGH,
        message='No sign-off or review dates found. Add approval dates, effective dates, '
                'and next review schedule.',
        impact='Compliance Risk',
        category='Compliance',
    )]


def _formatting_recommendations(stats: DocumentStats) -> List[Recommendation]:
    if stats.has_numbered_steps or stats.has_bullet_points:
        return []
    return [Recommendation(
        type='formatting',
        priority=Priority.MEDIUM,
        message='Consider using numbered steps or bullet points to improve readability and usability.',
        impact='Usability',
        category='Formatting',
    )]


def sort_by_priority(recommendations: Sequence[Recommendation]) -> Tuple[Recommendation, ...]:
    """Stable sort, HIGH first; equal priorities keep generation order."""
    return tuple(sorted(recommendations, key=lambda r: r.rank, reverse=True))


def generate_recommendations(checklist_result: ChecklistResult,
                             entities: EntityResult,
                             stats: DocumentStats,
                             adjustments: Sequence[ScoreAdjustment] = ()) -> Tuple[Recommendation, ...]:
    """
    Build the prioritised recommendation list.

    Args:
        checklist_result: Found/missing checks with their definitions
        entities: Owners, dates, departments and roles found
        stats: Length and structure signals
        adjustments: Score adjustments the analyzer already applied

    Returns:
        Recommendations ordered HIGH > MEDIUM > LOW
    """
    recommendations: List[Recommendation] = []
    recommendations += _missing_section_recommendations(checklist_result)
    recommendations += _length_recommendations(stats, adjustments)
    recommendations += _content_recommendations(stats)
    recommendations += _governance_recommendations(entities)
    recommendations += _compliance_recommendations(entities)
    recommendations += _formatting_recommendations(stats)
    return sort_by_priority(recommendations)
