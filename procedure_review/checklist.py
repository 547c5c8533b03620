#!/usr/bin/env python3
"""
Section Checklist Scorer
========================
Scores a procedure document against a weighted checklist of governance
sections.

Each check is a named, weighted rule. The score is the share of total
weight whose rules fired, so every point can be traced back to one check.
Weights, priorities and descriptions below are defaults; deployments
override them through a JSON checklist file (see ``load_checklist``).
"""

import json
import re
from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from .config_logging import get_logger, ConfigurationError
from .models import CheckDefinition, ChecklistResult, Priority

logger = get_logger('checklist')

# Minimum text length for the Procedures check to count
PROCEDURES_MIN_LENGTH = 1000

TABLE_OF_CONTENTS = 'Table of Contents'
DOCUMENT_CONTROL = 'Document Control'
RISK_ASSESSMENT = 'Risk Assessment'


def pattern_rule(pattern: str, flags: int = re.IGNORECASE) -> Callable[[str], bool]:
    """Build a detection rule that fires when ``pattern`` occurs anywhere."""
    compiled = re.compile(pattern, flags)

    def rule(text: str) -> bool:
        return compiled.search(text) is not None

    return rule


def _procedures_rule(text: str) -> bool:
    # A heading alone is not a procedure; require substantive content too
    return len(text) > PROCEDURES_MIN_LENGTH and _PROCEDURE_WORDS(text)


_PROCEDURE_WORDS = pattern_rule(r'procedure|process|step|workflow|method')


DEFAULT_CHECKLIST: Tuple[CheckDefinition, ...] = (
    CheckDefinition(
        name=TABLE_OF_CONTENTS,
        weight=10,
        priority=Priority.MEDIUM,
        description='Include a table of contents so readers can navigate the procedure',
        detection_rule=pattern_rule(
            r'table\s+of\s+contents|contents\s+page|^contents$|index$',
            re.IGNORECASE | re.MULTILINE
        ),
    ),
    CheckDefinition(
        name='Purpose',
        weight=15,
        priority=Priority.HIGH,
        description='State the purpose and objectives of the procedure',
        detection_rule=pattern_rule(r'purpose|objectives?|aims?'),
    ),
    CheckDefinition(
        name='Scope',
        weight=15,
        priority=Priority.HIGH,
        description='Define what the procedure covers and who it applies to',
        detection_rule=pattern_rule(r'scope|applies?\s+to|coverage'),
    ),
    CheckDefinition(
        name=DOCUMENT_CONTROL,
        weight=12,
        priority=Priority.HIGH,
        description='Add version control and revision history information',
        detection_rule=pattern_rule(
            r'document\s+control|version\s+control|document\s+management|revision\s+history'
        ),
    ),
    CheckDefinition(
        name='Responsibilities',
        weight=10,
        priority=Priority.MEDIUM,
        description='List the roles responsible and accountable for each activity (e.g. a RACI)',
        detection_rule=pattern_rule(r'responsibilities|responsible\s+part(?:y|ies)|accountable|raci'),
    ),
    CheckDefinition(
        name='Procedures',
        weight=20,
        priority=Priority.HIGH,
        description='Describe the procedure steps in enough detail to be followed',
        detection_rule=_procedures_rule,
    ),
    CheckDefinition(
        name=RISK_ASSESSMENT,
        weight=10,
        priority=Priority.MEDIUM,
        description='Assess the risks of the process, their likelihood and impact',
        detection_rule=pattern_rule(r'risk\s+assessment|risk\s+analysis|risk\s+management|risk\s+matrix'),
    ),
    CheckDefinition(
        name='Approval',
        weight=8,
        priority=Priority.LOW,
        description='Record who approved the procedure and when it was signed off',
        detection_rule=pattern_rule(r'approval|approved\s+by|sign[\s-]*off|authori[sz]ed'),
    ),
    CheckDefinition(
        name='Review Date',
        weight=5,
        priority=Priority.LOW,
        description='Set a review date and review frequency',
        detection_rule=pattern_rule(r'review\s+date|next\s+review|review\s+frequency'),
    ),
)


def round_half_up(value: float) -> int:
    """Round .5 away from zero (``round()`` would use banker's rounding)."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def validate_checklist(checklist: Sequence[CheckDefinition]) -> float:
    """
    Check a checklist is usable and return its total weight.

    Raises:
        ConfigurationError: empty checklist, negative weights, duplicate
            names or a non-positive total weight
    """
    if not checklist:
        raise ConfigurationError("Checklist has no checks")

    seen = set()
    total = 0
    for check in checklist:
        if check.name in seen:
            raise ConfigurationError(f"Duplicate check name: {check.name}", check=check.name)
        seen.add(check.name)
        if check.weight < 0:
            raise ConfigurationError(f"Check '{check.name}' has a negative weight", check=check.name)
        if check.priority not in Priority.ALL:
            raise ConfigurationError(f"Check '{check.name}' has invalid priority {check.priority!r}",
                                     check=check.name)
        total += check.weight

    if total <= 0:
        raise ConfigurationError("Checklist total weight must be greater than zero", total_weight=total)
    return total


def score_checklist(text: str, checklist: Sequence[CheckDefinition] = DEFAULT_CHECKLIST) -> ChecklistResult:
    """Run every check against ``text`` and compute the weighted score."""
    total_weight = validate_checklist(checklist)

    achieved_weight = 0
    found = []
    missing = []
    for check in checklist:
        if check.detection_rule(text):
            achieved_weight += check.weight
            found.append(check.name)
        else:
            missing.append(check.name)

    score = round_half_up(achieved_weight / total_weight * 100)

    logger.debug("Section analysis completed", found_sections=len(found),
                 missing_sections=len(missing), base_score=score)

    return ChecklistResult(
        score=score,
        found_elements=tuple(found),
        missing_elements=tuple(missing),
        checklist=tuple(checklist),
        has_table_of_contents=TABLE_OF_CONTENTS in found,
        has_document_control=DOCUMENT_CONTROL in found,
        has_risk_assessment=RISK_ASSESSMENT in found,
    )


def build_checklist(overrides: Mapping[str, Mapping[str, Any]],
                    base: Iterable[CheckDefinition] = DEFAULT_CHECKLIST) -> Tuple[CheckDefinition, ...]:
    """
    Apply externally configured weights/priorities/descriptions.

    ``overrides`` maps check name to any of ``weight``, ``priority``,
    ``description``. Detection rules always come from ``base``.
    """
    base = tuple(base)
    known = {check.name for check in base}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigurationError(f"Unknown checks in configuration: {', '.join(unknown)}",
                                 unknown=unknown)

    checklist = []
    for check in base:
        settings = overrides.get(check.name) or {}
        changes = {}
        if 'weight' in settings:
            try:
                changes['weight'] = float(settings['weight'])
            except (TypeError, ValueError):
                raise ConfigurationError(f"Invalid weight for '{check.name}': {settings['weight']!r}",
                                         check=check.name)
        if 'priority' in settings:
            changes['priority'] = str(settings['priority']).upper()
        if 'description' in settings:
            changes['description'] = str(settings['description'])
        checklist.append(replace(check, **changes) if changes else check)

    validate_checklist(checklist)
    return tuple(checklist)


def load_checklist(path: Union[str, Path]) -> Tuple[CheckDefinition, ...]:
    """Load checklist overrides from a JSON file.

    Accepts either ``{"checks": {...}}`` or the mapping itself.
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not load checklist file {path}: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Checklist file {path} must contain a JSON object", path=str(path))
    checks: Optional[Dict] = data.get('checks', data)
    if not isinstance(checks, dict):
        raise ConfigurationError(f"'checks' in {path} must be an object", path=str(path))

    logger.info("Checklist configuration loaded", path=str(path), overridden=len(checks))
    return build_checklist(checks)
