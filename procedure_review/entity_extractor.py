#!/usr/bin/env python3
"""
Entity Extractor for Procedure Documents
========================================
Pulls governance metadata out of procedure text using pattern matching:
- Document owners ("Owner:", "Prepared by:", "Maintained by:" ...)
- Sign-off / review dates (labelled and bare date shapes)
- Departments, divisions, units and teams
- Role keywords (manager, director, officer ...)

Extraction is recall oriented. Every candidate goes through a validator and
bad candidates are dropped silently; they never surface as errors.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, List, Optional, Pattern, Sequence, Tuple

from .config_logging import get_logger
from .models import EntityResult

logger = get_logger('entity_extractor')

# Label followed by ASCII or full-width colon, value up to a line/tab/comma/semicolon.
# Table rows arrive as "cell | cell", so a pipe also bounds the value.
_COLON = r'\s*[:：][ \t|]*'
_VALUE = r'([^\n\r\t,;|]+)'

MIN_DATE_YEAR = 1990   # exclusive
MAX_DATE_YEAR = 2040   # exclusive

MONTH_NAMES = (
    'january', 'february', 'march', 'april', 'may', 'june',
    'july', 'august', 'september', 'october', 'november', 'december'
)
_MONTH = r'(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*'


@dataclass(frozen=True)
class ExtractionRule:
    """A pattern whose first group is a candidate, plus the validator it must pass."""
    name: str
    pattern: Pattern
    validator: Callable[[str], bool]


# =============================================================================
# VALIDATORS
# =============================================================================

OWNER_NOISE_PATTERNS = [
    re.compile(r'last\s+updated?\s+date', re.IGNORECASE),
    re.compile(r'sign[\s-]*off\s+date', re.IGNORECASE),
    re.compile(r'effective\s+date', re.IGNORECASE),
    re.compile(r'expiry\s+date', re.IGNORECASE),
    re.compile(r'version\s+\d+', re.IGNORECASE),
    re.compile(r'table\s+of\s+contents', re.IGNORECASE),
    re.compile(r'page\s+\d+', re.IGNORECASE),
    re.compile(r'^\d+$'),
    re.compile(r'^[^a-zA-Z]*$'),
]

# Field labels and placeholders that end up after "Owner:" in templates
OWNER_STOPLIST = (
    'name', 'role', 'position', 'department', 'date', 'sign-off',
    'version', 'control', 'table', 'header', 'title', 'section',
    'last updated', 'current', 'previous', 'next', 'tbd', 'tba',
    'pending', 'draft', 'final', 'approved', 'n/a', 'none'
)

_NAME_WORD = re.compile(r'^[a-z\s\-.]+$')


def is_valid_owner_name(name: str) -> bool:
    """Check that an extracted owner candidate looks like a person's name."""
    if not name or len(name) < 2 or len(name) > 100:
        return False

    for pattern in OWNER_NOISE_PATTERNS:
        if pattern.search(name):
            return False

    lower_name = name.lower().strip()
    if any(word == lower_name or word in lower_name for word in OWNER_STOPLIST):
        return False

    words = [word for word in lower_name.split() if len(word) >= 2]
    return bool(words) and all(_NAME_WORD.match(word) for word in words)


def _year(value: str) -> int:
    year = int(value)
    if len(value) == 2:
        # Same pivot as strptime's %y
        return year + (2000 if year < 69 else 1900)
    if len(value) != 4:
        raise ValueError(f"Unsupported year: {value}")
    return year


def _month_number(word: str) -> int:
    word = word.lower()
    for index, month in enumerate(MONTH_NAMES, 1):
        if len(word) >= 3 and month.startswith(word):
            return index
    if word == 'sept':
        return 9
    raise ValueError(f"Unknown month: {word}")


def _parse_day_first(match: 're.Match') -> Optional[date]:
    day, month, year = match.group(1), match.group(2), _year(match.group(3))
    for d, m in ((day, month), (month, day)):
        try:
            return date(year, int(m), int(d))
        except ValueError:
            continue
    return None


def _parse_year_first(match: 're.Match') -> date:
    return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def _parse_day_month_name(match: 're.Match') -> date:
    return date(int(match.group(3)), _month_number(match.group(2)), int(match.group(1)))


def _parse_month_name_day(match: 're.Match') -> date:
    return date(int(match.group(3)), _month_number(match.group(1)), int(match.group(2)))


# (shape, parser) pairs, tried in order on the cleaned candidate
DATE_SHAPES: List[Tuple[Pattern, Callable]] = [
    (re.compile(r'(?<!\d)(\d{4})[\s/\-.](\d{1,2})[\s/\-.](\d{1,2})(?!\d)'), _parse_year_first),
    (re.compile(r'(?<!\d)(\d{1,2})[\s/\-.](\d{1,2})[\s/\-.](\d{2,4})(?!\d)'), _parse_day_first),
    (re.compile(r'(?<!\d)(\d{1,2})\s+(' + _MONTH + r')\s+(\d{4})(?!\d)', re.IGNORECASE), _parse_day_month_name),
    (re.compile(r'(' + _MONTH + r')\s+(\d{1,2}),?\s+(\d{4})(?!\d)', re.IGNORECASE), _parse_month_name_day),
]


def parse_date(value: str) -> Optional[date]:
    """Parse the first recognisable date shape in ``value``, or None."""
    if not value:
        return None
    clean = re.sub(r'[^\w\s/\-.]', '', value.strip())
    for shape, parser in DATE_SHAPES:
        match = shape.search(clean)
        if not match:
            continue
        try:
            parsed = parser(match)
        except ValueError:
            continue
        if parsed is not None:
            return parsed
    return None


def is_valid_date(value: str) -> bool:
    """Check that a date candidate parses to a plausible sign-off year."""
    if not value or len(value.strip()) < 5:
        return False
    parsed = parse_date(value)
    return parsed is not None and MIN_DATE_YEAR < parsed.year < MAX_DATE_YEAR


def is_valid_department(value: str) -> bool:
    return 2 < len(value) < 100


# =============================================================================
# RULES
# =============================================================================

def _label_rule(name: str, label: str, validator: Callable[[str], bool]) -> ExtractionRule:
    return ExtractionRule(name, re.compile(label + _COLON + _VALUE, re.IGNORECASE), validator)


OWNER_RULES = [
    _label_rule('owner', r'(?:document\s+|procedure\s+)?owners?', is_valid_owner_name),
    _label_rule('prepared_by', r'prepared\s+by', is_valid_owner_name),
    _label_rule('authored_by', r'authored\s+by', is_valid_owner_name),
    _label_rule('responsible', r'responsible', is_valid_owner_name),
    _label_rule('accountable', r'accountable', is_valid_owner_name),
    _label_rule('created_by', r'created\s+by', is_valid_owner_name),
    _label_rule('maintained_by', r'maintained\s+by', is_valid_owner_name),
]

DATE_RULES = [
    ExtractionRule(
        'labelled_date',
        re.compile(
            r'(?:review|approval|effective|expiry|next\s+review|last\s+updated?)\s*date\s*[:：][\s|]*([^\n\r|]+)',
            re.IGNORECASE
        ),
        is_valid_date,
    ),
    ExtractionRule('day_month_year', re.compile(r'(?<!\d)(\d{1,2}[\s/\-.]\d{1,2}[\s/\-.]\d{2,4})(?!\d)'),
                   is_valid_date),
    ExtractionRule('year_month_day', re.compile(r'(?<!\d)(\d{4}[\s/\-.]\d{1,2}[\s/\-.]\d{1,2})(?!\d)'),
                   is_valid_date),
    ExtractionRule('day_month_name_year',
                   re.compile(r'(?<!\d)(\d{1,2}\s+' + _MONTH + r'\s+\d{4})(?!\d)', re.IGNORECASE),
                   is_valid_date),
    ExtractionRule('month_name_day_year',
                   re.compile(r'(' + _MONTH + r'\s+\d{1,2},?\s+\d{4})(?!\d)', re.IGNORECASE),
                   is_valid_date),
]

DEPARTMENT_RULES = [
    _label_rule('department', r'departments?', is_valid_department),
    _label_rule('division', r'divisions?', is_valid_department),
    _label_rule('unit', r'units?', is_valid_department),
    _label_rule('team', r'teams?', is_valid_department),
]

ROLE_KEYWORDS = (
    'manager', 'director', 'officer', 'analyst', 'specialist',
    'coordinator', 'supervisor', 'administrator', 'executive',
    'associate', 'senior', 'junior', 'lead', 'head'
)

_ROLE_PATTERNS = [(role, re.compile(r'\b' + role + r'\b')) for role in ROLE_KEYWORDS]


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def _apply_rules(text: str, rules: Sequence[ExtractionRule]) -> Tuple[str, ...]:
    """Run each rule over the text, keeping validated candidates in first-seen order."""
    found = []
    for rule in rules:
        for match in rule.pattern.finditer(text):
            candidate = match.group(1).strip()
            if rule.validator(candidate):
                found.append(candidate)
    return _unique(found)


# =============================================================================
# PUBLIC API
# =============================================================================

def extract_owners(text: str) -> Tuple[str, ...]:
    """Extract validated owner names."""
    return _apply_rules(text, OWNER_RULES)


def extract_dates(text: str) -> Tuple[str, ...]:
    """Extract sign-off / review dates as they appear in the text."""
    return _apply_rules(text, DATE_RULES)


def extract_departments(text: str) -> Tuple[str, ...]:
    """Extract department, division, unit and team names."""
    return _apply_rules(text, DEPARTMENT_RULES)


def extract_roles(text: str) -> Tuple[str, ...]:
    """Return the role keywords that appear as whole words."""
    lower_text = text.lower()
    return tuple(role for role, pattern in _ROLE_PATTERNS if pattern.search(lower_text))


def extract_entities(text: str) -> EntityResult:
    """Run all extractors over the document text."""
    result = EntityResult(
        owners=extract_owners(text),
        sign_off_dates=extract_dates(text),
        departments=extract_departments(text),
        roles=extract_roles(text),
    )
    logger.debug("Entities extracted", owners_found=len(result.owners),
                 dates_found=len(result.sign_off_dates),
                 departments_found=len(result.departments), roles_found=len(result.roles))
    return result
