"""
Filter Extractor

Pulls structured filters (time window, value thresholds, pipeline stage,
subject name, quoted search text) out of a free-text question. Extraction
never fails: a pattern that does not match simply leaves its field unset.
"""

import re
import logging
from typing import Optional, Tuple, Pattern

from ..models.query_models import QueryFilters

logger = logging.getLogger(__name__)

# Whole numbers, plain or with thousands separators: "1500", "1,500"
_NUMBER = r'\d{1,3}(?:,\d{3})+|\d+'

# "21 days", "1 day", "1,000 days"
DAYS_PATTERN = re.compile(r'(?<![\d,.])(' + _NUMBER + r')\s*days?\b', re.IGNORECASE)

# Amounts after a comparative phrase: "over $2,500", "more than 1500.50", "above 5k".
# Durations ("over 30 days") are not amounts. The number must be taken whole.
_AMOUNT = (r'\$?\s*((?:' + _NUMBER + r')(?:\.\d+)?)(?!\d|[.,]\d)([km])?\b'
           r'(?!\s*(?:days?|weeks?|months?|years?)\b)')
MIN_VALUE_PATTERN = re.compile(r'\b(?:over|above|more than)\s*' + _AMOUNT, re.IGNORECASE)
MAX_VALUE_PATTERN = re.compile(r'\b(?:under|below|less than)\s*' + _AMOUNT, re.IGNORECASE)

_MULTIPLIERS = {"k": 1_000, "m": 1_000_000}

# One or two capitalized words after a preposition: "with Jordan", "about Acme Corp"
NAME_PATTERN = re.compile(
    r"\b(?:[Ww]ith|[Aa]bout|[Ff]or|[Oo]n)\s+([A-Z][a-zA-Z'&-]*\b(?:\s+[A-Z][a-zA-Z'&-]*\b)?)"
)

SEARCH_QUERY_PATTERN = re.compile(r'["“]([^"”]+)["”]')

# Sales stages in scan order: the first keyword found wins, wherever it sits in the text
SALES_STAGE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("negotiating", "negotiating"),
    ("negotiation", "negotiating"),
    ("negotiate", "negotiating"),
    ("in-contact", "in-contact"),
    ("in contact", "in-contact"),
    ("contacted", "in-contact"),
    ("contact", "in-contact"),
    ("closed won", "won"),
    ("won", "won"),
    ("closed lost", "lost"),
    ("lost", "lost"),
    ("lead", "lead"),
)

# Recruiting stages, scanned after the sales stages and overriding them
RECRUIT_STAGE_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("screening", "screen"),
    ("screen", "screen"),
    ("interviewing", "interview"),
    ("interviews", "interview"),
    ("interview", "interview"),
    ("offers", "offer"),
    ("offer", "offer"),
    ("hired", "hired"),
)

SALES_STAGES = ("lead", "in-contact", "negotiating", "won", "lost")
RECRUIT_STAGES = ("lead", "screen", "interview", "offer", "hired")
OPEN_SALES_STAGES = ("lead", "in-contact", "negotiating")


def _keyword_pattern(keyword: str) -> Pattern:
    return re.compile(r"(?<![\w-])" + re.escape(keyword) + r"(?![\w'-])")


_SALES_STAGE_PATTERNS = tuple((_keyword_pattern(k), stage) for k, stage in SALES_STAGE_KEYWORDS)
_RECRUIT_STAGE_PATTERNS = tuple((_keyword_pattern(k), stage) for k, stage in RECRUIT_STAGE_KEYWORDS)


def extract_days(query: str) -> Optional[int]:
    """Return the first "<n> day(s)" window in the query."""
    match = DAYS_PATTERN.search(query)
    return int(match.group(1).replace(",", "")) if match else None


def _parse_amount(match: Optional[re.Match]) -> Optional[float]:
    if not match:
        return None
    amount = float(match.group(1).replace(",", ""))
    suffix = match.group(2)
    if suffix:
        amount *= _MULTIPLIERS[suffix.lower()]
    return amount


def extract_min_value(query: str) -> Optional[float]:
    """Return the amount after "over", "above" or "more than"."""
    return _parse_amount(MIN_VALUE_PATTERN.search(query))


def extract_max_value(query: str) -> Optional[float]:
    """Return the amount after "under", "below" or "less than"."""
    return _parse_amount(MAX_VALUE_PATTERN.search(query))


def extract_stage(query: str) -> Optional[str]:
    """
    Find the canonical pipeline stage mentioned in the query.

    The sales vocabulary is scanned in vocabulary order and the first hit
    wins. The recruiting vocabulary is scanned afterwards and replaces any
    sales stage when it finds a keyword of its own.

    Args:
        query: The user query string

    Returns:
        Canonical stage name or None
    """
    query_lower = query.lower()
    stage = None

    for pattern, canonical in _SALES_STAGE_PATTERNS:
        if pattern.search(query_lower):
            stage = canonical
            break

    for pattern, canonical in _RECRUIT_STAGE_PATTERNS:
        if pattern.search(query_lower):
            if stage and stage != canonical:
                logger.debug(f"Recruiting stage '{canonical}' overrides sales stage '{stage}'")
            stage = canonical
            break

    return stage


def extract_name(query: str) -> Optional[str]:
    """
    Find the person or company the query is about.

    The last "with/about/for/on <Name>" phrase wins, since the most recent
    mention is usually the subject.
    """
    matches = NAME_PATTERN.findall(query)
    return matches[-1].strip() if matches else None


def extract_search_query(query: str) -> Optional[str]:
    """Return the last double-quoted phrase in the query."""
    matches = [m.strip() for m in SEARCH_QUERY_PATTERN.findall(query) if m.strip()]
    return matches[-1] if matches else None


def extract_filters(query: str) -> QueryFilters:
    """
    Extract every supported filter from a free-text question.

    Args:
        query: The user query string

    Returns:
        QueryFilters with only the recognised fields set
    """
    query = query or ""
    filters = QueryFilters(
        days=extract_days(query),
        min_value=extract_min_value(query),
        max_value=extract_max_value(query),
        stage=extract_stage(query),
        name=extract_name(query),
        search_query=extract_search_query(query),
    )
    logger.debug(f"Extracted filters {filters.to_dict()} from query: {query[:50]}")
    return filters
