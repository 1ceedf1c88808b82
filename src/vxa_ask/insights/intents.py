"""
Intent classification for incoming questions.

Intents are checked in a fixed priority order, most specific first. The
first intent with any matching pattern wins and later intents are never
tested, so overlapping patterns are resolved purely by position in
INTENT_PATTERNS.
"""

import re
import logging
from typing import Optional, Pattern, Tuple

from ..models.query_models import IntentType, ParsedIntent
from .filter_extractor import extract_filters, MIN_VALUE_PATTERN, MAX_VALUE_PATTERN

logger = logging.getLogger(__name__)


def _compile(*patterns: str) -> Tuple[Pattern, ...]:
    return tuple(re.compile(p) for p in patterns)


MEETING_PREP_PATTERNS = _compile(
    r'\bprep\b',
    r'\bprepare\b',
    r'\bmeeting with\b',
    r'\bcall with\b',
    r'\bbrief(?:ing)?\s+(?:me\s+)?(?:on|about|for)\b',
    r'\btalking points\b',
    r'\bagenda\b',
    r'\bbefore (?:my|the|our) (?:meeting|call)\b',
)

PIPELINE_SILENT_PATTERNS = _compile(
    r'\bsilent\b',
    r'\b(?:gone|went|going) (?:quiet|cold|dark)\b',
    r'\bno (?:response|reply|activity|contact|updates?)\b',
    r"\bhaven'?t (?:heard|responded|replied|been (?:contacted|updated))\b",
    r'\bstale\b',
    r'\bstalled\b',
    r'\bneglected\b',
    r'\bneeds? (?:a )?follow[- ]?up\b',
)

CUSTOMER_HEALTH_PATTERNS = _compile(
    r'\bhealth(?:y)?\b',
    r'\bat[- ]risk\b',
    r'\bchurn',
    r'\bretention\b',
    r'\bunhappy\b',
    r'\bcustomer (?:status|sentiment|satisfaction)\b',
)

RECRUITMENT_BY_STAGE_PATTERNS = _compile(
    r'\b(?:candidates?|recruits?|applicants?|hires?)\b.*\b(?:screen(?:ing)?|interview(?:ing|s)?|offers?|hired)\b',
    r'\b(?:screen(?:ing)?|interview(?:ing)?|offers?)\b.*\b(?:candidates?|recruits?|applicants?)\b',
    r'\b(?:screen(?:ing)?|interview|offer) stage\b',
    r'\bwho (?:is|are) (?:in|at) (?:the )?(?:screen(?:ing)?|interview(?:ing)?|offer)\b',
)

RECRUITMENT_PATTERNS = _compile(
    r'\brecruit',
    r'\bcandidates?\b',
    r'\bhiring\b',
    r'\bhires?\b',
    r'\btalent\b',
    r'\bapplicants?\b',
    r'\bopen (?:roles|positions)\b',
)

COMPETITOR_INTEL_PATTERNS = _compile(
    r'\bcompetitors?\b',
    r'\bcompetition\b',
    r'\bcompetitive\b',
    r'\bintel\b',
    r'\brivals?\b',
    r'\bmarket (?:share|landscape|position(?:ing)?)\b',
)

PIPELINE_BY_VALUE_PATTERNS = (
    MIN_VALUE_PATTERN,
    MAX_VALUE_PATTERN,
) + _compile(
    r'\b(?:biggest|largest|top|big|large|high[- ]value)\s+(?:deals?|opportunit(?:y|ies)|customers?|accounts?)\b',
    r'\bdeals? worth\b',
    r'\$\s?\d',
)

PIPELINE_BY_STAGE_PATTERNS = _compile(
    r'\b(?:in|at)\s+(?:the\s+)?(?:lead|contact|in-contact|negotiat\w*|won|lost)\b',
    r'\bnegotiat\w*',
    r'\bin[- ]contact\b',
    r'\bclosed[- ](?:won|lost)\b',
    r'\b(?:won|lost)\s+(?:deals?|customers?|opportunit(?:y|ies)|accounts?)\b',
    r'\b(?:lead|contact) stage\b',
)

PIPELINE_ANALYTICS_PATTERNS = _compile(
    r'\banalytics\b',
    r'\bwin rate\b',
    r'\bconversion\b',
    r'\bforecast',
    r'\bbreakdown\b',
    r'\bby stage\b',
    r'\baverage deal\b',
    r'\bmetrics\b',
    r'\bstat(?:s|istics)\b',
    r'\bperformance\b',
    r'\brevenue\b',
    r'\btrends?\b',
)

PROSPECTING_PATTERNS = _compile(
    r'\bprospect',
    r'\bleads?\b',
    r'\boutreach\b',
    r'\bwho should i (?:contact|call|email|reach out to)\b',
    r'\breach out\b',
    r'\bhot\b',
)

PIPELINE_PATTERNS = _compile(
    r'\bpipeline\b',
    r'\bdeals?\b',
    r'\bsales\b',
    r'\bopportunit(?:y|ies)\b',
    r'\bcustomers?\b',
    r'\bclients?\b',
    r'\baccounts?\b',
    r'\bcrm\b',
)

# Priority order, most specific first. Reordering changes results for any
# query that matches more than one entry.
INTENT_PATTERNS: Tuple[Tuple[IntentType, Tuple[Pattern, ...]], ...] = (
    (IntentType.MEETING_PREP, MEETING_PREP_PATTERNS),
    (IntentType.PIPELINE_SILENT, PIPELINE_SILENT_PATTERNS),
    (IntentType.CUSTOMER_HEALTH, CUSTOMER_HEALTH_PATTERNS),
    (IntentType.RECRUITMENT_BY_STAGE, RECRUITMENT_BY_STAGE_PATTERNS),
    (IntentType.RECRUITMENT, RECRUITMENT_PATTERNS),
    (IntentType.COMPETITOR_INTEL, COMPETITOR_INTEL_PATTERNS),
    (IntentType.PIPELINE_BY_VALUE, PIPELINE_BY_VALUE_PATTERNS),
    (IntentType.PIPELINE_BY_STAGE, PIPELINE_BY_STAGE_PATTERNS),
    (IntentType.PIPELINE_ANALYTICS, PIPELINE_ANALYTICS_PATTERNS),
    (IntentType.PROSPECTING, PROSPECTING_PATTERNS),
    (IntentType.PIPELINE, PIPELINE_PATTERNS),
)


def match_intent(query: str) -> Optional[IntentType]:
    """
    Return the first intent in priority order whose patterns match.

    Args:
        query: The user query string

    Returns:
        The matching intent type or None if nothing matches
    """
    query_lower = (query or "").lower()
    for intent_type, patterns in INTENT_PATTERNS:
        if any(pattern.search(query_lower) for pattern in patterns):
            return intent_type
    return None


def classify_intent(query: str) -> ParsedIntent:
    """
    Classify a question into exactly one intent.

    Always returns a result; questions that match nothing fall back to the
    general intent.
    """
    filters = extract_filters(query)
    intent_type = match_intent(query)

    if intent_type is None:
        logger.info("No matching intent found, falling back to general")
        intent_type = IntentType.GENERAL
    else:
        logger.info(f"Matched intent: {intent_type.value}")

    return ParsedIntent(type=intent_type, filters=filters, original_query=query or "")
