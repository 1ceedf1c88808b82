"""
Question routing for VXA Ask: filter extraction, intent classification and
intent handlers.
"""

from .filter_extractor import extract_filters
from .intents import classify_intent, match_intent, INTENT_PATTERNS
from .intent_manager import IntentManager, HANDLER_TYPES, check_dispatch_table
from .handlers import IntentHandler
from .lead_scoring import LeadScore, score_lead

__all__ = [
    'extract_filters',
    'classify_intent',
    'match_intent',
    'INTENT_PATTERNS',
    'IntentManager',
    'HANDLER_TYPES',
    'check_dispatch_table',
    'IntentHandler',
    'LeadScore',
    'score_lead',
]
