"""
VXA Ask Models Package.

This package contains the query, intent and response data models.
"""

from .query_models import IntentType, QueryFilters, ParsedIntent
from .response import ResponseEnvelope, ResponseMeta, ERROR_TITLE

__all__ = [
    'IntentType',
    'QueryFilters',
    'ParsedIntent',
    'ResponseEnvelope',
    'ResponseMeta',
    'ERROR_TITLE'
]
