"""
Query models for the VXA Ask router.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Optional, Dict, Any

class IntentType(str, Enum):
    """Closed set of intents a question can be routed to."""
    PIPELINE = "pipeline"
    PIPELINE_SILENT = "pipeline-silent"
    PIPELINE_BY_STAGE = "pipeline-by-stage"
    PIPELINE_BY_VALUE = "pipeline-by-value"
    PIPELINE_ANALYTICS = "pipeline-analytics"
    MEETING_PREP = "meeting-prep"
    RECRUITMENT = "recruitment"
    RECRUITMENT_BY_STAGE = "recruitment-by-stage"
    COMPETITOR_INTEL = "competitor-intel"
    PROSPECTING = "prospecting"
    CUSTOMER_HEALTH = "customer-health"
    GENERAL = "general"

# Wire names for the filter fields
_FILTER_KEYS = {
    "days": "days",
    "min_value": "minValue",
    "max_value": "maxValue",
    "stage": "stage",
    "name": "name",
    "search_query": "searchQuery",
}

@dataclass(frozen=True)
class QueryFilters:
    """
    Structured constraints extracted from a free-text question.

    Attributes:
        days: Lookback window in days
        min_value: Lower bound on deal value
        max_value: Upper bound on deal value
        stage: Canonical pipeline stage (sales or recruiting)
        name: Person or company the question is about
        search_query: Quoted free text from the question

    Every field is optional; None means "not specified".
    """
    days: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    stage: Optional[str] = None
    name: Optional[str] = None
    search_query: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the filters that are set, keyed by their wire names."""
        return {
            _FILTER_KEYS[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.to_dict()

@dataclass(frozen=True)
class ParsedIntent:
    """Result of classifying a question."""
    type: IntentType
    filters: QueryFilters = field(default_factory=QueryFilters)
    original_query: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "filters": self.filters.to_dict(),
            "originalQuery": self.original_query,
        }
