"""
Models for router responses.

Every handler answers with a ResponseEnvelope so callers can render any
answer, including failures, the same way.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .query_models import IntentType

ERROR_TITLE = "Error"
GENERIC_ERROR_SUMMARY = "An error occurred while processing your request."

class ResponseMeta(BaseModel):
    """Raw numbers behind a response, for programmatic consumers."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_count: Optional[int] = None
    filtered_count: Optional[int] = None
    total_value: Optional[float] = None

class ResponseEnvelope(BaseModel):
    """Uniform answer produced by every intent handler."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True,
                              use_enum_values=True)

    type: IntentType
    title: str
    summary: str
    data: Optional[List[Dict[str, Any]]] = None
    insights: Optional[List[str]] = None
    suggested_actions: Optional[List[str]] = None
    meta: Optional[ResponseMeta] = None

    @property
    def is_error(self) -> bool:
        return self.title == ERROR_TITLE

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, leaving out fields that are not set."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    @classmethod
    def error_response(cls, intent_type: IntentType, summary: str,
                       suggested_actions: Optional[List[str]] = None) -> "ResponseEnvelope":
        """Generate an error response. Error envelopes never carry data."""
        return cls(
            type=intent_type,
            title=ERROR_TITLE,
            summary=summary,
            suggested_actions=suggested_actions or ["Try again"]
        )

    @classmethod
    def server_error(cls) -> "ResponseEnvelope":
        """Generate the generic envelope returned for unexpected failures."""
        return cls.error_response(IntentType.GENERAL, GENERIC_ERROR_SUMMARY)

    @classmethod
    def bad_request(cls, summary: str = "Query is required") -> "ResponseEnvelope":
        """Generate the envelope returned for a missing or invalid query."""
        return cls(
            type=IntentType.GENERAL,
            title="Invalid request",
            summary=summary,
            suggested_actions=["Show pipeline", "Open candidates", "Meeting prep", "Competitor intel"]
        )
