"""
Framework-free request boundary for the ask endpoint.

handle_ask_request validates the body, routes the question and always
returns a (status, payload) pair. No exception crosses this boundary.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple

import sentry_sdk

from ..core.exceptions import InvalidRequestError
from ..core.logging_config import CorrelationIDFilter
from ..insights.intent_manager import IntentManager
from ..models.response import ResponseEnvelope

logger = logging.getLogger(__name__)


@lru_cache()
def get_intent_manager() -> IntentManager:
    """Shared IntentManager built from the environment settings."""
    return IntentManager()


def validate_ask_body(body: Any) -> str:
    """
    Pull the question out of a request body.

    Args:
        body: Decoded JSON body

    Returns:
        The question text

    Raises:
        InvalidRequestError: If the body has no non-empty string query
    """
    if not isinstance(body, dict):
        raise InvalidRequestError(details={"body_type": type(body).__name__})
    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        raise InvalidRequestError(details={"query_type": type(query).__name__})
    return query


async def handle_ask_request(body: Any,
                             manager: Optional[IntentManager] = None) -> Tuple[int, Dict[str, Any]]:
    """
    Answer one ask request.

    Args:
        body: Decoded JSON body, expected to look like {"query": "..."}
        manager: IntentManager to use, defaults to the shared one

    Returns:
        Tuple of (HTTP status, response envelope as a dict)
    """
    correlation_id = CorrelationIDFilter.set_correlation_id()
    try:
        query = validate_ask_body(body)
        manager = manager or get_intent_manager()
        parsed = manager.classify(query)
        sentry_sdk.set_tag("intent", parsed.type.value)
        envelope = await manager.dispatch(parsed)
        return 200, envelope.to_dict()
    except InvalidRequestError as e:
        return e.http_status_code, ResponseEnvelope.bad_request(e.message).to_dict()
    except Exception as e:
        logger.exception(f"Unhandled error answering request {correlation_id}: {e}")
        sentry_sdk.capture_exception(e)
        return 500, ResponseEnvelope.server_error().to_dict()
    finally:
        CorrelationIDFilter.reset_correlation_id()
