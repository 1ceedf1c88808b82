"""
Intent management for VXA Ask.
Classifies a question and dispatches it to the handler for its intent.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, Mapping, Optional, Type

from ..core.config import Settings, get_settings
from ..core.exceptions import ConfigurationError, ErrorCode
from ..integrations.store import BaseRecordStore, create_store
from ..models.query_models import IntentType, ParsedIntent
from ..models.response import ResponseEnvelope
from .handlers import HANDLER_CLASSES, IntentHandler
from .intents import classify_intent

logger = logging.getLogger(__name__)


def check_dispatch_table(table: Mapping[IntentType, object]) -> None:
    """
    Ensure every intent has exactly one handler.

    Raises:
        ConfigurationError: If an intent has no handler
    """
    missing = [intent.value for intent in IntentType if intent not in table]
    if missing:
        raise ConfigurationError(
            message=f"No handler registered for intents: {', '.join(missing)}",
            error_code=ErrorCode.DISPATCH_TABLE_ERROR,
            details={"missing": missing}
        )


def _build_handler_types() -> Dict[IntentType, Type[IntentHandler]]:
    table: Dict[IntentType, Type[IntentHandler]] = {}
    for handler_class in HANDLER_CLASSES:
        if handler_class.intent_type in table:
            raise ConfigurationError(
                message=f"Duplicate handler for intent {handler_class.intent_type.value}",
                error_code=ErrorCode.DISPATCH_TABLE_ERROR
            )
        table[handler_class.intent_type] = handler_class
    check_dispatch_table(table)
    return table


# Checked once at import so a missing handler fails fast
HANDLER_TYPES = _build_handler_types()


class IntentManager:
    """Routes questions to intent handlers."""

    def __init__(self, store: Optional[BaseRecordStore] = None,
                 settings: Optional[Settings] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        """Build one handler per intent over a shared record store."""
        settings = settings or get_settings()
        self.store = store or create_store(settings)
        self.handlers: Dict[IntentType, IntentHandler] = {
            intent: handler_class(self.store, settings.router, clock)
            for intent, handler_class in HANDLER_TYPES.items()
        }
        check_dispatch_table(self.handlers)
        logger.info(f"Registered {len(self.handlers)} intent handlers")

    def classify(self, query: str) -> ParsedIntent:
        """Classify a question. Never raises for any string input."""
        logger.debug(f"Classifying query: {query[:50]}...")
        return classify_intent(query)

    async def dispatch(self, parsed: ParsedIntent) -> ResponseEnvelope:
        """
        Run the handler registered for a classified question.

        Args:
            parsed: Result of classify()

        Returns:
            The handler's response envelope
        """
        handler = self.handlers[parsed.type]
        logger.info(f"Dispatching {parsed.type.value} to {type(handler).__name__}")
        return await handler.respond(parsed.filters, parsed.original_query)

    async def process_query(self, query: str) -> ResponseEnvelope:
        """Classify and answer a question."""
        return await self.dispatch(self.classify(query))
