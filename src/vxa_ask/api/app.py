"""
FastAPI application exposing POST /api/ask.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.config import get_settings
from ..core.exceptions import ErrorCode
from ..core.logging_config import configure_logging
from ..insights.intent_manager import IntentManager
from ..models.response import ResponseEnvelope
from .ask import get_intent_manager, handle_ask_request

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    """Initialize Sentry when SENTRY_DSN is configured."""
    settings = get_settings().application
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, environment=settings.environment.value)
        logger.info("Sentry error reporting enabled")


def create_app(manager: Optional[IntentManager] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        manager: IntentManager to answer with, defaults to the shared one
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        init_sentry()
        app.state.manager = manager or get_intent_manager()
        yield

    app = FastAPI(title="VXA Ask API", version="0.1.0", lifespan=lifespan)

    @app.post("/api/ask")
    async def ask(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning(f"{ErrorCode.MALFORMED_BODY.name}: request body is not valid JSON")
            return JSONResponse(status_code=400, content=ResponseEnvelope.bad_request().to_dict())

        status, payload = await handle_ask_request(body, request.app.state.manager)
        return JSONResponse(status_code=status, content=payload)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
