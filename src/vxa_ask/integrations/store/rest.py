"""
REST Record Store Implementation

Reads records from a hosted PostgREST endpoint (the REST interface exposed
by Supabase). Queries are translated into PostgREST query-string filters
such as `status=eq.lead` or `name=ilike.*jordan*`.
"""

import asyncio
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import requests

from .base import BaseRecordStore, FilterOp, Record, RecordFilter, RecordQuery
from ...core.exceptions import ConfigurationError, ErrorCode, StoreReadError

# Configure logger
logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


def _format_value(value: Any) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class RestRecordStore(BaseRecordStore):
    """
    Record store adapter for a PostgREST/Supabase backend.

    Reads are issued with `requests` on a worker thread so they do not block
    the event loop. Failed reads are not retried.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None,
                 timeout: int = 30, verify_ssl: bool = True):
        """
        Initialize the REST record store.

        Args:
            base_url: Project URL, e.g. https://xyz.supabase.co
            api_key: API key sent as `apikey` and bearer token
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
        """
        if not base_url:
            raise ConfigurationError("STORE_URL is required for the rest store backend")

        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.session = requests.Session()

        logger.info(f"Initialized {self.__class__.__name__} for {self.base_url}")

    async def _fetch(self, query: RecordQuery) -> List[Record]:
        return await asyncio.to_thread(self._get, query)

    def build_params(self, query: RecordQuery) -> List[Tuple[str, str]]:
        """Translate a RecordQuery into PostgREST query parameters."""
        params: List[Tuple[str, str]] = [("select", "*")]
        for record_filter in query.filters:
            params.append((record_filter.field, self._format_filter(record_filter)))
        if query.order_by:
            direction = "asc" if query.ascending else "desc"
            params.append(("order", f"{query.order_by}.{direction}.nullslast"))
        if query.limit is not None:
            params.append(("limit", str(int(query.limit))))
        return params

    @staticmethod
    def _format_filter(record_filter: RecordFilter) -> str:
        op, value = record_filter.op, record_filter.value
        if op == FilterOp.ILIKE:
            return f"ilike.*{value}*"
        if op == FilterOp.IN:
            quoted = ",".join(f'"{_format_value(v)}"' for v in value)
            return f"in.({quoted})"
        return f"{op.value}.{_format_value(value)}"

    def _headers(self) -> Dict[str, str]:
        headers = {'Accept': 'application/json'}
        if self.api_key:
            headers['apikey'] = self.api_key
            headers['Authorization'] = f'Bearer {self.api_key}'
        return headers

    def _get(self, query: RecordQuery) -> List[Record]:
        url = f"{self.base_url}{REST_PATH}/{query.collection}"
        params = self.build_params(query)
        logger.debug(f"GET {url} params={params}")

        response = self.session.get(
            url,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
            verify=self.verify_ssl
        )
        logger.debug(f"Response status: {response.status_code}")
        response.raise_for_status()

        try:
            payload = response.json() if response.content else []
        except json.JSONDecodeError as e:
            raise StoreReadError(
                message=f"Invalid JSON from {query.collection}",
                error_code=ErrorCode.STORE_RESPONSE_ERROR,
                original_exception=e,
                collection=query.collection
            ) from e

        if not isinstance(payload, list):
            raise StoreReadError(
                message=f"Unexpected response shape from {query.collection}",
                error_code=ErrorCode.STORE_RESPONSE_ERROR,
                details={"response_type": type(payload).__name__},
                collection=query.collection
            )
        return payload
