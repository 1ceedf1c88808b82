"""
Record Store Package

This package provides read-only access to the business record collections.
"""

import logging
from typing import Optional

from .base import (
    BaseRecordStore,
    FilterOp,
    Record,
    RecordFilter,
    RecordQuery,
    CUSTOMERS,
    RECRUITS,
    COMPETITORS,
    COLLECTIONS
)
from .memory import DataFrameRecordStore
from .rest import RestRecordStore
from ...core.config import Settings, StoreBackend, get_settings

logger = logging.getLogger(__name__)


def create_store(settings: Optional[Settings] = None) -> BaseRecordStore:
    """Build the record store selected by STORE_BACKEND."""
    store_settings = (settings or get_settings()).store

    if store_settings.backend == StoreBackend.REST:
        api_key = store_settings.api_key.get_secret_value() if store_settings.api_key else None
        return RestRecordStore(
            base_url=store_settings.url or "",
            api_key=api_key,
            timeout=store_settings.timeout
        )

    logger.info("Using in-memory record store")
    return DataFrameRecordStore.from_json(store_settings.mock_data_path)


__all__ = [
    'BaseRecordStore',
    'DataFrameRecordStore',
    'RestRecordStore',
    'FilterOp',
    'Record',
    'RecordFilter',
    'RecordQuery',
    'CUSTOMERS',
    'RECRUITS',
    'COMPETITORS',
    'COLLECTIONS',
    'create_store',
]
