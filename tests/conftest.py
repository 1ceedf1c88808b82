"""
Pytest configuration file for VXA Ask testing.

This file contains shared fixtures and configuration for all test modules.
"""

import os
import sys
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List

import pytest

# Ensure src is in sys.path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from vxa_ask.core.config import RouterSettings, Settings
from vxa_ask.insights.intent_manager import IntentManager
from vxa_ask.integrations.store import BaseRecordStore, DataFrameRecordStore, RecordQuery
from vxa_ask.integrations.store.memory import DEFAULT_MOCK_PATH

# Configure logging to prevent log noise during tests
logging.basicConfig(level=logging.INFO)
logging.getLogger("vxa_ask").setLevel(logging.WARNING)

# Reference time for every date-dependent test
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FailingStore(BaseRecordStore):
    """Record store whose every read fails."""

    def __init__(self):
        self.calls: List[RecordQuery] = []

    async def _fetch(self, query: RecordQuery):
        self.calls.append(query)
        raise ConnectionError("connection refused")


class RecordingStore(DataFrameRecordStore):
    """In-memory store that remembers the queries it was asked."""

    def __init__(self, records=None):
        super().__init__(records)
        self.calls: List[RecordQuery] = []

    async def _fetch(self, query: RecordQuery):
        self.calls.append(query)
        return await super()._fetch(query)


@pytest.fixture
def fixed_clock():
    """Clock pinned to NOW."""
    return lambda: NOW


@pytest.fixture
def sample_records() -> Dict[str, List[dict]]:
    """The bundled sample records."""
    with open(DEFAULT_MOCK_PATH, 'r') as f:
        return json.load(f)


@pytest.fixture
def memory_store(sample_records):
    """In-memory store over the sample records."""
    return RecordingStore(sample_records)


@pytest.fixture
def failing_store():
    """Store that fails every read."""
    return FailingStore()


@pytest.fixture
def router_settings():
    """Router settings with their defaults."""
    return RouterSettings()


@pytest.fixture
def settings():
    """Settings built from the environment."""
    return Settings()


@pytest.fixture
def make_manager(settings, fixed_clock):
    """Factory for an IntentManager over a given store."""
    def _make(store):
        return IntentManager(store=store, settings=settings, clock=fixed_clock)
    return _make


@pytest.fixture
def intent_manager(make_manager, memory_store):
    """IntentManager over the sample records."""
    return make_manager(memory_store)
