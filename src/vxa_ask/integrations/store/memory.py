"""
In-memory record store backed by pandas.

Used for demo/mock mode and tests. Records are loaded from a JSON document
shaped like {"customers": [...], "recruits": [...], "competitors": [...]}.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from .base import BaseRecordStore, COLLECTIONS, FilterOp, Record, RecordFilter, RecordQuery

# Configure logger
logger = logging.getLogger(__name__)

# Sample data shipped with the package
DEFAULT_MOCK_PATH = Path(__file__).resolve().parent.parent.parent / "data" / "sample_records.json"


def _to_utc(value: datetime) -> pd.Timestamp:
    stamp = pd.Timestamp(value)
    if stamp.tzinfo is None:
        return stamp.tz_localize(timezone.utc)
    return stamp.tz_convert(timezone.utc)


class DataFrameRecordStore(BaseRecordStore):
    """
    Record store that answers queries from pandas DataFrames.

    Each collection is kept both as the original list of dicts and as a
    DataFrame sharing its positional index, so filtering happens in pandas
    while callers get back the untouched original records.
    """

    def __init__(self, records: Optional[Dict[str, List[Record]]] = None):
        records = records or {}
        unknown = set(records) - set(COLLECTIONS)
        if unknown:
            logger.warning(f"Ignoring unknown collections: {sorted(unknown)}")

        self._records: Dict[str, List[Record]] = {
            name: [dict(row) for row in records.get(name, [])] for name in COLLECTIONS
        }
        self._frames: Dict[str, pd.DataFrame] = {
            name: pd.DataFrame(rows) for name, rows in self._records.items()
        }
        logger.info(
            "Initialized DataFrameRecordStore with "
            + ", ".join(f"{name}={len(rows)}" for name, rows in self._records.items())
        )

    @classmethod
    def from_json(cls, path: Optional[Union[str, Path]] = None) -> "DataFrameRecordStore":
        """Load a store from a JSON file (defaults to the bundled sample data)."""
        path = Path(path or DEFAULT_MOCK_PATH)
        logger.info(f"Loading mock records from {path}")
        with open(path, 'r') as f:
            return cls(json.load(f))

    async def _fetch(self, query: RecordQuery) -> List[Record]:
        rows = self._records[query.collection]
        df = self._frames[query.collection]
        if df.empty:
            return []

        mask = pd.Series(True, index=df.index)
        for record_filter in query.filters:
            if record_filter.field not in df.columns:
                logger.debug(f"Field '{record_filter.field}' not in {query.collection}; no rows match")
                return []
            mask &= self._match(df[record_filter.field], record_filter)

        selected = df[mask]
        if query.order_by and query.order_by in selected.columns:
            selected = selected.sort_values(
                query.order_by, ascending=query.ascending, na_position="last", kind="mergesort"
            )

        positions = list(selected.index)
        if query.limit is not None:
            positions = positions[:query.limit]
        return [dict(rows[i]) for i in positions]

    @staticmethod
    def _match(column: pd.Series, record_filter: RecordFilter) -> pd.Series:
        """Evaluate one filter against a column, returning a boolean mask."""
        op, value = record_filter.op, record_filter.value

        if op == FilterOp.ILIKE:
            return column.fillna("").astype(str).str.contains(str(value), case=False, regex=False)
        if op == FilterOp.IN:
            return column.isin(list(value))

        if isinstance(value, datetime):
            column = pd.to_datetime(column, utc=True, errors="coerce")
            value = _to_utc(value)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            column = pd.to_numeric(column, errors="coerce")

        if op == FilterOp.EQ:
            return column == value
        if op == FilterOp.GT:
            return column > value
        if op == FilterOp.GTE:
            return column >= value
        if op == FilterOp.LT:
            return column < value
        if op == FilterOp.LTE:
            return column <= value
        raise ValueError(f"Unsupported filter operator: {op}")
