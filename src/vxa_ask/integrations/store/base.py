"""
Base Record Store Interface

Defines the read-only query interface the router uses to reach the hosted
business records (customers, recruits, competitors). Every backend
implements `_fetch`; `select` wraps backend failures into StoreReadError so
handlers only ever deal with one exception type.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from ...core.exceptions import StoreReadError

# Configure logger
logger = logging.getLogger(__name__)

CUSTOMERS = "customers"
RECRUITS = "recruits"
COMPETITORS = "competitors"

COLLECTIONS = (CUSTOMERS, RECRUITS, COMPETITORS)

Record = Dict[str, Any]


class FilterOp(str, Enum):
    """Comparison operators understood by every backend."""
    EQ = "eq"
    IN = "in"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    ILIKE = "ilike"


@dataclass(frozen=True)
class RecordFilter:
    """A single constraint on a record field.

    For ILIKE the value is the plain substring to look for; backends add
    their own wildcards. For IN the value is a tuple of accepted values.
    """
    field: str
    op: FilterOp
    value: Any


@dataclass(frozen=True)
class RecordQuery:
    """A read against one collection."""
    collection: str
    filters: Tuple[RecordFilter, ...] = ()
    order_by: Optional[str] = None
    ascending: bool = True
    limit: Optional[int] = None

    def where(self, field: str, op: FilterOp, value: Any) -> "RecordQuery":
        """Return a copy of this query with one more filter."""
        return RecordQuery(
            collection=self.collection,
            filters=self.filters + (RecordFilter(field, op, value),),
            order_by=self.order_by,
            ascending=self.ascending,
            limit=self.limit
        )


class BaseRecordStore(ABC):
    """
    Abstract base class for record store backends.

    The router never writes, so the interface is a single read operation.
    """

    async def select(self, query: RecordQuery) -> List[Record]:
        """
        Run a read against the store.

        Args:
            query: The collection, filters, ordering and limit to apply

        Returns:
            Matching records as dictionaries

        Raises:
            StoreReadError: If the collection is unknown or the backend fails
        """
        if query.collection not in COLLECTIONS:
            raise StoreReadError(
                message=f"Unknown collection '{query.collection}'",
                collection=query.collection
            )

        logger.debug(f"Reading {query.collection} with {len(query.filters)} filter(s)")
        try:
            records = await self._fetch(query)
        except StoreReadError:
            raise
        except Exception as e:
            raise StoreReadError(
                message=f"Could not read {query.collection}: {e}",
                original_exception=e,
                collection=query.collection
            ) from e

        logger.debug(f"Read {len(records)} record(s) from {query.collection}")
        return records

    @abstractmethod
    async def _fetch(self, query: RecordQuery) -> List[Record]:
        """
        Execute the query against the backend.

        Backends may raise any exception; select() converts it.
        """
        pass
