"""
Ledger store interface and the in-memory implementation.

The audit API only ever reads: one range query on the ``fecha``
timestamp field, ordered by that field.  The whole matching set is
returned and paginated by the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from audit_api.utils.time_utils import coerce_datetime

TIMESTAMP_FIELD = "fecha"

RawRecord = Mapping[str, Any]


class RecordStore(Protocol):
    """Read-only access to a document collection filtered by timestamp."""

    def fetch_range(
        self,
        collection: str,
        start: datetime,
        end: datetime,
        *,
        end_exclusive: bool = False,
        descending: bool = True,
    ) -> List[RawRecord]:
        ...


def in_window(ts: datetime, start: datetime, end: datetime, end_exclusive: bool) -> bool:
    if ts < start:
        return False
    return ts < end if end_exclusive else ts <= end


class InMemoryStore:
    """
    Dictionary-backed store used for tests and local development.

    Documents are plain dicts; ``fecha`` may be a datetime or an ISO
    string.  Documents without a usable ``fecha`` never match a range,
    which is how a document store's inequality filter behaves too.
    """

    def __init__(self, collections: Optional[Dict[str, Iterable[RawRecord]]] = None):
        self._collections: Dict[str, List[RawRecord]] = {
            name: list(docs) for name, docs in (collections or {}).items()
        }

    def add(self, collection: str, *docs: RawRecord) -> None:
        self._collections.setdefault(collection, []).extend(docs)

    def fetch_range(
        self,
        collection: str,
        start: datetime,
        end: datetime,
        *,
        end_exclusive: bool = False,
        descending: bool = True,
    ) -> List[RawRecord]:
        matched = []
        for doc in self._collections.get(collection, []):
            ts = coerce_datetime(doc.get(TIMESTAMP_FIELD))
            if ts is not None and in_window(ts, start, end, end_exclusive):
                matched.append((ts, doc))
        matched.sort(key=lambda pair: pair[0], reverse=descending)
        return [dict(doc) for _, doc in matched]
