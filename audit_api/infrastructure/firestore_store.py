"""
Google Cloud Firestore implementation of :class:`~audit_api.infrastructure.store.RecordStore`.

Install with the ``firestore`` extra.  Credentials are resolved by the
client library (``GOOGLE_APPLICATION_CREDENTIALS`` or the runtime's
default service account).
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from audit_api.infrastructure.store import TIMESTAMP_FIELD, RawRecord


class FirestoreStore:
    def __init__(self, client: Optional[firestore.Client] = None):
        self.client = client or firestore.Client()

    def fetch_range(
        self,
        collection: str,
        start: datetime,
        end: datetime,
        *,
        end_exclusive: bool = False,
        descending: bool = True,
    ) -> List[RawRecord]:
        direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
        query = (
            self.client.collection(collection)
            .where(filter=FieldFilter(TIMESTAMP_FIELD, ">=", start))
            .where(filter=FieldFilter(TIMESTAMP_FIELD, "<" if end_exclusive else "<=", end))
            .order_by(TIMESTAMP_FIELD, direction=direction)
        )
        return [{**(doc.to_dict() or {}), "id": doc.id} for doc in query.stream()]
