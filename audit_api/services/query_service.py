"""
Paged query executor.

Responsibility: validate the query parameters, fetch the complete
matching record set from the store, cut out the requested page and
normalize it.

Processing order
----------------
1. Validate the date range and the pagination parameters.  Both always
   run; when both fail the date-range error is the one raised.
2. Fetch *all* records in the window from the store, newest first.  The
   store is not asked to paginate, so results never depend on its
   paging semantics.
3. Slice ``[offset, offset + size)`` locally.
4. Normalize only the records on the page.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable, List, Optional, Tuple

from audit_api.errors import StoreError, ValidationError
from audit_api.infrastructure.observability import log_store_query
from audit_api.infrastructure.store import RawRecord, RecordStore
from audit_api.models.schemas import DateRange, PageMeta, PageRequest, PagedResult
from audit_api.services.validation_service import DateRangeValidator, PaginationResolver

Normalizer = Callable[[RawRecord], Any]


def build_page_meta(page: PageRequest, total_records: int) -> PageMeta:
    total_pages = math.ceil(total_records / page.size)
    return PageMeta(
        current_page=page.page,
        page_size=page.size,
        total_records=total_records,
        total_pages=total_pages,
        has_more=page.page < total_pages,
    )


class PagedQueryExecutor:
    def __init__(
        self,
        store: RecordStore,
        date_validator: DateRangeValidator,
        pagination: PaginationResolver,
    ):
        self.store = store
        self.date_validator = date_validator
        self.pagination = pagination

    def validate(
        self,
        from_str: Optional[str],
        to_str: Optional[str],
        page_str: Optional[str],
        size_str: Optional[str],
    ) -> Tuple[DateRange, PageRequest]:
        date_range: Optional[DateRange] = None
        page: Optional[PageRequest] = None
        errors: List[ValidationError] = []

        try:
            date_range = self.date_validator.validate(from_str, to_str)
        except ValidationError as exc:
            errors.append(exc)
        try:
            page = self.pagination.resolve(page_str, size_str)
        except ValidationError as exc:
            errors.append(exc)

        if errors:
            raise errors[0]
        return date_range, page

    def execute(
        self,
        collection: str,
        from_str: Optional[str],
        to_str: Optional[str],
        page_str: Optional[str],
        size_str: Optional[str],
        normalize: Normalizer,
    ) -> PagedResult:
        """
        Run a paginated range query.

        Raises
        ------
        ValidationError
            Invalid dates or pagination; no store query is issued.
        StoreError
            The store failed; the original exception is kept as ``cause``.
        """
        date_range, page = self.validate(from_str, to_str, page_str, size_str)
        start, end = date_range.window()

        records = self._fetch(collection, start, end, end_exclusive=False,
                              operation="where+orderBy")

        window = records[page.offset:page.offset + page.size]
        return PagedResult(
            items=[normalize(raw) for raw in window],
            pagination=build_page_meta(page, len(records)),
            date_range=date_range,
        )

    def fetch_day(self, collection: str, date_str: Optional[str]) -> Tuple[DateRange, List[RawRecord]]:
        """Validate a single date and fetch its half-open day window."""
        date_range = self.date_validator.validate_single(date_str)
        start, end = date_range.day_window()
        records = self._fetch(collection, start, end, end_exclusive=True,
                              operation="where")
        return date_range, records

    def _fetch(self, collection: str, start, end, *, end_exclusive: bool,
               operation: str) -> List[RawRecord]:
        started = time.perf_counter()
        try:
            records = list(self.store.fetch_range(
                collection, start, end, end_exclusive=end_exclusive, descending=True,
            ))
        except Exception as exc:
            raise StoreError(cause=exc) from exc
        log_store_query(collection, operation,
                        (time.perf_counter() - started) * 1_000, len(records))
        return records
