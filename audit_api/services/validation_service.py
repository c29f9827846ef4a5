"""
Query parameter validators.

Responsibility: turn the raw ``from``/``to`` and ``page``/``size`` query
strings into validated :class:`~audit_api.models.schemas.DateRange` and
:class:`~audit_api.models.schemas.PageRequest` values, or raise a
:class:`~audit_api.errors.ValidationError` carrying a stable code.

Date rules (applied in order):
1. ``from`` must be a real ``YYYY-MM-DD`` date  → ``INVALID_DATE_FORMAT``
2. ``to`` must be a real ``YYYY-MM-DD`` date    → ``INVALID_DATE_FORMAT``
3. ``from <= to``                               → ``INVALID_DATE_RANGE``
4. span ``<= max_historical_days``              → ``RANGE_TOO_LARGE``

Pagination rules:
1. ``page`` must be a positive integer (default 1)          → ``INVALID_PAGE``
2. ``size`` must be a positive integer (default configured) → ``INVALID_SIZE``
3. ``size`` above the configured maximum is clamped, never rejected.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from audit_api.config import PaginationSettings
from audit_api.errors import ValidationError
from audit_api.models.schemas import DateRange, PageRequest
from audit_api.utils.time_utils import parse_date


class DateRangeValidator:
    """Validates a ``from``/``to`` pair against format and historical window."""

    def __init__(self, settings: PaginationSettings):
        self.max_days = settings.max_historical_days

    def validate(self, from_str: Optional[str], to_str: Optional[str]) -> DateRange:
        from_date = self._parse(from_str, "from")
        to_date = self._parse(to_str, "to")

        if from_date > to_date:
            raise ValidationError(
                "'from' must be earlier than or equal to 'to'.",
                code="INVALID_DATE_RANGE",
            )

        day_count = (to_date - from_date).days
        if day_count > self.max_days:
            raise ValidationError(
                f"Maximum allowed date range is {self.max_days} days "
                f"(requested {day_count}).",
                code="RANGE_TOO_LARGE",
            )

        return DateRange(from_date=from_date, to_date=to_date, day_count=day_count)

    def validate_single(self, date_str: Optional[str]) -> DateRange:
        """Validate one date as the degenerate range ``[date, date]``."""
        return self.validate(date_str, date_str)

    @staticmethod
    def _parse(raw: Optional[str], field_name: str) -> date:
        try:
            return parse_date(raw)
        except ValueError as exc:
            raise ValidationError(
                f"Invalid '{field_name}' date: {exc}",
                code="INVALID_DATE_FORMAT",
                field=field_name,
            ) from exc


class PaginationResolver:
    """Parses ``page``/``size`` and clamps ``size`` to the configured maximum."""

    def __init__(self, settings: PaginationSettings):
        self.max_size = settings.max_page_size
        self.default_size = settings.default_page_size

    def resolve(self, page_str: Optional[str], size_str: Optional[str]) -> PageRequest:
        page = _parse_positive_int(page_str, 1)
        if page is None:
            raise ValidationError(
                "Parameter 'page' must be a number greater than 0.",
                code="INVALID_PAGE",
            )

        size = _parse_positive_int(size_str, self.default_size)
        if size is None:
            raise ValidationError(
                "Parameter 'size' must be a number greater than 0.",
                code="INVALID_SIZE",
            )

        return PageRequest(page=page, size=min(size, self.max_size))


def _parse_positive_int(raw: Optional[str], default: int) -> Optional[int]:
    """Return the parsed positive integer, *default* when absent, ``None`` when invalid."""
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value >= 1 else None
