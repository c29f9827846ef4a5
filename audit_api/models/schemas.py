"""
Immutable data models / schemas for the audit API.

These dataclasses serve as typed containers that travel between
the route → service → model layers.  No business logic lives here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from audit_api.utils.financial import decimal_to_float
from audit_api.utils.time_utils import (
    DATE_FORMAT,
    end_of_day,
    start_of_day,
    start_of_next_day,
)

UNKNOWN = "unknown"


#Validated query parameters
@dataclass(frozen=True)
class DateRange:
    """A validated ``from``/``to`` pair.  ``from_date <= to_date`` always holds."""
    from_date: date
    to_date: date
    day_count: int

    def window(self) -> Tuple[datetime, datetime]:
        """Inclusive UTC window covering both calendar days entirely."""
        return start_of_day(self.from_date), end_of_day(self.to_date)

    def day_window(self) -> Tuple[datetime, datetime]:
        """Half-open window ``[from 00:00, next day 00:00)``."""
        return start_of_day(self.from_date), start_of_next_day(self.from_date)

    def to_dict(self) -> dict:
        return {
            "from": self.from_date.strftime(DATE_FORMAT),
            "to": self.to_date.strftime(DATE_FORMAT),
        }


@dataclass(frozen=True)
class PageRequest:
    page: int
    size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


@dataclass(frozen=True)
class PageMeta:
    current_page: int
    page_size: int
    total_records: int
    total_pages: int
    has_more: bool

    def to_dict(self) -> dict:
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "total_records": self.total_records,
            "total_pages": self.total_pages,
            "has_more": self.has_more,
        }


#Normalized store records
@dataclass(frozen=True)
class NormalizedTransaction:
    """Canonical view of one ledger transaction.  Never persisted."""
    id: str
    timestamp: Optional[str]
    operation_type: str
    amount: Decimal
    commission: Decimal
    operator_id: Optional[str]
    state: str
    external_reference: str
    created_at: str

    @property
    def net_amount(self) -> Decimal:
        return self.amount - self.commission

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "operation_type": self.operation_type,
            "amount": decimal_to_float(self.amount),
            "commission": decimal_to_float(self.commission),
            "net_amount": decimal_to_float(self.net_amount),
            "operator_id": self.operator_id or UNKNOWN,
            "state": self.state,
            "external_reference": self.external_reference,
            "created_at": self.created_at,
        }


@dataclass(frozen=True)
class CashMovement:
    id: str
    type: str
    amount: Decimal
    user: str
    timestamp: Optional[str]
    note: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "amount": decimal_to_float(self.amount),
            "user": self.user,
            "timestamp": self.timestamp,
            "note": self.note,
        }


@dataclass(frozen=True)
class CashClosure:
    """An end-of-day cash closure.  ``variance`` = system − physical."""
    timestamp: Optional[str]
    user: str
    system_balance: Decimal
    physical_balance: Decimal
    notes: str

    @property
    def variance(self) -> Decimal:
        return self.system_balance - self.physical_balance

    @property
    def state(self) -> str:
        return "balanced" if self.variance == 0 else "variance"

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "user": self.user,
            "system_balance": decimal_to_float(self.system_balance),
            "physical_balance": decimal_to_float(self.physical_balance),
            "variance": decimal_to_float(self.variance),
            "state": self.state,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ManualAdjustment:
    """Manual balance adjustment.  ``amount`` is always non-negative."""
    id: str
    timestamp: Optional[str]
    user: str
    reason: str
    amount: Decimal
    type: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "user": self.user,
            "reason": self.reason,
            "amount": decimal_to_float(self.amount),
            "type": self.type,
        }


#Daily summary
@dataclass(frozen=True)
class OperatorDailySummary:
    """
    Consolidated day for one operator.

    Identity is ``(operator_id, closure_date)``.  ``totals_by_operation_type``
    holds the four classification buckets keyed ``recharge``, ``payment``,
    ``withdrawal`` and ``deposit``.
    """
    operator_id: str
    closure_date: str
    totals_by_operation_type: Dict[str, Decimal]
    total_commissions: Decimal
    opening_balance: Decimal = Decimal("0")
    reported_balance: Decimal = Decimal("0")
    variance: Decimal = Decimal("0")

    def total(self, bucket: str) -> Decimal:
        return self.totals_by_operation_type.get(bucket, Decimal("0"))

    @property
    def theoretical_balance(self) -> Decimal:
        return (
            self.total("recharge")
            + self.total("deposit")
            - self.total("payment")
            - self.total("withdrawal")
            - self.total_commissions
        )

    @property
    def active_categories(self) -> int:
        """How many of the four buckets are strictly positive."""
        return sum(1 for value in self.totals_by_operation_type.values() if value > 0)

    def to_dict(self) -> dict:
        return {
            "operator_id": self.operator_id,
            "opening_balance": decimal_to_float(self.opening_balance),
            "total_recharges": decimal_to_float(self.total("recharge")),
            "total_payments": decimal_to_float(self.total("payment")),
            "total_withdrawals": decimal_to_float(self.total("withdrawal")),
            "total_deposits": decimal_to_float(self.total("deposit")),
            "total_commissions": decimal_to_float(self.total_commissions),
            "theoretical_balance": decimal_to_float(self.theoretical_balance),
            "reported_balance": decimal_to_float(self.reported_balance),
            "variance": decimal_to_float(self.variance),
            "closure_date": self.closure_date,
            "active_categories": self.active_categories,
        }


#Query output
@dataclass(frozen=True)
class PagedResult:
    """One page of normalized records plus pagination metadata."""
    items: List[Any]
    pagination: PageMeta
    date_range: DateRange


#Authentication
@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    username: str
    role: str
    permissions: Tuple[str, ...] = field(default_factory=tuple)

    def can(self, permission: str) -> bool:
        return self.role == "admin" or permission in self.permissions

    def to_dict(self) -> dict:
        return {"id": self.id, "username": self.username, "role": self.role}
