"""
Daily summary aggregation service.

Responsibility: fold one day's normalized transactions into one
:class:`~audit_api.models.schemas.OperatorDailySummary` per operator.
Pure business logic – no I/O.

Classification
--------------
``operation_type`` is matched case-insensitively by substring against the
buckets below, in this fixed precedence::

    recharge > payment > withdrawal > deposit

Only the first matching bucket receives the amount.  A type that matches
nothing (e.g. ``"transferencia"``) adds nothing to any bucket, but its
commission is still counted.  A type containing several keywords goes to
the highest-precedence one; this mirrors the ledger's historical
behaviour and is kept as-is.

Theoretical balance::

    recharge + deposit − payment − withdrawal − commissions
"""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from audit_api.models.schemas import NormalizedTransaction, OperatorDailySummary
from audit_api.utils.financial import ZERO, decimal_to_float

NO_OPERATOR = "no_operator"

CLASSIFICATION: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("recharge", ("recarga", "recharge")),
    ("payment", ("pago", "payment")),
    ("withdrawal", ("retiro", "withdrawal")),
    ("deposit", ("deposito", "depósito", "deposit")),
)

BUCKETS: Tuple[str, ...] = tuple(name for name, _ in CLASSIFICATION)


def classify(operation_type: Optional[str]) -> Optional[str]:
    """
    Return the bucket for *operation_type*, or ``None`` when unclassified.

    >>> classify("Recarga Movistar")
    'recharge'
    >>> classify("transferencia") is None
    True
    """
    lowered = (operation_type or "").lower()
    for bucket, keywords in CLASSIFICATION:
        if any(keyword in lowered for keyword in keywords):
            return bucket
    return None


class DailyAggregator:
    """Builds per-operator daily summaries from normalized transactions."""

    def aggregate(
        self,
        records: Iterable[NormalizedTransaction],
        closure_date: str,
    ) -> List[OperatorDailySummary]:
        """
        Group *records* by operator and total them per bucket.

        Parameters
        ----------
        records:
            Normalized transactions of a single calendar day.
        closure_date:
            The day being consolidated (``YYYY-MM-DD``), copied onto each row.

        Returns
        -------
        list of OperatorDailySummary
            One row per operator, in order of first appearance.
        """
        totals: Dict[str, Dict[str, Decimal]] = {}
        commissions: Dict[str, Decimal] = {}

        for txn in records:
            operator = txn.operator_id or NO_OPERATOR
            if operator not in totals:
                totals[operator] = {bucket: ZERO for bucket in BUCKETS}
                commissions[operator] = ZERO

            bucket = classify(txn.operation_type)
            if bucket is not None:
                totals[operator][bucket] += txn.amount

            commissions[operator] += txn.commission

        return [
            OperatorDailySummary(
                operator_id=operator,
                closure_date=closure_date,
                totals_by_operation_type=buckets,
                total_commissions=commissions[operator],
            )
            for operator, buckets in totals.items()
        ]


def summarize(summaries: Sequence[OperatorDailySummary]) -> dict:
    """Day-level totals across all operators, for the response ``meta`` block."""
    return {
        "total_operators": len(summaries),
        "total_recharges": decimal_to_float(sum((s.total("recharge") for s in summaries), ZERO)),
        "total_payments": decimal_to_float(sum((s.total("payment") for s in summaries), ZERO)),
        "total_commissions": decimal_to_float(sum((s.total_commissions for s in summaries), ZERO)),
    }
