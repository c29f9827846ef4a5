"""
Record normalizer service.

Responsibility: map raw store documents, whose fields may be missing,
mistyped or stored under legacy names, onto the canonical dataclasses
in :mod:`audit_api.models.schemas`.  Every function here is total: a
malformed document yields fallback values, never an exception.

Field resolution
----------------
Each canonical attribute has an ordered tuple of candidate field names.
The first candidate that is *present* (not missing, not ``None``, not an
empty string) wins.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from audit_api.models.schemas import (
    UNKNOWN,
    CashClosure,
    CashMovement,
    ManualAdjustment,
    NormalizedTransaction,
)
from audit_api.utils.financial import ZERO, parse_amount
from audit_api.utils.time_utils import coerce_datetime, to_iso, utc_now

RawRecord = Mapping[str, Any]

# Candidate field names per canonical attribute, highest precedence first.
TRANSACTION_FIELDS = {
    "id": ("id",),
    "timestamp": ("fecha", "timestamp"),
    "operation_type": ("tipo", "tipoOperacion"),
    "amount": ("monto", "importe"),
    "commission": ("comision", "comisiones"),
    "operator_id": ("usuarioCaja", "usuario"),
    "state": ("estado",),
    "external_reference": ("referenciaExterna", "referencia"),
    "created_at": ("createdAt",),
}

CLOSURE_USER_FIELDS = ("usuario", "usuarioCaja")

DEFAULT_STATE = "completed"
DEBIT_TYPES = ("debito", "debit")


def resolve_field(raw: RawRecord, candidates: Sequence[str]) -> Any:
    """Return the value of the first present candidate, or ``None``."""
    for name in candidates:
        value = raw.get(name)
        if value is not None and value != "":
            return value
    return None


def _text(raw: RawRecord, candidates: Sequence[str], default: Optional[str]) -> Optional[str]:
    value = resolve_field(raw, candidates)
    return default if value is None else str(value)


def format_timestamp(value: Any) -> Optional[str]:
    """
    Render a store timestamp as ISO-8601.

    Native datetimes and ISO strings are normalised to UTC; any other
    non-empty value is preserved verbatim as a string.
    """
    if value is None:
        return None
    parsed = coerce_datetime(value)
    if parsed is not None:
        return to_iso(parsed)
    return str(value)


class RecordNormalizer:
    """Normalizes raw transaction documents."""

    def __init__(self, clock=utc_now):
        self._clock = clock

    def normalize(self, raw: RawRecord) -> NormalizedTransaction:
        f = TRANSACTION_FIELDS
        amount = parse_amount(resolve_field(raw, f["amount"]))
        commission = parse_amount(resolve_field(raw, f["commission"]))

        created_raw = resolve_field(raw, f["created_at"])
        created_at = format_timestamp(created_raw) if created_raw is not None else None
        if created_at is None:
            created_at = to_iso(self._clock())

        return NormalizedTransaction(
            id=_text(raw, f["id"], ""),
            timestamp=format_timestamp(resolve_field(raw, f["timestamp"])),
            operation_type=_text(raw, f["operation_type"], UNKNOWN),
            amount=amount,
            commission=commission,
            operator_id=_text(raw, f["operator_id"], None),
            state=_text(raw, f["state"], DEFAULT_STATE),
            external_reference=_text(raw, f["external_reference"], ""),
            created_at=created_at,
        )

    __call__ = normalize


#Supplementary ledger collections
def normalize_cash_movement(raw: RawRecord) -> CashMovement:
    return CashMovement(
        id=_text(raw, ("id",), ""),
        type=_text(raw, ("tipo",), UNKNOWN),
        amount=parse_amount(raw.get("monto")),
        user=_text(raw, ("usuario",), UNKNOWN),
        timestamp=format_timestamp(resolve_field(raw, ("fecha",))),
        note=_text(raw, ("observacion",), ""),
    )


def normalize_closure(raw: RawRecord) -> CashClosure:
    return CashClosure(
        timestamp=format_timestamp(resolve_field(raw, ("fecha",))),
        user=_text(raw, CLOSURE_USER_FIELDS, UNKNOWN),
        system_balance=parse_amount(raw.get("saldoSistema")),
        physical_balance=parse_amount(raw.get("saldoFisico")),
        notes=_text(raw, ("observaciones",), ""),
    )


def normalize_adjustment(raw: RawRecord) -> ManualAdjustment:
    """
    Negative amounts and ``tipo`` in :data:`DEBIT_TYPES` are debits; the
    reported amount is always the absolute value.
    """
    amount: Decimal = parse_amount(raw.get("monto"))
    declared = str(raw.get("tipo") or "").lower()
    is_debit = declared in DEBIT_TYPES or amount < ZERO
    return ManualAdjustment(
        id=_text(raw, ("id",), ""),
        timestamp=format_timestamp(resolve_field(raw, ("fecha",))),
        user=_text(raw, ("usuario",), UNKNOWN),
        reason=_text(raw, ("motivo",), ""),
        amount=abs(amount),
        type="debit" if is_debit else "credit",
    )
