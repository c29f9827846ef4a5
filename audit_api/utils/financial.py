"""
Financial utility functions.

All monetary values use :class:`decimal.Decimal` to guarantee
sub-cent accuracy and avoid IEEE-754 floating-point drift.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


# ── Constants ────────────────────────────────────────────────────────────────

ZERO = Decimal("0")


# ── Parsing ──────────────────────────────────────────────────────────────────

def to_decimal(value: int | float | str) -> Decimal:
    """
    Safely convert a raw value to :class:`~decimal.Decimal`.

    Raises
    ------
    ValueError
        If *value* cannot be interpreted as a finite decimal number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Cannot convert {value!r} to Decimal: booleans are not amounts")
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValueError(f"Cannot convert {value!r} to Decimal: {exc}") from exc
    if not result.is_finite():
        raise ValueError(f"Cannot convert {value!r} to Decimal: not a finite number")
    return result


def parse_amount(value: Any) -> Decimal:
    """
    Lenient variant of :func:`to_decimal` for store data.

    Missing, mistyped or non-finite values become ``0`` so that no
    ``NaN`` or ``None`` ever leaks into totals.  Magnitudes a float
    cannot hold are treated as malformed too, since they would either
    overflow Decimal arithmetic or serialise as ``Infinity``.
    """
    if value is None:
        return ZERO
    try:
        result = to_decimal(value)
    except ValueError:
        return ZERO
    if not math.isfinite(float(result)):
        return ZERO
    return result


# ── Serialisation helpers ────────────────────────────────────────────────────

def decimal_to_float(value: Decimal) -> Optional[float]:
    """Convert Decimal → float for JSON serialisation; ``None`` when out of float range."""
    result = float(value)
    return result if math.isfinite(result) else None
