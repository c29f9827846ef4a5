from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from audit_api.services.normalizer_service import (
    RecordNormalizer,
    normalize_adjustment,
    normalize_cash_movement,
    normalize_closure,
    resolve_field,
)

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def normalizer() -> RecordNormalizer:
    return RecordNormalizer(clock=lambda: FIXED_NOW)


def test_complete_record(normalizer):
    txn = normalizer.normalize({
        "id": "t1",
        "fecha": datetime(2026, 2, 18, 9, 30, tzinfo=timezone.utc),
        "tipo": "recarga",
        "monto": 100,
        "comision": "2.50",
        "usuarioCaja": "caja-01",
        "estado": "completado",
        "referenciaExterna": "EXT-9",
        "createdAt": datetime(2026, 2, 18, 9, 30, 1, tzinfo=timezone.utc),
    })

    assert txn.id == "t1"
    assert txn.timestamp == "2026-02-18T09:30:00.000Z"
    assert txn.operation_type == "recarga"
    assert txn.amount == Decimal("100")
    assert txn.commission == Decimal("2.50")
    assert txn.net_amount == Decimal("97.50")
    assert txn.operator_id == "caja-01"
    assert txn.state == "completado"
    assert txn.external_reference == "EXT-9"
    assert txn.created_at == "2026-02-18T09:30:01.000Z"


def test_missing_amount_defaults_to_zero(normalizer):
    txn = normalizer.normalize({"id": "x", "comision": 3})

    assert txn.amount == Decimal("0")
    assert txn.net_amount == Decimal("-3")


@pytest.mark.parametrize("raw_amount", ["abc", None, "", True, "NaN", "Infinity", [1], {}])
def test_unparsable_amounts_become_zero(normalizer, raw_amount):
    txn = normalizer.normalize({"monto": raw_amount, "comision": raw_amount})

    assert txn.amount == Decimal("0")
    assert txn.commission == Decimal("0")


def test_defaults_for_empty_record(normalizer):
    txn = normalizer.normalize({})

    assert txn.id == ""
    assert txn.timestamp is None
    assert txn.operation_type == "unknown"
    assert txn.operator_id is None
    assert txn.state == "completed"
    assert txn.external_reference == ""
    assert txn.created_at == "2026-03-01T12:00:00.000Z"


def test_missing_operator_renders_as_unknown(normalizer):
    data = normalizer.normalize({"monto": 1}).to_dict()

    assert data["operator_id"] == "unknown"
    assert data["net_amount"] == 1.0


def test_legacy_aliases_are_resolved_in_order(normalizer):
    txn = normalizer.normalize({
        "importe": "45.10",
        "usuario": "legacy-user",
        "referencia": "REF-OLD",
        "timestamp": "2026-02-18T10:00:00Z",
    })

    assert txn.amount == Decimal("45.10")
    assert txn.operator_id == "legacy-user"
    assert txn.external_reference == "REF-OLD"
    assert txn.timestamp == "2026-02-18T10:00:00.000Z"


def test_primary_name_wins_over_alias(normalizer):
    txn = normalizer.normalize({
        "usuarioCaja": "primary",
        "usuario": "alias",
        "referenciaExterna": "NEW",
        "referencia": "OLD",
    })

    assert txn.operator_id == "primary"
    assert txn.external_reference == "NEW"


def test_empty_primary_falls_through_to_alias(normalizer):
    txn = normalizer.normalize({"usuarioCaja": "", "usuario": "fallback"})

    assert txn.operator_id == "fallback"


def test_unparsable_timestamp_is_preserved_verbatim(normalizer):
    txn = normalizer.normalize({"fecha": "18/02/2026 10:00"})

    assert txn.timestamp == "18/02/2026 10:00"


def test_offset_timestamp_is_converted_to_utc(normalizer):
    local = datetime(2026, 2, 18, 5, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert normalizer.normalize({"fecha": local}).timestamp == "2026-02-18T10:00:00.000Z"


def test_naive_datetime_is_treated_as_utc(normalizer):
    txn = normalizer.normalize({"fecha": datetime(2026, 2, 18, 10, 0)})

    assert txn.timestamp == "2026-02-18T10:00:00.000Z"


def test_created_at_present_but_unparsable_is_kept(normalizer):
    txn = normalizer.normalize({"createdAt": "yesterday"})

    assert txn.created_at == "yesterday"


def test_normalizer_never_raises_on_odd_types(normalizer):
    txn = normalizer.normalize({"tipo": 42, "fecha": 1700000000, "usuarioCaja": 7})

    assert txn.operation_type == "42"
    assert txn.timestamp == "1700000000"
    assert txn.operator_id == "7"


def test_resolve_field_returns_none_when_nothing_present():
    assert resolve_field({"a": None, "b": ""}, ("a", "b", "c")) is None


def test_cash_movement_defaults():
    movement = normalize_cash_movement({"id": "m1", "monto": "12.5"})

    assert movement.type == "unknown"
    assert movement.user == "unknown"
    assert movement.amount == Decimal("12.5")
    assert movement.note == ""


def test_closure_variance_and_state():
    balanced = normalize_closure({"usuario": "A", "saldoSistema": 100, "saldoFisico": "100.00"})
    short = normalize_closure({"usuarioCaja": "B", "saldoSistema": 100, "saldoFisico": 90})

    assert balanced.state == "balanced"
    assert short.user == "B"
    assert short.variance == Decimal("10")
    assert short.state == "variance"


@pytest.mark.parametrize("raw, expected_type, expected_amount", [
    ({"tipo": "credito", "monto": 50}, "credit", Decimal("50")),
    ({"tipo": "debito", "monto": 20}, "debit", Decimal("20")),
    ({"monto": -5}, "debit", Decimal("5")),
    ({"tipo": "credito", "monto": -7}, "debit", Decimal("7")),
    ({"monto": "oops"}, "credit", Decimal("0")),
])
def test_adjustment_direction(raw, expected_type, expected_amount):
    adjustment = normalize_adjustment(raw)

    assert adjustment.type == expected_type
    assert adjustment.amount == expected_amount


@pytest.mark.parametrize("raw_amount", ["1e1000000", "1e400", "-1e400"])
def test_out_of_range_amounts_become_zero(normalizer, raw_amount):
    txn = normalizer.normalize({"tipo": "recarga", "monto": raw_amount, "comision": raw_amount})

    assert txn.amount == Decimal("0")
    assert txn.commission == Decimal("0")

    row = txn.to_dict()
    assert row["amount"] == 0.0
    assert row["net_amount"] == 0.0


def test_out_of_range_closure_balances_become_zero():
    closure = normalize_closure({"usuario": "A", "saldoSistema": "1e1000000", "saldoFisico": "1e400"})

    assert closure.variance == Decimal("0")
    assert closure.state == "balanced"
