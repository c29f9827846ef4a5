"""
Read-only ledger routes for the supervision agent.

Every endpoint requires a bearer token and the matching ``read:*``
permission.  Range endpoints accept ``from``, ``to``, ``page`` and
``size`` query parameters and share one response shape::

    {"success": true, "api_version": "v1", "data": [...],
     "pagination": {...}, "meta": {...}}
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from flask import Blueprint, Response, g, jsonify, request

from audit_api.errors import ValidationError
from audit_api.infrastructure.observability import log_api_request
from audit_api.models.schemas import PagedResult
from audit_api.registry import get_services
from audit_api.middleware import require_auth, require_permission
from audit_api.services.aggregation_service import summarize
from audit_api.services.normalizer_service import (
    normalize_adjustment,
    normalize_closure,
    normalize_cash_movement,
)
from audit_api.utils.financial import ZERO, decimal_to_float
from audit_api.utils.time_utils import to_iso, utc_now

agent_bp = Blueprint("agent", __name__)


#Shared helpers
def _log_request(params: Dict[str, Any]) -> None:
    log_api_request(request.method, request.path, g.user.id, g.client_ip,
                    g.request_id, params)


def _range_args() -> Dict[str, Optional[str]]:
    return {
        "from_str": request.args.get("from"),
        "to_str": request.args.get("to"),
        "page_str": request.args.get("page"),
        "size_str": request.args.get("size"),
    }


def _run_range_query(collection: str, normalize) -> PagedResult:
    args = _range_args()
    _log_request({"from": args["from_str"], "to": args["to_str"],
                  "page": args["page_str"], "size": args["size_str"]})
    return get_services().executor.execute(collection, normalize=normalize, **args)


def _paged_response(result: PagedResult, meta: Dict[str, Any]) -> tuple[Response, int]:
    return jsonify({
        "success": True,
        "api_version": get_services().settings.api_version,
        "data": [item.to_dict() for item in result.items],
        "pagination": result.pagination.to_dict(),
        "meta": meta,
    }), 200


#Endpoint: transactions
@agent_bp.route("/transactions", methods=["GET"])
@require_auth
@require_permission("read:transactions")
def transactions() -> tuple[Response, int]:
    services = get_services()
    result = _run_range_query(services.settings.collections.transactions,
                              services.normalizer.normalize)
    return _paged_response(result, {
        "query_date_range": result.date_range.to_dict(),
        "query_timestamp": to_iso(utc_now()),
        "days_in_range": result.date_range.day_count,
    })


#Endpoint: daily summary
@agent_bp.route("/daily-summary", methods=["GET"])
@require_auth
@require_permission("read:summary")
def daily_summary() -> tuple[Response, int]:
    services = get_services()
    date_str = request.args.get("date")
    if not date_str:
        raise ValidationError("Parameter 'date' is required (format: YYYY-MM-DD)",
                              code="MISSING_DATE")

    _log_request({"date": date_str})
    _, raw_records = services.executor.fetch_day(
        services.settings.collections.transactions, date_str,
    )
    records = [services.normalizer.normalize(raw) for raw in raw_records]
    summaries = services.aggregator.aggregate(records, closure_date=date_str)

    meta = summarize(summaries)
    meta["query_timestamp"] = to_iso(utc_now())
    return jsonify({
        "success": True,
        "api_version": services.settings.api_version,
        "date": date_str,
        "data": [summary.to_dict() for summary in summaries],
        "meta": meta,
    }), 200


#Endpoint: cash movements
@agent_bp.route("/cash-movements", methods=["GET"])
@require_auth
@require_permission("read:cash_movements")
def cash_movements() -> tuple[Response, int]:
    collection = get_services().settings.collections.cash_movements
    result = _run_range_query(collection, normalize_cash_movement)
    return _paged_response(result, {"query_date_range": result.date_range.to_dict()})


#Endpoint: closures
@agent_bp.route("/closures", methods=["GET"])
@require_auth
@require_permission("read:closures")
def closures() -> tuple[Response, int]:
    collection = get_services().settings.collections.closures
    result = _run_range_query(collection, normalize_closure)

    # Balanced/variance split covers the current page only.
    with_variance = sum(1 for c in result.items if c.state == "variance")
    return _paged_response(result, {
        "total_closures": result.pagination.total_records,
        "balanced_closures": len(result.items) - with_variance,
        "closures_with_variance": with_variance,
    })


#Endpoint: manual adjustments
@agent_bp.route("/manual-adjustments", methods=["GET"])
@require_auth
@require_permission("read:adjustments")
def manual_adjustments() -> tuple[Response, int]:
    collection = get_services().settings.collections.adjustments
    result = _run_range_query(collection, normalize_adjustment)

    credits = _sum_amounts(a for a in result.items if a.type == "credit")
    debits = _sum_amounts(a for a in result.items if a.type == "debit")
    return _paged_response(result, {
        "total_adjustments": result.pagination.total_records,
        "total_credits": decimal_to_float(credits),
        "total_debits": decimal_to_float(debits),
        "net": decimal_to_float(credits - debits),
    })


def _sum_amounts(adjustments) -> Decimal:
    return sum((a.amount for a in adjustments), ZERO)
