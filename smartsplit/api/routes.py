from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify, request

from smartsplit.api.validators import (
    ApiValidationError,
    parse_assignments,
    parse_diners,
    parse_receipt,
)
from smartsplit.domain.allocation import per_person_totals, unassigned_items
from smartsplit.domain.models import (
    SERVICE_CHARGE_PERCENTAGES,
    SERVICE_CHARGE_RATES,
    Diner,
    Receipt,
)
from smartsplit.domain.money import MoneyError, currency_symbol, format_amount
from smartsplit.logging import get_logger
from smartsplit.services.roster import (
    MAX_DINERS,
    MAX_ITEMS,
    RosterError,
    add_diner,
    assignment_description,
    assignment_label,
    items_to_add,
)

api_bp = Blueprint("api", __name__, url_prefix="/api")

log = get_logger(__name__)


def _json_error(message: str, *, status: int = 400, code: str = "bad_request"):
    return jsonify({"error": {"code": code, "message": message}}), status


def _amount(value: Decimal) -> str:
    return f"{value:.2f}"


def _currency(data: Dict[str, Any]) -> str:
    currency = data.get("currency") or current_app.config.get("DEFAULT_CURRENCY", "GBP")
    if not isinstance(currency, str):
        raise ApiValidationError("'currency' must be a string.")
    try:
        currency_symbol(currency)
    except MoneyError as e:
        raise ApiValidationError(str(e)) from e
    return currency.strip().upper()


def _json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ApiValidationError("Request body must be a JSON object.")
    return data


def _receipt_totals(receipt: Receipt, currency: str) -> Dict[str, str]:
    return {
        "currency": currency,
        "total": _amount(receipt.total()),
        "total_with_service": _amount(receipt.total_with_service()),
        "service_portion": _amount(receipt.service_portion()),
        "display_total": format_amount(receipt.total(), currency),
        "display_total_with_service": format_amount(receipt.total_with_service(), currency),
    }


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


@api_bp.get("/service-charges")
def service_charges():
    return jsonify(
        {
            "percentages": [str(p) for p in SERVICE_CHARGE_PERCENTAGES],
            "rates": [str(r) for r in SERVICE_CHARGE_RATES],
        }
    ), 200


@api_bp.post("/receipt/totals")
def receipt_totals_endpoint():
    """
    JSON body:
      - items: [{id, name, price}]
      - service_charge: fraction, e.g. "0.125"
    """
    try:
        data = _json_body()
        receipt = parse_receipt(data)
        currency = _currency(data)
    except ApiValidationError as e:
        log.warning("receipt_totals_rejected", reason=str(e))
        return _json_error(str(e), status=400)

    return jsonify(_receipt_totals(receipt, currency)), 200


@api_bp.post("/receipt/items/capacity")
def item_capacity_endpoint():
    """How many of the requested blank items fit on the receipt."""
    try:
        data = _json_body()
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    requested = data.get("requested")
    current = data.get("current_count", 0)
    if isinstance(requested, bool) or not isinstance(requested, int):
        return _json_error("'requested' must be an int.", status=400)
    if isinstance(current, bool) or not isinstance(current, int) or current < 0:
        return _json_error("'current_count' must be an int >= 0.", status=400)

    max_items = current_app.config.get("MAX_ITEMS", MAX_ITEMS)
    try:
        count, capped = items_to_add(requested, current, max_items=max_items)
    except RosterError as e:
        return _json_error(str(e), status=400)
    return jsonify({"count": count, "capped": capped, "max_items": max_items}), 200


@api_bp.post("/diners")
def add_diner_endpoint():
    """
    JSON body:
      - diners: [{id, name}]  current roster
      - name: optional explicit name
    Response: the roster with the new diner appended.
    """
    try:
        data = _json_body()
        diners = parse_diners(data.get("diners", []))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    name = data.get("name")
    if name is not None and not isinstance(name, str):
        return _json_error("'name' must be a string.", status=400)

    try:
        updated = add_diner(
            diners, name, max_diners=current_app.config.get("MAX_DINERS", MAX_DINERS)
        )
    except RosterError as e:
        return _json_error(str(e), status=422, code="roster_rejected")

    return jsonify({"diners": [_diner_json(d) for d in updated]}), 200


def _diner_json(diner: Diner) -> Dict[str, str]:
    return {"id": diner.id, "name": diner.name}


@api_bp.post("/calculate")
def calculate_endpoint():
    """
    JSON body:
      - items: [{id, name, price}]
      - service_charge: fraction
      - diners: [{id, name}]
      - assignments: {item_id: [diner_id, ...]}
      - currency: optional display currency code
    Response diners[].service is each diner's service_share.
    """
    try:
        data = _json_body()
        receipt = parse_receipt(data)
        diners = parse_diners(data.get("diners"))
        assignment = parse_assignments(data.get("assignments"))
        currency = _currency(data)
    except ApiValidationError as e:
        log.warning("calculate_rejected", reason=str(e))
        return _json_error(str(e), status=400)

    totals = per_person_totals(receipt, diners, assignment)
    unassigned = unassigned_items(receipt, assignment)

    log.info(
        "calculated",
        items=len(receipt.items),
        diners=len(diners),
        unassigned=len(unassigned),
        total=_amount(receipt.total()),
        total_with_service=_amount(receipt.total_with_service()),
    )

    body = _receipt_totals(receipt, currency)
    body["diners"] = [
        {
            "id": t.diner.id,
            "name": t.diner.name,
            "subtotal": _amount(t.subtotal),
            "service": _amount(t.service),
            "total": _amount(t.total),
            "display_total": format_amount(t.total, currency),
        }
        for t in totals
    ]
    body["items"] = [
        {
            "id": item.id,
            "assignment": assignment_description(item.id, diners, assignment),
            "label": assignment_label(item.id, assignment),
        }
        for item in receipt.items
    ]
    body["unassigned_item_ids"] = [item.id for item in unassigned]
    return jsonify(body), 200
