from __future__ import annotations

from decimal import Decimal
from typing import Dict, List, Optional

from smartsplit.domain.models import Assignment, Diner, LineItem, ModelValidationError, Receipt
from smartsplit.domain.money import MoneyError, check_amount_bound, parse_amount, to_decimal


class ApiValidationError(ValueError):
    """Raised when request payload validation fails."""


def _non_empty_str(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


def parse_price(raw_price: object, *, idx: int) -> Optional[Decimal]:
    if raw_price is None:
        return None
    if isinstance(raw_price, bool):
        raise ApiValidationError(f"Item at index {idx} has an invalid 'price'.")
    try:
        if isinstance(raw_price, str):
            price = parse_amount(raw_price)
        elif isinstance(raw_price, (int, float)):
            price = to_decimal(raw_price)
        else:
            raise ApiValidationError(f"Item at index {idx} has an invalid 'price'.")
        if price is not None:
            check_amount_bound(price)
    except MoneyError as e:
        raise ApiValidationError(f"Item at index {idx} has an invalid 'price': {e}") from e

    if price is not None and price < 0:
        raise ApiValidationError(f"Item at index {idx} must have 'price' >= 0.")
    return price


def parse_items(raw_items: object) -> List[LineItem]:
    if not isinstance(raw_items, list):
        raise ApiValidationError("'items' must be a list.")

    items: List[LineItem] = []
    seen_item_ids: set[str] = set()
    for idx, raw_item in enumerate(raw_items):
        if not isinstance(raw_item, dict):
            raise ApiValidationError(f"Item at index {idx} must be an object.")

        item_id = raw_item.get("id")
        name = raw_item.get("name", "")
        if not _non_empty_str(item_id):
            raise ApiValidationError(f"Item at index {idx} must include a non-empty 'id'.")
        if item_id in seen_item_ids:
            raise ApiValidationError("Item ids must be unique.")
        if name is None:
            name = ""
        if not isinstance(name, str):
            raise ApiValidationError(f"Item at index {idx} has a non-string 'name'.")

        seen_item_ids.add(item_id)
        items.append(
            LineItem(id=item_id, name=name.strip(), price=parse_price(raw_item.get("price"), idx=idx))
        )

    return items


def parse_service_charge(raw_rate: object) -> Decimal:
    if raw_rate is None:
        return Decimal(0)
    if isinstance(raw_rate, bool) or not isinstance(raw_rate, (int, float, str)):
        raise ApiValidationError("'service_charge' must be a number.")
    try:
        rate = to_decimal(raw_rate)
    except MoneyError as e:
        raise ApiValidationError("'service_charge' must be a number.") from e
    if rate < 0:
        raise ApiValidationError("'service_charge' must be >= 0.")
    return rate


def parse_receipt(data: Dict[str, object]) -> Receipt:
    items = parse_items(data.get("items"))
    rate = parse_service_charge(data.get("service_charge"))
    try:
        return Receipt(items=tuple(items), service_charge=rate)
    except ModelValidationError as e:
        raise ApiValidationError(str(e)) from e


def parse_diners(raw_diners: object) -> List[Diner]:
    if not isinstance(raw_diners, list):
        raise ApiValidationError("'diners' must be a list.")

    diners: List[Diner] = []
    seen_diner_ids: set[str] = set()
    for idx, raw_diner in enumerate(raw_diners):
        if not isinstance(raw_diner, dict):
            raise ApiValidationError(f"Diner at index {idx} must be an object.")
        diner_id = raw_diner.get("id")
        name = raw_diner.get("name")
        if not _non_empty_str(diner_id):
            raise ApiValidationError(f"Diner at index {idx} must include a non-empty 'id'.")
        if not isinstance(name, str):
            raise ApiValidationError(f"Diner at index {idx} must include a 'name'.")
        if diner_id in seen_diner_ids:
            raise ApiValidationError("Diner ids must be unique.")
        seen_diner_ids.add(diner_id)
        diners.append(Diner(id=diner_id, name=name.strip()))

    return diners


def parse_assignments(raw_assignments: object) -> Assignment:
    if raw_assignments is None:
        return Assignment()
    if not isinstance(raw_assignments, dict):
        raise ApiValidationError(
            "'assignments' must be an object mapping item_id -> diner_ids."
        )

    for item_id, diner_ids in raw_assignments.items():
        if not isinstance(diner_ids, list):
            raise ApiValidationError(f"Assignment for item {item_id} must be a list of diner ids.")
        for diner_id in diner_ids:
            if not _non_empty_str(diner_id):
                raise ApiValidationError(
                    f"Assignment for item {item_id} contains an invalid diner id."
                )

    return Assignment(raw_assignments)
