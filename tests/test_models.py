# tests/test_models.py
from decimal import Decimal

import pytest

from smartsplit.domain.models import (
    SERVICE_CHARGE_RATES,
    Assignment,
    Diner,
    DinerTotal,
    LineItem,
    ModelValidationError,
    Receipt,
    make_items,
)


def test_receipt_total_ignores_missing_prices():
    receipt = Receipt(items=make_items([("Pizza", "10.50"), ("Fries", "3.50"), ("Water", None)]))
    assert receipt.total() == Decimal("14.00")


def test_receipt_total_with_service_rounds_product():
    receipt = Receipt(
        items=make_items([("Steak", "20.00"), ("Soda", "2.50")]),
        service_charge=Decimal("0.125"),
    )
    assert receipt.total() == Decimal("22.50")
    # 22.50 * 1.125 = 25.3125
    assert receipt.total_with_service() == Decimal("25.31")
    assert receipt.service_portion() == Decimal("2.81")


def test_zero_rate_total_with_service_equals_total():
    receipt = Receipt(items=make_items([("Beef", "25.99"), ("Chips", "3.50")]))
    assert receipt.total_with_service() == receipt.total() == Decimal("29.49")
    assert receipt.service_portion() == 0


def test_receipt_total_is_banker_rounded():
    receipt = Receipt(items=make_items([("a", "0.125"), ("b", "1")]))
    assert receipt.total() == Decimal("1.12")


def test_empty_receipt_totals_are_zero():
    receipt = Receipt(service_charge=Decimal("0.2"))
    assert receipt.total() == 0
    assert receipt.total_with_service() == 0


def test_receipt_accepts_rates_outside_menu():
    receipt = Receipt(items=make_items([("x", "10")]), service_charge=Decimal("0.33"))
    assert receipt.total_with_service() == Decimal("13.30")


def test_negative_rate_raises():
    with pytest.raises(ModelValidationError):
        Receipt(service_charge=Decimal("-0.1"))


def test_service_charge_menu_is_exact():
    assert Decimal("0.075") in SERVICE_CHARGE_RATES
    assert Decimal("0.125") in SERVICE_CHARGE_RATES
    assert len(SERVICE_CHARGE_RATES) == 8


def test_line_item_defaults_to_unpriced_with_fresh_id():
    a, b = LineItem(), LineItem()
    assert a.price is None
    assert a.amount == 0
    assert a.name == ""
    assert a.id != b.id


def test_line_item_edits_return_new_values():
    item = LineItem(id="i1", name="Soup")
    priced = item.with_price("4.50")
    assert priced.price == Decimal("4.50")
    assert priced.with_name("Soup of the day").name == "Soup of the day"
    assert item.price is None


def test_blank_ids_raise():
    with pytest.raises(ModelValidationError):
        LineItem(id="  ")
    with pytest.raises(ModelValidationError):
        Diner(id="", name="Alex")


def test_assignment_keeps_insertion_order_without_duplicates():
    assignment = Assignment({"i1": ["b", "a", "b", "c"]})
    assert assignment["i1"] == ("b", "a", "c")


def test_assignment_toggle_adds_at_end_and_removes():
    assignment = Assignment()
    assignment = assignment.toggle("i1", "alex").toggle("i1", "sam")
    assert assignment.diners_for("i1") == ("alex", "sam")

    assignment = assignment.toggle("i1", "alex")
    assert assignment.diners_for("i1") == ("sam",)

    assignment = assignment.toggle("i1", "sam")
    assert assignment.diners_for("i1") == ()
    assert not assignment.is_assigned("i1")


def test_assignment_toggle_does_not_mutate_original():
    original = Assignment({"i1": ["a"]})
    original.toggle("i1", "b")
    assert original["i1"] == ("a",)


def test_assignment_rejects_string_entry():
    with pytest.raises(ModelValidationError):
        Assignment({"i1": "abc"})


def test_diner_total_adds_service():
    total = DinerTotal(diner=Diner(id="d1", name="Alex"), subtotal=Decimal("5.00"), service=Decimal("0.50"))
    assert total.total == Decimal("5.50")
    assert total.id == "d1"


def test_diner_total_exposes_service_share():
    total = DinerTotal(diner=Diner(id="d1", name="Alex"), subtotal=Decimal("5.00"), service=Decimal("0.50"))
    assert total.service_share == total.service == Decimal("0.50")


def test_receipt_totals_for_very_large_prices():
    receipt = Receipt(items=make_items([("Yacht", "1e27")]), service_charge=Decimal("0.125"))
    assert receipt.total() == Decimal("1000000000000000000000000000.00")
    assert receipt.total_with_service() == Decimal("1125000000000000000000000000.00")
