# smartsplit/domain/allocation.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Mapping, Sequence, Tuple, Union

from smartsplit.domain.models import Assignment, Diner, DinerTotal, LineItem, Receipt
from smartsplit.domain.money import ZERO, Number, money_context, round_bankers, round_plain, to_decimal


@dataclass(frozen=True)
class ItemAllocation:
    """
    Allocation result for a single item split among its assigned diners.

    amounts is ordered to match diner_ids; the last entry carries the residue.
    """
    price: Decimal
    diner_ids: Tuple[str, ...]
    amounts: Tuple[Decimal, ...]

    @property
    def residue(self) -> Decimal:
        if not self.amounts:
            return ZERO
        return self.amounts[-1] - self.amounts[0]


def split_item(price: Number, diner_ids: Sequence[str]) -> ItemAllocation:
    """
    Split one item price across diners:

      base = round_plain(price / n)
      residue = round_plain(price) - base * n
      every diner gets base, the last one gets base + residue

    An empty diner list allocates nothing.
    """
    value = to_decimal(price)
    ids = tuple(diner_ids)
    if not ids:
        return ItemAllocation(price=value, diner_ids=(), amounts=())

    n = len(ids)
    with money_context():
        base = round_plain(value / n)
        residue = round_plain(value) - base * n
        amounts = [base] * n
        amounts[-1] = base + residue
    return ItemAllocation(price=value, diner_ids=ids, amounts=tuple(amounts))


def add_allocation_to_subtotals(
    subtotals: Dict[str, Decimal], allocation: ItemAllocation
) -> Dict[str, Decimal]:
    """
    Add an ItemAllocation into a running subtotals dict.
    Mutates and also returns the dict for convenience.
    """
    for diner_id, amount in zip(allocation.diner_ids, allocation.amounts, strict=True):
        subtotals[diner_id] = subtotals.get(diner_id, ZERO) + amount
    return subtotals


def _as_assignment(assignment: Union[Assignment, Mapping[str, Sequence[str]], None]) -> Assignment:
    if isinstance(assignment, Assignment):
        return assignment
    return Assignment(assignment or {})


def _is_allocatable(item: LineItem) -> bool:
    return item.price is not None and item.price > 0


def item_allocations(
    receipt: Receipt, assignment: Union[Assignment, Mapping[str, Sequence[str]], None]
) -> Dict[str, ItemAllocation]:
    """Per-item splits for every priced, assigned item, keyed by item id."""
    assignment = _as_assignment(assignment)
    allocations: Dict[str, ItemAllocation] = {}
    for item in receipt.items:
        if not _is_allocatable(item):
            continue
        diner_ids = assignment.diners_for(item.id)
        if not diner_ids:
            continue
        allocations[item.id] = split_item(item.price, diner_ids)
    return allocations


def unassigned_items(
    receipt: Receipt, assignment: Union[Assignment, Mapping[str, Sequence[str]], None]
) -> List[LineItem]:
    """Priced items nobody shares; their value is left out of every diner total."""
    assignment = _as_assignment(assignment)
    return [
        item for item in receipt.items
        if _is_allocatable(item) and not assignment.is_assigned(item.id)
    ]


def per_person_totals(
    receipt: Receipt,
    diners: Sequence[Diner],
    assignment: Union[Assignment, Mapping[str, Sequence[str]], None],
) -> List[DinerTotal]:
    """
    Compute one DinerTotal per diner, in diner list order.

    Subtotals are the diners' shares of assigned item prices. The service
    portion of the bill (total_with_service - total) is spread in proportion
    to subtotals with plain rounding, and the last diner in the list absorbs
    whatever is needed for the shares to add up to the banker-rounded
    service portion exactly.

    Assignment entries for unknown item ids have no effect. Shares belonging
    to diner ids outside the diner list are not emitted, but still count
    towards the proportional base.
    """
    with money_context():
        subtotals: Dict[str, Decimal] = {}
        for allocation in item_allocations(receipt, assignment).values():
            add_allocation_to_subtotals(subtotals, allocation)

        subtotal_sum = sum(subtotals.values(), ZERO)
        service_portion = receipt.service_portion()
        has_shares = subtotal_sum > 0

        totals: List[DinerTotal] = []
        accumulated_service = ZERO
        last_index = len(diners) - 1
        for index, diner in enumerate(diners):
            subtotal = round_bankers(subtotals.get(diner.id, ZERO))
            service = ZERO
            if has_shares:
                service = round_plain(subtotal / subtotal_sum * service_portion)
                if index == last_index:
                    service = round_bankers(service_portion) - accumulated_service
            accumulated_service += service
            totals.append(DinerTotal(diner=diner, subtotal=subtotal, service=service))

    return totals
