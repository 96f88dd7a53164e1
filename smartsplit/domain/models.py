# smartsplit/domain/models.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

from smartsplit.domain.money import ZERO, Number, money_context, round_bankers, to_decimal


class ModelValidationError(ValueError):
    """Raised when domain models fail basic validation."""


SERVICE_CHARGE_PERCENTAGES: Tuple[Decimal, ...] = tuple(
    Decimal(p) for p in ("0", "5", "7.5", "10", "12.5", "15", "17.5", "20")
)
SERVICE_CHARGE_RATES: Tuple[Decimal, ...] = tuple(p / 100 for p in SERVICE_CHARGE_PERCENTAGES)


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LineItem:
    """
    A receipt line item.
    price is None until the user enters one; it then counts as zero in totals.
    """
    id: str = field(default_factory=new_id)
    name: str = ""
    price: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ModelValidationError("LineItem.id must be a non-empty string")
        if not isinstance(self.name, str):
            raise ModelValidationError("LineItem.name must be a string")
        if self.price is not None:
            object.__setattr__(self, "price", to_decimal(self.price))

    @property
    def amount(self) -> Decimal:
        return ZERO if self.price is None else self.price

    def with_price(self, price: Optional[Number]) -> "LineItem":
        return LineItem(id=self.id, name=self.name, price=price)

    def with_name(self, name: str) -> "LineItem":
        return LineItem(id=self.id, name=name, price=self.price)


@dataclass(frozen=True)
class Diner:
    """A person taking part in the split."""
    id: str
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ModelValidationError("Diner.id must be a non-empty string")
        if not isinstance(self.name, str):
            raise ModelValidationError("Diner.name must be a string")


@dataclass(frozen=True)
class Receipt:
    """
    Ordered line items plus a service-charge rate (0.125 for 12.5%).

    Any non-negative rate is accepted, not only the menu in
    SERVICE_CHARGE_RATES.
    """
    items: Tuple[LineItem, ...] = ()
    service_charge: Decimal = ZERO

    def __post_init__(self) -> None:
        items = tuple(self.items)
        for it in items:
            if not isinstance(it, LineItem):
                raise ModelValidationError("Receipt.items must contain LineItem values")
        object.__setattr__(self, "items", items)

        rate = to_decimal(self.service_charge)
        if rate < 0:
            raise ModelValidationError("Receipt.service_charge must be >= 0")
        object.__setattr__(self, "service_charge", rate)

    def total(self) -> Decimal:
        with money_context():
            return round_bankers(sum((it.amount for it in self.items), ZERO))

    def total_with_service(self) -> Decimal:
        # The total is rounded before applying the rate, then rounded again.
        with money_context():
            return round_bankers(round_bankers(self.total()) * (1 + self.service_charge))

    def service_portion(self) -> Decimal:
        with money_context():
            return self.total_with_service() - self.total()


class Assignment(Mapping[str, Tuple[str, ...]]):
    """
    item_id -> ordered diner ids sharing that item.

    Each entry behaves like a set (no duplicates) but keeps insertion order,
    so the diner absorbing an item's rounding residue is always the one added
    last. Instances are immutable; toggle() returns a new Assignment.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Optional[Mapping[str, Iterable[str]]] = None) -> None:
        normalized: Dict[str, Tuple[str, ...]] = {}
        for item_id, diner_ids in (entries or {}).items():
            if isinstance(diner_ids, str):
                raise ModelValidationError(
                    f"assignment for item {item_id} must be a collection of diner ids"
                )
            normalized[item_id] = tuple(dict.fromkeys(diner_ids))
        self._entries = normalized

    def __getitem__(self, item_id: str) -> Tuple[str, ...]:
        return self._entries[item_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Assignment({self._entries!r})"

    def diners_for(self, item_id: str) -> Tuple[str, ...]:
        return self._entries.get(item_id, ())

    def is_assigned(self, item_id: str) -> bool:
        return bool(self.diners_for(item_id))

    def toggle(self, item_id: str, diner_id: str) -> "Assignment":
        current = self.diners_for(item_id)
        if diner_id in current:
            updated = tuple(d for d in current if d != diner_id)
        else:
            updated = current + (diner_id,)
        entries = dict(self._entries)
        entries[item_id] = updated
        return Assignment(entries)


@dataclass(frozen=True)
class DinerTotal:
    """
    Per-diner result. service is the diner's service-charge share, also
    available as service_share.
    """
    diner: Diner
    subtotal: Decimal
    service: Decimal

    @property
    def total(self) -> Decimal:
        with money_context():
            return self.subtotal + self.service

    @property
    def service_share(self) -> Decimal:
        return self.service

    @property
    def id(self) -> str:
        return self.diner.id


def make_items(pairs: Sequence[Tuple[str, Optional[Number]]]) -> Tuple[LineItem, ...]:
    """Build line items from (name, price) pairs with fresh ids."""
    return tuple(LineItem(name=name, price=price) for name, price in pairs)
