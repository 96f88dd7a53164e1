# smartsplit/services/roster.py
from __future__ import annotations

from typing import Optional, Sequence, Tuple

from smartsplit.domain.models import Assignment, Diner, LineItem, new_id

MAX_DINERS = 20
MAX_ITEMS = 50


class RosterError(ValueError):
    """Raised when a diner or item change would break a roster rule."""


def _name_taken(name: str, diners: Sequence[Diner]) -> bool:
    folded = name.casefold()
    return any(d.name.casefold() == folded for d in diners)


def suggested_diner_name(diners: Sequence[Diner]) -> str:
    return f"Diner {len(diners) + 1}"


def next_available_name(base: str, diners: Sequence[Diner]) -> str:
    """
    First of "base", "base 2", "base 3", ... not already used by a diner.
    Comparison ignores case.
    """
    candidate = base
    counter = 1
    while _name_taken(candidate, diners):
        counter += 1
        candidate = f"{base} {counter}"
    return candidate


def add_diner(
    diners: Sequence[Diner],
    name: Optional[str] = None,
    *,
    max_diners: int = MAX_DINERS,
) -> Tuple[Diner, ...]:
    """
    Return a new diner tuple with one more diner appended.

    Without a name the diner gets the next free "Diner N" name. An explicit
    name must be non-blank and not clash (case-insensitively) with an
    existing diner.
    """
    if name is not None:
        name = name.strip()
        if not name:
            raise RosterError("Please enter a name.")
        if _name_taken(name, diners):
            raise RosterError("That name is already used.")

    if len(diners) >= max_diners:
        raise RosterError(f"Maximum of {max_diners} diners reached.")

    if name is None:
        name = next_available_name(suggested_diner_name(diners), diners)

    return tuple(diners) + (Diner(id=new_id(), name=name),)


def ensure_at_least_one_diner(diners: Sequence[Diner]) -> Tuple[Diner, ...]:
    if diners:
        return tuple(diners)
    return add_diner(diners)


def items_to_add(requested: int, current_count: int, *, max_items: int = MAX_ITEMS) -> Tuple[int, bool]:
    """
    Clamp a request to add `requested` items so the receipt stays within
    max_items. Returns (count, capped) where capped tells the caller to
    show the limit warning.
    """
    if requested < 0:
        raise RosterError("Number of items to add must be >= 0.")
    room = max(max_items - current_count, 0)
    if requested > room:
        return room, True
    return requested, False


def add_blank_items(
    items: Sequence[LineItem], requested: int, *, max_items: int = MAX_ITEMS
) -> Tuple[LineItem, ...]:
    count, _capped = items_to_add(requested, len(items), max_items=max_items)
    return tuple(items) + tuple(LineItem() for _ in range(count))


def assignment_description(item_id: str, diners: Sequence[Diner], assignment: Assignment) -> str:
    diner_ids = assignment.diners_for(item_id)
    if not diner_ids:
        return "Unassigned"
    names = [d.name for d in diners if d.id in diner_ids]
    if not names:
        return "Unassigned"
    return "Assigned to: " + ", ".join(names)


def assignment_label(item_id: str, assignment: Assignment) -> str:
    count = len(assignment.diners_for(item_id))
    if count == 0:
        return "Assign"
    if count == 1:
        return "1 diner"
    return f"{count} diners"
