"""Weekday split of a single quantity (Saturday stays at zero)."""
from __future__ import annotations

from typing import Any, List

from .types import DAYS, WEEKDAYS, to_exact_quantity


def split_quantity(quantity: Any) -> List[int]:
    """Split ``quantity`` over Monday..Friday, Monday-first for the remainder.

    Returns six values ``[lun, mar, mer, jeu, ven, sam]`` where ``sam`` is
    always 0 and each weekday is ``q // 5`` or ``q // 5 + 1``; the values sum
    to ``quantity``. Negative, non-finite or non-integral input counts as 0.

    >>> split_quantity(23)
    [5, 5, 5, 4, 4, 0]
    """
    qty = to_exact_quantity(quantity)
    base, rem = divmod(qty, len(WEEKDAYS))
    out = [base + (1 if i < rem else 0) for i in range(len(WEEKDAYS))]
    out.extend([0] * (len(DAYS) - len(WEEKDAYS)))
    return out


def add_split(current: List[int], quantity: Any) -> List[int]:
    """Element-wise ``current + split_quantity(quantity)`` over the six days."""
    extra = split_quantity(quantity)
    cur = list(current) + [0] * (len(DAYS) - len(current))
    return [int(cur[i]) + extra[i] for i in range(len(DAYS))]
