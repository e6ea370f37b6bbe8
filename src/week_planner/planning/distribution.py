"""Redistribution of a target total across ordered week buckets.

All policies clamp bad numbers to 0, never mutate their inputs and return
lists whose sum is exactly the (clamped) total. Ties go to the earliest
bucket, so results are deterministic.
"""
from __future__ import annotations

import enum
import math
from dataclasses import replace
from typing import Any, List, Sequence, Tuple

from .types import PlanRow, to_quantity


class DistributionPolicy(str, enum.Enum):
    OBJECTIFS = "objectifs"
    EGALITAIRE = "egalitaire"
    PROPORTIONNELLE = "proportionnelle"
    MOITIE_DEBUT_FIN = "moitie_debut_fin"


def copy_objectif_to_planifie(objectifs: Sequence[Any]) -> Tuple[List[int], int]:
    """Planned = floored objective per bucket; also returns the new overall target."""
    planifie = [to_quantity(o) for o in objectifs]
    return planifie, sum(planifie)


def equalize(total: Any, n: int) -> List[int]:
    """``total`` spread over ``n`` buckets, first ``total % n`` buckets get one more.

    >>> equalize(10, 3)
    [4, 3, 3]
    """
    n = to_quantity(n)
    if n <= 0:
        return []
    base, rem = divmod(to_quantity(total), n)
    return [base + (1 if i < rem else 0) for i in range(n)]


def proportional(total: Any, weights: Sequence[Any]) -> List[int]:
    """Largest-remainder split of ``total`` following ``weights``.

    Falls back to :func:`equalize` when every weight is 0.

    >>> proportional(100, [30, 10, 0])
    [75, 25, 0]
    """
    if not weights:
        return []
    ws = [to_quantity(w) for w in weights]
    total = to_quantity(total)
    weight_sum = sum(ws)
    if weight_sum <= 0:
        return equalize(total, len(ws))

    # integer arithmetic: floor and remainder of w * total / weight_sum
    floored: List[int] = []
    fracs: List[int] = []
    for w in ws:
        q, r = divmod(w * total, weight_sum)
        floored.append(q)
        fracs.append(r)
    remaining = total - sum(floored)
    # stable sort keeps original order on equal remainders
    order = sorted(range(len(ws)), key=lambda i: -fracs[i])
    for i in order[:remaining]:
        floored[i] += 1
    return floored


def split_half_start_half_end(total: Any, n: int) -> List[int]:
    """Half of ``total`` over the first ``ceil(n/2)`` buckets, the rest over the others.

    >>> split_half_start_half_end(11, 5)
    [2, 2, 1, 3, 3]
    """
    n = to_quantity(n)
    if n <= 0:
        return []
    total = to_quantity(total)
    first_count = math.ceil(n / 2)
    second_count = n - first_count
    first_total = total // 2
    second_total = total - first_total
    if second_count == 0:
        # single bucket: nowhere else to put the second half
        return [total]
    return equalize(first_total, first_count) + equalize(second_total, second_count)


def distribute_rows(
    rows: Sequence[PlanRow],
    policy: DistributionPolicy | str,
    target_total: Any = 0,
) -> Tuple[List[PlanRow], int]:
    """Apply ``policy`` to the ``planifie`` of each row.

    Returns the new rows and the target total; only ``OBJECTIFS`` changes the
    target (to the sum of the objectives).
    """
    policy = DistributionPolicy(policy)
    total = to_quantity(target_total)
    if not rows:
        return [], total

    if policy is DistributionPolicy.OBJECTIFS:
        values, total = copy_objectif_to_planifie([r.objectif for r in rows])
    elif policy is DistributionPolicy.EGALITAIRE:
        values = equalize(total, len(rows))
    elif policy is DistributionPolicy.PROPORTIONNELLE:
        values = proportional(total, [r.objectif for r in rows])
    else:
        values = split_half_start_half_end(total, len(rows))

    return [replace(r, planifie=v) for r, v in zip(rows, values)], total
