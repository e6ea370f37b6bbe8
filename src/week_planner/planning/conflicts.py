"""Advisory checks on one weekly allocation. Nothing here blocks a write."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Literal

from .types import WeekBucket

Severity = Literal["error", "warning", "info"]


@dataclass(frozen=True)
class Finding:
    type: str
    severity: Severity
    message: str


def detect_conflicts(bucket: WeekBucket, order_quantity: int, stock_actuel: int | None) -> List[Finding]:
    out: List[Finding] = []
    planned = bucket.total_planifie
    packaged = bucket.total_emballe
    if planned > order_quantity:
        out.append(Finding(
            "surcharge", "error",
            f"Quantite planifiee ({planned}) depasse la quantite commandee ({order_quantity})",
        ))
    if packaged > planned:
        out.append(Finding(
            "stock_insuffisant", "error",
            f"Quantite emballee ({packaged}) depasse la quantite planifiee ({planned})",
        ))
    if not stock_actuel:
        out.append(Finding("pas_de_stock", "warning", "Aucun stock initial defini"))
    return out


def suggest(bucket: WeekBucket, stock_actuel: int | None) -> List[Finding]:
    out: List[Finding] = []
    values = bucket.planned()
    mean = sum(values) / len(values)
    max_gap = max(abs(v - mean) for v in values)
    if max_gap > mean * 0.5:
        out.append(Finding(
            "equilibrage", "info",
            "La charge n'est pas equilibree entre les jours. Envisagez de redistribuer.",
        ))
    total = sum(values)
    if stock_actuel is not None and stock_actuel < total * 0.1:
        out.append(Finding(
            "stock_tampon", "warning",
            f"Stock tampon faible ({stock_actuel}). Minimum recommande: {math.ceil(total * 0.1)}",
        ))
    return out
