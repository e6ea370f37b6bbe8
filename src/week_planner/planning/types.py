"""Domain values shared by the planning core.

Everything here is immutable: distribution and orchestration build new
values with ``dataclasses.replace`` instead of mutating what they were given.
"""
from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, Mapping, Sequence, Tuple

DAYS: Tuple[str, ...] = ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi")
WEEKDAYS: Tuple[str, ...] = DAYS[:5]


def _as_real(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    v = float(value)
    if not math.isfinite(v):
        return None
    return v


def to_quantity(value: Any) -> int:
    """Floor to a non-negative int; NaN, inf, negatives and non-numbers become 0."""
    v = _as_real(value)
    if v is None or v <= 0:
        return 0
    return int(math.floor(v))


def to_exact_quantity(value: Any) -> int:
    """Like :func:`to_quantity` but a non-integral value becomes 0 instead of being floored."""
    v = _as_real(value)
    if v is None or v <= 0 or not v.is_integer():
        return 0
    return int(v)


@dataclass(frozen=True)
class Week:
    id: int
    numero: int
    annee: int
    date_debut: date | None = None
    date_fin: date | None = None
    code: str | None = None

    @property
    def label(self) -> str:
        return f"S{self.numero:02d}-{self.annee}"


@dataclass(frozen=True)
class Order:
    id: int
    article_id: int | None = None
    article_code: str | None = None
    quantite: int = 0
    lot: str | None = None
    unite: str | None = None

    def lot_label(self, annee: int) -> str:
        return f"{self.lot or self.id}-{annee}"


@dataclass(frozen=True)
class DayCell:
    planifie: int = 0
    emballe: int = 0


def _zero_days() -> Mapping[str, DayCell]:
    return MappingProxyType({d: DayCell() for d in DAYS})


@dataclass(frozen=True)
class WeekBucket:
    """Weekly objective plus the six day cells of one (order, week) pair."""
    objectif: int = 0
    days: Mapping[str, DayCell] = field(default_factory=_zero_days, hash=False)

    def __post_init__(self):
        if not isinstance(self.days, MappingProxyType):
            object.__setattr__(self, "days", MappingProxyType(dict(self.days)))

    def planned(self) -> list[int]:
        return [self.days.get(d, DayCell()).planifie for d in DAYS]

    def packaged(self) -> list[int]:
        return [self.days.get(d, DayCell()).emballe for d in DAYS]

    @property
    def total_planifie(self) -> int:
        return sum(self.planned())

    @property
    def total_emballe(self) -> int:
        return sum(self.packaged())

    @classmethod
    def from_lists(
        cls,
        objectif: int,
        planifie: Sequence[int],
        emballe: Sequence[int] | None = None,
    ) -> "WeekBucket":
        emb = list(emballe) if emballe is not None else [0] * len(DAYS)
        days = {
            d: DayCell(
                planifie=int(planifie[i]) if i < len(planifie) else 0,
                emballe=int(emb[i]) if i < len(emb) else 0,
            )
            for i, d in enumerate(DAYS)
        }
        return cls(objectif=int(objectif), days=days)


@dataclass(frozen=True)
class AllocationRecord:
    """Persisted WeekBucket for one (order, week) pair."""
    id: int
    order_id: int
    week_id: int
    bucket: WeekBucket
    identifiant_lot: str | None = None
    date_debut_planification: date | None = None
    commentaire: str | None = None
    stock_actuel: int | None = None


@dataclass(frozen=True)
class AllocationPayload:
    """Create/update payload sent to the allocation store.

    ``emballe`` is ``None`` when the write must leave packaged values untouched.
    """
    week_id: int
    order_id: int
    objectif: int
    planifie: Tuple[int, ...]
    emballe: Tuple[int, ...] | None = None
    date_debut: date | None = None
    identifiant_lot: str | None = None
    commentaire: str | None = None
    stock_actuel: int | None = 0
    stock_embale_precedent: int | None = None

    def to_api_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "ID_Semaine_planifiee": self.week_id,
            "ID_Commande": self.order_id,
            "Quantite_facturee_semaine": self.objectif,
            "Date_debut_planification": self.date_debut.isoformat() if self.date_debut else None,
            "Identifiant_lot": self.identifiant_lot,
            "Stock_actuel": self.stock_actuel,
            "Commentaire": self.commentaire,
        }
        for i, d in enumerate(DAYS):
            out[f"{d.capitalize()}_planifie"] = self.planifie[i]
            if self.emballe is not None:
                out[f"{d.capitalize()}_emballe"] = self.emballe[i]
        return out


@dataclass(frozen=True)
class PlanRow:
    """One week of an advanced plan: the objective and the planned total chosen for it."""
    week: Week
    objectif: int = 0
    planifie: int = 0
    emballe: int = 0
