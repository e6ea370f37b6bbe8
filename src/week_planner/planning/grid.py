"""Weekly grid: what is already planned for every order of one week."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .types import AllocationRecord, Order, Week, WeekBucket


@dataclass(frozen=True)
class GridRow:
    order: Order
    bucket: WeekBucket
    record_id: int | None = None
    identifiant_lot: str | None = None
    stock_actuel: int | None = None
    stock_embale_precedent: int = 0
    commentaire: str | None = None

    @property
    def objectif(self) -> int:
        return self.bucket.objectif

    @property
    def total_planifie(self) -> int:
        return self.bucket.total_planifie

    @property
    def total_emballe(self) -> int:
        return self.bucket.total_emballe

    @property
    def reste_a_facturer(self) -> int:
        return max(0, self.objectif - self.total_emballe)

    @property
    def ecart_planification(self) -> int:
        return self.total_planifie - self.objectif

    @property
    def stock_non_emballe(self) -> int:
        return max(0, self.objectif - self.total_planifie)

    @classmethod
    def from_record(cls, order: Order, record: AllocationRecord, **extra) -> "GridRow":
        return cls(
            order=order,
            bucket=record.bucket,
            record_id=record.id,
            identifiant_lot=record.identifiant_lot,
            stock_actuel=record.stock_actuel,
            commentaire=record.commentaire,
            **extra,
        )


@dataclass(frozen=True)
class WeekGrid:
    week: Week
    rows: List[GridRow] = field(default_factory=list)
    unite: str | None = None

    def row_for(self, order_id: int) -> GridRow | None:
        for r in self.rows:
            if r.order.id == order_id:
                return r
        return None

    def day_plans(self) -> Dict[Order, List[int]]:
        """Planned quantity per day for every order (input of the load analysis)."""
        return {r.order: r.bucket.planned() for r in self.rows}

    def article_ids(self) -> List[int]:
        seen: List[int] = []
        for r in self.rows:
            aid = r.order.article_id
            if aid is not None and aid not in seen:
                seen.append(aid)
        return seen

    def recap(self) -> Mapping[str, int]:
        out = {
            "total_quantite": 0,
            "total_facturee": 0,
            "total_reste_a_facturer": 0,
            "total_planifie_semaine": 0,
            "total_emballe_semaine": 0,
            "total_stock_non_emballe": 0,
        }
        for r in self.rows:
            out["total_quantite"] += r.order.quantite
            out["total_facturee"] += r.objectif
            out["total_reste_a_facturer"] += r.reste_a_facturer
            out["total_planifie_semaine"] += r.total_planifie
            out["total_emballe_semaine"] += r.total_emballe
            out["total_stock_non_emballe"] += r.stock_non_emballe
        out["ecart_global_planification"] = out["total_planifie_semaine"] - out["total_reste_a_facturer"]
        return out
