from __future__ import annotations

from datetime import date
from typing import Dict, List

from pydantic import BaseModel, Field

from .analysis.load import LoadAnalysis
from .planning.distribution import DistributionPolicy
from .planning.grid import GridRow, WeekGrid
from .planning.orchestrator import PlanResult
from .planning.types import DAYS, Week


class WeekIn(BaseModel):
    id: int
    numero: int
    annee: int
    date_debut: date | None = None
    date_fin: date | None = None

    def to_week(self) -> Week:
        return Week(id=self.id, numero=self.numero, annee=self.annee, date_debut=self.date_debut, date_fin=self.date_fin)


class QuickPlanIn(BaseModel):
    commande_id: int
    numero_semaine: int
    annee: int
    quantite: float


class PlanRowIn(BaseModel):
    numero_semaine: int
    annee: int
    objectif: float = 0
    planifie: float = 0


class AdvancedPlanIn(BaseModel):
    commande_id: int
    rows: List[PlanRowIn] = Field(default_factory=list)


class DistributeRowIn(BaseModel):
    week: WeekIn
    objectif: float = 0
    planifie: float = 0


class DistributeIn(BaseModel):
    policy: DistributionPolicy
    target_total: float = 0
    rows: List[DistributeRowIn] = Field(default_factory=list)


class PlanResultOut(BaseModel):
    action: str
    week_id: int
    record_id: int | None = None

    @classmethod
    def from_result(cls, r: PlanResult) -> "PlanResultOut":
        return cls(action=r.action, week_id=r.week_id, record_id=r.record.id if r.record else None)


def grid_row_payload(r: GridRow) -> dict:
    return {
        "id": r.record_id,
        "commande_id": r.order.id,
        "article_id": r.order.article_id,
        "article_code": r.order.article_code,
        "lot": r.order.lot,
        "identifiant_lot": r.identifiant_lot or r.order.lot,
        "unite_production": r.order.unite,
        "quantite_totale": r.order.quantite,
        "quantite_facturee_semaine": r.objectif,
        "reste_a_facturer": r.reste_a_facturer,
        "stock_actuel": r.stock_actuel or 0,
        "stock_embale_precedent": r.stock_embale_precedent,
        "stock_non_emballe": r.stock_non_emballe,
        "planification": {
            d: {"planifie": r.bucket.days[d].planifie, "emballe": r.bucket.days[d].emballe} for d in DAYS
        },
        "total_planifie_semaine": r.total_planifie,
        "total_emballe_semaine": r.total_emballe,
        "ecart_planification": r.ecart_planification,
        "commentaire": r.commentaire,
    }


def grid_payload(grid: WeekGrid) -> dict:
    w = grid.week
    return {
        "semaine": {
            "id": w.id,
            "numero_semaine": w.numero,
            "annee": w.annee,
            "code_semaine": w.code,
            "date_debut": str(w.date_debut) if w.date_debut else None,
            "date_fin": str(w.date_fin) if w.date_fin else None,
        },
        "unite_production": grid.unite,
        "count": len(grid.rows),
        "commandes": [grid_row_payload(r) for r in grid.rows],
        "recapitulatif": dict(grid.recap()),
    }


def analysis_payload(a: LoadAnalysis, capacity: float) -> Dict[str, object]:
    s = a.synthesis
    return {
        "capacity_per_day": capacity,
        "per_day": [
            {"day": p.day, "hours": p.hours, "utilization": p.utilization, "status": p.status}
            for p in a.per_day
        ],
        "synthesis": {
            "total_hours": s.total_hours,
            "total_capacity": s.total_capacity,
            "average_utilization": s.average_utilization,
            "peak_hours": s.peak_hours,
            "peak_day": s.peak_day,
        },
        "by_article": [
            {
                "article": x.article,
                "temps_theorique": x.temps_theorique,
                "planifie": x.planned_units,
                "temps_total": x.total_hours,
            }
            for x in a.by_article
        ],
    }
