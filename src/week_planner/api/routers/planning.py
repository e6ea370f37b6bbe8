# src/week_planner/api/routers/planning.py
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...analysis.load import TheoreticalTimeCache, analyze
from ...config import CAPACITY_HOURS_PER_DAY
from ...db import get_db
from ...db.models import Commande, PlanningHebdo
from ...db.store import SqlAllocationStore, get_week, order_from_row, record_from_row, week_from_row
from ...planning.conflicts import detect_conflicts, suggest
from ...planning.distribution import distribute_rows
from ...planning.orchestrator import AllocationWriteError, advanced_plan, quick_plan
from ...planning.types import PlanRow, Order
from ...schemas import (
    AdvancedPlanIn,
    DistributeIn,
    PlanResultOut,
    QuickPlanIn,
    analysis_payload,
    grid_payload,
)

router = APIRouter(prefix="/planning", tags=["planning"])
logger = logging.getLogger("week_planner.api")


def get_store() -> SqlAllocationStore:
    return SqlAllocationStore()


def _get_order(db: Session, commande_id: int) -> Order:
    cmd = db.get(Commande, int(commande_id))
    if cmd is None:
        raise ValueError("Commande non trouvee")
    return order_from_row(cmd)


def _write_error(e: AllocationWriteError) -> HTTPException:
    return HTTPException(
        status_code=502,
        detail={
            "msg": str(e),
            "week_id": e.week_id,
            "completed": [PlanResultOut.from_result(r).model_dump() for r in e.completed],
        },
    )


@router.get("/grille", summary="Weekly planning grid")
async def grille(
    numero_semaine: int = Query(...),
    annee: int = Query(...),
    unite_production: Optional[str] = Query(None),
    store: SqlAllocationStore = Depends(get_store),
):
    try:
        grid = await store.fetch_week_grid(numero_semaine, annee, unite_production)
    except ValueError as e:
        raise HTTPException(status_code=404, detail={"msg": str(e)})
    return {"status": "ok", "data": grid_payload(grid)}


@router.post("/distribute", summary="Preview a distribution over weeks")
def distribute(body: DistributeIn):
    rows = [PlanRow(week=r.week.to_week(), objectif=int(max(0, r.objectif)), planifie=int(max(0, r.planifie)))
            for r in body.rows]
    new_rows, total = distribute_rows(rows, body.policy, body.target_total)
    return {
        "status": "ok",
        "target_total": total,
        "rows": [{"week_id": r.week.id, "objectif": r.objectif, "planifie": r.planifie} for r in new_rows],
    }


@router.post("/quick", summary="Add a quantity to one order/week")
async def quick(body: QuickPlanIn, db: Session = Depends(get_db), store: SqlAllocationStore = Depends(get_store)):
    try:
        order = _get_order(db, body.commande_id)
        week = week_from_row(get_week(db, body.numero_semaine, body.annee))
        res = await quick_plan(store, order, week, body.quantite)
    except AllocationWriteError as e:
        raise _write_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"msg": str(e)})
    return {"status": "ok", "result": PlanResultOut.from_result(res).model_dump()}


@router.post("/advanced", summary="Replace objectives/plans over several weeks")
async def advanced(body: AdvancedPlanIn, db: Session = Depends(get_db), store: SqlAllocationStore = Depends(get_store)):
    try:
        order = _get_order(db, body.commande_id)
        rows = [
            PlanRow(
                week=week_from_row(get_week(db, r.numero_semaine, r.annee)),
                objectif=r.objectif,
                planifie=r.planifie,
            )
            for r in body.rows
        ]
        results = await advanced_plan(store, order, rows)
    except AllocationWriteError as e:
        raise _write_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail={"msg": str(e)})
    return {"status": "ok", "results": [PlanResultOut.from_result(r).model_dump() for r in results]}


@router.get("/analyse", summary="Daily load against capacity")
async def analyse(
    numero_semaine: int = Query(...),
    annee: int = Query(...),
    unite_production: Optional[str] = Query(None),
    capacity: float = Query(CAPACITY_HOURS_PER_DAY, gt=0),
    store: SqlAllocationStore = Depends(get_store),
):
    try:
        grid = await store.fetch_week_grid(numero_semaine, annee, unite_production)
    except ValueError as e:
        raise HTTPException(status_code=404, detail={"msg": str(e)})
    cache = TheoreticalTimeCache()
    await cache.populate(grid.article_ids(), store.fetch_theoretical_time)
    result = analyze(grid.day_plans(), cache, capacity)
    logger.info(
        "load S%s-%s: total=%.1fh avg=%.1f%% peak=%.1fh",
        numero_semaine, annee, result.synthesis.total_hours,
        result.synthesis.average_utilization, result.synthesis.peak_hours,
    )
    return {"status": "ok", "data": analysis_payload(result, capacity)}


@router.get("/{record_id}/conflits", summary="Conflicts and suggestions for one allocation")
def conflits(record_id: int, db: Session = Depends(get_db)):
    p = db.get(PlanningHebdo, int(record_id))
    if p is None:
        raise HTTPException(status_code=404, detail={"msg": "Planning non trouve"})
    rec = record_from_row(p)
    cmd = db.get(Commande, int(p.commande_id))
    qty = int(cmd.quantite or 0) if cmd is not None else 0
    return {
        "status": "ok",
        "conflits": [asdict(f) for f in detect_conflicts(rec.bucket, qty, rec.stock_actuel)],
        "suggestions": [asdict(f) for f in suggest(rec.bucket, rec.stock_actuel)],
    }
