"""Sequenced reads/writes against the allocation store.

Two entry points with different semantics:

* :func:`quick_plan` ACCUMULATES: the split quantity is added to what the
  (order, week) record already holds, and the objective grows by the same
  quantity. Calling it twice with 10 plans 20.
* :func:`advanced_plan` REPLACES: each week's objective and planned split
  overwrite the stored ones.

Writes are awaited one after the other. A failing write stops the call and
raises :class:`AllocationWriteError`; weeks already written stay written.
There is no locking: two concurrent quick plans on the same record can lose
an increment (last write wins in the store).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, List, Literal, Sequence, Tuple

from .split import add_split, split_quantity
from .store import AllocationStore
from .types import AllocationPayload, AllocationRecord, DAYS, Order, PlanRow, Week, to_quantity

logger = logging.getLogger("week_planner.orchestrator")

QUICK_PLAN_COMMENT = "Planification rapide facturation"
ADVANCED_PLAN_COMMENT = "Planification mode avance"

_ZERO_DAYS: Tuple[int, ...] = (0,) * len(DAYS)


@dataclass(frozen=True)
class PlanResult:
    action: Literal["created", "updated", "skipped"]
    week_id: int
    record: AllocationRecord | None = None


class AllocationWriteError(RuntimeError):
    """A create/update against the store failed; earlier writes were kept."""

    def __init__(self, message: str, *, order_id: int, week_id: int, completed: Sequence[PlanResult] = ()):
        super().__init__(message)
        self.order_id = order_id
        self.week_id = week_id
        self.completed: List[PlanResult] = list(completed)


async def _write(
    store: AllocationStore,
    existing: AllocationRecord | None,
    payload: AllocationPayload,
) -> PlanResult:
    if existing is None:
        rec = await store.create_allocation(payload)
        logger.info("allocation created: order=%s week=%s id=%s", payload.order_id, payload.week_id, rec.id)
        return PlanResult("created", payload.week_id, rec)
    rec = await store.update_allocation(existing.id, payload)
    logger.info("allocation updated: order=%s week=%s id=%s", payload.order_id, payload.week_id, rec.id)
    return PlanResult("updated", payload.week_id, rec)


async def quick_plan(store: AllocationStore, order: Order, week: Week, quantity: Any) -> PlanResult:
    """Add ``quantity`` to the (order, week) allocation, split Monday..Friday."""
    qty = to_quantity(quantity)
    if qty <= 0:
        raise ValueError("Quantite a planifier invalide")

    try:
        current = await store.find_allocation(order.id, week.id)
        if current is not None:
            payload = AllocationPayload(
                week_id=week.id,
                order_id=order.id,
                objectif=current.bucket.objectif + qty,
                planifie=tuple(add_split(current.bucket.planned(), qty)),
                date_debut=week.date_debut,
                identifiant_lot=current.identifiant_lot or order.lot_label(week.annee),
                stock_actuel=None,
            )
        else:
            payload = AllocationPayload(
                week_id=week.id,
                order_id=order.id,
                objectif=qty,
                planifie=tuple(split_quantity(qty)),
                emballe=_ZERO_DAYS,
                date_debut=week.date_debut,
                identifiant_lot=order.lot_label(week.annee),
                commentaire=QUICK_PLAN_COMMENT,
            )
        return await _write(store, current, payload)
    except Exception as exc:
        logger.exception("quick plan failed: order=%s week=%s qty=%s", order.id, week.id, qty)
        raise AllocationWriteError(
            f"Echec planification commande {order.article_code or order.id} ({week.label}): {exc}",
            order_id=order.id,
            week_id=week.id,
        ) from exc


async def advanced_plan(store: AllocationStore, order: Order, rows: Sequence[PlanRow]) -> List[PlanResult]:
    """Write each week's objective and planned split, replacing the stored values.

    Rows with both objective and planned total at 0 are skipped (no empty
    records). Returns one result per row, in row order.
    """
    results: List[PlanResult] = []
    for row in rows:
        objectif = to_quantity(row.objectif)
        planifie = to_quantity(row.planifie)
        if objectif <= 0 and planifie <= 0:
            results.append(PlanResult("skipped", row.week.id))
            continue

        payload = AllocationPayload(
            week_id=row.week.id,
            order_id=order.id,
            objectif=objectif,
            planifie=tuple(split_quantity(planifie)),
            date_debut=row.week.date_debut,
            identifiant_lot=order.lot_label(row.week.annee),
            commentaire=ADVANCED_PLAN_COMMENT,
        )
        try:
            existing = await store.find_allocation(order.id, row.week.id)
            if existing is None:
                payload = replace(payload, emballe=_ZERO_DAYS)
            results.append(await _write(store, existing, payload))
        except Exception as exc:
            logger.exception(
                "advanced plan stopped: order=%s week=%s written=%d", order.id, row.week.id, len(results)
            )
            raise AllocationWriteError(
                f"Echec planification avancee ({row.week.label}): {exc}",
                order_id=order.id,
                week_id=row.week.id,
                completed=results,
            ) from exc
    return results


async def load_plan_rows(
    store: AllocationStore,
    order: Order,
    weeks: Sequence[Week],
    unite: str | None = None,
) -> List[PlanRow]:
    """Current objective/planned/packaged totals of ``order`` for each week.

    A week whose grid cannot be fetched yields a zero row.
    """
    rows: List[PlanRow] = []
    for week in weeks:
        try:
            grid = await store.fetch_week_grid(week.numero, week.annee, unite)
        except Exception:
            logger.warning("week grid unavailable: %s", week.label, exc_info=True)
            rows.append(PlanRow(week=week))
            continue
        existing = grid.row_for(order.id)
        if existing is None:
            rows.append(PlanRow(week=week))
        else:
            rows.append(PlanRow(
                week=week,
                objectif=existing.objectif,
                planifie=existing.total_planifie,
                emballe=existing.total_emballe,
            ))
    return rows


def with_defaults(rows: Sequence[PlanRow], default_qty: Any) -> Tuple[List[PlanRow], int]:
    """Seed the first week with ``default_qty`` where nothing is planned yet.

    Returns the rows and the initial target total (sum of planned, or
    ``default_qty`` when that sum is 0).
    """
    qty = to_quantity(default_qty)
    out = [
        replace(
            r,
            objectif=r.objectif or (qty if i == 0 else 0),
            planifie=r.planifie or (qty if i == 0 else 0),
        )
        for i, r in enumerate(rows)
    ]
    total = sum(r.planifie for r in out)
    return out, (total if total > 0 else qty)
