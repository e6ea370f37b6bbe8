# src/week_planner/db/store.py
from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator, List

from sqlalchemy import select
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..planning.grid import GridRow, WeekGrid
from ..planning.types import (
    DAYS,
    AllocationPayload,
    AllocationRecord,
    Order,
    Week,
    WeekBucket,
)
from . import SessionLocal
from .models import Article, Commande, PlanningHebdo, Semaine


# ---- ORM -> domain -----------------------------------------------------------
def week_from_row(s: Semaine) -> Week:
    return Week(
        id=int(s.id),
        numero=int(s.numero_semaine),
        annee=int(s.annee),
        date_debut=s.date_debut,
        date_fin=s.date_fin,
        code=s.code_semaine,
    )


def order_from_row(c: Commande) -> Order:
    return Order(
        id=int(c.id),
        article_id=int(c.article_id) if c.article_id is not None else None,
        article_code=c.code_article,
        quantite=int(c.quantite or 0),
        lot=c.lot,
        unite=c.unite_production,
    )


def bucket_from_row(p: PlanningHebdo) -> WeekBucket:
    return WeekBucket.from_lists(
        int(p.quantite_facturee_semaine or 0),
        [int(getattr(p, f"{d}_planifie") or 0) for d in DAYS],
        [int(getattr(p, f"{d}_emballe") or 0) for d in DAYS],
    )


def record_from_row(p: PlanningHebdo) -> AllocationRecord:
    return AllocationRecord(
        id=int(p.id),
        order_id=int(p.commande_id),
        week_id=int(p.semaine_id),
        bucket=bucket_from_row(p),
        identifiant_lot=p.identifiant_lot,
        date_debut_planification=p.date_debut_planification,
        commentaire=p.commentaire,
        stock_actuel=p.stock_actuel,
    )


def _apply_payload(p: PlanningHebdo, payload: AllocationPayload, *, creating: bool) -> None:
    p.quantite_facturee_semaine = int(payload.objectif)
    for i, d in enumerate(DAYS):
        setattr(p, f"{d}_planifie", int(payload.planifie[i]))
        if payload.emballe is not None:
            setattr(p, f"{d}_emballe", int(payload.emballe[i]))
        elif creating:
            setattr(p, f"{d}_emballe", 0)
    if creating or payload.date_debut is not None:
        p.date_debut_planification = payload.date_debut
    if creating or payload.identifiant_lot is not None:
        p.identifiant_lot = payload.identifiant_lot
    if creating or payload.commentaire is not None:
        p.commentaire = payload.commentaire
    if payload.stock_actuel is not None:
        p.stock_actuel = int(payload.stock_actuel)
    elif creating:
        p.stock_actuel = 0
    p.total_planifie_semaine = sum(int(getattr(p, f"{d}_planifie") or 0) for d in DAYS)
    p.total_emballe_semaine = sum(int(getattr(p, f"{d}_emballe") or 0) for d in DAYS)


# ---- Sync helpers (also used by the CLI) -------------------------------------
def get_week(db: Session, numero: int, annee: int) -> Semaine:
    sem = db.execute(
        select(Semaine).where(Semaine.numero_semaine == int(numero), Semaine.annee == int(annee))
    ).scalar_one_or_none()
    if sem is None:
        raise ValueError("Semaine non trouvee")
    return sem


def previous_packaged_stock(db: Session, identifiant_lot: str | None, before: date | None) -> int:
    """Packaged total of the latest earlier week holding the same lot label, or 0."""
    if not identifiant_lot or before is None:
        return 0
    prev = db.execute(
        select(PlanningHebdo)
        .join(Semaine, Semaine.id == PlanningHebdo.semaine_id)
        .where(PlanningHebdo.identifiant_lot == identifiant_lot, Semaine.date_debut < before)
        .order_by(Semaine.date_debut.desc(), PlanningHebdo.id.desc())
        .limit(1)
    ).scalar_one_or_none()
    if prev is None:
        return 0
    return sum(int(getattr(prev, f"{d}_emballe") or 0) for d in DAYS)


def load_week_grid(db: Session, numero: int, annee: int, unite: str | None = None) -> WeekGrid:
    sem = get_week(db, numero, annee)
    stmt = (
        select(PlanningHebdo, Commande)
        .join(Commande, Commande.id == PlanningHebdo.commande_id)
        .where(PlanningHebdo.semaine_id == sem.id)
        .order_by(Commande.code_article, Commande.lot, PlanningHebdo.id)
    )
    unite = (unite or "").strip() or None
    if unite is not None:
        stmt = stmt.where(Commande.unite_production == unite)
    rows: List[GridRow] = []
    for p, c in db.execute(stmt).all():
        rows.append(GridRow.from_record(
            order_from_row(c),
            record_from_row(p),
            stock_embale_precedent=int(p.stock_embale_precedent or 0),
        ))
    return WeekGrid(week=week_from_row(sem), rows=rows, unite=unite)


class SqlAllocationStore:
    """AllocationStore over the planning_hebdo table.

    Each call uses its own short-lived session and commits on success.
    Blocking work runs in Starlette's threadpool so the event loop stays free.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # -- reads
    def _find(self, order_id: int, week_id: int) -> AllocationRecord | None:
        with self._session() as db:
            p = db.execute(
                select(PlanningHebdo).where(
                    PlanningHebdo.commande_id == int(order_id),
                    PlanningHebdo.semaine_id == int(week_id),
                )
            ).scalar_one_or_none()
            return record_from_row(p) if p is not None else None

    def _grid(self, numero: int, annee: int, unite: str | None) -> WeekGrid:
        with self._session() as db:
            return load_week_grid(db, numero, annee, unite)

    def _time(self, article_id: int) -> float:
        with self._session() as db:
            art = db.get(Article, int(article_id))
            if art is None:
                raise ValueError(f"Article {article_id} non trouve")
            return float(art.temps_theorique or 0.0)

    # -- writes
    def _create(self, payload: AllocationPayload) -> AllocationRecord:
        with self._session() as db:
            p = PlanningHebdo(semaine_id=int(payload.week_id), commande_id=int(payload.order_id))
            _apply_payload(p, payload, creating=True)
            if payload.stock_embale_precedent is not None:
                p.stock_embale_precedent = int(payload.stock_embale_precedent)
            else:
                sem = db.get(Semaine, int(payload.week_id))
                p.stock_embale_precedent = previous_packaged_stock(
                    db, payload.identifiant_lot, sem.date_debut if sem is not None else None
                )
            db.add(p)
            db.flush()
            return record_from_row(p)

    def _update(self, record_id: int, payload: AllocationPayload) -> AllocationRecord:
        with self._session() as db:
            p = db.get(PlanningHebdo, int(record_id))
            if p is None:
                raise ValueError(f"Planning {record_id} non trouve")
            _apply_payload(p, payload, creating=False)
            db.flush()
            return record_from_row(p)

    # -- AllocationStore
    async def find_allocation(self, order_id: int, week_id: int) -> AllocationRecord | None:
        return await run_in_threadpool(self._find, order_id, week_id)

    async def create_allocation(self, payload: AllocationPayload) -> AllocationRecord:
        return await run_in_threadpool(self._create, payload)

    async def update_allocation(self, record_id: int, payload: AllocationPayload) -> AllocationRecord:
        return await run_in_threadpool(self._update, record_id, payload)

    async def fetch_week_grid(self, numero: int, annee: int, unite: str | None = None) -> WeekGrid:
        return await run_in_threadpool(self._grid, numero, annee, unite)

    async def fetch_theoretical_time(self, article_id: int) -> float:
        return await run_in_threadpool(self._time, article_id)
