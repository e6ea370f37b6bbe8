"""Tests for week_planner.planning.orchestrator against an in-memory store."""

import asyncio
from datetime import date

import pytest

from week_planner.planning.grid import GridRow, WeekGrid
from week_planner.planning.orchestrator import (
    ADVANCED_PLAN_COMMENT,
    QUICK_PLAN_COMMENT,
    AllocationWriteError,
    advanced_plan,
    load_plan_rows,
    quick_plan,
    with_defaults,
)
from week_planner.planning.store import AllocationStore
from week_planner.planning.types import AllocationRecord, Order, PlanRow, Week, WeekBucket

ORDER = Order(id=7, article_id=3, article_code="ART-7", quantite=1000, lot="L7")
W10 = Week(id=1, numero=10, annee=2026, date_debut=date(2026, 3, 2))
W11 = Week(id=2, numero=11, annee=2026, date_debut=date(2026, 3, 9))
W12 = Week(id=3, numero=12, annee=2027, date_debut=date(2027, 3, 15))


class FakeStore:
    """Keeps records in a dict and records every call; can fail on chosen weeks."""

    def __init__(self, fail_weeks=()):
        self.records = {}
        self.calls = []
        self.fail_weeks = set(fail_weeks)
        self.in_flight = 0
        self.max_in_flight = 0
        self._next_id = 1

    async def _enter(self, name, *args):
        self.calls.append((name, *args))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        self.in_flight -= 1

    def seed(self, week_id, objectif, planifie, emballe=None, lot="OLD-LOT"):
        rec = AllocationRecord(
            id=self._next_id, order_id=ORDER.id, week_id=week_id,
            bucket=WeekBucket.from_lists(objectif, planifie, emballe), identifiant_lot=lot,
        )
        self._next_id += 1
        self.records[(ORDER.id, week_id)] = rec
        return rec

    async def find_allocation(self, order_id, week_id):
        await self._enter("find", order_id, week_id)
        return self.records.get((order_id, week_id))

    def _store(self, rec_id, payload, previous=None):
        emballe = payload.emballe
        if emballe is None:
            emballe = previous.bucket.packaged() if previous else [0] * 6
        rec = AllocationRecord(
            id=rec_id, order_id=payload.order_id, week_id=payload.week_id,
            bucket=WeekBucket.from_lists(payload.objectif, payload.planifie, emballe),
            identifiant_lot=payload.identifiant_lot, commentaire=payload.commentaire,
        )
        self.records[(payload.order_id, payload.week_id)] = rec
        return rec

    async def create_allocation(self, payload):
        await self._enter("create", payload)
        if payload.week_id in self.fail_weeks:
            raise ConnectionError("store down")
        rec = self._store(self._next_id, payload)
        self._next_id += 1
        return rec

    async def update_allocation(self, record_id, payload):
        await self._enter("update", record_id, payload)
        if payload.week_id in self.fail_weeks:
            raise ConnectionError("store down")
        return self._store(record_id, payload, self.records[(payload.order_id, payload.week_id)])

    async def fetch_week_grid(self, numero, annee, unite=None):
        await self._enter("grid", numero, annee)
        week = next(w for w in (W10, W11, W12) if w.numero == numero)
        if week.id in self.fail_weeks:
            raise ConnectionError("store down")
        rows = [
            GridRow(order=ORDER, bucket=r.bucket, record_id=r.id)
            for (oid, wid), r in self.records.items() if wid == week.id
        ]
        return WeekGrid(week=week, rows=rows)

    async def fetch_theoretical_time(self, article_id):
        return 1.0


def _writes(store):
    return [c for c in store.calls if c[0] in ("create", "update")]


def test_fake_store_matches_protocol():
    assert isinstance(FakeStore(), AllocationStore)


# ═══════════════════════════════════════════════════════════════════
# quick plan
# ═══════════════════════════════════════════════════════════════════


def test_quick_plan_creates_when_absent():
    store = FakeStore()
    res = asyncio.run(quick_plan(store, ORDER, W10, 23))

    assert res.action == "created"
    (name, payload), = _writes(store)
    assert name == "create"
    assert payload.objectif == 23
    assert payload.planifie == (5, 5, 5, 4, 4, 0)
    assert payload.emballe == (0, 0, 0, 0, 0, 0)
    assert payload.identifiant_lot == "L7-2026"
    assert payload.commentaire == QUICK_PLAN_COMMENT
    assert payload.date_debut == date(2026, 3, 2)


def test_quick_plan_accumulates_on_existing_record():
    store = FakeStore()
    store.seed(W10.id, objectif=10, planifie=[2, 2, 2, 2, 2, 3], emballe=[1, 0, 0, 0, 0, 4])
    res = asyncio.run(quick_plan(store, ORDER, W10, 7))

    assert res.action == "updated"
    (name, rec_id, payload), = _writes(store)
    assert name == "update"
    assert payload.objectif == 17
    assert payload.planifie == (4, 4, 3, 3, 3, 3)
    assert payload.emballe is None
    assert payload.identifiant_lot == "OLD-LOT"
    # packaged values left alone
    assert res.record.bucket.packaged() == [1, 0, 0, 0, 0, 4]


def test_quick_plan_twice_keeps_growing():
    store = FakeStore()
    asyncio.run(quick_plan(store, ORDER, W10, 10))
    asyncio.run(quick_plan(store, ORDER, W10, 10))
    rec = store.records[(ORDER.id, W10.id)]
    assert rec.bucket.objectif == 20
    assert rec.bucket.planned() == [4, 4, 4, 4, 4, 0]


@pytest.mark.parametrize("qty", [0, -5, float("nan"), "abc"])
def test_quick_plan_rejects_empty_quantity_without_io(qty):
    store = FakeStore()
    with pytest.raises(ValueError):
        asyncio.run(quick_plan(store, ORDER, W10, qty))
    assert store.calls == []


def test_quick_plan_write_failure_is_surfaced():
    store = FakeStore(fail_weeks={W10.id})
    with pytest.raises(AllocationWriteError) as ei:
        asyncio.run(quick_plan(store, ORDER, W10, 5))
    assert ei.value.week_id == W10.id
    assert ei.value.order_id == ORDER.id
    assert isinstance(ei.value.__cause__, ConnectionError)


# ═══════════════════════════════════════════════════════════════════
# advanced plan
# ═══════════════════════════════════════════════════════════════════


def test_advanced_plan_replaces_and_creates():
    store = FakeStore()
    store.seed(W10.id, objectif=50, planifie=[10, 10, 10, 10, 10, 0], emballe=[5, 0, 0, 0, 0, 0])
    rows = [
        PlanRow(week=W10, objectif=20, planifie=11),
        PlanRow(week=W11, objectif=0, planifie=0),
        PlanRow(week=W12, objectif=5, planifie=0),
    ]
    results = asyncio.run(advanced_plan(store, ORDER, rows))

    assert [r.action for r in results] == ["updated", "skipped", "created"]
    rec10 = store.records[(ORDER.id, W10.id)]
    assert rec10.bucket.objectif == 20
    assert rec10.bucket.planned() == [3, 2, 2, 2, 2, 0]
    assert rec10.bucket.packaged() == [5, 0, 0, 0, 0, 0]
    assert (ORDER.id, W11.id) not in store.records
    rec12 = store.records[(ORDER.id, W12.id)]
    assert rec12.bucket.objectif == 5
    assert rec12.bucket.planned() == [0] * 6
    assert rec12.identifiant_lot == "L7-2027"
    assert rec12.commentaire == ADVANCED_PLAN_COMMENT


def test_advanced_plan_is_strictly_sequential():
    store = FakeStore()
    rows = [PlanRow(week=w, objectif=10, planifie=10) for w in (W10, W11, W12)]
    asyncio.run(advanced_plan(store, ORDER, rows))

    assert store.max_in_flight == 1
    assert [c[0] for c in store.calls] == ["find", "create"] * 3
    assert [c[1].week_id for c in _writes(store)] == [W10.id, W11.id, W12.id]


def test_advanced_plan_stops_on_failure_without_rollback():
    store = FakeStore(fail_weeks={W11.id})
    rows = [PlanRow(week=w, objectif=10, planifie=10) for w in (W10, W11, W12)]
    with pytest.raises(AllocationWriteError) as ei:
        asyncio.run(advanced_plan(store, ORDER, rows))

    err = ei.value
    assert err.week_id == W11.id
    assert [r.week_id for r in err.completed] == [W10.id]
    assert (ORDER.id, W10.id) in store.records
    # nothing attempted after the failing week
    assert all(c[1].week_id != W12.id for c in _writes(store))


def test_advanced_plan_clamps_row_values():
    store = FakeStore()
    rows = [PlanRow(week=W10, objectif=-3, planifie=12.9)]
    (res,) = asyncio.run(advanced_plan(store, ORDER, rows))
    assert res.action == "created"
    assert res.record.bucket.objectif == 0
    assert res.record.bucket.total_planifie == 12


# ═══════════════════════════════════════════════════════════════════
# row loading / defaults
# ═══════════════════════════════════════════════════════════════════


def test_load_plan_rows_reads_each_week():
    store = FakeStore(fail_weeks={W12.id})
    store.seed(W11.id, objectif=30, planifie=[5, 5, 5, 5, 5, 0], emballe=[2, 2, 0, 0, 0, 0])
    rows = asyncio.run(load_plan_rows(store, ORDER, [W10, W11, W12]))
    assert [(r.week.id, r.objectif, r.planifie, r.emballe) for r in rows] == [
        (W10.id, 0, 0, 0),
        (W11.id, 30, 25, 4),
        (W12.id, 0, 0, 0),
    ]


def test_with_defaults_seeds_first_empty_week():
    rows = [PlanRow(week=W10), PlanRow(week=W11, objectif=4, planifie=6)]
    out, total = with_defaults(rows, 15)
    assert [(r.objectif, r.planifie) for r in out] == [(15, 15), (4, 6)]
    assert total == 21

    out, total = with_defaults([PlanRow(week=W10, objectif=3)], 0)
    assert [(r.objectif, r.planifie) for r in out] == [(3, 0)]
    assert total == 0
