import argparse
import asyncio
import logging

from .analysis.load import TheoreticalTimeCache, analyze
from .config import CAPACITY_HOURS_PER_DAY, LOG_LEVEL
from .db import SessionLocal, init_db
from .db.models import Commande
from .db.store import SqlAllocationStore, get_week, order_from_row, week_from_row
from .export.report import export_week_load
from .planning.distribution import DistributionPolicy, distribute_rows
from .planning.orchestrator import AllocationWriteError, quick_plan
from .planning.split import split_quantity
from .planning.types import DAYS, PlanRow, Week


async def _analyze_week(week: int, year: int, unit: str | None, capacity: float):
    store = SqlAllocationStore()
    grid = await store.fetch_week_grid(week, year, unit)
    cache = TheoreticalTimeCache()
    await cache.populate(grid.article_ids(), store.fetch_theoretical_time)
    return grid, analyze(grid.day_plans(), cache, capacity)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Week Planner CLI")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init-db", help="Create missing tables")

    split_p = sub.add_parser("split", help="Split a quantity over Monday..Friday")
    split_p.add_argument("qty", type=int)

    dist_p = sub.add_parser("distribute", help="Distribute a total over weeks")
    dist_p.add_argument("--policy", required=True, choices=[p.value for p in DistributionPolicy])
    dist_p.add_argument("--total", type=int, default=0)
    dist_p.add_argument("--weights", type=int, nargs="*", default=None, help="objectif per week")
    dist_p.add_argument("--buckets", type=int, default=None, help="number of weeks when no weights are given")

    an_p = sub.add_parser("analyze", help="Daily load of a week")
    an_p.add_argument("--week", type=int, required=True)
    an_p.add_argument("--year", type=int, required=True)
    an_p.add_argument("--unit", default=None)
    an_p.add_argument("--capacity", type=float, default=CAPACITY_HOURS_PER_DAY)

    ex_p = sub.add_parser("export", help="Export a week's load analysis to Excel")
    ex_p.add_argument("--week", type=int, required=True)
    ex_p.add_argument("--year", type=int, required=True)
    ex_p.add_argument("--unit", default=None)
    ex_p.add_argument("--capacity", type=float, default=CAPACITY_HOURS_PER_DAY)
    ex_p.add_argument("--out", default="out/charge.xlsx")

    q_p = sub.add_parser("quick", help="Add a quantity to an order for one week")
    q_p.add_argument("--order", type=int, required=True)
    q_p.add_argument("--week", type=int, required=True)
    q_p.add_argument("--year", type=int, required=True)
    q_p.add_argument("--qty", type=int, required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))

    if args.cmd == "init-db":
        init_db()
        print("Tables ready")

    elif args.cmd == "split":
        values = split_quantity(args.qty)
        print(" ".join(f"{d}={v}" for d, v in zip(DAYS, values)))

    elif args.cmd == "distribute":
        weights = args.weights or [0] * max(0, args.buckets or 0)
        rows = [PlanRow(week=Week(id=i + 1, numero=i + 1, annee=0), objectif=w) for i, w in enumerate(weights)]
        new_rows, total = distribute_rows(rows, args.policy, args.total)
        print("Target:", total)
        print("Planned:", [r.planifie for r in new_rows])

    elif args.cmd in {"analyze", "export"}:
        init_db()
        try:
            grid, result = asyncio.run(_analyze_week(args.week, args.year, args.unit, args.capacity))
        except ValueError as exc:
            parser.error(str(exc))
        s = result.synthesis
        for p in result.per_day:
            print(f"{p.day:<9} {p.hours:9.1f} h {p.utilization:6.1f}% {p.status}")
        print(f"Total {s.total_hours:.1f} h / {s.total_capacity:.1f} h, avg {s.average_utilization:.1f}%, "
              f"peak {s.peak_hours:.1f} h ({s.peak_day or '-'})")
        if args.cmd == "export":
            print("Exported:", export_week_load(result, grid, args.out))

    elif args.cmd == "quick":
        init_db()
        with SessionLocal() as s:
            cmd = s.get(Commande, args.order)
            if cmd is None:
                parser.error(f"order {args.order} not found")
            order = order_from_row(cmd)
            try:
                week = week_from_row(get_week(s, args.week, args.year))
            except ValueError as exc:
                parser.error(str(exc))
        try:
            res = asyncio.run(quick_plan(SqlAllocationStore(), order, week, args.qty))
        except (ValueError, AllocationWriteError) as exc:
            parser.error(str(exc))
        print(f"{res.action}: planning id={res.record.id if res.record else '-'}")


if __name__ == "__main__":
    main()
