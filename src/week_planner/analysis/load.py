# src/week_planner/analysis/load.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Iterable, List, Mapping, Sequence

from ..config import OVERLOAD_THRESHOLD_PCT, WARNING_THRESHOLD_PCT
from ..planning.types import DAYS, Order, to_quantity

logger = logging.getLogger("week_planner.analysis")

OVERLOADED = "overloaded"
WARNING = "warning"
NOMINAL = "nominal"


class TheoreticalTimeCache:
    """Hours per unit keyed by article id. Unknown articles read as 0.0."""

    def __init__(self, initial: Mapping[int, float] | None = None):
        self._data: Dict[int, float] = dict(initial or {})

    def get(self, article_id: int | None) -> float:
        if article_id is None:
            return 0.0
        return self._data.get(article_id, 0.0)

    def set(self, article_id: int, hours: float) -> None:
        self._data[article_id] = float(hours or 0.0)

    def __contains__(self, article_id: object) -> bool:
        return article_id in self._data

    def __len__(self) -> int:
        return len(self._data)

    async def populate(
        self,
        article_ids: Iterable[int | None],
        fetch: Callable[[int], Awaitable[float]],
    ) -> None:
        """Fetch every missing positive article id; a failed lookup caches 0.0."""
        wanted: List[int] = []
        for aid in article_ids:
            if isinstance(aid, int) and not isinstance(aid, bool) and aid > 0 and aid not in self._data and aid not in wanted:
                wanted.append(aid)
        if not wanted:
            return
        results = await asyncio.gather(*(fetch(aid) for aid in wanted), return_exceptions=True)
        for aid, res in zip(wanted, results):
            if isinstance(res, BaseException):
                logger.warning("theoretical time lookup failed for article %s: %s", aid, res)
                self._data[aid] = 0.0
            else:
                self._data[aid] = float(res or 0.0)


@dataclass(frozen=True)
class LoadPoint:
    day: str
    hours: float
    utilization: float  # percent of capacity
    status: str


@dataclass(frozen=True)
class ArticleLoad:
    article: str
    temps_theorique: float
    planned_units: int
    total_hours: float


@dataclass(frozen=True)
class LoadSynthesis:
    total_hours: float
    total_capacity: float
    average_utilization: float
    peak_hours: float
    peak_day: str | None


@dataclass(frozen=True)
class LoadAnalysis:
    per_day: List[LoadPoint]
    synthesis: LoadSynthesis
    by_article: List[ArticleLoad] = field(default_factory=list)


def classify(utilization: float) -> str:
    # strict: exactly 100% is a warning, only above it is overloaded
    if utilization > OVERLOAD_THRESHOLD_PCT:
        return OVERLOADED
    if utilization > WARNING_THRESHOLD_PCT:
        return WARNING
    return NOMINAL


def _time_for(time_per_unit: TheoreticalTimeCache | Mapping[int, float], article_id: int | None) -> float:
    if isinstance(time_per_unit, TheoreticalTimeCache):
        return time_per_unit.get(article_id)
    if article_id is None:
        return 0.0
    return float(time_per_unit.get(article_id, 0.0) or 0.0)


def analyze(
    day_plans: Mapping[Order, Sequence[int]],
    time_per_unit: TheoreticalTimeCache | Mapping[int, float],
    capacity_per_day: float,
) -> LoadAnalysis:
    """
    Workload of one week against a fixed daily capacity.

    day_plans: planned quantity per day (Monday first, up to Saturday) per order.
    time_per_unit: hours per unit by article id; missing articles count as 0,
        which understates the load rather than failing.
    Returns per-day hours/utilization/status, the week synthesis and a
    per-article rollup sorted by descending hours.
    """
    capacity = float(capacity_per_day) if capacity_per_day and capacity_per_day > 0 else 0.0
    hours = [0.0] * len(DAYS)
    by_article: Dict[str, Dict[str, float]] = {}

    for order, quantities in day_plans.items():
        temps = _time_for(time_per_unit, order.article_id)
        units = 0
        for i in range(len(DAYS)):
            q = to_quantity(quantities[i]) if i < len(quantities) else 0
            units += q
            hours[i] += q * temps
        key = str(order.article_code or "N/A")
        rec = by_article.setdefault(key, {"temps": temps, "units": 0, "hours": 0.0})
        rec["temps"] = temps
        rec["units"] += units
        rec["hours"] += units * temps

    per_day = []
    for day, h in zip(DAYS, hours):
        util = (h / capacity * 100.0) if capacity > 0 else 0.0
        per_day.append(LoadPoint(day=day, hours=h, utilization=util, status=classify(util)))

    total_hours = sum(hours)
    total_capacity = capacity * len(DAYS)
    peak = max(hours) if hours else 0.0
    synthesis = LoadSynthesis(
        total_hours=total_hours,
        total_capacity=total_capacity,
        average_utilization=(total_hours / total_capacity * 100.0) if total_capacity > 0 else 0.0,
        peak_hours=peak,
        peak_day=DAYS[hours.index(peak)] if peak > 0 else None,
    )

    articles = [
        ArticleLoad(article=k, temps_theorique=v["temps"], planned_units=int(v["units"]), total_hours=v["hours"])
        for k, v in by_article.items()
    ]
    articles.sort(key=lambda a: a.total_hours, reverse=True)
    return LoadAnalysis(per_day=per_day, synthesis=synthesis, by_article=articles)
