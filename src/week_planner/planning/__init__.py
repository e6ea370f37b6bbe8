"""Planning core: weekday split, week distribution and the allocation orchestrator.

The pure functions can be imported from here directly, e.g.:

    from week_planner.planning import split_quantity, equalize
"""
from .types import (
    DAYS,
    WEEKDAYS,
    AllocationPayload,
    AllocationRecord,
    DayCell,
    Order,
    PlanRow,
    Week,
    WeekBucket,
    to_exact_quantity,
    to_quantity,
)
from .split import add_split, split_quantity
from .distribution import (
    DistributionPolicy,
    copy_objectif_to_planifie,
    distribute_rows,
    equalize,
    proportional,
    split_half_start_half_end,
)
from .grid import GridRow, WeekGrid
from .orchestrator import AllocationWriteError, PlanResult, advanced_plan, quick_plan

__all__ = [
    "DAYS", "WEEKDAYS",
    "AllocationPayload", "AllocationRecord", "DayCell", "Order", "PlanRow", "Week", "WeekBucket",
    "to_exact_quantity", "to_quantity",
    "add_split", "split_quantity",
    "DistributionPolicy", "copy_objectif_to_planifie", "distribute_rows",
    "equalize", "proportional", "split_half_start_half_end",
    "GridRow", "WeekGrid",
    "AllocationWriteError", "PlanResult", "advanced_plan", "quick_plan",
]
