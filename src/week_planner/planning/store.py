"""Interface of the allocation store the orchestrator reads from and writes to."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from .grid import WeekGrid
from .types import AllocationPayload, AllocationRecord


@runtime_checkable
class AllocationStore(Protocol):
    """Remote/persistent side of the planning core.

    Implementations own persistence, transport and timeouts. Records are
    created or updated, never deleted.
    """

    async def find_allocation(self, order_id: int, week_id: int) -> AllocationRecord | None:
        ...

    async def create_allocation(self, payload: AllocationPayload) -> AllocationRecord:
        ...

    async def update_allocation(self, record_id: int, payload: AllocationPayload) -> AllocationRecord:
        ...

    async def fetch_week_grid(self, numero: int, annee: int, unite: str | None = None) -> WeekGrid:
        ...

    async def fetch_theoretical_time(self, article_id: int) -> float:
        ...
