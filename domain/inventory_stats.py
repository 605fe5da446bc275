"""
Domain: Authentication Key inventory statistics.

Counts are owned by the admin service. This module only carries and combines
them; it never derives `remaining` from a key list, since the key list the
console holds is capped and may be incomplete.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True, slots=True)
class InventoryStats:
    total: int = 0
    active: int = 0
    used: int = 0
    distributed: int = 0
    not_distributed: int = 0
    remaining: int = 0

    def __add__(self, other: "InventoryStats") -> "InventoryStats":
        if not isinstance(other, InventoryStats):
            return NotImplemented
        return InventoryStats(
            total=self.total + other.total,
            active=self.active + other.active,
            used=self.used + other.used,
            distributed=self.distributed + other.distributed,
            not_distributed=self.not_distributed + other.not_distributed,
            remaining=self.remaining + other.remaining,
        )


@dataclass(frozen=True, slots=True)
class PlanInventoryStats:
    plan_id: str
    plan_name: str
    stats: InventoryStats


@dataclass(frozen=True, slots=True)
class InventoryStatsView:
    """
    Overall row plus one row per plan.

    overall_is_authoritative is False when the service sent per-plan rows only
    and the overall row had to be summed here.
    """

    overall: InventoryStats
    by_plan: Tuple[PlanInventoryStats, ...] = ()
    overall_is_authoritative: bool = True

    @staticmethod
    def empty() -> "InventoryStatsView":
        return InventoryStatsView(overall=InventoryStats(), by_plan=(), overall_is_authoritative=False)

    @staticmethod
    def build(
        overall: Optional[InventoryStats],
        by_plan: Sequence[PlanInventoryStats],
    ) -> "InventoryStatsView":
        """Prefer the service's overall row; sum plan rows only when it is missing."""

        rows = tuple(by_plan)
        if overall is not None:
            return InventoryStatsView(overall=overall, by_plan=rows, overall_is_authoritative=True)
        summed = InventoryStats()
        for row in rows:
            summed = summed + row.stats
        return InventoryStatsView(overall=summed, by_plan=rows, overall_is_authoritative=False)

    def for_plan(self, plan_id: str) -> Optional[InventoryStats]:
        for row in self.by_plan:
            if row.plan_id == plan_id:
                return row.stats
        return None

    def rows(self) -> List[Tuple[str, InventoryStats]]:
        """Display rows: the overall row first, then each plan by name."""

        result: List[Tuple[str, InventoryStats]] = [("All plans", self.overall)]
        result.extend((row.plan_name or row.plan_id, row.stats) for row in self.by_plan)
        return result


__all__ = ["InventoryStats", "InventoryStatsView", "PlanInventoryStats"]
