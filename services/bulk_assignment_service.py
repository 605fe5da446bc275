"""
Bulk assignment session: plan selection, recipient building, and submission.

Handles:
- Loading the KeyPool when a plan is selected and sizing the RecipientSet to it
- Admission guards before any distribute call (all-or-nothing at submission:
  an invalid set issues no remote calls at all)
- Sequential allocation with per-pair outcomes
- Re-fetching the KeyPool and statistics after the batch
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from domain.auth_key import AuthenticationKey
from domain.inventory_stats import InventoryStatsView
from domain.outcome import AllocationOutcome, AllocationSummary, summarize
from domain.recipient_set import RecipientSet
from repositories.client import AdminApiClient
from services.allocation_service import allocate
from services.inventory_stats_service import InventoryStatsLoader
from services.key_pool_service import KeyPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BulkAssignmentResult:
    """
    Result of one submitted batch.

    outcomes: per-pair results in attempt order
    summary: aggregate counts and failed email addresses
    remaining_keys: the KeyPool after the post-batch refresh
    stats: statistics after the post-batch refresh
    """

    plan_id: str
    outcomes: List[AllocationOutcome]
    summary: AllocationSummary
    remaining_keys: Tuple[AuthenticationKey, ...]
    stats: InventoryStatsView


class BulkAssignmentSession:
    """
    One operator's bulk assignment screen.

    Holds only transient state: the KeyPool snapshot and the RecipientSet.
    """

    def __init__(self, client: AdminApiClient, stats: Optional[InventoryStatsLoader] = None):
        self._client = client
        self.pool = KeyPool(client)
        self.recipients = RecipientSet(capacity=0)
        self.stats = stats or InventoryStatsLoader(client)

    @property
    def plan_id(self) -> Optional[str]:
        return self.pool.plan_id

    @property
    def notice(self) -> Optional[str]:
        return self.pool.notice

    async def select_plan(self, plan_id: str) -> Tuple[AuthenticationKey, ...]:
        """Switch plans: drop every selection, then load the new plan's pool."""

        self.recipients.clear()
        self.recipients.set_capacity(0)
        keys = await self.pool.load_available(plan_id)
        if self.pool.plan_id == plan_id:
            self.recipients.set_capacity(len(self.pool))
        return keys

    async def submit(self) -> BulkAssignmentResult:
        """
        Validate the recipient set and run the batch to completion.

        Raises:
            ValidationError: EMPTY_SELECTION or CAPACITY_EXCEEDED; no remote
                call is made in that case.
            ValueError: If no plan is selected.
        """

        plan_id = self.pool.plan_id
        if plan_id is None:
            raise ValueError("No plan selected")

        recipients = self.recipients.validate_for_submission()
        logger.info("Assigning %d keys of plan %s", len(recipients), plan_id)

        outcomes = await allocate(self._client, recipients, self.pool.keys)
        summary = summarize(outcomes)

        self.recipients.clear()
        remaining = await self.pool.refresh()
        self.recipients.set_capacity(len(self.pool))
        stats = await self.stats.refresh()

        logger.info(
            "Bulk assignment for plan %s: %d succeeded, %d failed",
            plan_id,
            summary.succeeded_count,
            summary.failed_count,
        )
        return BulkAssignmentResult(
            plan_id=plan_id,
            outcomes=outcomes,
            summary=summary,
            remaining_keys=remaining,
            stats=stats,
        )


__all__ = ["BulkAssignmentResult", "BulkAssignmentSession"]
