"""
Loader for the inventory statistics panel.

Statistics are re-fetched after every mutation instead of being adjusted
locally, so counts stay correct while other operator sessions change the same
inventory.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.inventory_stats import InventoryStats, InventoryStatsView
from repositories.auth_key_repository import get_auth_key_stats
from repositories.client import AdminApiClient, RemoteCallError

logger = logging.getLogger(__name__)


class InventoryStatsLoader:
    """Holds the latest stats view; failures zero-fill the view and set `notice`."""

    def __init__(self, client: AdminApiClient):
        self._client = client
        self.view: InventoryStatsView = InventoryStatsView.empty()
        self.notice: Optional[str] = None

    async def refresh(self, plan_id: Optional[str] = None) -> InventoryStatsView:
        try:
            self.view = await get_auth_key_stats(self._client, plan_id)
            self.notice = None
        except RemoteCallError as exc:
            logger.warning("Failed to load Authentication Key statistics: %s", exc)
            self.view = InventoryStatsView.empty()
            self.notice = "Failed to load Authentication Key statistics"
        return self.view

    def stats_for(self, plan_id: Optional[str]) -> InventoryStats:
        if plan_id is None:
            return self.view.overall
        return self.view.for_plan(plan_id) or InventoryStats()


__all__ = ["InventoryStatsLoader"]
