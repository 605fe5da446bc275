"""
Check Authentication Key inventory - how many keys are active, used, distributed, remaining.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from repositories.client import AdminApiClient
from services.inventory_stats_service import InventoryStatsLoader


async def check_auth_key_stats(plan_id=None):
    """Print overall and per-plan key counts."""

    client = AdminApiClient()
    try:
        loader = InventoryStatsLoader(client)
        view = await loader.refresh(plan_id)
    finally:
        await client.aclose()

    if loader.notice:
        print(f"[WARN] {loader.notice}")

    print("=" * 78)
    print("AUTHENTICATION KEY INVENTORY")
    print("=" * 78)
    print(f"{'Plan':<24}{'Total':>8}{'Active':>8}{'Used':>8}{'Distrib.':>10}{'Not dist.':>10}{'Remaining':>10}")
    print("-" * 78)
    for label, stats in view.rows():
        print(
            f"{label[:23]:<24}{stats.total:>8}{stats.active:>8}{stats.used:>8}"
            f"{stats.distributed:>10}{stats.not_distributed:>10}{stats.remaining:>10}"
        )
    print("=" * 78)
    if not view.overall_is_authoritative and view.by_plan:
        print("Overall row summed from per-plan rows.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Show Authentication Key statistics")
    parser.add_argument("--plan-id", default=None, help="Restrict to one plan")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)
    asyncio.run(check_auth_key_stats(args.plan_id))
