#!/usr/bin/env python3
"""
Authentication Key Generation Script

Asks the admin service to generate a batch of Authentication Keys for a plan.

Usage:
    python scripts/generate_auth_keys.py --plan-id plan-basic --quantity 50
    python scripts/generate_auth_keys.py --plan-id plan-basic --quantity 1 --distribute-to u-42
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.admission import ValidationError
from repositories.client import AdminApiClient
from services.key_generation_service import generate_keys


async def run(plan_id: str, quantity: str, distribute_to: str | None) -> int:
    client = AdminApiClient()
    try:
        result = await generate_keys(client, plan_id, quantity, distribute_to)
    except ValidationError as e:
        print(f"[ERROR] {e.message}")
        return 2
    finally:
        await client.aclose()

    if not result.success:
        print(f"[ERROR] {result.message}")
        return 1

    print(f"[OK] {result.message} (plan {result.plan_id})")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate Authentication Keys for a plan")
    parser.add_argument("--plan-id", required=True, help="Plan the keys unlock")
    parser.add_argument("--quantity", required=True, help="Number of keys (1-1000)")
    parser.add_argument("--distribute-to", default=None, help="Optional account id to receive the keys")
    parser.add_argument("--verbose", action="store_true", help="Log every admin service call")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    return asyncio.run(run(args.plan_id, args.quantity, args.distribute_to))


if __name__ == "__main__":
    sys.exit(main())
