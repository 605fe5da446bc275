#!/usr/bin/env python3
"""
Bulk Authentication Key Assignment Script

Assigns one available key of a plan to each listed account and email address.
Accounts are served first, in the order given, then emails. With --all-accounts,
registered accounts fill whatever room the explicit recipients leave.

Usage:
    python scripts/bulk_assign_keys.py --plan-id plan-basic --account u-1 --account u-2
    python scripts/bulk_assign_keys.py --plan-id plan-basic --email ops@example.com
    python scripts/bulk_assign_keys.py --plan-id plan-basic --all-accounts
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.account import AccountSummary
from domain.admission import ValidationError
from domain.recipient_set import RecipientSet
from repositories.client import AdminApiClient
from services.account_search_service import load_candidate_accounts
from services.bulk_assignment_service import BulkAssignmentSession


def fill_recipients(
    recipients: RecipientSet,
    account_ids: Sequence[str],
    emails: Sequence[str],
    candidates: Optional[Sequence[AccountSummary]] = None,
) -> None:
    """
    Add the explicit accounts and emails, then fill any room left with candidates.

    Raises:
        ValidationError: If an explicit recipient is invalid or does not fit.
    """

    for account_id in account_ids:
        recipients.add_account(account_id)
    for email in emails:
        recipients.add_email(email)
    if not candidates:
        return

    room = recipients.capacity - recipients.size
    for account in candidates:
        if room <= 0:
            break
        if recipients.has_account(account.account_id):
            continue
        recipients.add_summary(account)
        room -= 1


async def run(plan_id: str, account_ids: List[str], emails: List[str], all_accounts: bool) -> int:
    client = AdminApiClient()
    try:
        session = BulkAssignmentSession(client)
        await session.select_plan(plan_id)
        if session.notice:
            print(f"[ERROR] {session.notice}")
            return 1
        print(f"Available keys for plan {plan_id}: {len(session.pool)}")

        candidates: List[AccountSummary] = []
        if all_accounts:
            lookup = await load_candidate_accounts(client)
            if lookup.notice:
                print(f"[ERROR] {lookup.notice}")
                return 1
            candidates = lookup.accounts

        try:
            fill_recipients(session.recipients, account_ids, emails, candidates)
            result = await session.submit()
        except ValidationError as e:
            print(f"[ERROR] {e.message}")
            return 2
    finally:
        await client.aclose()

    print("=" * 50)
    for line in result.summary.messages():
        print(f"[{result.summary.tone.upper()}] {line}")
    print("=" * 50)
    for outcome in result.outcomes:
        status = "OK" if outcome.succeeded else f"FAILED ({outcome.error_detail})"
        print(f"  {outcome.key.code} -> {outcome.recipient.label}: {status}")
    print(f"Keys still available: {len(result.remaining_keys)}")
    return 0 if result.summary.failed_count == 0 else 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Assign Authentication Keys to many recipients")
    parser.add_argument("--plan-id", required=True, help="Plan whose keys are assigned")
    parser.add_argument("--account", action="append", default=[], help="Registered account id (repeatable)")
    parser.add_argument("--email", action="append", default=[], help="Manual email recipient (repeatable)")
    parser.add_argument("--all-accounts", action="store_true", help="Select as many registered accounts as keys allow")
    parser.add_argument("--verbose", action="store_true", help="Log every admin service call")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    return asyncio.run(run(args.plan_id, args.account, args.email, args.all_accounts))


if __name__ == "__main__":
    sys.exit(main())
