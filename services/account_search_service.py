"""
Candidate account lookup for key assignment.

Lookups are queries: on remote failure they return an empty list plus a notice
instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from domain.account import AccountSummary
from repositories.account_repository import list_accounts
from repositories.client import AdminApiClient, RemoteCallError

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH: int = 2
SEARCH_RESULT_LIMIT: int = 10
CANDIDATE_LIMIT: int = 1000


@dataclass(frozen=True, slots=True)
class AccountLookup:
    accounts: List[AccountSummary] = field(default_factory=list)
    notice: Optional[str] = None


async def _fetch(client: AdminApiClient, *, search: Optional[str], limit: int) -> AccountLookup:
    try:
        accounts = await list_accounts(client, search=search, limit=limit)
    except RemoteCallError as exc:
        logger.warning("Failed to load users: %s", exc)
        return AccountLookup(accounts=[], notice="Failed to load users")
    return AccountLookup(accounts=accounts)


async def search_accounts(client: AdminApiClient, search: str) -> AccountLookup:
    """Service-side search; shorter inputs than MIN_SEARCH_LENGTH return nothing."""

    text = (search or "").strip()
    if len(text) < MIN_SEARCH_LENGTH:
        return AccountLookup()
    return await _fetch(client, search=text, limit=SEARCH_RESULT_LIMIT)


async def load_candidate_accounts(client: AdminApiClient, limit: int = CANDIDATE_LIMIT) -> AccountLookup:
    """All registered accounts, in service order, for checkbox selection."""

    return await _fetch(client, search=None, limit=limit)


def filter_accounts(accounts: Sequence[AccountSummary], search: str) -> List[AccountSummary]:
    """Local name/email/phone filter over an already loaded candidate list."""

    return [account for account in accounts if account.matches(search)]


__all__ = [
    "AccountLookup",
    "MIN_SEARCH_LENGTH",
    "filter_accounts",
    "load_candidate_accounts",
    "search_accounts",
]
