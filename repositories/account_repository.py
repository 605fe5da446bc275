"""
Account repository for listing registered platform accounts.

Account management lives on the admin service; this module only reads the
summaries needed to pick Authentication Key recipients.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from domain.account import AccountSummary
from repositories.client import AdminApiClient
from repositories.envelope import normalize_list_payload

logger = logging.getLogger(__name__)

_USERS_ENDPOINT: str = "/admin/users"


def _row_to_account(row: Mapping[str, Any]) -> AccountSummary:
    return AccountSummary(
        account_id=str(row["id"]),
        email=str(row.get("email") or ""),
        name=row.get("name") or None,
        phone=row.get("phone") or None,
        kyc_status=row.get("kycStatus") or None,
    )


async def list_accounts(
    client: AdminApiClient,
    *,
    search: Optional[str] = None,
    limit: int = 100,
    page: Optional[int] = None,
) -> List[AccountSummary]:
    """
    Fetch account summaries, optionally filtered by the service-side search.

    Records without an id are skipped.
    """

    result = await client.request(
        "GET",
        _USERS_ENDPOINT,
        params={"search": search, "limit": limit, "page": page},
    )
    accounts: List[AccountSummary] = []
    for row in normalize_list_payload(result.data).rows:
        if not row.get("id"):
            logger.warning("Skipping account record without id")
            continue
        accounts.append(_row_to_account(row))
    return accounts


__all__ = ["list_accounts"]
