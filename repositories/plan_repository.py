"""
Plan repository: investment plans available for key generation and assignment.
"""

from __future__ import annotations

from typing import List, Optional

from domain.auth_key import PlanSummary
from repositories.client import AdminApiClient
from repositories.envelope import normalize_list_payload

_PLANS_ENDPOINT: str = "/admin/plans"


async def list_plans(
    client: AdminApiClient,
    *,
    is_active: Optional[bool] = None,
    limit: Optional[int] = None,
) -> List[PlanSummary]:
    params = {
        "limit": limit,
        "isActive": str(is_active).lower() if is_active is not None else None,
    }
    result = await client.request("GET", _PLANS_ENDPOINT, params=params)
    return [
        PlanSummary(
            plan_id=str(row["id"]),
            name=str(row.get("name") or ""),
            amount=str(row["amount"]) if row.get("amount") is not None else None,
            is_active=bool(row.get("isActive", True)),
        )
        for row in normalize_list_payload(result.data).rows
        if row.get("id")
    ]


__all__ = ["list_plans"]
