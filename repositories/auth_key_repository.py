"""
Authentication Key repository (remote persistence).

Thin wrappers over the admin service's auth-key endpoints. No business rules
live here beyond translating wire records into domain types; every failure is
raised as RemoteCallError for the services layer to degrade or report.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from domain.auth_key import AccountRef, AuthenticationKey, AuthKeyStatus
from domain.inventory_stats import InventoryStats, InventoryStatsView, PlanInventoryStats
from domain.time import parse_utc_datetime
from repositories.client import AdminApiClient, ApiResult
from repositories.envelope import normalize_list_payload

logger = logging.getLogger(__name__)

_AUTH_KEYS_ENDPOINT: str = "/admin/auth-keys"
_STAT_FIELDS = {
    "total": "total",
    "active": "active",
    "used": "used",
    "distributed": "distributed",
    "not_distributed": "notDistributed",
    "remaining": "remaining",
}


@dataclass(frozen=True, slots=True)
class AuthKeyPage:
    keys: List[AuthenticationKey]
    page: int = 1
    total_pages: int = 1
    total: int = 0


def _account_ref(value: Any) -> Optional[AccountRef]:
    if not isinstance(value, Mapping) or not value.get("id"):
        return None
    return AccountRef(
        account_id=str(value["id"]),
        email=str(value.get("email") or ""),
        name=value.get("name"),
    )


def _optional_str(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


def row_to_auth_key(row: Mapping[str, Any]) -> AuthenticationKey:
    """Convert a service record into an AuthenticationKey."""

    plan = row.get("plan") if isinstance(row.get("plan"), Mapping) else {}
    used_at = row.get("usedAt")
    return AuthenticationKey(
        key_id=str(row["id"]),
        code=str(row["code"]),
        plan_id=str(row.get("planId") or plan.get("id") or ""),
        status=AuthKeyStatus(str(row.get("status") or "").upper()),
        created_at=parse_utc_datetime(row["createdAt"]),
        plan_name=plan.get("name"),
        generated_by=_optional_str(row.get("generatedBy")),
        distributed_to=_optional_str(row.get("distributedTo")),
        distributed_to_account=_account_ref(row.get("distributedToUser")),
        used_by=_optional_str(row.get("usedBy")),
        used_by_account=_account_ref(row.get("usedByUser")),
        used_at=parse_utc_datetime(used_at) if used_at else None,
    )


def _parse_keys(rows: List[Mapping[str, Any]]) -> List[AuthenticationKey]:
    keys: List[AuthenticationKey] = []
    for row in rows:
        try:
            keys.append(row_to_auth_key(row))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Skipping malformed Authentication Key record %r: %s", row.get("id"), exc)
    return keys


async def generate_auth_keys(
    client: AdminApiClient,
    plan_id: str,
    quantity: int,
    distribute_to_account_id: Optional[str] = None,
) -> ApiResult:
    payload: dict[str, Any] = {"planId": plan_id, "quantity": quantity}
    if distribute_to_account_id:
        payload["distributeToUserId"] = distribute_to_account_id
    return await client.request("POST", f"{_AUTH_KEYS_ENDPOINT}/generate", json=payload)


async def list_auth_keys(
    client: AdminApiClient,
    *,
    page: int = 1,
    limit: int = 20,
    plan_id: Optional[str] = None,
    status: Optional[AuthKeyStatus] = None,
    distributed_to: Optional[str] = None,
) -> AuthKeyPage:
    """
    Fetch one page of key records.

    Both the bare-array and the paginated envelope shapes are accepted;
    unrecognized shapes yield an empty page.
    """

    result = await client.request(
        "GET",
        _AUTH_KEYS_ENDPOINT,
        params={
            "page": page,
            "limit": limit,
            "planId": plan_id,
            "status": status.value if status is not None else None,
            "distributedTo": distributed_to,
        },
    )
    normalized = normalize_list_payload(result.data)
    return AuthKeyPage(
        keys=_parse_keys(normalized.rows),
        page=normalized.page,
        total_pages=normalized.total_pages,
        total=normalized.total,
    )


async def distribute_to_account(client: AdminApiClient, key_id: str, account_id: str) -> ApiResult:
    return await client.request(
        "POST",
        f"{_AUTH_KEYS_ENDPOINT}/{key_id}/distribute",
        json={"userId": account_id},
    )


async def distribute_to_email(client: AdminApiClient, key_id: str, email: str) -> ApiResult:
    return await client.request(
        "POST",
        f"{_AUTH_KEYS_ENDPOINT}/{key_id}/distribute-email",
        json={"email": email},
    )


def _stats_from(row: Mapping[str, Any]) -> InventoryStats:
    values: dict[str, int] = {}
    for attr, wire_name in _STAT_FIELDS.items():
        try:
            values[attr] = int(row.get(wire_name) or 0)
        except (TypeError, ValueError):
            values[attr] = 0
    return InventoryStats(**values)


def parse_stats_payload(payload: Any) -> InventoryStatsView:
    """
    Build an InventoryStatsView from the stats endpoint payload.

    The overall row is used as sent whenever any overall counter is present.
    """

    if not isinstance(payload, Mapping):
        return InventoryStatsView.empty()

    plan_rows = payload.get("statsByPlan")
    if plan_rows is None:
        plan_rows = []
    elif not isinstance(plan_rows, list):
        logger.warning("Ignoring statsByPlan of type %s", type(plan_rows).__name__)
        plan_rows = []

    by_plan: List[PlanInventoryStats] = []
    for row in plan_rows:
        if not isinstance(row, Mapping) or not row.get("planId"):
            continue
        by_plan.append(
            PlanInventoryStats(
                plan_id=str(row["planId"]),
                plan_name=str(row.get("planName") or ""),
                stats=_stats_from(row),
            )
        )

    has_overall = any(wire_name in payload for wire_name in _STAT_FIELDS.values())
    overall = _stats_from(payload) if has_overall else None
    return InventoryStatsView.build(overall, by_plan)


async def get_auth_key_stats(client: AdminApiClient, plan_id: Optional[str] = None) -> InventoryStatsView:
    result = await client.request("GET", f"{_AUTH_KEYS_ENDPOINT}/stats", params={"planId": plan_id})
    return parse_stats_payload(result.data)


__all__ = [
    "AuthKeyPage",
    "distribute_to_account",
    "distribute_to_email",
    "generate_auth_keys",
    "get_auth_key_stats",
    "list_auth_keys",
    "parse_stats_payload",
    "row_to_auth_key",
]
