"""
Key generation service.

Validates the request locally, then asks the admin service to generate a batch
of Authentication Keys for one plan. Code generation itself is remote.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from domain.admission import require_plan, validate_generate_quantity
from repositories.auth_key_repository import generate_auth_keys
from repositories.client import AdminApiClient, RemoteCallError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationResult:
    """
    Result of a generation request.

    success is False only for remote failures; local validation failures raise
    ValidationError before this result exists.
    """

    success: bool
    plan_id: str
    quantity: int
    message: str


async def generate_keys(
    client: AdminApiClient,
    plan_id: Optional[str],
    quantity: Any,
    distribute_to_account_id: Optional[str] = None,
) -> GenerationResult:
    """
    Generate `quantity` keys for `plan_id`.

    Raises:
        ValidationError: PLAN_REQUIRED or QUANTITY_OUT_OF_RANGE; no remote call
            is made in that case.
    """

    plan = require_plan(plan_id)
    count = validate_generate_quantity(quantity)

    try:
        await generate_auth_keys(client, plan, count, distribute_to_account_id)
    except RemoteCallError as exc:
        logger.warning("Key generation for plan %s failed: %s", plan, exc)
        return GenerationResult(
            success=False,
            plan_id=plan,
            quantity=count,
            message=exc.message or "Failed to generate keys",
        )

    logger.info("Generated %d Authentication Keys for plan %s", count, plan)
    return GenerationResult(
        success=True,
        plan_id=plan,
        quantity=count,
        message=f"{count} Authentication Keys generated successfully",
    )


__all__ = ["GenerationResult", "generate_keys"]
