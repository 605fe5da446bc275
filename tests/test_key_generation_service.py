"""
Tests for `services/key_generation_service.py`.

Covers contract rules:
- Quantity and plan are validated before any remote call.
- Remote failures are reported in the result, not raised.
- The optional direct-distribution account is forwarded.
"""

from __future__ import annotations

import pytest

from domain.admission import ValidationError, ValidationReason
from services.key_generation_service import generate_keys


@pytest.mark.asyncio
async def test_generate_creates_keys(backend, admin_client) -> None:
    """Verify a valid request generates the requested number of keys."""

    result = await generate_keys(admin_client, "plan-p", "25")

    assert result.success is True
    assert result.quantity == 25
    assert result.message == "25 Authentication Keys generated successfully"
    assert len(backend.keys) == 25
    assert backend.calls[-1][2] == {"planId": "plan-p", "quantity": 25}


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, 1001, "abc"])
async def test_out_of_range_quantity_makes_no_call(backend, admin_client, quantity) -> None:
    """Verify invalid quantities fail locally."""

    with pytest.raises(ValidationError) as exc:
        await generate_keys(admin_client, "plan-p", quantity)

    assert exc.value.reason is ValidationReason.QUANTITY_OUT_OF_RANGE
    assert backend.calls == []


@pytest.mark.asyncio
async def test_missing_plan_makes_no_call(backend, admin_client) -> None:
    """Verify a plan is required."""

    with pytest.raises(ValidationError) as exc:
        await generate_keys(admin_client, "", 5)

    assert exc.value.reason is ValidationReason.PLAN_REQUIRED
    assert backend.calls == []


@pytest.mark.asyncio
async def test_remote_failure_is_reported(backend, admin_client) -> None:
    """Verify the service message is returned on failure."""

    result = await generate_keys(admin_client, "plan-unknown", 5)

    assert result.success is False
    assert result.message == "Plan not found"


@pytest.mark.asyncio
async def test_distribute_to_account_is_forwarded(backend, admin_client) -> None:
    """Verify the optional account id is sent as distributeToUserId."""

    await generate_keys(admin_client, "plan-p", 1, distribute_to_account_id="u-2")

    assert backend.calls[-1][2] == {"planId": "plan-p", "quantity": 1, "distributeToUserId": "u-2"}
