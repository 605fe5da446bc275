"""
Tests for `services/bulk_assignment_service.py`.

Covers contract rules:
- Selecting a plan clears recipients and sizes the set to the KeyPool.
- Guard failures at submission issue no distribute calls.
- A batch runs to completion, then the KeyPool and statistics are re-fetched.
- Recipients are cleared after every batch.
"""

from __future__ import annotations

import pytest

from domain.admission import ValidationError, ValidationReason
from domain.outcome import SummaryKind
from services.bulk_assignment_service import BulkAssignmentSession
from services.inventory_stats_service import InventoryStatsLoader
from services.key_generation_service import generate_keys


@pytest.mark.asyncio
async def test_generate_then_bulk_assign_to_accounts_and_email(backend, admin_client) -> None:
    """Verify the full generate, select, assign, refresh round trip."""

    generated = await generate_keys(admin_client, "plan-p", 10)
    assert generated.success is True

    loader = InventoryStatsLoader(admin_client)
    before = await loader.refresh()

    session = BulkAssignmentSession(admin_client, stats=loader)
    await session.select_plan("plan-p")
    assert session.recipients.capacity == 10

    for account_id in ("u-1", "u-2", "u-3"):
        session.recipients.add_account(account_id)
    session.recipients.add_email("ops@example.com")

    result = await session.submit()

    assert result.summary.succeeded_count == 4
    assert result.summary.failed_count == 0
    assert result.summary.kind is SummaryKind.SUCCESS
    assert result.summary.messages() == ["Successfully assigned 4 Authentication Keys"]
    assert len(result.remaining_keys) == 6
    assert session.recipients.size == 0
    assert session.recipients.capacity == 6

    assert [k["distributedTo"] for k in backend.keys[:4]] == ["u-1", "u-2", "u-3", "ops@example.com"]
    assert result.stats.overall.distributed == before.overall.distributed + 4
    assert result.stats.overall.remaining == before.overall.remaining - 4


@pytest.mark.asyncio
async def test_capacity_is_enforced_while_building_the_set(backend, admin_client) -> None:
    """Verify a third recipient cannot be added to a two-key pool."""

    backend.add_keys("plan-p", 2)
    session = BulkAssignmentSession(admin_client)
    await session.select_plan("plan-p")

    session.recipients.add_account("u-1")
    session.recipients.add_email("a@example.com")
    with pytest.raises(ValidationError) as exc:
        session.recipients.add_account("u-2")
    assert exc.value.reason is ValidationReason.CAPACITY_EXCEEDED

    result = await session.submit()
    assert result.summary.succeeded_count == 2
    assert result.remaining_keys == ()


@pytest.mark.asyncio
async def test_empty_selection_makes_no_distribute_calls(backend, admin_client) -> None:
    """Verify an empty set fails the guard before any remote call."""

    backend.add_keys("plan-p", 3)
    session = BulkAssignmentSession(admin_client)
    await session.select_plan("plan-p")

    with pytest.raises(ValidationError) as exc:
        await session.submit()

    assert exc.value.reason is ValidationReason.EMPTY_SELECTION
    assert backend.distribute_calls == []


@pytest.mark.asyncio
async def test_partial_failure_reports_failed_emails(backend, admin_client) -> None:
    """Verify per-recipient failures are summarized and the rest proceed."""

    backend.add_keys("plan-p", 3)
    backend.fail_distribute_at = {3}
    session = BulkAssignmentSession(admin_client)
    await session.select_plan("plan-p")

    session.recipients.add_account("u-1")
    session.recipients.add_email("good@example.com")
    session.recipients.add_email("bad@example.com")

    result = await session.submit()

    assert result.summary.kind is SummaryKind.PARTIAL
    assert result.summary.failed_email_addresses == ("bad@example.com",)
    assert len(result.remaining_keys) == 1
    assert result.remaining_keys[0].key_id == "key-3"


@pytest.mark.asyncio
async def test_switching_plans_clears_recipients(backend, admin_client) -> None:
    """Verify selections never carry over to another plan."""

    backend.add_keys("plan-p", 2)
    backend.add_keys("plan-q", 5)
    session = BulkAssignmentSession(admin_client)

    await session.select_plan("plan-p")
    session.recipients.add_account("u-1")

    await session.select_plan("plan-q")

    assert session.plan_id == "plan-q"
    assert session.recipients.size == 0
    assert session.recipients.capacity == 5
    assert all(k.plan_id == "plan-q" for k in session.pool.keys)


@pytest.mark.asyncio
async def test_failed_pool_load_leaves_zero_capacity(backend, admin_client) -> None:
    """Verify a failed pool load blocks adding recipients."""

    backend.failures["list"] = (500, "boom")
    session = BulkAssignmentSession(admin_client)
    await session.select_plan("plan-p")

    assert session.notice == "Failed to load available keys"
    with pytest.raises(ValidationError):
        session.recipients.add_account("u-1")


@pytest.mark.asyncio
async def test_submit_without_plan_is_rejected(admin_client) -> None:
    """Verify submission needs a selected plan."""

    session = BulkAssignmentSession(admin_client)

    with pytest.raises(ValueError):
        await session.submit()
