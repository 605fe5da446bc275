"""
Tests for `domain/auth_key.py`.

Covers contract rules:
- A key with a redeeming account must have status USED.
- Timestamps are UTC and timezone-aware.
- A key is assignable iff it is ACTIVE and not distributed.
- Distribution happens at most once and only for ACTIVE keys.
- Status transitions are monotone; terminal states never change.
- Recipient labels prefer the embedded account, then the raw target, and
  render the legacy manual-email marker.
- No side effects: transitions return new instances.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from domain.auth_key import (
    LEGACY_MANUAL_EMAIL_TARGET,
    AccountRef,
    AuthenticationKey,
    AuthKeyStatus,
)

CREATED = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def _key(**overrides) -> AuthenticationKey:
    fields = dict(
        key_id="key-1",
        code="AK-000001",
        plan_id="plan-p",
        status=AuthKeyStatus.ACTIVE,
        created_at=CREATED,
    )
    fields.update(overrides)
    return AuthenticationKey(**fields)


def test_used_by_requires_used_status() -> None:
    """Verify a redeeming account on a non-USED key is rejected."""

    with pytest.raises(ValueError):
        _key(used_by="u-1", status=AuthKeyStatus.ACTIVE)

    used = _key(used_by="u-1", status=AuthKeyStatus.USED, used_at=CREATED + timedelta(days=1))
    assert used.used_by == "u-1"


def test_timestamps_must_be_utc() -> None:
    """Verify naive and non-UTC timestamps are rejected."""

    with pytest.raises(ValueError):
        _key(created_at=datetime(2025, 1, 1))

    with pytest.raises(ValueError):
        _key(created_at=datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=3))))

    with pytest.raises(ValueError):
        _key(status=AuthKeyStatus.USED, used_by="u-1", used_at=datetime(2025, 1, 2))


@pytest.mark.parametrize(
    "status, distributed_to, expected",
    [
        (AuthKeyStatus.ACTIVE, None, True),
        (AuthKeyStatus.ACTIVE, "u-1", False),
        (AuthKeyStatus.ACTIVE, "", True),
        (AuthKeyStatus.EXPIRED, None, False),
        (AuthKeyStatus.CANCELLED, None, False),
    ],
)
def test_is_assignable_iff_active_and_undistributed(status, distributed_to, expected) -> None:
    """Verify assignment is offered only for ACTIVE keys without a target."""

    assert _key(status=status, distributed_to=distributed_to).is_assignable is expected


def test_distributed_sets_target_once() -> None:
    """Verify distribution returns a new key and cannot be repeated."""

    original = _key()
    sent = original.distributed("ops@example.com")

    assert sent.distributed_to == "ops@example.com"
    assert sent.is_assignable is False
    assert original.distributed_to is None

    with pytest.raises(ValueError):
        sent.distributed("u-2")


def test_distributed_rejects_non_active_and_empty_target() -> None:
    """Verify only ACTIVE keys can be distributed, and only to a real target."""

    with pytest.raises(ValueError):
        _key(status=AuthKeyStatus.EXPIRED).distributed("u-1")

    with pytest.raises(ValueError):
        _key().distributed("")


def test_transitions_are_monotone() -> None:
    """Verify ACTIVE moves to a terminal state and terminal states stay put."""

    active = _key()
    expired = active.transition(AuthKeyStatus.EXPIRED)
    assert expired.status is AuthKeyStatus.EXPIRED
    assert active.status is AuthKeyStatus.ACTIVE

    assert expired.transition(AuthKeyStatus.EXPIRED) is expired

    with pytest.raises(ValueError):
        expired.transition(AuthKeyStatus.ACTIVE)

    with pytest.raises(ValueError):
        expired.transition(AuthKeyStatus.USED)

    cancelled = active.transition(AuthKeyStatus.CANCELLED)
    with pytest.raises(ValueError):
        cancelled.transition(AuthKeyStatus.USED)


def test_redeemed_marks_key_used() -> None:
    """Verify redemption sets USED, the account, and the timestamp together."""

    used_at = CREATED + timedelta(days=2)
    used = _key(distributed_to="u-1").redeemed("u-1", used_at)

    assert used.status is AuthKeyStatus.USED
    assert used.used_by == "u-1"
    assert used.used_at == used_at

    with pytest.raises(ValueError):
        used.redeemed("u-2", used_at)


def test_recipient_label_prefers_account_then_target() -> None:
    """Verify the distributed-to label for accounts, raw emails, and legacy markers."""

    account = AccountRef(account_id="u-1", email="user1@example.com", name="User 1")
    assert _key(distributed_to="u-1", distributed_to_account=account).recipient_label == "User 1"

    nameless = AccountRef(account_id="u-1", email="user1@example.com")
    assert _key(distributed_to="u-1", distributed_to_account=nameless).recipient_label == "user1@example.com"

    assert _key(distributed_to="ops@example.com").recipient_label == "ops@example.com"
    assert _key(distributed_to=LEGACY_MANUAL_EMAIL_TARGET).recipient_label == "Manual Email (Legacy)"
    assert _key().recipient_label is None


def test_used_by_label() -> None:
    """Verify the used-by label falls back to the raw account id."""

    used_at = CREATED + timedelta(days=1)
    ref = AccountRef(account_id="u-3", email="user3@example.com", name="User 3")

    assert _key(status=AuthKeyStatus.USED, used_by="u-3", used_at=used_at, used_by_account=ref).used_by_label == "User 3"
    assert _key(status=AuthKeyStatus.USED, used_by="u-3", used_at=used_at).used_by_label == "u-3"


def test_key_is_immutable() -> None:
    """Verify keys cannot be mutated in place."""

    key = _key()
    with pytest.raises(FrozenInstanceError):
        key.distributed_to = "u-1"  # type: ignore[misc]


def test_terminal_statuses() -> None:
    """Verify only ACTIVE is non-terminal."""

    assert AuthKeyStatus.ACTIVE.is_terminal is False
    assert all(s.is_terminal for s in (AuthKeyStatus.USED, AuthKeyStatus.EXPIRED, AuthKeyStatus.CANCELLED))
