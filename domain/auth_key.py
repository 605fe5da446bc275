"""
Domain: Authentication Keys (single-use redemption codes bound to a plan).

Rules implemented here:
- A key whose redeeming account is set must have status USED.
- A key may be distributed at most once; the distribution target is immutable.
- Status transitions are monotone: ACTIVE -> {USED, EXPIRED, CANCELLED}.
  Terminal states never transition again.
- A key is assignable iff it is ACTIVE and has no distribution target.

This module contains only pure domain entities: no I/O, no HTTP, no frameworks.
Mutating operations return new instances.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp

# Placeholder target written by older versions of the platform for manual emails.
LEGACY_MANUAL_EMAIL_TARGET: str = "MANUAL_EMAIL"


class AuthKeyStatus(str, Enum):
    ACTIVE = "ACTIVE"
    USED = "USED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self is not AuthKeyStatus.ACTIVE


@dataclass(frozen=True, slots=True)
class AccountRef:
    """Account reference embedded in key records (distributed-to / used-by)."""

    account_id: str
    email: str
    name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.name or self.email


@dataclass(frozen=True, slots=True)
class PlanSummary:
    """Investment plan an Authentication Key unlocks."""

    plan_id: str
    name: str
    amount: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class AuthenticationKey:
    """
    One redeemable code.

    `distributed_to` holds whatever the service stored as the target: an account
    id, a raw email address, or the legacy manual-email marker.
    """

    key_id: str
    code: str
    plan_id: str
    status: AuthKeyStatus
    created_at: datetime
    plan_name: Optional[str] = None
    generated_by: Optional[str] = None
    distributed_to: Optional[str] = None
    distributed_to_account: Optional[AccountRef] = None
    used_by: Optional[str] = None
    used_by_account: Optional[AccountRef] = None
    used_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)
        if self.used_at is not None:
            require_utc_timestamp("used_at", self.used_at)
        if self.used_by is not None and self.status is not AuthKeyStatus.USED:
            raise ValueError("AuthenticationKey with a redeeming account must have status USED")

    @property
    def is_distributed(self) -> bool:
        return bool(self.distributed_to)

    @property
    def is_assignable(self) -> bool:
        """Assignment is offered only for ACTIVE keys nobody has received yet."""

        return self.status is AuthKeyStatus.ACTIVE and not self.is_distributed

    @property
    def recipient_label(self) -> Optional[str]:
        if self.distributed_to_account is not None:
            return self.distributed_to_account.label
        if self.distributed_to == LEGACY_MANUAL_EMAIL_TARGET:
            return "Manual Email (Legacy)"
        return self.distributed_to or None

    @property
    def used_by_label(self) -> Optional[str]:
        if self.used_by_account is not None:
            return self.used_by_account.label
        return self.used_by

    def distributed(self, target: str) -> "AuthenticationKey":
        """
        Return a new key with its distribution target set.

        Raises ValueError if the key already has a target or is not ACTIVE.
        """

        if not target:
            raise ValueError("Distribution target must not be empty")
        if self.is_distributed:
            raise ValueError("AuthenticationKey is already distributed")
        if self.status is not AuthKeyStatus.ACTIVE:
            raise ValueError(f"Cannot distribute a {self.status.value} AuthenticationKey")
        return replace(self, distributed_to=target)

    def transition(self, status: AuthKeyStatus) -> "AuthenticationKey":
        """Return a new key in `status`, enforcing monotone lifecycle transitions."""

        if status is self.status:
            return self
        if self.status.is_terminal:
            raise ValueError(
                f"AuthenticationKey in terminal status {self.status.value} cannot become {status.value}"
            )
        if status is AuthKeyStatus.ACTIVE:
            raise ValueError("AuthenticationKey cannot return to ACTIVE")
        return replace(self, status=status)

    def redeemed(self, account_id: str, used_at: datetime) -> "AuthenticationKey":
        """Return a new key marked USED by `account_id`."""

        require_utc_timestamp("used_at", used_at)
        if self.status is AuthKeyStatus.USED:
            raise ValueError("AuthenticationKey has already been redeemed")
        used = self.transition(AuthKeyStatus.USED)
        return replace(used, used_by=account_id, used_at=used_at)


__all__ = [
    "AccountRef",
    "AuthKeyStatus",
    "AuthenticationKey",
    "LEGACY_MANUAL_EMAIL_TARGET",
    "PlanSummary",
]
