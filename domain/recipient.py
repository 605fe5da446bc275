"""
Domain: Authentication Key recipients.

A recipient is either a registered account or a bare email address. Both kinds
live in one ordered sequence so positional key pairing never has to interleave
two separate lists.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .account import AccountSummary


class RecipientKind(str, Enum):
    REGISTERED = "REGISTERED"
    EMAIL = "EMAIL"


def normalize_email(address: str) -> str:
    return address.strip().lower()


@dataclass(frozen=True, slots=True, eq=False)
class Recipient:
    """
    Tagged recipient variant.

    Equality is by account id for REGISTERED and by lowercased address for EMAIL,
    so display details never make two selections of the same target distinct.
    """

    kind: RecipientKind
    account_id: Optional[str] = None
    display_name: Optional[str] = None
    email: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind is RecipientKind.REGISTERED and not self.account_id:
            raise ValueError("REGISTERED recipient requires account_id")
        if self.kind is RecipientKind.EMAIL and not (self.email and self.email.strip()):
            raise ValueError("EMAIL recipient requires an address")

    @staticmethod
    def registered(
        account_id: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> "Recipient":
        return Recipient(
            kind=RecipientKind.REGISTERED,
            account_id=str(account_id),
            display_name=display_name,
            email=email,
        )

    @staticmethod
    def from_account(account: AccountSummary) -> "Recipient":
        return Recipient.registered(account.account_id, account.name, account.email)

    @staticmethod
    def for_email(address: str) -> "Recipient":
        return Recipient(kind=RecipientKind.EMAIL, email=address.strip())

    @property
    def identity(self) -> Tuple[RecipientKind, str]:
        if self.kind is RecipientKind.REGISTERED:
            return (self.kind, str(self.account_id))
        return (self.kind, normalize_email(self.email or ""))

    @property
    def label(self) -> str:
        if self.kind is RecipientKind.EMAIL:
            return self.email or ""
        return self.display_name or self.email or str(self.account_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recipient):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self) -> int:
        return hash(self.identity)


__all__ = ["Recipient", "RecipientKind", "normalize_email"]
