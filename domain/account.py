"""
Domain: Registered platform accounts.

Summaries of the accounts an operator can pick as Authentication Key recipients.
Account management itself happens on the remote service.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class AccountSummary:
    """
    Candidate recipient account as listed by the admin service.

    kyc_status is informational only; any registered account may receive a key.
    """

    account_id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    kyc_status: Optional[str] = None  # PENDING, APPROVED, REJECTED, ...

    @property
    def display_name(self) -> str:
        return self.name or self.email

    def matches(self, search: str) -> bool:
        """Case-insensitive substring match on name, email, or phone."""

        needle = search.strip().lower()
        if not needle:
            return True
        haystacks = (self.name or "", self.email or "", self.phone or "")
        return any(needle in value.lower() for value in haystacks)
