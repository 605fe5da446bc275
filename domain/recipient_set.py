"""
Domain: the set of recipients an operator is building for a bulk assignment.

Enforces:
- No duplicates (Recipient identity).
- size(accounts) + size(emails) <= capacity after every add, where capacity is
  the size of the currently loaded KeyPool.
- Email input is cleared only when an address is accepted.

Session-scoped and in-memory only.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .account import AccountSummary
from .admission import ValidationError, ValidationReason, check_submission, validate_email_syntax
from .recipient import Recipient, normalize_email


class RecipientSet:
    """Ordered, capacity-bounded selection of registered accounts and emails."""

    def __init__(self, capacity: int = 0):
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._capacity = capacity
        self._accounts: Dict[str, Recipient] = {}
        self._emails: List[Recipient] = []
        self.email_input: str = ""

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def accounts(self) -> List[Recipient]:
        return list(self._accounts.values())

    @property
    def emails(self) -> List[str]:
        return [r.email or "" for r in self._emails]

    @property
    def size(self) -> int:
        return len(self._accounts) + len(self._emails)

    def __len__(self) -> int:
        return self.size

    def __contains__(self, recipient: object) -> bool:
        return recipient in self._accounts.values() or recipient in self._emails

    def has_account(self, account_id: str) -> bool:
        return str(account_id) in self._accounts

    def _capacity_error(self, noun: str) -> ValidationError:
        return ValidationError(
            ValidationReason.CAPACITY_EXCEEDED,
            f"You can only add up to {self._capacity} {noun} (available keys)",
        )

    # Registered accounts

    def add_account(
        self,
        account_id: str,
        display_name: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Recipient:
        """Select an account; already selected accounts are returned unchanged."""

        key = str(account_id)
        existing = self._accounts.get(key)
        if existing is not None:
            return existing
        if self.size >= self._capacity:
            raise self._capacity_error("recipients")
        recipient = Recipient.registered(key, display_name, email)
        self._accounts[key] = recipient
        return recipient

    def add_summary(self, account: AccountSummary) -> Recipient:
        return self.add_account(account.account_id, account.name, account.email)

    def remove_account(self, account_id: str) -> None:
        self._accounts.pop(str(account_id), None)

    def toggle_account(self, account: AccountSummary) -> bool:
        """Flip selection of `account`. Returns True when it ends up selected."""

        if self.has_account(account.account_id):
            self.remove_account(account.account_id)
            return False
        self.add_summary(account)
        return True

    @staticmethod
    def _unique(candidates: Sequence[AccountSummary]) -> List[AccountSummary]:
        seen: Dict[str, AccountSummary] = {}
        for account in candidates:
            seen.setdefault(str(account.account_id), account)
        return list(seen.values())

    def select_all(self, candidates: Sequence[AccountSummary]) -> None:
        """
        Replace the account selection with the first candidates that fit.

        Room left by manually entered emails is respected, so the capacity
        invariant holds even when both kinds are selected. Repeated account ids
        count once.
        """

        room = max(self._capacity - len(self._emails), 0)
        self._accounts = {}
        for account in self._unique(candidates)[:room]:
            self._accounts[str(account.account_id)] = Recipient.from_account(account)

    def deselect_all(self) -> None:
        self._accounts = {}

    def all_selected(self, candidates: Sequence[AccountSummary]) -> bool:
        target = min(len(self._unique(candidates)), max(self._capacity - len(self._emails), 0))
        return target > 0 and len(self._accounts) == target

    def toggle_select_all(self, candidates: Sequence[AccountSummary]) -> None:
        if self.all_selected(candidates):
            self.deselect_all()
        else:
            self.select_all(candidates)

    # Manual emails

    def add_email(self, raw: Optional[str] = None) -> Recipient:
        """
        Add an email recipient from `raw` or from the pending `email_input`.

        Checks, in order: syntax, duplicates (case-insensitive), capacity.
        """

        source = self.email_input if raw is None else raw
        email = validate_email_syntax(source)
        normalized = normalize_email(email)
        if any(normalize_email(r.email or "") == normalized for r in self._emails):
            raise ValidationError(ValidationReason.DUPLICATE_RECIPIENT, "Email already added")
        if self.size >= self._capacity:
            raise self._capacity_error("emails")
        recipient = Recipient.for_email(email)
        self._emails.append(recipient)
        self.email_input = ""
        return recipient

    def remove_email(self, raw: str) -> None:
        normalized = normalize_email(raw)
        self._emails = [r for r in self._emails if normalize_email(r.email or "") != normalized]

    # Lifecycle

    def set_capacity(self, capacity: int) -> None:
        """Adopt a new KeyPool size. The selection is kept only if it still fits."""

        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self._capacity = capacity
        if self.size > capacity:
            self.clear()

    def clear(self) -> None:
        self._accounts = {}
        self._emails = []

    def ordered(self) -> List[Recipient]:
        """Registered accounts in selection order, then emails in addition order."""

        return list(self._accounts.values()) + list(self._emails)

    def validate_for_submission(self) -> List[Recipient]:
        check_submission(self.size, self._capacity)
        return self.ordered()


__all__ = ["RecipientSet"]
