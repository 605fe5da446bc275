"""
Single-key assignment flow.

State machine over one key and one candidate recipient:

    SELECTING_RECIPIENT --choose_account--> PENDING_CONFIRMATION
    PENDING_CONFIRMATION --confirm--> ASSIGNING --> SUCCEEDED | FAILED
    PENDING_CONFIRMATION --cancel--> CANCELLED
    SELECTING_RECIPIENT --submit_email--> ASSIGNING --> SUCCEEDED | FAILED

The email path has no confirmation step. FAILED and CANCELLED keep the key
context so the operator can pick again.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Union

from domain.account import AccountSummary
from domain.admission import is_valid_email, validate_email_syntax
from domain.auth_key import AuthenticationKey
from domain.outcome import AllocationOutcome
from domain.recipient import Recipient, RecipientKind
from repositories.client import AdminApiClient
from services.allocation_service import allocate

logger = logging.getLogger(__name__)


class AssignmentState(str, Enum):
    SELECTING_RECIPIENT = "SELECTING_RECIPIENT"
    PENDING_CONFIRMATION = "PENDING_CONFIRMATION"
    ASSIGNING = "ASSIGNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


# States from which the operator may pick a recipient.
_SELECTABLE = {AssignmentState.SELECTING_RECIPIENT, AssignmentState.FAILED}


class AssignmentNotOffered(Exception):
    """Raised when assignment is requested for a key that cannot be assigned."""

    def __init__(self, key: AuthenticationKey):
        self.key = key
        reason = "already distributed" if key.is_distributed else f"{key.status.value}"
        super().__init__(f"Authentication Key {key.code} cannot be assigned ({reason})")


class InvalidTransition(RuntimeError):
    """Raised when an action is not allowed in the current state."""


class SingleAssignmentFlow:
    def __init__(self, client: AdminApiClient, key: AuthenticationKey):
        if not key.is_assignable:
            raise AssignmentNotOffered(key)
        self._client = client
        self.key = key
        self.state = AssignmentState.SELECTING_RECIPIENT
        self.pending: Optional[Recipient] = None
        self.email_input: str = ""
        self.outcome: Optional[AllocationOutcome] = None
        self.message: Optional[str] = None

    def _require(self, *allowed: AssignmentState) -> None:
        if self.state not in allowed:
            raise InvalidTransition(f"Action not allowed in state {self.state.value}")

    @property
    def email_ready(self) -> bool:
        """Whether the manual-email assign action should be enabled."""

        return is_valid_email(self.email_input)

    def choose_account(self, account: Union[AccountSummary, Recipient]) -> Recipient:
        self._require(*_SELECTABLE)
        if isinstance(account, Recipient):
            if account.kind is not RecipientKind.REGISTERED:
                raise ValueError("choose_account expects a registered account")
            self.pending = account
        else:
            self.pending = Recipient.from_account(account)
        self.message = None
        self.state = AssignmentState.PENDING_CONFIRMATION
        return self.pending

    def cancel(self) -> None:
        self._require(AssignmentState.PENDING_CONFIRMATION)
        self.pending = None
        self.state = AssignmentState.CANCELLED

    def reopen(self) -> None:
        self._require(AssignmentState.CANCELLED, AssignmentState.FAILED)
        self.pending = None
        self.state = AssignmentState.SELECTING_RECIPIENT

    async def confirm(self) -> AllocationOutcome:
        self._require(AssignmentState.PENDING_CONFIRMATION)
        if self.pending is None:
            raise InvalidTransition("No recipient pending confirmation")
        return await self._assign(self.pending)

    async def submit_email(self, raw: Optional[str] = None) -> AllocationOutcome:
        """
        Assign the key to a manually entered address.

        Raises:
            ValidationError: INVALID_EMAIL_SYNTAX, before any remote call.
        """

        self._require(*_SELECTABLE)
        if raw is not None:
            self.email_input = raw
        email = validate_email_syntax(self.email_input)
        outcome = await self._assign(Recipient.for_email(email))
        if outcome.succeeded:
            self.email_input = ""
        return outcome

    async def _assign(self, recipient: Recipient) -> AllocationOutcome:
        self.pending = recipient
        self.state = AssignmentState.ASSIGNING
        try:
            outcome = (await allocate(self._client, [recipient], [self.key]))[0]
        except Exception:
            self.state = AssignmentState.FAILED
            self.message = "Failed to assign key"
            raise
        self.outcome = outcome

        if outcome.succeeded:
            self.state = AssignmentState.SUCCEEDED
            self.key = self.key.distributed(recipient.account_id or recipient.email or "")
            if recipient.kind is RecipientKind.EMAIL:
                self.message = "Authentication Key assigned and email sent successfully"
            else:
                self.message = "Authentication Key assigned successfully and email sent to user"
            logger.info("Assigned key %s to %s", self.key.code, recipient.label)
        else:
            self.state = AssignmentState.FAILED
            if recipient.kind is RecipientKind.EMAIL:
                fallback = (
                    f"Failed to send key to {recipient.email}. "
                    "Please verify the email address is correct."
                )
            else:
                fallback = "Failed to assign key"
            self.message = outcome.error_detail or fallback
        return outcome


__all__ = [
    "AssignmentNotOffered",
    "AssignmentState",
    "InvalidTransition",
    "SingleAssignmentFlow",
]
