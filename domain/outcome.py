"""
Domain: per-pair allocation outcomes and their aggregate summary.

The summary is the only input to the operator-facing result message. It
distinguishes pure success, partial failure, and total failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .auth_key import AuthenticationKey
from .recipient import Recipient, RecipientKind


class OutcomeStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class SummaryKind(str, Enum):
    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILURE = "FAILURE"
    EMPTY = "EMPTY"


_TONES = {
    SummaryKind.SUCCESS: "success",
    SummaryKind.PARTIAL: "warning",
    SummaryKind.FAILURE: "error",
    SummaryKind.EMPTY: "info",
}


@dataclass(frozen=True, slots=True)
class AllocationOutcome:
    """Result of one distribute call for one (recipient, key) pair."""

    recipient: Recipient
    key: AuthenticationKey
    status: OutcomeStatus
    error_detail: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCEEDED


@dataclass(frozen=True, slots=True)
class AllocationSummary:
    succeeded_count: int
    failed_count: int
    failed_email_addresses: Tuple[str, ...] = ()

    @property
    def attempted(self) -> int:
        return self.succeeded_count + self.failed_count

    @property
    def kind(self) -> SummaryKind:
        if self.attempted == 0:
            return SummaryKind.EMPTY
        if self.failed_count == 0:
            return SummaryKind.SUCCESS
        if self.succeeded_count == 0:
            return SummaryKind.FAILURE
        return SummaryKind.PARTIAL

    @property
    def tone(self) -> str:
        return _TONES[self.kind]

    def messages(self) -> List[str]:
        """Operator-facing lines, most important first."""

        lines: List[str] = []
        if self.succeeded_count > 0:
            lines.append(f"Successfully assigned {self.succeeded_count} Authentication Keys")
        if self.failed_count > 0:
            registered_failures = self.failed_count - len(self.failed_email_addresses)
            if self.failed_email_addresses:
                lines.append(
                    f"Failed to send keys to {len(self.failed_email_addresses)} email(s): "
                    f"{', '.join(self.failed_email_addresses)}. Please verify the email addresses."
                )
            if registered_failures > 0:
                lines.append(f"Failed to assign {registered_failures} keys to registered users")
        if not lines:
            lines.append("No Authentication Keys were assigned")
        return lines


def summarize(outcomes: Iterable[AllocationOutcome]) -> AllocationSummary:
    """Reduce per-pair outcomes to counts plus the failed email addresses, in order."""

    succeeded = 0
    failed = 0
    failed_emails: List[str] = []
    for outcome in outcomes:
        if outcome.succeeded:
            succeeded += 1
            continue
        failed += 1
        if outcome.recipient.kind is RecipientKind.EMAIL:
            failed_emails.append(outcome.recipient.email or "")
    return AllocationSummary(
        succeeded_count=succeeded,
        failed_count=failed,
        failed_email_addresses=tuple(failed_emails),
    )


__all__ = [
    "AllocationOutcome",
    "AllocationSummary",
    "OutcomeStatus",
    "SummaryKind",
    "summarize",
]
