"""
Allocation engine: pairs recipients with keys and distributes them one by one.

Key features:
- Positional pairing: recipient i receives keys[i]; the recipient order given
  by the caller is never changed.
- Strictly sequential: each distribute call is awaited before the next one is
  issued, so two in-flight calls never reference overlapping keys.
- Per-pair accounting: a failed pair is recorded and the batch moves on to the
  next index; there is no retry and no re-pairing.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from domain.auth_key import AuthenticationKey
from domain.outcome import AllocationOutcome, OutcomeStatus
from domain.recipient import Recipient, RecipientKind
from repositories.auth_key_repository import distribute_to_account, distribute_to_email
from repositories.client import AdminApiClient, RemoteCallError

logger = logging.getLogger(__name__)


async def _distribute(client: AdminApiClient, recipient: Recipient, key: AuthenticationKey) -> None:
    if recipient.kind is RecipientKind.REGISTERED:
        await distribute_to_account(client, key.key_id, str(recipient.account_id))
    else:
        await distribute_to_email(client, key.key_id, recipient.email or "")


async def allocate(
    client: AdminApiClient,
    recipients: Sequence[Recipient],
    keys: Sequence[AuthenticationKey],
) -> List[AllocationOutcome]:
    """
    Distribute keys[i] to recipients[i] for every recipient, in order.

    Args:
        client: Admin service client
        recipients: Ordered recipients (registered accounts first, then emails,
            when built from a RecipientSet)
        keys: Ordered assignable keys, at least as many as recipients

    Returns:
        One AllocationOutcome per recipient, in attempt order

    Raises:
        ValueError: If there are more recipients than keys. Admission guards
            prevent this upstream, so reaching it is a programming error.
    """

    if len(recipients) > len(keys):
        raise ValueError(
            f"Cannot allocate {len(keys)} keys to {len(recipients)} recipients"
        )

    outcomes: List[AllocationOutcome] = []
    for index, recipient in enumerate(recipients):
        key = keys[index]
        try:
            await _distribute(client, recipient, key)
        except RemoteCallError as exc:
            logger.warning("Failed to assign key %s to %s: %s", key.code, recipient.label, exc)
            outcomes.append(
                AllocationOutcome(
                    recipient=recipient,
                    key=key,
                    status=OutcomeStatus.FAILED,
                    error_detail=exc.detail,
                )
            )
            continue
        outcomes.append(AllocationOutcome(recipient=recipient, key=key, status=OutcomeStatus.SUCCEEDED))

    logger.info(
        "Allocation finished: %d attempted, %d succeeded",
        len(outcomes),
        sum(1 for outcome in outcomes if outcome.succeeded),
    )
    return outcomes


__all__ = ["allocate"]
