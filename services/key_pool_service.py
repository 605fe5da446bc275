"""
KeyPool: the in-memory view of assignable Authentication Keys for one plan.

The snapshot is session-scoped. It is cleared as soon as a new plan is selected,
and a response that arrives after a newer selection started is discarded, so
keys of one plan can never show up under another.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from domain.auth_key import AuthenticationKey, AuthKeyStatus
from repositories.auth_key_repository import list_auth_keys
from repositories.client import AdminApiClient, RemoteCallError

logger = logging.getLogger(__name__)

# Practical fetch cap for a single pool load.
KEY_POOL_FETCH_CAP: int = 1000


class KeyPool:
    def __init__(self, client: AdminApiClient):
        self._client = client
        self._plan_id: Optional[str] = None
        self._keys: Tuple[AuthenticationKey, ...] = ()
        self._generation = 0
        self.notice: Optional[str] = None

    @property
    def plan_id(self) -> Optional[str]:
        return self._plan_id

    @property
    def keys(self) -> Tuple[AuthenticationKey, ...]:
        return self._keys

    @property
    def size(self) -> int:
        return len(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def clear(self) -> None:
        self._generation += 1
        self._plan_id = None
        self._keys = ()
        self.notice = None

    async def load_available(self, plan_id: str) -> Tuple[AuthenticationKey, ...]:
        """
        Load ACTIVE, undistributed keys of `plan_id`.

        Never raises for remote failures: the pool degrades to empty and
        `notice` carries the message to surface.
        """

        self._generation += 1
        generation = self._generation
        self._plan_id = plan_id
        self._keys = ()
        self.notice = None

        try:
            page = await list_auth_keys(
                self._client,
                plan_id=plan_id,
                status=AuthKeyStatus.ACTIVE,
                limit=KEY_POOL_FETCH_CAP,
            )
        except RemoteCallError as exc:
            if generation == self._generation:
                logger.warning("Failed to load available keys for plan %s: %s", plan_id, exc)
                self.notice = "Failed to load available keys"
            return self._keys

        if generation != self._generation:
            logger.debug("Discarding stale key pool response for plan %s", plan_id)
            return self._keys

        self._keys = tuple(
            key for key in page.keys if key.is_assignable and (not key.plan_id or key.plan_id == plan_id)
        )
        logger.debug("Key pool for plan %s holds %d keys", plan_id, len(self._keys))
        return self._keys

    async def refresh(self) -> Tuple[AuthenticationKey, ...]:
        if self._plan_id is None:
            return self._keys
        return await self.load_available(self._plan_id)


__all__ = ["KEY_POOL_FETCH_CAP", "KeyPool"]
