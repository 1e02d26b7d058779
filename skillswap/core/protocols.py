"""
Module-boundary Protocol definitions — the contracts between modules.

These Protocols define WHAT each collaborator must do, not HOW.
Any implementation that satisfies the Protocol can be injected into
the engine: in-memory for tests, SQL-backed for deployment.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol, runtime_checkable

from .models import SkillInfo, SwapRequest, SwapStatus


# ============ Skill Directory ============

@runtime_checkable
class SkillDirectory(Protocol):
    """
    Read-only view of users' skill listings.

    Owned by the skill management side of the product; the engine only
    resolves identity, ownership and approval through it.
    """

    async def get_skill(self, skill_id: str) -> Optional[SkillInfo]:
        """Return the skill, or None if it does not exist."""
        ...


# ============ Swap Store ============

@runtime_checkable
class SwapStore(Protocol):
    """
    Persistent record of swap requests.

    The store is the single shared mutable resource. Both write
    operations must be atomic with respect to concurrent callers:
    that is a storage-layer contract, not an application-level lock.
    """

    async def insert_if_no_pending_duplicate(self, swap: SwapRequest) -> bool:
        """
        Insert ``swap`` unless a pending record with the same skill pair
        exists between the same two users (either direction).

        Returns False (and inserts nothing) if such a record exists.
        """
        ...

    async def get(self, swap_id: str) -> Optional[SwapRequest]:
        ...

    async def compare_and_set_status(
        self,
        swap_id: str,
        expected: SwapStatus,
        new_status: SwapStatus,
        updated_at: datetime,
    ) -> Optional[SwapRequest]:
        """
        Set ``new_status`` only if the persisted status still equals
        ``expected``. Returns the updated record, or None if the
        condition did not hold (or the record does not exist).
        """
        ...

    async def list_for_user(
        self,
        user_id: str,
        status: Optional[SwapStatus] = None,
    ) -> list[SwapRequest]:
        """Records where the user is requester or responder, newest first."""
        ...


# ============ Notification Dispatcher ============

@runtime_checkable
class NotificationDispatcher(Protocol):
    """
    Pushes an event to every live channel of one user.

    Best-effort and fire-and-forget: implementations must never raise
    to the caller. A persisted transition is never undone because a
    notification could not be delivered.
    """

    async def dispatch(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        ...
