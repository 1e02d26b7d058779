"""
Swap lifecycle engine — the state machine that drives a swap request
from proposal to its single terminal status.

Every transition is verified (existence, actor, state) and then applied
through the store's atomic conditional update, so of two concurrent
transitions on the same pending swap only the first writer wins.
Exactly one notification is dispatched per successful transition.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import (
    DuplicateSwapRequest,
    InvalidSkillOwnership,
    InvalidStateTransition,
    NotAuthorized,
    SelfSwapNotAllowed,
    SwapNotFound,
)
from .events import (
    SwapEvent,
    new_swap_request,
    swap_accepted,
    swap_cancelled,
    swap_rejected,
)
from .models import (
    SkillInfo,
    SwapRequest,
    SwapStatus,
    new_swap_request as build_swap_request,
    utcnow,
)
from .protocols import NotificationDispatcher, SkillDirectory, SwapStore

logger = logging.getLogger(__name__)

# ============ State Machine ============

# Valid state transitions. Key = current state, value = set of allowed next states.
VALID_TRANSITIONS: dict[SwapStatus, set[SwapStatus]] = {
    SwapStatus.PENDING: {SwapStatus.ACCEPTED, SwapStatus.REJECTED, SwapStatus.CANCELLED},
    SwapStatus.ACCEPTED: set(),   # Terminal
    SwapStatus.REJECTED: set(),   # Terminal
    SwapStatus.CANCELLED: set(),  # Terminal
}

# Who may drive each transition
RESPONDER_TRANSITIONS = frozenset({SwapStatus.ACCEPTED, SwapStatus.REJECTED})
REQUESTER_TRANSITIONS = frozenset({SwapStatus.CANCELLED})


class SwapLifecycleEngine:
    """
    Orchestrates swap proposals and their resolution.

    pending -> accepted   (responder)
    pending -> rejected   (responder)
    pending -> cancelled  (requester)

    The engine owns all writes of ``status`` and ``updated_at``; nothing
    else mutates the store.
    """

    def __init__(
        self,
        store: SwapStore,
        skills: SkillDirectory,
        dispatcher: NotificationDispatcher,
    ):
        self._store = store
        self._skills = skills
        self._dispatcher = dispatcher

    # ============ Proposal ============

    async def propose(
        self,
        requester_id: str,
        responder_id: str,
        offered_skill_id: str,
        wanted_skill_id: str,
    ) -> SwapRequest:
        """
        Create a pending swap and notify the responder.

        Raises:
            SelfSwapNotAllowed: requester and responder are the same user.
            InvalidSkillOwnership: a skill is missing, unapproved, or
                belongs to the wrong user.
            DuplicateSwapRequest: an identical swap is still pending.
        """
        if requester_id == responder_id:
            raise SelfSwapNotAllowed("Cannot create a swap request with yourself")

        offered = await self._require_owned_skill(
            offered_skill_id, requester_id, "Offered",
        )
        wanted = await self._require_owned_skill(
            wanted_skill_id, responder_id, "Wanted",
        )

        swap = build_swap_request(
            requester_id=requester_id,
            responder_id=responder_id,
            offered_skill_id=offered_skill_id,
            wanted_skill_id=wanted_skill_id,
        )
        inserted = await self._store.insert_if_no_pending_duplicate(swap)
        if not inserted:
            raise DuplicateSwapRequest("A swap request already exists for these skills")

        logger.info(
            "Swap %s proposed: %s -> %s (%s for %s)",
            swap.swap_id, requester_id, responder_id,
            offered_skill_id, wanted_skill_id,
        )
        await self._notify(new_swap_request(swap, offered.name, wanted.name))
        return swap

    async def _require_owned_skill(
        self, skill_id: str, owner_id: str, label: str,
    ) -> SkillInfo:
        skill = await self._skills.get_skill(skill_id)
        if skill is None or not skill.approved or skill.owner_id != owner_id:
            raise InvalidSkillOwnership(f"{label} skill not found or not approved")
        return skill

    # ============ Transitions ============

    async def accept(self, swap_id: str, acting_user_id: str) -> SwapRequest:
        swap = await self._transition(swap_id, acting_user_id, SwapStatus.ACCEPTED)
        await self._notify(swap_accepted(swap))
        return swap

    async def reject(self, swap_id: str, acting_user_id: str) -> SwapRequest:
        swap = await self._transition(swap_id, acting_user_id, SwapStatus.REJECTED)
        await self._notify(swap_rejected(swap))
        return swap

    async def cancel(self, swap_id: str, acting_user_id: str) -> SwapRequest:
        swap = await self._transition(swap_id, acting_user_id, SwapStatus.CANCELLED)
        await self._notify(swap_cancelled(swap))
        return swap

    async def _transition(
        self, swap_id: str, acting_user_id: str, new_status: SwapStatus,
    ) -> SwapRequest:
        """
        Apply ``new_status`` to a pending swap.

        Checks run in a fixed order so each failure is unambiguous:
        existence, then actor, then state. The final write is a
        conditional update against the persisted status; losing that
        race is reported as InvalidStateTransition.
        """
        swap = await self._store.get(swap_id)
        if swap is None:
            raise SwapNotFound(f"Swap {swap_id} not found")

        self._check_actor(swap, acting_user_id, new_status)

        current = swap.status
        if new_status not in VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateTransition(
                f"Swap {swap_id} already {current.value}"
            )

        updated = await self._store.compare_and_set_status(
            swap_id, current, new_status, utcnow(),
        )
        if updated is None:
            latest = await self._store.get(swap_id)
            status = latest.status.value if latest else "gone"
            raise InvalidStateTransition(f"Swap {swap_id} already {status}")

        logger.info(
            "Swap %s: %s -> %s (by %s)",
            swap_id, current.value, new_status.value, acting_user_id,
        )
        return updated

    @staticmethod
    def _check_actor(swap: SwapRequest, acting_user_id: str, new_status: SwapStatus) -> None:
        if new_status in RESPONDER_TRANSITIONS and acting_user_id != swap.responder_id:
            raise NotAuthorized(
                f"Only the responder can {_verb(new_status)} this swap"
            )
        if new_status in REQUESTER_TRANSITIONS and acting_user_id != swap.requester_id:
            raise NotAuthorized("Only the requester can cancel this swap")

    # ============ Queries ============

    async def list_for_user(
        self, user_id: str, status: Optional[SwapStatus] = None,
    ) -> list[SwapRequest]:
        return await self._store.list_for_user(user_id, status)

    async def get_swap(self, swap_id: str, acting_user_id: str) -> SwapRequest:
        """Fetch one swap. Non-participants cannot tell it exists."""
        swap = await self._store.get(swap_id)
        if swap is None or not swap.involves(acting_user_id):
            raise SwapNotFound(f"Swap {swap_id} not found")
        return swap

    async def skill_names(self, swap: SwapRequest) -> tuple[Optional[str], Optional[str]]:
        """(offered, wanted) display names; None for a skill removed since."""
        offered = await self._skills.get_skill(swap.offered_skill_id)
        wanted = await self._skills.get_skill(swap.wanted_skill_id)
        return (
            offered.name if offered else None,
            wanted.name if wanted else None,
        )

    @staticmethod
    def split_by_direction(
        user_id: str, swaps: list[SwapRequest],
    ) -> tuple[list[SwapRequest], list[SwapRequest]]:
        """Return (incoming, outgoing) from the user's point of view."""
        incoming = [s for s in swaps if s.responder_id == user_id]
        outgoing = [s for s in swaps if s.requester_id == user_id]
        return incoming, outgoing

    # ============ Notification ============

    async def _notify(self, event: SwapEvent) -> None:
        """Dispatch after commit. A delivery failure never reaches the caller."""
        try:
            await self._dispatcher.dispatch(
                event.recipient_id, event.event_type.value, event.data,
            )
        except Exception:
            logger.exception(
                "Dispatch of %s to %s failed", event.event_type.value, event.recipient_id,
            )


def _verb(status: SwapStatus) -> str:
    return {SwapStatus.ACCEPTED: "accept", SwapStatus.REJECTED: "reject"}.get(
        status, status.value
    )
