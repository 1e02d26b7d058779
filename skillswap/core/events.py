"""
Swap lifecycle events — one per successful transition.

Each event names exactly one recipient: the counterparty of the user
who caused the transition. Payload keys use the camelCase names the
client listens for.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .models import SwapRequest


class EventType(str, Enum):
    NEW_SWAP_REQUEST = "newSwapRequest"
    SWAP_ACCEPTED = "swapAccepted"
    SWAP_REJECTED = "swapRejected"
    SWAP_CANCELLED = "swapCancelled"


@dataclass
class SwapEvent:
    """One notification: the event name, who gets it, and its payload."""
    event_type: EventType
    recipient_id: str
    data: dict[str, Any] = field(default_factory=dict)


# ============ Factories ============

def new_swap_request(
    swap: SwapRequest,
    offered_skill_name: str,
    wanted_skill_name: str,
) -> SwapEvent:
    return SwapEvent(
        event_type=EventType.NEW_SWAP_REQUEST,
        recipient_id=swap.responder_id,
        data={
            "swapId": swap.swap_id,
            "requesterId": swap.requester_id,
            "offeredSkillName": offered_skill_name,
            "wantedSkillName": wanted_skill_name,
        },
    )


def swap_accepted(swap: SwapRequest) -> SwapEvent:
    return SwapEvent(
        event_type=EventType.SWAP_ACCEPTED,
        recipient_id=swap.requester_id,
        data={"swapId": swap.swap_id},
    )


def swap_rejected(swap: SwapRequest) -> SwapEvent:
    return SwapEvent(
        event_type=EventType.SWAP_REJECTED,
        recipient_id=swap.requester_id,
        data={"swapId": swap.swap_id},
    )


def swap_cancelled(swap: SwapRequest) -> SwapEvent:
    return SwapEvent(
        event_type=EventType.SWAP_CANCELLED,
        recipient_id=swap.responder_id,
        data={"swapId": swap.swap_id},
    )
