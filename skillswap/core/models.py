"""
Core data models for the swap lifecycle.

These are the fundamental data structures shared across all modules.
They define WHAT the system works with, not HOW it processes them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


# ============ ID Generation ============

def generate_id(prefix: str = "") -> str:
    """Generate a unique ID with optional prefix."""
    uid = uuid.uuid4().hex[:12]
    return f"{prefix}_{uid}" if prefix else uid


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============ Skills ============

class SkillKind(str, Enum):
    OFFERED = "offered"
    WANTED = "wanted"


@dataclass(frozen=True)
class SkillInfo:
    """
    Read model of a skill listing, as seen by the lifecycle engine.

    The engine only needs identity, ownership and approval; the display
    name is carried so notifications can name the skills.
    """
    skill_id: str
    owner_id: str
    approved: bool
    name: str = ""
    kind: SkillKind = SkillKind.OFFERED


# ============ Swap Request ============

class SwapStatus(str, Enum):
    """
    Swap lifecycle states.

    PENDING is the only non-terminal state. A record leaves it exactly
    once and is never written again.
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self != SwapStatus.PENDING


@dataclass(frozen=True)
class SwapRequest:
    """
    A proposed one-to-one skill exchange between two users.

    Records are immutable values; a status transition produces a new
    value via ``with_status`` and the store swaps it in atomically.
    """
    swap_id: str
    requester_id: str
    responder_id: str
    offered_skill_id: str
    wanted_skill_id: str
    status: SwapStatus = SwapStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def involves(self, user_id: str) -> bool:
        return user_id in (self.requester_id, self.responder_id)

    def matches_pair(
        self,
        requester_id: str,
        responder_id: str,
        offered_skill_id: str,
        wanted_skill_id: str,
    ) -> bool:
        """Same skill pair between the same two users, in either direction."""
        if (self.offered_skill_id, self.wanted_skill_id) != (offered_skill_id, wanted_skill_id):
            return False
        return (self.requester_id, self.responder_id) in (
            (requester_id, responder_id),
            (responder_id, requester_id),
        )

    def with_status(self, status: SwapStatus, updated_at: datetime) -> SwapRequest:
        return replace(self, status=status, updated_at=updated_at)

    def to_dict(self) -> dict[str, Any]:
        return {
            "swap_id": self.swap_id,
            "requester_id": self.requester_id,
            "responder_id": self.responder_id,
            "offered_skill_id": self.offered_skill_id,
            "wanted_skill_id": self.wanted_skill_id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def new_swap_request(
    requester_id: str,
    responder_id: str,
    offered_skill_id: str,
    wanted_skill_id: str,
) -> SwapRequest:
    """Create a fresh pending swap with a generated id."""
    return SwapRequest(
        swap_id=generate_id("swap"),
        requester_id=requester_id,
        responder_id=responder_id,
        offered_skill_id=offered_skill_id,
        wanted_skill_id=wanted_skill_id,
    )
