"""
Pydantic request/response models for the SkillSwap API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from skillswap.core.models import SwapRequest


# ============ Swap ============

class ProposeSwapRequest(BaseModel):
    responder_id: str = Field(..., min_length=1)
    offered_skill_id: str = Field(..., min_length=1)
    wanted_skill_id: str = Field(..., min_length=1)


class SwapResponse(BaseModel):
    swap_id: str
    requester_id: str
    responder_id: str
    offered_skill_id: str
    wanted_skill_id: str
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    # None once the skill has been removed from the directory
    offered_skill_name: Optional[str] = None
    wanted_skill_name: Optional[str] = None

    @classmethod
    def from_swap(
        cls,
        swap: SwapRequest,
        offered_skill_name: Optional[str] = None,
        wanted_skill_name: Optional[str] = None,
    ) -> SwapResponse:
        return cls(
            **swap.to_dict(),
            offered_skill_name=offered_skill_name,
            wanted_skill_name=wanted_skill_name,
        )


class SwapListResponse(BaseModel):
    incoming: list[SwapResponse] = Field(default_factory=list)
    outgoing: list[SwapResponse] = Field(default_factory=list)


# ============ Errors ============

class ErrorDetail(BaseModel):
    code: str
    message: str


class HealthResponse(BaseModel):
    status: str
    connections: int
