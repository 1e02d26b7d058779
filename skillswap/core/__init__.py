"""Core lifecycle layer — swap state machine, events, models, errors."""

from .errors import (
    SkillSwapError,
    SwapError,
    SelfSwapNotAllowed,
    InvalidSkillOwnership,
    DuplicateSwapRequest,
    SwapNotFound,
    NotAuthorized,
    InvalidStateTransition,
    StoreError,
    ConfigError,
)
from .events import EventType, SwapEvent
from .models import (
    SkillInfo,
    SkillKind,
    SwapRequest,
    SwapStatus,
    generate_id,
)
from .protocols import (
    NotificationDispatcher,
    SkillDirectory,
    SwapStore,
)

__all__ = [
    "SkillSwapError", "SwapError", "SelfSwapNotAllowed", "InvalidSkillOwnership",
    "DuplicateSwapRequest", "SwapNotFound", "NotAuthorized",
    "InvalidStateTransition", "StoreError", "ConfigError",
    "EventType", "SwapEvent",
    "SkillInfo", "SkillKind", "SwapRequest", "SwapStatus", "generate_id",
    "NotificationDispatcher", "SkillDirectory", "SwapStore",
]
