"""
SkillSwap — swap lifecycle engine for a skill exchange platform.

Public API surface. Import everything you need from here::

    from skillswap import SwapLifecycleEngine, EngineBuilder, SwapStatus

Extension points (implement these Protocols to customize):

- ``SwapStore`` — persistence with atomic conditional status updates
- ``SkillDirectory`` — where skill ownership and approval come from
- ``NotificationDispatcher`` — custom live notification transport
"""

# -- Core engine --
from skillswap.core.engine import SwapLifecycleEngine, VALID_TRANSITIONS

# -- Data models --
from skillswap.core.models import SkillInfo, SkillKind, SwapRequest, SwapStatus

# -- Events --
from skillswap.core.events import EventType, SwapEvent

# -- Errors --
from skillswap.core.errors import (
    ConfigError,
    DuplicateSwapRequest,
    InvalidSkillOwnership,
    InvalidStateTransition,
    NotAuthorized,
    SelfSwapNotAllowed,
    SkillSwapError,
    StoreError,
    SwapError,
    SwapNotFound,
)

# -- Protocols (contracts for extension) --
from skillswap.core.protocols import NotificationDispatcher, SkillDirectory, SwapStore

# -- Builder --
from skillswap.builder import EngineBuilder

# -- Default implementations --
from skillswap.infra.event_pusher import (
    LoggingDispatcher,
    NullDispatcher,
    WebSocketDispatcher,
)
from skillswap.infra.skill_directory import InMemorySkillDirectory, SqlSkillDirectory
from skillswap.infra.swap_store import InMemorySwapStore, SqlSwapStore

__all__ = [
    # Engine
    "SwapLifecycleEngine",
    "VALID_TRANSITIONS",
    "EngineBuilder",
    # Models
    "SwapRequest",
    "SwapStatus",
    "SkillInfo",
    "SkillKind",
    # Events
    "SwapEvent",
    "EventType",
    # Errors
    "SkillSwapError",
    "SwapError",
    "SelfSwapNotAllowed",
    "InvalidSkillOwnership",
    "DuplicateSwapRequest",
    "SwapNotFound",
    "NotAuthorized",
    "InvalidStateTransition",
    "StoreError",
    "ConfigError",
    # Protocols
    "SwapStore",
    "SkillDirectory",
    "NotificationDispatcher",
    # Default implementations
    "NullDispatcher",
    "LoggingDispatcher",
    "WebSocketDispatcher",
    "InMemorySwapStore",
    "SqlSwapStore",
    "InMemorySkillDirectory",
    "SqlSkillDirectory",
]
