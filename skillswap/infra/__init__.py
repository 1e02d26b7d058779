from .config import SkillSwapConfig
from .event_pusher import LoggingDispatcher, NullDispatcher, WebSocketDispatcher
from .skill_directory import InMemorySkillDirectory, SqlSkillDirectory
from .swap_store import InMemorySwapStore, SqlSwapStore

__all__ = [
    "SkillSwapConfig",
    "LoggingDispatcher", "NullDispatcher", "WebSocketDispatcher",
    "InMemorySkillDirectory", "SqlSkillDirectory",
    "InMemorySwapStore", "SqlSwapStore",
]
