"""
EngineBuilder — convenience factory for assembling a SwapLifecycleEngine
with all its collaborators.

Defaults are in-memory so a headless engine needs no setup at all::

    from skillswap import EngineBuilder

    engine = EngineBuilder().with_skill_directory(my_directory).build()
    swap = await engine.propose("alice", "bob", "skill_guitar", "skill_spanish")
"""

from __future__ import annotations

import logging

from skillswap.core.engine import SwapLifecycleEngine
from skillswap.core.protocols import NotificationDispatcher, SkillDirectory, SwapStore
from skillswap.infra.config import SkillSwapConfig
from skillswap.infra.event_pusher import NullDispatcher
from skillswap.infra.skill_directory import InMemorySkillDirectory, SqlSkillDirectory
from skillswap.infra.swap_store import InMemorySwapStore, SqlSwapStore

logger = logging.getLogger(__name__)


class EngineBuilder:
    """Fluent builder for SwapLifecycleEngine."""

    def __init__(self) -> None:
        self._store: SwapStore | None = None
        self._skills: SkillDirectory | None = None
        self._dispatcher: NotificationDispatcher | None = None

    def with_store(self, store: SwapStore) -> EngineBuilder:
        self._store = store
        return self

    def with_skill_directory(self, skills: SkillDirectory) -> EngineBuilder:
        self._skills = skills
        return self

    def with_dispatcher(self, dispatcher: NotificationDispatcher) -> EngineBuilder:
        self._dispatcher = dispatcher
        return self

    def from_config(self, config: SkillSwapConfig) -> EngineBuilder:
        """Pick SQL-backed store and directory when a database is configured."""
        if config.uses_database():
            import database as db
            db.configure(config.database_url)
            self._store = self._store or SqlSwapStore()
            self._skills = self._skills or SqlSkillDirectory()
        return self

    def build(self) -> SwapLifecycleEngine:
        store = self._store or InMemorySwapStore()
        skills = self._skills or InMemorySkillDirectory()
        dispatcher = self._dispatcher or NullDispatcher()

        logger.info(
            "EngineBuilder: built engine (store=%s, skills=%s, dispatcher=%s)",
            type(store).__name__,
            type(skills).__name__,
            type(dispatcher).__name__,
        )
        return SwapLifecycleEngine(store=store, skills=skills, dispatcher=dispatcher)
