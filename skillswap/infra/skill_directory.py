"""
SkillDirectory implementations — the engine's read-only view of skills.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

import database as db
from skillswap.core.errors import StoreError
from skillswap.core.models import SkillInfo, SkillKind


class InMemorySkillDirectory:
    """Skill listings held in a dict. Used for tests and the demo seed."""

    def __init__(self, skills: Optional[list[SkillInfo]] = None):
        self._skills: dict[str, SkillInfo] = {s.skill_id: s for s in skills or []}

    def add(
        self,
        skill_id: str,
        owner_id: str,
        name: str,
        approved: bool = True,
        kind: SkillKind = SkillKind.OFFERED,
    ) -> SkillInfo:
        skill = SkillInfo(
            skill_id=skill_id, owner_id=owner_id, approved=approved, name=name, kind=kind,
        )
        self._skills[skill_id] = skill
        return skill

    def remove(self, skill_id: str) -> None:
        self._skills.pop(skill_id, None)

    async def get_skill(self, skill_id: str) -> Optional[SkillInfo]:
        return self._skills.get(skill_id)


class SqlSkillDirectory:
    """Reads the ``skills`` table off the event loop."""

    async def get_skill(self, skill_id: str) -> Optional[SkillInfo]:
        try:
            loop = asyncio.get_running_loop()
            row = await loop.run_in_executor(None, lambda: db.get_skill(skill_id))
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load skill {skill_id}") from e
        return row.to_info() if row else None
