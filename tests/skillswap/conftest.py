"""
Shared test fixtures for all SkillSwap tests.

Provides a recording dispatcher, fake live connections, sample skill
listings, and an engine wired to in-memory collaborators.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import pytest

from skillswap.core.engine import SwapLifecycleEngine
from skillswap.core.models import SkillInfo, SkillKind, SwapRequest
from skillswap.infra.skill_directory import InMemorySkillDirectory
from skillswap.infra.swap_store import InMemorySwapStore


# ============ Sample Data ============

ALICE = "user_alice"
BOB = "user_bob"
CAROL = "user_carol"

SAMPLE_SKILLS = [
    SkillInfo(skill_id="skill_guitar", owner_id=ALICE, approved=True, name="Guitar"),
    SkillInfo(skill_id="skill_drawing", owner_id=ALICE, approved=True, name="Drawing"),
    SkillInfo(
        skill_id="skill_cooking", owner_id=ALICE, approved=True, name="Cooking",
        kind=SkillKind.WANTED,
    ),
    SkillInfo(skill_id="skill_spanish", owner_id=BOB, approved=True, name="Spanish"),
    SkillInfo(skill_id="skill_piano", owner_id=BOB, approved=False, name="Piano"),
    SkillInfo(skill_id="skill_chess", owner_id=CAROL, approved=True, name="Chess"),
]


# ============ Mock Dispatcher ============

class MockDispatcher:
    """Collects dispatched notifications for test assertions."""

    def __init__(self):
        self.dispatched: list[tuple[str, str, dict[str, Any]]] = []

    async def dispatch(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        self.dispatched.append((user_id, event_name, payload))

    def for_user(self, user_id: str) -> list[tuple[str, dict[str, Any]]]:
        return [(name, payload) for uid, name, payload in self.dispatched if uid == user_id]

    def by_event(self, event_name: str) -> list[tuple[str, dict[str, Any]]]:
        return [(uid, payload) for uid, name, payload in self.dispatched if name == event_name]

    def reset(self) -> None:
        self.dispatched.clear()


class FailingDispatcher:
    """Dispatcher that breaks its contract by raising."""

    def __init__(self):
        self.calls = 0

    async def dispatch(self, user_id: str, event_name: str, payload: dict[str, Any]) -> None:
        self.calls += 1
        raise RuntimeError("transport down")


# ============ Fake Connection ============

class FakeConnection:
    """Stands in for a WebSocket: records sent messages, optionally fails."""

    def __init__(self, fail: bool = False, delay: Optional[float] = None):
        self.sent: list[dict[str, Any]] = []
        self._fail = fail
        self._delay = delay

    async def send_json(self, message: dict[str, Any]) -> None:
        if self._delay is not None:
            await asyncio.sleep(self._delay)
        if self._fail:
            raise ConnectionError("socket closed")
        self.sent.append(message)


# ============ Yielding Store ============

class YieldingSwapStore(InMemorySwapStore):
    """Yields to the event loop after every read.

    Lets two concurrent transitions both observe ``pending`` before
    either writes, so the conditional update has to pick the winner.
    """

    async def get(self, swap_id: str) -> Optional[SwapRequest]:
        swap = await super().get(swap_id)
        await asyncio.sleep(0)
        return swap


# ============ Fixtures ============

@pytest.fixture
def skills() -> InMemorySkillDirectory:
    return InMemorySkillDirectory(list(SAMPLE_SKILLS))


@pytest.fixture
def store() -> InMemorySwapStore:
    return InMemorySwapStore()


@pytest.fixture
def dispatcher() -> MockDispatcher:
    return MockDispatcher()


@pytest.fixture
def engine(
    store: InMemorySwapStore,
    skills: InMemorySkillDirectory,
    dispatcher: MockDispatcher,
) -> SwapLifecycleEngine:
    return SwapLifecycleEngine(store=store, skills=skills, dispatcher=dispatcher)
