"""
SwapStore implementations.

- InMemorySwapStore: dict guarded by an asyncio.Lock (single process, tests)
- SqlSwapStore: SQLAlchemy-backed via the ``database`` module

Both make the duplicate check + insert, and the conditional status
update, atomic with respect to concurrent callers.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

import database as db
from skillswap.core.errors import StoreError
from skillswap.core.models import SwapRequest, SwapStatus

logger = logging.getLogger(__name__)


class InMemorySwapStore:
    """SwapStore keeping records in a dict. State is lost on restart."""

    def __init__(self):
        self._swaps: dict[str, SwapRequest] = {}
        self._lock = asyncio.Lock()

    async def insert_if_no_pending_duplicate(self, swap: SwapRequest) -> bool:
        async with self._lock:
            for existing in self._swaps.values():
                if existing.status == SwapStatus.PENDING and existing.matches_pair(
                    swap.requester_id, swap.responder_id,
                    swap.offered_skill_id, swap.wanted_skill_id,
                ):
                    return False
            self._swaps[swap.swap_id] = swap
            return True

    async def get(self, swap_id: str) -> Optional[SwapRequest]:
        return self._swaps.get(swap_id)

    async def compare_and_set_status(
        self,
        swap_id: str,
        expected: SwapStatus,
        new_status: SwapStatus,
        updated_at: datetime,
    ) -> Optional[SwapRequest]:
        async with self._lock:
            swap = self._swaps.get(swap_id)
            if swap is None or swap.status != expected:
                return None
            updated = swap.with_status(new_status, updated_at)
            self._swaps[swap_id] = updated
            return updated

    async def list_for_user(
        self, user_id: str, status: Optional[SwapStatus] = None,
    ) -> list[SwapRequest]:
        # Walk newest-inserted first so equal timestamps keep that order
        swaps = [
            s for s in reversed(list(self._swaps.values()))
            if s.involves(user_id) and (status is None or s.status == status)
        ]
        swaps.sort(key=lambda s: s.created_at, reverse=True)
        return swaps

    def __len__(self) -> int:
        return len(self._swaps)


class SqlSwapStore:
    """
    SwapStore backed by the ``swaps`` table.

    Status transitions are a single ``UPDATE ... WHERE status = expected``;
    the affected row count decides the winner. Every database call runs
    in the default executor so the event loop keeps serving other swaps.
    """

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: fn(*args))

    async def insert_if_no_pending_duplicate(self, swap: SwapRequest) -> bool:
        try:
            return await self._run(db.insert_swap_if_no_pending_duplicate, swap)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to insert swap {swap.swap_id}") from e

    async def get(self, swap_id: str) -> Optional[SwapRequest]:
        try:
            row = await self._run(db.get_swap, swap_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load swap {swap_id}") from e
        return row.to_model() if row else None

    async def compare_and_set_status(
        self,
        swap_id: str,
        expected: SwapStatus,
        new_status: SwapStatus,
        updated_at: datetime,
    ) -> Optional[SwapRequest]:
        try:
            row = await self._run(
                db.compare_and_set_swap_status,
                swap_id, expected.value, new_status.value, updated_at,
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to update swap {swap_id}") from e
        return row.to_model() if row else None

    async def list_for_user(
        self, user_id: str, status: Optional[SwapStatus] = None,
    ) -> list[SwapRequest]:
        try:
            rows = await self._run(
                db.list_swaps_for_user, user_id, status.value if status else None,
            )
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to list swaps for {user_id}") from e
        return [r.to_model() for r in rows]
