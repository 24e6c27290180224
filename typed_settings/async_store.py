from __future__ import annotations

import asyncio
from typing import Any

from .kinds import ValueKind
from .store import TypedSettingsStore


class AsyncTypedSettingsStore:
    """
    Async wrapper around TypedSettingsStore.
    Uses asyncio.to_thread so flushes to disk never block the event loop.
    """

    def __init__(self, store: TypedSettingsStore) -> None:
        self._store = store

    async def get_value_or_default(
        self, key: str, default: Any = None, *, kind: ValueKind | str | type | None = None
    ) -> Any:
        return await asyncio.to_thread(self._store.get_value_or_default, key, default, kind=kind)

    async def add_or_update_value(
        self, key: str, value: Any, *, kind: ValueKind | str | type | None = None
    ) -> bool:
        return await asyncio.to_thread(self._store.add_or_update_value, key, value, kind=kind)

    async def remove_value(self, key: str) -> None:
        await asyncio.to_thread(self._store.remove_value, key)

    async def contains(self, key: str) -> bool:
        return await asyncio.to_thread(self._store.contains, key)
