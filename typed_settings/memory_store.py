from __future__ import annotations

from typing import Mapping

from .interfaces import PreferenceBackend
from .kinds import NativeValue


class MemoryPreferenceBackend(PreferenceBackend):
    """
    Process-local preference store. Values persist implicitly for the life of
    the object, so flush() has nothing to do.
    """

    def __init__(self, initial: Mapping[str, NativeValue] | None = None):
        self._values: dict[str, NativeValue] = dict(initial or {})

    def contains(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str) -> NativeValue | None:
        return self._values.get(key)

    def set(self, key: str, value: NativeValue) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def flush(self) -> None:
        pass

    def snapshot(self) -> dict[str, NativeValue]:
        return dict(self._values)
