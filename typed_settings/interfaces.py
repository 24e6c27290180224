from __future__ import annotations

from typing import Any, Protocol

from .kinds import NativeValue, ValueKind


class PreferenceBackend(Protocol):
    """
    Minimal native preference store: string keys mapped to bool/int/float/str.
    """

    def contains(self, key: str) -> bool:
        ...

    def get(self, key: str) -> NativeValue | None:
        """Return the stored native value, or None if the key is absent."""
        ...

    def set(self, key: str, value: NativeValue) -> None:
        ...

    def remove(self, key: str) -> None:
        """Delete the key if present."""
        ...

    def flush(self) -> None:
        """Push pending changes to stable storage. May raise."""
        ...


class Settings(Protocol):
    def get_value_or_default(
        self, key: str, default: Any = None, *, kind: ValueKind | str | type | None = None
    ) -> Any:
        ...

    def add_or_update_value(
        self, key: str, value: Any, *, kind: ValueKind | str | type | None = None
    ) -> bool:
        ...

    def remove_value(self, key: str) -> None:
        ...

    def contains(self, key: str) -> bool:
        ...

    def save(self) -> None:
        ...
