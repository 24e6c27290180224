from __future__ import annotations

import logging
import threading
import warnings
from typing import Any

from .interfaces import PreferenceBackend, Settings
from .kinds import NativeValue, ValueKind, codec_for, resolve_kind

logger = logging.getLogger(__name__)


def _same_native(a: NativeValue | None, b: NativeValue) -> bool:
    # True == 1 and 1 == 1.0 in Python; a stored value only matches if the type does too.
    return type(a) is type(b) and a == b


class TypedSettingsStore(Settings):
    """
    Typed accessor over an injected PreferenceBackend.

    Every backend access holds one non-reentrant lock; helpers suffixed
    _locked assume it is already held.

    add_or_update_value returns True only when something actually changed:
    the key was created, its stored value differs, or a default-valued write
    removed an existing key.
    """

    def __init__(self, backend: PreferenceBackend, *, flush_on_write: bool = True):
        self._backend = backend
        self._flush_on_write = flush_on_write
        self._lock = threading.Lock()

    @property
    def backend(self) -> PreferenceBackend:
        return self._backend

    def get_value_or_default(
        self, key: str, default: Any = None, *, kind: ValueKind | str | type | None = None
    ) -> Any:
        resolved = resolve_kind(default, kind)
        codec = codec_for(resolved)
        with self._lock:
            if not self._backend.contains(key):
                return default
            stored = self._backend.get(key)
        if stored is None:
            return default
        return codec.decode(stored, default)

    def add_or_update_value(
        self, key: str, value: Any, *, kind: ValueKind | str | type | None = None
    ) -> bool:
        resolved = resolve_kind(value, kind)
        codec = codec_for(resolved)
        encoded = None if value is None else codec.encode(value)
        with self._lock:
            if encoded is None or codec.is_default(value):
                return self._remove_locked(key)

            if self._backend.contains(key) and _same_native(self._backend.get(key), encoded):
                return False

            self._backend.set(key, encoded)
            self._flush_locked(key)
            return True

    def remove_value(self, key: str) -> None:
        with self._lock:
            self._remove_locked(key)

    def contains(self, key: str) -> bool:
        with self._lock:
            return self._backend.contains(key)

    def save(self) -> None:
        """Deprecated: every write is already persisted."""
        warnings.warn(
            "save() is deprecated; settings are persisted by add_or_update_value and remove_value.",
            DeprecationWarning,
            stacklevel=2,
        )

    def _remove_locked(self, key: str) -> bool:
        if not self._backend.contains(key):
            return False
        self._backend.remove(key)
        self._flush_locked(key)
        return True

    def _flush_locked(self, key: str) -> None:
        if not self._flush_on_write:
            return
        try:
            self._backend.flush()
        except Exception as e:
            logger.warning("Unable to save settings after changing %r: %r", key, e)
