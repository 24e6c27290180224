from __future__ import annotations

from .async_store import AsyncTypedSettingsStore
from .config import StoreConfig, get_config
from .disk_store import JsonFilePreferenceBackend, PreferencesDocument
from .errors import SettingsError, SettingsValueError, UnsupportedTypeError
from .factory import create_backend, create_settings
from .interfaces import PreferenceBackend, Settings
from .kinds import EMPTY_UUID, ValueKind, datetime_to_ticks, ticks_to_datetime
from .memory_store import MemoryPreferenceBackend
from .store import TypedSettingsStore

__all__ = [
    "AsyncTypedSettingsStore",
    "StoreConfig",
    "get_config",
    "JsonFilePreferenceBackend",
    "PreferencesDocument",
    "SettingsError",
    "SettingsValueError",
    "UnsupportedTypeError",
    "create_backend",
    "create_settings",
    "PreferenceBackend",
    "Settings",
    "EMPTY_UUID",
    "ValueKind",
    "datetime_to_ticks",
    "ticks_to_datetime",
    "MemoryPreferenceBackend",
    "TypedSettingsStore",
]
