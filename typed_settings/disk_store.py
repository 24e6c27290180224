from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr, ValidationError

from .interfaces import PreferenceBackend
from .json_store import atomic_write_json, read_json
from .kinds import NativeValue
from .locks import PREFERENCE_FILE_LOCKS

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = 1


class PreferencesDocument(BaseModel):
    """
    Mirrors the on-disk preferences file exactly:
      {
        "values": { "<key>": true | 1 | 1.5 | "text" },
        "version": 1
      }
    """

    version: int = DOCUMENT_VERSION
    values: dict[str, StrictBool | StrictInt | StrictFloat | StrictStr] = Field(default_factory=dict)

    @classmethod
    def from_disk_doc(cls, doc: Mapping[str, Any]) -> "PreferencesDocument":
        return cls.model_validate(doc)

    def to_disk_doc(self) -> dict[str, Any]:
        # Python mode keeps NaN/inf floats; json.dump writes them as constants.
        return self.model_dump()


class JsonFilePreferenceBackend(PreferenceBackend):
    """
    Preference store cached in memory and flushed to a single JSON file.

    - Loads once at construction (missing/corrupt file -> empty store).
    - set()/remove() only touch the cache and record the key as pending.
    - flush() re-reads the file under the path lock, applies the pending keys
      on top of it and writes atomically, so instances sharing a file keep
      each other's keys.
    - flush() errors propagate to the caller; pending keys are kept for the
      next flush.

    Use for_path() to share one cached instance per file within a process.
    """

    _instances: dict[str, "JsonFilePreferenceBackend"] = {}
    _instances_guard = threading.Lock()

    def __init__(self, path: Path):
        self._path = Path(path)
        self._values: dict[str, NativeValue] = {}
        self._pending: set[str] = set()
        # guards the cache when several stores share this instance
        self._guard = threading.Lock()
        self.reload()

    @classmethod
    def for_path(cls, path: Path) -> "JsonFilePreferenceBackend":
        key = str(Path(path).resolve())
        with cls._instances_guard:
            backend = cls._instances.get(key)
            if backend is None:
                backend = cls(Path(path))
                cls._instances[key] = backend
            return backend

    @property
    def path(self) -> Path:
        return self._path

    def reload(self) -> None:
        """Replace the cache with the file's contents, dropping pending changes."""
        lock = PREFERENCE_FILE_LOCKS.lock_for(self._path)
        with self._guard, lock:
            self._values = self._read_values()
            self._pending.clear()
        logger.debug("Loaded %d preferences from %s", len(self._values), self._path)

    def _read_values(self) -> dict[str, NativeValue]:
        raw = read_json(self._path)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("Preferences file %s is not a JSON object; starting empty", self._path)
            return {}
        try:
            doc = PreferencesDocument.from_disk_doc(raw)
        except ValidationError as e:
            logger.warning("Preferences file %s failed validation; starting empty: %s", self._path, e)
            return {}
        return dict(doc.values)

    def contains(self, key: str) -> bool:
        return key in self._values

    def get(self, key: str) -> NativeValue | None:
        return self._values.get(key)

    def set(self, key: str, value: NativeValue) -> None:
        with self._guard:
            self._values[key] = value
            self._pending.add(key)

    def remove(self, key: str) -> None:
        with self._guard:
            self._values.pop(key, None)
            self._pending.add(key)

    def flush(self) -> None:
        lock = PREFERENCE_FILE_LOCKS.lock_for(self._path)
        with self._guard, lock:
            merged = self._read_values()
            for key in self._pending:
                if key in self._values:
                    merged[key] = self._values[key]
                else:
                    merged.pop(key, None)
            doc = PreferencesDocument(values=merged)
            atomic_write_json(self._path, doc.to_disk_doc())
            self._values = merged
            self._pending.clear()
