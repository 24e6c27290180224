from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .paths import default_settings_path

BACKEND_JSON = "json"
BACKEND_MEMORY = "memory"
BACKENDS = (BACKEND_JSON, BACKEND_MEMORY)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class StoreConfig:
    app_name: str

    # "json" (file on disk) or "memory" (process-local)
    backend: str

    # Only used by the json backend
    path: Path

    # Flush to stable storage after every change
    flush_on_write: bool


def get_config() -> StoreConfig:
    app_name = os.getenv("TYPED_SETTINGS_APP_NAME", "").strip() or "TypedSettings"
    backend = os.getenv("TYPED_SETTINGS_BACKEND", BACKEND_JSON).strip().lower()

    raw_path = os.getenv("TYPED_SETTINGS_PATH", "").strip()
    path = Path(raw_path).expanduser() if raw_path else default_settings_path(app_name)

    flush_on_write = _env_bool("TYPED_SETTINGS_FLUSH_ON_WRITE", True)

    return StoreConfig(
        app_name=app_name,
        backend=backend,
        path=path,
        flush_on_write=flush_on_write,
    )
