from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv

from .config import BACKEND_JSON, BACKEND_MEMORY, BACKENDS, StoreConfig, get_config
from .disk_store import JsonFilePreferenceBackend
from .errors import SettingsError
from .interfaces import PreferenceBackend
from .memory_store import MemoryPreferenceBackend
from .store import TypedSettingsStore

logger = logging.getLogger(__name__)


def create_backend(config: StoreConfig) -> PreferenceBackend:
    if config.backend == BACKEND_JSON:
        return JsonFilePreferenceBackend.for_path(config.path)
    if config.backend == BACKEND_MEMORY:
        return MemoryPreferenceBackend()
    raise SettingsError(f"Unknown settings backend {config.backend!r}; expected one of {', '.join(BACKENDS)}")


def create_settings(config: StoreConfig | None = None, *, env_file: str | Path | None = None) -> TypedSettingsStore:
    """
    Build a TypedSettingsStore from explicit config, or from the environment
    (optionally seeded from an env file) when no config is given.
    """
    if config is None:
        if env_file is not None:
            load_dotenv(env_file)
        config = get_config()

    backend = create_backend(config)
    logger.info("Settings backend %s for %s", config.backend, config.app_name)
    return TypedSettingsStore(backend, flush_on_write=config.flush_on_write)
