from __future__ import annotations

from pathlib import Path
import sys


import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


_ENV_VARS = (
    "TYPED_SETTINGS_APP_NAME",
    "TYPED_SETTINGS_BACKEND",
    "TYPED_SETTINGS_PATH",
    "TYPED_SETTINGS_FLUSH_ON_WRITE",
)


@pytest.fixture
def backend():
    from typed_settings.memory_store import MemoryPreferenceBackend

    class CountingBackend(MemoryPreferenceBackend):
        def __init__(self) -> None:
            super().__init__()
            self.flush_count = 0

        def flush(self) -> None:
            self.flush_count += 1

    return CountingBackend()


@pytest.fixture
def store(backend):
    from typed_settings.store import TypedSettingsStore

    return TypedSettingsStore(backend)


@pytest.fixture
def prefs_path(tmp_path: Path) -> Path:
    return tmp_path / "prefs" / "settings.json"


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Clear settings env vars and point the platform config dir at a temp directory.
    """
    for name in _ENV_VARS:
        # setenv first so teardown also removes anything an env file adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "xdg"))
    return tmp_path
