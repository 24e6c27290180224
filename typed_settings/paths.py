from __future__ import annotations

import os
from pathlib import Path


def config_home() -> Path:
    """Per-user configuration root for the current platform."""
    if os.name == "nt":
        return Path(os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming")
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


def default_settings_path(app_name: str) -> Path:
    return config_home() / app_name / "settings.json"
