from __future__ import annotations
import os
from pathlib import Path

APP_NAME = "PSCToolbox"

# Explicit override for the data root (CI, shared workstations)
HOME_ENV = "PSC_TOOLBOX_HOME"

def user_data_dir() -> Path:
    """
    Writable location for logs, run packages and settings.
    Resolution: $PSC_TOOLBOX_HOME, else %LOCALAPPDATA%\\PSCToolbox\\ (APPDATA, then home, as fallbacks).
    """
    override = os.environ.get(HOME_ENV)
    if override:
        p = Path(override)
    else:
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA") or str(Path.home())
        p = Path(base) / APP_NAME
    p.mkdir(parents=True, exist_ok=True)
    return p

def logs_dir() -> Path:
    p = user_data_dir() / "logs"
    p.mkdir(parents=True, exist_ok=True)
    return p

def tool_data_dir(tool_id: str) -> Path:
    p = user_data_dir() / tool_id
    p.mkdir(parents=True, exist_ok=True)
    return p

def settings_path() -> Path:
    return user_data_dir() / "settings.json"
