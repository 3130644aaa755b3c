"""Platform-aware path utilities.

Locates the directories mship touches on the operator's machine: the
install directory for the application binary, the application's own config
and data roots, the systemd user unit directory, and the window-manager /
status-bar config directories used by the environment integration step.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from .detection import is_macos

__all__ = [
    "INSTALL_DIR_ENV",
    "app_config_dir",
    "app_data_dir",
    "home",
    "hypr_config_dir",
    "install_dir",
    "is_on_path",
    "systemd_user_dir",
    "waybar_config_dir",
]

INSTALL_DIR_ENV = "INSTALL_DIR"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get the user's home directory (HOME first, for CI/containers)."""
    home_env = os.environ.get("HOME")
    if home_env:
        return Path(home_env)
    return Path.home()


def _xdg_config_home() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return home() / ".config"


def install_dir() -> Path:
    """Directory the application binary is installed into.

    ``$INSTALL_DIR`` overrides the default ``~/.local/bin``.
    """
    override = os.environ.get(INSTALL_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return home() / ".local" / "bin"


def app_config_dir(app: str) -> Path:
    """The application's config directory (holds ``config.toml``)."""
    if is_macos():
        return home() / "Library" / "Application Support" / app
    return _xdg_config_home() / app


def app_data_dir(app: str) -> Path:
    """The application's data directory (models, recordings, notes)."""
    if is_macos():
        return home() / "Library" / "Application Support" / app
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / app
    return home() / ".local" / "share" / app


def systemd_user_dir() -> Path:
    return _xdg_config_home() / "systemd" / "user"


def hypr_config_dir() -> Path:
    return _xdg_config_home() / "hypr"


def waybar_config_dir() -> Path:
    return _xdg_config_home() / "waybar"


def is_on_path(directory: Path, path_env: str | None = None) -> bool:
    """Check whether ``directory`` is an entry of PATH. Never mutates PATH."""
    raw = os.environ.get("PATH", "") if path_env is None else path_env
    target = os.path.normpath(str(directory))
    return any(os.path.normpath(p) == target for p in raw.split(os.pathsep) if p)


def clear_caches() -> None:
    """Clear cached paths (for tests that change HOME)."""
    home.cache_clear()
