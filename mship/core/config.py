"""Typed settings loading and access.

This module provides dataclasses for the optional ``mship.toml`` file that
lives at the root of the application's source checkout. Every value has a
default matching the muesli project, so a checkout without the file works
out of the box.

Example ``mship.toml``::

    [project]
    name = "muesli"
    repo = "itsameandrea/muesli"

    [release]
    branches = ["main"]

    [[release.backends]]
    name = "cpu"
    features = []

    [[release.backends]]
    name = "cuda"
    features = ["cuda"]

    [gates]
    commands = [["cargo", "test"]]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_list, get_str, get_str_list, get_table

__all__ = [
    "Backend",
    "GatesSettings",
    "InstallSettings",
    "ProjectSettings",
    "ReleaseSettings",
    "Settings",
    "SettingsError",
    "SETTINGS_FILE",
    "load_settings",
]

SETTINGS_FILE = "mship.toml"

# -----------------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------------

DEFAULT_PROJECT = "muesli"
DEFAULT_REPO = "itsameandrea/muesli"
DEFAULT_DAEMON_PATTERN = "muesli daemon"
DEFAULT_RELEASE_BRANCHES = ("main", "master")
DEFAULT_SETTLE_SECONDS = 1.0

DEFAULT_GATES: tuple[tuple[str, ...], ...] = (
    ("cargo", "fmt", "--check"),
    ("cargo", "clippy", "--", "-D", "warnings"),
    ("cargo", "test"),
)


@dataclass(frozen=True, slots=True)
class SettingsError:
    """Error when settings cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Backend:
    """A compute backend and the cargo features that select it."""

    name: str
    features: tuple[str, ...] = ()

    @property
    def is_cpu(self) -> bool:
        return not self.features


def _default_backends() -> tuple[Backend, ...]:
    return (Backend("cpu"), Backend("vulkan", ("vulkan",)))


@dataclass(frozen=True, slots=True)
class ProjectSettings:
    name: str = DEFAULT_PROJECT
    repo: str = DEFAULT_REPO  # owner/name
    manifest: str = "Cargo.toml"
    lockfile: str = "Cargo.lock"
    daemon_pattern: str = DEFAULT_DAEMON_PATTERN

    @property
    def clone_url(self) -> str:
        return f"https://github.com/{self.repo}.git"

    @property
    def release_url_base(self) -> str:
        return f"https://github.com/{self.repo}/releases"


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    branches: tuple[str, ...] = DEFAULT_RELEASE_BRANCHES
    remote: str = "origin"
    staging_dir: str = "release"
    platform: str = "linux-x86_64"
    build_trigger: str = "build.rs"
    install_backend: str = "cpu"
    backends: tuple[Backend, ...] = field(default_factory=_default_backends)


@dataclass(frozen=True, slots=True)
class GatesSettings:
    commands: tuple[tuple[str, ...], ...] = DEFAULT_GATES


@dataclass(frozen=True, slots=True)
class InstallSettings:
    settle_seconds: float = DEFAULT_SETTLE_SECONDS


@dataclass(frozen=True, slots=True)
class Settings:
    """Main settings container."""

    project: ProjectSettings = field(default_factory=ProjectSettings)
    release: ReleaseSettings = field(default_factory=ReleaseSettings)
    gates: GatesSettings = field(default_factory=GatesSettings)
    install: InstallSettings = field(default_factory=InstallSettings)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Settings:
        """Create Settings from a mapping (parsed TOML).

        Raises:
            ValueError: If a present value has the wrong shape.
        """
        project: StrDict = get_table(data, "project") or {}
        release: StrDict = get_table(data, "release") or {}
        gates: StrDict = get_table(data, "gates") or {}
        install: StrDict = get_table(data, "install") or {}

        branches = get_str_list(release, "branches")
        settle = get_float(install, "settle_seconds")
        if settle is not None and settle < 0:
            raise ValueError("install.settle_seconds must be >= 0")

        return cls(
            project=ProjectSettings(
                name=get_str(project, "name") or DEFAULT_PROJECT,
                repo=get_str(project, "repo") or DEFAULT_REPO,
                manifest=get_str(project, "manifest") or "Cargo.toml",
                lockfile=get_str(project, "lockfile") or "Cargo.lock",
                daemon_pattern=get_str(project, "daemon_pattern") or DEFAULT_DAEMON_PATTERN,
            ),
            release=ReleaseSettings(
                branches=tuple(branches) if branches else DEFAULT_RELEASE_BRANCHES,
                remote=get_str(release, "remote") or "origin",
                staging_dir=get_str(release, "staging_dir") or "release",
                platform=get_str(release, "platform") or "linux-x86_64",
                build_trigger=get_str(release, "build_trigger") or "build.rs",
                install_backend=get_str(release, "install_backend") or "cpu",
                backends=_parse_backends(release),
            ),
            gates=GatesSettings(commands=_parse_gates(gates)),
            install=InstallSettings(
                settle_seconds=settle if settle is not None else DEFAULT_SETTLE_SECONDS,
            ),
        )

    def backend(self, name: str) -> Backend | None:
        for b in self.release.backends:
            if b.name == name:
                return b
        return None


def _parse_backends(release: Mapping[str, object]) -> tuple[Backend, ...]:
    raw = get_list(release, "backends")
    if raw is None:
        return _default_backends()

    backends: list[Backend] = []
    for item in raw:
        table = as_str_dict(item)
        if table is None:
            raise ValueError("release.backends entries must be tables")
        name = get_str(table, "name")
        if name is None:
            raise ValueError("release.backends entry is missing 'name'")
        features = get_str_list(table, "features") or []
        backends.append(Backend(name=name, features=tuple(features)))

    # The CPU baseline is always part of a release.
    if not any(b.is_cpu for b in backends):
        backends.insert(0, Backend("cpu"))
    return tuple(backends)


def _parse_gates(gates: Mapping[str, object]) -> tuple[tuple[str, ...], ...]:
    raw = get_list(gates, "commands")
    if raw is None:
        return DEFAULT_GATES

    out: list[tuple[str, ...]] = []
    for item in raw:
        argv = get_str_list({"argv": item}, "argv")
        if not argv:
            raise ValueError("gates.commands entries must be non-empty string lists")
        out.append(tuple(argv))
    return tuple(out)


def _parse_toml(path: Path) -> Result[StrDict, SettingsError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(SettingsError("Settings root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(SettingsError(f"Settings file not found: {path}", path=path))
    except PermissionError:
        return Err(SettingsError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(SettingsError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(SettingsError(f"Error reading settings: {e}", path=path))


def load_settings(repo_root: Path) -> Result[Settings, SettingsError]:
    """Load ``mship.toml`` from a checkout, or defaults if it is absent.

    Args:
        repo_root: Root of the application's source checkout.

    Returns:
        Ok(Settings) on success, Err(SettingsError) if the file exists but
        cannot be read or has an invalid structure.
    """
    path = repo_root / SETTINGS_FILE
    if not path.exists():
        return Ok(Settings())

    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Settings.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(SettingsError(f"Invalid settings structure: {e}", path=path))
