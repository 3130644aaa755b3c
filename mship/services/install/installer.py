"""Install the application binary on the local machine.

The prebuilt variant for this machine is downloaded from the release
endpoint. If there is no release, or the download fails, the source is
cloned and built locally instead. Network calls are single-attempt: one
failure routes straight to the source build.

Checksum verification runs after the binary is in place. A mismatch is an
``IntegrityWarning`` (the install still completes) unless strict mode is on.
"""

from __future__ import annotations

import re
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from mship.core.config import Settings
from mship.core.result import Err, Ok, Result
from mship.core.structured import get_str
from mship.output.console import ConsoleProtocol, Style
from mship.platform.detection import PlatformInfo
from mship.platform.paths import is_on_path
from mship.services.binary import query_version, replace_binary, stop_running_instance
from mship.services.checksums import CHECKSUM_SUFFIX, parse_checksum, sha256_file
from mship.services.install.errors import InstallError, IntegrityWarning
from mship.services.install.source_build import build_from_source
from mship.services.install.variant import Variant, resolve_variant
from mship.tools.http import HttpClient

InstallSource = Literal["prebuilt", "source"]

_BARE_VERSION = re.compile(r"^\d+\.\d+\.\d+$")


@dataclass(frozen=True, slots=True)
class InstallReport:
    binary: Path
    variant: Variant
    tag: str | None
    source: InstallSource
    version: str | None
    checksum_verified: bool
    integrity: IntegrityWarning | None
    on_path: bool


def release_index_url(repo: str) -> str:
    return f"https://api.github.com/repos/{repo}/releases/latest"


def download_url(*, repo: str, tag: str, artifact: str) -> str:
    return f"https://github.com/{repo}/releases/download/{tag}/{artifact}"


def normalize_tag(version: str) -> str:
    """``1.2.3`` -> ``v1.2.3``; anything else is used as given."""
    v = version.strip()
    if _BARE_VERSION.match(v):
        return f"v{v}"
    return v


def wants_latest(version: str | None) -> bool:
    """No version, or the literal ``latest``, means ask the release index."""
    return version is None or not version.strip() or version.strip().lower() == "latest"


def resolve_latest_tag(*, http: HttpClient, repo: str) -> str | None:
    """Latest release tag from the release index, or None if there is none."""
    result = http.get_json(release_index_url(repo))
    if isinstance(result, Err):
        return None
    return get_str(result.value, "tag_name")


def _verify_checksum(
    *,
    http: HttpClient,
    url: str,
    installed: Path,
    console: ConsoleProtocol,
) -> tuple[bool, IntegrityWarning | None]:
    sidecar = http.get_text(url + CHECKSUM_SUFFIX)
    if isinstance(sidecar, Err):
        console.warning(f"checksum unavailable ({sidecar.error})")
        return False, None

    expected = parse_checksum(sidecar.value)
    if expected is None:
        console.warning(f"checksum file is malformed: {url}{CHECKSUM_SUFFIX}")
        return False, None

    actual = sha256_file(installed)
    if actual != expected:
        warning = IntegrityWarning(path=installed, expected=expected, actual=actual)
        console.warning(str(warning))
        return False, warning

    console.success("checksum verified")
    return True, None


def install(
    *,
    settings: Settings,
    version: str | None,
    target_dir: Path,
    host: PlatformInfo,
    gpu: bool,
    http: HttpClient,
    console: ConsoleProtocol,
    strict_checksum: bool = False,
    sleep: Callable[[float], None] = time.sleep,
) -> Result[InstallReport, InstallError]:
    project = settings.project

    resolved = resolve_variant(platform=host.platform, arch=host.arch, gpu=gpu)
    if isinstance(resolved, Err):
        return resolved
    variant = resolved.value

    if wants_latest(version):
        tag = resolve_latest_tag(http=http, repo=project.repo)
    else:
        assert version is not None
        tag = normalize_tag(version)
    if tag is None:
        console.warning("no releases found, building from source")

    dest = target_dir / project.name
    source: InstallSource = "prebuilt"
    url: str | None = None

    with tempfile.TemporaryDirectory(prefix="mship-install-") as tmp:
        work_dir = Path(tmp)
        candidate: Path | None = None

        if tag is not None:
            url = download_url(repo=project.repo, tag=tag, artifact=variant.artifact_name(project.name))
            console.info(f"installing {project.name} {tag} ({variant.name})")
            console.print(f"downloading {url}", Style.DIM)
            downloaded = http.download(url, work_dir / variant.artifact_name(project.name))
            if isinstance(downloaded, Err):
                console.warning(f"download failed ({downloaded.error}), building from source")
            else:
                candidate = downloaded.value

        if candidate is None:
            source = "source"
            built = build_from_source(project=project, tag=tag, work_dir=work_dir, console=console)
            if isinstance(built, Err):
                return built
            candidate = built.value

        stop_running_instance(
            pattern=project.daemon_pattern,
            settle_seconds=settings.install.settle_seconds,
            console=console,
            sleep=sleep,
        )

        replaced = replace_binary(source=candidate, dest=dest)
        if isinstance(replaced, Err):
            return Err(InstallError(kind="install_failed", message=replaced.error.message, hint=replaced.error.hint))

    verified = False
    integrity: IntegrityWarning | None = None
    if source == "prebuilt" and url is not None:
        verified, integrity = _verify_checksum(http=http, url=url, installed=dest, console=console)

    installed_version = query_version(dest)
    shown = installed_version.value if isinstance(installed_version, Ok) else None
    console.success(f"installed: {shown or 'unknown'}")
    console.print(f"location:  {dest}", Style.DIM)

    on_path = is_on_path(target_dir)
    if not on_path:
        console.warning(f"{target_dir} is not in your PATH")
        console.print("Add this to your shell config:", Style.DIM)
        console.print(f'  export PATH="$PATH:{target_dir}"')

    if integrity is not None and strict_checksum:
        return Err(
            InstallError(
                kind="integrity_failed",
                message=f"{integrity} (binary was installed at {dest})",
                hint=f"sha256sum {dest}",
            )
        )

    return Ok(
        InstallReport(
            binary=dest,
            variant=variant,
            tag=tag,
            source=source,
            version=shown,
            checksum_verified=verified,
            integrity=integrity,
            on_path=on_path,
        )
    )
