"""Map the local machine to a prebuilt release variant.

Resolution is total over the support table and never touches the network.
"""

from __future__ import annotations

from dataclasses import dataclass

from mship.core.result import Err, Ok, Result
from mship.platform.detection import Arch, Platform
from mship.services.install.errors import InstallError


@dataclass(frozen=True, slots=True)
class Variant:
    name: str

    def artifact_name(self, project: str) -> str:
        return f"{project}-{self.name}"


# (platform, arch, gpu) -> variant; gpu is None where it does not matter
_SUPPORT_TABLE: dict[tuple[Platform, Arch, bool | None], str] = {
    (Platform.LINUX, Arch.X64, True): "linux-x86_64-vulkan",
    (Platform.LINUX, Arch.X64, False): "linux-x86_64-cpu",
    (Platform.MACOS, Arch.X64, None): "macos-x86_64",
    (Platform.MACOS, Arch.ARM64, None): "macos-arm64",
}


def resolve_variant(*, platform: Platform, arch: Arch, gpu: bool) -> Result[Variant, InstallError]:
    name = _SUPPORT_TABLE.get((platform, arch, gpu)) or _SUPPORT_TABLE.get((platform, arch, None))
    if name is None:
        return Err(
            InstallError(
                kind="unsupported_platform",
                message=f"no prebuilt variant for {platform.name.lower()}/{arch}",
                hint="Supported: linux/x86_64, macos/x86_64, macos/arm64",
            )
        )
    return Ok(Variant(name))
