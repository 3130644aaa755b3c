"""Host detection, filesystem locations and subprocess execution."""

from .detection import (
    Arch,
    LinuxDistro,
    Platform,
    PlatformInfo,
    detect,
    detect_gpu,
    is_macos,
)
from .paths import (
    app_config_dir,
    app_data_dir,
    home,
    install_dir,
    is_on_path,
)
from .process import (
    ProcessError,
    run,
    run_silent,
)

__all__ = [
    "Arch",
    "LinuxDistro",
    "Platform",
    "PlatformInfo",
    "detect",
    "detect_gpu",
    "is_macos",
    "app_config_dir",
    "app_data_dir",
    "home",
    "install_dir",
    "is_on_path",
    "ProcessError",
    "run",
    "run_silent",
]
