"""Settings, exit codes and the Result type shared by every layer."""

from .config import Settings, SettingsError, load_settings
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    "Settings",
    "SettingsError",
    "load_settings",
    "ErrorCode",
    "Err",
    "Ok",
    "Result",
]
