"""The installed application's own CLI, as consumed by the wizard."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.platform.process import ProcessError
from mship.platform.process import run as run_process
from mship.platform.process import run_silent
from mship.services.setup.catalog import ModelDescriptor, parse_installed

_QUERY_TIMEOUT_SECONDS = 30.0
_DOWNLOAD_TIMEOUT_SECONDS = 60 * 60.0


@dataclass(frozen=True, slots=True)
class AppBinary:
    path: Path

    def exists(self) -> bool:
        return self.path.is_file()

    def _argv(self, *args: str) -> list[str]:
        return [str(self.path), *args]

    def version(self) -> Result[str, ProcessError]:
        result = run_process(self._argv("--version"), cwd=self.path.parent, timeout=_QUERY_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def config_init(self) -> Result[None, ProcessError]:
        result = run_process(self._argv("config", "init"), cwd=self.path.parent, timeout=_QUERY_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def installed_models(self, command: str) -> Result[set[str], ProcessError]:
        result = run_process(self._argv(command, "list"), cwd=self.path.parent, timeout=_QUERY_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return result
        return Ok(parse_installed(result.value))

    def download_model(self, model: ModelDescriptor) -> Result[None, ProcessError]:
        # Progress output goes straight to the terminal.
        return run_silent(
            self._argv(model.command, "download", model.id),
            cwd=self.path.parent,
            timeout=_DOWNLOAD_TIMEOUT_SECONDS,
        )

    def delete_model(self, model: ModelDescriptor) -> Result[None, ProcessError]:
        result = run_process(
            self._argv(model.command, "delete", model.id), cwd=self.path.parent, timeout=_QUERY_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            return result
        return Ok(None)
