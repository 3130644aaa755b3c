"""Blocking HTTP access to the release index and release assets.

``RealHttpClient`` talks to GitHub over urllib; ``MockHttpClient`` serves
canned responses keyed by URL. Each call makes exactly one attempt and
reports failure as an ``HttpError`` so the installer can take its fallback.
"""

from __future__ import annotations

import json
import shutil
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, cast, runtime_checkable

from mship import __version__
from mship.core.result import Err, Ok, Result
from mship.core.structured import as_str_dict

__all__ = [
    "HttpClient",
    "RealHttpClient",
    "MockHttpClient",
    "HttpError",
]

GITHUB_JSON = "application/vnd.github+json"


@dataclass(frozen=True, slots=True)
class HttpError:
    """A failed request. ``status`` is 0 when no HTTP response arrived."""

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]: ...

    def get_text(self, url: str) -> Result[str, HttpError]: ...

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Stream ``url`` into ``dest``. An existing file is truncated first."""
        ...


def _as_http_error(url: str, exc: Exception) -> HttpError:
    if isinstance(exc, urllib.error.HTTPError):
        return HttpError(url=url, status=exc.code, message=str(exc.reason))
    if isinstance(exc, urllib.error.URLError):
        return HttpError(url=url, status=0, message=str(exc.reason))
    if isinstance(exc, TimeoutError):
        return HttpError(url=url, status=0, message="timed out")
    return HttpError(url=url, status=0, message=str(exc))


class RealHttpClient:
    def __init__(self, timeout: float = 60.0) -> None:
        self.timeout = timeout
        self._ssl_context = ssl.create_default_context()
        self._user_agent = f"mship/{__version__}"

    def _urlopen(self, url: str, accept: str | None):
        headers = {"User-Agent": self._user_agent}
        if accept is not None:
            headers["Accept"] = accept
        request = urllib.request.Request(url, headers=headers)
        return urllib.request.urlopen(request, timeout=self.timeout, context=self._ssl_context)

    def _fetch(self, url: str, *, accept: str | None = None) -> Result[bytes, HttpError]:
        try:
            with self._urlopen(url, accept) as response:
                return Ok(response.read())
        except (urllib.error.URLError, TimeoutError, ValueError, OSError) as e:
            return Err(_as_http_error(url, e))

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        body = self._fetch(url, accept=GITHUB_JSON)
        if isinstance(body, Err):
            return body

        try:
            parsed: object = json.loads(body.value)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"invalid JSON: {e}"))

        table = as_str_dict(parsed)
        if table is None:
            return Err(HttpError(url=url, status=0, message="expected a JSON object"))
        return Ok(cast(dict[str, Any], table))

    def get_text(self, url: str) -> Result[str, HttpError]:
        body = self._fetch(url)
        if isinstance(body, Err):
            return body
        try:
            return Ok(body.value.decode("utf-8"))
        except UnicodeDecodeError as e:
            return Err(HttpError(url=url, status=0, message=f"not UTF-8: {e}"))

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._urlopen(url, None) as response, dest.open("wb") as out:
                shutil.copyfileobj(response, out, 64 * 1024)
        except (urllib.error.URLError, TimeoutError, ValueError, OSError) as e:
            return Err(_as_http_error(url, e))
        return Ok(dest)


class MockHttpClient:
    """Canned responses per URL. Unknown URLs answer 404.

    Every request is appended to ``calls`` as ``(method, url)``.
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], object] = {}
        self.calls: list[tuple[str, str]] = []

    def set_json(self, url: str, response: dict[str, Any] | HttpError) -> None:
        self._responses["get_json", url] = response

    def set_text(self, url: str, response: str | HttpError) -> None:
        self._responses["get_text", url] = response

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._responses["download", url] = response

    def _answer(self, method: str, url: str) -> Result[object, HttpError]:
        self.calls.append((method, url))
        response = self._responses.get((method, url))
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not Found"))
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)

    def get_json(self, url: str) -> Result[dict[str, Any], HttpError]:
        answer = self._answer("get_json", url)
        if isinstance(answer, Err):
            return answer
        return Ok(cast(dict[str, Any], answer.value))

    def get_text(self, url: str) -> Result[str, HttpError]:
        answer = self._answer("get_text", url)
        if isinstance(answer, Err):
            return answer
        return Ok(cast(str, answer.value))

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        answer = self._answer("download", url)
        if isinstance(answer, Err):
            return answer
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(cast(bytes, answer.value))
        return Ok(dest)
