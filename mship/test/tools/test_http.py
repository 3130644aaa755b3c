from __future__ import annotations

from pathlib import Path

from mship.core.result import Err, Ok
from mship.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient


def test_clients_satisfy_protocol() -> None:
    assert isinstance(MockHttpClient(), HttpClient)
    assert isinstance(RealHttpClient(), HttpClient)


def test_mock_unknown_url_is_404() -> None:
    client = MockHttpClient()

    result = client.get_json("https://api.github.com/repos/o/r/releases/latest")

    assert isinstance(result, Err)
    assert result.error.status == 404
    assert client.calls == [("get_json", "https://api.github.com/repos/o/r/releases/latest")]


def test_mock_download_truncates_previous_file(tmp_path: Path) -> None:
    client = MockHttpClient()
    client.set_download("https://example.invalid/a", b"12345")
    dest = tmp_path / "dl" / "a"
    dest.parent.mkdir()
    dest.write_bytes(b"partial download from an earlier run")

    result = client.download("https://example.invalid/a", dest)

    assert result == Ok(dest)
    assert dest.read_bytes() == b"12345"


def test_mock_configured_error() -> None:
    client = MockHttpClient()
    error = HttpError(url="https://example.invalid/x.sha256", status=0, message="connection reset")
    client.set_text("https://example.invalid/x.sha256", error)

    assert client.get_text("https://example.invalid/x.sha256") == Err(error)
    assert str(error) == "connection reset (https://example.invalid/x.sha256)"
    assert str(HttpError(url="u", status=404, message="Not Found")) == "HTTP 404: Not Found (u)"
