from __future__ import annotations

import pytest

from mship.core.result import Err, Ok
from mship.services.release.semver import (
    DuplicateVersion,
    InvalidVersionFormat,
    Version,
    parse_version,
    resolve_version,
)


@pytest.mark.parametrize(
    ("instruction", "expected"),
    [
        ("patch", Version(0, 2, 8)),
        ("minor", Version(0, 3, 0)),
        ("major", Version(1, 0, 0)),
        ("0.10.0", Version(0, 10, 0)),
    ],
)
def test_resolve_version(instruction: str, expected: Version) -> None:
    assert resolve_version("0.2.7", instruction) == Ok(expected)


def test_resolve_version_rejects_same_version() -> None:
    result = resolve_version("0.2.7", "0.2.7")
    assert result == Err(DuplicateVersion(version=Version(0, 2, 7)))
    assert isinstance(result, Err)
    assert "same as current" in result.error.message


@pytest.mark.parametrize("literal", ["0.2", "v1.2.3", "1.2.3-beta.1", "one.two.three", ""])
def test_resolve_version_rejects_malformed_literal(literal: str) -> None:
    result = resolve_version("0.2.7", literal)
    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidVersionFormat)


def test_resolve_version_rejects_malformed_current() -> None:
    result = resolve_version("0.2", "patch")
    assert result == Err(InvalidVersionFormat(literal="0.2"))


def test_literal_may_go_backwards() -> None:
    assert resolve_version("1.4.0", "1.3.9") == Ok(Version(1, 3, 9))


def test_parse_version_strips_whitespace() -> None:
    assert parse_version(" 2.0.1\n") == Ok(Version(2, 0, 1))


def test_version_to_tag_and_ordering() -> None:
    assert Version(1, 3, 0).to_tag() == "v1.3.0"
    assert Version(1, 3, 0) > Version(1, 2, 9)
    assert str(Version(0, 0, 1)) == "0.0.1"
