"""Line-anchored editing of the application's TOML config.

The application owns its config file and may carry comments and keys this
tool knows nothing about, so the document is never re-serialized. Edits
replace a single ``key = value`` line inside its section, or insert one
under the section header when the key is absent, or append the whole
section when the section is absent. Everything else is kept byte-for-byte.
"""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.platform.files import atomic_write_text

TomlScalar = str | bool | int | float

_HEADER = re.compile(r"^\s*\[\[?\s*([^\[\]]+?)\s*\]\]?\s*(#.*)?$")
_ENTRY = re.compile(r"^\s*([A-Za-z0-9_-]+)\s*=")


@dataclass(frozen=True, slots=True)
class ConfigError:
    message: str
    path: Path | None = None


def format_value(value: TomlScalar) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | float):
        return repr(value)
    return json.dumps(value, ensure_ascii=False)


def _line_body(line: str) -> str:
    return line.rstrip("\r\n")


class ConfigDocument:
    """A config file held as lines. ``save()`` writes only if something changed."""

    def __init__(self, text: str, path: Path | None = None) -> None:
        self.path = path
        self._original = text
        self._lines: list[str] = text.splitlines(keepends=True)

    @classmethod
    def load(cls, path: Path) -> Result[ConfigDocument, ConfigError]:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Err(ConfigError(f"config not found: {path}", path=path))
        except (OSError, UnicodeDecodeError) as e:
            return Err(ConfigError(f"failed to read config: {e}", path=path))
        return Ok(cls(text, path=path))

    @property
    def text(self) -> str:
        return "".join(self._lines)

    @property
    def changed(self) -> bool:
        return self.text != self._original

    # ---------------------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------------------

    def _section_span(self, section: str) -> tuple[int, int] | None:
        """(header index, end index) of ``[section]``; end is exclusive."""
        start: int | None = None
        for i, line in enumerate(self._lines):
            m = _HEADER.match(_line_body(line))
            if m is None:
                continue
            if start is not None:
                return (start, i)
            if m.group(1) == section and not line.lstrip().startswith("[["):
                start = i
        if start is None:
            return None
        return (start, len(self._lines))

    def _key_indices(self, section: str, key: str) -> list[int]:
        span = self._section_span(section)
        if span is None:
            return []
        out: list[int] = []
        for i in range(span[0] + 1, span[1]):
            m = _ENTRY.match(self._lines[i])
            if m is not None and m.group(1) == key:
                out.append(i)
        return out

    def has_section(self, section: str) -> bool:
        return self._section_span(section) is not None

    def get(self, section: str, key: str) -> object | None:
        """Parsed value of ``section.key`` or None if absent or unparsable."""
        indices = self._key_indices(section, key)
        if not indices:
            return None
        try:
            parsed = tomllib.loads(_line_body(self._lines[indices[0]]).strip())
        except tomllib.TOMLDecodeError:
            return None
        return parsed.get(key)

    # ---------------------------------------------------------------------
    # Mutation
    # ---------------------------------------------------------------------

    def set(self, section: str, key: str, value: TomlScalar) -> bool:
        """Set ``section.key``. Returns True if the document changed.

        An existing key is replaced in place and any duplicate lines of the
        same key in that section are dropped, so the key occurs once.
        """
        before = self.text
        new_line = f"{key} = {format_value(value)}"

        indices = self._key_indices(section, key)
        if indices:
            first = indices[0]
            ending = self._lines[first][len(_line_body(self._lines[first])) :] or "\n"
            self._lines[first] = new_line + ending
            for i in reversed(indices[1:]):
                del self._lines[i]
            return self.text != before

        span = self._section_span(section)
        if span is None:
            self.append_section(section, {key: value})
            return True

        insert_at = span[0] + 1
        for i in range(span[0] + 1, span[1]):
            if _line_body(self._lines[i]).strip():
                insert_at = i + 1
        if insert_at > 0 and not self._lines[insert_at - 1].endswith("\n"):
            self._lines[insert_at - 1] += "\n"
        self._lines.insert(insert_at, new_line + "\n")
        return True

    def append_section(self, section: str, entries: dict[str, TomlScalar]) -> None:
        if self._lines and not self._lines[-1].endswith("\n"):
            self._lines[-1] += "\n"
        if self._lines:
            self._lines.append("\n")
        self._lines.append(f"[{section}]\n")
        for key, value in entries.items():
            self._lines.append(f"{key} = {format_value(value)}\n")

    def ensure_section(self, section: str, entries: dict[str, TomlScalar]) -> bool:
        """Append ``section`` with ``entries`` only if it is wholly absent."""
        if self.has_section(section):
            return False
        self.append_section(section, entries)
        return True

    # ---------------------------------------------------------------------
    # Persistence
    # ---------------------------------------------------------------------

    def validate(self) -> Result[None, ConfigError]:
        try:
            tomllib.loads(self.text)
        except tomllib.TOMLDecodeError as e:
            return Err(ConfigError(f"config is not valid TOML after edit: {e}", path=self.path))
        return Ok(None)

    def save(self) -> Result[bool, ConfigError]:
        """Validate and write back. Ok(False) when nothing changed."""
        if not self.changed:
            return Ok(False)
        if self.path is None:
            return Err(ConfigError("config document has no path"))

        ok = self.validate()
        if isinstance(ok, Err):
            return ok
        try:
            atomic_write_text(self.path, self.text)
        except OSError as e:
            return Err(ConfigError(f"failed to write config: {e}", path=self.path))
        self._original = self.text
        return Ok(True)
