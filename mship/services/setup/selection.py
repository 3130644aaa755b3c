"""Pure selection logic for the wizard's menus.

Nothing here prompts or touches the filesystem: raw operator input goes in,
a typed choice or a ``UserInputError`` comes out. The prompter re-asks on
errors.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import PurePath
from typing import Literal

from mship.core.result import Err, Ok, Result
from mship.core.structured import as_str_dict, get_str
from mship.services.setup.catalog import FAMILIES, CatalogEntry, ModelDescriptor
from mship.services.setup.errors import UserInputError

BackendChoice = Literal["keep", "cpu", "gpu"]

BACKEND_CHOICES: tuple[BackendChoice, ...] = ("keep", "cpu", "gpu")


@dataclass(frozen=True, slots=True)
class MenuOption:
    label: str
    model: ModelDescriptor | None  # None for "skip"


def format_entry(entry: CatalogEntry) -> str:
    m = entry.model
    label = f"{m.id:<18} ({m.size_mb:>4} MB) - {m.description}"
    if m.is_default:
        label += " (recommended)"
    if entry.installed:
        label += " [installed]"
    return label


def build_model_menu(entries: list[CatalogEntry]) -> list[MenuOption]:
    """Numbered options grouped by family, followed by a final "skip"."""
    options: list[MenuOption] = []
    for entry in entries:
        options.append(MenuOption(label=format_entry(entry), model=entry.model))
    options.append(MenuOption(label="Skip model download", model=None))
    return options


def menu_sections(options: list[MenuOption]) -> list[tuple[str | None, int, MenuOption]]:
    """(family title when it changes, 1-based number, option) for rendering."""
    out: list[tuple[str | None, int, MenuOption]] = []
    last: str | None = None
    for i, opt in enumerate(options, start=1):
        title: str | None = None
        if opt.model is not None and opt.model.family != last:
            last = opt.model.family
            title = FAMILIES[opt.model.family].title
        out.append((title, i, opt))
    return out


def default_menu_index(options: list[MenuOption]) -> int:
    """1-based index of the first recommended model, or of "skip"."""
    for i, opt in enumerate(options, start=1):
        if opt.model is not None and opt.model.is_default:
            return i
    return len(options)


def parse_menu_choice(raw: str, *, count: int, default: int | None = None) -> Result[int, UserInputError]:
    """Parse a 1-based menu number. Empty input selects ``default``."""
    text = raw.strip()
    if not text:
        if default is not None:
            return Ok(default)
        return Err(UserInputError("enter a number"))
    if not text.isdigit():
        return Err(UserInputError(f"'{text}' is not a number"))
    n = int(text)
    if n < 1 or n > count:
        return Err(UserInputError(f"choose a number between 1 and {count}"))
    return Ok(n)


def parse_backend_choice(raw: str) -> Result[BackendChoice, UserInputError]:
    text = raw.strip().lower()
    if not text:
        return Ok("keep")
    for choice in BACKEND_CHOICES:
        if choice.startswith(text):
            return Ok(choice)
    return Err(UserInputError(f"'{raw.strip()}' is not one of: {', '.join(BACKEND_CHOICES)}"))


def parse_lms_models(json_lines: str) -> list[str]:
    """Chat model names from ``lms ls --json`` (one JSON object per line).

    Embedding models are dropped; names are the file stem of ``path``.
    """
    names: list[str] = []
    for line in json_lines.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj: object = json.loads(line)
        except json.JSONDecodeError:
            continue

        # Newer lms prints one JSON array instead of JSON lines.
        items = obj if isinstance(obj, list) else [obj]
        for item in items:
            data = as_str_dict(item)
            if data is None:
                continue
            path = get_str(data, "path")
            if path is None:
                continue
            name = PurePath(path).stem or path
            if "embedding" in name.lower():
                continue
            if name not in names:
                names.append(name)
    return names


def parse_lms_table(text: str) -> list[str]:
    """Fallback parser for plain ``lms ls`` output."""
    skip_prefixes = ("LLM", "EMBEDDING", "---", "You have")
    names: list[str] = []
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(skip_prefixes):
            continue
        if "embedding" in trimmed.lower():
            continue
        name = trimmed.split()[0]
        if name not in names:
            names.append(name)
    return names
