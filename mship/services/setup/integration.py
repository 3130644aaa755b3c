"""Desktop environment integration (Hyprland keybindings, Waybar module).

Each integration runs only when the target's config directory already
exists. These directories belong to other programs and are never created.
"""

from __future__ import annotations

from pathlib import Path

from mship.platform.files import atomic_write_text
from mship.services.setup.config_doc import ConfigDocument
from mship.services.setup.defaults import HYPR_FILE, HYPR_TEMPLATE, render

HYPR_MAIN_CONFIG = "hyprland.conf"


def source_line(path: Path) -> str:
    return f"source = {path}"


def install_hypr_bindings(*, hypr_dir: Path, binary: Path) -> bool:
    """Write the keybinding file and source it once from hyprland.conf.

    Returns False when ``hypr_dir`` does not exist (nothing is written).
    """
    if not hypr_dir.is_dir():
        return False

    bindings = hypr_dir / HYPR_FILE
    content = render(HYPR_TEMPLATE, binary)
    if not bindings.exists() or bindings.read_text(encoding="utf-8") != content:
        atomic_write_text(bindings, content)

    main = hypr_dir / HYPR_MAIN_CONFIG
    if main.is_file():
        text = main.read_text(encoding="utf-8")
        line = source_line(bindings)
        if not any(existing.strip() == line for existing in text.splitlines()):
            if text and not text.endswith("\n"):
                text += "\n"
            atomic_write_text(main, text + line + "\n")
    return True


def enable_waybar(*, waybar_dir: Path, doc: ConfigDocument) -> bool:
    """Set ``[waybar] enabled = true`` if Waybar is configured on this machine."""
    if not waybar_dir.is_dir():
        return False
    doc.set("waybar", "enabled", True)
    return True
