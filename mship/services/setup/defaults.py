"""Built-in file contents written by the setup wizard."""

from __future__ import annotations

from pathlib import Path

DATA_SUBDIRS: tuple[str, ...] = ("notes", "recordings", "models")

CONFIG_FILE = "config.toml"
SERVICE_FILE = "muesli.service"
HYPR_FILE = "muesli.conf"

BINARY_PLACEHOLDER = "@MUESLI_BIN@"

DEFAULT_CONFIG = """\
[audio]
capture_system_audio = true
sample_rate = 16000

[transcription]
engine = "whisper"
model = "base"
use_gpu = false
fallback_to_local = true

[llm]
provider = "none"
model = ""

[storage]

[daemon]
log_level = "info"

[detection]
auto_detect = true
auto_prompt = true
prompt_timeout_secs = 30
debounce_ms = 500
poll_interval_secs = 30

[audio_cues]
enabled = false
volume = 0.5

[waybar]
enabled = false
"""

SERVICE_TEMPLATE = """\
[Unit]
Description=muesli - AI-powered meeting note-taker
Documentation=https://github.com/itsameandrea/muesli
After=graphical-session.target

[Service]
Type=simple
ExecStart=@MUESLI_BIN@ daemon
Restart=on-failure
RestartSec=5

[Install]
WantedBy=default.target
"""

HYPR_TEMPLATE = """\
# muesli keybindings (managed by mship setup)
bind = SUPER SHIFT, R, exec, @MUESLI_BIN@ start
bind = SUPER SHIFT, S, exec, @MUESLI_BIN@ stop
"""


def render(template: str, binary: Path) -> str:
    """Substitute the absolute binary path for the placeholder."""
    return template.replace(BINARY_PLACEHOLDER, str(binary))
