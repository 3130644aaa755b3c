from __future__ import annotations

import tomllib
from pathlib import Path

from mship.core.result import Err, Ok
from mship.services.setup.config_doc import ConfigDocument, format_value

CONFIG = """\
# muesli config (hand edited)
[transcription]
engine = "whisper"   # keep this comment
model = "base"

[llm]
provider = "none"

[[hooks]]
name = "a"
"""


def test_format_value() -> None:
    assert format_value(True) == "true"
    assert format_value(30) == "30"
    assert format_value(0.5) == "0.5"
    assert format_value('say "hi"') == '"say \\"hi\\""'


def test_get() -> None:
    doc = ConfigDocument(CONFIG)
    assert doc.get("transcription", "model") == "base"
    assert doc.get("llm", "provider") == "none"
    assert doc.get("llm", "model") is None
    assert doc.get("missing", "model") is None


def test_set_replaces_in_place_and_keeps_everything_else() -> None:
    doc = ConfigDocument(CONFIG)

    assert doc.set("transcription", "model", "small") is True

    assert doc.text == CONFIG.replace('model = "base"', 'model = "small"')


def test_set_same_value_is_noop() -> None:
    doc = ConfigDocument(CONFIG)
    assert doc.set("transcription", "model", "base") is False
    assert doc.changed is False


def test_set_inserts_missing_key_in_section() -> None:
    doc = ConfigDocument(CONFIG)

    doc.set("transcription", "use_gpu", True)

    data = tomllib.loads(doc.text)
    assert data["transcription"]["use_gpu"] is True
    lines = doc.text.splitlines()
    assert lines.index("use_gpu = true") == lines.index('model = "base"') + 1


def test_set_appends_missing_section() -> None:
    doc = ConfigDocument(CONFIG)

    doc.set("audio_cues", "enabled", False)

    assert doc.text.startswith(CONFIG)
    assert doc.text.endswith("\n[audio_cues]\nenabled = false\n")
    assert tomllib.loads(doc.text)["audio_cues"] == {"enabled": False}


def test_array_of_tables_is_not_a_section() -> None:
    doc = ConfigDocument(CONFIG)

    assert doc.has_section("hooks") is False
    assert doc.get("hooks", "name") is None

    # Writing a plain [hooks] table next to [[hooks]] is invalid, so it never saves.
    doc.set("hooks", "name", "b")
    assert isinstance(doc.validate(), Err)


def test_set_drops_duplicate_keys() -> None:
    doc = ConfigDocument('[detection]\nauto_prompt = false\nauto_prompt = false\n')

    doc.set("detection", "auto_prompt", True)

    assert doc.text == "[detection]\nauto_prompt = true\n"


def test_set_is_idempotent() -> None:
    first = ConfigDocument(CONFIG)
    first.set("detection", "auto_prompt", True)
    first.set("transcription", "use_gpu", False)

    second = ConfigDocument(first.text)
    second.set("detection", "auto_prompt", True)
    second.set("transcription", "use_gpu", False)

    assert second.text == first.text
    assert second.changed is False


def test_ensure_section_only_when_absent() -> None:
    doc = ConfigDocument(CONFIG)
    assert doc.ensure_section("llm", {"provider": "local"}) is False
    assert doc.get("llm", "provider") == "none"
    assert doc.ensure_section("audio_cues", {"enabled": True, "volume": 0.5}) is True
    assert doc.get("audio_cues", "volume") == 0.5


def test_set_on_file_without_trailing_newline() -> None:
    doc = ConfigDocument('[llm]\nprovider = "none"')

    doc.set("llm", "model", "qwen")

    assert doc.text == '[llm]\nprovider = "none"\nmodel = "qwen"\n'


def test_save_writes_only_when_changed(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(CONFIG, encoding="utf-8")
    loaded = ConfigDocument.load(path)
    assert isinstance(loaded, Ok)
    doc = loaded.value

    assert doc.save() == Ok(False)
    doc.set("llm", "provider", "local")
    assert doc.save() == Ok(True)
    assert doc.save() == Ok(False)
    assert 'provider = "local"' in path.read_text(encoding="utf-8")


def test_save_refuses_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    original = "[llm]\nprovider = \n"
    path.write_text(original, encoding="utf-8")
    loaded = ConfigDocument.load(path)
    assert isinstance(loaded, Ok)

    loaded.value.set("daemon", "log_level", "info")
    result = loaded.value.save()

    assert isinstance(result, Err)
    assert path.read_text(encoding="utf-8") == original


def test_load_missing(tmp_path: Path) -> None:
    result = ConfigDocument.load(tmp_path / "config.toml")
    assert isinstance(result, Err)
    assert result.error.path == tmp_path / "config.toml"
