from __future__ import annotations

import pytest

from mship.core.result import Err, Ok
from mship.services.setup.catalog import (
    CATALOG,
    find_model,
    merge_installed,
    models_in,
    parse_installed,
)
from mship.services.setup.selection import (
    build_model_menu,
    default_menu_index,
    menu_sections,
    parse_backend_choice,
    parse_lms_models,
    parse_lms_table,
    parse_menu_choice,
)

WHISPER_LIST = """\
Available Whisper models:

MODEL              SIZE       DOWNLOADED
tiny               75 MB      ✓
base               142 MB     ✗
small              466 MB     ✓
"""


def test_catalog_ids_are_unique_with_one_default_per_family() -> None:
    ids = [m.id for m in CATALOG]
    assert len(ids) == len(set(ids))
    for family in ("primary-engine", "fast-engine", "diarization", "streaming"):
        defaults = [m for m in models_in(family) if m.is_default]
        assert len(defaults) == 1, family


def test_download_command() -> None:
    model = find_model("parakeet-v3-int8")
    assert model is not None
    assert model.download_command == "muesli parakeet download parakeet-v3-int8"
    assert find_model("gpt-4") is None


def test_parse_installed() -> None:
    assert parse_installed(WHISPER_LIST) == {"tiny", "small"}
    assert parse_installed("") == set()


def test_merge_installed_reflects_current_state_only() -> None:
    entries = merge_installed(models_in("primary-engine"), {"small"})
    assert [e.model.id for e in entries if e.installed] == ["small"]

    again = merge_installed(models_in("primary-engine"), set())
    assert not any(e.installed for e in again)


def test_model_menu_layout() -> None:
    entries = merge_installed(models_in("primary-engine", "fast-engine"), {"base"})
    options = build_model_menu(entries)

    assert options[-1].model is None
    assert options[-1].label == "Skip model download"
    assert "(recommended)" in options[1].label
    assert "[installed]" in options[1].label
    assert default_menu_index(options) == 2

    titles = [title for title, _n, _o in menu_sections(options) if title is not None]
    assert titles == ["Whisper models (whisper.cpp)", "Parakeet models (ONNX, 20-30x faster)"]


def test_default_menu_index_without_recommendation() -> None:
    options = build_model_menu([])
    assert default_menu_index(options) == 1


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", Ok(1)), (" 3 ", Ok(3)), ("", Ok(2))],
)
def test_parse_menu_choice(raw: str, expected: object) -> None:
    assert parse_menu_choice(raw, count=3, default=2) == expected


@pytest.mark.parametrize("raw", ["0", "4", "two", "-1"])
def test_parse_menu_choice_rejects(raw: str) -> None:
    assert isinstance(parse_menu_choice(raw, count=3), Err)


def test_parse_menu_choice_empty_without_default() -> None:
    assert isinstance(parse_menu_choice("", count=3), Err)


def test_parse_backend_choice() -> None:
    assert parse_backend_choice("") == Ok("keep")
    assert parse_backend_choice("GPU") == Ok("gpu")
    assert parse_backend_choice("c") == Ok("cpu")
    assert isinstance(parse_backend_choice("cuda"), Err)


def test_parse_lms_models_json_lines() -> None:
    text = "\n".join(
        [
            '{"path": "lmstudio-community/Qwen2.5-7B-Instruct-GGUF/qwen2.5-7b-instruct-q4_k_m.gguf"}',
            '{"path": "nomic-ai/nomic-embed/nomic-embedding-v1.5.gguf"}',
            "not json",
            '{"other": 1}',
        ]
    )
    assert parse_lms_models(text) == ["qwen2.5-7b-instruct-q4_k_m"]


def test_parse_lms_models_array() -> None:
    text = '[{"path": "a/b/llama-3.2-3b.gguf"}, {"path": "a/b/llama-3.2-3b.gguf"}, {"path": "c/mistral-7b.gguf"}]'
    assert parse_lms_models(text) == ["llama-3.2-3b", "mistral-7b"]


def test_parse_lms_table() -> None:
    text = """\
You have 3 models, taking up 9.1 GB of disk space.

LLMs (Large Language Models)       PARAMS      ARCH
qwen2.5-7b-instruct                7B          qwen2
llama-3.2-3b                       3B          llama

EMBEDDING MODELS
text-embedding-nomic-embed-text-v1.5
"""
    assert parse_lms_table(text) == ["qwen2.5-7b-instruct", "llama-3.2-3b"]
