"""Static registry of downloadable models.

Installed state is never stored here. ``merge_installed`` combines the
static descriptors with what the application binary reports right now.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

ModelFamily = Literal["primary-engine", "fast-engine", "diarization", "streaming"]


@dataclass(frozen=True, slots=True)
class FamilyInfo:
    command: str  # application subcommand: `muesli <command> list|download|delete`
    engine: str | None  # value of [transcription] engine, for selectable engines
    title: str


FAMILIES: dict[ModelFamily, FamilyInfo] = {
    "primary-engine": FamilyInfo(command="models", engine="whisper", title="Whisper models (whisper.cpp)"),
    "fast-engine": FamilyInfo(command="parakeet", engine="parakeet", title="Parakeet models (ONNX, 20-30x faster)"),
    "diarization": FamilyInfo(command="diarization", engine=None, title="Speaker diarization"),
    "streaming": FamilyInfo(command="parakeet", engine=None, title="Streaming transcription"),
}


@dataclass(frozen=True, slots=True)
class ModelDescriptor:
    family: ModelFamily
    id: str
    size_mb: int
    description: str
    is_default: bool = False

    @property
    def command(self) -> str:
        return FAMILIES[self.family].command

    @property
    def download_command(self) -> str:
        return f"muesli {self.command} download {self.id}"


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    model: ModelDescriptor
    installed: bool


CATALOG: tuple[ModelDescriptor, ...] = (
    ModelDescriptor("primary-engine", "tiny", 75, "Fastest, lowest accuracy"),
    ModelDescriptor("primary-engine", "base", 142, "Good balance", is_default=True),
    ModelDescriptor("primary-engine", "small", 466, "Better accuracy"),
    ModelDescriptor("primary-engine", "medium", 1500, "High accuracy"),
    ModelDescriptor("primary-engine", "large", 2900, "Best accuracy"),
    ModelDescriptor("primary-engine", "large-v3-turbo", 1620, "Fast + high quality"),
    ModelDescriptor("fast-engine", "parakeet-v3", 632, "Full precision, best quality"),
    ModelDescriptor("fast-engine", "parakeet-v3-int8", 217, "INT8 quantized, fastest", is_default=True),
    ModelDescriptor("diarization", "sortformer-v2", 127, "Speaker diarization", is_default=True),
    ModelDescriptor("streaming", "nemotron-streaming", 2515, "Real-time transcription while recording", is_default=True),
)


def models_in(*families: ModelFamily) -> list[ModelDescriptor]:
    return [m for m in CATALOG if m.family in families]


def find_model(model_id: str) -> ModelDescriptor | None:
    for m in CATALOG:
        if m.id == model_id:
            return m
    return None


def parse_installed(listing: str) -> set[str]:
    """Model ids marked downloaded (``✓``) in a ``muesli <family> list`` table."""
    out: set[str] = set()
    for line in listing.splitlines():
        fields = line.split()
        if len(fields) >= 2 and "✓" in fields[1:]:
            out.add(fields[0])
    return out


def merge_installed(models: Iterable[ModelDescriptor], installed: set[str]) -> list[CatalogEntry]:
    return [CatalogEntry(model=m, installed=m.id in installed) for m in models]
