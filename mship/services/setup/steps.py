"""The setup wizard's steps.

Every step is idempotent and independent: it reads current state, asks its
questions, and then applies all of its config edits with a single save. A
step that is skipped, or that fails before its save, leaves the config as
it was.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from mship.core.result import Err, Ok, Result
from mship.output.console import ConsoleProtocol, Style
from mship.platform.detection import PlatformInfo
from mship.platform.files import atomic_write_text
from mship.platform.paths import (
    app_config_dir,
    app_data_dir,
    home,
    hypr_config_dir,
    systemd_user_dir,
    waybar_config_dir,
)
from mship.platform.process import run as run_process
from mship.services.setup.app_binary import AppBinary
from mship.services.setup.catalog import ModelDescriptor, find_model, merge_installed, models_in
from mship.services.setup.config_doc import ConfigDocument
from mship.services.setup.defaults import (
    CONFIG_FILE,
    DATA_SUBDIRS,
    DEFAULT_CONFIG,
    SERVICE_FILE,
    SERVICE_TEMPLATE,
    render,
)
from mship.services.setup.errors import SetupStepFailure
from mship.services.setup.gpu_toolchain import (
    install_toolchain,
    is_toolchain_present,
    needs_toolchain,
    vulkan_toolchain_plan,
)
from mship.services.setup.integration import enable_waybar, install_hypr_bindings
from mship.services.setup.prompts import Prompter
from mship.services.setup.selection import (
    build_model_menu,
    default_menu_index,
    menu_sections,
    parse_backend_choice,
    parse_lms_models,
    parse_lms_table,
    parse_menu_choice,
)

_SYSTEMCTL_TIMEOUT_SECONDS = 30.0
_LMS_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class StepDone:
    message: str


@dataclass(frozen=True, slots=True)
class StepSkipped:
    reason: str


type StepOutcome = StepDone | StepSkipped
type StepResult = Result[StepOutcome, SetupStepFailure]


@dataclass(frozen=True, slots=True)
class SetupPaths:
    config_dir: Path
    data_dir: Path
    systemd_dir: Path
    hypr_dir: Path
    waybar_dir: Path

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILE

    @property
    def service_file(self) -> Path:
        return self.systemd_dir / SERVICE_FILE

    @classmethod
    def detect(cls, app: str) -> SetupPaths:
        return cls(
            config_dir=app_config_dir(app),
            data_dir=app_data_dir(app),
            systemd_dir=systemd_user_dir(),
            hypr_dir=hypr_config_dir(),
            waybar_dir=waybar_config_dir(),
        )


@dataclass(slots=True)
class SetupContext:
    console: ConsoleProtocol
    prompter: Prompter
    app: AppBinary
    host: PlatformInfo
    paths: SetupPaths


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _edit_config(ctx: SetupContext, edit: Callable[[ConfigDocument], object]) -> Result[bool, SetupStepFailure]:
    loaded = ConfigDocument.load(ctx.paths.config_file)
    if isinstance(loaded, Err):
        return Err(SetupStepFailure(loaded.error.message, manual_command="mship setup"))

    doc = loaded.value
    edit(doc)
    saved = doc.save()
    if isinstance(saved, Err):
        return Err(SetupStepFailure(saved.error.message, manual_command="muesli config edit"))
    return Ok(saved.value)


def _require_app(ctx: SetupContext) -> Result[None, SetupStepFailure]:
    if ctx.app.exists():
        return Ok(None)
    return Err(SetupStepFailure(f"application binary not found: {ctx.app.path}", manual_command="mship install"))


def _installed_ids(ctx: SetupContext, command: str) -> set[str]:
    listed = ctx.app.installed_models(command)
    if isinstance(listed, Err):
        ctx.console.warning(f"could not list installed models ({listed.error})")
        return set()
    return listed.value


def _download(ctx: SetupContext, model: ModelDescriptor) -> Result[None, SetupStepFailure]:
    ctx.console.info(f"downloading {model.id} (~{model.size_mb} MB)")
    ctx.console.command([str(ctx.app.path), model.command, "download", model.id])
    result = ctx.app.download_model(model)
    if isinstance(result, Err):
        # Drop whatever was partially written so a retry starts clean.
        ctx.app.delete_model(model)
        return Err(SetupStepFailure(f"download of {model.id} failed", manual_command=model.download_command))
    return Ok(None)


# -----------------------------------------------------------------------------
# Steps
# -----------------------------------------------------------------------------


def step_directories(ctx: SetupContext) -> StepResult:
    wanted = [ctx.paths.config_dir, ctx.paths.data_dir, *(ctx.paths.data_dir / d for d in DATA_SUBDIRS)]
    created = [d for d in wanted if not d.is_dir()]
    for d in created:
        d.mkdir(parents=True, exist_ok=True)

    ctx.console.print(f"config: {ctx.paths.config_dir}", Style.DIM)
    ctx.console.print(f"data:   {ctx.paths.data_dir}", Style.DIM)
    if not created:
        return Ok(StepDone("directories already present"))
    return Ok(StepDone(f"created {len(created)} director{'y' if len(created) == 1 else 'ies'}"))


def step_config(ctx: SetupContext) -> StepResult:
    path = ctx.paths.config_file
    if path.exists():
        return Ok(StepDone(f"configuration already exists at {path}"))

    if ctx.app.exists():
        initialized = ctx.app.config_init()
        if isinstance(initialized, Err):
            ctx.console.warning(f"muesli config init failed ({initialized.error}), writing defaults")

    if not path.exists():
        atomic_write_text(path, DEFAULT_CONFIG)
    return Ok(StepDone(f"created default configuration at {path}"))


def step_backend(ctx: SetupContext) -> StepResult:
    loaded = ConfigDocument.load(ctx.paths.config_file)
    if isinstance(loaded, Err):
        return Err(SetupStepFailure(loaded.error.message, manual_command="mship setup"))
    current = "gpu" if loaded.value.get("transcription", "use_gpu") is True else "cpu"

    ctx.console.print(f"current compute backend: {current}")
    choice = ctx.prompter.ask("Compute backend [keep/cpu/gpu]", parse_backend_choice, default="keep")
    if choice == "keep" or choice == current:
        return Ok(StepDone(f"backend: {current} (unchanged)"))

    if choice == "gpu" and needs_toolchain(ctx.host):
        plan = vulkan_toolchain_plan(ctx.host)
        if plan is None:
            return Err(
                SetupStepFailure(
                    f"no known Vulkan package set for {ctx.host.distro}; backend left at {current}",
                    manual_command="install the Vulkan headers and glslc, then: mship setup",
                )
            )
        if not is_toolchain_present(plan):
            ctx.console.warning("Vulkan toolchain is not installed")
            if not ctx.prompter.confirm(f"Install it now ({plan.display})?", default=False):
                return Err(
                    SetupStepFailure(
                        f"Vulkan toolchain missing; backend left at {current}",
                        manual_command=plan.display,
                    )
                )
            installed = install_toolchain(plan, console=ctx.console)
            if isinstance(installed, Err):
                return Err(
                    SetupStepFailure(
                        f"Vulkan toolchain install failed; backend left at {current}",
                        manual_command=plan.display,
                    )
                )

    edited = _edit_config(ctx, lambda doc: doc.set("transcription", "use_gpu", choice == "gpu"))
    if isinstance(edited, Err):
        return edited
    return Ok(StepDone(f"backend: {choice}"))


def step_model(ctx: SetupContext) -> StepResult:
    ok = _require_app(ctx)
    if isinstance(ok, Err):
        return ok

    models = models_in("primary-engine", "fast-engine")
    installed: set[str] = set()
    for command in sorted({m.command for m in models}):
        installed |= _installed_ids(ctx, command)

    options = build_model_menu(merge_installed(models, installed))
    for title, number, option in menu_sections(options):
        if title is not None:
            ctx.console.print(f"--- {title} ---", Style.BOLD)
        ctx.console.print(f"  {number:>2}. {option.label}")

    default = default_menu_index(options)
    index = ctx.prompter.ask(
        "Select a transcription model",
        lambda raw: parse_menu_choice(raw, count=len(options), default=default),
        default=str(default),
    )
    model = options[index - 1].model
    if model is None:
        return Ok(StepSkipped("no model selected"))

    if model.id in installed:
        ctx.console.info(f"model '{model.id}' is already installed")
    else:
        fetched = _download(ctx, model)
        if isinstance(fetched, Err):
            return fetched

    if not ctx.prompter.confirm(f"Use {model.id} as the transcription model?", default=True):
        return Ok(StepDone(f"{model.id} available (not selected)"))

    engine = "whisper" if model.family == "primary-engine" else "parakeet"

    def edit(doc: ConfigDocument) -> None:
        doc.set("transcription", "engine", engine)
        doc.set("transcription", "model", model.id)
        legacy = f"{engine}_model"
        if doc.get("transcription", legacy) is not None:
            doc.set("transcription", legacy, model.id)

    edited = _edit_config(ctx, edit)
    if isinstance(edited, Err):
        return edited
    return Ok(StepDone(f"transcription: {engine} / {model.id}"))


def _secondary_model(ctx: SetupContext, *, model_id: str, question: str, default: bool) -> StepResult:
    ok = _require_app(ctx)
    if isinstance(ok, Err):
        return ok

    model = find_model(model_id)
    assert model is not None

    if model.id in _installed_ids(ctx, model.command):
        return Ok(StepDone(f"{model.id} already installed"))

    if not ctx.prompter.confirm(question, default=default):
        ctx.console.print(f"download later with: {model.download_command}", Style.DIM)
        return Ok(StepSkipped(f"{model.id} not downloaded"))

    fetched = _download(ctx, model)
    if isinstance(fetched, Err):
        return fetched
    return Ok(StepDone(f"{model.id} downloaded"))


def step_diarization(ctx: SetupContext) -> StepResult:
    return _secondary_model(
        ctx,
        model_id="sortformer-v2",
        question="Download speaker diarization model (sortformer-v2, ~127 MB)?",
        default=True,
    )


def step_streaming(ctx: SetupContext) -> StepResult:
    return _secondary_model(
        ctx,
        model_id="nemotron-streaming",
        question="Download Nemotron streaming model (~2.5 GB)?",
        default=False,
    )


def find_lms() -> Path | None:
    found = shutil.which("lms")
    if found:
        return Path(found)
    bundled = home() / ".lmstudio" / "bin" / "lms"
    return bundled if bundled.is_file() else None


def list_lms_models(lms: Path) -> list[str]:
    listed = run_process([str(lms), "ls", "--json"], cwd=lms.parent, timeout=_LMS_TIMEOUT_SECONDS)
    if isinstance(listed, Ok):
        names = parse_lms_models(listed.value)
        if names:
            return names
    table = run_process([str(lms), "ls"], cwd=lms.parent, timeout=_LMS_TIMEOUT_SECONDS)
    if isinstance(table, Ok):
        return parse_lms_table(table.value)
    return []


def step_llm(ctx: SetupContext) -> StepResult:
    lms = find_lms()
    names: list[str] = []
    if lms is None:
        ctx.console.print("LM Studio not found (https://lmstudio.ai); API keys can be set in config.toml", Style.DIM)
    else:
        ctx.console.print(f"LM Studio CLI: {lms}", Style.DIM)
        names = list_lms_models(lms)
        if not names:
            ctx.console.print("no LLM models found in LM Studio", Style.DIM)

    provider, chosen = "none", ""
    if names:
        for i, name in enumerate(names, start=1):
            ctx.console.print(f"  {i:>2}. {name}")
        ctx.console.print(f"  {len(names) + 1:>2}. Skip LLM setup")
        index = ctx.prompter.ask(
            "Select an LLM model for meeting notes",
            lambda raw: parse_menu_choice(raw, count=len(names) + 1, default=1),
            default="1",
        )
        if index <= len(names):
            provider, chosen = "local", names[index - 1]

    def edit(doc: ConfigDocument) -> None:
        doc.set("llm", "provider", provider)
        doc.set("llm", "model", chosen)

    edited = _edit_config(ctx, edit)
    if isinstance(edited, Err):
        return edited
    if provider == "none":
        return Ok(StepDone("LLM disabled"))
    return Ok(StepDone(f"LLM: {chosen} (via LM Studio)"))


def step_detection(ctx: SetupContext) -> StepResult:
    enabled = ctx.prompter.confirm("Enable automatic meeting detection and recording prompts?", default=True)

    def edit(doc: ConfigDocument) -> None:
        doc.set("detection", "auto_prompt", enabled)
        doc.set("detection", "prompt_timeout_secs", 30)

    edited = _edit_config(ctx, edit)
    if isinstance(edited, Err):
        return edited
    return Ok(StepDone(f"meeting auto-detection: {'enabled' if enabled else 'disabled'}"))


def step_audio_cues(ctx: SetupContext) -> StepResult:
    enabled = ctx.prompter.confirm("Enable audio cues for recording start/stop?", default=False)

    def edit(doc: ConfigDocument) -> None:
        if not doc.ensure_section("audio_cues", {"enabled": enabled, "volume": 0.5}):
            doc.set("audio_cues", "enabled", enabled)

    edited = _edit_config(ctx, edit)
    if isinstance(edited, Err):
        return edited
    return Ok(StepDone(f"audio cues: {'enabled' if enabled else 'disabled'}"))


def step_service(ctx: SetupContext) -> StepResult:
    if not ctx.host.is_linux:
        return Ok(StepSkipped("systemd user services are Linux only; start with: muesli daemon"))

    unit = ctx.paths.service_file
    content = render(SERVICE_TEMPLATE, ctx.app.path)
    if unit.is_file() and unit.read_text(encoding="utf-8") == content:
        return Ok(StepDone(f"service already installed at {unit}"))

    if not ctx.prompter.confirm("Install systemd user service for auto-start?", default=True):
        return Ok(StepSkipped("service not installed"))

    atomic_write_text(unit, content)
    cmd = ["systemctl", "--user", "daemon-reload"]
    ctx.console.command(cmd)
    reloaded = run_process(cmd, cwd=unit.parent, timeout=_SYSTEMCTL_TIMEOUT_SECONDS)
    if isinstance(reloaded, Err):
        return Err(
            SetupStepFailure(
                f"service written to {unit}, but daemon-reload failed",
                manual_command="systemctl --user daemon-reload",
            )
        )
    return Ok(StepDone(f"service installed at {unit}"))


def step_integration(ctx: SetupContext) -> StepResult:
    applied: list[str] = []
    if install_hypr_bindings(hypr_dir=ctx.paths.hypr_dir, binary=ctx.app.path):
        applied.append("hyprland keybindings")

    if ctx.paths.waybar_dir.is_dir():
        edited = _edit_config(ctx, lambda doc: enable_waybar(waybar_dir=ctx.paths.waybar_dir, doc=doc))
        if isinstance(edited, Err):
            return edited
        applied.append("waybar module")

    if not applied:
        return Ok(StepSkipped("no Hyprland or Waybar config found"))
    return Ok(StepDone(", ".join(applied)))


@dataclass(frozen=True, slots=True)
class SetupStep:
    name: str
    title: str
    run: Callable[[SetupContext], StepResult]


STEPS: tuple[SetupStep, ...] = (
    SetupStep("directories", "Creating directories", step_directories),
    SetupStep("config", "Initializing configuration", step_config),
    SetupStep("backend", "Compute backend", step_backend),
    SetupStep("model", "Transcription model", step_model),
    SetupStep("diarization", "Speaker diarization model", step_diarization),
    SetupStep("streaming", "Streaming transcription", step_streaming),
    SetupStep("llm", "LLM for meeting notes", step_llm),
    SetupStep("detection", "Meeting detection", step_detection),
    SetupStep("audio_cues", "Audio cues", step_audio_cues),
    SetupStep("service", "Systemd service", step_service),
    SetupStep("integration", "Desktop integration", step_integration),
)

STEP_NAMES: tuple[str, ...] = tuple(s.name for s in STEPS)
