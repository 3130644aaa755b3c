from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from mship.core.result import Err, Result
from mship.output.console import Style
from mship.services.setup.errors import SetupStepFailure
from mship.services.setup.steps import STEP_NAMES, STEPS, SetupContext, StepDone

StepStatus = Literal["done", "skipped", "failed"]

NEXT_STEPS: tuple[tuple[str, str], ...] = (
    ("Start the daemon", "muesli daemon"),
    ("Or enable auto-start", "systemctl --user enable --now muesli.service"),
    ("Test audio devices", "muesli audio list-devices"),
    ("Edit configuration if needed", "muesli config edit"),
)


@dataclass(frozen=True, slots=True)
class StepReport:
    name: str
    status: StepStatus
    message: str
    manual_command: str | None = None


@dataclass(frozen=True, slots=True)
class WizardReport:
    steps: tuple[StepReport, ...]

    def by_status(self, status: StepStatus) -> list[StepReport]:
        return [s for s in self.steps if s.status == status]

    @property
    def failed(self) -> list[StepReport]:
        return self.by_status("failed")

    def get(self, name: str) -> StepReport | None:
        for s in self.steps:
            if s.name == name:
                return s
        return None


def unknown_steps(names: Iterable[str]) -> list[str]:
    return [n for n in names if n not in STEP_NAMES]


def run_wizard(ctx: SetupContext, *, skip: Iterable[str] = ()) -> WizardReport:
    """Run every step in order. A failing step never stops the ones after it."""
    skipped = set(skip)
    reports: list[StepReport] = []
    total = len(STEPS)

    for n, step in enumerate(STEPS, start=1):
        ctx.console.header(f"[{n}/{total}] {step.title}")
        if step.name in skipped:
            ctx.console.print("skipped (--skip)", Style.DIM)
            reports.append(StepReport(step.name, "skipped", "skipped on request"))
            continue

        try:
            result: Result[object, SetupStepFailure] = step.run(ctx)
        except OSError as e:
            result = Err(SetupStepFailure(f"{step.title.lower()} failed: {e}", manual_command="mship setup"))

        if isinstance(result, Err):
            failure = result.error
            ctx.console.warning(failure.message)
            if failure.manual_command:
                ctx.console.print(f"  run manually: {failure.manual_command}", Style.DIM)
            reports.append(StepReport(step.name, "failed", failure.message, failure.manual_command))
            continue

        outcome = result.value
        if isinstance(outcome, StepDone):
            ctx.console.success(outcome.message)
            reports.append(StepReport(step.name, "done", outcome.message))
        else:
            ctx.console.print(outcome.reason, Style.DIM)
            reports.append(StepReport(step.name, "skipped", outcome.reason))

    report = WizardReport(steps=tuple(reports))
    print_summary(ctx, report)
    return report


def print_summary(ctx: SetupContext, report: WizardReport) -> None:
    console = ctx.console
    failed = report.failed

    console.newline()
    if failed:
        console.header("Setup finished with problems")
    else:
        console.header("Setup complete")

    console.print("Next steps:", Style.BOLD)
    for n, (label, cmd) in enumerate(NEXT_STEPS, start=1):
        console.print(f"  {n}. {label}:")
        console.print(f"     {cmd}", Style.DIM)

    if failed:
        console.newline()
        console.print("Could not finish (do these by hand):", Style.BOLD)
        for s in failed:
            console.print(f"  - {s.name}: {s.message}")
            if s.manual_command:
                console.print(f"     {s.manual_command}", Style.DIM)
