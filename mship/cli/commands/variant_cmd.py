from __future__ import annotations

from mship.cli.commands._helpers import value_or_exit
from mship.cli.context import build_context
from mship.output.console import Style
from mship.platform.detection import detect_gpu
from mship.services.install.variant import resolve_variant


def variant() -> None:
    """Print the prebuilt variant that `mship install` would download."""
    ctx = build_context()
    gpu = detect_gpu()
    result = resolve_variant(platform=ctx.platform.platform, arch=ctx.platform.arch, gpu=gpu)
    chosen = value_or_exit(result, ctx)
    ctx.console.print(chosen.artifact_name(ctx.settings.project.name))
    ctx.console.print(f"host: {ctx.platform} (vulkan: {'yes' if gpu else 'no'})", Style.DIM)
