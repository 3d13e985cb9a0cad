from __future__ import annotations

from typing import Sequence

from encoder_stage.core import Context
from encoder_stage.executors.factory import ExecutorRegistry
from encoder_stage.steps import BuildStep


def run_steps(
    steps: Sequence[BuildStep],
    registry: ExecutorRegistry,
    ctx: Context,
    *,
    phase: str,
) -> list[str]:
    """
    Run steps strictly in order; later steps rely on earlier ones having run.

    Failures propagate to the caller; nothing is retried here.
    """
    messages: list[str] = []
    if not steps:
        ctx.logger.info("=== %s: nothing to do ===", phase)
        return messages

    ctx.logger.info("=== %s (%d steps) ===", phase, len(steps))
    for i, step in enumerate(steps, start=1):
        executor = registry.for_step(step, ctx)
        ctx.logger.debug("Step %d (%s) via %s", i, step.kind.value, executor.name)
        msg = executor.apply(step, ctx)
        messages.append(msg)
        if i == len(steps):
            ctx.logger.info("└─ %s", msg)
        else:
            ctx.logger.info("├─ %s", msg)
    return messages
