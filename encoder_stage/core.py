from __future__ import annotations

import logging
from dataclasses import dataclass

from encoder_stage.util import CommandRunner


class StepExecutionError(RuntimeError):
    """A build step failed while the host was running it."""


@dataclass(frozen=True)
class Options:
    dry_run: bool
    backend: str  # native|cmd


@dataclass(frozen=True)
class Context:
    logger: logging.Logger
    runner: CommandRunner
    options: Options


def build_context(*, options: Options, logger: logging.Logger) -> Context:
    runner = CommandRunner(dry_run=options.dry_run, logger=logger)
    return Context(logger=logger, runner=runner, options=options)
