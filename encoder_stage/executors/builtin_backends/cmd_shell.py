from __future__ import annotations

import logging
from dataclasses import dataclass

from encoder_stage.util import CommandRunner, RunResult


@dataclass(frozen=True)
class CmdShellBackend:
    runner: CommandRunner
    logger: logging.Logger

    def run_line(self, line: str) -> RunResult:
        # /d skips AutoRun so the line runs the same on every machine.
        res = self.runner.run(["cmd", "/d", "/c", line])
        if res.stdout.strip():
            self.logger.debug("cmd stdout:\n%s", res.stdout.rstrip())
        if res.stderr.strip():
            self.logger.debug("cmd stderr:\n%s", res.stderr.rstrip())
        return res
