from __future__ import annotations

import os
import stat
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence


def expand_path(s: str) -> Path:
    # Expand ~ and $VARS
    return Path(os.path.expandvars(os.path.expanduser(s)))


def split_env_paths(value: str) -> list[Path]:
    out: list[Path] = []
    for part in value.split(os.pathsep):
        part = part.strip()
        if not part:
            continue
        out.append(expand_path(part))
    return out


def cmd_join(args: Sequence[str]) -> str:
    return subprocess.list2cmdline(list(args))


def clear_readonly(p: Path) -> None:
    mode = p.stat().st_mode
    if not mode & stat.S_IWRITE:
        p.chmod(mode | stat.S_IWRITE)


@dataclass(frozen=True)
class RunResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandRunner:
    def __init__(self, *, dry_run: bool, logger) -> None:
        self._dry_run = dry_run
        self._logger = logger

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    def run(self, args: Iterable[str]) -> RunResult:
        """Run a command and return its result. Callers decide what a non-zero exit means."""
        argv = list(args)

        # Process logs stay at DEBUG so the high-level output is one line per step.
        self._logger.debug("RUN %s", cmd_join(argv))
        if self._dry_run:
            return RunResult(args=argv, returncode=0, stdout="", stderr="")

        cp = subprocess.run(
            argv,
            text=True,
            capture_output=True,
            check=False,
        )
        return RunResult(
            args=argv,
            returncode=cp.returncode,
            stdout=cp.stdout or "",
            stderr=cp.stderr or "",
        )
