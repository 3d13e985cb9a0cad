from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import Sequence

from encoder_stage.core import Context, StepExecutionError
from encoder_stage.executors.api import StepExecutor, StepHandler
from encoder_stage.executors.builtin_backends.cmd_shell import CmdShellBackend
from encoder_stage.executors.builtin_backends.native_fs import NativeFsBackend
from encoder_stage.steps import BuildStep, StepKind

# xcopy exit codes: 0 copied, 1 nothing matched, >= 2 failure.
_XCOPY_NOTHING_FOUND = 1


def _require_operands(step: BuildStep, *, destination: bool) -> None:
    if step.source_pattern is None:
        raise StepExecutionError(f"{step.kind.value} step has no source pattern")
    if destination and step.destination is None:
        raise StepExecutionError(f"{step.kind.value} step has no destination")


@dataclass(frozen=True)
class AnnounceExecutor:
    name: str = "builtin.announce.log"

    def handlers(self) -> Sequence[StepHandler]:
        return (StepHandler(kind=StepKind.ANNOUNCE, backend=None),)

    def is_available(self, ctx: Context) -> tuple[bool, str | None]:
        return True, None

    def apply(self, step: BuildStep, ctx: Context) -> str:
        return step.message or ""


@dataclass(frozen=True)
class NativeDeleteExecutor:
    name: str = "builtin.delete.native"

    def handlers(self) -> Sequence[StepHandler]:
        return (StepHandler(kind=StepKind.DELETE, backend=None), StepHandler(kind=StepKind.DELETE, backend="native"))

    def is_available(self, ctx: Context) -> tuple[bool, str | None]:
        return True, None

    def apply(self, step: BuildStep, ctx: Context) -> str:
        _require_operands(step, destination=False)
        backend = NativeFsBackend(logger=ctx.logger, dry_run=ctx.options.dry_run)
        res = backend.delete_matching(step.source_pattern, recursive=step.recursive, force=step.force)
        if ctx.options.dry_run:
            return f"Would delete {res.removed} files matching {step.source_pattern}."
        if res.skipped:
            return f"Deleted {res.removed} files matching {step.source_pattern} ({len(res.skipped)} in use, kept)."
        return f"Deleted {res.removed} files matching {step.source_pattern}."


@dataclass(frozen=True)
class NativeCopyExecutor:
    name: str = "builtin.copy.native"

    def handlers(self) -> Sequence[StepHandler]:
        return (StepHandler(kind=StepKind.COPY, backend=None), StepHandler(kind=StepKind.COPY, backend="native"))

    def is_available(self, ctx: Context) -> tuple[bool, str | None]:
        return True, None

    def apply(self, step: BuildStep, ctx: Context) -> str:
        _require_operands(step, destination=True)
        backend = NativeFsBackend(logger=ctx.logger, dry_run=ctx.options.dry_run)
        copied = backend.copy_matching(
            step.source_pattern,
            step.destination,
            recursive=step.recursive,
            overwrite=step.overwrite,
            force=step.force,
        )
        if ctx.options.dry_run:
            return f"Would copy {copied} files to {step.destination}."
        return f"Copied {copied} files to {step.destination}."


@dataclass(frozen=True)
class CmdShellExecutor:
    name: str = "builtin.cmd"

    def handlers(self) -> Sequence[StepHandler]:
        return (StepHandler(kind=StepKind.DELETE, backend="cmd"), StepHandler(kind=StepKind.COPY, backend="cmd"))

    def is_available(self, ctx: Context) -> tuple[bool, str | None]:
        if ctx.runner.dry_run:
            return True, None
        if shutil.which("cmd") is None:
            return False, "`cmd` not found on PATH"
        return True, None

    def apply(self, step: BuildStep, ctx: Context) -> str:
        _require_operands(step, destination=step.kind is StepKind.COPY)
        line = step.to_command_line()
        backend = CmdShellBackend(runner=ctx.runner, logger=ctx.logger)

        if ctx.options.dry_run:
            backend.run_line(line)
            return f"Would run: {line}"

        res = backend.run_line(line)
        if step.kind is StepKind.DELETE:
            if res.returncode != 0:
                ctx.logger.warning("del exited with %d: %s", res.returncode, res.stderr.strip())
            return f"Ran: {line}"

        if res.returncode == _XCOPY_NOTHING_FOUND:
            ctx.logger.warning("xcopy found no files for %s", step.source_pattern)
        elif res.returncode != 0:
            raise StepExecutionError(
                f"xcopy failed ({res.returncode}): {line}\n{res.stderr or res.stdout}"
            )
        return f"Ran: {line}"


def builtin_executors() -> list[StepExecutor]:
    # Keep ordering stable for predictable behavior and logging.
    return [
        AnnounceExecutor(),
        NativeDeleteExecutor(),
        NativeCopyExecutor(),
        CmdShellExecutor(),
    ]
