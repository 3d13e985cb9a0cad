from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath


class StepKind(str, Enum):
    ANNOUNCE = "announce"
    DELETE = "delete"
    COPY = "copy"


@dataclass(frozen=True)
class BuildStep:
    """
    One host-scheduled action. Steps are plain data; executing them is up to the host.

    `force` overrides read-only files (del /F, xcopy /R).
    """

    kind: StepKind
    message: str | None = None
    source_pattern: PurePath | None = None
    destination: PurePath | None = None
    recursive: bool = False
    overwrite: bool = False
    force: bool = False

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {"kind": self.kind.value}
        if self.message is not None:
            out["message"] = self.message
        if self.source_pattern is not None:
            out["sourcePattern"] = str(self.source_pattern)
        if self.destination is not None:
            out["destination"] = str(self.destination)
        out["recursive"] = self.recursive
        out["overwrite"] = self.overwrite
        out["force"] = self.force
        return out

    def to_command_line(self) -> str:
        """Render as the Windows `cmd` line a shell-only host would run."""
        if self.kind is StepKind.ANNOUNCE:
            return f"echo {self.message or ''}"

        if self.kind is StepKind.DELETE:
            args = ["del"]
            if self.force:
                args.append("/f")
            args.append("/q")
            if self.recursive:
                args.append("/s")
            args.append(cmd_quote(self.source_pattern))
            return " ".join(args)

        args = ["xcopy", cmd_quote(self.source_pattern), cmd_quote(self.destination)]
        if self.force:
            args.append("/R")
        if self.overwrite:
            args.append("/Y")
        if self.recursive:
            args.append("/S")
        return " ".join(args)


def cmd_quote(p: PurePath | str | None) -> str:
    if p is None:
        raise ValueError("Step is missing a path operand")
    return f'"{p}"'


def announce(message: str) -> BuildStep:
    return BuildStep(kind=StepKind.ANNOUNCE, message=message)


def delete(pattern: PurePath) -> BuildStep:
    # Forced and quiet; the host decides what happens to files it cannot remove.
    return BuildStep(kind=StepKind.DELETE, source_pattern=pattern, recursive=True, force=True)


def copy(pattern: PurePath, destination: PurePath) -> BuildStep:
    return BuildStep(
        kind=StepKind.COPY,
        source_pattern=pattern,
        destination=destination,
        recursive=True,
        overwrite=True,
        force=True,
    )
