from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from encoder_stage.core import Context
from encoder_stage.steps import BuildStep, StepKind


@dataclass(frozen=True)
class StepHandler:
    kind: StepKind
    backend: str | None = None  # None => default handler when the backend has no specific one


class StepExecutor(Protocol):
    """
    A step executor performs one kind of BuildStep on the host.

    An executor must:
    - declare which (kind, backend) pairs it handles
    - report whether it can run in the current environment
    - perform the step and return a one-line status message
    """

    name: str

    def handlers(self) -> Sequence[StepHandler]: ...

    def is_available(self, ctx: Context) -> tuple[bool, str | None]: ...

    def apply(self, step: BuildStep, ctx: Context) -> str: ...
