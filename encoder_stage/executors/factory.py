from __future__ import annotations

from typing import Iterable

from encoder_stage.core import Context
from encoder_stage.executors.api import StepExecutor, StepHandler
from encoder_stage.steps import BuildStep, StepKind


class ExecutorRegistry:
    """
    Registry of step executors. The runner does not know about concrete backends.
    """

    def __init__(self, executors: Iterable[StepExecutor]) -> None:
        by_handler: dict[tuple[StepKind, str | None], StepExecutor] = {}
        for executor in executors:
            if not getattr(executor, "name", None):
                raise ValueError("Executor is missing required attribute 'name'")
            handlers = executor.handlers()
            if not handlers:
                raise ValueError(f"Executor {executor.name} must handle at least one step kind")
            for h in handlers:
                if not isinstance(h, StepHandler):
                    raise ValueError(f"Executor {executor.name} returned invalid handler: {h!r}")
                if not isinstance(h.kind, StepKind):
                    raise ValueError(f"Executor {executor.name} returned invalid kind: {h.kind!r}")
                if h.backend is not None and (not isinstance(h.backend, str) or not h.backend):
                    raise ValueError(f"Executor {executor.name} returned invalid backend: {h.backend!r}")
                key = (h.kind, h.backend)
                if key in by_handler:
                    other = by_handler[key]
                    raise ValueError(
                        f"Duplicate handler for {h.kind.value}/{h.backend or '<default>'}: "
                        f"{other.name} and {executor.name}"
                    )
                by_handler[key] = executor
        self._by_handler = by_handler

    @property
    def registered_backends(self) -> list[str]:
        backends = {b for (_k, b) in self._by_handler.keys() if b is not None}
        return sorted(backends)

    @property
    def registered_handlers(self) -> list[str]:
        items: list[str] = []
        for (kind, backend) in sorted(
            self._by_handler.keys(),
            key=lambda kb: (kb[0].value, kb[1] is not None, kb[1] or ""),
        ):
            items.append(f"{kind.value}/{backend or '<default>'}")
        return items

    def for_step(self, step: BuildStep, ctx: Context) -> StepExecutor:
        backend = ctx.options.backend
        executor = self._by_handler.get((step.kind, backend))
        if executor is None:
            executor = self._by_handler.get((step.kind, None))
        if executor is None:
            known = ", ".join(self.registered_handlers) if self._by_handler else "(none)"
            raise ValueError(f"No executor for {step.kind.value}/{backend} (known: {known})")

        ok, reason = executor.is_available(ctx)
        if not ok:
            msg = reason or "executor is not available in this environment"
            raise RuntimeError(f"Executor {step.kind.value}/{backend} is unavailable: {msg}")
        return executor
