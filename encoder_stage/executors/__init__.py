"""
Step executors for running a staging plan.

Executors are registered by (step kind, backend) and looked up per step.
"""

from encoder_stage.executors.api import StepExecutor, StepHandler
from encoder_stage.executors.factory import ExecutorRegistry
from encoder_stage.executors.runner import run_steps

__all__ = ["StepExecutor", "StepHandler", "ExecutorRegistry", "run_steps"]
