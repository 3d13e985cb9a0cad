"""
Stable API for build hosts.

A host should only depend on this module: enumerate or fabricate plugin
descriptors, plan the steps for a target, then run pre-build steps before
compiling and post-build steps after.
"""

from __future__ import annotations

from encoder_stage.core import Context, Options, StepExecutionError, build_context
from encoder_stage.executors import ExecutorRegistry, run_steps
from encoder_stage.executors.builtin import builtin_executors
from encoder_stage.locator import PluginDescriptor, locate
from encoder_stage.registry import enumerate_plugins
from encoder_stage.stager import (
    ConfigurationError,
    ResolvedPaths,
    StagingPlan,
    plan_target_steps,
    resolve_paths,
    stage,
)
from encoder_stage.steps import BuildStep, StepKind

__all__ = [
    "BuildStep",
    "ConfigurationError",
    "Context",
    "ExecutorRegistry",
    "Options",
    "PluginDescriptor",
    "ResolvedPaths",
    "StagingPlan",
    "StepExecutionError",
    "StepKind",
    "build_context",
    "builtin_executors",
    "enumerate_plugins",
    "locate",
    "plan_target_steps",
    "resolve_paths",
    "run_steps",
    "stage",
]
