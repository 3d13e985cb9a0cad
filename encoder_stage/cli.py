from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import replace
from pathlib import Path

from encoder_stage.config_loader import BACKENDS, StagingSettings, load_config_file
from encoder_stage.core import Options, build_context
from encoder_stage.executors import ExecutorRegistry, run_steps
from encoder_stage.executors.builtin import builtin_executors
from encoder_stage.registry import enumerate_plugins
from encoder_stage.stager import ACTIVE_PLATFORM, ConfigurationError, plan_target_steps
from encoder_stage.util import split_env_paths

PLUGIN_DIRS_ENV = "ENCODER_STAGE_PLUGIN_DIRS"


def _setup_logger(verbose: bool) -> logging.Logger:
    logger = logging.getLogger("encoder-stage")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


def _resolve_settings(args: argparse.Namespace) -> StagingSettings:
    if args.config is not None:
        loaded = load_config_file(args.config)
        settings = loaded.settings
        if args.project is not None:
            settings = replace(settings, project=args.project.absolute())
    elif args.project is not None:
        settings = StagingSettings(project=args.project.absolute())
    else:
        raise ValueError("Either --config or --project is required")

    if args.platform is not None:
        settings = replace(settings, platform=args.platform)
    if args.fragment is not None:
        settings = replace(settings, plugin_fragment=args.fragment)
    if args.backend is not None:
        settings = replace(settings, backend=args.backend)

    dirs = [*settings.plugin_dirs, *args.plugins_dir]
    # Allow env override/addition without needing to touch the build host's invocation.
    env = os.environ.get(PLUGIN_DIRS_ENV)
    if env:
        dirs.extend(split_env_paths(env))
    return replace(settings, plugin_dirs=dirs)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="encoder-stage")
    parser.add_argument(
        "command",
        choices=["plan", "pre-build", "post-build"],
        help="Show the staging plan, or run its pre-build or post-build steps.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Staging config file. Supported: *.json, *.toml, *.yaml, *.yml",
    )
    parser.add_argument(
        "--project",
        type=Path,
        default=None,
        help="Path to the .uproject file (overrides the config).",
    )
    parser.add_argument(
        "--platform",
        default=None,
        help=f"Target platform. Staging only happens for {ACTIVE_PLATFORM}.",
    )
    parser.add_argument(
        "--plugins-dir",
        action="append",
        type=Path,
        default=[],
        help="Additional directory to search for *.uplugin manifests. Can be specified multiple times. "
        f"Also supports {PLUGIN_DIRS_ENV}.",
    )
    parser.add_argument(
        "--fragment",
        default=None,
        help="Name fragment identifying the consumer plugin (default: Vitruvio).",
    )
    parser.add_argument(
        "--backend",
        choices=list(BACKENDS),
        default=None,
        help="How to run delete/copy steps: in Python (native) or through cmd.exe (cmd).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log actions but do not touch the filesystem.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the plan as JSON (only valid with 'plan').",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose logs.",
    )
    args = parser.parse_args(argv)
    if args.json and args.command != "plan":
        parser.error("--json is only valid with the 'plan' command")

    logger = _setup_logger(args.verbose)

    try:
        settings = _resolve_settings(args)
    except ValueError as e:
        logger.error("%s", e)
        return 2

    registry = enumerate_plugins(
        settings.project,
        extra_dirs=settings.plugin_dirs,
        explicit=settings.plugins,
    )
    try:
        plan = plan_target_steps(
            registry,
            settings.project,
            settings.platform,
            name_fragment=settings.plugin_fragment,
        )
    except ConfigurationError as e:
        logger.error("Cannot configure target: %s", e)
        return 2

    if settings.platform != ACTIVE_PLATFORM:
        logger.info("Platform %s does not stage encoder artifacts.", settings.platform)
    elif not plan.post_build:
        logger.info("No plugin matching %r found; nothing will be staged.", settings.plugin_fragment)

    if args.command == "plan":
        if args.json:
            print(json.dumps(plan.to_dict(), indent=2))
            return 0
        for phase, steps in (("Pre-build", plan.pre_build), ("Post-build", plan.post_build)):
            logger.info("%s steps: %d", phase, len(steps))
            for step in steps:
                logger.info("  %s", step.to_command_line())
        return 0

    options = Options(dry_run=bool(args.dry_run), backend=settings.backend)
    ctx = build_context(options=options, logger=logger)
    executors = ExecutorRegistry(builtin_executors())
    logger.debug("Registered step handlers: %s", ", ".join(executors.registered_handlers))

    steps = plan.pre_build if args.command == "pre-build" else plan.post_build
    try:
        run_steps(steps, executors, ctx, phase=args.command)
    except (RuntimeError, ValueError) as e:
        logger.error("%s failed: %s", args.command, e)
        return 1

    logger.info("Done.")
    return 0
