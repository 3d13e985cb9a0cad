from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import Iterable

from encoder_stage.locator import PluginDescriptor, locate
from encoder_stage.steps import BuildStep, announce, copy, delete

ACTIVE_PLATFORM = "Win64"
DEFAULT_PLUGIN_FRAGMENT = "Vitruvio"

ENCODER_NAME = "UnrealGeometryEncoder"
ENCODER_LIB_NAME = "UnrealGeometryEncoderLib"
ALL_FILES = "*.*"


class ConfigurationError(RuntimeError):
    """The target cannot be configured; no steps are planned."""


@dataclass(frozen=True)
class ResolvedPaths:
    project_path: PurePath
    binary_folder: PurePath
    source_include_folder: PurePath
    consumer_lib_folder: PurePath | None = None
    consumer_include_folder: PurePath | None = None

    def __post_init__(self) -> None:
        if (self.consumer_lib_folder is None) != (self.consumer_include_folder is None):
            raise ValueError("consumer lib and include folders must be set together")

    @property
    def has_consumer(self) -> bool:
        return self.consumer_lib_folder is not None


@dataclass(frozen=True)
class StagingPlan:
    pre_build: tuple[BuildStep, ...] = ()
    post_build: tuple[BuildStep, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.pre_build and not self.post_build

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            "preBuildSteps": [s.to_dict() for s in self.pre_build],
            "postBuildSteps": [s.to_dict() for s in self.post_build],
        }


def _as_path(p: str | PurePath) -> PurePath:
    # Keep the caller's path flavour (e.g. PureWindowsPath) when one is given.
    return p if isinstance(p, PurePath) else Path(p)


def project_dir_of(project_file_path: str | PurePath) -> PurePath:
    if not str(project_file_path):
        raise ConfigurationError("Project path is empty")
    project_file = _as_path(project_file_path)
    project_dir = project_file.parent
    if not project_file.anchor or project_dir == project_file:
        raise ConfigurationError(f"Project path has no resolvable directory: {project_file_path!s}")
    return project_dir


def resolve_paths(
    consumer_plugin_dir: str | PurePath | None,
    project_file_path: str | PurePath,
    platform_binary_subpath: str,
) -> ResolvedPaths:
    project_dir = project_dir_of(project_file_path)

    consumer_lib: PurePath | None = None
    consumer_include: PurePath | None = None
    if consumer_plugin_dir is not None and str(consumer_plugin_dir):
        encoder_lib = _as_path(consumer_plugin_dir) / "Source" / "ThirdParty" / ENCODER_LIB_NAME
        consumer_lib = encoder_lib / "lib" / "Win64" / "Release"
        consumer_include = encoder_lib / "include"

    return ResolvedPaths(
        project_path=project_dir,
        binary_folder=project_dir / "Binaries" / platform_binary_subpath / ENCODER_NAME,
        source_include_folder=project_dir / "Source" / ENCODER_NAME / "Public",
        consumer_lib_folder=consumer_lib,
        consumer_include_folder=consumer_include,
    )


def stage(
    consumer_plugin_dir: str | PurePath | None,
    project_file_path: str | PurePath,
    platform_binary_subpath: str,
) -> StagingPlan:
    """
    Plan the cleanup and copy steps around the encoder build.

    The project's own binary folder is always cleared before the build, since older
    builds may have used different settings. Binaries and public headers are copied
    into the consumer plugin's ThirdParty folder only when a consumer plugin is given.
    The consumer folders themselves are never cleared.

    Raises ConfigurationError if the project file has no resolvable directory.
    """
    paths = resolve_paths(consumer_plugin_dir, project_file_path, platform_binary_subpath)

    all_binaries = paths.binary_folder / ALL_FILES
    pre_build = (
        announce(f'deleting old encoder libraries "{all_binaries}"'),
        delete(all_binaries),
    )

    if not paths.has_consumer:
        return StagingPlan(pre_build=pre_build)

    all_headers = paths.source_include_folder / ALL_FILES
    post_build = (
        announce(f'Copying "{all_binaries}" to "{paths.consumer_lib_folder}"'),
        copy(all_binaries, paths.consumer_lib_folder),
        announce(f'Copying "{all_headers}" to "{paths.consumer_include_folder}"'),
        copy(all_headers, paths.consumer_include_folder),
    )
    return StagingPlan(pre_build=pre_build, post_build=post_build)


def plan_target_steps(
    registry: Iterable[PluginDescriptor],
    project_file_path: str | PurePath,
    platform: str,
    *,
    name_fragment: str = DEFAULT_PLUGIN_FRAGMENT,
) -> StagingPlan:
    # Staging only applies to Win64 builds; other platforms build without extra steps.
    if platform != ACTIVE_PLATFORM:
        return StagingPlan()
    consumer_dir = locate(registry, name_fragment)
    return stage(consumer_dir, project_file_path, platform)
