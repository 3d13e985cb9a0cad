from __future__ import annotations

import json
from dataclasses import dataclass, field
from json import JSONDecodeError
from pathlib import Path
from typing import Any

from encoder_stage.locator import PluginDescriptor
from encoder_stage.stager import ACTIVE_PLATFORM, DEFAULT_PLUGIN_FRAGMENT
from encoder_stage.util import expand_path

BACKENDS = ("native", "cmd")

_KNOWN_KEYS = {
    "version",
    "description",
    "project",
    "platform",
    "plugin_fragment",
    "plugin_dirs",
    "plugins",
    "backend",
}


@dataclass(frozen=True)
class StagingSettings:
    project: Path
    platform: str = ACTIVE_PLATFORM
    plugin_fragment: str = DEFAULT_PLUGIN_FRAGMENT
    plugin_dirs: list[Path] = field(default_factory=list)
    plugins: list[PluginDescriptor] = field(default_factory=list)
    backend: str = "native"


@dataclass(frozen=True)
class LoadedConfig:
    path: Path
    version: int | None
    description: str | None
    settings: StagingSettings


def _require_int(value: Any, *, what: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"'{what}' must be an integer if present")
    return value


def _require_str(value: Any, *, what: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f"'{what}' must be a non-empty string")
    return value


def _resolve(raw: str, *, base: Path) -> Path:
    p = expand_path(raw)
    if not p.is_absolute():
        p = base / p
    return p


def _as_table_list(value: Any, *, what: str) -> list[dict[str, Any]]:
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    if isinstance(value, list) and all(isinstance(x, dict) for x in value):
        return value
    raise ValueError(f"'{what}' must be a table or array-of-tables")


def _parse_plugins(value: Any, *, base: Path) -> list[PluginDescriptor]:
    out: list[PluginDescriptor] = []
    for i, t in enumerate(_as_table_list(value, what="plugins"), start=1):
        identifier = _require_str(t.get("identifier") or t.get("id"), what=f"plugins[{i}].identifier")
        path = _require_str(t.get("path"), what=f"plugins[{i}].path")
        out.append(PluginDescriptor(identifier=identifier, descriptor_path=_resolve(path, base=base)))
    return out


def _parse_plugin_dirs(value: Any, *, base: Path) -> list[Path]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(x, str) and x for x in value):
        raise ValueError("'plugin_dirs' must be a string or a list of strings")
    return [_resolve(x, base=base) for x in value]


def _normalize_top_level(obj: Any, *, path: Path) -> tuple[int | None, str | None, StagingSettings]:
    if not isinstance(obj, dict):
        raise ValueError("Config must be a table/object with at least a 'project' key.")

    unknown = set(obj.keys()) - _KNOWN_KEYS
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(sorted(unknown))}")

    version = obj.get("version")
    description = obj.get("description")
    if version is not None:
        _require_int(version, what="version")
    if description is not None and not isinstance(description, str):
        raise ValueError("'description' must be a string if present")

    base = path.parent.absolute()
    project = _resolve(_require_str(obj.get("project"), what="project"), base=base)

    platform = obj.get("platform", ACTIVE_PLATFORM)
    _require_str(platform, what="platform")

    fragment = obj.get("plugin_fragment", DEFAULT_PLUGIN_FRAGMENT)
    _require_str(fragment, what="plugin_fragment")

    backend = obj.get("backend", "native")
    if backend not in BACKENDS:
        raise ValueError(f"'backend' must be one of: {', '.join(BACKENDS)}")

    settings = StagingSettings(
        project=project,
        platform=platform,
        plugin_fragment=fragment,
        plugin_dirs=_parse_plugin_dirs(obj.get("plugin_dirs"), base=base),
        plugins=_parse_plugins(obj.get("plugins"), base=base),
        backend=backend,
    )
    return version, description, settings


def _load_json(text: str, path: Path) -> Any:
    try:
        return json.loads(text)
    except JSONDecodeError as e:
        raise ValueError(
            f"Invalid JSON in {path} at line {e.lineno}, column {e.colno}: {e.msg}"
        ) from e


def _load_toml(text: str, path: Path) -> Any:
    # TOML parsing is in stdlib as of Python 3.11. On older Pythons, allow tomli if installed.
    try:
        import tomllib  # type: ignore
    except ImportError:  # pragma: no cover
        try:
            import tomli as tomllib  # type: ignore
        except ImportError as e:
            raise ValueError(
                "TOML config support requires Python 3.11+ (tomllib) or 'tomli' installed. "
                f"Failed to import TOML parser for {path}."
            ) from e
    try:
        return tomllib.loads(text)
    except Exception as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def _load_yaml(text: str, path: Path) -> Any:
    try:
        import yaml  # type: ignore
    except ImportError as e:
        raise ValueError(
            "YAML config support requires PyYAML. Install it (e.g. 'python -m pip install pyyaml') "
            f"and retry loading {path}."
        ) from e
    try:
        return yaml.safe_load(text)
    except Exception as e:
        mark = getattr(e, "problem_mark", None)
        if mark is not None and hasattr(mark, "line") and hasattr(mark, "column"):
            line = int(mark.line) + 1
            col = int(mark.column) + 1
            raise ValueError(f"Invalid YAML in {path} at line {line}, column {col}: {e}") from e
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def load_config_file(path: Path) -> LoadedConfig:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix == ".json":
        raw = _load_json(text, path)
    elif suffix == ".toml":
        raw = _load_toml(text, path)
    elif suffix in (".yaml", ".yml"):
        raw = _load_yaml(text, path)
    else:
        raise ValueError(
            f"Unsupported config format for {path} (expected .json, .toml, .yaml, .yml)."
        )

    try:
        version, description, settings = _normalize_top_level(raw, path=path)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
    return LoadedConfig(path=path, version=version, description=description, settings=settings)
