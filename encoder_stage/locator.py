from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from pathlib import Path, PurePath
from typing import Iterable


@dataclass(frozen=True)
class PluginDescriptor:
    identifier: str
    descriptor_path: PurePath

    def __post_init__(self) -> None:
        if not isinstance(self.descriptor_path, PurePath):
            object.__setattr__(self, "descriptor_path", Path(self.descriptor_path))


def locate(registry: Iterable[PluginDescriptor], name_fragment: str) -> PurePath | None:
    """
    Return the directory holding the manifest of the plugin whose identifier contains
    `name_fragment` (case-sensitive), or None.

    When several plugins match, the last one in iteration order wins.
    """

    def keep_latest(found: PurePath | None, plugin: PluginDescriptor) -> PurePath | None:
        if name_fragment in plugin.identifier:
            return plugin.descriptor_path.parent
        return found

    return reduce(keep_latest, registry, None)
