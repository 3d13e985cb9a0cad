from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Sequence

from encoder_stage.locator import PluginDescriptor

MANIFEST_SUFFIX = ".uplugin"


def _scan_root(root: Path) -> Iterator[Path]:
    # A folder holding a manifest is a plugin; plugins do not nest, so stop descending there.
    if not root.is_dir():
        return
    manifests = sorted(p for p in root.iterdir() if p.is_file() and p.suffix == MANIFEST_SUFFIX)
    if manifests:
        yield from manifests
        return
    for child in sorted(p for p in root.iterdir() if p.is_dir()):
        yield from _scan_root(child)


def enumerate_plugins(
    project_file: Path,
    *,
    extra_dirs: Sequence[Path] = (),
    explicit: Iterable[PluginDescriptor] = (),
) -> Iterator[PluginDescriptor]:
    """
    Lazily yield descriptors for the plugins visible to a project.

    Searches <project_dir>/Plugins, then each extra directory, then yields the
    explicitly configured descriptors. Identifiers are the manifests' full paths.
    """
    roots: list[Path] = [project_file.parent / "Plugins", *extra_dirs]

    seen: set[Path] = set()
    for root in roots:
        root = root.expanduser()
        if root in seen:
            continue
        seen.add(root)
        for manifest in _scan_root(root):
            yield PluginDescriptor(identifier=str(manifest), descriptor_path=manifest)

    yield from explicit
