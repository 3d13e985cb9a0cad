from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from encoder_stage.core import StepExecutionError
from encoder_stage.util import clear_readonly


def _split_pattern(pattern: PurePath) -> tuple[Path, str]:
    folder = Path(str(pattern.parent))
    name = pattern.name
    # cmd treats *.* as "every file", with or without an extension.
    if name == "*.*":
        name = "*"
    return folder, name


def _matching_files(folder: Path, name: str, *, recursive: bool) -> list[Path]:
    found = folder.rglob(name) if recursive else folder.glob(name)
    return sorted(p for p in found if p.is_file())


@dataclass(frozen=True)
class DeleteResult:
    removed: int
    skipped: list[Path] = field(default_factory=list)


@dataclass(frozen=True)
class NativeFsBackend:
    logger: logging.Logger
    dry_run: bool

    def delete_matching(self, pattern: PurePath, *, recursive: bool, force: bool) -> DeleteResult:
        folder, name = _split_pattern(pattern)
        if not folder.is_dir():
            self.logger.debug("Nothing to delete, %s does not exist", folder)
            return DeleteResult(removed=0)

        removed = 0
        skipped: list[Path] = []
        for f in _matching_files(folder, name, recursive=recursive):
            self.logger.debug("DELETE %s", f)
            if self.dry_run:
                removed += 1
                continue
            try:
                if force:
                    clear_readonly(f)
                f.unlink()
            except OSError as e:
                # Like `del /q`, files in use are left behind.
                self.logger.warning("Could not delete %s: %s", f, e)
                skipped.append(f)
                continue
            removed += 1
        return DeleteResult(removed=removed, skipped=skipped)

    def copy_matching(
        self,
        pattern: PurePath,
        destination: PurePath,
        *,
        recursive: bool,
        overwrite: bool,
        force: bool,
    ) -> int:
        folder, name = _split_pattern(pattern)
        dest_root = Path(str(destination))
        if not folder.is_dir():
            raise StepExecutionError(f"Copy source folder does not exist: {folder}")

        copied = 0
        for src in _matching_files(folder, name, recursive=recursive):
            target = dest_root / src.relative_to(folder)
            self.logger.debug("COPY %s -> %s", src, target)
            if self.dry_run:
                copied += 1
                continue
            try:
                if target.exists():
                    if not overwrite:
                        raise StepExecutionError(f"Refusing to overwrite existing file: {target}")
                    if force:
                        clear_readonly(target)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, target)
            except OSError as e:
                raise StepExecutionError(f"Failed to copy {src} to {target}: {e}") from e
            copied += 1
        return copied
