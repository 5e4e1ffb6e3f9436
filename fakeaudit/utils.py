"""fakeaudit utility helpers: scan target resolution and shell script discovery."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from fakeaudit.config import (
    DEFAULT_IGNORE_DIRS,
    DEFAULT_IGNORE_FILES,
    DEFAULT_SCAN_EXTENSIONS,
)


def validate_path(path: str | Path) -> Path:
    """Resolve a scan target: one shell script or a directory tree of them.

    Raises:
        FileNotFoundError: If nothing exists at *path*.
    """
    resolved = Path(path).resolve()
    if not resolved.exists():
        raise FileNotFoundError(f"Path does not exist: {resolved}")
    return resolved


@dataclass
class FileWalkResult:
    """Shell scripts found under a directory.

    Attributes:
        files: Script paths in sorted order, so runs are reproducible.
        pruned_dirs: Directories skipped because of their name (VCS metadata,
            virtualenvs, build output).
    """

    files: list[str] = field(default_factory=list)
    pruned_dirs: list[str] = field(default_factory=list)

    @property
    def files_scanned(self) -> int:
        return len(self.files)


def _is_shell_script(filename: str, extensions: set[str]) -> bool:
    if filename in DEFAULT_IGNORE_FILES:
        return False
    return os.path.splitext(filename)[1] in extensions


def walk_project_files(
    root_path: Path,
    *,
    ignore_dirs: set[str] | None = None,
    scan_extensions: set[str] | None = None,
) -> FileWalkResult:
    """Collect the shell scripts below *root_path* in one directory walk.

    Only ``.sh`` and ``.bash`` files are collected unless *scan_extensions*
    says otherwise; directories named in *ignore_dirs* (default
    ``DEFAULT_IGNORE_DIRS``) are not descended into.
    """
    skip = set(DEFAULT_IGNORE_DIRS) if ignore_dirs is None else ignore_dirs
    extensions = set(DEFAULT_SCAN_EXTENSIONS) if scan_extensions is None else scan_extensions

    result = FileWalkResult()
    for dirpath, dirnames, filenames in os.walk(root_path):
        kept = []
        for dirname in dirnames:
            if dirname in skip:
                result.pruned_dirs.append(os.path.join(dirpath, dirname))
            else:
                kept.append(dirname)
        # os.walk only descends into what is left in dirnames
        dirnames[:] = kept

        result.files.extend(
            os.path.join(dirpath, name)
            for name in filenames
            if _is_shell_script(name, extensions)
        )

    result.files.sort()
    result.pruned_dirs.sort()
    return result


def shorten_path(file_path: str, base_dir: str) -> str:
    """Show *file_path* relative to the scan target when it lives below it."""
    if base_dir and file_path.startswith(base_dir.rstrip(os.sep) + os.sep):
        return file_path[len(base_dir) :].lstrip(os.sep)
    return file_path
