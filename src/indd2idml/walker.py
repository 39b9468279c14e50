from __future__ import annotations

from fnmatch import fnmatchcase
from pathlib import Path
from typing import Callable, Iterator

from .constraint import SOURCE_PATTERN
from .models import FileRef

WalkErrorHandler = Callable[[Path, OSError], None]


def matches(name: str, pattern: str) -> bool:
    return fnmatchcase(name.lower(), pattern.lower())


def _list_folder(folder: Path) -> tuple[list[Path], list[Path]]:
    files: list[Path] = []
    folders: list[Path] = []
    for entry in sorted(folder.iterdir(), key=lambda p: p.name):
        if entry.is_symlink() and entry.is_dir():
            continue
        if entry.is_dir():
            folders.append(entry)
        elif entry.is_file():
            files.append(entry)
    return files, folders


def walk(
    root: Path,
    pattern: str = SOURCE_PATTERN,
    on_error: WalkErrorHandler | None = None,
) -> Iterator[FileRef]:
    """Yield files below ``root`` matching ``pattern``, depth-first.

    Matching files of a folder come before any of its subfolders. A folder
    that cannot be listed is reported to ``on_error`` and skipped; its
    siblings are still visited.
    """
    try:
        files, folders = _list_folder(root)
    except OSError as exc:
        if on_error is None:
            raise
        on_error(root, exc)
        return

    for path in files:
        if matches(path.name, pattern):
            yield FileRef(path=path)

    for folder in folders:
        yield from walk(folder, pattern, on_error)


__all__ = ["WalkErrorHandler", "matches", "walk"]
