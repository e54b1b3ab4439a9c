from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence

from sfmanifest.errors import NotFoundError, ScanError

logger = logging.getLogger(__name__)


MANIFEST_EXCLUDES: Sequence[str] = ("*.txt", "*.log", "*.xml")
# Member listing applies no filter at all.
MEMBER_LIST_EXCLUDES: Sequence[str] = ()


def _require_dir(path: Path) -> None:
    if not path.is_dir():
        raise NotFoundError(f"Directory not found: {path}")


def _is_excluded(name: str, patterns: Iterable[str]) -> bool:
    lowered = name.lower()
    return any(fnmatch.fnmatchcase(lowered, pattern.lower()) for pattern in patterns)


def _base_name(entry: os.DirEntry) -> str:
    if entry.is_dir():
        return entry.name
    return os.path.splitext(entry.name)[0]


def _scan(path: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(path) as it:
            return list(it)
    except OSError as exc:
        raise ScanError(f"Failed to list {path}: {exc}") from exc


class DirectoryScanner:
    def __init__(self, sort: bool = False) -> None:
        self.sort = sort

    def _ordered(self, entries: List[os.DirEntry]) -> List[os.DirEntry]:
        if self.sort:
            return sorted(entries, key=lambda e: e.name)
        return entries

    def list_subfolders(self, root: str | Path) -> List[Path]:
        root = Path(root)
        _require_dir(root)
        folders = [Path(e.path) for e in self._ordered(_scan(root)) if e.is_dir()]
        logger.debug("Found %d folders under %s", len(folders), root)
        return folders

    def list_files(
        self,
        folder: str | Path,
        exclude_patterns: Iterable[str] = MANIFEST_EXCLUDES,
        recursive: bool = False,
    ) -> List[str]:
        folder = Path(folder)
        _require_dir(folder)
        patterns = tuple(exclude_patterns)
        names = [_base_name(e) for e in self._walk(folder, recursive) if not _is_excluded(e.name, patterns)]
        logger.debug("Listed %d entries in %s", len(names), folder)
        return names

    def _walk(self, folder: Path, recursive: bool) -> Iterator[os.DirEntry]:
        for entry in self._ordered(_scan(folder)):
            yield entry
            if recursive and entry.is_dir(follow_symlinks=False):
                yield from self._walk(Path(entry.path), recursive)
