"""Cleanup task: remove build output, test reports and compiled-file caches."""

from __future__ import annotations

import fnmatch
import os
import shutil
from pathlib import Path
from typing import List

from ..dispatcher import task
from ..dispatcher.core import TaskContext
from ..dispatcher.logging import get_logger
from ..dispatcher.utils import clean_settings


logger = get_logger("tasks.clean")


def _excluded(rel: str, exclude: List[str]) -> bool:
    # Patterns are matched against "./<relative path>", like find's -path
    return any(fnmatch.fnmatch(rel, pat) for pat in exclude)


def _matches(name: str, patterns: List[str]) -> bool:
    return any(fnmatch.fnmatch(name, pat) for pat in patterns)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
    logger.debug("Removed %s", path)


def clean_tree(
    root: Path,
    paths: List[str],
    dir_patterns: List[str],
    file_patterns: List[str],
    exclude: List[str],
) -> list[Path]:
    """Delete artifacts under `root` and return what was removed.

    Safe to call on an already clean tree.
    """
    removed: list[Path] = []

    for name in paths:
        p = root / name
        if p.exists() or p.is_symlink():
            _remove(p)
            removed.append(p)

    for dirpath, dirnames, filenames in os.walk(root, topdown=True):
        base = Path(dirpath)
        keep: list[str] = []
        for d in dirnames:
            rel = "./" + (base / d).relative_to(root).as_posix()
            if _excluded(rel, exclude):
                continue
            if _matches(d, dir_patterns):
                _remove(base / d)
                removed.append(base / d)
                continue
            keep.append(d)
        # Prune removed and excluded directories from the walk
        dirnames[:] = keep

        for f in filenames:
            rel = "./" + (base / f).relative_to(root).as_posix()
            if _excluded(rel, exclude) or not _matches(f, file_patterns):
                continue
            _remove(base / f)
            removed.append(base / f)

    return removed


@task(name="clean")
def clean(ctx: TaskContext):
    """Remove dist/, build/, reports, caches and *.pyc files (virtualenvs are left alone)."""
    settings = clean_settings(ctx.config)
    removed = clean_tree(ctx.root, **settings)
    logger.info("Removed %d path(s)", len(removed))
