# src/cache/archive.py - v1
"""Tar archive helpers shared by the storage backends.

Each cached path is stored under its position in the ``paths`` list
(``0/``, ``1/``, ...) so an archive can be restored to the same paths
regardless of where the working directory is.
"""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from cachedirs.cache.base_cache_store import CacheServiceError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".tar.gz"


def create_archive(paths: list[str], archive_path: Path) -> None:
    """Write ``paths`` into a gzip tar archive at ``archive_path``.

    Raises:
        CacheServiceError: If a path does not exist.
    """
    missing = [p for p in paths if not Path(p).expanduser().exists()]
    if missing:
        raise CacheServiceError(
            "Path(s) specified for caching do not exist: " + ", ".join(missing)
        )
    with tarfile.open(archive_path, "w:gz") as tar:
        for index, path in enumerate(paths):
            tar.add(str(Path(path).expanduser()), arcname=str(index))


def extract_archive(archive_path: Path, paths: list[str]) -> None:
    """Restore an archive written by ``create_archive`` onto ``paths``.

    Raises:
        CacheServiceError: If the archive does not match ``paths``.
    """
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar.getmembers():
            head, _, rest = member.name.partition("/")
            if not head.isdigit() or int(head) >= len(paths):
                raise CacheServiceError(
                    f"Archive entry {member.name!r} does not map to a cached path"
                )
            target = Path(paths[int(head)]).expanduser()
            if not rest:
                # The path itself: a directory root or a single cached file.
                if member.isdir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                member.name = target.name
                target = target.parent
            else:
                member.name = rest
            if member.islnk():
                member.linkname = _relink(member.linkname, head, paths)
            target.mkdir(parents=True, exist_ok=True)
            tar.extract(member, target, filter="data")
    logger.debug("Extracted %s into %d path(s)", archive_path, len(paths))


def _relink(linkname: str, head: str, paths: list[str]) -> str:
    """Map a hard link target from archive layout onto its restored location."""
    link_head, _, link_rest = linkname.partition("/")
    if link_head != head or not link_rest:
        raise CacheServiceError(
            f"Hard link to {linkname!r} points outside cached path {paths[int(head)]}"
        )
    return link_rest
