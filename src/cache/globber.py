# src/cache/globber.py - v1
"""Trigger file enumeration.

Patterns follow the CI glob conventions: several patterns may be given one per
line, blank lines and ``#`` comments are skipped, a leading ``!`` excludes
whatever it matches, and ``**`` spans directories.
"""

from __future__ import annotations

import glob
import os


def parse_patterns(pattern: str) -> tuple[list[str], list[str]]:
    """Split a multi-line pattern into (include, exclude) lists."""
    include: list[str] = []
    exclude: list[str] = []
    for line in pattern.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("!"):
            exclude.append(line[1:].strip())
        else:
            include.append(line)
    return include, exclude


def _expand(patterns: list[str]) -> set[str]:
    matched: set[str] = set()
    for pattern in patterns:
        for hit in glob.glob(
            os.path.expanduser(pattern), recursive=True, include_hidden=True
        ):
            matched.add(os.path.abspath(hit))
    return matched


def glob_files(pattern: str) -> list[str]:
    """Return the regular files matched by ``pattern``.

    Directories are dropped; files under an excluded directory are kept unless
    an exclusion pattern also matches them. The result is absolute, unique and
    sorted so that callers get the same order on every platform and run.
    """
    include, exclude = parse_patterns(pattern)
    files = {p for p in _expand(include) if os.path.isfile(p)}
    files -= _expand(exclude)
    return sorted(files)
