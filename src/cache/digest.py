# src/cache/digest.py - v1
"""Content digest over the trigger files selected by the invalidation pattern.

Only file contents feed the hash: renaming a trigger file leaves the digest
unchanged, editing it does not.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from cachedirs.cache.globber import glob_files

logger = logging.getLogger(__name__)

DIGEST_SEPARATOR = "-"
_CHUNK_SIZE = 1 << 20


class TriggerFileError(OSError):
    """A file matched by the invalidation pattern could not be read."""


def hash_files(paths: Iterable[str], algorithm: str = "sha256") -> str:
    """Stream the files in ``paths``, in the given order, into one hex digest.

    Raises:
        TriggerFileError: If any file cannot be read.
    """
    hasher = hashlib.new(algorithm)
    for path in paths:
        try:
            with Path(path).open("rb") as handle:
                while chunk := handle.read(_CHUNK_SIZE):
                    hasher.update(chunk)
        except OSError as e:
            raise TriggerFileError(f"Cannot read trigger file {path}: {e}") from e
    return hasher.hexdigest()


def compute_digest(
    pattern: str,
    algorithm: str = "sha256",
    glob: Callable[[str], Iterable[str]] = glob_files,
) -> str:
    """Compute the key-ready digest for the files matched by ``pattern``.

    The match list is sorted before hashing regardless of what ``glob``
    returns. An empty match set hashes zero bytes.

    Args:
        pattern: Invalidation pattern (see cache/globber.py).
        algorithm: hashlib algorithm name.
        glob: Pattern-to-paths collaborator.

    Returns:
        ``"-" + hexdigest``, ready to append to a key.
    """
    files = sorted(glob(pattern))
    if not files:
        logger.warning("Invalidation pattern %r matched no files", pattern)
    else:
        logger.debug("Hashing %d trigger file(s) with %s", len(files), algorithm)
    return DIGEST_SEPARATOR + hash_files(files, algorithm)
