"""Filesystem checks used to decide whether a build step must run.

Staleness is timestamp-only: an output is stale if it is missing or if any
direct dependency was modified strictly later than it. No content hashing is
done, so equal timestamps count as up to date, and clock skew or a coarse
filesystem clock can hide a change. Callers that need stronger guarantees
should use MakeParams.FORCE_BUILD.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

from depgraph.errors import FileAccessError


def _stat(path: Path) -> os.stat_result | None:
    try:
        return path.stat()
    except (FileNotFoundError, NotADirectoryError):
        return None
    except OSError as exc:
        raise FileAccessError(path, cause=str(exc)) from exc


def file_exists(path: Path) -> bool:
    """Return whether ``path`` exists.

    Raises:
        FileAccessError: If existence cannot be determined (e.g. permission denied).
    """
    return _stat(path) is not None


def modified_time_ns(path: Path) -> int:
    """Return the modification time of ``path`` in nanoseconds.

    Raises:
        FileAccessError: If the file is missing or its metadata cannot be read.
    """
    result = _stat(path)
    if result is None:
        raise FileAccessError(path, cause="file does not exist")
    return result.st_mtime_ns


def dependencies_newer(output: Path, dependencies: Iterable[Path]) -> bool:
    """Check whether ``output`` must be rebuilt.

    Args:
        output: The built file.
        dependencies: Its direct dependencies, which must exist.

    Returns:
        True if ``output`` does not exist or any dependency has a strictly
        newer modification time.

    Raises:
        FileAccessError: If metadata for any file cannot be read.
    """
    output_stat = _stat(output)
    if output_stat is None:
        return True
    output_time = output_stat.st_mtime_ns
    return any(modified_time_ns(dep) > output_time for dep in dependencies)
