"""Shared pytest fixtures for depgraph tests.

This module provides common fixtures used across unit and integration tests.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
import structlog

# Fixed timestamps (seconds since epoch) so staleness never depends on clock speed.
OLD_TIME = 1_600_000_000
NEW_TIME = 1_700_000_000


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Without this, structlog may use different processors depending on
    test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


def set_mtime(path: Path, seconds: int) -> None:
    """Set both access and modification time of ``path``."""
    os.utime(path, (seconds, seconds))


def write_file(path: Path, content: str, mtime: int | None = None) -> Path:
    """Write ``content`` to ``path``, optionally pinning its mtime."""
    path.write_text(content)
    if mtime is not None:
        set_mtime(path, mtime)
    return path


class RecordingBuild:
    """Build function that concatenates dependencies and records each call."""

    def __init__(self) -> None:
        self.calls: list[tuple[Path, tuple[Path, ...]]] = []

    def __call__(self, output: Path, dependencies: tuple[Path, ...]) -> None:
        self.calls.append((output, dependencies))
        output.write_text("".join(dep.read_text() for dep in dependencies))

    @property
    def outputs(self) -> list[Path]:
        """Outputs built, in call order."""
        return [output for output, _ in self.calls]


@pytest.fixture
def touch() -> Callable[[Path, int], None]:
    """Return a helper that pins the mtime of an existing file."""
    return set_mtime


@pytest.fixture
def recorder() -> RecordingBuild:
    """Return a fresh recording concatenation build function."""
    return RecordingBuild()


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes a file under tmp_path with an old mtime."""

    def _make(name: str, content: str = "", mtime: int = OLD_TIME) -> Path:
        return write_file(tmp_path / name, content or f"{name}\n", mtime)

    return _make
