"""Exception hierarchy for depgraph.

This module defines the exception classes raised by the engine:
- DepGraphError: Base exception for all depgraph errors
- GraphCompilationError: Raised by DepGraphBuilder.build()
  - CycleError: Circular dependency between files
  - DuplicateFileError: Same output declared by two rules
- MakeError: Raised by DepGraph.make()
  - MissingFileError: A file that should exist does not
  - BuildFailedError: A caller-supplied build function failed
  - FileAccessError: Filesystem metadata could not be read
- BuilderConsumedError: A builder was reused after build()

No error is recovered from inside the engine; every error is terminal for
the build() or make() call that raised it.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class DepGraphError(Exception):
    """Base exception for depgraph.

    Attributes:
        message: Human-readable error description.
        details: Additional context (paths, causes) rendered by str().

    Example:
        >>> try:
        ...     graph.make()
        ... except DepGraphError as e:
        ...     print(f"Build error: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize DepGraphError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

        logger.debug(
            "depgraph_error",
            error_type=self.__class__.__name__,
            message=message,
            **self.details,
        )

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class GraphCompilationError(DepGraphError):
    """Rules could not be compiled into a valid graph."""


class CycleError(GraphCompilationError):
    """The rules describe a circular dependency.

    Raised when:
    - A rule lists its own output as a dependency
    - Two or more rules depend on each other's outputs

    Attributes:
        cycle: Paths forming one offending cycle, in dependency order. The
            first path is repeated at the end, e.g. (a, b, a).

    Example:
        >>> try:
        ...     DepGraphBuilder().add_rule("a", ["a"], touch).build()
        ... except CycleError as e:
        ...     print(e.cycle)
        (PosixPath('a'), PosixPath('a'))
    """

    def __init__(self, cycle: Iterable[Path] = ()) -> None:
        """Initialize CycleError.

        Args:
            cycle: Paths forming the detected cycle, if known.
        """
        self.cycle = tuple(cycle)
        details: dict[str, str] = {}
        if self.cycle:
            details["cycle"] = " -> ".join(str(p) for p in self.cycle)
        super().__init__("Cyclic dependency detected", details=details)


class DuplicateFileError(GraphCompilationError):
    """The same output path was declared by more than one rule."""

    def __init__(self, path: Path) -> None:
        """Initialize DuplicateFileError.

        Args:
            path: The output path declared twice.
        """
        super().__init__("File declared as output of more than one rule", details={"path": str(path)})
        self.path = path


class MakeError(DepGraphError):
    """Executing the graph failed."""


class MissingFileError(MakeError):
    """A file that should be present (or created during the build) is missing.

    Raised when:
    - A dependency is absent before its dependent's build step
    - A leaf file (no rule produces it) does not exist
    - A build function returned without writing its output

    Attributes:
        path: The missing file.
    """

    def __init__(self, path: Path) -> None:
        """Initialize MissingFileError.

        Args:
            path: The missing file.
        """
        super().__init__("Missing file", details={"path": str(path)})
        self.path = path


class BuildFailedError(MakeError):
    """A caller-supplied build function reported failure.

    Attributes:
        message: The failure text produced by the build function, verbatim.
        output: The output path whose build step failed.

    Example:
        >>> try:
        ...     graph.make()
        ... except BuildFailedError as e:
        ...     print(e.output, e.message)
    """

    def __init__(self, message: str, *, output: Path | None = None) -> None:
        """Initialize BuildFailedError.

        Args:
            message: Failure text from the build function.
            output: The output whose build step failed.
        """
        details: dict[str, str] = {}
        if output is not None:
            details["output"] = str(output)
        super().__init__(message, details=details)
        self.output = output


class FileAccessError(MakeError):
    """Filesystem metadata for a path could not be read.

    Wraps unexpected OSErrors (e.g. permission denied) raised while checking
    existence or modification times. The original OSError is chained.

    Attributes:
        path: The path being inspected.
        cause: Text of the underlying OSError.
    """

    def __init__(self, path: Path, *, cause: str) -> None:
        """Initialize FileAccessError.

        Args:
            path: The path being inspected.
            cause: Text of the underlying OSError.
        """
        super().__init__(
            "Could not read file metadata",
            details={"path": str(path), "cause": cause},
        )
        self.path = path
        self.cause = cause


class BuilderConsumedError(DepGraphError):
    """A DepGraphBuilder was used again after build() consumed it."""

    def __init__(self, message: str = "DepGraphBuilder has already been built") -> None:
        """Initialize BuilderConsumedError.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
