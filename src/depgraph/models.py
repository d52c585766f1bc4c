"""Value objects for depgraph.

This module provides:
- BuildFunction: Protocol for caller-supplied build steps
- MakeParams: Execution mode for DepGraph.make()
- Rule: One declared output with its dependencies and build step
- MakeReport: Summary of a completed make() call
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildFunction(Protocol):
    """A build step that (re)creates one output file from its dependencies.

    Return normally on success, after writing ``output``. Raise any exception
    to report failure; ``str(exc)`` becomes the BuildFailedError message.

    Example:
        >>> def concat(output: Path, dependencies: tuple[Path, ...]) -> None:
        ...     output.write_text("".join(d.read_text() for d in dependencies))
    """

    def __call__(self, output: Path, dependencies: tuple[Path, ...], /) -> None: ...


class MakeParams(str, Enum):
    """How DepGraph.make() decides which build functions to run.

    Attributes:
        NORMAL: Only rebuild outputs that are missing or older than a dependency.
        FORCE_BUILD: Run every build function regardless of file times.
    """

    NORMAL = "normal"
    FORCE_BUILD = "force_build"

    @property
    def force(self) -> bool:
        """Whether staleness checks are bypassed."""
        return self is MakeParams.FORCE_BUILD


class Rule(BaseModel):
    """A declared output file, the files it is built from, and how to build it.

    Paths are stored as given (converted to ``Path``, never resolved).

    Attributes:
        output: File produced by the rule.
        dependencies: Input files, in the order passed to the build function.
        build_fn: Callable invoked as ``build_fn(output, dependencies)``.

    Example:
        >>> rule = Rule(output="out.txt", dependencies=["a.txt", "b.txt"], build_fn=concat)
        >>> rule.dependencies
        (PosixPath('a.txt'), PosixPath('b.txt'))
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    output: Path = Field(
        ...,
        description="File produced by the rule",
    )
    dependencies: tuple[Path, ...] = Field(
        default=(),
        description="Files the output is built from, in declared order",
    )
    build_fn: Callable[[Path, tuple[Path, ...]], None] = Field(
        ...,
        description="Build step invoked as build_fn(output, dependencies)",
    )

    @field_validator("dependencies", mode="before")
    @classmethod
    def dependencies_must_be_a_sequence(cls, v: Any) -> Any:
        """Reject a bare string, which would otherwise split into characters."""
        if isinstance(v, (str, bytes)):
            msg = "dependencies must be a sequence of paths, not a single string"
            raise ValueError(msg)
        return v


class MakeReport(BaseModel):
    """Summary of one DepGraph.make() call.

    Attributes:
        params: Execution mode used.
        built: Outputs whose build function ran, in execution order.
        skipped: Outputs judged up to date.
        leaves: Leaf files (no rule produces them) verified present.
        duration_seconds: Wall-clock duration of the call.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    params: MakeParams
    built: tuple[Path, ...] = ()
    skipped: tuple[Path, ...] = ()
    leaves: tuple[Path, ...] = ()
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def built_count(self) -> int:
        """Number of build functions invoked."""
        return len(self.built)
