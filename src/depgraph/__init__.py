"""depgraph: rebuild files that depend on each other, like a makefile.

This package provides:
- DepGraphBuilder: Collect rules and compile them into a checked graph
- DepGraph: Run build steps in dependency order, skipping up-to-date outputs
- MakeParams: Normal (staleness-checked) or forced execution
- Error types for cycles, duplicate outputs, missing files and failed steps

Example:
    >>> from depgraph import DepGraphBuilder, MakeParams
    >>> graph = (
    ...     DepGraphBuilder()
    ...     .add_rule(out_dir / "file.o", [Path("src/input_file.asm")], build_assembly)
    ...     .build()
    ... )
    >>> graph.make(MakeParams.NORMAL)
"""

from __future__ import annotations

__version__ = "0.4.0"

from depgraph.builder import DepGraphBuilder
from depgraph.errors import (
    BuildFailedError,
    BuilderConsumedError,
    CycleError,
    DepGraphError,
    DuplicateFileError,
    FileAccessError,
    GraphCompilationError,
    MakeError,
    MissingFileError,
)
from depgraph.filetimes import dependencies_newer
from depgraph.graph import DepGraph, DependencyNode
from depgraph.models import BuildFunction, MakeParams, MakeReport, Rule
from depgraph.observability import configure_logging

__all__ = [
    "__version__",
    # Graph construction and execution
    "DepGraphBuilder",
    "DepGraph",
    "DependencyNode",
    "dependencies_newer",
    # Models
    "BuildFunction",
    "MakeParams",
    "MakeReport",
    "Rule",
    # Errors
    "DepGraphError",
    "GraphCompilationError",
    "CycleError",
    "DuplicateFileError",
    "MakeError",
    "MissingFileError",
    "BuildFailedError",
    "FileAccessError",
    "BuilderConsumedError",
    # Observability
    "configure_logging",
]
