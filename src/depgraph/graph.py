"""Compiled dependency graph and the make() execution algorithm.

A DepGraph is produced by DepGraphBuilder.build() and is never mutated
afterwards. Vertices are integer handles into a networkx.DiGraph; each vertex
carries its DependencyNode under the ``node`` attribute. An edge A -> B means
"A depends on B".
"""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING

import networkx as nx

from depgraph.errors import BuildFailedError, MissingFileError
from depgraph.filetimes import dependencies_newer, file_exists
from depgraph.models import MakeParams, MakeReport
from depgraph.observability import build_step, get_logger, span
from depgraph.ordering import dependency_order

if TYPE_CHECKING:
    from depgraph.models import BuildFunction

logger = get_logger()

NODE_ATTR = "node"


@dataclass(frozen=True)
class DependencyNode:
    """One file in the graph and, unless it is a leaf, how to build it.

    Attributes:
        path: The file this node stands for.
        build_fn: Build step owned by the node, None for leaves.
        dependencies: Declared dependency paths, in rule order.
    """

    path: Path
    build_fn: BuildFunction | None = field(default=None, compare=False)
    dependencies: tuple[Path, ...] = ()

    @property
    def is_leaf(self) -> bool:
        """True when no rule produces this file; it must already exist."""
        return self.build_fn is None

    def __repr__(self) -> str:
        return f"DependencyNode({str(self.path)!r})"


class DepGraph:
    """Checked dependency graph, ready for execution with make().

    Instances are created by DepGraphBuilder.build(), which guarantees the
    graph is acyclic and holds one node per distinct path.

    Example:
        >>> graph = DepGraphBuilder().add_rule("out", ["a", "b"], concat).build()
        >>> report = graph.make()
        >>> report.built
        (PosixPath('out'),)
    """

    def __init__(self, graph: nx.DiGraph, handles: Mapping[Path, int]) -> None:
        """Wrap a compiled graph.

        Args:
            graph: Acyclic graph of integer handles carrying DependencyNodes.
            handles: Path to handle index covering every vertex.
        """
        self._graph = graph
        self._handles = dict(handles)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, PathLike)):
            return False
        return Path(path) in self._handles

    def __iter__(self) -> Iterator[Path]:
        return iter(self._handles)

    def __repr__(self) -> str:
        return (
            f"DepGraph(nodes={self._graph.number_of_nodes()}, "
            f"edges={self._graph.number_of_edges()})"
        )

    def _node(self, handle: int) -> DependencyNode:
        node: DependencyNode = self._graph.nodes[handle][NODE_ATTR]
        return node

    @property
    def paths(self) -> tuple[Path, ...]:
        """Every file in the graph, in registration order."""
        return tuple(self._handles)

    @property
    def leaves(self) -> tuple[Path, ...]:
        """Files no rule produces; they must exist before make()."""
        return tuple(p for p, h in self._handles.items() if self._node(h).is_leaf)

    def dependencies_of(self, path: str | PathLike[str]) -> tuple[Path, ...]:
        """Return the direct dependencies of ``path``.

        Raises:
            KeyError: If ``path`` is not in the graph.
        """
        return self._node(self._handles[Path(path)]).dependencies

    def build_order(self) -> list[Path]:
        """Return every path in the order make() visits them."""
        return [self._node(h).path for h in self._ordered_handles()]

    def to_networkx(self) -> nx.DiGraph:
        """Return a copy of the graph with paths as vertices.

        Each vertex has a ``leaf`` attribute. The copy is independent of this
        DepGraph, so callers may mutate it freely.
        """
        out = nx.DiGraph()
        for handle in self._graph.nodes:
            node = self._node(handle)
            out.add_node(node.path, leaf=node.is_leaf)
        out.add_edges_from(
            (self._node(a).path, self._node(b).path) for a, b in self._graph.edges
        )
        return out

    def _ordered_handles(self) -> list[int]:
        # Already proven acyclic by build(); re-checked here in the same pass.
        return dependency_order(self._graph, label=lambda h: self._node(h).path)

    def make(self, params: MakeParams = MakeParams.NORMAL) -> MakeReport:
        """Run the build.

        With MakeParams.FORCE_BUILD every build function runs. Otherwise a
        build function only runs if its output is missing or one of its
        direct dependencies is newer. Execution stops at the first error;
        files written by earlier steps are left in place.

        Args:
            params: Execution mode.

        Returns:
            MakeReport describing what ran.

        Raises:
            CycleError: If the graph turns out to be cyclic.
            MissingFileError: If a dependency, leaf, or built output is absent.
            BuildFailedError: If a build function raises.
            FileAccessError: If file metadata cannot be read.
        """
        params = MakeParams(params)
        started = time.perf_counter()
        built: list[Path] = []
        skipped: list[Path] = []
        leaves: list[Path] = []

        attrs = {"depgraph.force": params.force, "depgraph.nodes": len(self)}
        with span("make", attributes=attrs):
            for handle in self._ordered_handles():
                node = self._node(handle)
                ran = self._build_dependency(handle, params.force)
                if node.is_leaf:
                    leaves.append(node.path)
                elif ran:
                    built.append(node.path)
                else:
                    skipped.append(node.path)

        report = MakeReport(
            params=params,
            built=tuple(built),
            skipped=tuple(skipped),
            leaves=tuple(leaves),
            duration_seconds=time.perf_counter() - started,
        )
        logger.info(
            "make_finished",
            force=params.force,
            built=len(report.built),
            skipped=len(report.skipped),
            duration_seconds=round(report.duration_seconds, 6),
        )
        return report

    def _build_dependency(self, handle: int, force: bool) -> bool:
        """Build a single node if required.

        Returns:
            True if the node's build function was invoked.
        """
        node = self._node(handle)
        children = node.dependencies
        for child in children:
            if not file_exists(child):
                raise MissingFileError(child)

        ran = False
        if node.build_fn is not None:
            if force or dependencies_newer(node.path, children):
                with build_step(node.path, children):
                    try:
                        node.build_fn(node.path, children)
                    except Exception as exc:
                        raise BuildFailedError(str(exc), output=node.path) from exc
                ran = True
            else:
                logger.debug("build_step_skipped", output=str(node.path))

        if not file_exists(node.path):
            raise MissingFileError(node.path)
        return ran
