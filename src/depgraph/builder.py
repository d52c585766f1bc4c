"""DepGraphBuilder: collect rules and compile them into a DepGraph.

Rules may be added in any order and may refer to outputs of rules added
later. build() compiles them in two passes: every rule output becomes a node
first, then dependency edges are wired, creating leaf nodes for files no rule
produces. The finished graph is checked for cycles before it is returned.
"""

from __future__ import annotations

from collections.abc import Iterable
from os import PathLike
from pathlib import Path

import networkx as nx

from depgraph.errors import BuilderConsumedError, DuplicateFileError
from depgraph.graph import NODE_ATTR, DepGraph, DependencyNode
from depgraph.models import BuildFunction, Rule
from depgraph.observability import get_logger
from depgraph.ordering import dependency_order

logger = get_logger()

StrPath = str | PathLike[str]


class DepGraphBuilder:
    """Used to construct a DepGraph.

    Example:
        >>> graph = (
        ...     DepGraphBuilder()
        ...     .add_rule(out_dir / "file.o", [Path("src/input.asm")], build_assembly)
        ...     .build()
        ... )
        >>> graph.make()
    """

    def __init__(self) -> None:
        """Create a builder with no rules."""
        self._rules: list[Rule] = []
        self._consumed = False

    def __len__(self) -> int:
        return len(self._rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Rules recorded so far, in insertion order."""
        return tuple(self._rules)

    def add_rule(
        self,
        output: StrPath,
        dependencies: Iterable[StrPath],
        build_fn: BuildFunction,
    ) -> DepGraphBuilder:
        """Add a rule: a file, the files it depends on, and how to build it.

        Rules can be added in any order and calls can be chained. Duplicate
        outputs and cycles are only reported by build().

        Args:
            output: File produced by the rule.
            dependencies: Files it is built from, in the order build_fn receives them.
            build_fn: Called as ``build_fn(output, dependencies)``.

        Returns:
            This builder.

        Raises:
            pydantic.ValidationError: If an argument has the wrong type.
            BuilderConsumedError: If build() has already been called.
        """
        if not isinstance(dependencies, (str, bytes)):
            dependencies = tuple(dependencies)
        return self.add(Rule(output=output, dependencies=dependencies, build_fn=build_fn))

    def add(self, rule: Rule) -> DepGraphBuilder:
        """Add an already constructed Rule.

        Raises:
            BuilderConsumedError: If build() has already been called.
        """
        if self._consumed:
            raise BuilderConsumedError
        self._rules.append(rule)
        return self

    def build(self) -> DepGraph:
        """Build the graph, checking for duplicate outputs and cyclic dependencies.

        Consumes the builder; it cannot be reused afterwards.

        Returns:
            An acyclic DepGraph ready for make().

        Raises:
            DuplicateFileError: If two rules declare the same output.
            CycleError: If the rules depend on each other circularly.
            BuilderConsumedError: If build() has already been called.
        """
        if self._consumed:
            raise BuilderConsumedError
        self._consumed = True
        rules, self._rules = self._rules, []

        graph = nx.DiGraph()
        handles: dict[Path, int] = {}
        pending: list[tuple[int, tuple[Path, ...]]] = []

        # First pass: one node per rule output.
        for rule in rules:
            if rule.output in handles:
                raise DuplicateFileError(rule.output)
            handle = len(handles)
            node = DependencyNode(
                path=rule.output,
                build_fn=rule.build_fn,
                dependencies=rule.dependencies,
            )
            graph.add_node(handle, **{NODE_ATTR: node})
            handles[rule.output] = handle
            pending.append((handle, rule.dependencies))

        # Second pass: wire edges, adding leaves for files no rule produces.
        for handle, dependencies in pending:
            for dep in dependencies:
                dep_handle = handles.get(dep)
                if dep_handle is None:
                    dep_handle = len(handles)
                    graph.add_node(dep_handle, **{NODE_ATTR: DependencyNode(path=dep)})
                    handles[dep] = dep_handle
                graph.add_edge(handle, dep_handle)

        dependency_order(graph, label=lambda h: graph.nodes[h][NODE_ATTR].path)

        logger.info(
            "graph_compiled",
            rules=len(rules),
            nodes=graph.number_of_nodes(),
            edges=graph.number_of_edges(),
            leaves=graph.number_of_nodes() - len(rules),
        )
        return DepGraph(graph, handles)
