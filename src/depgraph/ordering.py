"""Topological ordering with cycle reporting.

Uses NetworkX for the sort. A successful sort walks the graph once; only
when it fails is the graph searched again to report the offending cycle.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import TypeVar

import networkx as nx

from depgraph.errors import CycleError

N = TypeVar("N", bound=Hashable)


def dependency_order(
    graph: nx.DiGraph,
    *,
    label: Callable[[N], object] | None = None,
) -> list[N]:
    """Order vertices so every vertex follows the vertices it points to.

    For a graph whose edge A -> B means "A depends on B", this is the order
    to build in: leaves first, final outputs last. Ties are broken by vertex
    insertion order, so the result is deterministic for a given graph.

    Args:
        graph: Directed graph to order.
        label: Maps a vertex to the value reported in CycleError.cycle.
            Defaults to the vertex itself.

    Returns:
        All vertices, dependencies before dependents.

    Raises:
        CycleError: If the graph contains a cycle (including a self loop).
    """
    position = {vertex: index for index, vertex in enumerate(graph.nodes)}
    try:
        dependents_first = list(
            nx.lexicographical_topological_sort(graph, key=position.__getitem__)
        )
    except nx.NetworkXUnfeasible:
        try:
            edges = nx.find_cycle(graph)
        except nx.NetworkXNoCycle:
            raise CycleError() from None
        cycle = [u for u, _ in edges] + [edges[-1][1]]
        raise CycleError(label(v) if label else v for v in cycle) from None
    return list(reversed(dependents_first))
