"""Order the generated headers and wrap them into their final form.

Runs once, after every declaration of a session has been emitted. Each
pending dependency fact ``(consumer, name)`` whose name is an exported type
becomes an edge ``producer -> consumer`` of a ``networkx.DiGraph`` whose
nodes are exactly the generated headers. A topological sort of that graph
is the include order of the umbrella header; a cycle means there is no
such order and linking fails.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

import networkx as nx

from abikit.errors import DependencyCycle, InternalError
from abikit.headers import umbrella_name, wrap_header

if TYPE_CHECKING:
    from abikit.session import TypeRegistry

logger = logging.getLogger(__name__)


def build_dependency_graph(
    outputs: Mapping[str, str],
    types: TypeRegistry,
    dependencies: Mapping[str, list[str]],
) -> nx.DiGraph:
    """Build the include graph of the generated headers.

    An edge ``A -> B`` means A must be included before B. Names that are
    not exported by the library (``size_t``, ``FILE``...) add no edge.

    :param outputs: Generated header buffers; their keys are the nodes.
    :param types: Exported name -> defining header.
    :param dependencies: Consumer header -> names its declarations reference.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(sorted(outputs))

    for consumer, names in dependencies.items():
        if consumer not in graph:
            raise InternalError(f"dependencies recorded for unknown header {consumer!r}")
        for name in names:
            producer = types.lookup(name)
            if producer is None or producer == consumer:
                continue
            if producer not in graph:
                raise InternalError(f"type {name!r} registered in unknown header {producer!r}")
            logger.debug("Dependency: %s uses %s from %s", consumer, name, producer)
            graph.add_edge(producer, consumer)

    return graph


def include_order(graph: nx.DiGraph) -> list[str]:
    """Topologically sort ``graph``, breaking ties by header name.

    :raises DependencyCycle: If the graph has a cycle.
    """
    try:
        return list(nx.lexicographical_topological_sort(graph))
    except nx.NetworkXUnfeasible:
        cycle = nx.find_cycle(graph)
        raise DependencyCycle([(u, v) for u, v in cycle]) from None


def render_umbrella(order: list[str]) -> str:
    """One ``#include`` line per header. Each header guards itself."""
    return "".join(f'#include "{header}"\n' for header in order)


def link(
    outputs: Mapping[str, str],
    types: TypeRegistry,
    dependencies: Mapping[str, list[str]],
    lib_name: str,
) -> dict[str, str]:
    """Produce the final headers of a session.

    :returns: Header id -> final text, headers in include order followed by
        the umbrella header.
    :raises DependencyCycle: If headers depend on each other; nothing is
        produced in that case.
    :raises ValueError: If a generated header has the umbrella header's name.
    """
    graph = build_dependency_graph(outputs, types, dependencies)
    order = include_order(graph)

    umbrella = umbrella_name(lib_name)
    if umbrella in outputs:
        raise ValueError(f"Generated header {umbrella!r} collides with the umbrella header")

    result = {header: wrap_header(outputs[header], header) for header in order}
    result[umbrella] = render_umbrella(order)
    return result
