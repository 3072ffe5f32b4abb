"""Structural and configuration validation for pipeline graphs.

Every check is a pure function of a graph snapshot. Checks are independent
and all of them run; ``validate_graph`` concatenates their results.
"""

from typing import Iterable, List, Set
import networkx as nx

from . import registry
from .schema import GRAPH_FIELD, Graph, ValidationError


_WHITE, _GRAY, _BLACK = 0, 1, 2


def _build_digraph(graph: Graph) -> nx.DiGraph:
    """Build the node -> node adjacency induced by the graph's edges.

    Dangling edges and self-loops are left out.
    """
    G = nx.DiGraph()
    for node in graph.nodes:
        G.add_node(node.id)
    for edge in graph.edges:
        if edge.is_self_loop:
            continue
        if edge.source in G and edge.target in G:
            G.add_edge(edge.source, edge.target)
    return G


def _in_graph_order(graph: Graph, node_ids: Iterable[str]) -> List[str]:
    wanted = set(node_ids)
    return [node_id for node_id in graph.node_ids() if node_id in wanted]


def check_orphans(graph: Graph) -> List[ValidationError]:
    """Report nodes with no incident edges.

    A lone node is the start of a pipeline and is not an orphan, so the
    check only applies to graphs with more than one node.
    """
    if len(graph.nodes) <= 1:
        return []

    connected: Set[str] = set()
    for edge in graph.edges:
        connected.add(edge.source)
        connected.add(edge.target)

    orphans = [node_id for node_id in graph.node_ids() if node_id not in connected]
    if not orphans:
        return []
    return [ValidationError(
        field=GRAPH_FIELD,
        message=f"{len(orphans)} orphan node(s) not connected to the pipeline",
        details=tuple(orphans),
    )]


def check_dangling_edges(graph: Graph) -> List[ValidationError]:
    """Report edges whose source or target is not a node of the graph."""
    node_ids = set(graph.node_ids())
    errors = []
    for edge in graph.edges:
        missing = [end for end in (edge.source, edge.target) if end not in node_ids]
        if missing:
            errors.append(ValidationError(
                field=GRAPH_FIELD,
                message=f"Edge '{edge.id}' references missing node(s): {', '.join(missing)}",
                edge_id=edge.id,
                details=tuple(missing),
            ))
    return errors


def check_node_configs(graph: Graph) -> List[ValidationError]:
    """Run the registry rules for every node, tagging errors with the node id."""
    errors = []
    for node in graph.nodes:
        for error in registry.validate(node.type, node.config):
            errors.append(error.model_copy(update={"node_id": node.id}))
    return errors


def find_cycle_members(graph: Graph) -> List[str]:
    """Return the ids of all nodes lying on at least one directed cycle.

    A three-colour depth-first traversal marks every node on the stack
    between a back edge's target and its source. Each strongly connected
    component touched this way is then reported whole, since every member
    of a non-trivial component lies on some cycle.
    """
    G = _build_digraph(graph)
    color = {node_id: _WHITE for node_id in G}
    flagged: Set[str] = set()

    for root in G:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        path = [root]
        stack = [(root, iter(G.successors(root)))]
        while stack:
            node_id, children = stack[-1]
            for child in children:
                if color[child] == _WHITE:
                    color[child] = _GRAY
                    path.append(child)
                    stack.append((child, iter(G.successors(child))))
                    break
                if color[child] == _GRAY:
                    flagged.update(path[path.index(child):])
            else:
                color[node_id] = _BLACK
                path.pop()
                stack.pop()

    if not flagged:
        return []

    members: Set[str] = set()
    for component in nx.strongly_connected_components(G):
        if component & flagged:
            members |= component
    return _in_graph_order(graph, members)


def detect_cycles(graph: Graph) -> List[ValidationError]:
    """Report directed cycles; a pipeline models forward data flow."""
    members = find_cycle_members(graph)
    if not members:
        return []
    return [ValidationError(
        field=GRAPH_FIELD,
        message=f"Circular dependency detected between nodes: {', '.join(members)}",
        details=tuple(members),
    )]


def check_self_loops(graph: Graph) -> List[ValidationError]:
    """Report edges that connect a node to itself."""
    return [
        ValidationError(
            field=GRAPH_FIELD,
            message=f"Edge '{edge.id}' connects node '{edge.source}' to itself",
            node_id=edge.source,
            edge_id=edge.id,
        )
        for edge in graph.edges
        if edge.is_self_loop
    ]


def validate_graph(graph: Graph) -> List[ValidationError]:
    """Perform comprehensive validation on a pipeline graph.

    Args:
        graph: The graph snapshot to validate

    Returns:
        The errors of every check, in check order; empty if the pipeline is valid
    """
    all_errors = []
    all_errors.extend(check_orphans(graph))
    all_errors.extend(check_dangling_edges(graph))
    all_errors.extend(check_node_configs(graph))
    all_errors.extend(detect_cycles(graph))
    all_errors.extend(check_self_loops(graph))
    return all_errors


def is_valid(graph: Graph) -> bool:
    return not validate_graph(graph)
