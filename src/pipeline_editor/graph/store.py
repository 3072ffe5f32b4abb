"""Node/edge store holding the authoritative pipeline graph.

The store is the only owner of graph state. Callers receive immutable
snapshots and request mutations through the methods below.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
import itertools
import logging

from .exceptions import GraphReferenceError, NotFoundError, SchemaError
from .registry import coerce_config, require_kind
from .schema import ConfigRecord, Edge, Graph, Node, NodeKind, Position


# Set up logging
logger = logging.getLogger(__name__)


PositionLike = Union[Position, Mapping[str, float]]


def _as_position(position: Optional[PositionLike]) -> Position:
    if position is None:
        return Position()
    if isinstance(position, Position):
        return position
    return Position.model_validate(position)


class GraphStore:
    """In-memory store for the nodes and edges of one pipeline.

    Ids are generated from a monotonic counter and checked against the ids
    already present, so imported graphs never collide with new entities.
    """

    def __init__(self, graph: Optional[Graph] = None):
        """Initialize the store.

        Args:
            graph: Optional initial graph to load
        """
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}
        self._counter = itertools.count(1)
        if graph is not None:
            self.replace(graph)

    def __len__(self) -> int:
        return len(self._nodes)

    def _next_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}-{next(self._counter)}"
            if candidate not in self._nodes and candidate not in self._edges:
                return candidate

    def _require_node(self, node_id: str) -> Node:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NotFoundError(f"Node '{node_id}' does not exist", node_id) from None

    # Queries

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self._edges.get(edge_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def node_ids(self) -> List[str]:
        return list(self._nodes)

    def edge_ids(self) -> List[str]:
        return list(self._edges)

    def incident_edges(self, node_id: str) -> List[Edge]:
        """Return every edge whose source or target is ``node_id``."""
        return [
            edge for edge in self._edges.values()
            if edge.source == node_id or edge.target == node_id
        ]

    def snapshot(self) -> Graph:
        """Return an immutable copy of the current graph."""
        return Graph(
            nodes=tuple(node.model_copy(deep=True) for node in self._nodes.values()),
            edges=tuple(self._edges.values()),
        )

    # Mutations

    def add_node(self, kind: Union[str, NodeKind], position: Optional[PositionLike] = None,
                 label: Optional[str] = None,
                 config: Union[ConfigRecord, Mapping[str, Any], None] = None) -> Node:
        """Create a node of ``kind`` at ``position``.

        Args:
            kind: One of the NodeKind values
            position: Canvas position, defaults to the origin
            label: Optional label, defaults to the kind's label
            config: Optional configuration, defaults to the kind's defaults

        Returns:
            The created node

        Raises:
            UnknownNodeKindError: If ``kind`` is not a node kind
            SchemaError: If ``config`` does not match the kind's schema
        """
        kind = require_kind(kind)
        node = Node(
            id=self._next_id(kind.value),
            type=kind,
            position=_as_position(position),
            label=label or kind.default_label,
            config=coerce_config(kind, config),
        )
        self._nodes[node.id] = node
        logger.debug(f"Added node '{node.id}' at ({node.position.x}, {node.position.y})")
        return node

    def connect(self, source_id: str, target_id: str) -> Edge:
        """Create an edge from ``source_id`` to ``target_id``.

        Cycles, self-loops and parallel edges are accepted here; the
        validator reports them.

        Raises:
            GraphReferenceError: If either node does not exist
        """
        for node_id in (source_id, target_id):
            if node_id not in self._nodes:
                raise GraphReferenceError(
                    f"Cannot connect '{source_id}' -> '{target_id}': node '{node_id}' does not exist",
                    node_id,
                )
        edge = Edge(id=self._next_id("edge"), source=source_id, target=target_id)
        self._edges[edge.id] = edge
        logger.debug(f"Connected '{source_id}' -> '{target_id}' as '{edge.id}'")
        return edge

    def update_node_config(self, node_id: str,
                           config: Union[ConfigRecord, Mapping[str, Any]]) -> Node:
        """Replace a node's configuration wholesale.

        Raises:
            NotFoundError: If the node does not exist
            SchemaError: If ``config`` does not match the node's kind
        """
        node = self._require_node(node_id)
        record = coerce_config(node.type, config)
        updated = node.model_copy(update={"config": record.model_copy(deep=True)})
        self._nodes[node_id] = updated
        logger.debug(f"Updated config of node '{node_id}'")
        return updated

    def move_node(self, node_id: str, position: PositionLike) -> Node:
        """Replace a node's position.

        Raises:
            NotFoundError: If the node does not exist
        """
        node = self._require_node(node_id)
        updated = node.model_copy(update={"position": _as_position(position)})
        self._nodes[node_id] = updated
        return updated

    def rename_node(self, node_id: str, label: str) -> Node:
        """Replace a node's label; an empty label restores the default one.

        Raises:
            NotFoundError: If the node does not exist
        """
        node = self._require_node(node_id)
        updated = node.model_copy(update={"label": label or node.type.default_label})
        self._nodes[node_id] = updated
        return updated

    def _rebuild(self, nodes: Dict[str, Node], doomed_edges: Iterable[str] = ()) -> List[Edge]:
        """Swap in ``nodes`` and keep only edges with both endpoints present.

        Returns:
            The edges that were dropped
        """
        doomed = set(doomed_edges)
        edges: Dict[str, Edge] = {}
        removed = []
        for eid, edge in self._edges.items():
            if eid in doomed or edge.source not in nodes or edge.target not in nodes:
                removed.append(edge)
            else:
                edges[eid] = edge
        self._nodes, self._edges = nodes, edges
        return removed

    def delete_nodes(self, node_ids: Iterable[str]) -> List[Edge]:
        """Remove the named nodes and every edge incident to them.

        Unknown ids are ignored. Edges left dangling by an earlier import are
        dropped on every call, even when none of the named nodes exist. Both
        collections are rebuilt before being swapped in, so no dangling edge
        is ever observable.

        Returns:
            The edges removed by the cascade
        """
        doomed = set(node_ids) & set(self._nodes)
        nodes = {nid: node for nid, node in self._nodes.items() if nid not in doomed}
        removed = self._rebuild(nodes)
        if doomed or removed:
            logger.debug(f"Deleted {len(doomed)} nodes and {len(removed)} incident edges")
        return removed

    def delete_edges(self, edge_ids: Iterable[str]) -> List[Edge]:
        """Remove the named edges; unknown ids are ignored.

        Dangling edges are dropped along with them.

        Returns:
            The edges that were removed
        """
        removed = self._rebuild(self._nodes, edge_ids)
        if removed:
            logger.debug(f"Deleted {len(removed)} edges")
        return removed

    def clear(self) -> None:
        """Remove all nodes and edges."""
        self._nodes, self._edges = {}, {}
        logger.debug("Cleared graph")

    def replace(self, graph: Graph) -> None:
        """Swap in ``graph`` as the whole content of the store.

        Raises:
            SchemaError: If ``graph`` contains duplicate ids
        """
        nodes: Dict[str, Node] = {}
        for node in graph.nodes:
            if node.id in nodes:
                raise SchemaError(f"Duplicate node id '{node.id}'")
            nodes[node.id] = node.model_copy(deep=True)
        edges: Dict[str, Edge] = {}
        for edge in graph.edges:
            if edge.id in edges:
                raise SchemaError(f"Duplicate edge id '{edge.id}'")
            edges[edge.id] = edge
        self._nodes, self._edges = nodes, edges
        logger.debug(f"Replaced graph with {len(nodes)} nodes and {len(edges)} edges")
