"""Serialization utilities for pipeline graphs.

This module converts graph snapshots to and from the portable export
document:

    {"nodes": [...], "edges": [...], "timestamp": "<ISO-8601>"}

Each node is written as ``{id, type, position: {x, y}, data: {nodeType,
label, config}}`` where ``type`` is the canvas renderer name and
``data.nodeType`` the node kind; each edge as ``{id, source, target}``.
Unknown fields are ignored on import.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, SchemaError
from .registry import coerce_config, convert_pydantic_errors
from .schema import Edge, Graph, Node, NodeKind, Position, ValidationError


RENDERER_TYPE = "custom"


class NodeData(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    node_type: Optional[str] = Field(None, alias="nodeType")
    label: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)


class DocumentNode(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    type: Optional[str] = RENDERER_TYPE
    position: Position = Field(default_factory=Position)
    data: NodeData = Field(default_factory=NodeData)

    @property
    def kind_name(self) -> Optional[str]:
        # Documents written by other tools may put the kind in ``type``
        return self.data.node_type or self.type


class DocumentEdge(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    source: str
    target: str


class PipelineDocument(BaseModel):
    """Wire model of an export document."""
    model_config = ConfigDict(extra="ignore")

    nodes: List[DocumentNode]
    edges: List[DocumentEdge]
    timestamp: Optional[str] = None


def _now_iso() -> str:
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def node_to_dict(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "type": RENDERER_TYPE,
        "position": {"x": node.position.x, "y": node.position.y},
        "data": {
            "nodeType": node.type.value,
            "label": node.label,
            "config": node.config.to_dict(),
        },
    }


def edge_to_dict(edge: Edge) -> Dict[str, Any]:
    return {"id": edge.id, "source": edge.source, "target": edge.target}


def export_graph(graph: Graph, timestamp: Optional[str] = None) -> Dict[str, Any]:
    """Convert a graph snapshot into an export document.

    Args:
        graph: The graph to export
        timestamp: Optional ISO-8601 timestamp, defaults to the current UTC time

    Returns:
        The document as a JSON-compatible dictionary
    """
    return {
        "nodes": [node_to_dict(node) for node in graph.nodes],
        "edges": [edge_to_dict(edge) for edge in graph.edges],
        "timestamp": timestamp or _now_iso(),
    }


def to_json(graph: Graph, indent: Optional[int] = 2, timestamp: Optional[str] = None) -> str:
    """Serialize a graph snapshot to the export document text."""
    return json.dumps(export_graph(graph, timestamp), indent=indent, ensure_ascii=False)


def parse_document(raw: str) -> PipelineDocument:
    """Parse export document text into its wire model.

    Raises:
        ParseError: If ``raw`` is not well-formed JSON
        SchemaError: If ``nodes`` or ``edges`` are missing or malformed
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Document is not valid UTF-8: {str(e)}") from e
    try:
        data = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise ParseError(f"Invalid JSON format: {str(e)}") from e

    if not isinstance(data, dict):
        raise SchemaError(
            "Document must be a JSON object",
            [ValidationError(field="document", message="Document must be a JSON object")],
        )
    missing = [
        ValidationError(field=key, message=f"'{key}' must be a list")
        for key in ("nodes", "edges")
        if not isinstance(data.get(key), list)
    ]
    if missing:
        raise SchemaError(
            "Document does not match schema: " + ", ".join(e.field for e in missing) + " missing or not a list",
            missing,
        )
    try:
        return PipelineDocument.model_validate(data)
    except PydanticValidationError as e:
        raise SchemaError(f"JSON is valid but does not match schema: {str(e)}",
                          convert_pydantic_errors(e, "document")) from e


def document_to_graph(document: PipelineDocument) -> Graph:
    """Convert a parsed document into a graph snapshot.

    Raises:
        SchemaError: If a node has an unknown kind or an invalid config, or
                     if node or edge ids are duplicated
    """
    errors: List[ValidationError] = []
    nodes: List[Node] = []
    seen_nodes = set()
    for index, entry in enumerate(document.nodes):
        kind = NodeKind.parse(entry.kind_name)
        if kind is None:
            errors.append(ValidationError(
                field="nodes", node_id=entry.id, details=(str(index),),
                message=f"Unknown node kind {entry.kind_name!r}",
            ))
            continue
        if entry.id in seen_nodes:
            errors.append(ValidationError(
                field="nodes", node_id=entry.id, details=(str(index),),
                message=f"Duplicate node id '{entry.id}'",
            ))
            continue
        seen_nodes.add(entry.id)
        try:
            config = coerce_config(kind, entry.data.config)
        except SchemaError as e:
            errors.extend(err.model_copy(update={"node_id": entry.id}) for err in e.errors)
            continue
        nodes.append(Node(
            id=entry.id,
            type=kind,
            position=entry.position,
            label=entry.data.label or kind.default_label,
            config=config,
        ))

    edges: List[Edge] = []
    seen_edges = set()
    for index, entry in enumerate(document.edges):
        if entry.id in seen_edges:
            errors.append(ValidationError(
                field="edges", edge_id=entry.id, details=(str(index),),
                message=f"Duplicate edge id '{entry.id}'",
            ))
            continue
        seen_edges.add(entry.id)
        edges.append(Edge(id=entry.id, source=entry.source, target=entry.target))

    if errors:
        raise SchemaError(f"Document contains {len(errors)} invalid entries", errors)
    return Graph(nodes=tuple(nodes), edges=tuple(edges))


def import_graph(raw: str) -> Graph:
    """Deserialize export document text into a graph snapshot.

    Nothing is applied anywhere; callers swap the returned graph in only
    once this function has returned.

    Raises:
        ParseError: If ``raw`` is not well-formed JSON
        SchemaError: If the document does not have the expected shape
    """
    return document_to_graph(parse_document(raw))
