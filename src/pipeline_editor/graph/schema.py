"""Schema definition for pipeline graphs.

This module provides the Pydantic models for nodes, edges and the per-kind
configuration records carried by nodes, together with the ValidationError
record reported by the registry and the validator.
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


GRAPH_FIELD = "__graph__"


class NodeKind(str, Enum):
    """Kinds of nodes available in a pipeline."""
    DATA_SOURCE = "data-source"
    TRANSFORM = "transform"
    FILTER = "filter"
    AGGREGATE = "aggregate"
    OUTPUT = "output"

    @property
    def default_label(self) -> str:
        """Human-readable label used when a node of this kind is created."""
        return self.value.replace("-", " ").capitalize()

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeKind"]:
        """Return the kind named by ``value``, or None if it names no kind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class Position(BaseModel):
    """Canvas coordinates of a node."""
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class ValidationError(BaseModel):
    """A single rule violation.

    Structural errors use ``GRAPH_FIELD`` as their field name; configuration
    errors carry the offending config field and the node they belong to.
    """
    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    node_id: Optional[str] = None
    edge_id: Optional[str] = None
    details: Tuple[str, ...] = ()

    def __str__(self) -> str:
        prefix = f"{self.node_id}." if self.node_id else ""
        return f"{prefix}{self.field}: {self.message}"


# Node configuration models

class ConfigRecord(BaseModel):
    """Base configuration for all node kinds.

    Records are immutable. Fields are exposed on the wire in camelCase;
    unknown keys are dropped.
    """
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Dump the record using its wire (camelCase) field names."""
        return self.model_dump(by_alias=True, mode="json")


class FieldMapping(ConfigRecord):
    source: str = ""
    target: str = ""


class FilterCondition(ConfigRecord):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    field: str = ""
    operator: str = "equals"
    value: str = ""
    logic: str = "AND"


class Aggregation(ConfigRecord):
    field: str = ""
    function: str = "sum"
    output_name: str = ""


class DataSourceConfig(ConfigRecord):
    """Configuration specific to 'data-source' nodes."""
    connection_string: str = ""
    table_name: str = ""
    refresh_interval: int = 30
    enable_cache: bool = True
    connection_type: str = "mysql"


class TransformConfig(ConfigRecord):
    """Configuration specific to 'transform' nodes."""
    script: str = ""
    mappings: Tuple[FieldMapping, ...] = ()
    language: str = "javascript"


class FilterConfig(ConfigRecord):
    """Configuration specific to 'filter' nodes."""
    conditions: Tuple[FilterCondition, ...] = ()
    enable_preview: bool = True


class AggregateConfig(ConfigRecord):
    """Configuration specific to 'aggregate' nodes."""
    group_by: Tuple[str, ...] = ()
    aggregations: Tuple[Aggregation, ...] = ()
    having: str = ""


class OutputConfig(ConfigRecord):
    """Configuration specific to 'output' nodes."""
    destination_type: str = "database"
    format: str = "json"
    batch_size: int = 1000
    compression: bool = False
    destination: str = ""


NodeConfig = Union[DataSourceConfig, TransformConfig, FilterConfig, AggregateConfig, OutputConfig]

CONFIG_MODELS: Dict[NodeKind, type] = {
    NodeKind.DATA_SOURCE: DataSourceConfig,
    NodeKind.TRANSFORM: TransformConfig,
    NodeKind.FILTER: FilterConfig,
    NodeKind.AGGREGATE: AggregateConfig,
    NodeKind.OUTPUT: OutputConfig,
}


class Node(BaseModel):
    """Definition of a pipeline node."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique identifier for the node")
    type: NodeKind = Field(..., description="Kind of the node")
    position: Position = Field(default_factory=Position)
    label: str = Field("", description="Human-readable label shown on the canvas")
    config: NodeConfig = Field(..., description="Kind-specific configuration")

    @model_validator(mode="before")
    @classmethod
    def coerce_config(cls, data: Any) -> Any:
        """Build the configuration record matching the node kind.

        A missing config is populated with the kind's defaults and a missing
        label with the kind's default label.
        """
        if not isinstance(data, dict):
            return data
        kind = NodeKind.parse(data.get("type"))
        if kind is None:
            return data  # Field validation reports the bad kind

        data = dict(data)
        model = CONFIG_MODELS[kind]
        config = data.get("config")
        if config is None:
            data["config"] = model()
        elif isinstance(config, ConfigRecord):
            if not isinstance(config, model):
                raise ValueError(
                    f"{type(config).__name__} cannot configure a '{kind.value}' node"
                )
        else:
            data["config"] = model.model_validate(config)

        if not data.get("label"):
            data["label"] = kind.default_label
        return data


class Edge(BaseModel):
    """Directed connection from one node's output to another's input."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique identifier for the edge")
    source: str = Field(..., description="ID of the source node")
    target: str = Field(..., description="ID of the target node")

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class Graph(BaseModel):
    """Immutable snapshot of a pipeline graph."""
    model_config = ConfigDict(frozen=True)

    nodes: Tuple[Node, ...] = ()
    edges: Tuple[Edge, ...] = ()

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges
