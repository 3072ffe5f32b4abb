"""Pipeline graph model.

This module provides the schema, config registry, store, validation,
serialization and storage for pipeline graphs, and the editing facade
that composes them.
"""

from .schema import (
    NodeKind,
    Position,
    Node,
    Edge,
    Graph,
    ValidationError,
    GRAPH_FIELD,
    DataSourceConfig,
    TransformConfig,
    FilterConfig,
    AggregateConfig,
    OutputConfig,
    FieldMapping,
    FilterCondition,
    Aggregation,
)

from .exceptions import (
    PipelineError,
    GraphReferenceError,
    NotFoundError,
    UnknownNodeKindError,
    SchemaError,
    ParseError,
    ImportInProgressError,
    StorageError,
)

from .registry import (
    default_config,
    coerce_config,
    validate as validate_config,
)

from .store import GraphStore

from .validation import (
    validate_graph,
    is_valid,
    check_orphans,
    check_dangling_edges,
    check_node_configs,
    detect_cycles,
    check_self_loops,
    find_cycle_members,
)

from .serialization import (
    export_graph,
    import_graph,
    to_json,
)

from .storage import PipelineStorage

from .editor import PipelineEditor

__all__ = [
    # Schema
    'NodeKind',
    'Position',
    'Node',
    'Edge',
    'Graph',
    'ValidationError',
    'GRAPH_FIELD',
    'DataSourceConfig',
    'TransformConfig',
    'FilterConfig',
    'AggregateConfig',
    'OutputConfig',
    'FieldMapping',
    'FilterCondition',
    'Aggregation',

    # Errors
    'PipelineError',
    'GraphReferenceError',
    'NotFoundError',
    'UnknownNodeKindError',
    'SchemaError',
    'ParseError',
    'ImportInProgressError',
    'StorageError',

    # Registry
    'default_config',
    'coerce_config',
    'validate_config',

    # Store
    'GraphStore',

    # Validation
    'validate_graph',
    'is_valid',
    'check_orphans',
    'check_dangling_edges',
    'check_node_configs',
    'detect_cycles',
    'check_self_loops',
    'find_cycle_members',

    # Serialization
    'export_graph',
    'import_graph',
    'to_json',

    # Storage
    'PipelineStorage',

    # Facade
    'PipelineEditor',
]
