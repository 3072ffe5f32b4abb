"""Pipeline Editor.

This package provides the graph model behind a visual editor for composing
data-processing pipelines from typed nodes connected by edges.
"""

# Graph imports
from .graph import (
    NodeKind, Position, Node, Edge, Graph, ValidationError,
    GraphStore, PipelineEditor, PipelineStorage,
    validate_graph, export_graph, import_graph,
    PipelineError, GraphReferenceError, NotFoundError, UnknownNodeKindError,
    SchemaError, ParseError, ImportInProgressError, StorageError,
)

# Core imports
from .core import EditorSettings, load_settings, configure_logging, NotificationSink, RecordingSink
__version__ = "0.1.0"
__all__ = [
    # Graph
    "NodeKind",
    "Position",
    "Node",
    "Edge",
    "Graph",
    "ValidationError",
    "GraphStore",
    "PipelineEditor",
    "PipelineStorage",
    "validate_graph",
    "export_graph",
    "import_graph",

    # Errors
    "PipelineError",
    "GraphReferenceError",
    "NotFoundError",
    "UnknownNodeKindError",
    "SchemaError",
    "ParseError",
    "ImportInProgressError",
    "StorageError",

    # Core
    "EditorSettings",
    "load_settings",
    "configure_logging",
    "NotificationSink",
    "RecordingSink",
]
