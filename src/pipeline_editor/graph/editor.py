"""Graph editing facade for the pipeline editor.

This module provides the single interface a presentation layer uses to edit
a pipeline. The facade owns no graph state: it orchestrates the store, the
config registry, the validator and the serializer, and reports outcomes to
a notification sink.
"""

from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, List, Mapping, Optional, Tuple, Union
import logging

from pipeline_editor.core.notifications import NotificationSink, Variant
from pipeline_editor.core.palette import get_entry, parse_drop_payload
from pipeline_editor.core.settings import EditorSettings
from pipeline_editor.core.status import PipelineStatus, summarize

from . import registry
from .exceptions import (
    GraphReferenceError,
    ImportInProgressError,
    NotFoundError,
    ParseError,
    SchemaError,
    StorageError,
)
from .schema import ConfigRecord, Edge, Graph, Node, NodeKind, ValidationError
from .serialization import import_graph, to_json
from .storage import PipelineStorage, read_document, write_document
from .store import GraphStore, PositionLike
from .validation import validate_graph


# Set up logging
logger = logging.getLogger(__name__)


class PipelineEditor:
    """Unified interface for editing a pipeline graph.

    Mutations are synchronous and run to completion. The only asynchronous
    boundary is ``import_async``; while it waits for content, every mutating
    operation raises ImportInProgressError.
    """

    def __init__(self, store: Optional[GraphStore] = None,
                 notifier: Optional[NotificationSink] = None,
                 settings: Optional[EditorSettings] = None,
                 storage: Optional[PipelineStorage] = None):
        """Initialize the editor.

        Args:
            store: The graph store to edit. If None, starts with an empty graph.
            notifier: Sink for user-visible notifications. If None, notifications are logged.
            settings: Editor settings. If None, uses the defaults.
            storage: Storage for saved pipelines. If None, uses the settings' storage directory.
        """
        self.settings = settings or EditorSettings()
        self.store = store if store is not None else GraphStore()
        self.notifier = notifier if notifier is not None else NotificationSink()
        self.storage = storage or PipelineStorage(self.settings.storage_dir,
                                                  indent=self.settings.export_indent)
        self._importing = False

    def _ensure_idle(self) -> None:
        if self._importing:
            raise ImportInProgressError("An import is in progress; the graph cannot be edited")

    def _notify(self, title: str, description: str, variant: Variant = Variant.DEFAULT) -> None:
        self.notifier.notify(title, description, variant)

    # Queries

    def snapshot(self) -> Graph:
        return self.store.snapshot()

    def current_validation(self) -> List[ValidationError]:
        """Validate the current graph.

        Returns:
            All structural and configuration errors, empty if the pipeline is valid
        """
        return validate_graph(self.store.snapshot())

    def status(self) -> PipelineStatus:
        graph = self.store.snapshot()
        return summarize(graph, validate_graph(graph))

    def select_all(self) -> Tuple[List[str], List[str]]:
        """Return the ids of every node and edge."""
        node_ids, edge_ids = self.store.node_ids(), self.store.edge_ids()
        self._notify("All Selected", f"Selected {len(node_ids)} nodes and {len(edge_ids)} connections")
        return node_ids, edge_ids

    # Editing

    def add_node_at(self, kind: Union[str, NodeKind], position: Optional[PositionLike] = None) -> Node:
        """Add a node of ``kind`` with its default configuration.

        Raises:
            UnknownNodeKindError: If ``kind`` is not a node kind
        """
        self._ensure_idle()
        return self.store.add_node(kind, position)

    def drop_payload(self, payload: Any, position: Optional[PositionLike] = None) -> Optional[Node]:
        """Handle a palette drop; payloads naming no node kind are ignored."""
        kind = parse_drop_payload(payload)
        if kind is None:
            logger.warning(f"Ignoring drop payload {payload!r}")
            return None
        node = self.add_node_at(kind, position)
        logger.debug(f"Dropped {get_entry(kind).label} node as '{node.id}'")
        return node

    def connect(self, source_id: str, target_id: str) -> Edge:
        """Connect two nodes.

        Raises:
            GraphReferenceError: If either node does not exist
        """
        self._ensure_idle()
        try:
            return self.store.connect(source_id, target_id)
        except GraphReferenceError as e:
            self._notify("Connection Failed", str(e), Variant.DESTRUCTIVE)
            raise

    def configure(self, node_id: str,
                  config: Union[ConfigRecord, Mapping[str, Any]]) -> List[ValidationError]:
        """Replace a node's configuration if it passes the node kind's rules.

        An invalid configuration is not committed; the node keeps its
        previous configuration.

        Args:
            node_id: The node to configure
            config: The new configuration record or raw mapping

        Returns:
            The validation errors, empty if the configuration was committed

        Raises:
            NotFoundError: If the node does not exist
        """
        self._ensure_idle()
        node = self.store.get_node(node_id)
        if node is None:
            raise NotFoundError(f"Node '{node_id}' does not exist", node_id)

        errors = registry.validate(node.type, config)
        if errors:
            logger.warning(f"Rejected configuration for node '{node_id}': {len(errors)} errors")
            self._notify(
                "Invalid Configuration",
                "; ".join(str(error) for error in errors),
                Variant.DESTRUCTIVE,
            )
            return errors

        self.store.update_node_config(node_id, config)
        self._notify("Configuration Saved", f"Updated configuration of {node.label}")
        return []

    def move(self, node_id: str, position: PositionLike) -> Node:
        self._ensure_idle()
        return self.store.move_node(node_id, position)

    def rename(self, node_id: str, label: str) -> Node:
        self._ensure_idle()
        return self.store.rename_node(node_id, label)

    def delete_selection(self, node_ids: Iterable[str] = (),
                         edge_ids: Iterable[str] = ()) -> Tuple[int, int]:
        """Delete the selected nodes and edges.

        Edges incident to deleted nodes are removed with them.

        Returns:
            The number of nodes and of edges removed
        """
        self._ensure_idle()
        before = len(self.store)
        cascaded = self.store.delete_nodes(node_ids)
        removed_edges = self.store.delete_edges(edge_ids)
        removed_nodes = before - len(self.store)
        edge_count = len(cascaded) + len(removed_edges)
        if removed_nodes or edge_count:
            self._notify("Elements Deleted",
                         f"Removed {removed_nodes} nodes and {edge_count} connections")
        return removed_nodes, edge_count

    def clear(self) -> None:
        self._ensure_idle()
        self.store.clear()
        self._notify("Pipeline Cleared", "All nodes and connections were removed")

    def run(self) -> None:
        """Placeholder for pipeline execution; never touches the graph."""
        self._notify("Run Pipeline", "Pipeline execution is not available yet")

    # Export / import

    def export_document(self) -> str:
        """Return the current graph as export document text."""
        return to_json(self.store.snapshot(), indent=self.settings.export_indent)

    def export_to_file(self, path: Union[str, Path, None] = None) -> Path:
        """Write the current graph as an export document.

        Args:
            path: Destination file. If None, the configured export file name
                  inside the storage directory.

        Returns:
            The path written to

        Raises:
            StorageError: If the file cannot be written
        """
        if path is None:
            path = self.storage.base_path / self.settings.export_file_name
        try:
            written = write_document(self.store.snapshot(), path, indent=self.settings.export_indent)
        except StorageError as e:
            logger.error(f"Export failed: {str(e)}")
            self._notify("Export Error", str(e), Variant.DESTRUCTIVE)
            raise
        logger.info(f"Exported pipeline to {written}")
        self._notify("Workflow Exported", "Your pipeline has been exported successfully.")
        return written

    def import_from_file(self, contents: str) -> Graph:
        """Replace the current graph with an imported document.

        The old graph is discarded only once the new one has fully parsed.

        Args:
            contents: The raw document text

        Returns:
            The imported graph

        Raises:
            ParseError: If the contents are not well-formed JSON
            SchemaError: If the document does not have the expected shape
        """
        self._ensure_idle()
        return self._apply_import(contents)

    def _apply_import(self, contents: str) -> Graph:
        try:
            graph = import_graph(contents)
        except (ParseError, SchemaError) as e:
            logger.error(f"Import failed: {str(e)}")
            self._notify("Import Error",
                         "Failed to import workflow. Please check the file format.",
                         Variant.DESTRUCTIVE)
            raise
        self.store.replace(graph)
        logger.info(f"Imported pipeline with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
        self._notify("Workflow Imported", "Your pipeline has been imported successfully.")
        return graph

    def load_from_path(self, path: Union[str, Path]) -> Graph:
        """Import a document from a file on disk.

        Raises:
            StorageError: If the file cannot be read
        """
        self._ensure_idle()
        try:
            contents = read_document(path)
        except FileNotFoundError as e:
            self._notify("Import Error", f"File {path} not found", Variant.DESTRUCTIVE)
            raise StorageError(f"Pipeline file {path} not found") from e
        return self._apply_import(contents)

    async def import_async(self, read: Callable[[], Awaitable[str]]) -> Graph:
        """Import a document delivered asynchronously, e.g. by a file reader.

        No other editing operation may run while ``read`` is pending. If the
        read fails, the graph is left untouched and the error propagates.

        Args:
            read: Coroutine function returning the raw document text
        """
        self._ensure_idle()
        self._importing = True
        try:
            contents = await read()
        except Exception as e:
            logger.error(f"Reading import content failed: {str(e)}")
            self._notify("Import Error", f"Failed to read file: {str(e)}", Variant.DESTRUCTIVE)
            raise
        finally:
            self._importing = False
        return self._apply_import(contents)

    # Saving

    def save(self, name: Optional[str] = None) -> Optional[Path]:
        """Save the pipeline to storage if it passes validation.

        Args:
            name: Pipeline name. If None, the export file name is used.

        Returns:
            The path saved to, or None if validation blocked the save

        Raises:
            StorageError: If writing fails
        """
        errors = self.current_validation()
        if errors:
            logger.warning(f"Save blocked by {len(errors)} validation errors")
            self._notify("Cannot Save Pipeline",
                         f"Fix {len(errors)} validation error(s) before saving",
                         Variant.DESTRUCTIVE)
            return None
        try:
            path = self.storage.save(self.store.snapshot(), name or self.settings.export_file_name)
        except StorageError as e:
            self._notify("Save Error", str(e), Variant.DESTRUCTIVE)
            raise
        logger.info(f"Saved pipeline to {path}")
        self._notify("Pipeline Saved", f"Saved to {path.name}")
        return path
