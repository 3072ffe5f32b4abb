"""Flat-file storage for pipeline documents.

Pipelines are kept as export documents, one ``<name>.json`` file per
pipeline, inside a single directory.
"""

import os
from pathlib import Path
from typing import Optional, Union
import logging

from .exceptions import StorageError
from .schema import Graph
from .serialization import to_json

# Set up logging
logger = logging.getLogger(__name__)


def write_document(graph: Graph, path: Union[str, Path], indent: Optional[int] = 2) -> Path:
    """Write ``graph`` as an export document to ``path``.

    Raises:
        StorageError: If writing fails
    """
    file_path = Path(path)
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(to_json(graph, indent=indent))
    except OSError as e:
        raise StorageError(f"Failed to write pipeline to {path}: {str(e)}") from e
    return file_path


def read_document(path: Union[str, Path]) -> str:
    """Read the raw text of an export document.

    Raises:
        FileNotFoundError: If the file does not exist
        StorageError: If reading fails
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise StorageError(f"Failed to read pipeline from {path}: {str(e)}") from e


class PipelineStorage:
    """File-based storage for pipeline documents."""

    def __init__(self, base_path: Union[str, Path, None] = None, indent: Optional[int] = 2):
        """Initialize the storage system.

        Args:
            base_path: The directory holding pipeline documents.
                       If None, uses a 'pipelines' directory in the working directory.
            indent: JSON indentation used when writing documents
        """
        if base_path is None:
            base_path = Path(os.getcwd()) / "pipelines"
        self.base_path = Path(base_path)
        self.indent = indent
        logger.debug(f"Initialized PipelineStorage with base path: {self.base_path}")

    def path_for(self, name: str) -> Path:
        filename = name if name.endswith(".json") else f"{name}.json"
        return self.base_path / filename

    def save(self, graph: Graph, name: str) -> Path:
        """Save a pipeline under ``name``.

        Returns:
            The path the document was written to

        Raises:
            StorageError: If saving fails
        """
        path = write_document(graph, self.path_for(name), indent=self.indent)
        logger.debug(f"Saved pipeline '{name}' to {path}")
        return path
