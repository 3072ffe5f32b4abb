"""Exceptions raised by the pipeline graph model."""

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .schema import ValidationError


class PipelineError(Exception):
    """Base class for all pipeline editor errors."""
    pass


class GraphReferenceError(PipelineError):
    """An operation named a node or edge id that does not exist."""

    def __init__(self, message: str, ref_id: Optional[str] = None):
        super().__init__(message)
        self.ref_id = ref_id


class NotFoundError(GraphReferenceError):
    """Raised when a node or edge to be mutated is absent from the store."""
    pass


class UnknownNodeKindError(PipelineError):
    """Raised when a node kind outside the closed NodeKind set is requested."""
    pass


class SchemaError(PipelineError):
    """Raised when content does not match a declared shape.

    The offending fields are available as ``errors``.
    """

    def __init__(self, message: str, errors: Optional[List["ValidationError"]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ParseError(PipelineError):
    """Raised when an import payload is not well-formed JSON."""
    pass


class ImportInProgressError(PipelineError):
    """Raised when a mutation is attempted while an import is in flight."""
    pass


class StorageError(PipelineError):
    """Raised when reading or writing a pipeline document fails."""
    pass
