"""Status summary shown for the current pipeline."""

from typing import List
from pydantic import BaseModel

from pipeline_editor.graph.schema import Graph, ValidationError


class PipelineStatus(BaseModel):
    node_count: int
    edge_count: int
    error_count: int
    text: str

    @property
    def is_valid(self) -> bool:
        return self.node_count > 0 and self.error_count == 0


def summarize(graph: Graph, errors: List[ValidationError]) -> PipelineStatus:
    """Summarize a graph and its validation errors for the status bar."""
    if errors:
        text = f"{len(errors)} Error{'s' if len(errors) > 1 else ''}"
    elif graph.nodes:
        text = "Valid Pipeline"
    else:
        text = "Empty Pipeline"
    return PipelineStatus(
        node_count=len(graph.nodes),
        edge_count=len(graph.edges),
        error_count=len(errors),
        text=text,
    )
