"""Catalog of node kinds offered by the element palette."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel

from pipeline_editor.graph.schema import NodeKind


class PaletteEntry(BaseModel):
    """A draggable palette element."""
    kind: NodeKind
    label: str
    description: str


PALETTE: List[PaletteEntry] = [
    PaletteEntry(kind=NodeKind.DATA_SOURCE, label="Data Source",
                 description="Input data from databases, APIs, or files"),
    PaletteEntry(kind=NodeKind.TRANSFORM, label="Transform",
                 description="Process and modify data records"),
    PaletteEntry(kind=NodeKind.FILTER, label="Filter",
                 description="Filter data based on conditions"),
    PaletteEntry(kind=NodeKind.AGGREGATE, label="Aggregate",
                 description="Group and summarize data"),
    PaletteEntry(kind=NodeKind.OUTPUT, label="Output",
                 description="Export processed data"),
]

_BY_KIND: Dict[NodeKind, PaletteEntry] = {entry.kind: entry for entry in PALETTE}


def get_entry(kind: NodeKind) -> PaletteEntry:
    return _BY_KIND[kind]


def parse_drop_payload(payload: Any) -> Optional[NodeKind]:
    """Return the node kind named by a drag-and-drop payload.

    Anything that is not exactly one of the NodeKind values yields None.
    """
    if not isinstance(payload, str):
        return None
    return NodeKind.parse(payload)
