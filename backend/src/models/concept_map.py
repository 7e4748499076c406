"""Concept map models: derived layout snapshot, view state and render frame."""

from __future__ import annotations

from enum import Enum
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_PALETTE: Tuple[str, ...] = (
    "hsl(250 60% 70%)",
    "hsl(190 60% 60%)",
    "hsl(150 50% 60%)",
    "hsl(35 80% 65%)",
    "hsl(340 65% 70%)",
    "hsl(210 65% 65%)",
    "hsl(280 50% 68%)",
    "hsl(100 45% 60%)",
)


class LayoutSettings(BaseModel):
    """Tunable constants for both layout engines."""

    model_config = ConfigDict(frozen=True)

    canvas_width: float = Field(default=1200.0, gt=0)
    canvas_height: float = Field(default=900.0, gt=0)
    palette: Tuple[str, ...] = Field(default=DEFAULT_PALETTE, min_length=1)

    overview_iterations: int = Field(default=40, ge=0)
    overview_margin: float = Field(default=8.0, ge=0)
    containment_padding: float = Field(default=5.0, ge=0)

    expanded_iterations: int = Field(default=50, ge=0)
    expanded_margin: float = Field(default=15.0, ge=0)


class ClusterBounds(BaseModel):
    """Bounding circle of one cluster in overview mode."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    radius: float


class Group(BaseModel):
    """All concepts of one note, rendered as one cluster."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Position in derivation order (render key only)")
    key: str = Field(..., description="Stable identity: the owning note id")
    note_id: str
    name: str
    concepts: Tuple[str, ...]
    color: str
    bounds: Optional[ClusterBounds] = None


class ConceptNode(BaseModel):
    """One positioned concept bubble."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Sequential render key")
    key: str = Field(..., description="Stable identity: '<note_id>::<label>'")
    label: str
    x: float
    y: float
    size: float = Field(..., description="Bubble diameter in canvas units")
    group_id: int
    note_id: str
    color: str


class Connection(BaseModel):
    """A relationship edge between two concept labels of one note."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_label: str = Field(..., alias="from")
    to_label: str = Field(..., alias="to")
    explanation: str = ""
    note_id: str


class SuggestedConnection(BaseModel):
    """Raw relationship triple returned by the suggestion collaborator."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    from_label: str = Field(..., alias="from", min_length=1)
    to_label: str = Field(..., alias="to", min_length=1)
    explanation: str = ""


class LayoutResult(BaseModel):
    """Read-only output of one layout pass."""

    model_config = ConfigDict(frozen=True)

    groups: Tuple[Group, ...] = ()
    nodes: Tuple[ConceptNode, ...] = ()


class ViewMode(str, Enum):
    OVERVIEW = "overview"
    EXPANDED = "expanded"


class ViewState(BaseModel):
    """Interaction state owned by the interaction controller."""

    mode: ViewMode = ViewMode.OVERVIEW
    expanded_group: Optional[str] = None
    selected: Optional[str] = None
    hovered: Optional[str] = None
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0
    dragging: bool = False
    drag_origin_x: float = 0.0
    drag_origin_y: float = 0.0


EventType = Literal[
    "expand",
    "collapse",
    "select",
    "hover",
    "drag_start",
    "drag_move",
    "drag_end",
    "wheel",
    "zoom_in",
    "zoom_out",
    "reset_view",
]


class InteractionEvent(BaseModel):
    """A single user gesture forwarded to the interaction controller."""

    type: EventType
    group_key: Optional[str] = None
    node_key: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    delta_y: Optional[float] = None

    @model_validator(mode="after")
    def _check_payload(self) -> "InteractionEvent":
        if self.type == "expand" and not self.group_key:
            raise ValueError("expand requires group_key")
        if self.type == "select" and not self.node_key:
            raise ValueError("select requires node_key")
        if self.type in {"drag_start", "drag_move"} and (self.x is None or self.y is None):
            raise ValueError(f"{self.type} requires x and y")
        if self.type == "wheel" and self.delta_y is None:
            raise ValueError("wheel requires delta_y")
        return self


class FrameNode(BaseModel):
    """A node as handed to the renderer."""

    node: ConceptNode
    selected: bool = False
    hovered: bool = False
    dimmed: bool = False


class FrameConnection(BaseModel):
    """A renderable edge with resolved endpoint coordinates."""

    model_config = ConfigDict(populate_by_name=True)

    connection: Connection
    from_key: str
    to_key: str
    x1: float
    y1: float
    x2: float
    y2: float
    highlighted: bool = False
    dimmed: bool = False


class ViewTransform(BaseModel):
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0


class ConceptMapFrame(BaseModel):
    """Everything the rendering surface needs for one paint."""

    mode: ViewMode
    expanded_group: Optional[str] = None
    canvas_width: float
    canvas_height: float
    clusters: List[Group] = Field(default_factory=list)
    nodes: List[FrameNode] = Field(default_factory=list)
    connections: List[FrameConnection] = Field(default_factory=list)
    transform: ViewTransform = Field(default_factory=ViewTransform)
    selected: Optional[str] = None
    hovered: Optional[str] = None
    empty: bool = True


__all__ = [
    "DEFAULT_PALETTE",
    "LayoutSettings",
    "ClusterBounds",
    "Group",
    "ConceptNode",
    "Connection",
    "SuggestedConnection",
    "LayoutResult",
    "ViewMode",
    "ViewState",
    "EventType",
    "InteractionEvent",
    "FrameNode",
    "FrameConnection",
    "ViewTransform",
    "ConceptMapFrame",
]
