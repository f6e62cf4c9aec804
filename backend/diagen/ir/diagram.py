from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Any, Dict, List, Optional, Union


# The nodes/edges/metadata shape is what saved diagrams and the editor
# exchange; unknown keys are kept so round-tripping loses nothing.


def _scalar_to_str(value):
    if isinstance(value, (int, float)):
        return str(value)
    return value


class Position(BaseModel):
    model_config = ConfigDict(extra="allow")

    x: Union[int, float] = 0
    y: Union[int, float] = 0


class DiagramNode(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    label: str = ""
    icon: Optional[str] = None     # candidate path, possibly invalid
    type: str = "service"
    position: Optional[Position] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("label", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value, info):
        default = "" if info.field_name == "label" else "service"
        value = _scalar_to_str(value)
        return value if isinstance(value, str) else default

    @field_validator("icon", mode="before")
    @classmethod
    def _coerce_icon(cls, value):
        value = _scalar_to_str(value)
        # Objects and lists are not paths; the node keeps no icon
        return value if value is None or isinstance(value, str) else None

    @field_validator("position", mode="wrap")
    @classmethod
    def _lenient_position(cls, value, handler):
        # Unparseable positions are left for grid placement
        try:
            return handler(value)
        except ValidationError:
            return None


class DiagramEdge(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    source: str
    target: str
    label: str = ""
    type: str = "orthogonal"

    @field_validator("id", "source", "target", mode="before")
    @classmethod
    def _coerce_ref(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("label", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value, info):
        default = "" if info.field_name == "label" else "orthogonal"
        value = _scalar_to_str(value)
        return value if isinstance(value, str) else default


# Declared optional fields left out of to_dict() when unset
_NODE_OPTIONAL = ("icon", "position")
_EDGE_OPTIONAL = ("id",)


class DiagramPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    nodes: List[DiagramNode] = Field(default_factory=list)
    edges: List[DiagramEdge] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> dict:
        data = self.model_dump()
        for node in data["nodes"]:
            for key in _NODE_OPTIONAL:
                if node.get(key) is None:
                    node.pop(key, None)
        for edge in data["edges"]:
            for key in _EDGE_OPTIONAL:
                if edge.get(key) is None:
                    edge.pop(key, None)
        return data
