"""Data models for circuit board elements.

Each recognized circuit JSON record type has a pydantic model. Fields a kind
needs for its shape are checked here, so later stages can rely on them.
"""
from typing import Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Point(BaseModel):
    """A 2D point (mm)."""
    x: float
    y: float


def _require(model: BaseModel, shape: str, *names: str) -> None:
    """Raise ValueError if any of the named fields is unset."""
    missing = [name for name in names if getattr(model, name) is None]
    if missing:
        raise ValueError(f"shape '{shape}' requires {', '.join(missing)}")


# Element identifiers are connectivity lookup keys and may not be empty
ElementId = Annotated[str, Field(min_length=1)]


class CircuitElement(BaseModel):
    """Common base for circuit records."""
    model_config = ConfigDict(extra="ignore")

    # Name of the field holding the element's identifier
    ID_FIELD: ClassVar[str] = ""

    type: str

    @property
    def element_id(self) -> str:
        """Stable identifier of this element."""
        return getattr(self, self.ID_FIELD)


class PcbBoard(CircuitElement):
    """The board itself: size, center and optional outline."""
    ID_FIELD: ClassVar[str] = "pcb_board_id"

    type: Literal["pcb_board"] = "pcb_board"
    pcb_board_id: ElementId = "pcb_board_0"
    # Only needed when there is no outline to take bounds from
    width: Optional[float] = None
    height: Optional[float] = None
    center: Point = Point(x=0, y=0)
    outline: Optional[list[Point]] = None


class PcbSmtPad(CircuitElement):
    """A surface-mount pad on a single copper layer."""
    ID_FIELD: ClassVar[str] = "pcb_smtpad_id"

    type: Literal["pcb_smtpad"] = "pcb_smtpad"
    pcb_smtpad_id: ElementId
    shape: str  # rect, circle (others are accepted but not extracted)
    layer: str
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    radius: Optional[float] = None
    pcb_port_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_geometry(self) -> "PcbSmtPad":
        if self.shape == "rect":
            _require(self, self.shape, "x", "y", "width", "height")
        elif self.shape == "circle":
            _require(self, self.shape, "x", "y", "radius")
        return self


class PcbPlatedHole(CircuitElement):
    """A plated through hole spanning a set of copper layers."""
    ID_FIELD: ClassVar[str] = "pcb_plated_hole_id"

    type: Literal["pcb_plated_hole"] = "pcb_plated_hole"
    pcb_plated_hole_id: ElementId
    shape: str  # circle, oval, pill, ...
    layers: list[str]
    x: Optional[float] = None
    y: Optional[float] = None
    outer_diameter: Optional[float] = None
    hole_diameter: Optional[float] = None
    pcb_port_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_geometry(self) -> "PcbPlatedHole":
        if self.shape == "circle":
            _require(self, self.shape, "x", "y", "outer_diameter")
        return self


class PcbHole(CircuitElement):
    """An unplated hole going through every layer."""
    ID_FIELD: ClassVar[str] = "pcb_hole_id"

    type: Literal["pcb_hole"] = "pcb_hole"
    pcb_hole_id: ElementId
    hole_shape: str = "circle"
    x: Optional[float] = None
    y: Optional[float] = None
    hole_diameter: Optional[float] = None

    @model_validator(mode="after")
    def _check_geometry(self) -> "PcbHole":
        if self.hole_shape == "circle":
            _require(self, self.hole_shape, "x", "y", "hole_diameter")
        return self


class PcbCutout(CircuitElement):
    """A board cutout (rect, circle or polygon) going through every layer."""
    ID_FIELD: ClassVar[str] = "pcb_cutout_id"

    type: Literal["pcb_cutout"] = "pcb_cutout"
    pcb_cutout_id: ElementId
    shape: str  # rect, circle, polygon (others are accepted but not extracted)
    center: Optional[Point] = None
    width: Optional[float] = None
    height: Optional[float] = None
    radius: Optional[float] = None
    points: Optional[list[Point]] = None

    @model_validator(mode="after")
    def _check_geometry(self) -> "PcbCutout":
        if self.shape == "rect":
            _require(self, self.shape, "center", "width", "height")
        elif self.shape == "circle":
            _require(self, self.shape, "center", "radius")
        elif self.shape == "polygon":
            _require(self, self.shape, "points")
            if len(self.points) < 3:
                raise ValueError("shape 'polygon' requires at least 3 points")
        return self


class PcbVia(CircuitElement):
    """A via connecting copper layers."""
    ID_FIELD: ClassVar[str] = "pcb_via_id"

    type: Literal["pcb_via"] = "pcb_via"
    pcb_via_id: ElementId
    x: float
    y: float
    outer_diameter: float
    hole_diameter: Optional[float] = None
    layers: list[str]
    pcb_trace_id: Optional[str] = None


class RoutePoint(BaseModel):
    """One waypoint of a trace route."""
    model_config = ConfigDict(extra="ignore")

    route_type: str  # wire, via, ...
    x: float
    y: float
    width: Optional[float] = None
    layer: Optional[str] = None
    from_layer: Optional[str] = None
    to_layer: Optional[str] = None
    start_pcb_port_id: Optional[str] = None
    end_pcb_port_id: Optional[str] = None

    @model_validator(mode="after")
    def _check_wire(self) -> "RoutePoint":
        if self.route_type == "wire":
            _require(self, self.route_type, "width", "layer")
        return self

    @property
    def is_wire(self) -> bool:
        return self.route_type == "wire"


class PcbTrace(CircuitElement):
    """A copper trace described by its ordered route."""
    ID_FIELD: ClassVar[str] = "pcb_trace_id"

    type: Literal["pcb_trace"] = "pcb_trace"
    pcb_trace_id: ElementId
    route: list[RoutePoint]
    source_trace_id: Optional[str] = None


class PcbPort(CircuitElement):
    """Physical port linking pads to a logical source port."""
    ID_FIELD: ClassVar[str] = "pcb_port_id"

    type: Literal["pcb_port"] = "pcb_port"
    pcb_port_id: ElementId
    source_port_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None
    layers: list[str] = []


class SourcePort(CircuitElement):
    """Logical component port."""
    ID_FIELD: ClassVar[str] = "source_port_id"

    type: Literal["source_port"] = "source_port"
    source_port_id: ElementId
    name: Optional[str] = None


class SourceNet(CircuitElement):
    """Named logical net (e.g. GND)."""
    ID_FIELD: ClassVar[str] = "source_net_id"

    type: Literal["source_net"] = "source_net"
    source_net_id: ElementId
    name: str
    subcircuit_connectivity_map_key: Optional[str] = None


class SourceTrace(CircuitElement):
    """Logical connection between source ports and nets."""
    ID_FIELD: ClassVar[str] = "source_trace_id"

    type: Literal["source_trace"] = "source_trace"
    source_trace_id: ElementId
    connected_source_port_ids: list[str] = []
    connected_source_net_ids: list[str] = []


# Elements that can produce pads
BoardElement = Union[PcbSmtPad, PcbPlatedHole, PcbHole, PcbCutout, PcbVia, PcbTrace]

AnyCircuitElement = Union[
    PcbBoard, PcbSmtPad, PcbPlatedHole, PcbHole, PcbCutout, PcbVia, PcbTrace,
    PcbPort, SourcePort, SourceNet, SourceTrace,
]

# Model for each recognized record type tag
ELEMENT_MODELS: dict[str, type[CircuitElement]] = {
    model.model_fields["type"].default: model
    for model in (
        PcbBoard, PcbSmtPad, PcbPlatedHole, PcbHole, PcbCutout, PcbVia,
        PcbTrace, PcbPort, SourcePort, SourceNet, SourceTrace,
    )
}
