"""Data models for the copper pour input problem."""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, Union

from ..connectivity.keys import ConnectivityKey


def _point_dicts(points: list[tuple[float, float]]) -> list[dict[str, float]]:
    return [{"x": x, "y": y} for x, y in points]


@dataclass
class Bounds:
    """Axis-aligned bounding box (mm)."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def to_dict(self) -> dict[str, float]:
        return {
            "minX": self.min_x,
            "minY": self.min_y,
            "maxX": self.max_x,
            "maxY": self.max_y,
        }


@dataclass
class Pad:
    """Fields shared by every pad shape."""
    pad_id: str
    layer: str
    connectivity_key: ConnectivityKey

    shape: ClassVar[str] = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape": self.shape,
            "padId": self.pad_id,
            "layer": self.layer,
            "connectivityKey": str(self.connectivity_key),
        }


@dataclass
class RectPad(Pad):
    """Axis-aligned rectangular pad."""
    bounds: Bounds

    shape: ClassVar[str] = "rect"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["bounds"] = self.bounds.to_dict()
        return data


@dataclass
class CircularPad(Pad):
    """Circular pad, also used for holes and vias."""
    x: float
    y: float
    radius: float

    shape: ClassVar[str] = "circle"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(x=self.x, y=self.y, radius=self.radius)
        return data


@dataclass
class PolygonPad(Pad):
    """Polygon pad given by its ordered vertices."""
    points: list[tuple[float, float]]

    shape: ClassVar[str] = "polygon"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["points"] = _point_dicts(self.points)
        return data


@dataclass
class TracePad(Pad):
    """A run of same-layer trace segments with a uniform width."""
    segments: list[tuple[float, float]]
    width: float

    shape: ClassVar[str] = "trace"

    def __post_init__(self):
        if len(self.segments) < 2:
            raise ValueError(f"Trace pad {self.pad_id} needs at least 2 points")

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["segments"] = _point_dicts(self.segments)
        data["width"] = self.width
        return data


AnyPad = Union[RectPad, CircularPad, PolygonPad, TracePad]


@dataclass
class PourRegion:
    """The area to fill with copper, plus the margins the fill must keep."""
    layer: str
    bounds: Bounds
    connectivity_key: str  # Net the pour belongs to
    pad_margin: float
    trace_margin: float
    board_edge_margin: float = 0.0
    outline: Optional[list[tuple[float, float]]] = None  # True pour boundary, if known
    cutout_margin: Optional[float] = None

    shape: ClassVar[str] = "rect"

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape": self.shape,
            "layer": self.layer,
            "bounds": self.bounds.to_dict(),
            "outline": _point_dicts(self.outline) if self.outline is not None else None,
            "connectivityKey": self.connectivity_key,
            "padMargin": self.pad_margin,
            "traceMargin": self.trace_margin,
            "board_edge_margin": self.board_edge_margin,
            "cutout_margin": self.cutout_margin,
        }


@dataclass
class InputProblem:
    """Everything the pour solver needs for one pour."""
    pads: list[AnyPad] = field(default_factory=list)
    regions_for_pour: list[PourRegion] = field(default_factory=list)

    def get_pads_by_connectivity_key(self, key: str) -> list[AnyPad]:
        """Pads whose serialized connectivity key equals key."""
        return [p for p in self.pads if str(p.connectivity_key) == key]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pads": [pad.to_dict() for pad in self.pads],
            "regionsForPour": [region.to_dict() for region in self.regions_for_pour],
        }
