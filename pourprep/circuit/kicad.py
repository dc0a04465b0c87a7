"""KiCad PCB loader using kiutils.

Turns a .kicad_pcb board into the same circuit elements the circuit JSON
parser produces, plus a connectivity map keyed by KiCad net name.
"""
import logging
import math
from pathlib import Path
from typing import Optional, Union

from kiutils.board import Board

from ..config import KICAD_LAYER_REFS, OUTLINE_JOIN_TOLERANCE
from ..connectivity.resolver import ConnectivityMap
from ..exceptions import BoardFileError
from .models import (
    CircuitElement, PcbBoard, PcbHole, PcbPlatedHole, PcbSmtPad,
    PcbTrace, PcbVia, Point, RoutePoint, SourceNet
)
from .transform import arc_points, footprint_to_board, rotated_extent

log = logging.getLogger(__name__)

XY = tuple[float, float]


def _same_point(a: XY, b: XY) -> bool:
    return math.hypot(a[0] - b[0], a[1] - b[1]) <= OUTLINE_JOIN_TOLERANCE


def chain_outline(edges: list[list[XY]]) -> list[XY]:
    """
    Join open Edge.Cuts strokes into one ring.

    Starts from the first stroke and keeps appending whichever unused stroke
    touches the current end, reversing it when needed. Strokes that never
    connect are left out.

    Args:
        edges: Polylines (line = 2 points, arc = several)

    Returns:
        Ordered ring vertices, without repeating the first vertex at the end
    """
    if not edges:
        return []

    ring = list(edges[0])
    unused = list(edges[1:])
    while unused:
        tail = ring[-1]
        for i, edge in enumerate(unused):
            if _same_point(edge[0], tail):
                ring.extend(edge[1:])
            elif _same_point(edge[-1], tail):
                ring.extend(reversed(edge[:-1]))
            else:
                continue
            del unused[i]
            break
        else:
            log.debug("Edge.Cuts has %d disconnected strokes", len(unused))
            break

    if len(ring) > 1 and _same_point(ring[0], ring[-1]):
        ring.pop()
    return ring


class KiCadBoardLoader:
    """Loads a KiCad board as circuit elements."""

    def __init__(self, board: Board):
        """Convert an already-parsed kiutils board."""
        self.board = board

        # Build net lookup
        self._net_names: dict[int, str] = {}
        for net in self.board.nets:
            self._net_names[net.number] = net.name

        self._copper_layers = self._board_copper_layers()
        self._elements: list[CircuitElement] = []
        self._net_map: dict[str, str] = {}
        self._used_ids: dict[str, int] = {}

        self._load_footprint_pads()
        self._load_traces_and_vias()
        self._load_nets()
        self._elements.insert(0, self._load_board())

    @classmethod
    def from_file(cls, pcb_path: Union[str, Path]) -> "KiCadBoardLoader":
        """Load and convert a .kicad_pcb file."""
        pcb_path = Path(pcb_path)
        if not pcb_path.exists():
            raise BoardFileError(f"Board file not found: {pcb_path}")
        try:
            board = Board.from_file(str(pcb_path))
        except Exception as e:
            raise BoardFileError(f"Could not parse {pcb_path}: {e}") from e
        log.info("Loaded KiCad board %s", pcb_path)
        return cls(board)

    def _board_copper_layers(self) -> list[str]:
        """Copper layers declared by the board, front to back."""
        layers = [
            layer.name for layer in (self.board.layers or [])
            if layer.name in KICAD_LAYER_REFS
        ]
        return layers or ["F.Cu", "B.Cu"]

    def _expand_layers(self, layers: list[str]) -> list[str]:
        """Expand wildcards like *.Cu and map copper layers to layer refs."""
        expanded = []
        for layer in layers:
            if layer == "*.Cu":
                expanded.extend(self._copper_layers)
            elif layer == "F&B.Cu":
                expanded.extend(["F.Cu", "B.Cu"])
            elif layer in KICAD_LAYER_REFS:
                expanded.append(layer)
        refs = []
        for layer in expanded:
            ref = KICAD_LAYER_REFS[layer]
            if ref not in refs:
                refs.append(ref)
        return refs

    def _via_layers(self, layers: list[str]) -> list[str]:
        """Every copper layer between the two layers a via connects."""
        ends = [self._copper_layers.index(l) for l in layers if l in self._copper_layers]
        if len(ends) < 2:
            return self._expand_layers(layers)
        first, last = min(ends), max(ends)
        return [KICAD_LAYER_REFS[l] for l in self._copper_layers[first:last + 1]]

    def _unique_id(self, base: str) -> str:
        """Make ids unique when footprints repeat pad numbers."""
        count = self._used_ids.get(base, 0)
        self._used_ids[base] = count + 1
        return base if count == 0 else f"{base}_{count}"

    def _register_net(self, element_id: str, net_id: int) -> None:
        name = self._net_names.get(net_id, "")
        if net_id and name:
            self._net_map[element_id] = name

    def _load_footprint_pads(self) -> None:
        """Convert footprint pads to SMT pads, plated holes and holes."""
        for fp in self.board.footprints:
            fp_x = fp.position.X
            fp_y = fp.position.Y
            fp_angle = fp.position.angle or 0.0
            reference = fp.properties.get("Reference", "")

            for pad in fp.pads:
                x, y = footprint_to_board(pad.position.X, pad.position.Y, fp_x, fp_y, fp_angle)
                # Pad angles are already board-absolute in KiCad 9 files
                angle = pad.position.angle or 0.0
                layers = self._expand_layers(list(pad.layers) if pad.layers else [])
                pad_id = self._unique_id(f"{reference}_{pad.number}")
                net_id = pad.net.number if pad.net else 0

                element = self._pad_element(pad, pad_id, x, y, angle, layers)
                if element is None:
                    continue
                self._elements.append(element)
                self._register_net(pad_id, net_id)

    def _pad_element(
        self, pad, pad_id: str, x: float, y: float, angle: float, layers: list[str]
    ) -> Optional[CircuitElement]:
        width = pad.size.X
        height = pad.size.Y

        if pad.type == "smd":
            if not layers:
                return None
            if pad.shape == "circle":
                return PcbSmtPad(
                    pcb_smtpad_id=pad_id, shape="circle", layer=layers[0],
                    x=x, y=y, radius=width / 2
                )
            box_w, box_h = rotated_extent(width, height, angle)
            return PcbSmtPad(
                pcb_smtpad_id=pad_id, shape="rect", layer=layers[0],
                x=x, y=y, width=box_w, height=box_h
            )

        drill = pad.drill.diameter if pad.drill and pad.drill.diameter else None

        if pad.type == "thru_hole":
            return PcbPlatedHole(
                pcb_plated_hole_id=pad_id,
                shape=pad.shape if pad.shape else "circle",
                layers=layers,
                x=x,
                y=y,
                outer_diameter=width,
                hole_diameter=drill,
            )

        if pad.type == "np_thru_hole":
            oval = bool(pad.drill and pad.drill.oval)
            return PcbHole(
                pcb_hole_id=pad_id,
                hole_shape="oval" if oval else "circle",
                x=x,
                y=y,
                hole_diameter=drill or width,
            )

        log.debug("Skipping %s pad %s", pad.type, pad_id)
        return None

    def _load_traces_and_vias(self) -> None:
        """Convert segments, arcs and vias."""
        for index, item in enumerate(self.board.traceItems):
            item_type = type(item).__name__
            net_id = item.net if item.net else 0

            if item_type in ("Segment", "Arc"):
                layer = KICAD_LAYER_REFS.get(item.layer)
                if layer is None:
                    continue
                if item_type == "Segment":
                    points = [(item.start.X, item.start.Y), (item.end.X, item.end.Y)]
                else:
                    points = arc_points(
                        (item.start.X, item.start.Y),
                        (item.mid.X, item.mid.Y),
                        (item.end.X, item.end.Y),
                    )
                trace_id = f"{item_type.lower()}_{index}"
                self._elements.append(PcbTrace(
                    pcb_trace_id=trace_id,
                    route=[
                        RoutePoint(route_type="wire", x=px, y=py, width=item.width, layer=layer)
                        for px, py in points
                    ],
                ))
                self._register_net(trace_id, net_id)

            elif item_type == "Via":
                via_id = f"via_{index}"
                self._elements.append(PcbVia(
                    pcb_via_id=via_id,
                    x=item.position.X,
                    y=item.position.Y,
                    outer_diameter=item.size,
                    hole_diameter=item.drill,
                    layers=self._via_layers(list(item.layers) if item.layers else []),
                ))
                self._register_net(via_id, net_id)

    def _load_nets(self) -> None:
        """One source net per named KiCad net, keyed by its own name."""
        for net_id, name in self._net_names.items():
            if not net_id or not name:
                continue
            source_net_id = f"net_{net_id}"
            self._elements.append(SourceNet(source_net_id=source_net_id, name=name))
            self._net_map[source_net_id] = name

    def _edge_cut_shapes(self) -> tuple[list[list[XY]], list[list[XY]]]:
        """Closed rings and open strokes found on Edge.Cuts."""
        rings: list[list[XY]] = []
        strokes: list[list[XY]] = []

        for item in self.board.graphicItems:
            if getattr(item, "layer", None) != "Edge.Cuts":
                continue

            item_type = type(item).__name__
            if item_type == "GrLine":
                strokes.append([(item.start.X, item.start.Y), (item.end.X, item.end.Y)])
            elif item_type == "GrArc":
                strokes.append(arc_points(
                    (item.start.X, item.start.Y),
                    (item.mid.X, item.mid.Y),
                    (item.end.X, item.end.Y),
                ))
            elif item_type == "GrRect":
                x1, y1 = item.start.X, item.start.Y
                x2, y2 = item.end.X, item.end.Y
                rings.append([(x1, y1), (x2, y1), (x2, y2), (x1, y2)])
            elif item_type == "GrPoly" and item.coordinates:
                rings.append([(p.X, p.Y) for p in item.coordinates])
            elif item_type == "GrCircle":
                radius = math.hypot(item.end.X - item.center.X, item.end.Y - item.center.Y)
                rings.append([
                    (item.center.X + radius * math.cos(2 * math.pi * i / 32),
                     item.center.Y + radius * math.sin(2 * math.pi * i / 32))
                    for i in range(32)
                ])

        return rings, strokes

    def _load_board(self) -> PcbBoard:
        """Board size and outline from Edge.Cuts, or from the pads if there is none."""
        rings, strokes = self._edge_cut_shapes()
        outline = rings[0] if rings else chain_outline(strokes)

        if len(outline) >= 3:
            xs = [p[0] for p in outline]
            ys = [p[1] for p in outline]
            return PcbBoard(
                width=max(xs) - min(xs),
                height=max(ys) - min(ys),
                center=Point(x=(min(xs) + max(xs)) / 2, y=(min(ys) + max(ys)) / 2),
                outline=[Point(x=x, y=y) for x, y in outline],
            )

        xs: list[float] = []
        ys: list[float] = []
        for element in self._elements:
            if isinstance(element, PcbSmtPad) and element.shape == "rect":
                xs.extend([element.x - element.width / 2, element.x + element.width / 2])
                ys.extend([element.y - element.height / 2, element.y + element.height / 2])
            elif isinstance(element, (PcbSmtPad, PcbPlatedHole, PcbHole, PcbVia)) and element.x is not None:
                xs.append(element.x)
                ys.append(element.y)

        if not xs:
            return PcbBoard(width=0, height=0)

        log.debug("No Edge.Cuts outline, sizing board from pads")
        return PcbBoard(
            width=max(xs) - min(xs),
            height=max(ys) - min(ys),
            center=Point(x=(min(xs) + max(xs)) / 2, y=(min(ys) + max(ys)) / 2),
        )

    @property
    def elements(self) -> list[CircuitElement]:
        """Board element first, then pads, traces, vias and nets."""
        return self._elements

    @property
    def connectivity_map(self) -> ConnectivityMap:
        """Element id to KiCad net name."""
        return ConnectivityMap(self._net_map)

    @property
    def nets(self) -> dict[int, str]:
        """Get net ID to name mapping."""
        return self._net_names
