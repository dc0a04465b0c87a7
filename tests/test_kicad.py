"""Tests for loading KiCad boards with kiutils."""
import pytest

from kiutils.board import Board
from kiutils.footprint import DrillDefinition, Footprint, Pad
from kiutils.items.brditems import Arc, LayerToken, Segment, Via
from kiutils.items.common import Net, Position
from kiutils.items.gritems import GrLine, GrRect

from pourprep import PourRequest, convert_pours
from pourprep.circuit import PcbBoard, PcbHole, PcbPlatedHole, PcbSmtPad, PcbTrace, PcbVia
from pourprep.circuit.kicad import KiCadBoardLoader, chain_outline
from pourprep.exceptions import BoardFileError
from pourprep.problem import TracePad


def make_footprint(reference, x, y, angle, pads):
    fp = Footprint()
    fp.position = Position(X=x, Y=y, angle=angle)
    fp.properties = {"Reference": reference, "Value": ""}
    fp.pads = pads
    return fp


@pytest.fixture
def board():
    """Small two-layer board with a resistor, a connector pin and a mounting hole."""
    gnd = Net(number=1, name="GND")
    vcc = Net(number=2, name="VCC")

    b = Board()
    b.nets = [Net(number=0, name=""), gnd, vcc]

    b.footprints = [
        make_footprint("R1", 10, 10, 90, [
            Pad(number="1", type="smd", shape="rect",
                position=Position(X=-1, Y=0, angle=90), size=Position(X=1.0, Y=0.5),
                layers=["F.Cu", "F.Paste", "F.Mask"], net=gnd),
            Pad(number="2", type="smd", shape="circle",
                position=Position(X=1, Y=0, angle=90), size=Position(X=0.6, Y=0.6),
                layers=["F.Cu", "F.Paste", "F.Mask"], net=vcc),
        ]),
        make_footprint("J1", 2, 2, 0, [
            Pad(number="1", type="thru_hole", shape="circle",
                position=Position(X=0, Y=0), size=Position(X=1.5, Y=1.5),
                drill=DrillDefinition(diameter=0.8), layers=["*.Cu", "*.Mask"], net=gnd),
            Pad(number="", type="np_thru_hole", shape="circle",
                position=Position(X=5, Y=0), size=Position(X=2.0, Y=2.0),
                drill=DrillDefinition(diameter=2.0), layers=["*.Cu", "*.Mask"]),
        ]),
    ]

    b.traceItems = [
        Segment(start=Position(X=2, Y=2), end=Position(X=5, Y=2), width=0.25, layer="F.Cu", net=1),
        Via(position=Position(X=5, Y=2), size=0.6, drill=0.3, layers=["F.Cu", "B.Cu"], net=1),
        Segment(start=Position(X=5, Y=2), end=Position(X=5, Y=8), width=0.4, layer="B.Cu", net=1),
    ]

    # Edge.Cuts strokes out of order, one of them reversed
    b.graphicItems = [
        GrLine(start=Position(X=0, Y=0), end=Position(X=20, Y=0), layer="Edge.Cuts"),
        GrLine(start=Position(X=0, Y=20), end=Position(X=0, Y=0), layer="Edge.Cuts"),
        GrLine(start=Position(X=20, Y=20), end=Position(X=20, Y=0), layer="Edge.Cuts"),
        GrLine(start=Position(X=20, Y=20), end=Position(X=0, Y=20), layer="Edge.Cuts"),
        GrLine(start=Position(X=1, Y=1), end=Position(X=3, Y=1), layer="F.SilkS"),
    ]
    return b


@pytest.fixture
def loader(board):
    return KiCadBoardLoader(board)


def by_id(loader):
    return {e.element_id: e for e in loader.elements}


def test_board_element_comes_first(loader):
    board = loader.elements[0]
    assert isinstance(board, PcbBoard)
    assert board.width == pytest.approx(20)
    assert board.height == pytest.approx(20)
    assert (board.center.x, board.center.y) == pytest.approx((10, 10))
    assert len(board.outline) == 4


def test_smd_pads_are_transformed(loader):
    elements = by_id(loader)

    pad = elements["R1_1"]
    assert isinstance(pad, PcbSmtPad)
    assert pad.layer == "top"
    assert pad.shape == "rect"
    assert (pad.x, pad.y) == pytest.approx((10, 11))
    # Rotated by 90 degrees
    assert (pad.width, pad.height) == pytest.approx((0.5, 1.0))

    circle = elements["R1_2"]
    assert circle.shape == "circle"
    assert circle.radius == pytest.approx(0.3)
    assert (circle.x, circle.y) == pytest.approx((10, 9))


def test_through_hole_pads(loader):
    elements = by_id(loader)

    plated = elements["J1_1"]
    assert isinstance(plated, PcbPlatedHole)
    assert plated.shape == "circle"
    assert plated.layers == ["top", "bottom"]
    assert plated.outer_diameter == 1.5
    assert plated.hole_diameter == 0.8

    hole = elements["J1_"]
    assert isinstance(hole, PcbHole)
    assert hole.hole_diameter == 2.0
    assert (hole.x, hole.y) == pytest.approx((7, 2))


def test_segments_and_vias(loader):
    elements = by_id(loader)

    segment = elements["segment_0"]
    assert isinstance(segment, PcbTrace)
    assert [(p.x, p.y) for p in segment.route] == [(2, 2), (5, 2)]
    assert all(p.is_wire and p.layer == "top" and p.width == 0.25 for p in segment.route)

    via = elements["via_1"]
    assert isinstance(via, PcbVia)
    assert via.layers == ["top", "bottom"]
    assert via.outer_diameter == 0.6


def test_connectivity_by_net_name(loader):
    cmap = loader.connectivity_map
    assert cmap.lookup("R1_1") == "GND"
    assert cmap.lookup("R1_2") == "VCC"
    assert cmap.lookup("segment_0") == "GND"
    assert cmap.lookup("via_1") == "GND"
    assert cmap.lookup("net_1") == "GND"
    assert cmap.lookup("J1_") is None


def test_convert_kicad_board(loader):
    problems = convert_pours(
        loader.elements,
        [PourRequest(layer="top", net_name="GND"), PourRequest(layer="bottom", net_name="GND")],
        resolver=loader.connectivity_map,
    )
    top, bottom = problems

    assert top.regions_for_pour[0].connectivity_key == "GND"
    assert top.regions_for_pour[0].bounds.to_dict() == {"minX": 0, "minY": 0, "maxX": 20, "maxY": 20}
    assert [p.pad_id for p in top.pads] == ["R1_1", "R1_2", "J1_1", "J1_", "segment_0-4", "via_1"]
    assert str(top.pads[3].connectivity_key) == "hole:J1_"

    bottom_traces = [p for p in bottom.pads if isinstance(p, TracePad)]
    assert [p.segments for p in bottom_traces] == [[(5, 2), (5, 8)]]


def test_inner_layers_expand(board):
    board.layers = [
        LayerToken(ordinal=0, name="F.Cu", type="signal"),
        LayerToken(ordinal=1, name="In1.Cu", type="signal"),
        LayerToken(ordinal=2, name="In2.Cu", type="signal"),
        LayerToken(ordinal=31, name="B.Cu", type="signal"),
        LayerToken(ordinal=44, name="Edge.Cuts", type="user"),
    ]
    elements = by_id(KiCadBoardLoader(board))

    assert elements["J1_1"].layers == ["top", "inner1", "inner2", "bottom"]
    assert elements["via_1"].layers == ["top", "inner1", "inner2", "bottom"]


def test_arc_becomes_polyline(board):
    board.traceItems.append(Arc(
        start=Position(X=0, Y=0), mid=Position(X=1, Y=1), end=Position(X=2, Y=0),
        width=0.2, layer="F.Cu", net=2,
    ))
    arc = by_id(KiCadBoardLoader(board))["arc_3"]

    points = [(p.x, p.y) for p in arc.route]
    assert len(points) > 3
    assert points[0] == (0, 0)
    assert points[-1] == (2, 0)
    for x, y in points:
        assert (x - 1) ** 2 + y ** 2 == pytest.approx(1)


def test_rect_edge_cut(board):
    board.graphicItems = [GrRect(start=Position(X=-2, Y=-1), end=Position(X=2, Y=1), layer="Edge.Cuts")]
    outline = KiCadBoardLoader(board).elements[0].outline
    assert [(p.x, p.y) for p in outline] == [(-2, -1), (2, -1), (2, 1), (-2, 1)]


def test_board_without_edge_cuts(board):
    board.graphicItems = []
    board_element = KiCadBoardLoader(board).elements[0]
    assert board_element.outline is None
    assert board_element.width > 0


def test_chain_outline_stops_at_gap():
    ring = chain_outline([[(0, 0), (1, 0)], [(1, 0), (1, 1)], [(5, 5), (6, 6)]])
    assert ring == [(0, 0), (1, 0), (1, 1)]


def test_missing_file():
    with pytest.raises(BoardFileError):
        KiCadBoardLoader.from_file("does-not-exist.kicad_pcb")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
