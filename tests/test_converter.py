"""Tests for the top-level conversion."""
import json
import pytest

from pourprep import (
    PourOptions, PourRequest, convert_circuit_json_to_input_problem, convert_pours,
    resolve_pour_connectivity_key
)
from pourprep.connectivity import ConnectivityMap
from pourprep.exceptions import (
    BoardNotFoundError, BoardSizeError, CircuitJsonParseError, MissingConnectivityError,
    NetNotFoundError
)
from pourprep.problem import TracePad

from conftest import GND_OUTLINE, VCC_OUTLINE


def options(**overrides):
    values = dict(layer="top", pour_connectivity_key="connectivity_net0",
                  pad_margin=0.2, trace_margin=0.2)
    values.update(overrides)
    return PourOptions(**values)


def test_single_region_per_problem(circuit_json):
    problem = convert_circuit_json_to_input_problem(circuit_json, options())

    assert len(problem.regions_for_pour) == 1
    assert len(problem.pads) == 11


def test_missing_board_is_fatal(circuit_json):
    records = [r for r in circuit_json if r["type"] != "pcb_board"]
    with pytest.raises(BoardNotFoundError):
        convert_circuit_json_to_input_problem(records, options())


def test_malformed_element_is_fatal(circuit_json):
    circuit_json.append({"type": "pcb_via", "pcb_via_id": "broken", "x": 0, "y": 0,
                         "layers": ["top"]})
    with pytest.raises(CircuitJsonParseError, match="broken"):
        convert_circuit_json_to_input_problem(circuit_json, options())


def test_no_outline_uses_board_box(circuit_json):
    problem = convert_circuit_json_to_input_problem(circuit_json, options())
    region = problem.regions_for_pour[0]

    assert region.outline is None
    assert region.bounds.to_dict() == {"minX": -5, "minY": -5, "maxX": 5, "maxY": 5}


def test_outline_given_as_point_dicts(circuit_json):
    problem = convert_circuit_json_to_input_problem(circuit_json, options(outline=GND_OUTLINE))
    region = problem.regions_for_pour[0]

    assert region.bounds.to_dict() == {"minX": -5, "minY": -5, "maxX": 0, "maxY": 3}
    assert region.to_dict()["outline"] == GND_OUTLINE


def test_board_with_outline_and_no_size(circuit_json):
    board = next(r for r in circuit_json if r["type"] == "pcb_board")
    del board["width"], board["height"]
    board["outline"] = [{"x": 0, "y": 0}, {"x": 4, "y": 0}, {"x": 4, "y": 3}]

    problem = convert_circuit_json_to_input_problem(circuit_json, options())
    assert problem.regions_for_pour[0].bounds.to_dict() == {"minX": 0, "minY": 0, "maxX": 4, "maxY": 3}


def test_board_without_outline_or_size(circuit_json):
    board = next(r for r in circuit_json if r["type"] == "pcb_board")
    del board["width"], board["height"]
    with pytest.raises(BoardSizeError):
        convert_circuit_json_to_input_problem(circuit_json, options())


def test_external_resolver_is_used(circuit_json):
    resolver = ConnectivityMap({"pcb_smtpad_0": "external"})
    problem = convert_circuit_json_to_input_problem(circuit_json, options(), resolver)

    keys = {p.pad_id: str(p.connectivity_key) for p in problem.pads}
    assert keys["pcb_smtpad_0"] == "external"
    assert keys["pcb_smtpad_1"] == "unconnected:pcb_smtpad_1"
    # Traces cannot be resolved by this resolver
    assert not any(isinstance(p, TracePad) for p in problem.pads)


def test_layer_filtering(circuit_json):
    problem = convert_circuit_json_to_input_problem(circuit_json, options(layer="bottom"))
    ids = [p.pad_id for p in problem.pads]

    assert "pcb_smtpad_3" in ids
    assert "pcb_smtpad_0" not in ids
    assert all(p.layer == "bottom" for p in problem.pads)


def test_layer_changing_trace_yields_two_pads(circuit_json):
    top = convert_circuit_json_to_input_problem(circuit_json, options(layer="top"))
    bottom = convert_circuit_json_to_input_problem(circuit_json, options(layer="bottom"))

    gnd_runs = [p for p in top.pads + bottom.pads
                if isinstance(p, TracePad) and p.pad_id.startswith("pcb_trace_0-")]
    assert len(gnd_runs) == 2
    assert gnd_runs[0].width != gnd_runs[1].width


def test_to_dict_is_json_serializable(circuit_json):
    problem = convert_circuit_json_to_input_problem(
        circuit_json, options(outline=[(p["x"], p["y"]) for p in GND_OUTLINE])
    )
    data = json.loads(json.dumps(problem.to_dict()))

    assert set(data) == {"pads", "regionsForPour"}
    shapes = {pad["shape"] for pad in data["pads"]}
    assert shapes == {"rect", "circle", "trace"}

    rect = next(p for p in data["pads"] if p["padId"] == "pcb_smtpad_0")
    assert rect == {
        "shape": "rect",
        "padId": "pcb_smtpad_0",
        "layer": "top",
        "connectivityKey": "connectivity_net0",
        "bounds": {"minX": -3.5, "minY": -0.3, "maxX": -2.5, "maxY": 0.3},
    }

    trace = next(p for p in data["pads"] if p["shape"] == "trace")
    assert trace["segments"][0] == {"x": -3, "y": 0}
    assert trace["width"] == 0.15


def test_conversion_is_deterministic(circuit_json):
    first = convert_circuit_json_to_input_problem(circuit_json, options()).to_dict()
    second = convert_circuit_json_to_input_problem(circuit_json, options()).to_dict()
    assert first == second


class TestPourNetResolution:
    """Looking up the pour connectivity key by net name."""

    def test_known_net(self, circuit):
        assert resolve_pour_connectivity_key(circuit, "GND") == "connectivity_net0"
        assert resolve_pour_connectivity_key(circuit, "VCC") == "connectivity_net1"

    def test_unknown_net(self, circuit):
        with pytest.raises(NetNotFoundError, match="NOPE"):
            resolve_pour_connectivity_key(circuit, "NOPE")

    def test_subcircuit_key_fallback(self, board_record):
        records = [board_record, {"type": "source_net", "source_net_id": "n",
                                  "name": "AGND", "subcircuit_connectivity_map_key": "sub_agnd"}]
        assert resolve_pour_connectivity_key(records, "AGND") == "sub_agnd"

    def test_net_without_connectivity(self, board_record):
        records = [board_record, {"type": "source_net", "source_net_id": "n", "name": "AGND"}]
        with pytest.raises(MissingConnectivityError):
            resolve_pour_connectivity_key(records, "AGND")


class TestMultiplePours:
    """Several pours over the same circuit."""

    @pytest.fixture
    def problems(self, circuit_json):
        return convert_pours(circuit_json, [
            PourRequest(layer="top", net_name="GND", pad_margin=0.2, trace_margin=0.2,
                        outline=[(p["x"], p["y"]) for p in GND_OUTLINE]),
            PourRequest(layer="top", net_name="VCC", pad_margin=0.2, trace_margin=0.2,
                        outline=[(p["x"], p["y"]) for p in VCC_OUTLINE]),
        ])

    def test_one_problem_per_pour(self, problems):
        assert len(problems) == 2
        assert all(len(p.regions_for_pour) == 1 for p in problems)

    def test_regions_have_distinct_keys(self, problems):
        gnd, vcc = (p.regions_for_pour[0] for p in problems)
        assert gnd.connectivity_key == "connectivity_net0"
        assert vcc.connectivity_key == "connectivity_net1"

    def test_bounds_follow_outlines(self, problems):
        gnd, vcc = (p.regions_for_pour[0] for p in problems)
        assert gnd.bounds.to_dict() == {"minX": -5, "minY": -5, "maxX": 0, "maxY": 3}
        assert vcc.bounds.to_dict() == {"minX": 0, "minY": -5, "maxX": 5, "maxY": 3}
        assert len(gnd.outline) == len(GND_OUTLINE)

    def test_no_pad_cross_contamination(self, problems):
        gnd, vcc = problems
        assert gnd.pads is not vcc.pads
        gnd.pads.pop()
        assert len(vcc.pads) == 11
        assert [p.pad_id for p in gnd.pads] == [p.pad_id for p in vcc.pads][:-1]

    def test_unknown_net_aborts(self, circuit_json):
        with pytest.raises(NetNotFoundError):
            convert_pours(circuit_json, [PourRequest(layer="top", net_name="3V3")])

    def test_missing_board_aborts(self, circuit_json):
        records = [r for r in circuit_json if r["type"] != "pcb_board"]
        with pytest.raises(BoardNotFoundError):
            convert_pours(records, [PourRequest(layer="top", net_name="GND")])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
