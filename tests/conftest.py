"""Pytest configuration for pourprep tests."""
import copy
import json
import pytest
from pathlib import Path

from pourprep.circuit import CircuitJsonParser
from pourprep.connectivity import build_connectivity_map


ASSETS_DIR = Path(__file__).parent / "assets"
MULTIPLE_POURS_FILE = ASSETS_DIR / "multiple-pours.json"

# Outlines splitting the 10x10 test board into a GND and a VCC region
GND_OUTLINE = [
    {"x": -5, "y": -5}, {"x": -4, "y": -5}, {"x": -3, "y": -4}, {"x": 0, "y": -2},
    {"x": -1, "y": 3}, {"x": -5, "y": 3}, {"x": -5, "y": -3}, {"x": -5, "y": -5},
]
VCC_OUTLINE = [
    {"x": 3, "y": -5}, {"x": 5, "y": -5}, {"x": 5, "y": 3}, {"x": 1, "y": 3},
    {"x": 0, "y": -2}, {"x": 3, "y": -4}, {"x": 3, "y": -5},
]


@pytest.fixture(scope="session")
def _circuit_json_pristine():
    with open(MULTIPLE_POURS_FILE, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def circuit_json(_circuit_json_pristine):
    """Raw circuit JSON records (fresh copy per test)."""
    return copy.deepcopy(_circuit_json_pristine)


@pytest.fixture
def circuit(circuit_json):
    """Parsed test circuit."""
    return CircuitJsonParser(circuit_json)


@pytest.fixture
def connectivity_map(circuit):
    """Connectivity map of the test circuit."""
    return build_connectivity_map(circuit.elements)


@pytest.fixture
def board_record():
    """A bare 10x10 board without outline."""
    return {"type": "pcb_board", "pcb_board_id": "pcb_board_0", "width": 10, "height": 10}
