"""Configuration constants for pourprep."""
import os
from pathlib import Path

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

# Default KiCad board used by the service when no path is given
DEFAULT_PCB_FILE = Path(os.environ.get("POURPREP_PCB_FILE", PROJECT_ROOT / "board.kicad_pcb"))

# Directory the service may load board files from
BOARD_DIR = Path(os.environ.get("POURPREP_BOARD_DIR", PROJECT_ROOT)).resolve()

# Margins (mm)
DEFAULT_PAD_MARGIN = 0.2
DEFAULT_TRACE_MARGIN = 0.2
DEFAULT_BOARD_EDGE_MARGIN = 0.0

# Copper layer names on the KiCad side, mapped to circuit layer refs
KICAD_LAYER_REFS = {
    "F.Cu": "top",
    "B.Cu": "bottom",
}
for _n in range(1, 31):
    KICAD_LAYER_REFS[f"In{_n}.Cu"] = f"inner{_n}"

# Edge.Cuts endpoints closer than this are treated as the same vertex (mm)
OUTLINE_JOIN_TOLERANCE = 1e-4

# A via matches a trace's via waypoint when closer than this (mm)
VIA_MATCH_TOLERANCE = 1e-3

# Server settings
DEFAULT_HOST = os.environ.get("POURPREP_HOST", "0.0.0.0")
DEFAULT_PORT = int(os.environ.get("POURPREP_PORT", "8000"))

# Log level for the service entry point
LOG_LEVEL = os.environ.get("POURPREP_LOG_LEVEL", "INFO").upper()
