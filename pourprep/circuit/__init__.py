from .parser import CircuitJsonParser, parse_circuit_json, parse_element
from .models import (
    Point, CircuitElement, BoardElement, PcbBoard, PcbSmtPad, PcbPlatedHole,
    PcbHole, PcbCutout, PcbVia, PcbTrace, RoutePoint, PcbPort,
    SourcePort, SourceNet, SourceTrace
)

__all__ = [
    "CircuitJsonParser", "parse_circuit_json", "parse_element",
    "Point", "CircuitElement", "BoardElement", "PcbBoard", "PcbSmtPad",
    "PcbPlatedHole", "PcbHole", "PcbCutout", "PcbVia", "PcbTrace",
    "RoutePoint", "PcbPort", "SourcePort", "SourceNet", "SourceTrace"
]
