from .converter import (
    PourOptions, PourRequest,
    convert_circuit_json_to_input_problem, convert_pours, resolve_pour_connectivity_key
)
from .extractor import PadExtractor
from .models import (
    Bounds, Pad, RectPad, CircularPad, PolygonPad, TracePad, PourRegion, InputProblem
)
from .region import build_pour_region, resolve_pour_outline
from .traces import segment_trace

__all__ = [
    "PourOptions", "PourRequest",
    "convert_circuit_json_to_input_problem", "convert_pours", "resolve_pour_connectivity_key",
    "PadExtractor",
    "Bounds", "Pad", "RectPad", "CircularPad", "PolygonPad", "TracePad", "PourRegion", "InputProblem",
    "build_pour_region", "resolve_pour_outline",
    "segment_trace",
]
