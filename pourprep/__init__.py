"""Extract copper pour input problems from circuit board designs."""
from .problem import (
    InputProblem, PourOptions, PourRequest,
    convert_circuit_json_to_input_problem, convert_pours, resolve_pour_connectivity_key
)

__version__ = "0.1.0"

__all__ = [
    "InputProblem", "PourOptions", "PourRequest",
    "convert_circuit_json_to_input_problem", "convert_pours", "resolve_pour_connectivity_key",
]
