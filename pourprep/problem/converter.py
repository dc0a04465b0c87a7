"""Convert circuit JSON into copper pour input problems."""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..circuit.parser import CircuitJsonParser, CircuitRecord
from ..config import DEFAULT_PAD_MARGIN, DEFAULT_TRACE_MARGIN
from ..connectivity.resolver import ConnectivityResolver, build_connectivity_map
from ..exceptions import BoardNotFoundError, MissingConnectivityError, NetNotFoundError
from .extractor import PadExtractor
from .models import InputProblem
from .region import OutlineInput, build_pour_region

log = logging.getLogger(__name__)

CircuitInput = Union[CircuitJsonParser, Iterable[CircuitRecord]]


@dataclass
class PourOptions:
    """Options for a single conversion, with the pour net already resolved."""
    layer: str
    pour_connectivity_key: str
    pad_margin: float
    trace_margin: float
    board_edge_margin: Optional[float] = None
    cutout_margin: Optional[float] = None
    outline: Optional[OutlineInput] = None  # Overrides the board outline


@dataclass
class PourRequest:
    """A pour described by net name, resolved during conversion."""
    layer: str
    net_name: str
    pad_margin: float = DEFAULT_PAD_MARGIN
    trace_margin: float = DEFAULT_TRACE_MARGIN
    board_edge_margin: Optional[float] = None
    cutout_margin: Optional[float] = None
    outline: Optional[OutlineInput] = None


def _as_parser(circuit: CircuitInput) -> CircuitJsonParser:
    if isinstance(circuit, CircuitJsonParser):
        return circuit
    return CircuitJsonParser(circuit)


def convert_circuit_json_to_input_problem(
    circuit: CircuitInput,
    options: PourOptions,
    resolver: Optional[ConnectivityResolver] = None,
) -> InputProblem:
    """
    Build the input problem for one pour.

    Args:
        circuit: Circuit JSON records or an already-parsed circuit
        options: Target layer, pour net key, margins and optional outline
        resolver: Connectivity lookup; built from the circuit when omitted

    Returns:
        InputProblem with the layer's pads and exactly one pour region

    Raises:
        BoardNotFoundError: If the circuit has no pcb_board
        CircuitJsonParseError: If an element is missing required fields
    """
    parsed = _as_parser(circuit)

    board = parsed.board
    if board is None:
        raise BoardNotFoundError()

    if resolver is None:
        resolver = build_connectivity_map(parsed.elements)

    pads = PadExtractor(options.layer, resolver).extract(parsed.board_elements)

    region = build_pour_region(
        board,
        layer=options.layer,
        connectivity_key=options.pour_connectivity_key,
        pad_margin=options.pad_margin,
        trace_margin=options.trace_margin,
        board_edge_margin=options.board_edge_margin,
        cutout_margin=options.cutout_margin,
        outline=options.outline,
    )

    log.debug(
        "Converted %d pads on layer %s for pour %s",
        len(pads), options.layer, options.pour_connectivity_key
    )
    return InputProblem(pads=pads, regions_for_pour=[region])


def resolve_pour_connectivity_key(
    circuit: CircuitInput,
    net_name: str,
    resolver: Optional[ConnectivityResolver] = None,
) -> str:
    """
    Find the connectivity key of a named net.

    The resolver's key for the net wins; the net's subcircuit connectivity
    key is used when the resolver has none.

    Raises:
        NetNotFoundError: If no source_net has this name
        MissingConnectivityError: If the net has no key at all
    """
    parsed = _as_parser(circuit)

    net = parsed.get_source_net(net_name)
    if net is None:
        raise NetNotFoundError(net_name)

    if resolver is None:
        resolver = build_connectivity_map(parsed.elements)

    key = resolver.lookup(net.source_net_id) or net.subcircuit_connectivity_map_key
    if not key:
        raise MissingConnectivityError(net_name)
    return key


def convert_pours(
    circuit: CircuitInput,
    pours: Iterable[PourRequest],
    resolver: Optional[ConnectivityResolver] = None,
) -> list[InputProblem]:
    """
    Build one independent input problem per pour request.

    The circuit is parsed and its connectivity resolved once; each request is
    then converted on its own, so pads never leak between problems.
    """
    parsed = _as_parser(circuit)
    if parsed.board is None:
        raise BoardNotFoundError()
    if resolver is None:
        resolver = build_connectivity_map(parsed.elements)

    problems = []
    for pour in pours:
        key = resolve_pour_connectivity_key(parsed, pour.net_name, resolver)
        options = PourOptions(
            layer=pour.layer,
            pour_connectivity_key=key,
            pad_margin=pour.pad_margin,
            trace_margin=pour.trace_margin,
            board_edge_margin=pour.board_edge_margin,
            cutout_margin=pour.cutout_margin,
            outline=pour.outline,
        )
        problems.append(convert_circuit_json_to_input_problem(parsed, options, resolver))

    log.info("Built %d pour problems", len(problems))
    return problems
