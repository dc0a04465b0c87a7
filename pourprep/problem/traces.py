"""Splitting traces into same-layer runs."""
from typing import Iterator

from ..circuit.models import PcbTrace, RoutePoint
from ..connectivity.keys import ConnectivityKey
from .models import TracePad


def iter_wire_runs(
    route: list[RoutePoint],
    layer: str
) -> Iterator[tuple[list[tuple[float, float]], float]]:
    """
    Yield maximal runs of consecutive wire waypoints on one layer.

    A waypoint that is not a wire, or is a wire on another layer, ends the
    current run. Runs with fewer than 2 points are dropped. The width of a run
    is taken from its first waypoint.

    Args:
        route: Ordered trace waypoints
        layer: Layer to keep

    Yields:
        (points, width) for each run
    """
    points: list[tuple[float, float]] = []
    width = None

    for waypoint in route:
        if waypoint.is_wire and waypoint.layer == layer:
            if width is None:
                width = waypoint.width
            points.append((waypoint.x, waypoint.y))
            continue

        if len(points) > 1:
            yield points, width
        points, width = [], None

    if len(points) > 1:
        yield points, width


def segment_trace(
    trace: PcbTrace,
    layer: str,
    connectivity_key: ConnectivityKey,
    first_pad_index: int = 0
) -> list[TracePad]:
    """
    Convert one trace into trace pads, one per same-layer wire run.

    Args:
        trace: Trace to split
        layer: Target layer
        connectivity_key: Key shared by every run of the trace
        first_pad_index: Number of pads already emitted in this conversion;
            used to number the pad ids so they stay unique

    Returns:
        Trace pads with ids '<trace id>-<index>'
    """
    pads = []
    for points, width in iter_wire_runs(trace.route, layer):
        pads.append(TracePad(
            pad_id=f"{trace.pcb_trace_id}-{first_pad_index + len(pads)}",
            layer=layer,
            connectivity_key=connectivity_key,
            segments=points,
            width=width
        ))
    return pads
