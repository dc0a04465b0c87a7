"""Pour region bounds and construction."""
from typing import Any, Mapping, Optional, Sequence, Union

import numpy as np

from ..circuit.models import PcbBoard, Point
from ..config import DEFAULT_BOARD_EDGE_MARGIN
from ..exceptions import BoardSizeError
from .models import Bounds, PourRegion

# Outline vertices may come as models, {"x", "y"} mappings or plain (x, y) pairs
OutlineInput = Sequence[Union[Point, Mapping[str, Any], tuple[float, float]]]


def _vertex_xy(p) -> tuple[float, float]:
    if isinstance(p, Mapping):
        p = Point.model_validate(p)
    if isinstance(p, Point):
        return (p.x, p.y)
    return (float(p[0]), float(p[1]))


def _as_xy(points: Optional[OutlineInput]) -> Optional[list[tuple[float, float]]]:
    if points is None:
        return None
    return [_vertex_xy(p) for p in points]


def outline_bounds(outline: list[tuple[float, float]]) -> Bounds:
    """Componentwise min/max over the outline vertices."""
    coords = np.asarray(outline, dtype=float)
    min_x, min_y = coords.min(axis=0)
    max_x, max_y = coords.max(axis=0)
    return Bounds(float(min_x), float(min_y), float(max_x), float(max_y))


def resolve_pour_outline(
    board: PcbBoard,
    outline: Optional[OutlineInput] = None
) -> tuple[Optional[list[tuple[float, float]]], Bounds]:
    """
    Pick the pour outline and compute its bounds.

    The caller's outline wins over the board outline. Without either, the
    bounds are a board-sized box centered on the origin and there is no
    outline.

    Args:
        board: The board element
        outline: Optional pour-specific outline

    Returns:
        Tuple of (outline or None, bounds)

    Raises:
        BoardSizeError: If the box is needed but the board has no width/height
    """
    chosen = _as_xy(outline) if outline is not None else _as_xy(board.outline)

    if chosen:
        return chosen, outline_bounds(chosen)

    if board.width is None or board.height is None:
        raise BoardSizeError(board.pcb_board_id)
    half_w = board.width / 2
    half_h = board.height / 2
    return chosen, Bounds(-half_w, -half_h, half_w, half_h)


def build_pour_region(
    board: PcbBoard,
    layer: str,
    connectivity_key: str,
    pad_margin: float,
    trace_margin: float,
    board_edge_margin: Optional[float] = None,
    cutout_margin: Optional[float] = None,
    outline: Optional[OutlineInput] = None,
) -> PourRegion:
    """Build the single pour region of a conversion."""
    chosen, bounds = resolve_pour_outline(board, outline)
    return PourRegion(
        layer=layer,
        bounds=bounds,
        connectivity_key=connectivity_key,
        pad_margin=pad_margin,
        trace_margin=trace_margin,
        board_edge_margin=(
            board_edge_margin if board_edge_margin is not None else DEFAULT_BOARD_EDGE_MARGIN
        ),
        outline=chosen,
        cutout_margin=cutout_margin,
    )
