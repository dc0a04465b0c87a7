"""FastAPI application serving copper pour input problems."""
import logging
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .circuit.kicad import KiCadBoardLoader
from .circuit.models import Point
from .config import (
    BOARD_DIR, DEFAULT_HOST, DEFAULT_PAD_MARGIN, DEFAULT_PCB_FILE, DEFAULT_PORT,
    DEFAULT_TRACE_MARGIN, LOG_LEVEL
)
from .exceptions import BoardFileError, NetNotFoundError, PourProblemError
from .problem import (
    PourOptions, PourRequest, convert_circuit_json_to_input_problem, convert_pours
)

log = logging.getLogger(__name__)

app = FastAPI(title="pourprep", version=__version__)


class ProblemRequest(BaseModel):
    """Request model for a single pour with a known connectivity key."""
    circuit_json: list[dict[str, Any]]
    layer: str
    pour_connectivity_key: str
    pad_margin: float = DEFAULT_PAD_MARGIN
    trace_margin: float = DEFAULT_TRACE_MARGIN
    board_edge_margin: Optional[float] = None
    cutout_margin: Optional[float] = None
    outline: Optional[list[Point]] = None


class PourRequestModel(BaseModel):
    """One pour of a multi-pour request, selected by net name."""
    layer: str
    net_name: str
    pad_margin: float = DEFAULT_PAD_MARGIN
    trace_margin: float = DEFAULT_TRACE_MARGIN
    board_edge_margin: Optional[float] = None
    cutout_margin: Optional[float] = None
    outline: Optional[list[Point]] = None

    def to_pour_request(self) -> PourRequest:
        return PourRequest(
            layer=self.layer,
            net_name=self.net_name,
            pad_margin=self.pad_margin,
            trace_margin=self.trace_margin,
            board_edge_margin=self.board_edge_margin,
            cutout_margin=self.cutout_margin,
            outline=self.outline,
        )


class ProblemsRequest(BaseModel):
    """Request model for several pours over one circuit."""
    circuit_json: list[dict[str, Any]]
    pours: list[PourRequestModel]


def _board_path(path: Optional[str]) -> Path:
    """Resolve a client-supplied board path, which must lie under BOARD_DIR."""
    if path is None:
        return DEFAULT_PCB_FILE
    resolved = (BOARD_DIR / path).resolve()
    if not resolved.is_relative_to(BOARD_DIR):
        raise BoardFileError(f"Board file {path} is not available")
    return resolved


@app.exception_handler(PourProblemError)
async def pour_problem_error_handler(request: Request, exc: PourProblemError):
    """Report conversion failures as client errors."""
    status = 404 if isinstance(exc, (NetNotFoundError, BoardFileError)) else 422
    log.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status,
        content={"error": type(exc).__name__, "message": str(exc)},
    )


@app.get("/api/health")
async def health():
    """Liveness check."""
    return {"status": "ok", "version": __version__}


@app.post("/api/problem")
async def build_problem(request: ProblemRequest):
    """Convert a circuit into the input problem for one pour."""
    options = PourOptions(
        layer=request.layer,
        pour_connectivity_key=request.pour_connectivity_key,
        pad_margin=request.pad_margin,
        trace_margin=request.trace_margin,
        board_edge_margin=request.board_edge_margin,
        cutout_margin=request.cutout_margin,
        outline=request.outline,
    )
    problem = convert_circuit_json_to_input_problem(request.circuit_json, options)
    return problem.to_dict()


@app.post("/api/problems")
async def build_problems(request: ProblemsRequest):
    """
    Convert a circuit into one input problem per requested pour.

    Each pour's net is looked up by name; the problems are returned in
    request order.
    """
    problems = convert_pours(
        request.circuit_json,
        [pour.to_pour_request() for pour in request.pours],
    )
    return {"problems": [p.to_dict() for p in problems]}


@app.get("/api/kicad/problems")
async def build_kicad_problems(
    nets: str = Query(description="Comma-separated net names to pour"),
    layer: str = Query(default="top", description="Target layer ref (top, bottom, innerN)"),
    path: Optional[str] = Query(
        default=None, description="Path to a .kicad_pcb file, relative to the board directory"
    ),
    pad_margin: float = DEFAULT_PAD_MARGIN,
    trace_margin: float = DEFAULT_TRACE_MARGIN,
):
    """Load a KiCad board and convert one pour per net name."""
    loader = KiCadBoardLoader.from_file(_board_path(path))
    net_names = [n.strip() for n in nets.split(",") if n.strip()]
    pours = [
        PourRequest(layer=layer, net_name=name, pad_margin=pad_margin, trace_margin=trace_margin)
        for name in net_names
    ]
    problems = convert_pours(loader.elements, pours, resolver=loader.connectivity_map)
    return {"problems": [p.to_dict() for p in problems]}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=DEFAULT_HOST, port=DEFAULT_PORT)
