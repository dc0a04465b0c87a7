"""
Pour Problem Exceptions

Exception classes raised while building a copper pour input problem. Per-element
problems (unconnected pads, unsupported shapes) are handled locally and never
raise; these cover the structural preconditions of a conversion.
"""
from typing import Optional


class PourProblemError(Exception):
    """Base exception for all pour problem errors."""
    pass


class BoardNotFoundError(PourProblemError):
    """Raised when the circuit contains no board element."""

    def __init__(self, message: str = ""):
        super().__init__(message or "No pcb_board found in circuit json")


class BoardSizeError(PourProblemError):
    """Raised when pour bounds are needed from a board with no outline and no size."""

    def __init__(self, board_id: str):
        self.board_id = board_id
        super().__init__(f"Board {board_id} has no outline and no width/height")


class NetNotFoundError(PourProblemError):
    """Raised when the requested pour net does not exist."""

    def __init__(self, net_name: str):
        self.net_name = net_name
        super().__init__(f'Net with name "{net_name}" not found')


class MissingConnectivityError(PourProblemError):
    """Raised when the pour net has no resolvable connectivity key."""

    def __init__(self, net_name: str):
        self.net_name = net_name
        super().__init__(f'Net "{net_name}" has no connectivity mapping')


class CircuitJsonParseError(PourProblemError):
    """Raised when an element record is missing fields its kind requires."""

    def __init__(
        self,
        element_type: str,
        element_id: Optional[str] = None,
        details: str = "",
        index: Optional[int] = None,
    ):
        self.element_type = element_type
        self.element_id = element_id
        self.details = details
        self.index = index

        where = element_type
        if element_id:
            where += f" {element_id}"
        if index is not None:
            where += f" (element #{index})"
        message = f"Invalid {where}"
        if details:
            message += f": {details}"
        super().__init__(message)


class BoardFileError(PourProblemError):
    """Raised when a KiCad board file cannot be read or parsed."""
    pass
