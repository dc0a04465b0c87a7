"""Circuit JSON parser using pydantic models."""
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from ..exceptions import CircuitJsonParseError
from .models import (
    ELEMENT_MODELS, BoardElement, CircuitElement, PcbBoard,
    PcbCutout, PcbHole, PcbPlatedHole, PcbSmtPad, PcbTrace, PcbVia, SourceNet
)

log = logging.getLogger(__name__)

# Records that are already parsed are passed through unchanged
CircuitRecord = Union[dict[str, Any], CircuitElement]

_BOARD_ELEMENT_TYPES = (PcbSmtPad, PcbPlatedHole, PcbHole, PcbCutout, PcbVia, PcbTrace)


def _format_errors(error: ValidationError) -> str:
    """Flatten pydantic errors into a single line."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def parse_element(record: CircuitRecord, index: Optional[int] = None) -> Optional[CircuitElement]:
    """
    Parse one circuit record.

    Args:
        record: Raw circuit JSON dict or an already-parsed element
        index: Position of the record in its list (for error messages)

    Returns:
        Parsed element, or None if the record type is not recognized

    Raises:
        CircuitJsonParseError: If a recognized record is missing required fields
    """
    if isinstance(record, CircuitElement):
        return record
    if not isinstance(record, dict):
        log.debug("Skipping non-object record at #%s", index)
        return None

    element_type = record.get("type")
    model = ELEMENT_MODELS.get(element_type)
    if model is None:
        log.debug("Skipping unrecognized element type %r", element_type)
        return None

    try:
        return model.model_validate(record)
    except ValidationError as e:
        element_id = record.get(model.ID_FIELD)
        raise CircuitJsonParseError(
            element_type, element_id, _format_errors(e), index
        ) from e


def parse_circuit_json(records: Iterable[CircuitRecord]) -> list[CircuitElement]:
    """Parse a circuit JSON element list, dropping unrecognized records."""
    elements = []
    for index, record in enumerate(records):
        element = parse_element(record, index)
        if element is not None:
            elements.append(element)
    return elements


class CircuitJsonParser:
    """Parsed view over a circuit JSON document."""

    def __init__(self, records: Iterable[CircuitRecord]):
        """Parse the given records."""
        self._elements = parse_circuit_json(records)

        self._by_id: dict[str, CircuitElement] = {}
        for element in self._elements:
            self._by_id.setdefault(element.element_id, element)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "CircuitJsonParser":
        """Load and parse a circuit JSON file."""
        with open(path, encoding="utf-8") as f:
            return cls(json.load(f))

    @property
    def elements(self) -> list[CircuitElement]:
        """All recognized elements in document order."""
        return self._elements

    @property
    def board(self) -> Optional[PcbBoard]:
        """The first board element, if any."""
        for element in self._elements:
            if isinstance(element, PcbBoard):
                return element
        return None

    @property
    def board_elements(self) -> list[BoardElement]:
        """Elements that can produce pads, in document order."""
        return [e for e in self._elements if isinstance(e, _BOARD_ELEMENT_TYPES)]

    @property
    def source_nets(self) -> list[SourceNet]:
        """All logical nets."""
        return [e for e in self._elements if isinstance(e, SourceNet)]

    def get_source_net(self, name: str) -> Optional[SourceNet]:
        """Find a logical net by name."""
        for net in self.source_nets:
            if net.name == name:
                return net
        return None

    def get_element(self, element_id: str) -> Optional[CircuitElement]:
        """Look up an element by its identifier."""
        return self._by_id.get(element_id)
