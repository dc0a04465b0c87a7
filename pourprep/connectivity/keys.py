"""Connectivity keys attached to pads."""
from dataclasses import dataclass
from enum import Enum


class KeyKind(Enum):
    """Where a connectivity key came from; the value is its string prefix."""
    REAL = ""
    UNCONNECTED = "unconnected"
    UNCONNECTED_PLATED_HOLE = "unconnected-plated-hole"
    UNCONNECTED_VIA = "unconnected-via"
    HOLE = "hole"
    CUTOUT = "cutout"


@dataclass(frozen=True)
class ConnectivityKey:
    """
    Net identity of a pad.

    A REAL key holds the net key from the connectivity resolver. Every other
    kind is synthesized from the element id, so pads without a net still get
    a key of their own that cannot collide with a real one once serialized.
    """
    kind: KeyKind
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("connectivity key value must be non-empty")

    @classmethod
    def real(cls, key: str) -> "ConnectivityKey":
        return cls(KeyKind.REAL, key)

    @classmethod
    def unconnected(cls, element_id: str) -> "ConnectivityKey":
        return cls(KeyKind.UNCONNECTED, element_id)

    @classmethod
    def unconnected_plated_hole(cls, element_id: str) -> "ConnectivityKey":
        return cls(KeyKind.UNCONNECTED_PLATED_HOLE, element_id)

    @classmethod
    def unconnected_via(cls, element_id: str) -> "ConnectivityKey":
        return cls(KeyKind.UNCONNECTED_VIA, element_id)

    @classmethod
    def hole(cls, element_id: str) -> "ConnectivityKey":
        return cls(KeyKind.HOLE, element_id)

    @classmethod
    def cutout(cls, element_id: str) -> "ConnectivityKey":
        return cls(KeyKind.CUTOUT, element_id)

    @property
    def is_synthetic(self) -> bool:
        return self.kind is not KeyKind.REAL

    def __str__(self) -> str:
        if self.kind is KeyKind.REAL:
            return self.value
        return f"{self.kind.value}:{self.value}"
