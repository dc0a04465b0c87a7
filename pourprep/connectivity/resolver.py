"""Connectivity resolution: which net does an element belong to."""
import logging
import math
from typing import Iterable, Optional, Protocol

from ..config import VIA_MATCH_TOLERANCE
from ..circuit.models import (
    CircuitElement, PcbPlatedHole, PcbPort, PcbSmtPad, PcbTrace, PcbVia, SourceTrace
)

log = logging.getLogger(__name__)


class ConnectivityResolver(Protocol):
    """Anything that maps an element id to its net key."""

    def lookup(self, element_id: str) -> Optional[str]:
        ...


class ConnectivityMap:
    """
    Read-only mapping from element ids to net keys.

    Ids missing from the map have no connectivity; lookup returns None for
    them.
    """

    def __init__(self, net_map: dict[str, str]):
        self._net_map = dict(net_map)
        self._net_to_ids: dict[str, list[str]] = {}
        for element_id, net in self._net_map.items():
            self._net_to_ids.setdefault(net, []).append(element_id)

    def lookup(self, element_id: str) -> Optional[str]:
        """Return the net key for an element id, or None."""
        return self._net_map.get(element_id)

    def get_ids_connected_to_net(self, net: str) -> list[str]:
        """All element ids belonging to a net, in insertion order."""
        return list(self._net_to_ids.get(net, []))

    def are_connected(self, id_a: str, id_b: str) -> bool:
        """True if both ids resolve to the same net."""
        net = self.lookup(id_a)
        return net is not None and net == self.lookup(id_b)

    @property
    def nets(self) -> list[str]:
        """Distinct net keys, in order of first appearance."""
        return list(self._net_to_ids)

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._net_map

    def __len__(self) -> int:
        return len(self._net_map)


class _DisjointSet:
    """Union-find over string ids, remembering insertion order."""

    def __init__(self):
        self._parent: dict[str, str] = {}

    def add(self, item: str) -> None:
        self._parent.setdefault(item, item)

    def find(self, item: str) -> str:
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: str, b: str) -> None:
        self.add(a)
        self.add(b)
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            self._parent[root_b] = root_a

    def __iter__(self):
        return iter(self._parent)


def _link_many(groups: _DisjointSet, anchor: str, others: Iterable[Optional[str]]) -> None:
    for other in others:
        if other:
            groups.union(anchor, other)


def build_connectivity_map(
    elements: Iterable[CircuitElement],
    key_prefix: str = "connectivity_net",
) -> ConnectivityMap:
    """
    Build a connectivity map from parsed circuit elements.

    Ids are grouped when a record references another one (trace to source
    trace, pad to port, port to source port, ...). Vias without an explicit
    trace reference join any trace that has a via waypoint at their position.

    Args:
        elements: Parsed circuit elements
        key_prefix: Prefix of the generated net keys

    Returns:
        ConnectivityMap assigning '<key_prefix><N>' to each connected group,
        numbered in order of first appearance
    """
    groups = _DisjointSet()
    via_waypoints: list[tuple[float, float, str]] = []
    loose_vias: list[PcbVia] = []

    for element in elements:
        if isinstance(element, SourceTrace):
            _link_many(groups, element.source_trace_id, element.connected_source_port_ids)
            _link_many(groups, element.source_trace_id, element.connected_source_net_ids)
        elif isinstance(element, PcbPort):
            _link_many(groups, element.pcb_port_id, [element.source_port_id])
        elif isinstance(element, (PcbSmtPad, PcbPlatedHole)):
            _link_many(groups, element.element_id, [element.pcb_port_id])
        elif isinstance(element, PcbTrace):
            trace_id = element.pcb_trace_id
            _link_many(groups, trace_id, [element.source_trace_id])
            for point in element.route:
                _link_many(groups, trace_id, [point.start_pcb_port_id, point.end_pcb_port_id])
                if point.route_type == "via":
                    via_waypoints.append((point.x, point.y, trace_id))
        elif isinstance(element, PcbVia):
            if element.pcb_trace_id:
                groups.union(element.pcb_via_id, element.pcb_trace_id)
            else:
                loose_vias.append(element)

    for via in loose_vias:
        for x, y, trace_id in via_waypoints:
            if math.hypot(via.x - x, via.y - y) <= VIA_MATCH_TOLERANCE:
                groups.union(via.pcb_via_id, trace_id)

    net_numbers: dict[str, int] = {}
    net_map: dict[str, str] = {}
    for element_id in list(groups):
        root = groups.find(element_id)
        if root not in net_numbers:
            net_numbers[root] = len(net_numbers)
        net_map[element_id] = f"{key_prefix}{net_numbers[root]}"

    log.debug("Built connectivity map: %d ids in %d nets", len(net_map), len(net_numbers))
    return ConnectivityMap(net_map)
