"""Classify board elements into pour pads for one layer."""
import logging
from typing import Callable, Iterable, Optional

from ..circuit.models import (
    CircuitElement, PcbCutout, PcbHole, PcbPlatedHole, PcbSmtPad, PcbTrace, PcbVia
)
from ..connectivity.keys import ConnectivityKey
from ..connectivity.resolver import ConnectivityResolver
from .models import AnyPad, Bounds, CircularPad, PolygonPad, RectPad
from .traces import segment_trace

log = logging.getLogger(__name__)


def rect_bounds(cx: float, cy: float, width: float, height: float) -> Bounds:
    """Bounds of a width x height rectangle centered on (cx, cy)."""
    return Bounds(
        min_x=cx - width / 2,
        min_y=cy - height / 2,
        max_x=cx + width / 2,
        max_y=cy + height / 2,
    )


class PadExtractor:
    """
    Turns circuit elements into pads relevant to one copper layer.

    Each element kind has its own handler. Handlers either return the pads for
    that element or an empty list when the element does not touch the layer.
    Element kinds without a handler are skipped.
    """

    def __init__(self, layer: str, resolver: ConnectivityResolver):
        """
        Initialize the extractor.

        Args:
            layer: Target copper layer (e.g. 'top')
            resolver: Element id to net key lookup
        """
        self.layer = layer
        self.resolver = resolver
        self._handlers: dict[type, Callable[[CircuitElement], list[AnyPad]]] = {
            PcbSmtPad: self._smtpad_pads,
            PcbPlatedHole: self._plated_hole_pads,
            PcbHole: self._hole_pads,
            PcbCutout: self._cutout_pads,
            PcbVia: self._via_pads,
        }

    def extract(self, elements: Iterable[CircuitElement]) -> list[AnyPad]:
        """Return the pads for all elements, in element order."""
        pads: list[AnyPad] = []
        for element in elements:
            if isinstance(element, PcbTrace):
                # Trace pad ids are numbered by the pads emitted so far
                pads.extend(self._trace_pads(element, len(pads)))
                continue
            handler = self._handlers.get(type(element))
            if handler is None:
                continue
            pads.extend(handler(element))
        return pads

    def _resolve(
        self,
        element_id: str,
        fallback: Callable[[str], ConnectivityKey]
    ) -> ConnectivityKey:
        """Resolver key for element_id, or a synthetic one built by fallback."""
        net = self.resolver.lookup(element_id)
        if net:
            return ConnectivityKey.real(net)
        return fallback(element_id)

    def _smtpad_pads(self, pad: PcbSmtPad) -> list[AnyPad]:
        if pad.layer != self.layer:
            return []

        key = self._resolve(pad.pcb_smtpad_id, ConnectivityKey.unconnected)

        if pad.shape == "rect":
            return [RectPad(
                pad_id=pad.pcb_smtpad_id,
                layer=pad.layer,
                connectivity_key=key,
                bounds=rect_bounds(pad.x, pad.y, pad.width, pad.height)
            )]
        if pad.shape == "circle":
            return [CircularPad(
                pad_id=pad.pcb_smtpad_id,
                layer=pad.layer,
                connectivity_key=key,
                x=pad.x,
                y=pad.y,
                radius=pad.radius
            )]

        log.debug("Skipping smtpad %s with unsupported shape %r", pad.pcb_smtpad_id, pad.shape)
        return []

    def _plated_hole_pads(self, hole: PcbPlatedHole) -> list[AnyPad]:
        # TODO: support pill and oval plated holes once the solver accepts them
        if hole.shape != "circle":
            log.debug("Dropping non-circular plated hole %s (%s)", hole.pcb_plated_hole_id, hole.shape)
            return []
        if self.layer not in hole.layers:
            return []

        return [CircularPad(
            pad_id=hole.pcb_plated_hole_id,
            layer=self.layer,
            connectivity_key=self._resolve(
                hole.pcb_plated_hole_id, ConnectivityKey.unconnected_plated_hole
            ),
            x=hole.x,
            y=hole.y,
            radius=hole.outer_diameter / 2
        )]

    def _hole_pads(self, hole: PcbHole) -> list[AnyPad]:
        if hole.hole_shape != "circle":
            log.debug("Dropping non-circular hole %s (%s)", hole.pcb_hole_id, hole.hole_shape)
            return []

        # Holes go through every layer
        return [CircularPad(
            pad_id=hole.pcb_hole_id,
            layer=self.layer,
            connectivity_key=ConnectivityKey.hole(hole.pcb_hole_id),
            x=hole.x,
            y=hole.y,
            radius=hole.hole_diameter / 2
        )]

    def _cutout_pads(self, cutout: PcbCutout) -> list[AnyPad]:
        key = ConnectivityKey.cutout(cutout.pcb_cutout_id)

        if cutout.shape == "rect":
            return [RectPad(
                pad_id=cutout.pcb_cutout_id,
                layer=self.layer,
                connectivity_key=key,
                bounds=rect_bounds(cutout.center.x, cutout.center.y, cutout.width, cutout.height)
            )]
        if cutout.shape == "circle":
            return [CircularPad(
                pad_id=cutout.pcb_cutout_id,
                layer=self.layer,
                connectivity_key=key,
                x=cutout.center.x,
                y=cutout.center.y,
                radius=cutout.radius
            )]
        if cutout.shape == "polygon":
            return [PolygonPad(
                pad_id=cutout.pcb_cutout_id,
                layer=self.layer,
                connectivity_key=key,
                points=[(p.x, p.y) for p in cutout.points]
            )]

        log.debug("Skipping cutout %s with unsupported shape %r", cutout.pcb_cutout_id, cutout.shape)
        return []

    def _via_pads(self, via: PcbVia) -> list[AnyPad]:
        if self.layer not in via.layers:
            return []

        return [CircularPad(
            pad_id=via.pcb_via_id,
            layer=self.layer,
            connectivity_key=self._resolve(via.pcb_via_id, ConnectivityKey.unconnected_via),
            x=via.x,
            y=via.y,
            radius=via.outer_diameter / 2
        )]

    def _trace_pads(self, trace: PcbTrace, pad_count: int) -> list[AnyPad]:
        net: Optional[str] = self.resolver.lookup(trace.pcb_trace_id)
        if not net:
            log.debug("Skipping trace %s with no connectivity", trace.pcb_trace_id)
            return []

        return segment_trace(trace, self.layer, ConnectivityKey.real(net), pad_count)
