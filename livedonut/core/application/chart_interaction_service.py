"""
Service for handling donut chart interactions.

Responsible for hover state, tooltip text and geometry, and delete requests.
"""

import logging
from html import escape
from typing import Dict, Optional, Sequence, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from livedonut.core.application.chart_service import (
    INNER_RADIUS,
    RADIUS,
    Arc,
    PieSlice,
    coerce_cost,
    find_slice_at,
)
from livedonut.core.domain.models import Record

logger = logging.getLogger(__name__)

TOOLTIP_MARGIN = 15

def format_cost(cost) -> str:
    """Formats the cost a slice is drawn with, dropping a trailing .0."""
    if cost is None:
        return "-"
    value = coerce_cost(cost)
    if value.is_integer():
        return f"{int(value)}"
    return f"{value}"

def format_tooltip(record: Record) -> str:
    """Tooltip rich text: name and cost of the record."""
    return f"<b>{escape(record.name)}</b><br/>Cost: {escape(format_cost(record.cost))}"

def tooltip_position(
    pointer_x: float, pointer_y: float, tip_width: float, tip_height: float
) -> Tuple[int, int]:
    """
    Top-left corner of the tooltip for a pointer position.

    The tooltip is centered horizontally on the pointer and sits above it by
    its own height plus TOOLTIP_MARGIN.
    """
    left = pointer_x - tip_width / 2
    top = pointer_y - (tip_height + TOOLTIP_MARGIN)
    return int(round(left)), int(round(top))

class ChartInteractionService(QObject):
    """Hover and click state machine for slices."""

    hover_entered = pyqtSignal(object)
    hover_moved = pyqtSignal(object)
    hover_exited = pyqtSignal(object)
    delete_requested = pyqtSignal(str)

    def __init__(self):
        super().__init__()

        self._slices: Sequence[PieSlice] = []
        self._arcs: Optional[Dict[str, Arc]] = None
        self._hovered: Optional[PieSlice] = None

    @property
    def hovered_slice(self) -> Optional[PieSlice]:
        return self._hovered

    def set_slices(self, slices: Sequence[PieSlice], arcs: Optional[Dict[str, Arc]] = None):
        """
        Binds the handlers to a new layout.

        Args:
            slices: Layout of the latest render
            arcs: Live mapping of displayed arcs, read on every hit test
        """
        self._slices = list(slices)
        self._arcs = arcs

        if self._hovered is None:
            return

        replacement = next(
            (s for s in self._slices if s.record_id == self._hovered.record_id), None
        )
        if replacement is None:
            old = self._hovered
            self._hovered = None
            self.hover_exited.emit(old)
        else:
            self._hovered = replacement

    def slice_at(self, x: float, y: float) -> Optional[PieSlice]:
        return find_slice_at(self._slices, x, y, self._arcs, INNER_RADIUS, RADIUS)

    def handle_mouse_move(self, x: Optional[float], y: Optional[float]):
        """Handles pointer movement in chart coordinates (None when outside)."""
        pie_slice = None if x is None or y is None else self.slice_at(x, y)

        current_id = self._hovered.record_id if self._hovered else None
        new_id = pie_slice.record_id if pie_slice else None

        if new_id != current_id:
            if self._hovered is not None:
                old = self._hovered
                self._hovered = None
                self.hover_exited.emit(old)

            if pie_slice is not None:
                self._hovered = pie_slice
                self.hover_entered.emit(pie_slice)

        if pie_slice is not None:
            self.hover_moved.emit(pie_slice)

    def handle_mouse_leave(self):
        """Handles the pointer leaving the chart."""
        if self._hovered is not None:
            old = self._hovered
            self._hovered = None
            self.hover_exited.emit(old)

    def handle_mouse_click(self, x: Optional[float], y: Optional[float]):
        """Requests deletion of the clicked record."""
        if x is None or y is None:
            return

        pie_slice = self.slice_at(x, y)
        if pie_slice is None:
            return

        logger.info(f"Delete requested for record {pie_slice.record_id}")
        self.delete_requested.emit(pie_slice.record_id)
