"""
Service for donut chart calculations.

- Pie layout (angles proportional to cost, input order kept)
- Arc interpolation between renders
- Ordinal color scale for record names
- Geometry helpers (hit testing, matplotlib angle mapping)

Angles are radians measured clockwise from 12 o'clock, from 0 to 2*pi.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from matplotlib import colormaps
from matplotlib.colors import to_hex

from livedonut.core.domain.models import Record

CANVAS_WIDTH = 300
CANVAS_HEIGHT = 300
RADIUS = 150
INNER_RADIUS = RADIUS / 2

FIGURE_WIDTH = CANVAS_WIDTH + 150
FIGURE_HEIGHT = CANVAS_HEIGHT + 50
CENTER_X = CANVAS_WIDTH / 2 + 5
CENTER_Y = CANVAS_HEIGHT / 2 + 15
LEGEND_OFFSET = (CANVAS_WIDTH + 10, 10)

STROKE_COLOR = "#243642"
STROKE_WIDTH_PX = 3
HIGHLIGHT_COLOR = "#243642"
LEGEND_TEXT_COLOR = "#243642"

TRANSITION_DURATION_MS = 1000
HIGHLIGHT_DURATION_MS = 400

PALETTE_NAME = "Set3"

FULL_CIRCLE = 2 * math.pi

Arc = Tuple[float, float]

def categorical_palette(name: str = PALETTE_NAME) -> List[str]:
    """Returns a qualitative matplotlib colormap as hex strings."""
    return [to_hex(color) for color in colormaps[name].colors]

def coerce_cost(value: Any) -> float:
    """
    Converts a document cost to a slice value.

    Anything that is not a finite, non-negative number becomes 0.0 so a
    malformed document shows as an empty slice.
    """
    if isinstance(value, bool) or value is None:
        return 0.0

    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0

    if not math.isfinite(number) or number < 0:
        return 0.0

    return number

@dataclass(frozen=True)
class PieSlice:
    """Layout of one record on the donut."""

    record: Record
    index: int
    value: float
    start_angle: float
    end_angle: float

    @property
    def record_id(self) -> str:
        return self.record.id

    @property
    def span(self) -> float:
        return self.end_angle - self.start_angle

    @property
    def arc(self) -> Arc:
        return (self.start_angle, self.end_angle)

def compute_pie_slices(records: Sequence[Record]) -> List[PieSlice]:
    """
    Partitions the full circle proportionally to each record's cost.

    Records keep their input order. When the total cost is zero every slice
    spans zero radians.
    """
    if not records:
        return []

    values = np.array([coerce_cost(record.cost) for record in records], dtype=float)
    total = values.sum()

    if total > 0:
        spans = values / total * FULL_CIRCLE
    else:
        spans = np.zeros_like(values)

    ends = np.cumsum(spans)
    starts = ends - spans

    return [
        PieSlice(
            record=record,
            index=index,
            value=float(values[index]),
            start_angle=float(starts[index]),
            end_angle=float(ends[index]),
        )
        for index, record in enumerate(records)
    ]

class OrdinalColorScale:
    """Maps names to palette colors in order of first appearance."""

    def __init__(self, palette: Optional[Sequence[str]] = None):
        self._palette = list(palette) if palette else categorical_palette()
        self._domain: List[str] = []
        self._index: Dict[str, int] = {}

    @property
    def palette(self) -> List[str]:
        return list(self._palette)

    @property
    def domain(self) -> List[str]:
        return list(self._domain)

    def set_domain(self, names: Iterable[str]) -> bool:
        """
        Replaces the domain with the distinct names, first appearance first.

        Returns:
            bool: True if the domain changed
        """
        new_domain: List[str] = []
        seen = set()
        for name in names:
            if name not in seen:
                seen.add(name)
                new_domain.append(name)

        if new_domain == self._domain:
            return False

        self._domain = new_domain
        self._index = {name: i for i, name in enumerate(new_domain)}
        return True

    def color(self, name: str) -> str:
        """Returns the color for a name, extending the domain if needed."""
        if name not in self._index:
            self._index[name] = len(self._domain)
            self._domain.append(name)
        return self._palette[self._index[name] % len(self._palette)]

    def items(self) -> List[Tuple[str, str]]:
        """Returns (name, color) pairs in domain order, for the legend."""
        return [(name, self.color(name)) for name in self._domain]

def interpolate_arc(source: Arc, target: Arc, t: float) -> Arc:
    """Linear interpolation of both angles, t in [0, 1]."""
    t = max(0.0, min(1.0, float(t)))
    return (
        source[0] + (target[0] - source[0]) * t,
        source[1] + (target[1] - source[1]) * t,
    )

@dataclass(frozen=True)
class ArcTransition:
    """Animated change of one slice between two arcs."""

    ENTER = "enter"
    UPDATE = "update"
    EXIT = "exit"

    record_id: str
    kind: str
    source: Arc
    target: Arc

    def at(self, t: float) -> Arc:
        return interpolate_arc(self.source, self.target, t)

def plan_transitions(
    current_arcs: Mapping[str, Arc], slices: Sequence[PieSlice]
) -> List[ArcTransition]:
    """
    Reconciles displayed arcs with a new layout, keyed by record id.

    Entering slices grow from their end angle, updating slices move from the
    displayed arc to the new one, exiting slices collapse onto their end angle.
    """
    transitions: List[ArcTransition] = []
    new_ids = set()

    for pie_slice in slices:
        new_ids.add(pie_slice.record_id)
        displayed = current_arcs.get(pie_slice.record_id)

        if displayed is None:
            transitions.append(
                ArcTransition(
                    record_id=pie_slice.record_id,
                    kind=ArcTransition.ENTER,
                    source=(pie_slice.end_angle, pie_slice.end_angle),
                    target=pie_slice.arc,
                )
            )
        else:
            transitions.append(
                ArcTransition(
                    record_id=pie_slice.record_id,
                    kind=ArcTransition.UPDATE,
                    source=tuple(displayed),
                    target=pie_slice.arc,
                )
            )

    for record_id, displayed in current_arcs.items():
        if record_id in new_ids:
            continue
        start, end = displayed
        transitions.append(
            ArcTransition(
                record_id=record_id,
                kind=ArcTransition.EXIT,
                source=(start, end),
                target=(end, end),
            )
        )

    return transitions

def arc_to_wedge_thetas(arc: Arc) -> Tuple[float, float]:
    """Converts a clockwise-from-top arc to matplotlib Wedge degrees."""
    start, end = arc
    return 90.0 - math.degrees(end), 90.0 - math.degrees(start)

def angle_at_position(x: float, y: float) -> float:
    """Angle of a point around the chart center, clockwise from 12 o'clock."""
    angle = math.atan2(x, y)
    if angle < 0:
        angle += FULL_CIRCLE
    return angle

def find_slice_at(
    slices: Sequence[PieSlice],
    x: float,
    y: float,
    arcs: Optional[Mapping[str, Arc]] = None,
    inner_radius: float = INNER_RADIUS,
    outer_radius: float = RADIUS,
) -> Optional[PieSlice]:
    """
    Finds the slice under a point given in chart coordinates.

    Args:
        slices: Current layout
        x: X offset from the chart center
        y: Y offset from the chart center, pointing up
        arcs: Displayed arcs by record id; the layout angles are used if missing

    Returns:
        Optional[PieSlice]: Slice under the point or None
    """
    radius = math.hypot(x, y)
    if not inner_radius <= radius <= outer_radius:
        return None

    angle = angle_at_position(x, y)

    for pie_slice in slices:
        start, end = pie_slice.arc
        if arcs is not None and pie_slice.record_id in arcs:
            start, end = arcs[pie_slice.record_id]
        if start < end and start <= angle <= end:
            return pie_slice

    return None
