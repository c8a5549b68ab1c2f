import logging
from typing import Dict, List, Optional, Sequence

from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Wedge
from PyQt6.QtCore import QAbstractAnimation, QEasingCurve, QPoint, Qt, QTimer, QVariantAnimation
from PyQt6.QtGui import QColor, QCursor
from PyQt6.QtWidgets import QLabel, QSizePolicy, QVBoxLayout, QWidget

from livedonut.core.application.chart_interaction_service import (
    ChartInteractionService,
    format_tooltip,
    tooltip_position,
)
from livedonut.core.application.chart_service import (
    CENTER_X,
    CENTER_Y,
    FIGURE_HEIGHT,
    FIGURE_WIDTH,
    HIGHLIGHT_COLOR,
    HIGHLIGHT_DURATION_MS,
    INNER_RADIUS,
    LEGEND_OFFSET,
    LEGEND_TEXT_COLOR,
    RADIUS,
    STROKE_COLOR,
    STROKE_WIDTH_PX,
    TRANSITION_DURATION_MS,
    Arc,
    ArcTransition,
    OrdinalColorScale,
    PieSlice,
    arc_to_wedge_thetas,
    compute_pie_slices,
    plan_transitions,
)
from livedonut.core.domain.models import Record

logger = logging.getLogger(__name__)

DPI = 100
NOTIFICATION_TIMEOUT_MS = 4000
LEGEND_MARKER_SIZE = 10

def px_to_points(px: float) -> float:
    return px * 72.0 / DPI

class DonutChartView(QWidget):
    """Donut chart widget with legend, animated transitions and a hover tooltip."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.color_scale = OrdinalColorScale()
        self.interaction = ChartInteractionService()

        self._slices: List[PieSlice] = []
        self._arcs: Dict[str, Arc] = {}
        self._wedges: Dict[str, Wedge] = {}
        self._base_colors: Dict[str, str] = {}
        self._transitions: List[ArcTransition] = []
        self._fill_animations: Dict[str, QVariantAnimation] = {}
        self._legend = None
        self._last_pointer: Optional[QPoint] = None

        self._setup_ui()
        self._connect_signals()

    @property
    def slices(self) -> List[PieSlice]:
        return list(self._slices)

    @property
    def displayed_arcs(self) -> Dict[str, Arc]:
        return dict(self._arcs)

    @property
    def wedges(self) -> Dict[str, Wedge]:
        return dict(self._wedges)

    def render(self, records: Sequence[Record]):
        """
        Redraws the chart for the full record list.

        Starts the layout transitions and returns immediately; the chart
        reaches the new layout after TRANSITION_DURATION_MS.
        """
        self.color_scale.set_domain(record.name for record in records)
        self._update_legend()

        slices = compute_pie_slices(records)
        self.layout_animation.stop()
        self._transitions = plan_transitions(self._arcs, slices)
        by_id = {record.id: record for record in records}

        hovered = self.interaction.hovered_slice
        hovered_id = hovered.record_id if hovered else None

        for transition in self._transitions:
            if transition.kind == ArcTransition.ENTER:
                record = by_id[transition.record_id]
                self._create_wedge(record, transition.source)
            elif transition.kind == ArcTransition.UPDATE:
                record = by_id[transition.record_id]
                color = self.color_scale.color(record.name)
                self._base_colors[transition.record_id] = color
                if transition.record_id != hovered_id:
                    self._set_fill(transition.record_id, color)

        self._slices = slices
        self.interaction.set_slices(slices, self._arcs)

        self._apply_progress(0.0)
        self.layout_animation.start()

    def finish_transitions(self):
        """Jumps every running animation to its end state."""
        # Fills first: finishing the layout removes exiting wedges and their fills.
        for animation in [*self._fill_animations.values(), self.layout_animation]:
            if animation.state() == QAbstractAnimation.State.Running:
                animation.setCurrentTime(animation.duration())

    def show_notification(self, message: str):
        """Shows a message under the chart that hides itself after a while."""
        self.notification_label.setText(message)
        self.notification_label.show()
        self._notification_timer.start(NOTIFICATION_TIMEOUT_MS)

    def _setup_ui(self):
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.figure = Figure(figsize=(FIGURE_WIDTH / DPI, FIGURE_HEIGHT / DPI), dpi=DPI)
        self.figure.patch.set_alpha(0.0)
        self.canvas = FigureCanvas(self.figure)
        self.canvas.setFixedSize(FIGURE_WIDTH, FIGURE_HEIGHT)
        self.canvas.setSizePolicy(QSizePolicy.Policy.Fixed, QSizePolicy.Policy.Fixed)

        self.ax = self.figure.add_axes(
            [
                (CENTER_X - RADIUS) / FIGURE_WIDTH,
                (FIGURE_HEIGHT - CENTER_Y - RADIUS) / FIGURE_HEIGHT,
                2 * RADIUS / FIGURE_WIDTH,
                2 * RADIUS / FIGURE_HEIGHT,
            ],
            frameon=False,
        )
        self.ax.set_xlim(-RADIUS, RADIUS)
        self.ax.set_ylim(-RADIUS, RADIUS)
        self.ax.set_aspect("equal", anchor="C")
        self.ax.format_coord = lambda x, y: ""
        self.ax.axis("off")

        self.notification_label = QLabel(self)
        self.notification_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.notification_label.setWordWrap(True)
        self.notification_label.hide()

        layout.addWidget(self.canvas)
        layout.addWidget(self.notification_label)

        self.tooltip_widget = QLabel(self, Qt.WindowType.ToolTip)
        self.tooltip_widget.setAttribute(Qt.WidgetAttribute.WA_StyledBackground, True)
        self.tooltip_widget.setTextFormat(Qt.TextFormat.RichText)
        self.tooltip_widget.hide()

        self.layout_animation = QVariantAnimation(self)
        self.layout_animation.setStartValue(0.0)
        self.layout_animation.setEndValue(1.0)
        self.layout_animation.setDuration(TRANSITION_DURATION_MS)
        self.layout_animation.setEasingCurve(QEasingCurve.Type.InOutCubic)

        self._notification_timer = QTimer(self)
        self._notification_timer.setSingleShot(True)

    def _connect_signals(self):
        self.layout_animation.valueChanged.connect(self._apply_progress)
        self.layout_animation.finished.connect(self._on_transitions_finished)
        self._notification_timer.timeout.connect(self.notification_label.hide)

        self.interaction.hover_entered.connect(self._on_hover_entered)
        self.interaction.hover_moved.connect(self._on_hover_moved)
        self.interaction.hover_exited.connect(self._on_hover_exited)

        self.canvas.mpl_connect("motion_notify_event", self.on_motion)
        self.canvas.mpl_connect("button_press_event", self.on_click)
        self.canvas.mpl_connect("figure_leave_event", self.on_figure_leave)

    def _create_wedge(self, record: Record, arc: Arc) -> Wedge:
        theta1, theta2 = arc_to_wedge_thetas(arc)
        color = self.color_scale.color(record.name)
        wedge = Wedge(
            center=(0.0, 0.0),
            r=RADIUS,
            theta1=theta1,
            theta2=theta2,
            width=RADIUS - INNER_RADIUS,
            facecolor=color,
            edgecolor=STROKE_COLOR,
            linewidth=px_to_points(STROKE_WIDTH_PX),
        )
        self.ax.add_patch(wedge)
        self._wedges[record.id] = wedge
        self._base_colors[record.id] = color
        self._arcs[record.id] = arc
        return wedge

    def _remove_wedge(self, record_id: str):
        wedge = self._wedges.pop(record_id, None)
        if wedge is not None:
            wedge.remove()
        self._arcs.pop(record_id, None)
        self._base_colors.pop(record_id, None)

        animation = self._fill_animations.pop(record_id, None)
        if animation is not None:
            animation.stop()
            animation.deleteLater()

    def _apply_progress(self, value):
        t = float(value)
        for transition in self._transitions:
            wedge = self._wedges.get(transition.record_id)
            if wedge is None:
                continue
            arc = transition.at(t)
            self._arcs[transition.record_id] = arc
            theta1, theta2 = arc_to_wedge_thetas(arc)
            wedge.set_theta1(theta1)
            wedge.set_theta2(theta2)
        self.canvas.draw_idle()

    def _on_transitions_finished(self):
        self._apply_progress(1.0)
        for transition in self._transitions:
            if transition.kind == ArcTransition.EXIT:
                self._remove_wedge(transition.record_id)
        self._transitions = [t for t in self._transitions if t.kind != ArcTransition.EXIT]
        self.canvas.draw_idle()

    def _update_legend(self):
        if self._legend is not None:
            self._legend.remove()
            self._legend = None

        items = self.color_scale.items()
        if not items:
            self.canvas.draw_idle()
            return

        handles = [
            Line2D(
                [], [], marker="o", linestyle="",
                markersize=LEGEND_MARKER_SIZE,
                markerfacecolor=color, markeredgecolor=color,
            )
            for _, color in items
        ]
        self._legend = self.figure.legend(
            handles,
            [name for name, _ in items],
            loc="upper left",
            bbox_to_anchor=(
                LEGEND_OFFSET[0] / FIGURE_WIDTH,
                1 - LEGEND_OFFSET[1] / FIGURE_HEIGHT,
            ),
            frameon=False,
            labelcolor=LEGEND_TEXT_COLOR,
            handletextpad=0.4,
            labelspacing=0.5,
            borderaxespad=0.0,
        )

    def _set_fill(self, record_id: str, color: str):
        animation = self._fill_animations.get(record_id)
        if animation is not None:
            animation.stop()
        wedge = self._wedges.get(record_id)
        if wedge is not None:
            wedge.set_facecolor(color)

    def _animate_fill(self, record_id: str, color: str):
        wedge = self._wedges.get(record_id)
        if wedge is None:
            return

        # One animation per slice, restarted so hover in/out never overlap.
        animation = self._fill_animations.get(record_id)
        if animation is None:
            animation = QVariantAnimation(self)
            animation.setDuration(HIGHLIGHT_DURATION_MS)
            animation.valueChanged.connect(
                lambda value, rid=record_id: self._on_fill_step(rid, value)
            )
            self._fill_animations[record_id] = animation
        else:
            animation.stop()

        try:
            animation.finished.disconnect()
        except TypeError:
            pass
        animation.finished.connect(
            lambda rid=record_id, target=color: self._set_fill(rid, target)
        )

        current = wedge.get_facecolor()
        animation.setStartValue(QColor.fromRgbF(*current[:3]))
        animation.setEndValue(QColor(color))
        animation.start()

    def _on_fill_step(self, record_id: str, value):
        wedge = self._wedges.get(record_id)
        if wedge is not None:
            wedge.set_facecolor(QColor(value).name())
            self.canvas.draw_idle()

    def _on_hover_entered(self, pie_slice: PieSlice):
        self._animate_fill(pie_slice.record_id, HIGHLIGHT_COLOR)

        self.tooltip_widget.setText(format_tooltip(pie_slice.record))
        self.tooltip_widget.adjustSize()
        self.tooltip_widget.show()

    def _on_hover_moved(self, pie_slice: PieSlice):
        pointer = self._last_pointer or QCursor.pos()
        left, top = tooltip_position(
            pointer.x(), pointer.y(),
            self.tooltip_widget.width(), self.tooltip_widget.height(),
        )
        self.tooltip_widget.move(left, top)

    def _on_hover_exited(self, pie_slice: PieSlice):
        # Exiting records are gone from the color domain, so use the stored fill.
        color = self._base_colors.get(pie_slice.record_id)
        if color is not None:
            self._animate_fill(pie_slice.record_id, color)
        self.tooltip_widget.hide()

    def on_motion(self, event):
        if event.guiEvent is not None:
            self._last_pointer = self.canvas.mapToGlobal(event.guiEvent.position().toPoint())

        if event.inaxes != self.ax:
            self.interaction.handle_mouse_move(None, None)
            return

        self.interaction.handle_mouse_move(event.xdata, event.ydata)

    def on_click(self, event):
        if event.inaxes != self.ax or event.button != 1:
            return
        self.interaction.handle_mouse_click(event.xdata, event.ydata)

    def on_figure_leave(self, event):
        self.interaction.handle_mouse_leave()
