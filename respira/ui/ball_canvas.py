"""Canvas with the exercise shape guide and the moving ball.

The ball glides linearly to the current phase's offset over that
phase's duration, so it arrives exactly when the phase ends.  Pausing
the engine freezes the glide in place.
"""

from __future__ import annotations

from PyQt6.QtCore import (
    Qt, QPointF, QRectF, QVariantAnimation, QEasingCurve,
)
from PyQt6.QtGui import QPainter, QPen, QColor, QPolygonF, QRadialGradient
from PyQt6.QtWidgets import QWidget

from ..breathing.patterns import ExerciseKind, BALL_OFFSETS
from .styles import PHASE_COLORS, IDLE_COLOR, PALETTE


class BallCanvas(QWidget):
    """Custom-painted guide + ball."""

    CANVAS_SIZE = 260
    BALL_RADIUS = 12

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setFixedSize(self.CANVAS_SIZE, self.CANVAS_SIZE)

        self._kind: ExerciseKind = ExerciseKind.COHERENCE
        self._offset = QPointF(0.0, 0.0)
        self._style_class: str | None = None

        self._move_anim = QVariantAnimation(self)
        self._move_anim.setEasingCurve(QEasingCurve.Type.Linear)
        self._move_anim.valueChanged.connect(self._on_move)

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC API
    # ══════════════════════════════════════════════════════════════════

    @property
    def offset(self) -> tuple[float, float]:
        return (self._offset.x(), self._offset.y())

    def set_exercise(self, kind: ExerciseKind) -> None:
        """Switch guide shape and park the ball at the centre."""
        self._kind = kind
        self._move_anim.stop()
        self._offset = QPointF(0.0, 0.0)
        self._style_class = None
        self.update()

    def glide_to(
        self, offset: tuple[int, int], seconds: float, style_class: str,
    ) -> None:
        """Move the ball to *offset* over *seconds*."""
        self._style_class = style_class
        self._move_anim.stop()
        self._move_anim.setStartValue(QPointF(self._offset))
        self._move_anim.setEndValue(QPointF(*offset))
        self._move_anim.setDuration(max(1, int(seconds * 1000)))
        self._move_anim.start()

    def freeze(self) -> None:
        if self._move_anim.state() == QVariantAnimation.State.Running:
            self._move_anim.pause()

    def unfreeze(self) -> None:
        if self._move_anim.state() == QVariantAnimation.State.Paused:
            self._move_anim.resume()

    def park(self) -> None:
        """Stop gliding and return to the centre."""
        self.set_exercise(self._kind)

    # ══════════════════════════════════════════════════════════════════
    #  PAINTING
    # ══════════════════════════════════════════════════════════════════

    def _on_move(self, value: object) -> None:
        self._offset = QPointF(value)  # type: ignore[arg-type]
        self.update()

    def paintEvent(self, event) -> None:  # noqa: N802
        p = QPainter(self)
        p.setRenderHint(QPainter.RenderHint.Antialiasing)
        centre = QPointF(self.width() / 2, self.height() / 2)

        self._paint_guide(p, centre)
        self._paint_ball(p, centre)
        p.end()

    def _paint_guide(self, p: QPainter, centre: QPointF) -> None:
        pen = QPen(QColor(PALETTE["line"]))
        pen.setWidthF(2.0)
        p.setPen(pen)
        p.setBrush(Qt.BrushStyle.NoBrush)

        points = [centre + QPointF(x, y) for x, y in BALL_OFFSETS[self._kind]]
        if self._kind == ExerciseKind.COHERENCE:
            p.drawLine(points[0], points[1])
        elif self._kind == ExerciseKind.SQUARE:
            p.drawRect(QRectF(points[3], points[1]))
        else:
            p.drawPolygon(QPolygonF(points))

    def _paint_ball(self, p: QPainter, centre: QPointF) -> None:
        fill_hex, glow_hex = PHASE_COLORS.get(
            self._style_class or "", (IDLE_COLOR, IDLE_COLOR),
        )
        pos = centre + self._offset
        r = self.BALL_RADIUS

        glow = QRadialGradient(pos, r * 2.2)
        glow_color = QColor(glow_hex)
        glow_color.setAlpha(90)
        glow.setColorAt(0.0, glow_color)
        glow_color.setAlpha(0)
        glow.setColorAt(1.0, glow_color)
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(glow)
        p.drawEllipse(pos, r * 2.2, r * 2.2)

        p.setBrush(QColor(fill_hex))
        p.drawEllipse(pos, r, r)
