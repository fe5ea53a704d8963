"""Preview surface that paints onto a ``QPainter``."""

from __future__ import annotations

from math import ceil, cos, sin
from typing import Callable, Optional, Sequence

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QColor, QPainter, QPen, QPolygonF

from ..kernel.geometry import TAU, Vec2


# Segments per full turn when arcs and circles are flattened
ARC_SEGMENTS = 96


def _identity(p: Vec2) -> QPointF:
    return QPointF(p.x, p.y)


class QtPreviewSurface:
    """Draws tool previews with a ``QPainter``.

    ``to_screen`` maps drawing units to widget coordinates (pan, zoom, y-flip);
    curves are flattened in drawing space first so any mapping works.
    """

    def __init__(self, painter: QPainter, to_screen: Optional[Callable[[Vec2], QPointF]] = None):
        self.painter = painter
        self.to_screen = to_screen or _identity

    def _pen(self, color: str, width: float, dash: Sequence[float]) -> QPen:
        pen = QPen(QColor(color))
        pen.setWidthF(width)
        if dash:
            pen.setStyle(Qt.PenStyle.CustomDashLine)
            pen.setDashPattern([d / max(width, 1e-6) for d in dash])
        return pen

    def _stroke(self, points: Sequence[Vec2], color: str, width: float, dash: Sequence[float], closed: bool):
        if len(points) < 2:
            return
        poly = QPolygonF([self.to_screen(p) for p in points])
        p = self.painter
        p.save()
        p.setPen(self._pen(color, width, dash))
        p.setBrush(Qt.BrushStyle.NoBrush)
        if closed:
            p.drawPolygon(poly)
        else:
            p.drawPolyline(poly)
        p.restore()

    def draw_polyline(self, points, *, color, width, dash, closed=False):
        self._stroke(list(points), color, width, dash, closed)

    def draw_circle(self, center, radius, *, color, width, dash):
        pts = [Vec2(center.x + radius * cos(t), center.y + radius * sin(t))
               for t in (TAU * i / ARC_SEGMENTS for i in range(ARC_SEGMENTS))]
        self._stroke(pts, color, width, dash, True)

    def draw_arc(self, center, radius, start_angle, end_angle, counterclockwise, *, color, width, dash):
        sweep = end_angle - start_angle
        if counterclockwise and sweep < 0:
            sweep += TAU
        elif not counterclockwise and sweep > 0:
            sweep -= TAU
        n = max(2, int(ceil(abs(sweep) / TAU * ARC_SEGMENTS)))
        pts = [Vec2(center.x + radius * cos(start_angle + sweep * i / n),
                    center.y + radius * sin(start_angle + sweep * i / n)) for i in range(n + 1)]
        self._stroke(pts, color, width, dash, False)

    def draw_marker(self, point, *, color, size):
        p = self.painter
        p.save()
        p.setPen(Qt.PenStyle.NoPen)
        p.setBrush(QBrush(QColor(color)))
        p.drawEllipse(self.to_screen(point), size, size)
        p.restore()

    def draw_text(self, point, text, *, color):
        p = self.painter
        p.save()
        p.setPen(QPen(QColor(color)))
        p.drawText(self.to_screen(point), text)
        p.restore()
