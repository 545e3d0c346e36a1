# File: trazo/core/builders.py
# Project: Trazo (TRZ)
# Version: 0.4.1
# Status: stable
# Date: 2026-10-18
# Purpose: Builders interactivos: muestras del puntero -> puntos de la figura / registro activo.
# Notes:
#   - PointBuilder: adquisición de puntos (start/update/add_vertex/stop).
#   - TransformBuilder: guarda el índice del registro en curso (no depende de "el último").
#   - Modo transformación en vivo: si el elemento ya tiene >= 1 transformación, un drag
#     rota (rect/polígono/elipse) o mueve (texto) en lugar de editar puntos. Es un
#     acoplamiento deliberado entre ambos builders; mantener.
from __future__ import annotations

from typing import Optional

from trazo.core.constants import MIN_DRAWING_SIZE, MIN_ROTATION_ANGLE
from trazo.core.models import DrawingElement, Shape, Transformation, TransformationType
from trazo.core.transformations import (
    cancel_transformation,
    start_transformation,
    stop_transformation,
    update_transformation,
)
from trazo.geom.utils import nearness, signed_angle
from trazo.utils.errors import TrazoGestureError
from trazo.utils.log import get_logger

log = get_logger(__name__)


class PointBuilder:
    """Convierte un drag en puntos de `element`."""

    def __init__(self, element: DrawingElement) -> None:
        self.element = element

    def start(self, x: float, y: float) -> None:
        el = self.element
        el.points.append((float(x), float(y)))
        if el.shape in (Shape.POLYGON, Shape.POLYLINE):
            # Siempre hay un último vértice "vivo" para arrastrar.
            el.points.append((float(x), float(y)))
        el.points_changed()

    def update(self, x: float, y: float, live_transform: Optional[bool] = None) -> None:
        el = self.element
        pts = el.points
        if not pts:
            self.start(x, y)
            return
        if (x, y) == tuple(pts[-1]):
            return

        transform = bool(live_transform) or len(el.transformations) >= 1
        p = (float(x), float(y))

        if el.shape == Shape.FREEHAND:
            pts.append(p)
            if transform:
                self._smooth(len(pts) - 1)

        elif el.shape in (Shape.RECTANGLE, Shape.POLYGON, Shape.POLYLINE) and transform:
            if len(pts) < 2:
                return
            center = el.original_center()
            self._set_live_rotation(signed_angle(center, pts[-1], p))
            return

        elif el.shape == Shape.ELLIPSE and transform:
            if len(pts) < 2:
                return
            if len(pts) == 2:
                pts.append(p)
            else:
                pts[2] = p
            center = el.original_center()
            self._set_live_rotation(signed_angle(center, (center[0] + 1, center[1]), p))

        elif el.shape in (Shape.POLYGON, Shape.POLYLINE):
            pts[-1] = p

        elif el.shape == Shape.TEXT and transform:
            if len(pts) < 2:
                return
            # Reposiciona (no redimensiona): el ancla acompaña al punto arrastrado.
            dx, dy = x - pts[1][0], y - pts[1][1]
            pts[0] = (pts[0][0] + dx, pts[0][1] + dy)
            pts[1] = p

        elif len(pts) < 2:
            pts.append(p)

        else:
            pts[1] = p

        el.points_changed()

    def add_vertex(self) -> None:
        el = self.element
        pts = el.points
        if el.shape in (Shape.POLYGON, Shape.POLYLINE):
            if len(pts) < 2:
                return
            last, second_to_last = pts[-1], pts[-2]
            if not nearness(second_to_last, last, MIN_DRAWING_SIZE):
                pts.append((last[0], last[1]))
        elif el.shape == Shape.LINE:
            # Recta -> curva: el punto final queda fijo y el drag mueve el control.
            if len(pts) == 2:
                pts.append(pts[1])
            elif len(pts) == 3:
                pts.append(pts[2])
                pts[2] = pts[1]
            else:
                return
        else:
            return
        el.points_changed()

    def stop(self) -> None:
        el = self.element
        pts = el.points
        # Demasiado chico para verse (3px): fue un click, no un drag (salvo mano alzada).
        if el.shape != Shape.FREEHAND and len(pts) >= 2 and nearness(pts[-2], pts[-1], MIN_DRAWING_SIZE):
            pts.pop()
            el.points_changed()
            log.debug("Último punto descartado (< %spx)", MIN_DRAWING_SIZE)

        first = el.transformations[0] if el.transformations else None
        if first is not None and first.type == TransformationType.ROTATION and abs(first.angle) < MIN_ROTATION_ANGLE:
            del el.transformations[0]
            el.invalidate_centers(0)

    def smooth_all(self) -> None:
        for i in range(len(self.element.points)):
            self._smooth(i)
        self.element.points_changed()

    def _smooth(self, i: int) -> None:
        """Promedio móvil de un paso: el punto i-1 pasa a ser el medio entre i-2 e i."""
        if i < 2:
            return
        pts = self.element.points
        pts[i - 1] = ((pts[i - 2][0] + pts[i][0]) / 2, (pts[i - 2][1] + pts[i][1]) / 2)

    def _set_live_rotation(self, angle: float) -> None:
        el = self.element
        rotation = Transformation(type=TransformationType.ROTATION, angle=angle)
        if el.transformations:
            el.transformations[0] = rotation
        else:
            el.transformations.append(rotation)
        el.invalidate_centers(0)


class TransformBuilder:
    """Convierte un drag en actualizaciones del registro de transformación en curso."""

    def __init__(self, element: DrawingElement) -> None:
        self.element = element
        self.index: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.index is not None

    def begin(self, kind: TransformationType, x: float, y: float) -> int:
        if self.index is not None:
            raise TrazoGestureError("Ya hay una transformación en curso", index=self.index)
        self.index = start_transformation(self.element, kind, x, y)
        return self.index

    def update(self, x: float, y: float) -> None:
        update_transformation(self.element, self._require(), x, y)

    def end(self) -> bool:
        index = self._require()
        self.index = None
        return stop_transformation(self.element, index)

    def cancel(self) -> None:
        index = self._require()
        self.index = None
        cancel_transformation(self.element, index)

    def _require(self) -> int:
        if self.index is None:
            raise TrazoGestureError("No hay transformación en curso")
        return self.index
