# File: trazo/core/transformations.py
# Project: Trazo (TRZ)
# Version: 0.4.1
# Status: stable
# Date: 2026-10-18
# Purpose: Stack de transformaciones: begin / update / end de un registro durante un gesto.
# Notes:
#   - update() recalcula todo desde (x, y) y el estado inicial del registro: es idempotente.
#   - end() descarta (pop) las transformaciones casi nulas para no ensuciar el stack ni el undo.
from __future__ import annotations

import math

from trazo.core.constants import (
    MIN_REFLECTION_LINE_LENGTH,
    MIN_ROTATION_ANGLE,
    MIN_TRANSLATION_DISTANCE,
    REFLECTION_TOLERANCE,
    STRETCH_TOLERANCE,
)
from trazo.core.models import DrawingElement, Transformation, TransformationType
from trazo.geom.utils import distance, nearness, signed_angle
from trazo.utils.errors import TrazoGestureError
from trazo.utils.log import get_logger

log = get_logger(__name__)


def _inversion_angle(x: float, y: float) -> float:
    return math.pi + math.atan(y / (x or 1))


def start_transformation(element: DrawingElement, kind: TransformationType, x: float, y: float) -> int:
    """Apila un registro neutro de tipo `kind` y devuelve su índice."""
    kind = TransformationType(kind)
    t = Transformation(type=kind, start=(float(x), float(y)))

    if kind in (TransformationType.REFLECTION, TransformationType.INVERSION):
        t.end = (float(x), float(y))
        element.show_symmetry_element = True
    if kind == TransformationType.INVERSION:
        # Un click ya define la inversión completa: el centro es el punto inicial.
        t.scale_x, t.scale_y = -1.0, -1.0
        t.slide_x, t.slide_y = float(x), float(y)
        t.angle = _inversion_angle(x, y)

    element.transformations.append(t)
    return len(element.transformations) - 1


def _active(element: DrawingElement, index: int) -> Transformation:
    if not (0 <= index < len(element.transformations)):
        raise TrazoGestureError(f"No hay transformación en el índice {index}", index=index)
    t = element.transformations[index]
    if not t.in_progress:
        raise TrazoGestureError(f"La transformación {index} no está en curso", index=index)
    return t


def _scale_from(center, start, x: float, y: float) -> float:
    ref = distance(center, start)
    if ref == 0:
        return 1.0
    return distance(center, (x, y)) / ref or 1.0


def update_transformation(element: DrawingElement, index: int, x: float, y: float) -> None:
    """Recalcula los parámetros del registro `index` desde la posición actual del puntero."""
    t = _active(element, index)
    start = t.start
    sx, sy = start

    if t.type == TransformationType.TRANSLATION:
        t.slide_x, t.slide_y = x - sx, y - sy

    elif t.type == TransformationType.ROTATION:
        center = element.transformed_center(index)
        t.angle = signed_angle(center, start, (x, y))

    elif t.type == TransformationType.SCALE_PRESERVE:
        center = element.transformed_center(index)
        scale = _scale_from(center, start, x, y)
        t.scale_x, t.scale_y = scale, scale

    elif t.type == TransformationType.STRETCH:
        center = element.transformed_center(index)
        horizontal_ref = (center[0] + 1, center[1])
        start_angle = signed_angle(center, horizontal_ref, start)
        vertical = abs(math.sin(start_angle)) >= math.sin(math.pi / 2 - STRETCH_TOLERANCE)
        horizontal = abs(math.cos(start_angle)) >= math.cos(STRETCH_TOLERANCE)
        scale = _scale_from(center, start, x, y)
        t.scale_x = 1.0 if vertical else scale
        t.scale_y = scale if vertical else 1.0
        # En diagonal se estira sobre el eje del arrastre.
        t.angle = 0.0 if (vertical or horizontal) else signed_angle(center, horizontal_ref, (x, y))

    elif t.type == TransformationType.REFLECTION:
        t.end = (float(x), float(y))
        if nearness(start, (x, y), MIN_REFLECTION_LINE_LENGTH):
            # Nada: evita saltos (sin espejo al principio, bloqueado después).
            pass
        elif abs(y - sy) <= REFLECTION_TOLERANCE and abs(x - sx) > REFLECTION_TOLERANCE:
            t.scale_x, t.scale_y = 1.0, -1.0
            t.slide_x, t.slide_y = 0.0, sy
            t.angle = math.pi
        elif abs(x - sx) <= REFLECTION_TOLERANCE and abs(y - sy) > REFLECTION_TOLERANCE:
            t.scale_x, t.scale_y = -1.0, 1.0
            t.slide_x, t.slide_y = sx, 0.0
            t.angle = math.pi
        elif x != sx:
            tan = (y - sy) / (x - sx)
            t.scale_x, t.scale_y = 1.0, -1.0
            t.slide_x, t.slide_y = 0.0, sy - sx * tan
            t.angle = math.pi + math.atan(tan)
        elif y != sy:
            tan = (x - sx) / (y - sy)
            t.scale_x, t.scale_y = -1.0, 1.0
            t.slide_x, t.slide_y = sx - sy * tan, 0.0
            t.angle = math.pi - math.atan(tan)

    elif t.type == TransformationType.INVERSION:
        t.end = (float(x), float(y))
        t.scale_x, t.scale_y = -1.0, -1.0
        t.slide_x, t.slide_y = float(x), float(y)
        t.angle = _inversion_angle(x, y)

    # Los centros de los registros posteriores dependen de este.
    element.invalidate_centers(index + 1)


def is_negligible(t: Transformation) -> bool:
    """Política de descarte al terminar el gesto."""
    if t.type == TransformationType.REFLECTION:
        end = t.end if t.end is not None else t.start
        return t.start is not None and nearness(t.start, end, MIN_REFLECTION_LINE_LENGTH)
    if t.type == TransformationType.TRANSLATION:
        return math.hypot(t.slide_x, t.slide_y) < MIN_TRANSLATION_DISTANCE
    if t.type == TransformationType.ROTATION:
        return abs(t.angle) < MIN_ROTATION_ANGLE
    return False


def stop_transformation(element: DrawingElement, index: int) -> bool:
    """Confirma el registro `index`. Devuelve False si se descartó por ser casi nulo."""
    t = _active(element, index)

    if t.type in (TransformationType.REFLECTION, TransformationType.INVERSION):
        element.show_symmetry_element = False

    if is_negligible(t):
        del element.transformations[index]
        element.invalidate_centers(index)
        log.debug("Transformación descartada (casi nula): %s", t.type.name)
        return False

    t.start = None
    t.end = None
    return True


def cancel_transformation(element: DrawingElement, index: int) -> None:
    """Aborta el gesto: saca el registro especulativo sin tocar el resto del stack."""
    t = _active(element, index)
    if t.type in (TransformationType.REFLECTION, TransformationType.INVERSION):
        element.show_symmetry_element = False
    del element.transformations[index]
    element.invalidate_centers(index)
