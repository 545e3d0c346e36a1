# File: trazo/geom/affine.py
# Project: Trazo (TRZ)
# Version: 0.4.0
# Status: stable
# Date: 2026-10-18
# Purpose: Secuencia única de pasos afines para el path Qt y para el atributo transform SVG.
# Notes:
#   - QTransform.translate/rotate/scale componen igual que SVG: el primer paso emitido es el
#     más externo. Por eso ambos emisores recorren la misma lista y quedan idénticos.
#   - Se recorre el stack del más nuevo al más viejo (el registro más viejo actúa primero
#     sobre la geometría cruda).
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from PySide6.QtGui import QTransform

from trazo.core.constants import RADIAN
from trazo.core.models import DrawingElement, Transformation, TransformationType


@dataclass(frozen=True)
class Step:
    op: str  # "translate" | "rotate" | "scale"
    a: float
    b: float = 0.0


def _pivot_steps(cx: float, cy: float, t: Transformation) -> Iterator[Step]:
    yield Step("translate", cx, cy)
    yield Step("rotate", t.angle)
    yield Step("scale", t.scale_x, t.scale_y)
    yield Step("rotate", -t.angle)
    yield Step("translate", -cx, -cy)


def transform_steps(element: DrawingElement) -> list[Step]:
    """Pasos afines (ángulos en radianes) que llevan la geometría cruda a su posición final."""
    steps: list[Step] = []
    for index in range(len(element.transformations) - 1, -1, -1):
        t = element.transformations[index]
        if t.type == TransformationType.TRANSLATION:
            steps.append(Step("translate", t.slide_x, t.slide_y))
        elif t.type == TransformationType.ROTATION:
            cx, cy = element.transformed_center(index)
            steps += [Step("translate", cx, cy), Step("rotate", t.angle), Step("translate", -cx, -cy)]
        elif t.type in (TransformationType.SCALE_PRESERVE, TransformationType.STRETCH):
            cx, cy = element.transformed_center(index)
            steps += _pivot_steps(cx, cy, t)
        elif t.type in (TransformationType.REFLECTION, TransformationType.INVERSION):
            steps += _pivot_steps(t.slide_x, t.slide_y, t)
    return steps


def apply_steps(steps: Sequence[Step], m: QTransform | None = None) -> QTransform:
    m = QTransform() if m is None else m
    for s in steps:
        if s.op == "translate":
            m.translate(s.a, s.b)
        elif s.op == "rotate":
            m.rotateRadians(s.a)
        elif s.op == "scale":
            m.scale(s.a, s.b)
    return m


def element_transform(element: DrawingElement) -> QTransform:
    return apply_steps(transform_steps(element))


def center_transform(transformations: Sequence[Transformation]) -> QTransform:
    """Matriz que desplaza el centro de la figura a través de `transformations`.

    Rotación y escala pivotan sobre el centro (no lo mueven); traslación, reflexión e
    inversión sí lo reubican.
    """
    steps: list[Step] = []
    for t in reversed(transformations):
        if t.type == TransformationType.TRANSLATION:
            steps.append(Step("translate", t.slide_x, t.slide_y))
        elif t.type in (TransformationType.REFLECTION, TransformationType.INVERSION):
            steps += _pivot_steps(t.slide_x, t.slide_y, t)
    return apply_steps(steps)


def svg_number(v: float, digits: int = 2) -> str:
    """Número SVG redondeado, sin ceros de cola ni '-0'."""
    s = f"{float(v):.{digits}f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


def svg_transform(steps: Sequence[Step]) -> str:
    """Atributo transform SVG (rotate en grados). Vacío si no hay pasos."""
    parts: list[str] = []
    for s in steps:
        if s.op == "translate":
            parts.append(f"translate({svg_number(s.a, 6)},{svg_number(s.b, 6)})")
        elif s.op == "rotate":
            parts.append(f"rotate({svg_number(s.a * RADIAN, 6)})")
        elif s.op == "scale":
            parts.append(f"scale({svg_number(s.a, 6)},{svg_number(s.b, 6)})")
    return " ".join(parts)
