# File: trazo/geom/utils.py
# Project: Trazo (TRZ)
# Version: 0.4.0
# Status: stable
# Date: 2026-10-18
# Purpose: Utilidades geométricas puras (sin estado, sin Qt).
# Notes: Nunca lanzan por divisiones degeneradas; caen a valores por defecto.
from __future__ import annotations

import math
from typing import Sequence, Tuple

Point = Tuple[float, float]


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def nearness(a: Sequence[float], b: Sequence[float], threshold: float) -> bool:
    """True si la distancia euclídea es estrictamente menor que `threshold`."""
    return distance(a, b) < threshold


def naive_center(points: Sequence[Sequence[float]]) -> Point:
    """Media de los vértices (ok para polígonos regulares)."""
    n = len(points)
    if not n:
        return (0.0, 0.0)
    sx = sum(float(p[0]) for p in points)
    sy = sum(float(p[1]) for p in points)
    return (sx / n, sy / n)


def centroid(points: Sequence[Sequence[float]]) -> Point:
    """Centroide de polígono (fórmula del cordón de zapato).

    Si el área con signo es 0 (polígono degenerado o que se cancela), usa naive_center.
    """
    n = len(points)
    s_a = s_x = s_y = 0.0
    for i in range(n):
        x0, y0 = points[i][0], points[i][1]
        x1, y1 = points[(i + 1) % n][0], points[(i + 1) % n][1]
        a = x0 * y1 - x1 * y0
        s_a += a
        s_x += (x0 + x1) * a
        s_y += (y0 + y1) * a

    if s_a == 0:
        return naive_center(points)
    return (s_x / (3 * s_a), s_y / (3 * s_a))


def curve_center(p0: Sequence[float], p1: Sequence[float], p2: Sequence[float], p3: Sequence[float]) -> Point:
    """Punto notable de una Bézier cúbica P(t) = (1-t)³P0 + 3t(1-t)²P1 + 3t²(1-t)P2 + t³P3.

    - p0 == p1 (línea de 3 puntos con el ancla duplicada): t = 2/3.
    - resto: t = 1/2.

    Solo es el "centro" real cuando la curva es simétrica respecto de ese parámetro;
    en otro caso es una aproximación visual, suficiente como pivote de rotación.
    """
    if p0[0] == p1[0] and p0[1] == p1[1]:
        return (
            (p1[0] + 6 * p1[0] + 12 * p2[0] + 8 * p3[0]) / 27,
            (p1[1] + 6 * p1[1] + 12 * p2[1] + 8 * p3[1]) / 27,
        )
    return (
        (p0[0] + 3 * p1[0] + 3 * p2[0] + p3[0]) / 8,
        (p0[1] + 3 * p1[1] + 3 * p2[1] + p3[1]) / 8,
    )


def signed_angle(center: Sequence[float], ref: Sequence[float], target: Sequence[float]) -> float:
    """Ángulo (rad) que lleva `ref` sobre la semirrecta center→target, con signo.

    cos(AOB) = (OA·OB) / (|OA|·|OB|), recortado a [-1, 1] antes de acos (con A == B el
    cálculo puede dar 1.00000001). Vectores de longitud 0 devuelven 0.
    """
    x_o, y_o = center[0], center[1]
    x_a, y_a = ref[0], ref[1]
    x_b, y_b = target[0], target[1]

    norm = math.hypot(x_a - x_o, y_a - y_o) * math.hypot(x_b - x_o, y_b - y_o)
    if norm == 0:
        return 0.0

    cos = ((x_a - x_o) * (x_b - x_o) + (y_a - y_o) * (y_b - y_o)) / norm
    cos = min(max(-1.0, cos), 1.0)
    angle = math.acos(cos)

    # Signo según el lado de la recta OA en el que cae B.
    if x_a == x_o:
        if x_b > x_o:
            angle = -angle
    else:
        a = (y_a - y_o) / (x_a - x_o)
        b = y_a - a * x_a
        if y_b < a * x_b + b:
            angle = -angle
        if x_a < x_o:
            angle = -angle

    return angle
