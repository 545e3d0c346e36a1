# File: trazo/svg/exporter.py
# Project: Trazo (TRZ)
# Version: 0.4.2
# Status: stable
# Date: 2026-10-18
# Purpose: Elemento -> fragmento SVG (misma geometría que el render Qt).
# Notes:
#   - El atributo transform sale de trazo.geom.affine.transform_steps (igual que el QTransform).
#   - Coordenadas redondeadas a 2 decimales. No escribe archivos.
from __future__ import annotations

from typing import Iterable
from xml.etree.ElementTree import Element, tostring

from trazo.core.models import (
    FONT_STRETCH_NAMES,
    FONT_STRETCH_NORMAL,
    FONT_STYLE_NAMES,
    FONT_VARIANT_NAMES,
    DrawingElement,
    FillRule,
    Shape,
    TransformationType,
)
from trazo.core.settings import RenderSettings
from trazo.geom.affine import svg_number as _n, svg_transform, transform_steps
from trazo.geom.utils import distance
from trazo.svg.qpath_render import ensure_text_width, is_renderable
from trazo.utils.log import get_logger

log = get_logger(__name__)

_FILL_RULE_NAMES = {FillRule.NONZERO: "nonzero", FillRule.EVENODD: "evenodd"}
_LINE_CAP_NAMES = {0: "butt", 1: "round", 2: "square"}
_LINE_JOIN_NAMES = {0: "miter", 1: "round", 2: "bevel"}
_SCALING = (TransformationType.SCALE_PRESERVE, TransformationType.STRETCH)


def _style_attrs(element: DrawingElement, color: str) -> dict[str, str]:
    fill = element.fill and not element.is_straight_line
    attrs: dict[str, str] = {}
    if fill:
        attrs["fill"] = color
        attrs["fill-rule"] = _FILL_RULE_NAMES.get(element.fill_rule, "nonzero")
    else:
        attrs["fill"] = "none"

    line = element.line
    if line.line_width:
        attrs["stroke"] = color
        attrs["stroke-width"] = _n(line.line_width)
        attrs["stroke-linecap"] = _LINE_CAP_NAMES.get(int(line.line_cap), "round")
        if not element.is_straight_line:
            # Una recta de 2 puntos no tiene uniones.
            attrs["stroke-linejoin"] = _LINE_JOIN_NAMES.get(int(line.line_join), "round")
        if element.dash.is_effective:
            attrs["stroke-dasharray"] = f"{_n(element.dash.array[0])} {_n(element.dash.array[1])}"
            attrs["stroke-dashoffset"] = _n(element.dash.offset)
        if any(t.type in _SCALING for t in element.transformations):
            # El render Qt traza en espacio de dispositivo.
            attrs["vector-effect"] = "non-scaling-stroke"
    else:
        attrs["stroke"] = "none"
    return attrs


def _text_attrs(element: DrawingElement, color: str) -> dict[str, str]:
    attrs = {
        "fill": color,
        "stroke": "transparent",
        "stroke-opacity": "0",
        "font-size": _n(element.font_size),
    }
    font = element.text.font if element.text else None
    if font is None:
        return attrs
    if font.family:
        attrs["font-family"] = font.family
    if font.weight and font.weight != 400:
        attrs["font-weight"] = str(int(font.weight))
    if font.style in FONT_STYLE_NAMES and font.style != 0:
        attrs["font-style"] = FONT_STYLE_NAMES[font.style].lower()
    if font.stretch in FONT_STRETCH_NAMES and font.stretch != FONT_STRETCH_NORMAL:
        attrs["font-stretch"] = FONT_STRETCH_NAMES[font.stretch].lower()
    if font.variant in FONT_VARIANT_NAMES and font.variant != 0:
        attrs["font-variant"] = FONT_VARIANT_NAMES[font.variant].lower()
    return attrs


def _path_d(points, *, curve: bool, close: bool) -> str:
    (x0, y0) = points[0]
    d = f"M{_n(x0)} {_n(y0)}"
    if curve:
        c1, c2, end = points[1:4]
        d += f" C {_n(c1[0])} {_n(c1[1])}, {_n(c2[0])} {_n(c2[1])}, {_n(end[0])} {_n(end[1])}"
    else:
        for x, y in points[1:]:
            d += f" L {_n(x)} {_n(y)}"
    return d + ("z" if close else "")


def _points_attr(points) -> str:
    return " ".join(f"{_n(x)},{_n(y)}" for x, y in points)


def build_svg_element(element: DrawingElement, bg_color: str | None = None) -> Element | None:
    """Elemento XML equivalente al path Qt, o None si la figura aún no es renderizable."""
    if not is_renderable(element):
        return None

    bg = bg_color or RenderSettings.from_env().svg_background
    color = bg if element.eraser else element.color
    pts = [(round(float(x), 2), round(float(y), 2)) for x, y in element.points]
    shape = element.shape
    fill = element.fill and not element.is_straight_line

    if shape == Shape.TEXT:
        attrs = _text_attrs(element, color)
    else:
        attrs = _style_attrs(element, color)

    if shape == Shape.LINE and len(pts) == 4:
        el = Element("path", {**attrs, "d": _path_d(pts, curve=True, close=fill)})
    elif shape == Shape.LINE and len(pts) == 3:
        el = Element("path", {**attrs, "d": _path_d([pts[0], *pts], curve=True, close=fill)})
    elif shape == Shape.LINE:
        (x1, y1), (x2, y2) = pts[0], pts[1]
        el = Element("line", {**attrs, "x1": _n(x1), "y1": _n(y1), "x2": _n(x2), "y2": _n(y2)})
    elif shape == Shape.FREEHAND:
        el = Element("path", {**attrs, "d": _path_d(pts, curve=False, close=fill)})
    elif shape == Shape.ELLIPSE and len(pts) == 3:
        ry = distance(pts[0], pts[1])
        rx = distance(pts[0], pts[2])
        el = Element("ellipse", {**attrs, "cx": _n(pts[0][0]), "cy": _n(pts[0][1]), "rx": _n(rx), "ry": _n(ry)})
    elif shape == Shape.ELLIPSE:
        r = distance(pts[0], pts[1])
        el = Element("circle", {**attrs, "cx": _n(pts[0][0]), "cy": _n(pts[0][1]), "r": _n(r)})
    elif shape == Shape.RECTANGLE:
        (x0, y0), (x1, y1) = pts
        el = Element("rect", {
            **attrs,
            "x": _n(min(x0, x1)),
            "y": _n(min(y0, y1)),
            "width": _n(abs(x1 - x0)),
            "height": _n(abs(y1 - y0)),
        })
    elif shape in (Shape.POLYGON, Shape.POLYLINE):
        tag = "polygon" if shape == Shape.POLYGON else "polyline"
        el = Element(tag, {**attrs, "points": _points_attr(pts)})
    elif shape == Shape.TEXT:
        # El ancho lo mide el render Qt; se re-mide si quedó vencido.
        ensure_text_width(element)
        right = bool(element.text and element.text.right_aligned)
        x = pts[1][0] - (element.text_width if right else 0.0)
        y = max(pts[0][1], pts[1][1])
        el = Element("text", {**attrs, "x": _n(x), "y": _n(y)})
        el.text = element.text.text if element.text else ""
    else:  # pragma: no cover (Shape es cerrado)
        return None

    tr = svg_transform(transform_steps(element))
    if tr:
        el.set("transform", tr)
    return el


def build_svg(element: DrawingElement, bg_color: str | None = None) -> str:
    """Fragmento SVG del elemento ("" si todavía no es renderizable)."""
    el = build_svg_element(element, bg_color)
    if el is None:
        return ""
    return tostring(el, encoding="unicode")


def build_svg_document(
    elements: Iterable[DrawingElement],
    width: float,
    height: float,
    bg_color: str | None = None,
) -> str:
    """Documento SVG completo (fondo + un fragmento por elemento)."""
    bg = bg_color or RenderSettings.from_env().svg_background
    rows = [
        f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" width="{_n(width)}" height="{_n(height)}" '
        f'viewBox="0 0 {_n(width)} {_n(height)}">',
        f'  <rect width="100%" height="100%" fill="{bg}"/>',
    ]
    skipped = 0
    for element in elements:
        frag = build_svg(element, bg)
        if frag:
            rows.append("  " + frag)
        else:
            skipped += 1
    if skipped:
        log.debug("Export SVG: %d elementos no renderizables omitidos", skipped)
    rows.append("</svg>")
    return "\n".join(rows)
