# File: trazo/svg/qpath_render.py
# Project: Trazo (TRZ)
# Version: 0.4.2
# Status: stable
# Date: 2026-10-18
# Purpose: Elemento -> QPainterPath (render en pantalla + hit-test).
# Notes:
#   - El path se construye en coordenadas crudas y se mapea con el QTransform del elemento.
#     Se pinta en espacio de dispositivo: el grosor de línea NO escala con las transformaciones.
#   - Figuras todavía no renderizables (gesto en curso) devuelven None; nunca lanzan.
#   - Texto: necesita QGuiApplication (QFont/QFontMetricsF). El ancho medido se cachea en el
#     elemento y lo reutiliza el export SVG.
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import (
    QBrush,
    QColor,
    QFont,
    QFontMetricsF,
    QPainter,
    QPainterPath,
    QPainterPathStroker,
    QPen,
    QTransform,
)

from trazo.core.constants import DUMMY_STROKE_DASH
from trazo.core.models import DrawingElement, FillRule, LineCap, LineJoin, Shape, TransformationType
from trazo.core.settings import RenderSettings
from trazo.geom.affine import element_transform
from trazo.geom.utils import distance
from trazo.utils.log import get_logger

log = get_logger(__name__)

_QT_CAPS = {
    LineCap.BUTT: Qt.PenCapStyle.FlatCap,
    LineCap.ROUND: Qt.PenCapStyle.RoundCap,
    LineCap.SQUARE: Qt.PenCapStyle.SquareCap,
}
_QT_JOINS = {
    LineJoin.MITER: Qt.PenJoinStyle.MiterJoin,
    LineJoin.ROUND: Qt.PenJoinStyle.RoundJoin,
    LineJoin.BEVEL: Qt.PenJoinStyle.BevelJoin,
}
_QT_FONT_STYLES = {
    0: QFont.Style.StyleNormal,
    1: QFont.Style.StyleOblique,
    2: QFont.Style.StyleItalic,
}
# Pango stretch (0..8) -> porcentaje Qt.
_QT_FONT_STRETCH = {0: 50, 1: 62, 2: 75, 3: 87, 4: 100, 5: 112, 6: 125, 7: 150, 8: 200}


# ----------------------------
# Texto
# ----------------------------
def _set_font_weight(font: QFont, value: int) -> None:
    font.setWeight(QFont.Weight(int(value)))


def _set_font_style(font: QFont, value: int) -> None:
    font.setStyle(_QT_FONT_STYLES[int(value)])


def _set_font_stretch(font: QFont, value: int) -> None:
    font.setStretch(_QT_FONT_STRETCH[int(value)])


def _set_font_variant(font: QFont, value: int) -> None:
    caps = {0: QFont.Capitalization.MixedCase, 1: QFont.Capitalization.SmallCaps}[int(value)]
    font.setCapitalization(caps)


_FONT_SETTERS = (
    ("family", lambda f, v: f.setFamily(str(v))),
    ("weight", _set_font_weight),
    ("style", _set_font_style),
    ("stretch", _set_font_stretch),
    ("variant", _set_font_variant),
)


def text_font(element: DrawingElement) -> QFont:
    """QFont del elemento. Atributos que Qt no acepta se ignoran de a uno.

    Qt solo acepta tamaños en px enteros: la fuente se arma al entero más cercano y
    text_scale() da el factor hasta el alto exacto (el que escribe el export SVG).
    """
    font = QFont()
    font.setPixelSize(max(1, int(round(element.font_size))))
    font.setHintingPreference(QFont.HintingPreference.PreferNoHinting)
    desc = element.text.font if element.text else None
    if desc is None:
        return font
    for attr, setter in _FONT_SETTERS:
        value = getattr(desc, attr)
        if value is None:
            continue
        try:
            setter(font, value)
        except Exception as e:
            log.debug("Atributo de fuente ignorado %s=%r: %s", attr, value, e)
    return font


def text_scale(element: DrawingElement, font: QFont) -> float:
    """Factor entre el alto del elemento y el px entero de `font`."""
    return element.font_size / font.pixelSize() if font.pixelSize() > 0 else 1.0


def ensure_text_width(element: DrawingElement) -> float:
    """Mide el ancho (px) del texto si el valor cacheado está vencido."""
    if element.shape != Shape.TEXT or len(element.points) < 2:
        return element.text_width
    if element.text_width_is_stale():
        font = text_font(element)
        advance = QFontMetricsF(font).horizontalAdvance(element.text.text if element.text else "")
        element.set_text_width(advance * text_scale(element, font))
    return element.text_width


def _text_rect(element: DrawingElement) -> QRectF:
    origin = element.text_origin()
    h = element.font_size
    return QRectF(origin.x(), origin.y(), element.text_width, -h).normalized()


def _text_caret(element: DrawingElement, font: QFont) -> QRectF:
    origin = element.text_origin()
    attrs = element.text
    prefix = attrs.text[: attrs.cursor_index] if attrs else ""
    width = QFontMetricsF(font).horizontalAdvance(prefix) * text_scale(element, font)
    h = element.font_size
    return QRectF(origin.x() + width, origin.y(), h / 25, -h).normalized()


# ----------------------------
# Path
# ----------------------------
def is_renderable(element: DrawingElement) -> bool:
    n = len(element.points)
    shape = element.shape
    if shape == Shape.FREEHAND:
        return n >= 1
    if shape in (Shape.RECTANGLE, Shape.TEXT):
        return n == 2
    if shape == Shape.ELLIPSE:
        return n in (2, 3) and distance(element.points[0], element.points[1]) > 0
    if shape == Shape.LINE:
        return 2 <= n <= 4
    return n >= 2  # Polygon / Polyline


def build_qpath(element: DrawingElement) -> Optional[QPainterPath]:
    """Path crudo (sin transformaciones) de la figura, o None si aún no es renderizable."""
    if not is_renderable(element):
        return None

    pts = element.points
    shape = element.shape
    path = QPainterPath()
    path.setFillRule(Qt.FillRule.OddEvenFill if element.fill_rule == FillRule.EVENODD else Qt.FillRule.WindingFill)

    if shape == Shape.LINE and len(pts) == 3:
        path.moveTo(*pts[0])
        path.cubicTo(QPointF(*pts[0]), QPointF(*pts[1]), QPointF(*pts[2]))

    elif shape == Shape.LINE and len(pts) == 4:
        path.moveTo(*pts[0])
        path.cubicTo(QPointF(*pts[1]), QPointF(*pts[2]), QPointF(*pts[3]))

    elif shape in (Shape.FREEHAND, Shape.LINE, Shape.POLYGON, Shape.POLYLINE):
        path.moveTo(*pts[0])
        for p in pts[1:]:
            path.lineTo(*p)
        if shape == Shape.POLYGON:
            path.closeSubpath()

    elif shape == Shape.ELLIPSE:
        radius = distance(pts[0], pts[1])
        # El 3er punto da el radio horizontal (ratio respecto del círculo).
        rx = distance(pts[0], pts[2]) if len(pts) == 3 else radius
        path.addEllipse(QPointF(*pts[0]), rx, radius)

    elif shape == Shape.RECTANGLE:
        (x0, y0), (x1, y1) = pts
        path.addRect(QRectF(x0, y0, x1 - x0, y1 - y0).normalized())

    elif shape == Shape.TEXT:
        ensure_text_width(element)
        font = text_font(element)
        glyphs = QPainterPath()
        glyphs.addText(QPointF(0, 0), font, element.text.text if element.text else "")
        origin = element.text_origin()
        k = text_scale(element, font)
        m = QTransform()
        m.translate(origin.x(), origin.y())
        m.scale(k, k)
        path.addPath(m.map(glyphs))

    return path


def element_path(element: DrawingElement) -> Optional[QPainterPath]:
    """Path final en coordenadas de dispositivo (con el stack de transformaciones aplicado)."""
    path = build_qpath(element)
    if path is None:
        return None
    mapped = element_transform(element).map(path)
    mapped.setFillRule(path.fillRule())
    return mapped


# ----------------------------
# Render
# ----------------------------
def _dummy_pen(color: QColor, settings: RenderSettings) -> QPen:
    w = settings.dummy_stroke_width
    pen = QPen(color, w)
    pen.setCapStyle(Qt.PenCapStyle.FlatCap)
    pen.setJoinStyle(Qt.PenJoinStyle.MiterJoin)
    pen.setDashPattern([DUMMY_STROKE_DASH[0] / w, DUMMY_STROKE_DASH[1] / w])
    return pen


def element_pen(element: DrawingElement, color: QColor) -> QPen:
    w = float(element.line.line_width)
    pen = QPen(color, w)
    pen.setCapStyle(_QT_CAPS.get(element.line.line_cap, Qt.PenCapStyle.RoundCap))
    pen.setJoinStyle(_QT_JOINS.get(element.line.line_join, Qt.PenJoinStyle.RoundJoin))
    if element.dash.is_effective:
        # Qt mide el guionado en anchos de pluma; el registro lo guarda en px.
        unit = w if w > 0 else 1.0
        pen.setDashPattern([element.dash.array[0] / unit, element.dash.array[1] / unit])
        pen.setDashOffset(element.dash.offset / unit)
    return pen


def _draw_symmetry_element(painter: QPainter, element: DrawingElement, color: QColor, settings: RenderSettings) -> None:
    t = element.last_transformation
    if t is None or t.start is None or t.end is None:
        return
    painter.setPen(_dummy_pen(color, settings))
    painter.setBrush(Qt.BrushStyle.NoBrush)
    if t.type == TransformationType.REFLECTION:
        painter.drawLine(QPointF(*t.start), QPointF(*t.end))
    elif t.type == TransformationType.INVERSION:
        r = settings.inversion_circle_radius
        painter.drawEllipse(QPointF(*t.end), r, r)


def render_element(
    painter: QPainter,
    element: DrawingElement,
    *,
    show_text_cursor: bool = False,
    show_text_rectangle: bool = False,
    dummy_stroke: bool = False,
    settings: RenderSettings | None = None,
) -> bool:
    """Pinta el elemento. Devuelve False si todavía no es renderizable."""
    settings = settings or RenderSettings.from_env()
    path = element_path(element)
    if path is None:
        return False

    color = QColor(element.color)
    if not color.isValid():
        color = QColor(Qt.GlobalColor.black)

    painter.save()
    try:
        painter.resetTransform()
        if element.show_symmetry_element:
            _draw_symmetry_element(painter, element, color, settings)

        painter.setCompositionMode(
            QPainter.CompositionMode.CompositionMode_Clear if element.eraser
            else QPainter.CompositionMode.CompositionMode_SourceOver
        )
        pen = _dummy_pen(color, settings) if dummy_stroke else element_pen(element, color)

        if element.shape == Shape.TEXT:
            painter.fillPath(path, QBrush(color))
            _render_text_affordances(painter, element, color, settings, show_text_cursor, show_text_rectangle)
        else:
            if element.fill and not element.is_straight_line and not dummy_stroke:
                painter.fillPath(path, QBrush(color))
            if dummy_stroke or element.line.line_width > 0:
                painter.strokePath(path, pen)
    finally:
        painter.restore()
    return True


def _render_text_affordances(
    painter: QPainter,
    element: DrawingElement,
    color: QColor,
    settings: RenderSettings,
    show_text_cursor: bool,
    show_text_rectangle: bool,
) -> None:
    m = element_transform(element)
    if show_text_cursor:
        caret = QPainterPath()
        caret.addRect(_text_caret(element, text_font(element)))
        painter.fillPath(m.map(caret), QBrush(color))
    if show_text_rectangle:
        rect = QPainterPath()
        rect.addRect(_text_rect(element))
        painter.strokePath(m.map(rect), _dummy_pen(color, settings))


# ----------------------------
# Hit-test
# ----------------------------
def contains_point(
    element: DrawingElement,
    x: float,
    y: float,
    *,
    text_rectangle: bool = False,
    settings: RenderSettings | None = None,
) -> bool:
    """True si (x, y) está sobre/cerca del trazo, o dentro si el elemento está relleno.

    Texto: contención del relleno de los glifos (y del rectángulo si `text_rectangle`).
    """
    path = element_path(element)
    if path is None:
        return False
    pt = QPointF(x, y)
    if element.shape == Shape.TEXT:
        if path.contains(pt):
            return True
        if not text_rectangle:
            return False
        # Aparte: con WindingFill el rectángulo y los glifos podrían anularse.
        rect = QPainterPath()
        rect.addRect(_text_rect(element))
        return element_transform(element).map(rect).contains(pt)

    settings = settings or RenderSettings.from_env()
    stroker = QPainterPathStroker()
    stroker.setWidth(max(float(element.line.line_width), settings.hit_test_min_width))
    stroker.setCapStyle(_QT_CAPS.get(element.line.line_cap, Qt.PenCapStyle.RoundCap))
    stroker.setJoinStyle(_QT_JOINS.get(element.line.line_join, Qt.PenJoinStyle.RoundJoin))
    if stroker.createStroke(path).contains(pt):
        return True
    return bool(element.fill) and path.contains(pt)
