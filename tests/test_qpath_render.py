""" Render Qt + hit-test sobre el path de cada figura. """

import math

import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QFont, QFontMetricsF, QImage, QPainter

from trazo.core.models import (
    DashStyle,
    FillRule,
    FontDescriptor,
    Shape,
    TextAttributes,
    Transformation,
    TransformationType,
)
from trazo.core.settings import RenderSettings
from trazo.svg.qpath_render import (
    build_qpath,
    contains_point,
    element_pen,
    ensure_text_width,
    is_renderable,
    render_element,
    text_font,
)

from conftest import make_element


def _image(w=80, h=80, fill=Qt.GlobalColor.transparent):
    img = QImage(w, h, QImage.Format.Format_ARGB32)
    img.fill(QColor(fill))
    return img


def _paint(img, element, **kwargs):
    p = QPainter(img)
    try:
        return render_element(p, element, **kwargs)
    finally:
        p.end()


@pytest.mark.parametrize("x, y", [(0, 0), (10, 0), (0, 10), (10, 10)])
def test_rectangle_contains_its_corners(x, y):
    el = make_element(Shape.RECTANGLE, [(0, 0), (10, 10)])
    assert contains_point(el, x, y)


def test_circle_hit_test():
    el = make_element(Shape.ELLIPSE, [(50, 50), (80, 50)])
    assert contains_point(el, 80, 50)
    assert contains_point(el, 50, 20)
    # El centro queda lejos del trazo y la figura no está rellena.
    assert not contains_point(el, 50, 50)
    el.fill = True
    assert contains_point(el, 50, 50)


def test_straight_line_contains_midpoint():
    el = make_element(Shape.LINE, [(0, 0), (100, 40)])
    assert contains_point(el, 50, 20)
    assert not contains_point(el, 50, 80)


def test_filled_polygon_contains_centroid():
    el = make_element(Shape.POLYGON, [(0, 0), (200, 0), (200, 100), (100, 100), (100, 300), (0, 300)], fill=True)
    cx, cy = el.original_center()
    assert contains_point(el, cx, cy)


def test_evenodd_fill_leaves_hole():
    # Pentagrama: con evenodd el pentágono central queda afuera.
    pts = [
        (100 + 90 * math.cos(math.radians(-90 + 144 * k)), 100 + 90 * math.sin(math.radians(-90 + 144 * k)))
        for k in range(5)
    ]
    el = make_element(Shape.POLYGON, pts, fill=True, fill_rule=FillRule.EVENODD)
    settings = RenderSettings(hit_test_min_width=1)
    assert not contains_point(el, 100, 100, settings=settings)
    el.fill_rule = FillRule.NONZERO
    assert contains_point(el, 100, 100, settings=settings)


def test_hit_test_minimum_width_is_configurable(monkeypatch):
    el = make_element(Shape.LINE, [(0, 0), (100, 0)])
    assert contains_point(el, 50, 10)
    monkeypatch.setenv("TRAZO_HIT_TEST_MIN_WIDTH", "4")
    assert not contains_point(el, 50, 10)


def test_hit_test_follows_transformations():
    el = make_element(Shape.RECTANGLE, [(0, 0), (10, 10)], fill=True)
    el.transformations.append(Transformation(type=TransformationType.TRANSLATION, slide_x=100, slide_y=50))
    assert contains_point(el, 105, 55)
    assert not contains_point(el, 5, 5)


def test_incomplete_shapes_are_not_renderable(qapp):
    assert not is_renderable(make_element(Shape.RECTANGLE, [(0, 0)]))
    assert not is_renderable(make_element(Shape.ELLIPSE, [(3, 3), (3, 3)]))
    assert not is_renderable(make_element(Shape.POLYGON, [(3, 3)]))
    assert is_renderable(make_element(Shape.FREEHAND, [(3, 3)]))

    el = make_element(Shape.RECTANGLE, [(0, 0)])
    assert build_qpath(el) is None
    assert contains_point(el, 0, 0) is False
    assert _paint(_image(), el) is False


def test_three_point_line_is_a_cubic_from_the_anchor():
    el = make_element(Shape.LINE, [(0, 0), (50, 100), (100, 0)])
    path = build_qpath(el)
    assert path.elementCount() == 4
    assert (path.elementAt(1).x, path.elementAt(1).y) == (0, 0)
    assert (path.elementAt(3).x, path.elementAt(3).y) == (100, 0)


def test_dash_lengths_are_in_pen_widths():
    el = make_element(Shape.LINE, [(0, 0), (10, 0)], dash=DashStyle(active=True, array=(8.0, 4.0), offset=2.0))
    el.line.line_width = 4.0
    pen = element_pen(el, QColor("#000"))
    assert pen.dashPattern() == [2.0, 1.0]
    assert pen.dashOffset() == pytest.approx(0.5)


def test_inactive_dash_is_solid():
    el = make_element(Shape.LINE, [(0, 0), (10, 0)], dash=DashStyle(active=True, array=(8.0, 0.0)))
    assert element_pen(el, QColor("#000")).style() == Qt.PenStyle.SolidLine


def test_render_filled_rectangle(qapp):
    img = _image()
    el = make_element(Shape.RECTANGLE, [(10, 10), (50, 50)], color="#ff0000", fill=True)
    assert _paint(img, el) is True
    assert img.pixelColor(30, 30).name() == "#ff0000"
    assert img.pixelColor(30, 30).alpha() == 255
    assert img.pixelColor(70, 70).alpha() == 0


def test_render_stroke_width_ignores_scale(qapp):
    el = make_element(Shape.LINE, [(10, 40), (30, 40)], color="#0000ff")
    el.line.line_width = 2.0
    el.transformations.append(Transformation(type=TransformationType.SCALE_PRESERVE, scale_x=3, scale_y=3))
    img = _image()
    _paint(img, el)
    # Centro (20, 40): la línea escalada va de x=-10 a x=50, con 2px de grosor.
    assert img.pixelColor(45, 40).alpha() > 0
    # Escalado, el grosor sería 6px y cubriría y=42.
    assert img.pixelColor(45, 42).alpha() == 0


def test_eraser_clears_pixels(qapp):
    img = _image(fill=Qt.GlobalColor.white)
    el = make_element(Shape.RECTANGLE, [(10, 10), (50, 50)], fill=True, eraser=True)
    _paint(img, el)
    assert img.pixelColor(30, 30).alpha() == 0
    assert img.pixelColor(70, 70).name() == "#ffffff"
    assert img.pixelColor(70, 70).alpha() == 255


def test_text_width_is_cached_until_text_changes(qapp):
    el = make_element(Shape.TEXT, [(0, 0), (10, 30)], text=TextAttributes(text="abc"))
    w1 = ensure_text_width(el)
    assert w1 > 0
    assert not el.text_width_is_stale()
    el.text.text = "abcabc"
    assert el.text_width_is_stale()
    assert ensure_text_width(el) > w1


def test_text_hit_test_with_rectangle(qapp):
    el = make_element(Shape.TEXT, [(0, 0), (10, 40)], text=TextAttributes(text="MMMM"))
    ensure_text_width(el)
    # Baseline en y=40: el rectángulo cubre [10, 10 + ancho] x [0, 40].
    x = 10 + el.text_width / 2
    assert contains_point(el, x, 20, text_rectangle=True)
    assert not contains_point(el, x, 60, text_rectangle=True)


def test_render_text_with_affordances(qapp):
    img = _image(200, 80)
    el = make_element(Shape.TEXT, [(0, 10), (10, 60)], color="#00ff00", text=TextAttributes(text="Hi"))
    assert _paint(img, el, show_text_cursor=True, show_text_rectangle=True) is True
    ensure_text_width(el)
    assert el.text_width > 0


def test_text_font_skips_only_unsupported_attributes(qapp):
    el = make_element(
        Shape.TEXT,
        [(0, 0), (10, 20)],
        text=TextAttributes(text="x", font=FontDescriptor(family="Sans", weight=700, style=7, variant=5)),
    )
    font = text_font(el)
    assert font.family() == "Sans"
    assert font.weight() == QFont.Weight.Bold
    assert font.style() == QFont.Style.StyleNormal
    assert font.capitalization() == QFont.Capitalization.MixedCase


def test_fractional_text_height_scales_width_and_glyphs(qapp):
    whole = make_element(Shape.TEXT, [(0, 0), (10, 12)], text=TextAttributes(text="MMMM"))
    frac = make_element(Shape.TEXT, [(0, 0), (10, 12.4)], text=TextAttributes(text="MMMM"))
    font = text_font(frac)
    assert font.pixelSize() == 12

    advance = QFontMetricsF(font).horizontalAdvance("MMMM")
    assert ensure_text_width(frac) == pytest.approx(advance * 12.4 / 12)
    assert ensure_text_width(whole) == pytest.approx(advance)

    r_whole = build_qpath(whole).boundingRect()
    r_frac = build_qpath(frac).boundingRect()
    assert r_whole.width() > 0
    assert r_frac.width() / r_whole.width() == pytest.approx(12.4 / 12, rel=1e-6)
    assert r_frac.height() / r_whole.height() == pytest.approx(12.4 / 12, rel=1e-6)
