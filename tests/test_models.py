""" Registro persistido: round-trip, compat legacy y validación. """

import json
import math

import pytest

from trazo.core.models import (
    DashStyle,
    DrawingElement,
    FillRule,
    FontDescriptor,
    LineCap,
    Shape,
    TextAttributes,
    Transformation,
    TransformationType,
    upgrade_legacy_record,
)
from trazo.core.serialization import dumps_elements, loads_elements
from trazo.geom.utils import curve_center
from trazo.utils.errors import TrazoSchemaError, TrazoValidationError

from conftest import make_element


def _sample() -> DrawingElement:
    el = make_element(
        Shape.POLYGON,
        [(0.123456, 1.0), (10.987654, 2.5), (4.4444, 9.0)],
        color="#336699",
        fill=True,
        fill_rule=FillRule.EVENODD,
        dash=DashStyle(active=True, array=(4.0, 2.0), offset=1.0),
    )
    el.line.line_cap = LineCap.SQUARE
    el.transformations = [
        Transformation(type=TransformationType.TRANSLATION, slide_x=3.5, slide_y=-2),
        Transformation(type=TransformationType.ROTATION, angle=0.75),
        Transformation(type=TransformationType.STRETCH, scale_x=1.5, scale_y=1.0, angle=0.3),
        Transformation(type=TransformationType.REFLECTION, scale_x=1, scale_y=-1, slide_y=12, angle=math.pi),
    ]
    return el


def test_round_trip_preserves_points_and_transformations():
    el = _sample()
    back = DrawingElement.from_dict(el.to_dict())
    assert back.shape == Shape.POLYGON
    assert back.points == [(0.12, 1.0), (10.99, 2.5), (4.44, 9.0)]
    for (x0, y0), (x1, y1) in zip(el.points, back.points):
        assert abs(x0 - x1) <= 0.01 and abs(y0 - y1) <= 0.01
    assert [t.to_dict() for t in back.transformations] == [t.to_dict() for t in el.transformations]
    assert back.fill_rule == FillRule.EVENODD
    assert back.dash == el.dash
    assert back.line == el.line


def test_record_only_carries_variant_fields():
    d = _sample().to_dict()
    assert d["transformations"][0] == {"type": 0, "slideX": 3.5, "slideY": -2.0}
    assert d["transformations"][1] == {"type": 1, "angle": 0.75}
    assert "text" not in d and "lineIndex" not in d


def test_gesture_fields_are_not_persisted():
    el = make_element(Shape.RECTANGLE, [(0, 0), (10, 10)])
    el.transformations.append(Transformation(type=TransformationType.TRANSLATION, start=(1, 1), end=(2, 2)))
    el.show_symmetry_element = True
    d = el.to_dict()
    assert "start" not in json.dumps(d)
    assert "showSymmetryElement" not in d


def test_text_record_round_trip():
    el = make_element(
        Shape.TEXT,
        [(0, 0), (40, 24)],
        text=TextAttributes(text="hola", right_aligned=True, font=FontDescriptor(family="Sans", weight=700, style=2)),
        line_index=1,
    )
    back = DrawingElement.from_dict(el.to_dict())
    assert back.text.text == "hola"
    assert back.text.right_aligned is True
    assert back.text.font == el.text.font
    assert back.line_index == 1


def test_serialization_of_element_lists():
    els = [_sample(), make_element(Shape.ELLIPSE, [(5, 5), (9, 5)])]
    text = dumps_elements(els, indent=2)
    back = loads_elements(text)
    assert [e.shape for e in back] == [Shape.POLYGON, Shape.ELLIPSE]
    assert dumps_elements(back) == dumps_elements(els)


def test_legacy_defaults():
    el = DrawingElement.from_dict({"shape": 3, "points": [[0, 0], [5, 5]]})
    assert el.fill_rule == FillRule.NONZERO
    assert el.transformations == []
    assert el.color == "#000000"


@pytest.mark.parametrize("legacy, expected", [(0, 400), (1, 700), (600, 600)])
def test_legacy_font_weight(legacy, expected):
    el = DrawingElement.from_dict({"shape": 4, "text": "x", "font": {"weight": legacy}, "points": [[0, 0], [5, 5]]})
    assert el.text.font.weight == expected


def test_legacy_transform_becomes_rotation():
    el = DrawingElement.from_dict({
        "shape": 3,
        "points": [[0, 0], [10, 10]],
        "transform": {"center": [5, 5], "angle": 0.5, "startAngle": 0.25},
    })
    assert len(el.transformations) == 1
    assert el.transformations[0].type == TransformationType.ROTATION
    assert el.transformations[0].angle == pytest.approx(0.75)


def test_legacy_ellipse_ratio_adds_third_point():
    el = DrawingElement.from_dict({
        "shape": 2,
        "points": [[10, 10], [15, 10]],
        "transform": {"ratio": 1.2},
    })
    assert el.points[2] == pytest.approx((16, 10))
    assert el.transformations == []


def test_upgrade_does_not_mutate_input():
    raw = {"shape": 2, "points": [[0, 0], [1, 0]], "transform": {"ratio": 2}}
    upgrade_legacy_record(raw)
    assert "transform" in raw and len(raw["points"]) == 2


@pytest.mark.parametrize("raw", [
    {"shape": 42, "points": []},
    {"points": []},
    {"shape": 1, "points": [[0, "x"]]},
    {"shape": 1, "points": [[0]]},
    {"shape": 1, "transformations": [{"type": 9}]},
    {"shape": 1, "line": {"lineWidth": "ancho"}},
])
def test_schema_errors(raw):
    with pytest.raises(TrazoSchemaError):
        DrawingElement.from_dict(raw)


def test_loads_elements_reports_position():
    with pytest.raises(TrazoValidationError) as exc:
        loads_elements("[{")
    assert "línea 1" in str(exc.value)

    with pytest.raises(TrazoSchemaError) as exc:
        loads_elements('[{"shape": 1}, {"shape": 77}]')
    assert "elements[1]" in str(exc.value)
    assert exc.value.path == "elements[1].shape"

    with pytest.raises(TrazoValidationError):
        loads_elements('{"shape": 1}')


def test_original_center_per_shape():
    assert make_element(Shape.ELLIPSE, [(3, 4), (8, 4)]).original_center() == (3, 4)
    assert make_element(Shape.RECTANGLE, [(0, 0), (10, 20)]).original_center() == (5, 10)
    line = make_element(Shape.LINE, [(0, 0), (10, 10), (20, 0)])
    assert line.original_center() == pytest.approx(curve_center((0, 0), (0, 0), (10, 10), (20, 0)))
    poly = make_element(Shape.POLYGON, [(0, 0), (20, 0), (20, 10), (10, 10), (10, 30), (0, 30)])
    assert poly.original_center() == pytest.approx((7.5, 12.5))


def test_text_center_accounts_for_line_index():
    el = make_element(Shape.TEXT, [(0, 0), (30, 12)], line_index=2)
    assert el.original_center() == (30, 12 - 2 * 12)


def test_schema_error_path_points_at_the_field():
    with pytest.raises(TrazoSchemaError) as exc:
        DrawingElement.from_dict({"shape": 1, "points": [[0, 0], [1, "y"]]})
    assert exc.value.path.startswith("points[1]")

    nested = TrazoSchemaError("se esperaba número", path="points[0]").at("elements[2]")
    assert nested.path == "elements[2].points[0]"
    assert str(nested) == "elements[2].points[0]: se esperaba número"
    assert TrazoSchemaError("x").at("elements[0]").path == "elements[0]"


def test_bad_font_attribute_keeps_the_valid_ones():
    el = DrawingElement.from_dict({
        "shape": int(Shape.TEXT),
        "text": "hola",
        "font": {"family": "Sans", "weight": 700, "style": "italic"},
        "points": [[0, 0], [10, 20]],
    })
    assert el.text.font.family == "Sans"
    assert el.text.font.weight == 700
    assert el.text.font.style == FontDescriptor().style

    (loaded,) = loads_elements(json.dumps([{
        "shape": int(Shape.TEXT),
        "text": "x",
        "font": {"weight": "negrita", "stretch": 6},
        "points": [[0, 0], [10, 20]],
    }]))
    assert loaded.text.font.weight == FontDescriptor().weight
    assert loaded.text.font.stretch == 6
