# File: trazo/core/models.py
# Project: Trazo (TRZ)
# Version: 0.4.2
# Status: stable
# Date: 2026-10-18
# Purpose: Modelo de datos de un trazo (DrawingElement) y de sus transformaciones.
# Notes:
#   - Los códigos enteros de los enums son los del registro persistido (compat).
#   - Caches derivadas (centro original, centros transformados, ancho de texto) con
#     invalidación explícita: points_changed() / invalidate_centers().
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional

from PySide6.QtCore import QPointF
from PySide6.QtGui import QTransform

from trazo.core.version import DEFAULT_COLOR, DEFAULT_FONT_WEIGHT, DEFAULT_LINE_WIDTH
from trazo.geom.utils import Point, centroid, curve_center, naive_center
from trazo.utils.errors import TrazoSchemaError
from trazo.utils.log import get_logger

log = get_logger(__name__)


class Shape(IntEnum):
    FREEHAND = 0
    LINE = 1
    ELLIPSE = 2
    RECTANGLE = 3
    TEXT = 4
    POLYGON = 5
    POLYLINE = 6


class TransformationType(IntEnum):
    TRANSLATION = 0
    ROTATION = 1
    SCALE_PRESERVE = 2
    STRETCH = 3
    REFLECTION = 4
    INVERSION = 5


class LineCap(IntEnum):
    BUTT = 0
    ROUND = 1
    SQUARE = 2


class LineJoin(IntEnum):
    MITER = 0
    ROUND = 1
    BEVEL = 2


class FillRule(IntEnum):
    NONZERO = 0  # "winding"
    EVENODD = 1


# Nombres (SVG/CSS) de los códigos de fuente persistidos (numeración Pango).
FONT_STYLE_NAMES = {0: "Normal", 1: "Oblique", 2: "Italic"}
FONT_STRETCH_NAMES = {
    0: "Ultra-condensed", 1: "Extra-condensed", 2: "Condensed", 3: "Semi-condensed", 4: "Normal",
    5: "Semi-expanded", 6: "Expanded", 7: "Extra-expanded", 8: "Ultra-expanded",
}
FONT_VARIANT_NAMES = {0: "Normal", 1: "Small-caps"}
FONT_STRETCH_NORMAL = 4

# Campos propios de cada variante (lo que se serializa además de `type`).
TRANSFORMATION_FIELDS: dict[TransformationType, tuple[str, ...]] = {
    TransformationType.TRANSLATION: ("slide_x", "slide_y"),
    TransformationType.ROTATION: ("angle",),
    TransformationType.SCALE_PRESERVE: ("scale_x", "scale_y", "angle"),
    TransformationType.STRETCH: ("scale_x", "scale_y", "angle"),
    TransformationType.REFLECTION: ("scale_x", "scale_y", "slide_x", "slide_y", "angle"),
    TransformationType.INVERSION: ("scale_x", "scale_y", "slide_x", "slide_y", "angle"),
}
_RECORD_KEYS = {
    "slide_x": "slideX",
    "slide_y": "slideY",
    "angle": "angle",
    "scale_x": "scaleX",
    "scale_y": "scaleY",
}


@dataclass
class LineStyle:
    line_width: float = DEFAULT_LINE_WIDTH
    line_cap: LineCap = LineCap.ROUND
    line_join: LineJoin = LineJoin.ROUND

    def to_dict(self) -> dict[str, Any]:
        return {
            "lineCap": int(self.line_cap),
            "lineJoin": int(self.line_join),
            "lineWidth": float(self.line_width),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "LineStyle":
        return LineStyle(
            line_width=_as_float(d.get("lineWidth", DEFAULT_LINE_WIDTH), "line.lineWidth"),
            line_cap=_as_enum(LineCap, d.get("lineCap", LineCap.ROUND), "line.lineCap"),
            line_join=_as_enum(LineJoin, d.get("lineJoin", LineJoin.ROUND), "line.lineJoin"),
        )


@dataclass
class DashStyle:
    active: bool = False
    array: tuple[float, float] = (0.0, 0.0)
    offset: float = 0.0

    @property
    def is_effective(self) -> bool:
        """El guionado solo se aplica si está activo y ambos largos son > 0."""
        return bool(self.active and self.array and self.array[0] > 0 and self.array[1] > 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "active": bool(self.active),
            "array": [float(self.array[0]), float(self.array[1])],
            "offset": float(self.offset),
        }

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "DashStyle":
        arr = d.get("array") or [0, 0]
        if not (isinstance(arr, (list, tuple)) and len(arr) >= 2):
            arr = [0, 0]
        return DashStyle(
            active=bool(d.get("active", False)),
            array=(_as_float(arr[0], "dash.array[0]"), _as_float(arr[1], "dash.array[1]")),
            offset=_as_float(d.get("offset", 0.0), "dash.offset"),
        )


@dataclass
class FontDescriptor:
    family: Optional[str] = None
    weight: int = DEFAULT_FONT_WEIGHT
    style: int = 0
    stretch: int = FONT_STRETCH_NORMAL
    variant: int = 0

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "weight": int(self.weight),
            "style": int(self.style),
            "stretch": int(self.stretch),
            "variant": int(self.variant),
        }
        if self.family:
            d["family"] = str(self.family)
        return d

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "FontDescriptor":
        """Atributo por atributo: uno inválido queda en su default y no invalida el resto."""
        family = d.get("family")
        font = FontDescriptor(family=str(family) if family else None)
        for attr in ("weight", "style", "stretch", "variant"):
            if d.get(attr) is None:
                continue
            try:
                setattr(font, attr, int(d[attr]))
            except (TypeError, ValueError):
                log.debug("Atributo de fuente ignorado en el registro %s=%r", attr, d[attr])
        return font

    def key(self) -> tuple:
        return (self.family, self.weight, self.style, self.stretch, self.variant)


@dataclass
class TextAttributes:
    text: str = ""
    cursor_position: int = -1  # -1 = al final
    right_aligned: bool = False
    font: FontDescriptor = field(default_factory=FontDescriptor)

    @property
    def cursor_index(self) -> int:
        return len(self.text) if self.cursor_position == -1 else max(0, min(self.cursor_position, len(self.text)))


@dataclass
class Transformation:
    """Un registro del stack de transformaciones.

    `start`/`end` solo existen mientras dura el gesto; se borran al confirmar.
    """

    type: TransformationType
    slide_x: float = 0.0
    slide_y: float = 0.0
    angle: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    start: Optional[Point] = None
    end: Optional[Point] = None

    # Runtime (NO se serializa): centro del elemento antes de este registro.
    _center: Optional[Point] = field(default=None, init=False, repr=False, compare=False)

    @property
    def in_progress(self) -> bool:
        return self.start is not None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": int(self.type)}
        for f in TRANSFORMATION_FIELDS[self.type]:
            d[_RECORD_KEYS[f]] = float(getattr(self, f))
        return d

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "Transformation":
        if not isinstance(d, dict):
            raise TrazoSchemaError("se esperaba objeto", path="transformations[]")
        ttype = _as_enum(TransformationType, d.get("type"), "transformations[].type")
        t = Transformation(type=ttype)
        for f in TRANSFORMATION_FIELDS[ttype]:
            key = _RECORD_KEYS[f]
            if key in d:
                setattr(t, f, _as_float(d[key], f"transformations[].{key}"))
        return t


@dataclass
class DrawingElement:
    shape: Shape
    color: str = DEFAULT_COLOR
    line: LineStyle = field(default_factory=LineStyle)
    dash: DashStyle = field(default_factory=DashStyle)
    fill: bool = False
    fill_rule: FillRule = FillRule.NONZERO
    eraser: bool = False
    transformations: list[Transformation] = field(default_factory=list)
    text: Optional[TextAttributes] = None
    line_index: Optional[int] = None
    points: list[Point] = field(default_factory=list)

    # Runtime (NO se serializa)
    show_symmetry_element: bool = field(default=False, compare=False)
    _original_center: Optional[Point] = field(default=None, init=False, repr=False, compare=False)
    text_width: float = field(default=0.0, init=False, repr=False, compare=False)
    _text_width_key: Optional[tuple] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.shape == Shape.TEXT and self.text is None:
            self.text = TextAttributes()

    # ----------------------------
    # Helpers de estado
    # ----------------------------
    @property
    def last_transformation(self) -> Optional[Transformation]:
        return self.transformations[-1] if self.transformations else None

    @property
    def is_straight_line(self) -> bool:
        return self.shape == Shape.LINE and len(self.points) == 2

    @property
    def font_size(self) -> float:
        """Tamaño de fuente (px) de un Text: extensión vertical entre sus dos puntos."""
        if len(self.points) < 2:
            return 0.0
        return abs(self.points[1][1] - self.points[0][1])

    def text_key(self) -> tuple:
        """Clave del último ancho medido; si cambia, text_width está vencido."""
        attrs = self.text or TextAttributes()
        return (attrs.text, attrs.font.key(), self.font_size)

    def text_width_is_stale(self) -> bool:
        return self._text_width_key != self.text_key()

    def set_text_width(self, width: float) -> None:
        self.text_width = float(width)
        self._text_width_key = self.text_key()

    def text_origin(self) -> QPointF:
        """Baseline izquierda del texto (alineado a derecha: corrido por el ancho medido)."""
        (x0, y0), (x1, y1) = self.points[0], self.points[1]
        right = bool(self.text and self.text.right_aligned)
        return QPointF(x1 - (self.text_width if right else 0.0), max(y0, y1))

    # ----------------------------
    # Centros (pivote de rotación/escala)
    # ----------------------------
    def points_changed(self) -> None:
        """Invalida todo lo derivado de los puntos."""
        self._original_center = None
        self.invalidate_centers(0)

    def invalidate_centers(self, from_index: int = 0) -> None:
        for t in self.transformations[max(0, from_index):]:
            t._center = None

    def line_offset(self) -> float:
        """Al rotar líneas de texto agrupadas, desplaza el centro hasta la primera línea."""
        if len(self.points) < 2:
            return 0.0
        return (self.line_index or 0) * abs(self.points[1][1] - self.points[0][1])

    def original_center(self) -> Point:
        """Centro de la figura antes de cualquier transformación (cacheado)."""
        if self._original_center is None:
            pts = self.points
            if not pts:
                return (0.0, 0.0)
            if self.shape == Shape.ELLIPSE:
                c = (pts[0][0], pts[0][1])
            elif self.shape == Shape.LINE and len(pts) == 4:
                c = curve_center(pts[0], pts[1], pts[2], pts[3])
            elif self.shape == Shape.LINE and len(pts) == 3:
                c = curve_center(pts[0], pts[0], pts[1], pts[2])
            elif self.shape == Shape.TEXT and len(pts) == 2:
                c = (pts[1][0], max(pts[0][1], pts[1][1]) - self.line_offset())
            elif len(pts) >= 3:
                c = centroid(pts)
            else:
                c = naive_center(pts)
            self._original_center = (float(c[0]), float(c[1]))
        return self._original_center

    def transformed_center(self, index: int) -> Point:
        """Centro afectado por todas las transformaciones anteriores a `index` (cacheado por registro)."""
        # Import local: affine depende de este módulo.
        from trazo.geom.affine import center_transform

        if index >= len(self.transformations):
            return _map_point(center_transform(self.transformations), self.original_center())

        t = self.transformations[index]
        if t._center is None:
            m = center_transform(self.transformations[:index])
            t._center = _map_point(m, self.original_center())
        return t._center

    # ----------------------------
    # Registro persistido
    # ----------------------------
    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "shape": int(self.shape),
            "color": str(self.color),
            "line": self.line.to_dict(),
            "dash": self.dash.to_dict(),
            "fill": bool(self.fill),
            "fillRule": int(self.fill_rule),
            "eraser": bool(self.eraser),
            "transformations": [t.to_dict() for t in self.transformations],
        }
        if self.text is not None:
            d["text"] = str(self.text.text)
            d["textRightAligned"] = bool(self.text.right_aligned)
            d["font"] = self.text.font.to_dict()
        if self.line_index is not None:
            d["lineIndex"] = int(self.line_index)
        d["points"] = [[round(float(x), 2), round(float(y), 2)] for x, y in self.points]
        return d

    @staticmethod
    def from_dict(d: dict[str, Any]) -> "DrawingElement":
        if not isinstance(d, dict):
            raise TrazoSchemaError("Elemento inválido: se esperaba dict")
        d = upgrade_legacy_record(d)

        shape = _as_enum(Shape, d.get("shape"), "shape")

        line_raw = d.get("line") or {}
        dash_raw = d.get("dash") or {}
        if not isinstance(line_raw, dict) or not isinstance(dash_raw, dict):
            raise TrazoSchemaError("line/dash: se esperaba objeto")

        tr_raw = d.get("transformations") or []
        if not isinstance(tr_raw, list):
            raise TrazoSchemaError("se esperaba lista", path="transformations")

        text = None
        if shape == Shape.TEXT or "text" in d:
            font_raw = d.get("font") or {}
            text = TextAttributes(
                text=str(d.get("text") or ""),
                right_aligned=bool(d.get("textRightAligned", False)),
                font=FontDescriptor.from_dict(font_raw if isinstance(font_raw, dict) else {}),
            )

        line_index = d.get("lineIndex")
        return DrawingElement(
            shape=shape,
            color=str(d.get("color") or DEFAULT_COLOR),
            line=LineStyle.from_dict(line_raw),
            dash=DashStyle.from_dict(dash_raw),
            fill=bool(d.get("fill", False)),
            fill_rule=_as_enum(FillRule, d.get("fillRule", FillRule.NONZERO), "fillRule"),
            eraser=bool(d.get("eraser", False)),
            transformations=[Transformation.from_dict(t) for t in tr_raw],
            text=text,
            line_index=_as_int(line_index, "lineIndex") if line_index is not None else None,
            points=_as_points(d.get("points")),
        )


def upgrade_legacy_record(d: dict[str, Any]) -> dict[str, Any]:
    """Compat con registros generados por versiones viejas. Devuelve una copia.

    - fillRule ausente -> nonzero; transformations ausente -> [].
    - Text: font.weight 0/1 -> 400/700.
    - `transform{center, angle, startAngle, ratio}` -> Rotation(angle + startAngle) y, para
      Ellipse con ratio != 1, un 3er punto falso que da ese ratio al construir la elipse.
    """
    out = dict(d)
    if out.get("fillRule") is None:
        out["fillRule"] = int(FillRule.NONZERO)
    transformations = list(out.get("transformations") or [])

    font = out.get("font")
    if out.get("shape") == Shape.TEXT and isinstance(font, dict) and font.get("weight") in (0, 1):
        out["font"] = {**font, "weight": 700 if font["weight"] == 1 else 400}

    legacy = out.pop("transform", None)
    if isinstance(legacy, dict):
        if legacy.get("center"):
            angle = _as_float(legacy.get("angle") or 0, "transform.angle") + _as_float(
                legacy.get("startAngle") or 0, "transform.startAngle"
            )
            if angle:
                transformations.append({"type": int(TransformationType.ROTATION), "angle": angle})

        ratio = legacy.get("ratio")
        points = out.get("points") or []
        if out.get("shape") == Shape.ELLIPSE and ratio and ratio != 1 and len(points) >= 2:
            r = _as_float(ratio, "transform.ratio")
            (x0, y0), (x1, y1) = points[0][:2], points[1][:2]
            out["points"] = [*points, [r * (x1 - x0) + x0, r * (y1 - y0) + y0]]
        log.debug("Registro legacy actualizado (transform=%r)", legacy)

    out["transformations"] = transformations
    return out


def _map_point(m: QTransform, p: Point) -> Point:
    q = m.map(QPointF(p[0], p[1]))
    return (q.x(), q.y())


def _as_float(value: Any, field_name: str) -> float:
    try:
        return float(value)
    except Exception as e:
        raise TrazoSchemaError(f"se esperaba número: {value!r}", path=field_name) from e


def _as_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except Exception as e:
        raise TrazoSchemaError(f"se esperaba entero: {value!r}", path=field_name) from e


def _as_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(int(value))
    except Exception as e:
        raise TrazoSchemaError(f"código {enum_cls.__name__} desconocido: {value!r}", path=field_name) from e


def _as_points(raw: Any) -> list[Point]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise TrazoSchemaError("se espera lista de [x, y]", path="points")
    out: list[Point] = []
    for i, p in enumerate(raw):
        if not (isinstance(p, (list, tuple)) and len(p) >= 2):
            raise TrazoSchemaError(f"se espera [x, y]: {p!r}", path=f"points[{i}]")
        out.append((_as_float(p[0], f"points[{i}][0]"), _as_float(p[1], f"points[{i}][1]")))
    return out
