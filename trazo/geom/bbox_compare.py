"""Render-vs-markup bbox check for one drawing element.

Purpose
- The Qt path (transform stack applied, no stroke) and the exported SVG
  fragment must describe the same geometry. This module measures both
  bboxes and reports how far apart they are.
- The report is plain JSON (render_debug writes it into _summary.json).

Status values
- PASS       max edge error <= tol
- WARN       tol < error <= warn
- FAIL       error > warn (or the check itself blew up)
- NO_GEOM    no markup bbox (text: svgelements has no font metrics)
- INVISIBLE  element not renderable yet (gesture in progress)

Notes
- Markup coordinates are rounded to 2 decimals, so the default tolerance is 0.5px.
- compare_element() never raises: it is debug tooling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from PySide6.QtCore import QRectF

from trazo.core.models import DrawingElement, Shape
from trazo.geom.svgelements_bbox import compute_fragment_bbox
from trazo.svg.exporter import build_svg
from trazo.svg.qpath_render import element_path

_EDGES = ("x0", "y0", "x1", "y1")


@dataclass(frozen=True)
class BBoxXYXY:
    x0: float
    y0: float
    x1: float
    y1: float

    @classmethod
    def from_qrect(cls, r: Optional[QRectF]) -> Optional["BBoxXYXY"]:
        if r is None:
            return None
        return cls(r.left(), r.top(), r.right(), r.bottom())

    @classmethod
    def from_xyxy(cls, xyxy: Any) -> Optional["BBoxXYXY"]:
        if not isinstance(xyxy, (list, tuple)) or len(xyxy) != 4:
            return None
        try:
            return cls(*(float(v) for v in xyxy))
        except (TypeError, ValueError):
            return None

    def edge_deltas(self, other: "BBoxXYXY") -> Dict[str, float]:
        return {f"d{e}": float(getattr(self, e) - getattr(other, e)) for e in _EDGES}

    def as_list(self) -> list[float]:
        return [float(getattr(self, e)) for e in _EDGES]


def _status(err: float, tol: float, warn: float) -> str:
    if err <= tol:
        return "PASS"
    return "WARN" if err <= warn else "FAIL"


def compare_bboxes(
    render_bbox: Optional[BBoxXYXY],
    markup_xyxy: Any,
    *,
    tol_abs_px: float = 0.5,
    warn_abs_px: float = 3.0,
) -> Dict[str, Any]:
    markup_bbox = BBoxXYXY.from_xyxy(markup_xyxy)
    report: Dict[str, Any] = {
        "tol_abs_px": float(tol_abs_px),
        "warn_abs_px": float(warn_abs_px),
        "render_bbox_xyxy": render_bbox.as_list() if render_bbox else None,
        "markup_bbox_xyxy": markup_bbox.as_list() if markup_bbox else None,
        "max_abs_err_px": None,
        "diff": None,
        "notes": [],
    }

    if render_bbox is None:
        report.update(status="INVISIBLE", notes=["not renderable yet"])
        return report
    if markup_bbox is None:
        report.update(status="NO_GEOM", notes=["markup bbox not available"])
        return report

    diff = render_bbox.edge_deltas(markup_bbox)
    err = max(abs(v) for v in diff.values())
    report.update(status=_status(err, float(tol_abs_px), float(warn_abs_px)), max_abs_err_px=err, diff=diff)
    return report


def compare_element(element: DrawingElement, *, tol_abs_px: float = 0.5, warn_abs_px: float = 3.0) -> Dict[str, Any]:
    try:
        path = element_path(element)
        render_bbox = BBoxXYXY.from_qrect(path.boundingRect()) if path is not None else None
        if element.shape == Shape.TEXT or render_bbox is None:
            markup: Dict[str, Any] = {"bbox": None}
        else:
            markup = compute_fragment_bbox(build_svg(element))
        report = compare_bboxes(render_bbox, markup.get("bbox"), tol_abs_px=tol_abs_px, warn_abs_px=warn_abs_px)
        if markup.get("error"):
            report["notes"].append(str(markup["error"]))
        return report
    except Exception as e:
        return {"status": "FAIL", "notes": [f"{type(e).__name__}: {e}"]}
