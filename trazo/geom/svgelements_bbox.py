"""svgelements adapter: geometry bbox of exported markup.

The markup is produced by `trazo.svg.exporter`; parsing it back with an
independent SVG implementation gives a second opinion on the geometry that
the Qt path describes (both must match).

Notes
- bbox is the *geometry* bbox (`with_stroke=False`), transforms applied.
- `<text>` has no reliable geometry without font metrics: returns bbox None.
"""

from __future__ import annotations

import io
from typing import Any, Dict, Optional, Tuple

from svgelements import SVG, Shape as SvgShape

_WRAPPER = '<svg xmlns="http://www.w3.org/2000/svg" version="1.1">{}</svg>'


def _safe_float(v: Any) -> Optional[float]:
    if v is None:
        return None
    try:
        return float(v)
    except Exception:
        # Length-like objects might store a numeric `.value`
        try:
            return float(getattr(v, "value"))
        except Exception:
            return None


def _bbox_tuple(b: Any) -> Optional[Tuple[float, float, float, float]]:
    if b is None:
        return None
    vals = [_safe_float(v) for v in b[:4]]
    if None in vals:
        return None
    return (vals[0], vals[1], vals[2], vals[3])  # type: ignore[return-value]


def compute_fragment_bbox(fragment: str) -> Dict[str, Any]:
    """Compute the bbox of one SVG fragment.

    Returns a dict like:
    - bbox: (x0, y0, x1, y1) or None
    - shapes: number of geometric shapes found
    - error: str (optional)
    """
    if not fragment:
        return {"bbox": None, "shapes": 0}

    try:
        svg = SVG.parse(io.StringIO(_WRAPPER.format(fragment)), reify=True)
        shapes = [e for e in svg.elements() if isinstance(e, SvgShape)]
        if not shapes:
            return {"bbox": None, "shapes": 0}
        return {"bbox": _bbox_tuple(svg.bbox(with_stroke=False)), "shapes": len(shapes)}
    except Exception as e:
        return {"bbox": None, "shapes": 0, "error": f"{type(e).__name__}: {e}"}
