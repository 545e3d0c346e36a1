"""Geometry helpers.

This package is intentionally small and dependency-light.

- `utils`: pure point math (nearness, centers, Bézier notable point, signed angle).
- `affine`: the single transformation sequence shared by the Qt path and the SVG markup.
- `svgelements_bbox` / `bbox_compare`: independent geometry of the exported markup,
  used to check that both emitters describe the same shape.
"""

from __future__ import annotations
