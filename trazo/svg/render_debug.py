# File: trazo/svg/render_debug.py
# Project: Trazo (TRZ)
# Version: 0.4.1
# Status: stable
# Date: 2026-10-18
# Purpose: Harness CLI de debug: elementos (JSON) -> PNG (render Qt) + SVG (markup) + reporte bbox.
# Notes:
# - Herramienta opt-in: el motor no escribe archivos; acá sí (es el único lugar).
# - El reporte compara bbox del path Qt contra el bbox svgelements del markup exportado.
from __future__ import annotations

import argparse
import datetime
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage, QPainter

from trazo.core.serialization import loads_elements
from trazo.core.settings import RenderSettings, apply_project_settings
from trazo.core.version import APP_NAME, APP_VERSION
from trazo.geom.bbox_compare import compare_element
from trazo.svg.exporter import build_svg_document
from trazo.svg.qpath_render import render_element
from trazo.utils.errors import TrazoIOError
from trazo.utils.log import get_logger, setup_logging

log = get_logger(__name__)


def _ensure_qt_app() -> None:
    """Crea una app Qt mínima si no existe (necesaria para fuentes)."""
    from PySide6.QtGui import QGuiApplication

    if QGuiApplication.instance() is None:
        QGuiApplication(sys.argv[:1] or ["trazo-render-debug"])


def _parse_size(raw: str) -> tuple[int, int]:
    try:
        w, h = (int(v) for v in str(raw).lower().split("x", 1))
    except Exception as e:
        raise argparse.ArgumentTypeError(f"Tamaño inválido (se espera WxH): {raw!r}") from e
    if w <= 0 or h <= 0:
        raise argparse.ArgumentTypeError(f"Tamaño inválido (se espera WxH): {raw!r}")
    return w, h


def render_png(elements, size: tuple[int, int], bg_color: str, out_png: Path) -> int:
    """Pinta todos los elementos sobre un QImage y lo guarda. Devuelve cuántos se pintaron."""
    img = QImage(size[0], size[1], QImage.Format.Format_ARGB32_Premultiplied)
    img.fill(QColor(bg_color) if QColor(bg_color).isValid() else QColor(Qt.GlobalColor.transparent))

    painted = 0
    p = QPainter(img)
    try:
        p.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        for el in elements:
            if render_element(p, el):
                painted += 1
    finally:
        p.end()

    out_png.parent.mkdir(parents=True, exist_ok=True)
    if not img.save(str(out_png)):
        raise TrazoIOError("No se pudo guardar PNG", file=out_png)
    return painted


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="trazo.svg.render_debug",
        description="Trazo: harness CLI, elementos JSON -> PNG + SVG + reporte bbox (sin UI).",
    )
    ap.add_argument("input", help="Ruta a un .json con la lista de elementos")
    ap.add_argument("--out", default="", help="Carpeta de salida (default: ./render_debug_out junto al input)")
    ap.add_argument("--size", type=_parse_size, default=os.environ.get("TRAZO_DBG_SIZE", "800x600"))
    ap.add_argument("--bg", default="", help="Color de fondo (default: TRAZO_SVG_BACKGROUND o #000000)")
    ap.add_argument(
        "--bbox-tol",
        type=float,
        default=float(os.environ.get("TRAZO_DBG_BBOX_TOL", "0.5")),
        help="Tolerancia PASS (px) para comparar bbox Qt vs markup (default: 0.5)",
    )
    ap.add_argument(
        "--bbox-warn",
        type=float,
        default=float(os.environ.get("TRAZO_DBG_BBOX_WARN", "3.0")),
        help="Umbral WARN (px) (default: 3.0)",
    )
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    inp = Path(args.input).expanduser()
    out_dir = Path(args.out).expanduser() if args.out else inp.parent / "render_debug_out"
    size = args.size if isinstance(args.size, tuple) else _parse_size(args.size)

    setup_logging(out_dir / "logs", level=logging.DEBUG if args.verbose else None)
    apply_project_settings(logger=log, prefer_env=True)
    bg = args.bg or RenderSettings.from_env().svg_background

    try:
        raw = inp.read_text(encoding="utf-8")
    except Exception as e:
        raise TrazoIOError("No se pudo leer", file=inp) from e
    elements = loads_elements(raw)

    _ensure_qt_app()
    log.info("%s %s render debug: %d elementos -> %s", APP_NAME, APP_VERSION, len(elements), out_dir)

    painted = render_png(elements, size, bg, out_dir / f"{inp.stem}.png")

    svg_path = out_dir / f"{inp.stem}.svg"
    try:
        svg_path.write_text(build_svg_document(elements, size[0], size[1], bg), encoding="utf-8")
    except Exception as e:
        raise TrazoIOError("No se pudo exportar SVG", file=svg_path) from e

    stats = {"PASS": 0, "WARN": 0, "FAIL": 0, "NO_GEOM": 0, "INVISIBLE": 0}
    items: list[dict[str, Any]] = []
    for i, el in enumerate(elements):
        rep = compare_element(el, tol_abs_px=float(args.bbox_tol), warn_abs_px=float(args.bbox_warn))
        st = str(rep.get("status", "?"))
        if st in stats:
            stats[st] += 1
        items.append({"index": i, "shape": el.shape.name, **rep})
        log.info("  [%03d] %-9s bbox: %s err=%s", i, el.shape.name, st, rep.get("max_abs_err_px"))

    summary = {
        "tool": "trazo.svg.render_debug",
        "version": APP_VERSION,
        "when": datetime.datetime.now().isoformat(timespec="seconds"),
        "input": str(inp),
        "count": len(elements),
        "painted": painted,
        "size_px": list(size),
        "bbox_compare": {"tol_abs_px": float(args.bbox_tol), "warn_abs_px": float(args.bbox_warn), "stats": stats},
        "items": items,
    }
    summary_path = out_dir / "_summary.json"
    summary_path.write_text(json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8")

    log.info("OK, summary: %s", summary_path)
    log.info("BBox stats: %s", stats)
    return 1 if stats["FAIL"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
