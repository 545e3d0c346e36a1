# File: trazo/core/settings.py
# Project: Trazo (TRZ)
# Version: 0.4.0
# Status: stable
# Date: 2026-10-18
# Purpose: Ajustes de render (hit-test, afordancias de debug, fondo SVG) vía env vars + JSON local.
# Notes:
#   - No depende de Qt.
#   - Las tolerancias de los gestos NO se configuran (ver trazo.core.constants).
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from trazo.core import constants as C
from trazo.utils.log import get_logger

log = get_logger(__name__)


# ------------------------------
# Project settings (repo-local)
# ------------------------------
# Permite defaults reproducibles por proyecto sin tocar el código.
# Archivo esperado: trazo_settings.json en la raíz del proyecto (o en un padre del CWD).
PROJECT_SETTINGS_FILENAME = "trazo_settings.json"

# clave JSON -> env var
_ENV_KEYS = {
    "render.hit_test_min_width": "TRAZO_HIT_TEST_MIN_WIDTH",
    "render.inversion_circle_radius": "TRAZO_INVERSION_CIRCLE_RADIUS",
    "render.dummy_stroke_width": "TRAZO_DUMMY_STROKE_WIDTH",
    "svg.background": "TRAZO_SVG_BACKGROUND",
}


def find_project_settings_path(start: Path | None = None) -> Path | None:
    """Busca trazo_settings.json subiendo desde start (o CWD)."""
    start = (start or Path.cwd()).resolve()
    for p in (start, *start.parents):
        candidate = p / PROJECT_SETTINGS_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _deep_get(d: Dict[str, Any], path: str, default: Any = None) -> Any:
    cur: Any = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def apply_project_settings(
    start: Path | None = None, *, logger: logging.Logger | None = None, prefer_env: bool = True
) -> Dict[str, Any]:
    """Carga trazo_settings.json (si existe) y lo vuelca a variables de entorno.

    - Si `prefer_env=True`, una env var ya seteada NO se pisa (ganan los overrides manuales).
    - Si `prefer_env=False`, el JSON pisa la env var.

    Devuelve un dict con los valores *aplicados desde JSON* (útil para logging/debug).
    """
    _log = logger or log
    p = find_project_settings_path(start)
    if not p:
        return {}

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except Exception as e:
        _log.warning("No se pudo leer %s: %s", p, e)
        return {}
    if not isinstance(data, dict):
        return {}

    applied: Dict[str, Any] = {}
    for key, env in _ENV_KEYS.items():
        value = _deep_get(data, key)
        if value is None or isinstance(value, (dict, list)):
            continue
        if prefer_env and os.environ.get(env):
            continue
        os.environ[env] = str(value)
        applied[key] = value

    if applied:
        _log.info("Project settings aplicados desde %s: %s", p, applied)
    return applied


def _env_float(name: str, default: float, *, min_value: float | None = None, max_value: float | None = None) -> float:
    try:
        raw = os.environ.get(name, "")
        v = float(str(raw).strip()) if raw != "" else float(default)
    except Exception:
        v = float(default)

    if min_value is not None:
        v = max(float(min_value), v)
    if max_value is not None:
        v = min(float(max_value), v)
    return v


@dataclass(frozen=True)
class RenderSettings:
    hit_test_min_width: float = C.HIT_TEST_MIN_WIDTH
    inversion_circle_radius: float = C.INVERSION_CIRCLE_RADIUS
    dummy_stroke_width: float = C.DUMMY_STROKE_WIDTH
    svg_background: str = "#000000"

    @classmethod
    def from_env(cls) -> "RenderSettings":
        """Lee los overrides TRAZO_* (se consulta en cada render; es barato)."""
        bg = (os.environ.get("TRAZO_SVG_BACKGROUND") or "").strip() or cls.svg_background
        return cls(
            hit_test_min_width=_env_float("TRAZO_HIT_TEST_MIN_WIDTH", C.HIT_TEST_MIN_WIDTH, min_value=0, max_value=500),
            inversion_circle_radius=_env_float(
                "TRAZO_INVERSION_CIRCLE_RADIUS", C.INVERSION_CIRCLE_RADIUS, min_value=1, max_value=500
            ),
            dummy_stroke_width=_env_float("TRAZO_DUMMY_STROKE_WIDTH", C.DUMMY_STROKE_WIDTH, min_value=0.5, max_value=32),
            svg_background=bg,
        )
