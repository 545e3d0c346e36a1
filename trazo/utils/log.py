# File: trazo/utils/log.py
# Project: Trazo (TRZ)
# Version: 0.3.0
# Status: stable
# Date: 2026-10-18
# Purpose: Logging centralizado (consola + archivo opcional) y helpers.
# Notes:
#   - Los módulos del motor solo piden loggers (get_logger); nunca configuran handlers.
#   - El archivo solo se escribe si el entry-point pasa log_dir (render_debug lo hace).
from __future__ import annotations

import logging
import os
from pathlib import Path

ROOT_LOGGER = "trazo"
LOG_FILENAME = "trazo.log"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _level_from_env(default: int) -> int:
    raw = (os.environ.get("TRAZO_LOG_LEVEL") or "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def setup_logging(log_dir: str | os.PathLike | None = None, level: int | None = None) -> logging.Logger:
    """Configura el logger `trazo` (consola y, si hay log_dir, archivo trazo.log).

    - Re-llamarla reemplaza los handlers previos (no duplica salidas).
    - TRAZO_LOG_LEVEL (nombre o número) pisa el nivel por defecto, no uno explícito.
    - No lanza si no puede abrir el archivo; sigue solo con consola.
    """
    lvl = level if level is not None else _level_from_env(logging.INFO)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(lvl)

    for h in [h for h in logger.handlers if getattr(h, "_trazo", False)]:
        logger.removeHandler(h)
        h.close()

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_dir is not None:
        try:
            d = Path(log_dir)
            d.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(d / LOG_FILENAME, encoding="utf-8"))
        except OSError as e:
            logger.warning("No se pudo inicializar FileHandler en %s: %s", log_dir, e)

    for h in handlers:
        h.setLevel(lvl)
        h.setFormatter(fmt)
        h._trazo = True  # type: ignore[attr-defined]
        logger.addHandler(h)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
