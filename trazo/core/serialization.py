# File: trazo/core/serialization.py
# Project: Trazo (TRZ)
# Version: 0.4.0
# Status: stable
# Date: 2026-10-18
# Purpose: Lista de elementos <-> texto JSON (registro por elemento).
# Notes: Sin E/S de archivos: el transporte es responsabilidad del llamador.
from __future__ import annotations

import json
from typing import Iterable

from trazo.core.models import DrawingElement
from trazo.utils.errors import TrazoSchemaError, TrazoValidationError


def dumps_elements(elements: Iterable[DrawingElement], *, indent: int | None = None) -> str:
    """Serializa los elementos (puntos redondeados a 2 decimales, sin campos runtime)."""
    return json.dumps([e.to_dict() for e in elements], ensure_ascii=False, indent=indent)


def loads_elements(text: str) -> list[DrawingElement]:
    """Reconstruye elementos desde JSON, aplicando las reglas de compat legacy."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise TrazoValidationError(
            "JSON de elementos malformado (línea {}, columna {})".format(e.lineno, e.colno)
        ) from e

    if not isinstance(data, list):
        raise TrazoValidationError("Estructura inválida: se esperaba una lista de elementos")

    out: list[DrawingElement] = []
    for idx, raw in enumerate(data):
        try:
            out.append(DrawingElement.from_dict(raw))
        except TrazoSchemaError as e:
            raise e.at(f"elements[{idx}]") from e
    return out
