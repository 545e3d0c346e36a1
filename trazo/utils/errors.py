# File: trazo/utils/errors.py
# Project: Trazo (TRZ)
# Version: 0.3.0
# Status: stable
# Date: 2026-10-18
# Purpose: Errores tipados del motor de trazos.
# Notes:
#   - El motor prefiere fallbacks numéricos silenciosos; estos errores son para registros
#     corruptos, gestos fuera de orden y E/S de la herramienta de debug.
#   - TrazoSchemaError lleva la ruta del campo ("elements[2].points[0][1]") aparte del mensaje.
from __future__ import annotations

import os
from typing import Optional


class TrazoError(Exception):
    """Error base del proyecto."""


class TrazoValidationError(TrazoError):
    """Dato o uso de API inválido."""


class TrazoSchemaError(TrazoValidationError):
    """Registro de elemento inválido (código desconocido, número mal formado, puntos rotos)."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)

    def at(self, prefix: str) -> "TrazoSchemaError":
        """Mismo error con `prefix` antepuesto a la ruta (p.ej. la posición en la lista)."""
        return TrazoSchemaError(self.message, path=f"{prefix}.{self.path}" if self.path else prefix)


class TrazoGestureError(TrazoValidationError):
    """Gesto fuera de orden: sin registro activo, índice inexistente o begin repetido."""

    def __init__(self, message: str, *, index: Optional[int] = None) -> None:
        self.index = index
        super().__init__(message)


class TrazoIOError(TrazoError):
    """Error de E/S (solo herramientas de debug; el motor no escribe archivos)."""

    def __init__(self, message: str, *, file: Optional[os.PathLike | str] = None) -> None:
        self.file = file
        super().__init__(f"{message}: {file}" if file is not None else message)
