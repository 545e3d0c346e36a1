# File: trazo/core/constants.py
# Project: Trazo (TRZ)
# Version: 0.4.0
# Status: stable
# Date: 2026-10-18
# Purpose: Tolerancias geométricas de los gestos (valores literales, no configurables).
# Notes: Elegidas empíricamente. El comportamiento exacto en el borde no es contrato.
from __future__ import annotations

import math

RADIAN = 180 / math.pi                       # grados por radián
INVERSION_CIRCLE_RADIUS = 12                 # px
REFLECTION_TOLERANCE = 5                     # px, para elegir direcciones vertical/horizontal
STRETCH_TOLERANCE = math.pi / 8              # rad, idem
MIN_REFLECTION_LINE_LENGTH = 10              # px
MIN_TRANSLATION_DISTANCE = 1                 # px
MIN_ROTATION_ANGLE = math.pi / 1000          # rad
MIN_DRAWING_SIZE = 3                         # px
HIT_TEST_MIN_WIDTH = 25                      # px, grosor mínimo del trazo al buscar elementos

# Trazo "dummy" (contornos de selección / elementos de simetría).
DUMMY_STROKE_WIDTH = 2
DUMMY_STROKE_DASH = (1.0, 2.0)
