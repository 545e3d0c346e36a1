"""Trazo - version constants.

Keep this module tiny and dependency-free. It is imported by many places
(core models, emitters, tools) and must not have side effects.
"""

APP_NAME = "Trazo"

# App semantic version (must match patch notes / docs).
APP_VERSION = "0.4.2"

# Defaults for new elements.
# NOTE: keep these stable; changing impacts elements created without explicit style.
DEFAULT_COLOR = "#000000"
DEFAULT_LINE_WIDTH = 5.0
DEFAULT_FONT_WEIGHT = 400
