"""Fixtures compartidos: Qt offscreen + fábricas de elementos."""

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from trazo.core.models import DrawingElement, LineStyle, Shape


@pytest.fixture(scope="session")
def qapp():
    """QGuiApplication para todo lo que mida o pinte texto."""
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance() or QGuiApplication(["trazo-tests"])
    yield app


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("TRAZO_"):
            monkeypatch.delenv(key, raising=False)


def make_element(shape: Shape, points, **kwargs) -> DrawingElement:
    kwargs.setdefault("line", LineStyle(line_width=2.0))
    return DrawingElement(shape=shape, points=[tuple(map(float, p)) for p in points], **kwargs)


@pytest.fixture
def square() -> DrawingElement:
    """Rectángulo 0..10, centro (5, 5)."""
    return make_element(Shape.RECTANGLE, [(0, 0), (10, 10)])
