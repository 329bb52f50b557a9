"""Rasterize SVG documents to PNG bytes with Qt's SVG renderer."""

from __future__ import annotations

import logging
import math
import os
import threading

from .exceptions import RasterizeError

logger = logging.getLogger(__name__)

SUPERSAMPLE_SCALE = 2.0

_app_lock = threading.Lock()


def _ensure_gui_application():
    """Text rendering needs a QGuiApplication; create a headless one if the host has none."""
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    with _app_lock:
        app = QGuiApplication.instance()
        if app is None:
            logger.info("Creating offscreen QGuiApplication for diagram rasterization")
            app = QGuiApplication([])
    return app


def rasterize_svg(svg_text: str, scale: float = SUPERSAMPLE_SCALE) -> bytes:
    """
    Draw ``svg_text`` onto a transparent canvas ``scale`` times its natural size.

    Raises:
        RasterizeError: If the document is invalid or has an empty bounding box
    """
    _ensure_gui_application()
    from PySide6.QtCore import QBuffer, QByteArray, QIODevice, QRectF, Qt
    from PySide6.QtGui import QImage, QPainter
    from PySide6.QtSvg import QSvgRenderer

    renderer = QSvgRenderer(QByteArray(svg_text.encode("utf-8")))
    if not renderer.isValid():
        raise RasterizeError("SVG document could not be parsed")

    bounds = renderer.viewBoxF()
    if bounds.isEmpty():
        size = renderer.defaultSize()
        bounds = QRectF(0, 0, size.width(), size.height())
    if bounds.isEmpty():
        raise RasterizeError("SVG document has an empty bounding box")

    width = max(1, math.ceil(bounds.width() * scale))
    height = max(1, math.ceil(bounds.height() * scale))

    image = QImage(width, height, QImage.Format.Format_ARGB32_Premultiplied)
    image.fill(Qt.GlobalColor.transparent)
    painter = QPainter(image)
    try:
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)
        renderer.render(painter, QRectF(0, 0, width, height))
    finally:
        painter.end()

    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    if not image.save(buffer, "PNG"):
        raise RasterizeError("PNG encoding failed")
    return bytes(buffer.data())
