# bookkeeping/modules/reporting/logo.py
"""
Logo loading for report headers.

The image is cropped to a circle with Qt and handed to reportlab as PNG
bytes (PNG keeps the transparent corners). Loading is bounded by a
timeout and never raises: any failure means "no logo", and the header
text moves left to use the space.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QBuffer, QByteArray, QIODevice, Qt
from PySide6.QtGui import QImage, QPainter, QPainterPath

from ...constants import LOGO_TIMEOUT_SECONDS

_log = logging.getLogger(__name__)

DEFAULT_LOGO_PIXELS = 256


def circular_png(path: Path | str, size: int = DEFAULT_LOGO_PIXELS) -> Optional[bytes]:
    """Centre-square crop, scale to `size`, clip to a circle. None if Qt cannot decode the file."""
    img = QImage(str(path))
    if img.isNull():
        return None

    side = min(img.width(), img.height())
    square = img.copy((img.width() - side) // 2, (img.height() - side) // 2, side, side)
    if size and side != size:
        square = square.scaled(size, size, Qt.KeepAspectRatio, Qt.SmoothTransformation)

    out = QImage(square.size(), QImage.Format_ARGB32_Premultiplied)
    out.fill(Qt.transparent)
    painter = QPainter(out)
    try:
        painter.setRenderHint(QPainter.Antialiasing)
        clip = QPainterPath()
        clip.addEllipse(0, 0, square.width(), square.height())
        painter.setClipPath(clip)
        painter.drawImage(0, 0, square)
    finally:
        painter.end()

    data = QByteArray()
    buf = QBuffer(data)
    buf.open(QIODevice.WriteOnly)
    ok = out.save(buf, "PNG")
    buf.close()
    return bytes(data.data()) if ok else None


def load_logo(
    path: Optional[Path | str],
    size: int = DEFAULT_LOGO_PIXELS,
    timeout: float = LOGO_TIMEOUT_SECONDS,
) -> Optional[bytes]:
    """
    Circular PNG of the logo at `path`, or None on a missing file, a decode
    failure or when decoding takes longer than `timeout` seconds.
    """
    if not path or not Path(path).is_file():
        _log.info("Logo.missing path=%s", path)
        return None

    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="logo")
    future = pool.submit(circular_png, path, size)
    try:
        data = future.result(timeout=timeout)
    except FuturesTimeout:
        _log.warning("Logo.timeout path=%s timeout=%.1fs", path, timeout)
        return None
    except Exception:
        _log.exception("Logo.load_failed path=%s", path)
        return None
    finally:
        # a timed-out decode is left to finish in the background
        pool.shutdown(wait=False)

    if data is None:
        _log.warning("Logo.decode_failed path=%s", path)
    return data
