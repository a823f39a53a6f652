"""
Circular logo loading: any failure degrades to "no logo".
"""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage

from bookkeeping.modules.reporting.logo import circular_png, load_logo


def _png(tmp_path, w=40, h=20):
    img = QImage(w, h, QImage.Format_ARGB32)
    img.fill(QColor(220, 38, 38))
    path = tmp_path / "logo.png"
    assert img.save(str(path), "PNG")
    return path


def test_a1_missing_file_returns_none(tmp_path) -> None:
    assert load_logo(tmp_path / "nope.jpg") is None
    assert load_logo(None) is None


def test_a2_undecodable_file_returns_none(tmp_path) -> None:
    bad = tmp_path / "logo.jpg"
    bad.write_bytes(b"not an image")
    assert load_logo(bad) is None


def test_a3_png_is_square_and_clipped(qapp, tmp_path) -> None:
    data = load_logo(_png(tmp_path), size=16)
    assert data.startswith(b"\x89PNG")
    img = QImage.fromData(data)
    assert (img.width(), img.height()) == (16, 16)
    # corners fall outside the circle
    assert img.pixelColor(0, 0).alpha() == 0
    assert img.pixelColor(8, 8).red() > 200


def test_a4_circular_png_keeps_size_when_zero(qapp, tmp_path) -> None:
    img = QImage.fromData(circular_png(_png(tmp_path), size=0))
    assert (img.width(), img.height()) == (20, 20)
    assert img.pixelColor(10, 10) != QColor(Qt.transparent)
