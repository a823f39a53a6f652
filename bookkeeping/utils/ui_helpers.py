from PySide6.QtWidgets import QWidget, QVBoxLayout, QMessageBox, QLabel
from PySide6.QtCore import Qt, QTimer

def wrap_center(w: QWidget) -> QWidget:
    host = QWidget()
    lay = QVBoxLayout(host)
    lay.addStretch(1)
    lay.addWidget(w, 0, Qt.AlignCenter)
    lay.addStretch(1)
    return host

def info(parent: QWidget, title: str, text: str):
    QMessageBox.information(parent, title, text)

def error(parent: QWidget, title: str, text: str):
    QMessageBox.critical(parent, title, text)


_TOAST_STYLES = {
    "success": "background:#065F46; color:white;",
    "error": "background:#991B1B; color:white;",
    "info": "background:#0F172A; color:white;",
}


def toast(parent: QWidget, text: str, level: str = "info", msecs: int = 3500) -> QLabel:
    """Transient, non-modal notification pinned to the bottom of `parent`."""
    lbl = QLabel(text, parent)
    lbl.setObjectName("Toast")
    lbl.setStyleSheet(_TOAST_STYLES.get(level, _TOAST_STYLES["info"]) + " padding:8px 14px; border-radius:6px;")
    lbl.setAttribute(Qt.WA_DeleteOnClose, True)
    lbl.adjustSize()
    x = max(0, (parent.width() - lbl.width()) // 2)
    y = max(0, parent.height() - lbl.height() - 16)
    lbl.move(x, y)
    lbl.show()
    lbl.raise_()
    QTimer.singleShot(msecs, lbl.close)
    return lbl
