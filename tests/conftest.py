# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Every test gets its own in-memory SQLite document store
# - Sample data is built around a fixed NOW so "today" is deterministic
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import os
import re
from datetime import datetime, timedelta

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6 import QtCore  # noqa: E402

from bookkeeping.database import get_connection  # noqa: E402
from bookkeeping.database.document_store import DocumentStore  # noqa: E402
from bookkeeping.database.snapshots import Snapshots  # noqa: E402

# Wednesday
NOW = datetime(2024, 5, 1, 14, 30)
YESTERDAY = NOW - timedelta(days=1)
USER = "u1"


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):
    return qapp


_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
]


@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        if any(r.search(text) for r in rx):
            return

    original = QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Store ----------
@pytest.fixture
def conn():
    c = get_connection(":memory:")
    try:
        yield c
    finally:
        c.close()


@pytest.fixture
def store(conn) -> DocumentStore:
    return DocumentStore(conn)


@pytest.fixture
def now() -> datetime:
    return NOW


# ---------- Sample snapshots ----------
def make_sale(sid, product_id, qty, price, paid, *, discount=0, supply_type=None, when=NOW, client="Acme"):
    product = {"productId": product_id, "quantity": qty, "unitPrice": price, "discount": discount}
    if supply_type:
        product["supplyType"] = supply_type
    total = qty * price - discount
    return {
        "id": sid,
        "client": client,
        "product": product,
        "totalAmount": total,
        "amountPaid": paid,
        "paymentStatus": "paid" if paid >= total else ("partial" if paid > 0 else "unpaid"),
        "date": when,
        "createdAt": when,
    }


@pytest.fixture
def products():
    return (
        {"id": "p-straws", "name": "Straws", "price": 950},
        {"id": "p-tp", "name": "Toilet Paper", "price": 1200},
        {"id": "p-other", "name": "Napkins", "price": 300},
    )


@pytest.fixture
def snaps(products) -> Snapshots:
    sales = (
        make_sale("s1", "p-straws", 10, 950, 9500, supply_type="KAVEERA"),
        make_sale("s2", "p-straws", 10, 950, 4000, supply_type="kaveera", client="Bolt"),
        make_sale("s3", "p-tp", 5, 1200, 0, supply_type="Box", when=YESTERDAY, client="Cato"),
        make_sale("s4", "p-missing", 1, 100, 100),
    )
    debts = (
        {"id": "d1", "client": "Bolt", "productId": "p-straws", "amount": 5500, "lastPaidAmount": 0,
         "saleId": "s2", "createdAt": NOW, "updatedAt": NOW},
        {"id": "d2", "client": "Cato", "productId": "p-tp", "amount": 4000, "lastPaidAmount": 2000,
         "saleId": "s3", "createdAt": YESTERDAY, "updatedAt": NOW},
        {"id": "d3", "client": "Dune", "productId": "p-tp", "amount": 0, "lastPaidAmount": 300,
         "createdAt": YESTERDAY - timedelta(days=3), "updatedAt": YESTERDAY},
    )
    expenses = (
        {"id": "e1", "category": "Transport", "amount": 20000, "description": "Boda", "payee": "Sam",
         "createdAt": NOW},
        {"id": "e2", "category": "airtime", "amount": 5000, "createdAt": NOW},
        {"id": "e3", "category": "Transport", "amount": 7000, "createdAt": YESTERDAY},
    )
    supplies = (
        {"id": "sp1", "productId": "p-straws", "supplyType": "Kaveera", "quantity": 50, "date": NOW},
        {"id": "sp2", "productId": "p-tp", "supplyType": "BOX", "quantity": 10, "date": YESTERDAY},
        {"id": "sp3", "productId": "p-tp", "supplyType": "Carton", "quantity": 0, "date": NOW},
    )
    deposits = (
        {"id": "b1", "bank": "Stanbic", "depositor": "Shadia", "reference": "TX1", "amount": 30000, "date": NOW},
    )
    return Snapshots(
        sales=sales,
        products=products,
        debts=debts,
        expenses=expenses,
        supplies=supplies,
        bankDeposits=deposits,
    )
