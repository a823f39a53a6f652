# database/schema.py
import sqlite3

SQL = r"""
/* ======================== DOCUMENTS ======================== */

/* One row per document; collections live under users/{user_id}/{collection} */
CREATE TABLE IF NOT EXISTS documents (
    user_id     TEXT NOT NULL,
    collection  TEXT NOT NULL,
    doc_id      TEXT NOT NULL,
    data        TEXT NOT NULL CHECK (json_valid(data)),
    updated_at  TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (user_id, collection, doc_id)
);

CREATE INDEX IF NOT EXISTS idx_documents_collection
ON documents(user_id, collection);

/* debts are looked up by their originating sale on every sale edit/delete */
CREATE INDEX IF NOT EXISTS idx_documents_debt_sale
ON documents(user_id, json_extract(data, '$.saleId'))
WHERE collection = 'debts';
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)


