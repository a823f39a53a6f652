# bookkeeping/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .constants import (
    CACHE_DIR_NAME,
    COMPILED_BY,
    DATA_DIR,
    DB_FILE_NAME,
    DEFAULT_PRODUCT_CATEGORIES,
    LOGO_FILE_NAME,
    ORG_ADDRESS_LINES,
    ORG_NAME,
    ORG_REPORT_SUFFIX,
    ORG_SHORT_NAME,
    PRESENTED_TO,
    REPORTS_DIR_NAME,
)

BASE_DIR = Path(__file__).resolve().parent
DATA_PATH = Path(os.environ.get("BOOKKEEPING_DATA_DIR") or (BASE_DIR / DATA_DIR))
DB_PATH = DATA_PATH / DB_FILE_NAME
CACHE_PATH = DATA_PATH / CACHE_DIR_NAME
REPORTS_PATH = DATA_PATH / REPORTS_DIR_NAME
LOGO_PATH = Path(os.environ.get("BOOKKEEPING_LOGO") or (BASE_DIR / "assets" / LOGO_FILE_NAME))

LOG_LEVEL = os.environ.get("BOOKKEEPING_LOG_LEVEL", "INFO").upper()


def current_user_id() -> Optional[str]:
    """User whose partition is opened at startup; None means logged out."""
    uid = os.environ.get("BOOKKEEPING_USER", "local").strip()
    return uid or None


@dataclass(frozen=True)
class OrgProfile:
    """Identity printed in report headers, footers and approval blocks."""

    name: str = ORG_NAME
    short_name: str = ORG_SHORT_NAME
    address_lines: tuple[str, ...] = ORG_ADDRESS_LINES
    report_suffix: str = ORG_REPORT_SUFFIX
    compiled_by: tuple[str, str] = COMPILED_BY
    presented_to: tuple[str, str] = PRESENTED_TO
    product_categories: tuple[str, ...] = DEFAULT_PRODUCT_CATEGORIES
