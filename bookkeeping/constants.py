# bookkeeping/constants.py
APP_NAME = "RML Bookkeeping"

DATA_DIR = "data"
DB_FILE_NAME = "bookkeeping.db"
CACHE_DIR_NAME = "snapshot_cache"
REPORTS_DIR_NAME = "reports"
LOGO_FILE_NAME = "logo.jpg"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1"

# Collections held per user under users/{user_id}/{collection}
COLLECTIONS: tuple[str, ...] = (
    "sales",
    "clients",
    "products",
    "supplies",
    "debts",
    "expenses",
    "categories",
    "bankDeposits",
)

# Field carrying the business date of each collection
DATE_FIELDS = {
    "sales": "date",
    "supplies": "date",
    "debts": "createdAt",
    "expenses": "createdAt",
    "bankDeposits": "date",
}

# Product names reported as separate categories, in display order
DEFAULT_PRODUCT_CATEGORIES: tuple[str, ...] = ("Straws", "Toilet Paper")

# ---- Organisation identity printed on every report ----
ORG_NAME = "RICHMOND MANUFACTURER'S LTD"
ORG_SHORT_NAME = "Richmond Manufacturer's Ltd"
ORG_ADDRESS_LINES = (
    "Plot 19191, Kimwanyi Road, Nakwero, Wakiso District",
    "Kira Municipality, Kira Division | Tel: 0705555498 / 0776 210570",
)
ORG_REPORT_SUFFIX = "RML"
CURRENCY = "UGX"

COMPILED_BY = ("SHADIA NAKITTO", "Sales & Accounts Assistant")
PRESENTED_TO = ("CHRISTINE NAKAZIBA", "Marketing Manager")

LOGO_TIMEOUT_SECONDS = 5.0

# ---- Report palette (RGB 0-255) ----
PALETTE = {
    "primary": (15, 23, 42),
    "secondary": (71, 85, 105),
    "background": (248, 250, 252),
    "border": (226, 232, 240),
    "header_text": (203, 213, 225),
    "straws": (0, 128, 128),
    "toilet_paper": (34, 139, 34),
    "expenses": (220, 38, 38),
    "white": (255, 255, 255),
}

# Table accent per product category; anything else uses "primary"
CATEGORY_ACCENTS = {
    "Straws": "straws",
    "Toilet Paper": "toilet_paper",
}
