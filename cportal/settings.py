import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Data Store (Supabase / PostgREST) ---
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
STOCK_TABLE = os.getenv("STOCK_TABLE", "stock_levels")
ORDERS_TABLE = os.getenv("ORDERS_TABLE", "orders")
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "15"))

# --- Logging ---
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_FILE = os.getenv("LOG_FILE", "cportal.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
LOG_BACKUP_COUNT = 3

# --- Shared Business Logic ---
# Minimum number of business days between today and the first shipping date.
LEAD_TIME_DAYS = int(os.getenv("LEAD_TIME_DAYS", "5"))

# Orders are packed per 20 kg bag.
QUANTITY_STEP_KG = int(os.getenv("QUANTITY_STEP_KG", "20"))

# One of the names in cportal.policies.POLICY_REGISTRY.
FULFILLMENT_POLICY = os.getenv("FULFILLMENT_POLICY", "period_bucket")

# Accepted textual date formats as (shape, strptime format), tried in this order.
# ISO input must be zero-padded; strptime alone would also take "2026-1-5".
# Day-first input comes from spreadsheets, where "3-2-2026" is common.
DATE_INPUT_FORMATS = (
    (r"\d{4}-\d{2}-\d{2}", "%Y-%m-%d"),
    (r"\d{1,2}-\d{1,2}-\d{4}", "%d-%m-%Y"),
)
