"""Configuration for the catalog import queue runner."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Base paths
BASE_DIR = Path(__file__).resolve().parent.parent
LOGS_DIR = BASE_DIR / "logs"
LOGS_DIR.mkdir(exist_ok=True)
STATE_DIR = Path(os.getenv("STATE_DIR", str(BASE_DIR / "state")))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
BETTERSTACK_SOURCE_TOKEN = os.getenv("BETTERSTACK_SOURCE_TOKEN")
BETTERSTACK_INGEST_HOST = os.getenv("BETTERSTACK_INGEST_HOST")

# Database connection
DATABASE_URL = os.getenv("DATABASE_URL")
QUEUE_TABLE = os.getenv("QUEUE_TABLE", "bc_import_queue")
CATALOG_TABLE = os.getenv("CATALOG_TABLE", "catalog_products")

# BigCommerce API
BIGCOMMERCE_STORE_HASH = os.getenv("BIGCOMMERCE_STORE_HASH")
BIGCOMMERCE_ACCESS_TOKEN = os.getenv("BIGCOMMERCE_ACCESS_TOKEN")

# Queue runner settings
QUEUE_BATCH_SIZE = int(os.getenv("QUEUE_BATCH_SIZE", "5"))
QUEUE_MAX_ATTEMPTS = int(os.getenv("QUEUE_MAX_ATTEMPTS", "10"))
ITEM_TIME_WARNING_SECONDS = int(os.getenv("ITEM_TIME_WARNING_SECONDS", "60"))

# Scheduler settings
POLL_INTERVAL = int(os.getenv("POLL_INTERVAL", "30"))  # seconds between runs once drained
BATCH_INTERVAL = int(os.getenv("BATCH_INTERVAL", "1"))  # seconds between runs while draining
RUN_ONCE = os.getenv("RUN_ONCE", "").lower() in ("1", "true", "yes")


def get_channel_id() -> str:
    """Return the configured sales channel ID, or an empty string if unset.

    Read on every call so a channel configured after startup is picked up
    by the next run.
    """
    value = os.getenv("CHANNEL_ID", "").strip()
    if value in ("", "0"):
        return ""
    return value


def validate_config():
    """Validate required configuration."""
    errors = []

    if not DATABASE_URL:
        errors.append("DATABASE_URL is required")

    if not BIGCOMMERCE_STORE_HASH:
        errors.append("BIGCOMMERCE_STORE_HASH is required")

    if not BIGCOMMERCE_ACCESS_TOKEN:
        errors.append("BIGCOMMERCE_ACCESS_TOKEN is required")

    if QUEUE_BATCH_SIZE < 1:
        errors.append(f"QUEUE_BATCH_SIZE must be positive: {QUEUE_BATCH_SIZE}")

    if QUEUE_MAX_ATTEMPTS < 0:
        errors.append(f"QUEUE_MAX_ATTEMPTS must not be negative: {QUEUE_MAX_ATTEMPTS}")

    try:
        STATE_DIR.mkdir(parents=True, exist_ok=True)
    except Exception as e:
        errors.append(f"Cannot create STATE_DIR: {e}")

    if errors:
        raise ValueError("Config errors:\n  " + "\n  ".join(errors))
