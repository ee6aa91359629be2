import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Filename Configuration ---
SUBMISSIONS_FILENAME = os.getenv("SUBMISSIONS_FILENAME", "submissions.json")
INVENTORY_FILENAME_PREFIX = os.getenv("INVENTORY_FILENAME_PREFIX", "inventario_")

# --- Logging ---
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "3"))

# --- Outputs ---
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")
# Display order only; balances are always computed oldest-first.
NEWEST_FIRST = os.getenv("NEWEST_FIRST", "true").lower() in ("1", "true", "yes")

# --- Date Policy ---
# Submission timestamps are stored in UTC. The operation day is the calendar
# day in the warehouse's own time zone.
LOCAL_TIMEZONE = os.getenv("LOCAL_TIMEZONE", "America/Bogota")

# --- Shared Business Logic ---
# Temperature thresholds (inclusive upper bounds) for the storage sessions.
FROZEN_MAX_TEMPERATURE = float(os.getenv("FROZEN_MAX_TEMPERATURE", "0"))
REFRIGERATED_MAX_TEMPERATURE = float(os.getenv("REFRIGERATED_MAX_TEMPERATURE", "10"))

# Column order for per-session reports.
SESSION_ORDER = [
    "CO",
    "RE",
    "SE",
]

# Dispatch rows carrying this pallet number are loose picking, not pallets.
PICKING_PALLET_ID = int(os.getenv("PICKING_PALLET_ID", "999"))

# Order type whose reception also releases processed pallets.
PROCESSING_ORDER_TYPE = "MAQUILA"

# Columns every uploaded daily inventory file must carry.
INVENTORY_REQUIRED_COLUMNS = [
    "FECHA",
    "PROPIETARIO",
    "PALETA",
    "SE",
]

# Accepted formats for the FECHA column of an inventory file.
INVENTORY_DATE_FORMATS = [
    "%d/%m/%y",
    "%d/%m/%Y",
    "%Y-%m-%d",
]
