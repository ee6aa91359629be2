import logging
import math
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Iterator

import pandas as pd

from . import settings

logger = logging.getLogger(__name__)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def parse_number(value: Any) -> float | None:
    """
    Parses a loosely typed numeric value (int, float, numeric string).
    Returns None when the value is not a finite number.
    """
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        value = value.strip()
    # Lists, arrays and mappings are never a single reading.
    if not pd.api.types.is_scalar(value):
        return None
    try:
        number = pd.to_numeric(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    if pd.isna(number) or math.isinf(number):
        return None
    return float(number)


def to_number(value: Any) -> float:
    """Numeric coercion for summation: anything unparseable counts as 0."""
    if value is None or value == "":
        return 0.0
    number = parse_number(value)
    return number if number is not None else 0.0


def to_int(value: Any) -> int:
    return int(to_number(value))


def normalize_pallet_id(value: Any) -> str | None:
    """
    String form of a pallet identifier, so 5, 5.0 and " 5 " are the same pallet.
    """
    if value is None:
        return None
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return text or None


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day in [start, end], oldest first. Empty when start > end."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def to_local_date(value: Any) -> date | None:
    """
    Operation day of a stored timestamp under the configured local time zone.
    Plain dates (and YYYY-MM-DD strings) are already local days; naive
    timestamps are taken as UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, str) and len(value.strip()) == 10:
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            logger.warning(f"Unparseable operation date: {value!r}")
            return None
    try:
        timestamp = pd.Timestamp(value)
    except (ValueError, TypeError):
        logger.warning(f"Unparseable operation date: {value!r}")
        return None
    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.tz_localize("UTC")
    return timestamp.tz_convert(settings.LOCAL_TIMEZONE).date()


def parse_report_date(value: Any) -> date | None:
    """
    Reads the report date of an inventory file (FECHA column).
    Accepts dates, the configured text formats and Excel serial numbers.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, (int, float)):
        # Excel serial day numbers count from 1899-12-30.
        return (pd.Timestamp("1899-12-30") + pd.Timedelta(days=int(value))).date()
    text = str(value).strip()
    for fmt in settings.INVENTORY_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def load_csv(file_path: Path, skiprows: int = 0) -> pd.DataFrame | None:
    """
    CSV loader with an encoding fallback: UTF-8 (with BOM support) first,
    then latin-1, which can read any byte.
    All cells are read as text; numeric coercion happens downstream.
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", skiprows=skiprows, dtype=str)

    except UnicodeDecodeError:
        logger.info(
            f"INFO: UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1", skiprows=skiprows, dtype=str)
        except Exception as e_latin1:
            logger.error(
                f"ERROR: Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"INFO: Report not found at {file_path}, skipping.")
        return None

    except Exception as e_general:
        logger.error(
            f"ERROR: An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None
