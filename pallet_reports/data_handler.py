import json
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd
import requests
from pydantic import BaseModel

from . import settings
from . import utils

logger = logging.getLogger(__name__)


def rows_to_frame(rows: list[BaseModel]) -> pd.DataFrame:
    """
    Flat table of report rows using their export aliases. Nested mappings
    (per-client pivot counts) become one column per key.
    """
    records = [row.model_dump(mode="json", by_alias=True) for row in rows]
    df = pd.json_normalize(records)
    return df.rename(columns=lambda column: column.split(".")[-1])


def save_outputs(rows: list[BaseModel], report_name: str) -> Optional[Path]:
    """Saves the report to CSV and, when enabled, to JSON, with dated filenames."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = settings.OUTPUT_DIR / f"{report_name}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{report_name}_{date_suffix}.json"

    rows_to_frame(rows).to_csv(csv_path, index=False)
    logger.info(f"✅ Report saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json_data = [row.model_dump(mode="json", by_alias=True) for row in rows]
            json.dump(json_data, f, indent=2, default=str)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("INFO: Skipping JSON file save as per configuration.")

    return csv_path


def post_to_webhook(rows: list[BaseModel], metadata: dict[str, Any], report_type: str) -> bool:
    """
    Posts the report rows and the run metadata to the configured webhook.
    Returns True when the post went through.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return False

    logger.info(f"🚀 Posting {report_type} report to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": [row.model_dump(mode="json", by_alias=True) for row in rows],
        "metadata": metadata,
    }

    try:
        response = requests.post(settings.WEBHOOK_URL, json=payload, timeout=15)
        response.raise_for_status()
        logger.info("✅ Report successfully posted to webhook.")
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")
        return False
