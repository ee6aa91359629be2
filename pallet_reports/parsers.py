import json
import logging
from pathlib import Path

import pandas as pd

from . import ingestion, settings, utils
from .repositories import InMemoryOperationRepository, InMemorySnapshotRepository
from .schemas import InventorySnapshot

logger = logging.getLogger(__name__)


def parse_inventory_report(file_path: Path) -> InventorySnapshot | None:
    """
    Loads one daily inventory file into a snapshot.
    - Column names are trimmed.
    - Every required column must be present.
    - The report date is read from the FECHA column of the first row.
    """
    df = utils.load_csv(file_path)
    if df is None:
        return None
    if df.empty:
        logger.warning(f"⚠️ {file_path.name} is empty, skipping.")
        return None

    df = df.rename(columns=lambda column: str(column).strip())
    missing = [column for column in settings.INVENTORY_REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        logger.error(f"❌ {file_path.name} is missing columns: {', '.join(missing)}")
        return None

    report_date = utils.parse_report_date(df["FECHA"].iloc[0])
    if report_date is None:
        logger.error(f"❌ {file_path.name}: could not read the FECHA value {df['FECHA'].iloc[0]!r}")
        return None

    # Empty cells become None rather than NaN.
    df = df.astype(object).where(df.notna(), None)
    snapshot = ingestion.snapshot_from_document(
        {"date": report_date, "data": df.to_dict("records")}
    )
    if snapshot is not None:
        logger.info(f"✅ Parsed {file_path.name} ({report_date}, {len(snapshot.rows)} rows).")
    return snapshot


def find_inventory_reports(input_dir: Path) -> list[Path]:
    return sorted(input_dir.glob(f"{settings.INVENTORY_FILENAME_PREFIX}*.csv"))


def load_submissions(file_path: Path) -> list[dict]:
    """
    Reads exported submission documents: a JSON list, or an object holding
    the list under "submissions".
    """
    if not file_path.exists():
        logger.warning(f"⚠️ Submissions file not found: {file_path}")
        return []
    with open(file_path, encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get("submissions", [])
    if not isinstance(payload, list):
        logger.error(f"❌ {file_path.name} does not hold a list of submissions.")
        return []
    return [document for document in payload if isinstance(document, dict)]


def load_repositories(
    input_dir: Path,
) -> tuple[InMemoryOperationRepository, InMemorySnapshotRepository]:
    """Builds both report inputs from the files of an input directory."""
    logger.info(f"-- Loading inputs from {input_dir} --")

    documents = load_submissions(input_dir / settings.SUBMISSIONS_FILENAME)
    records = ingestion.records_from_submissions(documents)
    logger.info(f"  > {len(records)} operation record(s) loaded.")

    snapshots = InMemorySnapshotRepository()
    for path in find_inventory_reports(input_dir):
        snapshot = parse_inventory_report(path)
        if snapshot is not None:
            snapshots.upsert(snapshot)

    return InMemoryOperationRepository(records), snapshots
