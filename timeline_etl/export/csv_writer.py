"""CSV export of the activities dataset."""

import logging
from pathlib import Path

import polars as pl

from timeline_etl.config import CSV_DATETIME_FORMAT

logger = logging.getLogger(__name__)


def write_activities_csv(df: pl.DataFrame, output_path: Path) -> Path:
    """Write the activities dataset with a header row and no index column.

    Args:
        df: Enriched activities
        output_path: Destination CSV file

    Returns:
        Path to the written file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    df.write_csv(output_path, include_header=True, datetime_format=CSV_DATETIME_FORMAT)
    logger.info(f"Wrote {len(df)} activities to {output_path}")

    return output_path
