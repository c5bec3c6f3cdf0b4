"""Extractor for monthly location-history timeline exports."""

import hashlib
import json
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
import polars as pl
import pyarrow as pa

from timeline_etl.config import RECORD_ARRAY_KEY
from timeline_etl.exceptions import LoadError

logger = logging.getLogger(__name__)


def _to_scalar(value: Any) -> Any:
    """Encode nested arrays/objects left over after flattening as JSON text."""
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True)
    return value


def _scalar_kind(value: Any) -> type:
    """Ints and floats share one numeric kind, bools stay separate."""
    if isinstance(value, bool):
        return bool
    if isinstance(value, (int, float)):
        return float
    return type(value)


def _has_mixed_kinds(values: pd.Series) -> bool:
    """Whether the non-null cells of a column hold more than one scalar kind."""
    return values.dropna().map(_scalar_kind).nunique() > 1


def _to_text(value: Any) -> Any:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return str(value)


class TimelineExtractor:
    """Load a monthly timeline export into a flat table of raw records."""

    def __init__(self, record_key: str = RECORD_ARRAY_KEY):
        """Initialize timeline extractor.

        Args:
            record_key: Top-level array holding one entry per timeline record
        """
        self.record_key = record_key

    def calculate_file_hash(self, file_path: Path) -> str:
        """Calculate SHA-256 hash of file.

        Args:
            file_path: Path to file

        Returns:
            Hex digest of file hash
        """
        sha256_hash = hashlib.sha256()
        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                sha256_hash.update(byte_block)
        return sha256_hash.hexdigest()

    def read_document(self, file_path: Path) -> dict:
        """Read and decode one export file.

        Raises:
            LoadError: If the file is missing, unreadable or not a JSON object
        """
        file_path = Path(file_path)
        if not file_path.is_file():
            raise LoadError(f"File not found: {file_path}")

        try:
            # Exports are sometimes written with a BOM
            with open(file_path, "r", encoding="utf-8-sig") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise LoadError(f"Invalid JSON in {file_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise LoadError(f"Could not read {file_path}: {e}") from e

        if not isinstance(document, dict):
            raise LoadError(
                f"Expected a JSON object at the top of {file_path}, "
                f"got {type(document).__name__}"
            )
        return document

    def flatten(self, document: dict) -> pl.DataFrame:
        """Flatten the record array into dotted-path columns.

        Each array element becomes one row. Column names are prefixed with
        the array key, e.g. ``timelineObjects.activitySegment.activityType``.
        """
        records = document.get(self.record_key) or []
        if not records:
            return pl.DataFrame()

        flat = pd.json_normalize(records, sep=".")
        flat.columns = [f"{self.record_key}.{column}" for column in flat.columns]

        for column in flat.columns:
            if flat[column].dtype == object:
                flat[column] = flat[column].map(_to_scalar)
                # A field holding e.g. 3 in one record and "x" in another
                if _has_mixed_kinds(flat[column]):
                    logger.debug(f"Column {column} mixes value types, keeping it as text")
                    flat[column] = flat[column].map(_to_text)

        try:
            return pl.from_pandas(flat)
        except (pa.ArrowException, TypeError) as e:
            raise LoadError(f"Could not convert timeline records to a table: {e}") from e

    def load(self, file_path: Path) -> pl.DataFrame:
        """Load one monthly export as a flat table.

        Args:
            file_path: Path to JSON export

        Returns:
            DataFrame with one row per timeline record
        """
        logger.info(f"Loading timeline records from {file_path}")
        df = self.flatten(self.read_document(file_path))
        logger.info(f"Loaded {len(df)} records with {len(df.columns)} columns from {Path(file_path).name}")
        return df

    def extract_file(self, file_path: Path) -> tuple[pl.DataFrame, dict]:
        """Load one monthly export together with source metadata.

        Args:
            file_path: Path to JSON export

        Returns:
            Tuple of (DataFrame, metadata dict)
        """
        file_path = Path(file_path)
        df = self.load(file_path)

        metadata = {
            "file_path": str(file_path),
            "file_name": file_path.name,
            "file_hash": self.calculate_file_hash(file_path),
            "file_size": file_path.stat().st_size,
            "extraction_timestamp": datetime.now(),
            "record_count": len(df),
            "columns": df.columns,
        }
        return df, metadata
