"""Select the raw records of one activity type."""

import logging
from typing import Iterable

import polars as pl

from timeline_etl.config import ACTIVITY_TYPE_COLUMN, COLUMN_PREFIX, EMPTY_MARKERS
from timeline_etl.models.activity import ActivityType

logger = logging.getLogger(__name__)


def empty_columns(df: pl.DataFrame, markers: Iterable[str] = EMPTY_MARKERS) -> list[str]:
    """Columns that are null or an empty marker on every row."""
    markers = list(markers)
    empty = []
    for column in df.columns:
        series = df.get_column(column)
        if series.null_count() == len(series):
            empty.append(column)
        elif series.dtype == pl.Utf8 and markers:
            if (series.is_null() | series.is_in(markers)).all():
                empty.append(column)
    return empty


def strip_prefix(df: pl.DataFrame, prefix: str) -> pl.DataFrame:
    """Remove ``prefix`` from every column name that starts with it."""
    renames = {
        column: column[len(prefix):]
        for column in df.columns
        if prefix and column.startswith(prefix)
    }
    return df.rename(renames) if renames else df


def filter_activity(
    df: pl.DataFrame,
    activity_type: ActivityType,
    drop_empty_columns: bool = False,
    prefix: str = COLUMN_PREFIX,
    activity_type_column: str = ACTIVITY_TYPE_COLUMN,
) -> pl.DataFrame:
    """Keep the rows of one activity type and strip the segment prefix.

    Args:
        df: Flattened raw records
        activity_type: Type to select (exact, case-sensitive match)
        drop_empty_columns: Drop columns that are empty on every selected row
        prefix: Column-name prefix to remove
        activity_type_column: Raw column holding the activity type

    Returns:
        New DataFrame with the selected rows
    """
    tag = ActivityType(activity_type).value

    if activity_type_column in df.columns and df.schema[activity_type_column] == pl.Utf8:
        selected = df.filter(pl.col(activity_type_column) == tag)
    else:
        logger.debug(f"No string column {activity_type_column!r}, no {tag} rows")
        selected = df.clear()

    # Zero rows would make every column "empty", keep the schema instead
    if drop_empty_columns and len(selected) > 0:
        dropped = empty_columns(selected)
        if dropped:
            logger.debug(f"Dropping {len(dropped)} empty columns for {tag}")
            selected = selected.drop(dropped)

    logger.debug(f"Selected {len(selected)} {tag} rows")
    return strip_prefix(selected, prefix)
