"""Map per-type source columns onto the uniform activity schema."""

import logging

import polars as pl

from timeline_etl.config import FALLBACK_DISTANCE_FIELD
from timeline_etl.exceptions import MappingError
from timeline_etl.models.activity import FieldMapping

logger = logging.getLogger(__name__)


def capture_fallback(df: pl.DataFrame, column: str = FALLBACK_DISTANCE_FIELD) -> pl.Series:
    """Coarse distance column, or an all-null series when the export has none."""
    if column in df.columns:
        return df.get_column(column).cast(pl.Float64).alias(column)
    return pl.Series(column, [None] * len(df), dtype=pl.Float64)


def map_fields(
    df: pl.DataFrame,
    mapping: FieldMapping,
    fallback_column: str = FALLBACK_DISTANCE_FIELD,
) -> tuple[pl.DataFrame, pl.Series]:
    """Rename and select the mapped fields of one activity type.

    Args:
        df: Activity-filtered, prefix-stripped records
        mapping: Output-field -> source-field pairs, in output order
        fallback_column: Coarse distance column captured before renaming

    Returns:
        Tuple of (mapped DataFrame, fallback distance series)

    Raises:
        MappingError: If a declared source column is missing
    """
    fallback = capture_fallback(df, fallback_column)

    missing = [source for source in mapping.source_fields if source not in df.columns]
    if missing:
        if len(df) == 0:
            # Nothing of this type in the export, the columns may never appear
            logger.debug(
                f"No {mapping.activity_type.value} rows and no columns {missing}, "
                "returning empty mapped table"
            )
            empty = pl.DataFrame(schema={output: pl.Utf8 for output in mapping.output_fields})
            return empty, fallback
        raise MappingError(
            f"{mapping.activity_type.value}: source fields missing from input: "
            f"{', '.join(missing)}"
        )

    mapped = df.select([pl.col(source).alias(output) for output, source in mapping.pairs])
    return mapped, fallback
