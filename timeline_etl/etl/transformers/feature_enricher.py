"""
Feature enrichment for mapped activity tables.

Turns the uniform mapped schema (activityType, startTimestamp, endTimestamp,
kilometers in meters) into the final activity rows: distance in kilometers,
localized timestamps, duration, speed and calendar features.
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import polars as pl
from pydantic import BaseModel, ConfigDict, field_validator

from timeline_etl.config import HOUR_OFFSET, TIMEZONE
from timeline_etl.exceptions import TimestampParseError
from timeline_etl.models.activity import ActivityRow, TimeOfDay

logger = logging.getLogger(__name__)

TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%S%.f", "%Y-%m-%dT%H:%M:%S")
FALLBACK_COLUMN = "__fallback_distance"
MICROSECONDS_PER_HOUR = 3_600_000_000


class EnrichmentSettings(BaseModel):
    """Timezone handling applied to parsed timestamps."""
    model_config = ConfigDict(frozen=True)

    timezone: str = TIMEZONE
    hour_offset: int = HOUR_OFFSET

    @field_validator("timezone")
    @classmethod
    def known_timezone(cls, v):
        """Reject identifiers the tz database does not know."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


def activity_schema(timezone: str) -> dict:
    """Column dtypes of an enriched activities table."""
    timestamp = pl.Datetime("us", timezone)
    dtypes = {
        "activityType": pl.Utf8,
        "startTimestamp": timestamp,
        "endTimestamp": timestamp,
        "kilometers": pl.Float64,
        "hours": pl.Float64,
        "speed": pl.Float64,
        "timeOfDay": pl.Utf8,
        "weekday": pl.Utf8,
        "weekOfYear": pl.Int32,
        "month": pl.Utf8,
    }
    return {column: dtypes[column] for column in ActivityRow.columns()}


def empty_activities(timezone: str) -> pl.DataFrame:
    """Zero-row activities table with the enriched schema."""
    return pl.DataFrame(schema=activity_schema(timezone))


def time_of_day(hour: pl.Expr) -> pl.Expr:
    """Bucket an hour-of-day expression into Night/Morning/Afternoon/Evening."""
    return (
        pl.when(hour < 6).then(pl.lit(TimeOfDay.NIGHT.value))
        .when(hour < 12).then(pl.lit(TimeOfDay.MORNING.value))
        .when(hour < 18).then(pl.lit(TimeOfDay.AFTERNOON.value))
        .otherwise(pl.lit(TimeOfDay.EVENING.value))
    )


class FeatureEnricher:
    """Compute derived activity features."""

    def __init__(self, settings: EnrichmentSettings = None):
        """
        Initialize feature enricher.

        Args:
            settings: Reference timezone and flat hour offset
        """
        self.settings = settings or EnrichmentSettings()

    def parse_timestamps(self, df: pl.DataFrame, column: str, required: bool) -> pl.Series:
        """
        Parse an ISO-8601 wall-clock column and apply the timezone settings.

        Accepts ``YYYY-MM-DDTHH:MM:SS`` with optional fractional seconds and
        an optional trailing ``Z``.

        Args:
            df: Mapped activities
            column: Timestamp column name
            required: Whether null values are errors

        Returns:
            Localized, offset-corrected timestamps

        Raises:
            TimestampParseError: On values that do not parse, or nulls in a
                required column
        """
        raw = pl.col(column).cast(pl.Utf8).str.strip_chars().str.strip_chars_end("Z")
        parsed = pl.coalesce([
            raw.str.to_datetime(format=fmt, strict=False, time_unit="us")
            for fmt in TIMESTAMP_FORMATS
        ])
        check = df.select(
            pl.col(column).cast(pl.Utf8).alias("raw"),
            parsed.alias("parsed"),
        )

        invalid = pl.col("parsed").is_null()
        if not required:
            invalid = invalid & pl.col("raw").is_not_null()
        bad = check.filter(invalid)
        if len(bad) > 0:
            samples = bad["raw"].head(5).to_list()
            raise TimestampParseError(
                f"{len(bad)} invalid {column} value(s), e.g. {samples}"
            )

        timezone = self.settings.timezone
        check = check.with_columns(
            pl.col("parsed")
            .dt.replace_time_zone(timezone, ambiguous="earliest", non_existent="null")
            .alias("localized")
        )

        # Wall-clock times skipped by a DST transition
        gap = check.filter(pl.col("parsed").is_not_null() & pl.col("localized").is_null())
        if len(gap) > 0:
            samples = gap["raw"].head(5).to_list()
            raise TimestampParseError(
                f"{len(gap)} {column} value(s) do not exist in {timezone}, e.g. {samples}"
            )

        return (
            check["localized"]
            .dt.offset_by(f"{self.settings.hour_offset}h")
            .alias(column)
        )

    def enrich(self, df: pl.DataFrame, fallback_distance: pl.Series) -> pl.DataFrame:
        """
        Enrich a mapped activities table.

        Args:
            df: Mapped activities (activityType, startTimestamp,
                endTimestamp, kilometers in meters)
            fallback_distance: Coarse distance in meters, aligned with ``df``

        Returns:
            New DataFrame with the activity row columns only
        """
        if len(fallback_distance) != len(df):
            raise ValueError(
                f"Fallback distance has {len(fallback_distance)} values "
                f"for {len(df)} activities"
            )

        # Precise distance first, coarse distance only where it is missing
        df = df.with_columns(
            fallback_distance.cast(pl.Float64).alias(FALLBACK_COLUMN)
        ).with_columns(
            pl.coalesce([pl.col("kilometers").cast(pl.Float64), pl.col(FALLBACK_COLUMN)])
            .alias("kilometers")
        ).drop(FALLBACK_COLUMN)

        df = df.with_columns(
            self.parse_timestamps(df, "startTimestamp", required=True),
            self.parse_timestamps(df, "endTimestamp", required=False),
        )

        df = df.with_columns(
            (pl.col("kilometers") / 1000).alias("kilometers"),
            (
                (pl.col("endTimestamp") - pl.col("startTimestamp")).dt.total_microseconds()
                / MICROSECONDS_PER_HOUR
            ).alias("hours"),
        )

        start = pl.col("startTimestamp")
        df = df.with_columns(
            (pl.col("kilometers") / pl.col("hours")).alias("speed"),
            time_of_day(start.dt.hour()).alias("timeOfDay"),
            start.dt.strftime("%A").alias("weekday"),
            start.dt.week().alias("weekOfYear"),
            start.dt.strftime("%B").alias("month"),
        )

        schema = activity_schema(self.settings.timezone)
        return df.select([pl.col(column).cast(dtype) for column, dtype in schema.items()])
