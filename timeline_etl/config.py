"""Centralized configuration for the timeline activities pipeline."""

import os
from pathlib import Path

from timeline_etl.models.activity import ActivityType, FieldMapping

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# Monthly exports are read from here unless a file list is given explicitly
INPUT_DIR = Path(os.environ.get(
    "TIMELINE_INPUT_DIR",
    str(DATA_DIR / "bronze" / "Semantic Location History")
))

OUTPUT_PATH = Path(os.environ.get(
    "TIMELINE_OUTPUT_PATH",
    str(DATA_DIR / "gold" / "activities.csv")
))

# Empty means "discover from INPUT_DIR"
MONTHLY_FILES: list[Path] = []

# Flattened export columns
RECORD_ARRAY_KEY = "timelineObjects"
COLUMN_PREFIX = "timelineObjects.activitySegment."
ACTIVITY_TYPE_COLUMN = COLUMN_PREFIX + "activityType"
FALLBACK_DISTANCE_FIELD = "distance"
EMPTY_MARKERS = ("",)

# Per-type mapping from output field to prefix-stripped source column
FIELD_MAPPINGS = {
    ActivityType.CYCLING: FieldMapping(
        activity_type=ActivityType.CYCLING,
        pairs=(
            ("activityType", "activityType"),
            ("startTimestamp", "duration.startTimestamp"),
            ("endTimestamp", "duration.endTimestamp"),
            ("kilometers", "waypointPath.distanceMeters"),
        ),
    ),
    ActivityType.WALKING: FieldMapping(
        activity_type=ActivityType.WALKING,
        pairs=(
            ("activityType", "activityType"),
            ("startTimestamp", "duration.startTimestamp"),
            ("endTimestamp", "duration.endTimestamp"),
            ("kilometers", "waypointPath.distanceMeters"),
        ),
    ),
    ActivityType.IN_TRAIN: FieldMapping(
        activity_type=ActivityType.IN_TRAIN,
        pairs=(
            ("activityType", "activityType"),
            ("startTimestamp", "duration.startTimestamp"),
            ("endTimestamp", "duration.endTimestamp"),
            ("kilometers", "transitPath.distanceMeters"),
        ),
    ),
    ActivityType.IN_BUS: FieldMapping(
        activity_type=ActivityType.IN_BUS,
        pairs=(
            ("activityType", "activityType"),
            ("startTimestamp", "duration.startTimestamp"),
            ("endTimestamp", "duration.endTimestamp"),
            ("kilometers", "distance"),
        ),
    ),
}

# Timestamps are read as wall clock in TIMEZONE and then shifted by a flat
# HOUR_OFFSET (summer-time correction, not derived from the calendar)
TIMEZONE = os.environ.get("TIMELINE_TIMEZONE", "UTC")
HOUR_OFFSET = int(os.environ.get("TIMELINE_HOUR_OFFSET", "2"))

# CSV output
# Fractional seconds are written only when present
CSV_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S%.f%z"
