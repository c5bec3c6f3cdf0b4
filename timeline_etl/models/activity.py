"""Activity data models."""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ActivityType(str, Enum):
    """Activity segment types taken from the export, in processing order."""
    CYCLING = "CYCLING"
    WALKING = "WALKING"
    IN_TRAIN = "IN_TRAIN"
    IN_BUS = "IN_BUS"


class TimeOfDay(str, Enum):
    """Six-hour buckets of the local start hour."""
    NIGHT = "Night"  # 00-06
    MORNING = "Morning"  # 06-12
    AFTERNOON = "Afternoon"  # 12-18
    EVENING = "Evening"  # 18-24


# Fields every per-type mapping has to produce
MAPPED_FIELDS = ("activityType", "startTimestamp", "endTimestamp", "kilometers")


class FieldMapping(BaseModel):
    """Ordered output-field -> source-field pairs for one activity type."""
    model_config = ConfigDict(frozen=True)

    activity_type: ActivityType
    pairs: Tuple[Tuple[str, str], ...]

    @model_validator(mode="after")
    def check_outputs(self):
        """Every mapping must produce the uniform mapped schema exactly once."""
        outputs = [output for output, _ in self.pairs]
        if sorted(outputs) != sorted(MAPPED_FIELDS):
            raise ValueError(
                f"Mapping for {self.activity_type.value} must declare each of "
                f"{', '.join(MAPPED_FIELDS)} exactly once, got {outputs}"
            )
        return self

    @property
    def output_fields(self) -> List[str]:
        return [output for output, _ in self.pairs]

    @property
    def source_fields(self) -> List[str]:
        return [source for _, source in self.pairs]


class ActivityRow(BaseModel):
    """One enriched activity, as written to the activities CSV.

    Field order defines the output column order.
    """
    model_config = ConfigDict(populate_by_name=True)

    activity_type: ActivityType = Field(alias="activityType")
    start_timestamp: datetime = Field(alias="startTimestamp")
    end_timestamp: Optional[datetime] = Field(default=None, alias="endTimestamp")
    kilometers: Optional[float] = None
    hours: Optional[float] = None
    speed: Optional[float] = None
    time_of_day: TimeOfDay = Field(alias="timeOfDay")
    weekday: str
    week_of_year: int = Field(alias="weekOfYear")
    month: str

    @classmethod
    def columns(cls) -> List[str]:
        """Output column names in order."""
        return [field.alias or name for name, field in cls.model_fields.items()]


class MonthReport(BaseModel):
    """Outcome of aggregating one monthly export file."""

    file_path: str
    file_hash: Optional[str] = None
    raw_records: int = 0
    rows_by_type: Dict[str, int] = Field(default_factory=dict)
    total_rows: int = 0


class BuildReport(BaseModel):
    """Outcome of a complete dataset build."""

    output_path: str
    months: List[MonthReport] = Field(default_factory=list)
    total_rows: int = 0
    processing_time_ms: int = 0
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def rows_by_type(self) -> Dict[str, int]:
        """Row counts per activity type across all months."""
        totals = {activity_type.value: 0 for activity_type in ActivityType}
        for month in self.months:
            for activity_type, count in month.rows_by_type.items():
                totals[activity_type] = totals.get(activity_type, 0) + count
        return totals
