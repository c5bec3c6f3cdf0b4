"""Tests for the activity filter."""

import pytest
import polars as pl

from timeline_etl.etl.transformers.activity_filter import empty_columns, filter_activity, strip_prefix
from timeline_etl.models.activity import ActivityType

PREFIX = "timelineObjects.activitySegment."
TYPE_COLUMN = PREFIX + "activityType"


@pytest.fixture
def raw_records():
    """Flattened records as produced by the extractor."""
    return pl.DataFrame({
        TYPE_COLUMN: ["CYCLING", None, "WALKING", "cycling", "CYCLING"],
        PREFIX + "duration.startTimestamp": [
            "2022-04-01T08:00:00", None, "2022-04-01T17:00:00",
            "2022-04-02T08:00:00", "2022-04-04T06:00:00",
        ],
        PREFIX + "waypointPath.distanceMeters": [5000.0, None, 1500.0, 100.0, None],
        PREFIX + "transitPath.name": [None, None, None, None, None],
        PREFIX + "editConfirmationStatus": ["", None, "CONFIRMED", "", ""],
        "timelineObjects.placeVisit.location.name": [None, "Office", None, None, None],
    })


def test_selects_exact_type(raw_records):
    """Matching is exact and case-sensitive, nulls never match."""
    df = filter_activity(raw_records, ActivityType.CYCLING)

    assert len(df) == 2
    assert df["activityType"].to_list() == ["CYCLING", "CYCLING"]
    assert df["duration.startTimestamp"].to_list() == ["2022-04-01T08:00:00", "2022-04-04T06:00:00"]


def test_accepts_plain_string_tag(raw_records):
    """The tag can be given as its string value."""
    df = filter_activity(raw_records, "WALKING")
    assert df["activityType"].to_list() == ["WALKING"]


def test_prefix_is_stripped(raw_records):
    """Prefixed columns lose the prefix, other columns pass through."""
    df = filter_activity(raw_records, ActivityType.CYCLING)

    assert "activityType" in df.columns
    assert "waypointPath.distanceMeters" in df.columns
    assert "timelineObjects.placeVisit.location.name" in df.columns
    assert not any(column.startswith(PREFIX) for column in df.columns)


def test_schema_kept_without_drop(raw_records):
    """Without dropping, every input column survives."""
    df = filter_activity(raw_records, ActivityType.CYCLING, drop_empty_columns=False)
    assert len(df.columns) == len(raw_records.columns)


def test_drop_empty_columns(raw_records):
    """Columns null or empty on every selected row are removed."""
    df = filter_activity(raw_records, ActivityType.CYCLING, drop_empty_columns=True)

    assert "transitPath.name" not in df.columns
    assert "editConfirmationStatus" not in df.columns
    assert "timelineObjects.placeVisit.location.name" not in df.columns
    assert "waypointPath.distanceMeters" in df.columns
    assert "activityType" in df.columns


def test_drop_empty_only_looks_at_selected_rows(raw_records):
    """A column filled for another type is still empty for this one."""
    df = filter_activity(raw_records, ActivityType.WALKING, drop_empty_columns=True)
    assert "editConfirmationStatus" in df.columns
    assert "timelineObjects.placeVisit.location.name" not in df.columns


def test_no_matching_rows(raw_records):
    """No match gives zero rows with a stable schema."""
    df = filter_activity(raw_records, ActivityType.IN_BUS, drop_empty_columns=True)

    assert df.is_empty()
    assert len(df.columns) == len(raw_records.columns)
    assert "activityType" in df.columns


def test_missing_type_column():
    """Records without any activity segment yield no rows."""
    visits = pl.DataFrame({"timelineObjects.placeVisit.location.name": ["Office", "Home"]})

    df = filter_activity(visits, ActivityType.CYCLING)

    assert df.is_empty()
    assert df.columns == visits.columns


def test_empty_input():
    """A zero-column table stays empty."""
    df = filter_activity(pl.DataFrame(), ActivityType.CYCLING)
    assert df.is_empty()


def test_empty_columns_helper():
    """Null and empty-marker columns are reported."""
    df = pl.DataFrame({
        "a": [None, None],
        "b": ["", None],
        "c": ["", "x"],
        "d": [0, None],
    })
    assert empty_columns(df) == ["a", "b"]
    assert empty_columns(df, markers=()) == ["a"]


def test_strip_prefix_helper():
    """Only the leading prefix is removed."""
    df = pl.DataFrame({"p.a": [1], "b": [2], "x.p.c": [3]})
    assert strip_prefix(df, "p.").columns == ["a", "b", "x.p.c"]
