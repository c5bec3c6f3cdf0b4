"""Pytest configuration and fixtures."""

import json
import shutil
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def test_data_dir():
    """Create a temporary directory for test data."""
    temp_dir = tempfile.mkdtemp(prefix="timeline_test_")
    yield Path(temp_dir)
    shutil.rmtree(temp_dir)


def activity_segment(
    activity_type="CYCLING",
    start="2022-04-01T08:00:00",
    end="2022-04-01T08:30:00",
    waypoint_meters=None,
    transit_meters=None,
    distance=None,
):
    """Build one timeline entry holding an activity segment."""
    segment = {
        "startLocation": {"latitudeE7": 482085000, "longitudeE7": 163721000},
        "endLocation": {"latitudeE7": 482200000, "longitudeE7": 163900000},
        "duration": {"startTimestamp": start, "endTimestamp": end},
        "activityType": activity_type,
        "confidence": "HIGH",
        "activities": [
            {"activityType": activity_type, "probability": 91.5},
            {"activityType": "WALKING", "probability": 4.2},
        ],
    }
    if distance is not None:
        segment["distance"] = distance
    if waypoint_meters is not None:
        segment["waypointPath"] = {
            "waypoints": [
                {"latE7": 482085000, "lngE7": 163721000},
                {"latE7": 482200000, "lngE7": 163900000},
            ],
            "source": "INFERRED",
            "distanceMeters": waypoint_meters,
        }
    if transit_meters is not None:
        segment["transitPath"] = {"name": "S1", "distanceMeters": transit_meters}
    return {"activitySegment": segment}


def place_visit(start="2022-04-01T09:00:00", end="2022-04-01T17:00:00"):
    """Build one timeline entry holding a place visit."""
    return {
        "placeVisit": {
            "location": {"latitudeE7": 482085000, "longitudeE7": 163721000, "name": "Office"},
            "duration": {"startTimestamp": start, "endTimestamp": end},
        }
    }


@pytest.fixture
def sample_timeline():
    """One month with every supported activity type plus noise."""
    return {
        "timelineObjects": [
            activity_segment("CYCLING", "2022-04-01T08:00:00", "2022-04-01T08:30:00",
                             waypoint_meters=5000, distance=5100),
            place_visit(),
            activity_segment("WALKING", "2022-04-01T17:00:00", "2022-04-01T17:20:00",
                             waypoint_meters=1500),
            activity_segment("IN_TRAIN", "2022-04-02T10:00:00", "2022-04-02T11:00:00",
                             transit_meters=60000, distance=58000),
            activity_segment("IN_BUS", "2022-04-03T19:00:00", "2022-04-03T19:15:00",
                             distance=4000),
            activity_segment("CYCLING", "2022-04-04T06:00:00", "2022-04-04T07:00:00",
                             distance=20000),
            activity_segment("IN_PASSENGER_VEHICLE", "2022-04-05T12:00:00", "2022-04-05T13:00:00",
                             distance=80000),
        ]
    }


@pytest.fixture
def write_timeline(test_data_dir):
    """Write a timeline document to a JSON file in the test directory."""
    def _write(document, filename="2022_APRIL.json", subdir=None):
        directory = test_data_dir / subdir if subdir else test_data_dir
        directory.mkdir(parents=True, exist_ok=True)
        file_path = directory / filename
        file_path.write_text(json.dumps(document), encoding="utf-8")
        return file_path

    return _write
