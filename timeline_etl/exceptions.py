"""Errors raised by the timeline activities pipeline."""


class TimelineETLError(Exception):
    """Base class for pipeline errors."""


class LoadError(TimelineETLError):
    """A monthly export file is missing or is not valid JSON."""


class MappingError(TimelineETLError):
    """A declared source field is absent from the filtered activity table."""


class TimestampParseError(TimelineETLError):
    """A timestamp string does not match the expected ISO-8601 format."""
