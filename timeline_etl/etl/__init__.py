"""Extraction and transformation stages of the activities pipeline."""

from .extractors.timeline_extractor import TimelineExtractor
from .transformers.activity_filter import filter_activity
from .transformers.field_mapper import map_fields
from .transformers.feature_enricher import EnrichmentSettings, FeatureEnricher, empty_activities

__all__ = [
    "TimelineExtractor",
    "filter_activity",
    "map_fields",
    "EnrichmentSettings",
    "FeatureEnricher",
    "empty_activities",
]
