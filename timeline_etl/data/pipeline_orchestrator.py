"""
Data pipeline orchestrator for timeline activities.

Runs filter, field mapping and feature enrichment for every activity type of
every monthly export and persists the combined activities dataset.
"""

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import polars as pl

from timeline_etl.config import (
    ACTIVITY_TYPE_COLUMN,
    COLUMN_PREFIX,
    FIELD_MAPPINGS,
    HOUR_OFFSET,
    INPUT_DIR,
    MONTHLY_FILES,
    OUTPUT_PATH,
    TIMEZONE,
)
from timeline_etl.etl import (
    FeatureEnricher,
    EnrichmentSettings,
    TimelineExtractor,
    empty_activities,
    filter_activity,
    map_fields,
)
from timeline_etl.exceptions import TimelineETLError
from timeline_etl.export.csv_writer import write_activities_csv
from timeline_etl.models.activity import ActivityType, BuildReport, FieldMapping, MonthReport
from .monthly_files import discover_monthly_files

logger = logging.getLogger(__name__)


class PipelineConfig:
    """Configuration for a dataset build."""

    def __init__(
        self,
        monthly_files: Optional[Sequence[Path]] = None,
        input_directory: Path = INPUT_DIR,
        output_path: Path = OUTPUT_PATH,
        column_prefix: str = COLUMN_PREFIX,
        activity_type_column: str = ACTIVITY_TYPE_COLUMN,
        field_mappings: Optional[Dict[ActivityType, FieldMapping]] = None,
        timezone: str = TIMEZONE,
        hour_offset: int = HOUR_OFFSET,
        drop_empty_columns: bool = False,
    ):
        self.monthly_files = [Path(p) for p in (monthly_files or MONTHLY_FILES)]
        self.input_directory = Path(input_directory)
        self.output_path = Path(output_path)
        self.column_prefix = column_prefix
        self.activity_type_column = activity_type_column
        self.field_mappings = field_mappings or FIELD_MAPPINGS
        self.enrichment = EnrichmentSettings(timezone=timezone, hour_offset=hour_offset)
        self.drop_empty_columns = drop_empty_columns

    def resolve_monthly_files(self) -> List[Path]:
        """Explicit file list, or the chronologically discovered one."""
        if self.monthly_files:
            return list(self.monthly_files)
        return discover_monthly_files(self.input_directory)


class MonthAggregator:
    """Build the activity rows of one monthly export."""

    def __init__(self, config: PipelineConfig, extractor: Optional[TimelineExtractor] = None):
        self.config = config
        self.extractor = extractor or TimelineExtractor()
        self.enricher = FeatureEnricher(config.enrichment)

    def process_activity_type(self, raw: pl.DataFrame, activity_type: ActivityType) -> pl.DataFrame:
        """Filter, map and enrich the rows of one activity type."""
        mapping = self.config.field_mappings[activity_type]

        selected = filter_activity(
            raw,
            activity_type,
            drop_empty_columns=self.config.drop_empty_columns,
            prefix=self.config.column_prefix,
            activity_type_column=self.config.activity_type_column,
        )
        mapped, fallback_distance = map_fields(selected, mapping)
        return self.enricher.enrich(mapped, fallback_distance)

    def aggregate(self, file_path: Path) -> Tuple[pl.DataFrame, MonthReport]:
        """
        Process every activity type of one monthly file.

        Args:
            file_path: Monthly JSON export

        Returns:
            Tuple of (activities in type order, month report)
        """
        raw, metadata = self.extractor.extract_file(file_path)
        report = MonthReport(
            file_path=str(file_path),
            file_hash=metadata["file_hash"],
            raw_records=metadata["record_count"],
        )

        frames = []
        for activity_type in ActivityType:
            activities = self.process_activity_type(raw, activity_type)
            report.rows_by_type[activity_type.value] = len(activities)
            frames.append(activities)
            logger.info(f"{Path(file_path).name}: {len(activities)} {activity_type.value} activities")

        month = pl.concat(frames, how="vertical")
        report.total_rows = len(month)
        return month, report


class DatasetBuilder:
    """
    Build the activities dataset from all monthly exports.

    Files are processed in order and any pipeline error aborts the build
    before the output file is written.
    """

    def __init__(self, config: PipelineConfig, extractor: Optional[TimelineExtractor] = None):
        """
        Initialize dataset builder.

        Args:
            config: Pipeline configuration
            extractor: Record loader, a default one when omitted
        """
        self.config = config
        self.aggregator = MonthAggregator(config, extractor)
        self.month_reports: List[MonthReport] = []

    def build(self) -> pl.DataFrame:
        """Aggregate every monthly file and concatenate in file order."""
        files = self.config.resolve_monthly_files()
        self.month_reports = []

        if not files:
            logger.warning("No monthly files to process")
            return empty_activities(self.config.enrichment.timezone)

        frames = []
        for file_path in files:
            try:
                month, report = self.aggregator.aggregate(file_path)
            except TimelineETLError as e:
                logger.error(f"Aborting build, failed on {file_path}: {e}")
                raise
            frames.append(month)
            self.month_reports.append(report)

        dataset = pl.concat(frames, how="vertical")
        logger.info(f"Built dataset with {len(dataset)} activities from {len(files)} files")
        return dataset

    def run(self) -> BuildReport:
        """Build the dataset and write it to the configured CSV path."""
        started = time.perf_counter()

        dataset = self.build()
        output_path = write_activities_csv(dataset, self.config.output_path)

        return BuildReport(
            output_path=str(output_path),
            months=self.month_reports,
            total_rows=len(dataset),
            processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
