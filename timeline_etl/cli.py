"""Command-line interface for the timeline activities pipeline."""

import sys
import logging
import argparse
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='timeline',
        description='Timeline Activities - Turn monthly location-history exports into an activities CSV',
        epilog='For more information on a specific command, run: timeline <command> --help'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    subparsers = parser.add_subparsers(
        dest='command',
        help='Available commands',
        metavar='<command>'
    )

    # Build command
    build_parser = subparsers.add_parser(
        'build',
        help='Build the activities CSV from monthly exports',
        description='Filter, map and enrich every monthly export and write one activities CSV'
    )
    build_parser.add_argument(
        '--input-dir',
        help='Directory with <YEAR>_<MONTH>.json exports (or set TIMELINE_INPUT_DIR)'
    )
    build_parser.add_argument(
        '--files',
        nargs='+',
        help='Explicit monthly files, processed in the given order'
    )
    build_parser.add_argument(
        '--output',
        help='Output CSV path (or set TIMELINE_OUTPUT_PATH)'
    )
    build_parser.add_argument(
        '--timezone',
        help='Reference timezone of the export timestamps (default: UTC)'
    )
    build_parser.add_argument(
        '--hour-offset',
        type=int,
        help='Flat hour correction added to every timestamp (default: 2)'
    )

    # Inspect command
    inspect_parser = subparsers.add_parser(
        'inspect',
        help='Show activity types found in one monthly export',
        description='Count raw activity segments per type in a single monthly export'
    )
    inspect_parser.add_argument(
        'file',
        help='Monthly JSON export'
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command is None:
        parser.print_help()
        return

    if args.command == 'build':
        run_build(args)
    elif args.command == 'inspect':
        run_inspect(args)


def run_build(args):
    """Build the activities dataset."""
    from timeline_etl.config import HOUR_OFFSET, INPUT_DIR, OUTPUT_PATH, TIMEZONE
    from timeline_etl.data.pipeline_orchestrator import DatasetBuilder, PipelineConfig
    from timeline_etl.exceptions import TimelineETLError

    try:
        config = PipelineConfig(
            monthly_files=args.files,
            input_directory=Path(args.input_dir) if args.input_dir else INPUT_DIR,
            output_path=Path(args.output) if args.output else OUTPUT_PATH,
            timezone=args.timezone or TIMEZONE,
            hour_offset=args.hour_offset if args.hour_offset is not None else HOUR_OFFSET,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print("=" * 70)
    print("TIMELINE ACTIVITIES BUILD")
    print("=" * 70)

    try:
        report = DatasetBuilder(config).run()
    except TimelineETLError as e:
        print(f"\nERROR: {e}")
        print("No output written")
        sys.exit(1)

    print(f"\nMonthly files processed: {len(report.months)}")
    for month in report.months:
        print(f"  {Path(month.file_path).name}: {month.total_rows} activities "
              f"from {month.raw_records} records")

    print("\nActivities by type:")
    for activity_type, count in report.rows_by_type.items():
        print(f"  {activity_type}: {count}")

    print(f"\nTotal activities: {report.total_rows}")
    print(f"Output: {report.output_path}")
    print(f"Processing time: {report.processing_time_ms} ms")


def run_inspect(args):
    """Count activity types in one monthly export."""
    import polars as pl

    from timeline_etl.config import ACTIVITY_TYPE_COLUMN
    from timeline_etl.etl import TimelineExtractor
    from timeline_etl.exceptions import LoadError
    from timeline_etl.models.activity import ActivityType

    try:
        df, metadata = TimelineExtractor().extract_file(Path(args.file))
    except LoadError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print("=" * 70)
    print(f"TIMELINE FILE: {metadata['file_name']}")
    print("=" * 70)
    print(f"\nRecords: {metadata['record_count']}")
    print(f"Columns: {len(metadata['columns'])}")

    if ACTIVITY_TYPE_COLUMN not in df.columns:
        print("\nNo activity segments found")
        return

    counts = (
        df.filter(pl.col(ACTIVITY_TYPE_COLUMN).is_not_null())
        .group_by(ACTIVITY_TYPE_COLUMN)
        .agg(pl.len().alias("count"))
        .sort(["count", ACTIVITY_TYPE_COLUMN], descending=[True, False])
    )

    supported = {activity_type.value for activity_type in ActivityType}
    print("\nActivity segments by type:")
    for activity_type, count in counts.iter_rows():
        marker = "✅" if activity_type in supported else "  "
        print(f"  {marker} {activity_type}: {count}")


if __name__ == "__main__":
    main()
