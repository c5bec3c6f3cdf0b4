"""Discovery of monthly timeline exports in chronological order."""

import calendar
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

# Exports are named like 2022_APRIL.json, usually inside one folder per year
MONTHLY_FILE_PATTERN = re.compile(r"^(?P<year>\d{4})_(?P<month>[A-Za-z]+)$")
MONTH_NUMBERS = {name.upper(): number for number, name in enumerate(calendar.month_name) if name}


def month_key(file_path: Path) -> Optional[Tuple[int, int]]:
    """(year, month) of a monthly export file name, or None if it is not one."""
    match = MONTHLY_FILE_PATTERN.match(Path(file_path).stem)
    if not match:
        return None
    month = MONTH_NUMBERS.get(match.group("month").upper())
    if month is None:
        return None
    return int(match.group("year")), month


def discover_monthly_files(input_dir: Path) -> List[Path]:
    """
    Find monthly exports under a directory, oldest first.

    Args:
        input_dir: Directory searched recursively for ``*.json``

    Returns:
        Paths sorted by (year, month)
    """
    input_dir = Path(input_dir)
    if not input_dir.is_dir():
        logger.warning(f"Input directory not found: {input_dir}")
        return []

    dated = []
    for path in sorted(input_dir.rglob("*.json")):
        key = month_key(path)
        if key is None:
            logger.warning(f"Skipping {path.name}: not named like <YEAR>_<MONTH>.json")
            continue
        dated.append((key, path))

    dated.sort(key=lambda item: item[0])
    files = [path for _, path in dated]
    logger.info(f"Found {len(files)} monthly files in {input_dir}")
    return files
