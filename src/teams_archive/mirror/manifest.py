"""CSV exports written next to each team's mirrored files."""

from __future__ import annotations

import contextlib
import csv
import logging
import os
from collections.abc import Iterable, Sequence
from typing import Any

logger = logging.getLogger(__name__)

CHANNELS_FILENAME = "Channels.csv"
FOLDERS_FILENAME = "Folders.csv"
FOLDER_COLUMN = "RelativePath"


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return str(value)
    return value


def write_records(records: Sequence[dict[str, Any]], target_path: str) -> int:
    """Write flat records to a CSV file, one row per record.

    Columns are the union of record keys in first-seen order. With no
    records the file is omitted, and a copy left by an earlier run is removed.

    Returns:
        Number of rows written.
    """
    if not records:
        with contextlib.suppress(FileNotFoundError):
            os.remove(target_path)
        return 0
    fieldnames: list[str] = []
    for record in records:
        fieldnames.extend(key for key in record if key not in fieldnames)

    with open(target_path, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        for record in records:
            writer.writerow({key: _cell(value) for key, value in record.items()})
    logger.info("[write_records] csv written; path:%s;rows:%d", target_path, len(records))
    return len(records)


def write_folder_manifest(folders: Iterable[str], target_path: str) -> int:
    """Write sorted relative folder paths to a single-column CSV file.

    Returns:
        Number of rows written (0 and no file when there are no folders).
    """
    return write_records([{FOLDER_COLUMN: folder} for folder in folders], target_path)
