"""
Merger Module - Opening several log files as one timeline

Each file is read and parsed on its own (reads run concurrently), entries are
tagged with the file they came from, ordered by timestamp and renumbered.
"""
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from .log_parser import LogEntry, parse_log_file
from .schema import LogSchema, DEFAULT_SCHEMA

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# fromisoformat only takes 3 or 6 fraction digits on older interpreters
_FRACTION_RE = re.compile(r'([.,])(\d+)')


def parse_timestamp(timestamp: str) -> datetime:
    """
    Parse a timestamp for ordering

    Returns:
        Aware datetime; naive values are read as UTC, anything unparseable
        (including empty) is the epoch
    """
    if not timestamp:
        return EPOCH

    value = timestamp.strip()
    value = _FRACTION_RE.sub(lambda m: '.' + m.group(2)[:6].ljust(6, '0'), value, count=1)
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return EPOCH

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def merge_entries(per_file: Iterable[Sequence[LogEntry]]) -> List[LogEntry]:
    """
    Merge already tagged per-file entry lists

    Concatenates in the given order, sorts stably by timestamp and reassigns
    original_line_number from 1 in merged order.
    """
    combined: List[LogEntry] = []
    for entries in per_file:
        combined.extend(entries)

    combined.sort(key=lambda entry: parse_timestamp(entry.timestamp))

    return [
        replace(entry, original_line_number=index)
        for index, entry in enumerate(combined, start=1)
    ]


def _load_one(path: str, schema: LogSchema, reader: Callable) -> List[LogEntry]:
    result = reader(path)
    if not result.success:
        logger.warning("Skipping %s in merge: %s", path, result.error)
        return []

    source = os.path.basename(path) or path
    return [replace(entry, source_file=source) for entry in parse_log_file(result.content, schema)]


def merge_log_files(
    paths: Sequence[str],
    schema: LogSchema = DEFAULT_SCHEMA,
    reader: Optional[Callable] = None,
    max_workers: Optional[int] = None,
) -> List[LogEntry]:
    """
    Read, parse and merge several log files

    Args:
        paths: Files to merge; their order breaks timestamp ties
        schema: Parsing schema used for every file
        reader: Callable returning a ReadResult for a path (default: read_log_file)
        max_workers: Thread pool size (default: one per file, capped at 8)

    Returns:
        Entries ordered by timestamp, numbered 1..n, each with source_file set
    """
    if not paths:
        return []

    if reader is None:
        from logstudio.sysmon.log_reader import read_log_file
        reader = read_log_file

    workers = max_workers or min(len(paths), 8)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        per_file = list(pool.map(lambda p: _load_one(p, schema, reader), paths))

    merged = merge_entries(per_file)
    logger.info("Merged %d entries from %d files", len(merged), len(paths))
    return merged
