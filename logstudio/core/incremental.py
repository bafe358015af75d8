"""
Incremental Loader Module - Re-parsing a log file as it changes

Handles:
- Initial full parse
- Growth: only the appended text and the last record are parsed, with correct line numbers
- Shrink (truncation, rotation, rewrite): full re-parse
- Schema changes: full re-parse on the next reload
- Read failures: previous entries are kept untouched

Sizes are measured in characters of the decoded text, the same unit used
to slice the content.

The record still open at the end of the previous read (it holds an unfinished
last line, or it would take the next line as a continuation) is dropped and
parsed again from its first line. A writer flushing a partial line therefore
never produces a split record or a repeated line number, and the entries
always equal a full parse of the content.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .log_parser import LogEntry, parse_log_file
from .schema import LogSchema, DEFAULT_SCHEMA

logger = logging.getLogger(__name__)


class LoaderState(Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"


class ReloadMode(Enum):
    INITIAL = "initial"
    APPENDED = "appended"
    RELOADED = "reloaded"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class ReloadResult:
    """
    Outcome of one reload cycle

    For APPENDED, the previous entries minus the last `dropped` ones, followed
    by new_entries, equal entries.
    """
    entries: Tuple[LogEntry, ...]
    new_entries: Tuple[LogEntry, ...]
    last_size: int
    mode: ReloadMode
    dropped: int = 0

    @property
    def changed(self) -> bool:
        return self.mode is not ReloadMode.UNCHANGED


def count_complete_lines(text: str) -> int:
    """Number of newline-terminated lines in text"""
    return text.count('\n')


def _append(entries: Sequence[LogEntry], last_size: int, content: str,
            schema: LogSchema) -> List[LogEntry]:
    prefix = content[:last_size]
    kept = list(entries)

    # the line the previous read ended on: unfinished, or the empty line after
    # a final newline, which an open record counts as a continuation
    open_line = count_complete_lines(prefix) + 1
    restart_line = open_line
    if kept and kept[-1].original_line_number + kept[-1].line_count - 1 >= open_line:
        restart_line = kept.pop().original_line_number

    start = prefix.rfind('\n') + 1
    for _ in range(open_line - restart_line):
        start = content.rfind('\n', 0, start - 1) + 1

    return kept + parse_log_file(content[start:], schema, restart_line - 1)


def apply_reload(
    entries: Sequence[LogEntry],
    last_size: int,
    content: str,
    schema: LogSchema = DEFAULT_SCHEMA,
    initial: bool = False,
) -> Tuple[List[LogEntry], int, ReloadMode]:
    """
    Compute the entry sequence for newly read content

    Args:
        entries: Entries parsed so far
        last_size: Content length at the previous load
        content: Full current content of the file
        schema: Parsing schema
        initial: Force a full parse (first load or schema change)

    Returns:
        Tuple of (entries, new size, mode)
    """
    current_size = len(content)

    if initial:
        return parse_log_file(content, schema), current_size, ReloadMode.INITIAL

    if current_size > last_size:
        return _append(entries, last_size, content, schema), current_size, ReloadMode.APPENDED

    if current_size < last_size:
        return parse_log_file(content, schema), current_size, ReloadMode.RELOADED

    return list(entries), last_size, ReloadMode.UNCHANGED


class IncrementalLoader:
    """
    Per-source loading state machine

    EMPTY -> LOADING -> LOADED, then LOADED -> LOADING -> LOADED on every
    change notification. Not thread-safe; callers serialize reloads.
    """

    def __init__(self, schema: LogSchema = DEFAULT_SCHEMA):
        self.schema = schema
        self.state = LoaderState.EMPTY
        self.entries: Tuple[LogEntry, ...] = ()
        self.last_size = 0
        self.last_error: Optional[str] = None

    def reload(self, content: str) -> ReloadResult:
        """
        Apply newly read content

        Args:
            content: Full current file content

        Returns:
            ReloadResult with all entries and the ones added by this cycle
        """
        initial = self.state is LoaderState.EMPTY
        previous_state = self.state
        self.state = LoaderState.LOADING

        try:
            entries, size, mode = apply_reload(
                self.entries, self.last_size, content, self.schema, initial=initial
            )
        except Exception:
            self.state = previous_state
            raise

        dropped = 0
        if mode is ReloadMode.APPENDED:
            common = 0
            for old, new in zip(self.entries, entries):
                if old is not new:
                    break
                common += 1
            dropped = len(self.entries) - common
            new_entries = tuple(entries[common:])
        elif mode is ReloadMode.UNCHANGED:
            new_entries = ()
        else:
            new_entries = tuple(entries)

        self.entries = tuple(entries)
        self.last_size = size
        self.last_error = None
        self.state = LoaderState.LOADED

        if mode is not ReloadMode.UNCHANGED:
            logger.info("%s load: %d new entries, %d total",
                        mode.value, len(new_entries), len(self.entries))

        return ReloadResult(self.entries, new_entries, self.last_size, mode, dropped)

    def reload_failed(self, error: str) -> ReloadResult:
        """Record a failed read; entries and size stay as they were"""
        self.last_error = error
        logger.warning("Reload skipped: %s", error)
        return ReloadResult(self.entries, (), self.last_size, ReloadMode.UNCHANGED)

    def set_schema(self, schema: LogSchema) -> None:
        """Switch schema; the next reload re-parses everything"""
        if schema == self.schema:
            return
        self.schema = schema
        self.reset()
        logger.info("Schema changed - full reload pending")

    def reset(self) -> None:
        self.state = LoaderState.EMPTY
        self.entries = ()
        self.last_size = 0
        self.last_error = None
