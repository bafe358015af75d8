"""
Log Parser Module - Turns raw log text into structured entries

Handles:
- Field extraction via the configured LogSchema
- Multi-line entries (stack traces, wrapped JSON) folded into the preceding record
- Fallback UNKNOWN entries for lines that match nothing
- Line numbering with an offset so appended content can be parsed on its own
"""
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any, List

from .schema import LogSchema, DEFAULT_SCHEMA

logger = logging.getLogger(__name__)


class LogLevel(Enum):
    """Well-known log severity levels (display only, entry levels are free strings)"""
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @property
    def color(self) -> str:
        """Get color representation for this log level"""
        colors = {
            LogLevel.TRACE: "bright_black",
            LogLevel.DEBUG: "blue",
            LogLevel.INFO: "green",
            LogLevel.WARN: "yellow",
            LogLevel.WARNING: "yellow",
            LogLevel.ERROR: "red",
            LogLevel.FATAL: "red bold",
            LogLevel.CRITICAL: "red bold",
            LogLevel.UNKNOWN: "white",
        }
        return colors.get(self, "white")


def level_color(level: str) -> str:
    """Color for an arbitrary level string, white when it is not a known level"""
    try:
        return LogLevel(level).color
    except ValueError:
        return "white"


@dataclass(frozen=True)
class LogEntry:
    """One logical log record, possibly spanning several physical lines"""
    original_line_number: int
    timestamp: str
    level: str
    namespace: str
    message: str
    full_text: str
    is_multi_line: bool = False
    line_count: int = 1
    source_file: Optional[str] = None

    def __str__(self) -> str:
        return self.full_text

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export"""
        data = asdict(self)
        if self.source_file is None:
            del data['source_file']
        return data


class ParserState(Enum):
    IDLE = "idle"
    ACCUMULATING = "accumulating"


class _PendingEntry:
    """Mutable builder for the record currently being accumulated"""

    __slots__ = ('line_number', 'timestamp', 'level', 'namespace',
                 'message', 'full_text', 'line_count')

    def __init__(self, line_number: int, timestamp: str, level: str,
                 namespace: str, message: str, full_text: str):
        self.line_number = line_number
        self.timestamp = timestamp
        self.level = level
        self.namespace = namespace
        self.message = message
        self.full_text = full_text
        self.line_count = 1

    def append(self, line: str) -> None:
        # full_text keeps blank lines verbatim, message only keeps the break
        self.full_text += '\n' + line
        if line.strip():
            self.message += '\n' + line
        else:
            self.message += '\n'
        self.line_count += 1

    def freeze(self) -> LogEntry:
        return LogEntry(
            original_line_number=self.line_number,
            timestamp=self.timestamp,
            level=self.level,
            namespace=self.namespace,
            message=self.message,
            full_text=self.full_text,
            is_multi_line=self.line_count > 1,
            line_count=self.line_count,
        )


class LineAccumulator:
    """
    Line-at-a-time parsing state machine

    States:
    - IDLE: no record open; unmatched non-blank lines become UNKNOWN entries,
      unmatched blank lines are dropped
    - ACCUMULATING: a matched record is open; unmatched lines (blank or not)
      are continuation lines of that record

    feed() returns the entry completed by the line, if any. A line can complete
    at most one entry: either the open record (when a new one starts) or a
    standalone UNKNOWN entry.
    """

    def __init__(self, schema: LogSchema = DEFAULT_SCHEMA):
        self.schema = schema
        self._regex = schema.regex
        self._pending: Optional[_PendingEntry] = None

    @property
    def state(self) -> ParserState:
        return ParserState.IDLE if self._pending is None else ParserState.ACCUMULATING

    def feed(self, line: str, line_number: int) -> Optional[LogEntry]:
        """
        Consume one physical line

        Args:
            line: Physical line without its newline
            line_number: Absolute 1-based line number

        Returns:
            The entry completed by this line, or None
        """
        match = self._regex.search(line.strip())

        if match:
            completed = self.finish()
            fields = self.schema.fields
            level = (match.group(fields.level) or '').strip().upper()
            self._pending = _PendingEntry(
                line_number=line_number,
                timestamp=(match.group(fields.timestamp) or '').strip(),
                level=level or LogLevel.INFO.value,
                namespace=(match.group(fields.namespace) or '').strip(),
                message=(match.group(fields.message) or '').strip(),
                full_text=line,
            )
            return completed

        if self._pending is not None:
            self._pending.append(line)
            return None

        if line.strip():
            return LogEntry(
                original_line_number=line_number,
                timestamp='',
                level=LogLevel.UNKNOWN.value,
                namespace='',
                message=line,
                full_text=line,
            )

        return None

    def finish(self) -> Optional[LogEntry]:
        """Close the open record (if any) and return to IDLE"""
        if self._pending is None:
            return None
        entry = self._pending.freeze()
        self._pending = None
        return entry


class LogParser:
    """
    Schema-driven log parser

    Example format (default schema):
        "2025-01-01 12:00:00.000 | INFO | App.Service | Message"
    """

    def __init__(self, schema: LogSchema = DEFAULT_SCHEMA):
        self.schema = schema

    def parse(self, content: str, line_offset: int = 0) -> List[LogEntry]:
        """
        Parse raw content into entries

        Args:
            content: Text to parse, newline separated
            line_offset: Number of physical lines that precede content in its file

        Returns:
            Entries in file order
        """
        accumulator = LineAccumulator(self.schema)
        entries: List[LogEntry] = []

        lines = content.split('\n')
        for i, line in enumerate(lines):
            if line.endswith('\r'):
                line = line[:-1]
            entry = accumulator.feed(line, i + line_offset + 1)
            if entry is not None:
                entries.append(entry)

        last = accumulator.finish()
        if last is not None:
            entries.append(last)

        logger.debug("Parsed %d entries from %d lines (offset %d)",
                     len(entries), len(lines), line_offset)
        return entries


def parse_log_file(content: str, schema: LogSchema = DEFAULT_SCHEMA,
                   line_offset: int = 0) -> List[LogEntry]:
    """Parse content with schema; see LogParser.parse"""
    return LogParser(schema).parse(content, line_offset)
