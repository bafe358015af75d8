"""
Log File Reader Module - File access used by the parsing core

Handles:
- Whole-file reads returning structured success/failure results
- File statistics (size, modification time)
- Byte-range chunk reads
- Log file discovery in a directory
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIRECTORY = Path(__file__).resolve().parent.parent / "app_log"


@dataclass(frozen=True)
class ReadResult:
    success: bool
    content: str = ""
    error: Optional[str] = None


@dataclass(frozen=True)
class FileStatsResult:
    success: bool
    size: int = 0
    mtime: Optional[datetime] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class LogFile:
    name: str
    path: str


def read_log_file(file_path) -> ReadResult:
    """
    Read the full text of a log file

    Undecodable bytes are replaced rather than failing the whole read.

    Returns:
        ReadResult; on failure success is False and error describes it
    """
    try:
        with open(file_path, 'r', encoding='utf-8', errors='replace', newline='') as f:
            return ReadResult(success=True, content=f.read())
    except OSError as e:
        logger.warning("Error reading log file %s: %s", file_path, e)
        return ReadResult(success=False, error=str(e))


def read_log_chunk(file_path, start_byte: int, end_byte: int) -> ReadResult:
    """
    Read bytes [start_byte, end_byte) of a file as text

    Returns:
        ReadResult with the decoded chunk
    """
    if start_byte < 0 or end_byte < start_byte:
        return ReadResult(success=False, error=f"invalid range {start_byte}-{end_byte}")

    try:
        with open(file_path, 'rb') as f:
            f.seek(start_byte)
            data = f.read(end_byte - start_byte)
        return ReadResult(success=True, content=data.decode('utf-8', errors='replace'))
    except OSError as e:
        logger.warning("Error reading chunk of %s: %s", file_path, e)
        return ReadResult(success=False, error=str(e))


def get_file_stats(file_path) -> FileStatsResult:
    """Size in bytes and modification time of a file"""
    try:
        stat = Path(file_path).stat()
    except OSError as e:
        return FileStatsResult(success=False, error=str(e))

    return FileStatsResult(
        success=True,
        size=stat.st_size,
        mtime=datetime.fromtimestamp(stat.st_mtime),
    )


def get_default_log_directory() -> Path:
    """Directory the viewer opens when none is configured"""
    return DEFAULT_LOG_DIRECTORY


class LogDirectoryMonitor:
    """
    Discover log files in a directory

    Features:
    - File filtering by extension
    - Newest-modified-first ordering
    """

    def __init__(self, log_directory, extensions: Optional[List[str]] = None):
        """
        Initialize directory monitor

        Args:
            log_directory: Path to log directory
            extensions: List of file extensions to list (default: ['.log'])
        """
        self.log_directory = Path(log_directory)
        self.extensions = extensions or ['.log']

    def list_log_files(self) -> List[LogFile]:
        """
        Get all log files in directory

        Returns:
            LogFile entries sorted by modification time (newest first)
        """
        if not self.log_directory.is_dir():
            return []

        log_files = [
            path for path in self.log_directory.iterdir()
            if path.is_file() and path.suffix in self.extensions
        ]

        # Newest first, name as tie-breaker
        log_files.sort(key=lambda p: (-p.stat().st_mtime, p.name))

        return [LogFile(name=path.name, path=str(path)) for path in log_files]

    def get_file_info(self, file_path) -> dict:
        """
        Get information about a log file

        Returns:
            Dictionary with file metadata, empty if the file is gone
        """
        stats = get_file_stats(file_path)
        if not stats.success:
            return {}

        return {
            'name': Path(file_path).name,
            'size': stats.size,
            'size_mb': round(stats.size / 1024 / 1024, 2),
            'modified': stats.mtime,
        }
