"""
System I/O Package - File access and change notifications for the viewer

Package Structure:
- log_reader: Reads, stats, chunks and directory listings (read_log_file, LogDirectoryMonitor)
- file_watch: watchdog based change notifications (LogFileWatcher)
- tail_session: Incremental follow of one file (TailSession)
"""

from .log_reader import (
    FileStatsResult,
    LogDirectoryMonitor,
    LogFile,
    ReadResult,
    get_default_log_directory,
    get_file_stats,
    read_log_chunk,
    read_log_file,
)
from .file_watch import LogFileEventHandler, LogFileWatcher, WatchResult
from .tail_session import TailSession

__all__ = [
    'FileStatsResult',
    'LogDirectoryMonitor',
    'LogFile',
    'ReadResult',
    'get_default_log_directory',
    'get_file_stats',
    'read_log_chunk',
    'read_log_file',
    'LogFileEventHandler',
    'LogFileWatcher',
    'WatchResult',
    'TailSession',
]
