"""
Log Viewer Package - Interactive view over the parsing core

This package provides the log viewing interface with:
- Single-file viewing with live incremental updates
- Multi-file timeline view merged by timestamp
- Level, hierarchical namespace and text filtering
- Entry details with JSON / XML / exception formatting
- Export of the visible entries (JSON format)

Package Structure:
- view: Main view orchestration (LogViewerView)
- components: UI panels and controls (LogFileSelector, LogSearchPanel, LogLevelFilterPanel, etc.)
- log_table: Log entry table widget (LogViewerTable)
- namespace_tree: Namespace selector widget (NamespaceTree)
"""

from .view import LogViewerView

from .components import (
    LogFileSelector,
    LogSearchPanel,
    LogLevelFilterPanel,
    LogControlPanel,
    LogStatsPanel,
    LogEntryDetailsPanel
)
from .log_table import LogViewerTable
from .namespace_tree import NamespaceTree

__all__ = [
    # Main view
    'LogViewerView',

    # UI components
    'LogFileSelector',
    'LogSearchPanel',
    'LogLevelFilterPanel',
    'LogControlPanel',
    'LogStatsPanel',
    'LogEntryDetailsPanel',
    'LogViewerTable',
    'NamespaceTree',
]
