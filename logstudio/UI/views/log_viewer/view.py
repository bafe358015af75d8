"""
Log Viewer View Module - Main UI orchestration

Handles:
- File selection and loading (single file or merged set)
- Live updates through a watchdog-backed TailSession
- Level / namespace / search filter coordination
- Export of the visible entries
"""
import json
import logging
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.message import Message
from textual.timer import Timer
from textual.widgets import Button, Checkbox, DataTable, Input, Label, Select

from logstudio.config.settings import AppSettings, DEFAULT_SETTINGS
from logstudio.core.incremental import ReloadMode, ReloadResult
from logstudio.core.log_filter import LogFilter
from logstudio.core.log_parser import LogEntry
from logstudio.core.merger import merge_log_files
from logstudio.core.namespaces import extract_log_levels, toggle_namespace_selection
from logstudio.sysmon.file_watch import LogFileWatcher
from logstudio.sysmon.log_reader import get_default_log_directory
from logstudio.sysmon.tail_session import TailSession

from .components import (
    LogControlPanel,
    LogEntryDetailsPanel,
    LogFileSelector,
    LogLevelFilterPanel,
    LogSearchPanel,
    LogStatsPanel,
)
from .log_table import LogViewerTable
from .namespace_tree import NamespaceTree

logger = logging.getLogger(__name__)

ERROR_LEVELS = {"ERROR", "FATAL", "CRITICAL"}
WARNING_LEVELS = {"WARN", "WARNING"}


class LogViewerView(Vertical):
    """
    Log viewer with parsing, hierarchical filtering and live tailing

    Features:
    - Single file with incremental updates, or several files merged by time
    - Level, namespace and text filters
    - Entry details with JSON / XML / exception formatting
    - Export of filtered logs
    """

    class SessionUpdated(Message):
        """A TailSession produced new entries (posted from a background thread)"""

        def __init__(self, session: TailSession, result: ReloadResult) -> None:
            super().__init__()
            self.session = session
            self.result = result

    def __init__(self, settings: AppSettings = DEFAULT_SETTINGS,
                 initial_paths: Sequence[str] = (), merge: bool = False, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings

        self.log_directory = Path(settings.log_directory) if settings.log_directory \
            else get_default_log_directory()
        if not self.log_directory.exists():
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.initial_paths = list(initial_paths)
        self.merge = merge

        # Components
        self.watcher = LogFileWatcher()
        self.session: Optional[TailSession] = None

        # State
        self.current_files: List[str] = []
        self.entries: Tuple[LogEntry, ...] = ()
        self.log_filter = LogFilter()
        self.auto_refresh_enabled = settings.auto_refresh
        self._search_timer: Optional[Timer] = None  # For debouncing search
        self._poll_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        with Container(id="log-viewer-controls"):
            with Horizontal(id="log-file-selector-panel"):
                yield LogFileSelector(self.log_directory, self.settings.log_extensions,
                                      id="log-file-selector")
            with Horizontal(id="log-search-filter-panel"):
                yield LogSearchPanel(id="log-search-panel")
            with Horizontal(id="log-level-filter-panel"):
                yield LogLevelFilterPanel(id="log-level-filter")
            with Horizontal(id="log-control-actions-panel"):
                yield LogControlPanel(id="log-control-panel")

        with Horizontal(id="log-viewer-content"):
            with Vertical(classes="left-panel", id="log-namespace-panel"):
                yield Label("[bold]Namespaces[/bold]", classes="section-title")
                yield NamespaceTree(id="namespace-tree")

            with Vertical(classes="main-panel", id="log-main-panel"):
                yield Label("[bold]Log Entries[/bold]", classes="section-title")
                yield LogViewerTable(id="log-viewer-table")

            with Vertical(classes="right-panel", id="log-sidebar"):
                yield LogStatsPanel(id="log-stats-panel")
                yield LogEntryDetailsPanel(id="log-entry-details-panel")

    def on_mount(self) -> None:
        self.query_one("#auto-refresh-checkbox", Checkbox).value = self.auto_refresh_enabled

        file_selector = self.query_one("#log-file-selector", LogFileSelector)
        # without explicit paths the newest file is selected, which opens it
        file_selector.refresh_file_list(auto_select=not self.initial_paths)

        if self.initial_paths:
            self.open_files(self.initial_paths, merge=self.merge)

    # Loading

    def open_files(self, paths: Sequence[str], merge: bool = False) -> None:
        """Show one file (followed live) or several files merged"""
        self._stop_session()
        self.current_files = list(paths)
        self.entries = ()
        self.query_one("#log-entry-details-panel", LogEntryDetailsPanel).clear_details()

        if merge and len(paths) > 1:
            self._load_merged(list(paths))
        elif paths:
            session = TailSession(paths[0], self.settings.log_schema)
            session.on_update = partial(self._on_session_update, session)
            self.session = session
            self._start_session(session)

    @work(exclusive=True, thread=True)
    def _start_session(self, session: TailSession) -> None:
        """Initial load in a worker thread, then follow changes if enabled"""
        if self.auto_refresh_enabled:
            if not session.start(self.watcher):
                self.app.call_from_thread(self._start_polling, session)
        else:
            session.refresh()

        error = session.loader.last_error
        if error:
            self.app.call_from_thread(self.notify, f"Error loading log file: {error}",
                                      severity="error")

    @work(exclusive=True, thread=True)
    def _refresh_session(self, session: TailSession) -> None:
        session.refresh()

    @work(exclusive=True, thread=True)
    def _load_merged(self, paths: List[str]) -> None:
        entries = merge_log_files(paths, self.settings.log_schema)
        self.app.call_from_thread(self._show_entries, tuple(entries), True)

    def _on_session_update(self, session: TailSession, result: ReloadResult) -> None:
        """Called from session threads; never blocks on the UI"""
        self.post_message(self.SessionUpdated(session, result))

    def on_log_viewer_view_session_updated(self, event: "LogViewerView.SessionUpdated") -> None:
        self._apply_reload_result(event.session, event.result)

    def _apply_reload_result(self, session: TailSession, result: ReloadResult) -> None:
        if session is not self.session:
            # late update from a file that is no longer shown
            return

        if result.mode is ReloadMode.APPENDED and result.dropped <= len(self.entries):
            # the last `dropped` entries were parsed again and come back in new_entries
            replaced = self.entries[len(self.entries) - result.dropped:]
            self.entries = result.entries
            self._refresh_derived()
            table = self.query_one("#log-viewer-table", LogViewerTable)
            table.remove_trailing_entries(replaced)
            table.append_entries(self.log_filter.apply(result.new_entries))
            self._update_stats()
            if self.auto_refresh_enabled:
                table.jump_to_bottom()
        else:
            self._show_entries(result.entries, False)

    def _show_entries(self, entries: Tuple[LogEntry, ...], show_source: bool) -> None:
        self.entries = entries
        self._refresh_derived()
        table = self.query_one("#log-viewer-table", LogViewerTable)
        table.show_entries(self.log_filter.apply(entries), show_source=show_source)
        self._update_stats()

    def _refresh_derived(self) -> None:
        """Rebuild level checkboxes and namespace tree from the current entries"""
        self.query_one("#log-level-filter", LogLevelFilterPanel).set_levels(
            extract_log_levels(self.entries), self.log_filter.levels
        )
        self.query_one("#namespace-tree", NamespaceTree).set_namespaces(
            (entry.namespace for entry in self.entries), self.log_filter.namespaces
        )

    def _start_polling(self, session: TailSession) -> None:
        """Fallback when the file cannot be watched: reload on a timer"""
        if session is not self.session or not self.auto_refresh_enabled:
            return
        self._stop_polling()
        interval = self.settings.refresh_interval / 1000
        self._poll_timer = self.set_interval(interval, lambda: self._refresh_session(session))
        logger.info("Polling %s every %.1fs", session.file_path, interval)

    def _stop_polling(self) -> None:
        if self._poll_timer:
            self._poll_timer.stop()
            self._poll_timer = None

    def _stop_session(self) -> None:
        self._stop_polling()
        if self.session is not None:
            self.session.stop()
            self.session = None

    # Filtering

    def _apply_filters(self) -> None:
        table = self.query_one("#log-viewer-table", LogViewerTable)
        table.show_entries(self.log_filter.apply(self.entries), show_source=table.show_source)
        table.jump_to_top()
        self._update_stats()

    def _update_stats(self) -> None:
        table = self.query_one("#log-viewer-table", LogViewerTable)
        stats_panel = self.query_one("#log-stats-panel", LogStatsPanel)
        stats_panel.total_entries = len(self.entries)
        stats_panel.visible_entries = table.row_count
        stats_panel.error_count = sum(1 for e in self.entries if e.level in ERROR_LEVELS)
        stats_panel.warning_count = sum(1 for e in self.entries if e.level in WARNING_LEVELS)

    def on_namespace_tree_toggled(self, event: NamespaceTree.Toggled) -> None:
        selection = toggle_namespace_selection(self.log_filter.namespaces, event.namespace)
        self.log_filter = self.log_filter.with_namespaces(selection)
        self.query_one("#namespace-tree", NamespaceTree).update_selection(selection)
        self._apply_filters()

    @on(Checkbox.Changed, ".level-checkbox")
    def handle_level_filter_changed(self, event: Checkbox.Changed) -> None:
        level = event.checkbox.name
        levels = set(self.log_filter.levels)
        if event.value:
            levels.add(level)
        else:
            levels.discard(level)
        self.log_filter = self.log_filter.with_levels(levels)
        self._apply_filters()

    @on(Input.Changed, "#log-search-input")
    def handle_search_changed(self, event: Input.Changed) -> None:
        """Debounce search - wait 300ms after last keystroke"""
        self.log_filter = self.log_filter.with_search(event.value)
        if self._search_timer:
            self._search_timer.stop()
        self._search_timer = self.set_timer(0.3, self._perform_search)

    def _perform_search(self) -> None:
        self._search_timer = None
        self._apply_filters()

    @on(Button.Pressed, "#clear-search-btn")
    def handle_clear_search(self) -> None:
        self.query_one("#log-search-input", Input).value = ""
        self.log_filter = self.log_filter.with_search("")
        self._apply_filters()

    @on(Button.Pressed, "#reset-filters-btn")
    def handle_reset_filters(self) -> None:
        self.log_filter = LogFilter()
        self.query_one("#log-search-input", Input).value = ""
        self.query_one("#log-level-filter", LogLevelFilterPanel).set_levels(
            extract_log_levels(self.entries), ()
        )
        self.query_one("#namespace-tree", NamespaceTree).update_selection(frozenset())
        self._apply_filters()
        self.notify("Filters reset", severity="information")

    # Other controls

    def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "log-file-select" and event.value != Select.BLANK:
            path = str(event.value)
            if self.current_files != [path]:
                self.open_files([path])

    @on(Button.Pressed, "#refresh-logs-btn")
    def handle_refresh(self) -> None:
        self.query_one("#log-file-selector", LogFileSelector).refresh_file_list()
        if self.session is not None:
            self._refresh_session(self.session)
        elif self.current_files:
            self.open_files(self.current_files, merge=len(self.current_files) > 1)
        self.notify("Log file refreshed", severity="information")

    @on(Checkbox.Changed, "#auto-refresh-checkbox")
    def handle_auto_refresh_changed(self, event: Checkbox.Changed) -> None:
        if event.value == self.auto_refresh_enabled:
            return
        self.auto_refresh_enabled = event.value
        if self.session is None:
            return
        if event.value:
            self._start_session(self.session)
            self.notify("Auto-refresh enabled", severity="information")
        else:
            self._stop_polling()
            self.session.stop()

    @on(Button.Pressed, "#jump-top-btn")
    def handle_jump_top(self) -> None:
        self.query_one("#log-viewer-table", LogViewerTable).jump_to_top()

    @on(Button.Pressed, "#jump-bottom-btn")
    def handle_jump_bottom(self) -> None:
        self.query_one("#log-viewer-table", LogViewerTable).jump_to_bottom()

    @on(Button.Pressed, "#export-logs-btn")
    def handle_export(self) -> None:
        self._export_logs()

    @on(DataTable.RowHighlighted, "#log-viewer-table")
    def handle_row_highlighted(self) -> None:
        entry = self.query_one("#log-viewer-table", LogViewerTable).get_selected_entry()
        if entry:
            self.query_one("#log-entry-details-panel", LogEntryDetailsPanel).show_entry_details(entry)

    def _export_logs(self) -> None:
        """Export visible log entries to JSON file"""
        visible_entries = self.query_one("#log-viewer-table", LogViewerTable).get_visible_entries()

        if not visible_entries:
            self.notify("No log entries to export", severity="warning")
            return

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        export_file = self.log_directory / f"export_{timestamp}.json"

        export_data = {
            'exported_at': datetime.now().isoformat(),
            'source_files': self.current_files,
            'total_entries': len(visible_entries),
            'entries': [entry.to_dict() for entry in visible_entries],
        }

        try:
            with open(export_file, 'w', encoding='utf-8') as f:
                json.dump(export_data, f, indent=2)
        except OSError as e:
            logger.error("Export to %s failed: %s", export_file, e)
            self.notify(f"Export failed: {e}", severity="error")
            return

        self.notify(f"Exported {len(visible_entries)} entries to {export_file.name}",
                    severity="information")

    def on_unmount(self) -> None:
        self._stop_session()
        self.watcher.stop_all()
        if self._search_timer:
            self._search_timer.stop()
            self._search_timer = None
