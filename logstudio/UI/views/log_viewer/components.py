"""
Log Viewer Components Module - UI widgets and panels

Handles:
- File selector component
- Search input
- Level filter checkboxes built from the levels present in the file
- Log statistics panel
- Entry details with JSON / XML / exception formatting
"""
import re
from pathlib import Path
from typing import Iterable, List, Optional

from rich.syntax import Syntax
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import Button, Checkbox, Input, Label, Select, Static

from logstudio.core.content_format import ContentKind, analyze_content
from logstudio.core.log_parser import LogEntry, level_color
from logstudio.sysmon.log_reader import LogDirectoryMonitor, LogFile

EXCEPTION_HIGHLIGHTS = [
    (r'\w+(?:Exception|Error)(?=\s*:)', "bold red"),
    (r'^\s*at\s+.+$', "magenta"),
    (r'Caused by:.*', "bold yellow"),
]


class LogFileSelector(Vertical):
    """File selector for choosing which log file to view"""

    selected_file: reactive[Optional[Path]] = reactive(None)

    def __init__(self, log_directory: Path, extensions: Optional[List[str]] = None, **kwargs):
        """
        Initialize file selector

        Args:
            log_directory: Directory containing log files
            extensions: File extensions to list
        """
        super().__init__(**kwargs)
        self.directory_monitor = LogDirectoryMonitor(log_directory, extensions)
        self.log_files: List[LogFile] = []

    def compose(self) -> ComposeResult:
        yield Label("[bold]Log File:[/bold]", classes="control-label")
        yield Select([], id="log-file-select", prompt="No log files found", allow_blank=True)
        yield Static("No file selected", id="file-info-display")

    def refresh_file_list(self, auto_select: bool = False) -> None:
        """
        Refresh the list of available log files

        Args:
            auto_select: Select the newest file when nothing is selected yet
        """
        self.log_files = self.directory_monitor.list_log_files()

        select = self.query_one("#log-file-select", Select)
        select.set_options([(log_file.name, log_file.path) for log_file in self.log_files])

        if self.selected_file and any(f.path == str(self.selected_file) for f in self.log_files):
            # set_options clears the current value
            with select.prevent(Select.Changed):
                select.value = str(self.selected_file)
        elif auto_select and self.log_files:
            select.value = self.log_files[0].path

    def on_select_changed(self, event: Select.Changed) -> None:
        """Handle file selection change"""
        if event.select.id == "log-file-select" and event.value != Select.BLANK:
            self.selected_file = Path(str(event.value))
            self._update_file_info()
            # Don't stop propagation - let parent view handle it too

    def _update_file_info(self) -> None:
        info = self.directory_monitor.get_file_info(self.selected_file)
        if not info:
            return

        modified = info['modified'].strftime('%Y-%m-%d %H:%M:%S')
        self.query_one("#file-info-display", Static).update(
            f"Size: {info['size_mb']} MB | Modified: {modified}"
        )


class LogSearchPanel(Horizontal):
    """Search controls for log viewer"""

    def compose(self) -> ComposeResult:
        yield Label("[bold]Search:[/bold]", classes="control-label")
        yield Input(placeholder="Search logs...", id="log-search-input")
        yield Button("Clear", id="clear-search-btn", variant="default")


class LogLevelFilterPanel(Horizontal):
    """
    One checkbox per level found in the entries

    No box checked means every level is shown. Each checkbox carries its
    level as its widget name.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.levels: List[str] = []

    def compose(self) -> ComposeResult:
        yield Label("[bold]Levels:[/bold]", classes="control-label")
        yield Horizontal(id="level-checkboxes")
        yield Button("Reset Filters", id="reset-filters-btn", variant="default")

    def set_levels(self, levels: Iterable[str], active: Iterable[str]) -> None:
        """Rebuild the checkboxes when the set of levels changes"""
        levels = list(levels)
        active = set(active)
        container = self.query_one("#level-checkboxes", Horizontal)

        if levels != self.levels:
            self.levels = levels
            container.remove_children()
            container.mount_all([
                Checkbox(Text(level, style=level_color(level)), value=level in active,
                         name=level, classes="level-checkbox")
                for level in levels
            ])
            return

        for checkbox in container.query(Checkbox):
            with checkbox.prevent(Checkbox.Changed):
                checkbox.value = checkbox.name in active


class LogControlPanel(Horizontal):
    """Main control panel with view options and actions"""

    def compose(self) -> ComposeResult:
        yield Button("⟳ Refresh", id="refresh-logs-btn", variant="primary")
        yield Checkbox("Auto-refresh", id="auto-refresh-checkbox")
        yield Button("⬆ Jump to Top", id="jump-top-btn", variant="default")
        yield Button("⬇ Jump to Bottom", id="jump-bottom-btn", variant="default")
        yield Button("💾 Export", id="export-logs-btn", variant="success")


class LogStatsPanel(Static):
    """Display log statistics"""

    total_entries: reactive[int] = reactive(0)
    visible_entries: reactive[int] = reactive(0)
    error_count: reactive[int] = reactive(0)
    warning_count: reactive[int] = reactive(0)

    def compose(self) -> ComposeResult:
        yield Label("[bold]Log Statistics[/bold]", classes="panel-title")
        yield Static(self._format_stats(), id="stats-content")

    def _format_stats(self) -> str:
        return (
            f"Total Entries: {self.total_entries}\n"
            f"Visible: {self.visible_entries}\n"
            f"[red]Errors: {self.error_count}[/red]\n"
            f"[yellow]Warnings: {self.warning_count}[/yellow]"
        )

    def watch_total_entries(self, value: int) -> None:
        self._update_display()

    def watch_visible_entries(self, value: int) -> None:
        self._update_display()

    def watch_error_count(self, value: int) -> None:
        self._update_display()

    def watch_warning_count(self, value: int) -> None:
        self._update_display()

    def _update_display(self) -> None:
        if self.is_mounted:
            self.query_one("#stats-content", Static).update(self._format_stats())


def render_message(entry: LogEntry):
    """Rich renderable for an entry's message, formatted by content type"""
    formatted = analyze_content(entry.message)

    if formatted.kind is ContentKind.JSON:
        return Syntax(formatted.text, "json", word_wrap=True)
    if formatted.kind is ContentKind.XML:
        return Syntax(formatted.text, "xml", word_wrap=True)

    text = Text(formatted.text)
    if formatted.kind is ContentKind.EXCEPTION:
        for pattern, style in EXCEPTION_HIGHLIGHTS:
            text.highlight_regex(re.compile(pattern, re.MULTILINE), style=style)
    return text


class LogEntryDetailsPanel(Vertical):
    """Detailed view of selected log entry"""

    def compose(self) -> ComposeResult:
        yield Label("[bold]Entry Details[/bold]", classes="panel-title")
        yield Static("Select a log entry to view details", id="entry-details-header")
        yield Static("", id="entry-details-message")

    def show_entry_details(self, entry: LogEntry) -> None:
        """
        Display details for a log entry

        Args:
            entry: LogEntry object to display
        """
        header = Text()
        header.append("Line: ", style="bold").append(f"{entry.original_line_number}\n")
        if entry.source_file:
            header.append("File: ", style="bold").append(f"{entry.source_file}\n")
        header.append("Timestamp: ", style="bold").append(f"{entry.timestamp or 'N/A'}\n")
        header.append("Level: ", style="bold").append(entry.level, style=level_color(entry.level))
        header.append("\nNamespace: ", style="bold").append(entry.namespace or 'N/A')
        header.append(f"\nLines: {entry.line_count}\n")
        header.append("Message:", style="bold")

        self.query_one("#entry-details-header", Static).update(header)
        self.query_one("#entry-details-message", Static).update(render_message(entry))

    def clear_details(self) -> None:
        self.query_one("#entry-details-header", Static).update("Select a log entry to view details")
        self.query_one("#entry-details-message", Static).update("")
