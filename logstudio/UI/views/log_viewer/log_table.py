"""
Log Table Module - DataTable for displaying log entries

Handles:
- Color-coded log levels
- Multi-line markers and message preview with truncation
- Source file column for merged views
- Row selection and interaction
"""
from typing import Dict, Iterable, List, Optional

from rich.text import Text
from textual.widgets import DataTable

from logstudio.core.log_parser import LogEntry, level_color


class LogViewerTable(DataTable):
    """
    DataTable for displaying log entries with syntax highlighting

    Rows are keyed by a counter owned by the table, never by entry content,
    so re-parsed or repeated entries cannot collide.
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.entry_map: Dict[str, LogEntry] = {}  # Maps row key to LogEntry
        self._next_row_id = 0
        self.max_message_length = 120  # Truncate long messages
        self.show_source = False

    def on_mount(self) -> None:
        self.cursor_type = "row"
        self.zebra_stripes = True
        self._add_columns()

    def _add_columns(self) -> None:
        columns = ["#", "Timestamp", "Level", "Namespace", "Message"]
        if self.show_source:
            columns.insert(1, "File")
        self.add_columns(*columns)

    def show_entries(self, entries: Iterable[LogEntry], show_source: bool = False) -> None:
        """Replace the table content with entries"""
        if show_source != self.show_source:
            self.show_source = show_source
            self.clear(columns=True)
            self._add_columns()
        else:
            self.clear()
        self.entry_map.clear()
        self.append_entries(entries)

    def append_entries(self, entries: Iterable[LogEntry]) -> None:
        """Add entries below the existing rows"""
        for entry in entries:
            key = str(self._next_row_id)
            self._next_row_id += 1
            self.add_row(*self._format_entry(entry), key=key)
            self.entry_map[key] = entry

    def remove_trailing_entries(self, entries: Iterable[LogEntry]) -> None:
        """Remove the rows at the bottom of the table that show one of entries"""
        targets = {id(entry) for entry in entries}
        for key, entry in reversed(list(self.entry_map.items())):
            if id(entry) not in targets:
                break
            self.remove_row(key)
            del self.entry_map[key]

    def _format_entry(self, entry: LogEntry) -> tuple:
        """
        Format a log entry for table display

        Returns:
            Tuple of formatted cell values
        """
        level_text = Text(entry.level, style=level_color(entry.level))

        namespace = entry.namespace or "-"
        if len(namespace) > 30:
            namespace = "…" + namespace[-29:]

        # First line only; the details panel shows the rest
        message = entry.message.split('\n', 1)[0]
        if len(message) > self.max_message_length:
            message = message[:self.max_message_length - 3] + "..."

        message_text = Text(message)
        if entry.is_multi_line:
            message_text.append(f"  [+{entry.line_count - 1} lines]", style="dim")

        cells = [str(entry.original_line_number), entry.timestamp or "-", level_text,
                 namespace, message_text]
        if self.show_source:
            cells.insert(1, entry.source_file or "-")
        return tuple(cells)

    def get_selected_entry(self) -> Optional[LogEntry]:
        if self.row_count == 0:
            return None

        row_key = self.coordinate_to_cell_key(self.cursor_coordinate).row_key
        return self.entry_map.get(row_key.value)

    def get_visible_entries(self) -> List[LogEntry]:
        return list(self.entry_map.values())

    def jump_to_top(self) -> None:
        if self.row_count > 0:
            self.move_cursor(row=0)

    def jump_to_bottom(self) -> None:
        if self.row_count > 0:
            self.move_cursor(row=self.row_count - 1)
