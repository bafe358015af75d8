"""
LogStudio Main Application - Terminal log viewer using Textual
"""
from typing import Sequence

from textual.app import App, ComposeResult
from textual.widgets import Footer, Header

from logstudio.config.settings import AppSettings, DEFAULT_SETTINGS
from logstudio.UI.views.log_viewer import LogViewerView, LogViewerTable


class LogStudioApp(App):
    """Structured log viewer - Terminal UI Application"""

    TITLE = "LogStudio"
    CSS_PATH = "logstudio.tcss"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("/", "focus_search", "Search"),
        ("r", "refresh_logs", "Refresh"),
        ("g", "jump_top", "Top"),
        ("G", "jump_bottom", "Bottom"),
    ]

    def __init__(self, settings: AppSettings = DEFAULT_SETTINGS,
                 paths: Sequence[str] = (), merge: bool = False):
        super().__init__()
        self.settings = settings
        self.paths = list(paths)
        self.merge = merge

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield LogViewerView(self.settings, self.paths, self.merge, id="log-viewer-view")
        yield Footer()

    def action_focus_search(self) -> None:
        self.query_one("#log-search-input").focus()

    def action_refresh_logs(self) -> None:
        self.query_one("#log-viewer-view", LogViewerView).handle_refresh()

    def action_jump_top(self) -> None:
        self.query_one("#log-viewer-table", LogViewerTable).jump_to_top()

    def action_jump_bottom(self) -> None:
        self.query_one("#log-viewer-table", LogViewerTable).jump_to_bottom()


def run_app(settings: AppSettings = DEFAULT_SETTINGS, paths: Sequence[str] = (),
            merge: bool = False) -> None:
    """Entry point to run the LogStudio application"""
    app = LogStudioApp(settings, paths, merge)
    app.run()


if __name__ == "__main__":
    run_app()
