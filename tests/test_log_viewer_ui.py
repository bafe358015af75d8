import asyncio
import os
import shutil
import tempfile

import pytest

from logstudio.config.settings import AppSettings
from logstudio.UI.app import LogStudioApp
from logstudio.UI.views.log_viewer import LogViewerTable, LogViewerView
from logstudio.UI.views.log_viewer.namespace_tree import NamespaceTree

LOG_CONTENT = (
    "2025-01-01 12:00:00.000 | INFO | App.Web | request received\n"
    "2025-01-01 12:00:01.000 | ERROR | App.Db | query failed\n"
    "    at Db.Query(Db.cs:42)\n"
    "2025-01-01 12:00:02.000 | WARN | App.Db.Pool | pool nearly exhausted\n"
)


@pytest.fixture
def temp_dir_manager(request):
    temp_dir = tempfile.mkdtemp(prefix="ui_test_")

    def cleanup_dir():
        if os.path.exists(temp_dir):
            shutil.rmtree(temp_dir)

    request.addfinalizer(cleanup_dir)
    return temp_dir


@pytest.fixture
def log_path(temp_dir_manager):
    path = os.path.join(temp_dir_manager, "service.log")
    with open(path, "w") as f:
        f.write(LOG_CONTENT)
    return path


def run_app_scenario(app, scenario):
    async def runner():
        async with app.run_test() as pilot:
            # loading runs in a thread worker started from on_mount
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()
            await scenario(app, pilot)

    asyncio.run(runner())


class TestLogViewerView:

    def test_file_is_loaded_into_table(self, temp_dir_manager, log_path):
        settings = AppSettings(log_directory=temp_dir_manager, auto_refresh=False)
        app = LogStudioApp(settings, [log_path])

        async def scenario(app, pilot):
            table = app.query_one("#log-viewer-table", LogViewerTable)
            assert table.row_count == 3
            view = app.query_one(LogViewerView)
            assert len(view.entries) == 3
            assert view.entries[1].is_multi_line

        run_app_scenario(app, scenario)

    def test_namespace_toggle_filters_rows(self, temp_dir_manager, log_path):
        settings = AppSettings(log_directory=temp_dir_manager, auto_refresh=False)
        app = LogStudioApp(settings, [log_path])

        async def scenario(app, pilot):
            view = app.query_one(LogViewerView)
            table = app.query_one("#log-viewer-table", LogViewerTable)

            view.on_namespace_tree_toggled(NamespaceTree.Toggled("App.Db"))
            await pilot.pause()
            assert table.row_count == 2

            view.on_namespace_tree_toggled(NamespaceTree.Toggled("App.Db.Pool"))
            await pilot.pause()
            assert view.log_filter.namespaces == {"App.Db.Pool"}
            assert table.row_count == 1

        run_app_scenario(app, scenario)

    def test_merged_files_show_source(self, temp_dir_manager, log_path):
        other = os.path.join(temp_dir_manager, "worker.log")
        with open(other, "w") as f:
            f.write("2025-01-01 12:00:00.500 | INFO | Worker | job started\n")

        settings = AppSettings(log_directory=temp_dir_manager, auto_refresh=False)
        app = LogStudioApp(settings, [log_path, other], merge=True)

        async def scenario(app, pilot):
            table = app.query_one("#log-viewer-table", LogViewerTable)
            assert table.show_source
            assert table.row_count == 4
            visible = table.get_visible_entries()
            assert [e.source_file for e in visible][:2] == ["service.log", "worker.log"]

        run_app_scenario(app, scenario)

    def test_line_completed_after_partial_write(self, temp_dir_manager):
        path = os.path.join(temp_dir_manager, "partial.log")
        with open(path, "w") as f:
            f.write(LOG_CONTENT + "2025-01-01 12:00:03.000 | INFO | App.Web | resp")

        settings = AppSettings(log_directory=temp_dir_manager, auto_refresh=False)
        app = LogStudioApp(settings, [path])

        async def scenario(app, pilot):
            view = app.query_one(LogViewerView)
            table = app.query_one("#log-viewer-table", LogViewerTable)
            assert table.row_count == 4

            with open(path, "a") as f:
                f.write("onse sent\n2025-01-01 12:00:04.000 | DEBUG | App.Web | done\n")
            view.handle_refresh()
            await pilot.pause()
            await app.workers.wait_for_complete()
            await pilot.pause()

            visible = table.get_visible_entries()
            assert table.row_count == 5
            assert len(table.entry_map) == 5
            assert [e.original_line_number for e in visible] == [1, 2, 4, 5, 6]
            assert visible[3].message == "response sent"
            assert [e.original_line_number for e in view.entries] == [1, 2, 4, 5, 6]

        run_app_scenario(app, scenario)

    def test_rows_with_repeated_line_numbers(self, temp_dir_manager, log_path):
        settings = AppSettings(log_directory=temp_dir_manager, auto_refresh=False)
        app = LogStudioApp(settings, [log_path])

        async def scenario(app, pilot):
            table = app.query_one("#log-viewer-table", LogViewerTable)
            view = app.query_one(LogViewerView)

            # the same records again, as a second file merged in would produce
            table.append_entries(view.entries)
            await pilot.pause()

            assert table.row_count == 6
            assert len(set(table.entry_map)) == 6

        run_app_scenario(app, scenario)

    def test_namespace_tree_nests_by_segment(self, temp_dir_manager, log_path):
        settings = AppSettings(log_directory=temp_dir_manager, auto_refresh=False)
        app = LogStudioApp(settings, [log_path])

        async def scenario(app, pilot):
            tree = app.query_one("#namespace-tree", NamespaceTree)

            assert set(tree.tree_nodes) == {"App", "App.Web", "App.Db", "App.Db.Pool"}
            assert tree.tree_nodes["App"].parent is tree.root
            assert tree.tree_nodes["App.Db"].parent is tree.tree_nodes["App"]
            assert tree.tree_nodes["App.Db.Pool"].parent is tree.tree_nodes["App.Db"]
            assert tree.namespace_nodes["App"].count == 3

        run_app_scenario(app, scenario)
