import pytest

from logstudio.core.log_filter import LogFilter, filter_log_entries, namespace_matches
from logstudio.core.log_parser import LogEntry


def make_entry(line, level="INFO", namespace="App", message="msg"):
    text = f"ts | {level} | {namespace} | {message}"
    return LogEntry(line, "ts", level, namespace, message, text)


@pytest.fixture
def entries():
    return [
        make_entry(1, "INFO", "App", "boot"),
        make_entry(2, "ERROR", "App.Service", "Connection refused"),
        make_entry(3, "DEBUG", "App.Service.Sub", "retry"),
        make_entry(4, "WARN", "App.ServiceX", "slow"),
        make_entry(5, "ERROR", "Db", "timeout"),
    ]


class TestNamespaceMatching:

    def test_exact_and_descendant(self):
        assert namespace_matches("App.Service", "App.Service")
        assert namespace_matches("App.Service.Sub", "App.Service")

    def test_prefix_without_dot_is_not_a_descendant(self):
        assert not namespace_matches("App.ServiceX", "App.Service")
        assert not namespace_matches("App", "App.Service")


class TestFilterLogEntries:

    def test_no_rules_returns_everything(self, entries):
        assert filter_log_entries(entries, set(), set(), "") == entries

    def test_namespace_filter_includes_descendants(self, entries):
        result = filter_log_entries(entries, set(), {"App.Service"}, "")
        assert [e.original_line_number for e in result] == [2, 3]

    def test_level_filter(self, entries):
        result = filter_log_entries(entries, {"ERROR"}, set(), "")
        assert [e.original_line_number for e in result] == [2, 5]

    def test_search_is_case_insensitive(self, entries):
        result = filter_log_entries(entries, set(), set(), "CONNECTION")
        assert [e.original_line_number for e in result] == [2]

    def test_search_covers_full_text(self, entries):
        result = filter_log_entries(entries, set(), set(), "app.servicex")
        assert [e.original_line_number for e in result] == [4]

    def test_rules_are_combined(self, entries):
        result = filter_log_entries(entries, {"ERROR", "DEBUG"}, {"App"}, "retry")
        assert [e.original_line_number for e in result] == [3]

    def test_several_namespaces(self, entries):
        result = filter_log_entries(entries, set(), {"Db", "App.Service.Sub"}, "")
        assert [e.original_line_number for e in result] == [3, 5]

    def test_input_is_not_modified(self, entries):
        snapshot = list(entries)
        filter_log_entries(entries, {"ERROR"}, set(), "")
        assert entries == snapshot

    def test_filtering_is_idempotent(self, entries):
        once = filter_log_entries(entries, {"ERROR"}, {"App"}, "conn")
        assert filter_log_entries(once, {"ERROR"}, {"App"}, "conn") == once

    def test_result_is_subset_in_order(self, entries):
        result = filter_log_entries(entries, set(), {"App"}, "")
        positions = [entries.index(e) for e in result]
        assert positions == sorted(positions)


class TestLogFilter:

    def test_inactive_by_default(self, entries):
        log_filter = LogFilter()
        assert not log_filter.is_active
        assert log_filter.apply(entries) == entries

    def test_builders_return_new_filters(self, entries):
        base = LogFilter()
        narrowed = base.with_levels(["ERROR"]).with_namespaces(["Db"])

        assert base.levels == frozenset()
        assert narrowed.is_active
        assert [e.original_line_number for e in narrowed.apply(entries)] == [5]

    def test_with_search_keeps_other_rules(self):
        log_filter = LogFilter(levels=frozenset({"INFO"})).with_search("boot")
        assert log_filter.levels == {"INFO"}
        assert log_filter.search_query == "boot"
