import pytest

from logstudio.core.log_parser import (
    LineAccumulator,
    LogEntry,
    LogLevel,
    LogParser,
    ParserState,
    level_color,
    parse_log_file,
)
from logstudio.core.schema import DEFAULT_SCHEMA, LogSchema, SchemaFields

LINE_A = "2025-01-01 12:00:00.000 | INFO | A.B | hello"
LINE_B = "2025-01-01 12:00:01.000 | ERROR | A.B | world"


class TestSingleLineParsing:

    def test_two_entries(self):
        entries = parse_log_file(f"{LINE_A}\n{LINE_B}")

        assert len(entries) == 2
        assert [e.level for e in entries] == ["INFO", "ERROR"]
        assert [e.namespace for e in entries] == ["A.B", "A.B"]

    def test_fields_are_trimmed_capture_groups(self):
        entry = parse_log_file("2025-01-01 12:00:00.123 |  WARN  |  App.Core  |  started  ")[0]

        assert entry.timestamp == "2025-01-01 12:00:00.123"
        assert entry.level == "WARN"
        assert entry.namespace == "App.Core"
        assert entry.message == "started"
        assert entry.original_line_number == 1
        assert entry.line_count == 1
        assert entry.is_multi_line is False

    def test_full_text_keeps_original_line(self):
        line = "  " + LINE_A
        entry = parse_log_file(line)[0]
        assert entry.full_text == line

    def test_level_is_uppercased(self):
        schema = LogSchema(pattern=r'^(\S+) (\w+) (\S+) (.*)$')
        entry = parse_log_file("ts debug ns msg", schema)[0]
        assert entry.level == "DEBUG"

    def test_empty_level_defaults_to_info(self):
        schema = LogSchema(pattern=r'^(\S+) \[(\w*)\] (\S+) (.*)$')
        entry = parse_log_file("ts [] ns msg", schema)[0]
        assert entry.level == "INFO"

    def test_custom_field_order(self):
        schema = LogSchema(
            pattern=r'^\[(\w+)\] (\S+) (\S+) - (.*)$',
            fields=SchemaFields(level=1, timestamp=2, namespace=3, message=4),
        )
        entry = parse_log_file("[ERROR] 10:00:00 Db.Pool - exhausted", schema)[0]

        assert entry.level == "ERROR"
        assert entry.timestamp == "10:00:00"
        assert entry.namespace == "Db.Pool"
        assert entry.message == "exhausted"

    def test_line_offset_shifts_numbers(self):
        entries = parse_log_file(f"{LINE_A}\n{LINE_B}", line_offset=10)
        assert [e.original_line_number for e in entries] == [11, 12]

    def test_crlf_line_endings(self):
        entries = parse_log_file(f"{LINE_A}\r\n{LINE_B}\r\n")
        assert len(entries) == 2
        assert entries[0].full_text == LINE_A


class TestMultiLineParsing:

    def test_stack_trace_continuation(self):
        content = (
            "2025-01-01 12:00:00.000 | ERROR | App.Db | query failed\n"
            "    at Db.Query(Db.cs:42)"
        )
        entries = parse_log_file(content)

        assert len(entries) == 1
        assert entries[0].is_multi_line is True
        assert entries[0].line_count == 2
        assert entries[0].message == "query failed\n    at Db.Query(Db.cs:42)"

    def test_blank_continuation_line(self):
        content = f"{LINE_A}\nTraceback:\n\n  File x\n{LINE_B}"
        first, second = parse_log_file(content)

        assert first.line_count == 4
        assert first.full_text == f"{LINE_A}\nTraceback:\n\n  File x"
        assert first.message == "hello\nTraceback:\n\n  File x"
        assert second.original_line_number == 5

    def test_whitespace_only_continuation_keeps_full_text(self):
        first = parse_log_file(f"{LINE_A}\n   \nmore")[0]

        assert first.full_text == f"{LINE_A}\n   \nmore"
        assert first.message == "hello\n\nmore"

    def test_trailing_newline_counts_as_continuation(self):
        entry = parse_log_file(LINE_A + "\n")[0]

        # split keeps the empty string after the final newline
        assert entry.line_count == 2
        assert entry.full_text == LINE_A + "\n"


class TestUnmatchedLines:

    def test_unknown_entry_before_first_match(self):
        entries = parse_log_file(f"garbage line\n{LINE_A}")

        assert len(entries) == 2
        assert entries[0].level == "UNKNOWN"
        assert entries[0].timestamp == ""
        assert entries[0].namespace == ""
        assert entries[0].message == "garbage line"
        assert entries[0].full_text == "garbage line"
        assert entries[1].original_line_number == 2

    def test_unknown_entries_do_not_accumulate(self):
        entries = parse_log_file("one\ntwo")

        assert [e.message for e in entries] == ["one", "two"]
        assert all(e.line_count == 1 for e in entries)

    def test_blank_lines_without_context_are_ignored(self):
        entries = parse_log_file(f"\n\n   \n{LINE_A}")

        assert len(entries) == 1
        assert entries[0].original_line_number == 4

    def test_empty_content(self):
        assert parse_log_file("") == []


class TestParserProperties:

    def test_every_non_blank_line_lands_in_one_entry(self):
        content = f"x\n{LINE_A}\n  at a\n\n{LINE_B}\ny"
        entries = parse_log_file(content)

        rebuilt = "\n".join(e.full_text for e in entries)
        assert [l for l in rebuilt.split("\n") if l.strip()] == \
            [l for l in content.split("\n") if l.strip()]

    @pytest.mark.parametrize("cut", [2, 3])
    def test_suffix_parse_matches_full_parse(self, cut):
        # cut falls on a record boundary
        lines = [LINE_A, "  continuation", LINE_B, LINE_A.replace("hello", "again")]
        head = "\n".join(lines[:cut])
        tail = "\n".join(lines[cut:])

        full = parse_log_file(head + "\n" + tail)
        incremental = parse_log_file(head) + parse_log_file(tail, line_offset=cut)
        assert incremental == full

    def test_invalid_schema_fails_before_parsing(self):
        with pytest.raises(ValueError):
            parse_log_file(LINE_A, LogSchema(pattern="(unclosed"))


class TestLineAccumulator:

    def test_states(self):
        acc = LineAccumulator(DEFAULT_SCHEMA)
        assert acc.state is ParserState.IDLE

        assert acc.feed(LINE_A, 1) is None
        assert acc.state is ParserState.ACCUMULATING

        assert acc.feed("", 2) is None
        assert acc.state is ParserState.ACCUMULATING

        completed = acc.feed(LINE_B, 3)
        assert completed.message == "hello\n"
        assert completed.line_count == 2

        last = acc.finish()
        assert last.level == "ERROR"
        assert acc.state is ParserState.IDLE
        assert acc.finish() is None

    def test_blank_line_when_idle_is_dropped(self):
        acc = LineAccumulator(DEFAULT_SCHEMA)
        assert acc.feed("   ", 1) is None
        assert acc.state is ParserState.IDLE

    def test_unknown_line_when_idle(self):
        acc = LineAccumulator(DEFAULT_SCHEMA)
        entry = acc.feed("noise", 7)

        assert entry.level == LogLevel.UNKNOWN.value
        assert entry.original_line_number == 7
        assert acc.state is ParserState.IDLE


class TestLogEntry:

    def test_entries_are_immutable(self):
        entry = parse_log_file(LINE_A)[0]
        with pytest.raises(AttributeError):
            entry.level = "DEBUG"

    def test_to_dict_omits_missing_source(self):
        data = parse_log_file(LINE_A)[0].to_dict()

        assert data["level"] == "INFO"
        assert data["original_line_number"] == 1
        assert "source_file" not in data

    def test_to_dict_with_source(self):
        entry = LogEntry(1, "", "INFO", "", "m", "m", source_file="a.log")
        assert entry.to_dict()["source_file"] == "a.log"

    def test_parser_class_uses_schema(self):
        parser = LogParser(LogSchema(pattern=r'^(\S+) (\S+) (\S+) (.*)$'))
        assert parser.parse("t l n m")[0].namespace == "n"


class TestLevelColors:

    def test_known_level(self):
        assert level_color("ERROR") == "red"

    def test_unknown_level_string(self):
        assert level_color("NOTICE") == "white"
