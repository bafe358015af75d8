import json

import pytest

from logstudio.core.content_format import (
    ContentKind,
    analyze_content,
    format_json,
    format_xml,
    looks_like_exception,
)


class TestExceptionDetection:

    @pytest.mark.parametrize("text", [
        "NullPointerException: value was null",
        "query failed\n    at Db.Query(Db.cs:42)",
        "Caused by: java.io.IOException",
        "error: disk full",
    ])
    def test_detected(self, text):
        assert looks_like_exception(text)

    def test_plain_message(self):
        assert not looks_like_exception("user logged in")

    def test_exception_wins_over_json(self):
        result = analyze_content('ValueError: bad payload {"a": 1}')
        assert result.kind is ContentKind.EXCEPTION


class TestJsonFormatting:

    def test_whole_message(self):
        assert format_json('{"a": 1, "b": [1, 2]}') == json.dumps({"a": 1, "b": [1, 2]}, indent=2)

    def test_embedded_object(self):
        formatted = format_json('request body {"user": {"id": 7}} sent')
        assert json.loads(formatted) == {"user": {"id": 7}}

    def test_embedded_array(self):
        assert json.loads(format_json("ids [1, 2, 3]")) == [1, 2, 3]

    def test_invalid_json(self):
        assert format_json("{not json}") is None
        assert format_json("no braces here") is None

    def test_analyze(self):
        result = analyze_content('{"ok": true}')
        assert result.kind is ContentKind.JSON
        assert result.text == '{\n  "ok": true\n}'


class TestXmlFormatting:

    def test_nested_tags_are_indented(self):
        formatted = format_xml("<root><item>1</item><item>2</item></root>")
        assert formatted.split("\n") == [
            "<root>",
            "  <item>1</item>",
            "  <item>2</item>",
            "</root>",
        ]

    def test_self_closing_tag_keeps_depth(self):
        formatted = format_xml("<root><leaf/><item>x</item></root>")
        assert formatted.split("\n") == ["<root>", "  <leaf/>", "  <item>x</item>", "</root>"]

    def test_no_markup(self):
        assert format_xml("a > b") is None

    def test_analyze(self):
        assert analyze_content("payload <r><v>1</v></r>").kind is ContentKind.XML


class TestPlainText:

    def test_text_passes_through(self):
        result = analyze_content("service started on port 8080")
        assert result.kind is ContentKind.TEXT
        assert result.text == "service started on port 8080"
