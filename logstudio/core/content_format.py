"""
Content Format Module - Detects structured payloads inside log messages

Used by the entry details panel to pretty-print JSON and XML and to flag
exception stack traces. Detection order: exception, JSON, XML, plain text.
"""
import json
import re
from dataclasses import dataclass
from enum import Enum


class ContentKind(Enum):
    EXCEPTION = "exception"
    JSON = "json"
    XML = "xml"
    TEXT = "text"


@dataclass(frozen=True)
class FormattedContent:
    kind: ContentKind
    text: str


EXCEPTION_PATTERNS = [
    re.compile(r'(?:Exception|Error)\s*:\s*(.+?)(?=\n|$)', re.IGNORECASE),
    re.compile(r'at\s+[\w.<>$]+\([^)]*\)', re.IGNORECASE),
    re.compile(r'\s+at\s+.+?\(.+?:\d+\)', re.IGNORECASE),
    re.compile(r'Caused by:\s*.+', re.IGNORECASE),
]

# One level of nested braces, same as the viewer's inline detection
_JSON_OBJECT_RE = re.compile(r'\{(?:[^{}]|(?:\{[^{}]*\}))*\}', re.DOTALL)
_JSON_ARRAY_RE = re.compile(r'\[[\s\S]*?\]')
_XML_RE = re.compile(r'<[\s\S]*>')
_XML_SPLIT_RE = re.compile(r'(>)(<)(/*)')
_XML_CLOSE_RE = re.compile(r'^</\w')
_XML_OPEN_RE = re.compile(r'^<\w[^>]*[^/]>.*$')


def looks_like_exception(text: str) -> bool:
    return any(pattern.search(text) for pattern in EXCEPTION_PATTERNS)


def format_json(text: str):
    """Pretty-print text, or the first JSON value embedded in it; None if there is none"""
    trimmed = text.strip()
    candidates = []

    if (trimmed.startswith('{') and trimmed.endswith('}')) or \
            (trimmed.startswith('[') and trimmed.endswith(']')):
        candidates.append(trimmed)

    match = _JSON_OBJECT_RE.search(text) or _JSON_ARRAY_RE.search(text)
    if match:
        candidates.append(match.group(0))

    for candidate in candidates:
        try:
            return json.dumps(json.loads(candidate), indent=2)
        except ValueError:
            continue
    return None


def format_xml(text: str):
    """Put each tag on its own line, indented by nesting depth; None if no markup"""
    if '<' not in text or '>' not in text:
        return None

    match = _XML_RE.search(text)
    if not match:
        return None

    split = _XML_SPLIT_RE.sub(r'\1\n\2\3', match.group(0))
    depth = 0
    lines = []
    for line in split.split('\n'):
        if _XML_CLOSE_RE.match(line):
            depth = max(depth - 1, 0)
        lines.append('  ' * depth + line)
        if _XML_OPEN_RE.match(line) and '</' not in line:
            depth += 1
    return '\n'.join(lines)


def analyze_content(text: str) -> FormattedContent:
    """Classify text and return it formatted for display"""
    if looks_like_exception(text):
        return FormattedContent(ContentKind.EXCEPTION, text)

    formatted = format_json(text)
    if formatted is not None:
        return FormattedContent(ContentKind.JSON, formatted)

    formatted = format_xml(text)
    if formatted is not None:
        return FormattedContent(ContentKind.XML, formatted)

    return FormattedContent(ContentKind.TEXT, text)
