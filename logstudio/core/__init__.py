"""
Core Package - Log parsing and filtering engine

Package Structure:
- schema: Parsing schema (LogSchema, DEFAULT_SCHEMA)
- log_parser: Line parser state machine (LogParser, LogEntry, parse_log_file)
- log_filter: Level / namespace / text filtering (filter_log_entries, LogFilter)
- namespaces: Namespace index, tree and hierarchical selection
- incremental: Re-parsing growing or truncated files (IncrementalLoader)
- merger: Multi-file timeline merge (merge_log_files)
- content_format: JSON / XML / exception detection for display
"""

from .schema import LogSchema, SchemaFields, DEFAULT_SCHEMA
from .log_parser import LogEntry, LogLevel, LogParser, LineAccumulator, ParserState, parse_log_file
from .log_filter import LogFilter, filter_log_entries
from .namespaces import (
    NamespaceNode,
    build_namespace_tree,
    extract_log_levels,
    extract_unique_namespaces,
    is_namespace_included,
    is_namespace_selected,
    toggle_namespace_selection,
)
from .incremental import IncrementalLoader, LoaderState, ReloadMode, ReloadResult, apply_reload
from .merger import merge_entries, merge_log_files

__all__ = [
    # Schema
    'LogSchema',
    'SchemaFields',
    'DEFAULT_SCHEMA',

    # Parsing
    'LogEntry',
    'LogLevel',
    'LogParser',
    'LineAccumulator',
    'ParserState',
    'parse_log_file',

    # Filtering and namespaces
    'LogFilter',
    'filter_log_entries',
    'NamespaceNode',
    'build_namespace_tree',
    'extract_log_levels',
    'extract_unique_namespaces',
    'is_namespace_included',
    'is_namespace_selected',
    'toggle_namespace_selection',

    # Loading
    'IncrementalLoader',
    'LoaderState',
    'ReloadMode',
    'ReloadResult',
    'apply_reload',
    'merge_entries',
    'merge_log_files',
]
