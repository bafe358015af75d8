"""
Log Filter Module - Compound level / namespace / text filtering

All rules are ANDed. An empty rule lets everything through. Namespace rules
are hierarchical: selecting "App.Service" also shows "App.Service.Sub".
"""
from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable, List

from .log_parser import LogEntry


def namespace_matches(namespace: str, selected: str) -> bool:
    """True when namespace is selected itself or a dotted descendant of it"""
    return namespace == selected or namespace.startswith(selected + '.')


def filter_log_entries(
    entries: Iterable[LogEntry],
    levels: AbstractSet[str],
    namespaces: AbstractSet[str],
    search_query: str,
) -> List[LogEntry]:
    """
    Filter entries by level, namespace and free text

    Args:
        entries: Entries to filter (not modified)
        levels: Allowed levels; empty means all
        namespaces: Selected namespaces, descendants included; empty means all
        search_query: Case-insensitive substring of full_text; empty means all

    Returns:
        Matching entries in input order
    """
    query = search_query.lower() if search_query else ''
    result = []

    for entry in entries:
        if levels and entry.level not in levels:
            continue

        if namespaces and not any(namespace_matches(entry.namespace, ns) for ns in namespaces):
            continue

        if query and query not in entry.full_text.lower():
            continue

        result.append(entry)

    return result


@dataclass(frozen=True)
class LogFilter:
    """Immutable filter configuration passed to the viewer"""
    levels: FrozenSet[str] = field(default_factory=frozenset)
    namespaces: FrozenSet[str] = field(default_factory=frozenset)
    search_query: str = ''

    @property
    def is_active(self) -> bool:
        return bool(self.levels or self.namespaces or self.search_query)

    def apply(self, entries: Iterable[LogEntry]) -> List[LogEntry]:
        return filter_log_entries(entries, self.levels, self.namespaces, self.search_query)

    def with_levels(self, levels: Iterable[str]) -> 'LogFilter':
        return LogFilter(frozenset(levels), self.namespaces, self.search_query)

    def with_namespaces(self, namespaces: Iterable[str]) -> 'LogFilter':
        return LogFilter(self.levels, frozenset(namespaces), self.search_query)

    def with_search(self, search_query: str) -> 'LogFilter':
        return LogFilter(self.levels, self.namespaces, search_query)
