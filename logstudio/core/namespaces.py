"""
Namespace Module - Namespace index, tree and hierarchical selection

Namespaces are dot-separated paths such as "App.Service.Sub". Selection state
is an immutable set of paths; toggling keeps it free of ancestor/descendant
pairs so "selected or under a selected path" is enough to decide inclusion.
"""
from dataclasses import dataclass, field
from typing import AbstractSet, Dict, FrozenSet, Iterable, Iterator, List, Tuple

from .log_parser import LogEntry


@dataclass
class NamespaceNode:
    """Tree node for one namespace segment"""
    name: str
    full_path: str
    children: Dict[str, 'NamespaceNode'] = field(default_factory=dict)
    count: int = 0

    @property
    def has_children(self) -> bool:
        return bool(self.children)


def extract_unique_namespaces(entries: Iterable[LogEntry]) -> List[str]:
    """Sorted distinct namespaces of entries"""
    return sorted({entry.namespace for entry in entries})


def extract_log_levels(entries: Iterable[LogEntry]) -> List[str]:
    """Sorted distinct levels of entries"""
    return sorted({entry.level for entry in entries})


def build_namespace_tree(namespaces: Iterable[str]) -> NamespaceNode:
    """
    Build a tree from namespace paths

    Every node on a path is counted once per occurrence, so a node's count
    covers itself and everything below it. Passing distinct namespaces counts
    namespaces; passing one namespace per entry counts entries. Empty
    namespaces (fallback entries) are not part of the tree.

    Returns:
        Root node (empty name and path)
    """
    root = NamespaceNode(name='', full_path='')

    for namespace in namespaces:
        if not namespace:
            continue
        parts = namespace.split('.')
        current = root
        for index, part in enumerate(parts):
            child = current.children.get(part)
            if child is None:
                child = NamespaceNode(name=part, full_path='.'.join(parts[:index + 1]))
                current.children[part] = child
            current = child
            current.count += 1

    return root


def iter_nodes(root: NamespaceNode) -> Iterator[Tuple[NamespaceNode, int]]:
    """Depth-first walk yielding (node, depth), root excluded"""
    stack = [(child, 0) for child in reversed(list(root.children.values()))]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        stack.extend((child, depth + 1) for child in reversed(list(node.children.values())))


def is_ancestor(ancestor: str, namespace: str) -> bool:
    """True when namespace lies strictly below ancestor"""
    return namespace.startswith(ancestor + '.')


def toggle_namespace_selection(selection: AbstractSet[str], namespace: str) -> FrozenSet[str]:
    """
    Toggle namespace in selection with hierarchical rules

    - Already selected: removed, nothing else changes
    - Otherwise: selected ancestors and descendants are dropped, then it is added

    Returns:
        New selection; the input is not modified
    """
    if namespace in selection:
        return frozenset(selection - {namespace})

    kept = {
        selected for selected in selection
        if not is_ancestor(selected, namespace) and not is_ancestor(namespace, selected)
    }
    kept.add(namespace)
    return frozenset(kept)


def is_namespace_selected(namespace: str, selection: AbstractSet[str]) -> bool:
    return namespace in selection


def is_namespace_included(namespace: str, selection: AbstractSet[str]) -> bool:
    """True when a strict ancestor is selected (implicitly shown, used for highlighting)"""
    return any(is_ancestor(selected, namespace) for selected in selection)
