"""
Namespace Tree Module - Hierarchical namespace selector

Selecting a node toggles it with the hierarchical rule: a namespace replaces
its selected ancestors and descendants. Nodes below a selected namespace are
highlighted as included.
"""
from typing import AbstractSet, Dict, Iterable

from rich.text import Text
from textual.message import Message
from textual.widgets import Tree
from textual.widgets.tree import TreeNode

from logstudio.core.namespaces import (
    NamespaceNode,
    build_namespace_tree,
    iter_nodes,
    is_namespace_included,
    is_namespace_selected,
)


def node_label(node: NamespaceNode, selection: AbstractSet[str]) -> Text:
    label = Text(node.name)
    label.append(f" ({node.count})", style="dim")

    if is_namespace_selected(node.full_path, selection):
        label.stylize("bold reverse")
    elif is_namespace_included(node.full_path, selection):
        label.stylize("green")
    return label


class NamespaceTree(Tree[str]):
    """Tree of namespaces; node data is the namespace full path"""

    class Toggled(Message):
        """Posted when the user toggles a namespace"""

        def __init__(self, namespace: str) -> None:
            super().__init__()
            self.namespace = namespace

    def __init__(self, **kwargs):
        super().__init__("Namespaces", **kwargs)
        self.show_root = False
        self.guide_depth = 2
        self.namespace_nodes: Dict[str, NamespaceNode] = {}
        self.tree_nodes: Dict[str, TreeNode[str]] = {}
        self.selection: AbstractSet[str] = frozenset()

    def set_namespaces(self, namespaces: Iterable[str], selection: AbstractSet[str]) -> None:
        """
        Rebuild the tree

        Args:
            namespaces: One namespace per entry, so counts are entry counts
            selection: Currently selected namespaces
        """
        expanded = {path for path, node in self.tree_nodes.items() if node.is_expanded}
        root = build_namespace_tree(namespaces)

        self.clear()
        self.namespace_nodes.clear()
        self.tree_nodes.clear()
        self.selection = selection
        self._add_nodes(root, expanded)
        self.root.expand()

    def _add_nodes(self, root: NamespaceNode, expanded: set) -> None:
        # iter_nodes walks depth first, so the parent of a node at depth d is
        # the last node added at depth d - 1
        parents = [self.root]
        for node, depth in iter_nodes(root):
            del parents[depth + 1:]
            label = node_label(node, self.selection)
            if node.has_children:
                tree_node = parents[depth].add(label, data=node.full_path,
                                               expand=node.full_path in expanded)
            else:
                tree_node = parents[depth].add_leaf(label, data=node.full_path)
            parents.append(tree_node)
            self.namespace_nodes[node.full_path] = node
            self.tree_nodes[node.full_path] = tree_node

    def update_selection(self, selection: AbstractSet[str]) -> None:
        """Restyle labels for a new selection without rebuilding"""
        self.selection = selection
        for path, tree_node in self.tree_nodes.items():
            tree_node.set_label(node_label(self.namespace_nodes[path], selection))

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        event.stop()
        if event.node.data:
            self.post_message(self.Toggled(event.node.data))
