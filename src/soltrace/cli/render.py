"""Render call trees for the terminal or as JSON."""

from __future__ import annotations

import json

from rich.text import Text
from rich.tree import Tree

from soltrace.graphs.call_tree import REPEATED_REF, CallTreeNode

SEED_STYLE = "green"
EXTERNAL_STYLE = "yellow"
REPEATED_STYLE = "red"


def _label(node: CallTreeNode) -> Text:
    label = Text(node.key, style=EXTERNAL_STYLE if node.external else "")
    if node.repeated:
        label.append(" ")
        label.append(REPEATED_REF, style=REPEATED_STYLE)
    return label


def render_tree(root: CallTreeNode) -> Tree:
    """
    Build a ``rich`` tree for ``root``.

    The seed is green, external calls yellow and repeated references red.

    Returns
    -------
    Tree
        Renderable tree.
    """
    tree = Tree(Text(root.key, style=SEED_STYLE))
    stack: list[tuple[Tree, CallTreeNode]] = [(tree, root)]
    while stack:
        branch, node = stack.pop()
        for child in node.children:
            stack.append((branch.add(_label(child)), child))
    return tree


def tree_to_json(root: CallTreeNode) -> str:
    """
    Serialize ``root`` as nested ``key -> subtree`` JSON.

    Returns
    -------
    str
        Indented JSON text.
    """
    return json.dumps(root.to_dict(), ensure_ascii=False, indent=2)


__all__ = ["render_tree", "tree_to_json"]
