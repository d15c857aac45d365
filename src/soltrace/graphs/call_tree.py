"""Materialize a cycle-safe call tree from a seed function."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from soltrace.errors import UnknownContractError, UnknownFunctionError
from soltrace.graphs.call_context import (
    CallEdge,
    CallGraphIndex,
    Visibility,
    VisibilityFilter,
)

log = logging.getLogger(__name__)

REPEATED_REF = "..[Repeated Ref].."
UNDEFINED_CALLEE = "undefined"


@dataclass
class CallTreeNode:
    """One rendered call in the tree.

    ``key`` is the display key ``Contract::function`` plus the callee's decorator.
    ``external`` marks external calls shown under a filter other than
    ``external``; ``repeated`` marks a leaf standing in for a node expanded
    elsewhere in the tree.
    """

    key: str
    contract: str
    function: str
    decorator: str = ""
    visibility: Visibility | None = None
    call_count: int = 1
    external: bool = False
    repeated: bool = False
    children: list[CallTreeNode] = field(default_factory=list)

    def child(self, key: str) -> CallTreeNode | None:
        for node in self.children:
            if node.key == key:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        """
        Nested ``key -> subtree`` mapping rooted at this node.

        Returns
        -------
        dict[str, Any]
            ``{key: {...}}`` where repeated references map to :data:`REPEATED_REF`.
        """
        return {self.key: self._subtree()}

    def _subtree(self) -> dict[str, Any] | str:
        if self.repeated:
            return REPEATED_REF
        subtree: dict[str, Any] = {}
        for node in self.children:
            subtree[node.key] = node._subtree()
        return subtree

    def walk(self) -> list[CallTreeNode]:
        """
        All nodes in pre-order.

        Returns
        -------
        list[CallTreeNode]
            This node followed by its descendants.
        """
        ordered: list[CallTreeNode] = []
        stack: list[CallTreeNode] = [self]
        while stack:
            node = stack.pop()
            ordered.append(node)
            stack.extend(reversed(node.children))
        return ordered


def find_modifier(index: CallGraphIndex, contract: str, modifier: str) -> dict[str, CallEdge]:
    """
    Edges of the modifier ``modifier`` as seen from ``contract``.

    The contract's own definitions are searched first, then each ancestor in
    linearization order; only the first match contributes.

    Returns
    -------
    dict[str, CallEdge]
        Edges of the first matching modifier, empty when none is found.
    """
    own = index.edges(contract, modifier)
    if own is not None:
        return own
    for ancestor in index.dependencies.get(contract, []):
        edges = index.edges(ancestor, modifier)
        if edges is not None:
            return edges
    log.debug("Modifier %s not found for %s", modifier, contract)
    return {}


def _effective_edges(index: CallGraphIndex, contract: str, function: str) -> dict[str, CallEdge]:
    edges = dict(index.edges(contract, function) or {})
    for modifier in index.modifiers_of(contract, function):
        edges.update(find_modifier(index, contract, modifier))
    return edges


def _accepts(edge: CallEdge, visibility: VisibilityFilter) -> bool:
    return visibility == "all" or edge.visibility == visibility


class CallTreeBuilder:
    """Depth-first expansion guarded by a traversal-wide touched set.

    Expansion keeps one frame per open node on an explicit stack, so the order in
    which keys are first touched is exactly that of a recursive walk while deep
    call chains never hit the interpreter's recursion limit.
    """

    def __init__(self, index: CallGraphIndex, visibility: VisibilityFilter) -> None:
        self.index = index
        self.visibility = visibility
        self.touched: set[str] = set()

    def build(self, contract: str, function: str) -> CallTreeNode:
        """
        Expand the call tree rooted at ``contract::function``.

        Returns
        -------
        CallTreeNode
            Root node of the materialized tree.

        Raises
        ------
        UnknownContractError
            If the contract has no resolved functions at all.
        UnknownFunctionError
            If the contract does not define the function.
        """
        if contract not in self.index.calls:
            raise UnknownContractError(contract)
        if function not in self.index.calls[contract]:
            raise UnknownFunctionError(contract, function)

        decorator = self.index.decorator(contract, function)
        root = CallTreeNode(
            key=f"{contract}::{function}{decorator}",
            contract=contract,
            function=function,
            decorator=decorator,
        )
        self.touched.add(root.key)

        stack: list[tuple[CallTreeNode, Iterator[tuple[str, CallEdge]]]] = [
            (root, iter(_effective_edges(self.index, contract, function).items()))
        ]
        while stack:
            node, pending = stack[-1]
            item = next(pending, None)
            if item is None:
                stack.pop()
                continue
            child = self._attach(node, *item)
            if child is not None:
                edges = _effective_edges(self.index, child.contract, child.function)
                stack.append((child, iter(edges.items())))
        log.info("Call tree for %s::%s has %d nodes", contract, function, len(root.walk()))
        return root

    def _attach(self, parent: CallTreeNode, callee: str, edge: CallEdge) -> CallTreeNode | None:
        """Attach the node for one edge; return it when it must be expanded next."""
        if callee == UNDEFINED_CALLEE or not _accepts(edge, self.visibility):
            return None
        target = edge.target_contract
        decorator = self.index.decorator(target, callee)
        child = CallTreeNode(
            key=f"{target}::{callee}{decorator}",
            contract=target,
            function=callee,
            decorator=decorator,
            visibility=edge.visibility,
            call_count=edge.call_count,
            external=edge.visibility == "external" and self.visibility != "external",
        )
        parent.children.append(child)
        if child.key in self.touched:
            child.repeated = bool(_effective_edges(self.index, target, callee))
            return None
        self.touched.add(child.key)
        if edge.is_address_target or self.index.edges(target, callee) is None:
            return None
        return child


def build_call_tree(
    index: CallGraphIndex,
    contract: str,
    function: str,
    visibility: VisibilityFilter = "all",
) -> CallTreeNode:
    """
    Materialize the call tree for a seed function.

    Parameters
    ----------
    index : CallGraphIndex
        Resolved call structure of the forest.
    contract : str
        Seed contract name.
    function : str
        Seed function name within ``contract``.
    visibility : VisibilityFilter, optional
        ``all``, ``internal`` or ``external`` edges to follow.

    Returns
    -------
    CallTreeNode
        Root of the tree.
    """
    return CallTreeBuilder(index, visibility).build(contract, function)


__all__ = [
    "REPEATED_REF",
    "UNDEFINED_CALLEE",
    "CallTreeBuilder",
    "CallTreeNode",
    "build_call_tree",
    "find_modifier",
]
