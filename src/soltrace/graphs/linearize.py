"""C3 linearization of Solidity inheritance lists."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

import networkx as nx

from soltrace.errors import InheritanceError

log = logging.getLogger(__name__)


def inheritance_graph(bases: Mapping[str, Sequence[str]]) -> nx.DiGraph:
    """
    Build a directed graph with an edge from each contract to each direct base.

    Returns
    -------
    nx.DiGraph
        Inheritance graph including bases that are never defined.
    """
    graph = nx.DiGraph()
    graph.add_nodes_from(bases)
    for contract, parents in bases.items():
        for parent in parents:
            graph.add_edge(contract, parent)
    return graph


def _merge(contract: str, sequences: list[list[str]]) -> list[str]:
    """
    C3 merge: repeatedly take the first head that no other tail contains.

    Returns
    -------
    list[str]
        Merged ancestor order.

    Raises
    ------
    InheritanceError
        If no head qualifies before every sequence is consumed.
    """
    pending = [seq for seq in sequences if seq]
    merged: list[str] = []
    while pending:
        candidate: str | None = None
        for seq in pending:
            head = seq[0]
            if not any(head in other[1:] for other in pending):
                candidate = head
                break
        if candidate is None:
            heads = ", ".join(seq[0] for seq in pending)
            message = f"Linearization of inheritance graph impossible for {contract} (heads: {heads})"
            raise InheritanceError(contract, message)
        merged.append(candidate)
        pending = [seq[1:] if seq[0] == candidate else seq for seq in pending]
        pending = [seq for seq in pending if seq]
    return merged


def linearize(
    bases: Mapping[str, Sequence[str]],
    *,
    libraries: Iterable[str] = (),
) -> dict[str, list[str]]:
    """
    Compute the ancestor order of every contract.

    Solidity lists bases from most base-like to most derived, so each direct-base
    list is reversed before merging. The result starts with the contract itself,
    followed by its ancestors nearest first. Libraries linearize to themselves
    alone. Bases that are never defined are treated as roots.

    Parameters
    ----------
    bases : Mapping[str, Sequence[str]]
        Direct bases per contract in declaration order.
    libraries : Iterable[str], optional
        Contracts declared as libraries.

    Returns
    -------
    dict[str, list[str]]
        Linearization per defined contract, in the order of ``bases``.

    Raises
    ------
    InheritanceError
        If the hierarchy contains a cycle or has no consistent order.
    """
    graph = inheritance_graph(bases)
    try:
        cycle = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        cycle = None
    if cycle:
        members = " -> ".join(edge[0] for edge in cycle)
        first = str(cycle[0][0])
        message = f"Inheritance cycle detected: {members} -> {first}"
        raise InheritanceError(first, message)

    cache: dict[str, list[str]] = {}
    for contract in reversed(list(nx.topological_sort(graph))):
        if contract not in bases:
            log.debug("Base %s is not defined in the analyzed sources", contract)
        parents = list(reversed(bases.get(contract, ())))
        sequences = [cache[parent] for parent in parents]
        cache[contract] = [contract, *_merge(contract, [*sequences, parents])]

    library_names = set(libraries)
    result: dict[str, list[str]] = {}
    for contract in bases:
        result[contract] = [contract] if contract in library_names else cache[contract]
    log.debug("Linearized %d contracts", len(result))
    return result


__all__ = ["inheritance_graph", "linearize"]
