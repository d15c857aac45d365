"""Run the symbol, linearization and resolution phases over a forest."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from soltrace.graphs.call_context import CallGraphIndex
from soltrace.graphs.call_resolver import resolve_calls
from soltrace.graphs.linearize import linearize
from soltrace.graphs.symbols import build_symbol_table
from soltrace.syntax.nodes import SourceUnit

log = logging.getLogger(__name__)


def build_call_graph(forest: Sequence[SourceUnit]) -> CallGraphIndex:
    """
    Resolve the call structure of every contract in ``forest``.

    Symbols and linearizations are computed for the whole forest before any call
    is resolved.

    Returns
    -------
    CallGraphIndex
        Resolved call edges, modifier lists, decorators and linearizations.

    Raises
    ------
    InheritanceError
        If any contract hierarchy cannot be linearized.
    """
    units = list(forest)
    symbols = build_symbol_table(units)
    dependencies = linearize(symbols.bases, libraries=symbols.libraries())
    index = resolve_calls(units, dependencies, symbols.state_vars)

    edge_count = sum(
        len(edges) for functions in index.calls.values() for edges in functions.values()
    )
    log.info(
        "Call graph build complete: %d units, %d contracts, %d edges",
        len(units),
        len(index.calls),
        edge_count,
    )
    return index


__all__ = ["build_call_graph"]
