"""Pytest configuration for the soltrace test suite."""

from __future__ import annotations

import pytest

from soltrace.graphs.call_context import CallGraphIndex
from soltrace.graphs.callgraph_builder import build_call_graph
from tests._helpers.solidity_ast import IndexFactory, Raw, to_forest


@pytest.fixture
def build_index() -> IndexFactory:
    """Return a factory that resolves raw source units into a call graph index.

    Returns
    -------
    IndexFactory
        Callable taking raw ``SourceUnit`` mappings.
    """

    def _build(*units: Raw) -> CallGraphIndex:
        return build_call_graph(to_forest(*units))

    return _build
