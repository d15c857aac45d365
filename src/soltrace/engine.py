"""Entry operation: trace the reachable call tree of one function."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from soltrace.config.models import TraceOptions, split_function_id
from soltrace.errors import EmptyInputError, ProblemDetail, TraceInputError, problem
from soltrace.graphs.call_context import VISIBILITY_FILTERS, CallGraphIndex, VisibilityFilter
from soltrace.graphs.call_tree import CallTreeNode, build_call_tree
from soltrace.graphs.callgraph_builder import build_call_graph
from soltrace.syntax.loader import ParseFn, load_forest
from soltrace.syntax.nodes import SourceUnit

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TraceResult:
    """Outcome of a trace: a tree on success, a problem on user error."""

    tree: CallTreeNode | None = None
    problem: ProblemDetail | None = None
    index: CallGraphIndex | None = None

    @property
    def ok(self) -> bool:
        return self.tree is not None


def _failure(detail: ProblemDetail) -> TraceResult:
    log.debug("Trace rejected: %s", detail.detail)
    return TraceResult(problem=detail)


def _bad_function_id(function_id: str) -> ProblemDetail:
    return problem(
        code="trace.bad_function_id",
        title="Malformed function identifier",
        detail=(
            "You did not provide the function identifier in the right format "
            '"CONTRACT::FUNCTION"'
        ),
        extras={"function_id": function_id},
    )


def _bad_visibility(visibility: str) -> ProblemDetail:
    return problem(
        code="trace.bad_visibility",
        title="Unknown visibility filter",
        detail=(
            f'The "{visibility}" type of call to traverse is not known '
            f"[{'|'.join(VISIBILITY_FILTERS)}]"
        ),
        extras={"visibility": visibility},
    )


def trace(
    function_id: str,
    visibility: str,
    forest: Iterable[SourceUnit],
) -> TraceResult:
    """
    Resolve the call graph of ``forest`` and expand it from ``function_id``.

    Parameters
    ----------
    function_id : str
        Seed function as ``Contract::function``.
    visibility : str
        ``all``, ``internal`` or ``external``.
    forest : Iterable[SourceUnit]
        Every parsed source file to analyze.

    Returns
    -------
    TraceResult
        The tree, or a problem describing the rejected input.

    Raises
    ------
    InheritanceError
        If a contract hierarchy cannot be linearized.
    """
    units = list(forest)
    if not units:
        return _failure(EmptyInputError().problem_detail)
    parts = split_function_id(function_id)
    if parts is None:
        return _failure(_bad_function_id(function_id))
    if visibility not in VISIBILITY_FILTERS:
        return _failure(_bad_visibility(visibility))
    contract, function = parts
    accepted: VisibilityFilter = visibility  # type: ignore[assignment]

    index = build_call_graph(units)
    try:
        tree = build_call_tree(index, contract, function, accepted)
    except TraceInputError as exc:
        return TraceResult(problem=exc.problem_detail, index=index)
    return TraceResult(tree=tree, index=index)


def trace_files(options: TraceOptions, *, parse: ParseFn | None = None) -> TraceResult:
    """
    Load the files named by ``options`` and trace them.

    Returns
    -------
    TraceResult
        Same as :func:`trace`; an empty file list is a user error.

    Raises
    ------
    SourceLoadError
        If a file cannot be read or parsed.
    InheritanceError
        If a contract hierarchy cannot be linearized.
    """
    try:
        forest = load_forest(options.files, parse=parse)
    except EmptyInputError as exc:
        return _failure(exc.problem_detail)
    return trace(options.function_id, options.visibility, forest)


__all__ = ["TraceResult", "trace", "trace_files"]
