"""CLI entrypoint for tracing Solidity call trees."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console

from soltrace.cli.render import render_tree, tree_to_json
from soltrace.config.models import TraceOptions
from soltrace.engine import TraceResult, trace_files
from soltrace.errors import ProblemDetail, ProblemError, log_problem, problem
from soltrace.syntax.loader import ParseFn

LOG = logging.getLogger("soltrace.cli")


# ---------------------------------------------------------------------------
# Argument parsing / logging setup
# ---------------------------------------------------------------------------


_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _setup_logging(verbosity: int) -> None:
    """Map the -v count onto WARNING, INFO or DEBUG; resolution decisions log at DEBUG."""
    level = _VERBOSITY_LEVELS[min(max(verbosity, 0), len(_VERBOSITY_LEVELS) - 1)]
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="soltrace",
        description="Trace the reachable call tree of a Solidity function.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--format",
        choices=["tree", "json"],
        default="tree",
        help="Output format (default: tree)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored tree output",
    )
    parser.add_argument(
        "function_id",
        help="Function to trace, as 'CONTRACT::FUNCTION'",
    )
    parser.add_argument(
        "visibility",
        help="Calls to follow: all, internal or external",
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Solidity sources (.sol) or parsed AST dumps (.json)",
    )
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _options_problem(exc: ValidationError) -> ProblemDetail:
    messages = [str(error.get("msg", "")) for error in exc.errors()]
    return problem(
        code="cli.invalid_arguments",
        title="Invalid trace arguments",
        detail="; ".join(messages),
        extras={"fields": [".".join(str(part) for part in error["loc"]) for error in exc.errors()]},
    )


def _report(console: Console, detail: ProblemDetail) -> int:
    log_problem(LOG, detail, level=logging.WARNING)
    console.print(detail.detail, style="yellow", markup=False, highlight=False)
    return 1


def _emit(result: TraceResult, args: argparse.Namespace, console: Console) -> int:
    if result.tree is None:
        if result.problem is None:
            message = "Trace produced neither a tree nor a problem"
            raise RuntimeError(message)
        return _report(console, result.problem)
    if args.format == "json":
        console.out(tree_to_json(result.tree), highlight=False)
    else:
        console.print(render_tree(result.tree))
    return 0


def cmd_trace(
    args: argparse.Namespace,
    *,
    parse: ParseFn | None = None,
    console: Console | None = None,
) -> int:
    """
    Trace the requested function and print its call tree.

    Returns
    -------
    int
        0 on success, 1 when the input is rejected.
    """
    out = console or Console(no_color=args.no_color, highlight=False)
    try:
        options = TraceOptions(
            function_id=args.function_id,
            visibility=args.visibility,
            files=tuple(args.files),
        )
    except ValidationError as exc:
        return _report(out, _options_problem(exc))

    LOG.info(
        "Tracing %s (%s) over %d paths",
        options.function_id,
        options.visibility,
        len(options.files),
    )
    result = trace_files(options, parse=parse)
    return _emit(result, args, out)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Iterable[str] | None = None, *, parse: ParseFn | None = None) -> int:
    """
    CLI entrypoint for soltrace.

    Parameters
    ----------
    argv:
        Optional argument list (defaults to sys.argv).
    parse:
        Optional Solidity parser used for ``.sol`` inputs.

    Returns
    -------
    int
        Exit code (0 on success).
    """
    parser = _make_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    _setup_logging(args.verbose)

    try:
        return cmd_trace(args, parse=parse)
    except ProblemError as exc:
        log_problem(LOG, exc.problem_detail)
        return 1
    except Exception as exc:  # noqa: BLE001 pragma: no cover - error path
        pd = problem(
            code="cli.failure",
            title="CLI command failed",
            detail=str(exc),
            extras={"function_id": args.function_id},
        )
        log_problem(LOG, pd)
        return 1


if __name__ == "__main__":
    sys.exit(main())
