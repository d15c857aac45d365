"""Shared error taxonomy and Problem Details helpers."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4


def generate_correlation_id() -> str:
    """
    Return a new correlation identifier for tracing errors.

    Returns
    -------
    str
        UUID4 correlation identifier.
    """
    return str(uuid4())


@dataclass(frozen=True)
class ProblemDetail:
    """
    RFC 9457 Problem Details payload.

    Fields mirror the standard shape with optional extras for diagnostics.
    """

    type: str
    title: str
    detail: str
    instance: str = field(default_factory=generate_correlation_id)
    code: str | None = None
    extras: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to a JSON-friendly dict.

        Returns
        -------
        dict[str, Any]
            Problem detail payload as a plain dictionary.
        """
        payload: dict[str, Any] = {
            "type": self.type,
            "title": self.title,
            "detail": self.detail,
            "instance": self.instance,
        }
        if self.code is not None:
            payload["code"] = self.code
        if self.extras:
            payload["extras"] = self.extras
        return payload


PROBLEM_TYPE_BASE = "https://problems.soltrace.dev/"


def problem(
    code: str,
    title: str,
    detail: str,
    *,
    extras: dict[str, Any] | None = None,
) -> ProblemDetail:
    """
    Build a problem whose type URI is derived from ``code``.

    ``code`` is dotted by area, e.g. ``trace.unknown_contract`` or
    ``source.load_failed``; each call gets a fresh correlation id.

    Returns
    -------
    ProblemDetail
        Structured problem payload.
    """
    return ProblemDetail(
        type=f"{PROBLEM_TYPE_BASE}{code}",
        title=title,
        detail=detail,
        code=code,
        extras=extras or {},
    )


def log_problem(
    logger: logging.Logger | logging.LoggerAdapter,
    detail: ProblemDetail,
    *,
    level: int = logging.ERROR,
) -> None:
    """Emit a Problem Detail as a structured log record."""
    logger.log(level, json.dumps(detail.to_dict(), ensure_ascii=False))


class ProblemError(Exception):
    """Base exception carrying a ProblemDetail payload."""

    def __init__(self, detail: ProblemDetail) -> None:
        super().__init__(detail.detail)
        self.problem_detail = detail


class TraceInputError(ProblemError):
    """User input that cannot be traced (bad identifier, filter or seed)."""


class UnknownContractError(TraceInputError):
    """Seed contract is not defined anywhere in the forest."""

    def __init__(self, contract: str) -> None:
        super().__init__(
            problem(
                code="trace.unknown_contract",
                title="Unknown contract",
                detail=f"The {contract} contract is not present in the codebase.",
                extras={"contract": contract},
            )
        )
        self.contract = contract


class UnknownFunctionError(TraceInputError):
    """Seed function is not defined in the seed contract."""

    def __init__(self, contract: str, function: str) -> None:
        super().__init__(
            problem(
                code="trace.unknown_function",
                title="Unknown function",
                detail=f"The {function} function is not present in {contract}.",
                extras={"contract": contract, "function": function},
            )
        )
        self.contract = contract
        self.function = function


class EmptyInputError(TraceInputError):
    """No source files were given for analysis."""

    def __init__(self) -> None:
        super().__init__(
            problem(
                code="trace.no_input",
                title="No input files",
                detail="No files were specified for analysis.",
            )
        )


class SourceLoadError(ProblemError):
    """A source file could not be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            problem(
                code="source.load_failed",
                title="Source could not be loaded",
                detail=f"Failed to load {path}: {reason}",
                extras={"path": path},
            )
        )
        self.path = path


class AstFormatError(ProblemError):
    """A parsed AST does not have the expected shape."""

    def __init__(self, detail: str, *, path: str | None = None) -> None:
        super().__init__(
            problem(
                code="source.bad_ast",
                title="Malformed syntax tree",
                detail=detail,
                extras={"path": path} if path else None,
            )
        )


class InheritanceError(ProblemError):
    """Inheritance graph has a cycle or no consistent linearization."""

    def __init__(self, contract: str, detail: str) -> None:
        super().__init__(
            problem(
                code="graph.inheritance_inconsistent",
                title="Inconsistent inheritance hierarchy",
                detail=detail,
                extras={"contract": contract},
            )
        )
        self.contract = contract


__all__ = [
    "AstFormatError",
    "EmptyInputError",
    "InheritanceError",
    "PROBLEM_TYPE_BASE",
    "ProblemDetail",
    "ProblemError",
    "SourceLoadError",
    "TraceInputError",
    "UnknownContractError",
    "UnknownFunctionError",
    "generate_correlation_id",
    "log_problem",
    "problem",
]
