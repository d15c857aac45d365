"""
Configuration models used by the soltrace CLI and entry operation.

These Pydantic models normalize the trace target, visibility filter and input
paths so the engine can rely on consistent settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

FUNCTION_ID_SEPARATOR = "::"


def split_function_id(function_id: str) -> tuple[str, str] | None:
    """
    Split ``Contract::function`` into its parts.

    Returns
    -------
    tuple[str, str] | None
        Contract and function names, or None when either part is missing.
    """
    parts = function_id.split(FUNCTION_ID_SEPARATOR)
    if len(parts) < 2 or not parts[0] or not parts[1]:  # noqa: PLR2004
        return None
    return parts[0], parts[1]


class TraceOptions(BaseModel):
    """
    Validated inputs of one trace run.

    ``function_id`` is the fully qualified seed ``Contract::function`` and
    ``visibility`` selects which call edges to follow.
    """

    model_config = ConfigDict(frozen=True)

    function_id: str = Field(..., description="Seed function as 'Contract::function'")
    visibility: Literal["all", "internal", "external"] = Field(
        default="all",
        description="Call edges to follow: all, internal or external",
    )
    files: tuple[Path, ...] = Field(
        default=(),
        description="Solidity sources or AST dumps to analyze",
    )

    @field_validator("function_id")
    @classmethod
    def _check_function_id(cls, value: str) -> str:
        """
        Require the ``Contract::function`` form.

        Returns
        -------
        str
            The identifier, unchanged.

        Raises
        ------
        ValueError
            If the separator or either name is missing.
        """
        if split_function_id(value) is None:
            message = (
                "You did not provide the function identifier in the right format "
                '"CONTRACT::FUNCTION"'
            )
            raise ValueError(message)
        return value

    @field_validator("files", mode="before")
    @classmethod
    def _expand_user(cls, value: object) -> object:
        if isinstance(value, list | tuple):
            return tuple(Path(str(item)).expanduser() for item in value)
        return value

    @property
    def contract(self) -> str:
        parts = split_function_id(self.function_id)
        return parts[0] if parts else ""

    @property
    def function(self) -> str:
        parts = split_function_id(self.function_id)
        return parts[1] if parts else ""


__all__ = ["FUNCTION_ID_SEPARATOR", "TraceOptions", "split_function_id"]
