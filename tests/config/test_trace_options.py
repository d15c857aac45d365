"""Validation of trace options."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from soltrace.config.models import TraceOptions, split_function_id


@pytest.mark.parametrize(
    ("function_id", "expected"),
    [
        ("Token::transfer", ("Token", "transfer")),
        ("A::b::c", ("A", "b")),
        ("Token", None),
        ("Token::", None),
        ("::transfer", None),
        ("", None),
    ],
)
def test_split_function_id(function_id: str, expected: tuple[str, str] | None) -> None:
    if split_function_id(function_id) != expected:
        pytest.fail(f"{function_id!r} split to {split_function_id(function_id)}")


def test_defaults_and_parts() -> None:
    options = TraceOptions(function_id="Vault::withdraw")
    if (options.contract, options.function, options.visibility) != ("Vault", "withdraw", "all"):
        pytest.fail(f"unexpected options {options}")
    if options.files != ():
        pytest.fail("files should default to empty")


def test_files_expand_user_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    options = TraceOptions(function_id="A::f", files=["~/Token.sol"])  # type: ignore[arg-type]
    if options.files != (tmp_path / "Token.sol",):
        pytest.fail(f"unexpected files {options.files}")


def test_malformed_function_id_is_rejected() -> None:
    with pytest.raises(ValidationError) as excinfo:
        TraceOptions(function_id="Vault.withdraw")
    if "CONTRACT::FUNCTION" not in str(excinfo.value):
        pytest.fail(f"unexpected error {excinfo.value}")


def test_unknown_visibility_is_rejected() -> None:
    with pytest.raises(ValidationError):
        TraceOptions(function_id="Vault::withdraw", visibility="public")  # type: ignore[arg-type]


def test_options_are_frozen() -> None:
    options = TraceOptions(function_id="Vault::withdraw")
    with pytest.raises(ValidationError):
        options.visibility = "internal"  # type: ignore[misc]
