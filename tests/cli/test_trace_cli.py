"""CLI behaviour for the soltrace entrypoint."""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from soltrace.cli.main import main
from tests._helpers import solidity_ast as sol


def _write_units(tmp_path: Path) -> Path:
    dump = tmp_path / "Child.json"
    dump.write_text(
        json.dumps(
            sol.source_unit(
                sol.contract(
                    "Base",
                    sol.function("f", sol.call("helper")),
                    sol.function("helper", visibility="internal"),
                ),
                sol.contract(
                    "Child",
                    sol.function("g", sol.member_call("super", "f"), sol.member_call("this", "g")),
                    bases=["Base"],
                ),
            )
        ),
        encoding="utf-8",
    )
    return dump


def test_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dump = _write_units(tmp_path)
    exit_code = main(["--format", "json", "Child::g", "all", str(dump)])
    if exit_code != 0:
        pytest.fail(f"expected success, got {exit_code}")
    payload = json.loads(capsys.readouterr().out)
    (root_key,) = payload
    if not root_key.startswith("Child::g | [Pub]"):
        pytest.fail(f"unexpected root key {root_key}")
    children = payload[root_key]
    base_key = next(key for key in children if key.startswith("Base::f"))
    if [key.split(" | ")[0] for key in children[base_key]] != ["Base::helper"]:
        pytest.fail(f"unexpected subtree {children[base_key]}")
    if children[root_key] != "..[Repeated Ref]..":
        pytest.fail(f"self call should be a repeated ref: {children}")


def test_tree_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    dump = _write_units(tmp_path)
    exit_code = main(["--no-color", "Child::g", "internal", str(dump)])
    if exit_code != 0:
        pytest.fail(f"expected success, got {exit_code}")
    out = capsys.readouterr().out
    if "Child::g" not in out or "Base::f" in out:
        pytest.fail(f"internal filter should hide external calls:\n{out}")


def test_sol_files_use_the_given_parser(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    source = tmp_path / "Solo.sol"
    source.write_text("contract Solo { function run() public {} }", encoding="utf-8")

    def parse(text: str) -> Mapping[str, Any]:
        if "Solo" not in text:
            pytest.fail(f"unexpected source {text}")
        return sol.source_unit(sol.contract("Solo", sol.function("run")))

    exit_code = main(["--format", "json", "Solo::run", "all", str(source)], parse=parse)
    if exit_code != 0:
        pytest.fail(f"expected success, got {exit_code}")
    if list(json.loads(capsys.readouterr().out).values()) != [{}]:
        pytest.fail("leaf seed should render as an empty subtree")


@pytest.mark.parametrize(
    ("argv", "message"),
    [
        (["Child.g", "all"], "CONTRACT::FUNCTION"),
        (["Child::g", "public"], "all"),
        (["Child::g", "all"], "No files were specified for analysis."),
        (["Nope::g", "all"], "The Nope contract is not present in the codebase."),
        (["Child::nope", "all"], "The nope function is not present in Child."),
    ],
)
def test_user_errors_exit_with_one(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    argv: list[str],
    message: str,
) -> None:
    dump = _write_units(tmp_path)
    files = [] if message.startswith("No files") else [str(dump)]
    exit_code = main([*argv, *files])
    if exit_code != 1:
        pytest.fail(f"expected exit code 1, got {exit_code}")
    if message not in capsys.readouterr().out:
        pytest.fail(f"expected {message!r} in output")


def test_fatal_errors_exit_with_one(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    exit_code = main(["Child::g", "all", str(tmp_path / "absent.json")])
    if exit_code != 1:
        pytest.fail(f"expected exit code 1, got {exit_code}")
    if not any("source.load_failed" in record.getMessage() for record in caplog.records):
        pytest.fail("fatal load failure should be logged as a problem")


def test_missing_positionals_exit_with_two() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])
    if excinfo.value.code != 2:  # noqa: PLR2004
        pytest.fail(f"expected argparse exit code 2, got {excinfo.value.code}")
