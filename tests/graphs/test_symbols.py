"""First-pass symbol collection."""

from __future__ import annotations

import pytest

from soltrace.graphs.symbols import build_symbol_table
from tests._helpers import solidity_ast as sol


def test_symbol_table_tracks_bases_kinds_and_typed_state() -> None:
    forest = sol.to_forest(
        sol.source_unit(
            sol.contract("SafeMath", kind="library"),
            sol.contract(
                "Vault",
                sol.state_var("token", sol.user_type("IERC20")),
                sol.state_var("owner", sol.elementary("address")),
                sol.state_var("total", sol.elementary("uint256")),
                bases=["Ownable"],
            ),
        ),
        sol.source_unit(sol.contract("Ownable", kind="abstract")),
    )
    table = build_symbol_table(forest)
    if table.bases != {"SafeMath": [], "Vault": ["Ownable"], "Ownable": []}:
        pytest.fail(f"unexpected bases {table.bases}")
    if table.libraries() != {"SafeMath"}:
        pytest.fail(f"unexpected libraries {table.libraries()}")
    if table.state_vars["Vault"] != {"token": "IERC20"}:
        pytest.fail(f"only user-defined state vars should be kept: {table.state_vars}")
    if table.kinds["Ownable"] != "abstract":
        pytest.fail(f"unexpected kind {table.kinds['Ownable']}")


def test_redefined_contract_keeps_last_definition() -> None:
    forest = sol.to_forest(
        sol.source_unit(sol.contract("Token", bases=["A"])),
        sol.source_unit(sol.contract("Token", bases=["B"])),
    )
    table = build_symbol_table(forest)
    if table.bases["Token"] != ["B"]:
        pytest.fail(f"unexpected bases {table.bases['Token']}")
