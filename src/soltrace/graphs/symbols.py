"""First pass over the forest: inheritance lists, contract kinds and typed state variables."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from soltrace.syntax.nodes import (
    ContractDefinition,
    ContractKind,
    SourceUnit,
    StateVariableDeclaration,
)

log = logging.getLogger(__name__)


@dataclass
class SymbolTable:
    """Per-contract facts gathered before any call is resolved.

    Attributes
    ----------
    bases : dict[str, list[str]]
        Direct base contracts in declaration order.
    kinds : dict[str, ContractKind]
        Declared kind of every contract, library and interface.
    state_vars : dict[str, dict[str, str]]
        State variables whose declared type is a user-defined name, mapped to
        that type name.
    """

    bases: dict[str, list[str]] = field(default_factory=dict)
    kinds: dict[str, ContractKind] = field(default_factory=dict)
    state_vars: dict[str, dict[str, str]] = field(default_factory=dict)

    def libraries(self) -> set[str]:
        """
        Names of all library contracts.

        Returns
        -------
        set[str]
            Contracts declared with the ``library`` kind.
        """
        return {name for name, kind in self.kinds.items() if kind == "library"}


def _record_state_variables(
    table: SymbolTable, contract: str, declaration: StateVariableDeclaration
) -> None:
    for variable in declaration.variables:
        type_name = variable.type_name
        if variable.name is None or type_name is None or not type_name.is_user_defined:
            continue
        table.state_vars[contract][variable.name] = str(type_name.name)


def _record_contract(table: SymbolTable, contract: ContractDefinition) -> None:
    table.bases[contract.name] = list(contract.base_contracts)
    table.kinds[contract.name] = contract.kind
    table.state_vars[contract.name] = {}
    for member in contract.sub_nodes:
        if isinstance(member, StateVariableDeclaration):
            _record_state_variables(table, contract.name, member)


def build_symbol_table(forest: Iterable[SourceUnit]) -> SymbolTable:
    """
    Collect inheritance lists and user-defined state variables across the forest.

    A contract defined twice keeps the facts of its last definition.

    Returns
    -------
    SymbolTable
        Facts keyed by contract name.
    """
    table = SymbolTable()
    for unit in forest:
        for contract in unit.contracts():
            if contract.name in table.kinds:
                log.debug("Contract %s redefined in %s", contract.name, unit.path)
            _record_contract(table, contract)
    log.info(
        "Symbol table: %d contracts, %d libraries",
        len(table.kinds),
        len(table.libraries()),
    )
    return table


__all__ = ["SymbolTable", "build_symbol_table"]
