"""Shared structures for call resolution and call-tree materialization."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

type Visibility = Literal["internal", "external"]
type VisibilityFilter = Literal["all", "internal", "external"]

VISIBILITY_FILTERS: tuple[VisibilityFilter, ...] = ("all", "internal", "external")

# "#" cannot start a Solidity identifier, so marked targets never collide with contracts.
ADDRESS_MARKER = "#address"


def address_target(name: str) -> str:
    """
    Pseudo-target for calls made on an address-typed binding.

    Returns
    -------
    str
        Marked target name, e.g. ``#address [recipient]``.
    """
    return f"{ADDRESS_MARKER} [{name}]"


def is_address_target(target: str) -> bool:
    return target.startswith(ADDRESS_MARKER)


@dataclass
class CallEdge:
    """Resolved callee of one function, keyed in its owner by callee name."""

    target_contract: str
    visibility: Visibility
    call_count: int = 1
    resolved_via: str = "internal"

    @property
    def is_address_target(self) -> bool:
        return is_address_target(self.target_contract)


@dataclass
class CallGraphIndex:
    """Everything the resolver learned about a forest.

    Attributes
    ----------
    dependencies : dict[str, list[str]]
        Linearization per contract: itself first, then ancestors nearest first.
    calls : dict[str, dict[str, dict[str, CallEdge]]]
        contract -> function or modifier -> callee name -> edge.
    modifiers : dict[str, dict[str, list[str]]]
        contract -> function -> modifiers invoked, in declaration order.
    decorators : dict[tuple[str, str], str]
        (contract, function) -> display suffix with visibility and mutability glyphs.
    """

    dependencies: dict[str, list[str]] = field(default_factory=dict)
    calls: dict[str, dict[str, dict[str, CallEdge]]] = field(default_factory=dict)
    modifiers: dict[str, dict[str, list[str]]] = field(default_factory=dict)
    decorators: dict[tuple[str, str], str] = field(default_factory=dict)

    def edges(self, contract: str, function: str) -> dict[str, CallEdge] | None:
        """
        Outgoing edges of a function or modifier.

        Returns
        -------
        dict[str, CallEdge] | None
            Edge map, or None when the function is not known.
        """
        return self.calls.get(contract, {}).get(function)

    def decorator(self, contract: str, function: str) -> str:
        return self.decorators.get((contract, function), "")

    def modifiers_of(self, contract: str, function: str) -> list[str]:
        return self.modifiers.get(contract, {}).get(function, [])

    def record_call(
        self,
        contract: str,
        function: str,
        callee: str,
        target_contract: str,
        visibility: Visibility,
        resolved_via: str,
    ) -> CallEdge:
        """
        Insert a new edge or bump the count of an existing same-named one.

        The first resolution of a callee name wins; later calls of the same name
        only increment ``call_count``, even when they resolved elsewhere.

        Returns
        -------
        CallEdge
            The inserted or updated edge.
        """
        edges = self.calls.setdefault(contract, {}).setdefault(function, {})
        edge = edges.get(callee)
        if edge is None:
            edge = CallEdge(
                target_contract=target_contract,
                visibility=visibility,
                resolved_via=resolved_via,
            )
            edges[callee] = edge
        else:
            edge.call_count += 1
        return edge


@dataclass
class ResolutionContext:
    """Cursor state threaded through the walk of one syntax tree.

    ``dependencies`` and ``state_vars`` are the complete forest-wide tables; the
    remaining fields describe the scope currently being visited.
    """

    dependencies: dict[str, list[str]]
    state_vars: dict[str, dict[str, str]]
    contract: str | None = None
    function: str | None = None
    library: str | None = None
    unit_library: str | None = None
    effective_state_vars: dict[str, str] = field(default_factory=dict)
    local_vars: dict[str, str] = field(default_factory=dict)

    def enter_contract(self, name: str) -> None:
        """Open a contract scope and merge the state variables visible in it."""
        self.contract = name
        self.function = None
        self.library = self.unit_library
        self.local_vars = {}
        merged: dict[str, str] = {}
        for dep in self.dependencies.get(name, [name]):
            merged.update(self.state_vars.get(dep, {}))
        merged.update(self.state_vars.get(name, {}))
        self.effective_state_vars = merged

    def exit_contract(self) -> None:
        self.contract = None
        self.function = None
        self.library = self.unit_library
        self.effective_state_vars = {}
        self.local_vars = {}

    def enter_function(self, name: str) -> None:
        self.function = name
        self.local_vars = {}

    def exit_function(self) -> None:
        self.function = None
        self.local_vars = {}

    def ancestors(self) -> list[str]:
        if self.contract is None:
            return []
        return self.dependencies.get(self.contract, [self.contract])


__all__ = [
    "ADDRESS_MARKER",
    "VISIBILITY_FILTERS",
    "CallEdge",
    "CallGraphIndex",
    "ResolutionContext",
    "Visibility",
    "VisibilityFilter",
    "address_target",
    "is_address_target",
]
