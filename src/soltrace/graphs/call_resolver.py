"""Second pass over the forest: resolve every call inside every function and modifier."""

from __future__ import annotations

import logging

from soltrace.graphs.call_context import CallGraphIndex, ResolutionContext
from soltrace.graphs.call_resolution import local_binding, resolve_call
from soltrace.syntax.nodes import (
    ContractDefinition,
    FunctionCall,
    FunctionDefinition,
    ModifierDefinition,
    ModifierInvocation,
    SourceUnit,
    SyntaxNode,
    UsingForDeclaration,
    VariableDeclaration,
    iter_children,
)

log = logging.getLogger(__name__)

_VISIBILITY_SPECS = {
    "public": "[Pub] ❗️",
    "default": "[Pub] ❗️",
    "external": "[Ext] ❗️",
    "private": "[Priv] 🔐",
    "internal": "[Int] 🔒",
}


def function_decorator(function: FunctionDefinition) -> str:
    """
    Display suffix describing a function's visibility and mutability.

    Returns
    -------
    str
        Suffix such as `` | [Pub] ❗️  🛑 `` appended to the function's tree key.
    """
    spec = _VISIBILITY_SPECS.get(function.visibility, "")
    payable = "💵" if function.state_mutability == "payable" else ""
    mutating = "🛑" if not function.state_mutability else ""
    return f" | {spec}  {mutating} {payable}"


class CallResolver:
    """Depth-first walk that fills a :class:`CallGraphIndex` for one source unit."""

    def __init__(self, index: CallGraphIndex, context: ResolutionContext) -> None:
        self.index = index
        self.context = context
        self.resolved = 0
        self.dropped = 0

    def resolve_unit(self, unit: SourceUnit) -> None:
        self._visit(unit)

    def _visit_children(self, node: SyntaxNode) -> None:
        for child in iter_children(node):
            self._visit(child)

    def _visit(self, node: SyntaxNode) -> None:
        match node:
            case ContractDefinition():
                self._visit_contract(node)
            case FunctionDefinition():
                self._visit_function(node)
            case ModifierDefinition():
                self._visit_modifier(node)
            case ModifierInvocation(name=name):
                self._record_modifier(name)
                self._visit_children(node)
            case UsingForDeclaration(library_name=library_name):
                if self.context.contract is None:
                    self.context.unit_library = library_name
                self.context.library = library_name
            case VariableDeclaration():
                self._bind_local(node)
            case FunctionCall():
                self._record_call(node)
                self._visit_children(node)
            case _:
                self._visit_children(node)

    def _visit_contract(self, contract: ContractDefinition) -> None:
        self.context.enter_contract(contract.name)
        self.index.calls[contract.name] = {}
        self.index.modifiers[contract.name] = {}
        self._visit_children(contract)
        self.context.exit_contract()

    def _visit_function(self, function: FunctionDefinition) -> None:
        contract = self.context.contract
        if contract is None:
            log.debug("Ignoring free function %s", function.display_name)
            return
        name = function.display_name
        self.index.decorators[(contract, name)] = function_decorator(function)
        self.index.calls[contract][name] = {}
        self.index.modifiers[contract][name] = []
        self.context.enter_function(name)
        self._visit_children(function)
        self.context.exit_function()

    def _visit_modifier(self, modifier: ModifierDefinition) -> None:
        contract = self.context.contract
        if contract is None:
            return
        self.index.calls[contract][modifier.name] = {}
        self.context.enter_function(modifier.name)
        self._visit_children(modifier)
        self.context.exit_function()

    def _record_modifier(self, name: str) -> None:
        contract, function = self.context.contract, self.context.function
        if contract is None or function is None:
            return
        self.index.modifiers[contract].setdefault(function, []).append(name)

    def _bind_local(self, declaration: VariableDeclaration) -> None:
        if self.context.function is None or declaration.name is None:
            return
        binding = local_binding(declaration)
        if binding is not None:
            self.context.local_vars[declaration.name] = binding

    def _record_call(self, call: FunctionCall) -> None:
        contract, function = self.context.contract, self.context.function
        if contract is None or function is None:
            return
        resolved = resolve_call(call, self.context)
        if resolved is None:
            self.dropped += 1
            return
        self.index.record_call(
            contract,
            function,
            resolved.callee,
            resolved.target_contract,
            resolved.visibility,
            resolved.resolved_via,
        )
        self.resolved += 1
        log.debug(
            "%s::%s -> %s::%s (%s via %s)",
            contract,
            function,
            resolved.target_contract,
            resolved.callee,
            resolved.visibility,
            resolved.resolved_via,
        )


def resolve_calls(
    forest: list[SourceUnit],
    dependencies: dict[str, list[str]],
    state_vars: dict[str, dict[str, str]],
) -> CallGraphIndex:
    """
    Resolve calls across the whole forest.

    ``dependencies`` must already hold the linearization of every contract in the
    forest, since ``super`` in one file depends on hierarchies declared in others.

    Returns
    -------
    CallGraphIndex
        Edges, modifier lists and decorators for every contract.
    """
    index = CallGraphIndex(dependencies=dependencies)
    for unit in forest:
        context = ResolutionContext(dependencies=dependencies, state_vars=state_vars)
        resolver = CallResolver(index, context)
        resolver.resolve_unit(unit)
        log.debug(
            "Resolved %s: %d calls kept, %d dropped",
            unit.path or "<memory>",
            resolver.resolved,
            resolver.dropped,
        )
    return index


__all__ = ["CallResolver", "function_decorator", "resolve_calls"]
