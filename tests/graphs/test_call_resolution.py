"""Resolution of single call expressions against a resolution context."""

from __future__ import annotations

import json

import pytest

from soltrace.graphs.call_context import ResolutionContext, address_target
from soltrace.graphs.call_resolution import (
    ResolvedCall,
    is_member_access,
    is_regular_function_call,
    local_binding,
    resolve_call,
    resolve_object,
)
from soltrace.syntax.convert import convert_node
from soltrace.syntax.nodes import FunctionCall, TypeName, VariableDeclaration
from tests._helpers import solidity_ast as sol


def _call(raw: dict[str, object]) -> FunctionCall:
    node = convert_node(raw)
    if not isinstance(node, FunctionCall):
        pytest.fail(f"expected a call, got {node}")
    return node


def _context(**overrides: object) -> ResolutionContext:
    context = ResolutionContext(
        dependencies={"Child": ["Child", "Base"], "Base": ["Base"]},
        state_vars={"Base": {"token": "IERC20"}, "Child": {}},
    )
    context.enter_contract(str(overrides.pop("contract", "Child")))
    context.enter_function("run")
    for key, value in overrides.items():
        setattr(context, key, value)
    return context


def test_regular_call_predicate() -> None:
    for name in ("helper", "_transfer", "_msgSender", "$scaled"):
        if not is_regular_function_call(_call(sol.call_expr(sol.ident(name)))):
            pytest.fail(f"{name}(...) should be a regular call")
    for name in ("require", "keccak256", "Token"):
        if is_regular_function_call(_call(sol.call_expr(sol.ident(name)))):
            pytest.fail(f"{name}(...) should not be a regular call")


def test_member_access_predicate_skips_builtins() -> None:
    if not is_member_access(_call(sol.call_expr(sol.member(sol.ident("token"), "transfer")))):
        pytest.fail("token.transfer should count as a member call")
    for builtin in ("push", "pop", "encodePacked", "decode"):
        call = _call(sol.call_expr(sol.member(sol.ident("abi"), builtin)))
        if is_member_access(call):
            pytest.fail(f"{builtin} should be filtered")


def test_internal_call_targets_current_contract() -> None:
    resolved = resolve_call(_call(sol.call_expr(sol.ident("helper"))), _context())
    expected = ResolvedCall("helper", "Child", "internal", "internal")
    if resolved != expected:
        pytest.fail(f"expected {expected}, got {resolved}")


@pytest.mark.parametrize(
    ("obj", "target", "via"),
    [
        ("this", "Child", "this"),
        ("super", "Base", "super"),
        ("token", "IERC20", "state_var"),
        ("Registry", "Registry", "bare_name"),
    ],
)
def test_member_call_object_precedence(obj: str, target: str, via: str) -> None:
    call = _call(sol.call_expr(sol.member(sol.ident(obj), "run")))
    resolved = resolve_call(call, _context())
    if resolved is None:
        pytest.fail(f"{obj}.run() should resolve")
    if (resolved.target_contract, resolved.resolved_via, resolved.visibility) != (
        target,
        via,
        "external",
    ):
        pytest.fail(f"unexpected resolution {resolved}")


def test_state_variable_shadows_local_and_library() -> None:
    context = _context(local_vars={"token": "Other"}, library="SafeMath")
    resolved = resolve_object("token", context)
    if resolved != ("IERC20", "state_var"):
        pytest.fail(f"unexpected resolution {resolved}")
    if resolve_object("pair", _context(local_vars={"pair": "IPair"})) != ("IPair", "local_var"):
        pytest.fail("local variable binding ignored")
    if resolve_object("amount", context) != ("SafeMath", "using_for"):
        pytest.fail("active library should capture unknown objects")


def test_super_without_ancestor_is_dropped() -> None:
    call = _call(sol.call_expr(sol.member(sol.ident("super"), "f")))
    if resolve_call(call, _context(contract="Base")) is not None:
        pytest.fail("super in a root contract should not resolve")


def test_address_cast_uses_argument_name() -> None:
    call = _call(sol.call_expr(sol.member(sol.address_cast(sol.ident("wallet")), "transfer")))
    context = _context(local_vars={"wallet": address_target("wallet")})
    resolved = resolve_call(call, context)
    if resolved is None or resolved.target_contract != address_target("wallet"):
        pytest.fail(f"unexpected resolution {resolved}")


def test_contract_typecast_uses_cast_type() -> None:
    call = _call(sol.call_expr(sol.member(sol.typecast("IERC20", sol.ident("addr")), "approve")))
    resolved = resolve_call(call, _context())
    if resolved != ResolvedCall("approve", "IERC20", "external", "bare_name"):
        pytest.fail(f"unexpected resolution {resolved}")


def test_complex_objects_are_dropped() -> None:
    indexed = {"type": "IndexAccess", "base": sol.ident("pools"), "index": sol.ident("i")}
    call = _call(sol.call_expr(sol.member(indexed, "sync")))
    if resolve_call(call, _context()) is not None:
        pytest.fail("calls on index expressions cannot be resolved statically")


def test_calls_outside_contracts_are_dropped() -> None:
    context = ResolutionContext(dependencies={}, state_vars={})
    if resolve_call(_call(sol.call_expr(sol.ident("helper"))), context) is not None:
        pytest.fail("no contract scope means no resolution")


def test_local_binding_kinds() -> None:
    if local_binding(VariableDeclaration("t", TypeName("user_defined", "IERC20"))) != "IERC20":
        pytest.fail("user-defined local not bound to its type")
    if local_binding(VariableDeclaration("to", TypeName("elementary", "address payable"))) != (
        address_target("to")
    ):
        pytest.fail("address local not bound to an address target")
    if local_binding(VariableDeclaration("n", TypeName("elementary", "uint256"))) is not None:
        pytest.fail("value-typed locals should not be bound")


def test_address_cast_of_expression_uses_argument_text() -> None:
    inner = sol.call_expr(sol.ident("getAddr"))
    call = _call(sol.call_expr(sol.member(sol.address_cast(inner), "call")))
    resolved = resolve_call(call, _context())
    expected = json.dumps([inner], sort_keys=True)
    if resolved is None or resolved.target_contract != expected:
        pytest.fail(f"expected target {expected!r}, got {resolved}")
    if resolved.callee != "call" or resolved.resolved_via != "bare_name":
        pytest.fail(f"unexpected resolution {resolved}")
