"""Pure resolution logic for call expressions."""

from __future__ import annotations

from dataclasses import dataclass

from soltrace.graphs.call_context import ResolutionContext, Visibility, address_target
from soltrace.syntax.nodes import (
    ElementaryTypeExpression,
    FunctionCall,
    Identifier,
    MemberAccess,
    VariableDeclaration,
)

BUILTIN_FUNCTIONS = frozenset(
    {
        "addmod",
        "assert",
        "blockhash",
        "ecrecover",
        "gasleft",
        "keccak256",
        "mulmod",
        "require",
        "revert",
        "ripemd160",
        "selfdestruct",
        "sha256",
        "sha3",
        "suicide",
    }
)
BUILTIN_MEMBERS = frozenset(
    {
        "decode",
        "encode",
        "encodeCall",
        "encodePacked",
        "encodeWithSelector",
        "encodeWithSignature",
        "pop",
        "push",
    }
)
ADDRESS_TYPES = frozenset({"address", "address payable"})

# super resolves to the entry right after the contract itself in its linearization.
_SUPER_INDEX = 1


@dataclass(frozen=True)
class ResolvedCall:
    """Structured outcome for a single call expression."""

    callee: str
    target_contract: str
    visibility: Visibility
    resolved_via: str


def is_regular_function_call(call: FunctionCall) -> bool:
    """Plain ``name(...)`` call of a lower-case, non-builtin function."""
    expression = call.expression
    return (
        isinstance(expression, Identifier)
        and not expression.name[:1].isupper()
        and expression.name not in BUILTIN_FUNCTIONS
    )


def is_member_access(call: FunctionCall) -> bool:
    """``object.member(...)`` call whose member is not an array or abi builtin."""
    expression = call.expression
    return isinstance(expression, MemberAccess) and expression.member_name not in BUILTIN_MEMBERS


def is_user_defined_declaration(declaration: VariableDeclaration) -> bool:
    return declaration.type_name is not None and declaration.type_name.is_user_defined


def is_address_declaration(declaration: VariableDeclaration) -> bool:
    return declaration.type_name is not None and declaration.type_name.is_address


def local_binding(declaration: VariableDeclaration) -> str | None:
    """
    Type a parameter or local variable is bound to for member-call resolution.

    Returns
    -------
    str | None
        Declared contract type, an address pseudo-target, or None when the
        declaration is irrelevant to call resolution.
    """
    if declaration.name is None or declaration.type_name is None:
        return None
    if is_user_defined_declaration(declaration):
        return declaration.type_name.name
    if is_address_declaration(declaration):
        return address_target(declaration.name)
    return None


def _object_name(member: MemberAccess) -> str | None:
    """Name of the object a member call is made on, or None when not static."""
    match member.expression:
        case Identifier(name=name):
            return name
        case FunctionCall(
            expression=ElementaryTypeExpression(type_name=type_name),
            arguments=arguments,
            arguments_text=arguments_text,
        ) if type_name in ADDRESS_TYPES:
            if arguments and isinstance(arguments[0], Identifier):
                return arguments[0].name
            return arguments_text
        case FunctionCall(expression=Identifier(name=name)) if name[:1].isupper():
            return name
        case _:
            return None


def resolve_object(object_name: str, context: ResolutionContext) -> tuple[str, str] | None:
    """
    Resolve the contract an object name refers to.

    Resolution precedence: ``this`` -> ``super`` -> state variable -> local variable
    -> active using-for library -> the bare name itself.

    Returns
    -------
    tuple[str, str] | None
        Target contract and how it was resolved; None when ``super`` has no ancestor.
    """
    if object_name == "this":
        return str(context.contract), "this"
    if object_name == "super":
        ancestors = context.ancestors()
        if len(ancestors) <= _SUPER_INDEX:
            return None
        return ancestors[_SUPER_INDEX], "super"
    if object_name in context.effective_state_vars:
        return context.effective_state_vars[object_name], "state_var"
    if object_name in context.local_vars:
        return context.local_vars[object_name], "local_var"
    if context.library is not None:
        return context.library, "using_for"
    return object_name, "bare_name"


def resolve_call(call: FunctionCall, context: ResolutionContext) -> ResolvedCall | None:
    """
    Resolve a call expression inside the current function or modifier.

    Parameters
    ----------
    call : FunctionCall
        Call expression to resolve.
    context : ResolutionContext
        Scope of the call; ``contract`` must be set.

    Returns
    -------
    ResolvedCall | None
        Callee, target contract and visibility; None for unresolvable shapes.
    """
    if context.contract is None:
        return None
    match call.expression:
        case Identifier(name=name) if is_regular_function_call(call):
            return ResolvedCall(
                callee=name,
                target_contract=context.contract,
                visibility="internal",
                resolved_via="internal",
            )
        case MemberAccess(member_name=member_name) as member if is_member_access(call):
            object_name = _object_name(member)
            if object_name is None:
                return None
            resolved = resolve_object(object_name, context)
            if resolved is None:
                return None
            target_contract, resolved_via = resolved
            return ResolvedCall(
                callee=member_name,
                target_contract=target_contract,
                visibility="external",
                resolved_via=resolved_via,
            )
        case _:
            return None


__all__ = [
    "ADDRESS_TYPES",
    "BUILTIN_FUNCTIONS",
    "BUILTIN_MEMBERS",
    "ResolvedCall",
    "is_address_declaration",
    "is_member_access",
    "is_regular_function_call",
    "is_user_defined_declaration",
    "local_binding",
    "resolve_call",
    "resolve_object",
]
