"""Adapt dict-shaped Solidity ASTs into typed syntax-node variants.

The accepted shape is the one emitted by ``solidity-parser-antlr`` and by the
Python ``solidity-parser`` package: every node is a mapping with a ``"type"``
key. Older and newer parser releases disagree on a few field names, so the
converters below accept either spelling where they differ.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, cast

from soltrace.errors import AstFormatError
from soltrace.syntax.nodes import (
    ContractDefinition,
    ContractKind,
    ElementaryTypeExpression,
    FunctionCall,
    FunctionDefinition,
    Identifier,
    ImportDirective,
    MemberAccess,
    ModifierDefinition,
    ModifierInvocation,
    Opaque,
    ParameterList,
    SourceUnit,
    StateVariableDeclaration,
    SyntaxNode,
    TypeName,
    UsingForDeclaration,
    VariableDeclaration,
)

log = logging.getLogger(__name__)

type RawNode = Mapping[str, Any]

_SKIPPED_FIELDS = frozenset({"type", "loc", "range", "comments"})
_CONTRACT_KINDS: frozenset[str] = frozenset({"contract", "library", "interface", "abstract"})
_MISSING = Opaque(kind="Missing")


def _is_node(value: object) -> bool:
    return isinstance(value, Mapping) and isinstance(value.get("type"), str)


def _node_list(value: object) -> list[RawNode]:
    if isinstance(value, Sequence) and not isinstance(value, str | bytes):
        return [item for item in value if _is_node(item)]
    return []


def _convert_all(values: Iterable[RawNode]) -> tuple[SyntaxNode, ...]:
    return tuple(convert_node(value) for value in values)


def _nested_nodes(raw: RawNode) -> list[RawNode]:
    """Collect every nested node of ``raw`` in field order."""
    nested: list[RawNode] = []
    for key, value in raw.items():
        if key in _SKIPPED_FIELDS:
            continue
        if _is_node(value):
            nested.append(value)
        else:
            nested.extend(_node_list(value))
    return nested


def convert_type_name(raw: object) -> TypeName | None:
    """
    Narrow a raw ``typeName`` field.

    Returns
    -------
    TypeName | None
        Typed description, or None when the declaration carries no type.
    """
    if isinstance(raw, str):
        return TypeName(kind="elementary", name=raw)
    if not _is_node(raw):
        return None
    node = cast("RawNode", raw)
    node_type = node["type"]
    if node_type == "UserDefinedTypeName":
        name = node.get("namePath") or node.get("name")
        return TypeName(kind="user_defined", name=str(name) if name else None)
    if node_type == "ElementaryTypeName":
        name = node.get("name")
        return TypeName(kind="elementary", name=str(name) if name else None)
    return TypeName(kind="other", name=None)


def _convert_variable(raw: RawNode) -> VariableDeclaration:
    name = raw.get("name")
    return VariableDeclaration(
        name=str(name) if name else None,
        type_name=convert_type_name(raw.get("typeName")),
    )


def _convert_parameters(raw: object) -> ParameterList:
    if _is_node(raw):
        raw_params = cast("RawNode", raw).get("parameters")
    else:
        raw_params = raw
    return ParameterList(
        parameters=tuple(_convert_variable(param) for param in _node_list(raw_params))
    )


def _convert_body(raw: object) -> tuple[SyntaxNode, ...]:
    if not _is_node(raw):
        return ()
    return (convert_node(cast("RawNode", raw)),)


def _convert_source_unit(raw: RawNode) -> SourceUnit:
    return SourceUnit(children=_convert_all(_node_list(raw.get("children"))))


def _convert_contract(raw: RawNode) -> ContractDefinition:
    bases: list[str] = []
    for spec in _node_list(raw.get("baseContracts")):
        base_name = spec.get("baseName")
        if _is_node(base_name):
            name = base_name.get("namePath") or base_name.get("name")
            if name:
                bases.append(str(name))
    raw_kind = str(raw.get("kind") or "contract")
    kind = cast("ContractKind", raw_kind if raw_kind in _CONTRACT_KINDS else "contract")
    return ContractDefinition(
        name=str(raw.get("name")),
        kind=kind,
        base_contracts=tuple(bases),
        sub_nodes=_convert_all(_node_list(raw.get("subNodes"))),
    )


def _convert_function(raw: RawNode) -> FunctionDefinition:
    name = raw.get("name")
    return FunctionDefinition(
        name=str(name) if name else None,
        visibility=str(raw.get("visibility") or "default"),
        state_mutability=raw.get("stateMutability") or None,
        is_constructor=bool(raw.get("isConstructor")),
        is_fallback=bool(raw.get("isFallback")),
        is_receive=bool(raw.get("isReceiveEther") or raw.get("isReceive")),
        parameters=_convert_parameters(raw.get("parameters")),
        return_parameters=_convert_parameters(raw.get("returnParameters")),
        modifiers=tuple(
            _convert_modifier_invocation(item) for item in _node_list(raw.get("modifiers"))
        ),
        body=_convert_body(raw.get("body")),
    )


def _convert_modifier_definition(raw: RawNode) -> ModifierDefinition:
    return ModifierDefinition(
        name=str(raw.get("name")),
        parameters=_convert_parameters(raw.get("parameters")),
        body=_convert_body(raw.get("body")),
    )


def _convert_modifier_invocation(raw: RawNode) -> ModifierInvocation:
    return ModifierInvocation(
        name=str(raw.get("name")),
        arguments=_convert_all(_node_list(raw.get("arguments"))),
    )


def _convert_state_variables(raw: RawNode) -> StateVariableDeclaration:
    initial = raw.get("initialValue")
    return StateVariableDeclaration(
        variables=tuple(_convert_variable(item) for item in _node_list(raw.get("variables"))),
        initial_value=convert_node(initial) if _is_node(initial) else None,
    )


def _convert_using_for(raw: RawNode) -> UsingForDeclaration:
    return UsingForDeclaration(
        library_name=str(raw.get("libraryName")),
        type_name=convert_type_name(raw.get("typeName")),
    )


def _convert_function_call(raw: RawNode) -> FunctionCall:
    expression = raw.get("expression")
    raw_args = raw.get("arguments")
    try:
        arguments_text = json.dumps(raw_args if raw_args is not None else [], sort_keys=True)
    except TypeError:
        arguments_text = repr(raw_args)
    return FunctionCall(
        expression=convert_node(expression) if _is_node(expression) else _MISSING,
        arguments=_convert_all(_node_list(raw_args)),
        arguments_text=arguments_text,
    )


def _convert_member_access(raw: RawNode) -> MemberAccess:
    expression = raw.get("expression")
    return MemberAccess(
        expression=convert_node(expression) if _is_node(expression) else _MISSING,
        member_name=str(raw.get("memberName")),
    )


def _convert_elementary_expression(raw: RawNode) -> ElementaryTypeExpression:
    type_name = convert_type_name(raw.get("typeName"))
    name = type_name.name if type_name is not None and type_name.name else ""
    return ElementaryTypeExpression(type_name=name)


_CONVERTERS: dict[str, Callable[[RawNode], SyntaxNode]] = {
    "SourceUnit": _convert_source_unit,
    "ContractDefinition": _convert_contract,
    "FunctionDefinition": _convert_function,
    "ModifierDefinition": _convert_modifier_definition,
    "ModifierInvocation": _convert_modifier_invocation,
    "StateVariableDeclaration": _convert_state_variables,
    "UsingForDeclaration": _convert_using_for,
    "ImportDirective": lambda raw: ImportDirective(path=str(raw.get("path"))),
    "FunctionCall": _convert_function_call,
    "MemberAccess": _convert_member_access,
    "Identifier": lambda raw: Identifier(name=str(raw.get("name"))),
    "ElementaryTypeNameExpression": _convert_elementary_expression,
    "VariableDeclaration": _convert_variable,
    "Parameter": _convert_variable,
    "ParameterList": _convert_parameters,
}


def convert_node(raw: RawNode) -> SyntaxNode:
    """
    Convert one raw node and its subtree.

    Returns
    -------
    SyntaxNode
        Typed node; unknown kinds become :class:`Opaque` containers.
    """
    node_type = str(raw.get("type"))
    converter = _CONVERTERS.get(node_type)
    if converter is not None:
        return converter(raw)
    return Opaque(kind=node_type, children=_convert_all(_nested_nodes(raw)))


def convert_source_unit(raw: object, path: str | None = None) -> SourceUnit:
    """
    Convert a parsed source file into a :class:`SourceUnit`.

    Parameters
    ----------
    raw : object
        Parser output; must be a ``SourceUnit`` mapping.
    path : str | None, optional
        Source path recorded on the unit for diagnostics and import resolution.

    Returns
    -------
    SourceUnit
        Typed root node.

    Raises
    ------
    AstFormatError
        If ``raw`` is not a ``SourceUnit`` node.
    """
    if not _is_node(raw) or cast("RawNode", raw)["type"] != "SourceUnit":
        message = "Expected a SourceUnit node at the root of the syntax tree"
        raise AstFormatError(message, path=path)
    unit = _convert_source_unit(cast("RawNode", raw))
    log.debug(
        "Converted %s: %d top-level nodes",
        path or "<memory>",
        len(unit.children),
    )
    return SourceUnit(children=unit.children, path=path)


__all__ = ["RawNode", "convert_node", "convert_source_unit", "convert_type_name"]
