"""Typed syntax-node variants consumed by the resolution engine.

The parser collaborator yields loosely shaped mappings; :mod:`soltrace.syntax.convert`
narrows them into the closed set of frozen dataclasses below. Each variant carries
only the fields call resolution needs. Node kinds the engine does not care about
become :class:`Opaque` containers that keep their children so nested calls are
still reached by a depth-first walk.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Literal

type TypeKind = Literal["user_defined", "elementary", "other"]
type ContractKind = Literal["contract", "library", "interface", "abstract"]


@dataclass(frozen=True)
class TypeName:
    """Declared type of a variable or parameter."""

    kind: TypeKind
    name: str | None = None

    @property
    def is_user_defined(self) -> bool:
        return self.kind == "user_defined" and bool(self.name)

    @property
    def is_address(self) -> bool:
        return self.kind == "elementary" and self.name in {"address", "address payable"}


@dataclass(frozen=True)
class VariableDeclaration:
    """Named declaration of a state variable, parameter or local."""

    name: str | None
    type_name: TypeName | None = None


@dataclass(frozen=True)
class ParameterList:
    """Ordered parameters of a function or modifier."""

    parameters: tuple[VariableDeclaration, ...] = ()


@dataclass(frozen=True)
class Identifier:
    """Bare name expression, including the ``this`` and ``super`` keywords."""

    name: str


@dataclass(frozen=True)
class MemberAccess:
    """``expression.member_name`` expression."""

    expression: SyntaxNode
    member_name: str


@dataclass(frozen=True)
class ElementaryTypeExpression:
    """Elementary type used as an expression, e.g. the ``address`` in ``address(x)``."""

    type_name: str


@dataclass(frozen=True)
class FunctionCall:
    """Call expression with its callee expression and arguments."""

    expression: SyntaxNode
    arguments: tuple[SyntaxNode, ...] = ()
    arguments_text: str = "[]"


@dataclass(frozen=True)
class ModifierInvocation:
    """Modifier (or base constructor) applied to a function header."""

    name: str
    arguments: tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True)
class StateVariableDeclaration:
    """One state variable statement; may declare several variables."""

    variables: tuple[VariableDeclaration, ...] = ()
    initial_value: SyntaxNode | None = None


@dataclass(frozen=True)
class UsingForDeclaration:
    """``using Library for Type`` directive."""

    library_name: str
    type_name: TypeName | None = None


@dataclass(frozen=True)
class ImportDirective:
    """``import "path"`` directive."""

    path: str


@dataclass(frozen=True)
class FunctionDefinition:
    """Function header and body."""

    name: str | None
    visibility: str = "default"
    state_mutability: str | None = None
    is_constructor: bool = False
    is_fallback: bool = False
    is_receive: bool = False
    parameters: ParameterList = field(default_factory=ParameterList)
    return_parameters: ParameterList = field(default_factory=ParameterList)
    modifiers: tuple[ModifierInvocation, ...] = ()
    body: tuple[SyntaxNode, ...] = ()

    @property
    def display_name(self) -> str:
        """Name the function is registered under in the call index."""
        if self.is_constructor:
            return "<Constructor>"
        if self.is_receive:
            return "<Receive>"
        if self.is_fallback or not self.name:
            return "<Fallback>"
        return self.name


@dataclass(frozen=True)
class ModifierDefinition:
    """Modifier header and body."""

    name: str
    parameters: ParameterList = field(default_factory=ParameterList)
    body: tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True)
class ContractDefinition:
    """Contract, library or interface with its direct bases and members."""

    name: str
    kind: ContractKind = "contract"
    base_contracts: tuple[str, ...] = ()
    sub_nodes: tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True)
class Opaque:
    """Any node kind without resolution meaning; only its children matter."""

    kind: str
    children: tuple[SyntaxNode, ...] = ()


@dataclass(frozen=True)
class SourceUnit:
    """Root of one parsed source file."""

    children: tuple[SyntaxNode, ...] = ()
    path: str | None = None

    def contracts(self) -> Iterator[ContractDefinition]:
        """Yield top-level contract definitions in source order."""
        for child in self.children:
            if isinstance(child, ContractDefinition):
                yield child

    def imports(self) -> Iterator[ImportDirective]:
        """Yield top-level import directives in source order."""
        for child in self.children:
            if isinstance(child, ImportDirective):
                yield child


type SyntaxNode = (
    SourceUnit
    | ContractDefinition
    | FunctionDefinition
    | ModifierDefinition
    | ModifierInvocation
    | FunctionCall
    | MemberAccess
    | Identifier
    | ElementaryTypeExpression
    | VariableDeclaration
    | ParameterList
    | UsingForDeclaration
    | ImportDirective
    | StateVariableDeclaration
    | Opaque
)


def iter_children(node: SyntaxNode) -> tuple[SyntaxNode, ...]:
    """
    Return the direct children of ``node`` in visit order.

    Returns
    -------
    tuple[SyntaxNode, ...]
        Child nodes; empty for leaves.
    """
    match node:
        case SourceUnit(children=children) | Opaque(children=children):
            return children
        case ContractDefinition(sub_nodes=sub_nodes):
            return sub_nodes
        case FunctionDefinition():
            return (
                node.parameters,
                node.return_parameters,
                *node.modifiers,
                *node.body,
            )
        case ModifierDefinition():
            return (node.parameters, *node.body)
        case ModifierInvocation(arguments=arguments):
            return arguments
        case FunctionCall(expression=expression, arguments=arguments):
            return (expression, *arguments)
        case MemberAccess(expression=expression):
            return (expression,)
        case ParameterList(parameters=parameters):
            return parameters
        case StateVariableDeclaration(variables=variables, initial_value=initial_value):
            if initial_value is None:
                return variables
            return (*variables, initial_value)
        case _:
            return ()


__all__ = [
    "ContractDefinition",
    "ContractKind",
    "ElementaryTypeExpression",
    "FunctionCall",
    "FunctionDefinition",
    "Identifier",
    "ImportDirective",
    "MemberAccess",
    "ModifierDefinition",
    "ModifierInvocation",
    "Opaque",
    "ParameterList",
    "SourceUnit",
    "StateVariableDeclaration",
    "SyntaxNode",
    "TypeKind",
    "TypeName",
    "UsingForDeclaration",
    "VariableDeclaration",
    "iter_children",
]
