"""Typed Solidity syntax trees and the loaders that produce them."""

from soltrace.syntax.convert import convert_node, convert_source_unit
from soltrace.syntax.loader import load_forest
from soltrace.syntax.nodes import SourceUnit, SyntaxNode

__all__ = ["SourceUnit", "SyntaxNode", "convert_node", "convert_source_unit", "load_forest"]
