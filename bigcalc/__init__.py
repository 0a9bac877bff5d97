"""Arbitrary-precision integer calculator: scanner, recursive-descent evaluator and front ends."""

from .parser import (
    CalculatorError,
    GrammarInvariantError,
    ParseError,
    ParseNode,
    ParseResult,
    Parser,
    evaluate,
    parse,
    render_tree,
)
from .scanner import Token, TokenKind, decimal_text, scan

__version__ = "1.0.0"
