# parser.py
"""
Recursive-descent parser and evaluator for bigcalc expressions.

The parser consumes the scanner's token list with one token of lookahead and
builds a parse tree while computing the value of every node on the way back
up, so there is no separate evaluation pass. Grammar, with left recursion
eliminated:

    EXPRESSION -> TERM EXPRSUFFIX
    EXPRSUFFIX -> + TERM EXPRSUFFIX | - TERM EXPRSUFFIX | epsilon
    TERM       -> FACTOR TERMSUFFIX
    TERMSUFFIX -> * FACTOR TERMSUFFIX | epsilon
    FACTOR     -> NUMBER | - NUMBER | ( EXPRESSION )

Suffix values are folded from the innermost suffix outward
(suffix = tail +/- term), which gives '-' its left associativity even though
the productions are right recursive.

Unary minus applies to a bare NUMBER only, so "--1" and "-(1)" are syntax
errors. '^' is scanned but no production accepts it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Generator, List, Optional, Sequence

from .scanner import Token, TokenKind, decimal_text, scan

logger = logging.getLogger(__name__)


# ---------------------------
# Error Classes
# ---------------------------

class CalculatorError(Exception):
    """Base class for calculator errors."""
    pass


class ParseError(CalculatorError):
    """
    Raised for syntax errors and premature end of input.

    position is the code-point offset of the offending token, or None when the
    input ended where a token was required.
    """
    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.position = position


class GrammarInvariantError(RuntimeError):
    """Raised when the parser reaches a state its dispatch rules exclude."""
    pass


# ---------------------------
# Messages
# ---------------------------

EXPECTING_NUMBER_AT_END = "Unexpected end-of-input. Expecting a number."
EXPECTING_FACTOR_AT_END = "Unexpected end-of-input. Expecting something to multiply."
EXPECTING_RPAREN_AT_END = "Unexpected end-of-input. Expecting a right parenthesis at the end."
EXPECTING_EXPRESSION_AT_END = "Unexpected end-of-input. Expecting an expression."
EXPECTING_TERM_AT_END = "Unexpected end-of-input. Expecting a term."


def _unexpected(token: Token, expecting: str) -> ParseError:
    return ParseError(
        f"Unexpected token at position {token.position}: '{token}'. {expecting}",
        token.position,
    )


# ---------------------------
# Parse Tree
# ---------------------------

EXPRESSION = 'expression'
EXPRESSION_SUFFIX = 'expressionSuffix'
TERM = 'term'
TERM_SUFFIX = 'termSuffix'
FACTOR = 'factor'
NUMBER = 'number'

# FIRST(EXPRESSION) == FIRST(TERM) == FIRST(FACTOR)
_STARTS_FACTOR = (TokenKind.NUMBER, TokenKind.MINUS, TokenKind.LPAREN)
# FOLLOW(TERMSUFFIX), end of input aside
_ENDS_TERM = (TokenKind.MINUS, TokenKind.PLUS, TokenKind.RPAREN)
# FOLLOW(EXPRSUFFIX), end of input aside
_ENDS_EXPRESSION = (TokenKind.TIMES, TokenKind.RPAREN)


@dataclass
class ParseNode:
    """
    One grammar symbol instance in the parse tree.

    value is the synthesized attribute of the subtree (None until computed).
    first_token is the token that opened the production; empty suffixes have none.
    """
    name: str
    children: List['ParseNode'] = field(default_factory=list)
    value: Optional[int] = None
    first_token: Optional[Token] = None

    def append_child(self, name: str) -> 'ParseNode':
        child = ParseNode(name)
        self.children.append(child)
        return child

    def __str__(self) -> str:
        return render_tree(self)


def render_tree(root: ParseNode) -> str:
    """
    Render a parse tree, one node per line, as ^name(first-token)[value].

    Each level of depth adds three dots of indentation.
    """
    lines = []
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        first = '' if node.first_token is None else str(node.first_token)
        value = '' if node.value is None else decimal_text(node.value)
        lines.append(f"{'.' * depth}^{node.name}({first})[{value}]")
        for child in reversed(node.children):
            stack.append((child, depth + 3))
    return '\n'.join(lines)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of one parse: the root of the tree on success, a message on failure.

    Exactly one of tree and error is set.
    """
    tree: Optional[ParseNode] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def value(self) -> Optional[int]:
        return self.tree.value if self.tree is not None else None


# ---------------------------
# Parser
# ---------------------------

# A suspended production: yields the productions it needs, returns its own node.
Production = Generator[Any, ParseNode, ParseNode]


class Parser:
    """
    Recursive-descent evaluator over a token list.

    Every _parse_* production appends its node to the given parent, fills in
    the node's value and returns it, or raises ParseError. The first error
    ends the parse; nothing catches it below parse().

    Productions that can reach a nested expression are generators: instead of
    calling another production they yield it and receive its node back.
    _run() keeps those suspended productions on a list, so the depth of
    parenthesis nesting is limited by memory and not by Python's call stack.
    """

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = list(tokens)
        self.current = 0

    # Token cursor

    def _check_next_token(self) -> Optional[Token]:
        """Return the lookahead token, or None at end of input."""
        if self.current < len(self.tokens):
            return self.tokens[self.current]
        return None

    def _peek_next_token(self, message_at_end: str) -> Token:
        """Return the lookahead token; end of input here is an error."""
        token = self._check_next_token()
        if token is None:
            raise ParseError(message_at_end)
        return token

    def _consume_next_token(self) -> None:
        self.current += 1

    # Driver

    def _run(self, production: Production) -> ParseNode:
        """Drive a production, and every production it yields, to completion."""
        pending = [production]
        result = None
        while pending:
            try:
                called = pending[-1].send(result)
            except StopIteration as done:
                pending.pop()
                result = done.value
            else:
                pending.append(called)
                result = None
        return result

    # Productions

    def parse(self) -> ParseResult:
        """Parse the whole token list as one expression."""
        try:
            root = self._run(self._parse_expression(None))
            token = self._check_next_token()
            if token is not None:
                raise ParseError(
                    f"Extraneous token at position {token.position}: '{token}'.",
                    token.position,
                )
        except ParseError as e:
            logger.debug("Parse failed: %s", e.message)
            return ParseResult(error=e.message)
        logger.debug("Parsed %d tokens, value has %d bits", len(self.tokens), root.value.bit_length())
        return ParseResult(tree=root)

    def _parse_number(self, parent: ParseNode) -> ParseNode:
        node = parent.append_child(NUMBER)
        token = self._peek_next_token(EXPECTING_NUMBER_AT_END)
        if token.kind != TokenKind.NUMBER:
            raise _unexpected(token, "Expecting a number here.")
        node.first_token = token
        node.value = token.value
        self._consume_next_token()
        return node

    def _parse_factor(self, parent: ParseNode) -> Production:
        node = parent.append_child(FACTOR)
        token = self._peek_next_token(EXPECTING_FACTOR_AT_END)
        if token.kind not in _STARTS_FACTOR:
            raise _unexpected(token, "Expecting something to multiply: a number or '('.")
        node.first_token = token

        if token.kind == TokenKind.NUMBER:
            node.value = self._parse_number(node).value
        elif token.kind == TokenKind.MINUS:
            self._consume_next_token()
            node.value = -self._parse_number(node).value
        else:
            self._consume_next_token()
            expression = yield self._parse_expression(node)
            node.value = expression.value
            closing = self._peek_next_token(EXPECTING_RPAREN_AT_END)
            if closing.kind != TokenKind.RPAREN:
                raise ParseError(
                    f"Expecting a closing paren ')' at position {closing.position} "
                    f"and instead found '{closing}'.",
                    closing.position,
                )
            self._consume_next_token()
        return node

    def _parse_term_suffix(self, term: ParseNode) -> Production:
        """
        TERMSUFFIX -> * FACTOR TERMSUFFIX | epsilon

        Walks the right-recursive chain with a loop: each '*' opens a suffix
        node holding [factor, termSuffix], and values are folded back from the
        innermost (epsilon, value 1) suffix.
        """
        chain = []
        node = term.append_child(TERM_SUFFIX)
        while True:
            token = self._check_next_token()
            if token is None or token.kind in _ENDS_TERM:
                break
            if token.kind != TokenKind.TIMES:
                head = term.first_token
                raise ParseError(
                    f"Extraneous token at position {token.position}: '{token}', "
                    f"while parsing the term that begins with '{head}' at position {head.position}.",
                    token.position,
                )
            node.first_token = token
            self._consume_next_token()
            factor = yield self._parse_factor(node)
            chain.append((node, factor))
            node = node.append_child(TERM_SUFFIX)

        node.value = 1
        for suffix, factor in reversed(chain):
            suffix.value = factor.value * node.value
            node = suffix
        return node

    def _parse_term(self, parent: ParseNode) -> Production:
        node = parent.append_child(TERM)
        token = self._peek_next_token(EXPECTING_TERM_AT_END)
        if token.kind not in _STARTS_FACTOR:
            raise _unexpected(token, "Expecting something to add or subtract: a number or '('.")
        node.first_token = token
        factor = yield self._parse_factor(node)
        suffix = yield self._parse_term_suffix(node)
        node.value = factor.value * suffix.value
        return node

    def _parse_expression_suffix(self, expression: ParseNode) -> Production:
        """
        EXPRSUFFIX -> + TERM EXPRSUFFIX | - TERM EXPRSUFFIX | epsilon

        Same loop shape as _parse_term_suffix. The fold computes
        tail + term or tail - term according to each suffix's own operator.
        """
        chain = []
        node = expression.append_child(EXPRESSION_SUFFIX)
        while True:
            token = self._check_next_token()
            if token is None or token.kind in _ENDS_EXPRESSION:
                break
            if token.kind not in (TokenKind.PLUS, TokenKind.MINUS):
                # _parse_term_suffix has already rejected every other token.
                raise GrammarInvariantError(
                    f"Token {token!r} reached an expression suffix"
                )
            node.first_token = token
            self._consume_next_token()
            term = yield self._parse_term(node)
            chain.append((node, token.kind, term))
            node = node.append_child(EXPRESSION_SUFFIX)

        node.value = 0
        for suffix, operator, term in reversed(chain):
            if operator == TokenKind.PLUS:
                suffix.value = node.value + term.value
            else:
                suffix.value = node.value - term.value
            node = suffix
        return node

    def _parse_expression(self, parent: Optional[ParseNode]) -> Production:
        if parent is None:
            node = ParseNode(EXPRESSION)
        else:
            node = parent.append_child(EXPRESSION)
        token = self._peek_next_token(EXPECTING_EXPRESSION_AT_END)
        if token.kind not in _STARTS_FACTOR:
            raise _unexpected(token, "Expecting a number or '('.")
        node.first_token = token
        term = yield self._parse_term(node)
        suffix = yield self._parse_expression_suffix(node)
        node.value = term.value + suffix.value
        return node


# ---------------------------
# Entry Points
# ---------------------------

def parse(tokens: Sequence[Token]) -> ParseResult:
    """Parse and evaluate a token list produced by scan()."""
    return Parser(tokens).parse()


def evaluate(text: str) -> ParseResult:
    """Scan and parse a line of text."""
    return parse(scan(text))
