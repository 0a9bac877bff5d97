# scanner.py
"""
Lexical analysis for bigcalc expressions.

The scanner turns a line of text into a list of tokens in one left-to-right
pass over its Unicode code points. It never fails: a character it cannot
classify becomes an UNKNOWN token and the parser decides what to do with it.

Numbers are accumulated digit by digit into a Python int, so literals of any
length are exact. Token positions are code-point offsets into the input.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


# ---------------------------
# Tokens
# ---------------------------

class TokenKind:
    """Enumeration of token kinds."""
    LPAREN = 'LPAREN'
    RPAREN = 'RPAREN'
    PLUS = 'PLUS'
    MINUS = 'MINUS'
    TIMES = 'TIMES'
    POWER = 'POWER'
    NUMBER = 'NUMBER'
    UNKNOWN = 'UNKNOWN'


# Single-character tokens. '^' is recognised here although no grammar rule accepts it.
_SYMBOLS = {
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    '+': TokenKind.PLUS,
    '-': TokenKind.MINUS,
    '*': TokenKind.TIMES,
    '^': TokenKind.POWER,
}

_SYMBOL_TEXT = {kind: ch for ch, kind in _SYMBOLS.items()}

# str(int) refuses values past sys.get_int_max_str_digits() (640 at the lowest).
# Below this many bits every value has fewer digits than that.
_STR_SAFE_BITS = 2000


def decimal_text(value: int) -> str:
    """
    Render an int in base 10 regardless of how many digits it has.

    Large values are split with divmod by a power of ten into a high and a
    low half, each rendered on its own; the low half is zero-padded back to
    the width of the divisor.
    """
    if value < 0:
        return '-' + decimal_text(-value)
    if value.bit_length() <= _STR_SAFE_BITS:
        return str(value)
    # About 0.15 decimal digits per bit, i.e. half of log10(2).
    width = value.bit_length() * 3 // 20
    high, low = divmod(value, 10 ** width)
    return decimal_text(high) + decimal_text(low).zfill(width)


@dataclass(frozen=True)
class Token:
    """A classified lexical unit with its code-point offset in the source."""
    kind: str
    position: int
    value: Optional[int] = None
    raw: Optional[str] = None

    def __str__(self) -> str:
        # How the token looked in the source; used by parser diagnostics.
        if self.kind == TokenKind.NUMBER:
            return decimal_text(self.value)
        if self.kind == TokenKind.UNKNOWN:
            return self.raw or ''
        return _SYMBOL_TEXT.get(self.kind, self.kind)

    def __repr__(self) -> str:
        if self.kind == TokenKind.NUMBER:
            return f"Token({self.kind}, {decimal_text(self.value)}, pos={self.position})"
        if self.kind == TokenKind.UNKNOWN:
            return f"Token({self.kind}, {self.raw!r}, pos={self.position})"
        return f"Token({self.kind}, pos={self.position})"


# ---------------------------
# Character classes
# ---------------------------

# Latin-1 spaces plus the Unicode space separators, line and paragraph separators.
_LATIN1_SPACES = frozenset(' \t\n\v\f\r\u0085\u00a0')
_HIGH_SPACES = frozenset('\u1680\u2028\u2029\u202f\u205f\u3000')


def is_space(ch: str) -> bool:
    """Return True if ch belongs to the whitespace set the scanner skips."""
    if ch <= '\u00ff':
        return ch in _LATIN1_SPACES
    if '\u2000' <= ch <= '\u200a':
        return True
    return ch in _HIGH_SPACES


def is_digit(ch: str) -> bool:
    # ASCII only; str.isdigit() would also accept superscripts and other scripts.
    return '0' <= ch <= '9'


# ---------------------------
# Scanner
# ---------------------------

def scan(text: str) -> List[Token]:
    """
    Convert text into the full list of tokens, in source order.

    Whitespace separates tokens but produces none. Runs of ASCII digits become
    a single NUMBER token positioned at the first digit; each other character
    becomes one token of its own.
    """
    tokens: List[Token] = []
    current: Optional[int] = None
    start = 0

    for position, ch in enumerate(text):
        if is_digit(ch):
            digit = ord(ch) - ord('0')
            if current is None:
                current = digit
                start = position
            else:
                current = current * 10 + digit
            continue

        if current is not None:
            tokens.append(Token(TokenKind.NUMBER, start, value=current))
            current = None

        if is_space(ch):
            continue

        kind = _SYMBOLS.get(ch)
        if kind is None:
            tokens.append(Token(TokenKind.UNKNOWN, position, raw=ch))
        else:
            tokens.append(Token(kind, position))

    if current is not None:
        tokens.append(Token(TokenKind.NUMBER, start, value=current))

    logger.debug("Scanned %d characters into %d tokens", len(text), len(tokens))
    return tokens
