# main.py
"""
Command line front end for bigcalc.

Three modes:
- expression arguments: evaluate once and exit (status 1 on a syntax error)
- --file PATH: evaluate every non-blank line of a file, in order
- no arguments: interactive read-eval-print loop with readline history

The loop itself holds no calculator logic; every line goes through
bigcalc.parser.evaluate and the result or error message is printed.
"""

import argparse
import logging
import sys
from typing import Iterable, List, Optional, TextIO, Tuple

from pydantic import ValidationError

from .config import Settings, configure_logging, load_settings
from .parser import ParseResult, evaluate, render_tree
from .scanner import decimal_text

# Try to import readline for command history.
try:
    import readline
except ImportError:
    readline = None  # On Windows, readline may not be available.

logger = logging.getLogger(__name__)


def format_result(result: ParseResult, show_tree: bool = False) -> str:
    """Render a ParseResult the way the command line prints it."""
    if not result.success:
        return f"Error: {result.error}"
    if show_tree:
        return f"{decimal_text(result.value)}\n{render_tree(result.tree)}"
    return decimal_text(result.value)


def evaluate_lines(lines: Iterable[str]) -> List[Tuple[str, ParseResult]]:
    """Evaluate each non-blank line independently, keeping input order."""
    results = []
    for line in lines:
        expression = line.rstrip('\r\n')
        if not expression.strip():
            continue
        results.append((expression, evaluate(expression)))
    return results


def evaluate_file(path: str, out: Optional[TextIO] = None) -> bool:
    """
    Evaluate every non-blank line of a UTF-8 text file.

    Prints one line per expression and returns True when all of them parsed.
    """
    with open(path, 'r', encoding='utf-8') as f:
        results = evaluate_lines(f)
    logger.info(f"Evaluated {len(results)} expressions from {path}")
    ok = True
    for expression, result in results:
        if result.success:
            print(f"{expression} = {decimal_text(result.value)}", file=out)
        else:
            ok = False
            print(f"{expression} : Error: {result.error}", file=out)
    return ok


# ---------------------------
# Help Handler
# ---------------------------

class HelpHandler:
    """
    Usage instructions for the calculator.
    """
    HELP_TEXT = """
Big Integer Calculator Help
---------------------------
Supported operations:
  - Addition:           1 + 2
  - Subtraction:        3 - 4
  - Multiplication:     5 * 6
  - Parentheses:        (1 + 2) * 3
  - Negative numbers:   -5 (one minus, directly before a number)

Integers have no size limit: 11111111111111111111 * -5 is exact.
Not supported: division, '^', decimals, variables, --5, -(5).

Special commands:
  - help      : Show this help message
  - tree      : Toggle printing of the parse tree
  - exit/quit : Exit the calculator

Examples:
  > 5 + 6 * 7
  47
  > 1--1
  2
  > 1---1
  Error: Unexpected token at position 3: '-'. Expecting a number here.
"""


# ---------------------------
# CLI Handler (REPL)
# ---------------------------

class CLIHandler:
    """
    Handles the REPL loop, command history, and user interaction.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.prompt = self.settings.prompt
        self.show_tree = self.settings.show_tree
        self.running = True
        self._setup_history()

    def _setup_history(self):
        """
        Sets up command-line history using readline, if available.
        """
        if readline is not None:
            readline.parse_and_bind('set editing-mode emacs')
        else:
            logger.warning("Command history (up/down arrows) is not available on this platform.")

    def handle_line(self, line: str) -> Optional[str]:
        """
        Process one input line. Returns the text to print, or None for a blank line.
        """
        command = line.strip().lower()
        if not command:
            return None
        if command in ('exit', 'quit'):
            self.running = False
            return "Goodbye!"
        if command == 'help':
            return HelpHandler.HELP_TEXT.strip()
        if command == 'tree':
            self.show_tree = not self.show_tree
            return f"Parse tree display {'on' if self.show_tree else 'off'}."
        # The scanner absorbs surrounding whitespace, so the raw line is evaluated.
        return format_result(evaluate(line), self.show_tree)

    def run(self):
        """
        Main REPL loop.
        """
        while self.running:
            try:
                line = input(self.prompt)
            except (EOFError, KeyboardInterrupt):
                print()  # Newline for clean exit
                break
            output = self.handle_line(line)
            if output is not None:
                print(output)


# ---------------------------
# Main Entry Point
# ---------------------------

def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='bigcalc',
        description="Evaluate + - * ( ) expressions over arbitrary-precision integers.",
    )
    parser.add_argument('expression', nargs='*',
                        help="Expression to evaluate; starts the interactive loop when omitted")
    parser.add_argument('--file', '-f', metavar='PATH',
                        help="Evaluate each non-blank line of PATH")
    parser.add_argument('--tree', action='store_true', default=None,
                        help="Print the parse tree after each result")
    parser.add_argument('--log-level', metavar='LEVEL',
                        help="Logging level (overrides BIGCALC_LOG_LEVEL)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the calculator application.
    """
    args = build_arg_parser().parse_args(argv)
    overrides = {}
    if args.tree is not None:
        overrides['show_tree'] = args.tree
    if args.log_level:
        overrides['log_level'] = args.log_level
    try:
        settings = load_settings()
        if overrides:
            settings = Settings(**{**settings.model_dump(), **overrides})
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    configure_logging(settings.log_level)

    if args.file:
        try:
            return 0 if evaluate_file(args.file) else 1
        except OSError as e:
            print(f"Error: could not read {args.file}: {e}", file=sys.stderr)
            return 2

    if args.expression:
        result = evaluate(' '.join(args.expression))
        print(format_result(result, settings.show_tree))
        return 0 if result.success else 1

    print("Welcome to the Big Integer Calculator!")
    print("Type 'help' for instructions, or 'exit' to quit.")
    CLIHandler(settings).run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
