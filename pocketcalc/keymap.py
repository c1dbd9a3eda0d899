"""Textual key tokens → KeyEvent.

Tokens are what a human types at the REPL or passes to ``pocketcalc press``:
"7", ".", "+", "=", "sqrt", "m+", ... Matching is case-insensitive.
"""

from __future__ import annotations

from pocketcalc.errors import UnknownKeyError
from pocketcalc.models import KeyEvent, KeyKind, Operator

_NAMED_KEYS: dict[str, KeyEvent] = {
    ".": KeyEvent.of(KeyKind.DECIMAL),
    ",": KeyEvent.of(KeyKind.DECIMAL),
    "+": KeyEvent.operator(Operator.ADD),
    "-": KeyEvent.operator(Operator.SUBTRACT),
    "*": KeyEvent.operator(Operator.MULTIPLY),
    "x": KeyEvent.operator(Operator.MULTIPLY),
    "×": KeyEvent.operator(Operator.MULTIPLY),
    "/": KeyEvent.operator(Operator.DIVIDE),
    "÷": KeyEvent.operator(Operator.DIVIDE),
    "=": KeyEvent.of(KeyKind.EQUALS),
    "%": KeyEvent.of(KeyKind.PERCENT),
    "sqrt": KeyEvent.of(KeyKind.SQUARE_ROOT),
    "√": KeyEvent.of(KeyKind.SQUARE_ROOT),
    "neg": KeyEvent.of(KeyKind.NEGATE),
    "+/-": KeyEvent.of(KeyKind.NEGATE),
    "±": KeyEvent.of(KeyKind.NEGATE),
    "ac": KeyEvent.of(KeyKind.CLEAR_ALL),
    "ce": KeyEvent.of(KeyKind.CLEAR_ENTRY),
    "c": KeyEvent.of(KeyKind.CLEAR_ENTRY),
    "m+": KeyEvent.of(KeyKind.MEMORY_ADD),
    "m-": KeyEvent.of(KeyKind.MEMORY_SUBTRACT),
    "mrc": KeyEvent.of(KeyKind.MEMORY_RECALL_OR_CLEAR),
    "mr": KeyEvent.of(KeyKind.MEMORY_RECALL_OR_CLEAR),
}

# Characters that may be run together in a compact token such as "12.5".
_COMPACT_CHARS = frozenset("0123456789.")

# (token, description) pairs for help output, in keypad order.
KEY_BINDINGS: list[tuple[str, str]] = [
    ("0-9", "Enter a digit"),
    (".", "Decimal point"),
    ("+ - * /", "Add, subtract, multiply, divide (x also multiplies)"),
    ("=", "Complete the pending operation"),
    ("%", "Percent of the pending operand, or divide by 100"),
    ("sqrt", "Square root"),
    ("neg, +/-", "Change sign"),
    ("ce, c", "Clear the current entry"),
    ("ac", "Clear everything, memory included"),
    ("m+", "Add the display to memory"),
    ("m-", "Subtract the display from memory"),
    ("mrc", "Recall memory; press twice to clear it"),
]


def parse_key(token: str) -> KeyEvent:
    """Map a single key token to its KeyEvent.

    Raises:
        UnknownKeyError: the token has no binding.
    """
    key = token.strip().lower()
    if len(key) == 1 and key in _COMPACT_CHARS and key != ".":
        return KeyEvent.digit(key)
    event = _NAMED_KEYS.get(key)
    if event is None:
        raise UnknownKeyError(token, hint="run 'pocketcalc keys' for the keypad")
    return event


def split_tokens(text: str) -> list[str]:
    """Split a key sequence into single-key tokens.

    Tokens are whitespace-separated. A token made only of digits and points
    ("12.5") is expanded into one token per character.
    """
    tokens: list[str] = []
    for word in text.split():
        if len(word) > 1 and all(ch in _COMPACT_CHARS for ch in word):
            tokens.extend(word)
        else:
            tokens.append(word)
    return tokens


def parse_sequence(text: str) -> list[KeyEvent]:
    """Parse a whitespace-separated key sequence: "12.5 + 3 =".

    Raises:
        UnknownKeyError: on the first token with no binding.
    """
    return [parse_key(token) for token in split_tokens(text)]
