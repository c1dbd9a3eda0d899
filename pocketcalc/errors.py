"""Exception hierarchy for pocketcalc.

PocketCalcError (base)
├── CalculationError - arithmetic failed or the result does not fit the display
└── UnknownKeyError  - a key token has no binding in the key map

The engine never lets these escape ``handle_key``; they are raised by the
arithmetic and key-map helpers and handled at the engine and CLI seams.
"""

from __future__ import annotations

from typing import Optional


class PocketCalcError(Exception):
    """Base exception for all pocketcalc errors."""


class CalculationError(PocketCalcError):
    """An operation produced no displayable number.

    Covers division by zero, non-finite operands, negative square roots,
    unrecognised operators, unparseable display text and results too wide
    for the display.
    """


class UnknownKeyError(PocketCalcError, ValueError):
    """A textual key token could not be mapped to a key event."""

    def __init__(self, token: str, hint: Optional[str] = None) -> None:
        self.token = token
        self.hint = hint
        message = f"unknown key: {token!r}"
        if hint:
            message += f" ({hint})"
        super().__init__(message)
