"""Arithmetic core and display formatting for pocketcalc.

Pure functions: no engine state lives here. Everything that can fail raises
CalculationError, which the engine turns into the error token.
"""

from __future__ import annotations

import math

from pocketcalc.errors import CalculationError
from pocketcalc.models import Operator

# Visible characters on the display, sign and decimal point included.
DEFAULT_MAX_LENGTH = 9

ERROR_TOKEN = "Error"


def _to_operator(op: Operator | str) -> Operator:
    if isinstance(op, Operator):
        return op
    try:
        return Operator(op)
    except ValueError:
        raise CalculationError(f"unrecognised operator: {op!r}") from None


def apply(a: float, b: float, op: Operator | str) -> float:
    """Apply a binary operator to two operands.

    Args:
        a: Left-hand operand.
        b: Right-hand operand.
        op: Operator enum member or its symbol ("+", "-", "*", "/").

    Returns:
        The arithmetic result.

    Raises:
        CalculationError: an operand is not finite, the divisor is zero, or
            the operator is not one of the four supported.
    """
    if not (math.isfinite(a) and math.isfinite(b)):
        raise CalculationError(f"non-finite operand: {a!r} {op} {b!r}")

    operator = _to_operator(op)
    if operator is Operator.ADD:
        return a + b
    if operator is Operator.SUBTRACT:
        return a - b
    if operator is Operator.MULTIPLY:
        return a * b
    if b == 0:
        raise CalculationError("division by zero")
    return a / b


def percent_of(base: float, value: float) -> float:
    """Return ``value`` percent of ``base``: percent_of(200, 10) → 20."""
    return (base / 100) * value


def parse_display(text: str) -> float:
    """Parse display text as a number.

    The error token and anything else that is not a finite numeral raise
    CalculationError.
    """
    try:
        value = float(text)
    except (TypeError, ValueError):
        raise CalculationError(f"display is not a number: {text!r}") from None
    if not math.isfinite(value):
        raise CalculationError(f"display is not a number: {text!r}")
    return value


def format_result(value: float, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Render a numeric result so it fits on the display.

    One character is reserved for the sign; the remaining ``max_length - 1``
    characters hold the digits and the decimal point.

    - An integer part wider than that budget is an overflow error.
    - Fractional values are rounded to as many decimals as still fit, then
      trailing zeros are dropped.
    - Whole values print without a fractional part and are cut to the digit
      budget.

    Raises:
        CalculationError: the value is not finite or does not fit.
    """
    if not math.isfinite(value):
        raise CalculationError(f"result is not finite: {value!r}")

    budget = max_length - 1
    magnitude = abs(value)
    int_digits = len(str(int(magnitude)))
    if int_digits > budget:
        raise CalculationError(f"result too wide for display: {value!r}")

    if magnitude.is_integer():
        text = str(int(magnitude))[:budget]
    else:
        # The decimal point itself takes one slot.
        decimals = max(budget - int_digits - 1, 0)
        text = f"{magnitude:.{decimals}f}"
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        # Rounding can carry into an extra integer digit (99999999.6).
        if len(text.partition(".")[0]) > budget:
            raise CalculationError(f"result too wide for display: {value!r}")

    if value < 0 and text != "0":
        return "-" + text
    return text
