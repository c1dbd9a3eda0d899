"""Calculator engine — the key-by-key state machine.

Data flow per key:
1. Reject malformed events (unknown kind, bad digit, unknown operator)
2. Drop the memory recall toggle unless this is another recall press
3. Dispatch to the handler for the key kind
4. Force the error token if the display grew past its width
5. Return the display text

Arithmetic failures arrive as CalculationError from pocketcalc.arithmetic and
are turned into the error token here; handle_key itself never raises.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from pocketcalc.arithmetic import apply, format_result, parse_display, percent_of
from pocketcalc.config import CalcConfig
from pocketcalc.errors import CalculationError
from pocketcalc.models import CalculatorState, KeyEvent, KeyKind, Operator, RecallState

logger = logging.getLogger(__name__)

_DIGITS = frozenset("0123456789")
_OPERATORS = frozenset(op.value for op in Operator)


class CalculatorEngine:
    """Pocket calculator input engine.

    Each instance owns its own CalculatorState, so independent calculators can
    coexist. State is only changed through handle_key.
    """

    def __init__(self, config: Optional[CalcConfig] = None) -> None:
        self.config = config or CalcConfig()
        self._state = CalculatorState()
        self._handlers: dict[KeyKind, Callable[[KeyEvent], None]] = {
            KeyKind.DIGIT: self._digit,
            KeyKind.DECIMAL: self._decimal,
            KeyKind.OPERATOR: self._operator,
            KeyKind.EQUALS: self._equals,
            KeyKind.CLEAR_ALL: self._clear_all,
            KeyKind.CLEAR_ENTRY: self._clear_entry,
            KeyKind.PERCENT: self._percent,
            KeyKind.SQUARE_ROOT: self._square_root,
            KeyKind.NEGATE: self._negate,
            KeyKind.MEMORY_ADD: self._memory_add,
            KeyKind.MEMORY_SUBTRACT: self._memory_subtract,
            KeyKind.MEMORY_RECALL_OR_CLEAR: self._memory_recall_or_clear,
        }

    # -- public API ---------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> str:
        """Process one key press and return the new display text."""
        handler = self._handler_for(event)
        if handler is None:
            logger.warning("Ignoring unrecognised key event: %r", event)
            return self._state.display

        if event.kind != KeyKind.MEMORY_RECALL_OR_CLEAR:
            self._state.recall = RecallState.IDLE

        handler(event)
        self._enforce_length()
        logger.debug("%s -> %r", event, self._state.display)
        return self._state.display

    def current_display(self) -> str:
        return self._state.display

    def snapshot(self) -> CalculatorState:
        """Return a copy of the current state."""
        return self._state.copy()

    # -- helpers ------------------------------------------------------------

    @property
    def _error(self) -> str:
        return self.config.error_token

    def _format(self, value: float) -> str:
        return format_result(value, self.config.max_display_length)

    def _parse(self, text: str) -> float:
        if text == self._error:
            raise CalculationError("display shows the error token")
        return parse_display(text)

    def _handler_for(self, event: object) -> Optional[Callable[[KeyEvent], None]]:
        if not isinstance(event, KeyEvent):
            return None
        handler = self._handlers.get(event.kind)
        if handler is None:
            return None
        if event.kind == KeyKind.DIGIT and (event.value is None or event.value not in _DIGITS):
            return None
        if event.kind == KeyKind.OPERATOR and event.value not in _OPERATORS:
            return None
        return handler

    def _fail_pending(self) -> None:
        """Show the error token and drop the pending operation."""
        s = self._state
        s.display = self._error
        s.first_operand = None
        s.operator = None
        s.awaiting_second_operand = True

    def _fail_reset(self) -> None:
        """Full reset, then show the error token."""
        s = self._state
        s.reset()
        s.display = self._error
        s.awaiting_second_operand = True

    def _enforce_length(self) -> None:
        s = self._state
        if s.display == self._error:
            return
        if len(s.display) > self.config.max_display_length:
            logger.debug("Display overflow: %r", s.display)
            s.display = self._error
            s.awaiting_second_operand = False

    # -- number entry -------------------------------------------------------

    def _digit(self, event: KeyEvent) -> None:
        s = self._state
        digit = event.value
        if s.awaiting_second_operand:
            s.display = digit
            s.awaiting_second_operand = False
        elif s.display == self._error:
            # Overflowed: entry stays locked until a clear.
            return
        elif s.display == "0":
            s.display = digit
        else:
            s.display += digit

    def _decimal(self, event: KeyEvent) -> None:
        s = self._state
        if s.awaiting_second_operand:
            s.display = "0."
            s.awaiting_second_operand = False
        elif s.display == self._error:
            return
        elif "." not in s.display:
            s.display += "."

    # -- operators ----------------------------------------------------------

    def _operator(self, event: KeyEvent) -> None:
        s = self._state
        try:
            input_value = self._parse(s.display)
            if s.first_operand is None:
                s.first_operand = input_value
            elif s.operator is not None:
                result = apply(s.first_operand, input_value, s.operator)
                s.display = self._format(result)
                s.first_operand = result
        except CalculationError as e:
            logger.debug("Operator chain failed: %s", e)
            self._fail_pending()
            return

        s.operator = Operator(event.value)
        s.awaiting_second_operand = True

    def _equals(self, event: KeyEvent) -> None:
        s = self._state
        if s.first_operand is None or s.operator is None:
            return
        if s.display == self._error:
            s.reset()
            return

        try:
            second_operand = self._parse(s.display)
            result = apply(s.first_operand, second_operand, s.operator)
            text = self._format(result)
        except CalculationError as e:
            logger.debug("Equals failed: %s", e)
            self._fail_reset()
            return

        s.display = text
        s.first_operand = None
        # No repeat-equals: a second "=" finds nothing pending.
        s.operator = None
        s.awaiting_second_operand = True

    def _percent(self, event: KeyEvent) -> None:
        s = self._state
        try:
            current = self._parse(s.display)
            if s.first_operand is not None and s.operator is not None:
                value = self._contextual_percent(s.first_operand, current, s.operator)
            else:
                value = current / 100
            s.display = self._format(value)
        except CalculationError as e:
            logger.debug("Percent failed: %s", e)
            s.display = self._error

        s.first_operand = None
        s.operator = None
        s.awaiting_second_operand = True

    @staticmethod
    def _contextual_percent(first: float, current: float, op: Operator) -> float:
        """200 + 10% → 220, 200 * 10% → 20, 50 / 200% → 25."""
        percent = percent_of(first, current)
        if op in (Operator.ADD, Operator.SUBTRACT):
            return apply(first, percent, op)
        if op is Operator.MULTIPLY:
            return percent
        if current == 0:
            raise CalculationError("percent of zero divisor")
        return (first / current) * 100

    # -- unary keys ---------------------------------------------------------

    def _square_root(self, event: KeyEvent) -> None:
        s = self._state
        try:
            value = self._parse(s.display)
            if value < 0:
                raise CalculationError(f"square root of negative number: {value!r}")
            text = self._format(math.sqrt(value))
        except CalculationError as e:
            logger.debug("Square root failed: %s", e)
            self._fail_reset()
            return

        s.display = text
        s.awaiting_second_operand = True

    def _negate(self, event: KeyEvent) -> None:
        s = self._state
        try:
            value = self._parse(s.display)
        except CalculationError:
            return
        try:
            s.display = self._format(value * -1)
        except CalculationError:
            # Too wide to format: flip the sign on the raw text and let the
            # length check apply the overflow rule.
            s.display = s.display[1:] if s.display.startswith("-") else "-" + s.display
        s.awaiting_second_operand = True

    # -- clearing -----------------------------------------------------------

    def _clear_entry(self, event: KeyEvent) -> None:
        self._state.display = "0"

    def _clear_all(self, event: KeyEvent) -> None:
        self._state.reset()
        self._state.memory = 0.0

    # -- memory bank --------------------------------------------------------

    def _memory_add(self, event: KeyEvent) -> None:
        self._accumulate(1)

    def _memory_subtract(self, event: KeyEvent) -> None:
        self._accumulate(-1)

    def _accumulate(self, sign: int) -> None:
        s = self._state
        try:
            s.memory += sign * self._parse(s.display)
        except CalculationError:
            logger.debug("Memory update skipped: display is %r", s.display)
        s.awaiting_second_operand = True

    def _memory_recall_or_clear(self, event: KeyEvent) -> None:
        s = self._state
        if s.recall is RecallState.JUST_RECALLED:
            s.memory = 0.0
            s.display = "0"
            s.recall = RecallState.IDLE
            return

        try:
            s.display = self._format(s.memory)
        except CalculationError:
            s.display = self._error
        s.recall = RecallState.JUST_RECALLED
        s.awaiting_second_operand = True
