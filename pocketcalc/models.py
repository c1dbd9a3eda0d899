"""Data models for the pocketcalc engine.

Operator and KeyKind enums, KeyEvent, RecallState, CalculatorState and
StepRecord — the typed structures that flow through keymap → engine → display.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Operator(str, Enum):
    """Binary operators on the keypad."""

    ADD = "+"
    SUBTRACT = "-"
    MULTIPLY = "*"
    DIVIDE = "/"


class KeyKind(str, Enum):
    """Every kind of key the engine understands."""

    DIGIT = "digit"
    DECIMAL = "decimal"
    OPERATOR = "operator"
    EQUALS = "equals"
    CLEAR_ALL = "clear-all"
    CLEAR_ENTRY = "clear-entry"
    PERCENT = "percent"
    SQUARE_ROOT = "sqrt"
    NEGATE = "negate"
    MEMORY_ADD = "memory-add"
    MEMORY_SUBTRACT = "memory-subtract"
    MEMORY_RECALL_OR_CLEAR = "memory-recall-or-clear"


class RecallState(str, Enum):
    """Two-state sub-machine behind the recall/clear memory key."""

    IDLE = "idle"
    JUST_RECALLED = "just-recalled"


@dataclass(frozen=True)
class KeyEvent:
    """A single key press.

    ``value`` carries the digit for DIGIT and the operator symbol for OPERATOR;
    it is None for every other kind.
    """

    kind: KeyKind
    value: Optional[str] = None

    @classmethod
    def digit(cls, d: str | int) -> KeyEvent:
        return cls(KeyKind.DIGIT, str(d))

    @classmethod
    def operator(cls, op: Operator | str) -> KeyEvent:
        symbol = op.value if isinstance(op, Operator) else op
        return cls(KeyKind.OPERATOR, symbol)

    @classmethod
    def of(cls, kind: KeyKind) -> KeyEvent:
        return cls(kind)

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.kind.value}({self.value})"
        return self.kind.value


@dataclass
class CalculatorState:
    """Everything the calculator remembers between key presses."""

    display: str = "0"
    first_operand: Optional[float] = None
    operator: Optional[Operator] = None
    awaiting_second_operand: bool = False
    memory: float = 0.0
    recall: RecallState = RecallState.IDLE

    @property
    def memory_just_recalled(self) -> bool:
        return self.recall is RecallState.JUST_RECALLED

    def reset(self) -> None:
        """Full reset of the pending calculation. Memory is left alone."""
        self.display = "0"
        self.first_operand = None
        self.operator = None
        self.awaiting_second_operand = False

    def copy(self) -> CalculatorState:
        return replace(self)

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict."""
        return {
            "display": self.display,
            "first_operand": self.first_operand,
            "operator": self.operator.value if self.operator else None,
            "awaiting_second_operand": self.awaiting_second_operand,
            "memory": self.memory,
            "memory_just_recalled": self.memory_just_recalled,
        }


@dataclass
class StepRecord:
    """One processed key in a replay trace."""

    token: str
    event: KeyEvent
    display: str
    state: CalculatorState

    def to_dict(self) -> dict:
        return {
            "token": self.token,
            "event": str(self.event),
            "display": self.display,
            "state": self.state.to_dict(),
        }
