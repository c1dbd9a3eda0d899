"""Behavioral tests for the calculator engine.

Each test drives a fresh engine with a key sequence written the way a user
would type it at the REPL ("2 + 3 ="), then checks the display and, where it
matters, the pending state.
"""

import logging

import pytest

from pocketcalc.config import CalcConfig
from pocketcalc.engine import CalculatorEngine
from pocketcalc.keymap import parse_sequence
from pocketcalc.models import KeyEvent, KeyKind, Operator


@pytest.fixture
def engine():
    return CalculatorEngine()


def press(engine, sequence):
    """Press every key in the sequence and return the final display."""
    display = engine.current_display()
    for event in parse_sequence(sequence):
        display = engine.handle_key(event)
    return display


# --- Number entry ---

def test_initial_display_is_zero(engine):
    assert engine.current_display() == "0"


def test_leading_zeros_suppressed(engine):
    assert press(engine, "0 0 5") == "5"


def test_repeated_zero_stays_zero(engine):
    assert press(engine, "0 0 0") == "0"


def test_digits_concatenate(engine):
    assert press(engine, "1 2 3") == "123"


def test_decimal_is_idempotent(engine):
    assert press(engine, "1 . . 5 .") == "1.5"


def test_decimal_from_zero(engine):
    assert press(engine, ". 2 5") == "0.25"


def test_decimal_after_operator_starts_fresh_numeral(engine):
    assert press(engine, "5 + .") == "0."
    assert press(engine, "5") == "0.5"


def test_digit_after_result_starts_fresh_numeral(engine):
    assert press(engine, "2 + 3 = 7") == "7"


# --- Operators and equals ---

def test_simple_division(engine):
    assert press(engine, "15 / 4 =") == "3.75"


def test_chained_operator_computes_eagerly(engine):
    assert press(engine, "2 + 3 +") == "5"
    state = engine.snapshot()
    assert state.first_operand == pytest.approx(5.0)
    assert state.operator is Operator.ADD
    assert state.awaiting_second_operand is True


def test_chain_is_left_to_right(engine):
    """No precedence: 2 + 3 * 4 is (2 + 3) * 4."""
    assert press(engine, "2 + 3 * 4 =") == "20"


def test_negative_result(engine):
    assert press(engine, "1 - 4 =") == "-3"


def test_operator_after_equals_uses_result(engine):
    assert press(engine, "2 + 3 = * 4 =") == "20"


def test_equals_without_pending_operation_is_noop(engine):
    assert press(engine, "5 =") == "5"
    assert engine.snapshot().awaiting_second_operand is False


def test_repeated_equals_is_noop(engine):
    assert press(engine, "2 + 3 = =") == "5"
    state = engine.snapshot()
    assert state.operator is None
    assert state.first_operand is None


def test_division_by_zero_on_equals_resets(engine):
    assert press(engine, "1 / 0 =") == "Error"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None
    assert state.awaiting_second_operand is True


def test_error_then_digit_starts_new_number(engine):
    press(engine, "1 / 0 =")
    assert press(engine, "4") == "4"


def test_division_by_zero_while_chaining_discards_new_operator(engine):
    assert press(engine, "1 / 0 +") == "Error"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None
    assert state.awaiting_second_operand is True


def test_recovery_after_chain_error(engine):
    press(engine, "1 / 0 + +")
    assert engine.current_display() == "Error"
    assert press(engine, "3 + 4 =") == "7"


# --- Display clamping ---

def test_fraction_rounded_to_fit(engine):
    assert press(engine, "1 / 3 =") == "0.333333"


def test_negative_fraction_uses_sign_slot(engine):
    assert press(engine, "0 - 1 / 3 =") == "-0.333333"


def test_overflow_on_equals_is_full_reset(engine):
    assert press(engine, "99999999 * 10 =") == "Error"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None


def test_overflow_while_chaining(engine):
    assert press(engine, "99999999 + 1 +") == "Error"
    assert engine.snapshot().operator is None


def test_typing_past_width_forces_error(engine):
    assert press(engine, "123456789") == "123456789"
    assert press(engine, "0") == "Error"
    assert engine.snapshot().awaiting_second_operand is False


def test_entry_locked_after_overflow_until_clear(engine):
    press(engine, "1234567890")
    assert press(engine, "5 5 .") == "Error"
    assert press(engine, "ce 4") == "4"


def test_equals_on_overflowed_entry_resets(engine):
    press(engine, "1 + 1234567890")
    assert engine.current_display() == "Error"
    assert press(engine, "=") == "0"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None


def test_wider_display_from_config():
    engine = CalculatorEngine(CalcConfig(max_display_length=12))
    assert press(engine, "99999999 * 10 =") == "999999990"


def test_narrow_display_recovers_from_error():
    engine = CalculatorEngine(CalcConfig(max_display_length=5))
    assert press(engine, "1 / 0 =") == "Error"
    assert engine.snapshot().awaiting_second_operand is True
    assert press(engine, "4") == "4"


def test_error_token_wider_than_display_still_recovers():
    engine = CalculatorEngine(CalcConfig(max_display_length=4))
    assert press(engine, "1 / 0 =") == "Error"
    assert press(engine, "4") == "4"


def test_custom_error_token():
    engine = CalculatorEngine(CalcConfig(error_token="E"))
    assert press(engine, "1 / 0 =") == "E"
    assert press(engine, "=") == "E"


# --- Percent ---

def test_percent_added(engine):
    assert press(engine, "200 + 10 %") == "220"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None
    assert state.awaiting_second_operand is True


def test_percent_subtracted(engine):
    assert press(engine, "200 - 10 %") == "180"


def test_percent_of_product(engine):
    assert press(engine, "200 * 10 %") == "20"


def test_percent_ratio(engine):
    assert press(engine, "50 / 200 %") == "25"


def test_percent_ratio_by_zero(engine):
    assert press(engine, "50 / 0 %") == "Error"
    assert engine.snapshot().first_operand is None


def test_percent_without_operator_divides_by_hundred(engine):
    assert press(engine, "50 %") == "0.5"


def test_percent_on_error_display(engine):
    press(engine, "1 / 0 =")
    assert press(engine, "%") == "Error"


# --- Square root and negate ---

def test_square_root(engine):
    assert press(engine, "9 sqrt") == "3"
    assert engine.snapshot().awaiting_second_operand is True


def test_square_root_rounded(engine):
    assert press(engine, "2 sqrt") == "1.414214"


def test_square_root_of_negative_is_full_reset(engine):
    assert press(engine, "5 + 4 neg sqrt") == "Error"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None
    assert state.awaiting_second_operand is True


def test_negate(engine):
    assert press(engine, "5 neg") == "-5"
    assert press(engine, "neg") == "5"


def test_negate_zero_stays_unsigned(engine):
    assert press(engine, "neg") == "0"


def test_negate_then_digit_starts_fresh(engine):
    assert press(engine, "5 neg 3") == "3"


def test_negate_too_wide_entry_overflows(engine):
    assert press(engine, "123456789 neg") == "Error"
    assert engine.snapshot().awaiting_second_operand is False


def test_negate_negative_wide_entry(engine):
    assert press(engine, "12345678 neg") == "-12345678"
    assert press(engine, "neg") == "12345678"


def test_negate_leaves_error_alone(engine):
    press(engine, "1 / 0 =")
    assert press(engine, "neg") == "Error"


def test_negated_operand_in_calculation(engine):
    assert press(engine, "6 neg * 2 =") == "-12"


# --- Clearing ---

def test_clear_entry_keeps_pending_operation(engine):
    press(engine, "9 m+ 5 + 3")
    assert press(engine, "ce ce ce") == "0"
    state = engine.snapshot()
    assert state.first_operand == pytest.approx(5.0)
    assert state.operator is Operator.ADD
    assert state.memory == pytest.approx(9.0)
    assert press(engine, "2 =") == "7"


def test_clear_all_resets_everything_including_memory(engine):
    press(engine, "9 m+ 5 + 3")
    assert press(engine, "ac") == "0"
    state = engine.snapshot()
    assert state.first_operand is None
    assert state.operator is None
    assert state.awaiting_second_operand is False
    assert state.memory == 0


# --- Memory bank ---

def test_memory_add_and_recall(engine):
    assert press(engine, "5 m+ 3 m+ mrc") == "8"


def test_memory_subtract(engine):
    assert press(engine, "5 m+ 2 m- mrc") == "3"


def test_memory_add_starts_fresh_numeral(engine):
    assert press(engine, "5 m+ 7") == "7"


def test_memory_recall_twice_clears(engine):
    assert press(engine, "5 m+ mrc mrc") == "0"
    assert engine.snapshot().memory == 0


def test_memory_toggle_reset_by_other_key(engine):
    assert press(engine, "5 m+ mrc 7 mrc") == "5"
    assert engine.snapshot().memory == pytest.approx(5.0)


def test_memory_just_recalled_flag(engine):
    press(engine, "5 m+ mrc")
    assert engine.snapshot().memory_just_recalled is True
    press(engine, "+")
    assert engine.snapshot().memory_just_recalled is False


def test_memory_ignores_error_display(engine):
    press(engine, "1 / 0 = m+")
    assert engine.snapshot().memory == 0


def test_memory_recall_is_clamped(engine):
    assert press(engine, "0.1 m+ 0.2 m+ mrc") == "0.3"


def test_memory_survives_calculations(engine):
    press(engine, "4 m+ 2 + 2 =")
    assert press(engine, "mrc") == "4"


# --- Malformed events ---

@pytest.mark.parametrize(
    "event",
    [
        KeyEvent(KeyKind.DIGIT, "x"),
        KeyEvent(KeyKind.DIGIT, "12"),
        KeyEvent(KeyKind.DIGIT),
        KeyEvent.operator("^"),
        "7",
        None,
    ],
)
def test_malformed_event_is_ignored(engine, caplog, event):
    press(engine, "5 + 3")
    before = engine.snapshot()
    with caplog.at_level(logging.WARNING, logger="pocketcalc.engine"):
        assert engine.handle_key(event) == "3"
    assert engine.snapshot() == before
    assert "Ignoring unrecognised key event" in caplog.text


def test_malformed_event_does_not_break_recall_toggle(engine):
    press(engine, "5 m+ mrc")
    engine.handle_key(KeyEvent(KeyKind.DIGIT, "x"))
    assert press(engine, "mrc") == "0"


# --- Instances ---

def test_engines_are_independent():
    a = CalculatorEngine()
    b = CalculatorEngine()
    press(a, "7 m+ 1 +")
    assert b.current_display() == "0"
    assert b.snapshot().memory == 0
    assert b.snapshot().operator is None


def test_snapshot_is_a_copy(engine):
    press(engine, "4")
    snap = engine.snapshot()
    snap.display = "999"
    assert engine.current_display() == "4"
