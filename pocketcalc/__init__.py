"""pocketcalc — key-press engine for a four-function pocket calculator.

Turns a stream of key presses (digits, point, operators, percent, square
root, sign change, memory keys, clears) into the text a pocket calculator
would show, including its chained-operator, percent and overflow quirks.

Usage:
    python -m pocketcalc keys                   # Show the keypad
    python -m pocketcalc press "200 + 10 %"     # -> 220
    python -m pocketcalc repl                   # Interactive keypad
"""
