"""Session driver — feeds key events into the engine one at a time.

run_session is the single consumer between an InputSource and the engine:
each event is fully processed and rendered before the next is read.
replay runs a key sequence without a sink and records every step.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, Protocol, TextIO

from pocketcalc.display import Display
from pocketcalc.engine import CalculatorEngine
from pocketcalc.errors import UnknownKeyError
from pocketcalc.keymap import parse_key, split_tokens
from pocketcalc.models import KeyEvent, StepRecord

logger = logging.getLogger(__name__)

QUIT_WORDS = frozenset({"quit", "exit", "q"})


class InputSource(Protocol):
    """Produces one KeyEvent per user action."""

    def __iter__(self) -> Iterator[KeyEvent]: ...


class StreamInput:
    """Reads key tokens line by line from a text stream.

    Unknown tokens are logged and skipped; a line holding only a quit word
    ends the stream.
    """

    def __init__(self, stream: TextIO, prompt: Optional[TextIO] = None) -> None:
        self.stream = stream
        self.prompt = prompt
        self.skipped: list[str] = []

    def __iter__(self) -> Iterator[KeyEvent]:
        while True:
            if self.prompt is not None:
                self.prompt.write("> ")
                self.prompt.flush()
            line = self.stream.readline()
            if not line:
                return
            if line.strip().lower() in QUIT_WORDS:
                return
            for token in split_tokens(line):
                try:
                    event = parse_key(token)
                except UnknownKeyError as e:
                    logger.warning("%s", e)
                    self.skipped.append(token)
                    continue
                yield event


def run_session(engine: CalculatorEngine, source: Iterable[KeyEvent], display: Display) -> int:
    """Drive the engine from an input source, rendering after every key.

    Returns:
        Number of events processed.
    """
    count = 0
    for event in source:
        display.render(engine.handle_key(event))
        count += 1
    logger.debug("Session ended after %d keys", count)
    return count


def replay(tokens: Iterable[str], engine: Optional[CalculatorEngine] = None) -> list[StepRecord]:
    """Press each key token in turn and record the result.

    Args:
        tokens: Single-key tokens, e.g. from keymap.split_tokens().
        engine: Engine to drive. A fresh one is created when omitted.

    Raises:
        UnknownKeyError: a token has no binding. Nothing is pressed in
            that case.
    """
    engine = engine or CalculatorEngine()
    pairs = [(token, parse_key(token)) for token in tokens]

    steps: list[StepRecord] = []
    for token, event in pairs:
        display = engine.handle_key(event)
        steps.append(StepRecord(token=token, event=event, display=display, state=engine.snapshot()))
    return steps
