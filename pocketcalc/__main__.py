"""CLI for the pocketcalc engine.

Usage:
    python -m pocketcalc keys                        # Show the keypad bindings
    python -m pocketcalc press "200 + 10 %"          # Final display only
    python -m pocketcalc press "2 + 3 + 4 =" --trace # Per-key table
    python -m pocketcalc press "9 sqrt" --json       # Per-key JSON trace
    python -m pocketcalc repl                        # Interactive keypad
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from pocketcalc.config import CalcConfig, load_config, min_display_length
from pocketcalc.display import ConsoleDisplay
from pocketcalc.engine import CalculatorEngine
from pocketcalc.errors import UnknownKeyError
from pocketcalc.keymap import KEY_BINDINGS, split_tokens
from pocketcalc.session import StreamInput, replay, run_session

app = typer.Typer(
    name="pocketcalc",
    help="Four-function pocket calculator driven by key presses",
    no_args_is_help=True,
)
console = Console(stderr=True)
out = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every key at DEBUG level"),
    width: Optional[int] = typer.Option(None, "--width", help="Display width in characters (default 9)"),
) -> None:
    """Pocket calculator engine."""
    config = load_config()
    if width is not None:
        narrowest = min_display_length(config.error_token)
        if width < narrowest:
            console.print(f"[red]--width must be at least {narrowest}[/red]")
            raise typer.Exit(2)
        config = CalcConfig(
            max_display_length=width,
            error_token=config.error_token,
            log_level=config.log_level,
        )
    ctx.obj = config
    _setup_logging("DEBUG" if verbose else config.log_level)


@app.command("keys")
def cmd_keys() -> None:
    """Show the keypad bindings."""
    table = Table(title="Keypad", show_header=True, header_style="bold")
    table.add_column("Key", style="green", min_width=10)
    table.add_column("Action", min_width=30)
    for token, description in KEY_BINDINGS:
        table.add_row(token, description)

    console.print()
    console.print(table)
    console.print()


@app.command("press")
def cmd_press(
    ctx: typer.Context,
    sequence: str = typer.Argument(help="Key tokens separated by spaces, e.g. '12.5 * 2 ='"),
    trace: bool = typer.Option(False, "--trace", "-t", help="Show the display after every key"),
    as_json: bool = typer.Option(False, "--json", help="Print the per-key trace as JSON"),
) -> None:
    """Press a sequence of keys and print the resulting display."""
    config: CalcConfig = ctx.obj
    engine = CalculatorEngine(config)
    try:
        steps = replay(split_tokens(sequence), engine)
    except UnknownKeyError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        out.print_json(json.dumps([step.to_dict() for step in steps]))
        return

    if trace:
        table = Table(title="Key trace", show_header=True, header_style="bold")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Key", style="green")
        table.add_column("Display", justify="right", min_width=config.max_display_length)
        table.add_column("Pending", style="cyan")
        table.add_column("Memory", justify="right", style="magenta")
        for i, step in enumerate(steps, 1):
            s = step.state
            pending = ""
            if s.first_operand is not None and s.operator is not None:
                pending = f"{s.first_operand:g} {s.operator.value}"
            display_style = "red" if step.display == config.error_token else "white"
            table.add_row(
                str(i),
                step.token,
                f"[{display_style}]{step.display}[/]",
                pending or "[dim]--[/dim]",
                f"{s.memory:g}" if s.memory else "[dim]--[/dim]",
            )
        console.print(table)

    out.print(engine.current_display(), highlight=False)


@app.command("repl")
def cmd_repl(ctx: typer.Context) -> None:
    """Interactive keypad: type key tokens, one or more per line."""
    config: CalcConfig = ctx.obj
    engine = CalculatorEngine(config)
    display = ConsoleDisplay(
        console,
        width=config.max_display_length,
        error_token=config.error_token,
        status=lambda: "M" if engine.snapshot().memory else "",
    )
    console.print("[dim]Type keys separated by spaces ('pocketcalc keys' lists them), 'quit' to leave.[/dim]")
    display.render(engine.current_display())

    source = StreamInput(sys.stdin, prompt=sys.stderr if sys.stdin.isatty() else None)
    count = run_session(engine, source, display)
    console.print(f"[dim]{count} keys pressed.[/dim]")


if __name__ == "__main__":
    app()
