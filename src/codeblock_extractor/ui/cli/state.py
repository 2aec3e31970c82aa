"""Per-invocation CLI state: verbosity, consoles, and what has been reported."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
import sys
from typing import TYPE_CHECKING, TextIO

import click
import typer

from codeblock_extractor.core.exceptions import exception_messages


if TYPE_CHECKING:
    from rich.console import Console
    from rich.text import Text

__all__ = [
    "CLIState",
    "debug_enabled",
    "emit_error",
    "emit_info",
    "emit_warning",
    "get_cli_state",
    "set_cli_state",
]


@dataclass(slots=True)
class CLIState:
    """Options of the running command plus tallies of what it reported.

    ``errors`` decides the exit status of ``extract`` and ``check``; the
    file counters feed the closing summary.
    """

    verbosity: int = 0
    show_tracebacks: bool = False
    errors: int = 0
    warnings: int = 0
    written: int = 0
    unchanged: int = 0
    _consoles: dict[str, Console] = field(default_factory=dict, init=False, repr=False)

    def _console_for(self, name: str, stream: TextIO) -> Console:
        from rich.console import Console

        console = self._consoles.get(name)
        # CliRunner and pytest swap the process streams between invocations.
        if console is None or console.file is not stream:
            console = Console(file=stream, highlight=False, soft_wrap=True)
            self._consoles[name] = console
        return console

    @property
    def console(self) -> Console:
        return self._console_for("out", sys.stdout)

    @property
    def err_console(self) -> Console:
        return self._console_for("err", sys.stderr)

    @property
    def failed(self) -> bool:
        return self.errors > 0


_STATE_VAR: ContextVar[CLIState | None] = ContextVar("codeblock_cli_state", default=None)


def get_cli_state(ctx: typer.Context | click.Context | None = None) -> CLIState:
    """Return the state stored on the Click context chain, creating it on first use."""
    if ctx is None:
        ctx = click.get_current_context(silent=True)
    if ctx is not None:
        state = ctx.ensure_object(CLIState)
        _STATE_VAR.set(state)
        return state

    state = _STATE_VAR.get()
    if state is None:
        state = CLIState()
        _STATE_VAR.set(state)
    return state


def set_cli_state(
    *,
    ctx: typer.Context | None = None,
    verbosity: int | None = None,
    debug: bool | None = None,
) -> CLIState:
    state = get_cli_state(ctx)
    if verbosity is not None:
        state.verbosity = max(0, verbosity)
    if debug is not None:
        state.show_tracebacks = debug
    return state


def _problem_text(
    state: CLIState, level: str, message: str, exception: BaseException | None
) -> Text:
    from rich.text import Text

    style = "red" if level == "error" else "yellow"
    text = Text.assemble((f"{level}: ", f"bold {style}"), (message, style))
    if exception is None or state.verbosity < 1:
        return text

    details = [line for line in exception_messages(exception) if line not in message]
    if state.verbosity < 2:
        details = details[:1]
    details.append(f"type: {type(exception).__name__}")
    text.append("\n" + "\n".join(f"  {line}" for line in details), style=style)
    return text


def emit_info(message: str, *, style: str | None = None, state: CLIState | None = None) -> None:
    """Print an informational line to stdout."""
    (state or get_cli_state()).console.print(message, style=style, markup=False)


def emit_warning(
    message: str, *, exception: BaseException | None = None, state: CLIState | None = None
) -> None:
    state = state or get_cli_state()
    state.warnings += 1
    state.err_console.print(_problem_text(state, "warning", message, exception))


def emit_error(
    message: str, *, exception: BaseException | None = None, state: CLIState | None = None
) -> None:
    """Print an error to stderr and mark the invocation as failed."""
    state = state or get_cli_state()
    state.errors += 1
    state.err_console.print(_problem_text(state, "error", message, exception))


def debug_enabled() -> bool:
    """Return whether full tracebacks were requested with ``--debug``."""
    state = _STATE_VAR.get()
    return state is not None and state.show_tracebacks
