"""Typer application wiring for the codeblock-extractor CLI."""

from __future__ import annotations

import typer

from codeblock_extractor.version import get_version

from ._options import DebugOption, VerboseOption
from .commands import check, extract
from .state import debug_enabled, emit_error, get_cli_state, set_cli_state


app = typer.Typer(
    help="Extract annotated code blocks from Markdown documents into standalone files.",
    context_settings={"help_option_names": ["--help"]},
    no_args_is_help=True,
)


@app.callback()
def _app_root(
    ctx: typer.Context,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
    version: bool = typer.Option(False, "--version", help="Print the version and exit."),
) -> None:
    """Top-level CLI entry point configuring diagnostics for subcommands."""

    if version:
        typer.echo(get_version())
        raise typer.Exit(code=0)
    set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)


app.command()(extract)
app.command()(check)


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - defensive catch-all
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
