"""Rich rendering of extraction diagnostics and file events for the terminal."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from codeblock_extractor.core.diagnostics import (
    Diagnostic,
    DiagnosticEmitter,
    Severity,
    format_event_message,
)

from .state import CLIState, emit_error, emit_info, emit_warning, get_cli_state


if TYPE_CHECKING:
    from rich.text import Text

_SEVERITY_STYLES = {Severity.ERROR: "red", Severity.WARNING: "yellow"}
_EVENT_STYLES = {"file_written": "green", "file_unchanged": "dim"}


def diagnostic_text(diagnostic: Diagnostic, source_path: str | None = None) -> Text:
    """Render ``path:line:col: severity: message [kind]`` with per-part styles."""
    from rich.text import Text

    start = diagnostic.range.start
    location = f"{start.line}:{start.column}"
    if source_path:
        location = f"{source_path}:{location}"
    style = _SEVERITY_STYLES[diagnostic.severity]
    return Text.assemble(
        (location, "bold"),
        ": ",
        (f"{diagnostic.severity.value}: ", f"bold {style}"),
        (diagnostic.message, style),
        " ",
        (f"[{diagnostic.kind.value}]", "dim"),
    )


class CliEmitter(DiagnosticEmitter):
    """Emitter printing to the invocation's consoles and keeping its tallies."""

    def __init__(self, state: CLIState | None = None, *, debug_enabled: bool | None = None) -> None:
        self._state = state or get_cli_state()
        if debug_enabled is None:
            debug_enabled = self._state.show_tracebacks
        self.debug_enabled = bool(debug_enabled)

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        emit_warning(message, exception=exc, state=self._state)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        emit_error(message, exception=exc, state=self._state)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        if name == "file_written":
            self._state.written += 1
        elif name == "file_unchanged":
            self._state.unchanged += 1
            if self._state.verbosity < 1:
                return
        message = format_event_message(name, payload)
        if message:
            emit_info(message, style=_EVENT_STYLES.get(name), state=self._state)

    def diagnostic(self, diagnostic: Diagnostic, source_path: str | None = None) -> None:
        if diagnostic.severity is Severity.WARNING:
            self._state.warnings += 1
        else:
            self._state.errors += 1
        self._state.err_console.print(diagnostic_text(diagnostic, source_path))

    def diagnostics(self, diagnostics: Iterable[Diagnostic], source_path: str | None = None) -> int:
        """Render every diagnostic and return how many are errors."""
        errors = 0
        for diagnostic in diagnostics:
            self.diagnostic(diagnostic, source_path)
            if diagnostic.severity is Severity.ERROR:
                errors += 1
        return errors


__all__ = ["CliEmitter", "diagnostic_text"]
