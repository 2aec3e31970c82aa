"""Diagnostic records and emitters shared across the extraction pipeline.

Parsing and generation never raise for problems in the document itself.
They collect :class:`Diagnostic` records instead and let the caller decide
which ones are fatal. Emitters route those records to a destination: the
standard logging module, the rich-enabled CLI, or nowhere at all.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Protocol, runtime_checkable

from .positions import Range


logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    """Category of a problem found while parsing or generating."""

    MALFORMED_DIRECTIVE = "malformed-directive"
    DANGLING_ANNOTATION = "dangling-annotation"
    UNRESOLVED_FILE_NAME = "unresolved-file-name"
    DUPLICATE_CONFIG = "duplicate-config"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single problem anchored to a range of the source document."""

    kind: DiagnosticKind
    message: str
    range: Range
    severity: Severity = Severity.ERROR

    def format(self, source_path: str | None = None) -> str:
        location = f"{self.range.start.line}:{self.range.start.column}"
        if source_path:
            location = f"{source_path}:{location}"
        return f"{location}: {self.message} [{self.kind.value}]"


@runtime_checkable
class DiagnosticEmitter(Protocol):
    """Interface used to surface warnings, errors, and structured events."""

    debug_enabled: bool

    def warning(self, message: str, exc: BaseException | None = None) -> None: ...

    def error(self, message: str, exc: BaseException | None = None) -> None: ...

    def event(self, name: str, payload: Mapping[str, Any]) -> None: ...


class NullEmitter:
    """Emitter that ignores every diagnostic."""

    debug_enabled: bool = False

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        return

    def error(self, message: str, exc: BaseException | None = None) -> None:
        return

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        return


class LoggingEmitter:
    """Emitter that forwards diagnostics to the standard logging module."""

    def __init__(
        self, *, logger_obj: logging.Logger | None = None, debug_enabled: bool = False
    ) -> None:
        self._logger = logger_obj or logger
        self.debug_enabled = debug_enabled

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.warning(message, exc_info=exc)
        else:
            self._logger.warning(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        if exc is not None:
            self._logger.error(message, exc_info=exc)
        else:
            self._logger.error(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        message = format_event_message(name, payload)
        if message:
            self._logger.info(message)
            return
        self._logger.debug("diagnostic event %s: %s", name, dict(payload))


def format_event_message(name: str, payload: Mapping[str, Any]) -> str | None:
    """Return a human-friendly summary for selected diagnostic events."""
    data = dict(payload)

    if name == "file_written":
        path = data.get("path") or "<unknown>"
        return f"Wrote {path}"

    if name == "file_unchanged":
        path = data.get("path") or "<unknown>"
        return f"Unchanged {path}"

    if name == "extraction_summary":
        count = data.get("count", 0)
        out_dir = data.get("out_dir") or "<unknown>"
        source = data.get("source")
        suffix = f" from {source}" if source else ""
        return f"Generated {count} file(s) in {out_dir}{suffix}"

    return None


def report_diagnostics(
    diagnostics: Iterable[Diagnostic],
    emitter: DiagnosticEmitter,
    *,
    source_path: str | None = None,
) -> int:
    """Send diagnostics to ``emitter`` by severity and return the error count."""
    errors = 0
    for diagnostic in diagnostics:
        message = diagnostic.format(source_path)
        if diagnostic.severity is Severity.WARNING:
            emitter.warning(message)
        else:
            errors += 1
            emitter.error(message)
    return errors


__all__ = [
    "Diagnostic",
    "DiagnosticEmitter",
    "DiagnosticKind",
    "LoggingEmitter",
    "NullEmitter",
    "Severity",
    "format_event_message",
    "report_diagnostics",
]
