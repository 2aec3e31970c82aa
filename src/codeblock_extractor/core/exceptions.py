"""Custom exception hierarchy for the extraction pipeline."""

from __future__ import annotations


class CodeblockError(RuntimeError):
    """Base exception for code block extraction failures."""


class DirectiveDecodeError(CodeblockError):
    """Raised when a directive comment body cannot be decoded."""


class OutputWriteError(CodeblockError):
    """Raised when a generated file cannot be written to disk."""


class ExtractionCheckError(CodeblockError):
    """Raised when generated files on disk do not match the source document."""

    def __init__(self, message: str, mismatches: list[str] | None = None) -> None:
        super().__init__(message)
        self.mismatches = list(mismatches or [])


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "CodeblockError",
    "DirectiveDecodeError",
    "ExtractionCheckError",
    "OutputWriteError",
    "exception_hint",
    "exception_messages",
]
