"""Sibling files declared through ``additionalFiles`` annotations."""

from __future__ import annotations

from .annotations import AdditionalFile


__all__ = ["additional_file_path", "emit_additional_file"]


def additional_file_path(group_path: str, entry: AdditionalFile) -> str:
    """Return the output path of ``entry``: the suffix appended verbatim to ``group_path``.

    The suffix never replaces an extension: ``counter.tsx`` with ``.spec.tsx``
    yields ``counter.tsx.spec.tsx``.
    """
    return f"{group_path}{entry.suffix}"


def emit_additional_file(group_path: str, entry: AdditionalFile) -> tuple[str, str]:
    """Return ``(path, content)`` for ``entry``; the content is never transformed."""
    return additional_file_path(group_path, entry), entry.content
