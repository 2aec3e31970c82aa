"""CLI command implementations exposed via `codeblock_extractor.ui.cli`."""

from __future__ import annotations

from .check import check
from .extract import extract


__all__ = ["check", "extract"]
