"""Auxiliary helpers used by CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from codeblock_extractor.core.diagnostics import Diagnostic
from codeblock_extractor.core.generator import GenerateOptions, GenerationResult, generate
from codeblock_extractor.core.parser import parse
from codeblock_extractor.sync.output import resolve_output_dir

from .diagnostics import CliEmitter


@dataclass(slots=True)
class SourceExtraction:
    """Parse and generation results for one source document."""

    source: Path
    generation: GenerationResult
    diagnostics: list[Diagnostic]

    @property
    def out_dir(self) -> Path:
        return resolve_output_dir(self.source, self.generation.out_dir)


def read_source(path: Path) -> str:
    """Read a source document, turning I/O failures into a CLI parameter error."""
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise typer.BadParameter(f"Cannot read source document '{path}': {exc}") from exc


def extract_source(path: Path, out_dir: str | None = None) -> SourceExtraction:
    parsed = parse(read_source(path), str(path))
    generation = generate(parsed.document, GenerateOptions(out_dir=out_dir))
    return SourceExtraction(
        source=path,
        generation=generation,
        diagnostics=[*parsed.errors, *generation.diagnostics],
    )


def report_source_diagnostics(extraction: SourceExtraction, emitter: CliEmitter) -> int:
    """Surface every diagnostic for ``extraction`` and return the error count."""
    return emitter.diagnostics(extraction.diagnostics, _display_path(extraction.source))


def _display_path(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)
