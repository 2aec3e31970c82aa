"""Implementation of the `codeblock-extractor check` command."""

from __future__ import annotations

import typer

from codeblock_extractor.core.exceptions import ExtractionCheckError
from codeblock_extractor.sync.output import check_generated_files

from .._options import OutDirOption, SourcesArgument
from ..diagnostics import CliEmitter
from ..state import emit_error, emit_info, get_cli_state
from ..utils import SourceExtraction, extract_source, report_source_diagnostics


def _verify(extraction: SourceExtraction) -> None:
    mismatches = check_generated_files(extraction.generation.files, extraction.out_dir)
    if mismatches:
        raise ExtractionCheckError(
            f"{extraction.source.name}: {len(mismatches)} generated file(s) are out of date.",
            [mismatch.describe() for mismatch in mismatches],
        )


def check(sources: SourcesArgument, out_dir: OutDirOption = None) -> None:
    """Verify that generated files on disk match the @codeblock annotations in SOURCES."""

    state = get_cli_state()
    emitter = CliEmitter(state)

    for source in sources:
        extraction = extract_source(source, out_dir)
        report_source_diagnostics(extraction, emitter)
        try:
            _verify(extraction)
        except ExtractionCheckError as exc:
            emit_error(str(exc))
            for mismatch in exc.mismatches:
                emit_error(f"  {mismatch}")
            continue
        if state.verbosity >= 1:
            emit_info(f"{source.name}: {len(extraction.generation.files)} file(s) up to date")

    if state.failed:
        raise typer.Exit(code=1)
