"""Implementation of the `codeblock-extractor extract` command."""

from __future__ import annotations

import typer

from codeblock_extractor.core.exceptions import OutputWriteError, exception_hint
from codeblock_extractor.sync.output import write_generated_files

from .._options import OutDirOption, SourcesArgument
from ..diagnostics import CliEmitter
from ..state import emit_error, emit_info, get_cli_state
from ..utils import extract_source, report_source_diagnostics


def extract(sources: SourcesArgument, out_dir: OutDirOption = None) -> None:
    """Write the files described by @codeblock annotations in SOURCES."""

    state = get_cli_state()
    emitter = CliEmitter(state)

    for source in sources:
        extraction = extract_source(source, out_dir)
        report_source_diagnostics(extraction, emitter)
        target = extraction.out_dir
        try:
            write_generated_files(extraction.generation.files, target, emitter=emitter)
        except OutputWriteError as exc:
            emit_error(exception_hint(exc) or str(exc), exception=exc)
            raise typer.Exit(code=1) from exc
        emitter.event(
            "extraction_summary",
            {
                "count": len(extraction.generation.files),
                "out_dir": str(target),
                "source": source.name,
            },
        )

    if len(sources) > 1:
        emit_info(f"Total: {state.written} written, {state.unchanged} already up to date")
    if state.failed:
        raise typer.Exit(code=1)
