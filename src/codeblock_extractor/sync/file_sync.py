"""Keep generated files on disk in step with edited source documents.

:class:`GeneratedFileSync` glues the pure core to the outside world: it
memoises parses per document version, debounces writes per document, writes
changed files, and tracks outputs a document no longer produces.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
import logging
from pathlib import Path

from codeblock_extractor.core.cache import CachedDocument, DocumentCache
from codeblock_extractor.core.diagnostics import DiagnosticEmitter, NullEmitter, report_diagnostics
from codeblock_extractor.core.generator import GenerateOptions

from .output import (
    StaleFile,
    StaleFileTracker,
    WriteReport,
    resolve_output_dir,
    write_generated_files,
)
from .scheduler import DEFAULT_DEBOUNCE_DELAY, DebouncedScheduler


__all__ = ["GeneratedFileSync", "SourceSnapshot"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceSnapshot:
    """Text of a source document at a given editor version."""

    path: Path
    version: Hashable
    text: str

    @property
    def key(self) -> str:
        return str(self.path)


class GeneratedFileSync:
    """Synchronise generated files as source documents change."""

    def __init__(
        self,
        *,
        options: GenerateOptions | None = None,
        delay: float = DEFAULT_DEBOUNCE_DELAY,
        emitter: DiagnosticEmitter | None = None,
        scheduler: DebouncedScheduler[SourceSnapshot] | None = None,
    ) -> None:
        self.cache = DocumentCache(options)
        self.tracker = StaleFileTracker()
        self._emitter = emitter or NullEmitter()
        self._scheduler = scheduler or DebouncedScheduler(self._scheduled_update, delay=delay)
        self._out_dirs: dict[str, Path] = {}

    def lookup(self, snapshot: SourceSnapshot) -> CachedDocument:
        return self.cache.get(snapshot.key, snapshot.version, snapshot.text, snapshot.key)

    def schedule_update(self, snapshot: SourceSnapshot) -> None:
        self._scheduler.schedule(snapshot.key, snapshot)

    def force_sync(self, snapshot: SourceSnapshot) -> WriteReport | None:
        """Cancel any pending update for ``snapshot`` and sync right away."""
        self._scheduler.cancel(snapshot.key)
        return self._perform_update(snapshot)

    def flush(self, snapshot: SourceSnapshot) -> bool:
        """Run the pending update for ``snapshot`` now; return whether one was pending."""
        return self._scheduler.flush(snapshot.key)

    def out_dir(self, snapshot: SourceSnapshot) -> Path | None:
        return self._out_dirs.get(snapshot.key)

    def close(self, snapshot: SourceSnapshot) -> None:
        """Stop tracking a source that was removed; its outputs become stale."""
        self._scheduler.cancel(snapshot.key)
        self.cache.invalidate(snapshot.key)
        self._out_dirs.pop(snapshot.key, None)
        self._report_stale(self.tracker.forget(snapshot.key))

    def dispose(self) -> None:
        self._scheduler.dispose()

    def _report_stale(self, stale: list[StaleFile]) -> None:
        for stale_file in stale:
            self._emitter.warning(
                f"Generated file is no longer produced: {stale_file.absolute_path}"
            )

    def _scheduled_update(self, _key: Hashable, snapshot: SourceSnapshot) -> None:
        self._perform_update(snapshot)

    def _perform_update(self, snapshot: SourceSnapshot) -> WriteReport | None:
        entry = self.lookup(snapshot)
        report_diagnostics(
            [*entry.errors, *entry.generation.diagnostics],
            self._emitter,
            source_path=snapshot.key,
        )
        files = entry.generation.files
        if not files:
            self._report_stale(self.tracker.forget(snapshot.key))
            self._out_dirs.pop(snapshot.key, None)
            return None

        out_dir = resolve_output_dir(snapshot.path, entry.generation.out_dir)
        self._out_dirs[snapshot.key] = out_dir
        report = write_generated_files(files, out_dir, emitter=self._emitter)
        stale = self.tracker.update(snapshot.key, out_dir, [generated.path for generated in files])
        self._report_stale(stale)
        _log.debug(
            "Synced %s: %d written, %d unchanged",
            snapshot.key,
            len(report.written),
            len(report.unchanged),
        )
        return report
