"""Writing generated files to disk and tracking the ones left behind."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from dataclasses import dataclass, field
import logging
from pathlib import Path

from codeblock_extractor.core.diagnostics import DiagnosticEmitter, NullEmitter
from codeblock_extractor.core.exceptions import OutputWriteError
from codeblock_extractor.core.generator import GeneratedFile


__all__ = [
    "Mismatch",
    "StaleFile",
    "StaleFileTracker",
    "WriteReport",
    "check_generated_files",
    "resolve_output_dir",
    "write_generated_files",
]

_log = logging.getLogger(__name__)


def resolve_output_dir(source_path: Path, out_dir: str) -> Path:
    """Resolve ``out_dir`` relative to the directory holding ``source_path``."""
    candidate = Path(out_dir).expanduser()
    if candidate.is_absolute():
        return candidate
    return source_path.parent / candidate


def _matches(target: Path, content: str) -> bool:
    try:
        return target.read_bytes() == content.encode("utf-8")
    except OSError:
        return False


@dataclass(slots=True)
class WriteReport:
    out_dir: Path
    written: list[Path] = field(default_factory=list)
    unchanged: list[Path] = field(default_factory=list)


def write_generated_files(
    files: Sequence[GeneratedFile],
    out_dir: Path,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> WriteReport:
    """Write ``files`` below ``out_dir``, leaving identical files untouched."""
    emitter = emitter or NullEmitter()
    report = WriteReport(out_dir=out_dir)
    for generated in files:
        target = out_dir / generated.path
        if _matches(target, generated.content):
            report.unchanged.append(target)
            emitter.event("file_unchanged", {"path": str(target)})
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(generated.content.encode("utf-8"))
        except OSError as exc:
            raise OutputWriteError(f"Failed to write generated file '{target}'.") from exc
        _log.debug("Wrote %s", target)
        report.written.append(target)
        emitter.event("file_written", {"path": str(target)})
    return report


@dataclass(frozen=True, slots=True)
class Mismatch:
    path: Path
    reason: str

    def describe(self) -> str:
        return f"{self.path} ({self.reason})"


def check_generated_files(files: Sequence[GeneratedFile], out_dir: Path) -> list[Mismatch]:
    """Compare ``files`` against disk, returning every missing or differing file."""
    mismatches: list[Mismatch] = []
    for generated in files:
        target = out_dir / generated.path
        if not target.exists():
            mismatches.append(Mismatch(target, "missing"))
        elif not _matches(target, generated.content):
            mismatches.append(Mismatch(target, "changed"))
    return mismatches


@dataclass(frozen=True, slots=True)
class StaleFile:
    """A previously generated file that its source no longer produces."""

    absolute_path: Path
    relative_path: str
    out_dir: Path
    source_key: Hashable


class StaleFileTracker:
    """Remember what each source generated and flag files it stops producing.

    Stale files are only recorded; :meth:`clean` deletes them on request.
    """

    def __init__(self) -> None:
        self._generated: dict[Hashable, tuple[Path, set[str]]] = {}
        self._stale: dict[Path, StaleFile] = {}

    @property
    def stale_files(self) -> list[StaleFile]:
        return list(self._stale.values())

    def has_stale_files(self) -> bool:
        return bool(self._stale)

    def update(self, source_key: Hashable, out_dir: Path, paths: Iterable[str]) -> list[StaleFile]:
        """Record the current output of ``source_key``; return files that just went stale."""
        current = set(paths)
        previous_dir, previous = self._generated.get(source_key, (out_dir, set()))

        newly_stale: list[StaleFile] = []
        for relative in sorted(previous - current if previous_dir == out_dir else previous):
            newly_stale.extend(self._mark_stale(source_key, previous_dir, relative))

        for absolute, stale in list(self._stale.items()):
            if (
                stale.source_key == source_key
                and stale.out_dir == out_dir
                and stale.relative_path in current
            ):
                del self._stale[absolute]

        self._generated[source_key] = (out_dir, current)
        return newly_stale

    def forget(self, source_key: Hashable) -> list[StaleFile]:
        """Mark everything ``source_key`` generated as stale and stop tracking it."""
        entry = self._generated.pop(source_key, None)
        if entry is None:
            return []
        out_dir, previous = entry
        newly_stale: list[StaleFile] = []
        for relative in sorted(previous):
            newly_stale.extend(self._mark_stale(source_key, out_dir, relative))
        return newly_stale

    def clean(self) -> int:
        """Delete every stale file from disk and return how many were removed."""
        removed = 0
        for absolute in list(self._stale):
            try:
                absolute.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                _log.warning("Could not delete stale file %s: %s", absolute, exc)
                continue
            else:
                removed += 1
            del self._stale[absolute]
        return removed

    def _mark_stale(self, source_key: Hashable, out_dir: Path, relative: str) -> list[StaleFile]:
        absolute = out_dir / relative
        if absolute in self._stale:
            return []
        stale = StaleFile(absolute, relative, out_dir, source_key)
        self._stale[absolute] = stale
        return [stale]
