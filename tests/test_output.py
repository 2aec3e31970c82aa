from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from codeblock_extractor.core.exceptions import OutputWriteError
from codeblock_extractor.core.generator import GeneratedFile
from codeblock_extractor.sync.file_sync import GeneratedFileSync, SourceSnapshot
from codeblock_extractor.sync.output import (
    StaleFileTracker,
    check_generated_files,
    resolve_output_dir,
    write_generated_files,
)


class RecordingEmitter:
    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict[str, Any]]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload: Mapping[str, Any]) -> None:
        self.events.append((name, dict(payload)))


def test_resolve_output_dir(tmp_path: Path) -> None:
    source = tmp_path / "docs" / "README.md"

    assert resolve_output_dir(source, ".examples") == tmp_path / "docs" / ".examples"
    assert resolve_output_dir(source, str(tmp_path / "abs")) == tmp_path / "abs"


def test_write_creates_directories_and_skips_identical_files(tmp_path: Path) -> None:
    files = [
        GeneratedFile("a.ts", "const a = 1;"),
        GeneratedFile("nested/b.ts", "const b = 2;"),
    ]
    emitter = RecordingEmitter()

    first = write_generated_files(files, tmp_path, emitter=emitter)
    second = write_generated_files(files, tmp_path, emitter=emitter)

    assert first.written == [tmp_path / "a.ts", tmp_path / "nested" / "b.ts"]
    assert second.written == []
    assert second.unchanged == first.written
    assert (tmp_path / "nested" / "b.ts").read_bytes() == b"const b = 2;"
    assert [name for name, _payload in emitter.events] == [
        "file_written",
        "file_written",
        "file_unchanged",
        "file_unchanged",
    ]


def test_write_failure_raises(tmp_path: Path) -> None:
    (tmp_path / "blocker").write_text("not a directory", encoding="utf-8")

    with pytest.raises(OutputWriteError) as excinfo:
        write_generated_files([GeneratedFile("blocker/a.ts", "x")], tmp_path)

    assert "blocker" in str(excinfo.value)
    assert excinfo.value.__cause__ is not None


def test_check_reports_missing_and_changed(tmp_path: Path) -> None:
    (tmp_path / "same.ts").write_bytes(b"same")
    (tmp_path / "changed.ts").write_bytes(b"old")
    files = [
        GeneratedFile("same.ts", "same"),
        GeneratedFile("changed.ts", "new"),
        GeneratedFile("missing.ts", "x"),
    ]

    mismatches = check_generated_files(files, tmp_path)

    assert [mismatch.describe() for mismatch in mismatches] == [
        f"{tmp_path / 'changed.ts'} (changed)",
        f"{tmp_path / 'missing.ts'} (missing)",
    ]


def test_stale_tracker_flags_and_recovers(tmp_path: Path) -> None:
    tracker = StaleFileTracker()

    assert tracker.update("doc", tmp_path, ["a.ts", "b.ts"]) == []
    (stale,) = tracker.update("doc", tmp_path, ["a.ts"])

    assert stale.absolute_path == tmp_path / "b.ts"
    assert stale.relative_path == "b.ts"
    assert tracker.has_stale_files()

    assert tracker.update("doc", tmp_path, ["a.ts", "b.ts"]) == []
    assert not tracker.has_stale_files()


def test_stale_tracker_handles_out_dir_changes_and_forget(tmp_path: Path) -> None:
    tracker = StaleFileTracker()
    old_dir = tmp_path / "old"
    new_dir = tmp_path / "new"

    tracker.update("doc", old_dir, ["a.ts"])
    (moved,) = tracker.update("doc", new_dir, ["a.ts"])
    assert moved.absolute_path == old_dir / "a.ts"

    forgotten = tracker.forget("doc")
    assert [stale.absolute_path for stale in forgotten] == [new_dir / "a.ts"]
    assert tracker.forget("doc") == []


def test_stale_tracker_clean_deletes_files(tmp_path: Path) -> None:
    tracker = StaleFileTracker()
    (tmp_path / "gone.ts").write_text("x", encoding="utf-8")
    tracker.update("doc", tmp_path, ["gone.ts", "never-written.ts"])
    tracker.update("doc", tmp_path, [])

    tracker.clean()

    assert not (tmp_path / "gone.ts").exists()
    assert tracker.stale_files == []


def _snapshot(path: Path, version: int, code: str) -> SourceSnapshot:
    text = f"<!-- @codeblock a.ts -->\n```ts\n{code}\n```\n"
    return SourceSnapshot(path, version, text)


def test_force_sync_writes_and_tracks(tmp_path: Path) -> None:
    source = tmp_path / "README.md"
    emitter = RecordingEmitter()
    sync = GeneratedFileSync(emitter=emitter)

    report = sync.force_sync(_snapshot(source, 1, "const a = 1;"))

    assert report is not None
    assert report.written == [tmp_path / ".examples" / "a.ts"]
    assert (tmp_path / ".examples" / "a.ts").read_text(encoding="utf-8") == "const a = 1;"
    assert sync.out_dir(_snapshot(source, 1, "")) == tmp_path / ".examples"

    renamed = SourceSnapshot(source, 2, "<!-- @codeblock b.ts -->\n```ts\nb\n```\n")
    sync.force_sync(renamed)

    assert [stale.relative_path for stale in sync.tracker.stale_files] == ["a.ts"]
    assert emitter.warnings == [
        f"Generated file is no longer produced: {tmp_path / '.examples' / 'a.ts'}"
    ]
    sync.dispose()


def test_document_without_output_is_forgotten(tmp_path: Path) -> None:
    source = tmp_path / "README.md"
    emitter = RecordingEmitter()
    sync = GeneratedFileSync(emitter=emitter)
    sync.force_sync(_snapshot(source, 1, "x"))

    report = sync.force_sync(SourceSnapshot(source, 2, "# No code any more\n"))

    assert report is None
    assert sync.out_dir(SourceSnapshot(source, 2, "")) is None
    assert [stale.relative_path for stale in sync.tracker.stale_files] == ["a.ts"]
    assert emitter.warnings == [
        f"Generated file is no longer produced: {tmp_path / '.examples' / 'a.ts'}"
    ]
    sync.dispose()


def test_scheduled_updates_deliver_latest_text(tmp_path: Path) -> None:
    source = tmp_path / "README.md"
    sync = GeneratedFileSync(delay=60)

    sync.schedule_update(_snapshot(source, 1, "first"))
    sync.schedule_update(_snapshot(source, 2, "second"))
    assert not (tmp_path / ".examples").exists()

    assert sync.flush(_snapshot(source, 2, "")) is True
    assert (tmp_path / ".examples" / "a.ts").read_text(encoding="utf-8") == "second"
    assert sync.lookup(_snapshot(source, 2, "ignored")).version == 2
    sync.dispose()


def test_close_marks_outputs_stale(tmp_path: Path) -> None:
    source = tmp_path / "README.md"
    emitter = RecordingEmitter()
    sync = GeneratedFileSync(delay=60, emitter=emitter)
    snapshot = _snapshot(source, 1, "x")
    sync.force_sync(snapshot)
    sync.schedule_update(_snapshot(source, 2, "y"))

    sync.close(snapshot)

    assert sync.flush(snapshot) is False
    assert snapshot.key not in sync.cache
    assert sync.tracker.has_stale_files()
    assert len(emitter.warnings) == 1
    sync.dispose()


def test_sync_reports_document_diagnostics(tmp_path: Path) -> None:
    source = tmp_path / "README.md"
    emitter = RecordingEmitter()
    sync = GeneratedFileSync(emitter=emitter)
    text = "<!-- @codeblock -->\n```ts\norphan\n```\n<!-- @codeblock-config outDir: a -->\n"
    text += "<!-- @codeblock-config outDir: b -->\n"

    report = sync.force_sync(SourceSnapshot(source, 1, text))

    assert report is None
    assert len(emitter.errors) == 1
    assert emitter.errors[0].startswith(f"{source}:1:1:")
    assert emitter.errors[0].endswith("[unresolved-file-name]")
    assert [warning.endswith("[duplicate-config]") for warning in emitter.warnings] == [True]
    sync.dispose()
