"""Version-keyed memoisation of parse and generation results.

Editors hand out a monotonically increasing version per open document. The
cache keeps the last result per document key and recomputes whenever the
version changes. Nothing depends on the cache for correctness: a miss simply
parses and generates again.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
import logging
import threading

from .diagnostics import Diagnostic
from .documents import Document
from .generator import GenerateOptions, GenerationResult, generate
from .parser import parse


__all__ = ["CachedDocument", "DocumentCache"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CachedDocument:
    version: Hashable
    document: Document
    errors: list[Diagnostic]
    generation: GenerationResult


class DocumentCache:
    """Thread-safe ``key -> (version, document, generated files)`` store."""

    def __init__(self, options: GenerateOptions | None = None) -> None:
        self._options = options
        self._entries: dict[Hashable, CachedDocument] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def get(self, key: Hashable, version: Hashable, text: str, source_path: str) -> CachedDocument:
        """Return the entry for ``key`` at ``version``, recomputing it when stale."""
        entry = self._entries.get(key)
        if entry is not None and entry.version == version:
            return entry
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.version != version:
                _log.debug("Refreshing cached document %s at version %s", key, version)
                parsed = parse(text, source_path)
                entry = CachedDocument(
                    version=version,
                    document=parsed.document,
                    errors=parsed.errors,
                    generation=generate(parsed.document, self._options),
                )
                self._entries[key] = entry
        return entry

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
