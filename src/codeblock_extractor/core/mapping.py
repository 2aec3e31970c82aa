"""Bidirectional position mapping between a document and its generated files.

A generated file is laid out as::

    <document prefix lines>
    <block 1 prefix lines>
    <block 1 code lines>
    <block 1 postfix lines>
    <blank separator line>
    <block 2 prefix lines>
    ...
    <document postfix lines>

Walking that layout gives, for every source block, the generated line where
its code starts. Both directions use the same walk so that
``to_source(to_generated(p)) == p`` for any position on a line of a tracked
code region. Columns only shift by the indentation removed from each line
of an indented fence. Positions outside tracked code regions map to ``None``.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .documents import CodeBlockNode, Document
from .generator import BLOCK_SEPARATOR, GeneratedFile, prefix_line_count, render_block
from .positions import Position, Range


__all__ = [
    "MappedPosition",
    "find_code_block_at",
    "find_generated_file",
    "map_range_to_source",
    "to_generated",
    "to_source",
]

_SEPARATOR_LINES = BLOCK_SEPARATOR.count("\n")


@dataclass(frozen=True, slots=True)
class MappedPosition:
    """Location inside a generated file."""

    path: str
    position: Position


def find_code_block_at(document: Document, position: Position) -> CodeBlockNode | None:
    """Return the code block whose fenced content contains ``position``."""
    for block in document.code_blocks:
        if block.contains_code(position):
            return block
    return None


def find_generated_file(
    files: Sequence[GeneratedFile], block: CodeBlockNode
) -> GeneratedFile | None:
    """Return the generated file built from ``block``, if any."""
    for generated in files:
        if any(source is block for source in generated.source_blocks):
            return generated
    return None


def _code_starts(
    document: Document, generated: GeneratedFile
) -> Iterator[tuple[CodeBlockNode, int]]:
    """Yield each source block with the 0-based generated line its code starts on."""
    config = document.config
    cursor = prefix_line_count(config.prefix if config is not None else None)
    for block in generated.source_blocks:
        block_prefix = block.annotation.prefix if block.annotation is not None else None
        yield block, cursor + prefix_line_count(block_prefix)
        cursor += render_block(block).count("\n") + _SEPARATOR_LINES


def to_generated(
    document: Document, files: Sequence[GeneratedFile], position: Position
) -> MappedPosition | None:
    """Map a document position inside a code region to its generated file position."""
    block = find_code_block_at(document, position)
    if block is None or block.annotation is None or block.annotation.skip:
        return None
    generated = find_generated_file(files, block)
    if generated is None:
        return None

    for candidate, start in _code_starts(document, generated):
        if candidate is not block:
            continue
        offset = position.line - block.code_range.start.line
        column = max(1, position.column - block.indent_at(offset))
        return MappedPosition(generated.path, Position(start + offset + 1, column))
    return None


def to_source(
    document: Document, files: Sequence[GeneratedFile], path: str, position: Position
) -> Position | None:
    """Map a generated file position back to the document, or ``None`` outside code."""
    generated = next(
        (candidate for candidate in files if candidate.path == path and candidate.source_blocks),
        None,
    )
    if generated is None:
        return None

    offset = position.line - 1
    for block, start in _code_starts(document, generated):
        relative = offset - start
        if relative < 0:
            return None
        annotation = block.annotation
        code = annotation.apply_replacements(block.code) if annotation is not None else block.code
        if relative < code.count("\n") + 1:
            if relative >= block.code_line_count:
                return None
            column = position.column + block.indent_at(relative)
            return Position(block.code_range.start.line + relative, column)
    return None


def map_range_to_source(
    document: Document, files: Sequence[GeneratedFile], path: str, range_: Range
) -> Range | None:
    """Map a generated-file range onto the document, keeping its line span.

    Used to forward language-service diagnostics. The start must land inside a
    code region; an end that falls past the block keeps the line span of ``range_``.
    """
    start = to_source(document, files, path, range_.start)
    if start is None:
        return None
    end = to_source(document, files, path, range_.end)
    if end is None or end < start:
        end = Position(start.line + range_.line_count - 1, range_.end.column)
    return Range(start, end)
