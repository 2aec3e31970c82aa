"""Parsed document model.

Architecture
: A :class:`Document` is an ordered tuple of nodes partitioning the source
  text line by line: :class:`TextNode` spans, :class:`ConfigNode` directives,
  and :class:`CodeBlockNode` fences with their optional annotation.
: Documents are immutable. A changed source is parsed again rather than
  patched, so every derived value can be recomputed from the text alone.

Node identity
: Nodes compare by identity. :class:`~codeblock_extractor.core.generator.GeneratedFile`
  keeps the code blocks it was built from, and the position mapper uses that
  identity to join generated lines back to their block.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .annotations import Annotation, CodeblockConfig
from .positions import Position, Range


__all__ = [
    "CodeBlockNode",
    "ConfigNode",
    "Document",
    "Node",
    "TextNode",
    "get_annotated_code_blocks",
    "print_document",
]


@dataclass(frozen=True, slots=True, eq=False)
class TextNode:
    """Raw text that carries no directive."""

    type: ClassVar[str] = "text"

    text: str
    range: Range

    @property
    def raw(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True, eq=False)
class ConfigNode:
    """An ``@codeblock-config`` directive."""

    type: ClassVar[str] = "config"

    config: CodeblockConfig
    range: Range
    raw: str

    @property
    def out_dir(self) -> str | None:
        return self.config.out_dir

    @property
    def prefix(self) -> str | None:
        return self.config.prefix

    @property
    def postfix(self) -> str | None:
        return self.config.postfix


@dataclass(frozen=True, slots=True, eq=False)
class CodeBlockNode:
    """A fenced code block, optionally preceded by its ``@codeblock`` directive.

    ``range`` runs from the directive (or the opening fence when there is no
    directive) through the closing fence. ``code_range`` covers the fenced
    content only and ``annotation_range`` the directive comment only.
    ``line_indents`` records the indentation removed from each content line.
    """

    type: ClassVar[str] = "codeblock"

    language: str
    code: str
    range: Range
    code_range: Range
    raw: str
    code_line_count: int
    annotation: Annotation | None = None
    annotation_range: Range | None = None
    info: str = ""
    indent: int = 0
    line_indents: tuple[int, ...] = ()

    @property
    def is_annotated(self) -> bool:
        return self.annotation is not None

    @property
    def is_skipped(self) -> bool:
        return self.annotation is not None and self.annotation.skip

    def contains_code(self, position: Position) -> bool:
        """Return ``True`` when ``position`` falls on a line of the fenced content."""
        return (
            self.code_line_count > 0
            and self.code_range.contains_line(position.line)
            and position.column >= 1
        )

    def indent_at(self, offset: int) -> int:
        """Return the columns removed from content line ``offset`` (0-based)."""
        if 0 <= offset < len(self.line_indents):
            return self.line_indents[offset]
        return self.indent


Node = TextNode | ConfigNode | CodeBlockNode


@dataclass(frozen=True, slots=True)
class Document:
    """Ordered node sequence parsed from a single source text."""

    source_path: str
    nodes: tuple[Node, ...]

    @property
    def config_nodes(self) -> list[ConfigNode]:
        return [node for node in self.nodes if isinstance(node, ConfigNode)]

    @property
    def config(self) -> CodeblockConfig | None:
        """Return the effective configuration: the first config directive wins."""
        for node in self.nodes:
            if isinstance(node, ConfigNode):
                return node.config
        return None

    @property
    def code_blocks(self) -> list[CodeBlockNode]:
        return [node for node in self.nodes if isinstance(node, CodeBlockNode)]


def get_annotated_code_blocks(document: Document) -> list[CodeBlockNode]:
    """Return every annotated code block in document order, skipped ones included."""
    return [block for block in document.code_blocks if block.annotation is not None]


def print_document(document: Document) -> str:
    """Render ``document`` back to the exact text it was parsed from."""
    return "\n".join(node.raw for node in document.nodes)
