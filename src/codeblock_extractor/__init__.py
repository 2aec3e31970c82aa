"""Extract annotated fenced code blocks from Markdown into standalone files."""

from __future__ import annotations

from codeblock_extractor.core.additional import additional_file_path, emit_additional_file
from codeblock_extractor.core.annotations import (
    AdditionalFile,
    Annotation,
    CodeblockConfig,
    ReplaceRule,
    decode_annotation,
    decode_config,
)
from codeblock_extractor.core.cache import CachedDocument, DocumentCache
from codeblock_extractor.core.diagnostics import (
    Diagnostic,
    DiagnosticEmitter,
    DiagnosticKind,
    LoggingEmitter,
    NullEmitter,
    Severity,
    report_diagnostics,
)
from codeblock_extractor.core.documents import (
    CodeBlockNode,
    ConfigNode,
    Document,
    Node,
    TextNode,
    get_annotated_code_blocks,
    print_document,
)
from codeblock_extractor.core.exceptions import (
    CodeblockError,
    DirectiveDecodeError,
    ExtractionCheckError,
    OutputWriteError,
)
from codeblock_extractor.core.generator import (
    DEFAULT_OUT_DIR,
    GeneratedFile,
    GenerateOptions,
    GenerationResult,
    generate,
)
from codeblock_extractor.core.mapping import (
    MappedPosition,
    find_code_block_at,
    find_generated_file,
    map_range_to_source,
    to_generated,
    to_source,
)
from codeblock_extractor.core.parser import ParseResult, parse
from codeblock_extractor.core.positions import Position, Range
from codeblock_extractor.sync.file_sync import GeneratedFileSync, SourceSnapshot
from codeblock_extractor.version import get_version


__version__ = get_version()

__all__ = [
    "DEFAULT_OUT_DIR",
    "AdditionalFile",
    "Annotation",
    "CachedDocument",
    "CodeBlockNode",
    "CodeblockConfig",
    "CodeblockError",
    "ConfigNode",
    "Diagnostic",
    "DiagnosticEmitter",
    "DiagnosticKind",
    "DirectiveDecodeError",
    "Document",
    "DocumentCache",
    "ExtractionCheckError",
    "GenerateOptions",
    "GeneratedFile",
    "GeneratedFileSync",
    "GenerationResult",
    "LoggingEmitter",
    "MappedPosition",
    "Node",
    "NullEmitter",
    "OutputWriteError",
    "ParseResult",
    "Position",
    "Range",
    "ReplaceRule",
    "Severity",
    "SourceSnapshot",
    "TextNode",
    "__version__",
    "additional_file_path",
    "decode_annotation",
    "decode_config",
    "emit_additional_file",
    "find_code_block_at",
    "find_generated_file",
    "generate",
    "get_annotated_code_blocks",
    "map_range_to_source",
    "parse",
    "print_document",
    "report_diagnostics",
    "to_generated",
    "to_source",
]
