"""File resolver and transform pipeline.

Generation is a pure function of a parsed :class:`Document`:

1. Every annotated, non-skipped code block resolves to an output path: its own
   ``file`` or, failing that, the path of the nearest preceding non-skipped
   block. Blocks with neither are reported and left out.
2. Each block's code goes through its ``replace`` rules, then is wrapped by the
   block's ``prefix`` and ``postfix``.
3. Blocks sharing a path are joined by one blank line, in document order, and
   the whole file is wrapped once by the document-level ``prefix``/``postfix``.
4. ``additionalFiles`` entries are emitted right after their group's file.

Wrapping joins the non-empty pieces with a newline after trimming trailing
whitespace from the prefix and postfix, so a YAML block scalar ending in a
newline adds exactly the lines it visibly contains.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .additional import emit_additional_file
from .diagnostics import Diagnostic, DiagnosticKind
from .documents import CodeBlockNode, Document, get_annotated_code_blocks


__all__ = [
    "BLOCK_SEPARATOR",
    "DEFAULT_OUT_DIR",
    "GenerateOptions",
    "GeneratedFile",
    "GenerationResult",
    "generate",
    "prefix_line_count",
    "render_block",
    "resolve_file_groups",
    "resolve_out_dir",
    "wrap_text",
]

_log = logging.getLogger(__name__)

DEFAULT_OUT_DIR = ".examples"
BLOCK_SEPARATOR = "\n\n"


@dataclass(frozen=True, slots=True)
class GenerateOptions:
    """Caller overrides applied on top of the document configuration."""

    out_dir: str | None = None


@dataclass(frozen=True, slots=True)
class GeneratedFile:
    """Output file derived from a document.

    ``source_blocks`` lists the code blocks the content was built from, in
    document order. It is empty for ``additionalFiles`` output, which has no
    originating code region.
    """

    path: str
    content: str
    source_blocks: tuple[CodeBlockNode, ...] = ()


@dataclass(frozen=True, slots=True)
class GenerationResult:
    files: list[GeneratedFile]
    out_dir: str
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def get(self, path: str) -> GeneratedFile | None:
        for generated in self.files:
            if generated.path == path:
                return generated
        return None


def prefix_line_count(prefix: str | None) -> int:
    """Return how many lines ``prefix`` occupies in front of the wrapped body."""
    if not prefix:
        return 0
    return len(prefix.rstrip().split("\n"))


def wrap_text(prefix: str | None, body: str, postfix: str | None) -> str:
    pieces: list[str] = []
    if prefix:
        pieces.append(prefix.rstrip())
    pieces.append(body)
    if postfix:
        pieces.append(postfix.rstrip())
    return "\n".join(pieces)


def render_block(block: CodeBlockNode) -> str:
    """Return the fully transformed text a block contributes to its file."""
    annotation = block.annotation
    if annotation is None:
        return block.code
    code = annotation.apply_replacements(block.code)
    return wrap_text(annotation.prefix, code, annotation.postfix)


def resolve_out_dir(document: Document, options: GenerateOptions | None = None) -> str:
    if options is not None and options.out_dir:
        return options.out_dir
    config = document.config
    if config is not None and config.out_dir:
        return config.out_dir
    return DEFAULT_OUT_DIR


def resolve_file_groups(
    document: Document,
) -> tuple[dict[str, list[CodeBlockNode]], list[Diagnostic]]:
    """Group non-skipped annotated blocks by resolved path, in first-appearance order."""
    groups: dict[str, list[CodeBlockNode]] = {}
    diagnostics: list[Diagnostic] = []
    inherited: str | None = None

    for block in get_annotated_code_blocks(document):
        annotation = block.annotation
        assert annotation is not None
        if annotation.skip:
            continue
        path = annotation.file or inherited
        if path is None:
            diagnostics.append(
                Diagnostic(
                    DiagnosticKind.UNRESOLVED_FILE_NAME,
                    "@codeblock has no 'file' and no preceding code block to continue.",
                    block.annotation_range or block.range,
                )
            )
            continue
        inherited = path
        groups.setdefault(path, []).append(block)

    return groups, diagnostics


def generate(document: Document, options: GenerateOptions | None = None) -> GenerationResult:
    """Build every output file described by ``document``."""
    out_dir = resolve_out_dir(document, options)
    groups, diagnostics = resolve_file_groups(document)
    config = document.config
    prefix = config.prefix if config is not None else None
    postfix = config.postfix if config is not None else None

    files: list[GeneratedFile] = []
    for path, blocks in groups.items():
        body = BLOCK_SEPARATOR.join(render_block(block) for block in blocks)
        files.append(GeneratedFile(path, wrap_text(prefix, body, postfix), tuple(blocks)))

        for block in blocks:
            assert block.annotation is not None
            for entry in block.annotation.additional_files:
                extra_path, content = emit_additional_file(path, entry)
                files.append(GeneratedFile(extra_path, content))

    _log.debug(
        "Generated %d file(s) from %s into %s", len(files), document.source_path, out_dir
    )
    return GenerationResult(files=files, out_dir=out_dir, diagnostics=diagnostics)
