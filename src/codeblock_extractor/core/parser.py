"""Document builder turning scanner tokens into a :class:`Document`.

`parse` never raises for malformed input. Directive comments that cannot be
decoded, or that are not followed by a fence, degrade to text nodes and leave
a :class:`Diagnostic` behind. Only the first ``@codeblock-config`` is
effective; later ones stay in the node list and are flagged as duplicates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .annotations import Annotation, decode_annotation, decode_config
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .documents import CodeBlockNode, ConfigNode, Document, Node, TextNode
from .exceptions import DirectiveDecodeError
from .positions import Position, Range
from .scanner import CONFIG_DIRECTIVE, DirectiveToken, FenceToken, Token, scan, split_lines


__all__ = ["ParseResult", "parse"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Document built from a source text plus the problems found along the way."""

    document: Document
    errors: list[Diagnostic] = field(default_factory=list)


class _DocumentBuilder:
    def __init__(self, text: str, source_path: str) -> None:
        self.source_path = source_path
        self.lines = split_lines(text)
        self.tokens: list[Token] = list(scan(self.lines))
        self.nodes: list[Node] = []
        self.errors: list[Diagnostic] = []
        self._cursor = 1
        self._config_seen = False

    def build(self) -> ParseResult:
        index = 0
        while index < len(self.tokens):
            token = self.tokens[index]
            if isinstance(token, FenceToken):
                self._add_code_block(token)
            elif not token.well_formed:
                self._report(DiagnosticKind.MALFORMED_DIRECTIVE, str(token.problem), token)
            elif token.name == CONFIG_DIRECTIVE:
                self._add_config(token)
            else:
                fence = self._following_fence(token, index)
                if self._add_annotated_block(token, fence):
                    index += 1
            index += 1

        self._flush_text(len(self.lines))
        document = Document(source_path=self.source_path, nodes=tuple(self.nodes))
        _log.debug(
            "Parsed %s: %d node(s), %d diagnostic(s)",
            self.source_path,
            len(self.nodes),
            len(self.errors),
        )
        return ParseResult(document=document, errors=self.errors)

    def _range(self, first: int, last: int) -> Range:
        return Range.from_lines(self.lines, first, last)

    def _raw(self, first: int, last: int) -> str:
        return "\n".join(self.lines[first - 1 : last])

    def _report(
        self,
        kind: DiagnosticKind,
        message: str,
        token: DirectiveToken,
        severity: Severity = Severity.ERROR,
    ) -> None:
        self.errors.append(
            Diagnostic(kind, message, self._range(token.start_line, token.end_line), severity)
        )

    def _flush_text(self, last: int) -> None:
        """Emit a text node for the uncovered lines up to ``last``."""
        if last >= self._cursor:
            text = self._raw(self._cursor, last)
            self.nodes.append(TextNode(text, self._range(self._cursor, last)))
        self._cursor = last + 1

    def _following_fence(self, token: DirectiveToken, index: int) -> FenceToken | None:
        if index + 1 >= len(self.tokens):
            return None
        candidate = self.tokens[index + 1]
        if not isinstance(candidate, FenceToken):
            return None
        between = self.lines[token.end_line : candidate.start_line - 1]
        if any(line.strip() for line in between):
            return None
        return candidate

    def _add_config(self, token: DirectiveToken) -> None:
        try:
            config = decode_config(token.body)
        except DirectiveDecodeError as exc:
            self._report(DiagnosticKind.MALFORMED_DIRECTIVE, str(exc), token)
            return

        if self._config_seen:
            self._report(
                DiagnosticKind.DUPLICATE_CONFIG,
                "Multiple @codeblock-config directives found. Only the first one is used.",
                token,
                Severity.WARNING,
            )
        self._config_seen = True

        self._flush_text(token.start_line - 1)
        self.nodes.append(
            ConfigNode(
                config=config,
                range=self._range(token.start_line, token.end_line),
                raw=self._raw(token.start_line, token.end_line),
            )
        )
        self._cursor = token.end_line + 1

    def _add_annotated_block(self, token: DirectiveToken, fence: FenceToken | None) -> bool:
        """Attach ``token`` to ``fence``; return whether the fence was consumed."""
        try:
            annotation = decode_annotation(token.body)
        except DirectiveDecodeError as exc:
            self._report(DiagnosticKind.MALFORMED_DIRECTIVE, str(exc), token)
            return False

        if fence is None:
            self._report(
                DiagnosticKind.DANGLING_ANNOTATION,
                "@codeblock directive is not followed by a fenced code block.",
                token,
            )
            return False

        self._flush_text(token.start_line - 1)
        self.nodes.append(
            self._code_block(
                fence,
                start_line=token.start_line,
                annotation=annotation,
                annotation_range=self._range(token.start_line, token.end_line),
            )
        )
        self._cursor = fence.end_line + 1
        return True

    def _add_code_block(self, fence: FenceToken) -> None:
        self._flush_text(fence.start_line - 1)
        self.nodes.append(self._code_block(fence, start_line=fence.start_line))
        self._cursor = fence.end_line + 1

    def _code_block(
        self,
        fence: FenceToken,
        *,
        start_line: int,
        annotation: Annotation | None = None,
        annotation_range: Range | None = None,
    ) -> CodeBlockNode:
        count = len(fence.content)
        first = fence.content_start_line
        if count:
            code_range = self._range(first, first + count - 1)
        else:
            code_range = Range(Position(first, 1), Position(first, 1))
        return CodeBlockNode(
            language=fence.language,
            code="\n".join(fence.content),
            range=self._range(start_line, fence.end_line),
            code_range=code_range,
            raw=self._raw(start_line, fence.end_line),
            code_line_count=count,
            info=fence.info,
            indent=fence.indent,
            line_indents=fence.stripped,
            annotation=annotation,
            annotation_range=annotation_range,
        )


def parse(text: str, source_path: str) -> ParseResult:
    """Parse ``text`` into a :class:`Document` and collect diagnostics."""
    return _DocumentBuilder(text, source_path).build()
