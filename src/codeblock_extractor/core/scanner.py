"""Line scanner locating directive comments and fenced code regions.

The scanner performs no semantic interpretation: it reports where directive
comments and fences start and end, plus the raw text they carry. Lines that no
token covers are plain text. Directives that appear inside a fenced region are
part of the code and are never reported.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
import re
import textwrap


__all__ = [
    "CONFIG_DIRECTIVE",
    "CODEBLOCK_DIRECTIVE",
    "DirectiveToken",
    "FenceToken",
    "Token",
    "scan",
    "split_lines",
]

CODEBLOCK_DIRECTIVE = "codeblock"
CONFIG_DIRECTIVE = "codeblock-config"

_COMMENT_CLOSE = "-->"
_DIRECTIVE_RE = re.compile(r"^ {0,3}<!--\s*@(codeblock-config|codeblock)(?=\s|-->|$)")
_FENCE_OPEN_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_OPENS_NESTED_RE = re.compile(r"(?::|[|>][+-]?[0-9]?)\s*$")


@dataclass(frozen=True, slots=True)
class DirectiveToken:
    """A ``<!-- @codeblock... -->`` comment spanning ``start_line..end_line``."""

    name: str
    body: str
    start_line: int
    end_line: int
    problem: str | None = None

    @property
    def well_formed(self) -> bool:
        return self.problem is None


@dataclass(frozen=True, slots=True)
class FenceToken:
    """A fenced region from its opening fence through its closing fence.

    ``stripped`` holds, per content line, how many indentation columns were
    removed; lines indented less than the fence give up fewer than ``indent``.
    """

    start_line: int
    end_line: int
    info: str
    indent: int
    content: tuple[str, ...]
    closed: bool = True
    stripped: tuple[int, ...] = ()

    @property
    def language(self) -> str:
        parts = self.info.split()
        return parts[0] if parts else ""

    @property
    def content_start_line(self) -> int:
        return self.start_line + 1


Token = DirectiveToken | FenceToken


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` so that ``"\\n".join`` restores it exactly."""
    return text.split("\n")


def _strip_indent(line: str, width: int) -> int:
    """Return how many leading spaces, up to ``width``, ``line`` gives up."""
    removed = 0
    while removed < width and removed < len(line) and line[removed] == " ":
        removed += 1
    return removed


def _fence_body(lines: list[str], indent: int) -> tuple[tuple[str, ...], tuple[int, ...]]:
    stripped = tuple(_strip_indent(line, indent) for line in lines)
    content = tuple(line[width:] for line, width in zip(lines, stripped))
    return content, stripped


def _join_body(head: str, continuation: list[str]) -> str:
    """Join a body started on the comment line with the lines below it.

    Continuation lines are dedented on their own, so a mapping that begins
    after the keyword lines up with the keys written underneath it. When the
    first line opens a nested value (`key:` or a `|`/`>` block scalar) the
    continuation keeps its indentation.
    """
    rest = "\n".join(continuation)
    if not _OPENS_NESTED_RE.search(head):
        rest = textwrap.dedent(rest)
    if not head:
        return rest
    return f"{head}\n{rest}" if rest else head


def _scan_directive(lines: list[str], index: int, match: re.Match[str]) -> DirectiveToken:
    name = match.group(1)
    start_line = index + 1
    first = lines[index].rstrip("\r")
    rest = first[match.end() :]

    close = rest.find(_COMMENT_CLOSE)
    if close >= 0:
        trailing = rest[close + len(_COMMENT_CLOSE) :]
        problem = None
        if trailing.strip():
            problem = f"Unexpected text after '{_COMMENT_CLOSE}' in @{name} directive."
        return DirectiveToken(name, rest[:close], start_line, start_line, problem)

    head = rest.strip()
    body: list[str] = []
    for offset in range(index + 1, len(lines)):
        current = lines[offset].rstrip("\r")
        close = current.find(_COMMENT_CLOSE)
        if close < 0:
            body.append(current)
            continue
        before = current[:close]
        if before.strip():
            body.append(before)
        trailing = current[close + len(_COMMENT_CLOSE) :]
        problem = None
        if trailing.strip():
            problem = f"Unexpected text after '{_COMMENT_CLOSE}' in @{name} directive."
        return DirectiveToken(name, _join_body(head, body), start_line, offset + 1, problem)

    return DirectiveToken(
        name,
        _join_body(head, body),
        start_line,
        start_line,
        f"Unterminated @{name} directive comment.",
    )


def _scan_fence(lines: list[str], index: int, match: re.Match[str]) -> FenceToken | None:
    indent = len(match.group(1))
    marker = match.group(2)
    info = match.group(3).strip()
    if marker[0] == "`" and "`" in info:
        return None

    closing = re.compile(rf"^ {{0,3}}{re.escape(marker[0])}{{{len(marker)},}}\s*$")
    for offset in range(index + 1, len(lines)):
        if closing.match(lines[offset]):
            content, stripped = _fence_body(lines[index + 1 : offset], indent)
            return FenceToken(index + 1, offset + 1, info, indent, content, stripped=stripped)

    content, stripped = _fence_body(lines[index + 1 :], indent)
    return FenceToken(
        index + 1, len(lines), info, indent, content, closed=False, stripped=stripped
    )


def scan(lines: list[str]) -> Iterator[Token]:
    """Yield directive and fence tokens in document order."""
    index = 0
    total = len(lines)
    while index < total:
        line = lines[index].rstrip("\r")

        directive = _DIRECTIVE_RE.match(line)
        if directive is not None:
            token = _scan_directive(lines, index, directive)
            yield token
            index = token.end_line
            continue

        fence_match = _FENCE_OPEN_RE.match(line)
        if fence_match is not None:
            fence = _scan_fence(lines, index, fence_match)
            if fence is not None:
                yield fence
                index = fence.end_line
                continue

        index += 1
