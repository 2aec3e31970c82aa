"""Source coordinates shared by the parser, generator, and position mapper.

Lines and columns are 1-based on both sides of every mapping, matching the
numbering editors display.
"""

from __future__ import annotations

from dataclasses import dataclass


__all__ = ["Position", "Range"]


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """A 1-based ``(line, column)`` coordinate."""

    line: int
    column: int = 1


@dataclass(frozen=True, slots=True)
class Range:
    """An inclusive span between two positions."""

    start: Position
    end: Position

    @classmethod
    def from_lines(cls, lines: list[str], first: int, last: int) -> Range:
        """Build a range covering whole lines ``first..last`` (1-based) of ``lines``."""
        return cls(Position(first, 1), Position(last, len(lines[last - 1]) + 1))

    def contains_line(self, line: int) -> bool:
        return self.start.line <= line <= self.end.line

    @property
    def line_count(self) -> int:
        return self.end.line - self.start.line + 1
