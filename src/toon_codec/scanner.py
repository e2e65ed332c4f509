"""Line scanning: turns TOON source lines into indentation-aware records."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import ScanError
from .types import BlankLine, ParsedLine

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"


@dataclass
class ScanResult:
    """Content lines plus the positions of skipped blank lines."""

    lines: list[ParsedLine] = field(default_factory=list)
    blank_lines: list[BlankLine] = field(default_factory=list)


def scan_lines(lines: Iterable[str], indent_size: int, strict: bool) -> ScanResult:
    """
    Parse raw lines into ParsedLine records.

    Blank lines are recorded separately and comment lines are dropped.

    Args:
        lines: Raw source lines, without or with trailing line terminators.
        indent_size: Number of spaces per indentation level.
        strict: Reject tabs in indentation and indents that are not a
            multiple of indent_size.

    Returns:
        The scanned lines and blank line positions.

    Raises:
        ScanError: For illegal indentation in strict mode.
    """
    result = ScanResult()

    for i, raw in enumerate(lines, start=1):
        raw = raw.rstrip("\r\n")

        # Count leading spaces
        stripped = raw.lstrip(" ")
        indent = len(raw) - len(stripped)

        if not stripped.strip():
            result.blank_lines.append(
                BlankLine(line_number=i, indent=indent, depth=indent // indent_size)
            )
            continue

        # Leading whitespace run may mix in tabs after the spaces
        leading = len(stripped) - len(stripped.lstrip(" \t"))
        if leading and "\t" in stripped[:leading]:
            if strict:
                raise ScanError("Tab in indentation (use spaces)", i)
            # Each tab counts as one indentation level
            tabs = stripped[:leading].count("\t")
            logger.warning("Line %d: treating %d tab(s) in indentation as indent units", i, tabs)
            indent += leading + tabs * (indent_size - 1)
            stripped = stripped[leading:]

        if stripped.startswith(COMMENT_MARKER):
            continue

        if strict and indent % indent_size != 0:
            raise ScanError(
                f"Indentation {indent} is not a multiple of {indent_size}", i
            )

        result.lines.append(
            ParsedLine(
                raw=raw,
                content=stripped.rstrip(),
                indent=indent,
                depth=indent // indent_size,
                line_number=i,
            )
        )

    return result


class LineCursor:
    """Cursor for iterating through scanned lines."""

    def __init__(self, scan: ScanResult):
        self.lines = scan.lines
        self.blank_lines = scan.blank_lines
        self.pos = 0

    def peek(self) -> ParsedLine | None:
        """Look at current line without advancing."""
        if self.pos < len(self.lines):
            return self.lines[self.pos]
        return None

    def advance(self) -> ParsedLine | None:
        """Get current line and advance position."""
        line = self.peek()
        if line:
            self.pos += 1
        return line

    def current(self) -> ParsedLine | None:
        """The most recently consumed line."""
        if self.pos == 0:
            return None
        return self.lines[self.pos - 1]

    def peek_at_depth(self, depth: int) -> ParsedLine | None:
        """Peek at next line at specific depth."""
        line = self.peek()
        if line and line.depth == depth:
            return line
        return None

    def at_end(self) -> bool:
        return self.pos >= len(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    def count_at_depth(self, depth: int) -> int:
        """Number of lines at exactly ``depth`` across the whole input."""
        return sum(1 for line in self.lines if line.depth == depth)
