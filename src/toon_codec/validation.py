"""Strict-mode structural checks used by the decoder."""

import logging
from collections.abc import Iterable

from .errors import StructuralError
from .types import BlankLine

logger = logging.getLogger(__name__)


def assert_expected_count(
    actual: int,
    expected: int,
    what: str,
    strict: bool,
    line_number: int | None = None,
) -> None:
    """
    Check a declared array length against the number of items decoded.

    Raises:
        StructuralError: On mismatch in strict mode. Lenient mode only logs.
    """
    if actual == expected:
        return
    if strict:
        raise StructuralError(
            f"{what} length mismatch: expected {expected}, got {actual}", line_number
        )
    logger.warning(
        "Line %s: %s length mismatch: expected %d, got %d",
        line_number,
        what,
        expected,
        actual,
    )


def validate_row_width(
    actual: int, expected: int, strict: bool, line_number: int | None = None
) -> None:
    """Check that a tabular row has one value per header field."""
    if actual == expected:
        return
    if strict:
        raise StructuralError(
            f"Expected {expected} values in tabular row, got {actual}", line_number
        )
    logger.warning(
        "Line %s: expected %d values in tabular row, got %d", line_number, expected, actual
    )


def validate_no_blank_lines_in_range(
    start: int, end: int, blank_lines: Iterable[BlankLine], what: str
) -> None:
    """
    Reject blank lines strictly between the first and last line of an array body.

    Raises:
        StructuralError: Reporting the first offending blank line.
    """
    for blank in blank_lines:
        if start < blank.line_number < end:
            raise StructuralError(f"Blank line inside {what}", blank.line_number)


def check_depth(depth: int, max_depth: int, line_number: int | None = None) -> None:
    """Abort decoding when nesting goes beyond max_depth."""
    if depth > max_depth:
        raise StructuralError(
            f"Maximum nesting depth exceeded ({max_depth})", line_number
        )


def check_duplicate_key(
    obj: dict, key: str, strict: bool, line_number: int | None = None
) -> None:
    """
    Reject a key that already exists in the object being built.

    Raises:
        StructuralError: In strict mode. Lenient mode logs and lets the
            later value win.
    """
    if key not in obj:
        return
    if strict:
        raise StructuralError(f"Duplicate key: {key!r}", line_number)
    logger.warning("Line %s: duplicate key %r overwritten", line_number, key)
