"""TOON decoder implementation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from .errors import DecodeError, ParseError, StructuralError
from .expansion import SourceKey, expand_paths
from .header import infer_row_delimiter, parse_array_header
from .primitives import parse_key, parse_primitive
from .scanner import LineCursor, ScanResult, scan_lines
from .string_utils import find_unquoted_colon, split_by_delimiter
from .types import ArrayHeaderInfo, DecodeOptions, JsonObject, JsonValue, ParsedLine
from .validation import (
    assert_expected_count,
    check_depth,
    check_duplicate_key,
    validate_no_blank_lines_in_range,
    validate_row_width,
)

logger = logging.getLogger(__name__)

LIST_ITEM_MARKER = "-"
LIST_ITEM_PREFIX = "- "


def decode(text: str, options: DecodeOptions | None = None) -> JsonValue:
    """
    Decode TOON text to a Python value.

    Args:
        text: The TOON-formatted string.
        options: Decoding options.

    Returns:
        The decoded Python value. Empty input decodes to an empty dict.

    Raises:
        DecodeError: For malformed input. Subclasses distinguish indentation
            (ScanError), syntax (ParseError), strict-mode violations
            (StructuralError) and path expansion conflicts
            (PathExpansionError).
    """
    return decode_lines(text.split("\n"), options)


def decode_lines(lines: Iterable[str], options: DecodeOptions | None = None) -> JsonValue:
    """
    Decode TOON from pre-split lines.

    Args:
        lines: Iterable of line strings.
        options: Decoding options.

    Returns:
        The decoded Python value.
    """
    opts = options or DecodeOptions()
    scan = scan_lines(lines, opts.indent, opts.strict)
    logger.debug(
        "Decoding %d content lines (%d blank), strict=%s",
        len(scan.lines),
        len(scan.blank_lines),
        opts.strict,
    )

    if not scan.lines:
        return {}

    cursor = _Cursor(scan, opts)
    result = _decode_root(cursor)

    leftover = cursor.peek()
    if leftover is not None:
        raise ParseError("Unexpected indentation or content", leftover.line_number)

    if opts.expand_paths == "safe":
        result = expand_paths(result, strict=opts.strict)

    return result


class _Cursor(LineCursor):
    """Line cursor carrying the active decode options."""

    def __init__(self, scan: ScanResult, options: DecodeOptions):
        super().__init__(scan)
        self.options = options

    @property
    def strict(self) -> bool:
        return self.options.strict

    @property
    def track_keys(self) -> bool:
        """Whether keys keep their source info (needed for path expansion)."""
        return self.options.expand_paths == "safe"


@contextmanager
def _at_line(line: ParsedLine) -> Iterator[None]:
    """Attach the line number to errors raised without one."""
    try:
        yield
    except DecodeError as exc:
        if exc.line_number is None:
            exc.line_number = line.line_number
        raise


def _parse_value(token: str, line: ParsedLine) -> JsonValue:
    with _at_line(line):
        return parse_primitive(token)


def _parse_header(content: str, line: ParsedLine) -> ArrayHeaderInfo | None:
    with _at_line(line):
        return parse_array_header(content, line.line_number)


def _make_key(cursor: _Cursor, key: str, quoted: bool, line: ParsedLine) -> str:
    if cursor.track_keys:
        return SourceKey(key, quoted=quoted, line_number=line.line_number)
    return key


def _put(cursor: _Cursor, obj: JsonObject, key: str, value: JsonValue, line: ParsedLine) -> None:
    check_duplicate_key(obj, key, cursor.strict, line.line_number)
    obj[key] = value


def _is_list_item(content: str) -> bool:
    return content.startswith(LIST_ITEM_PREFIX) or content == LIST_ITEM_MARKER


def _decode_root(cursor: _Cursor) -> JsonValue:
    """Decode the root value."""
    line = cursor.peek()

    header = _parse_header(line.content, line)
    if header is not None and header.key is None:
        cursor.advance()
        return _decode_array_body(cursor, header, line, line.depth + 1)

    if header is None and find_unquoted_colon(line.content) == -1:
        if cursor.count_at_depth(line.depth) == 1:
            cursor.advance()
            return _parse_value(line.content, line)
        raise StructuralError(
            "Ambiguous document: expected 'key: value' or an array header",
            line.line_number,
        )

    return _decode_object(cursor, line.depth)


def _decode_object(cursor: _Cursor, depth: int) -> JsonObject:
    """Decode an object at the given depth."""
    result: JsonObject = {}

    while True:
        line = cursor.peek_at_depth(depth)
        if not line:
            break

        check_depth(depth, cursor.options.max_depth, line.line_number)
        cursor.advance()
        key, value = _decode_key_value(line, cursor, depth)
        _put(cursor, result, key, value, line)

    return result


def _decode_fields_into(cursor: _Cursor, obj: JsonObject, depth: int) -> JsonObject:
    """Read the remaining fields of a list item object."""
    while True:
        line = cursor.peek_at_depth(depth)
        if not line:
            break
        cursor.advance()
        key, value = _decode_key_value(line, cursor, depth)
        _put(cursor, obj, key, value, line)
    return obj


def _decode_key_value(
    line: ParsedLine, cursor: _Cursor, depth: int, content: str | None = None
) -> tuple[str, JsonValue]:
    """
    Decode a ``key: value`` pair or a keyed array header.

    ``content`` overrides the line content for fields that follow a list
    item marker; ``depth`` is the depth the field belongs to.
    """
    if content is None:
        content = line.content

    if _is_list_item(content):
        raise ParseError("Unexpected list item", line.line_number)

    header = _parse_header(content, line)
    if header is not None:
        if header.key is None:
            raise ParseError("Array header without a key inside an object", line.line_number)
        value = _decode_array_body(cursor, header, line, depth + 1)
        return _make_key(cursor, header.key, header.quoted_key, line), value

    colon_pos = find_unquoted_colon(content)
    if colon_pos == -1:
        raise ParseError("Missing colon after key", line.line_number)

    key_part = content[:colon_pos].strip(" ")
    value_part = content[colon_pos + 1 :].strip(" ")
    if not key_part:
        raise ParseError("Missing key before colon", line.line_number)

    with _at_line(line):
        key, quoted = parse_key(key_part)

    if value_part:
        value = _parse_value(value_part, line)
    else:
        next_line = cursor.peek()
        if next_line and next_line.depth > depth:
            value = _decode_object(cursor, depth + 1)
        else:
            value = {}

    return _make_key(cursor, key, quoted, line), value


def _decode_array_body(
    cursor: _Cursor, header: ArrayHeaderInfo, line: ParsedLine, depth: int
) -> list:
    """Decode the values of an array whose header was already consumed."""
    check_depth(depth, cursor.options.max_depth, line.line_number)

    if header.inline is not None:
        if header.fields:
            raise ParseError("Unexpected values after tabular array header", line.line_number)
        return _decode_inline_values(header, line, cursor)

    if header.fields:
        return _decode_tabular_rows(cursor, header, line, depth)

    return _decode_list_items(cursor, header, line, depth)


def _decode_inline_values(header: ArrayHeaderInfo, line: ParsedLine, cursor: _Cursor) -> list:
    """Decode inline primitive array values."""
    delimiter = infer_row_delimiter(header, header.inline, header.length)
    values = split_by_delimiter(header.inline, delimiter)
    result = [_parse_value(v, line) for v in values]

    assert_expected_count(
        len(result), header.length, "Inline array", cursor.strict, line.line_number
    )
    return result


def _decode_tabular_rows(
    cursor: _Cursor, header: ArrayHeaderInfo, line: ParsedLine, depth: int
) -> list[JsonObject]:
    """Decode tabular array rows."""
    result: list[JsonObject] = []
    fields = header.fields
    delimiter = None
    first_line = last_line = None

    while True:
        row_line = cursor.peek_at_depth(depth)
        if not row_line:
            break

        cursor.advance()
        if first_line is None:
            first_line = row_line.line_number
            delimiter = infer_row_delimiter(header, row_line.content, len(fields))
        last_line = row_line.line_number

        values: list[JsonValue] = [
            _parse_value(v, row_line) for v in split_by_delimiter(row_line.content, delimiter)
        ]
        validate_row_width(len(values), len(fields), cursor.strict, row_line.line_number)
        # Lenient mode: pad short rows with nulls, drop extra values
        values = (values + [None] * len(fields))[: len(fields)]

        row: JsonObject = {}
        for field, value in zip(fields, values):
            key = _make_key(cursor, field, field in header.quoted_fields, row_line)
            _put(cursor, row, key, value, row_line)
        result.append(row)

    assert_expected_count(
        len(result), header.length, "Tabular array", cursor.strict, line.line_number
    )

    if cursor.strict and first_line is not None:
        validate_no_blank_lines_in_range(
            first_line, last_line, cursor.blank_lines, "tabular array"
        )

    return result


def _decode_list_items(
    cursor: _Cursor, header: ArrayHeaderInfo, line: ParsedLine, depth: int
) -> list:
    """Decode list items (lines starting with -)."""
    result = []
    first_line = None

    while True:
        item_line = cursor.peek_at_depth(depth)
        if not item_line or not _is_list_item(item_line.content):
            break

        cursor.advance()
        if first_line is None:
            first_line = item_line.line_number
        result.append(_decode_list_item(item_line, cursor, depth))

    assert_expected_count(
        len(result), header.length, "List array", cursor.strict, line.line_number
    )

    if cursor.strict and first_line is not None:
        validate_no_blank_lines_in_range(
            first_line, cursor.current().line_number, cursor.blank_lines, "list array"
        )

    return result


def _decode_list_item(line: ParsedLine, cursor: _Cursor, depth: int) -> JsonValue:
    """Decode a single list item."""
    item_content = line.content[len(LIST_ITEM_MARKER) :].strip(" ")

    if not item_content:
        # Bare hyphen - check for nested content
        next_line = cursor.peek()
        if next_line and next_line.depth > depth:
            return _decode_object(cursor, depth + 1)
        return {}

    header = _parse_header(item_content, line)
    if header is not None:
        if header.key is None:
            # Bare array as list item
            return _decode_array_body(cursor, header, line, depth + 1)

        # Object with an array as its first field; the body sits one level
        # below the object's remaining fields
        arr = _decode_array_body(cursor, header, line, depth + 2)
        result: JsonObject = {_make_key(cursor, header.key, header.quoted_key, line): arr}
        return _decode_fields_into(cursor, result, depth + 1)

    if find_unquoted_colon(item_content) != -1:
        # Object with first field on hyphen line
        key, value = _decode_key_value(line, cursor, depth + 1, content=item_content)
        return _decode_fields_into(cursor, {key: value}, depth + 1)

    return _parse_value(item_content, line)
