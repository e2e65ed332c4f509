"""Array header parsing: ``key[N<delim?>]{field,...}: inline values``."""

from .errors import ParseError
from .primitives import parse_key
from .string_utils import find_closing_quote, find_unquoted, split_by_delimiter
from .types import DEFAULT_DELIMITER, ArrayHeaderInfo, Delimiter

DELIMITER_MARKERS: frozenset[str] = frozenset({",", "\t", "|"})
ALTERNATE_DELIMITERS: tuple[Delimiter, ...] = ("\t", "|")


def parse_array_header(content: str, line_number: int | None = None) -> ArrayHeaderInfo | None:
    """
    Parse an array header line.

    Args:
        content: Line content (indentation already stripped).
        line_number: Line number used in error messages.

    Returns:
        The parsed header, or None if the content is not an array header.

    Raises:
        ParseError: If the content starts a header but it is malformed.
    """
    if content.startswith('"'):
        close = find_closing_quote(content, 0)
        if close == -1:
            return None
        bracket_start = close + 1
        if not content.startswith("[", bracket_start):
            return None
    else:
        bracket_start = find_unquoted(content, "[")
        if bracket_start == -1:
            return None
        colon = find_unquoted(content, ":")
        if colon != -1 and colon < bracket_start:
            # Ordinary "key: value" line whose value happens to contain '['
            return None

    key: str | None = None
    quoted_key = False
    key_text = content[:bracket_start].strip(" ")
    if key_text:
        key, quoted_key = parse_key(key_text)

    bracket_end = content.find("]", bracket_start)
    if bracket_end == -1:
        raise ParseError("Missing closing ']' in array header", line_number)

    length, delimiter, explicit = _parse_bracket(
        content[bracket_start + 1 : bracket_end], line_number
    )

    pos = bracket_end + 1
    fields: list[str] = []
    quoted_fields: set[str] = set()
    if content.startswith("{", pos):
        brace_end = find_unquoted(content, "}", pos + 1)
        if brace_end == -1:
            raise ParseError("Unterminated field list in array header", line_number)
        fields_text = content[pos + 1 : brace_end]
        if not explicit:
            delimiter = _infer_field_delimiter(fields_text)
        fields, quoted_fields = _parse_fields(fields_text, delimiter, line_number)
        pos = brace_end + 1

    if not content.startswith(":", pos):
        raise ParseError("Expected ':' after array header", line_number)

    inline = content[pos + 1 :].strip(" ")

    return ArrayHeaderInfo(
        length=length,
        key=key,
        delimiter=delimiter,
        fields=fields,
        quoted_fields=quoted_fields,
        inline=inline or None,
        quoted_key=quoted_key,
        explicit_delimiter=explicit,
    )


def _parse_bracket(segment: str, line_number: int | None) -> tuple[int, Delimiter, bool]:
    """Parse the bracket segment, e.g. "5", "10|" or "3\\t"."""
    delimiter: Delimiter = DEFAULT_DELIMITER
    explicit = False
    if segment and segment[-1] in DELIMITER_MARKERS:
        delimiter = segment[-1]  # type: ignore[assignment]
        explicit = True
        segment = segment[:-1]

    if not segment.isascii() or not segment.isdigit():
        raise ParseError(f"Invalid array length: {segment!r}", line_number)

    return int(segment), delimiter, explicit


def _infer_field_delimiter(fields_text: str) -> Delimiter:
    """Pick the field list delimiter when the header did not declare one."""
    if find_unquoted(fields_text, ",") != -1:
        return DEFAULT_DELIMITER
    for candidate in ALTERNATE_DELIMITERS:
        if find_unquoted(fields_text, candidate) != -1:
            return candidate
    return DEFAULT_DELIMITER


def _parse_fields(
    fields_text: str, delimiter: Delimiter, line_number: int | None
) -> tuple[list[str], set[str]]:
    if not fields_text.strip():
        raise ParseError("Empty field list in array header", line_number)
    fields = []
    quoted = set()
    for token in split_by_delimiter(fields_text, delimiter):
        name, was_quoted = parse_key(token)
        fields.append(name)
        if was_quoted:
            quoted.add(name)
    return fields, quoted


def infer_row_delimiter(header: ArrayHeaderInfo, sample: str, expected: int) -> Delimiter:
    """
    Infer the delimiter for inline values or tabular rows.

    Only applies when the header did not declare a delimiter: if splitting
    on the default gives the wrong count but exactly one alternate delimiter
    gives the expected count, that alternate is used.
    """
    if header.explicit_delimiter or header.delimiter != DEFAULT_DELIMITER:
        return header.delimiter
    if len(split_by_delimiter(sample, DEFAULT_DELIMITER)) == expected:
        return DEFAULT_DELIMITER
    matches = [
        candidate
        for candidate in ALTERNATE_DELIMITERS
        if len(split_by_delimiter(sample, candidate)) == expected
    ]
    if len(matches) == 1:
        return matches[0]
    return DEFAULT_DELIMITER
