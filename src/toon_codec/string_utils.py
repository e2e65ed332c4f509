"""Quoting, escaping and quote-aware scanning for TOON text."""

import re
from collections.abc import Iterator
from typing import TYPE_CHECKING

from .errors import ParseError

if TYPE_CHECKING:
    from .types import Delimiter

# The only escapes TOON knows, in both directions
ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}
UNESCAPE_MAP = {escaped[1]: char for char, escaped in ESCAPE_MAP.items()}

RESERVED_LITERALS = frozenset({"true", "false", "null"})

# Characters that make a string value need quotes
STRUCTURAL_CHARS = frozenset(':[]{}"\\')

# Leading characters with a meaning at the start of a line: list marker, comment
RESERVED_PREFIXES = ("-", "#")

NUMERIC_PATTERN = re.compile(r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")

# Integer part with a forbidden leading zero, e.g. "007" or "-01.5"
LEADING_ZERO_PATTERN = re.compile(r"^-?0\d")

IDENTIFIER_SEGMENT_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

UNQUOTED_KEY_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")

_ESCAPE_PATTERN = re.compile(r'[\\"\n\r\t]')
_ESCAPE_SEQUENCE_PATTERN = re.compile(r"\\(.?)", re.DOTALL)
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x1f\x7f]")


def escape_string(value: str) -> str:
    """
    Escape a string for the inside of a quoted literal.

    Backslash, double quote, newline, carriage return and tab are escaped.
    Other control characters are kept as-is.
    """
    return _ESCAPE_PATTERN.sub(lambda m: ESCAPE_MAP[m.group()], value)


def unescape_string(value: str) -> str:
    """
    Resolve the escapes in the body of a quoted literal.

    Raises:
        ParseError: On an unknown escape or a trailing lone backslash.
    """
    return _ESCAPE_SEQUENCE_PATTERN.sub(_unescape_match, value)


def _unescape_match(match: "re.Match[str]") -> str:
    char = match.group(1)
    if not char:
        raise ParseError("Backslash at end of string")
    if char not in UNESCAPE_MAP:
        raise ParseError(f"Invalid escape sequence: \\{char}")
    return UNESCAPE_MAP[char]


def is_numeric_literal(value: str) -> bool:
    """Check if a token matches the TOON numeric literal grammar."""
    return bool(NUMERIC_PATTERN.fullmatch(value))


def has_leading_zero(value: str) -> bool:
    return bool(LEADING_ZERO_PATTERN.match(value))


def is_safe_unquoted(value: str, delimiter: "Delimiter" = ",") -> bool:
    """
    Whether a string value can be written without quotes.

    Quotes are needed for the empty string, surrounding whitespace, the
    literals ``true``/``false``/``null``, anything shaped like a number,
    a leading ``-`` or ``#``, structural characters, control characters and
    the active delimiter.
    """
    if not value or value != value.strip():
        return False
    if value in RESERVED_LITERALS or is_numeric_literal(value):
        return False
    if value.startswith(RESERVED_PREFIXES):
        return False
    if delimiter in value or not STRUCTURAL_CHARS.isdisjoint(value):
        return False
    return not _CONTROL_CHAR_PATTERN.search(value)


def is_safe_unquoted_key(key: str) -> bool:
    """Check if an object key can be written without quotes."""
    return bool(UNQUOTED_KEY_PATTERN.fullmatch(key))


def is_valid_identifier_segment(segment: str) -> bool:
    """
    Check if a string can be one segment of a folded or expanded key.

    Segments start with a letter or underscore, followed by letters, digits
    or underscores.
    """
    return bool(IDENTIFIER_SEGMENT_PATTERN.fullmatch(segment))


def is_valid_dotted_path(key: str) -> bool:
    """True if the key has at least one dot and every segment is an identifier."""
    return "." in key and all(map(is_valid_identifier_segment, key.split(".")))


def find_closing_quote(s: str, start: int) -> int:
    """
    Find the quote that closes the literal opened at ``start``.

    Args:
        s: The text to search.
        start: Index of the opening quote.

    Returns:
        Index of the closing quote, or -1 if the literal is unterminated.
    """
    escaped = False
    for i in range(start + 1, len(s)):
        if escaped:
            escaped = False
        elif s[i] == "\\":
            escaped = True
        elif s[i] == '"':
            return i
    return -1


def iter_unquoted(text: str, start: int = 0) -> Iterator[tuple[int, str]]:
    """
    Yield ``(index, char)`` for every character outside quoted literals.

    Quote characters themselves are not yielded. Backslash escapes are only
    recognised inside quotes.
    """
    in_quotes = False
    i = start
    while i < len(text):
        char = text[i]
        if char == '"':
            in_quotes = not in_quotes
        elif in_quotes:
            if char == "\\":
                i += 1
        else:
            yield i, char
        i += 1


def find_unquoted(line: str, target: str, start: int = 0) -> int:
    """Index of the first ``target`` outside quotes at or after ``start``, or -1."""
    return next((i for i, char in iter_unquoted(line, start) if char == target), -1)


def find_unquoted_colon(line: str) -> int:
    return find_unquoted(line, ":")


def split_by_delimiter(value: str, delimiter: "Delimiter") -> list[str]:
    """
    Split on a delimiter, ignoring delimiters inside quoted literals.

    Segments are stripped of surrounding spaces but keep their quotes, so
    each one can go straight to the primitive parser.
    """
    cuts = [i for i, char in iter_unquoted(value) if char == delimiter]
    bounds = zip([-1] + cuts, cuts + [len(value)])
    return [value[lo + 1 : hi].strip(" ") for lo, hi in bounds]
