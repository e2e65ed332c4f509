"""Primitive tokens: encoding scalars and keys, parsing them back."""

import math
from decimal import Decimal
from typing import TYPE_CHECKING

from .errors import EncodeError, ParseError
from .string_utils import (
    RESERVED_LITERALS,
    escape_string,
    find_closing_quote,
    has_leading_zero,
    is_numeric_literal,
    is_safe_unquoted,
    is_safe_unquoted_key,
    unescape_string,
)

if TYPE_CHECKING:
    from .types import Delimiter, JsonPrimitive

_LITERAL_VALUES = {"null": None, "true": True, "false": False}


def encode_primitive(value: "JsonPrimitive", delimiter: "Delimiter" = ",") -> str:
    """
    Encode a scalar to its TOON token.

    Args:
        value: None, a bool, a number or a string.
        delimiter: The active delimiter, which strings must not contain bare.

    Raises:
        EncodeError: For any other type.
    """
    if value is None:
        return "null"
    if value is True or value is False:
        return str(value).lower()
    if isinstance(value, str):
        return encode_string_literal(value, delimiter)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    raise EncodeError(f"Cannot encode value of type {type(value).__name__}")


def _format_float(value: float) -> str:
    """Plain decimal notation; non-finite values become null."""
    if not math.isfinite(value):
        return "null"
    if value.is_integer():
        # Also turns -0.0 into "0"
        return str(int(value))
    text = repr(value)
    if "e" in text:
        text = format(Decimal(text), "f")
    return text


def encode_string_literal(value: str, delimiter: "Delimiter" = ",") -> str:
    if is_safe_unquoted(value, delimiter):
        return value
    return quote(value)


def encode_key(key: str) -> str:
    """Write a key bare when it matches ``^[A-Za-z_][A-Za-z0-9_.]*$``, quoted otherwise."""
    return key if is_safe_unquoted_key(key) else quote(key)


def quote(value: str) -> str:
    return '"' + escape_string(value) + '"'


def parse_primitive(token: str) -> "JsonPrimitive":
    """
    Turn one value token into a Python scalar.

    Quoted tokens are strings; ``null``, ``true`` and ``false`` are the
    literals; tokens matching the numeric grammar (without a leading zero)
    are numbers; anything else, including the empty token, is a string.

    Raises:
        ParseError: For a malformed quoted string.
    """
    token = token.strip(" ")

    if token.startswith('"'):
        return parse_string_literal(token)
    if token in RESERVED_LITERALS:
        return _LITERAL_VALUES[token]

    number = _parse_number(token)
    return token if number is None else number


def parse_string_literal(token: str) -> str:
    """
    Unquote and unescape a token that starts with ``"``.

    Raises:
        ParseError: If the quote is never closed or text follows it.
    """
    end = find_closing_quote(token, 0)
    if end == -1:
        raise ParseError(f"Unterminated string: {token}")
    if end != len(token) - 1:
        raise ParseError(f"Unexpected characters after closing quote: {token}")
    return unescape_string(token[1:end])


def parse_key(token: str) -> tuple[str, bool]:
    """Return the key text and whether it was written in quotes."""
    token = token.strip(" ")
    if token.startswith('"'):
        return parse_string_literal(token), True
    return token, False


def _parse_number(token: str) -> int | float | None:
    """The numeric value of a token, or None when it must stay a string."""
    if not is_numeric_literal(token) or has_leading_zero(token):
        return None

    if token.lstrip("-").isdigit():
        value: int | float = int(token)
    else:
        value = float(token)
        if math.isinf(value):
            # Overflowing exponents keep their text
            return None

    return 0 if value == 0 else value


def format_bracket(length: int, delimiter: "Delimiter" = ",") -> str:
    """``[N]``, with the delimiter marker inside for tab and pipe."""
    marker = "" if delimiter == "," else delimiter
    return f"[{length}{marker}]"


def format_array_header(
    length: int,
    key: str | None = None,
    fields: list[str] | None = None,
    delimiter: "Delimiter" = ",",
) -> str:
    """
    Build an array header such as ``users[2]{id,name}:``.

    Args:
        length: Number of items.
        key: Key the array belongs to, or None for root arrays and list items.
        fields: Column names for a tabular array.
        delimiter: Delimiter for the values, also used between field names.
    """
    header = format_bracket(length, delimiter)
    if key is not None:
        header = encode_key(key) + header
    if fields:
        header += "{" + delimiter.join(map(encode_key, fields)) + "}"
    return header + ":"
