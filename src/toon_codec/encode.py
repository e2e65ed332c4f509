"""TOON encoder implementation."""

import logging
import math
from collections.abc import Generator, Iterable, Mapping
from decimal import Decimal
from typing import Any

from .errors import EncodeError
from .folding import fold_keys
from .primitives import encode_key, encode_primitive, format_array_header
from .types import EncodeOptions, JsonObject, JsonValue

logger = logging.getLogger(__name__)

LIST_ITEM_PREFIX = "- "


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """
    Encode a Python value to TOON format.

    Args:
        value: The value to encode (dict, list, or primitive).
        options: Encoding options.

    Returns:
        The TOON-formatted string, without a trailing newline.

    Raises:
        EncodeError: If an object has a non-string key.
    """
    opts = options or EncodeOptions()
    lines = list(encode_lines(value, opts))
    logger.debug("Encoded %d lines (delimiter=%r)", len(lines), opts.delimiter)
    return "\n".join(lines)


def encode_lines(
    value: Any, options: EncodeOptions | None = None
) -> Generator[str, None, None]:
    """
    Encode a Python value to TOON format, yielding lines.

    Args:
        value: The value to encode.
        options: Encoding options.

    Yields:
        Lines of TOON output, without newlines.
    """
    opts = options or EncodeOptions()
    normalized = _normalize_value(value)

    if opts.key_folding == "safe":
        normalized = fold_keys(normalized, opts.flatten_depth)

    if isinstance(normalized, dict):
        yield from _encode_object_lines(normalized, opts, 0)
    elif isinstance(normalized, list):
        yield from _encode_array(None, normalized, opts, 0)
    else:
        yield encode_primitive(normalized, opts.delimiter)


def _indent(opts: EncodeOptions, depth: int) -> str:
    return " " * (opts.indent * depth)


def _encode_object_lines(
    obj: JsonObject, opts: EncodeOptions, depth: int
) -> Generator[str, None, None]:
    """Encode an object's key-value pairs."""
    for key, value in obj.items():
        yield from _encode_field(key, value, opts, depth)


def _encode_field(
    key: str, value: JsonValue, opts: EncodeOptions, depth: int
) -> Generator[str, None, None]:
    """Encode one ``key: value`` entry, nesting objects and arrays below it."""
    indent = _indent(opts, depth)

    if isinstance(value, dict):
        yield f"{indent}{encode_key(key)}:"
        yield from _encode_object_lines(value, opts, depth + 1)
    elif isinstance(value, list):
        yield from _encode_array(key, value, opts, depth)
    else:
        yield f"{indent}{encode_key(key)}: {encode_primitive(value, opts.delimiter)}"


def _encode_array(
    key: str | None, arr: list, opts: EncodeOptions, depth: int
) -> Generator[str, None, None]:
    """
    Encode an array with the most compact form that fits it.

    Primitive arrays go inline, uniform arrays of flat objects become a
    table, and everything else is written as ``-`` list items one level
    below the header.
    """
    indent = _indent(opts, depth)
    delimiter = opts.delimiter
    fields = _tabular_fields(arr)

    if arr and all(map(_is_primitive, arr)):
        header = format_array_header(len(arr), key=key, delimiter=delimiter)
        values = delimiter.join(encode_primitive(v, delimiter) for v in arr)
        yield f"{indent}{header} {values}"
    elif fields:
        yield indent + format_array_header(len(arr), key=key, fields=fields, delimiter=delimiter)
        for row in arr:
            yield _encode_tabular_row(row, fields, opts, depth + 1)
    else:
        # Empty arrays end here too, as a bare "key[0]:"
        yield indent + format_array_header(len(arr), key=key, delimiter=delimiter)
        for item in arr:
            yield from _encode_list_item(item, opts, depth + 1)


def _encode_list_item(
    item: JsonValue, opts: EncodeOptions, depth: int
) -> Generator[str, None, None]:
    """Encode a list item (after the - marker)."""
    indent = _indent(opts, depth)

    if isinstance(item, dict):
        if not item:
            yield f"{indent}-"
            return

        # First field goes on the hyphen line, the rest one level deeper
        fields = iter(item.items())
        first_key, first_value = next(fields)
        first_lines = _encode_field(first_key, first_value, opts, depth + 1)
        yield from _with_marker(first_lines, indent, len(_indent(opts, depth + 1)))
        for key, value in fields:
            yield from _encode_field(key, value, opts, depth + 1)
    elif isinstance(item, list):
        # Bare array header on the hyphen line, body one level deeper
        yield from _with_marker(_encode_array(None, item, opts, depth), indent, len(indent))
    else:
        yield f"{indent}- {encode_primitive(item, opts.delimiter)}"


def _with_marker(
    lines: Generator[str, None, None], indent: str, strip: int
) -> Generator[str, None, None]:
    """Replace the indentation of the first line with a list item marker."""
    first = next(lines)
    yield indent + LIST_ITEM_PREFIX + first[strip:]
    yield from lines


def _encode_tabular_row(
    row: JsonObject, fields: list[str], opts: EncodeOptions, depth: int
) -> str:
    """Encode a single tabular row."""
    values = [encode_primitive(row[f], opts.delimiter) for f in fields]
    return _indent(opts, depth) + opts.delimiter.join(values)


def _tabular_fields(arr: list) -> list[str] | None:
    """Column names when every item is a flat object with the same keys."""
    if not arr or not isinstance(arr[0], dict) or not arr[0]:
        return None

    columns = arr[0].keys()
    for row in arr:
        if not isinstance(row, dict) or row.keys() != columns:
            return None
        if not all(map(_is_primitive, row.values())):
            return None
    return list(columns)


def _is_primitive(value: JsonValue) -> bool:
    return not isinstance(value, (dict, list))


def _normalize_value(value: Any) -> JsonValue:
    """
    Convert a Python value into the JSON data model.

    Tuples, sets and other iterables become lists (sets sorted by their
    string form), dates and times become ISO strings, Decimals become ints
    or floats, and non-finite floats become None. Anything else falls back
    to ``str()``.

    Raises:
        EncodeError: If a mapping has a non-string key.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, float):
        return _normalize_number(value)
    if isinstance(value, int):
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        integral = value == value.to_integral_value()
        return _normalize_number(int(value) if integral else float(value))
    if isinstance(value, Mapping):
        return _normalize_mapping(value)
    if isinstance(value, (set, frozenset)):
        return [_normalize_value(v) for v in sorted(value, key=str)]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if isinstance(value, Iterable):
        return [_normalize_value(v) for v in value]
    return str(value)


def _normalize_number(value: int | float) -> int | float | None:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    # -0.0 and 0.0 both become 0
    return 0 if value == 0 else value


def _normalize_mapping(mapping: Mapping) -> JsonObject:
    result: JsonObject = {}
    for key, value in mapping.items():
        if not isinstance(key, str):
            raise EncodeError(f"Object keys must be strings, got {type(key).__name__}: {key!r}")
        result[key] = _normalize_value(value)
    return result
