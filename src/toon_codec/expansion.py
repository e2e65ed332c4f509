"""Path expansion: rebuilds nested objects from dotted keys after decoding."""

import logging

from .errors import PathExpansionError
from .string_utils import is_valid_dotted_path
from .types import JsonValue

logger = logging.getLogger(__name__)


class SourceKey(str):
    """
    An object key as it appeared in the TOON source.

    The decoder produces these when path expansion is enabled so that quoted
    keys stay literal and conflicts can be reported with a line number.
    Expansion turns them back into plain strings.
    """

    quoted: bool
    line_number: int | None

    def __new__(cls, value: str, quoted: bool = False, line_number: int | None = None):
        key = super().__new__(cls, value)
        key.quoted = quoted
        key.line_number = line_number
        return key


def expand_paths(value: JsonValue, strict: bool = True) -> JsonValue:
    """
    Expand dotted keys into nested objects.

    A key is expanded only when it was not quoted in the source and every
    dot-separated segment is an identifier (``[A-Za-z_][A-Za-z0-9_]*``).
    Objects that land on the same path are deep-merged.

    Args:
        value: The decoded value.
        strict: Raise on conflicts instead of letting the later value win.

    Returns:
        The expanded value. The input is not modified.

    Raises:
        PathExpansionError: For conflicting paths in strict mode.
    """
    if isinstance(value, dict):
        result: dict = {}
        for key, val in value.items():
            expanded = expand_paths(val, strict)
            line_number = getattr(key, "line_number", None)
            if not getattr(key, "quoted", False) and is_valid_dotted_path(key):
                _insert_path(result, str(key).split("."), expanded, strict, line_number)
            else:
                _insert(result, str(key), expanded, strict, str(key), line_number)
        return result
    if isinstance(value, list):
        return [expand_paths(v, strict) for v in value]
    return value


def _insert_path(
    target: dict,
    segments: list[str],
    value: JsonValue,
    strict: bool,
    line_number: int | None,
) -> None:
    """Set a value at a nested path, creating intermediate objects."""
    node = target
    for i, segment in enumerate(segments[:-1]):
        if segment not in node:
            node[segment] = {}
        elif not isinstance(node[segment], dict):
            _conflict(".".join(segments[: i + 1]), strict, line_number)
            node[segment] = {}
        node = node[segment]

    _insert(node, segments[-1], value, strict, ".".join(segments), line_number)


def _insert(
    node: dict,
    key: str,
    value: JsonValue,
    strict: bool,
    path: str,
    line_number: int | None,
) -> None:
    if key not in node:
        node[key] = value
        return

    existing = node[key]
    if isinstance(existing, dict) and isinstance(value, dict):
        for child_key, child_value in value.items():
            _insert(existing, child_key, child_value, strict, f"{path}.{child_key}", line_number)
        return

    _conflict(path, strict, line_number)
    node[key] = value


def _conflict(path: str, strict: bool, line_number: int | None) -> None:
    if strict:
        raise PathExpansionError(f"Path expansion conflict at {path!r}", line_number)
    logger.warning("Line %s: path expansion conflict at %r, later value wins", line_number, path)
