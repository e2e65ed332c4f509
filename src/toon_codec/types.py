"""Type definitions for the TOON encoder/decoder."""

from dataclasses import dataclass, field
from typing import Literal

# JSON type aliases
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

# Delimiter options
Delimiter = Literal[",", "\t", "|"]

DELIMITERS: dict[str, Delimiter] = {
    "comma": ",",
    "tab": "\t",
    "pipe": "|",
}

DEFAULT_DELIMITER: Delimiter = ","

FoldingMode = Literal["off", "safe"]


def resolve_delimiter(value: str) -> Delimiter:
    """
    Resolve a delimiter character or name to the delimiter character.

    Raises:
        ValueError: If the value is not one of the three supported delimiters.
    """
    if value in DELIMITERS.values():
        return value  # type: ignore[return-value]
    if value in DELIMITERS:
        return DELIMITERS[value]
    raise ValueError(f"Unsupported delimiter: {value!r}")


def _check_mode(name: str, value: str) -> None:
    if value not in ("off", "safe"):
        raise ValueError(f"{name} must be 'off' or 'safe', got {value!r}")


@dataclass(frozen=True)
class EncodeOptions:
    """Options for TOON encoding."""

    indent: int = 2
    """Number of spaces per indentation level."""

    delimiter: Delimiter = ","
    """Delimiter for inline arrays and tabular rows (character or name)."""

    key_folding: FoldingMode = "off"
    """Whether to fold single-key object chains into dotted paths."""

    flatten_depth: int | None = None
    """Maximum number of segments in a folded key. None means unlimited."""

    def __post_init__(self) -> None:
        if self.indent < 1:
            raise ValueError(f"indent must be positive, got {self.indent}")
        object.__setattr__(self, "delimiter", resolve_delimiter(self.delimiter))
        _check_mode("key_folding", self.key_folding)
        if self.flatten_depth is not None and self.flatten_depth < 0:
            raise ValueError(f"flatten_depth must be non-negative, got {self.flatten_depth}")


@dataclass(frozen=True)
class DecodeOptions:
    """Options for TOON decoding."""

    indent: int = 2
    """Expected indentation size."""

    strict: bool = True
    """Enable strict validation (count mismatches, blank lines, indentation)."""

    expand_paths: FoldingMode = "off"
    """Expand dotted keys into nested objects."""

    max_depth: int = 256
    """Maximum nesting depth accepted before decoding is aborted."""

    def __post_init__(self) -> None:
        if self.indent < 1:
            raise ValueError(f"indent must be positive, got {self.indent}")
        _check_mode("expand_paths", self.expand_paths)
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {self.max_depth}")


@dataclass
class ParsedLine:
    """A parsed line with indentation info."""

    raw: str
    """Original line content."""

    content: str
    """Content after stripping indentation and trailing whitespace."""

    indent: int
    """Number of leading spaces."""

    depth: int
    """Indentation level (indent // indent_size)."""

    line_number: int
    """1-based line number."""


@dataclass
class BlankLine:
    """Position of a blank line skipped by the scanner."""

    line_number: int
    indent: int
    depth: int


@dataclass
class ArrayHeaderInfo:
    """Parsed array header information."""

    length: int
    """Declared array length."""

    key: str | None = None
    """Key the array belongs to (None for root arrays and bare list items)."""

    delimiter: Delimiter = ","
    """Delimiter for this array's values."""

    fields: list[str] = field(default_factory=list)
    """Field names for tabular format (empty for non-tabular)."""

    quoted_fields: set[str] = field(default_factory=set)
    """Field names that were written in quotes."""

    inline: str | None = None
    """Text after the header colon, present only for inline primitive arrays."""

    quoted_key: bool = False
    """Whether the key was written in quotes."""

    explicit_delimiter: bool = False
    """Whether the delimiter came from the header rather than the default."""
