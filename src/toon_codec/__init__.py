"""
TOON (Token-Oriented Object Notation) codec for Python.

A compact, indentation-based text format for the JSON data model. Uniform
arrays of objects are written as tables with a single header, primitive
arrays inline, and everything else as nested ``key: value`` lines.

Usage:
    import toon_codec

    # Encode Python data to TOON
    data = {"name": "Alice", "age": 30}
    encoded = toon_codec.encode(data)

    # Decode TOON to Python data
    decoded = toon_codec.decode(encoded)

    # With options
    from toon_codec import DecodeOptions, EncodeOptions

    encoded = toon_codec.encode(data, EncodeOptions(indent=4, key_folding="safe"))
    decoded = toon_codec.decode(encoded, DecodeOptions(indent=4, expand_paths="safe"))
"""

import logging

__version__ = "1.0.0"

from .decode import decode, decode_lines
from .encode import encode, encode_lines
from .errors import (
    DecodeError,
    EncodeError,
    ParseError,
    PathExpansionError,
    ScanError,
    StructuralError,
    ToonError,
)
from .expansion import expand_paths
from .folding import fold_keys
from .types import Delimiter, DecodeOptions, EncodeOptions, JsonValue

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "encode_lines",
    "decode",
    "decode_lines",
    # Transforms
    "fold_keys",
    "expand_paths",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    # Types
    "JsonValue",
    "Delimiter",
    # Errors
    "ToonError",
    "DecodeError",
    "ScanError",
    "ParseError",
    "StructuralError",
    "PathExpansionError",
    "EncodeError",
]
