"""Exceptions raised by the TOON encoder/decoder."""


class ToonError(ValueError):
    """Base class for all TOON errors.

    This is a subclass of ValueError, and so can be caught by code
    that catches ValueError.
    """


class DecodeError(ToonError):
    """Raised when TOON text cannot be decoded.

    Attributes:
        message: The error description without position information.
        line_number: 1-based line the error was detected on, if known.
    """

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.message = message
        self.line_number = line_number
        super().__init__(message)

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"Line {self.line_number}: {self.message}"


class ScanError(DecodeError):
    """Illegal indentation (tabs, or not a multiple of the indent size)."""


class ParseError(DecodeError):
    """Malformed syntax: missing colons, bad quoting, malformed headers."""


class StructuralError(DecodeError):
    """Strict-mode structural mismatch, duplicate key or depth overflow."""


class PathExpansionError(DecodeError):
    """Conflicting dotted keys during path expansion."""


class EncodeError(ToonError, TypeError):
    """Raised when a value cannot be represented in TOON."""
