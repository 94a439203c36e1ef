"""
Exception types raised while decoding RSZ blocks and their containers.

TruncatedInput and SchemaLookupFailure abort a decode. UnrecognizedTypeTag
and MalformedString are recoverable: callers catch them, log a warning and
continue with raw bytes or a lossy decode.
"""


class RszError(ValueError):
    pass


class TruncatedInput(RszError):
    """A read needed more bytes than the buffer holds."""

    def __init__(self, requested: int, available: int, position: int):
        self.requested = requested
        self.available = available
        self.position = position
        super().__init__(
            f"Attempted to read {requested} bytes but only {available} bytes available at position {position}"
        )


class SchemaLookupFailure(RszError, KeyError):
    """No class for a hash, or no field at an index."""

    def __str__(self):
        return self.args[0] if self.args else ""


class UnrecognizedTypeTag(RszError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unrecognized type tag: {name}")


class MalformedString(RszError):
    def __init__(self, raw: bytes, encoding: str, position: int = -1):
        self.raw = raw
        self.encoding = encoding
        self.position = position
        super().__init__(f"Invalid {encoding} string of {len(raw)} bytes at position {position}")
