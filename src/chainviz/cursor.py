"""Byte cursor and scalar field decoding for the chaining trace.

The trace has no grammar beyond its fixed phrasing, so decoding is a matter of
matching literal labels and scanning to the next delimiter byte. A
:class:`Field` row names one ``label value delimiter`` triple and
:meth:`Cursor.read_fields` walks a tuple of them, which keeps every literal of
the format in the schema tables of :mod:`chainviz.trace`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Sequence

from .errors import TraceFormatError

_UINT_RE = re.compile(rb"[0-9]+")
_FLOAT_RE = re.compile(
    rb"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE,
)
_TRUE = (b"true", b"1")
_FALSE = (b"false", b"0")


@dataclass(frozen=True)
class Field:
    """One scalar in the trace: ``label`` then the value up to ``delimiter``."""

    name: str
    label: bytes
    delimiter: bytes
    kind: str  # 'uint', 'float', 'bool', 'flag' or 'str'


def _preview(span: bytes, limit: int = 40) -> str:
    text = span[:limit].decode("utf-8", errors="replace")
    return repr(text + ("..." if len(span) > limit else ""))


class Cursor:
    """Single-owner position over an immutable trace buffer."""

    def __init__(self, buf: bytes, pos: int = 0) -> None:
        self.buf = buf
        self.pos = pos

    def __repr__(self) -> str:
        return f"Cursor(pos={self.pos}, size={len(self.buf)})"

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.buf)

    def peek(self) -> bytes:
        """The byte under the cursor; fails at end of buffer."""
        if self.at_end:
            raise TraceFormatError("Unexpected end of trace", offset=self.pos)
        return self.buf[self.pos : self.pos + 1]

    def startswith(self, literal: bytes) -> bool:
        return self.buf.startswith(literal, self.pos)

    def skip(self, n: int) -> None:
        if n < 0 or self.pos + n > len(self.buf):
            raise TraceFormatError(f"Cannot skip {n} bytes past end of trace", offset=self.pos)
        self.pos += n

    def expect(self, literal: bytes) -> None:
        """Consume ``literal`` or fail at the first mismatching byte."""
        if self.startswith(literal):
            self.pos += len(literal)
            return
        got = self.buf[self.pos : self.pos + len(literal)]
        mismatch = self.pos
        for want_b, got_b in zip(literal, got):
            if want_b != got_b:
                break
            mismatch += 1
        raise TraceFormatError(
            f"Expected {_preview(literal)} but found {_preview(got)}",
            offset=mismatch,
        )

    def scan_until(self, delimiter: bytes) -> bytes:
        """Return the bytes before the next ``delimiter`` and move past it."""
        end = self.buf.find(delimiter, self.pos)
        if end < 0:
            raise TraceFormatError(
                f"Delimiter {_preview(delimiter)} not found before end of trace",
                offset=self.pos,
            )
        span = self.buf[self.pos : end]
        self.pos = end + len(delimiter)
        return span

    def read_fields(self, schema: Sequence[Field]) -> Dict[str, Any]:
        """Decode every field of ``schema`` in order."""
        values: Dict[str, Any] = {}
        for field in schema:
            self.expect(field.label)
            start = self.pos
            span = self.scan_until(field.delimiter)
            values[field.name] = decode_scalar(field.kind, span, offset=start)
        return values


def decode_uint(span: bytes, *, offset: int) -> int:
    if _UINT_RE.fullmatch(span) is None:
        raise TraceFormatError(f"Malformed unsigned integer {_preview(span)}", offset=offset)
    return int(span)


def decode_float(span: bytes, *, offset: int) -> float:
    if _FLOAT_RE.fullmatch(span) is None:
        raise TraceFormatError(f"Malformed float {_preview(span)}", offset=offset)
    return float(span)


def decode_bool(span: bytes, *, offset: int) -> bool:
    if span in _TRUE:
        return True
    if span in _FALSE:
        return False
    raise TraceFormatError(f"Malformed boolean {_preview(span)}", offset=offset)


def decode_flag(span: bytes, *, offset: int) -> bool:
    # The emitter writes '1' for set; anything else reads as unset.
    return span == b"1"


def decode_str(span: bytes, *, offset: int) -> str:
    try:
        return span.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TraceFormatError(f"Invalid UTF-8 in text field: {e.reason}", offset=offset + e.start) from e


_DECODERS: Dict[str, Callable[..., Any]] = {
    "uint": decode_uint,
    "float": decode_float,
    "bool": decode_bool,
    "flag": decode_flag,
    "str": decode_str,
}


def decode_scalar(kind: str, span: bytes, *, offset: int) -> Any:
    try:
        decoder = _DECODERS[kind]
    except KeyError:
        raise ValueError(f"Unknown field kind: {kind}") from None
    return decoder(span, offset=offset)
