"""Exception types raised while decoding traces and writing plots."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ChainVizError(Exception):
    """Base class for all chainviz errors."""


class TraceDecodeError(ChainVizError, ValueError):
    """Raised when the trace bytes do not match the expected layout.

    Decoding is all-or-nothing: later fields are located relative to earlier
    ones, so no partial result is returned once this is raised.
    """

    def __init__(self, message: str, *, offset: int) -> None:
        super().__init__(f"{message} (at byte offset {offset})")
        self.offset = int(offset)


class TraceFormatError(TraceDecodeError):
    """A literal label, delimiter or numeral did not match byte-for-byte."""


class ChainDetailMismatchError(TraceDecodeError):
    """The chain-detail list does not have one entry per chain."""

    def __init__(self, *, n_chains: int, n_details: int, offset: int) -> None:
        super().__init__(
            f"Chain-detail list has {n_details} entries but the chain list has {n_chains}",
            offset=offset,
        )
        self.n_chains = int(n_chains)
        self.n_details = int(n_details)


class TraceIOError(ChainVizError):
    """Reading the trace or creating an output directory failed."""

    def __init__(self, message: str, *, path: Optional[str | Path] = None) -> None:
        super().__init__(message)
        self.path = None if path is None else Path(path)
