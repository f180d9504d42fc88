from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class DecodeMode(Enum):
    """Which trace variant is being decoded.

    ``MAPPING_ONLY`` traces stop after the chain list; ``FULL`` traces carry a
    second list with the CIGAR strings and the aligner's final choice.
    """

    MAPPING_ONLY = "mapping-only"
    FULL = "full"


class Considered(Enum):
    """Whether the aligner kept a chain as its final alignment."""

    UNKNOWN = "unknown"
    CONSIDERED = "considered"
    NOT_CONSIDERED = "not-considered"

    @classmethod
    def from_flag(cls, flag: bool) -> "Considered":
        return cls.CONSIDERED if flag else cls.NOT_CONSIDERED


@dataclass(frozen=True)
class Anchor:
    """A k-mer match between the read and the reference (0-based starts)."""

    ref_start: int
    query_start: int


@dataclass(frozen=True)
class Chain:
    """One candidate alignment considered by the aligner.

    Attributes
    ----------
    ref_id:
        Index of the reference sequence.
    score:
        Chaining score reported by the aligner.
    qspan, rspan:
        ``(start, end)`` spans on the query and the reference.
    is_revcomp:
        True when the chain aligns the reverse complement of the read.
    anchors:
        Chain anchors in chaining order (not sorted by coordinate).
    considered:
        Final-alignment classification; ``UNKNOWN`` until the read decoder
        has classified the chain.
    cigar, cigar_ref_start:
        Primary alignment path and its reference start (full traces only).
    secondary_cigar, secondary_ref_start:
        Secondary ("ssw") alignment path and its reference start (full traces only).
    """

    ref_id: int
    score: float
    qspan: Tuple[int, int]
    rspan: Tuple[int, int]
    is_revcomp: bool
    anchors: Tuple[Anchor, ...]
    considered: Considered = Considered.UNKNOWN
    cigar: Optional[str] = None
    cigar_ref_start: Optional[int] = None
    secondary_cigar: Optional[str] = None
    secondary_ref_start: Optional[int] = None

    @property
    def is_considered(self) -> bool:
        if self.considered is Considered.UNKNOWN:
            raise ValueError("Chain has not been classified as considered/not considered yet")
        return self.considered is Considered.CONSIDERED

    @property
    def has_secondary(self) -> bool:
        return self.secondary_ref_start is not None


@dataclass(frozen=True)
class Read:
    """All chaining information the trace holds for one query read."""

    name: str
    read_len: int
    k: int
    fwd_anchors: Tuple[Anchor, ...]
    rev_anchors: Tuple[Anchor, ...]
    chains: Tuple[Chain, ...]

    def background_anchors(self, chain: Chain) -> Tuple[Anchor, ...]:
        """Anchor pool on the same strand as ``chain``."""
        return self.rev_anchors if chain.is_revcomp else self.fwd_anchors
