"""Plot geometry derived from decoded reads.

All functions here are pure: they take records and return new values, so
chains can be planned independently of each other and in any order.

Coordinates are ``(reference, query)`` pairs, matching the plot axes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .models import Anchor, Chain, Considered, Read

Point = Tuple[int, int]
Segment = Tuple[Point, Point]

# op -> (advances reference, advances query)
_CIGAR_ADVANCE = {
    "M": (True, True),
    "=": (True, True),
    "X": (True, True),
    "I": (False, True),
    "S": (False, True),
    "D": (True, False),
    "N": (True, False),
}

_PADDING_DIVISOR = 10


def cigar_to_path(cigar: str, ref_start: int) -> List[Point]:
    """Walk a CIGAR string into path vertices starting at ``(ref_start, 0)``.

    One vertex is appended per recognised run. Unknown operations, a missing
    run length (read as 0) and trailing digits without an operation are
    ignored rather than rejected; hard clips and padding therefore leave the
    path unchanged.

    >>> cigar_to_path("3M2I2D", 10)
    [(10, 0), (13, 3), (13, 5), (15, 5)]
    """
    ref_pos = ref_start
    query_pos = 0
    path: List[Point] = [(ref_pos, query_pos)]

    digits = ""
    for ch in cigar:
        if "0" <= ch <= "9":
            digits += ch
            continue
        count = int(digits) if digits else 0
        digits = ""
        advance = _CIGAR_ADVANCE.get(ch)
        if advance is None:
            continue
        if advance[0]:
            ref_pos += count
        if advance[1]:
            query_pos += count
        path.append((ref_pos, query_pos))
    return path


def drawable_path(cigar: Optional[str], ref_start: Optional[int]) -> Optional[List[Point]]:
    """Path for ``cigar``, or None when there is nothing to draw."""
    if cigar is None or ref_start is None:
        return None
    path = cigar_to_path(cigar, ref_start)
    if len(path) < 2:
        return None
    return path


def plot_padding(read_len: int) -> int:
    return read_len // _PADDING_DIVISOR


def plan_window(
    rspan: Tuple[int, int],
    read_len: int,
    secondary_ref_start: Optional[int] = None,
) -> Tuple[int, int]:
    """Reference-axis interval shown for one chain.

    Without a secondary alignment the chain span is padded by a tenth of the
    read length on both sides. With one, the window runs from the smaller of
    the two starts to the larger start plus a full read length, so both
    alignments fit. The start never goes below 0.
    """
    pad = plot_padding(read_len)
    rspan0, rspan1 = rspan
    if secondary_ref_start is None:
        return max(0, rspan0 - pad), rspan1 + pad

    min_start = min(rspan0, secondary_ref_start)
    max_start = max(rspan0, secondary_ref_start)
    return max(0, min_start - pad), max_start + pad + read_len


def visible_anchors(
    anchors: Sequence[Anchor],
    window: Tuple[int, int],
    k: int,
) -> List[Anchor]:
    """Anchors whose whole k-mer footprint lies inside ``window``."""
    w0, w1 = window
    return [a for a in anchors if a.ref_start >= w0 and a.ref_start + k <= w1]


def anchor_segments(anchors: Sequence[Anchor], k: int) -> List[Segment]:
    """Diagonal k-mer footprint of each anchor."""
    return [((a.ref_start, a.query_start), (a.ref_start + k, a.query_start + k)) for a in anchors]


def chain_links(anchors: Sequence[Anchor], k: int) -> List[Segment]:
    """Connectors from the end of each chain anchor to the start of the next."""
    return [
        ((cur.ref_start + k, cur.query_start + k), (nxt.ref_start, nxt.query_start))
        for cur, nxt in zip(anchors, anchors[1:])
    ]


@dataclass(frozen=True)
class ChainPlot:
    """Everything the renderer needs to draw one chain."""

    read_name: str
    rank: int
    window: Tuple[int, int]
    query_bound: int
    k: int
    background: Tuple[Anchor, ...]
    chain_anchors: Tuple[Anchor, ...]
    considered: Considered
    score: float
    ref_id: int
    rspan: Tuple[int, int]
    cigar: Optional[str] = None
    secondary_cigar: Optional[str] = None
    primary_path: Optional[List[Point]] = None
    secondary_path: Optional[List[Point]] = None

    @property
    def title(self) -> str:
        return chain_title(self.score, self.ref_id, self.rspan)


def chain_title(score: float, ref_id: int, rspan: Tuple[int, int]) -> str:
    return f"Score: {score:.2f}, Ref ID: {ref_id}, Ref Span: {rspan[0]}-{rspan[1]}"


def plan_chain_plot(read: Read, chain: Chain, rank: int) -> ChainPlot:
    """Derive the plot geometry for ``chain`` (the ``rank``-th chain of ``read``)."""
    window = plan_window(chain.rspan, read.read_len, chain.secondary_ref_start)
    background = visible_anchors(read.background_anchors(chain), window, read.k)
    return ChainPlot(
        read_name=read.name,
        rank=rank,
        window=window,
        query_bound=read.read_len,
        k=read.k,
        background=tuple(background),
        chain_anchors=chain.anchors,
        considered=chain.considered,
        score=chain.score,
        ref_id=chain.ref_id,
        rspan=chain.rspan,
        cigar=chain.cigar,
        secondary_cigar=chain.secondary_cigar,
        primary_path=drawable_path(chain.cigar, chain.cigar_ref_start),
        secondary_path=drawable_path(chain.secondary_cigar, chain.secondary_ref_start),
    )
