"""Decode the aligner's chaining debug trace into :class:`~chainviz.models.Read` records.

One read record looks like this (no optional whitespace anywhere; list entries
are concatenated without separators)::

    Query: <name>
    l:<read_len>,k:<k>
    Forward-strand anchor hits:[{<ref>,<query>}{<ref>,<query>}]
    Reverse-strand anchor hits:[]
    chains[{ref_id:0,score:41.5,query_start:0,query_end:120,ref_start:900,ref_end:1020,is_revcomp:false,anchors:[{900,0}]}]
    cigars:[(120M,was_considered:1,rstart:900,ssw:120M,ssw_rstart:900)]

The ``cigars`` list is only present in full traces. Every literal of the format
lives in the schema tables below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .cursor import Cursor, Field
from .errors import ChainDetailMismatchError, TraceIOError
from .models import Anchor, Chain, Considered, DecodeMode, Read

logger = logging.getLogger(__name__)

READ_MARKER = b"Query: "
LIST_END = b"]"

READ_HEADER: Tuple[Field, ...] = (
    Field("name", READ_MARKER, b"\n", "str"),
    Field("read_len", b"l:", b",", "uint"),
    Field("k", b"k:", b"\n", "uint"),
)
FWD_ANCHORS_OPEN = b"Forward-strand anchor hits:["
REV_ANCHORS_OPEN = b"\nReverse-strand anchor hits:["
CHAINS_OPEN = b"\nchains["
DETAILS_OPEN = b"\ncigars:["

ANCHOR_ENTRY: Tuple[Field, ...] = (
    Field("ref_start", b"{", b",", "uint"),
    Field("query_start", b"", b"}", "uint"),
)

CHAIN_ENTRY: Tuple[Field, ...] = (
    Field("ref_id", b"{ref_id:", b",", "uint"),
    Field("score", b"score:", b",", "float"),
    Field("query_start", b"query_start:", b",", "uint"),
    Field("query_end", b"query_end:", b",", "uint"),
    Field("ref_start", b"ref_start:", b",", "uint"),
    Field("ref_end", b"ref_end:", b",", "uint"),
    Field("is_revcomp", b"is_revcomp:", b",", "bool"),
)
CHAIN_ANCHORS_OPEN = b"anchors:["
CHAIN_ENTRY_END = b"}"

DETAIL_ENTRY: Tuple[Field, ...] = (
    Field("cigar", b"(", b",", "str"),
    Field("considered", b"was_considered:", b",", "flag"),
    Field("cigar_ref_start", b"rstart:", b",", "uint"),
    Field("secondary_cigar", b"ssw:", b",", "str"),
    Field("secondary_ref_start", b"ssw_rstart:", b")", "uint"),
)


@dataclass(frozen=True)
class ChainDetail:
    """Alignment detail for one chain, from the second pass of a full trace."""

    cigar: str
    considered: bool
    cigar_ref_start: int
    secondary_cigar: str
    secondary_ref_start: int


def _at_list_end(cursor: Cursor) -> bool:
    return cursor.peek() == LIST_END


def decode_anchor_list(cursor: Cursor, opener: bytes) -> Tuple[Anchor, ...]:
    """Decode ``opener{r,q}{r,q}...]``; order is kept as emitted."""
    cursor.expect(opener)
    anchors: List[Anchor] = []
    while not _at_list_end(cursor):
        fields = cursor.read_fields(ANCHOR_ENTRY)
        anchors.append(Anchor(ref_start=fields["ref_start"], query_start=fields["query_start"]))
    cursor.expect(LIST_END)
    return tuple(anchors)


def decode_chain_list(cursor: Cursor) -> List[Chain]:
    """Decode the chain list; detail fields stay unset and ``considered`` UNKNOWN."""
    cursor.expect(CHAINS_OPEN)
    chains: List[Chain] = []
    while not _at_list_end(cursor):
        f = cursor.read_fields(CHAIN_ENTRY)
        anchors = decode_anchor_list(cursor, CHAIN_ANCHORS_OPEN)
        cursor.expect(CHAIN_ENTRY_END)
        chains.append(
            Chain(
                ref_id=f["ref_id"],
                score=f["score"],
                qspan=(f["query_start"], f["query_end"]),
                rspan=(f["ref_start"], f["ref_end"]),
                is_revcomp=f["is_revcomp"],
                anchors=anchors,
            )
        )
    cursor.expect(LIST_END)
    return chains


def decode_chain_details(cursor: Cursor) -> List[ChainDetail]:
    cursor.expect(DETAILS_OPEN)
    details: List[ChainDetail] = []
    while not _at_list_end(cursor):
        details.append(ChainDetail(**cursor.read_fields(DETAIL_ENTRY)))
    cursor.expect(LIST_END)
    return details


def attach_details(
    chains: Sequence[Chain],
    details: Sequence[ChainDetail],
    *,
    offset: int,
) -> List[Chain]:
    """Attach the n-th detail entry to the n-th chain.

    Raises
    ------
    ChainDetailMismatchError
        If the two lists differ in length; ``offset`` locates the detail list.
    """
    if len(details) != len(chains):
        raise ChainDetailMismatchError(n_chains=len(chains), n_details=len(details), offset=offset)
    return [
        replace(
            chain,
            considered=Considered.from_flag(d.considered),
            cigar=d.cigar,
            cigar_ref_start=d.cigar_ref_start,
            secondary_cigar=d.secondary_cigar,
            secondary_ref_start=d.secondary_ref_start,
        )
        for chain, d in zip(chains, details)
    ]


def mark_first_considered(chains: Sequence[Chain]) -> List[Chain]:
    """Mapping-only traces carry no decision; the top-ranked chain stands in for it."""
    return [
        replace(chain, considered=Considered.from_flag(rank == 0))
        for rank, chain in enumerate(chains)
    ]


class TraceDecoder:
    """Decode read records from one trace buffer.

    The decoder owns its cursor; nothing else moves it.
    """

    def __init__(self, buf: bytes, *, mode: DecodeMode = DecodeMode.FULL) -> None:
        self.cursor = Cursor(buf)
        self.mode = mode

    def next_marker(self) -> bool:
        """Move to the next read marker; False when there is none left."""
        idx = self.cursor.buf.find(READ_MARKER, self.cursor.pos)
        if idx < 0:
            self.cursor.pos = len(self.cursor.buf)
            return False
        self.cursor.pos = idx
        return True

    def decode_read(self) -> Optional[Read]:
        """Decode the record at the cursor; None if it lists no chains."""
        cursor = self.cursor
        start = cursor.pos
        header = cursor.read_fields(READ_HEADER)
        fwd_anchors = decode_anchor_list(cursor, FWD_ANCHORS_OPEN)
        rev_anchors = decode_anchor_list(cursor, REV_ANCHORS_OPEN)
        chains = decode_chain_list(cursor)
        if not chains:
            logger.debug("Dropping read %r at offset %d: no chains", header["name"], start)
            return None

        if self.mode is DecodeMode.MAPPING_ONLY:
            chains = mark_first_considered(chains)
        else:
            details_at = cursor.pos
            details = decode_chain_details(cursor)
            chains = attach_details(chains, details, offset=details_at)

        return Read(
            name=header["name"],
            read_len=header["read_len"],
            k=header["k"],
            fwd_anchors=fwd_anchors,
            rev_anchors=rev_anchors,
            chains=tuple(chains),
        )


def scan_trace(
    buf: bytes,
    *,
    mode: DecodeMode = DecodeMode.FULL,
    max_reads: Optional[int] = None,
) -> List[Read]:
    """Decode every read record in ``buf``.

    Parameters
    ----------
    buf:
        Whole trace contents.
    mode:
        Trace variant; mapping-only traces carry no chain-detail list.
    max_reads:
        Stop once this many reads have been accepted. Reads without chains are
        dropped and do not count.

    Raises
    ------
    TraceDecodeError
        On the first byte that does not fit the format. Nothing is returned in
        that case.
    """
    decoder = TraceDecoder(buf, mode=mode)
    reads: List[Read] = []
    while max_reads is None or len(reads) < max_reads:
        if not decoder.next_marker():
            break
        read = decoder.decode_read()
        if read is not None:
            reads.append(read)

    logger.info("Decoded %d reads", len(reads))
    return reads


def load_trace(
    path: str | Path,
    *,
    mode: DecodeMode = DecodeMode.FULL,
    max_reads: Optional[int] = None,
) -> List[Read]:
    """Read a trace file and decode it with :func:`scan_trace`."""
    path = Path(path)
    try:
        buf = path.read_bytes()
    except OSError as e:
        raise TraceIOError(f"Cannot read trace {path}: {e.strerror or e}", path=path) from e
    logger.info("Loaded %s (%d bytes, mode=%s)", path, len(buf), mode.value)
    return scan_trace(buf, mode=mode, max_reads=max_reads)
