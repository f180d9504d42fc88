from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from .errors import TraceIOError
from .models import Anchor, Chain, Considered, DecodeMode
from .utils import ensure_outdir


def _format_anchors(anchors: Sequence[Anchor]) -> str:
    return "".join(f"{{{a.ref_start},{a.query_start}}}" for a in anchors)


def _format_chain(chain: Chain) -> str:
    return (
        f"{{ref_id:{chain.ref_id},score:{chain.score},"
        f"query_start:{chain.qspan[0]},query_end:{chain.qspan[1]},"
        f"ref_start:{chain.rspan[0]},ref_end:{chain.rspan[1]},"
        f"is_revcomp:{'true' if chain.is_revcomp else 'false'},"
        f"anchors:[{_format_anchors(chain.anchors)}]}}"
    )


def _format_detail(chain: Chain) -> str:
    flag = "1" if chain.considered is Considered.CONSIDERED else "0"
    return (
        f"({chain.cigar or ''},was_considered:{flag},rstart:{chain.cigar_ref_start or 0},"
        f"ssw:{chain.secondary_cigar or ''},ssw_rstart:{chain.secondary_ref_start or 0})"
    )


def format_record(
    *,
    name: str,
    read_len: int,
    k: int,
    fwd_anchors: Sequence[Anchor],
    rev_anchors: Sequence[Anchor],
    chains: Sequence[Chain],
    mode: DecodeMode = DecodeMode.FULL,
) -> str:
    """Render one read record in the aligner's trace layout.

    In full mode the chain-detail list is written from each chain's CIGAR and
    considered fields.
    """
    lines = [
        f"Query: {name}",
        f"l:{read_len},k:{k}",
        f"Forward-strand anchor hits:[{_format_anchors(fwd_anchors)}]",
        f"Reverse-strand anchor hits:[{_format_anchors(rev_anchors)}]",
        f"chains[{''.join(_format_chain(c) for c in chains)}]",
    ]
    if mode is DecodeMode.FULL:
        lines.append(f"cigars:[{''.join(_format_detail(c) for c in chains)}]")
    return "\n".join(lines) + "\n"


def _diagonal_anchors(rng: random.Random, ref_start: int, read_len: int, k: int) -> List[Anchor]:
    anchors: List[Anchor] = []
    q = rng.randint(0, k)
    while q + k <= read_len:
        anchors.append(Anchor(ref_start=max(0, ref_start + q + rng.randint(-2, 2)), query_start=q))
        q += rng.randint(k, 3 * k)
    return anchors


def _toy_read(
    rng: random.Random, *, read_len: int, k: int, n_chains: int
) -> Tuple[List[Anchor], List[Anchor], List[Chain]]:
    true_start = rng.randint(1_000, 50_000)
    decoy_start = true_start + rng.choice([-1, 1]) * rng.randint(2 * read_len, 10 * read_len)

    fwd = _diagonal_anchors(rng, true_start, read_len, k)
    fwd += _diagonal_anchors(rng, max(0, decoy_start), read_len, k)[::2]
    rev = _diagonal_anchors(rng, rng.randint(1_000, 50_000), read_len, k)[::3]
    fwd.sort(key=lambda a: (a.ref_start, a.query_start))
    rev.sort(key=lambda a: (a.ref_start, a.query_start))

    starts = [true_start, max(0, decoy_start), rev[0].ref_start if rev else 0]
    chains: List[Chain] = []
    for rank in range(n_chains):
        pool = fwd if rank < 2 else rev
        start = starts[min(rank, 2)]
        members = [a for a in pool if start <= a.ref_start <= start + read_len]
        if not members:
            members = pool[:1]
        r0 = members[0].ref_start if members else start
        r1 = (members[-1].ref_start + k) if members else start + k
        q0 = members[0].query_start if members else 0
        q1 = (members[-1].query_start + k) if members else k
        ins = rng.randint(1, 3)
        half = read_len // 2
        if q0 < half:
            cigar = f"{q0}S{half - q0}M{ins}I{read_len - half - ins}M"
        else:
            cigar = f"{read_len}M"
        chains.append(
            Chain(
                ref_id=0,
                score=round(60.0 / (rank + 1) + rng.random(), 2),
                qspan=(q0, q1),
                rspan=(r0, r1),
                is_revcomp=rank >= 2,
                anchors=tuple(members),
                considered=Considered.from_flag(rank == 0),
                cigar=cigar,
                cigar_ref_start=r0,
                secondary_cigar=f"{read_len}M",
                secondary_ref_start=max(0, r0 - rng.randint(0, 5)),
            )
        )
    return fwd, rev, chains


def make_toy_trace(
    *,
    out_path: str | Path,
    n_reads: int = 3,
    mode: DecodeMode = DecodeMode.FULL,
    seed: int = 7,
) -> Dict[str, object]:
    """Write a small synthetic trace suitable for quick demos/tests.

    One extra read without chains is appended; decoders drop it, so the trace
    decodes to exactly ``n_reads`` reads.
    """
    out_path = Path(out_path)
    ensure_outdir(out_path.parent)
    rng = random.Random(seed)
    k = 15

    records: List[str] = []
    for i in range(n_reads):
        read_len = rng.randint(120, 300)
        name = f"toy_read/{i + 1}"
        fwd, rev, chains = _toy_read(rng, read_len=read_len, k=k, n_chains=1 + i % 3)
        records.append(
            format_record(
                name=name,
                read_len=read_len,
                k=k,
                fwd_anchors=fwd,
                rev_anchors=rev,
                chains=chains,
                mode=mode,
            )
        )
    records.append(
        format_record(
            name="toy_unchained",
            read_len=100,
            k=k,
            fwd_anchors=[Anchor(ref_start=10, query_start=0)],
            rev_anchors=[],
            chains=[],
            mode=mode,
        )
    )

    try:
        out_path.write_text("".join(records), encoding="utf-8")
    except OSError as e:
        raise TraceIOError(f"Cannot write trace {out_path}: {e.strerror or e}", path=out_path) from e
    return {
        "trace": str(out_path),
        "reads": n_reads,
        "records": len(records),
        "mode": mode.value,
    }
