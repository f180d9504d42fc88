from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Sequence

from tqdm import tqdm

from .geometry import plan_chain_plot
from .models import DecodeMode, Read
from .plotting import plot_chain
from .utils import chain_plot_filename, ensure_outdir, sanitize_filename

logger = logging.getLogger(__name__)


def render_reads(
    reads: Sequence[Read],
    *,
    outdir: str | Path,
    mode: DecodeMode = DecodeMode.FULL,
    progress: bool = True,
) -> Dict[str, Any]:
    """Plot every chain of every read into ``outdir/<read>/``.

    Each chain is planned and drawn on its own; an exception while drawing one
    chain is logged and counted, and the remaining chains are still drawn.
    Directory creation failures are not isolated and raise ``TraceIOError``.

    Returns
    -------
    dict
        ``counts`` (reads, chains, plots written, failures), ``reads`` (per-read
        directory and plot file names, relative to ``outdir``) and ``elapsed_s``.
    """
    t0 = time.time()
    outdir = ensure_outdir(outdir)
    detailed = mode is DecodeMode.FULL

    counts = {"reads": 0, "chains": 0, "plots_written": 0, "plots_failed": 0}
    per_read: List[Dict[str, Any]] = []

    it = tqdm(reads, desc="Plotting reads", unit="read", disable=not progress)
    for read in it:
        read_dir = ensure_outdir(outdir / sanitize_filename(read.name))
        counts["reads"] += 1
        plots: List[Dict[str, Any]] = []

        for rank, chain in enumerate(read.chains):
            counts["chains"] += 1
            filename = chain_plot_filename(rank, chain, detailed=detailed)
            try:
                plot_chain(plan_chain_plot(read, chain, rank), out_png=read_dir / filename)
            except Exception as e:
                counts["plots_failed"] += 1
                logger.error("Failed to plot chain %d of read %s: %s", rank, read.name, e, exc_info=True)
                continue
            counts["plots_written"] += 1
            logger.info("%s", filename)
            plots.append(
                {
                    "rank": rank,
                    "score": chain.score,
                    "considered": chain.considered.value,
                    "file": f"{read_dir.name}/{filename}",
                }
            )

        per_read.append({"name": read.name, "dir": read_dir.name, "plots": plots})

    if counts["plots_failed"]:
        logger.warning(
            "%d of %d chain plots failed; see log for details.",
            counts["plots_failed"],
            counts["chains"],
        )

    return {
        "outdir": str(outdir),
        "counts": counts,
        "reads": per_read,
        "elapsed_s": round(time.time() - t0, 3),
    }
