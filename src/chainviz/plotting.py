from __future__ import annotations

import logging
from pathlib import Path

import matplotlib.pyplot as plt

from .geometry import ChainPlot, anchor_segments, chain_links
from .models import Considered

logger = logging.getLogger(__name__)

FIGSIZE_IN = 10.0
DPI = 160

_BACKGROUND_COLOR = "tab:blue"
_CONSIDERED_COLOR = "green"
_REJECTED_COLOR = "red"
_PRIMARY_PATH_COLOR = "purple"
_SECONDARY_PATH_COLOR = "orange"


def _short(text: str | None, limit: int = 60) -> str:
    text = text or ""
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _chain_color(considered: Considered) -> str:
    return _CONSIDERED_COLOR if considered is Considered.CONSIDERED else _REJECTED_COLOR


def _chain_label(considered: Considered) -> str:
    if considered is Considered.UNKNOWN:
        return "Chain (considered: unknown)"
    return f"Chain (considered: {considered is Considered.CONSIDERED})"


def plot_chain(plot: ChainPlot, *, out_png: str | Path) -> Path:
    """Draw one chain on the (reference, query) plane and save it as PNG.

    Background anchors of the chain's strand are drawn as blue k-mer segments
    with crosses at both ends; the chain's own anchors and the links between
    them are green when the aligner kept the chain and red otherwise. CIGAR
    paths, when present, are overlaid in purple (primary) and orange
    (secondary).
    """
    out_png = Path(out_png)
    out_png.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(FIGSIZE_IN, FIGSIZE_IN))
    try:
        for i, ((x0, y0), (x1, y1)) in enumerate(anchor_segments(plot.background, plot.k)):
            ax.plot(
                [x0, x1],
                [y0, y1],
                color=_BACKGROUND_COLOR,
                linewidth=1.5,
                marker="x",
                markersize=6,
                label="Background anchors" if i == 0 else None,
            )

        color = _chain_color(plot.considered)
        segments = anchor_segments(plot.chain_anchors, plot.k) + chain_links(plot.chain_anchors, plot.k)
        for i, ((x0, y0), (x1, y1)) in enumerate(segments):
            ax.plot(
                [x0, x1],
                [y0, y1],
                color=color,
                alpha=0.5,
                linewidth=4,
                label=_chain_label(plot.considered) if i == 0 else None,
            )

        if plot.primary_path is not None:
            xs, ys = zip(*plot.primary_path)
            ax.plot(xs, ys, color=_PRIMARY_PATH_COLOR, alpha=0.5, linewidth=4,
                    label=f"Piecewise path: {_short(plot.cigar)}")
        if plot.secondary_path is not None:
            xs, ys = zip(*plot.secondary_path)
            ax.plot(xs, ys, color=_SECONDARY_PATH_COLOR, alpha=0.5, linewidth=4,
                    label=f"SSW path: {_short(plot.secondary_cigar)}")

        ax.set_xlim(plot.window[0], plot.window[1])
        ax.set_ylim(0, plot.query_bound)
        ax.set_xlabel("Reference")
        ax.set_ylabel("Query")
        ax.set_title(plot.title)
        if ax.get_legend_handles_labels()[0]:
            ax.legend(loc="upper left", fontsize="small")
        fig.tight_layout()
        fig.savefig(out_png, dpi=DPI)
    finally:
        plt.close(fig)

    logger.debug("Wrote %s", out_png)
    return out_png
