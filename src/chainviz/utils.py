from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from .errors import TraceIOError
from .models import Chain

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")
_MAX_CIGAR_IN_FILENAME = 80


def sanitize_filename(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name)


def chain_plot_filename(rank: int, chain: Chain, *, detailed: bool = False) -> str:
    """File name for one chain's plot, e.g. ``chain0_score=41.50.png``.

    The detailed scheme appends the (sanitized, truncated) primary CIGAR.
    """
    stem = f"chain{rank}_score={chain.score:.2f}"
    if detailed and chain.cigar:
        stem += "_cigar=" + sanitize_filename(chain.cigar[:_MAX_CIGAR_IN_FILENAME])
    return stem + ".png"


def ensure_outdir(path: str | Path) -> Path:
    p = Path(path)
    try:
        p.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TraceIOError(f"Cannot create output directory {p}: {e.strerror or e}", path=p) from e
    return p


def write_json(path: str | Path, obj: Any) -> None:
    with open(path, "wt", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True)
