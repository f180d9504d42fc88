"""chainviz: decode aligner chaining traces and plot every candidate chain.

Public API is intentionally small; most users should use the CLI:

    chainviz plot trace.txt -o plots/

"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
