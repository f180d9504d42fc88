from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .errors import ChainVizError
from .models import DecodeMode
from .render import render_reads
from .report import render_report
from .toy_data import make_toy_trace
from .trace import load_trace
from .utils import ensure_outdir, write_json


def _setup_logging(verbosity: int, *, logfile: Optional[Path] = None) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    log_fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    logging.basicConfig(level=level, format=log_fmt, stream=sys.stderr)

    if logfile is not None:
        logfile.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(logfile)
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(log_fmt))
        logging.getLogger().addHandler(fh)


def _path_exists(p: str) -> str:
    if not Path(p).exists():
        raise argparse.ArgumentTypeError(f"Path does not exist: {p}")
    return p


def _non_negative_int(s: str) -> int:
    try:
        n = int(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not an integer: {s}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"Must be >= 0: {s}")
    return n


def _log_path(outdir: Path, name: str) -> Path:
    return outdir / "logs" / name


def _handle_error(err: Exception, *, log_path: Optional[Path] = None) -> int:
    msg = f"{err.__class__.__name__}: {err}"
    sys.stderr.write(msg + "\n")
    if log_path is not None:
        sys.stderr.write(f"See log: {log_path}\n")
    return 2


def _mode(args: argparse.Namespace) -> DecodeMode:
    return DecodeMode.MAPPING_ONLY if args.mapping_only else DecodeMode.FULL


def _add_decode_args(sp: argparse.ArgumentParser) -> None:
    sp.add_argument("trace", type=_path_exists, help="Chaining trace written by the aligner.")
    sp.add_argument(
        "-n",
        "--max-reads",
        type=_non_negative_int,
        default=None,
        help="Decode at most this many reads (reads without chains do not count).",
    )
    sp.add_argument(
        "-x",
        "--mapping-only",
        action="store_true",
        help="Trace has no chain-detail (CIGAR) list; the first chain is taken as considered.",
    )
    sp.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v/-vv).")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="chainviz",
        description=(
            "chainviz: decode an aligner's chaining trace and plot every candidate chain "
            "of every read against its anchors and alignment paths."
        ),
    )
    p.add_argument("--version", action="version", version=f"chainviz {__version__}")

    sub = p.add_subparsers(dest="cmd", required=True)

    # -----------------
    # plot
    # -----------------
    pl = sub.add_parser("plot", help="Decode a trace and write one plot per chain.")
    _add_decode_args(pl)
    pl.add_argument("-o", "--outdir", default="plots", help="Output directory (default: plots).")
    pl.add_argument("--no-report", action="store_true", help="Do not write report.html.")
    pl.add_argument("--no-progress", action="store_true", help="Disable the progress bar.")

    # -----------------
    # inspect
    # -----------------
    ins = sub.add_parser("inspect", help="Decode a trace and print a JSON summary per read.")
    _add_decode_args(ins)

    # -----------------
    # make-toy-trace
    # -----------------
    t = sub.add_parser("make-toy-trace", help="Write a small synthetic trace for demos/tests.")
    t.add_argument("--out", required=True, help="Output trace path.")
    t.add_argument("--reads", type=_non_negative_int, default=3, help="Number of reads with chains.")
    t.add_argument(
        "-x",
        "--mapping-only",
        action="store_true",
        help="Omit the chain-detail list.",
    )

    return p


# -----------------
# Command handlers
# -----------------

def cmd_plot(args: argparse.Namespace) -> int:
    outdir = Path(args.outdir).expanduser().resolve()
    log_path = _log_path(outdir, "plot.log")
    mode = _mode(args)

    try:
        ensure_outdir(outdir)
        _setup_logging(args.verbose, logfile=log_path)
        logger = logging.getLogger("chainviz")
        logger.info("chainviz %s", __version__)

        reads = load_trace(args.trace, mode=mode, max_reads=args.max_reads)
        print(f"parsed {len(reads)} reads")

        summary = render_reads(reads, outdir=outdir, mode=mode, progress=not args.no_progress)
        summary["trace"] = str(args.trace)
        summary["mode"] = mode.value
        write_json(outdir / "summary.json", summary)

        if not args.no_report:
            render_report(
                outdir=outdir,
                version=__version__,
                trace_path=str(args.trace),
                mode=mode.value,
                summary=summary,
            )

        print(str(outdir))
        return 0 if summary["counts"]["plots_failed"] == 0 else 1
    except (ChainVizError, OSError) as e:
        return _handle_error(e, log_path=log_path if log_path.exists() else None)


def cmd_inspect(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose)
    try:
        reads = load_trace(args.trace, mode=_mode(args), max_reads=args.max_reads)
    except ChainVizError as e:
        return _handle_error(e)

    out = []
    for read in reads:
        out.append(
            {
                "name": read.name,
                "read_len": read.read_len,
                "k": read.k,
                "fwd_anchors": len(read.fwd_anchors),
                "rev_anchors": len(read.rev_anchors),
                "chains": [
                    {
                        "rank": rank,
                        "ref_id": c.ref_id,
                        "score": c.score,
                        "rspan": list(c.rspan),
                        "qspan": list(c.qspan),
                        "is_revcomp": c.is_revcomp,
                        "anchors": len(c.anchors),
                        "considered": c.considered.value,
                        "cigar": c.cigar,
                        "secondary_cigar": c.secondary_cigar,
                    }
                    for rank, c in enumerate(read.chains)
                ],
            }
        )
    print(json.dumps(out, indent=2))
    return 0


def cmd_make_toy_trace(args: argparse.Namespace) -> int:
    try:
        summary = make_toy_trace(out_path=args.out, n_reads=args.reads, mode=_mode(args))
    except ChainVizError as e:
        return _handle_error(e)
    print(json.dumps(summary, indent=2))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "plot":
        return cmd_plot(args)
    if args.cmd == "inspect":
        return cmd_inspect(args)
    if args.cmd == "make-toy-trace":
        return cmd_make_toy_trace(args)

    parser.error(f"Unknown command: {args.cmd}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
