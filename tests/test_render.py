from dataclasses import replace
from pathlib import Path

import pytest

from chainviz import render
from chainviz.errors import TraceIOError
from chainviz.models import DecodeMode
from chainviz.report import render_report
from chainviz.trace import scan_trace
from chainviz.utils import chain_plot_filename, sanitize_filename


def test_sanitize_filename():
    assert sanitize_filename("read/1:a b") == "read_1_a_b"
    assert sanitize_filename("ok_name-2") == "ok_name-2"


def test_chain_plot_filename_schemes(full_trace):
    chain = scan_trace(full_trace)[0].chains[0]
    assert chain_plot_filename(0, chain) == "chain0_score=41.50.png"
    assert chain_plot_filename(0, chain, detailed=True) == "chain0_score=41.50_cigar=3M2I2D.png"


def test_detailed_filename_truncates_long_cigar(full_trace):
    chain = replace(scan_trace(full_trace)[0].chains[0], cigar="10M1I" * 80)
    name = chain_plot_filename(2, chain, detailed=True)
    cigar_part = name[len("chain2_score=41.50_cigar=") : -len(".png")]
    assert len(cigar_part) == 80
    assert cigar_part == ("10M1I" * 16)
    assert chain_plot_filename(2, chain) == "chain2_score=41.50.png"


def test_render_reads_writes_one_plot_per_chain(tmp_path: Path, full_trace):
    reads = scan_trace(full_trace, mode=DecodeMode.FULL)
    summary = render.render_reads(reads, outdir=tmp_path / "plots", mode=DecodeMode.FULL, progress=False)

    read_dir = tmp_path / "plots" / "read_1_a_b"
    assert (read_dir / "chain0_score=41.50_cigar=3M2I2D.png").stat().st_size > 0
    assert (read_dir / "chain1_score=12.00.png").exists()
    assert (tmp_path / "plots" / "r3").is_dir()
    assert summary["counts"] == {"reads": 2, "chains": 3, "plots_written": 3, "plots_failed": 0}
    assert summary["reads"][0]["plots"][0]["considered"] == "considered"


def test_one_failing_chain_does_not_stop_the_rest(tmp_path: Path, monkeypatch, mapping_trace):
    real_plot_chain = render.plot_chain

    def flaky_plot_chain(plot, *, out_png):
        if plot.rank == 0:
            raise RuntimeError("boom")
        return real_plot_chain(plot, out_png=out_png)

    monkeypatch.setattr(render, "plot_chain", flaky_plot_chain)
    reads = scan_trace(mapping_trace, mode=DecodeMode.MAPPING_ONLY)
    summary = render.render_reads(reads, outdir=tmp_path, mode=DecodeMode.MAPPING_ONLY, progress=False)

    assert summary["counts"]["plots_failed"] == 2
    assert summary["counts"]["plots_written"] == 1
    assert (tmp_path / "read_1_a_b" / "chain1_score=12.00.png").exists()
    assert not (tmp_path / "read_1_a_b" / "chain0_score=41.50.png").exists()


def test_output_directory_failure_is_an_io_error(tmp_path: Path, full_trace):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x", encoding="utf-8")
    reads = scan_trace(full_trace, max_reads=1)
    with pytest.raises(TraceIOError):
        render.render_reads(reads, outdir=blocker / "plots", progress=False)


def test_report_links_plots(tmp_path: Path, full_trace):
    reads = scan_trace(full_trace)
    summary = render.render_reads(reads, outdir=tmp_path, progress=False)
    report = render_report(
        outdir=tmp_path,
        version="test",
        trace_path="trace.txt",
        mode=DecodeMode.FULL.value,
        summary=summary,
    )
    html = report.read_text(encoding="utf-8")
    assert "read/1:a b" in html
    assert "read_1_a_b/chain0_score=41.50_cigar=3M2I2D.png" in html
