from chainviz.geometry import (
    anchor_segments,
    chain_links,
    cigar_to_path,
    plan_chain_plot,
    plan_window,
    visible_anchors,
)
from chainviz.models import Anchor, Considered, DecodeMode
from chainviz.trace import scan_trace


def test_cigar_path_walks_runs():
    assert cigar_to_path("3M2I2D", 10) == [(10, 0), (13, 3), (13, 5), (15, 5)]


def test_cigar_path_all_consuming_ops():
    path = cigar_to_path("2S3=1X4N2M", 0)
    assert path == [(0, 0), (0, 2), (3, 5), (4, 6), (8, 6), (10, 8)]


def test_empty_cigar_has_nothing_to_draw():
    assert cigar_to_path("", 5) == [(5, 0)]


def test_cigar_path_is_lenient():
    # unknown ops are skipped, a missing count is 0, trailing digits are ignored
    assert cigar_to_path("5H3M", 0) == [(0, 0), (3, 3)]
    assert cigar_to_path("M2D", 1) == [(1, 0), (1, 0), (3, 0)]
    assert cigar_to_path("4M12", 0) == [(0, 0), (4, 4)]


def test_window_simple_mode():
    assert plan_window((100, 200), 50) == (95, 205)


def test_window_saturates_at_zero():
    assert plan_window((0, 10), 50) == (0, 15)


def test_window_dual_mode_covers_both_alignments():
    assert plan_window((100, 200), 50, secondary_ref_start=120) == (95, 175)
    assert plan_window((100, 200), 50, secondary_ref_start=60) == (55, 155)
    assert plan_window((3, 40), 50, secondary_ref_start=8) == (0, 63)


def test_visible_anchors_require_full_footprint():
    window = (95, 205)
    inside = Anchor(ref_start=190, query_start=0)
    overhang = Anchor(ref_start=204, query_start=0)
    before = Anchor(ref_start=94, query_start=0)
    at_start = Anchor(ref_start=95, query_start=3)
    assert visible_anchors([inside, overhang, before, at_start], window, 10) == [inside, at_start]


def test_anchor_segments_and_links():
    anchors = [Anchor(100, 0), Anchor(130, 25)]
    assert anchor_segments(anchors, 10) == [((100, 0), (110, 10)), ((130, 25), (140, 35))]
    assert chain_links(anchors, 10) == [((110, 10), (130, 25))]
    assert chain_links(anchors[:1], 10) == []


def test_plan_chain_plot_full_mode(full_trace):
    read = scan_trace(full_trace, mode=DecodeMode.FULL)[0]
    plot = plan_chain_plot(read, read.chains[0], 0)
    assert plot.window == (95, 175)
    assert plot.query_bound == 50
    assert plot.background == (Anchor(100, 0),)
    assert plot.considered is Considered.CONSIDERED
    assert plot.primary_path == [(10, 0), (13, 3), (13, 5), (15, 5)]
    assert plot.secondary_path == [(120, 0), (170, 50)]
    assert plot.title == "Score: 41.50, Ref ID: 3, Ref Span: 100-200"

    rev = plan_chain_plot(read, read.chains[1], 1)
    assert rev.background == (Anchor(500, 5),)
    assert rev.window == (0, 555)
    assert rev.primary_path is None
    assert rev.secondary_path is None


def test_plan_chain_plot_mapping_only(mapping_trace):
    read = scan_trace(mapping_trace, mode=DecodeMode.MAPPING_ONLY)[0]
    plot = plan_chain_plot(read, read.chains[0], 0)
    assert plot.window == (95, 205)
    assert plot.background == (Anchor(100, 0), Anchor(190, 20))
    assert plot.primary_path is None
    assert plot.secondary_path is None
