from dataclasses import dataclass, field

import pytest

from pocr.aastat import AAStat
from pocr.peg import PEG, PEGEdgeKind
from pocr.utils import CFLOptions


@dataclass
class _Analysis:
    options: CFLOptions
    graph: PEG = None
    counted: int = 0
    stat: AAStat = field(default=None)

    def count_sum_edges(self):
        self.counted += 1
        self.stat.num_of_sum_edges = 10


def _graph():
    peg = PEG()
    for node in (1, 2, 3):
        peg.add_node(node)
    peg.add_edge(1, 2, PEGEdgeKind.ASGN)
    peg.add_edge(2, 3, PEGEdgeKind.DEREF)
    return peg


def _make(**opts):
    aa = _Analysis(options=CFLOptions(**opts), graph=_graph())
    aa.stat = AAStat(aa)
    return aa


def test_print_stat_times_first_then_counts_and_clears(capsys):
    stat = _make().stat
    stat.num_stats["#Y"] = 3
    stat.time_stats["X"] = 1.5
    stat.print_stat("title")
    assert capsys.readouterr().out == "X\t1.5\n#Y\t3\n"
    assert stat.num_stats == {} and stat.time_stats == {}


def test_peg_stat_counts_nodes_and_double_edges(capsys):
    stat = _make().stat
    stat.peg_stat()
    assert stat.num_of_nodes == 3
    assert stat.num_of_edges == 4
    out = capsys.readouterr().out
    assert "#Nodes\t3" in out
    assert "#Edges\t4" in out
    assert "GraphSimpTime\t0" in out


def test_perform_stat_without_pstat_does_not_count(capsys):
    aa = _make(p_stat=False, graph_stat=False)
    aa.stat.perform_stat()
    assert aa.counted == 0
    assert capsys.readouterr().out == ""
    assert aa.stat.end_time >= aa.stat.start_time


def test_perform_stat_reports_sum_edges_minus_graph_edges(capsys):
    aa = _make(p_stat=True, graph_stat=True)
    aa.stat.checks = 7
    aa.stat.perform_stat()
    out = capsys.readouterr().out
    assert aa.counted == 1
    assert "#Checks\t7" in out
    assert "#SumEdges\t6" in out
    assert "AnalysisTime" in out and "VmrssInGB" in out


def test_memory_usage_is_recorded_as_non_negative_ints():
    stat = _make().stat
    stat.set_mem_usage_before()
    stat.set_mem_usage_after()
    for value in (stat.vmrss_before, stat.vmrss_after, stat.vmsize_before, stat.vmsize_after):
        assert isinstance(value, int) and value >= 0


def test_clock_is_monotonic():
    first = AAStat.clock()
    second = AAStat.clock()
    assert second >= first


def test_peg_stat_without_graph_raises():
    aa = _Analysis(options=CFLOptions())
    aa.stat = AAStat(aa)
    with pytest.raises(RuntimeError):
        aa.stat.peg_stat()