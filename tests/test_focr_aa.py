import pytest

from pocr.alias import StdAA, Word
from pocr.focr_aa import FocrAA
from pocr.utils import CFLOptions, Label

FAN = "1\t2\ta\n1\t3\ta\n"
CHAIN = "1\t2\ta\n2\t3\ta\n"
CYCLE = "1\t2\ta\n2\t1\ta\n2\t3\ta\n"
DEREF = "1\t3\td\n2\t4\td\n1\t2\ta\n"
FIELD_SAME = "1\t3\tf_i\t0\n2\t4\tf_i\t0\n1\t2\ta\n"
FIELD_DIFF = "1\t3\tf_i\t1\n2\t4\tf_i\t2\n1\t2\ta\n"


def _run(cls, tmp_path, text, **options):
    path = tmp_path / f"{cls.__name__}.txt"
    path.write_text(text)
    analysis = cls(str(path), CFLOptions(p_stat=False, **options))
    analysis.analyze()
    return analysis


def _pairs(data, word):
    return {
        (src, dst)
        for src, by_label in data.items()
        for label, dsts in by_label.items()
        if label.symbol == word
        for dst in dsts
    }


@pytest.mark.parametrize("text", [FAN, CHAIN, CYCLE, DEREF, FIELD_SAME, FIELD_DIFF])
def test_v_edges_agree_with_standard_solver(tmp_path, text):
    focr = _run(FocrAA, tmp_path, text)
    std = _run(StdAA, tmp_path, text)
    assert _pairs(focr.cfl_data, Word.V) == _pairs(std.cfl_data, Word.V)


def test_cycle_with_cycle_simplification(tmp_path):
    focr = _run(FocrAA, tmp_path, CYCLE, ecg_scc=True)
    std = _run(StdAA, tmp_path, CYCLE)
    assert _pairs(focr.cfl_data, Word.V) == _pairs(std.cfl_data, Word.V)


def test_chain_reachability_in_ecg(tmp_path):
    focr = _run(FocrAA, tmp_path, CHAIN)
    assert focr.ecg.is_reachable(1, 3)
    assert not focr.ecg.is_reachable(3, 1)


def test_add_arc_ignores_implied_edge(tmp_path):
    focr = _run(FocrAA, tmp_path, CHAIN)
    before = set(focr.ecg.get_node(1).successors)
    focr.add_arc(1, 3)
    assert set(focr.ecg.get_node(1).successors) == before


def test_deref_targets_are_memory_aliases(tmp_path):
    focr = _run(FocrAA, tmp_path, DEREF)
    assert focr.has_m(3, 4) is True
    assert (4, 3) in _pairs(focr.cfl_data, Word.V)


def test_count_sum_edges_adds_summaries(tmp_path):
    focr = _run(FocrAA, tmp_path, DEREF)
    focr.count_sum_edges()
    assert focr.cfl_data.has_edge(4, 4, Label(Word.M, 0))
    assert focr.cfl_data.has_edge(3, 1, Label(Word.DV, 0))
    assert focr.stat.num_of_sum_edges > len(_pairs(focr.cfl_data, Word.V))


def test_field_summary_keeps_offset(tmp_path):
    focr = _run(FocrAA, tmp_path, FIELD_DIFF)
    focr.count_sum_edges()
    assert focr.cfl_data.has_edge(3, 1, Label(Word.FV, 1))
    assert not focr.cfl_data.has_edge(3, 1, Label(Word.FV, 2))


def test_init_solver_without_graph_raises():
    with pytest.raises(RuntimeError):
        FocrAA("missing.txt").init_solver()