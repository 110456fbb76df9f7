import pytest

from pocr.alias import StdAA, Word
from pocr.pocr_aa import PocrAA
from pocr.utils import CFLOptions, Label

FAN = "1\t2\ta\n1\t3\ta\n"
CHAIN = "1\t2\ta\n2\t3\ta\n"
DEREF = "1\t3\td\n2\t4\td\n1\t2\ta\n"
FIELD_SAME = "1\t3\tf_i\t0\n2\t4\tf_i\t0\n1\t2\ta\n"
FIELD_DIFF = "1\t3\tf_i\t1\n2\t4\tf_i\t2\n1\t2\ta\n"


def _run(cls, tmp_path, text):
    path = tmp_path / f"{cls.__name__}.txt"
    path.write_text(text)
    analysis = cls(str(path), CFLOptions(p_stat=False))
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


@pytest.mark.parametrize("text", [FAN, CHAIN, DEREF, FIELD_SAME, FIELD_DIFF])
def test_v_edges_agree_with_standard_solver(tmp_path, text):
    pocr = _run(PocrAA, tmp_path, text)
    std = _run(StdAA, tmp_path, text)
    assert _pairs(pocr.cfl_data, Word.V) == _pairs(std.cfl_data, Word.V)


def test_fan_targets_alias(tmp_path):
    pocr = _run(PocrAA, tmp_path, FAN)
    v_pairs = _pairs(pocr.cfl_data, Word.V)
    assert (2, 3) in v_pairs
    assert (3, 2) in v_pairs


def test_deref_targets_are_memory_aliases(tmp_path):
    pocr = _run(PocrAA, tmp_path, DEREF)
    assert pocr.cfl_data.has_edge(3, 4, Label(Word.M, 0))
    assert (3, 4) in _pairs(pocr.cfl_data, Word.V)


def test_mismatched_field_offsets_do_not_alias(tmp_path):
    pocr = _run(PocrAA, tmp_path, FIELD_DIFF)
    assert (3, 4) not in _pairs(pocr.cfl_data, Word.V)


def test_matched_field_offsets_alias(tmp_path):
    pocr = _run(PocrAA, tmp_path, FIELD_SAME)
    assert (3, 4) in _pairs(pocr.cfl_data, Word.V)


def test_has_m_counts_checks(tmp_path):
    pocr = _run(PocrAA, tmp_path, DEREF)
    before = pocr.stat.checks
    assert pocr.has_m(1, 1) is True
    assert pocr.stat.checks == before + 1
    assert pocr.has_m(3, 4) is True
    assert pocr.has_m(1, 3) is False


def test_set_v_is_idempotent(tmp_path):
    pocr = _run(PocrAA, tmp_path, FAN)
    assert pocr.set_v(1, 2) is False


def test_count_sum_edges_adds_summaries(tmp_path):
    pocr = _run(PocrAA, tmp_path, DEREF)
    pocr.count_sum_edges()
    assert pocr.cfl_data.has_edge(3, 3, Label(Word.M, 0))
    assert pocr.cfl_data.has_edge(3, 1, Label(Word.DV, 0))
    assert pocr.stat.num_of_sum_edges > len(_pairs(pocr.cfl_data, Word.V))


def test_init_solver_without_graph_raises():
    with pytest.raises(RuntimeError):
        PocrAA("missing.txt").init_solver()