import pytest

from pocr.alias import GRAA, StdAA, Word
from pocr.utils import CFLOptions, Label


def _write(tmp_path, lines, name="graph.txt"):
    path = tmp_path / name
    path.write_text("".join(line + "\n" for line in lines))
    return path


def _quiet(**opts):
    opts.setdefault("p_stat", False)
    return CFLOptions(**opts)


def test_assignment_makes_values_alias(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t2\ta", "3\t4\td"]), _quiet())
    aa.analyze()
    data = aa.cfl_data
    assert data.has_edge(1, 2, Label(Word.V))
    assert data.has_edge(2, 1, Label(Word.V))
    assert not data.has_edge(1, 3, Label(Word.V))


def test_dereferences_of_aliases_are_memory_aliases(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t3\td", "2\t4\td", "1\t2\ta"]), _quiet())
    aa.analyze()
    assert aa.cfl_data.has_edge(3, 4, Label(Word.M))
    assert aa.cfl_data.has_edge(3, 4, Label(Word.V))


def test_value_alias_relation_is_symmetric(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t2\ta", "2\t3\ta", "1\t4\td", "3\t5\td"]), _quiet())
    aa.analyze()
    v = Label(Word.V)
    pairs = {(s, t) for s, by_label in aa.cfl_data.items() for t in by_label.get(v, ())}
    assert pairs
    assert all((t, s) in pairs for s, t in pairs)


def test_graa_reaches_same_value_aliases_as_std(tmp_path):
    path = _write(tmp_path, ["1\t2\ta", "2\t3\ta"])
    results = []
    for cls in (StdAA, GRAA):
        aa = cls(path, _quiet())
        aa.analyze()
        v = Label(Word.V)
        results.append({(s, t) for s, m in aa.cfl_data.items() for t in m.get(v, ())})
    assert results[0] == results[1]
    assert (1, 3) in results[0]


def test_binary_summ_transitive_rule_only_in_std():
    std = StdAA("unused", _quiet())
    gr = GRAA("unused", _quiet())
    a = Label(Word.A)
    assert std.binary_summ(a, a) == {Label(Word.A)}
    assert gr.binary_summ(a, a) == {Label(Word.FAULT)}


def test_field_rules_keep_and_match_offsets():
    std = StdAA("unused", _quiet())
    assert std.binary_summ(Label(Word.fbar, 5), Label(Word.V)) == {Label(Word.FV, 5)}
    assert std.binary_summ(Label(Word.FV, 5), Label(Word.f, 5)) == {Label(Word.V)}
    assert std.binary_summ(Label(Word.FV, 5), Label(Word.f, 6)) == {Label(Word.FAULT)}


def test_unary_summ():
    std = StdAA("unused", _quiet())
    assert std.unary_summ(Label(Word.M)) == {Label(Word.V)}
    assert std.unary_summ(Label(Word.a)) == {Label(Word.A)}
    assert std.unary_summ(Label(Word.d)) == {Label(Word.FAULT)}


def test_fault_labels_are_refused():
    aa = StdAA("unused", _quiet())
    assert aa.push_into_worklist(1, 2, Label(Word.FAULT)) is False
    assert aa.is_worklist_empty()
    assert aa.check_and_add_edge(1, 2, Label(Word.FAULT)) is False
    assert aa.stat.checks == 0


def test_check_and_add_edge_counts_checks():
    aa = StdAA("unused", _quiet())
    assert aa.check_and_add_edge(1, 2, Label(Word.V)) is True
    assert aa.check_and_add_edge(1, 2, Label(Word.V)) is False
    assert aa.stat.checks == 2
    assert aa.check_and_add_edges_from(1, [2, 3], Label(Word.V)) == {3}
    assert aa.stat.checks == 4


def test_count_sum_edges_counts_v_edges(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t2\ta"]), _quiet())
    aa.analyze()
    aa.count_sum_edges()
    assert aa.stat.num_of_s_edges == 4
    total = sum(len(d) for _, m in aa.cfl_data.items() for d in m.values())
    assert aa.stat.num_of_sum_edges == total


def test_scc_option_merges_cycles(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t2\ta", "2\t1\ta", "2\t3\td"]), _quiet(scc=True))
    aa.initialize()
    assert len(aa.graph) == 2
    assert aa.graph.rep_node_id(2) == 1
    assert aa.graph.has_edge(1, 3, 1)


def test_folding_option_merges_single_assignment(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t2\ta"]), _quiet(gf=True))
    aa.initialize()
    assert len(aa.graph) == 1
    assert aa.graph.rep_node_id(2) == 1


def test_finalize_writes_graph(tmp_path):
    out = tmp_path / "out.txt"
    aa = StdAA(_write(tmp_path, ["1\t2\ta"]), _quiet(out_graph_fname=str(out)))
    aa.analyze()
    assert out.read_text() == "1\t2\ta\n2\t1\tabar\n"


def test_time_out_raises(tmp_path):
    aa = StdAA(_write(tmp_path, ["1\t2\ta"]), _quiet(time_out=0))
    with pytest.raises(TimeoutError):
        aa.analyze()


def test_stats_printed_when_enabled(tmp_path, capsys):
    aa = StdAA(_write(tmp_path, ["1\t2\ta"]), CFLOptions(p_stat=True))
    aa.analyze()
    out = capsys.readouterr().out
    assert "#SEdges\t4" in out
    assert aa.stat.num_of_iteration == 1


def test_merge_scc_cycle_without_detection_raises():
    aa = StdAA("unused", _quiet())
    with pytest.raises(RuntimeError):
        aa.merge_scc_cycle()